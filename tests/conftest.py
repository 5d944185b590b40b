import os
import tempfile
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

_DB_DIR = tempfile.mkdtemp(prefix="dayplan-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'dayplan.db')}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["PLAN_ENGINE"] = "stub"
os.environ["PLAN_STORE"] = "sql"
os.environ["FREE_TIER_REQUEST_LIMIT"] = "3"
os.environ["BILLING_WEBHOOK_SECRET"] = "billing-secret"
os.environ.pop("JWT_AUDIENCE", None)

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from dayplan.main import app
from dayplan.core.db import Base, engine, SessionLocal
from dayplan.ai.engines import get_plan_engine


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_token(user_id="user-1", secret="test-secret", expires_in=3600, **claims):
    payload = {"sub": user_id, "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in), **claims}
    if user_id is None:
        payload.pop("sub")
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(user_id="user-1"):
    return {"Authorization": f"Bearer {make_token(user_id)}"}


def use_engine(engine_instance):
    app.dependency_overrides[get_plan_engine] = lambda: engine_instance


class FakeCompletions:
    def __init__(self, content=None, prompt_tokens=None, completion_tokens=None, error=None):
        self.content = content
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        usage = None
        if self.prompt_tokens is not None or self.completion_tokens is not None:
            usage = SimpleNamespace(prompt_tokens=self.prompt_tokens, completion_tokens=self.completion_tokens)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


class FakeOpenAI:
    """Stands in for ``openai.OpenAI``; only ``chat.completions.create`` is used."""

    def __init__(self, **kwargs):
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)
