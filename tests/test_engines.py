import httpx
import openai
import pytest

from conftest import FakeOpenAI
from dayplan.ai.engines import OpenAIPlanEngine, StubPlanEngine, get_plan_engine
from dayplan.assistants_prompt.daily_planner import SYSTEM_PROMPT
from dayplan.core.errors import EngineError
from dayplan.services.plan_validator import normalize_plan_content


def test_stub_engine_is_deterministic_and_valid():
    engine = StubPlanEngine()
    first = normalize_plan_content(engine.generate("anything").raw, source=engine.source)
    second = normalize_plan_content(engine.generate("something else").raw, source=engine.source)

    assert first["meta"] == {"source": "stub", "version": 1}
    assert len(first["blocks"]) == 11
    assert first["blocks"] == second["blocks"]
    assert first["blocks"][0]["title"] == "Fajr & morning routine"
    assert first["blocks"][-1] == {"time": "22:30", "title": "Wind down & sleep"}


def test_stub_engine_title_and_model():
    engine = StubPlanEngine()
    result = engine.generate("Plan a productive day")

    assert result.model == "stub"
    assert result.tokens_in == 0 and result.tokens_out == 0
    assert engine.title_for("Plan a productive day") == "Daily Plan (stub)"


def test_openai_engine_request_shape():
    client = FakeOpenAI(content='{"blocks": []}', prompt_tokens=321, completion_tokens=123)
    engine = OpenAIPlanEngine(client=client, model="gpt-4o-mini")

    result = engine.generate("Plan a productive day")

    call = client.completions.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.2
    assert call["max_tokens"] == 2500
    assert call["response_format"] == {"type": "json_object"}
    assert call["messages"] == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "Plan a productive day"},
    ]
    assert (result.tokens_in, result.tokens_out) == (321, 123)
    assert result.source == "openai"


def test_openai_engine_missing_usage_reports_zero():
    engine = OpenAIPlanEngine(client=FakeOpenAI(content='{"blocks": []}'))
    result = engine.generate("hi")
    assert (result.tokens_in, result.tokens_out) == (0, 0)


def test_openai_engine_title_truncates_prompt():
    engine = OpenAIPlanEngine(client=FakeOpenAI(content="{}"))
    assert engine.title_for("x" * 150) == "x" * 100 + "..."


def test_openai_engine_empty_response():
    engine = OpenAIPlanEngine(client=FakeOpenAI(content=""))
    with pytest.raises(EngineError) as exc_info:
        engine.generate("hi")
    assert exc_info.value.code == "invalid_ai_response"


def test_openai_engine_api_error_is_not_retried():
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    client = FakeOpenAI(error=error)
    engine = OpenAIPlanEngine(client=client)

    with pytest.raises(EngineError):
        engine.generate("hi")
    assert len(client.completions.calls) == 1


def test_configured_engine_is_stub_in_tests():
    assert isinstance(get_plan_engine(), StubPlanEngine)
