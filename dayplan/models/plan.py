from sqlalchemy import Column, String, Integer, Text, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime, timezone
from uuid import uuid4

from dayplan.core.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Plan(Base):
    __tablename__ = "plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(128), index=True, nullable=False)   # set once, never reassigned

    title = Column(String(255), nullable=False)
    source_input = Column(Text, nullable=True)                  # original prompt
    model = Column(String(100), nullable=True)                  # "stub" or e.g. "gpt-4o-mini"
    tokens_in = Column(Integer, nullable=True)
    tokens_out = Column(Integer, nullable=True)

    content_json = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<Plan id={self.id} user_id={self.user_id} model={self.model}>"
