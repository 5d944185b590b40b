from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PRIORITIES = ("high", "medium", "low")


class TimeBlock(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    time: str = Field(..., min_length=1, description='Time or range, e.g. "07:00–08:00"')
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: Optional[Literal["high", "medium", "low"]] = None

    @field_validator("description", mode="before")
    @classmethod
    def drop_non_string_description(cls, value):
        return value if isinstance(value, str) else None

    @field_validator("priority", mode="before")
    @classmethod
    def drop_unknown_priority(cls, value):
        if isinstance(value, str) and value.strip().lower() in PRIORITIES:
            return value.strip().lower()
        return None


class PlanMeta(BaseModel):
    source: str
    version: int


class PlanContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    generated_at: str
    meta: PlanMeta
    day: str = "Today"
    blocks: List[TimeBlock] = Field(..., min_length=1)

    @field_validator("day", mode="before")
    @classmethod
    def default_day(cls, value):
        if isinstance(value, str) and value.strip():
            return value.strip()
        return "Today"


class PlanRequest(BaseModel):
    prompt: str
    options: dict[str, Any] = Field(default_factory=dict)


class PlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    source_input: Optional[str] = None
    model: Optional[str] = None
    tokens_in: Optional[int] = None
    tokens_out: Optional[int] = None
    content_json: dict[str, Any]
    created_at: datetime
