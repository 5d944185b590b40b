"""
Plan generation engines.

Both engines implement ``generate(prompt) -> EngineResult`` and return raw
JSON text, so the stub goes through exactly the same validation and
persistence path as the model-backed engine.
"""
import json
import logging
from dataclasses import dataclass
from typing import Optional

import openai

from dayplan.assistants_prompt.daily_planner import SYSTEM_PROMPT, STUB_BLOCKS, STUB_DAY
from dayplan.core import config
from dayplan.core.errors import EngineError
from dayplan.utils.llm_client import run_json_task
from dayplan.utils.timestamps import utc_now_iso
from dayplan.utils.tokens import MAX_OUTPUT_TOKENS

logger = logging.getLogger(__name__)


@dataclass
class EngineResult:
    raw: str
    model: str
    source: str
    tokens_in: int = 0      # 0 means "not reported"
    tokens_out: int = 0


class PlanEngine:
    source = "unknown"

    def generate(self, prompt: str) -> EngineResult:
        raise NotImplementedError

    def title_for(self, prompt: str) -> str:
        return prompt[:100] + "..."


class OpenAIPlanEngine(PlanEngine):
    source = "openai"

    def __init__(self, client=None, model: Optional[str] = None,
                 temperature: float = config.PLAN_TEMPERATURE, max_tokens: int = MAX_OUTPUT_TOKENS):
        self.client = client
        self.model = model or config.OPENAI_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens

    def generate(self, prompt: str) -> EngineResult:
        logger.info(f"Calling OpenAI API ({self.model})...")
        try:
            content, tokens_in, tokens_out = run_json_task(
                prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                client=self.client,
            )
        except openai.OpenAIError as e:
            logger.warning(f"⚠️ OpenAI request failed: {e}")
            raise EngineError(f"Generation request failed: {e}") from e

        if not content:
            raise EngineError("Empty response from OpenAI")

        return EngineResult(raw=content, model=self.model, source=self.source,
                            tokens_in=tokens_in, tokens_out=tokens_out)


class StubPlanEngine(PlanEngine):
    source = "stub"

    def generate(self, prompt: str) -> EngineResult:
        plan = {
            "generated_at": utc_now_iso(),
            "meta": {"source": self.source, "version": config.PLAN_SCHEMA_VERSION},
            "day": STUB_DAY,
            "blocks": [dict(block) for block in STUB_BLOCKS],
        }
        return EngineResult(raw=json.dumps(plan, ensure_ascii=False), model="stub", source=self.source)

    def title_for(self, prompt: str) -> str:
        return "Daily Plan (stub)"


# === FastAPI dependencies
def get_plan_engine() -> PlanEngine:
    if config.PLAN_ENGINE == "stub":
        return StubPlanEngine()
    return OpenAIPlanEngine()


def get_stub_engine() -> PlanEngine:
    return StubPlanEngine()
