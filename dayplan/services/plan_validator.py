import json
import logging

from pydantic import ValidationError as PydanticValidationError

from dayplan.core.config import PLAN_SCHEMA_VERSION
from dayplan.core.errors import EngineError
from dayplan.schemas.plan import PlanContent
from dayplan.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


def normalize_plan_content(raw: str, source: str) -> dict:
    """
    Parse engine output and coerce it into a PlanContent payload.

    ``generated_at`` and ``meta`` are always overwritten with server values.
    Blocks without a ``time`` or ``title`` fail the whole plan; unknown
    priorities, non-string descriptions and extra keys are dropped.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"⚠️ Failed to parse engine response: {e}")
        raise EngineError("The AI response could not be parsed as valid JSON") from e

    if not isinstance(data, dict):
        raise EngineError("The AI response is not a JSON object")

    data["generated_at"] = utc_now_iso()
    data["meta"] = {"source": source, "version": PLAN_SCHEMA_VERSION}

    if not isinstance(data.get("blocks"), list):
        raise EngineError("Invalid plan structure: blocks array is missing")

    try:
        content = PlanContent.model_validate(data)
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        logger.warning(f"⚠️ Engine response failed plan schema: {fields}")
        raise EngineError(f"Invalid plan structure: {', '.join(fields)}") from e

    return content.model_dump(exclude_none=True)
