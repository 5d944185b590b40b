import logging

from fastapi import APIRouter, Depends, Request

from dayplan.ai.engines import PlanEngine, get_plan_engine, get_stub_engine
from dayplan.assistants_prompt.daily_planner import SYSTEM_PROMPT
from dayplan.core.errors import PlanServiceError, ServerError, ValidationError
from dayplan.dependencies.auth import get_current_user
from dayplan.schemas.plan import PlanRequest
from dayplan.services.plan_store import PlanStore, get_plan_store
from dayplan.services.plan_validator import normalize_plan_content
from dayplan.utils.tokens import MAX_INPUT_TOKENS, estimate_tokens

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_plan_request(request: Request) -> PlanRequest:
    """Parse ``{prompt, options?}`` by hand so every shape error maps to ``invalid_prompt``."""
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError()

    if not isinstance(payload, dict):
        raise ValidationError()

    prompt = payload.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError()

    options = payload.get("options")
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ValidationError()

    return PlanRequest(prompt=prompt, options=options)


def generate_and_store_plan(user: dict, body: PlanRequest, engine: PlanEngine, store: PlanStore) -> dict:
    estimated_input_tokens = estimate_tokens(SYSTEM_PROMPT + body.prompt)
    if estimated_input_tokens > MAX_INPUT_TOKENS:
        raise ValidationError(code="prompt_too_long")

    result = engine.generate(body.prompt)
    content = normalize_plan_content(result.raw, source=result.source)

    # Fall back to estimates when the engine does not report usage
    tokens_in = result.tokens_in or estimated_input_tokens
    tokens_out = result.tokens_out or estimate_tokens(result.raw)

    logger.info(f"Inserting plan for user {user['id']} ({len(content['blocks'])} blocks)")
    plan = store.consume_request_and_insert_plan(
        user_id=user["id"],
        title=engine.title_for(body.prompt),
        content=content,
        model=result.model,
        tokens_in=tokens_in,
        tokens_out=tokens_out,
        source_input=body.prompt,
    )
    return {"ok": True, "plan": plan.model_dump(mode="json")}


def _run(user, body, engine, store) -> dict:
    try:
        return generate_and_store_plan(user, body, engine, store)
    except PlanServiceError:
        raise
    except Exception as e:
        logger.exception("❌ Error in plan function")
        raise ServerError(detail=str(e)) from e


@router.post("/plan")
def create_plan(
    user: dict = Depends(get_current_user),
    body: PlanRequest = Depends(read_plan_request),
    engine: PlanEngine = Depends(get_plan_engine),
    store: PlanStore = Depends(get_plan_store),
):
    return _run(user, body, engine, store)


@router.post("/plan-stub")
def create_stub_plan(
    user: dict = Depends(get_current_user),
    body: PlanRequest = Depends(read_plan_request),
    engine: PlanEngine = Depends(get_stub_engine),
    store: PlanStore = Depends(get_plan_store),
):
    return _run(user, body, engine, store)
