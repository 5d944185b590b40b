import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from dayplan.core import config
from dayplan.core.db import get_db
from dayplan.core.errors import AuthError, PlanServiceError, ValidationError
from dayplan.dependencies.auth import extract_bearer_token
from dayplan.schemas.usage import BillingWebhook
from dayplan.services.usage_service import set_entitlement, tier_for_event

logger = logging.getLogger(__name__)

router = APIRouter()


class WebhookNotConfigured(PlanServiceError):
    code = "webhook_not_configured"
    status_code = 503


def verify_webhook_secret(authorization: Optional[str] = Header(None)) -> None:
    if not config.BILLING_WEBHOOK_SECRET:
        logger.warning("⚠️ Billing webhook called but BILLING_WEBHOOK_SECRET is not set.")
        raise WebhookNotConfigured()

    token = extract_bearer_token(authorization) or ""
    if not hmac.compare_digest(token.encode(), config.BILLING_WEBHOOK_SECRET.encode()):
        raise AuthError()


@router.post("/billing/webhook", dependencies=[Depends(verify_webhook_secret)])
def billing_webhook(payload: BillingWebhook, db: Session = Depends(get_db)):
    """Record the entitlement state reported by the billing provider."""
    event = payload.event
    if not event.app_user_id:
        raise ValidationError(code="invalid_event", detail="event.app_user_id is required")

    tier = tier_for_event(event.type, event.entitlement_ids)
    set_entitlement(event.app_user_id, tier, db)
    return {"ok": True, "user_id": event.app_user_id, "tier": tier}
