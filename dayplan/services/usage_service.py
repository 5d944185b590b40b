import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from dayplan.core import config
from dayplan.models.usage_account import UsageAccount, TIER_FREE, TIER_PRO
from dayplan.schemas.usage import UsageSummary
from dayplan.services.plan_store import dialect_insert

logger = logging.getLogger(__name__)


def get_usage_summary(user_id: str, db: Session) -> UsageSummary:
    account = db.query(UsageAccount).filter(UsageAccount.user_id == user_id).first()
    tier = account.tier if account else TIER_FREE
    used = account.requests_used if account else 0

    if tier == TIER_PRO:
        return UsageSummary(tier=tier, requests_used=used)

    limit = config.FREE_TIER_REQUEST_LIMIT
    return UsageSummary(tier=tier, requests_used=used, limit=limit, remaining=max(limit - used, 0))


def set_entitlement(user_id: str, tier: str, db: Session) -> None:
    """Upsert the caller's tier. ``requests_used`` is never touched here."""
    if tier not in (TIER_FREE, TIER_PRO):
        raise ValueError(f"Unknown tier: {tier}")

    insert = dialect_insert(db)
    now = datetime.now(timezone.utc)
    stmt = insert(UsageAccount).values(
        user_id=user_id, tier=tier, requests_used=0, created_at=now, updated_at=now
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={"tier": tier, "updated_at": now},
    )
    db.execute(stmt)
    db.commit()
    logger.info(f"Entitlement for {user_id} set to {tier}")


def tier_for_event(event_type: str, entitlement_ids) -> str:
    """Tier implied by a billing provider event."""
    if (event_type or "").upper() == "EXPIRATION":
        return TIER_FREE
    if config.PRO_ENTITLEMENT_ID in (entitlement_ids or []):
        return TIER_PRO
    return TIER_FREE
