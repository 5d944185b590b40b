"""
Quota-gated plan persistence.

``consume_request_and_insert_plan`` re-checks the caller's entitlement,
increments their usage counter and inserts the plan inside one transaction.
The quota check is a conditional UPDATE evaluated by the database, never a
read followed by a write from Python, so concurrent requests from the same
free-tier user cannot both slip under the cap.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends
from sqlalchemy import or_, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dayplan.core import config
from dayplan.core.db import get_db
from dayplan.core.errors import QuotaError, classify_store_error
from dayplan.models.plan import Plan
from dayplan.models.usage_account import UsageAccount, TIER_FREE, TIER_PRO
from dayplan.schemas.plan import PlanOut

logger = logging.getLogger(__name__)


def dialect_insert(db: Session):
    """Dialect-specific ``insert`` that supports ON CONFLICT clauses."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise RuntimeError(f"Unsupported database dialect for usage accounts: {dialect}")
    return insert


def ensure_account_stmt(db: Session, user_id: str):
    insert = dialect_insert(db)
    return insert(UsageAccount).values(
        user_id=user_id, tier=TIER_FREE, requests_used=0
    ).on_conflict_do_nothing(index_elements=["user_id"])


class PlanStore:
    def __init__(self, db: Session, free_limit: Optional[int] = None):
        self.db = db
        self.free_limit = config.FREE_TIER_REQUEST_LIMIT if free_limit is None else free_limit

    def consume_request_and_insert_plan(
        self,
        user_id: str,
        title: str,
        content: dict,
        model: Optional[str] = None,
        tokens_in: Optional[int] = None,
        tokens_out: Optional[int] = None,
        source_input: Optional[str] = None,
    ) -> PlanOut:
        raise NotImplementedError


class SqlPlanStore(PlanStore):
    """Runs the check-increment-insert unit as one SQLAlchemy transaction."""

    def consume_request_and_insert_plan(self, user_id, title, content, model=None,
                                        tokens_in=None, tokens_out=None, source_input=None) -> PlanOut:
        db = self.db
        try:
            # First statement is a write so SQLite takes its write lock up front.
            db.execute(ensure_account_stmt(db, user_id))

            result = db.execute(
                update(UsageAccount)
                .where(
                    UsageAccount.user_id == user_id,
                    or_(UsageAccount.tier == TIER_PRO, UsageAccount.requests_used < self.free_limit),
                )
                .values(
                    requests_used=UsageAccount.requests_used + 1,
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                db.rollback()
                logger.info(f"Usage limit reached for user {user_id}")
                raise QuotaError(detail=f"usage_limit_reached: free tier allows {self.free_limit} requests")

            plan = Plan(
                user_id=user_id,
                title=title,
                source_input=source_input,
                model=model,
                tokens_in=tokens_in,
                tokens_out=tokens_out,
                content_json=content,
            )
            db.add(plan)
            db.flush()
            out = PlanOut.model_validate(plan)
            db.commit()
        except QuotaError:
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"⚠️ Plan insert failed for user {user_id}: {e}")
            raise classify_store_error(str(getattr(e, "orig", None) or e)) from e

        logger.info(f"✅ Plan {out.id} stored for user {user_id}")
        return out


class RpcPlanStore(PlanStore):
    """Delegates the whole unit to the ``consume_request_and_insert_plan`` stored procedure (PostgreSQL)."""

    QUERY = text("""
        SELECT * FROM consume_request_and_insert_plan(
            :p_user, :p_title, CAST(:p_content AS jsonb), :p_model,
            :p_tokens_in, :p_tokens_out, :p_source_input, :p_free_limit
        )
    """)

    def consume_request_and_insert_plan(self, user_id, title, content, model=None,
                                        tokens_in=None, tokens_out=None, source_input=None) -> PlanOut:
        db = self.db
        try:
            row = db.execute(self.QUERY, {
                "p_user": user_id,
                "p_title": title,
                "p_content": json.dumps(content),
                "p_model": model,
                "p_tokens_in": tokens_in,
                "p_tokens_out": tokens_out,
                "p_source_input": source_input,
                "p_free_limit": self.free_limit,
            }).mappings().one()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            message = str(getattr(e, "orig", None) or e)
            logger.warning(f"⚠️ consume_request_and_insert_plan failed for user {user_id}: {message}")
            raise classify_store_error(message) from e

        return PlanOut.model_validate(dict(row))


# === FastAPI dependency
def get_plan_store(db: Session = Depends(get_db)) -> PlanStore:
    if config.PLAN_STORE == "rpc":
        return RpcPlanStore(db)
    return SqlPlanStore(db)
