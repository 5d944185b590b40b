from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint
from datetime import datetime, timezone

from dayplan.core.db import Base

TIER_FREE = "free"
TIER_PRO = "pro"


def _utcnow():
    return datetime.now(timezone.utc)


class UsageAccount(Base):
    __tablename__ = "usage_accounts"
    __table_args__ = (
        CheckConstraint("tier IN ('free', 'pro')", name="usage_accounts_tier_check"),
        CheckConstraint("requests_used >= 0", name="usage_accounts_requests_used_check"),
    )

    user_id = Column(String(128), primary_key=True)
    tier = Column(String(20), nullable=False, default=TIER_FREE)    # kept in sync by the billing webhook
    requests_used = Column(Integer, nullable=False, default=0)      # lifetime plan requests
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<UsageAccount user_id={self.user_id} tier={self.tier} used={self.requests_used}>"
