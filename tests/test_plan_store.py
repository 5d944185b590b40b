from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.exc import InternalError

from dayplan.core.db import SessionLocal
from dayplan.core.errors import PersistenceError, QuotaError, classify_store_error
from dayplan.models.plan import Plan
from dayplan.models.usage_account import UsageAccount
from dayplan.services.plan_store import RpcPlanStore, SqlPlanStore
from dayplan.services.usage_service import set_entitlement

CONTENT = {
    "generated_at": "2026-10-19T06:00:00.000Z",
    "meta": {"source": "stub", "version": 1},
    "day": "Today",
    "blocks": [{"time": "06:00", "title": "Fajr"}],
}


def _consume(user_id="user-1"):
    session = SessionLocal()
    try:
        return SqlPlanStore(session).consume_request_and_insert_plan(
            user_id=user_id, title="Daily Plan", content=CONTENT, model="stub", tokens_in=10, tokens_out=20,
        )
    finally:
        session.close()


def _account(db, user_id="user-1"):
    db.expire_all()
    return db.query(UsageAccount).filter(UsageAccount.user_id == user_id).first()


def test_insert_creates_plan_and_increments_usage(db):
    plan = _consume()

    assert plan.user_id == "user-1"
    assert plan.content_json == CONTENT
    assert (plan.model, plan.tokens_in, plan.tokens_out) == ("stub", 10, 20)
    assert db.query(Plan).count() == 1
    assert _account(db).requests_used == 1
    assert _account(db).tier == "free"


def test_free_tier_cap_blocks_fourth_request(db):
    for _ in range(3):
        _consume()

    with pytest.raises(QuotaError) as exc_info:
        _consume()

    assert exc_info.value.status_code == 402
    assert db.query(Plan).count() == 3
    assert _account(db).requests_used == 3


def test_pro_tier_is_unlimited(db):
    set_entitlement("user-1", "pro", db)

    ids = {_consume().id for _ in range(5)}

    assert len(ids) == 5
    assert _account(db).requests_used == 5


def test_each_call_creates_a_distinct_plan():
    assert _consume().id != _consume().id


def test_concurrent_requests_never_exceed_cap(db):
    _consume()   # 1 of 3 used, 2 remaining

    def attempt(_):
        try:
            return _consume().id
        except QuotaError:
            return None

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(attempt, range(6)))

    assert len([r for r in results if r]) == 2
    assert results.count(None) == 4
    assert _account(db).requests_used == 3
    assert db.query(Plan).count() == 3


def test_limit_is_per_user(db):
    for _ in range(3):
        _consume("user-1")

    _consume("user-2")

    assert _account(db, "user-2").requests_used == 1


@pytest.mark.parametrize("message, expected", [
    ("usage_limit_reached", QuotaError),
    ("ERROR: daily usage limit exceeded", QuotaError),
    ('duplicate key value violates unique constraint "plans_pkey"', PersistenceError),
    ("function consume_request_and_insert_plan does not exist", PersistenceError),
])
def test_classify_store_error(message, expected):
    error = classify_store_error(message)
    assert isinstance(error, expected)
    assert error.detail == message


class _FailingSession:
    def __init__(self, message):
        self.message = message
        self.rolled_back = False

    def execute(self, *args, **kwargs):
        raise InternalError("SELECT consume_request_and_insert_plan(...)", {}, Exception(self.message))

    def commit(self):
        raise AssertionError("commit must not be reached")

    def rollback(self):
        self.rolled_back = True


def test_rpc_store_maps_limit_error():
    session = _FailingSession("usage_limit_reached")

    with pytest.raises(QuotaError):
        RpcPlanStore(session).consume_request_and_insert_plan("user-1", "Title", CONTENT)
    assert session.rolled_back


def test_rpc_store_maps_other_errors():
    session = _FailingSession("permission denied for table plans")

    with pytest.raises(PersistenceError) as exc_info:
        RpcPlanStore(session).consume_request_and_insert_plan("user-1", "Title", CONTENT)
    assert exc_info.value.to_body() == {"error": "rpc_failed", "detail": "permission denied for table plans"}
