# dayplan/core/config.py

import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL not set")

# === Auth
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET environment variable is not set!")
JWT_ALGORITHM = "HS256"
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE") or None

# === Generation engine
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
PLAN_ENGINE = os.getenv("PLAN_ENGINE", "openai").strip().lower()
PLAN_TEMPERATURE = 0.2
PLAN_SCHEMA_VERSION = 1

# === Persistence
PLAN_STORE = os.getenv("PLAN_STORE", "sql").strip().lower()
FREE_TIER_REQUEST_LIMIT = int(os.getenv("FREE_TIER_REQUEST_LIMIT", "3"))

# === Billing
BILLING_WEBHOOK_SECRET = os.getenv("BILLING_WEBHOOK_SECRET")
PRO_ENTITLEMENT_ID = os.getenv("PRO_ENTITLEMENT_ID", "pro_access")

PLAN_ENGINES = ("openai", "stub")
PLAN_STORES = ("sql", "rpc")


async def load_config():
    if PLAN_ENGINE not in PLAN_ENGINES:
        raise RuntimeError(f"Unknown PLAN_ENGINE '{PLAN_ENGINE}', expected one of {PLAN_ENGINES}")
    if PLAN_STORE not in PLAN_STORES:
        raise RuntimeError(f"Unknown PLAN_STORE '{PLAN_STORE}', expected one of {PLAN_STORES}")
    if PLAN_ENGINE == "openai" and not OPENAI_API_KEY:
        logger.warning("⚠️ PLAN_ENGINE=openai but OPENAI_API_KEY is not set; /api/plan will fail.")
    logger.info(f"Plan engine: {PLAN_ENGINE}, store: {PLAN_STORE}, free tier limit: {FREE_TIER_REQUEST_LIMIT}")
