from pathlib import Path
from dotenv import load_dotenv
load_dotenv()

import logging
from sqlalchemy import text

from dayplan.core import config
from dayplan.core.db import Base, engine

# Import all models so they are registered with Base
from dayplan.models import plan, usage_account  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

RPC_SQL = Path(__file__).parent / "sql" / "consume_request_and_insert_plan.sql"


def create_tables():
    Base.metadata.create_all(bind=engine)
    logger.info("✅ Tables created.")

    if engine.dialect.name == "postgresql":
        with engine.begin() as conn:
            conn.exec_driver_sql(RPC_SQL.read_text())
        logger.info("✅ consume_request_and_insert_plan installed.")
    elif config.PLAN_STORE == "rpc":
        logger.warning(f"⚠️ PLAN_STORE=rpc needs PostgreSQL; {engine.dialect.name} has no stored procedures.")


if __name__ == "__main__":
    create_tables()
