from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from dayplan.core.config import DATABASE_URL

Base = declarative_base()

# SQLite needs cross-thread access for the threadpool and a generous busy timeout
# so concurrent writers queue instead of failing.
connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False, "timeout": 30}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
