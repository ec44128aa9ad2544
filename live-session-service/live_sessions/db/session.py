# live_sessions/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from live_sessions.core.config import settings


def _engine_kwargs(url: str) -> dict:
    # SQLite connections are shared with FastAPI's worker threads.
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False, "timeout": 30}}
    return {"pool_pre_ping": True}


# The engine is the entry point to the database and owns the connection pool.
engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

# One Session per request; every mutation is committed by the record store.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
