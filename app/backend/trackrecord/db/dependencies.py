"""Database dependencies for FastAPI endpoints."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from trackrecord.db.session import SessionLocal


def get_db_session() -> Generator[Session, None, None]:
    """Yield a session for one request; reports only read, so nothing is committed."""

    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
