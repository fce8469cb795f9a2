from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def _normalize_database_url(database_url: str, *, require_ssl: bool) -> str:
    """
    Normalize DB URLs for SQLAlchemy.

    - Accepts postgresql://... or postgres://... and switches to the psycopg driver.
    - Adds sslmode=require when `require_ssl` is set and the URL does not pick a mode itself.
    """
    raw = database_url.strip()
    if not raw:
        raise ValueError("database_url must be non-empty when provided")

    parsed = urlparse(raw)
    scheme = parsed.scheme.lower()
    if scheme in {"postgres", "postgresql"}:
        scheme = "postgresql+psycopg"

    query = dict(parse_qsl(parsed.query, keep_blank_values=True))
    if require_ssl and "sslmode" not in {k.lower() for k in query}:
        query["sslmode"] = "require"

    return urlunparse(
        parsed._replace(
            scheme=scheme,
            query=urlencode(query, doseq=True),
        )
    )


def init_db(database_url: str | None, db_path: str, *, require_ssl: bool = False) -> None:
    global _engine, _SessionLocal
    if database_url:
        url = _normalize_database_url(database_url, require_ssl=require_ssl)
        engine = create_engine(url, future=True, pool_pre_ping=True)
    else:
        engine = create_engine(f"sqlite:///{db_path}", future=True)

    if _engine is not None:
        _engine.dispose()
    _engine = engine

    # Services return ORM objects from short-lived sessions; keep attributes loaded after commit.
    _SessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        future=True,
        expire_on_commit=False,
    )

    # Import here to avoid circular import at module import time.
    from aliya.db.models import Base  # noqa: WPS433

    Base.metadata.create_all(bind=engine)


def ping_db() -> None:
    """Run a trivial query; raises if the database is unreachable."""
    with get_session() as session:
        session.execute(text("SELECT 1"))


@contextmanager
def get_session() -> Iterator[Session]:
    if _SessionLocal is None:
        raise RuntimeError("DB not initialized. Call init_db() first.")
    session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
