from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.config import settings


def _normalize_database_url(raw_url: str) -> str:
    url = (raw_url or "").strip()
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://") :]
    if url.startswith("postgresql://") and "+psycopg" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def make_engine(url: str, **kwargs) -> Engine:
    """Engine for ``url``; SQLite connections get foreign keys switched on so
    deleting a habit cascades to its logs the same way Postgres does."""
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    db_engine = create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args, **kwargs)
    if is_sqlite:

        @event.listens_for(db_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return db_engine


DATABASE_URL = _normalize_database_url(settings.DATABASE_URL)

engine = make_engine(DATABASE_URL)
# records are handed out after the session closes, so keep loaded attributes
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True, expire_on_commit=False)


def create_schema(bind: Engine = engine) -> None:
    from app.models import Base

    Base.metadata.create_all(bind=bind)
