import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from tradeshield.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str | None = None, **kwargs) -> Engine:
    """
    Create the SQLAlchemy engine.

    Local SQLite files need check_same_thread disabled for FastAPI's threadpool;
    Turso connections authenticate with the configured auth token.
    """
    url = url or settings.effective_database_url
    connect_args = kwargs.pop("connect_args", {})

    if url.startswith("sqlite+libsql"):
        connect_args.setdefault("auth_token", settings.turso_auth_token)
    elif url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)

    return create_engine(url, connect_args=connect_args, **kwargs)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    module = type(dbapi_connection).__module__
    if "sqlite" not in module and "libsql" not in module:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = build_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables. Production deployments should use migrations instead."""
    # Register models on Base.metadata
    from tradeshield.models import analysis, feedback, fraud_pattern, price_history  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def check_db_connection(bind: Engine | None = None) -> bool:
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False
