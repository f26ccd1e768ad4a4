from typing import Iterator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, Session, create_engine

from .config import Settings
from .core.logging import get_logger


logger = get_logger(__name__)


def build_engine(settings: Settings) -> Engine:
    if settings.database_url.startswith("sqlite"):
        engine = create_engine(
            settings.database_url,
            echo=settings.sql_echo,
            connect_args={"check_same_thread": False, "timeout": 60},
            poolclass=NullPool,  # avoid multiple pooled connections holding write locks
        )
        # Configure SQLite pragmas to reduce locking
        try:
            with engine.connect() as conn:
                conn.exec_driver_sql("PRAGMA journal_mode=WAL;")
                conn.exec_driver_sql("PRAGMA busy_timeout=60000;")
        except OperationalError as exc:
            # The file may be momentarily locked (e.g. during reloader startup).
            logger.warning("sqlite_pragmas_skipped", error=str(exc))
        return engine

    return create_engine(
        settings.database_url,
        echo=settings.sql_echo,
    )


def init_db(engine: Engine) -> None:
    from .models import budget, expense  # noqa: F401  register tables

    SQLModel.metadata.create_all(engine)
    logger.info("database_ready", url=engine.url.render_as_string(hide_password=True))


def get_session(request: Request) -> Iterator[Session]:
    with Session(request.app.state.engine) as session:
        yield session
