"""SQL Engine and Session Management (SQLite for local dev, Postgres in production)."""
import logging
from pathlib import Path
from typing import Union

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)

# Repository root (source checkout or editable install)
ALEMBIC_INI = Path(__file__).resolve().parents[3] / "alembic.ini"


def build_engine(database_url: str) -> Engine:
    """Create an engine for ``database_url``.

    SQLite file databases get their parent directory created. In-memory
    SQLite shares one connection so every session sees the same tables.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        database = url.database or ""
        if database in ("", ":memory:"):
            engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            Path(database).parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(database_url, connect_args={"check_same_thread": False})
        logger.info(f"Initialized SQLite engine ({database or ':memory:'})")
        return engine

    engine = create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        pool_timeout=5,
    )
    logger.info(f"Initialized {url.get_backend_name()} engine")
    return engine


def build_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_schema(engine: Engine) -> None:
    """Create the transactions table and indexes if they do not exist."""
    Base.metadata.create_all(bind=engine)
    logger.info("Transactions table initialized")


def run_migrations(database_url: str, config_path: Union[str, Path] = ALEMBIC_INI) -> None:
    """Apply Alembic migrations up to head."""
    from alembic.config import Config
    from alembic import command

    alembic_cfg = Config(str(config_path))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    alembic_cfg.attributes["configure_logger"] = False
    command.upgrade(alembic_cfg, "head")
    logger.info("Migrations complete.")
