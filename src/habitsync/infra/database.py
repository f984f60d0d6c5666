"""SQLite storage behind the persisted client flags."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Optional, Tuple

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..models.settings import AppSetting

SessionFactory = Callable[[], ContextManager[Session]]


def create_session_factory(engine: Engine) -> SessionFactory:
    """Return a factory of sessions that commit on exit and roll back on error."""

    @contextmanager
    def factory() -> Iterator[Session]:
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


def bootstrap_database(config: Optional[BaseConfig] = None) -> Tuple[Engine, SessionFactory]:
    """Open the configured database and make sure the settings table exists."""
    cfg = config or BaseConfig()
    engine = create_engine(cfg.DATABASE_URL, **cfg.sqlalchemy_engine_options())
    SQLModel.metadata.create_all(engine, tables=[AppSetting.__table__])
    return engine, create_session_factory(engine)
