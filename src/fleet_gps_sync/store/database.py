# fleet_gps_sync/store/database.py
"""
SQLAlchemy engine, session factory and declarative base.

Every store operation opens its own transaction with
`session_factory.begin()`, so a failure rolls back only that operation and
never leaks a half-written row into later work.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fleet_gps_sync.config import DatabaseConfig

__all__: list[str] = [
    'Base',
    'PersistenceError',
    'create_engine_from_config',
    'create_session_factory',
    'init_schema',
    'transaction',
]

logger: logging.Logger = logging.getLogger(__name__)

IN_MEMORY_SQLITE_URLS: frozenset[str] = frozenset({'sqlite://', 'sqlite:///:memory:'})


class PersistenceError(Exception):
    """
    Raised when a store read or write fails.

    Wraps SQLAlchemy errors, including unique-constraint violations. During
    reconciliation it is caught per asset, so one failed write never aborts
    the batch.
    """

    pass


class Base(DeclarativeBase):
    """Declarative base for all ORM tables."""

    pass


def create_engine_from_config(database_config: DatabaseConfig) -> Engine:
    """
    Build an Engine from configuration.

    In-memory SQLite is pinned to one shared connection so every session sees
    the same database.
    """
    if database_config.url in IN_MEMORY_SQLITE_URLS:
        logger.debug('Using shared in-memory SQLite database')
        return create_engine(
            database_config.url,
            echo=database_config.echo,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )

    return create_engine(
        database_config.url,
        echo=database_config.echo,
        pool_pre_ping=True,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory; objects stay readable after commit."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    # Importing the table module registers the tables on Base.metadata.
    from fleet_gps_sync.store import tables  # noqa: F401, PLC0415

    Base.metadata.create_all(engine)
    logger.info('Database schema ready: %s', ', '.join(sorted(Base.metadata.tables)))


@contextmanager
def transaction(
    session_factory: sessionmaker[Session],
    operation: str,
) -> Iterator[Session]:
    """
    Run one store operation in its own transaction.

    Commits on success and rolls back on any exception. SQLAlchemy errors
    are re-raised as PersistenceError naming the operation.

    Args:
        session_factory: Factory from create_session_factory.
        operation: Short description used in log and error messages.

    Raises:
        PersistenceError: If the database rejects the operation.
    """
    try:
        with session_factory.begin() as session:
            yield session
    except SQLAlchemyError as error:
        logger.error('%s failed: %s', operation, error)
        raise PersistenceError(f'{operation} failed: {error}') from error
