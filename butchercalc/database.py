import logging
import os
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)


def _configure_connection(dbapi_connection, connection_record):
    # Let SQLAlchemy's begin event issue BEGIN itself so DDL is transactional
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA journal_mode=WAL')
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def _begin_transaction(conn):
    conn.exec_driver_sql('BEGIN')


class Database:
    """
    Handle on the local store file.

    Constructed explicitly and passed to every repository function and to the
    migration engine. open() and close() are both safe to call twice.
    """

    def __init__(self, path):
        self.path = path
        self._engine = None
        self._session_factory = None

    @property
    def is_open(self):
        return self._engine is not None

    @property
    def engine(self):
        if self._engine is None:
            raise RuntimeError('Database not initialized. Call open() first.')
        return self._engine

    def open(self):
        if self._engine is not None:
            return self

        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        engine = create_engine(f'sqlite:///{self.path}')
        event.listen(engine, 'connect', _configure_connection)
        event.listen(engine, 'begin', _begin_transaction)

        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        logger.info('Database opened at: %s', self.path)
        return self

    def close(self):
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info('Database connection closed')

    def connect(self):
        """Transactional connection for raw SQL: with database.connect() as conn"""
        return self.engine.begin()

    @contextmanager
    def session(self):
        """ORM session scope; commits on success and rolls back on any error"""
        if self._session_factory is None:
            raise RuntimeError('Database not initialized. Call open() first.')
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()


def initialize_database(path):
    """Open the store, apply pending migrations and seed default settings"""
    from .migrations import run_migrations
    from .seed import seed_defaults

    database = Database(path).open()
    try:
        run_migrations(database)
        seed_defaults(database)
    except Exception:
        database.close()
        raise
    logger.info('Database initialized at: %s', path)
    return database
