# stockbook/database.py

import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from stockbook.core.config import settings


def build_engine(url: str):
    connect_args = {}

    # SQLite connections are shared across FastAPI's threadpool workers
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = settings.SQLITE_BUSY_TIMEOUT

    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)

    if engine.dialect.name == "sqlite":
        _serialize_sqlite_transactions(engine)

    return engine


def _serialize_sqlite_transactions(engine):
    """
    SQLite ignores SELECT ... FOR UPDATE, so every transaction takes the
    write lock up front instead. A sale's stock check and its decrement
    then run with no other writer in between, and concurrent writers wait
    on the busy timeout rather than failing on a lock upgrade.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # sales.product_id relies on ON DELETE SET NULL
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
