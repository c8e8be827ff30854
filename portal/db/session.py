# portal/db/session.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from portal.core.config import DATABASE_URL


def configure_sqlite(engine: Engine) -> Engine:
    """
    SQLite needs two per-connection tweaks:
      - foreign keys are off unless enabled with a PRAGMA
      - pysqlite's implicit BEGIN breaks SAVEPOINT, so we emit BEGIN ourselves
    No-op for other backends.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def make_engine(url: str) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(
        url,
        connect_args=connect_args,  # required for SQLite + threads
        pool_pre_ping=True,  # safer reconnects
        future=True,
    )
    return configure_sqlite(engine)


engine = make_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    future=True,
)
