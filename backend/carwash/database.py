from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from .config import settings

# Execution option read by the SQLite "begin" listener
SQLITE_BEGIN = "sqlite_begin"


def configure_sqlite(engine: Engine) -> None:
    """
    Foreign keys on, and explicit BEGIN so that transactions and SAVEPOINTs
    behave as on a server database (pysqlite defers BEGIN until DML).

    A connection carrying sqlite_begin="immediate" opens with
    BEGIN IMMEDIATE, taking the write lock before its first read.
    """

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_connection, _):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def on_begin(conn):
        if conn.get_execution_options().get(SQLITE_BEGIN) == "immediate":
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def create_db_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # check_same_thread=False: FastAPI runs sync endpoints in a threadpool
        # timeout: how long a writer waits for another writer's lock
        engine = create_engine(
            url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.sqlite_busy_timeout_seconds,
            },
        )
        configure_sqlite(engine)
        return engine
    return create_engine(url, pool_pre_ping=True)


def begin_write(db: Session) -> None:
    """
    Start the session's next transaction as a writer.

    On SQLite this is BEGIN IMMEDIATE: concurrent check-then-insert
    transactions queue on the lock instead of failing on lock upgrade.
    Elsewhere it is a plain BEGIN (row locks do the serialising).
    A transaction already open on the session is committed first.
    """
    if db.in_transaction():
        db.commit()
    db.connection(execution_options={SQLITE_BEGIN: "immediate"})


def is_lock_error(exc: OperationalError) -> bool:
    """SQLite busy/locked error (lock wait timed out)."""
    message = str(exc.orig).lower()
    return "database is locked" in message or "database is busy" in message


engine = create_db_engine(settings.resolved_database_url)

# SessionLocal: one session per request
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
