# =======================================================================================
# gatepass/database.py - Database Management
# =======================================================================================
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional
from sqlalchemy import (
    Boolean, Column, Date, DateTime, MetaData, String, Table, create_engine, event, text,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import QueuePool
from sqlalchemy.types import TypeDecorator
from .config import Config
from .utils.exceptions import StoreUnavailableError
from .utils.logger import get_logger
from .utils.timeutils import DAY_END, DAY_START
from .utils.validators import CODE_LENGTH, ISSUED_TO_MAX, PURPOSE_MAX, SCANNER_ID_MAX

logger = get_logger(__name__)


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, hands back aware UTC datetimes."""
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


metadata = MetaData()

passes = Table(
    "passes",
    metadata,
    Column("code", String(CODE_LENGTH), primary_key=True),
    Column("issued_to", String(ISSUED_TO_MAX), nullable=False),
    Column("purpose", String(PURPOSE_MAX)),
    Column("issued_at", UTCDateTime(), nullable=False, index=True),
    Column("expires_at", UTCDateTime(), index=True),
    Column("active_date", Date()),
    Column("active_time", String(5), nullable=False, default=DAY_START),
    Column("end_time", String(5), nullable=False, default=DAY_END),
    Column("allow_early_access", Boolean(), nullable=False, default=False),
    Column("used", Boolean(), nullable=False, default=False, index=True),
    Column("used_at", UTCDateTime()),
    Column("scanner_id", String(SCANNER_ID_MAX)),
)


class DatabaseManager:
    """Owns the engine for one store; built explicitly and passed to whoever needs it."""

    def __init__(self, config: Config):
        self.config = config
        self._engine: Optional[Engine] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> "DatabaseManager":
        """Create the pooled engine. Safe to call twice."""
        if self._engine is not None:
            return self

        url = self.config.DB_URL
        options = dict(
            poolclass=QueuePool,
            pool_size=self.config.DB_POOL_SIZE,
            max_overflow=self.config.DB_MAX_OVERFLOW,
            pool_timeout=self.config.DB_POOL_TIMEOUT,
            pool_pre_ping=True,
            future=True,
        )
        if url.startswith("sqlite"):
            # pysqlite has no READ COMMITTED; writers serialize on the file lock
            options["connect_args"] = {
                "check_same_thread": False,
                "timeout": self.config.DB_POOL_TIMEOUT,
            }
        else:
            options["isolation_level"] = "READ COMMITTED"

        self._engine = create_engine(url, **options)
        if url.startswith("sqlite"):
            _use_immediate_transactions(self._engine)
        logger.info("Database engine created (%s)", self._engine.dialect.name)
        return self

    def close(self) -> None:
        """Dispose the pool; the manager can be reconnected afterwards."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database engine disposed")

    def init_schema(self) -> None:
        """Create the passes table if it does not exist."""
        metadata.create_all(self.engine)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StoreUnavailableError("Database is not connected; call connect() first")
        return self._engine

    @property
    def connected(self) -> bool:
        return self._engine is not None

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------
    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """Get a database connection inside a transaction; commits on clean exit."""
        with self.engine.begin() as conn:
            yield conn

    def ping(self) -> None:
        with self.get_connection() as conn:
            conn.execute(text("SELECT 1"))


def _use_immediate_transactions(engine: Engine) -> None:
    """Make every SQLite transaction take the write lock at BEGIN.

    pysqlite's implicit deferred BEGIN lets two writers both hold a read lock and
    then fail the upgrade with "database is locked" instead of waiting.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
