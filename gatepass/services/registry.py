# =======================================================================================
# gatepass/services/registry.py - Pass Registry (durable records, atomic consume)
# =======================================================================================
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional
from sqlalchemy import and_, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from ..database import DatabaseManager, passes
from ..models.schemas import PassRecord
from ..utils.exceptions import (
    AlreadyConsumedError, DuplicateCodeError, PassNotFoundError, StoreUnavailableError,
)
from ..utils.logger import get_logger
from ..utils.timeutils import ensure_utc
from ..utils.validators import normalize_code

logger = get_logger(__name__)


class PassRegistry:
    """Owns pass records. The only place a pass is ever marked used."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Connection]:
        """One transaction per operation; driver failures become StoreUnavailableError."""
        try:
            with self.db.get_connection() as conn:
                yield conn
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error("Store failure during %s: %s", action, e)
            raise StoreUnavailableError(f"Store unavailable during {action}") from e

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    def create(self, record: PassRecord) -> PassRecord:
        """Insert a new pass; raises DuplicateCodeError if the code is taken."""
        values = record.model_dump()
        values["code"] = normalize_code(record.code)
        try:
            with self._transaction("create") as conn:
                conn.execute(passes.insert().values(**values))
        except IntegrityError as e:
            raise DuplicateCodeError(values["code"]) from e
        return record.model_copy(update={"code": values["code"]})

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def find_by_code(self, code: str) -> PassRecord:
        key = normalize_code(code)
        with self._transaction("lookup") as conn:
            record = self._fetch(conn, key)
        if record is None:
            raise PassNotFoundError(key)
        return record

    @staticmethod
    def _fetch(conn: Connection, key: str) -> Optional[PassRecord]:
        row = conn.execute(
            select(passes).where(passes.c.code == key)
        ).mappings().first()
        return PassRecord(**row) if row else None

    # ------------------------------------------------------------------
    # Consume
    # ------------------------------------------------------------------
    def try_consume(self, code: str, redeemed_at: datetime,
                    scanner_id: Optional[str] = None) -> PassRecord:
        """
        Mark a pass used with one conditional UPDATE (... WHERE code=:c AND used=false).
        Exactly one concurrent caller can match the row; everyone else gets
        AlreadyConsumedError carrying the winner's used_at.
        """
        key = normalize_code(code)
        redeemed_at = ensure_utc(redeemed_at)

        with self._transaction("consume") as conn:
            result = conn.execute(
                update(passes)
                .where(and_(passes.c.code == key, passes.c.used.is_(False)))
                .values(used=True, used_at=redeemed_at, scanner_id=scanner_id)
            )
            matched = result.rowcount
            # read back inside the same transaction; no write happens on a miss
            record = self._fetch(conn, key)

        if matched == 1:
            logger.debug("Pass %s consumed at %s", key, redeemed_at.isoformat())
            return record
        if record is None:
            raise PassNotFoundError(key)
        raise AlreadyConsumedError(key, record.used_at)
