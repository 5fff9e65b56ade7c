# =======================================================================================
# gatepass/services/pass_service.py - Issuance & Redemption Orchestration
# =======================================================================================
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Union
from pydantic import ValidationError
from ..config import Config
from ..models.enums import DenyReason, ImageVariant, PassState
from ..models.schemas import IssuePassRequest, PassRecord, QRStyle, Schedule, Verdict
from ..utils.exceptions import (
    AlreadyConsumedError, DuplicateCodeError, IssuanceError, PassNotFoundError,
    PassValidationError, StoreUnavailableError,
)
from ..utils.logger import get_logger
from ..utils.timeutils import ensure_utc, resolve_timezone, utcnow
from ..utils.validators import SCANNER_ID_MAX, clean_text, generate_pass_code, normalize_code
from .encoder import QRCodeEncoder
from .redemption import RedemptionEngine
from .registry import PassRegistry

logger = get_logger(__name__)


class PassService:
    """Entry point for every caller: API routes, the scan link and the manual form."""

    def __init__(self, registry: PassRegistry, config: Config,
                 encoder: Optional[QRCodeEncoder] = None,
                 code_factory: Callable[[], str] = generate_pass_code):
        self.registry = registry
        self.config = config
        self.engine = RedemptionEngine(resolve_timezone(config.REFERENCE_TIMEZONE))
        self.encoder = encoder or QRCodeEncoder()
        self.code_factory = code_factory

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------
    def issue_pass(self, issued_to: str, purpose: Optional[str] = None,
                   expiry_hours: Optional[int] = None,
                   schedule: Union[Schedule, Dict[str, Any], None] = None,
                   now: Optional[datetime] = None) -> PassRecord:
        """Validate, then store a new pass under a fresh random code."""
        try:
            request = IssuePassRequest(
                issued_to=issued_to, purpose=purpose,
                expiry_hours=expiry_hours, schedule=schedule,
            )
        except ValidationError as e:
            raise PassValidationError(_describe_validation(e)) from e

        issued_at = ensure_utc(now) if now else utcnow()
        expires_at = (
            issued_at + timedelta(hours=request.expiry_hours)
            if request.expiry_hours else None
        )
        window = request.schedule or Schedule()

        attempts = max(1, self.config.CODE_ISSUE_RETRIES)
        for attempt in range(1, attempts + 1):
            record = PassRecord(
                code=self.code_factory(),
                issued_to=request.issued_to,
                purpose=request.purpose,
                issued_at=issued_at,
                expires_at=expires_at,
                active_date=window.active_date,
                active_time=window.active_time,
                end_time=window.end_time,
                allow_early_access=window.allow_early_access,
            )
            try:
                stored = self.registry.create(record)
            except DuplicateCodeError:
                logger.warning("Code collision on issuance attempt %d/%d", attempt, attempts)
                continue
            logger.info("Issued pass %s to %r (expires %s, active_date %s)",
                        stored.code, stored.issued_to,
                        stored.expires_at.isoformat() if stored.expires_at else "never",
                        stored.active_date or "any")
            return stored

        raise IssuanceError(f"Could not allocate a unique pass code after {attempts} attempts")

    # ------------------------------------------------------------------
    # Redemption
    # ------------------------------------------------------------------
    def redeem(self, code: Optional[str], now: Optional[datetime] = None,
               scanner_id: Optional[str] = None) -> Verdict:
        """
        Evaluate, then consume. Fails closed: any store trouble is a DENY.
        The conditional consume overrides a GRANT when another redemption won the race.
        """
        key = normalize_code(code)
        now = ensure_utc(now) if now else utcnow()
        scanner_id = _bound_scanner_id(scanner_id)

        if not key:
            return Verdict.deny(DenyReason.NOT_FOUND, "No pass code provided")

        try:
            record = self.registry.find_by_code(key)
        except PassNotFoundError:
            logger.info("Redeem %s: unknown code", key)
            return Verdict.deny(DenyReason.NOT_FOUND, "Invalid pass code", code=key)
        except StoreUnavailableError:
            return _system_error(key)

        verdict = self.engine.evaluate(record, now)
        if not verdict.granted:
            logger.info("Redeem %s denied: %s", key, verdict.reason.value)
            return verdict

        try:
            consumed = self.registry.try_consume(key, now, scanner_id)
        except AlreadyConsumedError as e:
            logger.warning("Redeem %s lost the race; already used at %s", key, e.used_at)
            return self.engine.already_used(record, e.used_at)
        except PassNotFoundError:
            return Verdict.deny(DenyReason.NOT_FOUND, "Invalid pass code", code=key)
        except StoreUnavailableError:
            # the write may or may not have committed; never grant on an unknown outcome
            return _system_error(key)

        logger.info("Redeem %s granted to %r (scanner %s)", key, consumed.issued_to,
                    scanner_id or "-")
        return verdict.model_copy(update={"used_at": consumed.used_at})

    # ------------------------------------------------------------------
    # Lookup & rendering
    # ------------------------------------------------------------------
    def get_pass(self, code: str) -> PassRecord:
        return self.registry.find_by_code(code)

    def state_of(self, record: PassRecord, now: Optional[datetime] = None) -> PassState:
        return self.engine.state_of(record, ensure_utc(now) if now else utcnow())

    def scan_url(self, code: str) -> str:
        return f"{self.config.scan_url_base}/{normalize_code(code)}"

    def payload_for(self, code: str, variant: ImageVariant = "scan") -> str:
        """Scannable variants carry the scan URL; reference variants the bare code."""
        if variant == "scan":
            return self.scan_url(code)
        return normalize_code(code)

    def default_style(self, **overrides: Any) -> QRStyle:
        values = {"scale": self.config.QR_SCALE, "border": self.config.QR_BORDER}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return QRStyle(**values)

    def render_pass(self, code: str, variant: ImageVariant = "scan",
                    style: Optional[QRStyle] = None) -> bytes:
        record = self.registry.find_by_code(code)
        return self.encoder.render(self.payload_for(record.code, variant),
                                   style or self.default_style())


def _bound_scanner_id(scanner_id: Optional[str]) -> Optional[str]:
    # must fit the scanner_id column, or the consume itself would fail
    scanner_id = clean_text(scanner_id)
    return scanner_id[:SCANNER_ID_MAX] if scanner_id else None


def _system_error(code: str) -> Verdict:
    logger.error("Redeem %s failed closed: store unavailable", code)
    return Verdict.deny(DenyReason.SYSTEM_ERROR, "System error. Please try again.", code=code)


def _describe_validation(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{field}: {err.get('msg')}" if field else err.get("msg", ""))
    return "; ".join(parts)
