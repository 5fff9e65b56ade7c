# =======================================================================================
# gatepass/models/schemas.py - Pydantic Models
# =======================================================================================
from datetime import date, datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from .enums import AccessResult, DenyReason, HealthStatus, PassState
from ..utils.timeutils import DAY_END, DAY_START, ensure_utc, is_hhmm
from ..utils.validators import (
    ISSUED_TO_MAX, PURPOSE_MAX, clean_text, strip_hex_color,
)

# ========== Issuance ==========
class Schedule(BaseModel):
    """Event window. Without active_date the remaining fields are ignored."""
    active_date: Optional[date] = Field(None, description="Calendar date the window applies to")
    active_time: str = Field(DAY_START, description="Window start, HH:MM inclusive")
    end_time: str = Field(DAY_END, description="Window end, HH:MM inclusive")
    allow_early_access: bool = Field(False, description="Grant before active_date")

    @field_validator("active_time", "end_time", mode="before")
    @classmethod
    def _check_hhmm(cls, v):
        if not isinstance(v, str) or not is_hhmm(v.strip()):
            raise ValueError("time must be HH:MM (24-hour)")
        return v.strip()

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data):
        # explicit nulls / blanks fall back to the full day; without a date
        # the window fields are ignored, whatever they hold
        if isinstance(data, dict):
            data = dict(data)
            unscheduled = data.get("active_date") in (None, "")
            if unscheduled:
                data["active_date"] = None
            for key, default in (("active_time", DAY_START), ("end_time", DAY_END)):
                value = data.get(key)
                if unscheduled or value is None or (isinstance(value, str) and not value.strip()):
                    data[key] = default
        return data

    @model_validator(mode="after")
    def _check_order(self):
        if self.active_date is not None and self.active_time > self.end_time:
            raise ValueError("active_time must not be later than end_time")
        return self

class IssuePassRequest(BaseModel):
    """Issue pass request model."""
    issued_to: str = Field(..., min_length=1, max_length=ISSUED_TO_MAX, description="Pass holder label")
    purpose: Optional[str] = Field(None, max_length=PURPOSE_MAX, description="Free-text purpose")
    expiry_hours: Optional[int] = Field(None, gt=0, le=24 * 366, description="Hours until the pass dies")
    schedule: Optional[Schedule] = None

    @field_validator("issued_to", mode="before")
    @classmethod
    def _trim_issued_to(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("purpose", mode="before")
    @classmethod
    def _trim_purpose(cls, v):
        return clean_text(v) if isinstance(v, str) else v

# ========== Pass record ==========
class PassRecord(BaseModel):
    """Durable pass record as stored by the registry."""
    model_config = ConfigDict(frozen=True)

    code: str
    issued_to: str
    purpose: Optional[str] = None
    issued_at: datetime
    expires_at: Optional[datetime] = None
    active_date: Optional[date] = None
    active_time: str = DAY_START
    end_time: str = DAY_END
    allow_early_access: bool = False
    used: bool = False
    used_at: Optional[datetime] = None
    scanner_id: Optional[str] = None

    @field_validator("issued_at", "expires_at", "used_at")
    @classmethod
    def _as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else None

    @property
    def is_scheduled(self) -> bool:
        return self.active_date is not None

class IssuePassResponse(BaseModel):
    code: str
    scan_url: str
    record: PassRecord

class PassStatusResponse(BaseModel):
    record: PassRecord
    state: PassState
    scan_url: str

# ========== Redemption ==========
class RedeemRequest(BaseModel):
    """Manual / API redemption request model."""
    code: Optional[str] = Field(None, description="Pass code, any case")
    scanner_id: Optional[str] = Field(None, description="Scanning device or operator; trimmed to fit")

    @field_validator("scanner_id", mode="before")
    @classmethod
    def _trim_scanner(cls, v):
        return clean_text(v) if isinstance(v, str) else v

class Verdict(BaseModel):
    """Outcome of a redemption: a grant, or a deny with its reason and detail."""
    result: AccessResult
    reason: Optional[DenyReason] = None
    message: str
    code: Optional[str] = None
    issued_to: Optional[str] = None
    purpose: Optional[str] = None
    used_at: Optional[datetime] = None
    detail: Dict[str, Any] = Field(default_factory=dict)

    @property
    def granted(self) -> bool:
        return self.result == AccessResult.GRANTED

    @classmethod
    def grant(cls, record: PassRecord, message: str = "Access granted") -> "Verdict":
        return cls(
            result=AccessResult.GRANTED,
            message=message,
            code=record.code,
            issued_to=record.issued_to,
            purpose=record.purpose,
        )

    @classmethod
    def deny(cls, reason: DenyReason, message: str,
             record: Optional[PassRecord] = None, code: Optional[str] = None,
             **detail: Any) -> "Verdict":
        return cls(
            result=AccessResult.DENIED,
            reason=reason,
            message=message,
            code=record.code if record else code,
            issued_to=record.issued_to if record else None,
            used_at=detail.get("used_at"),
            detail=detail,
        )

# ========== Rendering ==========
class QRStyle(BaseModel):
    """Colors and size for a rendered pass image."""
    background: str = "FFFFFF"
    foreground: str = "000000"
    scale: int = Field(10, ge=1, le=60, description="Pixels per module")
    border: int = Field(4, ge=0, le=20, description="Quiet-zone width in modules")
    frame_color: Optional[str] = Field(None, description="Outer frame hex color; no frame when unset")
    frame_width: int = Field(10, ge=1, le=100, description="Outer frame width in pixels")

    @field_validator("background", "foreground", "frame_color", mode="before")
    @classmethod
    def _check_color(cls, v):
        return strip_hex_color(v) if isinstance(v, str) else v

# ========== Health ==========
class HealthResponse(BaseModel):
    status: HealthStatus
    dataAvailable: bool
    message: Optional[str] = None
