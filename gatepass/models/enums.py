# =======================================================================================
# gatepass/models/enums.py - Enums and Constants
# =======================================================================================
from enum import Enum
from typing import Literal

# Type aliases for better type hints
ImageVariant = Literal["scan", "reference"]
HealthStatus = Literal["ok", "error"]

class DenyReason(str, Enum):
    """Why a redemption was refused."""
    NOT_FOUND = "not_found"
    ALREADY_USED = "already_used"
    EXPIRED = "expired"
    NOT_YET_ACTIVE = "not_yet_active"
    WINDOW_ELAPSED = "window_elapsed"
    TOO_EARLY = "too_early"
    TOO_LATE = "too_late"
    SYSTEM_ERROR = "system_error"

class AccessResult(str, Enum):
    """Redemption outcome."""
    GRANTED = "granted"
    DENIED = "denied"

class PassState(str, Enum):
    """Lifecycle view of a pass at a given instant; only REDEEMED is stored."""
    INACTIVE = "inactive"
    ACTIVE = "active"
    EXPIRED = "expired"
    REDEEMED = "redeemed"
