# =======================================================================================
# gatepass/utils/exceptions.py - Custom Exceptions
# =======================================================================================
from datetime import datetime
from typing import Optional


class GatePassError(Exception):
    """Base exception for the pass issuance and redemption system."""
    pass

class PassValidationError(GatePassError):
    """Raised when issuance input is rejected before any state is touched."""
    pass

class PassNotFoundError(GatePassError):
    """Raised when no pass exists for a code."""

    def __init__(self, code: str):
        super().__init__(f"No pass found for code {code}")
        self.code = code

class DuplicateCodeError(GatePassError):
    """Raised when a freshly generated code is already stored."""

    def __init__(self, code: str):
        super().__init__(f"Pass code {code} already exists")
        self.code = code

class AlreadyConsumedError(GatePassError):
    """Raised by the registry when a conditional consume matched no unused pass."""

    def __init__(self, code: str, used_at: Optional[datetime]):
        super().__init__(f"Pass {code} was already used")
        self.code = code
        self.used_at = used_at

class StoreUnavailableError(GatePassError):
    """Transient storage failure; whether a write committed is unknown."""
    pass

class IssuanceError(GatePassError):
    """Raised when no unique code could be stored within the retry budget."""
    pass

class EncodingError(GatePassError):
    """Raised when the QR encoder cannot render a payload."""
    pass
