# =======================================================================================
# gatepass/utils/__init__.py - Utils Package
# =======================================================================================
from .exceptions import *
from .validators import *

__all__ = [
    "GatePassError", "PassValidationError", "PassNotFoundError", "DuplicateCodeError",
    "AlreadyConsumedError", "StoreUnavailableError", "IssuanceError", "EncodingError",
    "generate_pass_code", "normalize_code", "is_canonical_code", "clean_text",
    "strip_hex_color",
]
