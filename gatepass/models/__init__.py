# =======================================================================================
# gatepass/models/__init__.py - Models Package
# =======================================================================================
from .schemas import *
from .enums import *

__all__ = [
    "Schedule", "IssuePassRequest", "PassRecord", "IssuePassResponse", "PassStatusResponse",
    "RedeemRequest", "Verdict", "QRStyle", "HealthResponse",
    "DenyReason", "AccessResult", "PassState", "ImageVariant", "HealthStatus",
]
