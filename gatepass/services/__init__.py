# =======================================================================================
# gatepass/services/__init__.py - Services Package
# =======================================================================================
from .registry import PassRegistry
from .redemption import RedemptionEngine
from .encoder import QRCodeEncoder
from .pass_service import PassService

__all__ = ["PassRegistry", "RedemptionEngine", "QRCodeEncoder", "PassService"]
