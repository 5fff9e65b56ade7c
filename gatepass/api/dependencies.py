# =======================================================================================
# gatepass/api/dependencies.py - FastAPI Dependencies
# =======================================================================================
from fastapi import HTTPException, Request
from ..services.pass_service import PassService

def get_pass_service(request: Request) -> PassService:
    """Dependency to get the pass service wired at startup."""
    service = getattr(request.app.state, "pass_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return service
