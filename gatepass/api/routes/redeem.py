# =======================================================================================
# gatepass/api/routes/redeem.py - Redemption Endpoints
# =======================================================================================
from typing import Optional
from fastapi import APIRouter, Depends, Query
from ...models.schemas import RedeemRequest, Verdict
from ...services.pass_service import PassService
from ..dependencies import get_pass_service

router = APIRouter()

# Both routes return 200 with the verdict; a denial is an answer, not an HTTP error.

@router.post("/verify", response_model=Verdict)
def verify(request: RedeemRequest, service: PassService = Depends(get_pass_service)):
    """Manual entry / API redemption."""
    return service.redeem(request.code, scanner_id=request.scanner_id)


@router.get("/scan/{code}", response_model=Verdict)
def scan(
    code: str,
    scanner_id: Optional[str] = Query(None, description="Scanning device or operator"),
    service: PassService = Depends(get_pass_service),
):
    """Target of the QR payload."""
    return service.redeem(code, scanner_id=(scanner_id or "").strip() or None)
