# =======================================================================================
# gatepass/api/routes/passes.py - Pass Issuance & Lookup Endpoints
# =======================================================================================
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import ValidationError
from ...models.enums import ImageVariant
from ...models.schemas import IssuePassRequest, IssuePassResponse, PassStatusResponse
from ...services.pass_service import PassService
from ...utils.exceptions import (
    EncodingError, IssuanceError, PassNotFoundError, PassValidationError, StoreUnavailableError,
)
from ..dependencies import get_pass_service

router = APIRouter()


@router.post("/passes", response_model=IssuePassResponse, status_code=201)
def issue_pass(request: IssuePassRequest, service: PassService = Depends(get_pass_service)):
    """Issue a new single-use pass."""
    try:
        record = service.issue_pass(
            request.issued_to, request.purpose, request.expiry_hours, request.schedule
        )
    except PassValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except IssuanceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return IssuePassResponse(code=record.code, scan_url=service.scan_url(record.code), record=record)


@router.get("/passes/{code}", response_model=PassStatusResponse)
def get_pass(code: str, service: PassService = Depends(get_pass_service)):
    """Read-only status; never consumes the pass."""
    try:
        record = service.get_pass(code)
    except PassNotFoundError:
        raise HTTPException(status_code=404, detail="Pass not found")
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return PassStatusResponse(
        record=record, state=service.state_of(record), scan_url=service.scan_url(record.code)
    )


@router.get("/passes/{code}/image")
def download_pass_image(
    code: str,
    variant: ImageVariant = Query("scan", description="scan = QR of the scan URL, reference = QR of the bare code"),
    bg: Optional[str] = Query(None, description="Background hex color"),
    fg: Optional[str] = Query(None, description="Foreground hex color"),
    scale: Optional[int] = Query(None, description="Pixels per module"),
    border: Optional[int] = Query(None, description="Quiet zone in modules"),
    frame: Optional[str] = Query(None, description="Outer frame hex color"),
    frame_width: Optional[int] = Query(None, description="Outer frame width in pixels"),
    service: PassService = Depends(get_pass_service),
):
    """PNG rendering of a pass, as a download."""
    try:
        style = service.default_style(background=bg, foreground=fg, scale=scale, border=border,
                                      frame_color=frame, frame_width=frame_width)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        png = service.render_pass(code, variant, style)
    except PassNotFoundError:
        raise HTTPException(status_code=404, detail="Pass not found")
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except EncodingError as e:
        raise HTTPException(status_code=500, detail=str(e))

    filename = f"pass-{code.strip().upper()}-{variant}.png"
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
