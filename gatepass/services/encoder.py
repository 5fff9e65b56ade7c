# =======================================================================================
# gatepass/services/encoder.py - QR Rendering
# =======================================================================================
import io
import qrcode
from PIL import ImageOps
from qrcode.constants import ERROR_CORRECT_M
from qrcode.exceptions import DataOverflowError
from ..models.schemas import QRStyle
from ..utils.exceptions import EncodingError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class QRCodeEncoder:
    """Turns a payload string into PNG bytes."""

    def render(self, payload: str, style: QRStyle) -> bytes:
        if not payload:
            raise EncodingError("Nothing to encode")

        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECT_M,
            box_size=style.scale,
            border=style.border,
        )
        try:
            qr.add_data(payload)
            qr.make(fit=True)
            img = qr.make_image(
                fill_color=f"#{style.foreground}",
                back_color=f"#{style.background}",
            ).get_image()
            if style.frame_color:
                img = ImageOps.expand(img.convert("RGB"), border=style.frame_width,
                                      fill=f"#{style.frame_color}")
            buf = io.BytesIO()
            img.save(buf, format="PNG")
        except (DataOverflowError, ValueError, OSError) as e:
            logger.error("QR rendering failed for payload of %d chars: %s", len(payload), e)
            raise EncodingError(f"Could not render QR code: {e}") from e

        png = buf.getvalue()
        logger.debug("Rendered QR (%d bytes, scale %d)", len(png), style.scale)
        return png
