# =======================================================================================
# gatepass/utils/validators.py - Validation Helpers
# =======================================================================================
import re
import secrets
from typing import Optional

CODE_BYTES = 16
CODE_LENGTH = CODE_BYTES * 2
CODE_PATTERN = re.compile(r"^[0-9A-F]{%d}$" % CODE_LENGTH)

ISSUED_TO_MAX = 100
PURPOSE_MAX = 200
SCANNER_ID_MAX = 100


def generate_pass_code() -> str:
    """128 random bits as uppercase hex."""
    return secrets.token_hex(CODE_BYTES).upper()


def normalize_code(code: Optional[str]) -> str:
    """Canonical lookup form: trimmed and uppercased."""
    return (code or "").strip().upper()


def is_canonical_code(code: str) -> bool:
    return bool(CODE_PATTERN.match(code))


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim free text; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def strip_hex_color(value: str) -> str:
    """Accept 'FFFFFF' or '#FFFFFF' and return the bare, uppercased hex."""
    color = value.strip().lstrip("#").upper()
    if not re.fullmatch(r"[0-9A-F]{6}", color):
        raise ValueError(f"Invalid hex color: {value}")
    return color
