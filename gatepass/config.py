# =======================================================================================
# gatepass/config.py - Configuration Management
# =======================================================================================
import os
from dotenv import load_dotenv

load_dotenv()

def _env_int(name: str, default: int) -> int:
    """Helper to parse integer environment variables."""
    v = os.getenv(name)
    return int(v) if v and v.strip().isdigit() else default

def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"

class Config:
    # Database
    DB_URL: str = os.getenv("DB_URL", "sqlite:///./gatepass.db")
    DB_POOL_SIZE: int = _env_int("DB_POOL_SIZE", 10)
    DB_MAX_OVERFLOW: int = _env_int("DB_MAX_OVERFLOW", 20)
    DB_POOL_TIMEOUT: int = _env_int("DB_POOL_TIMEOUT", 10)
    DB_INIT_SCHEMA: bool = _env_bool("DB_INIT_SCHEMA", "true")

    # API Settings
    API_DEBUG: bool = _env_bool("API_DEBUG")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Redemption
    # Single timezone that decides "today" and the time-of-day window
    REFERENCE_TIMEZONE: str = os.getenv("REFERENCE_TIMEZONE", "UTC")

    # Issuance
    SCAN_URL_BASE: str = os.getenv("SCAN_URL_BASE", "http://localhost:8000/api/scan")
    CODE_ISSUE_RETRIES: int = _env_int("CODE_ISSUE_RETRIES", 3)

    # QR rendering defaults
    QR_SCALE: int = _env_int("QR_SCALE", 10)
    QR_BORDER: int = _env_int("QR_BORDER", 4)

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown config option: {key}")
            setattr(self, key, value)

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.API_DEBUG else self.LOG_LEVEL.upper()

    @property
    def scan_url_base(self) -> str:
        return self.SCAN_URL_BASE.rstrip("/")

    def describe(self) -> dict:
        """Non-secret settings, for startup logging."""
        return {
            "db_dialect": self.DB_URL.split(":", 1)[0],
            "reference_timezone": self.REFERENCE_TIMEZONE,
            "scan_url_base": self.scan_url_base,
            "code_issue_retries": self.CODE_ISSUE_RETRIES,
        }
