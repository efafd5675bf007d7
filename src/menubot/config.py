"""
Configuration management for the menu bot.

Loads environment variables and provides a strongly-typed configuration object.
Validates required keys at startup.
"""

import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv
import structlog

from src.menubot.labels import DEFAULT_FALLBACK_LABEL
from src.menubot.models import PriceRowPolicy

load_dotenv()

logger = structlog.get_logger(__name__)

DEFAULT_MENSA_URL = "https://www.studentenwerk.sh/de/essen/standorte/luebeck/mensa-luebeck/speiseplan.html"
DEFAULT_BISTRO_URL_TEMPLATE = (
    "https://www.uksh.de/uksh_media/Speisepl%C3%A4ne/L%C3%BCbeck+_+UKSH_Bistro/"
    "Speiseplan+Bistro+KW+{week:02d}.pdf"
)


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


@dataclass(frozen=True)
class Config:
    """Strongly-typed configuration object."""

    log_level: str = "INFO"

    # Mensa (HTML)
    mensa_url: str = DEFAULT_MENSA_URL
    mensa_day_attribute: str = "longdesc"
    property_fallback_label: str = DEFAULT_FALLBACK_LABEL

    # Bistro (PDF)
    # - bistro_url_template is formatted with the calendar week: {week:02d}
    # - bistro_block_lines is the number of text lines one day spans in the PDF
    bistro_url_template: str = DEFAULT_BISTRO_URL_TEMPLATE
    bistro_block_lines: int = 4
    bistro_price_row_policy: PriceRowPolicy = PriceRowPolicy.SEARCH_FOR_PRICE_ROW
    pdftotext_path: str = "pdftotext"
    work_dir: str = ""

    # HTTP
    http_timeout_seconds: float = 30.0

    # Webex
    webex_client_id: str = ""
    webex_client_secret: str = ""
    webex_room_id: str = ""
    webex_api_base: str = "https://webexapis.com/v1"
    webex_redirect_uri: str = "http://invalid/"
    webex_scope: str = "spark:messages_write"
    webex_token_file: str = "webex_tokens.json"
    webex_refresh_margin_hours: float = 48.0

    @property
    def resolved_work_dir(self) -> str:
        return self.work_dir or tempfile.gettempdir()

    def validate(self, *, require_webex: bool = True) -> None:
        """Validate that all required configuration is present."""
        if self.bistro_block_lines < 1:
            raise ConfigError(
                f"Invalid BISTRO_BLOCK_LINES '{self.bistro_block_lines}'. Expected a positive number."
            )
        if "{week" not in self.bistro_url_template:
            raise ConfigError("BISTRO_URL_TEMPLATE must contain a {week} placeholder.")
        if not self.property_fallback_label.strip():
            raise ConfigError("PROPERTY_FALLBACK_LABEL must not be empty.")

        if not require_webex:
            return

        missing = []
        if not self.webex_client_id:
            missing.append("WEBEX_CLIENT_ID")
        if not self.webex_client_secret:
            missing.append("WEBEX_CLIENT_SECRET")
        if not self.webex_room_id:
            missing.append("WEBEX_ROOM_ID")

        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                "Please check your .env file."
            )

    def log_config(self) -> None:
        """Log configuration (with secrets redacted)."""
        logger.info(
            "Configuration loaded",
            log_level=self.log_level,
            mensa_url=self.mensa_url,
            bistro_url_template=self.bistro_url_template,
            bistro_block_lines=self.bistro_block_lines,
            bistro_price_row_policy=self.bistro_price_row_policy.value,
            work_dir=self.resolved_work_dir,
            webex_client_id_set=bool(self.webex_client_id),
            webex_client_secret_set=bool(self.webex_client_secret),
            webex_room_id_set=bool(self.webex_room_id),
            webex_token_file=self.webex_token_file,
        )


def _get_int(key: str, default: int) -> int:
    """Get an integer from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    """Get a float from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _get_price_row_policy(key: str, default: PriceRowPolicy) -> PriceRowPolicy:
    raw = os.getenv(key, default.value).strip().lower()
    try:
        return PriceRowPolicy(raw)
    except ValueError:
        raise ConfigError(
            f"Invalid {key} '{raw}'. Expected 'search' or 'last_row'."
        ) from None


@lru_cache(maxsize=1)
def get_config() -> Config:
    """
    Get the application configuration.

    Uses lru_cache to ensure we only load config once.
    """
    config = Config(
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),

        # Mensa
        mensa_url=os.getenv("MENSA_URL", DEFAULT_MENSA_URL),
        mensa_day_attribute=os.getenv("MENSA_DAY_ATTRIBUTE", "longdesc"),
        property_fallback_label=os.getenv("PROPERTY_FALLBACK_LABEL", DEFAULT_FALLBACK_LABEL),

        # Bistro
        bistro_url_template=os.getenv("BISTRO_URL_TEMPLATE", DEFAULT_BISTRO_URL_TEMPLATE),
        bistro_block_lines=_get_int("BISTRO_BLOCK_LINES", 4),
        bistro_price_row_policy=_get_price_row_policy(
            "BISTRO_PRICE_ROW_POLICY", PriceRowPolicy.SEARCH_FOR_PRICE_ROW
        ),
        pdftotext_path=os.getenv("PDFTOTEXT_PATH", "pdftotext"),
        work_dir=os.getenv("WORK_DIR", ""),

        # HTTP
        http_timeout_seconds=_get_float("HTTP_TIMEOUT_SECONDS", 30.0),

        # Webex
        webex_client_id=os.getenv("WEBEX_CLIENT_ID", ""),
        webex_client_secret=os.getenv("WEBEX_CLIENT_SECRET", ""),
        webex_room_id=os.getenv("WEBEX_ROOM_ID", ""),
        webex_api_base=os.getenv("WEBEX_API_BASE", "https://webexapis.com/v1"),
        webex_redirect_uri=os.getenv("WEBEX_REDIRECT_URI", "http://invalid/"),
        webex_scope=os.getenv("WEBEX_SCOPE", "spark:messages_write"),
        webex_token_file=os.getenv("WEBEX_TOKEN_FILE", "webex_tokens.json"),
        webex_refresh_margin_hours=_get_float("WEBEX_REFRESH_MARGIN_HOURS", 48.0),
    )

    return config


def init_config(*, require_webex: bool = True) -> Config:
    """
    Initialize and validate configuration.

    Call this at application startup to fail fast if config is invalid.
    """
    config = get_config()
    config.validate(require_webex=require_webex)
    config.log_config()
    return config
