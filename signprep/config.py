"""Application settings read from environment variables."""

from __future__ import annotations

from dataclasses import dataclass
import os

# Default widget size in PDF points when stamping fields into an exported PDF.
FIELD_SIZES_PT = {
    "Signature": (160.0, 40.0),
    "Text": (140.0, 22.0),
    "Date": (90.0, 22.0),
}
DEFAULT_FIELD_SIZE_PT = (140.0, 22.0)

FIELD_MIME_TYPE = "application/x-signprep-field"


def get_string_val(key: str, default: str) -> str:
    val = os.getenv(key.upper()) or None  # empty string -> None
    return val.strip() if val is not None else default


def get_number_val(key: str, default: int | float) -> int | float:
    raw = os.getenv(key.upper()) or None
    if raw is None:
        return default
    try:
        return int(raw) if "." not in raw else float(raw)
    except ValueError:
        raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")


def get_bool_val(key: str, default: bool) -> bool:
    raw = os.getenv(key.upper()) or None
    if raw is None:
        return default
    return raw.lower() in ("true", "1", "yes")


@dataclass(frozen=True, slots=True)
class AppConfig:
    log_level: str = "info"
    timezone: str = "UTC"
    log_dir: str | None = None
    page_margin: int = 24
    min_page_width: int = 400
    max_page_width: int = 1000
    save_payload_json: bool = True

    @property
    def debug(self) -> bool:
        return self.log_level.lower() == "debug"


def load_config() -> AppConfig:
    min_width = int(get_number_val("SIGNPREP_MIN_PAGE_WIDTH", 400))
    max_width = int(get_number_val("SIGNPREP_MAX_PAGE_WIDTH", 1000))
    if min_width <= 0 or max_width < min_width:
        raise ValueError(f"Invalid page width range: {min_width}..{max_width}")

    return AppConfig(
        log_level=get_string_val("LOG_LEVEL", "info").lower(),
        timezone=get_string_val("SIGNPREP_TIMEZONE", "UTC"),
        log_dir=get_string_val("SIGNPREP_LOG_DIR", "") or None,
        page_margin=int(get_number_val("SIGNPREP_PAGE_MARGIN", 24)),
        min_page_width=min_width,
        max_page_width=max_width,
        save_payload_json=get_bool_val("SIGNPREP_SAVE_PAYLOAD_JSON", True),
    )
