from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


def column_mode() -> str:
    """Either header (default) or positional for legacy exports."""
    return os.getenv("BELFIUS_COLUMN_MODE", "header").strip().lower() or "header"


def max_upload_bytes() -> int:
    raw = os.getenv("MAX_FILE_SIZE")
    if not raw:
        return DEFAULT_MAX_FILE_SIZE
    try:
        value = int(raw)
    except ValueError as e:
        raise RuntimeError(f"MAX_FILE_SIZE must be an integer, got {raw!r}") from e
    return value if value > 0 else DEFAULT_MAX_FILE_SIZE


def upload_dir() -> Optional[Path]:
    raw = os.getenv("UPLOAD_DIR")
    return Path(raw) if raw else None


def expose_error_details() -> bool:
    return os.getenv("EXPOSE_ERROR_DETAILS") == "1"


def app_version() -> str:
    return os.getenv("APP_VERSION", "0.1.0")
