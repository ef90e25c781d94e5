"""
config.py - Configuration Management
=====================================
This module loads the lookup settings from environment variables.
It reads a .env file from the project root first, so the data source can be
switched without touching the code.

Environment Variables Used:
---------------------------
- CONSULTA_SOURCE      : (Optional) Where records come from: "sheet", "api" or "file" (default: "sheet")
- CONSULTA_SHEET_URL   : (Optional) Published-sheet CSV export URL (default: the class sheet)
- CONSULTA_API_BASE    : (Required for "api") Base URL of the backend API
- CONSULTA_FILE        : (Required for "file") Path to a downloaded .csv/.tsv/.xlsx export
- CONSULTA_TIMEOUT_SEC : (Optional) Request timeout in seconds (default: 20)

Example .env file:
------------------
CONSULTA_SOURCE=api
CONSULTA_API_BASE=https://consulta-api.example.com
"""

from dataclasses import dataclass
import os
from pathlib import Path
from dotenv import load_dotenv


DEFAULT_SHEET_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vQpj4E2zV8skZDC5hsMR36SnHtJVEtayD8r7FOOiYL27EKlhmHPnmvcDkQ7M0WUF6lPxgims0OAylNf"
    "/pub?output=csv"
)

SOURCES = ("sheet", "api", "file")


@dataclass
class Settings:
    """Container for all application configuration values."""

    # Which collaborator backs the lookup: "sheet", "api" or "file"
    source: str = "sheet"

    sheet_url: str = DEFAULT_SHEET_URL

    # Without trailing slash, so endpoint paths can be appended directly
    api_base: str | None = None

    file_path: str | None = None

    timeout_sec: int = 20


def _clean(v: str | None) -> str | None:
    """
    Clean an environment variable value.

    Examples:
        _clean('  hello  ')     -> 'hello'
        _clean('"quoted"')      -> 'quoted'
        _clean('')              -> None
        _clean(None)            -> None
    """
    if v is None:
        return None

    v = v.strip()

    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1]

    return v if v else None


def _normalize_base_url(base: str) -> str:
    # "api.example.com/" -> "https://api.example.com"
    if not base.startswith("http"):
        base = "https://" + base
    return base.rstrip("/")


def load_settings(source: str | None = None, file_path: str | None = None) -> Settings:
    """
    Load application configuration from the .env file and environment.

    Args:
        source: Overrides CONSULTA_SOURCE (e.g. from the command line)
        file_path: Overrides CONSULTA_FILE

    Returns:
        Settings: A dataclass containing all configuration values

    Raises:
        RuntimeError: If the source is unknown, or the setting it needs is missing
    """
    # The .env file sits in the project root (one level up from consulta/)
    root_env = Path(__file__).resolve().parents[1] / ".env"
    load_dotenv(dotenv_path=root_env)

    source = (source or _clean(os.getenv("CONSULTA_SOURCE")) or "sheet").lower()
    if source not in SOURCES:
        raise RuntimeError(
            f"Unknown CONSULTA_SOURCE '{source}'. "
            f"Expected one of: {', '.join(SOURCES)}."
        )

    api_base = _clean(os.getenv("CONSULTA_API_BASE"))
    if api_base:
        api_base = _normalize_base_url(api_base)
    elif source == "api":
        raise RuntimeError(
            "CONSULTA_API_BASE is not set in environment. "
            "Please add it to your .env file."
        )

    file_path = file_path or _clean(os.getenv("CONSULTA_FILE"))
    if source == "file" and not file_path:
        raise RuntimeError(
            "CONSULTA_FILE is not set. "
            "Add it to your .env file or pass --file."
        )

    timeout_raw = _clean(os.getenv("CONSULTA_TIMEOUT_SEC")) or "20"
    try:
        timeout_sec = int(timeout_raw)
    except ValueError:
        raise RuntimeError(f"CONSULTA_TIMEOUT_SEC must be an integer, got '{timeout_raw}'")

    return Settings(
        source=source,
        sheet_url=_clean(os.getenv("CONSULTA_SHEET_URL")) or DEFAULT_SHEET_URL,
        api_base=api_base,
        file_path=file_path,
        timeout_sec=timeout_sec,
    )
