"""Loading of settings and search terms from their CSV tables."""

from __future__ import annotations

import csv
import logging
import os
from pathlib import Path

import record_store
from models import SearchTerm, Settings
from summarizer import SUPPORTED_PROVIDERS

SETTINGS_CSV_PATH = os.getenv("SETTINGS_CSV_PATH", "settings.csv")
SEARCH_TERMS_CSV_PATH = os.getenv("SEARCH_TERMS_CSV_PATH", "search_terms.csv")
_DEFAULT_MAX_RESULTS = 10
_DEFAULT_TERM_PAUSE_SECONDS = 1.0

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

LOGGER = logging.getLogger(__name__)

# Recognized keys of the settings table, as the settings editor writes them.
KEY_EMAIL = "email"
KEY_API_KEY = "summarization API key"
KEY_DEFAULT_MAX_RESULTS = "default max results"
KEY_PROVIDER = "summarization provider"
KEY_SCHEDULE_DAY = "schedule day"
KEY_SCHEDULE_HOUR = "schedule hour"


def load_settings(path: str | None = None, results_path: str | None = None) -> Settings:
    """Build an immutable Settings value from the key/value table.

    Blank or absent keys fall back to environment variables. Malformed numeric
    values raise RuntimeError. Schedule values are kept as written and only
    checked by describe_schedule, so a bad schedule never blocks a run.
    """
    raw = _read_key_values(Path(path or SETTINGS_CSV_PATH))

    provider = (raw.get(KEY_PROVIDER) or os.getenv("SUMMARIZATION_PROVIDER") or "openai").strip().lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise RuntimeError(f"Unsupported summarization provider: {provider!r}")

    env_key_name = "ANTHROPIC_API_KEY" if provider == "anthropic" else "OPENAI_API_KEY"
    default_max = _as_int(
        raw.get(KEY_DEFAULT_MAX_RESULTS) or os.getenv("DEFAULT_MAX_RESULTS"),
        KEY_DEFAULT_MAX_RESULTS,
        default=_DEFAULT_MAX_RESULTS,
    )

    settings = Settings(
        email=(raw.get(KEY_EMAIL) or os.getenv("DIGEST_EMAIL") or "").strip(),
        summarization_api_key=(raw.get(KEY_API_KEY) or os.getenv(env_key_name) or "").strip(),
        summarization_provider=provider,
        default_max_results=default_max if default_max > 0 else _DEFAULT_MAX_RESULTS,
        schedule_day=(raw.get(KEY_SCHEDULE_DAY) or "Monday").strip(),
        schedule_hour=(raw.get(KEY_SCHEDULE_HOUR) or "9").strip(),
        results_path=results_path or record_store.RESULTS_CSV_PATH,
        term_pause_seconds=_as_float(os.getenv("TERM_PAUSE_SECONDS"), "TERM_PAUSE_SECONDS", _DEFAULT_TERM_PAUSE_SECONDS),
    )
    LOGGER.info(
        "Loaded settings: provider=%s default_max_results=%s email_configured=%s api_key_configured=%s",
        settings.summarization_provider,
        settings.default_max_results,
        bool(settings.email),
        bool(settings.summarization_api_key),
    )
    return settings


def load_search_terms(path: str | None = None, default_max_results: int = _DEFAULT_MAX_RESULTS) -> list[SearchTerm]:
    """Read search terms in stored order.

    Blank terms are kept so the orchestrator can report them as skipped; a
    blank, non-numeric or non-positive max_results falls back to the default.
    """
    csv_path = Path(path or SEARCH_TERMS_CSV_PATH)
    if not csv_path.exists():
        LOGGER.warning("Search terms file not found: %s", csv_path)
        return []

    terms: list[SearchTerm] = []
    with csv_path.open(newline="", encoding="utf-8") as fh:
        for row in csv.DictReader(fh):
            max_results = _positive_int_or(row.get("max_results"), default_max_results)
            terms.append(SearchTerm(term=(row.get("term") or "").strip(), max_results=max_results))
    return terms


def describe_schedule(settings: Settings) -> str:
    """Human-readable form of the configured weekly trigger.

    Raises RuntimeError for a day that is not a weekday name or an hour
    outside 0-23.
    """
    day = settings.schedule_day.strip().capitalize()
    if day not in WEEKDAYS:
        raise RuntimeError(f"Invalid schedule day: {settings.schedule_day!r}")
    hour = _as_int(settings.schedule_hour, KEY_SCHEDULE_HOUR, default=9)
    if not 0 <= hour <= 23:
        raise RuntimeError(f"Invalid schedule hour: {hour}")
    return f"Weekly on {day} at {hour:02d}:00"


def _read_key_values(path: Path) -> dict[str, str]:
    if not path.exists():
        LOGGER.warning("Settings file not found: %s; using environment only", path)
        return {}

    values: dict[str, str] = {}
    with path.open(newline="", encoding="utf-8") as fh:
        for row in csv.DictReader(fh):
            key = (row.get("key") or "").strip()
            if key:
                values[key] = (row.get("value") or "").strip()
    return values


def _as_int(value: str | None, name: str, default: int) -> int:
    if value is None or not str(value).strip():
        return default
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise RuntimeError(f"Setting {name!r} must be an integer, got {value!r}") from exc


def _positive_int_or(value: str | None, default: int) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _as_float(value: str | None, name: str, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {value!r}") from exc
