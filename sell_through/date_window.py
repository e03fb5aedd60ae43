import logging
from datetime import datetime, timedelta, timezone
import pandas as pd
from pydantic import ValidationError

from . import settings
from .errors import InputError
from .schemas import DateWindow

logger = logging.getLogger(__name__)

# Preset -> how far back from "now" the window starts.
PRESET_OFFSETS = {
    "past week": pd.DateOffset(days=7),
    "past month": pd.DateOffset(months=1),
    "past quarter": pd.DateOffset(months=3),
    "past year": pd.DateOffset(years=1),
}


def parse_custom_date(text: str) -> datetime:
    """Parses a `DD/MM/YYYY` literal as UTC midnight of that day."""
    try:
        parsed = datetime.strptime(text.strip(), settings.CUSTOM_DATE_FORMAT)
    except (ValueError, AttributeError) as e:
        raise InputError(f"Invalid date format: {text!r} (expected DD/MM/YYYY)") from e
    return parsed.replace(tzinfo=timezone.utc)


def _utc_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def resolve_window(
    preset: str,
    start_text: str | None = None,
    end_text: str | None = None,
    now: datetime | None = None,
) -> DateWindow:
    """
    Turns the operator's date-range choice into a validated DateWindow.

    Presets end at `now` and reach back a fixed span; month/quarter/year spans are
    calendar arithmetic (31 Mar minus one month is 28/29 Feb). `custom` needs both
    `start_text` and `end_text` as DD/MM/YYYY, each read as UTC midnight.

    Raises InputError for unknown presets, bad dates or a start after the end.
    """
    key = (preset or "").strip().lower()
    if key not in settings.WINDOW_PRESETS:
        raise InputError(
            f"Invalid date range: {preset!r}. Choose one of: {', '.join(settings.WINDOW_PRESETS)}"
        )

    if key == "custom":
        if not start_text or not end_text:
            raise InputError("A custom date range needs both a start and an end date.")
        start = parse_custom_date(start_text)
        end = parse_custom_date(end_text)
    else:
        end = _utc_now(now)
        start = (pd.Timestamp(end) - PRESET_OFFSETS[key]).to_pydatetime()

    try:
        window = DateWindow(start=start, end=end)
    except ValidationError as e:
        raise InputError(f"Invalid date range: {e.errors()[0]['msg']}") from e

    logger.debug(f"Resolved '{key}' to {window.start.isoformat()} .. {window.end.isoformat()}")
    return window


def to_api_timestamp(moment: datetime) -> str:
    """Formats an instant the way the orders endpoint expects: ISO-8601 UTC with milliseconds."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe_window(window: DateWindow) -> str:
    days = (window.end - window.start) / timedelta(days=1)
    return f"{window.start.date().isoformat()} -> {window.end.date().isoformat()} ({days:.1f} days)"
