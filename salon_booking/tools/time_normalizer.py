"""
Time and date normalization for free-form chat input.

The normalizer never invents a value: it only maps customer text onto one
of the canonical ``HH:MM`` times (or calendar dates) that were offered.

Time rules, first success wins:
    1. Exact canonical match, colon optional ("0900" == "09:00")
    2. 12-hour with am/pm suffix ("9 am", "9:30pm", "12 a.m.")
    3. 24-hour with separator ("9:30", "14:00")
    4. Bare hour ("9", "14"): 24-hour reading first, then 12-hour AM

Usage:
    parse_time("9 am", ["09:00", "10:00"])   # -> "09:00"
    parse_time("9 pm", ["09:00", "10:00"])   # -> None
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

_TWELVE_HOUR = re.compile(r"^(\d{1,2})(?:[:.](\d{2}))?\s*([ap])\.?\s*m\.?$")
_TWENTY_FOUR_HOUR = re.compile(r"^(\d{1,2})[:.](\d{2})(?:\s*(?:hrs?|h))?$")
_BARE_HOUR = re.compile(r"^(\d{1,2})(?:\s*(?:o'?clock|hrs?|h))?$")

RELATIVE_DAYS: dict[str, int] = {
    "today": 0,
    "tomorrow": 1,
    "tmrw": 1,
    "day after tomorrow": 2,
}

# Day-first formats, as customers in the default locale write them.
DATE_FORMATS = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d/%m/%y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%b %d %Y",
)
SHORT_DATE_FORMATS = ("%d/%m", "%d-%m", "%d %B", "%d %b", "%B %d", "%b %d")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _clean(text: str) -> str:
    return " ".join(text.strip().lower().split())


def _format(hour: int, minute: int) -> Optional[str]:
    if 0 <= hour <= 23 and 0 <= minute <= 59:
        return f"{hour:02d}:{minute:02d}"
    return None


def _exact(text: str, candidates: list[str]) -> Optional[str]:
    compact = text.replace(" ", "")
    for slot in candidates:
        if compact == slot.lower() or compact == slot.replace(":", ""):
            return slot
    return None


def _twelve_hour(text: str, candidates: list[str]) -> Optional[str]:
    match = _TWELVE_HOUR.match(text)
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if not 1 <= hour <= 12:
        return None
    if match.group(3) == "p" and hour != 12:
        hour += 12
    elif match.group(3) == "a" and hour == 12:
        hour = 0
    value = _format(hour, minute)
    return value if value in candidates else None


def _twenty_four_hour(text: str, candidates: list[str]) -> Optional[str]:
    match = _TWENTY_FOUR_HOUR.match(text)
    if not match:
        return None
    value = _format(int(match.group(1)), int(match.group(2)))
    return value if value in candidates else None


def _bare_hour(text: str, candidates: list[str]) -> Optional[str]:
    match = _BARE_HOUR.match(text)
    if not match:
        return None
    hour = int(match.group(1))
    as_24h = _format(hour, 0)
    if as_24h in candidates:
        return as_24h
    if 1 <= hour <= 12:
        as_am = _format(0 if hour == 12 else hour, 0)
        if as_am in candidates:
            return as_am
    return None


_TIME_RULES: tuple[Callable[[str, list[str]], Optional[str]], ...] = (
    _exact,
    _twelve_hour,
    _twenty_four_hour,
    _bare_hour,
)


def parse_time(text: str, candidate_slots: Iterable[str]) -> Optional[str]:
    """Resolve customer text to one of the offered canonical times, or None."""
    candidates = list(candidate_slots)
    cleaned = _clean(text)
    if not cleaned or not candidates:
        return None
    for rule in _TIME_RULES:
        value = rule(cleaned, candidates)
        if value is not None:
            logger.debug("Time %r resolved to %s by %s", text, value, rule.__name__)
            return value
    return None


def _parse_explicit_date(text: str, today: date) -> Optional[date]:
    cleaned = text.replace(",", " ")
    cleaned = re.sub(r"(\d)(st|nd|rd|th)\b", r"\1", cleaned)
    cleaned = " ".join(cleaned.split())
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    for fmt in SHORT_DATE_FORMATS:
        try:
            parsed = datetime.strptime(f"{cleaned} {today.year}", f"{fmt} %Y").date()
        except ValueError:
            continue
        # "5/1" typed in late December means next January
        if parsed < today:
            try:
                parsed = parsed.replace(year=today.year + 1)
            except ValueError:
                return None
        return parsed
    return None


def parse_date(text: str, offered_dates: Iterable[date], today: date) -> Optional[date]:
    """Resolve relative words, explicit dates, or weekday names to an offered date.

    Dates before ``today`` or outside ``offered_dates`` resolve to None.
    """
    offered = list(offered_dates)
    cleaned = _clean(text)
    if not cleaned:
        return None

    resolved: Optional[date] = None
    if cleaned in RELATIVE_DAYS:
        resolved = today + timedelta(days=RELATIVE_DAYS[cleaned])
    else:
        resolved = _parse_explicit_date(cleaned, today)
        if resolved is None and cleaned in WEEKDAYS:
            wanted = WEEKDAYS.index(cleaned)
            resolved = next((d for d in offered if d.weekday() == wanted), None)
        if resolved is None:
            for word, offset in RELATIVE_DAYS.items():
                if re.search(rf"\b{word}\b", cleaned):
                    resolved = today + timedelta(days=offset)

    if resolved is None or resolved < today or resolved not in offered:
        return None
    return resolved


def format_date_label(on_date: date) -> str:
    """Long display form, e.g. ``Monday, 19 October 2026``."""
    return f"{on_date.strftime('%A')}, {on_date.day} {on_date.strftime('%B %Y')}"
