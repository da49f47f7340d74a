"""
Event normalization pipeline.

Pure functions only: nothing here touches the database, so every rule can be
exercised without a connection. The repository runs the pipeline to
completion before it opens a session.

Pipeline order (first failure aborts, later stages never run):
  1. required fields   -> MissingField(name)
  2. slug              -> derived from title when new/changed or absent
  3. date              -> YYYY-MM-DD (UTC calendar fields), else InvalidDate
  4. time              -> HH:MM 24-hour, else InvalidTime
"""

import re
import unicodedata
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from devevent.core.errors import InvalidDate, InvalidTime, MissingField
from devevent.schemas.event import NormalizedEvent

REQUIRED_STRING_FIELDS = (
    "title",
    "description",
    "overview",
    "image",
    "venue",
    "location",
    "date",
    "time",
    "mode",
    "audience",
    "organizer",
)
REQUIRED_LIST_FIELDS = ("agenda", "tags")

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_TIME_PATTERN = re.compile(r"^([0-2]?\d):([0-5]\d)\s*([AaPp][Mm])?$")

# Tried in order after ISO 8601
_DATE_FORMATS = (
    "%B %d, %Y",  # October 5, 2024
    "%b %d, %Y",  # Oct 5, 2024
    "%d %B %Y",  # 5 October 2024
    "%d %b %Y",  # 5 Oct 2024
    "%m/%d/%Y",  # 10/05/2024
    "%Y/%m/%d",  # 2024/10/05
)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def derive_slug(title: str) -> str:
    """Lowercase, diacritic-free, hyphen-separated form of a title."""
    decomposed = unicodedata.normalize("NFKD", str(title).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("-", stripped.strip()).strip("-")


def _parse_date(raw: str) -> datetime:
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    raise InvalidDate(raw)


def normalize_date(value: Any) -> str:
    """
    Canonical YYYY-MM-DD for a date-like value.

    Offset-aware inputs are shifted to UTC before the calendar date is taken;
    naive inputs are read as UTC already.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value.isoformat()
    else:
        parsed = _parse_date(_text(value))

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def normalize_time(value: Any) -> str:
    """Canonical 24-hour HH:MM. Accepts '9:30', '09:30', '9:30 am', '09:30PM'."""
    raw = _text(value)
    match = _TIME_PATTERN.match(raw)
    if not match:
        raise InvalidTime(raw)

    hours = int(match.group(1))
    minutes = int(match.group(2))
    period = (match.group(3) or "").lower()

    if period:
        if hours == 12:
            hours = 0
        if period == "pm":
            hours += 12

    if hours > 23:
        raise InvalidTime(raw, reason="hour out of range")
    return f"{hours:02d}:{minutes:02d}"


def _clean_list(name: str, value: Any) -> list[str]:
    # A lone string is a one-item list
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not value:
        raise MissingField(name)

    cleaned = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise MissingField(name)
        cleaned.append(item.strip())
    return cleaned


def validate_required_fields(candidate: Mapping[str, Any]) -> None:
    """Raise MissingField for the first required field that is blank."""
    for name in REQUIRED_STRING_FIELDS:
        if not _text(candidate.get(name)):
            raise MissingField(name)
    for name in REQUIRED_LIST_FIELDS:
        _clean_list(name, candidate.get(name))


def normalize_event(
    candidate: Mapping[str, Any],
    *,
    previous: Optional[Mapping[str, Any]] = None,
) -> NormalizedEvent:
    """
    Run the full pipeline over a raw candidate.

    `previous` is the stored record when updating; its slug is kept unless
    the title changed. Slugs supplied by callers are ignored.
    """
    validate_required_fields(candidate)

    title = _text(candidate["title"])
    slug = previous.get("slug") if previous else None
    if previous is None or _text(previous.get("title")) != title or not slug:
        slug = derive_slug(title)
    if not slug:
        raise MissingField("slug")

    event_date = normalize_date(candidate["date"])
    event_time = normalize_time(candidate["time"])

    fields = {name: _text(candidate[name]) for name in REQUIRED_STRING_FIELDS}
    fields.update({name: _clean_list(name, candidate[name]) for name in REQUIRED_LIST_FIELDS})
    fields.update(title=title, slug=slug, date=event_date, time=event_time)
    return NormalizedEvent(**fields)
