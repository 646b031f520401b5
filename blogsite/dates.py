"""Timestamp parsing and pt-BR date labels."""

from __future__ import annotations

import re
from datetime import datetime, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

PT_BR_MONTHS = (
    "jan",
    "fev",
    "mar",
    "abr",
    "mai",
    "jun",
    "jul",
    "ago",
    "set",
    "out",
    "nov",
    "dez",
)

# The CMS emits offsets without a colon, e.g. 2021-03-25T19:25:28+0000.
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")

TimezoneLike = Union[str, tzinfo, None]


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a CMS timestamp into an aware datetime (UTC when no offset)."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        text = _COMPACT_OFFSET.sub(r"\1:\2", text)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _resolve_tz(tz: TimezoneLike) -> tzinfo:
    if tz is None:
        return timezone.utc
    if isinstance(tz, str):
        return timezone.utc if tz.upper() == "UTC" else ZoneInfo(tz)
    return tz


def format_date(value: Optional[datetime], tz: TimezoneLike = None) -> str:
    """Render ``dd MMM yyyy`` with pt-BR month abbreviations."""

    if value is None:
        return ""
    local = value.astimezone(_resolve_tz(tz))
    return f"{local.day:02d} {PT_BR_MONTHS[local.month - 1]} {local.year}"


def format_edited(value: Optional[datetime], tz: TimezoneLike = None) -> str:
    """Render the "last edited" label shown under a post title."""

    if value is None:
        return ""
    local = value.astimezone(_resolve_tz(tz))
    return f"* editado em {format_date(local, local.tzinfo)}, às {local:%H:%M}"


__all__ = ["PT_BR_MONTHS", "format_date", "format_edited", "parse_timestamp"]
