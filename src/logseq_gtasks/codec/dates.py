"""Date helpers shared by the codec and the reconciler.

Logseq stores its preferred date format as a date-fns pattern
(``"MMM do, yyyy"``, ``"yyyy-MM-dd"``, ...). Only the tokens Logseq offers in
its settings are supported; anything else is treated as literal text.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Longest tokens first so "MMMM" wins over "MM".
_TOKENS = ("yyyy", "yy", "MMMM", "MMM", "MM", "M", "do", "dd", "d", "EEEE", "EEE", "E")


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def _tokenize(fmt: str) -> list[tuple[bool, str]]:
    """Split *fmt* into ``(is_token, text)`` parts. ``'quoted'`` text is literal."""
    parts: list[tuple[bool, str]] = []
    i = 0
    while i < len(fmt):
        if fmt[i] == "'":
            end = fmt.find("'", i + 1)
            end = len(fmt) if end == -1 else end
            parts.append((False, fmt[i + 1 : end]))
            i = end + 1
            continue
        for token in _TOKENS:
            if fmt.startswith(token, i):
                parts.append((True, token))
                i += len(token)
                break
        else:
            parts.append((False, fmt[i]))
            i += 1
    return parts


def format_date(value: date, fmt: str) -> str:
    """Render *value* with a date-fns style pattern."""
    out: list[str] = []
    for is_token, text in _tokenize(fmt):
        if not is_token:
            out.append(text)
        elif text == "yyyy":
            out.append(f"{value.year:04d}")
        elif text == "yy":
            out.append(f"{value.year % 100:02d}")
        elif text == "MMMM":
            out.append(_MONTHS[value.month - 1])
        elif text == "MMM":
            out.append(_MONTHS[value.month - 1][:3])
        elif text == "MM":
            out.append(f"{value.month:02d}")
        elif text == "M":
            out.append(str(value.month))
        elif text == "do":
            out.append(_ordinal(value.day))
        elif text == "dd":
            out.append(f"{value.day:02d}")
        elif text == "d":
            out.append(str(value.day))
        elif text == "EEEE":
            out.append(_WEEKDAYS[value.weekday()])
        else:
            out.append(_WEEKDAYS[value.weekday()][:3])
    return "".join(out)


_PATTERNS = {
    "yyyy": r"(?P<year>\d{4})",
    "yy": r"(?P<year2>\d{2})",
    "MMMM": "(?P<month_name>" + "|".join(_MONTHS) + ")",
    "MMM": "(?P<month_abbr>" + "|".join(m[:3] for m in _MONTHS) + ")",
    "MM": r"(?P<month>\d{2})",
    "M": r"(?P<month>\d{1,2})",
    "do": r"(?P<day>\d{1,2})(?:st|nd|rd|th)",
    "dd": r"(?P<day>\d{2})",
    "d": r"(?P<day>\d{1,2})",
    "EEEE": "(?:" + "|".join(_WEEKDAYS) + ")",
    "EEE": "(?:" + "|".join(w[:3] for w in _WEEKDAYS) + ")",
    "E": "(?:" + "|".join(w[:3] for w in _WEEKDAYS) + ")",
}


def parse_date(text: str, fmt: str) -> date:
    """Parse *text* written in the date-fns pattern *fmt*.

    Raises:
        ValueError: If *text* does not match *fmt* or names an impossible date.
    """
    pattern = "".join(_PATTERNS[t] if is_token else re.escape(t) for is_token, t in _tokenize(fmt))
    match = re.fullmatch(pattern, text.strip())
    if match is None:
        raise ValueError(f"{text!r} does not match date format {fmt!r}")
    groups = match.groupdict()
    if groups.get("year") is not None:
        year = int(groups["year"])
    elif groups.get("year2") is not None:
        year = 2000 + int(groups["year2"])
    else:
        raise ValueError(f"date format {fmt!r} has no year")
    if groups.get("month") is not None:
        month = int(groups["month"])
    elif groups.get("month_name") is not None:
        month = _MONTHS.index(groups["month_name"]) + 1
    elif groups.get("month_abbr") is not None:
        month = [m[:3] for m in _MONTHS].index(groups["month_abbr"]) + 1
    else:
        raise ValueError(f"date format {fmt!r} has no month")
    if groups.get("day") is None:
        raise ValueError(f"date format {fmt!r} has no day")
    return date(year, month, int(groups["day"]))


def parse_remote_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp from the Tasks API into an aware datetime."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_remote_date(value: date) -> str:
    """Date-only value as the Tasks API expects it: midnight UTC, millisecond precision."""
    return f"{value.isoformat()}T00:00:00.000Z"


def encode_deadline(value: date) -> int:
    return value.year * 10000 + value.month * 100 + value.day


def decode_deadline(value: int | str) -> date:
    """Decode Logseq's 8-digit ``yyyymmdd`` deadline encoding."""
    text = str(value).strip()
    if not re.fullmatch(r"\d{8}", text):
        raise ValueError(f"not an 8-digit date: {value!r}")
    return date(int(text[:4]), int(text[4:6]), int(text[6:]))
