"""Timestamp parsing and manifest ordering."""

import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from .models import MediaManifestEntry

# Extended and basic ISO-8601 forms; the media API emits "+0000" offsets.
_ISO_TIMESTAMP = re.compile(
    r"""
    (?P<year>\d{4})-?(?P<month>\d{2})-?(?P<day>\d{2})
    (?:[T\ ]
        (?P<hour>\d{2}):?(?P<minute>\d{2})
        (?::?(?P<second>\d{2})(?:[.,](?P<fraction>\d+))?)?
    )?
    \s*(?P<offset>Z|[+-]\d{2}(?::?\d{2})?)?
    """,
    re.VERBOSE | re.IGNORECASE,
)


def _parse_offset(offset: Optional[str]) -> timezone:
    if not offset or offset.upper() == "Z":
        return timezone.utc
    digits = offset[1:].replace(":", "")
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:] or 0))
    return timezone(-delta if offset[0] == "-" else delta)


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse an ISO-8601-like timestamp.

    Accepts extended (``2025-04-16T15:58:54``) and basic (``20250416T155854``)
    layouts, fractional seconds of any length (truncated to microseconds), and
    ``Z``, ``+HH``, ``+HHMM`` or ``+HH:MM`` offsets. Naive values are taken as
    UTC so every parsed timestamp is comparable. The result does not depend on
    the interpreter's ``datetime.fromisoformat``.

    Returns:
        Timezone-aware datetime, or None if the value cannot be parsed
    """
    if not value or not value.strip():
        return None

    match = _ISO_TIMESTAMP.fullmatch(value.strip())
    if match is None:
        return None

    fields = match.groupdict()
    fraction = (fields["fraction"] or "")[:6].ljust(6, "0")
    try:
        return datetime(
            int(fields["year"]),
            int(fields["month"]),
            int(fields["day"]),
            int(fields["hour"] or 0),
            int(fields["minute"] or 0),
            int(fields["second"] or 0),
            int(fraction),
            tzinfo=_parse_offset(fields["offset"]),
        )
    except ValueError:
        return None


def newest_first_key(timestamp: str) -> Tuple[int, float]:
    """
    Sort key placing valid timestamps newest first, unparsable ones last.

    Unparsable timestamps share one key, so a stable sort keeps their
    relative order.
    """
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return (1, 0.0)
    return (0, -parsed.timestamp())


def sort_newest_first(entries: List[MediaManifestEntry]) -> List[MediaManifestEntry]:
    """Return entries sorted by timestamp descending; ties keep input order."""
    return sorted(entries, key=lambda entry: newest_first_key(entry.timestamp))
