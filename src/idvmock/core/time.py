from __future__ import annotations

from datetime import datetime, timezone

from idvmock.core.errors import InvalidTimestampError

# SQLite CURRENT_TIMESTAMP layout, stored without an offset but always UTC.
_SQLITE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format an aware datetime as ISO-8601 UTC with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def now_utc_iso() -> str:
    return to_iso(now_utc())


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse a stored timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (with ``Z`` or an explicit offset) and the legacy
    SQLite ``YYYY-MM-DD HH:MM:SS`` layout. Naive values are read as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            raise InvalidTimestampError("Timestamp is empty")
        try:
            parsed = datetime.strptime(text, _SQLITE_TIMESTAMP_FORMAT)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError as exc:
                raise InvalidTimestampError(f"Unparsable timestamp: {text!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
