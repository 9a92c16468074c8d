import time
from datetime import datetime, timedelta, timezone

from Vesting_Ledger.vl_shared import errors

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_timestamp(value) -> int:
    """Normalise a boundary timestamp to epoch milliseconds.

    Accepts ISO-8601 strings (a trailing ``Z`` is read as UTC), ``datetime``
    objects (naive ones are taken as UTC) and integer epoch milliseconds.
    """
    if isinstance(value, bool):
        raise errors.InvalidTimestampError(value)
    if isinstance(value, int):
        if value < 0:
            raise errors.InvalidTimestampError(value)
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise errors.InvalidTimestampError(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - EPOCH) // timedelta(milliseconds=1)
    raise errors.InvalidTimestampError(value)


def to_iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat().replace("+00:00", "Z")
