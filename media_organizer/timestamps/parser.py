"""
Filename timestamp parsing.

Media exported by chat apps and some phones is named after the Unix time it
was taken, either in seconds (10 digits) or milliseconds (13 digits), e.g.
``1640390400.jpg`` or ``1617235200000.mp4``. The filename is the only
authority for the timestamp repair; metadata is never consulted here.
"""
import re
from datetime import datetime
from pathlib import Path

from .. import config
from ..exceptions import InvalidTimestampError

DIGITS_RE = re.compile(r'[0-9]+')


def filename_stem(name: str) -> str:
    """Strips the last extension from a basename."""
    return name.rsplit('.', 1)[0] if '.' in name else name


def parse_filename_timestamp(name: str) -> int:
    """
    Parses a basename into epoch seconds.

    Raises:
        InvalidTimestampError: stem is not all ASCII digits, or has a digit
            count other than 10 (seconds) or 13 (milliseconds).
    """
    stem = filename_stem(Path(name).name)

    if not DIGITS_RE.fullmatch(stem):
        raise InvalidTimestampError(f"invalid filename: {name}")

    if len(stem) == config.MILLIS_DIGITS:
        # Truncate, never round
        return int(stem[:config.SECONDS_DIGITS])
    if len(stem) == config.SECONDS_DIGITS:
        return int(stem)

    raise InvalidTimestampError(f"invalid timestamp: {name}")


def to_local_datetime(instant: int) -> datetime:
    """
    Converts epoch seconds to a naive local datetime.

    Raises:
        InvalidTimestampError: the platform cannot represent the instant.
    """
    try:
        return datetime.fromtimestamp(instant)
    except (OverflowError, OSError, ValueError) as e:
        raise InvalidTimestampError(f"timestamp out of range: {instant} ({e})") from e
