"""
Timestamp parsing for AI-authored phase times.

The model is asked for timestamps but the format drifts between
responses, and sometimes between phases of the same response:
"0.5s", "1:30", "00:01.3", "0.2s - 0.8s", "00:01 - 00:02". We accept
all of those and never raise. Text we can't read becomes 0 seconds so
one bad phase doesn't sink the rest of the analysis.
"""

import logging
import math
import re
from typing import Optional

from .models import TimeRange

logger = logging.getLogger(__name__)

RANGE_SEPARATOR = " - "

# Synthetic length for single instants and collapsed ranges
DEFAULT_SPAN_SECONDS = 1.0

_INTEGER = re.compile(r"^\d+$")
_DECIMAL = re.compile(r"^(?:\d+(?:\.\d*)?|\.\d+)$")

# "1.5 sec", "0.5 seconds", "1.2s (approx)": read the number, ignore the rest
_LEADING_DECIMAL = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_endpoint(raw: str) -> float:
    """
    Convert one timestamp to seconds.

    Accepts plain seconds ("0.2", "0.2s"), MM:SS ("1:30") and
    HH:MM:SS ("01:02:03"). Plain seconds are read from the leading
    number, so trailing words like "1.5 sec" are ignored.

    Clock formats are stricter: hours and minutes must be integers,
    but the seconds field may carry a fraction ("00:01.3" is 1.3s, not
    1s as an integer-only reading would give).

    Anything else returns 0.0.
    """
    cleaned = raw.strip()
    if cleaned[-1:] in ("s", "S"):
        cleaned = cleaned[:-1].strip()

    parts = [part.strip() for part in cleaned.split(":")]

    seconds = None
    if len(parts) == 1:
        match = _LEADING_DECIMAL.match(parts[0])
        if match:
            seconds = _parse_seconds(match.group())
    elif len(parts) in (2, 3):
        *leading, last = parts
        if all(_INTEGER.match(part) for part in leading):
            secs = _parse_seconds(last)
            if secs is not None:
                seconds = secs
                for multiplier, part in zip((60, 3600), reversed(leading)):
                    seconds += multiplier * int(part)

    if seconds is None:
        logger.warning("Unable to parse timestamp, using 0s", extra={"raw": raw})
        return 0.0

    return max(seconds, 0.0)


def parse_range(raw: str) -> TimeRange:
    """
    Convert a timestamp or "start - end" range to a TimeRange.

    Single instants become a one-second range starting at that instant.
    Zero-length ranges are widened the same way so the encoder never gets
    an empty clip. Reversed ranges are put back in order.
    """
    parts = raw.split(RANGE_SEPARATOR)

    if len(parts) != 2:
        start = parse_endpoint(raw)
        return TimeRange(start=start, end=start + DEFAULT_SPAN_SECONDS, widened=True)

    start = parse_endpoint(parts[0])
    end = parse_endpoint(parts[1])

    if end < start:
        logger.debug("Reversed timestamp range", extra={"raw": raw})
        start, end = end, start

    if start == end:
        return TimeRange(start=start, end=start + DEFAULT_SPAN_SECONDS, widened=True)

    return TimeRange(start=start, end=end)


def _parse_seconds(text: str) -> Optional[float]:
    if not _DECIMAL.match(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value
