"""Parsing of human-friendly duration strings used by repository filters.

Accepts one or more ``<number><unit>`` groups, e.g. ``"1y"``, ``"30d"``,
``"2w3d"`` or ``"1.5h"``. Units: ``y`` (365 days), ``w``, ``d``, ``h``,
``m``, ``s`` and ``ms``. An empty string means "no duration".
"""

import re
from datetime import timedelta

from repo_keeper.exceptions import ConfigurationError

_UNITS: dict[str, timedelta] = {
    "y": timedelta(days=365),
    "w": timedelta(weeks=1),
    "d": timedelta(days=1),
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}

# "ms" must be tried before "m"
_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|y|w|d|h|m|s)")


def parse_duration(value: str) -> timedelta:
    """Parse a duration string into a timedelta.

    Args:
        value: Raw duration such as ``"1y"`` or ``"2w3d"``

    Returns:
        The parsed duration; ``timedelta(0)`` for an empty value

    Raises:
        ConfigurationError: If the value is not a valid duration
    """
    text = value.strip().replace(" ", "")
    if not text:
        return timedelta(0)

    total = timedelta(0)
    position = 0
    for match in _PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ConfigurationError(f"Invalid duration: {value!r}")
    return total
