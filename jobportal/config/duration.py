"""Duration parsing for retention horizons and sweep intervals."""

import re

_ISO_PATTERN = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$")
_HUMAN_PATTERN = re.compile(r"(\d+)\s*([smhd])")

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed."""

    pass


def parse_duration(duration_str: str) -> int:
    """Parse a duration string to whole seconds.

    Accepts human-readable values ("90d", "1h", "5s", "1h30m") and ISO-8601
    durations ("P90D", "PT1H", "PT5S").

    Args:
        duration_str: Duration string to parse

    Returns:
        Duration in seconds (always positive)

    Raises:
        DurationParseError: If the string is empty, malformed or zero

    Examples:
        >>> parse_duration("90d")
        7776000
        >>> parse_duration("PT5S")
        5
    """
    if not isinstance(duration_str, str) or not duration_str.strip():
        raise DurationParseError("Duration string cannot be empty")

    cleaned = duration_str.strip()
    if cleaned.upper().startswith("P"):
        seconds = _parse_iso8601(cleaned.upper())
    else:
        seconds = _parse_human_readable(cleaned.lower())

    if seconds == 0:
        raise DurationParseError(f"Duration cannot be zero: '{duration_str}'")

    return seconds


def _parse_iso8601(value: str) -> int:
    match = _ISO_PATTERN.match(value)
    if not match or value in ("P", "PT"):
        raise DurationParseError(
            f"Invalid ISO-8601 duration format: '{value}'. "
            "Expected format like 'P90D', 'PT1H', or 'PT5S'"
        )

    days, hours, minutes, seconds = match.groups()
    total = 0
    total += int(days or 0) * _UNIT_SECONDS["d"]
    total += int(hours or 0) * _UNIT_SECONDS["h"]
    total += int(minutes or 0) * _UNIT_SECONDS["m"]
    total += int(float(seconds or 0))
    return total


def _parse_human_readable(value: str) -> int:
    matches = _HUMAN_PATTERN.findall(value)
    if not matches:
        raise DurationParseError(
            f"Invalid duration format: '{value}'. "
            "Expected format like '5s', '1h', '90d', or combinations like '1h30m'"
        )

    # Reject leftovers such as "10x" or "1h!"
    consumed = "".join(f"{num}{unit}" for num, unit in matches)
    if consumed != re.sub(r"\s+", "", value):
        raise DurationParseError(
            f"Invalid characters in duration: '{value}'. "
            "Use only digits and units: s, m, h, d"
        )

    return sum(int(num) * _UNIT_SECONDS[unit] for num, unit in matches)


def validate_duration_range(
    duration_seconds: int,
    min_seconds: int,
    max_seconds: int,
    label: str = "Duration",
) -> None:
    """Validate that a duration falls inside [min_seconds, max_seconds].

    Raises:
        DurationParseError: If the duration is outside the range
    """
    if duration_seconds < min_seconds:
        raise DurationParseError(
            f"{label} too short: {seconds_to_human_readable(duration_seconds)}. "
            f"Minimum is {seconds_to_human_readable(min_seconds)}."
        )

    if duration_seconds > max_seconds:
        raise DurationParseError(
            f"{label} too long: {seconds_to_human_readable(duration_seconds)}. "
            f"Maximum is {seconds_to_human_readable(max_seconds)}."
        )


def seconds_to_human_readable(seconds: int) -> str:
    """Render seconds with the largest whole unit ("5 seconds", "1 hour", "90 days")."""
    for unit_name, unit_seconds in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= unit_seconds:
            amount = seconds // unit_seconds
            return f"{amount} {unit_name}{'s' if amount != 1 else ''}"
    return f"{seconds} second{'s' if seconds != 1 else ''}"
