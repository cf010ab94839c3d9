import re

MINUTE = 60
HOUR = MINUTE * 60
DAY = HOUR * 24
WEEK = DAY * 7
YEAR = DAY * 365.25

DURATION_RE = re.compile(
    r"^(?P<sign>[+-])? ?(?P<value>\d+|\d+\.\d+) ?"
    r"(?P<unit>seconds?|secs?|s|minutes?|mins?|m|hours?|hrs?|h|days?|d|weeks?|w|years?|yrs?|y)"
    r"(?: (?P<direction>ago|from now))?$",
    re.IGNORECASE
)

UNIT_SECONDS = {
    "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
    "m": MINUTE, "min": MINUTE, "mins": MINUTE, "minute": MINUTE, "minutes": MINUTE,
    "h": HOUR, "hr": HOUR, "hrs": HOUR, "hour": HOUR, "hours": HOUR,
    "d": DAY, "day": DAY, "days": DAY,
    "w": WEEK, "week": WEEK, "weeks": WEEK,
    "y": YEAR, "yr": YEAR, "yrs": YEAR, "year": YEAR, "years": YEAR,
}

def parse_duration(value: str) -> int:
    """
    Parse a relative duration such as "3600s", "15 minutes", "2h" or
    "1 day ago" into whole seconds.

    Raises:
        ValueError: If the string does not match the duration grammar.
    """
    if not isinstance(value, str):
        raise ValueError(f"Duration must be a string, got {type(value).__name__}")

    match = DURATION_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    seconds = round(float(match.group("value")) * UNIT_SECONDS[match.group("unit").lower()])

    direction = match.group("direction")
    if match.group("sign") == "-" or (direction and direction.lower() == "ago"):
        return -seconds
    return seconds
