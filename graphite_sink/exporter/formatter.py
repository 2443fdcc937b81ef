"""
Graphite plaintext line formatting.

One line per data point::

    <prefix>.<name>.<field> <value> <unix-seconds>\\n

Pure functions, no I/O.
"""
import math
from decimal import Decimal
from typing import Union

Number = Union[int, float]

# Logical field -> wire suffix. Percentile suffixes are derived from the
# fraction instead (see ``percentile_key``).
DEFAULT_FIELD_NAMES = {
    "count": "count",
    "value": "value",
    "min": "min",
    "max": "max",
    "mean": "mean",
    "stddev": "std-dev",
    "rate1": "one-minute",
    "rate5": "five-minute",
    "rate15": "fifteen-minute",
    "rate_mean": "mean-rate",
}


def format_number(value: Number) -> str:
    """
    Render a number in plain positional decimal notation.

    Integers are printed as-is. Floats use the shortest digits that
    round-trip, never exponent notation, and drop a trailing ``.0``::

        2.5 -> "2.5", 3.0 -> "3", 1e-05 -> "0.00001"
    """
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)

    value = float(value)
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"

    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def percentile_key(fraction: float) -> str:
    """
    Field suffix for a percentile fraction: ``fraction * 100`` with the
    decimal point removed (0.5 -> "50", 0.95 -> "95", 0.999 -> "999").
    """
    return format_number(fraction * 100.0).replace(".", "", 1)


def metric_path(prefix: str, name: str, field: str) -> str:
    if prefix:
        return f"{prefix}.{name}.{field}"
    return f"{name}.{field}"


def format_line(prefix: str, name: str, field: str, value: Number, timestamp: int) -> str:
    """
    Format one data point as a Graphite plaintext line (newline included).

    Args:
        prefix: Prefix prepended to every metric path (may be empty)
        name: Metric name as registered
        field: Field suffix (e.g. "count", "95")
        value: Numeric value
        timestamp: Unix time in seconds

    Returns:
        The wire line, e.g. ``"app.requests.count 42 1700000000\\n"``
    """
    return f"{metric_path(prefix, name, field)} {format_number(value)} {int(timestamp)}\n"
