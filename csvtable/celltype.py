"""Cell value types: detecting them from Python values and inferring them from text."""

from __future__ import annotations

import enum
import math
import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class CellType(enum.Enum):
    """The kind of value a cell holds."""

    EMPTY = 0
    STRING = 1
    INT = 2
    FLOAT = 3
    BOOL = 4
    DATE = 5

    def __str__(self) -> str:
        return self.name.lower()


_INT_RE = re.compile(r"[+-]?[0-9]+\Z")
_DEC_FLOAT_RE = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\Z"
)
_HEX_FLOAT_RE = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+(?:\.[0-9a-fA-F]*)?|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+\Z"
)
_SPECIAL_FLOATS = {
    "inf": math.inf,
    "+inf": math.inf,
    "-inf": -math.inf,
    "infinity": math.inf,
    "+infinity": math.inf,
    "-infinity": -math.inf,
    "nan": math.nan,
}

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}

_FRACTION = r"(?P<F>[.,][0-9]+)?"
_DATE_PATTERNS = [
    re.compile(
        r"(?P<y>[0-9]{4})-(?P<m>[0-9]{2})-(?P<d>[0-9]{2})"
        r"T(?P<H>[0-9]{2}):(?P<M>[0-9]{2}):(?P<S>[0-9]{2})" + _FRACTION +
        r"(?P<z>Z|[+-][0-9]{2}:[0-9]{2})\Z"
    ),
    re.compile(
        r"(?P<y>[0-9]{4})-(?P<m>[0-9]{2})-(?P<d>[0-9]{2})"
        r"T(?P<H>[0-9]{1,2}):(?P<M>[0-9]{2}):(?P<S>[0-9]{2})" + _FRACTION + r"\Z"
    ),
    re.compile(
        r"(?P<y>[0-9]{4})-(?P<m>[0-9]{2})-(?P<d>[0-9]{2})"
        r" (?P<H>[0-9]{1,2}):(?P<M>[0-9]{2}):(?P<S>[0-9]{2})" + _FRACTION + r"\Z"
    ),
    re.compile(r"(?P<y>[0-9]{4})-(?P<m>[0-9]{2})-(?P<d>[0-9]{2})\Z"),
    re.compile(r"(?P<d>[0-9]{2})/(?P<m>[0-9]{2})/(?P<y>[0-9]{4})\Z"),
    re.compile(r"(?P<m>[0-9]{2})/(?P<d>[0-9]{2})/(?P<y>[0-9]{4})\Z"),
    re.compile(r"(?P<y>[0-9]{4})/(?P<m>[0-9]{2})/(?P<d>[0-9]{2})\Z"),
]


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _format_datetime(value: datetime) -> str:
    body = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    offset = value.utcoffset() if value.tzinfo is not None else None
    if not offset:
        return body + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{body}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def detect_cell_type(value: Any) -> tuple[CellType, str]:
    """Return the cell type of a Python value and its text form."""
    if value is None:
        return CellType.EMPTY, ""
    if isinstance(value, str):
        if value == "":
            return CellType.EMPTY, ""
        return CellType.STRING, value
    if isinstance(value, bool):
        return CellType.BOOL, "true" if value else "false"
    if isinstance(value, int):
        return CellType.INT, str(value)
    if isinstance(value, float):
        return CellType.FLOAT, _format_float(value)
    if isinstance(value, datetime):
        return CellType.DATE, _format_datetime(value)
    if isinstance(value, date):
        midnight = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        return CellType.DATE, _format_datetime(midnight)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return CellType.STRING, bytes(value).decode("utf-8", errors="replace")
    return CellType.STRING, str(value)


def _parse_int64(raw: str) -> int:
    if not _INT_RE.match(raw):
        raise ValueError(f"invalid integer {raw!r}")
    number = int(raw)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError(f"integer {raw!r} out of range")
    return number


def parse_float(raw: str) -> float:
    """Parse decimal, hexadecimal or special (Inf, NaN) floating-point text."""
    special = _SPECIAL_FLOATS.get(raw.lower())
    if special is not None:
        return special
    if _DEC_FLOAT_RE.match(raw):
        number = float(raw)
    elif _HEX_FLOAT_RE.match(raw):
        try:
            number = float.fromhex(raw)
        except OverflowError as exc:
            raise ValueError(f"float {raw!r} out of range") from exc
    else:
        raise ValueError(f"invalid float {raw!r}")
    if math.isinf(number):
        raise ValueError(f"float {raw!r} out of range")
    return number


def parse_int(raw: str) -> int:
    """Parse an integer; floating-point text is truncated towards zero."""
    try:
        return _parse_int64(raw)
    except ValueError:
        pass
    number = parse_float(raw)
    if not math.isfinite(number):
        raise ValueError(f"cannot convert {raw!r} to an integer")
    return int(number)


def parse_bool(raw: str) -> bool:
    """Parse 1/0, t/f and true/false in their accepted spellings."""
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"invalid boolean {raw!r}")


def _build_date(match: re.Match) -> datetime:
    parts = match.groupdict()
    hour = int(parts.get("H") or 0)
    minute = int(parts.get("M") or 0)
    second = int(parts.get("S") or 0)
    fraction = parts.get("F")
    micro = int((fraction[1:] + "000000")[:6]) if fraction else 0
    zone = parts.get("z")
    tz = timezone.utc
    if zone and zone != "Z":
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(sign * offset)
    return datetime(
        int(parts["y"]), int(parts["m"]), int(parts["d"]),
        hour, minute, second, micro, tzinfo=tz,
    )


def parse_date(raw: str) -> datetime:
    """Parse text in any of the supported date layouts into an aware datetime."""
    for pattern in _DATE_PATTERNS:
        match = pattern.match(raw)
        if match is None:
            continue
        try:
            return _build_date(match)
        except ValueError:
            continue
    raise ValueError(f'cannot parse date "{raw}"')


def infer_cell_type(raw: str) -> CellType:
    """Guess the type of a cell from its text."""
    if raw == "":
        return CellType.EMPTY
    try:
        _parse_int64(raw)
        return CellType.INT
    except ValueError:
        pass
    try:
        parse_float(raw)
        return CellType.FLOAT
    except ValueError:
        pass
    if raw.lower() in ("true", "false"):
        return CellType.BOOL
    try:
        parse_date(raw)
        return CellType.DATE
    except ValueError:
        return CellType.STRING


def value_to_string(value: Any) -> str:
    """Text form of a value as it would be stored in a cell."""
    if value is None:
        return ""
    return detect_cell_type(value)[1]