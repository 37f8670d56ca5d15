"""Settings that describe how CSV text is laid out."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ErrorMode(enum.Enum):
    """How malformed records are handled while reading."""

    STRICT = 0
    SKIP = 1
    COLLECT = 2


@dataclass
class Dialect:
    """Delimiter, quoting and record rules for reading and writing CSV."""

    delimiter: str = ","
    quote: str = '"'
    comment: str | None = None
    lazy_quotes: bool = False
    trim_leading_space: bool = False
    crlf: bool = False
    fields_per_record: int = 0
    skip_rows: int = 0
    error_mode: ErrorMode = ErrorMode.STRICT