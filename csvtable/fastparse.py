"""Whole-buffer CSV parsing, sequential or split across worker threads."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from .dialect import Dialect, ErrorMode
from .errors import BareQuoteError, FieldCountError, ParseError, UnclosedQuoteError
from .parser import _split_fields

MIN_PARALLEL_SIZE = 1024 * 1024


def _to_text(data) -> str:
    if isinstance(data, str):
        return data
    return bytes(data).decode("utf-8", errors="replace")


def _parse(
    text: str, dialect: Dialect
) -> tuple[list[list[str]], list[ParseError], ParseError | None]:
    rows: list[list[str]] = []
    errors: list[ParseError] = []
    if not text:
        return rows, errors, None

    strict = dialect.error_mode is ErrorMode.STRICT
    quote = dialect.quote
    comment = dialect.comment
    fields_per_record = dialect.fields_per_record
    expected = max(fields_per_record, 0)
    line = 1
    pos = 0
    skipped = 0
    n = len(text)

    while pos < n:
        if skipped < dialect.skip_rows:
            nl = text.find("\n", pos)
            if nl < 0:
                return rows, errors, None
            pos = nl + 1
            skipped += 1
            line += 1
            continue

        nl = text.find("\n", pos)
        if nl < 0:
            end = next_pos = n
        else:
            end, next_pos = nl, nl + 1

        if nl >= 0 and quote in text[pos:end]:
            count = text.count(quote, pos, end)
            while count % 2 == 1:
                nxt = text.find("\n", end + 1)
                if nxt < 0:
                    end = n
                    break
                count += text.count(quote, end, nxt)
                end = nxt
            next_pos = n if end >= n else end + 1

        raw = text[pos:end]
        if raw.endswith("\r"):
            raw = raw[:-1]

        if (comment and raw.startswith(comment)) or not raw:
            pos = next_pos
            line += 1
            continue

        try:
            row = _split_fields(raw, dialect)
        except (BareQuoteError, UnclosedQuoteError) as exc:
            err = ParseError(exc, line=line)
            if strict:
                return rows, errors, err
            errors.append(err)
            pos = next_pos
            line += 1
            continue

        mismatch = False
        if expected == 0:
            expected = len(row)
        elif fields_per_record > 0:
            mismatch = len(row) != fields_per_record
        elif fields_per_record == -1:
            mismatch = len(row) != expected
        if mismatch:
            err = ParseError(FieldCountError(), line=line)
            if strict:
                return rows, errors, err
            errors.append(err)

        rows.append(row)
        pos = next_pos
        line += 1
    return rows, errors, None


def parse_bytes(data, dialect: Dialect | None = None) -> tuple[list[list[str]], list[ParseError]]:
    """Parse a whole UTF-8 buffer into records.

    Blank lines are skipped. Returns ``(rows, errors)``; in strict mode the
    first malformed record raises :class:`ParseError` instead.
    """
    rows, errors, fatal = _parse(_to_text(data), dialect if dialect is not None else Dialect())
    if fatal is not None:
        raise fatal
    return rows, errors


def _quote_bytes(quote) -> bytes:
    if isinstance(quote, int):
        return bytes([quote])
    if isinstance(quote, str):
        return quote.encode("utf-8")
    return bytes(quote)


def find_safe_newline(data: bytes, chunk_start: int, target: int, quote) -> int:
    """Index of the first newline at or after ``target`` outside quotes, or -1."""
    q = _quote_bytes(quote)
    in_quote = data.count(q, chunk_start, min(target, len(data))) % 2 == 1
    i = target
    while i < len(data):
        nq = data.find(q, i)
        if in_quote:
            if nq < 0:
                return -1
            in_quote = False
            i = nq + len(q)
            continue
        nl = data.find(b"\n", i)
        if nl < 0:
            return -1
        if nq < 0 or nl < nq:
            return nl
        in_quote = True
        i = nq + len(q)
    return -1


def split_chunks(data: bytes, n: int, quote) -> list[bytes]:
    """Cut ``data`` into about ``n`` pieces, each ending on a record boundary."""
    if n <= 1 or not data:
        return [data]
    approx = len(data) // n
    chunks: list[bytes] = []
    start = 0
    for _ in range(n - 1):
        target = start + approx
        if target >= len(data):
            break
        cut = find_safe_newline(data, start, target, quote)
        if cut < 0 or cut <= start:
            break
        chunks.append(data[start : cut + 1])
        start = cut + 1
    if start < len(data):
        chunks.append(data[start:])
    return chunks


def _parse_chunk(chunk: bytes, dialect: Dialect):
    return _parse(_to_text(chunk), dialect)


def parse_bytes_parallel(
    data, dialect: Dialect | None = None, workers: int = 0
) -> tuple[list[list[str]], list[ParseError]]:
    """Parse a large buffer in chunks on several threads.

    Small inputs, or ``workers`` of one, are parsed sequentially. A
    non-positive ``workers`` uses one thread per CPU.
    """
    dialect = dialect if dialect is not None else Dialect()
    data = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    if workers <= 0:
        workers = os.cpu_count() or 1
    if workers <= 1 or len(data) < MIN_PARALLEL_SIZE:
        return parse_bytes(data, dialect)

    chunks = split_chunks(data, workers, dialect.quote)
    if len(chunks) <= 1:
        return parse_bytes(data, dialect)

    rest = replace(dialect, skip_rows=0)
    dialects = [dialect] + [rest] * (len(chunks) - 1)
    with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
        results = list(pool.map(_parse_chunk, chunks, dialects))

    rows: list[list[str]] = []
    errors: list[ParseError] = []
    for chunk_rows, chunk_errors, _ in results:
        rows.extend(chunk_rows)
        errors.extend(chunk_errors)

    strict = dialect.error_mode is ErrorMode.STRICT
    if strict:
        for _, _, fatal in results:
            if fatal is not None:
                raise fatal

    if dialect.fields_per_record == -1 and len(rows) > 1:
        expected = len(rows[0])
        for index, row in enumerate(rows[1:], start=2):
            if len(row) != expected:
                err = ParseError(FieldCountError(), line=index)
                if strict:
                    raise err
                errors.append(err)

    return rows, errors