"""Reading and writing CSV tables in gzip, bzip2 or zstd compressed files."""

from __future__ import annotations

import bz2
import contextlib
import enum
import gzip
import io
import os
from typing import IO

import zstandard

from .file import File, ReadOptions
from .iterator import RowIterator, stream_reader
from .writer import CsvWriter

_CHUNK = 64 * 1024


class Format(enum.Enum):
    """Compression format of a file."""

    NONE = "none"
    GZIP = "gzip"
    BZIP2 = "bzip2"
    ZSTD = "zstd"

    def __str__(self) -> str:
        return self.value


_SUFFIXES = (
    (Format.GZIP, (".gz", ".gzip")),
    (Format.BZIP2, (".bz2", ".bzip2")),
    (Format.ZSTD, (".zst", ".zstd")),
)


def detect_format(path: str | os.PathLike) -> Format:
    """Compression format named by the file extension, case-insensitively."""
    lower = str(os.fspath(path)).lower()
    for fmt, suffixes in _SUFFIXES:
        if lower.endswith(suffixes):
            return fmt
    return Format.NONE


def decode(data: bytes, fmt: Format) -> bytes:
    """Decompress ``data`` held in the given format."""
    if fmt is Format.NONE:
        return bytes(data)
    if fmt is Format.GZIP:
        return gzip.decompress(data)
    if fmt is Format.BZIP2:
        return bz2.decompress(data)
    if fmt is Format.ZSTD:
        dctx = zstandard.ZstdDecompressor()
        with dctx.stream_reader(io.BytesIO(data)) as reader:
            return b"".join(iter(lambda: reader.read(_CHUNK), b""))
    raise ValueError("unsupported compression format")


def encode(data: bytes, fmt: Format) -> bytes:
    """Compress ``data`` into the given format; bzip2 output is not supported."""
    if fmt is Format.NONE:
        return bytes(data)
    if fmt is Format.GZIP:
        return gzip.compress(data)
    if fmt is Format.BZIP2:
        raise ValueError("bzip2 write not supported")
    if fmt is Format.ZSTD:
        return zstandard.ZstdCompressor().compress(data)
    raise ValueError("unsupported compression format")


def open_compressed(path: str | os.PathLike, options: ReadOptions | None = None) -> File:
    """Open a CSV file, decompressing it according to its extension."""
    with open(path, "rb") as handle:
        data = handle.read()
    return File.open_bytes(decode(data, detect_format(path)), options)


def _table_bytes(file: File) -> bytes:
    buffer = io.StringIO()
    writer = CsvWriter(buffer)
    if file.has_header():
        writer.write_row(file.headers())
    writer.write_all(file.rows())
    return buffer.getvalue().encode("utf-8")


def save_as(file: File, path: str | os.PathLike) -> None:
    """Write a table as CSV, compressed according to the extension of ``path``."""
    payload = encode(_table_bytes(file), detect_format(path))
    with open(path, "wb") as handle:
        handle.write(payload)


def _wrap_decoder(handle: IO[bytes], fmt: Format) -> IO[bytes]:
    if fmt is Format.NONE:
        return handle
    if fmt is Format.GZIP:
        return gzip.GzipFile(fileobj=handle, mode="rb")
    if fmt is Format.BZIP2:
        return bz2.BZ2File(handle, "rb")
    if fmt is Format.ZSTD:
        return zstandard.ZstdDecompressor().stream_reader(handle)
    raise ValueError("unsupported compression format")


def open_stream_reader(
    path: str | os.PathLike, options: ReadOptions | None = None
) -> RowIterator:
    """Stream records from a possibly compressed file.

    Closing the returned iterator closes the decompressor and the file.
    """
    stack = contextlib.ExitStack()
    try:
        handle = stack.enter_context(open(path, "rb"))
        wrapped = _wrap_decoder(handle, detect_format(path))
        if wrapped is not handle:
            stack.callback(wrapped.close)
        inner = stream_reader(wrapped, options)
        stack.callback(inner.close)
    except BaseException:
        stack.close()
        raise
    return RowIterator(inner.headers(), inner, stack)