"""Byte-order-mark detection and conversion between text and bytes."""

from __future__ import annotations

import enum
import io
from typing import BinaryIO


class Encoding(enum.Enum):
    """Character encodings understood by the reader and the writer."""

    AUTO = "auto"
    UTF8 = "utf-8"
    UTF16LE = "utf-16le"
    UTF16BE = "utf-16be"
    ISO88591 = "iso-8859-1"
    WINDOWS1252 = "windows-1252"

    def __str__(self) -> str:
        return self.value


_CODECS = {
    Encoding.AUTO: "utf-8",
    Encoding.UTF8: "utf-8",
    Encoding.UTF16LE: "utf-16-le",
    Encoding.UTF16BE: "utf-16-be",
    Encoding.ISO88591: "latin-1",
    Encoding.WINDOWS1252: "cp1252",
}

_BOMS = {
    Encoding.AUTO: b"\xef\xbb\xbf",
    Encoding.UTF8: b"\xef\xbb\xbf",
    Encoding.UTF16LE: b"\xff\xfe",
    Encoding.UTF16BE: b"\xfe\xff",
}

_UTF16 = (Encoding.UTF16LE, Encoding.UTF16BE)


def detect_bom(data: bytes) -> tuple[Encoding, int]:
    """Return the encoding named by a leading BOM and the BOM's length.

    Data without a BOM is taken to be UTF-8 with no offset.
    """
    if data[:3] == b"\xef\xbb\xbf":
        return Encoding.UTF8, 3
    if data[:2] == b"\xff\xfe":
        return Encoding.UTF16LE, 2
    if data[:2] == b"\xfe\xff":
        return Encoding.UTF16BE, 2
    return Encoding.UTF8, 0


def decode_bytes(data: bytes, encoding: Encoding = Encoding.UTF8) -> str:
    """Decode bytes to text; undecodable input becomes U+FFFD."""
    data = bytes(data)
    if encoding in _UTF16 and len(data) % 2:
        data = data[:-1]
    return data.decode(_CODECS[encoding], errors="replace")


def encode_text(
    text: str, encoding: Encoding = Encoding.UTF8, with_bom: bool = False
) -> bytes:
    """Encode text, optionally with a BOM.

    Characters the single-byte encodings cannot hold become ``?``.
    """
    if encoding in _UTF16:
        body = text.encode(_CODECS[encoding], errors="surrogatepass")
    else:
        body = text.encode(_CODECS[encoding], errors="replace")
    if with_bom and encoding in _BOMS:
        return _BOMS[encoding] + body
    return body


def open_decoder(stream: BinaryIO, encoding: Encoding = Encoding.UTF8) -> io.TextIOWrapper:
    """Wrap a binary stream in a text stream that keeps line endings intact.

    Closing the returned stream closes the wrapped one as well.
    """
    return io.TextIOWrapper(
        stream, encoding=_CODECS[encoding], errors="replace", newline=""
    )