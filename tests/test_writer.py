import io

import pytest

from csvtable.dialect import Dialect
from csvtable.writer import CsvWriter


def _write(rows, dialect=None):
    buf = io.StringIO()
    w = CsvWriter(buf, dialect or Dialect())
    for row in rows:
        w.write_row(row)
    w.flush()
    return buf.getvalue()


def test_writer_simple():
    assert _write([["a", "b", "c"]]) == "a,b,c\n"


def test_writer_quote_on_delimiter():
    assert _write([["hello, world", "bye"]]) == '"hello, world",bye\n'


def test_writer_quote_on_newline():
    assert _write([["multi\nline", "ok"]]) == '"multi\nline",ok\n'


def test_writer_escape_quote():
    assert _write([['she said "hi"']]) == '"she said ""hi"""\n'


def test_writer_crlf():
    assert _write([["a", "b"]], Dialect(crlf=True)) == "a,b\r\n"


def test_writer_write_all():
    buf = io.StringIO()
    CsvWriter(buf, Dialect()).write_all([["a", "b"], ["1", "2"]])
    assert buf.getvalue() == "a,b\n1,2\n"


def test_writer_empty_row():
    assert _write([[]]) == "\n"


def test_writer_custom_delimiter_quotes_only_that_delimiter():
    out = _write([["a;b", "c,d"]], Dialect(delimiter=";"))
    assert out == '"a;b";c,d\n'


def test_writer_buffers_until_flush():
    buf = io.StringIO()
    w = CsvWriter(buf, Dialect())
    w.write_row(["a", "b"])
    assert buf.getvalue() == ""
    w.flush()
    assert buf.getvalue() == "a,b\n"


class _BrokenStream:
    def write(self, data):
        raise OSError("disk full")


def test_writer_error_is_sticky():
    w = CsvWriter(_BrokenStream(), Dialect())
    w.write_row(["a"])
    with pytest.raises(OSError, match="disk full"):
        w.flush()
    with pytest.raises(OSError, match="disk full"):
        w.write_row(["b"])