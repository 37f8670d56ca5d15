import io

import pytest

from csvtable.dialect import Dialect, ErrorMode
from csvtable.errors import (
    BareQuoteError,
    FieldCountError,
    ParseError,
    UnclosedQuoteError,
)
from csvtable.parser import Parser, quote_balance, read_all


def rows(text, dialect=None):
    return read_all(io.StringIO(text), dialect or Dialect())


def test_simple():
    assert rows("a,b,c\n1,2,3\n") == [["a", "b", "c"], ["1", "2", "3"]]


def test_empty_lines():
    assert rows("a,b\n\n1,2\n") == [["a", "b"], [""], ["1", "2"]]


def test_quoted():
    assert rows('a,"b,c",d\n') == [["a", "b,c", "d"]]


def test_escaped_quote():
    assert rows('a,"b""c",d\n')[0][1] == 'b"c'


def test_embedded_newline():
    assert rows('a,"b\nc",d\n') == [["a", "b\nc", "d"]]


def test_crlf():
    assert rows("a,b\r\n1,2\r\n") == [["a", "b"], ["1", "2"]]


def test_mixed_line_endings():
    assert rows("a,b\n1,2\r\n3,4\n") == [["a", "b"], ["1", "2"], ["3", "4"]]


def test_tab_delimiter():
    assert rows("a\tb\n1\t2\n", Dialect(delimiter="\t")) == [["a", "b"], ["1", "2"]]


def test_semicolon_delimiter():
    assert rows("a;b\n1;2\n", Dialect(delimiter=";"))[1][1] == "2"


def test_trim_leading():
    assert rows("  a, b , c\n", Dialect(trim_leading_space=True)) == [["a", "b ", "c"]]


def test_comment():
    assert rows("# comment\na,b\n1,2\n", Dialect(comment="#")) == [["a", "b"], ["1", "2"]]


def test_bare_quote():
    with pytest.raises(ParseError) as info:
        rows('a,"b"c\n')
    assert isinstance(info.value.cause, BareQuoteError)


def test_lazy_quotes():
    assert rows('a,"b"c,d\n', Dialect(lazy_quotes=True)) == [["a", "b", "c", "d"]]


def test_unclosed_quote():
    with pytest.raises(ParseError) as info:
        rows('"unclosed')
    assert isinstance(info.value.cause, UnclosedQuoteError)


def test_no_trailing_newline():
    assert rows("a,b\n1,2") == [["a", "b"], ["1", "2"]]


def test_empty_input():
    with pytest.raises(StopIteration):
        next(Parser(io.StringIO(""), Dialect()))


def test_skip_rows():
    assert rows("skip1\nskip2\na,b\n1,2\n", Dialect(skip_rows=2)) == [["a", "b"], ["1", "2"]]


def test_fields_per_record():
    with pytest.raises(ParseError) as info:
        rows("a,b\n1,2,3\n", Dialect(fields_per_record=2))
    assert isinstance(info.value.cause, FieldCountError)


def test_fields_per_record_consistent():
    with pytest.raises(ParseError) as info:
        rows("a,b\n1,2,3\n", Dialect(fields_per_record=-1))
    assert isinstance(info.value.cause, FieldCountError)


def test_error_mode_skip_unclosed():
    assert rows('a,"unclosed', Dialect(error_mode=ErrorMode.SKIP)) == []


def test_error_mode_collect_keeps_mismatched_row():
    dialect = Dialect(fields_per_record=2, error_mode=ErrorMode.COLLECT)
    assert rows("a,b\n1,2,3\n4,5\n", dialect) == [["a", "b"], ["1", "2", "3"], ["4", "5"]]


def test_error_mode_skip_drops_mismatched_row():
    dialect = Dialect(fields_per_record=2, error_mode=ErrorMode.SKIP)
    assert rows("a,b\n1,2,3\n4,5\n", dialect) == [["a", "b"], ["4", "5"]]


def test_error_position():
    with pytest.raises(ParseError) as info:
        rows('a,b\n"x"y,1\n')
    assert info.value.line == 2
    assert info.value.offset == 11


def test_binary_stream():
    assert read_all(io.BytesIO(b"a,b\n1,2\n"), Dialect()) == [["a", "b"], ["1", "2"]]


def test_iteration_and_line_count():
    parser = Parser(io.StringIO("a,b\n1,2\n"), Dialect())
    assert list(parser) == [["a", "b"], ["1", "2"]]
    assert parser.line() == 3


def test_iteration_resumes_after_error():
    parser = Parser(io.StringIO('"x"y\nok\n'), Dialect())
    with pytest.raises(ParseError):
        next(parser)
    assert next(parser) == ["ok"]


def test_quote_balance():
    assert quote_balance('a,"b', '"') is True
    assert quote_balance('"a"', '"') is False