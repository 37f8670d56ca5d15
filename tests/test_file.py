import io
from datetime import datetime, timezone

import pytest

from csvtable.celltype import CellType
from csvtable.dialect import Dialect, ErrorMode
from csvtable.encoding import Encoding, encode_text
from csvtable.errors import (
    CellError,
    ColumnOutOfRangeError,
    FileClosedError,
    HeaderNotFoundError,
    InvalidCellError,
    NoHeaderError,
    ParseError,
    RowOutOfRangeError,
)
from csvtable.file import File, ReadOptions

NO_HEADER = ReadOptions(header=False)
WITH_HEADER = ReadOptions(header=True)


def _table(headers, records):
    table = File()
    table.set_headers(headers)
    for record in records:
        table.append_record(record)
    return table


# cells


def test_cell_set_get_str():
    table = File()
    table.set_cell_value("A1", "hello")
    assert table.get_cell_value("A1") == "hello"


def test_cell_set_get_int():
    table = File()
    table.set_cell_value("B2", 42)
    assert table.get_cell_int("B2") == 42


def test_cell_set_get_float():
    table = File()
    table.set_cell_value("C3", 3.14)
    assert table.get_cell_float("C3") == 3.14


def test_cell_set_get_bool():
    table = File()
    table.set_cell_value("A1", True)
    assert table.get_cell_bool("A1") is True


def test_cell_set_get_date():
    table = File()
    now = datetime(2026, 4, 24, 12, 0, 0, tzinfo=timezone.utc)
    table.set_cell_value("A1", now)
    assert table.get_cell_date("A1") == now


def test_cell_get_type():
    table = File()
    table.set_cell_value("A1", 42)
    table.set_cell_value("B1", "hello")
    assert table.get_cell_type("A1") is CellType.INT
    assert table.get_cell_type("B1") is CellType.STRING


def test_cell_invalid_ref():
    with pytest.raises(InvalidCellError):
        File().set_cell_value("XYZ", "value")


def test_cell_empty():
    assert File().get_cell_value("A1") == ""


def test_cell_int_parse_failure():
    table = File()
    table.set_cell_value("A1", "abc")
    with pytest.raises(CellError) as info:
        table.get_cell_int("A1")
    assert info.value.cell == "A1"


def test_cell_header_row_is_out_of_range():
    table = File()
    table.set_headers(["a"])
    with pytest.raises(CellError) as info:
        table.set_cell_value("A1", "x")
    assert isinstance(info.value.cause, RowOutOfRangeError)
    table.set_cell_value("A2", "x")
    assert table.rows() == [["x"]]


# columns


def test_get_col():
    table = File.open_bytes(b"a,1,x\nb,2,y\nc,3,z\n", NO_HEADER)
    assert table.get_col(1) == ["1", "2", "3"]
    with pytest.raises(ColumnOutOfRangeError):
        table.get_col(5)


def test_get_col_by_name():
    table = _table(["id", "name"], [{"id": "1", "name": "Alice"}, {"id": "2", "name": "Bob"}])
    assert table.get_col_by_name("name") == ["Alice", "Bob"]
    with pytest.raises(HeaderNotFoundError):
        table.get_col_by_name("missing")


def test_set_col_values():
    table = File()
    table.set_col_values(1, ["new1", "new2"])
    assert table.rows() == [["", "new1"], ["", "new2"]]


def test_insert_col():
    table = _table(["a", "c"], [{"a": "1", "c": "3"}, {"a": "4", "c": "6"}])
    table.insert_col(1, "b", ["2", "5"])
    assert table.headers() == ["a", "b", "c"]
    assert table.rows() == [["1", "2", "3"], ["4", "5", "6"]]


def test_append_col():
    table = _table(["a"], [{"a": "1"}])
    table.append_col("b", [7])
    assert table.headers() == ["a", "b"]
    assert table.rows() == [["1", "7"]]


def test_remove_col():
    table = _table(["a", "b", "c"], [{"a": "1", "b": "2", "c": "3"}])
    table.remove_col(1)
    assert table.headers() == ["a", "c"]
    assert table.rows() == [["1", "3"]]


def test_remove_col_by_name():
    table = _table(["a", "b"], [{"a": "1", "b": "2"}])
    with pytest.raises(HeaderNotFoundError):
        table.remove_col_by_name("missing")
    table.remove_col_by_name("a")
    assert table.col_count() == 1


# opening and table shape


def test_new_file():
    assert File().row_count() == 0


def test_open_bytes_simple():
    table = File.open_bytes(b"a,b,c\n1,2,3\n4,5,6\n", NO_HEADER)
    assert table.row_count() == 3
    assert table.col_count() == 3


def test_open_bytes_with_header():
    table = File.open_bytes(b"name,age\nAlice,30\nBob,25\n", WITH_HEADER)
    assert table.has_header() is True
    assert table.row_count() == 2
    assert table.headers() == ["name", "age"]


def test_open_file_simple(tmp_path):
    path = tmp_path / "simple.csv"
    path.write_bytes(b"name,age\nAlice,30\nBob,25\nCarol,41\n")
    table = File.open_file(str(path), WITH_HEADER)
    assert table.row_count() == 3
    assert table.path() == str(path)


def test_open_reader_simple():
    assert File.open_reader(io.BytesIO(b"x,y\n1,2\n"), WITH_HEADER).row_count() == 1
    assert File.open_reader(io.StringIO("x,y\n1,2\n"), WITH_HEADER).rows() == [["1", "2"]]


def test_auto_sniff_delimiter():
    table = File.open_bytes(b"a;b;c\n1;2;3\n4;5;6\n", WITH_HEADER)
    assert table.col_count() == 3
    assert table.rows()[0] == ["1", "2", "3"]


def test_open_file_quoted(tmp_path):
    path = tmp_path / "quoted.csv"
    path.write_bytes(
        b'name,address,note\n'
        b'Alice,"123 Main St, Apt 4","She said ""hello"""\n'
        b'Bob,1 Road,"line1\nline2"\n'
        b'Carol,x,y\n'
    )
    table = File.open_file(path, WITH_HEADER)
    assert table.row_count() == 3
    rows = table.rows()
    assert rows[0][1] == "123 Main St, Apt 4"
    assert rows[0][2] == 'She said "hello"'
    assert "\n" in rows[1][2]


def test_dimension():
    table = File.open_bytes(b"a,b,c\n1,2,3\n", NO_HEADER)
    assert table.dimension() == "A1:C2"
    headed = File.open_bytes(b"a,b,c\n1,2,3\n", WITH_HEADER)
    assert headed.dimension() == "A1:C2"
    assert File().dimension() == ""


def test_close_idempotent():
    table = File()
    table.close()
    table.close()
    with pytest.raises(FileClosedError):
        table.rows()
    assert table.row_count() == 0


def test_stdlib_parser_option():
    table = File.open_bytes(b"a,b\n1,2\n", ReadOptions(stdlib_parser=True, header=True))
    assert table.row_count() == 1
    assert table.rows() == [["1", "2"]]


def test_utf16_with_bom():
    data = encode_text("a,b\n1,2\n", Encoding.UTF16LE, with_bom=True)
    table = File.open_bytes(data, WITH_HEADER)
    assert table.headers() == ["a", "b"]
    assert table.rows() == [["1", "2"]]


def test_utf8_bom_stripped():
    table = File.open_bytes(b"\xef\xbb\xbfa,b\n1,2\n", WITH_HEADER)
    assert table.headers() == ["a", "b"]


def test_strict_error_raises():
    with pytest.raises(ParseError):
        File.open_bytes(b'a,b\nx"y,1\n3,4\n', NO_HEADER)


def test_skip_mode_collects_errors():
    options = ReadOptions(header=False, dialect=Dialect(error_mode=ErrorMode.SKIP))
    table = File.open_bytes(b'a,b\nx"y,1\n3,4\n', options)
    assert table.rows() == [["a", "b"], ["3", "4"]]
    assert len(table.parse_errors()) == 1


def test_parallel_option_matches_sequential():
    data = b"a,b\n1,2\n3,4\n"
    parallel = File.open_bytes(data, ReadOptions(header=False, parallel_workers=4, parallel_threshold=0))
    assert parallel.rows() == File.open_bytes(data, NO_HEADER).rows()


def test_header_guessed():
    assert File.open_bytes(b"name,age\nAlice,30\n").has_header() is True
    assert File.open_bytes(b"1,2\n3,4\n").has_header() is False


# headers


def test_set_headers():
    table = File()
    table.set_headers(["a", "b"])
    assert table.has_header() is True
    assert table.headers() == ["a", "b"]


def test_get_by_header():
    table = _table(["name", "age"], [{"name": "Alice", "age": 30}])
    assert table.get_by_header(0, "age") == "30"
    with pytest.raises(RowOutOfRangeError):
        table.get_by_header(3, "age")


def test_get_by_header_no_header():
    with pytest.raises(NoHeaderError):
        File().get_by_header(0, "x")


def test_set_by_header():
    table = _table(["name", "age"], [{"name": "Alice", "age": 30}])
    table.set_by_header(0, "age", 31)
    assert table.get_by_header(0, "age") == "31"


def test_append_record():
    table = _table(["name", "age", "city"], [{"name": "Alice", "age": 30, "city": "Paris"}])
    assert table.get_record(0) == {"name": "Alice", "age": "30", "city": "Paris"}


def test_get_records():
    table = _table(["id", "v"], [{"id": 1, "v": "a"}, {"id": 2, "v": "b"}])
    records = table.get_records()
    assert len(records) == 2
    assert records[0]["v"] == "a"
    assert records[1]["v"] == "b"


def test_header_index():
    table = File()
    table.set_headers(["a", "b", "c"])
    assert table.header_index("b") == 1
    assert table.header_index("missing") is None