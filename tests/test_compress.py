import bz2
import gzip

import pytest

from csvtable.compress import (
    Format,
    decode,
    detect_format,
    encode,
    open_compressed,
    open_stream_reader,
    save_as,
)
from csvtable.file import File, ReadOptions


def two_user_table():
    f = File()
    f.set_headers(["id", "name"])
    f.append_record({"id": 1, "name": "Alice"})
    f.append_record({"id": 2, "name": "Bob"})
    return f


def id_table(count):
    f = File()
    f.set_headers(["id"])
    for i in range(count):
        f.append_record({"id": i})
    return f


@pytest.mark.parametrize(
    "path, expected",
    [
        ("file.csv", Format.NONE),
        ("file.csv.gz", Format.GZIP),
        ("file.csv.bz2", Format.BZIP2),
        ("file.CSV.GZ", Format.GZIP),
        ("file.csv.zst", Format.ZSTD),
        ("file.csv.zstd", Format.ZSTD),
        ("file.CSV.ZST", Format.ZSTD),
    ],
)
def test_detect_format(path, expected):
    assert detect_format(path) is expected


def test_format_names():
    paths = ["a.csv", "a.csv.gz", "a.csv.bz2", "a.csv.zst"]
    assert [str(detect_format(p)) for p in paths] == ["none", "gzip", "bzip2", "zstd"]


@pytest.mark.parametrize("name", ["out.csv.gz", "out.csv.zst", "out.csv"])
def test_round_trip(tmp_path, name):
    path = tmp_path / name
    save_as(two_user_table(), path)
    assert path.stat().st_size > 0
    opened = open_compressed(path, ReadOptions(header=True))
    assert opened.row_count() == 2
    assert opened.get_records() == [
        {"id": "1", "name": "Alice"},
        {"id": "2", "name": "Bob"},
    ]


def test_gzip_output_has_magic(tmp_path):
    path = tmp_path / "out.csv.gz"
    save_as(two_user_table(), path)
    data = path.read_bytes()
    assert data[:2] == b"\x1f\x8b"
    assert gzip.decompress(data) == b"id,name\n1,Alice\n2,Bob\n"


def test_bzip2_write_not_supported(tmp_path):
    with pytest.raises(ValueError):
        save_as(two_user_table(), tmp_path / "out.csv.bz2")


def test_bzip2_read(tmp_path):
    path = tmp_path / "in.csv.bz2"
    path.write_bytes(bz2.compress(b"a,b\n1,2\n3,4\n"))
    f = open_compressed(path, ReadOptions(header=True))
    assert f.rows() == [["1", "2"], ["3", "4"]]


def test_open_plain_file(tmp_path):
    path = tmp_path / "plain.csv"
    path.write_bytes(b"a,b\n1,2\n")
    f = open_compressed(path, ReadOptions(header=True))
    assert f.row_count() == 1


@pytest.mark.parametrize("fmt", [Format.NONE, Format.GZIP, Format.ZSTD])
def test_encode_decode_round_trip(fmt):
    payload = b"x,y\n" * 500
    assert decode(encode(payload, fmt), fmt) == payload


def test_decode_bzip2():
    assert decode(bz2.compress(b"abc"), Format.BZIP2) == b"abc"


@pytest.mark.parametrize("name", ["read.csv.gz", "read.csv.zst", "read.csv"])
def test_stream_reader(tmp_path, name):
    path = tmp_path / name
    save_as(id_table(50), path)
    with open_stream_reader(path, ReadOptions(header=True)) as it:
        rows = list(it)
    assert len(rows) == 50
    assert rows[49] == ["49"]
    assert it.headers() == ["id"]


def test_stream_reader_bzip2(tmp_path):
    path = tmp_path / "read.csv.bz2"
    path.write_bytes(bz2.compress(b"id\n1\n2\n"))
    with open_stream_reader(path, ReadOptions(header=True)) as it:
        rows = list(it)
    assert rows == [["1"], ["2"]]


def test_stream_reader_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_stream_reader(tmp_path / "missing.csv.gz")