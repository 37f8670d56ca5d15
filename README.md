# csvtable

A library and small command-line tool for working with CSV data.

- Reads CSV from files, bytes or streams. It detects a byte-order mark and the delimiter (`,`, `;`, tab or `|`), and when asked it guesses whether the first row is a header.
- Handles quoted fields, doubled quotes, embedded newlines, comment lines and skipped leading rows. Malformed records can be raised, skipped or collected (`ErrorMode.STRICT`, `SKIP`, `COLLECT` in `csvtable.dialect`).
- Decodes and encodes UTF-8, UTF-16 LE/BE, ISO-8859-1 and Windows-1252 (`csvtable.encoding`).
- Addresses cells spreadsheet-style (`A1`, `AA27`). It reads and writes typed values: int, float, bool and date.
- Works with columns and headers, and with rows as dicts keyed by header.
- Streams rows with `RowIterator`.
- Reads plain, gzip, bzip2 and zstd files and writes plain, gzip and zstd files. bzip2 output is not supported.
- Tokenizes and parses a small SQL-like `SELECT` language, and evaluates its `WHERE` expressions against a row.

## Installation

```
pip install csvtable
```

## Reading and editing tables

```python
from csvtable.file import File, ReadOptions

f = File.open_bytes(b"name,age\nAlice,30\nBob,25\n", ReadOptions(header=True))
print(f.headers())                 # ['name', 'age']
print(f.row_count())               # 2
print(f.get_by_header(0, "age"))   # '30'
print(f.get_records())             # [{'name': 'Alice', 'age': '30'}, ...]

t = File()
t.set_cell_value("B2", 42)
print(t.get_cell_int("B2"))        # 42
print(t.dimension())               # 'A1:B2'
```

`ReadOptions` has these fields:

- `header`: `True`, `False`, or `None` to guess.
- `encoding`: an `Encoding`, `AUTO` by default.
- `dialect`: a `csvtable.dialect.Dialect`.
- `auto_sniff`: sniff the delimiter.
- `stdlib_parser`: parse with Python's `csv` module.
- `parallel_workers` and `parallel_threshold`: split large inputs across threads.

`File` also offers column operations: `get_col`, `get_col_by_name`, `set_col_values`, `insert_col`, `append_col`, `remove_col` and `remove_col_by_name`. Its typed getters are `get_cell_float`, `get_cell_bool`, `get_cell_date` and `get_cell_type`. Errors are raised as subclasses of `csvtable.errors.CsvError`.

## Cell coordinates

```python
from csvtable.coords import cell_name_to_coordinates, coordinates_to_cell_name, split_cell_range

cell_name_to_coordinates("AA27")      # (27, 27)
coordinates_to_cell_name(703, 1)      # 'AAA1'
split_cell_range("A1:C10")            # (1, 1, 3, 10)
```

## Parsing and writing records directly

```python
import io
from csvtable.parser import read_all
from csvtable.writer import CsvWriter

rows = read_all(io.StringIO('a,"b,c"\n1,2\n'))   # [['a', 'b,c'], ['1', '2']]

out = io.StringIO()
CsvWriter(out).write_all([["hello, world", "bye"]])
out.getvalue()                                   # '"hello, world",bye\n'
```

`csvtable.fastparse.parse_bytes` parses a whole UTF-8 buffer at once and returns `(rows, errors)`. `parse_bytes_parallel` does the same on several threads.

## Streaming

```python
from csvtable.file import ReadOptions
from csvtable.iterator import stream_reader_from_file

with stream_reader_from_file("data.csv", ReadOptions(header=True)) as it:
    for row in it:
        print(it.row_index(), it.record())
```

## Compressed files

The compression format is chosen from the file extension: `.gz`/`.gzip`, `.bz2`/`.bzip2` or `.zst`/`.zstd`. Any other extension means plain CSV.

```python
from csvtable.compress import open_compressed, save_as, open_stream_reader

save_as(f, "out.csv.gz")
again = open_compressed("out.csv.gz", ReadOptions(header=True))

with open_stream_reader("out.csv.gz", ReadOptions(header=True)) as it:
    for row in it:
        ...
```

## Query expressions

```python
from csvtable.sql.sqlparser import parse
from csvtable.sql.evaluate import eval_predicate

stmt = parse("SELECT name FROM t WHERE age >= 30 AND name LIKE 'A%' ORDER BY age DESC LIMIT 5")
eval_predicate(stmt.where, {"name": "Alice", "age": "35"})   # True
```

The parser understands:

- projections, including `*`, `COUNT`, `SUM`, `AVG`, `MIN` and `MAX`, with `AS` aliases;
- `FROM`, `WHERE`, `GROUP BY`, `ORDER BY ... ASC|DESC` and `LIMIT`.

`WHERE` supports these operators:

- `=`, `!=`/`<>`, `<`, `>`, `<=` and `>=`, which compare numerically when both sides are numbers;
- `LIKE`;
- `IS [NOT] NULL`;
- `AND`, `OR`, `NOT` and parentheses.

## Command line

```
csvtable head -n 5 data.csv
csvtable tail -n 5 data.csv
csvtable stats data.csv
csvtable filter -w "age > 25" data.csv
csvtable gen-struct -name User -package models data.csv
csvtable --help
```

- `head` and `tail` print the header and the first or last N rows (10 by default). Pass `--no-header` for files without a header row.
- `stats` prints the row and column counts. For each column it also prints the inferred type, the number of empty cells and the number of distinct values.
- `filter -w "col op value"` prints the rows that match. The operators are `==`, `!=`, `<`, `>`, `<=`, `>=`, `contains`, `starts` and `regex`. Comparisons are numeric when the value is a number.
- `gen-struct` prints a struct definition with one field per column. Each field gets an inferred type (`int64`, `float64`, `bool`, `time.Time` or `string`) and a `csv:"header"` tag.

## What it does not do

- There is no query executor. A parsed `Statement` is not run against a table: projections, `GROUP BY`, aggregates, `ORDER BY` and `LIMIT` are parsed but not applied. Only `WHERE` expressions can be evaluated, row by row, with `eval_predicate`.
- There is no command for SQL queries, column selection, sorting, joining, diffing, conversion or schema validation.
- It does not read or write JSON, spreadsheet formats or bzip2 output.

## Running the tests

```
pip install -e .[test]
pytest
```