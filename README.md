# influxline

A pure-Python library for the InfluxDB line protocol. It parses lines of
text into points, builds points from Python values, and turns points back
into line protocol text or a compact binary form. It uses only the
standard library.

## Installation

From a checkout of the project:

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Parsing lines

```python
from influxline.parser import parse_points

points = parse_points(b'cpu,host=serverA,region=us-east value=1.0,str="ok" 1000000000')
point = points[0]

print(point.name())           # b'cpu'
print(point.tags().to_map())  # {'host': 'serverA', 'region': 'us-east'}
print(point.fields())         # {'value': 1.0, 'str': 'ok'}
print(point.unix_nano())      # 1000000000
```

Input may be `bytes` or `str`. Tags are stored sorted by key, and
duplicate tag keys are rejected. Blank lines and lines that start with
`#` are skipped; a quoted string field may contain newlines.

If any line fails, `parse_points` raises `influxline.parser.ParseError`.
Its message has one `unable to parse '<line>': <reason>` entry per bad
line; its `failures` attribute lists those messages and its `points`
attribute holds the points that did parse. `ParseError` is a subclass of
`influxline.errors.PointError`, which is a `ValueError`.

Times are plain `int` nanoseconds since the Unix epoch; `None` means no
time. `parse_points` gives lines without a timestamp the current time.
`parse_points_with_precision(buf, default_time, precision)` lets you pick
the timestamp unit (`"n"`, `"u"`, `"ms"`, `"s"`, `"m"` or `"h"`; anything
else is nanoseconds) and the time used for lines with no timestamp, which
is truncated to that unit. `parse_point` parses a single line.

`parse_key` returns the unescaped measurement name and the tags of a
series key, `parse_name` only the name. `valid_key_token` and
`valid_key_tokens` check that names, tag keys and tag values are valid
UTF-8 made of printable characters.

Unsigned field values such as `123u` are refused with `invalid number`
until `influxline.scanner.enable_uint_support()` has been called.

## Building points

```python
from influxline.point import new_point
from influxline.tags import new_tags

point = new_point(
    "cpu",
    new_tags({"host": "serverA"}),
    {"value": 1.0, "count": 10},
    946730096789012345,
)
print(str(point))  # cpu,host=serverA count=10i,value=1 946730096789012345
```

Fields are written sorted by key. `int` values get an `i` suffix,
`bool` values are written as `true`/`false`, strings are quoted and
escaped, `bytes` are written as they are, `None` writes an empty value,
and any other value is written as a quoted string of its `str()`. To
write an unsigned integer, wrap it in `influxline.fields.Unsigned`.
`new_point` rejects an empty field set, empty field names, NaN and
infinite floats, times outside the supported range, and series keys
longer than 65535 bytes.

A `Point` offers:

- `key()`, `name()`, `set_name()`, `tags()`, `has_tag()`, `add_tag()`,
  `set_tags()`
- `fields()` for a dict of converted values, and `iter_fields()` for
  `RawField` objects (key, `FieldType`, raw text) whose `value()`
  converts on demand
- `unix_nano()`, `set_precision()`, `round()` and the `time` attribute
- `str(point)` / `bytes(point)` for line protocol, `string_size()` for
  its length, `precision_string(precision)` and `rounded_string(d)` to
  render the time in a unit or rounded to `d` nanoseconds
- `split(size)` to break a point with many fields into points of at most
  `size` bytes where possible
- `hash_id()`, the FNV-1a hash of the series key
- `marshal_binary()`; read it back with `new_point_from_bytes()`, which
  raises `ShortBufferError` on truncated input

## Other modules

- `influxline.tags`: `Tag` and `Tags` (a sorted list with `get`, `set`,
  `hash_key`, `to_map` and more), `new_tags`, `make_key`, `parse_tags`,
  `walk_tags`, `compare_tags`, and measurement and tag escaping.
- `influxline.fields`: `Unsigned`, `marshal_fields`, `append_field` and
  string field escaping.
- `influxline.escape`: escape and unescape commas, quotes, spaces and
  equals signs in bytes and strings.
- `influxline.scanner`: the low-level scanners the parser is built on.
- `influxline.numparse`: strict integer, unsigned, float and boolean
  parsing that raises `NumError`.
- `influxline.fnv`: the 64-bit FNV-1a hash (`InlineFNV64a`, `fnv64a`).
- `influxline.timeutil`: precision multipliers, `safe_calc_time`,
  `check_time` (raising `TimeOutOfRangeError`), truncation, rounding and
  the binary time form.
- `influxline.rows`: result `Row` objects, `same_series`, and
  `sort_rows`, which orders by name and then by tag-set hash.
- `influxline.statistic`: `Statistic` and `StatisticTags`, whose
  `merge()` returns a new dict in which the argument's values win.
- `influxline.schedule`: a `Schedule` base class for tasks; `initialize()`
  hands out ids counting up from 10001.

## What it does not do

This is a data library only. It does not connect to or write to a
database server, it stores nothing, and it does not run tasks on a
timer: `Schedule` only holds a task's id, name and specification and
counts its runs.