import sys

import pytest

from influxline.errors import PointError
from influxline.fields import Unsigned, escape_string_field
from influxline.parser import (
    ParseError,
    parse_key,
    parse_name,
    parse_point,
    parse_points,
    parse_points_with_precision,
    valid_key_token,
    valid_key_tokens,
)
from influxline.point import MAX_KEY_LENGTH, new_point
from influxline.scanner import enable_uint_support
from influxline.tags import Tag, Tags, new_tags
from influxline.timeutil import MAX_NANO_TIME, MIN_NANO_TIME

enable_uint_support()

MAX_FLOAT = f"{sys.float_info.max:.1f}"
MIN_FLOAT = f"{-sys.float_info.max:.1f}"
SECOND = 1_000_000_000


def check(line, name, tags, fields, when):
    expected = new_point(name, new_tags(tags), fields, when)
    pts = parse_points_with_precision(line, 0, "n")
    assert len(pts) == 1
    pt = pts[0]
    assert pt.key() == expected.key()
    assert len(pt.tags()) == len(expected.tags())
    raw_tags = new_tags(tags)
    for tag in pt.tags():
        assert tag.value == raw_tags.get(tag.key)
    parsed = pt.fields()
    for key, value in fields.items():
        assert parsed[key] == value
        assert type(parsed[key]) is type(value)
    assert pt.time == expected.time
    assert str(pt).startswith(line)


def test_parse_no_value():
    assert parse_points("") == []


def test_parse_whitespace_value():
    assert parse_points(" ") == []


@pytest.mark.parametrize(
    "line", ["cpu_load_short,host=server01,region=us-west", "cpu", "cpu,host==", "="]
)
def test_parse_no_fields(line):
    with pytest.raises(ParseError) as info:
        parse_points(line)
    assert str(info.value).endswith("missing fields")


def test_parse_no_timestamp():
    check("cpu value=1", "cpu", None, {"value": 1.0}, 0)


@pytest.mark.parametrize(
    "line", ['cpu,host=serverA value="test', 'cpu,host=serverA value="test""']
)
def test_parse_missing_quote(line):
    with pytest.raises(ParseError) as info:
        parse_points(line)
    assert str(info.value).endswith("unbalanced quotes")


@pytest.mark.parametrize(
    "line",
    [
        "cpu, value=1",
        "cpu,",
        "cpu,,,",
        "cpu,host=serverA,=us-east value=1i",
        r"cpu,host=serverAa\,,=us-east value=1i",
        r"cpu,host=serverA\,,=us-east value=1i",
        "cpu, =serverA value=1i",
    ],
)
def test_parse_missing_tag_key(line):
    with pytest.raises(ParseError) as info:
        parse_points(line)
    assert str(info.value).endswith("missing tag key")


def test_parse_escaped_space_tag_key_is_valid():
    pts = parse_points(r"cpu,host=serverA,\ =us-east value=1i")
    assert len(pts) == 1


@pytest.mark.parametrize(
    "line",
    [
        "cpu,host",
        "cpu,host,",
        "cpu,host=",
        "cpu,host value=1i",
        "cpu,host=serverA,region value=1i",
        "cpu,host=serverA,region= value=1i",
        "cpu,host=serverA,region=,zone=us-west value=1i",
    ],
)
def test_parse_missing_tag_value(line):
    with pytest.raises(ParseError) as info:
        parse_points(line)
    assert str(info.value).endswith("missing tag value")


@pytest.mark.parametrize("line", ["cpu,host=f=o,", r"cpu,host=f\==o,"])
def test_parse_invalid_tag_format(line):
    with pytest.raises(ParseError) as info:
        parse_points(line)
    assert str(info.value).endswith("invalid tag format")


@pytest.mark.parametrize(
    "line",
    [
        "cpu,host=serverA,region=us-west =",
        "cpu,host=serverA,region=us-west =123i",
        "cpu,host=serverA,region=us-west value=123i,=456i",
        "cpu,host=serverA,region=us-west value=",
        "cpu,host=serverA,region=us-west value= 1000000000i",
        "cpu,host=serverA,region=us-west value=,value2=1i",
        "cpu,host=server01,region=us-west 1434055562000000000i",
        "cpu,host=server01,region=us-west value=1i,b",
        'm f="blah"=123,r 1531703600000000000',
    ],
)
def test_parse_missing_field_name_or_value(line):
    with pytest.raises(ParseError):
        parse_points(line)


def test_parse_escaped_space_field_key_is_valid():
    pts = parse_points(r"cpu,host=serverA,region=us-west a\ =123i")
    assert pts[0].fields() == {"a ": 123}


@pytest.mark.parametrize(
    "line",
    [
        "cpu v=- ",
        "cpu v=-i ",
        "cpu v=-. ",
        "cpu v=. ",
        "cpu v=1.0i ",
        "cpu v=1ii ",
        "cpu v=1a ",
        "cpu v=-e-e-e ",
        "cpu v=42+3 ",
        "cpu v= ",
        "cpu v=-123u",
        "cpu,host=serverA,region=us-west value=.1a",
        "cpu,host=serverA,region=us-west value=0.-1",
        "cpu,host=serverA,region=us-west value=-",
        "cpu,host=serverA,region=us-west value=1.1.1",
        "cpu,host=serverA,region=us-west value=a",
        "cpu,host=serverA,region=us-west value=9ie10",
        "cpu,host=serverA,region=us-west value=9e10i",
        "cpu,host=serverA,region=us-west value=--1u",
        "cpu,host=serverA,region=us-west value=-9223372036854775809i",
        "cpu value=NaN 1000000000",
        "cpu value=nAn 1000000000",
        "cpu value=NaN",
    ],
)
def test_parse_bad_values(line):
    with pytest.raises(ParseError):
        parse_points(line)


def test_parse_max_int64():
    line = "cpu,host=serverA,region=us-west value=9223372036854775808i"
    with pytest.raises(ParseError) as info:
        parse_points(line)
    assert str(info.value) == (
        "unable to parse 'cpu,host=serverA,region=us-west value=9223372036854775808i': "
        "unable to parse integer 9223372036854775808: strconv.ParseInt: parsing "
        '"9223372036854775808": value out of range'
    )
    pts = parse_points("cpu,host=serverA,region=us-west value=9223372036854775807i")
    assert pts[0].fields()["value"] == 9223372036854775807
    pts = parse_points("cpu,host=serverA,region=us-west value=0009223372036854775807i")
    assert len(pts) == 1


def test_parse_min_int64():
    pts = parse_points("cpu,host=serverA,region=us-west value=-9223372036854775808i")
    assert pts[0].fields()["value"] == -9223372036854775808
    pts = parse_points("cpu,host=serverA,region=us-west value=-0009223372036854775808i")
    assert len(pts) == 1


def test_parse_max_float64():
    with pytest.raises(ParseError):
        parse_points(f"cpu,host=serverA,region=us-west value=1{MAX_FLOAT}")
    pts = parse_points(f"cpu,host=serverA,region=us-west value={MAX_FLOAT}")
    assert pts[0].fields()["value"] == sys.float_info.max
    pts = parse_points(f"cpu,host=serverA,region=us-west value=0000{MAX_FLOAT}")
    assert len(pts) == 1


def test_parse_min_float64():
    with pytest.raises(ParseError):
        parse_points(f"cpu,host=serverA,region=us-west value=-1{MIN_FLOAT[1:]}")
    pts = parse_points(f"cpu,host=serverA,region=us-west value={MIN_FLOAT}")
    assert pts[0].fields()["value"] == -sys.float_info.max
    pts = parse_points(f"cpu,host=serverA,region=us-west value=-0000000{MIN_FLOAT[1:]}")
    assert len(pts) == 1


def test_parse_max_uint64():
    line = "cpu,host=serverA,region=us-west value=18446744073709551616u"
    with pytest.raises(ParseError) as info:
        parse_points(line)
    assert str(info.value) == (
        "unable to parse 'cpu,host=serverA,region=us-west value=18446744073709551616u': "
        "unable to parse unsigned 18446744073709551616: strconv.ParseUint: parsing "
        '"18446744073709551616": value out of range'
    )
    pts = parse_points("cpu,host=serverA,region=us-west value=18446744073709551615u")
    value = pts[0].fields()["value"]
    assert value == 18446744073709551615
    assert isinstance(value, Unsigned)
    pts = parse_points("cpu,host=serverA,region=us-west value=00018446744073709551615u")
    assert len(pts) == 1


def test_parse_min_uint64():
    pts = parse_points("cpu,host=serverA,region=us-west value=0u")
    assert pts[0].fields()["value"] == 0
    pts = parse_points("cpu,host=serverA,region=us-west value=0000u")
    assert len(pts) == 1


@pytest.mark.parametrize(
    "value",
    ["1i", "-1i", "-1.0", ".1", "1.0e4", "1.0E4", "1.0e-4", "-1.0e-4"],
)
def test_parse_valid_numbers(value):
    pts = parse_points(f"cpu,host=serverA,region=us-west value={value}")
    assert len(pts) == 1


@pytest.mark.parametrize("value", ["1e4", "1E4"])
def test_parse_float_scientific(value):
    pts = parse_points(f"cpu,host=serverA,region=us-west value={value}")
    assert pts[0].fields()["value"] == 1e4


@pytest.mark.parametrize(
    "line",
    [
        "cpu    value=1.0 1257894000000000000",
        "cpu value=1.0     1257894000000000000",
        "cpu      value=1.0     1257894000000000000",
        "cpu value=1.0 1257894000000000000   ",
        "cpu value=1.0 1257894000000000000\n",
        "cpu   value=1.0 1257894000000000000\n",
    ],
)
def test_parse_whitespace(line):
    pts = parse_points(line.encode())
    assert len(pts) == 1
    assert pts[0].name() == b"cpu"
    assert pts[0].fields() == {"value": 1.0}
    assert pts[0].unix_nano() == 1257894000000000000


UNESCAPE_CASES = [
    (r"foo\,bar value=1i", "foo,bar", {}, {"value": 1}),
    (r"cpu\,main,regions=east value=1.0", "cpu,main", {"regions": "east"}, {"value": 1.0}),
    (r"cpu\ load,region=east value=1.0", "cpu load", {"region": "east"}, {"value": 1.0}),
    (r"cpu\=load,region=east value=1.0", r"cpu\=load", {"region": "east"}, {"value": 1.0}),
    ("cpu=load,region=east value=1.0", "cpu=load", {"region": "east"}, {"value": 1.0}),
    (r"cpu,region\,zone=east value=1.0", "cpu", {"region,zone": "east"}, {"value": 1.0}),
    (r"cpu,region\ zone=east value=1.0", "cpu", {"region zone": "east"}, {"value": 1.0}),
    (r"cpu,reg\\=ion=east value=1.0", "cpu", {r"reg\=ion": "east"}, {"value": 1.0}),
    (r"cpu,\ =east value=1.0", "cpu", {" ": "east"}, {"value": 1.0}),
    (r"cpu,regions=east\,west value=1.0", "cpu", {"regions": "east,west"}, {"value": 1.0}),
    (r"cpu,regions=\\ east value=1.0", "cpu", {"regions": r"\ east"}, {"value": 1.0}),
    (r"cpu,regions=eas\\ t value=1.0", "cpu", {"regions": r"eas\ t"}, {"value": 1.0}),
    (r"cpu,regions=east\\  value=1.0", "cpu", {"regions": "east\\ "}, {"value": 1.0}),
    (r"cpu,regions=east\ west value=1.0", "cpu", {"regions": "east west"}, {"value": 1.0}),
    (r"cpu,regions=east value\,ms=1.0", "cpu", {"regions": "east"}, {"value,ms": 1.0}),
    (r"cpu,regions=east value\ ms=1.0", "cpu", {"regions": "east"}, {"value ms": 1.0}),
    ('cpu,regions=east value="1"', "cpu", {"regions": "east", "foobar": ""}, {"value": "1"}),
    ('cpu,regions=east value="1,0"', "cpu", {"regions": "east"}, {"value": "1,0"}),
    (r"cpu,regions=eas\t value=1.0", "cpu", {"regions": "eas\\t"}, {"value": 1.0}),
    (r"cpu,regions=\\,\,\=east value=1.0", "cpu", {"regions": r"\,,=east"}, {"value": 1.0}),
    (r"cpu \a=1i", "cpu", {}, {"\\a": 1}),
    (
        r"cpu=load,equals\=foo=tag\=value value=1i",
        "cpu=load",
        {"equals=foo": "tag=value"},
        {"value": 1},
    ),
]


@pytest.mark.parametrize("line,name,tags,fields", UNESCAPE_CASES)
def test_parse_unescape(line, name, tags, fields):
    check(line, name, tags, fields, 0)


HOST_TAGS = {"host": "serverA", "region": "us-east"}

TIMED_CASES = [
    ("cpu,host=serverA,region=us-east value=1.0 1000000000", "cpu", HOST_TAGS, {"value": 1.0}),
    (
        'cpu,host=serverA,region=us-east value=1.0,str="foo",str2="bar" 1000000000',
        "cpu",
        HOST_TAGS,
        {"value": 1.0, "str": "foo", "str2": "bar"},
    ),
    (r'cpu,host=serverA,region=us-east str="foo \" bar" 1000000000', "cpu", HOST_TAGS,
     {"str": 'foo " bar'}),
    ('cpu,host=serverA,region=us-east value=1.0,str="foo bar" 1000000000', "cpu", HOST_TAGS,
     {"value": 1.0, "str": "foo bar"}),
    ('cpu,host=serverA,region=us-east value=1.0,str="foo\nbar" 1000000000', "cpu", HOST_TAGS,
     {"value": 1.0, "str": "foo\nbar"}),
    (r'cpu,host=serverA,region=us-east value=1.0,str="foo\,bar" 1000000000', "cpu", HOST_TAGS,
     {"value": 1.0, "str": r"foo\,bar"}),
    ('cpu,host=serverA,region=us-east value=1.0,str="foo,bar" 1000000000', "cpu", HOST_TAGS,
     {"value": 1.0, "str": "foo,bar"}),
    (r'cpu,host=serverA,region=us-east str="foo\\",str2="bar" 1000000000', "cpu", HOST_TAGS,
     {"str": "foo\\", "str2": "bar"}),
    ('"cpu",host=serverA,region=us-east value=1.0 1000000000', '"cpu"', HOST_TAGS,
     {"value": 1.0}),
    ('cpu,"host"="serverA",region=us-east value=1.0 1000000000', "cpu",
     {'"host"': '"serverA"', "region": "us-east"}, {"value": 1.0}),
    (r'cpu,host=serverA,region=us-east value="{Hello\"{,}\" World}" 1000000000', "cpu",
     HOST_TAGS, {"value": '{Hello"{,}" World}'}),
    (r'cpu,host=serverA,region=us-east value="{Hello\"{\,}\" World}" 1000000000', "cpu",
     HOST_TAGS, {"value": r'{Hello"{\,}" World}'}),
    ('cpu,host=serverA,region=us-east str="foo=bar",value=1.0 1000000000', "cpu", HOST_TAGS,
     {"value": 1.0, "str": "foo=bar"}),
    (r'cpu value="test\\\"" 1000000000', "cpu", {}, {"value": 'test\\"'}),
    (r'cpu value="test\\" 1000000000', "cpu", {}, {"value": "test\\"}),
    (r'cpu value="test\"" 1000000000', "cpu", {}, {"value": 'test"'}),
    (
        "cpu,host=serverA,region=us-east true=true,t=t,T=T,TRUE=TRUE,True=True,"
        "false=false,f=f,F=F,FALSE=FALSE,False=False 1000000000",
        "cpu",
        HOST_TAGS,
        {"t": True, "T": True, "true": True, "True": True, "TRUE": True,
         "f": False, "F": False, "false": False, "False": False, "FALSE": False},
    ),
    ('cpu,host=serverA,region=us-east value="wè" 1000000000', "cpu", HOST_TAGS,
     {"value": "wè"}),
    ("cpu value=1 1000000000", "cpu", {}, {"value": 1.0}),
    ("cpu value=-0.64 1000000000", "cpu", {}, {"value": -0.64}),
    ("cpu value=1. 1000000000", "cpu", {}, {"value": 1.0}),
    ("cpu value=6.632243e+06 1000000000", "cpu", {}, {"value": 6632243.0}),
    ("cpu value=6632243i 1000000000", "cpu", {}, {"value": 6632243}),
]


@pytest.mark.parametrize("line,name,tags,fields", TIMED_CASES)
def test_parse_timed_points(line, name, tags, fields):
    check(line, name, tags, fields, SECOND)


def test_parse_negative_timestamp():
    check("cpu value=1 -1", "cpu", {}, {"value": 1.0}, -1)


def test_parse_max_timestamp():
    check(f"cpu value=1 {MAX_NANO_TIME}", "cpu", {}, {"value": 1.0}, MAX_NANO_TIME)


def test_parse_min_timestamp():
    check("cpu value=1 -9223372036854775806", "cpu", {}, {"value": 1.0}, MIN_NANO_TIME)


@pytest.mark.parametrize(
    "line",
    [
        "cpu value=1 9223372036854775808",
        "cpu value=1 -92233720368547758078",
        "cpu value=1 -",
        "cpu value=1 -/",
        "cpu value=1 -1?",
        "cpu value=1 1-",
        "cpu value=1 9223372036854775807 12",
    ],
)
def test_parse_invalid_timestamp(line):
    with pytest.raises(ParseError):
        parse_points(line)


def test_parse_trailing_slash():
    with pytest.raises(ParseError) as info:
        parse_points("a v=1 0\\")
    assert "bad timestamp" in str(info.value)


@pytest.mark.parametrize(
    "line,message",
    [
        ("cpu,host=serverA,host=serverB value=1i 1000000000",
         "unable to parse 'cpu,host=serverA,host=serverB value=1i 1000000000': duplicate tags"),
        ("cpu,b=2,b=1,c=3 value=1i 1000000000",
         "unable to parse 'cpu,b=2,b=1,c=3 value=1i 1000000000': duplicate tags"),
        ("cpu,b=2,c=3,b=1 value=1i 1000000000",
         "unable to parse 'cpu,b=2,c=3,b=1 value=1i 1000000000': duplicate tags"),
    ],
)
def test_parse_duplicate_tags(line, message):
    with pytest.raises(ParseError) as info:
        parse_points(line)
    assert str(info.value) == message


def test_parse_unbalanced_quoted_tags():
    pts = parse_points("baz,mytag=\"a x=1 1441103862125\nbaz,mytag=a z=1 1441103862126")
    assert len(pts) == 2
    first = new_point("baz", new_tags({"mytag": '"a'}), {"x": 1.0}, 1441103862125)
    second = new_point("baz", new_tags({"mytag": "a"}), {"z": 1.0}, 1441103862126)
    assert str(pts[0]) == str(first)
    assert str(pts[1]) == str(second)


def test_large_number_of_tags():
    tags = "".join(f",tag{i}=value{i}" for i in range(255))
    pts = parse_points(f"cpu{tags} value=1")
    assert len(pts[0].tags()) == 255


def test_parse_ints_floats():
    pts = parse_points(
        b"cpu,host=serverA,region=us-east int=10i,float=11.0,float2=12.1 1000000000"
    )
    assert len(pts) == 1
    fields = pts[0].fields()
    assert type(fields["int"]) is int
    assert type(fields["float"]) is float
    assert type(fields["float2"]) is float


def test_parse_key_unsorted():
    pts = parse_points(b"cpu,last=1,first=2 value=1i")
    assert pts[0].key() == b"cpu,first=2,last=1"


def test_parse_point_to_string():
    line = ('cpu,host=serverA,region=us-east bool=false,float=11,float2=12.123,'
            'int=10i,str="string val" 1000000000')
    pts = parse_points(line)
    assert str(pts[0]) == line
    pt = new_point(
        "cpu",
        new_tags({"host": "serverA", "region": "us-east"}),
        {"int": 10, "float": 11.0, "float2": 12.123, "bool": False, "str": "string val"},
        SECOND,
    )
    assert str(pt) == line


PRECISION_LINE = "cpu,host=serverA,region=us-east value=1.0"


@pytest.mark.parametrize(
    "stamp,precision,expected",
    [
        ("946730096789012345", "", "946730096789012345"),
        ("946730096789012345", "n", "946730096789012345"),
        ("946730096789012", "u", "946730096789012000"),
        ("946730096789", "ms", "946730096789000000"),
        ("946730096", "s", "946730096000000000"),
        ("15778834", "m", "946730040000000000"),
        ("262980", "h", "946728000000000000"),
    ],
)
def test_parse_points_with_precision(stamp, precision, expected):
    pts = parse_points_with_precision(f"{PRECISION_LINE} {stamp}", 0, precision)
    assert len(pts) == 1
    assert str(pts[0]) == f"{PRECISION_LINE} {expected}"


@pytest.mark.parametrize(
    "precision,expected",
    [
        ("", "946730096789012345"),
        ("n", "946730096789012345"),
        ("u", "946730096789012000"),
        ("ms", "946730096789000000"),
        ("s", "946730096000000000"),
        ("m", "946730040000000000"),
        ("h", "946728000000000000"),
    ],
)
def test_parse_points_with_precision_no_time(precision, expected):
    default_time = 946730096789012345
    pts = parse_points_with_precision(PRECISION_LINE, default_time, precision)
    assert len(pts) == 1
    assert str(pts[0]) == f"{PRECISION_LINE} {expected}"


@pytest.mark.parametrize(
    "batch,count",
    [
        ("# comment only", 0),
        ("# a point is below\ncpu,host=serverA,region=us-east value=1.0 946730096789012345", 1),
        ("cpu,host=serverA,region=us-east value=1.0 946730096789012345\n# end of points", 1),
        ("\t# a point is below\ncpu,host=serverA,region=us-east value=1.0 946730096789012345", 1),
    ],
)
def test_parse_points_with_comments(batch, count):
    pts = parse_points_with_precision(batch, 0, "")
    assert len(pts) == count
    for pt in pts:
        assert str(pt) == "cpu,host=serverA,region=us-east value=1.0 946730096789012345"


def test_parse_points_with_extra_buffer():
    key = "cpu,host=A,region=uswest"
    buf = b"\x00" * (70 * 5000) + f"{key} value=0.123 1\n".encode()
    pts = parse_points(buf)
    assert pts[0].key() == key.encode()


def test_parse_points_quotes_in_field_key():
    pts = parse_points('cpu "a=1\ncpu value=2 1')
    assert pts[0].fields()['"a'] == 1.0
    with pytest.raises(ParseError):
        parse_points(r'cpu "\, '"'"r'= "\ v=1.0')


def test_parse_points_quotes_in_tags():
    pts = parse_points('t159,label=hey\\ "ya a=1i,value=0i\nt159,label=another a=2i,value=1i 1')
    assert len(pts) == 2


def test_parse_points_blank_line():
    pts = parse_points("cpu value=1i 1000000000\n\ncpu value=2i 2000000000")
    assert len(pts) == 2


def test_parse_rejects_max_key():
    key = "a" * (MAX_KEY_LENGTH - len("value") - 4)
    assert len(parse_points(f"{key} value=1,ok=2.0")) == 1
    with pytest.raises(ParseError) as info:
        parse_points(f"{key}a value=1,ok=2.0")
    assert "max key length exceeded" in str(info.value)


@pytest.mark.parametrize(
    "text,escaped",
    [
        ("abcdefg", "abcdefg"),
        ('one double quote " .', r'one double quote \" .'),
        ('quote " then backslash \\ .', r'quote \" then backslash \\ .'),
        ('backslash \\ then quote " .', r'backslash \\ then quote \" .'),
    ],
)
def test_escape_string_field_round_trip(text, escaped):
    got = escape_string_field(text)
    assert got == escaped
    check(f't s="{got}"', "t", None, {"s": text}, 0)


@pytest.mark.parametrize(
    "line,name,tags",
    [
        ("m,k=v", b"m", {"k": "v"}),
        ("m\\ q,k=v", b"m q", {"k": "v"}),
        ("m,k\\ q=v", b"m", {"k q": "v"}),
        ("m\\ q,k\\ q=v", b"m q", {"k q": "v"}),
    ],
)
def test_parse_key(line, name, tags):
    got_name, got_tags = parse_key(line.encode())
    assert got_name == name
    assert got_tags.equal(new_tags(tags))


@pytest.mark.parametrize("line,name", [("m,k=v", b"m"), ("m\\ q,k=v", b"m q")])
def test_parse_name(line, name):
    assert parse_name(line.encode()) == name


def test_parse_key_without_tags():
    name, tags = parse_key(b"cpu")
    assert name == b"cpu"
    assert len(tags) == 0


@pytest.mark.parametrize(
    "line,expected",
    [
        ("cpu value=1", {}),
        ("cpu,tag0=v0 value=1", {"tag0": "v0"}),
        ("cpu,tag0=v0,tag1=v0 value=1", {"tag0": "v0", "tag1": "v0"}),
        (r"cpu,tag0=v\ 0 value=1", {"tag0": "v 0"}),
        (r"cpu,tag0=v\ 0\ 1,tag1=v2 value=1", {"tag0": "v 0 1", "tag1": "v2"}),
        (r"cpu,tag0=\, value=1", {"tag0": ","}),
        (r"cpu,ta\ g0=\, value=1", {"ta g0": ","}),
        (r"cpu,tag0=\,1 value=1", {"tag0": ",1"}),
        (r'cpu,tag0=1\"\",t=k value=1', {"tag0": r'1\"\"', "t": "k"}),
    ],
)
def test_point_tags(line, expected):
    pts = parse_points(line)
    assert len(pts) == 1
    for _ in range(2):
        assert pts[0].tags().equal(new_tags(expected))


def test_parse_error_keeps_good_points():
    with pytest.raises(ParseError) as info:
        parse_points_with_precision("cpu value=1 5\ncpu", 0, "n")
    assert len(info.value.points) == 1
    assert info.value.points[0].time == 5
    assert info.value.failures == ["unable to parse 'cpu': missing fields"]


def test_parse_point_single_line():
    pt = parse_point(b"cpu,host=a value=2i 7", None, "n")
    assert pt.key() == b"cpu,host=a"
    assert pt.fields() == {"value": 2}
    assert pt.time == 7
    with pytest.raises(PointError):
        parse_point(b"cpu value=1 1 2", None, "n")


@pytest.mark.parametrize(
    "token,valid",
    [
        ("cpu", True),
        ("cpu load", True),
        ("wè", True),
        ("a\x00b", False),
        ("tab\there", False),
        ("\ufffd", False),
        (b"\xff\xfe", False),
        (b"ok", True),
    ],
)
def test_valid_key_token(token, valid):
    assert valid_key_token(token) is valid


def test_valid_key_tokens():
    assert valid_key_tokens("cpu", Tags([Tag(b"host", b"a")])) is True
    assert valid_key_tokens("cpu", Tags([Tag(b"host", b"\xff")])) is False
    assert valid_key_tokens("c\npu", None) is False