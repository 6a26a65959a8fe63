import pytest

from winter.json_deserializer import (
    JsonDeserializeError,
    JsonDeserializer,
    JsonFieldType,
    json_field_type,
    split_object_array,
)
from winter.json_serializer import JsonSerializer
from winter.reflect import Field, Reflect


class DesInner(Reflect):
    x = Field("float")
    y = Field("double")
    c = Field("string")


class DesRequest(Reflect):
    number = Field("int")
    type = Field("string")
    inner = Field("DesInner*")
    values = Field("vector<int>")


class DesHolder(Reflect):
    inner = Field("DesInner")
    items = Field("vector<DesInner>")
    pointers = Field("vector<DesInner*>")
    words = Field("vector<string>")
    flags = Field("vector<bool>")
    chars = Field("vector<char>")
    maybe = Field("vector<double>*")


class DesScalars(Reflect):
    s = Field("short")
    l = Field("long")
    b = Field("bool")
    ch = Field("char")
    name = Field("string*")


@pytest.fixture
def reader():
    return JsonDeserializer()


def test_simple_fields(reader):
    obj = reader.deserialize('{"number": 42, "type": "hello"}', DesRequest())
    assert obj.number == 42
    assert obj.type == "hello"


def test_returns_the_target(reader):
    target = DesRequest()
    assert reader.deserialize('{"number":1}', target) is target


def test_nested_pointer_object_is_created(reader):
    text = '{"number":1,"inner":{"x":1.5,"y":2.25,"c":"abc"},"values":[1,2,3]}'
    obj = reader.deserialize(text, DesRequest())
    assert obj.inner == DesInner(x=1.5, y=2.25, c="abc")
    assert obj.values == [1, 2, 3]


def test_nested_value_object_is_filled_in_place(reader):
    holder = DesHolder()
    original = holder.inner
    reader.deserialize('{"inner":{"x":0.5,"y":1.0,"c":"z"}}', holder)
    assert holder.inner is original
    assert holder.inner.c == "z"
    assert holder.inner.x == 0.5


def test_lists_of_objects(reader):
    text = (
        '{"items":[{"x":1.5,"y":2.0,"c":"a"},{"x":2.5,"y":3.0,"c":"b"}],'
        '"pointers":[{"x":0.5,"y":0.25,"c":"p"},null]}'
    )
    holder = reader.deserialize(text, DesHolder())
    assert holder.items == [DesInner(x=1.5, y=2.0, c="a"), DesInner(x=2.5, y=3.0, c="b")]
    assert holder.pointers == [DesInner(x=0.5, y=0.25, c="p"), None]


def test_lists_of_scalars(reader):
    text = '{"words":["a, b","c"],"flags":[true,false],"chars":["x","y"],"maybe":[0.5,1.5]}'
    holder = reader.deserialize(text, DesHolder())
    assert holder.words == ["a, b", "c"]
    assert holder.flags == [True, False]
    assert holder.chars == ["x", "y"]
    assert holder.maybe == [0.5, 1.5]


def test_empty_list(reader):
    obj = reader.deserialize('{"values":[]}', DesRequest(values=[9]))
    assert obj.values == []


def test_scalar_kinds(reader):
    obj = reader.deserialize('{"s":-7,"l":9000000000,"b":true,"ch":"q","name":"who"}', DesScalars())
    assert obj.s == -7
    assert obj.l == 9000000000
    assert obj.b is True
    assert obj.ch == "q"
    assert obj.name == "who"


def test_unknown_keys_are_skipped(reader):
    obj = reader.deserialize('{"nope":1,"number":3}', DesRequest())
    assert obj.number == 3


def test_null_clears_pointer_field(reader):
    obj = reader.deserialize('{"inner":null}', DesRequest(inner=DesInner()))
    assert obj.inner is None


def test_null_for_plain_field_raises(reader):
    with pytest.raises(JsonDeserializeError):
        reader.deserialize('{"number":null}', DesRequest())


def test_incompatible_type_raises(reader):
    with pytest.raises(JsonDeserializeError):
        reader.deserialize('{"number":"x"}', DesRequest())


def test_incompatible_list_element_raises(reader):
    with pytest.raises(JsonDeserializeError):
        reader.deserialize('{"values":["a"]}', DesRequest())


def test_missing_open_brace_leaves_target_unchanged(reader):
    target = DesRequest(number=4, type="keep")
    result = reader.deserialize("no object here", target)
    assert result == DesRequest(number=4, type="keep")


def test_missing_closing_brace_raises(reader):
    with pytest.raises(JsonDeserializeError):
        reader.deserialize('{"number":5', DesRequest())


def test_quoted_comma_and_escaped_quote(reader):
    obj = reader.deserialize('{"type":"a\\"b,c","number":2}', DesRequest())
    assert obj.type == 'a\\"b,c'
    assert obj.number == 2


def test_round_trip_through_serializer(reader):
    original = DesRequest(number=11, type="rt", inner=DesInner(x=3.5, y=-1.25, c="in"), values=[4, 5])
    text = JsonSerializer().serialize(original)
    assert reader.deserialize(text, DesRequest()) == original


def test_round_trip_of_lists(reader):
    original = DesHolder(
        inner=DesInner(x=1.0, y=2.0, c="i"),
        items=[DesInner(x=0.5, y=0.5, c="a")],
        pointers=[DesInner(x=2.0, y=3.0, c="b")],
        words=["w"],
        flags=[False, True],
        chars=["k"],
        maybe=[2.5],
    )
    text = JsonSerializer().serialize(original)
    assert reader.deserialize(text, DesHolder()) == original


@pytest.mark.parametrize(
    "value, expected",
    [
        ('"text"', JsonFieldType.STRING),
        ("12", JsonFieldType.NUMBER),
        ("-1.5e3", JsonFieldType.NUMBER),
        ("true", JsonFieldType.BOOL),
        ("false", JsonFieldType.BOOL),
        ("null", JsonFieldType.NULL),
        ("[1,2]", JsonFieldType.ARRAY),
        ('{"a":1}', JsonFieldType.OBJECT),
    ],
)
def test_json_field_type(value, expected):
    assert json_field_type(value) is expected


@pytest.mark.parametrize("value", ["", "abc", '"open'])
def test_json_field_type_rejects_garbage(value):
    with pytest.raises(JsonDeserializeError):
        json_field_type(value)


def test_split_object_array():
    parts = split_object_array('[{"a":1}, {"b":[1,2],"c":"x,y"}]')
    assert parts == ['{"a":1}', '{"b":[1,2],"c":"x,y"}']


def test_split_object_array_empty():
    assert split_object_array("[ ]") == []


def test_split_object_array_rejects_non_objects():
    with pytest.raises(JsonDeserializeError):
        split_object_array("[1,2]")