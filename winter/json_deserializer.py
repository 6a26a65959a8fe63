"""Reading JSON text into reflected objects."""

from __future__ import annotations

import enum
import re
import struct
from typing import Any, Optional

from winter.log import get_logger
from winter.reflect import Field, FieldType, Reflect, get_class_instance_by_name


class JsonDeserializeError(Exception):
    """Raised when JSON text does not fit the object it is read into."""


class JsonFieldType(enum.Enum):
    """Kinds of JSON values."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"


_COMPATIBLE = {
    JsonFieldType.STRING: {FieldType.CHAR, FieldType.STRING, FieldType.BYTE},
    JsonFieldType.NUMBER: {
        FieldType.SHORT,
        FieldType.INT,
        FieldType.LONG,
        FieldType.FLOAT,
        FieldType.DOUBLE,
    },
    JsonFieldType.BOOL: {FieldType.BOOL},
    JsonFieldType.OBJECT: {FieldType.OBJ},
    JsonFieldType.ARRAY: {FieldType.VECTOR},
}

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\Z")
_INT_PREFIX_RE = re.compile(r"\s*([+-]?\d+)")


def json_field_type(value: str) -> JsonFieldType:
    """Classify a JSON value by its text; raise JsonDeserializeError if it is none."""
    text = value.strip()
    if not text:
        raise JsonDeserializeError("empty JSON value")
    first = text[0]
    if first == '"':
        if len(text) < 2 or text[-1] != '"':
            raise JsonDeserializeError(f"unterminated string: {text!r}")
        return JsonFieldType.STRING
    if first == "[":
        return JsonFieldType.ARRAY
    if first == "{":
        return JsonFieldType.OBJECT
    if text in ("true", "false"):
        return JsonFieldType.BOOL
    if text == "null":
        return JsonFieldType.NULL
    if _NUMBER_RE.match(text):
        return JsonFieldType.NUMBER
    raise JsonDeserializeError(f"invalid JSON value: {text!r}")


def _split_top_level(text: str) -> list[str]:
    body = text.strip()
    if len(body) < 2 or body[0] != "[" or body[-1] != "]":
        raise JsonDeserializeError(f"not a JSON array: {body!r}")
    inner = body[1:-1]
    if not inner.strip():
        return []
    items: list[str] = []
    depth = 0
    in_str = False
    start = 0
    for i, ch in enumerate(inner):
        if ch == '"' and (i == 0 or inner[i - 1] != "\\"):
            in_str = not in_str
        elif in_str:
            continue
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
        elif ch == "," and depth == 0:
            items.append(inner[start:i].strip())
            start = i + 1
    items.append(inner[start:].strip())
    return items


def split_object_array(text: str) -> list[str]:
    """Split a JSON array of objects into the text of each object."""
    items = _split_top_level(text)
    for item in items:
        if not item.startswith("{"):
            raise JsonDeserializeError(f"array element is not an object: {item!r}")
    return items


def _find_field_end(text: str, start: int) -> Optional[int]:
    """Index of the comma ending the value that starts after ``start``, if any."""
    square = curly = 0
    in_str = False
    for i in range(start, len(text)):
        ch = text[i]
        if ch == '"' and text[i - 1] != "\\":
            in_str = not in_str
        elif in_str:
            continue
        elif ch == "[":
            square += 1
        elif ch == "]":
            square -= 1
        elif ch == "{":
            curly += 1
        elif ch == "}":
            curly -= 1
        elif ch == "," and square == 0 and curly == 0:
            return i
    return None


def _parse_int(text: str) -> int:
    match = _INT_PREFIX_RE.match(text)
    if match is None:
        raise ValueError(f"invalid integer: {text!r}")
    return int(match.group(1))


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        raise ValueError(f"number out of range: {value!r}") from None


def _new_instance(class_name: Optional[str]) -> Reflect:
    instance = get_class_instance_by_name(class_name or "")
    if instance is None:
        raise JsonDeserializeError(f"unknown class {class_name!r}")
    return instance


class JsonDeserializer:
    """Fills the declared fields of a :class:`Reflect` object from JSON text.

    Keys with no matching field are skipped. Strings are taken as written,
    without unescaping.
    """

    def deserialize(self, text: str, target: Reflect) -> Reflect:
        """Read ``text`` into ``target`` and return ``target``."""
        start = text.find("{")
        if start < 0:
            get_logger().warn("Error reading json. Could not find {")
            return target
        offset = start + 1
        while True:
            colon = text.find(":", offset)
            if colon < 0:
                return target
            end = _find_field_end(text, colon)
            if end is None:
                end = text.rfind("}")
                if end <= colon:
                    raise JsonDeserializeError("Could not find } in json!")
            name = text[offset:colon].strip()[1:-1]
            value = text[colon + 1 : end].strip()
            offset = end + 1

            field = target.get_field(name)
            if field is None:
                continue
            self._assign(target, field, name, value)

    def _assign(self, target: Reflect, field: Field, name: str, value: str) -> None:
        kind = json_field_type(value)
        if kind is JsonFieldType.NULL:
            if not field.is_ptr:
                raise JsonDeserializeError(f"null given for non-nullable field {name}")
            field.set(target, None)
            return
        if field.type not in _COMPATIBLE[kind]:
            raise JsonDeserializeError(
                f"Incompatible types: {kind.value} and {field.type.value} for field {name}"
            )
        if kind is JsonFieldType.STRING:
            field.set_from_string(target, value[1:-1])
        elif kind is JsonFieldType.ARRAY:
            field.set(target, self._parse_array(field, name, value))
        elif kind is JsonFieldType.OBJECT:
            self._set_object(target, field, value)
        else:
            field.set_from_string(target, value)

    def _set_object(self, target: Reflect, field: Field, value: str) -> None:
        if field.is_ptr:
            field.set(target, self.deserialize(value, _new_instance(field.class_name)))
            return
        current = field.get(target)
        if current is None:
            current = _new_instance(field.class_name)
            field.set(target, current)
        self.deserialize(value, current)

    def _parse_array(self, field: Field, name: str, value: str) -> list[Any]:
        return [self._element(field, name, item) for item in _split_top_level(value)]

    def _element(self, field: Field, name: str, item: str) -> Any:
        kind = json_field_type(item)
        element_type = field.element_type
        if kind is JsonFieldType.NULL:
            if not field.element_is_ptr:
                raise JsonDeserializeError(f"null element in list field {name}")
            return None
        if element_type not in _COMPATIBLE[kind]:
            raise JsonDeserializeError(
                f"Incompatible vec sub types: {kind.value} and {element_type.value} for field {name}"
            )
        if kind is JsonFieldType.OBJECT:
            return self.deserialize(item, _new_instance(field.element_class_name))
        if kind is JsonFieldType.BOOL:
            return item == "true"
        if kind is JsonFieldType.STRING:
            text = item[1:-1]
            if element_type is FieldType.CHAR:
                return text[0] if text else "\0"
            if element_type is FieldType.BYTE:
                return ord(text[0]) & 0xFF if text else 0
            return text
        if element_type is FieldType.SHORT:
            return ((_parse_int(item) + 0x8000) & 0xFFFF) - 0x8000
        if element_type in (FieldType.INT, FieldType.LONG):
            return _parse_int(item)
        if element_type is FieldType.FLOAT:
            return _to_float32(float(item))
        return float(item)