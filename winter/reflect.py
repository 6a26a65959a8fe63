"""Runtime field descriptions for data classes: typed fields, lookup by name and copying."""

from __future__ import annotations

import enum
import re
import struct
from typing import Any, Optional

from winter.log import get_logger


class ReflectionError(Exception):
    """Raised when a field cannot be declared, read, converted or copied."""


class FieldType(enum.Enum):
    """Kinds of values a declared field can hold."""

    SHORT = "short"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    CHAR = "char"
    BOOL = "bool"
    BYTE = "byte"
    STRING = "string"
    VECTOR = "vector"
    OBJ = "obj"


class CopyType(enum.Enum):
    """How nested objects and lists are treated when copying."""

    SHALLOW = "shallow"
    DEEP = "deep"


_PRIMITIVES = {
    "short": FieldType.SHORT,
    "int": FieldType.INT,
    "long": FieldType.LONG,
    "float": FieldType.FLOAT,
    "double": FieldType.DOUBLE,
    "char": FieldType.CHAR,
    "bool": FieldType.BOOL,
    "byte": FieldType.BYTE,
    "std::byte": FieldType.BYTE,
    "string": FieldType.STRING,
    "std::string": FieldType.STRING,
}

_INTEGER_TYPES = (FieldType.SHORT, FieldType.INT, FieldType.LONG)
_FLOAT_TYPES = (FieldType.FLOAT, FieldType.DOUBLE)

_VECTOR_RE = re.compile(r"^(?:std::)?vector\s*<\s*(.+?)\s*>$")
_CLASS_NAME_RE = re.compile(r"^[A-Za-z_][\w:]*$")
_INT_PREFIX_RE = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX_RE = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)

_INT_BITS = {FieldType.INT: 32, FieldType.LONG: 64}


def _strip_pointer(type_str: str) -> tuple[str, bool]:
    text = type_str.strip()
    if text.endswith("*"):
        return text[:-1].strip(), True
    return text, False


def _scalar_type(base: str) -> tuple[FieldType, Optional[str]]:
    if base in _PRIMITIVES:
        return _PRIMITIVES[base], None
    if _VECTOR_RE.match(base):
        raise ReflectionError(f"nested vectors are not supported: {base}")
    if not _CLASS_NAME_RE.match(base):
        raise ReflectionError(f"invalid type: {base!r}")
    return FieldType.OBJ, base


def _parse_int(text: str, bits: int) -> int:
    match = _INT_PREFIX_RE.match(text)
    if match is None:
        raise ValueError(f"invalid integer: {text!r}")
    value = int(match.group(1))
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ValueError(f"integer out of range: {text!r}")
    return value


def _parse_float(text: str) -> float:
    match = _FLOAT_PREFIX_RE.match(text)
    if match is None:
        raise ValueError(f"invalid number: {text!r}")
    return float(match.group(1))


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        raise ValueError(f"number out of range: {value!r}") from None


_class_map: dict[str, type] = {}


def register_class(cls: type) -> type:
    """Make ``cls`` creatable by name; usable as a class decorator."""
    _class_map[cls.__name__] = cls
    return cls


def get_class_instance_by_name(name: str) -> Optional["Reflect"]:
    """Return a new default instance of the registered class ``name``, or None."""
    cls = _class_map.get(name)
    if cls is None:
        return None
    return cls()


class Field:
    """A typed field declared as a class attribute of a :class:`Reflect` subclass.

    The type is written as a string: ``short``, ``int``, ``long``, ``float``,
    ``double``, ``char``, ``bool``, ``byte``, ``string``, ``vector<T>`` or the
    name of another registered class. A trailing ``*`` makes the field
    nullable (its default is None).
    """

    def __init__(self, type_str: str, *, key: Optional[str] = None) -> None:
        self.type_str = type_str.strip()
        self.key = key
        self.name = key or ""
        self.attr = key or ""
        base, self.is_ptr = _strip_pointer(self.type_str)
        self.class_name: Optional[str] = None
        self.element_type: Optional[FieldType] = None
        self.element_is_ptr = False
        self.element_class_name: Optional[str] = None
        self.element_type_str: Optional[str] = None

        vector = _VECTOR_RE.match(base)
        if vector:
            self.type = FieldType.VECTOR
            self.element_type_str = vector.group(1)
            element_base, self.element_is_ptr = _strip_pointer(self.element_type_str)
            self.element_type, self.element_class_name = _scalar_type(element_base)
        else:
            self.type, self.class_name = _scalar_type(base)

    def __set_name__(self, owner: type, attr: str) -> None:
        self.attr = attr
        if self.key is None:
            self.name = attr

    def __repr__(self) -> str:
        return f"Field(name={self.name!r}, type_str={self.type_str!r})"

    def default(self) -> Any:
        """The value a freshly created object holds in this field."""
        if self.is_ptr:
            return None
        if self.type is FieldType.VECTOR:
            return []
        if self.type is FieldType.STRING:
            return ""
        if self.type is FieldType.CHAR:
            return "\0"
        if self.type is FieldType.BOOL:
            return False
        if self.type in _FLOAT_TYPES:
            return 0.0
        if self.type is FieldType.OBJ:
            instance = get_class_instance_by_name(self.class_name)
            if instance is None:
                raise ReflectionError(f"unknown class {self.class_name!r} for field {self.name!r}")
            return instance
        return 0

    def get(self, obj: "Reflect") -> Any:
        """Return the value of this field in ``obj``."""
        return getattr(obj, self.attr)

    def set(self, obj: "Reflect", value: Any) -> None:
        """Store ``value`` in this field of ``obj``."""
        setattr(obj, self.attr, value)

    def set_from_string(self, obj: "Reflect", text: str) -> None:
        """Parse ``text`` according to the field type and store the result.

        Integers and floats are read from the leading part of ``text``;
        ValueError is raised when none is there or it is out of range.
        """
        kind = self.type
        if kind is FieldType.SHORT:
            value: Any = ((_parse_int(text, 32) + 0x8000) & 0xFFFF) - 0x8000
        elif kind in _INT_BITS:
            value = _parse_int(text, _INT_BITS[kind])
        elif kind is FieldType.FLOAT:
            value = _to_float32(_parse_float(text))
        elif kind is FieldType.DOUBLE:
            value = _parse_float(text)
        elif kind is FieldType.CHAR:
            value = text[0] if text else "\0"
        elif kind is FieldType.BOOL:
            value = text.strip().lower() == "true"
        elif kind is FieldType.BYTE:
            value = ord(text[0]) & 0xFF if text else 0
        elif kind is FieldType.STRING:
            value = text
        else:
            raise ReflectionError(f"cannot set field {self.name!r} of type {kind.value} from a string")
        self.set(obj, value)

    def get_as_string(self, obj: "Reflect", string_char: Optional[str] = None) -> str:
        """Render the value as text; chars and strings are wrapped in ``string_char``."""
        value = self.get(obj)
        quote = string_char or ""
        kind = self.type
        if kind in (FieldType.CHAR, FieldType.STRING):
            text = "null" if value is None else value
            return f"{quote}{text}{quote}"
        if value is None:
            return "null"
        if kind in _INTEGER_TYPES or kind is FieldType.BYTE:
            return str(int(value))
        if kind in _FLOAT_TYPES:
            return f"{float(value):f}"
        if kind is FieldType.BOOL:
            return "true" if value else "false"
        raise ReflectionError(f"field {self.name!r} of type {kind.value} has no string form")


class Reflect:
    """Base for classes whose fields are declared with :class:`Field` attributes."""

    _declared_fields: tuple[Field, ...] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        by_attr: dict[str, Field] = {}
        for klass in reversed(cls.__mro__):
            for value in vars(klass).values():
                if isinstance(value, Field):
                    by_attr[value.attr] = value
        cls._declared_fields = tuple(by_attr.values())
        register_class(cls)

    def __init__(self, **values: Any) -> None:
        fields = type(self)._declared_fields
        for field in fields:
            field.set(self, field.default())
        attrs = {field.attr for field in fields}
        for attr, value in values.items():
            if attr not in attrs:
                raise TypeError(f"{type(self).__name__} has no field {attr!r}")
            setattr(self, attr, value)

    @classmethod
    def get_declared_fields(cls) -> list[Field]:
        """The declared fields in declaration order, inherited ones first."""
        return list(cls._declared_fields)

    def get_field(self, name: str) -> Optional[Field]:
        """Return the field called ``name``, or None if there is none."""
        for field in type(self)._declared_fields:
            if field.name == name:
                return field
        return None

    def clone(self, copy_type: CopyType = CopyType.DEEP) -> "Reflect":
        """Return a new object of the same class holding a copy of every field."""
        duplicate = type(self)()
        copy_object(self, duplicate, copy_type)
        return duplicate

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(f.get(self) == f.get(other) for f in type(self)._declared_fields)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = ", ".join(f"{f.attr}={f.get(self)!r}" for f in type(self)._declared_fields)
        return f"{type(self).__name__}({parts})"


def copy_value(
    source: Reflect,
    source_field: Field,
    dest: Reflect,
    dest_field: Field,
    copy_type: CopyType = CopyType.DEEP,
) -> None:
    """Copy one field's value from ``source`` into a field of ``dest``."""
    if source_field.type is not dest_field.type:
        raise ReflectionError(
            f"Source and Field types dont match. Source: {source_field.type.value}, "
            f"Dest: {dest_field.type.value}"
        )
    value = source_field.get(source)
    if value is None:
        if not dest_field.is_ptr:
            raise ReflectionError(f"cannot copy null into field {dest_field.name!r}")
        dest_field.set(dest, None)
        return

    kind = dest_field.type
    if kind is FieldType.OBJ:
        if copy_type is CopyType.SHALLOW:
            dest_field.set(dest, value)
            return
        target = dest_field.get(dest)
        if target is None:
            target = type(value)()
            dest_field.set(dest, target)
        copy_object(value, target, copy_type)
    elif kind is FieldType.VECTOR:
        if copy_type is CopyType.SHALLOW:
            dest_field.set(dest, list(value))
        else:
            dest_field.set(
                dest,
                [item.clone(CopyType.DEEP) if isinstance(item, Reflect) else item for item in value],
            )
    else:
        dest_field.set(dest, value)


def copy_object(source: Reflect, dest: Reflect, copy_type: CopyType = CopyType.DEEP) -> None:
    """Copy every field of ``source`` into the field of the same name in ``dest``."""
    source_fields = source.get_declared_fields()
    dest_fields = dest.get_declared_fields()
    if len(source_fields) != len(dest_fields):
        raise ReflectionError(
            f"Class sizes mismatch. Source: {len(source_fields)} Dest: {len(dest_fields)}"
        )
    for source_field in source_fields:
        dest_field = dest.get_field(source_field.name)
        if dest_field is None:
            get_logger().warn("Invalid field occurred: {}", source_field.name)
            continue
        copy_value(source, source_field, dest, dest_field, copy_type)