"""Rendering reflected objects as JSON text."""

from __future__ import annotations

from typing import Any

from winter.log import get_logger
from winter.reflect import Field, FieldType, Reflect

_INTEGER_TYPES = (FieldType.SHORT, FieldType.INT, FieldType.LONG)
_FLOAT_TYPES = (FieldType.FLOAT, FieldType.DOUBLE)


class JsonSerializer:
    """Writes the declared fields of a :class:`Reflect` object as a JSON object.

    Fields appear in declaration order, one per line. Floats are written
    with six decimals, null pointers as ``null`` and a null list as ``[]``.
    Strings are written between quotes without escaping.
    """

    def serialize(self, obj: Reflect) -> str:
        """Return the JSON text of ``obj``."""
        entries = [
            f'"{field.name}":{self._field_value(field, obj)}'
            for field in obj.get_declared_fields()
        ]
        if not entries:
            return "{\n}"
        return "{\n" + ",\n".join(entries) + "\n}"

    def _field_value(self, field: Field, obj: Reflect) -> str:
        value = field.get(obj)
        if field.type is FieldType.VECTOR:
            return self._vector(field, value)
        if value is None:
            return "null"
        return self._scalar(field.type, value)

    def _vector(self, field: Field, values: Any) -> str:
        if not values:
            return "[]"
        element_type = field.element_type
        rendered = (
            "null" if item is None else self._scalar(element_type, item) for item in values
        )
        return "[" + ",".join(rendered) + "]"

    def _scalar(self, kind: FieldType, value: Any) -> str:
        if kind in _INTEGER_TYPES:
            return str(int(value))
        if kind in _FLOAT_TYPES:
            return f"{float(value):f}"
        if kind is FieldType.BOOL:
            return "true" if value else "false"
        if kind in (FieldType.CHAR, FieldType.STRING):
            return f'"{value}"'
        if kind is FieldType.OBJ:
            return self.serialize(value)
        get_logger().error("Unknown fieldType: {}", kind.value)
        return '""'