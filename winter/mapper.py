"""Copying matching fields from one reflected object into another."""

from __future__ import annotations

import enum

from winter.reflect import CopyType, Reflect, copy_value


class FieldMatchType(enum.Enum):
    """How source field names are matched to destination fields."""

    STRICT = "strict"
    RELAXED = "relaxed"


class UnknownPropertyError(Exception):
    """Raised when a source field has no counterpart and unknown fields are not allowed."""


class Mapper:
    """Copies fields of one object into the fields of the same name in another."""

    def __init__(self, fail_on_unknown: bool = False) -> None:
        self.fail_on_unknown = fail_on_unknown

    def fail_on_unknown_properties(self, value: bool) -> None:
        """Choose whether a source field with no destination raises."""
        self.fail_on_unknown = value

    def map(
        self,
        source: Reflect,
        dest: Reflect,
        field_match_type: FieldMatchType = FieldMatchType.STRICT,
    ) -> None:
        """Copy every source field into ``dest``.

        With RELAXED matching the source name is lower-cased before lookup.
        Fields copied before an unknown one stay copied when it raises.
        """
        for source_field in source.get_declared_fields():
            name = source_field.name
            if field_match_type is FieldMatchType.RELAXED:
                name = name.lower()
            dest_field = dest.get_field(name)
            if dest_field is not None:
                copy_value(source, source_field, dest, dest_field, CopyType.DEEP)
            elif self.fail_on_unknown:
                raise UnknownPropertyError(f"Unknown property {source_field.name} found!")