"""Structural change detection between two schema versions.

The differ walks an old and a new ``SchemaModel`` in lockstep and reports
every difference as a ``ChangeEvent``. Names are visited in lexicographic
order at every level so identical inputs always give identically ordered
output.
"""

from collections.abc import Iterable
import json
from typing import Any

from ..core import ArgumentDef, FieldDef, SchemaModel, TypeDef, TypeKind
from .types import ChangeCode, ChangeEvent


class SchemaDiffer:
    """Detects structural changes between schema versions."""

    def diff(self, old_schema: SchemaModel, new_schema: SchemaModel) -> list[ChangeEvent]:
        """Detect changes between old and new schemas.

        Args:
            old_schema: The schema consumers currently rely on
            new_schema: The proposed schema

        Returns:
            Change events in traversal order
        """
        events: list[ChangeEvent] = []

        old_types = set(old_schema.type_names)
        new_types = set(new_schema.type_names)

        for type_name in sorted(old_types | new_types):
            old_type = old_schema.get_type(type_name)
            new_type = new_schema.get_type(type_name)

            if old_type is None and new_type is not None:
                events.append(
                    ChangeEvent.create(
                        ChangeCode.TYPE_ADDED,
                        type_name,
                        f"Type `{type_name}` ({new_type.kind.value}) was added",
                    )
                )
            elif new_type is None and old_type is not None:
                events.append(
                    ChangeEvent.create(
                        ChangeCode.TYPE_REMOVED,
                        type_name,
                        f"Type `{type_name}` ({old_type.kind.value}) was removed",
                    )
                )
            elif old_type is not None and new_type is not None:
                events.extend(self._diff_type(old_type, new_type))

        return events

    def _diff_type(self, old_type: TypeDef, new_type: TypeDef) -> list[ChangeEvent]:
        if old_type.kind != new_type.kind:
            # Incompatible shapes, nothing deeper is comparable
            return [
                ChangeEvent.create(
                    ChangeCode.TYPE_KIND_CHANGED,
                    old_type.name,
                    f"`{old_type.name}` changed kind from {old_type.kind.value} "
                    f"to {new_type.kind.value}",
                )
            ]

        events: list[ChangeEvent] = []
        if old_type.kind.has_fields:
            events.extend(self._diff_fields(old_type, new_type))
        events.extend(self._diff_enum_values(old_type, new_type))
        if old_type.kind.has_possible_types:
            events.extend(self._diff_possible_types(old_type, new_type))
        return events

    def _diff_fields(self, old_type: TypeDef, new_type: TypeDef) -> list[ChangeEvent]:
        """Detect added, removed and modified fields of one type."""
        events: list[ChangeEvent] = []
        type_name = old_type.name

        for field_name in _sorted_union(old_type.field_names, new_type.field_names):
            path = f"{type_name}.{field_name}"
            old_field = old_type.get_field(field_name)
            new_field = new_type.get_field(field_name)

            if old_field is None and new_field is not None:
                events.append(
                    ChangeEvent.create(
                        ChangeCode.FIELD_ADDED,
                        path,
                        f"Field `{field_name}: {new_field.type}` was added to `{type_name}`",
                    )
                )
            elif new_field is None and old_field is not None:
                events.append(
                    ChangeEvent.create(
                        ChangeCode.FIELD_REMOVED,
                        path,
                        f"Field `{field_name}` was removed from `{type_name}`",
                    )
                )
            elif old_field is not None and new_field is not None:
                events.extend(self._diff_field(path, old_field, new_field))

        return events

    def _diff_field(
        self, path: str, old_field: FieldDef, new_field: FieldDef
    ) -> list[ChangeEvent]:
        events: list[ChangeEvent] = []

        if old_field.type != new_field.type:
            events.append(
                ChangeEvent.create(
                    ChangeCode.FIELD_CHANGED_KIND,
                    path,
                    f"`{path}` changed type from `{old_field.type}` to `{new_field.type}`",
                )
            )

        if not old_field.deprecated and new_field.deprecated:
            reason = (
                f": {new_field.deprecation_reason}"
                if new_field.deprecation_reason
                else ""
            )
            events.append(
                ChangeEvent.create(
                    ChangeCode.FIELD_DEPRECATION_ADDED,
                    path,
                    f"`{path}` was deprecated{reason}",
                )
            )
        elif old_field.deprecated and not new_field.deprecated:
            events.append(
                ChangeEvent.create(
                    ChangeCode.FIELD_DEPRECATION_REMOVED,
                    path,
                    f"`{path}` is no longer deprecated",
                )
            )

        events.extend(self._diff_arguments(path, old_field, new_field))
        return events

    def _diff_arguments(
        self, field_path: str, old_field: FieldDef, new_field: FieldDef
    ) -> list[ChangeEvent]:
        events: list[ChangeEvent] = []

        for arg_name in _sorted_union(old_field.argument_names, new_field.argument_names):
            path = f"{field_path}.{arg_name}"
            old_arg = old_field.get_argument(arg_name)
            new_arg = new_field.get_argument(arg_name)

            if old_arg is None and new_arg is not None:
                qualifier = "required" if new_arg.required else "optional"
                events.append(
                    ChangeEvent.create(
                        ChangeCode.ARG_ADDED,
                        path,
                        f"{qualifier.capitalize()} argument `{arg_name}: {new_arg.type}` "
                        f"was added to `{field_path}`",
                        required_argument=new_arg.required,
                    )
                )
            elif new_arg is None and old_arg is not None:
                events.append(
                    ChangeEvent.create(
                        ChangeCode.ARG_REMOVED,
                        path,
                        f"Argument `{arg_name}` was removed from `{field_path}`",
                    )
                )
            elif old_arg is not None and new_arg is not None:
                events.extend(self._diff_argument(path, old_arg, new_arg))

        return events

    def _diff_argument(
        self, path: str, old_arg: ArgumentDef, new_arg: ArgumentDef
    ) -> list[ChangeEvent]:
        events: list[ChangeEvent] = []

        if old_arg.type != new_arg.type:
            events.append(
                ChangeEvent.create(
                    ChangeCode.ARG_CHANGED_KIND,
                    path,
                    f"`{path}` changed type from `{old_arg.type}` to `{new_arg.type}`",
                )
            )

        if _canonical_default(old_arg) != _canonical_default(new_arg):
            events.append(
                ChangeEvent.create(
                    ChangeCode.ARG_DEFAULT_VALUE_CHANGE,
                    path,
                    f"`{path}` default value changed from {_format_default(old_arg)} "
                    f"to {_format_default(new_arg)}",
                )
            )

        return events

    def _diff_enum_values(self, old_type: TypeDef, new_type: TypeDef) -> list[ChangeEvent]:
        events: list[ChangeEvent] = []
        old_values = set(old_type.enum_values)
        new_values = set(new_type.enum_values)

        for value in sorted(old_values | new_values):
            path = f"{old_type.name}.{value}"
            if value not in old_values:
                events.append(
                    ChangeEvent.create(
                        ChangeCode.ENUM_VALUE_ADDED,
                        path,
                        f"Value `{value}` was added to enum `{old_type.name}`",
                    )
                )
            elif value not in new_values:
                events.append(
                    ChangeEvent.create(
                        ChangeCode.ENUM_VALUE_REMOVED,
                        path,
                        f"Value `{value}` was removed from enum `{old_type.name}`",
                    )
                )

        return events

    def _diff_possible_types(
        self, old_type: TypeDef, new_type: TypeDef
    ) -> list[ChangeEvent]:
        events: list[ChangeEvent] = []
        old_members = set(old_type.possible_types)
        new_members = set(new_type.possible_types)
        relation = "union" if old_type.kind == TypeKind.UNION else "interface"

        for member in sorted(old_members | new_members):
            path = f"{old_type.name}.{member}"
            if member not in old_members:
                events.append(
                    ChangeEvent.create(
                        ChangeCode.UNION_MEMBER_ADDED,
                        path,
                        f"`{member}` was added to {relation} `{old_type.name}`",
                    )
                )
            elif member not in new_members:
                events.append(
                    ChangeEvent.create(
                        ChangeCode.UNION_MEMBER_REMOVED,
                        path,
                        f"`{member}` was removed from {relation} `{old_type.name}`",
                    )
                )

        return events


def _sorted_union(old_names: Iterable[str], new_names: Iterable[str]) -> list[str]:
    return sorted(set(old_names) | set(new_names))


def _canonical_default(argument: ArgumentDef) -> tuple[bool, str | None]:
    # Plain equality treats 1 == True and 0 == False
    if not argument.has_default:
        return (False, None)
    return (True, json.dumps(argument.default_value, sort_keys=True, default=str))


def _format_default(argument: ArgumentDef) -> str:
    if not argument.has_default:
        return "(none)"
    return f"`{_render_value(argument.default_value)}`"


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, default=str)
