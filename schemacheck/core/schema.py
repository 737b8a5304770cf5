"""Core schema data structures.

This module defines the immutable, normalized representation of an API schema
(types, fields, arguments, enum values and type membership) that the differ
walks. A ``SchemaModel`` is a snapshot: it is validated once on construction
and never mutated afterwards.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
import re
from types import MappingProxyType
from typing import Any

NAME_PATTERN = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")

BUILTIN_SCALARS: tuple[str, ...] = ("Boolean", "Float", "ID", "Int", "String")

# List and non-null markers allowed around a single named type
MAX_TYPE_WRAPPERS = 32


class SchemaCheckError(Exception):
    """Base exception for schema loading and construction failures."""

    pass


class InvalidSchemaError(SchemaCheckError):
    """Raised when a schema document violates the schema model invariants."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class SchemaLoadError(SchemaCheckError):
    """Raised when a schema document cannot be read or parsed."""

    pass


class TypeKind(str, Enum):
    """Kinds of named types a schema can define."""

    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    ENUM = "ENUM"
    SCALAR = "SCALAR"
    INPUT_OBJECT = "INPUT_OBJECT"

    @property
    def has_fields(self) -> bool:
        """Whether types of this kind carry fields."""
        return self in (TypeKind.OBJECT, TypeKind.INTERFACE, TypeKind.INPUT_OBJECT)

    @property
    def has_possible_types(self) -> bool:
        """Whether types of this kind carry a set of member object types."""
        return self in (TypeKind.UNION, TypeKind.INTERFACE)


class TypeRefKind(str, Enum):
    """Wrapping applied to a type reference."""

    NAMED = "NAMED"
    LIST = "LIST"
    NON_NULL = "NON_NULL"


@dataclass(frozen=True)
class TypeRef:
    """Reference to a named type, optionally wrapped in list and non-null markers.

    Two references are equal when their full wrapping structure is equal, so
    ``User`` and ``User!`` and ``[User]`` are all distinct.
    """

    kind: TypeRefKind
    name: str | None = None
    of_type: "TypeRef | None" = None

    @classmethod
    def named(cls, name: str) -> "TypeRef":
        return cls(kind=TypeRefKind.NAMED, name=name)

    @classmethod
    def list_of(cls, inner: "TypeRef") -> "TypeRef":
        return cls(kind=TypeRefKind.LIST, of_type=inner)

    @classmethod
    def non_null(cls, inner: "TypeRef") -> "TypeRef":
        if inner.kind == TypeRefKind.NON_NULL:
            raise ValueError(f"Type '{inner}' is already non-null")
        return cls(kind=TypeRefKind.NON_NULL, of_type=inner)

    @classmethod
    def parse(cls, text: str) -> "TypeRef":
        """Parse an SDL-style type reference such as ``[User!]!``.

        Raises:
            ValueError: If the text is not a well-formed type reference
        """
        wrappers: list[TypeRefKind] = []
        stripped = text.strip()
        while stripped.endswith("!") or stripped.startswith("["):
            _check_depth(wrappers, text)
            if stripped.endswith("!"):
                wrappers.append(TypeRefKind.NON_NULL)
                stripped = stripped[:-1].strip()
            elif not stripped.endswith("]"):
                raise ValueError(f"Unbalanced list brackets in type '{text}'")
            else:
                wrappers.append(TypeRefKind.LIST)
                stripped = stripped[1:-1].strip()

        if not NAME_PATTERN.match(stripped):
            raise ValueError(f"Invalid type reference '{text}'")
        return cls._wrap(cls.named(stripped), wrappers)

    @classmethod
    def from_introspection(cls, data: Mapping[str, Any]) -> "TypeRef":
        """Build a reference from an introspection ``{kind, name, ofType}`` mapping.

        Raises:
            ValueError: If the mapping is malformed
        """
        wrappers: list[TypeRefKind] = []
        current = data
        while current.get("kind") in (TypeRefKind.NON_NULL.value, TypeRefKind.LIST.value):
            _check_depth(wrappers, current.get("kind"))
            wrappers.append(TypeRefKind(current["kind"]))
            current = _require_of_type(current)

        name = current.get("name")
        if not isinstance(name, str) or not NAME_PATTERN.match(name):
            raise ValueError(f"Invalid named type reference: {dict(current)}")
        return cls._wrap(cls.named(name), wrappers)

    @classmethod
    def _wrap(cls, ref: "TypeRef", wrappers: list[TypeRefKind]) -> "TypeRef":
        """Apply wrappers collected outermost first around ``ref``."""
        for kind in reversed(wrappers):
            ref = cls.non_null(ref) if kind == TypeRefKind.NON_NULL else cls.list_of(ref)
        return ref

    @property
    def named_type(self) -> str:
        """Name of the innermost named type."""
        ref: TypeRef = self
        while ref.of_type is not None:
            ref = ref.of_type
        return ref.name or ""

    @property
    def is_non_null(self) -> bool:
        return self.kind == TypeRefKind.NON_NULL

    def __str__(self) -> str:
        if self.kind == TypeRefKind.NON_NULL:
            return f"{self.of_type}!"
        if self.kind == TypeRefKind.LIST:
            return f"[{self.of_type}]"
        return self.name or ""


def _check_depth(wrappers: list[TypeRefKind], context: Any) -> None:
    if len(wrappers) >= MAX_TYPE_WRAPPERS:
        raise ValueError(
            f"Type reference nested more than {MAX_TYPE_WRAPPERS} levels deep: {context!r:.80}"
        )


def _require_of_type(data: Mapping[str, Any]) -> Mapping[str, Any]:
    of_type = data.get("ofType")
    if not isinstance(of_type, Mapping):
        raise ValueError(f"Wrapped type reference is missing 'ofType': {dict(data)}")
    return of_type


@dataclass(frozen=True)
class ArgumentDef:
    """Definition of a field argument."""

    name: str
    type: TypeRef
    default_value: Any = None
    has_default: bool = False
    description: str = ""

    @property
    def required(self) -> bool:
        """An argument is required when it is non-null and has no default."""
        return self.type.is_non_null and not self.has_default


@dataclass(frozen=True)
class FieldDef:
    """Definition of a field on an object, interface or input object type."""

    name: str
    type: TypeRef
    arguments: tuple[ArgumentDef, ...] = ()
    deprecated: bool = False
    deprecation_reason: str | None = None
    description: str = ""

    def get_argument(self, name: str) -> ArgumentDef | None:
        for argument in self.arguments:
            if argument.name == name:
                return argument
        return None

    @property
    def argument_names(self) -> list[str]:
        return [argument.name for argument in self.arguments]


@dataclass(frozen=True)
class TypeDef:
    """Definition of a named type.

    ``possible_types`` holds union members for UNION types and implementing
    object types for INTERFACE types.
    """

    name: str
    kind: TypeKind
    fields: tuple[FieldDef, ...] = ()
    enum_values: tuple[str, ...] = ()
    possible_types: tuple[str, ...] = ()
    interfaces: tuple[str, ...] = ()
    description: str = ""

    def get_field(self, name: str) -> FieldDef | None:
        for field_def in self.fields:
            if field_def.name == name:
                return field_def
        return None

    @property
    def field_names(self) -> list[str]:
        return [field_def.name for field_def in self.fields]


@dataclass(frozen=True)
class SchemaModel:
    """Immutable snapshot of a schema with read-only lookups.

    Construction checks that every type, field and argument name is unique in
    its scope and that every type reference resolves to a defined type.

    Raises:
        InvalidSchemaError: If any invariant is violated
    """

    type_defs: Mapping[str, TypeDef] = field(default_factory=dict)

    def __post_init__(self) -> None:
        types = dict(self.type_defs)
        for scalar in BUILTIN_SCALARS:
            types.setdefault(scalar, TypeDef(name=scalar, kind=TypeKind.SCALAR))

        errors = find_schema_errors(types)
        if errors:
            raise InvalidSchemaError(
                f"Schema is invalid ({len(errors)} problem(s))", errors
            )

        object.__setattr__(self, "type_defs", MappingProxyType(types))

    def __contains__(self, type_name: object) -> bool:
        return type_name in self.type_defs

    def __iter__(self) -> Iterator[TypeDef]:
        for name in self.type_names:
            yield self.type_defs[name]

    def __len__(self) -> int:
        return len(self.type_defs)

    @property
    def type_names(self) -> list[str]:
        """All type names in lexicographic order."""
        return sorted(self.type_defs)

    def get_type(self, name: str) -> TypeDef | None:
        return self.type_defs.get(name)

    def get_field(self, type_name: str, field_name: str) -> FieldDef | None:
        type_def = self.get_type(type_name)
        return type_def.get_field(field_name) if type_def else None

    def get_argument(
        self, type_name: str, field_name: str, argument_name: str
    ) -> ArgumentDef | None:
        field_def = self.get_field(type_name, field_name)
        return field_def.get_argument(argument_name) if field_def else None


def find_schema_errors(types: Mapping[str, TypeDef]) -> list[str]:
    """Check schema invariants and return a message for every violation found."""
    errors: list[str] = []

    for type_name in sorted(types):
        type_def = types[type_name]
        if type_def.name != type_name:
            errors.append(
                f"Type registered as '{type_name}' is named '{type_def.name}'"
            )

        errors.extend(_duplicates(type_def.field_names, f"field in type '{type_name}'"))
        errors.extend(_duplicates(type_def.enum_values, f"value in enum '{type_name}'"))
        errors.extend(
            _duplicates(type_def.possible_types, f"member in type '{type_name}'")
        )

        if type_def.kind.has_fields and not type_def.fields:
            errors.append(f"Type '{type_name}' ({type_def.kind.value}) has no fields")
        if type_def.kind == TypeKind.ENUM and not type_def.enum_values:
            errors.append(f"Enum '{type_name}' has no values")

        for field_def in type_def.fields:
            coordinate = f"{type_name}.{field_def.name}"
            errors.extend(
                _duplicates(field_def.argument_names, f"argument on '{coordinate}'")
            )
            if field_def.type.named_type not in types:
                errors.append(
                    f"Field '{coordinate}' refers to undefined type "
                    f"'{field_def.type.named_type}'"
                )
            for argument in field_def.arguments:
                if argument.type.named_type not in types:
                    errors.append(
                        f"Argument '{coordinate}.{argument.name}' refers to undefined "
                        f"type '{argument.type.named_type}'"
                    )

        for member in type_def.possible_types:
            member_def = types.get(member)
            if member_def is None:
                errors.append(f"Type '{type_name}' refers to undefined member '{member}'")
            elif member_def.kind != TypeKind.OBJECT:
                errors.append(
                    f"Member '{member}' of '{type_name}' must be an OBJECT type, "
                    f"not {member_def.kind.value}"
                )

        for interface in type_def.interfaces:
            interface_def = types.get(interface)
            if interface_def is None:
                errors.append(
                    f"Type '{type_name}' implements undefined interface '{interface}'"
                )
            elif interface_def.kind != TypeKind.INTERFACE:
                errors.append(
                    f"Type '{type_name}' implements '{interface}', which is "
                    f"{interface_def.kind.value}, not INTERFACE"
                )

    return errors


def _duplicates(names: Iterable[str], scope: str) -> list[str]:
    seen: set[str] = set()
    reported: set[str] = set()
    errors = []
    for name in names:
        if name in seen and name not in reported:
            errors.append(f"Duplicate {scope}: '{name}'")
            reported.add(name)
        seen.add(name)
    return errors
