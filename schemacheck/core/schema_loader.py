"""Schema document loading and schema model construction.

This module turns parsed schema documents into ``SchemaModel`` snapshots.
Two document layouts are understood:

* the native layout, a ``types`` section keyed by type name, convenient to
  write by hand in YAML::

      types:
        Query:
          kind: OBJECT
          fields:
            user:
              type: User
              args:
                id: ID!

* a GraphQL introspection result (``{"data": {"__schema": ...}}`` or
  ``{"__schema": ...}``), as produced by running the standard introspection
  query against a live endpoint.

It also provides the file-based loader used by the command line.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import replace
import json
from pathlib import Path
from typing import Any

import yaml

from .schema import (
    NAME_PATTERN,
    ArgumentDef,
    FieldDef,
    InvalidSchemaError,
    SchemaLoadError,
    SchemaModel,
    TypeDef,
    TypeKind,
    TypeRef,
)

SUPPORTED_SUFFIXES = (".yaml", ".yml", ".json")

YAML_MERGE_TAG = "tag:yaml.org,2002:merge"


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects a key repeated within one mapping."""


def _construct_unique_mapping(loader: UniqueKeyLoader, node: yaml.MappingNode) -> dict:
    seen: set[Any] = set()
    for key_node, _ in node.value:
        # Explicit keys may still override keys pulled in through a merge
        if key_node.tag == YAML_MERGE_TAG or not isinstance(key_node, yaml.ScalarNode):
            continue
        key = loader.construct_object(key_node)
        if key in seen:
            raise yaml.constructor.ConstructorError(
                "while constructing a mapping",
                node.start_mark,
                f"found duplicate key {key!r}",
                key_node.start_mark,
            )
        seen.add(key)
    return loader.construct_mapping(node)


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_unique_mapping
)


def _unique_json_object(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for key, value in pairs:
        if key in obj:
            raise ValueError(f"Duplicate key {key!r} in JSON object")
        obj[key] = value
    return obj


def load_document(path: str | Path) -> dict[str, Any]:
    """Read and parse a YAML or JSON schema document.

    Args:
        path: Path to a ``.yaml``, ``.yml`` or ``.json`` file

    Returns:
        The parsed document

    Raises:
        SchemaLoadError: If the file is missing, unreadable, repeats a key
            within one mapping or is not a mapping
    """
    file_path = Path(path)

    if file_path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise SchemaLoadError(
            f"Unsupported document type '{file_path.suffix}' for {file_path}. "
            f"Supported: {', '.join(SUPPORTED_SUFFIXES)}"
        )

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaLoadError(f"Cannot read {file_path}: {e}") from e

    try:
        if file_path.suffix.lower() == ".json":
            document = json.loads(content, object_pairs_hook=_unique_json_object)
        else:
            document = yaml.load(content, Loader=UniqueKeyLoader)  # noqa: S506
    except (ValueError, yaml.YAMLError, RecursionError) as e:
        raise SchemaLoadError(f"Cannot parse {file_path}: {e}") from e

    if not isinstance(document, dict):
        raise SchemaLoadError(f"Document {file_path} must contain a mapping at top level")

    return document


def build_schema(document: Mapping[str, Any]) -> SchemaModel:
    """Build an immutable schema model from a parsed document.

    Args:
        document: Native-layout or introspection document

    Returns:
        The validated SchemaModel

    Raises:
        InvalidSchemaError: If the document is malformed or violates an invariant
    """
    if not isinstance(document, Mapping):
        raise InvalidSchemaError("Schema document must be a mapping")

    builder = SchemaBuilder()
    introspection = _find_introspection(document)
    if introspection is not None:
        type_defs = builder.from_introspection(introspection)
    elif "types" in document:
        type_defs = builder.from_native(document["types"])
    else:
        raise InvalidSchemaError(
            "Schema document has neither a 'types' section nor an introspection "
            "'__schema' section"
        )

    return builder.finish(type_defs)


def _find_introspection(document: Mapping[str, Any]) -> Mapping[str, Any] | None:
    data = document.get("data")
    if isinstance(data, Mapping) and isinstance(data.get("__schema"), Mapping):
        return data["__schema"]
    if isinstance(document.get("__schema"), Mapping):
        return document["__schema"]
    return None


class SchemaBuilder:
    """Collects problems while converting a document into type definitions.

    Conversion keeps going after an error so that a single InvalidSchemaError
    reports everything wrong with the document.
    """

    def __init__(self) -> None:
        self.errors: list[str] = []

    def finish(self, type_defs: list[TypeDef]) -> SchemaModel:
        """Link interface implementors and construct the model."""
        types: dict[str, TypeDef] = {}
        for type_def in type_defs:
            if type_def.name in types:
                self.errors.append(f"Duplicate type: '{type_def.name}'")
                continue
            types[type_def.name] = type_def

        if self.errors:
            raise InvalidSchemaError(
                f"Schema is invalid ({len(self.errors)} problem(s))", self.errors
            )

        return SchemaModel(_link_interfaces(types))

    # Native layout

    def from_native(self, section: Any) -> list[TypeDef]:
        type_defs = []
        for name, spec in self._entries(section, "types"):
            type_def = self._native_type(name, spec)
            if type_def is not None:
                type_defs.append(type_def)
        return type_defs

    def _native_type(self, name: str, spec: Any) -> TypeDef | None:
        if not isinstance(spec, Mapping):
            self.errors.append(f"Type '{name}' must be a mapping")
            return None

        try:
            kind = TypeKind(str(spec.get("kind", "")).upper())
        except ValueError:
            self.errors.append(
                f"Type '{name}' has unknown kind '{spec.get('kind')}'. "
                f"Supported: {', '.join(k.value for k in TypeKind)}"
            )
            return None

        fields: list[FieldDef] = []
        if kind.has_fields:
            for field_name, field_spec in self._entries(
                spec.get("fields", {}), f"fields of '{name}'"
            ):
                field_def = self._native_field(name, field_name, field_spec)
                if field_def is not None:
                    fields.append(field_def)

        enum_values: list[str] = []
        if kind == TypeKind.ENUM:
            enum_values = self._names(spec.get("values", []), f"values of '{name}'")

        possible_types: list[str] = []
        if kind.has_possible_types:
            possible_types = self._names(
                spec.get("possible_types", spec.get("members", [])),
                f"members of '{name}'",
            )

        interfaces: list[str] = []
        if kind in (TypeKind.OBJECT, TypeKind.INTERFACE):
            interfaces = self._names(spec.get("interfaces", []), f"interfaces of '{name}'")

        return TypeDef(
            name=name,
            kind=kind,
            fields=tuple(fields),
            enum_values=tuple(enum_values),
            possible_types=tuple(possible_types),
            interfaces=tuple(interfaces),
            description=spec.get("description") or "",
        )

    def _native_field(self, type_name: str, name: str, spec: Any) -> FieldDef | None:
        coordinate = f"{type_name}.{name}"
        if isinstance(spec, str):
            spec = {"type": spec}
        if not isinstance(spec, Mapping):
            self.errors.append(f"Field '{coordinate}' must be a type string or mapping")
            return None

        type_ref = self._parse_type(spec.get("type"), f"field '{coordinate}'")
        if type_ref is None:
            return None

        arguments = []
        for arg_name, arg_spec in self._entries(
            spec.get("args", spec.get("arguments", {})), f"arguments of '{coordinate}'"
        ):
            argument = self._native_argument(coordinate, arg_name, arg_spec)
            if argument is not None:
                arguments.append(argument)

        reason = spec.get("deprecation_reason")
        return FieldDef(
            name=name,
            type=type_ref,
            arguments=tuple(arguments),
            deprecated=bool(spec.get("deprecated", False)) or reason is not None,
            deprecation_reason=reason,
            description=spec.get("description") or "",
        )

    def _native_argument(
        self, coordinate: str, name: str, spec: Any
    ) -> ArgumentDef | None:
        if isinstance(spec, str):
            spec = {"type": spec}
        if not isinstance(spec, Mapping):
            self.errors.append(
                f"Argument '{coordinate}.{name}' must be a type string or mapping"
            )
            return None

        type_ref = self._parse_type(spec.get("type"), f"argument '{coordinate}.{name}'")
        if type_ref is None:
            return None

        return ArgumentDef(
            name=name,
            type=type_ref,
            default_value=spec.get("default"),
            has_default="default" in spec,
            description=spec.get("description") or "",
        )

    # Introspection layout

    def from_introspection(self, schema: Mapping[str, Any]) -> list[TypeDef]:
        raw_types = schema.get("types")
        if not isinstance(raw_types, list):
            self.errors.append("Introspection '__schema.types' must be a list")
            return []

        type_defs = []
        for raw in raw_types:
            if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str):
                self.errors.append(f"Introspection type entry is malformed: {raw!r}")
                continue
            if raw["name"].startswith("__"):
                continue
            type_def = self._introspection_type(raw)
            if type_def is not None:
                type_defs.append(type_def)
        return type_defs

    def _introspection_type(self, raw: Mapping[str, Any]) -> TypeDef | None:
        name = raw["name"]
        try:
            kind = TypeKind(raw.get("kind"))
        except ValueError:
            self.errors.append(f"Type '{name}' has unknown kind '{raw.get('kind')}'")
            return None

        fields: list[FieldDef] = []
        raw_fields = raw.get("inputFields") if kind == TypeKind.INPUT_OBJECT else raw.get("fields")
        for raw_field in raw_fields or []:
            field_def = self._introspection_field(name, raw_field)
            if field_def is not None:
                fields.append(field_def)

        return TypeDef(
            name=name,
            kind=kind,
            fields=tuple(fields),
            enum_values=tuple(self._ref_names(raw.get("enumValues"))),
            possible_types=tuple(self._ref_names(raw.get("possibleTypes"))),
            interfaces=tuple(self._ref_names(raw.get("interfaces"))),
            description=raw.get("description") or "",
        )

    def _introspection_field(self, type_name: str, raw: Any) -> FieldDef | None:
        if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str):
            self.errors.append(f"Field entry on '{type_name}' is malformed: {raw!r}")
            return None

        coordinate = f"{type_name}.{raw['name']}"
        type_ref = self._introspection_type_ref(raw.get("type"), f"field '{coordinate}'")
        if type_ref is None:
            return None

        arguments = []
        for raw_arg in raw.get("args") or []:
            if not isinstance(raw_arg, Mapping) or not isinstance(raw_arg.get("name"), str):
                self.errors.append(f"Argument entry on '{coordinate}' is malformed")
                continue
            arg_type = self._introspection_type_ref(
                raw_arg.get("type"), f"argument '{coordinate}.{raw_arg['name']}'"
            )
            if arg_type is None:
                continue
            default = raw_arg.get("defaultValue")
            arguments.append(
                ArgumentDef(
                    name=raw_arg["name"],
                    type=arg_type,
                    default_value=default,
                    has_default=default is not None,
                    description=raw_arg.get("description") or "",
                )
            )

        return FieldDef(
            name=raw["name"],
            type=type_ref,
            arguments=tuple(arguments),
            deprecated=bool(raw.get("isDeprecated", False)),
            deprecation_reason=raw.get("deprecationReason"),
            description=raw.get("description") or "",
        )

    # Helpers

    def _entries(self, section: Any, context: str) -> list[tuple[str, Any]]:
        """Normalize a ``{name: spec}`` mapping or ``[{name: ..., ...}]`` list."""
        if section is None:
            return []
        if isinstance(section, Mapping):
            return [(str(name), spec) for name, spec in section.items()]
        if isinstance(section, list):
            entries = []
            for item in section:
                if isinstance(item, Mapping) and isinstance(item.get("name"), str):
                    spec = {key: value for key, value in item.items() if key != "name"}
                    entries.append((item["name"], spec))
                else:
                    self.errors.append(f"Entry in {context} has no name: {item!r}")
            return entries
        self.errors.append(f"Expected a mapping or list for {context}")
        return []

    def _names(self, section: Any, context: str) -> list[str]:
        if isinstance(section, Mapping):
            section = list(section)
        if not isinstance(section, list):
            self.errors.append(f"Expected a list of names for {context}")
            return []

        names = []
        for item in section:
            name = item.get("name") if isinstance(item, Mapping) else item
            if not isinstance(name, str) or not NAME_PATTERN.match(name):
                self.errors.append(f"Invalid name {name!r} in {context}")
                continue
            names.append(name)
        return names

    def _ref_names(self, refs: Any) -> list[str]:
        return [ref["name"] for ref in refs or [] if isinstance(ref, Mapping) and "name" in ref]

    def _parse_type(self, text: Any, context: str) -> TypeRef | None:
        if not isinstance(text, str):
            self.errors.append(f"Missing type for {context}")
            return None
        try:
            return TypeRef.parse(text)
        except ValueError as e:
            self.errors.append(f"Invalid type for {context}: {e}")
            return None

    def _introspection_type_ref(self, data: Any, context: str) -> TypeRef | None:
        if not isinstance(data, Mapping):
            self.errors.append(f"Missing type for {context}")
            return None
        try:
            return TypeRef.from_introspection(data)
        except ValueError as e:
            self.errors.append(f"Invalid type for {context}: {e}")
            return None


def _link_interfaces(types: dict[str, TypeDef]) -> dict[str, TypeDef]:
    """Record each object type as a possible type of the interfaces it implements."""
    implementors: dict[str, set[str]] = {}
    for type_def in types.values():
        if type_def.kind != TypeKind.OBJECT:
            continue
        for interface in type_def.interfaces:
            implementors.setdefault(interface, set()).add(type_def.name)

    linked = dict(types)
    for interface, names in implementors.items():
        interface_def = linked.get(interface)
        if interface_def is None or interface_def.kind != TypeKind.INTERFACE:
            # Reported as an invariant violation by SchemaModel
            continue
        linked[interface] = replace(
            interface_def,
            possible_types=tuple(sorted(set(interface_def.possible_types) | names)),
        )
    return linked


class SchemaLoader(ABC):
    """Interface for obtaining a schema model."""

    @abstractmethod
    async def load_schema(self) -> SchemaModel:
        """Load and build the schema model."""
        pass


class FileSchemaLoader(SchemaLoader):
    """Loads a schema model from a YAML or JSON document on disk."""

    def __init__(self, path: str | Path):
        """Initialize with the document path.

        Args:
            path: Path to the schema document
        """
        self.path = Path(path)

    async def load_schema(self) -> SchemaModel:
        """Load the document and build the schema model.

        Raises:
            SchemaLoadError: If the file cannot be read or parsed
            InvalidSchemaError: If the document violates schema invariants
        """
        return build_schema(load_document(self.path))

    def load_document(self) -> dict[str, Any]:
        """Read the raw document without building a model."""
        return load_document(self.path)
