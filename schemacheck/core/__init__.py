"""Core functionality: schema model, document loading and logging."""

from .logging import (
    OperationTimer,
    StructlogMiddleware,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)
from .schema import (
    BUILTIN_SCALARS,
    MAX_TYPE_WRAPPERS,
    ArgumentDef,
    FieldDef,
    InvalidSchemaError,
    SchemaCheckError,
    SchemaLoadError,
    SchemaModel,
    TypeDef,
    TypeKind,
    TypeRef,
    TypeRefKind,
)
from .schema_loader import (
    FileSchemaLoader,
    SchemaBuilder,
    SchemaLoader,
    build_schema,
    load_document,
)

__all__ = [
    "BUILTIN_SCALARS",
    "MAX_TYPE_WRAPPERS",
    # Schema model
    "ArgumentDef",
    "FieldDef",
    "FileSchemaLoader",
    "InvalidSchemaError",
    "OperationTimer",
    "SchemaBuilder",
    "SchemaCheckError",
    "SchemaLoadError",
    "SchemaLoader",
    "SchemaModel",
    "StructlogMiddleware",
    "TypeDef",
    "TypeKind",
    "TypeRef",
    "TypeRefKind",
    "bind_context",
    "build_schema",
    "clear_context",
    # Logging
    "configure_logging",
    "get_logger",
    "load_document",
]
