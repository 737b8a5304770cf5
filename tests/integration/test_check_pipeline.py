"""End-to-end tests of the check pipeline on introspection documents.

Schema documents and usage records are written to disk and run through the
same loaders the command line uses.
"""

from datetime import UTC, datetime, timedelta
import json
from pathlib import Path
import tempfile

import pytest

from schemacheck.core import FileSchemaLoader
from schemacheck.usage import FileUsageOracle, InMemoryUsageOracle
from schemacheck.validation import CheckPolicy, SchemaChangeValidator, Severity

NOW = datetime(2024, 6, 1, tzinfo=UTC)


def _named(kind, name):
    return {"kind": kind, "name": name, "ofType": None}


def _non_null(inner):
    return {"kind": "NON_NULL", "name": None, "ofType": inner}


def _field(name, type_ref, args=(), deprecation_reason=None):
    return {
        "name": name,
        "args": list(args),
        "type": type_ref,
        "isDeprecated": deprecation_reason is not None,
        "deprecationReason": deprecation_reason,
    }


def _arg(name, type_ref, default=None):
    return {"name": name, "type": type_ref, "defaultValue": default}


def _introspection(query_fields, user_fields, status_values):
    return {
        "data": {
            "__schema": {
                "queryType": {"name": "Query"},
                "types": [
                    {"kind": "OBJECT", "name": "Query", "fields": query_fields, "interfaces": []},
                    {"kind": "OBJECT", "name": "User", "fields": user_fields, "interfaces": []},
                    {
                        "kind": "ENUM",
                        "name": "Status",
                        "enumValues": [
                            {"name": value, "isDeprecated": False} for value in status_values
                        ],
                    },
                    {"kind": "SCALAR", "name": "ID"},
                    {"kind": "SCALAR", "name": "String"},
                    {"kind": "SCALAR", "name": "Int"},
                ],
            }
        }
    }


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def schema_files(temp_dir):
    """Old and new introspection documents for a realistic release."""
    old = _introspection(
        query_fields=[
            _field("user", _named("OBJECT", "User"), [_arg("id", _non_null(_named("SCALAR", "ID")))]),
            _field("users", _named("OBJECT", "User"), [_arg("first", _named("SCALAR", "Int"), "10")]),
        ],
        user_fields=[
            _field("id", _non_null(_named("SCALAR", "ID"))),
            _field("login", _named("SCALAR", "String")),
            _field("legacyName", _named("SCALAR", "String")),
            _field("status", _named("ENUM", "Status")),
        ],
        status_values=["ACTIVE", "SUSPENDED"],
    )
    new = _introspection(
        query_fields=[
            _field("user", _named("OBJECT", "User"), [_arg("id", _non_null(_named("SCALAR", "ID")))]),
            _field("users", _named("OBJECT", "User"), [_arg("first", _named("SCALAR", "Int"), "20")]),
        ],
        user_fields=[
            _field("id", _non_null(_named("SCALAR", "ID"))),
            _field("login", _named("SCALAR", "String"), deprecation_reason="Use handle"),
            _field("handle", _named("SCALAR", "String")),
            _field("status", _named("ENUM", "Status")),
        ],
        status_values=["ACTIVE", "SUSPENDED", "DELETED"],
    )
    old_path = temp_dir / "old.json"
    new_path = temp_dir / "new.json"
    old_path.write_text(json.dumps(old))
    new_path.write_text(json.dumps(new))
    return old_path, new_path


@pytest.fixture
def usage_file(temp_dir):
    records = [
        {"coordinate": "Query.user", "last_seen": (NOW - timedelta(days=1)).isoformat(), "client": "web"},
        {"coordinate": "User.login", "last_seen": (NOW - timedelta(days=2)).isoformat(), "client": "web"},
        {"coordinate": "User.legacyName", "last_seen": (NOW - timedelta(days=120)).isoformat()},
    ]
    path = temp_dir / "usage.json"
    path.write_text(json.dumps({"records": records}))
    return path


class TestCheckPipeline:
    """Run complete comparisons from files."""

    @pytest.mark.asyncio
    async def test_release_with_usage(self, schema_files, usage_file):
        """A stale field removal passes once usage confirms it is unused."""
        old_path, new_path = schema_files
        old = FileSchemaLoader(old_path).load_document()
        new = FileSchemaLoader(new_path).load_document()
        oracle = FileUsageOracle(usage_file, clock=lambda: NOW)

        result = await SchemaChangeValidator(oracle).validate(old, new)

        assert [(c.code, c.path, c.severity) for c in result.changes] == [
            ("FIELD_REMOVED", "User.legacyName", Severity.NOTICE),
            ("ARG_DEFAULT_VALUE_CHANGE", "Query.users.first", Severity.WARNING),
            ("FIELD_DEPRECATION_ADDED", "User.login", Severity.WARNING),
            ("ENUM_VALUE_ADDED", "Status.DELETED", Severity.NOTICE),
            ("FIELD_ADDED", "User.handle", Severity.NOTICE),
        ]
        assert result.usage_data_available is True
        assert result.overall_severity == Severity.WARNING
        assert CheckPolicy().passed(result) is True

    @pytest.mark.asyncio
    async def test_release_without_usage(self, schema_files):
        """The same release fails when no usage data exists."""
        old_path, new_path = schema_files
        old = FileSchemaLoader(old_path).load_document()
        new = FileSchemaLoader(new_path).load_document()

        result = await SchemaChangeValidator(InMemoryUsageOracle()).validate(old, new)

        assert result.changes[0].severity == Severity.FAILURE
        assert result.passed is False
        assert result.usage_data_available is False

    @pytest.mark.asyncio
    async def test_models_load_from_files(self, schema_files):
        """FileSchemaLoader builds models from introspection files."""
        old_path, new_path = schema_files
        old_model = await FileSchemaLoader(old_path).load_schema()
        new_model = await FileSchemaLoader(new_path).load_schema()

        assert old_model.get_argument("Query", "users", "first").default_value == "10"
        assert new_model.get_field("User", "login").deprecated is True
        assert new_model.get_type("Status").enum_values == ("ACTIVE", "SUSPENDED", "DELETED")
