"""Shared schema documents for the test suite."""

import copy
from typing import Any

import pytest


def _query_schema() -> dict[str, Any]:
    return {
        "types": {
            "Query": {
                "kind": "OBJECT",
                "fields": {
                    "user": {"type": "User", "args": {"id": "ID!"}},
                },
            },
            "User": {
                "kind": "OBJECT",
                "interfaces": ["Node"],
                "fields": {
                    "id": "ID!",
                    "name": "String",
                    "role": "Role",
                },
            },
            "Node": {
                "kind": "INTERFACE",
                "fields": {"id": "ID!"},
            },
            "Role": {
                "kind": "ENUM",
                "values": ["ADMIN", "MEMBER"],
            },
        }
    }


@pytest.fixture
def base_document() -> dict[str, Any]:
    """``type Query { user(id: ID!): User }`` plus supporting types."""
    return _query_schema()


@pytest.fixture
def make_document():
    """Factory returning a fresh deep copy of the base document."""

    def factory() -> dict[str, Any]:
        return copy.deepcopy(_query_schema())

    return factory
