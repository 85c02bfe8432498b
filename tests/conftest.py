"""Shared pytest fixtures for arklens tests."""

import pytest

SCOPE_SOURCE = """\
import {scope, type} from "arktype";

// Define a scope with type aliases
const coolScope = scope({
    // Type aliases that should be available for completion within the scope
    Id: "string",
    User: { id: "Id", friends: "Id[]" },
    UsersById: {
        "[Id]": "User | undefined"
    }
})

// Using the scope to create a type
const group = coolScope.type({
    name: "string",
    members: "User[]"
})

// Another scope with different aliases
const anotherScope = scope({
    Email: "string.email",
    Person: {
        name: "string",
        email: "Email"
    }
})
"""

SIMPLE_SCOPE = 'const coolScope = scope({ Id: "string", User: { id: "Id", friends: "Id[]" } })'


@pytest.fixture
def scope_source() -> str:
    """Host file with two scopes and a definition built from the first."""
    return SCOPE_SOURCE


@pytest.fixture
def simple_scope() -> str:
    """Single-line scope with one nested object alias."""
    return SIMPLE_SCOPE
