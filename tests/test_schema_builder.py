"""Tests for schema graph construction from SDL."""

import logging

import pytest

from gql_tsgen.core.ir import (
    BUILTIN_SCALARS,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    TypeKind,
)
from gql_tsgen.core.parser import parse
from gql_tsgen.core.schema_builder import build_schema
from gql_tsgen.errors import SchemaBuildError

SDL = '''
"""Entry points"""
type Query {
  user(id: ID!): User
  search(term: String!): [SearchResult!]!
}

type Mutation {
  ping: Boolean
}

interface Node {
  id: ID!
}

type User implements Node {
  id: ID!
  # Display name
  name: String
  role: Role
  manager: Missing
}

type Post implements Node {
  id: ID!
}

union SearchResult = User | Post

enum Role { ADMIN USER }

input UserFilter { role: Role }

scalar DateTime
'''


def build(source: str):
    with parse(source) as definitions:
        return build_schema(definitions)


@pytest.fixture
def schema():
    return build(SDL)


class TestBuildSchema:
    """Tests for build_schema."""

    def test_registers_types_by_kind(self, schema):
        assert schema.get_type("User").kind is TypeKind.OBJECT
        assert schema.get_type("Node").kind is TypeKind.INTERFACE
        assert schema.get_type("UserFilter").kind is TypeKind.INPUT_OBJECT
        assert schema.get_type("Role").kind is TypeKind.ENUM
        assert schema.get_type("DateTime").kind is TypeKind.SCALAR
        assert schema.get_type("SearchResult").kind is TypeKind.UNION

    def test_builtin_scalars_are_registered(self, schema):
        for name in BUILTIN_SCALARS:
            assert schema.get_type(name).kind is TypeKind.SCALAR

    def test_binds_roots_by_name(self, schema):
        assert schema.query.name == "Query"
        assert schema.mutation.name == "Mutation"
        assert schema.subscription is None
        assert schema.root_type("mutation") is schema.mutation

    def test_resolves_named_kinds(self, schema):
        user = schema.query.get_field("user")
        assert user.type == NamedTypeRef(name="User", kind=TypeKind.OBJECT)
        assert user.args[0].type == NonNullTypeRef(
            of_type=NamedTypeRef(name="ID", kind=TypeKind.SCALAR)
        )

    def test_mirrors_wrappers(self, schema):
        search = schema.query.get_field("search")
        assert search.type == NonNullTypeRef(
            of_type=ListTypeRef(
                of_type=NonNullTypeRef(
                    of_type=NamedTypeRef(name="SearchResult", kind=TypeKind.UNION)
                )
            )
        )

    def test_unknown_reference_has_no_kind(self, schema):
        manager = schema.get_type("User").get_field("manager")
        assert manager.type == NamedTypeRef(name="Missing", kind=None)

    def test_members(self, schema):
        assert schema.get_type("Role").enum_values == ["ADMIN", "USER"]
        assert schema.get_type("SearchResult").possible_types == ["User", "Post"]
        assert schema.get_type("User").interfaces == ["Node"]
        assert [f.name for f in schema.get_type("UserFilter").input_fields] == ["role"]

    def test_interfaces_learn_implementations(self, schema):
        assert schema.get_type("Node").possible_types == ["User", "Post"]

    def test_descriptions_from_doc_metadata(self, schema):
        assert schema.query.description == "Entry points"
        assert schema.get_type("User").get_field("name").description == "Display name"
        assert schema.get_type("User").description is None

    def test_missing_query_fails(self):
        with pytest.raises(SchemaBuildError, match="Query"):
            build("type User { id: ID }")

    def test_builtin_scalars_cannot_be_redefined(self):
        schema = build('"""custom"""\nscalar String\ntype Query { a: String }')
        assert schema.get_type("String").description is None

    def test_executable_definitions_are_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            schema = build("type Query { a: Int }\nquery Q { a }")
        assert "OperationDefinition" in caplog.text
        assert set(schema.types) == {*BUILTIN_SCALARS, "Query"}
