"""Tests for schema acquisition through introspection."""

import asyncio
import json

import httpx
import pytest
from graphql import build_schema, introspection_from_schema

from gql_tsgen.core.auth import AuthorizationHeader
from gql_tsgen.core.introspection import (
    IntrospectionCache,
    build_schema_from_introspection,
    default_cache_dir,
    fetch_introspection,
    load_introspection,
)
from gql_tsgen.core.ir import ListTypeRef, NamedTypeRef, NonNullTypeRef, TypeKind
from gql_tsgen.errors import IntrospectionError, SchemaBuildError

URL = "https://api.example.com/graphql"

SDL = """
type Query {
  "Look up a user"
  user(id: ID!): User
  users: [User!]!
}

type Mutation {
  ping(filter: UserFilter): Boolean
}

interface Node {
  id: ID!
}

type User implements Node {
  id: ID!
  name: String
  role: Role
}

enum Role {
  ADMIN
  USER
}

input UserFilter {
  role: Role
}
"""


@pytest.fixture
def data():
    return introspection_from_schema(build_schema(SDL))


def mock_transport(handler):
    return httpx.MockTransport(handler)


def fetch(transport, **kwargs):
    return asyncio.run(fetch_introspection(URL, transport=transport, **kwargs))


# =============================================================================
# Conversion
# =============================================================================


class TestBuildSchemaFromIntrospection:
    """Tests for build_schema_from_introspection."""

    def test_roots(self, data):
        schema = build_schema_from_introspection({"data": data})
        assert schema.query.name == "Query"
        assert schema.mutation.name == "Mutation"
        assert schema.subscription is None

    def test_accepts_data_portion(self, data):
        schema = build_schema_from_introspection(data)
        assert schema.get_type("User").kind is TypeKind.OBJECT

    def test_skips_meta_types(self, data):
        schema = build_schema_from_introspection(data)
        assert not any(name.startswith("__") for name in schema.types)

    def test_type_refs(self, data):
        schema = build_schema_from_introspection(data)
        users = schema.query.get_field("users")
        assert users.type == NonNullTypeRef(
            of_type=ListTypeRef(
                of_type=NonNullTypeRef(of_type=NamedTypeRef(name="User", kind=TypeKind.OBJECT))
            )
        )
        user = schema.query.get_field("user")
        assert user.description == "Look up a user"
        assert user.args[0].type == NonNullTypeRef(
            of_type=NamedTypeRef(name="ID", kind=TypeKind.SCALAR)
        )

    def test_members(self, data):
        schema = build_schema_from_introspection(data)
        assert schema.get_type("Role").enum_values == ["ADMIN", "USER"]
        assert schema.get_type("User").interfaces == ["Node"]
        assert schema.get_type("Node").possible_types == ["User"]
        (role,) = schema.get_type("UserFilter").input_fields
        assert role.type == NamedTypeRef(name="Role", kind=TypeKind.ENUM)

    def test_missing_schema(self):
        with pytest.raises(SchemaBuildError, match="__schema"):
            build_schema_from_introspection({"data": {}})

    def test_malformed_payload(self):
        with pytest.raises(SchemaBuildError, match="Invalid introspection payload"):
            build_schema_from_introspection({"__schema": {"types": [{"kind": "OBJECT"}]}})

    def test_missing_query_root(self):
        payload = {"__schema": {"queryType": None, "types": []}}
        with pytest.raises(SchemaBuildError, match="Query"):
            build_schema_from_introspection(payload)


# =============================================================================
# Fetching
# =============================================================================


class TestFetchIntrospection:
    """Tests for fetch_introspection."""

    def test_posts_introspection_query(self, data):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["authorization"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": data})

        result = fetch(mock_transport(handler), auth=AuthorizationHeader("Bearer token"))

        assert result == {"data": data}
        assert seen["method"] == "POST"
        assert seen["authorization"] == "Bearer token"
        assert "__schema" in seen["body"]["query"]

    def test_error_status(self):
        transport = mock_transport(lambda request: httpx.Response(401))
        with pytest.raises(IntrospectionError, match="status 401"):
            fetch(transport)

    def test_graphql_errors(self):
        errors = [{"message": "introspection disabled"}]
        transport = mock_transport(lambda request: httpx.Response(200, json={"errors": errors}))
        with pytest.raises(IntrospectionError, match="introspection disabled") as exc_info:
            fetch(transport)
        assert exc_info.value.errors == errors

    def test_non_json_body(self):
        transport = mock_transport(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(IntrospectionError, match="not JSON"):
            fetch(transport)

    def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(IntrospectionError, match="connection refused"):
            fetch(mock_transport(handler))


# =============================================================================
# Cache
# =============================================================================


class TestIntrospectionCache:
    """Tests for IntrospectionCache and load_introspection."""

    def test_default_cache_dir_honours_xdg(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
        assert default_cache_dir() == tmp_path / "gql-tsgen" / "introspection"

    def test_put_then_get(self, tmp_path):
        cache = IntrospectionCache(tmp_path)
        assert cache.get(URL) is None
        cache.put(URL, {"data": {"x": 1}})
        assert cache.get(URL) == {"data": {"x": 1}}
        assert cache.path_for(URL).parent == tmp_path
        assert cache.path_for(URL).suffix == ".json"

    def test_distinct_urls_have_distinct_entries(self, tmp_path):
        cache = IntrospectionCache(tmp_path)
        assert cache.path_for(URL) != cache.path_for(URL + "/v2")

    def test_corrupt_entry_is_ignored(self, tmp_path):
        cache = IntrospectionCache(tmp_path)
        cache.path_for(URL).write_text("{not json", encoding="utf-8")
        assert cache.get(URL) is None

    def test_load_uses_cache(self, tmp_path, data):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"data": data})

        cache = IntrospectionCache(tmp_path)
        transport = mock_transport(handler)

        first = asyncio.run(load_introspection(URL, cache=cache, transport=transport))
        second = asyncio.run(load_introspection(URL, cache=cache, transport=transport))
        assert first == second == {"data": data}
        assert len(calls) == 1

        asyncio.run(load_introspection(URL, cache=cache, refresh=True, transport=transport))
        assert len(calls) == 2
