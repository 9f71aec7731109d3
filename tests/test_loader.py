"""Tests for GraphQL file discovery and schema loading."""

import tarfile
import zipfile

import pytest

from gql_tsgen.config import GeneratorConfig, InputConfig
from gql_tsgen.core import loader
from gql_tsgen.core.auth import AuthorizationHeader
from gql_tsgen.core.ir import TypeKind
from gql_tsgen.core.loader import (
    collect_graphql_files,
    extract_archive,
    is_archive,
    load_schema,
    load_sdl_schema,
)
from gql_tsgen.errors import SchemaBuildError

QUERY_SDL = "type Query { user: User }\n"
USER_SDL = "type User { id: ID! role: Role }\nenum Role { ADMIN }\n"


@pytest.fixture
def schema_dir(tmp_path):
    root = tmp_path / "schemas"
    (root / "nested").mkdir(parents=True)
    (root / "query.graphql").write_text(QUERY_SDL)
    (root / "nested" / "user.gql").write_text(USER_SDL)
    (root / "README.md").write_text("not a schema")
    return root


class TestCollectGraphqlFiles:
    """Tests for collect_graphql_files."""

    def test_directory_is_searched_recursively(self, schema_dir):
        files = collect_graphql_files(schema_dir)
        assert [f.name for f in files] == ["user.gql", "query.graphql"]

    def test_single_file(self, schema_dir):
        path = schema_dir / "query.graphql"
        assert collect_graphql_files(path) == [path]

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="No such file"):
            collect_graphql_files(tmp_path / "missing")

    def test_directory_without_graphql_files(self, tmp_path):
        (tmp_path / "notes.txt").write_text("")
        with pytest.raises(FileNotFoundError, match="No GraphQL files"):
            collect_graphql_files(tmp_path)


class TestLoadSdlSchema:
    """Tests for load_sdl_schema."""

    def test_types_span_files(self, schema_dir):
        schema = load_sdl_schema(schema_dir)
        assert schema.query.name == "Query"
        assert schema.query.get_field("user").type.kind is TypeKind.OBJECT
        assert schema.get_type("Role").enum_values == ["ADMIN"]

    def test_syntax_error_names_file(self, tmp_path):
        path = tmp_path / "broken.graphql"
        path.write_text("type Query { a: }")
        with pytest.raises(SchemaBuildError, match="broken.graphql"):
            load_sdl_schema(path)

    def test_zip_archive(self, tmp_path):
        archive = tmp_path / "schema.zip"
        with zipfile.ZipFile(archive, "w") as zip_ref:
            zip_ref.writestr("schema/query.graphql", QUERY_SDL)
            zip_ref.writestr("schema/user.graphql", USER_SDL)
        assert is_archive(archive)
        schema = load_sdl_schema(archive)
        assert schema.get_type("User").kind is TypeKind.OBJECT

    def test_tar_archive(self, tmp_path, schema_dir):
        archive = tmp_path / "schema.tar.gz"
        with tarfile.open(archive, "w:gz") as tar_ref:
            tar_ref.add(schema_dir, arcname="schemas")
        schema = load_sdl_schema(archive)
        assert schema.get_type("Role").kind is TypeKind.ENUM

    def test_unsupported_archive(self, tmp_path):
        path = tmp_path / "schema.rar"
        path.write_text("")
        with pytest.raises(ValueError, match="Unsupported archive format"):
            extract_archive(path)


class TestLoadSchema:
    """Tests for load_schema."""

    def test_sdl_path(self, schema_dir):
        config = GeneratorConfig(input=InputConfig(schemas=str(schema_dir)))
        assert load_schema(config).get_type("User") is not None

    def test_url_uses_introspection(self, monkeypatch):
        calls = {}
        payload = {
            "data": {
                "__schema": {
                    "queryType": {"name": "Query"},
                    "types": [
                        {
                            "kind": "OBJECT",
                            "name": "Query",
                            "fields": [
                                {
                                    "name": "ping",
                                    "args": [],
                                    "type": {"kind": "SCALAR", "name": "Boolean"},
                                }
                            ],
                        }
                    ],
                }
            }
        }

        async def fake_load_introspection(url, auth=None, cache=None, refresh=False):
            calls["url"] = url
            calls["auth"] = auth
            return payload

        monkeypatch.setattr(loader, "load_introspection", fake_load_introspection)
        config = GeneratorConfig(
            input=InputConfig(schemas="https://api.example.com/graphql", authorization="secret")
        )
        schema = load_schema(config)

        assert schema.query.get_field("ping") is not None
        assert calls["url"] == "https://api.example.com/graphql"
        assert isinstance(calls["auth"], AuthorizationHeader)
        assert calls["auth"].get_headers() == {"Authorization": "secret"}
