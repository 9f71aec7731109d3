"""Discovery of GraphQL source files and schema loading."""

import asyncio
import logging
import shutil
import tarfile
import tempfile
import zipfile
from collections.abc import Iterator
from pathlib import Path

from ..config import GeneratorConfig
from ..errors import GraphQLSyntaxError, SchemaBuildError
from .auth import auth_from_authorization
from .introspection import IntrospectionCache, build_schema_from_introspection, load_introspection
from .ir import Schema
from .nodes import Definition
from .parser import Parser
from .schema_builder import build_schema

logger = logging.getLogger(__name__)

GRAPHQL_EXTENSIONS = (".graphql", ".gql", ".graphqls")
ARCHIVE_EXTENSIONS = (".zip", ".tar.gz", ".tgz")


def is_archive(path: Path) -> bool:
    return path.is_file() and path.name.lower().endswith(ARCHIVE_EXTENSIONS)


def extract_archive(archive_path: Path) -> str:
    """Extract archive to temp directory. Returns path to extracted content."""
    temp_dir = tempfile.mkdtemp()
    if archive_path.suffix == ".zip":
        with zipfile.ZipFile(archive_path, "r") as zip_ref:
            zip_ref.extractall(temp_dir)
    elif archive_path.name.endswith((".tar.gz", ".tgz")):
        with tarfile.open(archive_path, "r:gz") as tar_ref:
            tar_ref.extractall(temp_dir, filter="data")
    else:
        shutil.rmtree(temp_dir)
        raise ValueError(f"Unsupported archive format: {archive_path.suffix}")
    return temp_dir


def collect_graphql_files(path: Path | str) -> list[Path]:
    """Collect GraphQL files from a file or directory (recursively, sorted).

    Raises:
        FileNotFoundError: If the path does not exist or holds no GraphQL files.
    """
    path = Path(path)
    if path.is_file():
        files = [path] if path.name.endswith(GRAPHQL_EXTENSIONS) else []
    elif path.is_dir():
        files = sorted(
            p for p in path.rglob("*") if p.is_file() and p.name.endswith(GRAPHQL_EXTENSIONS)
        )
    else:
        raise FileNotFoundError(f"No such file or directory: {path}")

    if not files:
        raise FileNotFoundError(f"No GraphQL files found in {path}")
    return files


def iter_definitions(files: list[Path]) -> Iterator[Definition]:
    """Stream definitions from several files, one parser at a time."""
    for file_path in files:
        logger.debug("Parsing %s", file_path)
        with Parser(file_path.read_text(encoding="utf-8")) as parser:
            try:
                yield from parser
            except GraphQLSyntaxError as e:
                raise SchemaBuildError(f"Syntax error in {file_path}: {e}") from e


def load_sdl_schema(path: Path | str) -> Schema:
    """Build a schema from SDL files or an archive of them."""
    path = Path(path)
    temp_dir = None
    try:
        if is_archive(path):
            logger.info("Extracting archive %s", path.name)
            temp_dir = extract_archive(path)
            path = Path(temp_dir)
        return build_schema(iter_definitions(collect_graphql_files(path)))
    finally:
        if temp_dir:
            shutil.rmtree(temp_dir)


def load_schema(
    config: GeneratorConfig,
    cache: IntrospectionCache | None = None,
    refresh: bool = False,
) -> Schema:
    """Load the schema named by `input.schemas`: SDL on disk or an introspection URL."""
    if config.input.schema_is_url:
        payload = asyncio.run(
            load_introspection(
                config.input.schemas,
                auth=auth_from_authorization(config.input.authorization),
                cache=cache,
                refresh=refresh,
            )
        )
        return build_schema_from_introspection(payload)
    return load_sdl_schema(config.input.schemas)
