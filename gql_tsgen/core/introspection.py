"""Schema acquisition through GraphQL introspection.

Fetches the standard introspection result from a live endpoint, caches it on
disk and converts it into the schema graph used by the generators.

Example:
    payload = asyncio.run(fetch_introspection(url, auth=AuthorizationHeader(f"Bearer {token}")))
    schema = build_schema_from_introspection(payload)
"""

import base64
import json
import logging
import os
from pathlib import Path
from typing import Any

import httpx
from graphql import get_introspection_query
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import IntrospectionError, SchemaBuildError
from .auth import Auth, NoAuth
from .ir import (
    FieldDefinition,
    InputValueDefinition,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    Schema,
    TypeDefinition,
    TypeKind,
    TypeRef,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


# =============================================================================
# Payload model
# =============================================================================


class _IntrospectionModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class IntrospectionTypeRef(_IntrospectionModel):
    kind: str
    name: str | None = None
    of_type: "IntrospectionTypeRef | None" = Field(default=None, alias="ofType")


class IntrospectionInputValue(_IntrospectionModel):
    name: str
    description: str | None = None
    type: IntrospectionTypeRef


class IntrospectionField(_IntrospectionModel):
    name: str
    description: str | None = None
    args: list[IntrospectionInputValue] = Field(default_factory=list)
    type: IntrospectionTypeRef


class IntrospectionEnumValue(_IntrospectionModel):
    name: str
    description: str | None = None


class IntrospectionType(_IntrospectionModel):
    kind: str
    name: str
    description: str | None = None
    fields: list[IntrospectionField] | None = None
    input_fields: list[IntrospectionInputValue] | None = Field(default=None, alias="inputFields")
    interfaces: list[IntrospectionTypeRef] | None = None
    enum_values: list[IntrospectionEnumValue] | None = Field(default=None, alias="enumValues")
    possible_types: list[IntrospectionTypeRef] | None = Field(default=None, alias="possibleTypes")


class IntrospectionRootType(_IntrospectionModel):
    name: str


class IntrospectionSchema(_IntrospectionModel):
    query_type: IntrospectionRootType | None = Field(default=None, alias="queryType")
    mutation_type: IntrospectionRootType | None = Field(default=None, alias="mutationType")
    subscription_type: IntrospectionRootType | None = Field(
        default=None, alias="subscriptionType"
    )
    types: list[IntrospectionType]


IntrospectionTypeRef.model_rebuild()


# =============================================================================
# Fetching
# =============================================================================


async def fetch_introspection(
    url: str,
    auth: Auth | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """POST the introspection query to an endpoint.

    Args:
        url: GraphQL endpoint URL
        auth: Authentication handler (implements Auth protocol)
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        The decoded JSON response body

    Raises:
        IntrospectionError: On transport failures, error statuses or GraphQL errors
    """
    auth = auth or NoAuth()
    headers = {"Content-Type": "application/json"}
    headers.update(auth.get_headers())

    async with httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport) as client:
        try:
            response = await client.post(
                url, json={"query": get_introspection_query(descriptions=True)}
            )
        except httpx.HTTPError as e:
            raise IntrospectionError(f"Introspection request to {url} failed: {e}") from e

    if response.is_error:
        raise IntrospectionError(
            f"Introspection request to {url} failed with status {response.status_code}"
        )

    try:
        result = response.json()
    except ValueError as e:
        raise IntrospectionError(f"Introspection response from {url} is not JSON") from e

    if result.get("errors"):
        error_messages = "; ".join(e.get("message", str(e)) for e in result["errors"])
        raise IntrospectionError(f"GraphQL errors: {error_messages}", result["errors"])

    return result


# =============================================================================
# Cache
# =============================================================================


def default_cache_dir() -> Path:
    """$XDG_CACHE_HOME/gql-tsgen/introspection, or ~/.cache/... when unset."""
    base = os.environ.get("XDG_CACHE_HOME") or Path.home() / ".cache"
    return Path(base) / "gql-tsgen" / "introspection"


class IntrospectionCache:
    """On-disk cache of introspection responses, one JSON file per endpoint."""

    def __init__(self, directory: Path | str | None = None):
        self.directory = Path(directory) if directory else default_cache_dir()

    def path_for(self, url: str) -> Path:
        key = base64.urlsafe_b64encode(url.encode()).decode()
        return self.directory / f"{key}.json"

    def get(self, url: str) -> dict[str, Any] | None:
        """Return the cached response for an endpoint, if any."""
        path = self.path_for(url)
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring corrupt introspection cache entry %s", path)
            return None

    def put(self, url: str, payload: dict[str, Any]):
        path = self.path_for(url)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")
        logger.debug("Cached introspection for %s at %s", url, path)


async def load_introspection(
    url: str,
    auth: Auth | None = None,
    cache: IntrospectionCache | None = None,
    refresh: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Return the introspection response for an endpoint, fetching only on a cache miss."""
    cache = cache or IntrospectionCache()
    if not refresh:
        cached = cache.get(url)
        if cached is not None:
            logger.debug("Using cached introspection for %s", url)
            return cached

    payload = await fetch_introspection(url, auth=auth, transport=transport)
    cache.put(url, payload)
    return payload


# =============================================================================
# Conversion
# =============================================================================


def _convert_type_ref(ref: IntrospectionTypeRef) -> TypeRef:
    if ref.kind == "NON_NULL":
        return NonNullTypeRef(of_type=_convert_type_ref(_require_of_type(ref)))
    if ref.kind == "LIST":
        return ListTypeRef(of_type=_convert_type_ref(_require_of_type(ref)))
    if ref.name is None:
        raise SchemaBuildError(f"Named type reference of kind {ref.kind} has no name")
    return NamedTypeRef(name=ref.name, kind=_convert_kind(ref.kind))


def _require_of_type(ref: IntrospectionTypeRef) -> IntrospectionTypeRef:
    if ref.of_type is None:
        raise SchemaBuildError(f"{ref.kind} type reference has no ofType")
    return ref.of_type


def _convert_kind(kind: str) -> TypeKind:
    try:
        return TypeKind[kind]
    except KeyError:
        raise SchemaBuildError(f"Unknown type kind {kind}") from None


def _convert_input_value(value: IntrospectionInputValue) -> InputValueDefinition:
    return InputValueDefinition(
        name=value.name,
        type=_convert_type_ref(value.type),
        description=value.description,
    )


def _convert_type(introspected: IntrospectionType) -> TypeDefinition:
    return TypeDefinition(
        name=introspected.name,
        kind=_convert_kind(introspected.kind),
        fields=[
            FieldDefinition(
                name=f.name,
                type=_convert_type_ref(f.type),
                args=[_convert_input_value(a) for a in f.args],
                description=f.description,
            )
            for f in introspected.fields or []
        ],
        input_fields=[_convert_input_value(v) for v in introspected.input_fields or []],
        enum_values=[v.name for v in introspected.enum_values or []],
        interfaces=[i.name for i in introspected.interfaces or [] if i.name],
        possible_types=[p.name for p in introspected.possible_types or [] if p.name],
        description=introspected.description,
    )


def build_schema_from_introspection(payload: dict[str, Any]) -> Schema:
    """Convert an introspection response into a Schema.

    Accepts either the full response (`{"data": {"__schema": ...}}`) or its
    data portion. Introspection meta types (`__Type`, ...) are skipped.

    Raises:
        SchemaBuildError: If the payload is malformed or has no query root.
    """
    data = payload.get("data", payload)
    if not isinstance(data, dict) or "__schema" not in data:
        raise SchemaBuildError("Introspection payload has no __schema")

    try:
        introspected = IntrospectionSchema.model_validate(data["__schema"])
    except ValidationError as e:
        raise SchemaBuildError(f"Invalid introspection payload: {e}") from e

    types = {
        t.name: _convert_type(t) for t in introspected.types if not t.name.startswith("__")
    }

    def root(ref: IntrospectionRootType | None) -> TypeDefinition | None:
        return types.get(ref.name) if ref else None

    schema = Schema(
        types=types,
        query=root(introspected.query_type),
        mutation=root(introspected.mutation_type),
        subscription=root(introspected.subscription_type),
    )
    if schema.query is None:
        raise SchemaBuildError("schema must define a Query type")
    return schema
