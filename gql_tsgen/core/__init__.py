"""Core modules for GraphQL to TypeScript code generation."""

from .auth import (
    Auth,
    AuthorizationHeader,
    NoAuth,
    auth_from_authorization,
)
from .client_generator import ClientGenerator
from .compiler import Compiler, GeneratedFile, OperationDocuments, parse_operation_files
from .generator import SchemaGenerator
from .hooks import (
    AddHeaderHook,
    HookRunner,
    PostGenerateHook,
    PreGenerateHook,
)
from .introspection import (
    IntrospectionCache,
    build_schema_from_introspection,
    fetch_introspection,
    load_introspection,
)
from .ir import (
    FieldDefinition,
    InputValueDefinition,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    Schema,
    TypeDefinition,
    TypeKind,
)
from .lexer import Lexer, tokenize
from .loader import collect_graphql_files, load_schema
from .parser import Parser, parse, parse_document
from .printer import print_fragment, print_operation
from .scalars import ScalarHandler, ScalarRegistry, StaticScalarHandler
from .schema_builder import build_schema
from .tokens import Token, TokenKind

__all__ = [
    # Auth
    "Auth",
    "AuthorizationHeader",
    "NoAuth",
    "auth_from_authorization",
    # Scalars
    "ScalarHandler",
    "ScalarRegistry",
    "StaticScalarHandler",
    # Hooks
    "PreGenerateHook",
    "PostGenerateHook",
    "AddHeaderHook",
    "HookRunner",
    # Lexer and parser
    "Lexer",
    "Parser",
    "Token",
    "TokenKind",
    "parse",
    "parse_document",
    "print_fragment",
    "print_operation",
    "tokenize",
    # Schema graph
    "FieldDefinition",
    "InputValueDefinition",
    "ListTypeRef",
    "NamedTypeRef",
    "NonNullTypeRef",
    "Schema",
    "TypeDefinition",
    "TypeKind",
    "build_schema",
    # Schema acquisition
    "IntrospectionCache",
    "build_schema_from_introspection",
    "collect_graphql_files",
    "fetch_introspection",
    "load_introspection",
    "load_schema",
    # Generators
    "ClientGenerator",
    "Compiler",
    "GeneratedFile",
    "OperationDocuments",
    "SchemaGenerator",
    "parse_operation_files",
]
