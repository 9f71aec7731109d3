"""Exceptions raised by gql-tsgen."""


class GqlTsgenError(Exception):
    """Base class for all gql-tsgen errors."""


class GraphQLSyntaxError(GqlTsgenError):
    """Raised when a GraphQL document cannot be parsed.

    Carries the position of the offending token so callers can point at
    the source that failed.
    """

    def __init__(self, message: str, line: int, column: int, token_kind: str | None = None):
        self.message = message
        self.line = line
        self.column = column
        self.token_kind = token_kind
        super().__init__(f"{message} at line {line}, column {column}")


class SchemaBuildError(GqlTsgenError):
    """Raised when a schema graph cannot be constructed."""


class GenerationError(GqlTsgenError):
    """Raised when code cannot be generated for an operation."""


class IntrospectionError(GqlTsgenError):
    """Raised when fetching an introspection result fails."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class ConfigError(GqlTsgenError):
    """Raised for unreadable or invalid configuration."""


class DocumentErrors(GqlTsgenError):
    """Raised after parsing several documents when any of them failed.

    Each entry pairs a document path with its syntax error.
    """

    def __init__(self, errors: list[tuple[str, GraphQLSyntaxError]]):
        self.errors = errors
        lines = [f"{path}: {error}" for path, error in errors]
        super().__init__("\n".join(lines))
