"""Scalar handlers for TypeScript code generation.

Maps GraphQL scalars to a zod validator expression and a TypeScript type.

Example usage:
    from gql_tsgen.core.scalars import ScalarRegistry, StaticScalarHandler

    registry = ScalarRegistry()
    registry.register("DateTime", StaticScalarHandler("z.string().datetime()", "string"))

    registry.validator("DateTime")   # "z.string().datetime()"
    registry.validator("Unknown")    # "z.any()"
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class ScalarHandler(Protocol):
    """Protocol for scalar handlers.

    Attributes:
        validator: The zod expression validating the scalar (e.g. "z.string()")
        ts_type: The TypeScript type of the scalar (e.g. "string")
    """

    validator: str
    ts_type: str


@dataclass(frozen=True)
class StaticScalarHandler:
    """Handler with a fixed validator and TypeScript type."""
    validator: str
    ts_type: str


STRING = StaticScalarHandler("z.string()", "string")
INT = StaticScalarHandler("z.number().int()", "number")
FLOAT = StaticScalarHandler("z.number()", "number")
BOOLEAN = StaticScalarHandler("z.boolean()", "boolean")
ANY = StaticScalarHandler("z.any()", "any")


class ScalarRegistry:
    """Registry for scalar handlers.

    The GraphQL built-in scalars are always registered. Any other scalar
    resolves to a permissive `any` handler unless one is registered for it.
    """

    def __init__(self, fallback: ScalarHandler = ANY):
        self._handlers: dict[str, ScalarHandler] = {}
        self.fallback = fallback
        self._register_defaults()

    def _register_defaults(self):
        """Register the GraphQL built-in scalars."""
        self.register("String", STRING)
        self.register("ID", STRING)
        self.register("Int", INT)
        self.register("Float", FLOAT)
        self.register("Boolean", BOOLEAN)

    def register(self, scalar_name: str, handler: ScalarHandler):
        """Register a handler for a scalar type."""
        self._handlers[scalar_name] = handler

    def get(self, scalar_name: str) -> ScalarHandler | None:
        """Get the handler for a scalar type, or None if not registered."""
        return self._handlers.get(scalar_name)

    def has(self, scalar_name: str) -> bool:
        """Check if a handler is registered for a scalar type."""
        return scalar_name in self._handlers

    def resolve(self, scalar_name: str) -> ScalarHandler:
        """Get the handler for a scalar type, falling back to `any`."""
        return self._handlers.get(scalar_name, self.fallback)

    def validator(self, scalar_name: str) -> str:
        return self.resolve(scalar_name).validator

    def ts_type(self, scalar_name: str) -> str:
        return self.resolve(scalar_name).ts_type

    @classmethod
    def from_config(cls, scalars: dict[str, dict[str, str]]) -> "ScalarRegistry":
        """Create a registry with extra handlers from `generation.scalars`."""
        registry = cls()
        for name, options in scalars.items():
            registry.register(
                name,
                StaticScalarHandler(
                    validator=options.get("validator", ANY.validator),
                    ts_type=options.get("ts_type", ANY.ts_type),
                ),
            )
        return registry
