"""Schema graph for code generation.

This module defines dataclasses for a resolved, name-indexed view of a
GraphQL schema. It is built once per run (from SDL or from an introspection
result) and only read afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

BUILTIN_SCALARS = ("String", "Int", "Float", "Boolean", "ID")


class TypeKind(Enum):
    """Kind of a named schema type."""
    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    INPUT_OBJECT = "INPUT_OBJECT"
    ENUM = "ENUM"
    SCALAR = "SCALAR"
    UNION = "UNION"


@dataclass
class NamedTypeRef:
    """Reference to a named type; kind is None when the name is unknown."""
    name: str
    kind: TypeKind | None = None

    def __str__(self) -> str:
        return self.name


@dataclass
class ListTypeRef:
    """A list of another type reference."""
    of_type: "TypeRef"

    def __str__(self) -> str:
        return f"[{self.of_type}]"


@dataclass
class NonNullTypeRef:
    """A non-null wrapper; never wraps another NonNullTypeRef."""
    of_type: Union[NamedTypeRef, ListTypeRef]

    def __str__(self) -> str:
        return f"{self.of_type}!"


TypeRef = Union[NamedTypeRef, ListTypeRef, NonNullTypeRef]


def unwrap_type(type_ref: TypeRef) -> NamedTypeRef:
    """Strip list and non-null wrappers down to the named type."""
    while not isinstance(type_ref, NamedTypeRef):
        type_ref = type_ref.of_type
    return type_ref


@dataclass
class InputValueDefinition:
    """An argument or an input object field."""
    name: str
    type: TypeRef
    description: str | None = None


@dataclass
class FieldDefinition:
    """A field of an object or interface type."""
    name: str
    type: TypeRef
    args: list[InputValueDefinition] = field(default_factory=list)
    description: str | None = None


@dataclass
class TypeDefinition:
    """Any named type in the schema.

    Only the members matching the kind are populated: fields for objects and
    interfaces, input_fields for input objects, enum_values for enums and
    possible_types for unions.
    """
    name: str
    kind: TypeKind
    fields: list[FieldDefinition] = field(default_factory=list)
    input_fields: list[InputValueDefinition] = field(default_factory=list)
    enum_values: list[str] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)
    possible_types: list[str] = field(default_factory=list)
    description: str | None = None

    def get_field(self, name: str) -> FieldDefinition | None:
        """Look up a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass
class Schema:
    """Complete schema graph with its root operation types."""
    types: dict[str, TypeDefinition] = field(default_factory=dict)
    query: TypeDefinition | None = None
    mutation: TypeDefinition | None = None
    subscription: TypeDefinition | None = None

    def get_type(self, name: str) -> TypeDefinition | None:
        """Look up a type by name."""
        return self.types.get(name)

    def root_type(self, operation: str) -> TypeDefinition | None:
        """Return the root type for 'query', 'mutation' or 'subscription'."""
        return {
            "query": self.query,
            "mutation": self.mutation,
            "subscription": self.subscription,
        }.get(operation)
