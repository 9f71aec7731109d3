"""Abstract syntax tree for GraphQL documents.

This module defines dataclasses for the closed set of nodes the parser
produces: executable definitions (operations and fragments), schema type
definitions, selections, type references and literal values.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class OperationType(Enum):
    """Kind of an executable operation."""
    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"

    @property
    def root_type_name(self) -> str:
        """Conventional name of the schema root type, e.g. 'Query'."""
        return self.value.capitalize()


# =============================================================================
# Values
# =============================================================================


@dataclass
class StringValue:
    """A string literal; block strings keep their raw content."""
    value: str
    block: bool = False


@dataclass
class IntValue:
    """An integer literal, kept as written."""
    value: str


@dataclass
class FloatValue:
    """A float literal, kept as written."""
    value: str


@dataclass
class BooleanValue:
    """A true/false literal."""
    value: bool


@dataclass
class NullValue:
    """The null literal."""


@dataclass
class Variable:
    """A $variable reference."""
    name: str


@dataclass
class ListValue:
    """A [list, of, values] literal."""
    values: list["Value"] = field(default_factory=list)


@dataclass
class ObjectField:
    """A name: value pair inside an object literal."""
    name: str
    value: "Value"


@dataclass
class ObjectValue:
    """A {name: value} literal."""
    fields: list[ObjectField] = field(default_factory=list)


Value = Union[
    StringValue,
    IntValue,
    FloatValue,
    BooleanValue,
    NullValue,
    Variable,
    ListValue,
    ObjectValue,
]


# =============================================================================
# Type references
# =============================================================================


@dataclass
class NamedType:
    """A reference to a type by name."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class ListType:
    """A [Type] wrapper."""
    type: "Type"

    def __str__(self) -> str:
        return f"[{self.type}]"


@dataclass
class NonNullType:
    """A Type! wrapper. Never wraps another NonNullType."""
    type: Union[NamedType, ListType]

    def __str__(self) -> str:
        return f"{self.type}!"


Type = Union[NamedType, ListType, NonNullType]


def named_type_of(type_node: Type) -> NamedType:
    """Unwrap list and non-null wrappers down to the named type."""
    while not isinstance(type_node, NamedType):
        type_node = type_node.type
    return type_node


# =============================================================================
# Arguments, directives, selections
# =============================================================================


@dataclass
class Argument:
    """A name: value argument of a field or directive."""
    name: str
    value: Value


@dataclass
class Directive:
    """An @directive(args...) clause."""
    name: str
    arguments: list[Argument] = field(default_factory=list)


@dataclass
class Field:
    """A field selection, optionally aliased."""
    name: str
    alias: str | None = None
    arguments: list[Argument] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    selection_set: "SelectionSet | None" = None
    doc_metadata: list[str] = field(default_factory=list)

    @property
    def response_key(self) -> str:
        """Key under which the field appears in a response."""
        return self.alias or self.name


@dataclass
class FragmentSpread:
    """A ...FragmentName selection."""
    name: str
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class InlineFragment:
    """A ... on Type { ... } selection; the type condition is optional."""
    selection_set: "SelectionSet"
    type_condition: str | None = None
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


Selection = Union[Field, FragmentSpread, InlineFragment]


@dataclass
class SelectionSet:
    """An ordered list of selections."""
    selections: list[Selection] = field(default_factory=list)


# =============================================================================
# Executable definitions
# =============================================================================


@dataclass
class VariableDefinition:
    """A $name: Type = default declaration of an operation."""
    name: str
    type: Type
    default_value: Value | None = None
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class OperationDefinition:
    """A query, mutation or subscription."""
    operation: OperationType
    selection_set: SelectionSet
    name: str | None = None
    variables: list[VariableDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)

    @property
    def function_name(self) -> str:
        """Identifier used for generated code, e.g. 'QueryOperation' when anonymous."""
        if self.name:
            return self.name
        return f"{self.operation.value.capitalize()}Operation"


@dataclass
class FragmentDefinition:
    """A named fragment on a type."""
    name: str
    type_condition: str
    selection_set: SelectionSet
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


# =============================================================================
# Schema definitions
# =============================================================================


@dataclass
class InputValueDefinition:
    """An argument definition or input object field."""
    name: str
    type: Type
    default_value: Value | None = None
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class FieldDefinition:
    """A field of an object or interface type."""
    name: str
    type: Type
    arguments: list[InputValueDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class EnumValueDefinition:
    """A single value of an enum type."""
    name: str
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class ObjectTypeDefinition:
    """A `type Name implements ... { fields }` definition."""
    name: str
    interfaces: list[str] = field(default_factory=list)
    fields: list[FieldDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class InterfaceTypeDefinition:
    """An `interface Name { fields }` definition."""
    name: str
    fields: list[FieldDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class InputObjectTypeDefinition:
    """An `input Name { fields }` definition."""
    name: str
    fields: list[InputValueDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class EnumTypeDefinition:
    """An `enum Name { VALUES }` definition."""
    name: str
    values: list[EnumValueDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class ScalarTypeDefinition:
    """A `scalar Name` definition."""
    name: str
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


@dataclass
class UnionTypeDefinition:
    """A `union Name = A | B` definition."""
    name: str
    types: list[str] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    doc_metadata: list[str] = field(default_factory=list)


ExecutableDefinition = Union[OperationDefinition, FragmentDefinition]

TypeSystemDefinition = Union[
    ObjectTypeDefinition,
    InterfaceTypeDefinition,
    InputObjectTypeDefinition,
    EnumTypeDefinition,
    ScalarTypeDefinition,
    UnionTypeDefinition,
]

Definition = Union[ExecutableDefinition, TypeSystemDefinition]
