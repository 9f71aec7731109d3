"""Build a schema graph from parsed SDL definitions.

Example:
    with parse(sdl) as definitions:
        schema = build_schema(definitions)
"""

import logging
from collections.abc import Iterable

from ..errors import SchemaBuildError
from . import nodes
from .ir import (
    BUILTIN_SCALARS,
    FieldDefinition,
    InputValueDefinition,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    Schema,
    TypeDefinition,
    TypeKind,
    TypeRef,
    unwrap_type,
)

logger = logging.getLogger(__name__)


def type_ref_from_node(type_node: nodes.Type) -> TypeRef:
    """Mirror an AST type reference as an unresolved TypeRef."""
    if isinstance(type_node, nodes.NonNullType):
        return NonNullTypeRef(of_type=type_ref_from_node(type_node.type))
    if isinstance(type_node, nodes.ListType):
        return ListTypeRef(of_type=type_ref_from_node(type_node.type))
    return NamedTypeRef(name=type_node.name)


def _description(doc_metadata: list[str]) -> str | None:
    text = "\n".join(line for line in doc_metadata if line)
    return text or None


class SchemaBuilder:
    """Accumulates type definitions and produces a Schema."""

    def __init__(self):
        self.types: dict[str, TypeDefinition] = {}
        for name in BUILTIN_SCALARS:
            self.types[name] = TypeDefinition(name=name, kind=TypeKind.SCALAR)

    def add_definition(self, definition: nodes.Definition):
        """Register one definition; executable definitions are ignored."""
        type_def = self._convert(definition)
        if type_def is None:
            logger.warning(
                "Ignoring %s in schema document", type(definition).__name__
            )
            return

        if type_def.name in BUILTIN_SCALARS:
            logger.debug("Built-in scalar %s cannot be redefined", type_def.name)
            return
        if type_def.name in self.types:
            logger.warning("Type %s is defined more than once; last one wins", type_def.name)

        self.types[type_def.name] = type_def

    def build(self) -> Schema:
        """Resolve type references and bind the root types."""
        for type_def in self.types.values():
            for ref in self._iter_type_refs(type_def):
                target = self.types.get(ref.name)
                ref.kind = target.kind if target else None

        # Interfaces learn their implementations from the objects
        for type_def in self.types.values():
            if type_def.kind is not TypeKind.OBJECT:
                continue
            for interface_name in type_def.interfaces:
                interface = self.types.get(interface_name)
                if interface and interface.kind is TypeKind.INTERFACE:
                    interface.possible_types.append(type_def.name)

        schema = Schema(
            types=self.types,
            query=self.types.get("Query"),
            mutation=self.types.get("Mutation"),
            subscription=self.types.get("Subscription"),
        )
        if schema.query is None:
            raise SchemaBuildError("schema must define a Query type")
        return schema

    @staticmethod
    def _iter_type_refs(type_def: TypeDefinition):
        for f in type_def.fields:
            yield unwrap_type(f.type)
            for arg in f.args:
                yield unwrap_type(arg.type)
        for input_field in type_def.input_fields:
            yield unwrap_type(input_field.type)

    def _convert(self, definition: nodes.Definition) -> TypeDefinition | None:
        description = _description(getattr(definition, "doc_metadata", []))

        if isinstance(definition, nodes.ObjectTypeDefinition):
            return TypeDefinition(
                name=definition.name,
                kind=TypeKind.OBJECT,
                fields=[self._convert_field(f) for f in definition.fields],
                interfaces=list(definition.interfaces),
                description=description,
            )
        if isinstance(definition, nodes.InterfaceTypeDefinition):
            return TypeDefinition(
                name=definition.name,
                kind=TypeKind.INTERFACE,
                fields=[self._convert_field(f) for f in definition.fields],
                description=description,
            )
        if isinstance(definition, nodes.InputObjectTypeDefinition):
            return TypeDefinition(
                name=definition.name,
                kind=TypeKind.INPUT_OBJECT,
                input_fields=[self._convert_input_value(f) for f in definition.fields],
                description=description,
            )
        if isinstance(definition, nodes.EnumTypeDefinition):
            return TypeDefinition(
                name=definition.name,
                kind=TypeKind.ENUM,
                enum_values=[v.name for v in definition.values],
                description=description,
            )
        if isinstance(definition, nodes.ScalarTypeDefinition):
            return TypeDefinition(
                name=definition.name,
                kind=TypeKind.SCALAR,
                description=description,
            )
        if isinstance(definition, nodes.UnionTypeDefinition):
            return TypeDefinition(
                name=definition.name,
                kind=TypeKind.UNION,
                possible_types=list(definition.types),
                description=description,
            )
        return None

    def _convert_field(self, definition: nodes.FieldDefinition) -> FieldDefinition:
        return FieldDefinition(
            name=definition.name,
            type=type_ref_from_node(definition.type),
            args=[self._convert_input_value(a) for a in definition.arguments],
            description=_description(definition.doc_metadata),
        )

    @staticmethod
    def _convert_input_value(definition: nodes.InputValueDefinition) -> InputValueDefinition:
        return InputValueDefinition(
            name=definition.name,
            type=type_ref_from_node(definition.type),
            description=_description(definition.doc_metadata),
        )


def build_schema(definitions: Iterable[nodes.Definition]) -> Schema:
    """Build a Schema from a stream of SDL definitions.

    Raises:
        SchemaBuildError: If no Query type was defined.
    """
    builder = SchemaBuilder()
    for definition in definitions:
        builder.add_definition(definition)
    return builder.build()
