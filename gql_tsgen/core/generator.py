"""Code generator for the zod schema module.

Walks the schema graph together with the parsed operations and renders
Jinja2 templates into a TypeScript module with one validator per operation
and one declaration per schema type reachable from operation variables.

Supports custom templates via the template_dir parameter:
    generator = SchemaGenerator(schema, operations, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from ..errors import GenerationError
from . import nodes
from .ir import (
    BUILTIN_SCALARS,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    Schema,
    TypeDefinition,
    TypeKind,
    TypeRef,
    unwrap_type,
)
from .scalars import ANY, ScalarRegistry

logger = logging.getLogger(__name__)

INDENT = "  "

COMPOSITE_KINDS = (TypeKind.OBJECT, TypeKind.INTERFACE, TypeKind.UNION)
INPUT_KINDS = (TypeKind.INPUT_OBJECT, TypeKind.ENUM, TypeKind.SCALAR)


def jsdoc(text: str, indent: str = "") -> str:
    """Format text as a JSDoc block comment."""
    if not text:
        return ""
    lines = text.replace("*/", "*\\/").splitlines()
    if len(lines) == 1:
        return f"{indent}/** {lines[0]} */"
    body = [f"{indent} * {line}".rstrip() for line in lines]
    return "\n".join([f"{indent}/**", *body, f"{indent} */"])


def create_environment(template_dir: str | None = None) -> Environment:
    """Build the Jinja2 environment; custom templates take precedence."""
    loaders = []
    if template_dir:
        template_path = Path(template_dir)
        if template_path.is_dir():
            loaders.append(FileSystemLoader(str(template_path)))
    loaders.append(PackageLoader("gql_tsgen", "templates"))

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["jsdoc"] = jsdoc
    return env


def enum_expression(values: list[str]) -> str:
    """Render a zod enum; zod rejects empty enums so those become never()."""
    if not values:
        return "z.never()"
    return "z.enum([" + ", ".join(json.dumps(v) for v in values) + "])"


def object_expression(entries: list[tuple[str, str]], depth: int) -> str:
    """Render a z.object literal with one entry per line."""
    if not entries:
        return "z.object({})"
    pad = INDENT * (depth + 1)
    lines = ["z.object({"]
    lines.extend(f"{pad}{key}: {expression}," for key, expression in entries)
    lines.append(INDENT * depth + "})")
    return "\n".join(lines)


def wrap_type(type_ref: TypeRef, named: Callable[[NamedTypeRef], str]) -> str:
    """Apply list and nullability wrappers around a named type's validator.

    Every position is nullable unless a NonNull wrapper says otherwise.
    """
    if isinstance(type_ref, NonNullTypeRef):
        return _wrap_nullable(type_ref.of_type, named)
    return _wrap_nullable(type_ref, named) + ".nullable()"


def _wrap_nullable(type_ref: NamedTypeRef | ListTypeRef, named) -> str:
    if isinstance(type_ref, ListTypeRef):
        return f"z.array({wrap_type(type_ref.of_type, named)})"
    return named(type_ref)


@dataclass
class TypeDeclaration:
    """A named validator for a schema type used by operation variables."""
    name: str
    kind: TypeKind
    expression: str
    description: str | None = None

    @property
    def lazy(self) -> bool:
        return self.kind is TypeKind.INPUT_OBJECT

    @property
    def custom_scalar(self) -> bool:
        return self.kind is TypeKind.SCALAR


@dataclass
class OperationSchema:
    """The response validator of one operation."""
    name: str
    expression: str
    operation: nodes.OperationDefinition


class SchemaGenerator:
    """Generates the zod schema module.

    Args:
        schema: The resolved schema graph
        operations: Parsed operations, in output order
        fragments: Named fragments available for expansion
        scalars: Scalar registry; defaults to the built-in scalars
        strict: Raise GenerationError instead of warning on unresolved names
        template_dir: Optional directory with custom Jinja2 templates

    Example:
        generator = SchemaGenerator(schema, operations, fragments)
        content = generator.generate()
    """

    def __init__(
        self,
        schema: Schema,
        operations: Iterable[nodes.OperationDefinition],
        fragments: Iterable[nodes.FragmentDefinition] = (),
        scalars: ScalarRegistry | None = None,
        strict: bool = False,
        template_dir: str | None = None,
    ):
        self.schema = schema
        self.operations = list(operations)
        self.fragments = {f.name: f for f in fragments}
        self.scalars = scalars or ScalarRegistry()
        self.strict = strict
        self.env = create_environment(template_dir)
        self._input_types: list[TypeDefinition] | None = None

    # -------------------------------------------------------------------------
    # Best-effort gaps
    # -------------------------------------------------------------------------

    def _gap(self, message: str, *args) -> str:
        """Report an unresolved name and return the permissive validator."""
        if self.strict:
            raise GenerationError(message % args)
        logger.warning(message, *args)
        return ANY.validator

    # -------------------------------------------------------------------------
    # Input type closure
    # -------------------------------------------------------------------------

    def input_types(self) -> list[TypeDefinition]:
        """Schema types reachable from operation variables, sorted by name."""
        if self._input_types is None:
            visited: dict[str, TypeDefinition] = {}
            for operation in self.operations:
                for variable in operation.variables:
                    self._visit_input(
                        nodes.named_type_of(variable.type).name,
                        visited,
                        operation.function_name,
                    )
            self._input_types = sorted(visited.values(), key=lambda t: t.name)
        return self._input_types

    def _visit_input(self, name: str, visited: dict[str, TypeDefinition], operation: str):
        if name in BUILTIN_SCALARS or name in visited:
            return

        type_def = self.schema.get_type(name)
        if type_def is None:
            self._gap("Unknown type %s used as a variable type in %s", name, operation)
            return
        if type_def.kind not in INPUT_KINDS:
            self._gap(
                "Output type %s cannot be used as a variable type in %s; dropped",
                name,
                operation,
            )
            return

        visited[name] = type_def
        if type_def.kind is TypeKind.INPUT_OBJECT:
            for input_field in type_def.input_fields:
                self._visit_input(unwrap_type(input_field.type).name, visited, operation)

    def declared_names(self) -> set[str]:
        """Names that get a `<Name>_Schema` declaration."""
        return {t.name for t in self.input_types()}

    def type_declarations(self) -> list[TypeDeclaration]:
        """Build one declaration per type in the input closure."""
        declared = self.declared_names()
        declarations = []
        for type_def in self.input_types():
            if type_def.kind is TypeKind.ENUM:
                expression = enum_expression(type_def.enum_values)
            elif type_def.kind is TypeKind.SCALAR:
                expression = self.scalars.validator(type_def.name)
            else:
                expression = self._input_object_expression(type_def, declared)
            declarations.append(
                TypeDeclaration(
                    name=type_def.name,
                    kind=type_def.kind,
                    expression=expression,
                    description=type_def.description,
                )
            )
        return declarations

    def _input_object_expression(self, type_def: TypeDefinition, declared: set[str]) -> str:
        def named(ref: NamedTypeRef) -> str:
            if ref.name in BUILTIN_SCALARS:
                return self.scalars.validator(ref.name)
            if ref.name in declared:
                return f"{ref.name}_Schema"
            return self._gap("Unknown type %s in input %s", ref.name, type_def.name)

        entries = [(f.name, wrap_type(f.type, named)) for f in type_def.input_fields]
        return f"z.lazy(() => {object_expression(entries, 0)})"

    # -------------------------------------------------------------------------
    # Operation-shaped output
    # -------------------------------------------------------------------------

    def operation_schemas(self) -> list[OperationSchema]:
        return [self.operation_schema(op) for op in self.operations]

    def operation_schema(self, operation: nodes.OperationDefinition) -> OperationSchema:
        """Build the response validator for one operation."""
        name = operation.function_name
        root = self.schema.root_type(operation.operation.value)
        if root is None:
            raise GenerationError(
                f"Schema has no {operation.operation.root_type_name} type for operation {name}"
            )

        entries = self._selection_entries(root, operation.selection_set, 0, name)
        return OperationSchema(
            name=name,
            expression=object_expression(entries, 0),
            operation=operation,
        )

    def _selection_entries(
        self,
        parent: TypeDefinition,
        selection_set: nodes.SelectionSet,
        depth: int,
        path: str,
    ) -> list[tuple[str, str]]:
        entries: dict[str, str] = {}
        self._merge_selections(parent, selection_set, depth, path, entries, False, ())
        return list(entries.items())

    def _merge_selections(
        self,
        parent: TypeDefinition,
        selection_set: nodes.SelectionSet,
        depth: int,
        path: str,
        entries: dict[str, str],
        optional: bool,
        fragment_stack: tuple[str, ...],
    ):
        """Collect field validators into entries, expanding fragments in place.

        The first selection of a response key wins.
        """
        for selection in selection_set.selections:
            if isinstance(selection, nodes.Field):
                key = selection.response_key
                if key in entries:
                    continue
                expression = self._field_expression(parent, selection, depth, f"{path}.{key}")
                entries[key] = expression + ".optional()" if optional else expression
                continue

            if isinstance(selection, nodes.FragmentSpread):
                fragment = self.fragments.get(selection.name)
                if fragment is None:
                    raise GenerationError(f"Unknown fragment {selection.name} in {path}")
                if selection.name in fragment_stack:
                    cycle = " -> ".join((*fragment_stack, selection.name))
                    raise GenerationError(f"Fragment cycle {cycle} in {path}")
                type_condition = fragment.type_condition
                inner = fragment.selection_set
                stack = (*fragment_stack, selection.name)
            else:
                type_condition = selection.type_condition
                inner = selection.selection_set
                stack = fragment_stack

            target = parent
            if type_condition is not None:
                target = self.schema.get_type(type_condition)
                if target is None or target.kind not in COMPOSITE_KINDS:
                    self._gap("Unknown type condition %s in %s; skipped", type_condition, path)
                    continue

            conditional = optional or not self._condition_applies(parent, target)
            self._merge_selections(target, inner, depth, path, entries, conditional, stack)

    @staticmethod
    def _condition_applies(parent: TypeDefinition, condition: TypeDefinition) -> bool:
        """Check whether a fragment's fields are always present on the parent."""
        if condition.name == parent.name:
            return True
        if parent.kind is TypeKind.OBJECT:
            return condition.name in parent.interfaces or parent.name in condition.possible_types
        return False

    def _field_expression(
        self,
        parent: TypeDefinition,
        selection: nodes.Field,
        depth: int,
        path: str,
    ) -> str:
        if selection.name == "__typename":
            return self.scalars.validator("String")

        field_def = parent.get_field(selection.name)
        if field_def is None:
            return self._gap("Unknown field %s on type %s (%s)", selection.name, parent.name, path)

        def named(ref: NamedTypeRef) -> str:
            return self._output_expression(ref, selection.selection_set, depth + 1, path)

        return wrap_type(field_def.type, named)

    def _output_expression(
        self,
        ref: NamedTypeRef,
        selection_set: nodes.SelectionSet | None,
        depth: int,
        path: str,
    ) -> str:
        type_def = self.schema.get_type(ref.name)
        if type_def is None:
            return self._gap("Unknown type %s at %s", ref.name, path)

        if type_def.kind in COMPOSITE_KINDS:
            if selection_set is None:
                return self._gap("Field %s of type %s needs a selection set", path, ref.name)
            entries = self._selection_entries(type_def, selection_set, depth, path)
            return object_expression(entries, depth)

        if selection_set is not None:
            logger.warning("Ignoring selection set on leaf field %s of type %s", path, ref.name)
        if type_def.kind is TypeKind.ENUM:
            return enum_expression(type_def.enum_values)
        if type_def.kind is TypeKind.SCALAR:
            return self.scalars.validator(type_def.name)
        return self._gap("Input type %s used as an output at %s", ref.name, path)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def generate(self) -> str:
        """Render the schema module."""
        template = self.env.get_template("schema.ts.j2")
        return template.render(
            declarations=self.type_declarations(),
            operations=self.operation_schemas(),
        )
