"""Operations module generator.

Generates a TypeScript `GraphQL` class with one typed async method per
operation:

    const client = new GraphQL();
    const result = await client.GetUser(url, { id: "1" });

Each method posts the operation text (plus the fragments it spreads) and
validates the response data with the matching zod schema.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from . import nodes
from .generator import create_environment, jsdoc
from .printer import print_fragment, print_operation
from .scalars import ScalarRegistry

logger = logging.getLogger(__name__)


def escape_template_literal(text: str) -> str:
    """Escape text for use inside a TypeScript template literal."""
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def collect_fragment_names(
    selection_set: nodes.SelectionSet,
    fragments: dict[str, nodes.FragmentDefinition],
    found: list[str] | None = None,
) -> list[str]:
    """Names of fragments spread by a selection set, transitively, in first-use order.

    Unknown fragment names are skipped.
    """
    if found is None:
        found = []
    for selection in selection_set.selections:
        if isinstance(selection, nodes.FragmentSpread):
            if selection.name in found or selection.name not in fragments:
                continue
            found.append(selection.name)
            collect_fragment_names(fragments[selection.name].selection_set, fragments, found)
        elif selection.selection_set is not None:
            collect_fragment_names(selection.selection_set, fragments, found)
    return found


@dataclass
class VariablesType:
    """An exported TS object type describing an operation's variables."""
    name: str
    body: str
    all_optional: bool


class ClientGenerator:
    """Generates the operations module from parsed operations.

    Args:
        operations: Parsed operations, in output order
        fragments: Named fragments the operations may spread
        declared: Schema type names that have a declaration in the schema module
        scalars: Scalar registry used for built-in and custom scalar variables
        suffix: File suffix of the generated modules
    """

    def __init__(
        self,
        operations: Iterable[nodes.OperationDefinition],
        fragments: Iterable[nodes.FragmentDefinition] = (),
        declared: set[str] | None = None,
        scalars: ScalarRegistry | None = None,
        suffix: str = "_gqlc",
        template_dir: str | None = None,
    ):
        self.operations = list(operations)
        self.fragments = {f.name: f for f in fragments}
        self.declared = declared or set()
        self.scalars = scalars or ScalarRegistry()
        self.suffix = suffix
        self.env = create_environment(template_dir)

    def query_text(self, operation: nodes.OperationDefinition) -> str:
        """The operation source sent to the server, followed by its fragments."""
        parts = [print_operation(operation)]
        for name in collect_fragment_names(operation.selection_set, self.fragments):
            parts.append(print_fragment(self.fragments[name]))
        return "\n\n".join(parts)

    def ts_type(self, type_node: nodes.Type) -> str:
        """TypeScript type of a variable type reference."""
        if isinstance(type_node, nodes.NonNullType):
            return self._ts_base_type(type_node.type)
        return f"{self._ts_base_type(type_node)} | null"

    def _ts_base_type(self, type_node: nodes.NamedType | nodes.ListType) -> str:
        if isinstance(type_node, nodes.ListType):
            inner = self.ts_type(type_node.type)
            if " | " in inner:
                return f"({inner})[]"
            return f"{inner}[]"
        name = type_node.name
        if name in self.declared:
            return f"schema.{name}"
        return self.scalars.ts_type(name)

    def variables_type(self, operation: nodes.OperationDefinition) -> VariablesType | None:
        """Build the variables object type; None when the operation takes none."""
        if not operation.variables:
            return None

        members = []
        all_optional = True
        for variable in operation.variables:
            required = (
                isinstance(variable.type, nodes.NonNullType) and variable.default_value is None
            )
            all_optional = all_optional and not required
            marker = "" if required else "?"
            members.append(f"{variable.name}{marker}: {self.ts_type(variable.type)}")

        return VariablesType(
            name=f"{operation.function_name}_Variables",
            body="{ " + "; ".join(members) + " }",
            all_optional=all_optional,
        )

    def _generate_method(
        self,
        operation: nodes.OperationDefinition,
        variables: VariablesType | None,
    ) -> str:
        """Generate the query constant and method for one operation."""
        name = operation.function_name
        lines = []

        description = "\n".join(line for line in operation.doc_metadata if line)
        if description:
            lines.append(jsdoc(description, indent="  "))

        lines.append(
            f"  private static readonly {name}_query = "
            f"`{escape_template_literal(self.query_text(operation))}`;"
        )
        lines.append("")

        if variables is None:
            lines.append(f"  public async {name}(url: string): Promise<schema.{name}_Type> {{")
            lines.append(
                f"    return this.execute(url, GraphQL.{name}_query, schema.{name}_Schema);"
            )
        else:
            optional = "?" if variables.all_optional else ""
            lines.append(
                f"  public async {name}(url: string, variables{optional}: {variables.name}): "
                f"Promise<schema.{name}_Type> {{"
            )
            lines.append(
                f"    return this.execute(url, GraphQL.{name}_query, schema.{name}_Schema, variables);"
            )
        lines.append("  }")

        return "\n".join(lines)

    def generate(self) -> str:
        """Render the operations module."""
        variable_types = []
        methods = []
        for operation in self.operations:
            variables = self.variables_type(operation)
            if variables is not None:
                variable_types.append(variables)
            methods.append(self._generate_method(operation, variables))
            logger.debug("Generated method %s", operation.function_name)

        template = self.env.get_template("operations.ts.j2")
        return template.render(
            suffix=self.suffix,
            variable_types=variable_types,
            methods=methods,
        )
