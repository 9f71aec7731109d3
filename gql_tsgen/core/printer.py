"""Pretty-printer for executable GraphQL definitions.

Renders operations and fragments back to GraphQL source in a normalized
layout (two-space indentation, one selection per line). The output parses
back to an equal AST, which is what makes it usable as the query text sent
by generated clients.
"""

import json

from .nodes import (
    Argument,
    BooleanValue,
    Directive,
    Field,
    FloatValue,
    FragmentDefinition,
    FragmentSpread,
    InlineFragment,
    IntValue,
    ListValue,
    NullValue,
    ObjectValue,
    OperationDefinition,
    Selection,
    SelectionSet,
    StringValue,
    Value,
    Variable,
    VariableDefinition,
)

INDENT = "  "


def print_value(value: Value) -> str:
    """Render a literal value."""
    if isinstance(value, StringValue):
        if value.block:
            return '"""' + value.value.replace('"""', '\\"""') + '"""'
        return json.dumps(value.value, ensure_ascii=False)
    if isinstance(value, (IntValue, FloatValue)):
        return value.value
    if isinstance(value, BooleanValue):
        return "true" if value.value else "false"
    if isinstance(value, NullValue):
        return "null"
    if isinstance(value, Variable):
        return f"${value.name}"
    if isinstance(value, ListValue):
        return "[" + ", ".join(print_value(item) for item in value.values) + "]"
    if isinstance(value, ObjectValue):
        fields = ", ".join(f"{f.name}: {print_value(f.value)}" for f in value.fields)
        return "{" + fields + "}"
    raise TypeError(f"Unknown value node: {type(value).__name__}")


def _print_arguments(arguments: list[Argument]) -> str:
    if not arguments:
        return ""
    return "(" + ", ".join(f"{a.name}: {print_value(a.value)}" for a in arguments) + ")"


def _print_directives(directives: list[Directive]) -> str:
    return "".join(f" @{d.name}{_print_arguments(d.arguments)}" for d in directives)


def _print_variable(variable: VariableDefinition) -> str:
    text = f"${variable.name}: {variable.type}"
    if variable.default_value is not None:
        text += f" = {print_value(variable.default_value)}"
    return text + _print_directives(variable.directives)


def _print_selection(selection: Selection, depth: int) -> list[str]:
    pad = INDENT * depth

    if isinstance(selection, Field):
        head = selection.name
        if selection.alias:
            head = f"{selection.alias}: {head}"
        head += _print_arguments(selection.arguments) + _print_directives(selection.directives)
        if selection.selection_set is None:
            return [pad + head]
        return _print_block(pad + head, selection.selection_set, depth)

    if isinstance(selection, FragmentSpread):
        return [f"{pad}...{selection.name}{_print_directives(selection.directives)}"]

    if isinstance(selection, InlineFragment):
        head = "..."
        if selection.type_condition:
            head += f" on {selection.type_condition}"
        head += _print_directives(selection.directives)
        return _print_block(pad + head, selection.selection_set, depth)

    raise TypeError(f"Unknown selection node: {type(selection).__name__}")


def _print_block(head: str, selection_set: SelectionSet, depth: int) -> list[str]:
    if not selection_set.selections:
        return [f"{head} {{}}"]
    lines = [f"{head} {{"]
    for selection in selection_set.selections:
        lines.extend(_print_selection(selection, depth + 1))
    lines.append(INDENT * depth + "}")
    return lines


def print_operation(operation: OperationDefinition) -> str:
    """Render an operation definition."""
    head = operation.operation.value
    if operation.name:
        head += f" {operation.name}"
    if operation.variables:
        head += "(" + ", ".join(_print_variable(v) for v in operation.variables) + ")"
    head += _print_directives(operation.directives)
    return "\n".join(_print_block(head, operation.selection_set, 0))


def print_fragment(fragment: FragmentDefinition) -> str:
    """Render a fragment definition."""
    head = f"fragment {fragment.name} on {fragment.type_condition}"
    head += _print_directives(fragment.directives)
    return "\n".join(_print_block(head, fragment.selection_set, 0))


def print_definition(definition: OperationDefinition | FragmentDefinition) -> str:
    if isinstance(definition, OperationDefinition):
        return print_operation(definition)
    return print_fragment(definition)
