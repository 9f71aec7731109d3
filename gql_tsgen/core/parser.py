"""Recursive-descent parser for GraphQL documents.

Consumes the lexer's token stream with a current/peek lookahead and yields
top-level definitions one at a time. Comments and triple-quoted doc strings
that precede a definition (or a member inside a definition body) become that
node's ``doc_metadata``.

Example:
    with parse(source) as definitions:
        for definition in definitions:
            ...

Parsing stops at the first structural error, which is raised as a
GraphQLSyntaxError carrying the offending token's position.
"""

import logging
import re
from collections.abc import Callable, Iterator
from typing import TypeVar

from ..errors import GraphQLSyntaxError
from .lexer import tokenize
from .nodes import (
    Argument,
    BooleanValue,
    Definition,
    Directive,
    EnumTypeDefinition,
    EnumValueDefinition,
    Field,
    FieldDefinition,
    FloatValue,
    FragmentDefinition,
    FragmentSpread,
    InlineFragment,
    InputObjectTypeDefinition,
    InputValueDefinition,
    InterfaceTypeDefinition,
    IntValue,
    ListType,
    ListValue,
    NamedType,
    NonNullType,
    NullValue,
    ObjectField,
    ObjectTypeDefinition,
    ObjectValue,
    OperationDefinition,
    OperationType,
    ScalarTypeDefinition,
    Selection,
    SelectionSet,
    StringValue,
    Type,
    UnionTypeDefinition,
    Value,
    Variable,
    VariableDefinition,
)
from .tokens import Token, TokenKind, is_name_token

logger = logging.getLogger(__name__)

T = TypeVar("T")

OPERATION_KEYWORDS = {
    TokenKind.QUERY: OperationType.QUERY,
    TokenKind.MUTATION: OperationType.MUTATION,
    TokenKind.SUBSCRIPTION: OperationType.SUBSCRIPTION,
}

_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# A high surrogate escape directly followed by a low one encodes a single code point
_ESCAPE_RE = re.compile(
    r"\\(u[dD][89abAB][0-9A-Fa-f]{2}\\u[dD][c-fC-F][0-9A-Fa-f]{2}|u[0-9A-Fa-f]{4}|.)",
    re.DOTALL,
)


def _describe(token: Token) -> str:
    """Describe a token for error messages."""
    if token.kind is TokenKind.ILLEGAL:
        return f"ILLEGAL {token.literal!r}"
    return str(token.kind)


def _is_block_string(literal: str) -> bool:
    return literal.startswith('"""')


def _block_string_content(literal: str) -> str:
    return literal[3:-3].replace('\\"""', '"""')


def _decode_string(literal: str) -> str:
    """Resolve escape sequences in a quoted string literal.

    Raises:
        ValueError: On a \\u escape naming an unpaired surrogate.
    """

    def replace(match: re.Match) -> str:
        escape = match.group(1)
        if len(escape) == 11:
            high = int(escape[1:5], 16)
            low = int(escape[7:], 16)
            return chr(0x10000 + ((high - 0xD800) << 10) + (low - 0xDC00))
        if len(escape) == 5 and escape[0] == "u":
            code_point = int(escape[1:], 16)
            if 0xD800 <= code_point <= 0xDFFF:
                raise ValueError(f"unpaired surrogate escape \\{escape}")
            return chr(code_point)
        return _ESCAPES.get(escape, escape)

    return _ESCAPE_RE.sub(replace, literal[1:-1])


class Parser:
    """Streaming GraphQL parser.

    Iterate the parser to receive definitions lazily; tokens are pulled from
    the lexer only as the parser needs them. Call close() (or use the parser
    as a context manager) to stop early and release the token stream.
    """

    def __init__(self, source: str):
        self._tokens = tokenize(source)
        self._definitions: Iterator[Definition] | None = None
        self._closed = False
        self._pending_metadata: list[str] = []
        self.current_token: Token | None = None
        self.peek_token: Token | None = None
        self._next_token()  # load current
        self._next_token()  # load peek

    # -------------------------------------------------------------------------
    # Iteration and lifecycle
    # -------------------------------------------------------------------------

    def __iter__(self) -> Iterator[Definition]:
        if self._definitions is None:
            self._definitions = self._iter_definitions()
        return self._definitions

    def __enter__(self) -> "Parser":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Stop parsing and release the underlying token stream."""
        self._closed = True
        if self._definitions is not None:
            self._definitions.close()
        self._tokens.close()

    def _iter_definitions(self) -> Iterator[Definition]:
        try:
            while not self._closed and self.current_token.kind is not TokenKind.EOF:
                if self.current_token.kind is TokenKind.COMMENT:
                    self._handle_comment()
                    continue
                if self._at_doc_string():
                    self._handle_documentation()
                    continue
                yield self.parse_definition()
        finally:
            self._tokens.close()

    # -------------------------------------------------------------------------
    # Token handling
    # -------------------------------------------------------------------------

    def _next_token(self):
        """Consume the current token and pull the next one into peek."""
        self.current_token = self.peek_token
        if self.peek_token is None or self.peek_token.kind is not TokenKind.EOF:
            self.peek_token = next(self._tokens)

    def _at(self, kind: TokenKind) -> bool:
        return self.current_token.kind is kind

    def _error(self, message: str, token: Token | None = None) -> GraphQLSyntaxError:
        token = token or self.current_token
        return GraphQLSyntaxError(message, token.line, token.column, str(token.kind))

    def _expect(self, kind: TokenKind) -> Token:
        """Consume a token of the given kind or fail."""
        token = self.current_token
        if token.kind is not kind:
            raise self._error(f"expected {kind}, got {_describe(token)}")
        self._next_token()
        return token

    def _parse_name(self, what: str) -> str:
        """Consume a name token; keywords are accepted as names."""
        token = self.current_token
        if not is_name_token(token.kind):
            raise self._error(f"expected {what}, got {_describe(token)}")
        self._next_token()
        return token.literal

    def _parse_ident(self, what: str) -> str:
        """Consume a plain identifier (keywords are not accepted)."""
        token = self.current_token
        if token.kind is not TokenKind.IDENT:
            raise self._error(f"expected {what}, got {_describe(token)}")
        self._next_token()
        return token.literal

    # -------------------------------------------------------------------------
    # Comments and documentation
    # -------------------------------------------------------------------------

    def _at_doc_string(self) -> bool:
        return self._at(TokenKind.STRING) and _is_block_string(self.current_token.literal)

    def _handle_comment(self):
        self._pending_metadata.append(self.current_token.literal[1:].strip())
        self._next_token()

    def _handle_documentation(self):
        content = _block_string_content(self.current_token.literal).strip()
        if content:
            self._pending_metadata.append(content)
        self._next_token()

    def _skip_ignored(self):
        """Collect comments and doc strings as metadata, dropping commas."""
        while True:
            if self._at(TokenKind.COMMENT):
                self._handle_comment()
            elif self._at_doc_string():
                self._handle_documentation()
            elif self._at(TokenKind.COMMA):
                self._next_token()
            else:
                return

    def _skip_value_separators(self):
        """Skip comments and commas between list or object members; strings are values here."""
        while self._at(TokenKind.COMMENT) or self._at(TokenKind.COMMA):
            self._next_token()

    def _extract_metadata(self) -> list[str]:
        """Hand the pending metadata to the node being parsed."""
        metadata = self._pending_metadata
        self._pending_metadata = []
        return metadata

    def _parse_delimited(
        self,
        open_kind: TokenKind,
        close_kind: TokenKind,
        parse_member: Callable[[], T],
        context: str,
        keep_metadata: bool = True,
        skip: Callable[[], None] | None = None,
    ) -> list[T]:
        """Parse `open member* close`, skipping comments and commas between members.

        `skip` replaces the default separator handling, which also collects
        doc strings as metadata.
        """
        skip = skip or self._skip_ignored
        self._expect(open_kind)
        members: list[T] = []
        while True:
            skip()
            if self._at(close_kind):
                break
            if self._at(TokenKind.EOF):
                raise self._error(f"unexpected end of input in {context}")
            if not keep_metadata:
                self._pending_metadata.clear()
            members.append(parse_member())
        # Comments right before the closing token document nothing
        self._pending_metadata.clear()
        self._expect(close_kind)
        return members

    def _parse_directives(self) -> list[Directive]:
        directives = []
        while self._at(TokenKind.AT):
            directives.append(self._parse_directive())
        return directives

    # -------------------------------------------------------------------------
    # Definitions
    # -------------------------------------------------------------------------

    def parse_definition(self) -> Definition:
        """Parse one top-level definition at the current token."""
        kind = self.current_token.kind
        if kind in OPERATION_KEYWORDS:
            return self._parse_operation_definition()
        if kind is TokenKind.LBRACE:
            return self._parse_anonymous_query()
        if kind is TokenKind.FRAGMENT:
            return self._parse_fragment_definition()
        if kind is TokenKind.TYPE:
            return self._parse_object_type_definition()
        if kind is TokenKind.INPUT:
            return self._parse_input_object_type_definition()
        if kind is TokenKind.ENUM:
            return self._parse_enum_type_definition()
        if kind is TokenKind.SCALAR:
            return self._parse_scalar_type_definition()
        if kind is TokenKind.INTERFACE:
            return self._parse_interface_type_definition()
        if kind is TokenKind.UNION:
            return self._parse_union_type_definition()
        raise self._error(f"unexpected token {_describe(self.current_token)}")

    def _parse_operation_definition(self) -> OperationDefinition:
        metadata = self._extract_metadata()
        operation = OPERATION_KEYWORDS[self.current_token.kind]
        self._next_token()

        name = None
        if self._at(TokenKind.IDENT):
            name = self.current_token.literal
            self._next_token()

        variables = []
        if self._at(TokenKind.LPAREN):
            variables = self._parse_delimited(
                TokenKind.LPAREN,
                TokenKind.RPAREN,
                self._parse_variable_definition,
                "variable definitions",
            )

        directives = self._parse_directives()
        selection_set = self._parse_selection_set()

        return OperationDefinition(
            operation=operation,
            name=name,
            variables=variables,
            directives=directives,
            selection_set=selection_set,
            doc_metadata=metadata,
        )

    def _parse_anonymous_query(self) -> OperationDefinition:
        metadata = self._extract_metadata()
        selection_set = self._parse_selection_set()
        return OperationDefinition(
            operation=OperationType.QUERY,
            selection_set=selection_set,
            doc_metadata=metadata,
        )

    def _parse_variable_definition(self) -> VariableDefinition:
        metadata = self._extract_metadata()
        self._expect(TokenKind.DOLLAR)
        name = self._parse_name("variable name")
        self._expect(TokenKind.COLON)
        var_type = self._parse_type()

        default_value = None
        if self._at(TokenKind.EQUALS):
            self._next_token()
            default_value = self._parse_value()

        return VariableDefinition(
            name=name,
            type=var_type,
            default_value=default_value,
            directives=self._parse_directives(),
            doc_metadata=metadata,
        )

    def _parse_fragment_definition(self) -> FragmentDefinition:
        metadata = self._extract_metadata()
        self._expect(TokenKind.FRAGMENT)
        name = self._parse_ident("fragment name")
        self._expect(TokenKind.ON)
        type_condition = self._parse_ident("type name")
        directives = self._parse_directives()
        selection_set = self._parse_selection_set()

        return FragmentDefinition(
            name=name,
            type_condition=type_condition,
            directives=directives,
            selection_set=selection_set,
            doc_metadata=metadata,
        )

    # -------------------------------------------------------------------------
    # Selections
    # -------------------------------------------------------------------------

    def _parse_selection_set(self) -> SelectionSet:
        selections = self._parse_delimited(
            TokenKind.LBRACE,
            TokenKind.RBRACE,
            self._parse_selection,
            "selection set",
        )
        return SelectionSet(selections=selections)

    def _parse_selection(self) -> Selection:
        if self._at(TokenKind.SPREAD):
            return self._parse_fragment(self._extract_metadata())
        if is_name_token(self.current_token.kind):
            return self._parse_field()
        raise self._error(f"unexpected token in selection: {_describe(self.current_token)}")

    def _parse_field(self) -> Field:
        metadata = self._extract_metadata()
        name = self._parse_name("field name")

        alias = None
        if self._at(TokenKind.COLON):
            # What we read was an alias
            self._next_token()
            alias = name
            name = self._parse_name("field name after alias")

        arguments = []
        if self._at(TokenKind.LPAREN):
            arguments = self._parse_arguments()

        directives = self._parse_directives()

        selection_set = None
        if self._at(TokenKind.LBRACE):
            selection_set = self._parse_selection_set()

        return Field(
            name=name,
            alias=alias,
            arguments=arguments,
            directives=directives,
            selection_set=selection_set,
            doc_metadata=metadata,
        )

    def _parse_fragment(self, metadata: list[str]) -> FragmentSpread | InlineFragment:
        self._expect(TokenKind.SPREAD)

        if self._at(TokenKind.ON):
            self._next_token()
            type_condition = self._parse_ident("type name")
            directives = self._parse_directives()
            return InlineFragment(
                type_condition=type_condition,
                directives=directives,
                selection_set=self._parse_selection_set(),
                doc_metadata=metadata,
            )

        if self._at(TokenKind.LBRACE) or self._at(TokenKind.AT):
            directives = self._parse_directives()
            return InlineFragment(
                directives=directives,
                selection_set=self._parse_selection_set(),
                doc_metadata=metadata,
            )

        name = self._parse_ident("fragment name")
        return FragmentSpread(
            name=name,
            directives=self._parse_directives(),
            doc_metadata=metadata,
        )

    def _parse_arguments(self) -> list[Argument]:
        return self._parse_delimited(
            TokenKind.LPAREN,
            TokenKind.RPAREN,
            self._parse_argument,
            "arguments",
            keep_metadata=False,
        )

    def _parse_argument(self) -> Argument:
        name = self._parse_name("argument name")
        self._expect(TokenKind.COLON)
        return Argument(name=name, value=self._parse_value())

    def _parse_directive(self) -> Directive:
        self._expect(TokenKind.AT)
        name = self._parse_name("directive name")
        arguments = []
        if self._at(TokenKind.LPAREN):
            arguments = self._parse_arguments()
        return Directive(name=name, arguments=arguments)

    # -------------------------------------------------------------------------
    # Values and types
    # -------------------------------------------------------------------------

    def _parse_value(self) -> Value:
        token = self.current_token
        kind = token.kind

        if kind is TokenKind.STRING:
            self._next_token()
            if _is_block_string(token.literal):
                return StringValue(value=_block_string_content(token.literal), block=True)
            try:
                return StringValue(value=_decode_string(token.literal))
            except ValueError as e:
                raise self._error(str(e), token) from None
        if kind is TokenKind.INT:
            self._next_token()
            return IntValue(value=token.literal)
        if kind is TokenKind.FLOAT:
            self._next_token()
            return FloatValue(value=token.literal)
        if kind is TokenKind.LBRACKET:
            return self._parse_list_value()
        if kind is TokenKind.LBRACE:
            return self._parse_object_value()
        if kind is TokenKind.DOLLAR:
            self._next_token()
            return Variable(name=self._parse_name("variable name"))
        if kind is TokenKind.IDENT:
            if token.literal == "true":
                self._next_token()
                return BooleanValue(value=True)
            if token.literal == "false":
                self._next_token()
                return BooleanValue(value=False)
            if token.literal == "null":
                self._next_token()
                return NullValue()
            raise self._error(f"unexpected identifier in value: {token.literal}", token)
        raise self._error(f"unexpected token in value: {_describe(token)}")

    def _parse_list_value(self) -> ListValue:
        values = self._parse_delimited(
            TokenKind.LBRACKET,
            TokenKind.RBRACKET,
            self._parse_value,
            "list value",
            skip=self._skip_value_separators,
        )
        return ListValue(values=values)

    def _parse_object_value(self) -> ObjectValue:
        fields = self._parse_delimited(
            TokenKind.LBRACE,
            TokenKind.RBRACE,
            self._parse_object_field,
            "object value",
            skip=self._skip_value_separators,
        )
        return ObjectValue(fields=fields)

    def _parse_object_field(self) -> ObjectField:
        name = self._parse_name("object field name")
        self._expect(TokenKind.COLON)
        return ObjectField(name=name, value=self._parse_value())

    def _parse_type(self) -> Type:
        if self._at(TokenKind.LBRACKET):
            self._next_token()
            inner = self._parse_type()
            self._expect(TokenKind.RBRACKET)
            type_node: Type = ListType(type=inner)
        elif is_name_token(self.current_token.kind):
            type_node = NamedType(name=self._parse_name("type name"))
        else:
            raise self._error(f"expected type, got {_describe(self.current_token)}")

        if self._at(TokenKind.BANG):
            self._next_token()
            type_node = NonNullType(type=type_node)

        return type_node

    # -------------------------------------------------------------------------
    # Schema definitions
    # -------------------------------------------------------------------------

    def _parse_object_type_definition(self) -> ObjectTypeDefinition:
        metadata = self._extract_metadata()
        self._expect(TokenKind.TYPE)
        name = self._parse_ident("type name")

        interfaces = []
        if self._at(TokenKind.IMPLEMENTS):
            interfaces = self._parse_implements_interfaces()

        directives = self._parse_directives()

        fields = []
        if self._at(TokenKind.LBRACE):
            fields = self._parse_field_definitions()

        return ObjectTypeDefinition(
            name=name,
            interfaces=interfaces,
            fields=fields,
            directives=directives,
            doc_metadata=metadata,
        )

    def _parse_implements_interfaces(self) -> list[str]:
        self._expect(TokenKind.IMPLEMENTS)
        if self._at(TokenKind.AMP):
            self._next_token()

        interfaces = [self._parse_ident("interface name")]
        while self._at(TokenKind.AMP):
            self._next_token()
            interfaces.append(self._parse_ident("interface name"))
        return interfaces

    def _parse_field_definitions(self) -> list[FieldDefinition]:
        return self._parse_delimited(
            TokenKind.LBRACE,
            TokenKind.RBRACE,
            self._parse_field_definition,
            "field definitions",
        )

    def _parse_field_definition(self) -> FieldDefinition:
        metadata = self._extract_metadata()
        name = self._parse_name("field name")

        arguments = []
        if self._at(TokenKind.LPAREN):
            arguments = self._parse_delimited(
                TokenKind.LPAREN,
                TokenKind.RPAREN,
                self._parse_input_value_definition,
                "input value definitions",
            )

        self._expect(TokenKind.COLON)
        field_type = self._parse_type()

        return FieldDefinition(
            name=name,
            type=field_type,
            arguments=arguments,
            directives=self._parse_directives(),
            doc_metadata=metadata,
        )

    def _parse_input_value_definition(self) -> InputValueDefinition:
        metadata = self._extract_metadata()
        name = self._parse_name("input name")
        self._expect(TokenKind.COLON)
        input_type = self._parse_type()

        default_value = None
        if self._at(TokenKind.EQUALS):
            self._next_token()
            default_value = self._parse_value()

        return InputValueDefinition(
            name=name,
            type=input_type,
            default_value=default_value,
            directives=self._parse_directives(),
            doc_metadata=metadata,
        )

    def _parse_input_object_type_definition(self) -> InputObjectTypeDefinition:
        metadata = self._extract_metadata()
        self._expect(TokenKind.INPUT)
        name = self._parse_ident("input type name")
        directives = self._parse_directives()

        fields = []
        if self._at(TokenKind.LBRACE):
            fields = self._parse_delimited(
                TokenKind.LBRACE,
                TokenKind.RBRACE,
                self._parse_input_value_definition,
                "input type definition",
            )

        return InputObjectTypeDefinition(
            name=name,
            fields=fields,
            directives=directives,
            doc_metadata=metadata,
        )

    def _parse_enum_type_definition(self) -> EnumTypeDefinition:
        metadata = self._extract_metadata()
        self._expect(TokenKind.ENUM)
        name = self._parse_ident("enum name")
        directives = self._parse_directives()

        values = []
        if self._at(TokenKind.LBRACE):
            values = self._parse_delimited(
                TokenKind.LBRACE,
                TokenKind.RBRACE,
                self._parse_enum_value_definition,
                "enum definition",
            )

        return EnumTypeDefinition(
            name=name,
            values=values,
            directives=directives,
            doc_metadata=metadata,
        )

    def _parse_enum_value_definition(self) -> EnumValueDefinition:
        metadata = self._extract_metadata()
        name = self._parse_ident("enum value name")
        return EnumValueDefinition(
            name=name,
            directives=self._parse_directives(),
            doc_metadata=metadata,
        )

    def _parse_scalar_type_definition(self) -> ScalarTypeDefinition:
        metadata = self._extract_metadata()
        self._expect(TokenKind.SCALAR)
        name = self._parse_ident("scalar name")
        return ScalarTypeDefinition(
            name=name,
            directives=self._parse_directives(),
            doc_metadata=metadata,
        )

    def _parse_interface_type_definition(self) -> InterfaceTypeDefinition:
        metadata = self._extract_metadata()
        self._expect(TokenKind.INTERFACE)
        name = self._parse_ident("interface name")
        directives = self._parse_directives()

        fields = []
        if self._at(TokenKind.LBRACE):
            fields = self._parse_field_definitions()

        return InterfaceTypeDefinition(
            name=name,
            fields=fields,
            directives=directives,
            doc_metadata=metadata,
        )

    def _parse_union_type_definition(self) -> UnionTypeDefinition:
        metadata = self._extract_metadata()
        self._expect(TokenKind.UNION)
        name = self._parse_ident("union name")
        directives = self._parse_directives()

        types = []
        if self._at(TokenKind.EQUALS):
            self._next_token()
            if self._at(TokenKind.PIPE):
                self._next_token()
            types.append(self._parse_ident("type name"))
            while self._at(TokenKind.PIPE):
                self._next_token()
                types.append(self._parse_ident("type name"))

        return UnionTypeDefinition(
            name=name,
            types=types,
            directives=directives,
            doc_metadata=metadata,
        )


def parse(source: str) -> Parser:
    """Create a streaming parser over GraphQL source text."""
    return Parser(source)


def parse_document(source: str) -> list[Definition]:
    """Parse a whole document eagerly and return its definitions."""
    with Parser(source) as parser:
        return list(parser)
