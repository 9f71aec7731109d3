"""Token definitions for the GraphQL lexer."""

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    """Classification of a lexical token."""
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    IDENT = "IDENT"
    INT = "INT"
    FLOAT = "FLOAT"
    STRING = "STRING"

    # Keywords
    QUERY = "QUERY"
    MUTATION = "MUTATION"
    SUBSCRIPTION = "SUBSCRIPTION"
    FRAGMENT = "FRAGMENT"
    ON = "ON"
    TYPE = "TYPE"
    SCHEMA = "SCHEMA"
    SCALAR = "SCALAR"
    ENUM = "ENUM"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    INPUT = "INPUT"
    EXTEND = "EXTEND"
    DIRECTIVE = "DIRECTIVE"
    IMPLEMENTS = "IMPLEMENTS"

    # Punctuation
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    LBRACKET = "LBRACKET"
    RBRACKET = "RBRACKET"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    COLON = "COLON"
    COMMA = "COMMA"
    EQUALS = "EQUALS"
    AT = "AT"
    DOLLAR = "DOLLAR"
    BANG = "BANG"
    PIPE = "PIPE"
    AMP = "AMP"
    SPREAD = "SPREAD"

    COMMENT = "COMMENT"

    def __str__(self) -> str:
        return self.value


KEYWORDS: dict[str, TokenKind] = {
    "query": TokenKind.QUERY,
    "mutation": TokenKind.MUTATION,
    "subscription": TokenKind.SUBSCRIPTION,
    "fragment": TokenKind.FRAGMENT,
    "on": TokenKind.ON,
    "type": TokenKind.TYPE,
    "schema": TokenKind.SCHEMA,
    "scalar": TokenKind.SCALAR,
    "enum": TokenKind.ENUM,
    "interface": TokenKind.INTERFACE,
    "union": TokenKind.UNION,
    "input": TokenKind.INPUT,
    "extend": TokenKind.EXTEND,
    "directive": TokenKind.DIRECTIVE,
    "implements": TokenKind.IMPLEMENTS,
}

PUNCTUATION: dict[str, TokenKind] = {
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    "=": TokenKind.EQUALS,
    "@": TokenKind.AT,
    "$": TokenKind.DOLLAR,
    "!": TokenKind.BANG,
    "|": TokenKind.PIPE,
    "&": TokenKind.AMP,
}

# GraphQL keywords are not reserved at name positions
NAME_TOKENS = frozenset({TokenKind.IDENT, *KEYWORDS.values()})


def lookup_ident(literal: str) -> TokenKind:
    """Return the keyword kind for a literal, or IDENT."""
    return KEYWORDS.get(literal, TokenKind.IDENT)


def is_name_token(kind: TokenKind) -> bool:
    """Check if a token kind can be used as a field, argument or directive name."""
    return kind in NAME_TOKENS


@dataclass(frozen=True)
class Token:
    """A classified slice of source text with its 1-indexed position."""
    kind: TokenKind
    literal: str
    line: int
    column: int

    def __str__(self) -> str:
        if self.kind in (
            TokenKind.COMMENT,
            TokenKind.STRING,
            TokenKind.IDENT,
            TokenKind.INT,
            TokenKind.FLOAT,
            TokenKind.ILLEGAL,
        ):
            return f"{self.kind}({self.literal})@{self.line}:{self.column}"
        return f"{self.kind}@{self.line}:{self.column}"
