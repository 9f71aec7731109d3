"""GraphQL lexer.

Turns source text into a lazy stream of tokens. The lexer never raises on
malformed input: anything it cannot classify becomes an ILLEGAL token so the
parser can report it with an accurate position.

Example:
    for token in tokenize("query { hello }"):
        print(token)    # QUERY@1:1, LBRACE@1:7, IDENT(hello)@1:9, ...
"""

from collections.abc import Iterator

from .tokens import PUNCTUATION, Token, TokenKind, lookup_ident

BYTE_ORDER_MARK = "\ufeff"


def _is_letter(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_digit(ch: str) -> bool:
    return ch.isdecimal()


def _is_alphanumeric(ch: str) -> bool:
    return _is_letter(ch) or _is_digit(ch)


class Lexer:
    """Scans GraphQL source text one token at a time.

    Iterating a Lexer yields tokens until exactly one EOF token has been
    produced.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.EOF:
                return

    def next_token(self) -> Token:
        """Scan and return the next token."""
        self._skip_whitespace()

        source = self.source
        if self.pos >= len(source):
            return Token(TokenKind.EOF, "", self.line, self.column)

        line, column = self.line, self.column
        ch = source[self.pos]

        kind = PUNCTUATION.get(ch)
        if kind is not None:
            self._advance(1)
            return Token(kind, ch, line, column)

        if ch == ".":
            if source.startswith("...", self.pos):
                self._advance(3)
                return Token(TokenKind.SPREAD, "...", line, column)
            self._advance(1)
            return Token(TokenKind.ILLEGAL, ".", line, column)

        if ch == "#":
            return self._read_comment(line, column)

        if ch == '"':
            if source.startswith('"""', self.pos):
                return self._read_block_string(line, column)
            return self._read_string(line, column)

        if _is_letter(ch):
            return self._read_identifier(line, column)

        if _is_digit(ch) or (
            ch == "-" and self.pos + 1 < len(source) and _is_digit(source[self.pos + 1])
        ):
            return self._read_number(line, column)

        self._advance(1)
        return Token(TokenKind.ILLEGAL, ch, line, column)

    def _advance(self, count: int):
        """Advance over characters known not to contain newlines."""
        self.pos += count
        self.column += count

    def _advance_char(self):
        """Advance over one character, tracking newlines."""
        if self.source[self.pos] == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1

    def _skip_whitespace(self):
        source = self.source
        while self.pos < len(source) and (
            source[self.pos].isspace() or source[self.pos] == BYTE_ORDER_MARK
        ):
            self._advance_char()

    def _consume_rest(self, start: int, line: int, column: int) -> Token:
        """Emit everything from start to end of input as one ILLEGAL token."""
        while self.pos < len(self.source):
            self._advance_char()
        return Token(TokenKind.ILLEGAL, self.source[start:], line, column)

    def _read_comment(self, line: int, column: int) -> Token:
        source = self.source
        start = self.pos
        while self.pos < len(source) and source[self.pos] != "\n":
            self._advance(1)
        return Token(TokenKind.COMMENT, source[start:self.pos], line, column)

    def _read_identifier(self, line: int, column: int) -> Token:
        source = self.source
        start = self.pos
        while self.pos < len(source) and _is_alphanumeric(source[self.pos]):
            self._advance(1)
        literal = source[start:self.pos]
        return Token(lookup_ident(literal), literal, line, column)

    def _read_number(self, line: int, column: int) -> Token:
        source = self.source
        start = self.pos
        kind = TokenKind.INT

        if source[self.pos] == "-":
            self._advance(1)
        while self.pos < len(source) and _is_digit(source[self.pos]):
            self._advance(1)

        if (
            self.pos + 1 < len(source)
            and source[self.pos] == "."
            and _is_digit(source[self.pos + 1])
        ):
            kind = TokenKind.FLOAT
            self._advance(1)
            while self.pos < len(source) and _is_digit(source[self.pos]):
                self._advance(1)

        exponent = self._exponent_length()
        if exponent:
            kind = TokenKind.FLOAT
            self._advance(exponent)

        return Token(kind, source[start:self.pos], line, column)

    def _exponent_length(self) -> int:
        """Length of an exponent part (e10, E-3) at the current position, or 0."""
        source = self.source
        pos = self.pos
        if pos >= len(source) or source[pos] not in "eE":
            return 0
        pos += 1
        if pos < len(source) and source[pos] in "+-":
            pos += 1
        if pos >= len(source) or not _is_digit(source[pos]):
            return 0
        while pos < len(source) and _is_digit(source[pos]):
            pos += 1
        return pos - self.pos

    def _read_string(self, line: int, column: int) -> Token:
        source = self.source
        start = self.pos
        self._advance(1)

        while self.pos < len(source) and source[self.pos] != '"':
            if source[self.pos] == "\\" and self.pos + 1 < len(source):
                # \X is never a closing quote; X may be a newline
                self._advance_char()
                self._advance_char()
            else:
                self._advance_char()

        if self.pos >= len(source):
            return Token(TokenKind.ILLEGAL, source[start:], line, column)

        self._advance(1)
        return Token(TokenKind.STRING, source[start:self.pos], line, column)

    def _read_block_string(self, line: int, column: int) -> Token:
        source = self.source
        start = self.pos
        self._advance(3)

        while self.pos < len(source):
            if source.startswith('\\"""', self.pos):
                self._advance(4)
            elif source.startswith('"""', self.pos):
                self._advance(3)
                return Token(TokenKind.STRING, source[start:self.pos], line, column)
            else:
                self._advance_char()

        return self._consume_rest(start, line, column)


def tokenize(source: str) -> Iterator[Token]:
    """Lazily tokenize GraphQL source text.

    The returned generator ends after exactly one EOF token. Closing it early
    releases the lexer.
    """
    yield from Lexer(source)
