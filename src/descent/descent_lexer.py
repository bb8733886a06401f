"""
Lexical analyzer for the descent language.

This module converts raw source text into the token stream consumed by the parser:

Classes:
    Token: A single (lexeme, kind) pair with its source location.
    TokenCursor: One-token lookahead over a token stream; the only input view the
        parser has.

Functions:
    strip_comments(source): Yields the (line number, text) pairs that survive
        comment filtering.
    tokenize(source): Lazily yields every Token in the source.

Features:
    - Drops whole lines whose first non-blank character is `#`
    - Tries numbers, identifiers, multi-character operators, then any single
      non-space character, in that order, at each scan position
    - Never raises: text that no rule classifies becomes an `UNRECOGNIZED` token
      and is left for the parser to reject in context

Example:
    >>> cursor = TokenCursor(tokenize("read total"))
    >>> cursor.current_kind()
    <TokenKind.READ: 'read'>
    >>> cursor.advance()
    >>> cursor.current_lexeme()
    'total'

Exports:
    - Token
    - TokenCursor
    - strip_comments
    - tokenize
"""

from collections.abc import Iterable, Iterator
from typing import Any

from descent.descent_tokens import EOF_LEXEME, TOKEN_PATTERN, TokenKind, classify

COMMENT_MARKER = "#"


class Token:
    """Represents a single lexical token of the descent language.

    Tokens are created once per lexical match and never mutated.

    Attributes:
        kind (TokenKind): The terminal category of the token.
        lexeme (str): The raw text matched in the source.
        line (int): The 1-based source line of the match (0 if unknown).
        col (int): The 1-based source column of the match (0 if unknown).
    """

    __slots__ = ("kind", "lexeme", "line", "col")

    def __init__(self, kind: TokenKind, lexeme: str, line: int = 0, col: int = 0):
        self.kind = kind
        self.lexeme = lexeme
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.lexeme!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.kind == other.kind
            and self.lexeme == other.lexeme
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.lexeme, self.line, self.col))

    @property
    def location(self) -> str:
        """Returns a `line L, col C` description of where the token starts."""
        return f"line {self.line}, col {self.col}"


def strip_comments(source: str) -> Iterator[tuple[int, str]]:
    """Yields the source lines that are not comments.

    A comment line is one whose text, once stripped, starts with `#`. Blank
    lines are yielded too; they simply produce no tokens.

    Args:
        source (str): The raw program text.

    Yields:
        tuple[int, str]: The 1-based line number and the unmodified line text.
    """
    for number, line in enumerate(source.splitlines(), start=1):
        if line.strip().startswith(COMMENT_MARKER):
            continue
        yield number, line


def tokenize(source: str) -> Iterator[Token]:
    """Lazily converts source text into tokens.

    The stream is finite and one-pass. No end-of-input token is produced; the
    cursor reports end-of-input once the stream is exhausted.

    Args:
        source (str): The raw program text, comments included.

    Yields:
        Token: Each token in source order.
    """
    for number, line in strip_comments(source):
        for match in TOKEN_PATTERN.finditer(line):
            lexeme = match.group()
            yield Token(classify(lexeme), lexeme, number, match.start() + 1)


class TokenCursor:
    """Exposes the current token of a stream and lets the parser move past it.

    Advancing is irreversible: the cursor only ever buffers the single token
    under inspection, so there is no way to back up.

    Attributes:
        consumed (int): Number of tokens advanced past so far.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        """Initializes the cursor over a token stream.

        Args:
            tokens (Iterable[Token]): Any iterable of tokens; a generator from
                `tokenize` or a prepared list both work.
        """
        self._tokens: Iterator[Token] = iter(tokens)
        self._current: Token | None = next(self._tokens, None)
        self.consumed = 0

    @classmethod
    def from_source(cls, source: str) -> "TokenCursor":
        """Builds a cursor directly from program text."""
        return cls(tokenize(source))

    def current(self) -> Token | None:
        """Returns the next unconsumed token, or None once exhausted."""
        return self._current

    def current_kind(self) -> TokenKind:
        """Returns the kind of the next unconsumed token, or `EOF` if exhausted."""
        if self._current is None:
            return TokenKind.EOF
        return self._current.kind

    def current_lexeme(self) -> str:
        """Returns the text of the next unconsumed token, or the end-of-input marker."""
        if self._current is None:
            return EOF_LEXEME
        return self._current.lexeme

    def advance(self) -> None:
        """Discards the current token. Does nothing once exhausted."""
        if self._current is None:
            return
        self._current = next(self._tokens, None)
        self.consumed += 1

    def at_end(self) -> bool:
        """Checks whether every token has been consumed."""
        return self._current is None


__all__ = ["COMMENT_MARKER", "Token", "TokenCursor", "strip_comments", "tokenize"]
