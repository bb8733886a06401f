"""
Token kinds and lexeme classification for the descent language.

This module holds everything the lexer needs to know about the terminals of the
fixed grammar:

Classes:
    TokenKind: Closed enumeration of grammar terminals plus the two sentinels
        `EOF` (end-of-input) and `UNRECOGNIZED`.

Constants:
    NUMBER_PATTERN, IDENT_PATTERN, MULTICHAR_OPERATOR_PATTERN, OTHER_PATTERN:
        Lexical patterns, in the priority order the tokenizer tries them.
    RESERVED_LEXEMES: Exact-match table of reserved words and operators.
    EOF_LEXEME: The marker text reported for the end-of-input position.

Functions:
    classify(lexeme): Map a lexeme string to its `TokenKind`.

Example:
    >>> classify("while1")
    <TokenKind.IDENTIFIER: 'identifier'>
    >>> classify("<-")
    <TokenKind.ARROW: 'arrow'>
"""

import re
from enum import Enum


class TokenKind(Enum):
    """Terminal categories recognized by the parser.

    The value of each member is its display name, used in error messages and
    as the label of terminal wrapper nodes in the parse tree.
    """

    EOF = "end-of-input"
    UNRECOGNIZED = "unrecognized"

    IDENTIFIER = "identifier"
    NUMBER = "number"

    READ = "read"
    WRITE = "write"
    VAR = "var"
    LET = "let"
    IF = "if"
    THEN = "then"
    ELSE = "else"
    ENDIF = "endif"
    UNTIL = "until"
    REPEAT = "repeat"

    ASSIGN = "assign"
    ARROW = "arrow"
    LPAREN = "open-paren"
    RPAREN = "close-paren"
    COMMA = "comma"

    PLUS = "plus"
    MINUS = "minus"
    TIMES = "times"
    DIVIDE = "divide"

    LESS = "less"
    GREATER = "greater"
    EQUALS = "equals"

    def __str__(self) -> str:
        return self.value


EOF_LEXEME = "end-of-input"

# Digits and letters are ASCII only; other characters fall through to
# OTHER_PATTERN one at a time.
NUMBER_PATTERN = r"[0-9]+(?:\.[0-9]+)?"
IDENT_PATTERN = r"[a-zA-Z][a-zA-Z0-9_]*"
MULTICHAR_OPERATOR_PATTERN = r"<-|->|<=|=>|>=|=<|<>|:=|==|!=|&&|\|\|"
OTHER_PATTERN = r"\S+?"

# First alternative that matches wins at each scan position.
TOKEN_PATTERN = re.compile(
    "|".join(
        (NUMBER_PATTERN, IDENT_PATTERN, MULTICHAR_OPERATOR_PATTERN, OTHER_PATTERN)
    )
)

_NUMBER_RE = re.compile(NUMBER_PATTERN)
_IDENT_RE = re.compile(IDENT_PATTERN)

RESERVED_LEXEMES: dict[str, TokenKind] = {
    "read": TokenKind.READ,
    "write": TokenKind.WRITE,
    "var": TokenKind.VAR,
    "let": TokenKind.LET,
    "if": TokenKind.IF,
    "then": TokenKind.THEN,
    "else": TokenKind.ELSE,
    "endif": TokenKind.ENDIF,
    "until": TokenKind.UNTIL,
    "repeat": TokenKind.REPEAT,
    "=": TokenKind.ASSIGN,
    "<-": TokenKind.ARROW,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.TIMES,
    "/": TokenKind.DIVIDE,
    "<": TokenKind.LESS,
    ">": TokenKind.GREATER,
    "==": TokenKind.EQUALS,
}


def classify(lexeme: str) -> TokenKind:
    """Classifies a lexeme into a token kind.

    Rules are tried in a fixed priority order: empty text is end-of-input, then
    numeric literals, then reserved words and operators, then identifiers.
    Anything else is `UNRECOGNIZED`. The function is total and never raises.

    Args:
        lexeme (str): The raw matched text. Surrounding whitespace is ignored.

    Returns:
        TokenKind: The kind of the lexeme.
    """
    text = lexeme.strip()
    if not text:
        return TokenKind.EOF
    if _NUMBER_RE.fullmatch(text):
        return TokenKind.NUMBER
    if text in RESERVED_LEXEMES:
        return RESERVED_LEXEMES[text]
    if _IDENT_RE.fullmatch(text):
        return TokenKind.IDENTIFIER
    return TokenKind.UNRECOGNIZED


__all__ = [
    "EOF_LEXEME",
    "IDENT_PATTERN",
    "MULTICHAR_OPERATOR_PATTERN",
    "NUMBER_PATTERN",
    "OTHER_PATTERN",
    "RESERVED_LEXEMES",
    "TOKEN_PATTERN",
    "TokenKind",
    "classify",
]
