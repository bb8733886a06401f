import pytest
from hypothesis import given
from hypothesis import strategies as st

from descent.descent_grammar import GRAMMAR
from descent.descent_tokens import RESERVED_LEXEMES, TOKEN_PATTERN, TokenKind, classify


@pytest.mark.parametrize(
    "lexeme,expected",
    [
        ("", TokenKind.EOF),
        ("   ", TokenKind.EOF),
        ("42", TokenKind.NUMBER),
        ("3.14", TokenKind.NUMBER),
        ("total", TokenKind.IDENTIFIER),
        ("x1", TokenKind.IDENTIFIER),
        ("snake_case", TokenKind.IDENTIFIER),
        ("read", TokenKind.READ),
        ("endif", TokenKind.ENDIF),
        ("<-", TokenKind.ARROW),
        ("==", TokenKind.EQUALS),
        ("=", TokenKind.ASSIGN),
        ("(", TokenKind.LPAREN),
        ("$", TokenKind.UNRECOGNIZED),
        ("<=", TokenKind.UNRECOGNIZED),
        ("_x", TokenKind.UNRECOGNIZED),
        ("1x", TokenKind.UNRECOGNIZED),
        ("\u0663", TokenKind.UNRECOGNIZED),
        ("\u00e9", TokenKind.UNRECOGNIZED),
        ("a\u00e9", TokenKind.UNRECOGNIZED),
    ],
)  # type: ignore[misc]
def test_classify(lexeme: str, expected: TokenKind) -> None:
    assert classify(lexeme) is expected


def test_classify_strips_whitespace() -> None:
    assert classify("  var ") is TokenKind.VAR


def test_reserved_words_beat_identifiers() -> None:
    for word in ("read", "write", "var", "let", "if", "then", "else", "until"):
        assert classify(word) is not TokenKind.IDENTIFIER


def test_reserved_words_are_case_sensitive() -> None:
    assert classify("READ") is TokenKind.IDENTIFIER


def test_kind_display_names() -> None:
    assert str(TokenKind.EOF) == "end-of-input"
    assert str(TokenKind.IDENTIFIER) == "identifier"
    assert f"{TokenKind.RPAREN}" == "close-paren"


def test_every_grammar_terminal_is_reachable_from_text() -> None:
    terminals = {
        sym
        for alternatives in GRAMMAR.values()
        for alt in alternatives
        for sym in alt
        if isinstance(sym, TokenKind)
    }
    produced = set(RESERVED_LEXEMES.values()) | {
        TokenKind.IDENTIFIER,
        TokenKind.NUMBER,
        TokenKind.EOF,
    }
    assert terminals <= produced


def test_token_pattern_prefers_multichar_operators() -> None:
    assert [m.group() for m in TOKEN_PATTERN.finditer("a<-b==c")] == [
        "a",
        "<-",
        "b",
        "==",
        "c",
    ]


@given(st.text(max_size=20))  # type: ignore[misc]
def test_classify_is_total(text: str) -> None:
    assert isinstance(classify(text), TokenKind)


@given(st.from_regex(r"[0-9]+(\.[0-9]+)?", fullmatch=True))  # type: ignore[misc]
def test_numbers_always_classify_as_number(text: str) -> None:
    assert classify(text) is TokenKind.NUMBER
