from hypothesis import given
from hypothesis import strategies as st

from descent.descent_lexer import Token, TokenCursor, strip_comments, tokenize
from descent.descent_tokens import EOF_LEXEME, TokenKind


def kinds(source: str) -> list[TokenKind]:
    return [tok.kind for tok in tokenize(source)]


def lexemes(source: str) -> list[str]:
    return [tok.lexeme for tok in tokenize(source)]


def test_read_statement_tokens() -> None:
    assert list(tokenize("read total")) == [
        Token(TokenKind.READ, "read", 1, 1),
        Token(TokenKind.IDENTIFIER, "total", 1, 6),
    ]


def test_tokenize_is_lazy() -> None:
    stream = tokenize("read x")
    assert next(stream).kind is TokenKind.READ


def test_operators_without_spaces() -> None:
    assert lexemes("let y<-f(a,2)") == ["let", "y", "<-", "f", "(", "a", ",", "2", ")"]
    assert kinds("x==1") == [TokenKind.IDENTIFIER, TokenKind.EQUALS, TokenKind.NUMBER]


def test_decimal_numbers() -> None:
    assert lexemes("3.14 2") == ["3.14", "2"]
    assert kinds("3.") == [TokenKind.NUMBER, TokenKind.UNRECOGNIZED]


def test_unknown_operator_is_unrecognized_not_an_error() -> None:
    assert kinds("a <= b") == [
        TokenKind.IDENTIFIER,
        TokenKind.UNRECOGNIZED,
        TokenKind.IDENTIFIER,
    ]


def test_unmatched_characters_become_single_char_tokens() -> None:
    assert lexemes("$$") == ["$", "$"]
    assert kinds("@") == [TokenKind.UNRECOGNIZED]


def test_non_ascii_letters_and_digits_are_split_off() -> None:
    assert [(tok.kind, tok.lexeme) for tok in tokenize("read a\u00e9 write \u0663")] == [
        (TokenKind.READ, "read"),
        (TokenKind.IDENTIFIER, "a"),
        (TokenKind.UNRECOGNIZED, "\u00e9"),
        (TokenKind.WRITE, "write"),
        (TokenKind.UNRECOGNIZED, "\u0663"),
    ]


def test_comment_lines_are_dropped() -> None:
    source = "# header\nread x\n   # indented comment\nwrite x"
    assert lexemes(source) == ["read", "x", "write", "x"]


def test_hash_inside_line_is_not_a_comment() -> None:
    assert lexemes("write x # not a comment") == ["write", "x", "#", "not", "a", "comment"]


def test_line_and_column_tracking() -> None:
    tokens = list(tokenize("# skip\nvar a\n  write a"))
    assert (tokens[0].line, tokens[0].col) == (2, 1)
    assert (tokens[2].line, tokens[2].col) == (3, 3)
    assert tokens[2].location == "line 3, col 3"


def test_strip_comments_keeps_line_numbers() -> None:
    assert list(strip_comments("#a\nb\n#c\nd")) == [(2, "b"), (4, "d")]


def test_empty_source() -> None:
    assert list(tokenize("")) == []
    assert list(tokenize("# only a comment\n\n")) == []


def test_token_repr_and_hash() -> None:
    tok = Token(TokenKind.NUMBER, "7", 1, 1)
    assert repr(tok) == "Token(NUMBER, '7')"
    assert len({tok, Token(TokenKind.NUMBER, "7", 1, 1)}) == 1
    assert tok != Token(TokenKind.NUMBER, "7", 2, 1)


def test_cursor_walks_tokens_then_reports_end() -> None:
    cursor = TokenCursor.from_source("read total")
    assert cursor.current_kind() is TokenKind.READ
    assert cursor.current_lexeme() == "read"
    cursor.advance()
    assert cursor.current_kind() is TokenKind.IDENTIFIER
    assert cursor.current_lexeme() == "total"
    cursor.advance()
    assert cursor.at_end()
    assert cursor.current() is None
    assert cursor.current_kind() is TokenKind.EOF
    assert cursor.current_lexeme() == EOF_LEXEME
    assert cursor.consumed == 2


def test_cursor_advance_past_end_is_noop() -> None:
    cursor = TokenCursor([])
    cursor.advance()
    cursor.advance()
    assert cursor.at_end()
    assert cursor.consumed == 0


def test_cursor_peeking_has_no_side_effects() -> None:
    cursor = TokenCursor.from_source("write 1")
    for _ in range(3):
        assert cursor.current_kind() is TokenKind.WRITE
    assert cursor.consumed == 0


@given(st.text(alphabet="ab1 +-*/()<>=,.$#\n", max_size=40))  # type: ignore[misc]
def test_tokens_never_contain_whitespace(source: str) -> None:
    for tok in tokenize(source):
        assert tok.lexeme
        assert not any(ch.isspace() for ch in tok.lexeme)
