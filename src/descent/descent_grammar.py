"""
The fixed grammar of the descent language and its lookahead sets.

The grammar is data, not configuration: the parser implements one routine per
non-terminal by hand, and only reads its alternative-selection sets from the
tables computed here. Keeping the productions in one table lets the FIRST and
FOLLOW sets be derived instead of typed out, and lets tests prove the grammar
is conflict-free under one token of lookahead.

Constants:
    START: Name of the start symbol.
    GRAMMAR: Non-terminal name -> tuple of alternatives. Each alternative is a
        tuple of symbols; a `str` is a non-terminal and a `TokenKind` is a
        terminal. The empty tuple is the epsilon alternative.
    NULLABLE: Non-terminals that can derive the empty string.
    FIRST: Non-terminal -> kinds that can begin it.
    FOLLOW: Non-terminal -> kinds that can come right after it.

Functions:
    nullable_set, first_sets, follow_sets, first_of, predict_table
"""

from collections.abc import Mapping, Sequence

from descent.descent_tokens import TokenKind

Symbol = str | TokenKind
Alternative = tuple[Symbol, ...]
Grammar = Mapping[str, tuple[Alternative, ...]]

EPSILON: Alternative = ()

T = TokenKind

START = "PROGRAM"

GRAMMAR: dict[str, tuple[Alternative, ...]] = {
    "PROGRAM": (("STMT_LIST", T.EOF),),
    "STMT_LIST": (("STMT", "STMT_LIST"), EPSILON),
    "STMT": (
        ("READ_STMT",),
        ("WRITE_STMT",),
        ("VAR_DECL",),
        ("SUBR_CALL",),
        (T.LET, T.IDENTIFIER, "ASGN_STMT"),
        ("IF_STMT",),
        ("UNTIL_STMT",),
    ),
    "READ_STMT": ((T.READ, T.IDENTIFIER),),
    "WRITE_STMT": ((T.WRITE, "EXPR"),),
    "VAR_DECL": ((T.VAR, T.IDENTIFIER),),
    "SUBR_CALL": ((T.IDENTIFIER, T.LPAREN, "ARG_LIST", T.RPAREN),),
    "ASGN_STMT": ((T.ASSIGN, "EXPR"), (T.ARROW, "SUBR_CALL")),
    "ARG_LIST": (("EXPR", "ARGS_TAIL"),),
    "ARGS_TAIL": ((T.COMMA, "ARG_LIST"), EPSILON),
    "EXPR": (("TERM", "TERM_TAIL"),),
    "TERM": (("FACTOR", "FACTOR_TAIL"),),
    "TERM_TAIL": (("ADD_OP", "TERM", "TERM_TAIL"), EPSILON),
    "FACTOR": ((T.LPAREN, "EXPR", T.RPAREN), (T.IDENTIFIER,), (T.NUMBER,)),
    "FACTOR_TAIL": (("MULT_OP", "FACTOR", "FACTOR_TAIL"), EPSILON),
    "CONDITION": (("EXPR", "REL_OP", "EXPR"),),
    "IF_STMT": ((T.IF, "CONDITION", T.THEN, "STMT_LIST", "ELSE_STMT", T.ENDIF),),
    "ELSE_STMT": ((T.ELSE, "STMT_LIST"), EPSILON),
    "UNTIL_STMT": ((T.UNTIL, "CONDITION", "STMT_LIST", T.REPEAT),),
    "ADD_OP": ((T.PLUS,), (T.MINUS,)),
    "MULT_OP": ((T.TIMES,), (T.DIVIDE,)),
    "REL_OP": ((T.LESS,), (T.GREATER,), (T.EQUALS,)),
}


class GrammarConflictError(Exception):
    """Raised when two alternatives of a non-terminal share a lookahead kind.

    Attributes:
        nonterminal (str): The non-terminal whose alternatives collide.
        kind (TokenKind): The lookahead kind that selects both.
    """

    def __init__(self, nonterminal: str, kind: TokenKind):
        super().__init__(
            f"LL(1) conflict in <{nonterminal}> on lookahead '{kind}'"
        )
        self.nonterminal = nonterminal
        self.kind = kind


def nullable_set(grammar: Grammar) -> frozenset[str]:
    """Returns the non-terminals that derive the empty string."""
    nullable: set[str] = set()
    changed = True
    while changed:
        changed = False
        for name, alternatives in grammar.items():
            if name in nullable:
                continue
            if any(all(sym in nullable for sym in alt) for alt in alternatives):
                nullable.add(name)
                changed = True
    return frozenset(nullable)


def first_of(
    sequence: Sequence[Symbol],
    first: Mapping[str, frozenset[TokenKind]],
    nullable: frozenset[str],
) -> frozenset[TokenKind]:
    """Returns the kinds that can begin a sequence of grammar symbols.

    Args:
        sequence: The symbols, left to right.
        first: FIRST sets of every non-terminal.
        nullable: Non-terminals that derive the empty string.

    Returns:
        frozenset[TokenKind]: The FIRST set of the sequence. Whether the whole
        sequence can vanish is not encoded here; use `all(...)` over `nullable`.
    """
    result: set[TokenKind] = set()
    for sym in sequence:
        if isinstance(sym, TokenKind):
            result.add(sym)
            break
        result |= first.get(sym, frozenset())
        if sym not in nullable:
            break
    return frozenset(result)


def first_sets(grammar: Grammar) -> dict[str, frozenset[TokenKind]]:
    """Computes the FIRST set of every non-terminal by fixed-point iteration."""
    nullable = nullable_set(grammar)
    first: dict[str, frozenset[TokenKind]] = {name: frozenset() for name in grammar}
    changed = True
    while changed:
        changed = False
        for name, alternatives in grammar.items():
            grown = first[name].union(
                *(first_of(alt, first, nullable) for alt in alternatives)
            )
            if grown != first[name]:
                first[name] = grown
                changed = True
    return first


def follow_sets(grammar: Grammar, start: str = START) -> dict[str, frozenset[TokenKind]]:
    """Computes the FOLLOW set of every non-terminal by fixed-point iteration.

    The start symbol ends with an explicit end-of-input terminal, so nothing
    is seeded for it.
    """
    nullable = nullable_set(grammar)
    first = first_sets(grammar)
    follow: dict[str, set[TokenKind]] = {name: set() for name in grammar}
    changed = True
    while changed:
        changed = False
        for name, alternatives in grammar.items():
            for alt in alternatives:
                for index, sym in enumerate(alt):
                    if isinstance(sym, TokenKind):
                        continue
                    rest = alt[index + 1 :]
                    before = len(follow[sym])
                    follow[sym] |= first_of(rest, first, nullable)
                    if all(
                        not isinstance(r, TokenKind) and r in nullable for r in rest
                    ):
                        follow[sym] |= follow[name]
                    if len(follow[sym]) != before:
                        changed = True
    return {name: frozenset(kinds) for name, kinds in follow.items()}


def predict_table(grammar: Grammar, start: str = START) -> dict[tuple[str, TokenKind], int]:
    """Builds the LL(1) prediction table.

    Args:
        grammar: The productions.
        start: The start symbol.

    Returns:
        dict[tuple[str, TokenKind], int]: (non-terminal, lookahead) -> index of
        the alternative to expand.

    Raises:
        GrammarConflictError: If one lookahead selects two alternatives.
    """
    nullable = nullable_set(grammar)
    first = first_sets(grammar)
    follow = follow_sets(grammar, start)
    table: dict[tuple[str, TokenKind], int] = {}
    for name, alternatives in grammar.items():
        for index, alt in enumerate(alternatives):
            select = set(first_of(alt, first, nullable))
            if all(not isinstance(s, TokenKind) and s in nullable for s in alt):
                select |= follow[name]
            for kind in select:
                if (name, kind) in table:
                    raise GrammarConflictError(name, kind)
                table[(name, kind)] = index
    return table


NULLABLE = nullable_set(GRAMMAR)
FIRST = first_sets(GRAMMAR)
FOLLOW = follow_sets(GRAMMAR)
