"""
descent Language Parser

Recursive-descent syntax analyzer for the descent language.

The parser consumes tokens through a `TokenCursor`, writes the derivation into a
`ParseTree` as it recognizes each production, and stops at the first error.
There is one `parse_*` method per grammar non-terminal; each opens its own node
under the caller's node before doing anything else and passes that node down as
the parent of everything it produces.

Grammar
-------
    PROGRAM      ::= STMT_LIST end-of-input
    STMT_LIST    ::= STMT STMT_LIST | ε
    STMT         ::= READ_STMT | WRITE_STMT | VAR_DECL | SUBR_CALL
                   | "let" identifier ASGN_STMT | IF_STMT | UNTIL_STMT
    READ_STMT    ::= "read" identifier
    WRITE_STMT   ::= "write" EXPR
    VAR_DECL     ::= "var" identifier
    SUBR_CALL    ::= identifier "(" ARG_LIST ")"
    ASGN_STMT    ::= "=" EXPR | "<-" SUBR_CALL
    ARG_LIST     ::= EXPR ARGS_TAIL
    ARGS_TAIL    ::= "," ARG_LIST | ε
    EXPR         ::= TERM TERM_TAIL
    TERM         ::= FACTOR FACTOR_TAIL
    TERM_TAIL    ::= ADD_OP TERM TERM_TAIL | ε
    FACTOR       ::= "(" EXPR ")" | identifier | number
    FACTOR_TAIL  ::= MULT_OP FACTOR FACTOR_TAIL | ε
    CONDITION    ::= EXPR REL_OP EXPR
    IF_STMT      ::= "if" CONDITION "then" STMT_LIST ELSE_STMT "endif"
    ELSE_STMT    ::= "else" STMT_LIST | ε
    UNTIL_STMT   ::= "until" CONDITION STMT_LIST "repeat"
    ADD_OP       ::= "+" | "-"
    MULT_OP      ::= "*" | "/"
    REL_OP       ::= "<" | ">" | "=="

Parser Behavior
---------------
- Alternatives are chosen from the current token kind alone, using the FIRST
  and FOLLOW sets in `descent_grammar`.
- An epsilon alternative is taken only when the lookahead may legally follow the
  non-terminal, and always leaves an `EMPTY` leaf in the tree.
- Any other lookahead raises `ParseError`; nothing is silently skipped.
- `VAR_DECL` records the declared name; a second declaration of the same name
  raises `DeclarationError`.

Entry Points
------------
- `Parser.parse()`: Parse a whole program from a token stream.
- `parse_source()`: Tokenize and parse program text in one call.

Raises
------
ParseError
    The first grammar mismatch; carries the node where it was detected.
DeclarationError
    A redeclared identifier.
RecursionError
    Input nested deeper than the interpreter's stack allows.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NoReturn

from descent.descent_grammar import FIRST, FOLLOW
from descent.descent_lexer import Token, TokenCursor, tokenize
from descent.descent_symbols import DuplicateSymbolError, SymbolTable
from descent.descent_tokens import TokenKind
from descent.descent_tree import DeclarationError, ParseTree, TreeNode

T = TokenKind


class Parser:
    """
    descent Parser Class

    Drives one parse pass. The cursor, symbol table and tree are private to the
    instance; parse each input with a fresh `Parser`.

    Attributes
    ----------
    cursor : TokenCursor
        The input view: current kind, current lexeme, advance.
    tree : ParseTree
        The sink that receives every node. Still holds the partial derivation
        after a failed parse.
    symbols : SymbolTable
        Identifiers declared so far by `var` statements.
    """

    def __init__(
        self,
        tokens: TokenCursor | Iterable[Token],
        tree: ParseTree | None = None,
        symbols: SymbolTable | None = None,
    ) -> None:
        self.cursor: TokenCursor = (
            tokens if isinstance(tokens, TokenCursor) else TokenCursor(tokens)
        )
        self.tree: ParseTree = tree if tree is not None else ParseTree()
        self.symbols: SymbolTable = symbols if symbols is not None else SymbolTable()

    def parse(self) -> ParseTree:
        """Parse a full program under the tree's root and return the tree."""
        self.parse_program(self.tree.root)
        return self.tree

    # Terminals

    def match(self, parent: TreeNode, expected: TokenKind) -> Token | None:
        """Consume the current token if it is of the expected kind.

        On success a terminal leaf is attached under `parent` and the cursor
        advances. Otherwise the parse fails at `parent`.

        Returns:
            Token | None: The consumed token, or None for end-of-input.
        """
        token = self.cursor.current()
        kind = self.cursor.current_kind()
        lexeme = self.cursor.current_lexeme()
        if kind is expected:
            self.tree.attach_terminal(parent, kind, lexeme)
            self.cursor.advance()
            return token
        self.tree.fail(
            f"expected {expected} but found {lexeme} ({kind})",
            parent,
            token,
        )

    def empty(self, parent: TreeNode) -> None:
        self.tree.attach_empty(parent)

    def expect_one_of(self, node: TreeNode, expected: Iterable[TokenKind]) -> NoReturn:
        """Fail because no alternative of `node` starts with the current token."""
        wanted = set(expected)
        names = ", ".join(str(k) for k in TokenKind if k in wanted)
        self.tree.fail(
            f"expected one of {names} but found "
            f"{self.cursor.current_lexeme()} ({self.cursor.current_kind()})",
            node,
            self.cursor.current(),
        )

    # Statements

    def parse_program(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "PROGRAM")
        self.parse_stmt_list(node)
        self.match(node, T.EOF)

    def parse_stmt_list(self, parent: TreeNode) -> None:
        # STMT_LIST ::= STMT STMT_LIST is unrolled into a loop; each pass still
        # opens its own node under the previous one.
        while True:
            node = self.tree.open_nonterminal(parent, "STMT_LIST")
            kind = self.cursor.current_kind()
            if kind in FIRST["STMT"]:
                self.parse_stmt(node)
                parent = node
                continue
            if kind in FOLLOW["STMT_LIST"]:
                self.empty(node)
                return
            self.expect_one_of(node, FIRST["STMT"] | FOLLOW["STMT_LIST"])

    def parse_stmt(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "STMT")
        kind = self.cursor.current_kind()
        if kind is T.READ:
            self.parse_read_stmt(node)
        elif kind is T.WRITE:
            self.parse_write_stmt(node)
        elif kind is T.VAR:
            self.parse_var_decl(node)
        elif kind is T.IDENTIFIER:
            self.parse_subr_call(node)
        elif kind is T.LET:
            self.match(node, T.LET)
            self.match(node, T.IDENTIFIER)
            self.parse_asgn_stmt(node)
        elif kind is T.IF:
            self.parse_if_stmt(node)
        elif kind is T.UNTIL:
            self.parse_until_stmt(node)
        else:
            self.expect_one_of(node, FIRST["STMT"])

    def parse_read_stmt(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "READ_STMT")
        self.match(node, T.READ)
        self.match(node, T.IDENTIFIER)

    def parse_write_stmt(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "WRITE_STMT")
        self.match(node, T.WRITE)
        self.parse_expr(node)

    def parse_var_decl(self, parent: TreeNode) -> None:
        """Parse `var identifier` and record the name as declared."""
        node = self.tree.open_nonterminal(parent, "VAR_DECL")
        self.match(node, T.VAR)
        token = self.match(node, T.IDENTIFIER)
        if token is not None:
            try:
                self.symbols.declare(token)
            except DuplicateSymbolError as exc:
                self.tree.fail(f"semantic error: {exc}", node, token, DeclarationError)

    def parse_subr_call(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "SUBR_CALL")
        self.match(node, T.IDENTIFIER)
        self.match(node, T.LPAREN)
        self.parse_arg_list(node)
        self.match(node, T.RPAREN)

    def parse_asgn_stmt(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "ASGN_STMT")
        kind = self.cursor.current_kind()
        if kind is T.ASSIGN:
            self.match(node, T.ASSIGN)
            self.parse_expr(node)
        elif kind is T.ARROW:
            self.match(node, T.ARROW)
            self.parse_subr_call(node)
        else:
            self.expect_one_of(node, FIRST["ASGN_STMT"])

    def parse_arg_list(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "ARG_LIST")
        self.parse_expr(node)
        self.parse_args_tail(node)

    def parse_args_tail(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "ARGS_TAIL")
        kind = self.cursor.current_kind()
        if kind is T.COMMA:
            self.match(node, T.COMMA)
            self.parse_arg_list(node)
        elif kind in FOLLOW["ARGS_TAIL"]:
            self.empty(node)
        else:
            self.expect_one_of(node, {T.COMMA} | FOLLOW["ARGS_TAIL"])

    def parse_if_stmt(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "IF_STMT")
        self.match(node, T.IF)
        self.parse_condition(node)
        self.match(node, T.THEN)
        self.parse_stmt_list(node)
        self.parse_else_stmt(node)
        self.match(node, T.ENDIF)

    def parse_else_stmt(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "ELSE_STMT")
        kind = self.cursor.current_kind()
        if kind is T.ELSE:
            self.match(node, T.ELSE)
            self.parse_stmt_list(node)
        elif kind in FOLLOW["ELSE_STMT"]:
            self.empty(node)
        else:
            self.expect_one_of(node, {T.ELSE} | FOLLOW["ELSE_STMT"])

    def parse_until_stmt(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "UNTIL_STMT")
        self.match(node, T.UNTIL)
        self.parse_condition(node)
        self.parse_stmt_list(node)
        self.match(node, T.REPEAT)

    def parse_condition(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "CONDITION")
        self.parse_expr(node)
        self.parse_rel_op(node)
        self.parse_expr(node)

    # Expressions

    def parse_expr(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "EXPR")
        self.parse_term(node)
        self.parse_term_tail(node)

    def parse_term(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "TERM")
        self.parse_factor(node)
        self.parse_factor_tail(node)

    def parse_term_tail(self, parent: TreeNode) -> None:
        while True:
            node = self.tree.open_nonterminal(parent, "TERM_TAIL")
            kind = self.cursor.current_kind()
            if kind in FIRST["ADD_OP"]:
                self.parse_add_op(node)
                self.parse_term(node)
                parent = node
                continue
            if kind in FOLLOW["TERM_TAIL"]:
                self.empty(node)
                return
            self.expect_one_of(node, FIRST["ADD_OP"] | FOLLOW["TERM_TAIL"])

    def parse_factor(self, parent: TreeNode) -> None:
        node = self.tree.open_nonterminal(parent, "FACTOR")
        kind = self.cursor.current_kind()
        if kind is T.LPAREN:
            self.match(node, T.LPAREN)
            self.parse_expr(node)
            self.match(node, T.RPAREN)
        elif kind is T.IDENTIFIER:
            self.match(node, T.IDENTIFIER)
        elif kind is T.NUMBER:
            self.match(node, T.NUMBER)
        else:
            self.expect_one_of(node, FIRST["FACTOR"])

    def parse_factor_tail(self, parent: TreeNode) -> None:
        while True:
            node = self.tree.open_nonterminal(parent, "FACTOR_TAIL")
            kind = self.cursor.current_kind()
            if kind in FIRST["MULT_OP"]:
                self.parse_mult_op(node)
                self.parse_factor(node)
                parent = node
                continue
            if kind in FOLLOW["FACTOR_TAIL"]:
                self.empty(node)
                return
            self.expect_one_of(node, FIRST["MULT_OP"] | FOLLOW["FACTOR_TAIL"])

    # Operators

    def parse_add_op(self, parent: TreeNode) -> None:
        self._parse_operator(parent, "ADD_OP")

    def parse_mult_op(self, parent: TreeNode) -> None:
        self._parse_operator(parent, "MULT_OP")

    def parse_rel_op(self, parent: TreeNode) -> None:
        self._parse_operator(parent, "REL_OP")

    def _parse_operator(self, parent: TreeNode, symbol: str) -> None:
        # Every operator production is a choice between single terminals.
        node = self.tree.open_nonterminal(parent, symbol)
        kind = self.cursor.current_kind()
        if kind in FIRST[symbol]:
            self.match(node, kind)
        else:
            self.expect_one_of(node, FIRST[symbol])


def parse_source(source: str) -> ParseTree:
    """Tokenize and parse program text.

    Args:
        source: The program text; `#` comment lines are ignored.

    Returns:
        ParseTree: The complete derivation tree.

    Raises:
        ParseError: On the first grammar or declaration error.
    """
    return Parser(tokenize(source)).parse()


__all__ = ["Parser", "parse_source"]
