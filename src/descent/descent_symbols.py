"""
Symbol table for declared identifiers.

A `SymbolTable` lives for exactly one parse pass. `VAR_DECL` statements insert
the declared name; inserting a name a second time is a redeclaration, which the
parser turns into a fatal semantic error.

Classes:
    DuplicateSymbolError: Raised on redeclaration.
    SymbolTable: Insert-once set of identifier names, kept in declaration order.
"""

from collections.abc import Iterator

from descent.descent_lexer import Token


class DuplicateSymbolError(Exception):
    """Raised when an identifier is declared twice in one parse.

    Attributes:
        name (str): The redeclared identifier.
        first (Token): The token of the original declaration.
        again (Token): The token of the rejected declaration.
    """

    def __init__(self, name: str, first: Token, again: Token):
        super().__init__(
            f"'{name}' is already declared ({first.location})"
        )
        self.name = name
        self.first = first
        self.again = again


class SymbolTable:
    """Tracks the identifiers declared so far in the current parse.

    Attributes:
        declarations (dict[str, Token]): Name -> token of its declaration, in
            the order the names were declared.
    """

    def __init__(self) -> None:
        self.declarations: dict[str, Token] = {}

    def declare(self, token: Token) -> None:
        """Records a declaration.

        Args:
            token (Token): The identifier token being declared.

        Raises:
            DuplicateSymbolError: If the name was already declared.
        """
        name = token.lexeme
        if name in self.declarations:
            raise DuplicateSymbolError(name, self.declarations[name], token)
        self.declarations[name] = token

    def lookup(self, name: str) -> Token | None:
        """Returns the declaring token for `name`, or None if undeclared."""
        return self.declarations.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.declarations

    def __len__(self) -> int:
        return len(self.declarations)

    def __iter__(self) -> Iterator[str]:
        return iter(self.declarations)

    def __repr__(self) -> str:
        return f"SymbolTable({list(self.declarations)})"
