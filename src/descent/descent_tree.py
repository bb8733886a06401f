"""
Parse tree structure and the tree sink the parser writes into.

Classes:
    NodeRole:
        Role of a node (and of the edge leading to it): root, non-terminal,
        terminal, empty or error.

    TreeNode:
        One node of the derivation tree. Carries an id that is unique within its
        tree, a display label and its ordered children.

    Edge:
        One parent -> child record of the derivation trace.

    NodeDict:
        TypedDict representation of a serialized subtree, nested like the tree.

    NodeRecord:
        TypedDict representation of one serialized node, children given by id.
        The JSON renderer writes a tree as a flat list of these.

    ParseTree:
        The tree sink. Owns every node, the node id counter and the edge trace.
        The parser only ever holds handles to nodes it has just opened.

    ParseError / DeclarationError:
        Raised through `ParseTree.fail`. Both end the current parse pass.

Node labels follow a fixed convention:
    `<PROGRAM>`       a non-terminal
    `<identifier>`    the wrapper for a matched terminal, named by its kind
    `total`           the matched lexeme itself
    `EMPTY`           an epsilon alternative

Usage:
    tree = ParseTree()
    node = tree.open_nonterminal(tree.root, "PROGRAM")
    tree.attach_terminal(node, TokenKind.EOF, "end-of-input")
"""

from enum import Enum
from typing import NamedTuple, NoReturn, TypedDict

from descent.descent_lexer import Token
from descent.descent_tokens import TokenKind

ROOT_LABEL = "Parse Tree"
EMPTY_LABEL = "EMPTY"


class NodeRole(Enum):
    ROOT = "root"
    NONTERMINAL = "nonterminal"
    TERMINAL = "terminal"
    EMPTY = "empty"
    ERROR = "error"


class NodeDict(TypedDict):
    """
    TypedDict representation of a TreeNode used for serialization.

    Fields:
        id (int): The node id within its tree.
        label (str): The display label.
        role (str): The `NodeRole` value.
        children (list[NodeDict]): The child nodes, in derivation order.
    """

    id: int
    label: str
    role: str
    children: list["NodeDict"]


class NodeRecord(TypedDict):
    """A single serialized node whose children are referenced by id.

    A tree is a flat list of records, so its serialized form has the same
    nesting depth however deep the derivation is.
    """

    id: int
    label: str
    role: str
    children: list[int]


Shape = tuple[tuple[int, str], ...]
"""Pre-order `(depth, label)` pairs; see `TreeNode.shape`."""


class TreeNode:
    """
    A node of the derivation tree.

    Nodes are created only by a `ParseTree`, are never removed, and their
    children only ever grow by appending.

    Attributes:
        node_id (int): Id unique within the owning tree, assigned in creation order.
        label (str): Display label (see module docstring for the conventions).
        role (NodeRole): What kind of node this is.
        children (list[TreeNode]): Child nodes in the order they were attached.
    """

    __slots__ = ("node_id", "label", "role", "children")

    def __init__(self, node_id: int, label: str, role: NodeRole):
        self.node_id = node_id
        self.label = label
        self.role = role
        self.children: list["TreeNode"] = []

    def __repr__(self) -> str:
        parts = [f"{self.node_id}", repr(self.label)]
        if self.children:
            preview = ", ".join(repr(c.label) for c in self.children[:3])
            if len(self.children) > 3:
                preview += ", ..."
            parts.append(f"children=[{preview}]")
        return f"TreeNode({', '.join(parts)})"

    def __str__(self) -> str:
        return f"{self.label}-{self.node_id}"

    def shape(self) -> Shape:
        """Returns the id-free structure of the subtree.

        The shape is the pre-order sequence of `(depth, label)` pairs, with
        depth counted from this node. It determines the ordered tree exactly,
        so two derivations of the same input produce equal shapes even though
        their node ids may differ. Building and comparing it needs no recursion,
        however deep the tree.
        """
        pairs: list[tuple[int, str]] = []
        stack: list[tuple[TreeNode, int]] = [(self, 0)]
        while stack:
            node, depth = stack.pop()
            pairs.append((depth, node.label))
            stack.extend((child, depth + 1) for child in reversed(node.children))
        return tuple(pairs)

    def walk(self) -> list["TreeNode"]:
        """Returns this node and all its descendants in pre-order."""
        nodes = [self]
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            nodes.append(node)
            stack.extend(reversed(node.children))
        return nodes

    def to_dict(self) -> NodeDict:
        """Serializes the subtree as nested dictionaries."""
        result = self._dict_without_children()
        stack: list[tuple[TreeNode, NodeDict]] = [(self, result)]
        while stack:
            node, out = stack.pop()
            for child in node.children:
                child_out = child._dict_without_children()
                out["children"].append(child_out)
                stack.append((child, child_out))
        return result

    def _dict_without_children(self) -> NodeDict:
        return {
            "id": self.node_id,
            "label": self.label,
            "role": self.role.value,
            "children": [],
        }

    def to_record(self) -> NodeRecord:
        """Serializes this node alone, naming its children by id."""
        return {
            "id": self.node_id,
            "label": self.label,
            "role": self.role.value,
            "children": [c.node_id for c in self.children],
        }


class Edge(NamedTuple):
    """A parent -> child record of the derivation trace."""

    parent: TreeNode
    child: TreeNode
    role: NodeRole


class ParseError(SyntaxError):
    """Raised when the input does not conform to the grammar.

    Attributes:
        node (TreeNode): The node at which the mismatch was detected.
        token (Token | None): The offending token, or None at end-of-input.
    """

    def __init__(self, message: str, node: TreeNode, token: Token | None = None):
        super().__init__(message)
        self.message = message
        self.node = node
        self.token = token

    def __str__(self) -> str:
        return self.message


class DeclarationError(ParseError):
    """Raised when an identifier is declared a second time."""


class ParseTree:
    """
    Tree sink for one parse pass.

    Every operation returns a handle to the node it created, or, for `fail`,
    raises. Node ids come from a counter owned by this instance, so separate
    parses never share state.

    Attributes:
        root (TreeNode): The `Parse Tree` root node (id 0).
        nodes (list[TreeNode]): Every node, in creation order (index == id).
        edges (list[Edge]): Every edge, in creation order.
        error (ParseError | None): The error that ended the pass, if any.
    """

    def __init__(self) -> None:
        self.nodes: list[TreeNode] = []
        self.edges: list[Edge] = []
        self.error: ParseError | None = None
        self.root = self._new_node(ROOT_LABEL, NodeRole.ROOT)

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"ParseTree(nodes={len(self.nodes)}, error={self.error!r})"

    @property
    def accepted(self) -> bool:
        """True if no error was reported and the start symbol was opened."""
        return self.error is None and bool(self.root.children)

    def _new_node(self, label: str, role: NodeRole) -> TreeNode:
        node = TreeNode(len(self.nodes), label, role)
        self.nodes.append(node)
        return node

    def _attach(self, parent: TreeNode, label: str, role: NodeRole) -> TreeNode:
        child = self._new_node(label, role)
        parent.children.append(child)
        self.edges.append(Edge(parent, child, role))
        return child

    def open_nonterminal(self, parent: TreeNode, symbol: str) -> TreeNode:
        """Opens the node for a grammar non-terminal, labeled `<symbol>`."""
        return self._attach(parent, f"<{symbol}>", NodeRole.NONTERMINAL)

    def open_nonterminal_named(self, parent: TreeNode, label: str) -> TreeNode:
        """Opens a non-terminal-style node with a caller-chosen label."""
        return self._attach(parent, label, NodeRole.NONTERMINAL)

    def attach_terminal(self, parent: TreeNode, kind: TokenKind, lexeme: str) -> TreeNode:
        """Attaches a matched terminal.

        A `<kind>` wrapper node is opened under `parent` and the lexeme leaf is
        hung under the wrapper.

        Returns:
            TreeNode: The lexeme leaf.
        """
        wrapper = self.open_nonterminal_named(parent, f"<{kind}>")
        return self._attach(wrapper, lexeme, NodeRole.TERMINAL)

    def attach_empty(self, parent: TreeNode) -> TreeNode:
        """Attaches the explicit leaf for an epsilon alternative."""
        return self._attach(parent, EMPTY_LABEL, NodeRole.EMPTY)

    def fail(
        self,
        message: str,
        node: TreeNode,
        token: Token | None = None,
        error_cls: type[ParseError] = ParseError,
    ) -> NoReturn:
        """Records an error node under `node` and aborts the parse.

        The partial tree, including the error node, stays available after the
        exception propagates.

        Raises:
            ParseError: Always; `error_cls` selects the subclass.
        """
        self._attach(node, message, NodeRole.ERROR)
        error = error_cls(message, node, token)
        self.error = error
        raise error

    def count(self, role: NodeRole) -> int:
        """Counts the nodes with the given role."""
        return sum(1 for node in self.nodes if node.role is role)
