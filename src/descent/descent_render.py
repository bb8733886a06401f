"""
Provides renderers that turn a `ParseTree` into text.

Classes and Features:
    - Renderer (Protocol): Interface for all renderers. Requires `render(tree)`.
    - DotRenderer: Graphviz `digraph` text, one statement per edge of the trace.
      Non-terminals are dotted boxes, lexemes bold ovals, epsilon leaves plain
      text and the error node red.
    - OutlineRenderer: Indented plain-text outline of the tree.
    - JsonRenderer: The outcome and error message plus every node as a flat
      list of records (see `TreeNode.to_record`), linked by child ids so that
      deep derivations serialize without nesting.
    - render(): Selects a renderer by format name and renders the tree.
    - graphviz_url(): Builds a GraphvizOnline link for DOT text.

Usage:
    >>> tree = parse_source("var total")
    >>> print(render(tree, "outline"))

Raises:
    ValueError: If the format name is not supported.
"""

import json
from typing import Protocol
from urllib.parse import quote

from descent.descent_tree import NodeRole, ParseTree, TreeNode

GRAPHVIZ_HOME = "https://dreampuf.github.io/GraphvizOnline/"
GRAPHVIZ_URL_LIMIT = 32_000

DOT_STYLES: dict[NodeRole, str] = {
    NodeRole.ROOT: "shape=plaintext",
    NodeRole.NONTERMINAL: "shape=rect, style=dotted",
    NodeRole.TERMINAL: "shape=oval, style=bold",
    NodeRole.EMPTY: "shape=plaintext",
    NodeRole.ERROR: "shape=plaintext, color=red",
}


class Renderer(Protocol):  # pragma: no cover
    """Protocol for all parse tree renderers."""

    def render(self, tree: ParseTree) -> str: ...  # pragma: no cover


def _dot_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'


class DotRenderer:
    """Renders the edge trace as a Graphviz digraph."""

    def render(self, tree: ParseTree) -> str:
        root = tree.root
        lines = [
            "digraph ParseTree {",
            f"\t{_dot_quote(str(root))} "
            f"[label={_dot_quote(root.label)}, {DOT_STYLES[NodeRole.ROOT]}];",
        ]
        for edge in tree.edges:
            child = edge.child
            label = "&epsilon;" if edge.role is NodeRole.EMPTY else child.label
            lines.append(
                f"\t{_dot_quote(str(edge.parent))} -> "
                f"{{{_dot_quote(str(child))} "
                f"[label={_dot_quote(label)}, {DOT_STYLES[edge.role]}]}};"
            )
        lines.append("}")
        return "\n".join(lines) + "\n"


class OutlineRenderer:
    """Renders the tree as an indented outline, one node per line."""

    def __init__(self, indent: str = "  ") -> None:
        self.indent = indent

    def render(self, tree: ParseTree) -> str:
        lines: list[str] = []
        stack: list[tuple[TreeNode, int]] = [(tree.root, 0)]
        while stack:
            node, depth = stack.pop()
            prefix = "!! " if node.role is NodeRole.ERROR else ""
            lines.append(f"{self.indent * depth}{prefix}{node.label}")
            stack.extend((child, depth + 1) for child in reversed(node.children))
        return "\n".join(lines) + "\n"


class JsonRenderer:
    """Renders the tree and its outcome as a JSON document."""

    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent

    def render(self, tree: ParseTree) -> str:
        document = {
            "accepted": tree.accepted,
            "error": tree.error.message if tree.error is not None else None,
            "root": tree.root.node_id,
            "nodes": [node.to_record() for node in tree.nodes],
        }
        return json.dumps(document, indent=self.indent)


RENDERERS: dict[str, type[Renderer]] = {
    "dot": DotRenderer,
    "outline": OutlineRenderer,
    "json": JsonRenderer,
}
"""Format name -> renderer class."""


def render(tree: ParseTree, fmt: str = "dot") -> str:
    """Renders a parse tree in the named format.

    Args:
        tree: The (possibly partial) parse tree.
        fmt: One of the keys of `RENDERERS`, case-insensitive.

    Returns:
        The rendered text.

    Raises:
        ValueError: If the format is not supported.
    """
    key = fmt.lower()
    if key not in RENDERERS:
        raise ValueError(f"Unknown render format: {fmt!r}")
    return RENDERERS[key]().render(tree)


def graphviz_url(dot: str) -> str | None:
    """Builds a GraphvizOnline link that opens the given DOT text.

    Returns:
        The URL, or None when the encoded graph is too long for a URL.
    """
    encoded = quote(dot, safe="")
    if len(GRAPHVIZ_HOME) + len(encoded) >= GRAPHVIZ_URL_LIMIT:
        return None
    return f"{GRAPHVIZ_HOME}#{encoded}"
