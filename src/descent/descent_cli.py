"""
descent CLI Entrypoint.

This module provides the command-line interface for checking descent programs.

Features:
    - Read source from a file or an inline string.
    - Tokenize and parse it, building the derivation tree.
    - Render the tree (complete, or partial on failure) as DOT, an outline or JSON.
    - Output to console or file, optionally with a GraphvizOnline link.

Example usage:
    descent program.txt
    descent -s "write 1 + 2 * 3" -f outline
    descent program.txt -o tree.dot --url
    descent program.txt --debug

Exit codes:
    0  the program was accepted
    1  the program was rejected (syntax or declaration error)
    2  the source file could not be read
    3  the program is nested too deeply to parse

Functions:
    check(text: str, tree: ParseTree) -> int:
        Parses text into a tree and logs any error; returns the exit code.

    run_descent(source: str, is_string: bool = False, fmt: str = "dot",
                out: Optional[str] = None, url: bool = False) -> int:
        Executes the full pipeline (tokenize -> parse -> render -> output).

    main() -> None:
        Parses CLI arguments and exits with the status of `run_descent`.
"""

import argparse
import logging
import sys

from descent.descent_lexer import tokenize
from descent.descent_parser import Parser
from descent.descent_render import RENDERERS, graphviz_url, render
from descent.descent_tree import ParseError, ParseTree

# Module level logger object
LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_UNREADABLE = 2
EXIT_TOO_DEEP = 3


def check(text: str, tree: ParseTree) -> int:
    """Parse program text into `tree` and log the outcome.

    Returns:
        int: `EXIT_OK` if the program was accepted, else `EXIT_REJECTED`.
    """
    try:
        Parser(tokenize(text), tree=tree).parse()
    except ParseError as e:
        LOGGER.error("%s", e)
        return EXIT_REJECTED
    LOGGER.debug("accepted: %d nodes", len(tree))
    return EXIT_OK


def run_descent(
    source: str,
    is_string: bool = False,
    fmt: str = "dot",
    out: str | None = None,
    url: bool = False,
) -> int:
    """
    Run the descent pipeline: tokenize, parse, render, and write the output.

    The tree is rendered whether or not parsing succeeds, so a rejected program
    still shows how far the derivation got.

    Args:
        source (str): Path to the program file, or the program text itself.
        is_string (bool): If True, treats `source` as program text. Defaults to False.
        fmt (str): Render format, one of `RENDERERS`. Defaults to 'dot'.
        out (str | None): Optional path to write the rendered tree. If None, prints to stdout.
        url (bool): If True and `fmt` is 'dot', also prints a GraphvizOnline link.

    Returns:
        int: The process exit code.
    """
    if not is_string:
        try:
            with open(source, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            LOGGER.error("Error reading the file %s: %s", source, e)
            return EXIT_UNREADABLE
    else:
        text = source

    tree = ParseTree()
    try:
        status = check(text, tree)
        output = render(tree, fmt)
    except RecursionError:
        LOGGER.error("program is nested too deeply to process")
        return EXIT_TOO_DEEP

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(output)
        LOGGER.debug("wrote %s", out)
    else:
        print(output, end="")

    if url and fmt == "dot":
        link = graphviz_url(output)
        if link is None:
            print("Output is too long for a GraphvizOnline link.", file=sys.stderr)
        else:
            print(link)

    return status


def main() -> None:
    """
    Entry point for the descent CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as program text instead of a file path.
        - `-f`, `--format`: Render format ('dot', 'outline' or 'json'), default is 'dot'.
        - `-o`, `--out`: Write the rendered tree to a file.
        - `--url`: Print a GraphvizOnline link for DOT output.
        - `-d`, `--debug`: Enable debug logging to the console.
    """
    parser = argparse.ArgumentParser(
        prog="descent", description="Check a program and render its parse tree."
    )
    parser.add_argument("source", help="Filename or program text (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as program text"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=sorted(RENDERERS),
        default="dot",
        help="Render format (default: dot)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--url", action="store_true", help="Print a GraphvizOnline link (dot only)"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Enable debug logging to the console."
    )

    args = parser.parse_args()

    if args.debug:
        LOGGER.setLevel(logging.DEBUG)
        if not LOGGER.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
            LOGGER.addHandler(handler)
    else:
        logging.basicConfig(format="%(levelname)s: %(message)s")

    sys.exit(
        run_descent(
            source=args.source,
            is_string=args.string,
            fmt=args.fmt,
            out=args.out,
            url=args.url,
        )
    )


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
