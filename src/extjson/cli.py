"""
extjson command line.

    extjson normalize [FILE] [--compact]     Rewrite a document in canonical layout
    extjson check [FILE] [--format vscode]   Report every parse error with its location
    extjson tree [FILE]                      Show a document as a tree

FILE defaults to standard input; ``-`` also reads standard input.
"""

from __future__ import annotations

import platform
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.style import Style
from rich.text import Text
from rich.tree import Tree

from extjson._version import get_version
from extjson.core.codec import normalize, parse
from extjson.core.errors import ExtJsonError, ParseError
from extjson.core.serializer import format_key, serialize
from extjson.core.visitor import DBRefRole, LeafKind, ValueVisitor, walk

console = Console()
err_console = Console(stderr=True)

STYLES = {
    "success": Style(color="green", bold=True),
    "error": Style(color="red", bold=True),
    "muted": Style(color="bright_black"),
    "key": Style(color="bright_cyan"),
    "ref": Style(color="magenta", underline=True),
}

LEAF_STYLES: dict[LeafKind, Style] = {
    LeafKind.NULL: Style(color="bright_black", italic=True),
    LeafKind.BOOL: Style(color="yellow"),
    LeafKind.NUMBER: Style(color="blue"),
    LeafKind.STRING: Style(color="green"),
    LeafKind.OBJECT_ID: Style(color="magenta"),
    LeafKind.ISO_DATE: Style(color="cyan"),
    LeafKind.REGEX: Style(color="red"),
    LeafKind.BIN_DATA: Style(color="bright_black"),
    LeafKind.NAN: Style(color="blue", italic=True),
}

app = typer.Typer(
    help="""extjson - MongoDB Extended JSON (shell notation) tools

Commands read FILE, or standard input when FILE is omitted or "-".
""",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"extjson {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """extjson CLI main callback for global options."""
    pass


def _read_source(file: Path | None) -> tuple[str, str]:
    """Return (display name, text) for FILE or standard input.

    Exits 1 if the input is not valid UTF-8.
    """
    name = "<stdin>" if file is None or str(file) == "-" else str(file)
    try:
        if file is None or str(file) == "-":
            return name, sys.stdin.read()
        return name, file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        err_console.print(
            Text(f"{name}: not valid UTF-8 ({e.reason} at byte {e.start})", style=STYLES["error"]),
            soft_wrap=True,
        )
        raise typer.Exit(code=1)


def _print_vscode_errors(error: ParseError, name: str) -> None:
    """Print parse errors in VS Code problem-matcher format."""
    for item in error.errors:
        if item.location:
            line, col = item.location.line, item.location.column
            typer.echo(f"{name}:{line}:{col}: error: {item.message}", err=True)
        else:
            typer.echo(f"{name}: error: {item.message}", err=True)


def _print_human_errors(error: ParseError, name: str) -> None:
    summary = Text(f"{name}: {error.message} ({error.kind})", style=STYLES["error"])
    err_console.print(summary, soft_wrap=True)
    for item in error.errors:
        typer.echo(str(item), err=True)


def _file_argument() -> Any:
    return typer.Argument(
        None,
        help="Extended JSON file (default: standard input)",
        exists=True,
        dir_okay=False,
        allow_dash=True,
    )


@app.command("normalize")
def normalize_command(
    file: Path | None = _file_argument(),
    compact: bool = typer.Option(False, "--compact", "-c", help="Write without whitespace"),
) -> None:
    """
    Parse a document and print it in canonical layout.
    """
    name, text = _read_source(file)
    try:
        typer.echo(normalize(text, pretty=not compact))
    except ParseError as e:
        _print_human_errors(e, name)
        raise typer.Exit(code=1)
    except ExtJsonError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command("check")
def check_command(
    file: Path | None = _file_argument(),
    format: str = typer.Option(
        "human", "--format", "-f", help="Output format: 'human' or 'vscode'"
    ),
) -> None:
    """
    Parse a document and report every error found, exiting 1 if there are any.
    """
    if format not in ("human", "vscode"):
        typer.echo(f"Unknown format '{format}'. Use 'human' or 'vscode'.", err=True)
        raise typer.Exit(code=2)

    name, text = _read_source(file)
    try:
        value = parse(text)
    except ParseError as e:
        if format == "vscode":
            _print_vscode_errors(e, name)
        else:
            _print_human_errors(e, name)
        raise typer.Exit(code=1)

    if format == "human":
        summary = Text(f"OK: {name} ({len(value)} keys)", style=STYLES["success"])
        console.print(summary, soft_wrap=True)


class TreeBuilder(ValueVisitor):
    """Builds a rich ``Tree`` from a canonical value."""

    def __init__(self, label: str) -> None:
        self.root = Tree(Text(label, style=STYLES["muted"]))
        self.stack: list[Tree] = [self.root]
        self.pending: Text | None = None

    def _label(self, suffix: Text) -> Text:
        label = self.pending or Text()
        self.pending = None
        return label + suffix

    def enter_object(self, value: Any, dbref: bool) -> None:
        suffix = Text("DBRef" if dbref else "{}", style=STYLES["muted"])
        self.stack.append(self.stack[-1].add(self._label(suffix)))

    def visit_key(self, key: str, role: DBRefRole | None) -> None:
        style = STYLES["ref"] if role is not None else STYLES["key"]
        self.pending = Text(format_key(key), style=style) + Text(": ")

    def exit_object(self, value: Any) -> None:
        self.stack.pop()

    def enter_array(self, value: Any) -> None:
        suffix = Text(f"[{len(value)}]", style=STYLES["muted"])
        self.stack.append(self.stack[-1].add(self._label(suffix)))

    def visit_index(self, index: int) -> None:
        self.pending = Text(f"{index}: ", style=STYLES["muted"])

    def exit_array(self, value: Any) -> None:
        self.stack.pop()

    def visit_leaf(self, kind: LeafKind, value: Any) -> None:
        text = Text(serialize(value, pretty=False), style=LEAF_STYLES[kind])
        self.stack[-1].add(self._label(text))


@app.command("tree")
def tree_command(
    file: Path | None = _file_argument(),
) -> None:
    """
    Show a document as a tree, with extended types and DBRefs highlighted.
    """
    name, text = _read_source(file)
    try:
        value = parse(text)
    except ParseError as e:
        _print_human_errors(e, name)
        raise typer.Exit(code=1)

    builder = TreeBuilder(name)
    walk(value, builder)
    console.print(builder.root)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
