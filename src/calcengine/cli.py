"""
calcengine command-line interface.

Commands:
- eval: evaluate one or more expressions against a shared state
- tokens: show the token stream for an expression
- ast: show the parsed expression tree
- repl: interactive calculator session
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from calcengine._version import get_version
from calcengine.core.errors import EvalError
from calcengine.core.expression_lang.computer import Computer
from calcengine.core.expression_lang.parser import parse
from calcengine.core.expression_lang.tokenizer import TokenKind
from calcengine.core.settings import CalcConfig, build_computer, load_config

app = typer.Typer(
    help="calcengine - evaluate arithmetic and scientific expressions",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

_DEFAULT_CONFIG = Path("calc.toml")


class _State:
    config: CalcConfig = CalcConfig()


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"calcengine {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="TOML settings file (default: ./calc.toml if present)"
    ),
    numbers: str | None = typer.Option(
        None, "--numbers", "-n", help="Number system: float, decimal or fraction"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: bool | None = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    """Load settings and configure logging for every command."""
    if config is None and _DEFAULT_CONFIG.exists():
        config = _DEFAULT_CONFIG
    try:
        settings = load_config(config)
    except FileNotFoundError:
        err_console.print(f"[red]Config file not found:[/red] {config}")
        raise typer.Exit(code=2)

    if numbers is not None:
        settings.number_system = numbers.lower()

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    _State.config = settings


def _computer() -> Computer:
    try:
        return build_computer(_State.config)
    except KeyError as e:
        err_console.print(f"[red]{escape(e.args[0])}[/red]")
        raise typer.Exit(code=2)


def _format(value: Any) -> str:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return str(value)


def _report(error: EvalError, source: str) -> None:
    err_console.print(f"[red]{error.stage} error:[/red] {escape(error.message)}", highlight=False)
    if error.pos is not None:
        err_console.print(f"  {escape(source)}\n  {' ' * error.pos}^", highlight=False)


@app.command("eval")
def eval_command(
    expressions: list[str] = typer.Argument(..., help="Expressions, evaluated in order"),
) -> None:
    """Evaluate expressions; later ones see earlier assignments and ``ans``."""
    computer = _computer()
    for source in expressions:
        try:
            value = computer.eval(source)
        except EvalError as e:
            _report(e, source)
            raise typer.Exit(code=1)
        console.print(_format(value), highlight=False)


@app.command("tokens")
def tokens_command(expression: str = typer.Argument(..., help="Expression to tokenize")) -> None:
    """Show the tokens an expression is split into."""
    try:
        tokens = _computer().tokenize(expression)
    except EvalError as e:
        _report(e, expression)
        raise typer.Exit(code=1)

    table = Table(title="Tokens")
    table.add_column("Pos", justify="right")
    table.add_column("Kind")
    table.add_column("Text")
    for tok in tokens:
        if tok.kind == TokenKind.EOF:
            continue
        table.add_row(str(tok.pos), tok.kind.name, tok.text)
    console.print(table)


@app.command("ast")
def ast_command(expression: str = typer.Argument(..., help="Expression to parse")) -> None:
    """Show the parsed expression tree."""
    try:
        expr = parse(_computer().tokenize(expression))
    except EvalError as e:
        _report(e, expression)
        raise typer.Exit(code=1)
    console.print(str(expr), highlight=False)
    console.print(expr.model_dump(), highlight=False)


def _show_variables(computer: Computer) -> None:
    table = Table(title="Variables")
    table.add_column("Name")
    table.add_column("Value")
    table.add_column("Constant")
    for name, binding in sorted(computer.variables.items()):
        table.add_row(name, _format(binding.value), "yes" if binding.constant else "")
    console.print(table)


@app.command("repl")
def repl_command() -> None:
    """Interactive session. Type :vars, :funcs or :quit."""
    computer = _computer()
    console.print(
        f"calcengine {get_version()} ({computer.numbers.name}) - :quit to exit",
        highlight=False,
    )
    while True:
        try:
            line = console.input("[bold]> [/bold]").strip()
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        if not line:
            continue
        if line in (":quit", ":q", ":exit"):
            break
        if line == ":vars":
            _show_variables(computer)
            continue
        if line == ":funcs":
            console.print(", ".join(sorted(computer.functions)) or "(none)", highlight=False)
            continue

        try:
            value = computer.eval(line)
        except EvalError as e:
            _report(e, line)
            continue
        console.print(_format(value), highlight=False)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
