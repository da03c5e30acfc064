"""CLI entrypoint for the scoreboard command interpreter."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from mc_interpreter.cli import CliCommandHandler
from mc_interpreter.config import settings
from mc_interpreter.datapack import Datapack, is_command_line, load_datapack
from mc_interpreter.errors import DatapackError, ParseError, UnsupportedTargetError
from mc_interpreter.game import Game
from mc_interpreter.lower import lower
from mc_interpreter.models import FunctionCommand, FunctionIdentifier
from mc_interpreter.parser import parse_line
from mc_interpreter.sinks import Level

app = typer.Typer(help="Interpreter for scoreboard, function, execute and tellraw commands")
console = Console(highlight=False, soft_wrap=True)
error_console = Console(stderr=True, highlight=False, soft_wrap=True)


class ConsoleLog:
    """Prints command outcomes, failures in red."""

    def __init__(self, output: Console, colored: bool = True) -> None:
        self._output = output
        self._colored = colored

    def log(self, level: Level, message: str) -> None:
        style = "red" if level == Level.FAIL and self._colored else None
        self._output.print(message, style=style, markup=False)


class ConsoleChat:
    def __init__(self, output: Console) -> None:
        self._output = output

    def tell(self, players: list[str], message: str) -> None:
        self._output.print(f"<{', '.join(players)}> {message}", markup=False)


@app.callback()
def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def _load(datapack_path: str | None) -> Datapack | None:
    path = datapack_path or settings.datapack_path
    if not path:
        return None
    try:
        return load_datapack(path)
    except DatapackError as exc:
        error_console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1)


def _build_handler(datapack: Datapack | None) -> CliCommandHandler:
    game = Game(
        ConsoleLog(console, colored=settings.colored_output),
        ConsoleChat(console),
        datapack=datapack,
        max_function_depth=settings.max_function_depth,
    )
    return CliCommandHandler(game)


def _print_parse_error(line: str, error: ParseError, *, line_number: int | None = None) -> None:
    prefix = f"line {line_number}, " if line_number is not None else ""
    error_console.print(line.rstrip("\r\n"), markup=False)
    error_console.print(" " * error.position + "^", style="red")
    error_console.print(f"{prefix}{error}", style="red", markup=False)


def _function_identifier(text: str) -> FunctionIdentifier:
    namespace, _, name = text.rpartition(":")
    return FunctionIdentifier(name=name, namespace=namespace or None)


@app.command()
def repl(datapack: str = typer.Option(None, help="Datapack zip or directory providing functions")) -> None:
    """Read commands from the prompt and execute them until EOF or 'exit'."""
    handler = _build_handler(_load(datapack))
    while True:
        try:
            line = input(settings.prompt)
        except EOFError:
            break
        if line.strip() in ("exit", "quit"):
            break
        try:
            handler.run_line(line)
        except ParseError as exc:
            _print_parse_error(line, exc)
        except UnsupportedTargetError as exc:
            error_console.print(str(exc), style="red", markup=False)


@app.command()
def run(
    file: str = typer.Argument(..., help="Text file with one command per line"),
    datapack: str = typer.Option(None, help="Datapack zip or directory providing functions"),
) -> None:
    """Execute every command in a file, stopping at the first error."""
    handler = _build_handler(_load(datapack))
    lines = Path(file).expanduser().read_text(encoding="utf-8").splitlines()
    for line_number, line in enumerate(lines, start=1):
        try:
            handler.run_line(line)
        except ParseError as exc:
            _print_parse_error(line, exc, line_number=line_number)
            raise typer.Exit(code=1)
        except UnsupportedTargetError as exc:
            error_console.print(f"line {line_number}, {exc}", style="red", markup=False)
            raise typer.Exit(code=1)


@app.command("datapack")
def run_datapack(
    path: str = typer.Argument(None, help="Datapack zip or directory"),
    function: str = typer.Option(None, help="Function to call, e.g. fibonacci:main"),
) -> None:
    """Load a datapack and call one of its functions."""
    loaded = _load(path)
    if loaded is None:
        raise typer.BadParameter("Provide a datapack path or set MC_INTERPRETER_DATAPACK_PATH")

    handler = _build_handler(loaded)
    identifier = _function_identifier(function or settings.entry_function)
    try:
        handler.game.execute(FunctionCommand(identifier))
    except UnsupportedTargetError as exc:
        error_console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1)


@app.command("lower")
def lower_command(text: str = typer.Argument(..., help="Command text to normalize")) -> None:
    """Print the canonical form of a command."""
    try:
        command = parse_line(text)
    except ParseError as exc:
        _print_parse_error(text, exc)
        raise typer.Exit(code=1)
    console.print(lower(command), markup=False)


@app.command()
def check(file: str = typer.Argument(..., help="Text file with one command per line")) -> None:
    """Parse every command in a file and report all syntax errors."""
    lines = Path(file).expanduser().read_text(encoding="utf-8").splitlines()
    failures = 0
    for line_number, line in enumerate(lines, start=1):
        if not is_command_line(line):
            continue
        try:
            parse_line(line)
        except ParseError as exc:
            failures += 1
            _print_parse_error(line, exc, line_number=line_number)

    if failures:
        raise typer.Exit(code=1)
    console.print(f"{file}: ok", markup=False)


if __name__ == "__main__":
    app()
