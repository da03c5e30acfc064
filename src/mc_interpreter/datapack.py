"""Datapack model and loading of ``.mcfunction`` files from archives or directories."""

from __future__ import annotations

import logging
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

from mc_interpreter.errors import DatapackError, ParseError
from mc_interpreter.models import Command, FunctionIdentifier
from mc_interpreter.parser import parse_line

FUNCTION_PATH = re.compile(r"^data/(\w+)/functions?/(\w+)\.mcfunction$")

_logger = logging.getLogger("mc_interpreter.datapack")


@dataclass(frozen=True, slots=True)
class Function:
    identifier: FunctionIdentifier
    commands: tuple[Command, ...] = ()


@dataclass(frozen=True, slots=True)
class Datapack:
    """Read-only bundle of functions the interpreter can call by identifier."""

    name: str
    functions: tuple[Function, ...] = field(default_factory=tuple)

    def find(self, identifier: FunctionIdentifier) -> Function | None:
        for function in self.functions:
            if function.identifier == identifier:
                return function
        return None


def is_command_line(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


def parse_function_text(identifier: FunctionIdentifier, text: str) -> Function:
    """Parse the body of one function, one command per non-blank, non-comment line."""
    commands: list[Command] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not is_command_line(line):
            continue
        try:
            commands.append(parse_line(line.strip()))
        except ParseError as exc:
            raise DatapackError(f"{identifier} line {line_number}, {exc}") from exc
    return Function(identifier=identifier, commands=tuple(commands))


def function_identifier_for(member: str) -> FunctionIdentifier | None:
    """Map an archive member path to the function it defines, if any."""
    match = FUNCTION_PATH.match(member)
    if not match:
        return None
    return FunctionIdentifier(name=match.group(2), namespace=match.group(1))


def load_datapack(path: str | Path) -> Datapack:
    """Load every function of a datapack stored as a zip archive or an unpacked directory."""
    source = Path(path).expanduser()
    if not source.exists():
        raise DatapackError(f"Datapack not found: {source}")

    if source.is_dir():
        sources = _read_directory(source)
    else:
        sources = _read_archive(source)

    functions = tuple(
        parse_function_text(identifier, text)
        for identifier, text in sorted(sources, key=lambda source: str(source[0]))
    )
    _logger.info("datapack_loaded", extra={"datapack": source.stem, "function_count": len(functions)})
    return Datapack(name=source.stem, functions=functions)


def _read_archive(path: Path) -> list[tuple[FunctionIdentifier, str]]:
    try:
        with zipfile.ZipFile(path) as archive:
            sources = []
            for member in archive.namelist():
                identifier = function_identifier_for(member)
                if identifier is None:
                    continue
                sources.append((identifier, archive.read(member).decode("utf-8")))
            return sources
    except zipfile.BadZipFile as exc:
        raise DatapackError(f"Failed to read zip format: {path}") from exc


def _read_directory(root: Path) -> list[tuple[FunctionIdentifier, str]]:
    sources = []
    for file_path in root.rglob("*.mcfunction"):
        identifier = function_identifier_for(file_path.relative_to(root).as_posix())
        if identifier is None:
            continue
        sources.append((identifier, file_path.read_text(encoding="utf-8")))
    return sources
