"""Line-oriented facade used by the REPL and the file runner."""

from __future__ import annotations

from typing import Iterable

from mc_interpreter.datapack import is_command_line
from mc_interpreter.game import Game
from mc_interpreter.models import Command
from mc_interpreter.parser import parse_line


class CliCommandHandler:
    """Parses and executes text lines against one game."""

    def __init__(self, game: Game) -> None:
        self._game = game

    @property
    def game(self) -> Game:
        return self._game

    def run_line(self, text: str) -> Command | None:
        """Run one line; blank and ``#`` comment lines are skipped and return ``None``.

        ``ParseError`` and ``UnsupportedTargetError`` propagate to the caller.
        """
        if not is_command_line(text):
            return None
        command = parse_line(text)
        self._game.execute(command)
        return command

    def run_lines(self, lines: Iterable[str]) -> list[Command]:
        """Run lines in order, stopping at the first error."""
        executed: list[Command] = []
        for line in lines:
            command = self.run_line(line)
            if command is not None:
                executed.append(command)
        return executed
