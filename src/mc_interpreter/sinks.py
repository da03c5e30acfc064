"""Boundaries for the user-visible effects of executing commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Level(str, Enum):
    INFO = "info"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class LogEntry:
    level: Level
    message: str


class Log(Protocol):
    """Receives one call per user-visible command outcome."""

    def log(self, level: Level, message: str) -> None:
        """Record a command outcome."""


class Chat(Protocol):
    """Receives chat messages produced by ``tellraw``."""

    def tell(self, players: list[str], message: str) -> None:
        """Deliver ``message`` to ``players``."""


class LoggingLog:
    """Forwards command outcomes to a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("mc_interpreter.game.output")

    def log(self, level: Level, message: str) -> None:
        if level == Level.FAIL:
            self._logger.warning(message)
        else:
            self._logger.info(message)


class BufferedLog:
    """Collects outcomes until drained, optionally forwarding each one."""

    def __init__(self, forward_to: Log | None = None) -> None:
        self._entries: list[LogEntry] = []
        self._forward_to = forward_to

    def log(self, level: Level, message: str) -> None:
        self._entries.append(LogEntry(level, message))
        if self._forward_to is not None:
            self._forward_to.log(level, message)

    def drain(self) -> list[LogEntry]:
        entries, self._entries = self._entries, []
        return entries


class NullChat:
    def tell(self, players: list[str], message: str) -> None:
        return None
