"""Parser, interpreter and lowerer for a subset of Minecraft scoreboard commands."""

from .datapack import Datapack, Function, load_datapack
from .errors import DatapackError, ParseError, ParseErrorKind, UnsupportedTargetError
from .game import Game
from .lower import lower
from .parser import parse_line
from .sinks import Chat, Level, Log

__all__ = [
    "Chat",
    "Datapack",
    "DatapackError",
    "Function",
    "Game",
    "Level",
    "Log",
    "ParseError",
    "ParseErrorKind",
    "UnsupportedTargetError",
    "load_datapack",
    "lower",
    "parse_line",
]
