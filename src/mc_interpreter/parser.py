"""Recursive-descent parser turning one line of command text into a command model."""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from mc_interpreter.errors import ParseError, ParseErrorKind
from mc_interpreter.models import (
    Bounded,
    Command,
    ComparisonOperator,
    Criteria,
    DisplayNameModification,
    DisplaySlot,
    FunctionCommand,
    FunctionIdentifier,
    Interval,
    LeftUnbounded,
    ObjectivesAdd,
    ObjectivesCommand,
    ObjectivesList,
    ObjectivesModify,
    ObjectivesRemove,
    ObjectivesSetDisplay,
    OperationType,
    PlayerName,
    PlayersAdd,
    PlayersCommand,
    PlayersEnable,
    PlayersGet,
    PlayersList,
    PlayersOperation,
    PlayersRemove,
    PlayersReset,
    PlayersSet,
    RangeComparison,
    RenderType,
    RenderTypeModification,
    RightUnbounded,
    ScoreboardCommand,
    Selector,
    SelectorVariable,
    SourceComparison,
    Target,
    Tellraw,
    Value,
)

T = TypeVar("T")

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1
_MAX_DIGITS = len(str(I32_MAX))

_DIGITS = frozenset("0123456789")
_SELECTORS = {f"@{variable.value}": variable for variable in SelectorVariable}
_OPERATIONS = {operation.value: operation for operation in OperationType}
_COMPARISONS = {comparison.value: comparison for comparison in ComparisonOperator}
COMMAND_NAMES = ("scoreboard", "function", "execute", "tellraw")


def parse_line(text: str) -> Command:
    """Parse a single command line.

    Leading whitespace and a trailing line break are ignored. Anything else that
    does not fit the grammar raises :class:`ParseError` pointing at the column
    where the expectation failed.
    """
    return _Parser(text).parse()


def _article(label: str) -> str:
    return f"an {label}" if label[0] in "aeiou" else f"a {label}"


class _Parser:
    def __init__(self, text: str) -> None:
        self._text = text.rstrip("\r\n")
        self._pos = 0

    def parse(self) -> Command:
        while not self._at_end() and self._text[self._pos].isspace():
            self._pos += 1
        command = self._command()
        if not self._at_end():
            rest = self._text[self._pos :]
            if rest.isspace():
                raise ParseError(ParseErrorKind.TRAILING_WHITESPACE, self._pos)
            raise ParseError(ParseErrorKind.TRAILING_CHARACTERS, self._pos, rest=rest)
        return command

    # Lexical primitives

    def _at_end(self) -> bool:
        return self._pos >= len(self._text)

    def _peek(self) -> str | None:
        if self._at_end():
            return None
        return self._text[self._pos]

    def _unexpected(self, expected: str) -> ParseError:
        char = self._peek()
        if char is None:
            return ParseError(ParseErrorKind.UNEXPECTED_END, self._pos, expected=expected)
        if char.isspace():
            return self._whitespace_error()
        return ParseError(ParseErrorKind.UNEXPECTED_SYMBOL, self._pos, expected=expected, found=char)

    def _whitespace_error(self) -> ParseError:
        # Only looks ahead to name the next token; the cursor does not move.
        start = self._pos
        while start < len(self._text) and self._text[start].isspace():
            start += 1
        end = start
        while end < len(self._text) and not self._text[end].isspace():
            end += 1
        if start == end:
            return ParseError(ParseErrorKind.TRAILING_WHITESPACE, self._pos)
        return ParseError(ParseErrorKind.EXTRA_WHITESPACE, self._pos, token=self._text[start:end])

    def _space(self) -> None:
        if self._peek() != " ":
            raise self._unexpected("a space")
        self._pos += 1
        char = self._peek()
        if char is None:
            raise ParseError(ParseErrorKind.TRAILING_WHITESPACE, self._pos - 1)
        if char.isspace():
            raise self._whitespace_error()

    def _end_or(self, parse: Callable[[], T]) -> T | None:
        if self._at_end():
            return None
        self._space()
        return parse()

    def _identifier(self, expected: str) -> str:
        start = self._pos
        while not self._at_end() and (self._text[self._pos].isalnum() or self._text[self._pos] == "_"):
            self._pos += 1
        if self._pos == start:
            raise self._unexpected(expected)
        return self._text[start : self._pos]

    def _operator(self, expected: str) -> str:
        start = self._pos
        while not self._at_end() and not self._text[self._pos].isspace():
            self._pos += 1
        if self._pos == start:
            raise self._unexpected(expected)
        return self._text[start : self._pos]

    def _string(self) -> str:
        if self._peek() != '"':
            raise self._unexpected("a quoted string")
        start = self._pos
        end = self._text.find('"', start + 1)
        if end == -1:
            raise ParseError(ParseErrorKind.UNCLOSED_STRING, start)
        self._pos = end + 1
        return self._text[start + 1 : end]

    def _integer(self, *, signed: bool) -> int:
        expected = "an integer" if signed else "a non-negative integer"
        start = self._pos
        if signed and self._peek() == "-":
            self._pos += 1
        digits_start = self._pos
        while not self._at_end() and self._text[self._pos] in _DIGITS:
            self._pos += 1
        if self._pos == digits_start:
            raise self._unexpected(expected)

        literal = self._text[start : self._pos]
        minimum = I32_MIN if signed else 0
        # long digit runs are rejected before int() sees them
        significant = self._text[digits_start : self._pos].lstrip("0")
        value = int(literal) if len(significant) <= _MAX_DIGITS else None
        if value is None or not minimum <= value <= I32_MAX:
            raise ParseError(
                ParseErrorKind.INTEGER_OUT_OF_RANGE,
                start,
                literal=literal,
                minimum=minimum,
                maximum=I32_MAX,
            )
        return value

    def _positive_integer(self) -> int:
        return self._integer(signed=False)

    def _signed_integer(self) -> int:
        return self._integer(signed=True)

    def _keyword(self, label: str, options: Iterable[str]) -> str:
        options = tuple(options)
        start = self._pos
        word = self._identifier(_article(label))
        if word not in options:
            raise ParseError(
                ParseErrorKind.UNKNOWN_KEYWORD,
                start,
                what=label,
                found=word,
                options=", ".join(options),
            )
        return word

    # Grammar

    def _command(self) -> Command:
        start = self._pos
        name = self._identifier("a command")
        if name not in COMMAND_NAMES:
            raise ParseError(ParseErrorKind.UNKNOWN_COMMAND, start, command=name)
        self._space()
        if name == "scoreboard":
            return self._scoreboard()
        if name == "function":
            return self._function()
        if name == "execute":
            return self._execute()
        return self._tellraw()

    def _scoreboard(self) -> ScoreboardCommand:
        word = self._keyword("scoreboard subcommand", ("objectives", "players"))
        self._space()
        if word == "objectives":
            return self._objectives()
        return self._players()

    def _objectives(self) -> ObjectivesCommand:
        word = self._keyword("objectives subcommand", ("add", "list", "modify", "remove", "setdisplay"))
        if word == "list":
            return ObjectivesList()

        self._space()
        if word == "add":
            objective = self._objective()
            self._space()
            criteria = Criteria(self._keyword("criteria", (criteria.value for criteria in Criteria)))
            display_name = self._end_or(self._string)
            return ObjectivesAdd(objective=objective, criteria=criteria, display_name=display_name)

        if word == "modify":
            objective = self._objective()
            self._space()
            field = self._keyword("objective property", ("displayname", "rendertype"))
            self._space()
            if field == "displayname":
                return ObjectivesModify(objective, DisplayNameModification(self._string()))
            render_type = RenderType(self._keyword("render type", (render.value for render in RenderType)))
            return ObjectivesModify(objective, RenderTypeModification(render_type))

        if word == "remove":
            return ObjectivesRemove(self._objective())

        slot = DisplaySlot(self._keyword("display slot", (slot.value for slot in DisplaySlot)))
        self._space()
        return ObjectivesSetDisplay(slot=slot, objective=self._objective())

    def _players(self) -> PlayersCommand:
        word = self._keyword(
            "players subcommand",
            ("add", "enable", "get", "list", "operation", "remove", "reset", "set"),
        )
        if word == "list":
            return PlayersList(self._end_or(self._target))

        self._space()
        target = self._target()
        self._space()
        objective = self._objective()

        if word == "operation":
            self._space()
            start = self._pos
            token = self._operator("an operation")
            operation = _OPERATIONS.get(token)
            if operation is None:
                raise ParseError(
                    ParseErrorKind.UNKNOWN_KEYWORD,
                    start,
                    what="operation",
                    found=token,
                    options=", ".join(_OPERATIONS),
                )
            self._space()
            source = self._target()
            self._space()
            return PlayersOperation(target, objective, operation, source, self._objective())

        if word == "enable":
            return PlayersEnable(target, objective)
        if word == "get":
            return PlayersGet(target, objective)
        if word == "reset":
            return PlayersReset(target, objective)

        self._space()
        if word == "add":
            return PlayersAdd(target, objective, self._positive_integer())
        if word == "remove":
            return PlayersRemove(target, objective, self._positive_integer())
        return PlayersSet(target, objective, self._signed_integer())

    def _objective(self) -> str:
        return self._identifier("an objective name")

    def _target(self) -> Target:
        if self._peek() != "@":
            return PlayerName(self._identifier("a player name or selector"))
        start = self._pos
        token = self._operator("a selector")
        variable = _SELECTORS.get(token)
        if variable is None:
            raise ParseError(
                ParseErrorKind.UNKNOWN_KEYWORD,
                start,
                what="selector",
                found=token,
                options=", ".join(_SELECTORS),
            )
        return Selector(variable)

    def _function(self) -> FunctionCommand:
        first = self._identifier("a function name")
        if self._peek() != ":":
            return FunctionCommand(FunctionIdentifier(first))
        self._pos += 1
        return FunctionCommand(FunctionIdentifier(self._identifier("a function name"), namespace=first))

    def _execute(self) -> SourceComparison | RangeComparison:
        self._keyword("execute subcommand", ("if",))
        self._space()
        self._keyword("condition", ("score",))
        self._space()
        target = self._target()
        self._space()
        target_objective = self._objective()
        self._space()

        start = self._pos
        token = self._operator("a comparison")
        if token == "matches":
            self._space()
            interval = self._interval()
            return RangeComparison(target, target_objective, interval, self._run())

        comparison = _COMPARISONS.get(token)
        if comparison is None:
            raise ParseError(
                ParseErrorKind.UNKNOWN_KEYWORD,
                start,
                what="comparison",
                found=token,
                options=", ".join([*_COMPARISONS, "matches"]),
            )
        self._space()
        source = self._target()
        self._space()
        source_objective = self._objective()
        return SourceComparison(target, target_objective, comparison, source, source_objective, self._run())

    def _run(self) -> Command:
        self._space()
        self._keyword("keyword", ("run",))
        self._space()
        return self._command()

    def _interval(self) -> Interval:
        start = self._pos
        if self._text.startswith("..", self._pos):
            self._pos += 2
            if self._peek() is None or self._peek().isspace():
                raise ParseError(ParseErrorKind.INVALID_INTERVAL, start, found="..")
            return LeftUnbounded(self._signed_integer())

        minimum = self._signed_integer()
        if not self._text.startswith("..", self._pos):
            return Value(minimum)
        self._pos += 2
        if self._peek() is None or self._peek().isspace():
            return RightUnbounded(minimum)
        return Bounded(minimum, self._signed_integer())

    def _tellraw(self) -> Tellraw:
        target = self._target()
        self._space()
        return Tellraw(target, self._string())
