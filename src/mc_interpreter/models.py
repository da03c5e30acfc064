"""Command model shared by the parser, the interpreter and the lowerer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Criteria(str, Enum):
    DUMMY = "dummy"


class RenderType(str, Enum):
    HEARTS = "hearts"
    INTEGER = "integer"


class DisplaySlot(str, Enum):
    BELOW_NAME = "belowName"
    LIST = "list"
    SIDEBAR = "sidebar"


class OperationType(str, Enum):
    """Binary operators accepted by ``scoreboard players operation``."""

    ADDITION = "+="
    SUBTRACTION = "-="
    MULTIPLICATION = "*="
    DIVISION = "/="
    MODULUS = "%="
    ASSIGN = "="
    MIN = "<"
    MAX = ">"
    SWAP = "><"


class ComparisonOperator(str, Enum):
    """Relations accepted by ``execute if score ... <op> ...``."""

    LESS = "<"
    LESS_EQUAL = "<="
    EQUAL = "="
    GREATER = ">"
    GREATER_EQUAL = ">="


class SelectorVariable(str, Enum):
    P = "p"
    R = "r"
    A = "a"
    E = "e"
    S = "s"


@dataclass(frozen=True, slots=True)
class PlayerName:
    name: str


@dataclass(frozen=True, slots=True)
class Selector:
    """Entity selector such as ``@p``. Parsed and lowered, never resolved."""

    variable: SelectorVariable


Target = Union[PlayerName, Selector]


@dataclass(frozen=True, slots=True)
class Value:
    value: int

    def contains(self, score: int) -> bool:
        return score == self.value


@dataclass(frozen=True, slots=True)
class Bounded:
    minimum: int
    maximum: int

    def contains(self, score: int) -> bool:
        return self.minimum <= score <= self.maximum


@dataclass(frozen=True, slots=True)
class LeftUnbounded:
    maximum: int

    def contains(self, score: int) -> bool:
        return score <= self.maximum


@dataclass(frozen=True, slots=True)
class RightUnbounded:
    minimum: int

    def contains(self, score: int) -> bool:
        return self.minimum <= score


Interval = Union[Value, Bounded, LeftUnbounded, RightUnbounded]


# scoreboard objectives ...


@dataclass(frozen=True, slots=True)
class ObjectivesAdd:
    objective: str
    criteria: Criteria = Criteria.DUMMY
    display_name: str | None = None


@dataclass(frozen=True, slots=True)
class ObjectivesList:
    pass


@dataclass(frozen=True, slots=True)
class DisplayNameModification:
    display_name: str


@dataclass(frozen=True, slots=True)
class RenderTypeModification:
    render_type: RenderType


Modification = Union[DisplayNameModification, RenderTypeModification]


@dataclass(frozen=True, slots=True)
class ObjectivesModify:
    objective: str
    modification: Modification


@dataclass(frozen=True, slots=True)
class ObjectivesRemove:
    objective: str


@dataclass(frozen=True, slots=True)
class ObjectivesSetDisplay:
    slot: DisplaySlot
    objective: str


ObjectivesCommand = Union[ObjectivesAdd, ObjectivesList, ObjectivesModify, ObjectivesRemove, ObjectivesSetDisplay]


# scoreboard players ...


@dataclass(frozen=True, slots=True)
class PlayersAdd:
    target: Target
    objective: str
    score: int


@dataclass(frozen=True, slots=True)
class PlayersEnable:
    target: Target
    objective: str


@dataclass(frozen=True, slots=True)
class PlayersGet:
    target: Target
    objective: str


@dataclass(frozen=True, slots=True)
class PlayersList:
    target: Target | None = None


@dataclass(frozen=True, slots=True)
class PlayersOperation:
    target: Target
    target_objective: str
    operation: OperationType
    source: Target
    source_objective: str


@dataclass(frozen=True, slots=True)
class PlayersRemove:
    target: Target
    objective: str
    score: int


@dataclass(frozen=True, slots=True)
class PlayersReset:
    target: Target
    objective: str


@dataclass(frozen=True, slots=True)
class PlayersSet:
    target: Target
    objective: str
    score: int


PlayersCommand = Union[
    PlayersAdd,
    PlayersEnable,
    PlayersGet,
    PlayersList,
    PlayersOperation,
    PlayersRemove,
    PlayersReset,
    PlayersSet,
]

ScoreboardCommand = Union[ObjectivesCommand, PlayersCommand]


# function / execute / tellraw


@dataclass(frozen=True, slots=True)
class FunctionIdentifier:
    name: str
    namespace: str | None = None

    def __str__(self) -> str:
        if self.namespace is None:
            return self.name
        return f"{self.namespace}:{self.name}"


@dataclass(frozen=True, slots=True)
class FunctionCommand:
    identifier: FunctionIdentifier


@dataclass(frozen=True, slots=True)
class SourceComparison:
    """``execute if score <target> <objective> <op> <source> <objective> run <command>``."""

    target: Target
    target_objective: str
    comparison: ComparisonOperator
    source: Target
    source_objective: str
    command: Command


@dataclass(frozen=True, slots=True)
class RangeComparison:
    """``execute if score <target> <objective> matches <interval> run <command>``."""

    target: Target
    target_objective: str
    interval: Interval
    command: Command


ExecuteCommand = Union[SourceComparison, RangeComparison]


@dataclass(frozen=True, slots=True)
class Tellraw:
    target: Target
    message: str


Command = Union[ScoreboardCommand, FunctionCommand, ExecuteCommand, Tellraw]
