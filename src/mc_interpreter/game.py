"""Scoreboard interpreter: game state and command execution."""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass, field
from typing import Any, Callable

from mc_interpreter.datapack import Datapack
from mc_interpreter.errors import UnsupportedTargetError
from mc_interpreter.lower import target as lower_target
from mc_interpreter.models import (
    Command,
    ComparisonOperator,
    Criteria,
    DisplayNameModification,
    DisplaySlot,
    FunctionCommand,
    ObjectivesAdd,
    ObjectivesList,
    ObjectivesModify,
    ObjectivesRemove,
    ObjectivesSetDisplay,
    OperationType,
    PlayerName,
    PlayersAdd,
    PlayersEnable,
    PlayersGet,
    PlayersList,
    PlayersOperation,
    PlayersRemove,
    PlayersReset,
    PlayersSet,
    RangeComparison,
    RenderType,
    SourceComparison,
    Target,
    Tellraw,
)
from mc_interpreter.sinks import Chat, Level, Log, NullChat


def wrap_i32(value: int) -> int:
    """Wrap an arbitrary integer into the signed 32-bit range."""
    return (value + 2**31) % 2**32 - 2**31


def _truncating_divmod(dividend: int, divisor: int) -> tuple[int, int]:
    """Quotient rounded toward zero and the remainder taking the dividend's sign."""
    quotient = abs(dividend) // abs(divisor)
    if (dividend < 0) != (divisor < 0):
        quotient = -quotient
    return quotient, dividend - divisor * quotient


_OPERATIONS: dict[OperationType, Callable[[int, int], tuple[int, int]]] = {
    OperationType.ADDITION: lambda t, s: (wrap_i32(t + s), s),
    OperationType.SUBTRACTION: lambda t, s: (wrap_i32(t - s), s),
    OperationType.MULTIPLICATION: lambda t, s: (wrap_i32(t * s), s),
    OperationType.DIVISION: lambda t, s: (wrap_i32(_truncating_divmod(t, s)[0]), s),
    OperationType.MODULUS: lambda t, s: (wrap_i32(_truncating_divmod(t, s)[1]), s),
    OperationType.ASSIGN: lambda t, s: (s, s),
    OperationType.MIN: lambda t, s: (min(t, s), s),
    OperationType.MAX: lambda t, s: (max(t, s), s),
    OperationType.SWAP: lambda t, s: (s, t),
}

_DIVIDING = frozenset({OperationType.DIVISION, OperationType.MODULUS})

_COMPARISONS: dict[ComparisonOperator, Callable[[int, int], bool]] = {
    ComparisonOperator.LESS: operator.lt,
    ComparisonOperator.LESS_EQUAL: operator.le,
    ComparisonOperator.EQUAL: operator.eq,
    ComparisonOperator.GREATER: operator.gt,
    ComparisonOperator.GREATER_EQUAL: operator.ge,
}


@dataclass(slots=True)
class Objective:
    display_name: str
    render_type: RenderType = RenderType.INTEGER
    criteria: Criteria = Criteria.DUMMY
    data: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class Player:
    name: str


class Game:
    """Holds scoreboard state and executes commands against it.

    Every user-visible outcome, success or failure, is reported through ``log``;
    a failing command leaves the state untouched. ``tellraw`` messages go to
    ``chat``. Entity selectors are not resolved: any command that would need to
    resolve one raises :class:`UnsupportedTargetError` before changing state.
    """

    def __init__(
        self,
        log: Log,
        chat: Chat | None = None,
        *,
        datapack: Datapack | None = None,
        max_function_depth: int = 64,
        logger: logging.Logger | None = None,
    ) -> None:
        self.objectives: dict[str, Objective] = {}
        self.displays: dict[DisplaySlot, str | None] = {}
        self.players: dict[str, Player] = {}
        self.datapack = datapack
        self._log = log
        self._chat = chat or NullChat()
        self._max_function_depth = max_function_depth
        self._function_depth = 0
        self._logger = logger or logging.getLogger("mc_interpreter.game")

        self._handlers: dict[type, Callable[[Any], None]] = {
            ObjectivesAdd: self._objectives_add,
            ObjectivesList: self._objectives_list,
            ObjectivesModify: self._objectives_modify,
            ObjectivesRemove: self._objectives_remove,
            ObjectivesSetDisplay: self._objectives_set_display,
            PlayersAdd: self._players_add,
            PlayersEnable: self._players_enable,
            PlayersGet: self._players_get,
            PlayersList: self._players_list,
            PlayersOperation: self._players_operation,
            PlayersRemove: self._players_remove,
            PlayersReset: self._players_reset,
            PlayersSet: self._players_set,
            FunctionCommand: self._function,
            RangeComparison: self._execute_if_matches,
            SourceComparison: self._execute_if_compare,
            Tellraw: self._tellraw,
        }

    def add_player(self, name: str) -> Player:
        player = Player(name=name)
        self.players[name] = player
        return player

    def resolve_target(self, target: Target) -> list[str]:
        if isinstance(target, PlayerName):
            return [target.name]
        raise UnsupportedTargetError(lower_target(target))

    def execute(self, command: Command) -> None:
        handler = self._handlers.get(type(command))
        if handler is None:
            self._fail(f"Unsupported command: {type(command).__name__}")
            return
        self._logger.debug("command_executed", extra={"command_type": type(command).__name__})
        handler(command)

    def _info(self, message: str) -> None:
        self._log.log(Level.INFO, message)

    def _fail(self, message: str) -> None:
        self._log.log(Level.FAIL, message)

    def _require_objective(self, name: str) -> Objective | None:
        objective = self.objectives.get(name)
        if objective is None:
            self._fail(f"Unknown scoreboard objective '{name}'")
        return objective

    # scoreboard objectives

    def _objectives_add(self, command: ObjectivesAdd) -> None:
        if command.objective in self.objectives:
            self._fail("An objective already exists by that name")
            return
        display_name = command.display_name if command.display_name is not None else command.objective
        self.objectives[command.objective] = Objective(display_name=display_name, criteria=command.criteria)
        self._info(f"Created new objective [{display_name}]")

    def _objectives_list(self, command: ObjectivesList) -> None:
        if not self.objectives:
            self._info("There are no objectives")
            return
        names = " ".join(f"[{objective.display_name}]" for objective in self.objectives.values())
        self._info(f"There are {len(self.objectives)} objectives: {names}")

    def _objectives_modify(self, command: ObjectivesModify) -> None:
        objective = self._require_objective(command.objective)
        if objective is None:
            return

        modification = command.modification
        if isinstance(modification, DisplayNameModification):
            if objective.display_name != modification.display_name:
                objective.display_name = modification.display_name
                self._info(f"Changed objective {command.objective} display name to [{modification.display_name}]")
            return

        if objective.render_type != modification.render_type:
            objective.render_type = modification.render_type
            self._info(f"Changed objective [{objective.display_name}] render type")

    def _objectives_remove(self, command: ObjectivesRemove) -> None:
        objective = self.objectives.pop(command.objective, None)
        if objective is None:
            self._fail(f"Unknown scoreboard objective '{command.objective}'")
            return
        for slot, shown in self.displays.items():
            if shown == command.objective:
                self.displays[slot] = None
        self._info(f"Removed objective [{objective.display_name}]")

    def _objectives_set_display(self, command: ObjectivesSetDisplay) -> None:
        objective = self._require_objective(command.objective)
        if objective is None:
            return
        if self.displays.get(command.slot) == command.objective:
            self._fail("Nothing changed. That display slot is already showing that objective")
            return
        self.displays[command.slot] = command.objective
        self._info(f"Set display slot {command.slot.value} to show objective {objective.display_name}")

    # scoreboard players

    def _players_add(self, command: PlayersAdd) -> None:
        players = self.resolve_target(command.target)
        objective = self._require_objective(command.objective)
        if objective is None:
            return
        for player in players:
            score = wrap_i32(objective.data.get(player, 0) + command.score)
            objective.data[player] = score
            self._info(f"Added {command.score} to [{objective.display_name}] for {player} (now {score})")

    def _players_remove(self, command: PlayersRemove) -> None:
        players = self.resolve_target(command.target)
        objective = self._require_objective(command.objective)
        if objective is None:
            return
        for player in players:
            score = wrap_i32(objective.data.get(player, 0) - command.score)
            objective.data[player] = score
            self._info(f"Removed {command.score} from [{objective.display_name}] for {player} (now {score})")

    def _players_set(self, command: PlayersSet) -> None:
        players = self.resolve_target(command.target)
        objective = self._require_objective(command.objective)
        if objective is None:
            return
        for player in players:
            objective.data[player] = command.score
            self._info(f"Set [{objective.display_name}] for {player} to {command.score}")

    def _players_get(self, command: PlayersGet) -> None:
        players = self.resolve_target(command.target)
        objective = self._require_objective(command.objective)
        if objective is None:
            return
        for player in players:
            score = objective.data.get(player)
            if score is None:
                self._fail(f"Can't get value of {command.objective} for {player}; none is set")
            else:
                self._info(f"{player} has {score} [{objective.display_name}]")

    def _players_reset(self, command: PlayersReset) -> None:
        players = self.resolve_target(command.target)
        objective = self._require_objective(command.objective)
        if objective is None:
            return
        for player in players:
            objective.data.pop(player, None)
            self._info(f"Reset score {command.objective} for {player}")

    def _players_enable(self, command: PlayersEnable) -> None:
        self.resolve_target(command.target)
        if self._require_objective(command.objective) is None:
            return
        # dummy is the only criteria, so nothing here is a trigger objective
        self._fail("You can only enable trigger-objectives")

    def _players_list(self, command: PlayersList) -> None:
        if command.target is None:
            tracked = dict.fromkeys(self.players)
            for objective in self.objectives.values():
                tracked.update(dict.fromkeys(objective.data))
            if not tracked:
                self._info("There are no tracked entities")
                return
            names = " ".join(f"[{name}]" for name in tracked)
            self._info(f"There are {len(tracked)} tracked entities: {names}")
            return

        for player in self.resolve_target(command.target):
            scores = [
                (objective.display_name, objective.data[player])
                for objective in self.objectives.values()
                if player in objective.data
            ]
            if not scores:
                self._info(f"{player} has no scores")
                continue
            self._info(f"{player} has {len(scores)} scores:")
            for display_name, score in scores:
                self._info(f"[{display_name}]: {score}")

    def _players_operation(self, command: PlayersOperation) -> None:
        targets = self.resolve_target(command.target)
        sources = self.resolve_target(command.source)
        target_objective = self._require_objective(command.target_objective)
        if target_objective is None:
            return
        source_objective = self._require_objective(command.source_objective)
        if source_objective is None:
            return

        apply = _OPERATIONS[command.operation]
        for target in targets:
            for source in sources:
                target_score = target_objective.data.get(target, 0)
                source_score = source_objective.data.get(source, 0)
                if source_score == 0 and command.operation in _DIVIDING:
                    self._fail("Can't divide by zero")
                    return
                new_target, new_source = apply(target_score, source_score)
                # target last so "x obj += x obj" keeps the target's result
                source_objective.data[source] = new_source
                target_objective.data[target] = new_target
                self._info(f"Set [{target_objective.display_name}] for {target} to {new_target}")

    # function / execute / tellraw

    def _function(self, command: FunctionCommand) -> None:
        if self.datapack is None:
            self._fail("No datapack is loaded")
            return
        function = self.datapack.find(command.identifier)
        if function is None:
            self._fail(f"Unknown function '{command.identifier}'")
            return
        if self._function_depth >= self._max_function_depth:
            self._fail(f"Maximum function call depth of {self._max_function_depth} exceeded in '{command.identifier}'")
            return

        self._function_depth += 1
        try:
            for nested in function.commands:
                self.execute(nested)
        finally:
            self._function_depth -= 1

    def _execute_if_matches(self, command: RangeComparison) -> None:
        players = self.resolve_target(command.target)
        objective = self._require_objective(command.target_objective)
        if objective is None:
            return
        score = objective.data.get(players[0])
        if score is not None and command.interval.contains(score):
            self.execute(command.command)

    def _execute_if_compare(self, command: SourceComparison) -> None:
        targets = self.resolve_target(command.target)
        sources = self.resolve_target(command.source)
        target_objective = self._require_objective(command.target_objective)
        if target_objective is None:
            return
        source_objective = self._require_objective(command.source_objective)
        if source_objective is None:
            return

        target_score = target_objective.data.get(targets[0])
        source_score = source_objective.data.get(sources[0])
        if target_score is None or source_score is None:
            return
        if _COMPARISONS[command.comparison](target_score, source_score):
            self.execute(command.command)

    def _tellraw(self, command: Tellraw) -> None:
        self._chat.tell(self.resolve_target(command.target), command.message)
