"""Render command models back into their canonical text form."""

from __future__ import annotations

from mc_interpreter.models import (
    Bounded,
    Command,
    DisplayNameModification,
    FunctionCommand,
    Interval,
    LeftUnbounded,
    ObjectivesAdd,
    ObjectivesList,
    ObjectivesModify,
    ObjectivesRemove,
    ObjectivesSetDisplay,
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
    RenderTypeModification,
    RightUnbounded,
    Selector,
    SourceComparison,
    Target,
    Tellraw,
    Value,
)


def lower(command: Command) -> str:
    """Return the text that :func:`mc_interpreter.parser.parse_line` parses back into ``command``."""
    if isinstance(command, (ObjectivesAdd, ObjectivesList, ObjectivesModify, ObjectivesRemove, ObjectivesSetDisplay)):
        return f"scoreboard objectives {_objectives(command)}"
    if isinstance(
        command,
        (PlayersAdd, PlayersEnable, PlayersGet, PlayersList, PlayersOperation, PlayersRemove, PlayersReset, PlayersSet),
    ):
        return f"scoreboard players {_players(command)}"
    if isinstance(command, FunctionCommand):
        return f"function {command.identifier}"
    if isinstance(command, (SourceComparison, RangeComparison)):
        return _execute(command)
    if isinstance(command, Tellraw):
        return f'tellraw {target(command.target)} "{command.message}"'
    raise TypeError(f"Cannot lower {type(command).__name__}")


def _objectives(command) -> str:
    if isinstance(command, ObjectivesAdd):
        text = f"add {command.objective} {command.criteria.value}"
        if command.display_name is not None:
            text += f' "{command.display_name}"'
        return text
    if isinstance(command, ObjectivesList):
        return "list"
    if isinstance(command, ObjectivesModify):
        modification = command.modification
        if isinstance(modification, DisplayNameModification):
            return f'modify {command.objective} displayname "{modification.display_name}"'
        return f"modify {command.objective} rendertype {modification.render_type.value}"
    if isinstance(command, ObjectivesRemove):
        return f"remove {command.objective}"
    return f"setdisplay {command.slot.value} {command.objective}"


def _players(command) -> str:
    if isinstance(command, PlayersAdd):
        return f"add {target(command.target)} {command.objective} {command.score}"
    if isinstance(command, PlayersEnable):
        return f"enable {target(command.target)} {command.objective}"
    if isinstance(command, PlayersGet):
        return f"get {target(command.target)} {command.objective}"
    if isinstance(command, PlayersList):
        if command.target is None:
            return "list"
        return f"list {target(command.target)}"
    if isinstance(command, PlayersOperation):
        return (
            f"operation {target(command.target)} {command.target_objective} "
            f"{command.operation.value} {target(command.source)} {command.source_objective}"
        )
    if isinstance(command, PlayersRemove):
        return f"remove {target(command.target)} {command.objective} {command.score}"
    if isinstance(command, PlayersReset):
        return f"reset {target(command.target)} {command.objective}"
    return f"set {target(command.target)} {command.objective} {command.score}"


def _execute(command: SourceComparison | RangeComparison) -> str:
    condition = f"execute if score {target(command.target)} {command.target_objective}"
    if isinstance(command, RangeComparison):
        condition += f" matches {interval(command.interval)}"
    else:
        condition += f" {command.comparison.value} {target(command.source)} {command.source_objective}"
    return f"{condition} run {lower(command.command)}"


def target(value: Target) -> str:
    if isinstance(value, PlayerName):
        return value.name
    if isinstance(value, Selector):
        return f"@{value.variable.value}"
    raise TypeError(f"Cannot lower target {value!r}")


def interval(value: Interval) -> str:
    if isinstance(value, Value):
        return str(value.value)
    if isinstance(value, Bounded):
        return f"{value.minimum}..{value.maximum}"
    if isinstance(value, LeftUnbounded):
        return f"..{value.maximum}"
    if isinstance(value, RightUnbounded):
        return f"{value.minimum}.."
    raise TypeError(f"Cannot lower interval {value!r}")
