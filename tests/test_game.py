from __future__ import annotations

import pytest

from mc_interpreter.datapack import Datapack, parse_function_text
from mc_interpreter.errors import UnsupportedTargetError
from mc_interpreter.game import Game, wrap_i32
from mc_interpreter.models import (
    DisplaySlot,
    FunctionIdentifier,
    ObjectivesModify,
    RenderType,
    RenderTypeModification,
    Selector,
    SelectorVariable,
    Tellraw,
)
from mc_interpreter.parser import parse_line
from mc_interpreter.sinks import Level

INFO = Level.INFO
FAIL = Level.FAIL


class LogSpy:
    def __init__(self) -> None:
        self.messages: list[tuple[Level, str]] = []

    def log(self, level: Level, message: str) -> None:
        self.messages.append((level, message))

    def clear(self) -> None:
        self.messages.clear()


class ChatSpy:
    def __init__(self) -> None:
        self.messages: list[tuple[list[str], str]] = []

    def tell(self, players: list[str], message: str) -> None:
        self.messages.append((players, message))


def _game(**kwargs) -> tuple[Game, LogSpy]:
    log = LogSpy()
    return Game(log, **kwargs), log


def _run(game: Game, *lines: str) -> None:
    for line in lines:
        game.execute(parse_line(line))


def _operate(game: Game, log: LogSpy, target: int, source: int, symbol: str) -> None:
    _run(
        game,
        'scoreboard objectives add obj dummy "display name"',
        f"scoreboard players set target obj {target}",
        f"scoreboard players set source obj {source}",
    )
    log.clear()
    _run(game, f"scoreboard players operation target obj {symbol} source obj")


# scoreboard objectives


def test_objectives_add_uses_key_as_default_display_name() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives add obj dummy")

    objective = game.objectives["obj"]
    assert objective.display_name == "obj"
    assert objective.render_type == RenderType.INTEGER
    assert objective.data == {}
    assert log.messages == [(INFO, "Created new objective [obj]")]


def test_objectives_add_twice_fails_without_touching_existing_objective() -> None:
    game, log = _game()
    _run(
        game,
        'scoreboard objectives add obj dummy "First"',
        "scoreboard objectives modify obj rendertype hearts",
        "scoreboard players set p obj 3",
    )
    log.clear()

    _run(game, 'scoreboard objectives add obj dummy "Second"')

    objective = game.objectives["obj"]
    assert objective.display_name == "First"
    assert objective.render_type == RenderType.HEARTS
    assert objective.data == {"p": 3}
    assert log.messages == [(FAIL, "An objective already exists by that name")]


def test_objectives_add_twice_scenario() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives add obj dummy", "scoreboard objectives add obj dummy")

    assert log.messages == [
        (INFO, "Created new objective [obj]"),
        (FAIL, "An objective already exists by that name"),
    ]
    assert game.objectives["obj"].display_name == "obj"


def test_objectives_list() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives list")
    assert log.messages == [(INFO, "There are no objectives")]

    _run(
        game,
        'scoreboard objectives add a dummy "Alpha"',
        'scoreboard objectives add b dummy "Beta"',
        "scoreboard objectives add c dummy",
    )
    log.clear()
    _run(game, "scoreboard objectives list")

    level, message = log.messages[0]
    header, _, names = message.partition(": ")
    assert level == INFO
    assert header == "There are 3 objectives"
    assert set(names.split(" ")) == {"[Alpha]", "[Beta]", "[c]"}


def test_objectives_modify_display_name() -> None:
    game, log = _game()
    _run(game, 'scoreboard objectives add obj dummy "display name"')
    log.clear()

    _run(game, 'scoreboard objectives modify obj displayname "new name"')
    _run(game, 'scoreboard objectives modify obj displayname "new name"')

    assert game.objectives["obj"].display_name == "new name"
    assert log.messages == [(INFO, "Changed objective obj display name to [new name]")]


def test_objectives_modify_render_type_is_idempotent() -> None:
    game, log = _game()
    _run(game, 'scoreboard objectives add obj dummy "display name"')
    log.clear()

    modify = ObjectivesModify("obj", RenderTypeModification(RenderType.HEARTS))
    game.execute(modify)
    game.execute(modify)
    _run(game, "scoreboard objectives modify obj rendertype hearts")

    assert game.objectives["obj"].render_type == RenderType.HEARTS
    assert log.messages == [(INFO, "Changed objective [display name] render type")]


def test_objectives_modify_unchanged_integer_logs_nothing() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives add obj dummy")
    log.clear()

    _run(game, "scoreboard objectives modify obj rendertype integer")

    assert log.messages == []


def test_objectives_modify_unknown_objective() -> None:
    game, log = _game()
    _run(
        game,
        'scoreboard objectives modify obj displayname "x"',
        "scoreboard objectives modify obj rendertype hearts",
    )

    assert log.messages == [
        (FAIL, "Unknown scoreboard objective 'obj'"),
        (FAIL, "Unknown scoreboard objective 'obj'"),
    ]


def test_objectives_remove() -> None:
    game, log = _game()
    _run(
        game,
        'scoreboard objectives add obj dummy "display name"',
        "scoreboard objectives setdisplay sidebar obj",
    )
    log.clear()

    _run(game, "scoreboard objectives remove obj", "scoreboard objectives remove obj")

    assert "obj" not in game.objectives
    assert game.displays[DisplaySlot.SIDEBAR] is None
    assert log.messages == [
        (INFO, "Removed objective [display name]"),
        (FAIL, "Unknown scoreboard objective 'obj'"),
    ]


def test_objectives_setdisplay_twice_scenario() -> None:
    game, log = _game()
    _run(game, 'scoreboard objectives add obj dummy "display name"')
    log.clear()

    _run(game, "scoreboard objectives setdisplay sidebar obj", "scoreboard objectives setdisplay sidebar obj")

    assert game.displays[DisplaySlot.SIDEBAR] == "obj"
    assert log.messages == [
        (INFO, "Set display slot sidebar to show objective display name"),
        (FAIL, "Nothing changed. That display slot is already showing that objective"),
    ]


def test_objectives_setdisplay_replaces_other_objective() -> None:
    game, log = _game()
    _run(
        game,
        "scoreboard objectives add a dummy",
        "scoreboard objectives add b dummy",
        "scoreboard objectives setdisplay belowName a",
        "scoreboard objectives setdisplay belowName b",
    )

    assert game.displays[DisplaySlot.BELOW_NAME] == "b"
    assert log.messages[-1] == (INFO, "Set display slot belowName to show objective b")


def test_objectives_setdisplay_unknown_objective() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives setdisplay list obj")

    assert DisplaySlot.LIST not in game.displays
    assert log.messages == [(FAIL, "Unknown scoreboard objective 'obj'")]


# scoreboard players


def test_players_add_accumulates_scenario() -> None:
    game, log = _game()
    _run(game, 'scoreboard objectives add obj dummy "Name"')
    log.clear()

    _run(game, "scoreboard players add p obj 11", "scoreboard players add p obj 4")

    assert game.objectives["obj"].data["p"] == 15
    assert log.messages == [
        (INFO, "Added 11 to [Name] for p (now 11)"),
        (INFO, "Added 4 to [Name] for p (now 15)"),
    ]


def test_players_add_does_not_require_registered_player() -> None:
    game, _ = _game()
    _run(game, "scoreboard objectives add obj dummy", "scoreboard players add ghost obj 2")

    assert game.players == {}
    assert game.objectives["obj"].data == {"ghost": 2}


def test_players_remove() -> None:
    game, log = _game()
    _run(game, 'scoreboard objectives add obj dummy "display name"')
    log.clear()

    _run(game, "scoreboard players remove p obj 5", "scoreboard players remove p obj 3")

    assert game.objectives["obj"].data["p"] == -8
    assert log.messages == [
        (INFO, "Removed 5 from [display name] for p (now -5)"),
        (INFO, "Removed 3 from [display name] for p (now -8)"),
    ]


def test_players_set_on_missing_objective_scenario() -> None:
    game, log = _game()
    _run(game, "scoreboard players set p obj 5")

    assert "obj" not in game.objectives
    assert log.messages == [(FAIL, "Unknown scoreboard objective 'obj'")]


def test_players_add_and_remove_on_missing_objective() -> None:
    game, log = _game()
    _run(game, "scoreboard players add p obj 5", "scoreboard players remove p obj 5")

    assert log.messages == [
        (FAIL, "Unknown scoreboard objective 'obj'"),
        (FAIL, "Unknown scoreboard objective 'obj'"),
    ]


def test_players_set() -> None:
    game, log = _game()
    _run(game, 'scoreboard objectives add obj dummy "display name"', "scoreboard players set player obj -23")

    assert game.objectives["obj"].data["player"] == -23
    assert log.messages[-1] == (INFO, "Set [display name] for player to -23")


def test_score_arithmetic_wraps_around() -> None:
    game, log = _game()
    _run(
        game,
        "scoreboard objectives add obj dummy",
        "scoreboard players set p obj 2147483647",
        "scoreboard players add p obj 1",
    )
    assert game.objectives["obj"].data["p"] == -(2**31)
    assert log.messages[-1] == (INFO, "Added 1 to [obj] for p (now -2147483648)")

    _run(game, "scoreboard players remove p obj 2")
    assert game.objectives["obj"].data["p"] == 2**31 - 2

    for _ in range(3):
        _run(game, "scoreboard players add p obj 2147483647")
    assert game.objectives["obj"].data["p"] == wrap_i32(2**31 - 2 + 3 * (2**31 - 1))


def test_players_get() -> None:
    game, log = _game()
    _run(
        game,
        'scoreboard objectives add obj dummy "Kills"',
        "scoreboard players get p obj",
        "scoreboard players set p obj 4",
        "scoreboard players get p obj",
        "scoreboard players get p missing",
    )

    assert log.messages[1] == (FAIL, "Can't get value of obj for p; none is set")
    assert log.messages[3] == (INFO, "p has 4 [Kills]")
    assert log.messages[4] == (FAIL, "Unknown scoreboard objective 'missing'")


def test_players_reset() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives add obj dummy", "scoreboard players set p obj 4")
    log.clear()

    _run(game, "scoreboard players reset p obj")

    assert "p" not in game.objectives["obj"].data
    assert log.messages == [(INFO, "Reset score obj for p")]


def test_players_enable_rejects_dummy_objectives() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives add obj dummy")
    log.clear()

    _run(game, "scoreboard players enable p obj", "scoreboard players enable p other")

    assert log.messages == [
        (FAIL, "You can only enable trigger-objectives"),
        (FAIL, "Unknown scoreboard objective 'other'"),
    ]


def test_players_list() -> None:
    game, log = _game()
    _run(game, "scoreboard players list")
    assert log.messages == [(INFO, "There are no tracked entities")]

    game.add_player("alex")
    _run(
        game,
        'scoreboard objectives add a dummy "Alpha"',
        'scoreboard objectives add b dummy "Beta"',
        "scoreboard players set steve a 1",
        "scoreboard players set steve b 2",
    )
    log.clear()
    _run(game, "scoreboard players list", "scoreboard players list steve", "scoreboard players list alex")

    assert log.messages == [
        (INFO, "There are 2 tracked entities: [alex] [steve]"),
        (INFO, "steve has 2 scores:"),
        (INFO, "[Alpha]: 1"),
        (INFO, "[Beta]: 2"),
        (INFO, "alex has no scores"),
    ]


# scoreboard players operation


@pytest.mark.parametrize(
    ("target", "source", "symbol", "expected"),
    [
        (5, 3, "+=", 8),
        (7, 3, "-=", 4),
        (4, 3, "*=", 12),
        (12, 3, "/=", 4),
        (12, 5, "%=", 2),
        (12, -5, "=", -5),
        (12, -5, "<", -5),
        (-5, 12, "<", -5),
        (500, 12, ">", 500),
        (12, 500, ">", 500),
    ],
)
def test_operation_results(target: int, source: int, symbol: str, expected: int) -> None:
    game, log = _game()
    _operate(game, log, target, source, symbol)

    assert game.objectives["obj"].data["target"] == expected
    assert game.objectives["obj"].data["source"] == source
    assert log.messages == [(INFO, f"Set [display name] for target to {expected}")]


def test_operation_swap_changes_both_scores() -> None:
    game, log = _game()
    _operate(game, log, -5, 7, "><")

    assert game.objectives["obj"].data["target"] == 7
    assert game.objectives["obj"].data["source"] == -5
    assert log.messages == [(INFO, "Set [display name] for target to 7")]


def test_operation_max_scenario() -> None:
    game, log = _game()
    _operate(game, log, 12, 500, ">")

    assert game.objectives["obj"].data["target"] == 500
    assert game.objectives["obj"].data["source"] == 500
    assert log.messages == [(INFO, "Set [display name] for target to 500")]


@pytest.mark.parametrize(
    ("target", "source", "quotient", "remainder"),
    [
        (-7, 2, -3, -1),
        (7, -2, -3, 1),
        (-7, -2, 3, -1),
        (7, 2, 3, 1),
        (-6, 3, -2, 0),
    ],
)
def test_operation_division_truncates_toward_zero(target: int, source: int, quotient: int, remainder: int) -> None:
    game, log = _game()
    _operate(game, log, target, source, "/=")
    assert game.objectives["obj"].data["target"] == quotient

    game, log = _game()
    _operate(game, log, target, source, "%=")
    assert game.objectives["obj"].data["target"] == remainder


def test_operation_multiplication_and_division_wrap() -> None:
    game, log = _game()
    _operate(game, log, 65536, 65536, "*=")
    assert game.objectives["obj"].data["target"] == 0

    game, log = _game()
    _operate(game, log, -(2**31), -1, "/=")
    assert game.objectives["obj"].data["target"] == -(2**31)


@pytest.mark.parametrize("symbol", ["/=", "%="])
def test_operation_division_by_zero_fails_without_change(symbol: str) -> None:
    game, log = _game()
    _operate(game, log, 12, 0, symbol)

    assert game.objectives["obj"].data == {"target": 12, "source": 0}
    assert log.messages == [(FAIL, "Can't divide by zero")]


def test_operation_with_unset_scores_defaults_to_zero() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives add obj dummy", "scoreboard players set source obj 9")
    log.clear()

    _run(game, "scoreboard players operation target obj += source obj")

    assert game.objectives["obj"].data["target"] == 9
    assert log.messages == [(INFO, "Set [obj] for target to 9")]


def test_operation_on_the_same_score_keeps_target_result() -> None:
    game, _ = _game()
    _run(
        game,
        "scoreboard objectives add obj dummy",
        "scoreboard players set x obj 5",
        "scoreboard players operation x obj += x obj",
    )

    assert game.objectives["obj"].data["x"] == 10


def test_operation_across_objectives() -> None:
    game, log = _game()
    _run(
        game,
        'scoreboard objectives add a dummy "A"',
        'scoreboard objectives add b dummy "B"',
        "scoreboard players set t a 2",
        "scoreboard players set s b 40",
    )
    log.clear()

    _run(game, "scoreboard players operation t a *= s b")

    assert game.objectives["a"].data["t"] == 80
    assert game.objectives["b"].data["s"] == 40
    assert log.messages == [(INFO, "Set [A] for t to 80")]


def test_operation_unknown_objectives_checks_target_first() -> None:
    game, log = _game()
    _run(game, "scoreboard players operation t targetObj = s sourceObj")
    assert log.messages == [(FAIL, "Unknown scoreboard objective 'targetObj'")]

    _run(game, "scoreboard objectives add targetObj dummy")
    log.clear()
    _run(game, "scoreboard players operation t targetObj = s sourceObj")
    assert log.messages == [(FAIL, "Unknown scoreboard objective 'sourceObj'")]
    assert game.objectives["targetObj"].data == {}

    game, log = _game()
    _run(game, "scoreboard objectives add sourceObj dummy")
    log.clear()
    _run(game, "scoreboard players operation t targetObj = s sourceObj")
    assert log.messages == [(FAIL, "Unknown scoreboard objective 'targetObj'")]


# selectors


def test_selector_targets_are_not_resolved() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives add obj dummy")
    log.clear()

    for line in (
        "scoreboard players set @a obj 1",
        "scoreboard players add @p obj 1",
        "scoreboard players operation target obj += @s obj",
        "execute if score @r obj matches 1 run scoreboard objectives list",
    ):
        with pytest.raises(UnsupportedTargetError):
            _run(game, line)

    assert game.objectives["obj"].data == {}
    assert log.messages == []


# function


def _datapack() -> Datapack:
    return Datapack(
        name="test",
        functions=(
            parse_function_text(
                FunctionIdentifier("main", "fibonacci"),
                "# set up\nscoreboard objectives add obj dummy\n\nscoreboard players set player obj 7\n",
            ),
            parse_function_text(FunctionIdentifier("inc"), "scoreboard players add player obj 1"),
            parse_function_text(
                FunctionIdentifier("f", "loop"),
                "scoreboard players add player obj 1\nfunction loop:f",
            ),
        ),
    )


def test_function_runs_commands_in_order() -> None:
    game, log = _game(datapack=_datapack())
    _run(game, "function fibonacci:main", "function inc")

    assert game.objectives["obj"].data["player"] == 8
    assert log.messages == [
        (INFO, "Created new objective [obj]"),
        (INFO, "Set [obj] for player to 7"),
        (INFO, "Added 1 to [obj] for player (now 8)"),
    ]


def test_function_namespace_must_match_exactly() -> None:
    game, log = _game(datapack=_datapack())
    _run(game, "function main", "function other:inc")

    assert log.messages == [
        (FAIL, "Unknown function 'main'"),
        (FAIL, "Unknown function 'other:inc'"),
    ]


def test_function_without_datapack_fails() -> None:
    game, log = _game()
    _run(game, "function fibonacci:main")

    assert log.messages == [(FAIL, "No datapack is loaded")]


def test_recursive_function_stops_at_depth_limit() -> None:
    game, log = _game(datapack=_datapack(), max_function_depth=3)
    _run(game, "scoreboard objectives add obj dummy", "function loop:f", "function inc")

    assert game.objectives["obj"].data["player"] == 4
    assert (FAIL, "Maximum function call depth of 3 exceeded in 'loop:f'") in log.messages
    assert log.messages[-1] == (INFO, "Added 1 to [obj] for player (now 4)")


# execute if score


def _compare_match(game: Game, start_score: int, interval: str) -> None:
    _run(
        game,
        "scoreboard objectives add obj dummy",
        f"scoreboard players set player obj {start_score}",
        f"execute if score player obj matches {interval} run scoreboard players set player obj 7",
    )


@pytest.mark.parametrize(
    ("start_score", "interval", "expected"),
    [
        (-3, "-3..5", 7),
        (5, "-3..5", 7),
        (0, "-3..5", 7),
        (-20, "-3..5", -20),
        (6, "6", 7),
        (5, "6", 5),
        (-100, "..0", 7),
        (1, "..0", 1),
        (100, "50..", 7),
        (49, "50..", 49),
    ],
)
def test_execute_if_score_matches(start_score: int, interval: str, expected: int) -> None:
    game, _ = _game()
    _compare_match(game, start_score, interval)

    assert game.objectives["obj"].data["player"] == expected


def test_execute_if_matches_unknown_objective() -> None:
    game, log = _game()
    _run(game, "execute if score player obj matches 5 run scoreboard objectives list")

    assert log.messages == [(FAIL, "Unknown scoreboard objective 'obj'")]


def test_execute_if_matches_without_score_does_not_run() -> None:
    game, log = _game()
    _run(game, "scoreboard objectives add obj dummy")
    log.clear()

    _run(game, "execute if score player obj matches 0 run scoreboard players set player obj 10")

    assert "player" not in game.objectives["obj"].data
    assert log.messages == []


@pytest.mark.parametrize(
    ("symbol", "runs"),
    [("<", True), ("<=", True), ("=", False), (">", False), (">=", False)],
)
def test_execute_if_score_comparisons(symbol: str, runs: bool) -> None:
    game, _ = _game()
    _run(
        game,
        "scoreboard objectives add obj dummy",
        "scoreboard players set a obj 1",
        "scoreboard players set b obj 2",
        f"execute if score a obj {symbol} b obj run scoreboard players set a obj 99",
    )

    assert (game.objectives["obj"].data["a"] == 99) is runs


def test_execute_if_score_comparison_needs_both_scores_and_objectives() -> None:
    game, log = _game()
    _run(
        game,
        "scoreboard objectives add obj dummy",
        "scoreboard players set a obj 1",
        "execute if score a obj < b obj run scoreboard players set a obj 99",
        "execute if score a obj < b other run scoreboard players set a obj 99",
    )

    assert game.objectives["obj"].data["a"] == 1
    assert log.messages[-1] == (FAIL, "Unknown scoreboard objective 'other'")


def test_nested_execute_runs_innermost_command() -> None:
    game, _ = _game()
    _run(
        game,
        "scoreboard objectives add obj dummy",
        "scoreboard players set p obj 3",
        "execute if score p obj matches 1..5 run execute if score p obj matches 3 run scoreboard players add p obj 1",
    )

    assert game.objectives["obj"].data["p"] == 4


# tellraw and dispatch


def test_tellraw_sends_message_to_target() -> None:
    chat = ChatSpy()
    game, _ = _game(chat=chat)
    _run(game, "tellraw player \"it's a message!\"")

    assert chat.messages == [(["player"], "it's a message!")]


def test_tellraw_selector_is_unsupported() -> None:
    chat = ChatSpy()
    game, _ = _game(chat=chat)

    with pytest.raises(UnsupportedTargetError):
        game.execute(Tellraw(Selector(SelectorVariable.A), "hi"))
    assert chat.messages == []


def test_unknown_command_objects_are_reported() -> None:
    game, log = _game()
    game.execute(object())  # type: ignore[arg-type]

    assert log.messages == [(FAIL, "Unsupported command: object")]


def test_add_player_registers_player() -> None:
    game, _ = _game()
    player = game.add_player("steve")

    assert game.players == {"steve": player}
    assert player.name == "steve"
