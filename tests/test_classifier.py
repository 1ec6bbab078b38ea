from __future__ import annotations

import pytest

from hearthwatch.core.classifier import (
    FirstPlayer,
    MulliganChoice,
    MulliganWaiting,
    PlayerEntered,
    PlayState,
    TeamId,
    TurnStartMarker,
    TurnValue,
    ZoneChange,
    classify,
    split_lines,
)
from hearthwatch.core.models import PlayStatus, Team


def test_zone_change_line_extracts_card_team_and_zone() -> None:
    assert classify("name=Fireball id=42 ... to FRIENDLY HAND") == [
        ZoneChange(card_name="Fireball", card_id=42, team=Team.FRIENDLY, zone="HAND")
    ]


def test_zone_change_card_name_stops_at_first_id() -> None:
    line = "[name=The Coin id=68 zone=SETASIDE zonePos=0 cardId=GAME_005 player=2] zone from  to OPPOSING HAND"
    (record,) = classify(line)
    assert record == ZoneChange(card_name="The Coin", card_id=68, team=Team.OPPOSING, zone="HAND")


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("TAG_CHANGE Entity=GameEntity tag=TURN value=7", TurnValue(turn=7)),
        ("TAG_CHANGE Entity=Alice tag=TURN_START value=1", TurnStartMarker(entity_name="Alice")),
        ("Entity=Bob tag=PLAYSTATE value=PLAYING", PlayerEntered(entity_name="Bob")),
        ("Entity=Alice tag=TEAM_ID value=2", TeamId(entity_name="Alice", team_id=2)),
        ("Entity=The Innkeeper tag=FIRST_PLAYER value=1", FirstPlayer(entity_name="The Innkeeper")),
        ("id=2 ChoiceType=MULLIGAN Cancelable=False CountMin=0 CountMax=1", MulliganChoice(team_id=2)),
        ("Entity=[id=2 name=Alice] tag=MULLIGAN_STATE value=WAITING", MulliganWaiting(entity_name="Alice")),
        ("Entity=Alice tag=PLAYSTATE value=TIED", PlayState(entity_name="Alice", status=PlayStatus.TIED)),
    ],
)
def test_each_pattern_yields_its_record(line: str, expected: object) -> None:
    assert classify(line) == [expected]


def test_game_entity_turn_start_is_flagged() -> None:
    (record,) = classify("TAG_CHANGE Entity=GameEntity tag=TURN_START value=1")
    assert isinstance(record, TurnStartMarker)
    assert record.is_game_entity


def test_line_matching_two_patterns_yields_both_in_table_order() -> None:
    records = classify("name=Fireball id=42 to FRIENDLY HAND GameEntity tag=TURN value=3")
    assert [type(r) for r in records] == [ZoneChange, TurnValue]
    assert records[1] == TurnValue(turn=3)


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   ",
        "D 20:14:02.1 LoadingScreen.OnSceneLoaded() - prevMode=HUB currMode=GAMEPLAY",
        "Entity=Alice tag=TEAM_ID value=two",
        "Entity=Alice tag=TEAM_ID value=٣",  # Arabic-Indic digit three
        "id=x ChoiceType=MULLIGAN Cancelable=False CountMin=0 CountMax=1",
        "name=Fireball id=abc to FRIENDLY HAND",
        "Entity=Alice tag=PLAYSTATE value=LOSING",
        "name=Fireball id=" + "9" * 5000 + " to FRIENDLY HAND",
        "Entity=Alice tag=TEAM_ID value=" + "1" * 5000,
        "GameEntity tag=TURN value=" + "7" * 4301,
        "��\x00garbage",
    ],
)
def test_unmatched_or_malformed_lines_yield_nothing(line: str) -> None:
    assert classify(line) == []


def test_trailing_carriage_return_does_not_defeat_end_anchor() -> None:
    assert classify("Entity=Alice tag=PLAYSTATE value=WON\r") == [
        PlayState(entity_name="Alice", status=PlayStatus.WON)
    ]


def test_split_lines_uses_configured_break() -> None:
    assert split_lines("a\r\nb\r\n", "\r\n") == ["a", "b", ""]
    assert split_lines("a|b", "|") == ["a", "b"]
    with pytest.raises(ValueError):
        split_lines("a", "")


def test_oversized_number_drops_only_that_match() -> None:
    line = "name=Fireball id=" + "4" * 5000 + " to FRIENDLY HAND GameEntity tag=TURN value=3"
    assert classify(line) == [TurnValue(turn=3)]
