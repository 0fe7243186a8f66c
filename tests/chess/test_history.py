"""Unit tests for /src/chess/history.py"""

from src.chess.history import MoveHistory
from src.chess.moves import MoveRecord


def record(description: str, is_capture: bool = False, game_over: bool = False) -> MoveRecord:
    return MoveRecord(description, is_capture, game_over)


def test_empty_history() -> None:
    history = MoveHistory()
    assert history.last is None
    assert history.descriptions == []
    assert history.formatted_lines() == []


def test_formatted_lines() -> None:
    history = MoveHistory()
    for description in ["e2-e4", "e7-e5", "Ng1-f3", "Nb8-c6", "Bf1-c4"]:
        history.add(record(description))

    assert history.formatted_lines() == [
        " 1. e2-e4      e7-e5",
        " 2. Ng1-f3     Nb8-c6",
        " 3. Bf1-c4",
    ]
    assert history.last == record("Bf1-c4")


def test_long_games_keep_their_columns() -> None:
    history = MoveHistory([record("Ra1-a2"), record("Ra8-a7")] * 10)
    lines = history.formatted_lines()
    assert len(lines) == 10
    assert lines[-1] == "10. Ra1-a2     Ra8-a7"


def test_list_roundtrip() -> None:
    history = MoveHistory([record("e2-e4"), record("d7-d5"), record("e4xd5", is_capture=True)])
    data = history.to_list()
    assert data[2] == {"description": "e4xd5", "is_capture": True, "game_over": False}
    assert MoveHistory.from_list(data) == history
