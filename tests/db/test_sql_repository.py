"""Unit tests for src/db/sql_repository.py"""

from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from src.chess.game import Game
from src.chess.square import Square
from src.core.shared_types import Status
from src.db.sql_repository import GameModel, SQLGameRepository


@pytest.fixture
def model() -> GameModel:
    """GameModel of a game that has been going on for a move"""
    game = Game.new_game(clock_seconds=300)
    game.select_piece(Square.from_algebraic("e2"))
    game.attempt_move(Square.from_algebraic("e4"))
    return game.to_model()


def test_create_game(db_session_repo: Session, model: GameModel) -> None:
    """Conversion from a GameModel to DBGame for a new entry to the database."""
    repo = SQLGameRepository(db_session_repo)
    record_in_db, _ = repo.create_game(model)
    assert isinstance(record_in_db, GameModel)
    assert record_in_db == model
    assert record_in_db.move_history == [
        {"description": "e2-e4", "is_capture": False, "game_over": False}
    ]


def test_get_game_by_id(db_session_repo: Session, model: GameModel) -> None:
    """Create a game, then fetch it from db."""
    repo = SQLGameRepository(db_session_repo)
    expected_game, game_id = repo.create_game(model)
    game_found = repo.get_game(game_id)
    assert isinstance(game_found, GameModel)
    assert game_found == expected_game


def test_stored_game_can_be_continued(db_session_repo: Session, model: GameModel) -> None:
    """The stored board state holds everything needed to go on playing"""
    repo = SQLGameRepository(db_session_repo)
    _, game_id = repo.create_game(model)
    stored = repo.get_game(game_id)
    assert stored is not None

    game = Game.from_model(stored)
    assert game.board.to_fen() == model.current_fen
    assert game.select_piece(Square.from_algebraic("e7"))


def test_get_unknown_game(db_session_repo: Session, model: GameModel) -> None:
    """
    Should return None if ID does not match anything in database.

    NOTE with an empty database, any id is a valid test case.
    """
    repo = SQLGameRepository(db_session_repo)
    assert repo.get_game(uuid4()) is None

    # Now do it with creating a game, but retrieving from the wrong ID
    repo.create_game(model)
    assert repo.get_game(uuid4()) is None


def test_update_game(db_session_repo: Session, model: GameModel) -> None:
    repo = SQLGameRepository(db_session_repo)
    _, game_id = repo.create_game(model)

    game = Game.from_model(model)
    game.tick_clock(1000)
    updated_model = game.to_model()
    assert updated_model.status == Status.TIMEOUT

    updated = repo.update_game(game_id, updated_model)
    assert updated == updated_model
    assert repo.get_game(game_id) == updated_model


def test_update_unknown_game(db_session_repo: Session, model: GameModel) -> None:
    repo = SQLGameRepository(db_session_repo)
    assert repo.update_game(uuid4(), model) is None


def test_delete_game(db_session_repo: Session, model: GameModel) -> None:
    repo = SQLGameRepository(db_session_repo)
    _, game_id = repo.create_game(model)

    deleted = repo.delete_game(game_id)
    assert deleted == model
    assert repo.get_game(game_id) is None
    assert repo.delete_game(game_id) is None


def test_sessions_share_the_database(db_session_shared: Session, model: GameModel) -> None:
    """A second session (as a second request would use) sees what the first one stored"""
    _, game_id = SQLGameRepository(db_session_shared).create_game(model)
    other_repo = SQLGameRepository(db_session_shared)
    assert other_repo.get_game(game_id) == model
