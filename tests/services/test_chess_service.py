"""Unit tests for src/services/chess_service.py"""

from typing import Generator
from uuid import UUID, uuid4

import pytest

from src.core.exceptions import InvalidRequestError, RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Color, PieceType, Status
from src.services.chess_service import (
    ChessService,
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
    TickClockRequest,
)

# --- MOCK DEPENDENCIES ----
MOCK_FEN_STATE = "4k3/8/8/8/8/8/8/R3K2R w KQ - 8 24"


class MockRepository:
    """Mock the GameRepository using a dictionary of game models."""

    def __init__(self) -> None:
        self._games: dict[UUID, GameModel] = {}
        self.updates = 0

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        game_id = uuid4()
        self._games[game_id] = game
        return game, game_id

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        return self._games.get(game_id)

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Add new info to existing record."""
        if game_id not in self._games:
            return None
        self._games[game_id] = game
        self.updates += 1
        return game

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        return self._games.pop(game_id, None)

    def clear(self) -> None:
        """Clear the repository (useful in between tests)"""
        self._games.clear()


@pytest.fixture
def mock_repository() -> Generator[MockRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository()
    try:
        yield repo
    finally:
        repo.clear()


@pytest.fixture
def service(mock_repository: MockRepository) -> ChessService:
    return ChessService(mock_repository)


def make_move(service: ChessService, game_id: UUID, from_square: str, to_square: str) -> MoveResponse:
    return service.make_move(
        MoveRequest(game_id=game_id, from_square=from_square, to_square=to_square)
    )


# --- SERVICE - CREATE NEW GAME ----
def test_create_a_new_game(service: ChessService, mock_repository: MockRepository) -> None:
    """Check that new game is created, persisted in repo, and return has the appropriate information."""
    response = service.create_new_game(CreateGameRequest(clock_minutes=5))

    assert isinstance(response, GameResponse)
    assert mock_repository.get_game(response.game_id) is not None
    assert response.fen_state == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq -"
    assert len(response.pieces) == 32
    assert response.pieces["e1"] == "K"
    assert response.pieces["d8"] == "q"
    assert response.side_to_move == Color.WHITE
    assert response.status == Status.IN_PROGRESS
    assert response.winner is None
    assert response.checked_king is None
    assert response.move_history == []
    assert response.clock == {Color.WHITE: "05:00", Color.BLACK: "05:00"}


def test_create_a_game_from_a_position(service: ChessService) -> None:
    response = service.create_new_game(CreateGameRequest(starting_fen=MOCK_FEN_STATE))
    assert response.fen_state == "4k3/8/8/8/8/8/8/R3K2R w KQ -"
    assert set(response.pieces) == {"e8", "a1", "e1", "h1"}


def test_position_without_both_kings_is_never_stored(
    service: ChessService, mock_repository: MockRepository
) -> None:
    """The request is rejected before the service (or the repository) ever sees it"""
    with pytest.raises(InvalidRequestError):
        service.create_new_game(CreateGameRequest(starting_fen="8/8/8/8/8/8/8/4K3 w - -"))
    assert mock_repository._games == {}


# --- SERVICE - GET GAME ----
def test_get_game_state(service: ChessService) -> None:
    created = service.create_new_game(CreateGameRequest())
    response = service.get_game_state(GetGameRequest(game_id=created.game_id))
    assert response == created


def test_get_unknown_game(service: ChessService) -> None:
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=uuid4()))


# --- SERVICE - LEGAL MOVES ----
def test_legal_moves(service: ChessService) -> None:
    created = service.create_new_game(CreateGameRequest())
    response = service.legal_moves(LegalMovesRequest(game_id=created.game_id, square="g1"))
    assert isinstance(response, LegalMovesResponse)
    assert sorted(response.legal_moves) == ["f3", "h3"]

    empty = service.legal_moves(LegalMovesRequest(game_id=created.game_id, square="e4"))
    assert empty.legal_moves == []


def test_legal_moves_include_castling(service: ChessService) -> None:
    created = service.create_new_game(CreateGameRequest(starting_fen=MOCK_FEN_STATE))
    response = service.legal_moves(LegalMovesRequest(game_id=created.game_id, square="e1"))
    assert {"c1", "g1"} <= set(response.legal_moves)


# --- SERVICE - MAKE MOVE ----
def test_make_a_move(service: ChessService, mock_repository: MockRepository) -> None:
    created = service.create_new_game(CreateGameRequest())
    response = make_move(service, created.game_id, "e2", "e4")

    assert response.success
    assert response.move == "e2-e4"
    assert not response.is_capture
    assert response.game.side_to_move == Color.BLACK
    assert response.game.move_history == [" 1. e2-e4"]
    assert "e4" in response.game.pieces and "e2" not in response.game.pieces

    stored = mock_repository.get_game(created.game_id)
    assert stored is not None
    assert stored.current_fen == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3"


@pytest.mark.parametrize(
    "from_square, to_square",
    [
        ("e2", "e5"),  # too far
        ("e7", "e5"),  # not your turn
        ("e4", "e5"),  # nothing there
        ("e1", "e2"),  # own piece
    ],
)
def test_illegal_move_is_not_stored(
    service: ChessService, mock_repository: MockRepository, from_square: str, to_square: str
) -> None:
    created = service.create_new_game(CreateGameRequest())
    response = make_move(service, created.game_id, from_square, to_square)

    assert not response.success
    assert response.move is None
    assert response.game.fen_state == created.fen_state
    assert mock_repository.updates == 0


def test_castling_through_the_service(service: ChessService) -> None:
    created = service.create_new_game(CreateGameRequest(starting_fen=MOCK_FEN_STATE))
    response = make_move(service, created.game_id, "e1", "g1")
    assert response.success
    assert response.move == "O-O"
    assert response.game.pieces["f1"] == "R"
    assert response.game.pieces["g1"] == "K"


def test_promotion_through_the_service(service: ChessService) -> None:
    created = service.create_new_game(CreateGameRequest(starting_fen="8/P6k/8/8/8/8/8/K7 w - -"))
    response = service.make_move(
        MoveRequest(
            game_id=created.game_id,
            from_square="a7",
            to_square="a8",
            promote_to=PieceType.KNIGHT,
        )
    )
    assert response.success
    assert response.move == "a7-a8=N"
    assert response.game.pieces["a8"] == "N"


def test_playing_until_checkmate(service: ChessService) -> None:
    created = service.create_new_game(CreateGameRequest())
    for from_square, to_square in [("f2", "f3"), ("e7", "e5"), ("g2", "g4"), ("d8", "h4")]:
        assert make_move(service, created.game_id, from_square, to_square).success

    response = service.get_game_state(GetGameRequest(game_id=created.game_id))
    assert response.status == Status.CHECKMATE
    assert response.winner == Color.BLACK
    assert response.checked_king == "e1"
    assert response.move_history == [" 1. f2-f3      e7-e5", " 2. g2-g4      Qd8-h4"]

    # the game is over: nothing is accepted anymore
    assert not make_move(service, created.game_id, "a2", "a3").success


# --- SERVICE - CLOCK ----
def test_tick_clock(service: ChessService) -> None:
    created = service.create_new_game(CreateGameRequest(clock_minutes=1))
    response = service.tick_clock(TickClockRequest(game_id=created.game_id, seconds=15))
    assert response.clock == {Color.WHITE: "00:45", Color.BLACK: "01:00"}
    assert response.status == Status.IN_PROGRESS

    response = service.tick_clock(TickClockRequest(game_id=created.game_id, seconds=50))
    assert response.status == Status.TIMEOUT
    assert response.winner == Color.BLACK
    assert not make_move(service, created.game_id, "e2", "e4").success


# --- SERVICE - DELETE GAME ----
def test_delete_game(service: ChessService, mock_repository: MockRepository) -> None:
    created = service.create_new_game(CreateGameRequest())
    service.delete_game(DeleteGameRequest(game_id=created.game_id))
    assert mock_repository.get_game(created.game_id) is None
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=created.game_id))
