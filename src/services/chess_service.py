"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from uuid import UUID

from src.api.models import (
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
from src.chess.clock import TurnClock
from src.chess.game import Game
from src.chess.pieces import PieceType as DomainPieceType
from src.chess.square import Square
from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Color, Status
from src.db.repository import GameRepository

logger = logging.getLogger(__name__)


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(self, repository: GameRepository) -> None:
        self.repo = repository

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Set up a new board (standard starting position unless a position is given)."""

        # Use info in CreateGameRequest to create a new Game, and convert into GameModel
        clock_seconds = (
            request.clock_minutes * 60 if request.clock_minutes is not None else None
        )
        new_game = Game.new_game(
            starting_fen=request.starting_fen, clock_seconds=clock_seconds
        )
        created_game_data = new_game.to_model()

        # Store the GameModel in the repository
        _, game_id = self.repo.create_game(created_game_data)
        logger.info("Created game %s from %r", game_id, created_game_data.current_fen)

        # Return a GameResponse
        return self._create_game_response(game_id, new_game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by whatever draws the board (and runs the clock).
        """
        game = Game.from_model(self._fetch_game(request.game_id))
        return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Move guide: the squares the piece on the requested square may go to."""

        # Retrieve persisted GameModel from repository, and create a new Game instance from it
        game = Game.from_model(self._fetch_game(request.game_id))

        # Compute legal destinations
        destinations = game.legal_destinations(Square.from_algebraic(request.square))
        return LegalMovesResponse(
            game_id=request.game_id,
            square=request.square,
            legal_moves=[square.to_algebraic() for square in destinations],
        )

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """
        Make a move attempt.
        ----
        Selecting and dropping the piece happen in one request. An illegal attempt is not an error:
        the response says it failed and nothing gets stored.
        """

        # Retrieve persisted GameModel from repository
        stored_model = self._fetch_game(request.game_id)

        # Create a new Game instance from the retrieved GameModel
        game = Game.from_model(stored_model)

        # Attempt the move
        promote_to = (
            DomainPieceType[request.promote_to.name]
            if request.promote_to is not None
            else DomainPieceType.QUEEN
        )
        success = game.select_piece(
            Square.from_algebraic(request.from_square)
        ) and game.attempt_move(Square.from_algebraic(request.to_square), promote_to)

        if not success:
            logger.debug(
                "Game %s: move %s-%s rejected",
                request.game_id,
                request.from_square,
                request.to_square,
            )
            return MoveResponse(
                success=False, game=self._create_game_response(request.game_id, game)
            )

        # Capture updated state in GameModel, and store in repository
        self.repo.update_game(request.game_id, game.to_model())

        # Return a MoveResponse
        record = game.last_move
        return MoveResponse(
            success=True,
            move=record.description if record else None,
            is_capture=record.is_capture if record else False,
            game=self._create_game_response(request.game_id, game),
        )

    def tick_clock(self, request: TickClockRequest) -> GameResponse:
        """Let the time of the player to move run down. Running out of time ends the game."""
        game = Game.from_model(self._fetch_game(request.game_id))
        game.tick_clock(request.seconds)
        self.repo.update_game(request.game_id, game.to_model())
        return self._create_game_response(request.game_id, game)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        self.repo.delete_game(request.game_id)

    # -- Internal helpers --
    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        """Convert a Game into a GameResponse (for game with given ID.)"""
        model = game.to_model()
        checked_king = game.checked_king_square
        return GameResponse(
            game_id=game_id,
            fen_state=model.current_fen,
            pieces={
                piece.square.to_algebraic(): piece.to_fen()
                for piece in game.board.pieces
            },
            side_to_move=Color[game.board.side_to_move.name],
            status=Status(model.status),
            winner=Color(model.winner) if model.winner else None,
            checked_king=checked_king.to_algebraic() if checked_king else None,
            move_history=game.history.formatted_lines(),
            clock={
                Color[color.name]: TurnClock.format_time(seconds)
                for color, seconds in game.clock.remaining.items()
            },
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
