"""
The Game class will be the entrypoint into the domain layer for the service layer (and for whatever draws the board).
It is responsible for orchestrating everything around a single turn: selecting a piece, attempting the move,
keeping the move list and the clock, and labelling how the game ended.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Self

from src.chess.board import Board
from src.chess.clock import TurnClock
from src.chess.history import MoveHistory
from src.chess.moves import Move, MoveRecord
from src.chess.pieces import Color, PieceType
from src.chess.position import PositionState
from src.chess.square import Square
from src.core.config import get_settings
from src.core.exceptions import GameStateError
from src.core.models import GameModel

logger = logging.getLogger(__name__)


class Status(Enum):
    IN_PROGRESS = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAW_INSUFFICIENT_MATERIAL = auto()
    TIMEOUT = auto()


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    history: MoveHistory
    clock: TurnClock
    status: Status = Status.IN_PROGRESS
    # NOTE: the selection only lives as long as this object: it is never persisted.
    selected: Optional[Square] = field(default=None)

    @classmethod
    def new_game(
        cls, starting_fen: Optional[str] = None, clock_seconds: Optional[float] = None
    ) -> Self:
        """Start a new game from the standard starting position (or the given one)."""
        board = Board.from_fen(starting_fen)
        seconds = (
            clock_seconds if clock_seconds is not None else get_settings().clock_seconds
        )
        return cls(
            board=board,
            history=MoveHistory(),
            clock=TurnClock.with_time(seconds, active_color=board.side_to_move),
        )

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a Game from the information the Service layer actually has"""

        # Validation
        status_name = model.status.replace(" ", "_").upper()
        if status_name not in Status.__members__:
            raise GameStateError(
                f"Invalid status code: {model.status!r}. \nPick one from {','.join([status.name.lower() for status in Status])}"
            )

        board = Board(PositionState.from_dict(model.board_state))
        history = MoveHistory.from_list(model.move_history)
        clock = TurnClock.from_dict(model.clock, active_color=board.side_to_move)
        if board.game_over:
            clock.pause()
        return cls(board, history, clock, Status[status_name])

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        winner = self.winner
        return GameModel(
            current_fen=self.board.to_fen(),
            board_state=self.board.get_state().to_dict(),
            move_history=self.history.to_list(),
            clock=self.clock.to_dict(),
            status=self.status.name.lower().replace("_", " "),
            winner=winner.name.lower() if winner is not None else None,
        )

    @property
    def winner(self) -> Optional[Color]:
        """
        Only a checkmate or a flag fall has a winner.
        After checkmate, the side that has to move just got mated, so the opponent must be the winner.
        """
        if self.status == Status.CHECKMATE:
            return self.board.side_to_move.opponent
        if self.status == Status.TIMEOUT and self.clock.flagged is not None:
            return self.clock.flagged.opponent
        return None

    # --- INPUT COLLABORATOR: two-phase move ---
    def select_piece(self, square: Square) -> bool:
        """Pick up a piece. Only pieces of the side to move can be selected."""
        piece = self.board.piece_at(square)
        if self.board.game_over or piece is None or piece.color != self.board.side_to_move:
            return False
        self.selected = square
        return True

    def attempt_move(
        self, square: Square, promote_to: PieceType = PieceType.QUEEN
    ) -> bool:
        """
        Drop the selected piece on the square.
        ----

        Returns False (and nothing changes on the board) when nothing is selected or the move is not legal.
        The selection is cleared either way.
        """
        if self.selected is None:
            return False

        piece = self.board.piece_at(self.selected)
        self.selected = None
        if piece is None:
            return False

        move = Move.build(self.board, piece, square)
        if not self.board.is_legal(move):
            logger.debug("Rejected %s -> %s", piece, square.to_algebraic())
            return False

        record = self.board.execute(move, promote_to)
        self._record_move(record)
        return True

    # --- RENDERING COLLABORATOR ---
    def legal_destinations(self, square: Optional[Square] = None) -> list[Square]:
        """Move guide for the given square (defaults to the selected piece)"""
        square = square if square is not None else self.selected
        if square is None:
            return []
        return self.board.legal_destinations(square)

    @property
    def checked_king_square(self) -> Optional[Square]:
        """Square of the king of the side to move, if that king is attacked (to highlight it)"""
        color = self.board.side_to_move
        if not self.board.is_in_check(color):
            return None
        return self.board.find_king(color).square

    @property
    def last_move(self) -> Optional[MoveRecord]:
        return self.history.last

    # --- CLOCK COLLABORATOR ---
    def tick_clock(self, seconds: float) -> None:
        """Let time pass for the player to move. A flag fall ends the game through the board's game-over channel."""
        if self.board.game_over:
            return
        flagged = self.clock.tick(seconds)
        if flagged is not None:
            logger.info("%s ran out of time", flagged.name.lower())
            self.board.end_game()
            self.status = Status.TIMEOUT

    # --- PRIVATE HELPERS ---
    def _record_move(self, record: MoveRecord) -> None:
        self.history.add(record)
        self.clock.switch()
        if record.game_over:
            self.clock.pause()
            self.status = self._final_status()
            logger.info("Game over after %s: %s", record.description, self.status.name.lower())

    def _final_status(self) -> Status:
        """
        The board only says the game is over. Tell the outcomes apart here:
        no legal move left + king attacked -> checkmate, no legal move left otherwise -> stalemate
        """
        color = self.board.side_to_move
        if self.board.is_terminal():
            return Status.CHECKMATE if self.board.is_in_check(color) else Status.STALEMATE
        return Status.DRAW_INSUFFICIENT_MATERIAL
