"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.chess.attacks import Board, is_in_check, is_king_in_check
from src.chess.moves import Move, squares_between
from src.chess.pieces import Piece, PieceType
from src.chess.square import Square


class CastlingSide(Enum):
    """Values represent their (lower case) encodings in FEN string."""

    KING_SIDE = "k"
    QUEEN_SIDE = "q"


@dataclass(frozen=True)
class CastlingColumns:
    """
    Store the columns where king/rook end up / rook starts from when castling.
    The row is always the king's own row.
    NOTE: the king always starts on column 4 (it moves by exactly two squares).
    """

    king_to: int
    rook_from: int
    rook_to: int


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingSide, CastlingColumns] = {
    CastlingSide.KING_SIDE: CastlingColumns(king_to=6, rook_from=7, rook_to=5),
    CastlingSide.QUEEN_SIDE: CastlingColumns(king_to=2, rook_from=0, rook_to=3),
}


def castling_side(king: Piece, destination: Square) -> Optional[CastlingSide]:
    """Which castling (if any) a king move to the destination would be"""
    if destination.row != king.square.row:
        return None
    if abs(destination.col - king.square.col) != 2:
        return None
    return next(
        (
            side
            for side, columns in CASTLING_RULES.items()
            if columns.king_to == destination.col
        ),
        None,
    )


def rook_squares(king: Piece, side: CastlingSide) -> tuple[Square, Square]:
    """Where the rook starts from / ends up for the given castling of this king"""
    columns = CASTLING_RULES[side]
    return Square(columns.rook_from, king.square.row), Square(
        columns.rook_to, king.square.row
    )


def is_valid_castle(king: Piece, destination: Square, board: Board) -> bool:
    """
    Is the king move to the destination a castle that is currently allowed?
    ---

    **you are allowed to castle if**

    * Neither the king nor the rook of that side have moved yet.
    * There is no piece in between the king and the rook.
    * You are not currently put in check (you cannot castle out of check).
    * The square the king passes over is not under attack.

    NOTE: whether the king is safe on its final square is checked by the regular legality gate of the Board.
    """
    if king.type != PieceType.KING or king.has_moved:
        return False

    side = castling_side(king, destination)
    if side is None:
        return False

    rook_from, _ = rook_squares(king, side)
    rook = board.piece_at(rook_from)
    if (
        rook is None
        or rook.type != PieceType.ROOK
        or rook.color != king.color
        or rook.has_moved
    ):
        return False

    if any(
        board.piece_at(square) is not None
        for square in squares_between(king.square, rook_from)
    ):
        return False

    if is_in_check(board, king.color):
        return False

    step = 1 if destination.col > king.square.col else -1
    transit = king.square.offset(step, 0)
    return not is_king_in_check(board, Move.build(board, king, transit))
