"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW_INSUFFICIENT_MATERIAL = "draw insufficient material"
    TIMEOUT = "timeout"


# --- NOTE: same names as the domain enums in src/chess/pieces.py, but string valued so they can cross the boundary.
# --- Let the imports show which versions are used in what part of the code


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
