"""Defines the types of chess pieces"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Self

from src.chess.square import Square


class PieceType(Enum):
    PAWN = auto()
    KNIGHT = auto()
    BISHOP = auto()
    ROOK = auto()
    QUEEN = auto()
    KING = auto()


class Color(Enum):
    WHITE = auto()
    BLACK = auto()

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """Row direction in which the pawns of this color advance (White moves UP the board, towards row 0)"""
        return -1 if self == Color.WHITE else 1

    @property
    def back_rank(self) -> int:
        """The row the pieces of this color start on (and the row the opponent's pawns promote on)"""
        return 7 if self == Color.WHITE else 0


FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
]

# Pieces that can still force a mate on their own. While a side holds any of these, material is sufficient.
MATING_MATERIAL: frozenset[PieceType] = frozenset(
    {PieceType.QUEEN, PieceType.ROOK, PieceType.PAWN}
)


@dataclass(frozen=True)
class Piece:
    """
    A piece is a value: moving, promoting, or losing castling rights creates a new Piece.
    The Board owns every piece, no piece knows about the board it stands on.
    """

    type: PieceType
    color: Color
    square: Square
    has_moved: bool = False

    @classmethod
    def from_fen(cls, character: str, square: Square) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color, square)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    def moved_to(self, square: Square) -> Self:
        """The same piece after a successful move: flags it as moved for good"""
        return replace(self, square=square, has_moved=True)

    def promoted_to(self, new_type: PieceType) -> Self:
        return replace(self, type=new_type)

    def is_enemy_of(self, other: "Piece | None") -> bool:
        return other is not None and other.color != self.color
