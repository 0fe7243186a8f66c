"""
Representation of a single position: everything needed to continue a game from here.

Used to hand the state of the Board to (and take it back from) the persistence collaborator.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Self

from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square


@dataclass
class PositionState:
    """
    Complete state of the Board.
    ----

    * pieces: every piece on the board (incl. whether it has moved already: needed for castling / pawn double steps)
    * side_to_move: the color that makes the next move
    * en_passant_target: the square a pawn just skipped with its double step (only right after that move)
    * game_over: no more moves are accepted

    NOTE: nothing else is needed. Any structure the Board keeps on top of this can be derived from it.
    """

    pieces: list[Piece] = field(default_factory=list)
    side_to_move: Color = Color.WHITE
    en_passant_target: Optional[Square] = None
    game_over: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible structure (names instead of enums, lists instead of squares)"""
        return {
            "pieces": [
                {
                    "type": piece.type.name.lower(),
                    "color": piece.color.name.lower(),
                    "square": [piece.square.col, piece.square.row],
                    "has_moved": piece.has_moved,
                }
                for piece in self.pieces
            ],
            "side_to_move": self.side_to_move.name.lower(),
            "en_passant_target": (
                [self.en_passant_target.col, self.en_passant_target.row]
                if self.en_passant_target is not None
                else None
            ),
            "game_over": self.game_over,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Reverse operation of `to_dict()`"""
        pieces = [
            Piece(
                type=PieceType[piece_data["type"].upper()],
                color=Color[piece_data["color"].upper()],
                square=Square(*piece_data["square"]),
                has_moved=piece_data["has_moved"],
            )
            for piece_data in data["pieces"]
        ]
        en_passant = data.get("en_passant_target")
        return cls(
            pieces=pieces,
            side_to_move=Color[data["side_to_move"].upper()],
            en_passant_target=Square(*en_passant) if en_passant is not None else None,
            game_over=data.get("game_over", False),
        )
