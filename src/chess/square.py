"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8. Columns and rows are both indexed 0-7.
BOARD_DIMENSIONS = (8, 8)

Vector = tuple[int, int]


@dataclass(frozen=True)
class Square:
    """
    (column, row) coordinate.

    NOTE: row 0 is the top of the board as seen by White, i.e. Black's back rank (rank 8 in algebraic notation).
    Row 7 is White's back rank (rank 1). White pawns therefore move towards row 0.
    """

    col: int
    row: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' -> (0, 0), 'h1' -> (7, 7), 'e4' -> (4, 4)"""
        col = ord(sq[0]) - ord("a")
        row = BOARD_DIMENSIONS[1] - int(sq[1:])
        return cls(col, row)

    def to_algebraic(self) -> str:
        return f"{chr(self.col + ord('a'))}{BOARD_DIMENSIONS[1] - self.row}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.col < BOARD_DIMENSIONS[0]) and (
            0 <= self.row < BOARD_DIMENSIONS[1]
        )

    def offset(self, dc: int, dr: int) -> Square:
        """The square found by stepping along a vector. Can be off the board: check with `is_within_bounds()`"""
        return Square(self.col + dc, self.row + dr)


def all_squares() -> list[Square]:
    """Every square on the board, row by row starting from the top (a8, b8, ..., h1)"""
    return [
        Square(col, row)
        for row in range(BOARD_DIMENSIONS[1])
        for col in range(BOARD_DIMENSIONS[0])
    ]
