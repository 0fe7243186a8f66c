"""
Geometry/Base movement and path-blocking rules

Key idea: Use strategy pattern to define the movement shape of each piece type.
Every rule is a plain function that receives the board it should look at explicitly.

Whether a move is actually legal (turn order, own king left in check, etc.) is decided later by the Board.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.chess.pieces import PIECE_TO_FEN, Color, Piece, PieceType
from src.chess.square import Square, Vector


class Board(Protocol):
    """Just the parts the movement strategies need"""

    @property
    def en_passant_target(self) -> Optional[Square]: ...

    def piece_at(self, square: Square) -> Optional[Piece]: ...


@dataclass(frozen=True)
class Move:
    """
    Snapshot of an attempted transition.
    ---

    Built right before testing legality and never reused after the board changed.
    `captured` is whatever stood on the destination when the move was built.
    NOTE: en passant captures a piece that is NOT on the destination. The Board resolves that while executing.
    """

    piece: Piece
    origin: Square
    destination: Square
    captured: Optional[Piece] = None

    @classmethod
    def build(cls, board: Board, piece: Piece, destination: Square) -> Self:
        return cls(
            piece=piece,
            origin=piece.square,
            destination=destination,
            captured=board.piece_at(destination),
        )

    @property
    def delta(self) -> Vector:
        return (
            self.destination.col - self.origin.col,
            self.destination.row - self.origin.row,
        )

    def is_castling(self) -> bool:
        """King moving sideways by two squares: the only way a king moves that far"""
        dc, dr = self.delta
        return self.piece.type == PieceType.KING and abs(dc) == 2 and dr == 0

    def is_pawn_double_step(self) -> bool:
        dc, dr = self.delta
        return self.piece.type == PieceType.PAWN and dc == 0 and abs(dr) == 2


# --- DIRECTIONS ---
STRAIGHTS: list[Vector] = [(0, 1), (0, -1), (1, 0), (-1, 0)]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
KNIGHT_JUMPS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_STEPS: list[Vector] = STRAIGHTS + DIAGONALS


# --- GEOMETRY RULES ---
def pawn_geometry(piece: Piece, destination: Square, board: Board) -> bool:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - It can move by two as long as it has not moved yet (both squares must be empty)
    - takes diagonally: only onto an enemy piece, or onto the en passant target square.
    """
    forward = piece.color.forward
    dc = destination.col - piece.square.col
    dr = destination.row - piece.square.row

    if dc == 0 and dr == forward:
        return board.piece_at(destination) is None

    if dc == 0 and dr == 2 * forward and not piece.has_moved:
        middle = piece.square.offset(0, forward)
        return board.piece_at(middle) is None and board.piece_at(destination) is None

    if abs(dc) == 1 and dr == forward:
        if piece.is_enemy_of(board.piece_at(destination)):
            return True
        return is_en_passant_capture(piece, destination, board)

    return False


def is_en_passant_capture(piece: Piece, destination: Square, board: Board) -> bool:
    """
    The diagonal step lands on the recorded en passant target (which is empty) and the pawn that just passed
    stands right next to ours: same column as the destination, same row our pawn is standing on.
    """
    if board.en_passant_target is None or destination != board.en_passant_target:
        return False
    if board.piece_at(destination) is not None:
        return False
    passed_pawn = board.piece_at(en_passant_victim_square(piece, destination))
    return (
        passed_pawn is not None
        and passed_pawn.type == PieceType.PAWN
        and passed_pawn.color != piece.color
    )


def en_passant_victim_square(piece: Piece, destination: Square) -> Square:
    """The square of the pawn taken en passant: one rank behind the destination, seen from the capturing pawn."""
    return Square(destination.col, destination.row - piece.color.forward)


def knight_geometry(piece: Piece, destination: Square, board: Board) -> bool:
    """Knights always move such that (|delta_col|, |delta_row|) is (1, 2) or (2, 1)"""
    dc = abs(destination.col - piece.square.col)
    dr = abs(destination.row - piece.square.row)
    return (dc, dr) in {(1, 2), (2, 1)}


def bishop_geometry(piece: Piece, destination: Square, board: Board) -> bool:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    dc = abs(destination.col - piece.square.col)
    dr = abs(destination.row - piece.square.row)
    return dc == dr and dc > 0


def rook_geometry(piece: Piece, destination: Square, board: Board) -> bool:
    """Rooks move either horizontally or vertically (exactly one of the two coordinates changes)"""
    dc = destination.col - piece.square.col
    dr = destination.row - piece.square.row
    return (dc == 0) != (dr == 0)


def queen_geometry(piece: Piece, destination: Square, board: Board) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return rook_geometry(piece, destination, board) or bishop_geometry(
        piece, destination, board
    )


def king_geometry(piece: Piece, destination: Square, board: Board) -> bool:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (see castling.py), as it depends on the attack engine.
    """
    dc = abs(destination.col - piece.square.col)
    dr = abs(destination.row - piece.square.row)
    return dc <= 1 and dr <= 1 and (dc, dr) != (0, 0)


# -- STRATEGY PATTERN: GEOMETRY RULES ---
GeometryFn = Callable[[Piece, Square, Board], bool]
GEOMETRY_RULES: dict[PieceType, GeometryFn] = {
    PieceType.PAWN: pawn_geometry,
    PieceType.KNIGHT: knight_geometry,
    PieceType.BISHOP: bishop_geometry,
    PieceType.ROOK: rook_geometry,
    PieceType.QUEEN: queen_geometry,
    PieceType.KING: king_geometry,
}


def is_geometrically_valid(piece: Piece, destination: Square, board: Board) -> bool:
    """Does the movement shape of the piece allow going from its square to the destination (ignoring obstruction)?"""
    if not destination.is_within_bounds() or destination == piece.square:
        return False
    return GEOMETRY_RULES[piece.type](piece, destination, board)


# --- PATH BLOCKING RULES ---
def squares_between(origin: Square, destination: Square) -> list[Square]:
    """
    Find the squares strictly in between two squares on the same line (rank, file or diagonal)

    Walks from the origin towards the destination. Returns an empty list if the squares do not share a line.
    """
    dc = destination.col - origin.col
    dr = destination.row - origin.row
    if not (dc == 0 or dr == 0 or abs(dc) == abs(dr)):
        return []

    step: Vector = ((dc > 0) - (dc < 0), (dr > 0) - (dr < 0))
    squares_found: list[Square] = []
    square = origin.offset(*step)
    while square != destination:
        squares_found.append(square)
        square = square.offset(*step)
    return squares_found


def sliding_path_blocked(piece: Piece, destination: Square, board: Board) -> bool:
    """Raycasting along the line of the move: blocked as soon as one intermediate square is occupied"""
    return any(
        board.piece_at(square) is not None
        for square in squares_between(piece.square, destination)
    )


def pawn_path_blocked(piece: Piece, destination: Square, board: Board) -> bool:
    """Pawn pushes cannot go through or onto pieces. Diagonal takes are never 'blocked'."""
    if destination.col != piece.square.col:
        return False
    if abs(destination.row - piece.square.row) == 2:
        middle = piece.square.offset(0, piece.color.forward)
        return (
            board.piece_at(middle) is not None
            or board.piece_at(destination) is not None
        )
    return board.piece_at(destination) is not None


def never_blocked(piece: Piece, destination: Square, board: Board) -> bool:
    """Knights jump, kings only step (their castling path is checked separately)"""
    return False


# -- STRATEGY PATTERN: BLOCKING RULES ---
BlockingFn = Callable[[Piece, Square, Board], bool]
BLOCKING_RULES: dict[PieceType, BlockingFn] = {
    PieceType.PAWN: pawn_path_blocked,
    PieceType.KNIGHT: never_blocked,
    PieceType.BISHOP: sliding_path_blocked,
    PieceType.ROOK: sliding_path_blocked,
    PieceType.QUEEN: sliding_path_blocked,
    PieceType.KING: never_blocked,
}


def is_path_blocked(piece: Piece, destination: Square, board: Board) -> bool:
    return BLOCKING_RULES[piece.type](piece, destination, board)


def can_reach(piece: Piece, destination: Square, board: Board) -> bool:
    """Convenience method: geometrically valid AND nothing in the way. (What 'attacking a square' boils down to)"""
    return is_geometrically_valid(piece, destination, board) and not is_path_blocked(
        piece, destination, board
    )


# --- DESCRIPTION (move list / history) ---
def describe_move(
    move: Move, is_capture: bool, promoted_to: Optional[PieceType] = None
) -> str:
    """
    Long algebraic description of a completed move.

    examples:
    * "e2-e4": pawn push
    * "Ng1-f3": knight move
    * "Bc4xf7": bishop takes on f7
    * "e7-e8=Q": pawn promotes to a queen
    * "O-O" / "O-O-O": castling king side / queen side
    """
    if move.is_castling():
        return "O-O" if move.destination.col > move.origin.col else "O-O-O"

    piece_char = "" if move.piece.type == PieceType.PAWN else PIECE_TO_FEN[move.piece.type].upper()
    separator = "x" if is_capture else "-"
    promotion = f"={PIECE_TO_FEN[promoted_to].upper()}" if promoted_to else ""
    return f"{piece_char}{move.origin.to_algebraic()}{separator}{move.destination.to_algebraic()}{promotion}"


def is_promotion_square(color: Color, square: Square) -> bool:
    """Pawns promote on the opponent's back rank"""
    return square.row == color.opponent.back_rank


@dataclass(frozen=True)
class MoveRecord:
    """What the Board emits for every completed move (read by the move list, the sound and the clock)"""

    description: str
    is_capture: bool
    game_over: bool

    def to_dict(self) -> dict[str, str | bool]:
        return {
            "description": self.description,
            "is_capture": self.is_capture,
            "game_over": self.game_over,
        }

    @classmethod
    def from_dict(cls, data: dict[str, str | bool]) -> Self:
        return cls(
            description=str(data["description"]),
            is_capture=bool(data["is_capture"]),
            game_over=bool(data["game_over"]),
        )
