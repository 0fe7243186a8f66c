"""
Attack / check detection

Answers "is this king attacked?" for real and for hypothetical positions, and decides whether the side to move
has run out of legal moves (checkmate or stalemate).

Every function receives the board explicitly. Nothing in here keeps board state around between calls.
"""

from dataclasses import replace
from typing import Optional, Protocol

from src.chess.moves import (
    DIAGONALS,
    KING_STEPS,
    KNIGHT_JUMPS,
    STRAIGHTS,
    Move,
    can_reach,
    en_passant_victim_square,
    is_en_passant_capture,
)
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square, Vector, all_squares


class Board(Protocol):
    """Just the parts the attack engine needs"""

    @property
    def en_passant_target(self) -> Optional[Square]: ...

    @property
    def pieces(self) -> list[Piece]: ...

    def piece_at(self, square: Square) -> Optional[Piece]: ...

    def find_king(self, color: Color) -> Piece: ...


ROOK_LIKE = frozenset({PieceType.ROOK, PieceType.QUEEN})
BISHOP_LIKE = frozenset({PieceType.BISHOP, PieceType.QUEEN})


class PositionAfterMove:
    """
    Read-only view of the board as if the move had been played.
    ---

    * the origin is empty
    * the mover stands on the destination (whatever stood there is gone)
    * when the move is an en passant capture, the pawn that passed is gone as well

    The real board is never touched.
    """

    def __init__(self, board: Board, move: Move) -> None:
        self._board = board
        self._mover = replace(move.piece, square=move.destination)
        self._vacated: set[Square] = {move.origin}
        if move.piece.type == PieceType.PAWN and is_en_passant_capture(
            move.piece, move.destination, board
        ):
            self._vacated.add(en_passant_victim_square(move.piece, move.destination))

    @property
    def en_passant_target(self) -> Optional[Square]:
        return self._board.en_passant_target

    def piece_at(self, square: Square) -> Optional[Piece]:
        # NOTE: destination first. For a 'null move' (king standing still) origin == destination.
        if square == self._mover.square:
            return self._mover
        if square in self._vacated:
            return None
        return self._board.piece_at(square)


# --- ATTACK VECTORS ---
def _ray_hits(
    position: PositionAfterMove,
    king_square: Square,
    king_color: Color,
    direction: Vector,
    attacker_types: frozenset[PieceType],
) -> bool:
    """
    Raycasting for attacks.
    ---

    Walk outward from the king until the edge of the board. The first occupied square decides:
    attacked if it holds an enemy piece of one of the given types, otherwise that piece shields the king.
    """
    square = king_square
    for _ in range(max(BOARD_DIMENSIONS) - 1):
        square = square.offset(*direction)
        if not square.is_within_bounds():
            return False
        piece_found = position.piece_at(square)
        if piece_found is not None:
            return piece_found.color != king_color and piece_found.type in attacker_types
    return False


def _single_step_hits(
    position: PositionAfterMove,
    king_square: Square,
    king_color: Color,
    deltas: list[Vector],
    attacker_type: PieceType,
) -> bool:
    """Equivalent for knights, pawns and kings: they only attack the squares a single step/jump away"""
    for dc, dr in deltas:
        square = king_square.offset(dc, dr)
        if not square.is_within_bounds():
            continue
        piece_found = position.piece_at(square)
        if (
            piece_found is not None
            and piece_found.color != king_color
            and piece_found.type == attacker_type
        ):
            return True
    return False


def _pawn_attack_deltas(king_color: Color) -> list[Vector]:
    """
    Pawns take diagonally forward. An enemy pawn can only hit the king from the two squares diagonally
    'in front' of the king, seen from the king's own side of the board.
    """
    forward = king_color.forward
    return [(1, forward), (-1, forward)]


def is_king_in_check(board: Board, move: Move) -> bool:
    """
    Would the mover's own king be attacked after playing the move?
    ----

    The king's square is the destination if the king itself is moving, else its current square.
    All eight attack vectors are checked on the position after the move:
    4 straight rays (rook/queen), 4 diagonal rays (bishop/queen), knight jumps, pawn takes and the enemy king.

    Raises KingNotFoundError if the mover's side has no king (see Board.find_king).
    """
    color = move.piece.color
    king = board.find_king(color)
    king_square = move.destination if move.origin == king.square else king.square
    position = PositionAfterMove(board, move)

    return (
        any(
            _ray_hits(position, king_square, color, direction, ROOK_LIKE)
            for direction in STRAIGHTS
        )
        or any(
            _ray_hits(position, king_square, color, direction, BISHOP_LIKE)
            for direction in DIAGONALS
        )
        or _single_step_hits(
            position, king_square, color, KNIGHT_JUMPS, PieceType.KNIGHT
        )
        or _single_step_hits(
            position, king_square, color, _pawn_attack_deltas(color), PieceType.PAWN
        )
        or _single_step_hits(position, king_square, color, KING_STEPS, PieceType.KING)
    )


def is_in_check(board: Board, color: Color) -> bool:
    """Is the king of this color attacked right now? (A 'null move' of the king onto its own square)"""
    king = board.find_king(color)
    return is_king_in_check(board, Move(king, king.square, king.square, None))


# --- ATTACKERS AND LINES OF ATTACK ---
def find_attackers(board: Board, king: Piece) -> list[Piece]:
    """Every enemy piece whose movement shape reaches the king's square through an open path"""
    return [
        piece
        for piece in board.pieces
        if piece.color != king.color and can_reach(piece, king.square, board)
    ]


def attack_path(king: Piece, attacker: Piece) -> list[Square]:
    """
    Squares on which the attack can be stopped.
    ---

    * Knight: nothing (a jump cannot be blocked, and capturing is handled separately)
    * Pawn: only its own square
    * Sliding pieces: from the square next to the king up to and including the attacker's square
    """
    if attacker.type == PieceType.KNIGHT:
        return []
    if attacker.type == PieceType.PAWN:
        return [attacker.square]

    dc = attacker.square.col - king.square.col
    dr = attacker.square.row - king.square.row
    step: Vector = ((dc > 0) - (dc < 0), (dr > 0) - (dr < 0))
    if step == (0, 0):
        return []

    path: list[Square] = []
    square = king.square.offset(*step)
    while square.is_within_bounds():
        path.append(square)
        if square == attacker.square:
            break
        square = square.offset(*step)
    return path


# --- END OF GAME ---
def _leaves_king_safe(board: Board, piece: Piece, destination: Square) -> bool:
    return not is_king_in_check(board, Move.build(board, piece, destination))


def _king_neighbours(king: Piece) -> list[Square]:
    """The (up to) 8 squares around the king, clamped to the edges of the board"""
    return [
        square
        for square in (king.square.offset(dc, dr) for dc, dr in KING_STEPS)
        if square.is_within_bounds()
    ]


def _can_interpose_or_capture(board: Board, king: Piece, target: Square) -> bool:
    """Can any friendly piece (not the king) move onto the target square without leaving the king attacked?"""
    return any(
        _leaves_king_safe(board, piece, target)
        for piece in board.pieces
        if piece.color == king.color
        and piece != king
        and can_reach(piece, target, board)
    )


def _has_any_other_move(board: Board, king: Piece) -> bool:
    """Brute force: does any friendly piece other than the king have a move that keeps the king safe?"""
    for piece in board.pieces:
        if piece.color != king.color or piece == king:
            continue
        for square in all_squares():
            occupant = board.piece_at(square)
            if occupant is not None and (
                occupant.color == king.color or occupant.type == PieceType.KING
            ):
                continue
            if can_reach(piece, square, board) and _leaves_king_safe(
                board, piece, square
            ):
                return True
    return False


def is_terminal(board: Board, king: Piece) -> bool:
    """
    Checkmate OR stalemate: True when the king's side has no legal move left.
    ----

    1. Any of the squares around the king reachable without leaving the king attacked? -> not terminal
    2. Attacked by two (or more) pieces at once? Only a king move could help, and we just ran out of those -> terminal
    3. Attacked by exactly one piece: try capturing it with another piece, then (not for knights) try blocking
       every square of its line of attack. Any of those leaving the king safe -> not terminal
    4. Not attacked at all: terminal only if no other piece has a legal move either (stalemate).

    NOTE: does NOT tell checkmate from stalemate. Ask `is_in_check()` for that.
    """
    # 1. king moves
    for square in _king_neighbours(king):
        occupant = board.piece_at(square)
        if occupant is not None and occupant.color == king.color:
            continue
        if can_reach(king, square, board) and _leaves_king_safe(board, king, square):
            return False

    attackers = find_attackers(board, king)

    # 2. double check
    if len(attackers) >= 2:
        return True

    # 3. single attacker: capture or block
    if len(attackers) == 1:
        attacker = attackers[0]
        if _can_interpose_or_capture(board, king, attacker.square):
            return False

        if attacker.type != PieceType.KNIGHT:
            for square in attack_path(king, attacker):
                if _can_interpose_or_capture(board, king, square):
                    return False
        return True

    # 4. no attackers
    return not _has_any_other_move(board, king)
