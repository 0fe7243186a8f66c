"""
Position loader: reads the subset of FEN (Forsyth-Edwards Notation) the engine needs to set up a board.

<board position string> <active color> <castling rights> <en passant square> (move counters are ignored)

* The position is read from the top row (rank 8, row 0) to the bottom row (rank 1, row 7), rows separated by '/'.
  Letters are pieces (upper case: White, lower case: Black), digits are runs of empty squares.
* The active color is either "w" or "b"
* Castling rights "KQkq" (or "-"): consumed as the 'has moved' flag of the corner rooks.
* The en passant square in algebraic notation, or "-"

Loading is best effort: malformed input is logged and loaded as far as it goes. Nothing gets rolled back.

ex) The standard starting position has a FEN
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
"""

import logging
from dataclasses import replace
from string import ascii_lowercase
from typing import Optional

from src.chess.pieces import FEN_TO_PIECE, Color, Piece, PieceType
from src.chess.position import PositionState
from src.chess.square import BOARD_DIMENSIONS, Square

logger = logging.getLogger(__name__)

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# Corner squares of the rooks (row 0 is Black's back rank)
BLACK_QUEEN_SIDE_CORNER = Square(0, 0)
BLACK_KING_SIDE_CORNER = Square(7, 0)
WHITE_QUEEN_SIDE_CORNER = Square(0, 7)
WHITE_KING_SIDE_CORNER = Square(7, 7)
KING_START_COLUMN = 4


# --- VALIDATION (only used to warn about malformed input) ---
def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if character.isdecimal():
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    num_files, num_ranks = BOARD_DIMENSIONS
    if len(square) < 2:
        return False

    file_char, rank_char = square[0], square[1:]
    allowed_file_names = ascii_lowercase[:num_files]
    if file_char not in allowed_file_names:
        return False

    if not rank_char.isdecimal():
        return False

    return 1 <= int(rank_char) <= num_ranks


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or is_valid_square(en_passant)


def is_valid_fen(fen: str) -> bool:
    """Check the (up to) four fields the loader reads."""
    parts = fen.split()
    if len(parts) < 4:
        return False
    position, color, castling, en_passant = parts[:4]
    return (
        is_valid_position(position)
        and is_valid_color_code(color)
        and all(character in "KQkq-" for character in castling)
        and is_valid_en_passant(en_passant)
    )


# --- LOADING ---
def _parse_placement(placement: str) -> dict[Square, Piece]:
    """Place the pieces. Characters that do not denote a piece still take up a square."""
    pieces: dict[Square, Piece] = {}
    row = 0
    col = 0
    for character in placement:
        if character == "/":
            row += 1
            col = 0
        elif character.isdecimal():
            # A number denotes the amount of empty squares after each other
            col += int(character)
        else:
            square = Square(col, row)
            if character.lower() in FEN_TO_PIECE and square.is_within_bounds():
                pieces[square] = Piece.from_fen(character, square)
            else:
                logger.warning(
                    "Skipping %r at %s while loading position %r",
                    character,
                    square,
                    placement,
                )
            col += 1
    return pieces


def _set_unmoved(pieces: dict[Square, Piece], square: Square, unmoved: bool) -> None:
    piece = pieces.get(square)
    if piece is not None:
        pieces[square] = replace(piece, has_moved=not unmoved)


def _is_rook(piece: Optional[Piece]) -> bool:
    return piece is not None and piece.type == PieceType.ROOK


def _apply_castling_flags(pieces: dict[Square, Piece], castling: str) -> None:
    """
    Castling rights are stored on the pieces themselves: a rook that may still castle 'has not moved'.

    NOTE: The mapping below is kept exactly as the game has always loaded positions, even though it looks off:
    when both white rooks stand in their corners, the "K" indicator is written onto the piece in the a8 corner
    (overwriting the "q" flag just set on it) and the h1 rook keeps its default. See tests/chess/test_fen.py.
    """
    if _is_rook(pieces.get(BLACK_QUEEN_SIDE_CORNER)):
        _set_unmoved(pieces, BLACK_QUEEN_SIDE_CORNER, "q" in castling)
    if _is_rook(pieces.get(BLACK_KING_SIDE_CORNER)):
        _set_unmoved(pieces, BLACK_KING_SIDE_CORNER, "k" in castling)
    if _is_rook(pieces.get(WHITE_QUEEN_SIDE_CORNER)):
        _set_unmoved(pieces, WHITE_QUEEN_SIDE_CORNER, "Q" in castling)
        if _is_rook(pieces.get(WHITE_KING_SIDE_CORNER)):
            _set_unmoved(pieces, BLACK_QUEEN_SIDE_CORNER, "K" in castling)


def _parse_en_passant(en_passant: str) -> Optional[Square]:
    if en_passant == "-":
        return None
    if not is_valid_square(en_passant):
        logger.warning("Ignoring en passant square %r", en_passant)
        return None
    return Square.from_algebraic(en_passant)


def position_from_fen(fen: Optional[str]) -> PositionState:
    """
    Parse the FEN into a PositionState
    ---

    An empty string (or None) loads the standard starting position.
    Missing fields fall back to: White to move, no castling rights, no en passant square.
    """
    if not fen or not fen.strip():
        fen = STARTING_FEN

    if not is_valid_fen(fen):
        logger.warning("Loading malformed position %r (best effort)", fen)

    parts = fen.split()
    pieces = _parse_placement(parts[0])

    # Check which color is to move
    side_to_move = Color.WHITE
    if len(parts) > 1:
        side_to_move = Color.WHITE if parts[1] == "w" else Color.BLACK

    _apply_castling_flags(pieces, parts[2] if len(parts) > 2 else "")

    en_passant_target = _parse_en_passant(parts[3]) if len(parts) > 3 else None

    return PositionState(
        pieces=list(pieces.values()),
        side_to_move=side_to_move,
        en_passant_target=en_passant_target,
        game_over=False,
    )


# --- WRITING ---
def _row_to_fen(pieces: dict[Square, Piece], row: int) -> str:
    """FEN string of a single row"""
    fen_characters: list[str] = []
    empty_count = 0
    for col in range(BOARD_DIMENSIONS[0]):
        piece = pieces.get(Square(col, row))
        if piece is not None:
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())
        else:
            empty_count += 1

    # if the entire row is empty, then we still place this number in the string
    if empty_count > 0:
        fen_characters.append(str(empty_count))
    return "".join(fen_characters)


def _can_still_castle(
    pieces: dict[Square, Piece], color: Color, rook_corner: Square
) -> bool:
    king = pieces.get(Square(KING_START_COLUMN, color.back_rank))
    rook = pieces.get(rook_corner)
    return (
        king is not None
        and king.type == PieceType.KING
        and king.color == color
        and not king.has_moved
        and _is_rook(rook)
        and rook is not None
        and rook.color == color
        and not rook.has_moved
    )


def _castling_to_fen(pieces: dict[Square, Piece]) -> str:
    """create the part of the FEN string that encodes castling rights (derived from which pieces moved)"""
    corners = [
        ("K", Color.WHITE, WHITE_KING_SIDE_CORNER),
        ("Q", Color.WHITE, WHITE_QUEEN_SIDE_CORNER),
        ("k", Color.BLACK, BLACK_KING_SIDE_CORNER),
        ("q", Color.BLACK, BLACK_QUEEN_SIDE_CORNER),
    ]
    castling_chars = "".join(
        character
        for character, color, corner in corners
        if _can_still_castle(pieces, color, corner)
    )
    return castling_chars or "-"


def position_to_fen(state: PositionState) -> str:
    """reverse operation: write the four fields the loader reads from the given state"""
    pieces = {piece.square: piece for piece in state.pieces}
    placement = "/".join(
        _row_to_fen(pieces, row) for row in range(BOARD_DIMENSIONS[1])
    )
    active_color = "w" if state.side_to_move == Color.WHITE else "b"
    en_passant = (
        state.en_passant_target.to_algebraic()
        if state.en_passant_target is not None
        else "-"
    )
    return f"{placement} {active_color} {_castling_to_fen(pieces)} {en_passant}"
