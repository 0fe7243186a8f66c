"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

import logging
from typing import Optional, Self

from src.chess.attacks import is_in_check, is_king_in_check, is_terminal
from src.chess.castling import castling_side, is_valid_castle, rook_squares
from src.chess.fen import position_from_fen, position_to_fen
from src.chess.moves import (
    Move,
    MoveRecord,
    describe_move,
    en_passant_victim_square,
    is_en_passant_capture,
    is_geometrically_valid,
    is_path_blocked,
    is_promotion_square,
)
from src.chess.pieces import (
    MATING_MATERIAL,
    PROMOTION_OPTIONS,
    Color,
    Piece,
    PieceType,
)
from src.chess.position import PositionState
from src.chess.square import Square, all_squares
from src.core.exceptions import KingNotFoundError

logger = logging.getLogger(__name__)


class Board:
    """
    Owns every piece, whose turn it is, the en passant target and whether the game is over.
    ----

    Only the Board mutates this state, and only inside `execute()` (or when a whole state gets loaded/restored).
    Other components get the board handed to them to read from.
    """

    def __init__(self, state: Optional[PositionState] = None) -> None:
        self._pieces: dict[Square, Piece] = {}
        self.side_to_move: Color = Color.WHITE
        self.en_passant_target: Optional[Square] = None
        self.game_over: bool = False
        self.set_state(state if state is not None else PositionState())

    @classmethod
    def from_fen(cls, fen: Optional[str] = None) -> Self:
        """Construct a board from a (partial) FEN string. No string: the standard starting position."""
        return cls(position_from_fen(fen))

    def load_position(self, fen: Optional[str]) -> None:
        """Replace the whole state with the position read from the FEN string."""
        self.set_state(position_from_fen(fen))

    def to_fen(self) -> str:
        return position_to_fen(self.get_state())

    # --- STATE (PERSISTENCE COLLABORATOR) ---
    def get_state(self) -> PositionState:
        return PositionState(
            pieces=list(self._pieces.values()),
            side_to_move=self.side_to_move,
            en_passant_target=self.en_passant_target,
            game_over=self.game_over,
        )

    def set_state(self, state: PositionState) -> None:
        self._pieces = {piece.square: piece for piece in state.pieces}
        self.side_to_move = state.side_to_move
        self.en_passant_target = state.en_passant_target
        self.game_over = state.game_over
        self.rehydrate()

    def rehydrate(self) -> None:
        """
        Re-derive the square index from the pieces themselves.

        NOTE: the index is the only structure the board keeps on top of its state. Call after restoring a state.
        """
        self._pieces = {piece.square: piece for piece in self._pieces.values()}

    # --- QUERIES ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        return self._pieces.get(square)

    @property
    def pieces(self) -> list[Piece]:
        return list(self._pieces.values())

    def pieces_of(self, color: Color) -> list[Piece]:
        return [piece for piece in self._pieces.values() if piece.color == color]

    def find_king(self, color: Color) -> Piece:
        """Raises KingNotFoundError: the rest of the engine cannot work without exactly one king per color"""
        for piece in self._pieces.values():
            if piece.type == PieceType.KING and piece.color == color:
                return piece
        raise KingNotFoundError(f"No {color.name.lower()} king on the board.")

    def is_in_check(self, color: Color) -> bool:
        return is_in_check(self, color)

    def is_terminal(self) -> bool:
        """Has the side to move run out of legal moves? (checkmate or stalemate)"""
        return is_terminal(self, self.find_king(self.side_to_move))

    def is_geometrically_valid(self, piece: Piece, destination: Square) -> bool:
        """Movement shape of the piece, incl. castling for the king"""
        if is_geometrically_valid(piece, destination, self):
            return True
        return piece.type == PieceType.KING and is_valid_castle(
            piece, destination, self
        )

    def is_path_blocked(self, piece: Piece, destination: Square) -> bool:
        return is_path_blocked(piece, destination, self)

    def has_insufficient_material(self, color: Color) -> bool:
        """A lone king, or a king with a single minor piece, can never mate."""
        pieces = self.pieces_of(color)
        if any(piece.type in MATING_MATERIAL for piece in pieces):
            return False
        return len(pieces) < 3

    # --- LEGALITY ---
    def is_legal(self, move: Move) -> bool:
        """
        The legality gate
        ----

        Rejected when:
        * the game is over, or it is not the mover's turn
        * the move would capture a king
        * the piece cannot move like that / something is in the way
        * the move would capture one of your own pieces
        * your own king would be attacked afterwards
        * the move was built for an earlier board state (the piece is no longer where the move says it is)
        """
        if self.game_over:
            return False
        if move.piece.color != self.side_to_move:
            return False
        if self.piece_at(move.origin) != move.piece:
            return False
        if move.captured is not None and move.captured.type == PieceType.KING:
            return False
        if not self.is_geometrically_valid(move.piece, move.destination):
            return False
        if self.is_path_blocked(move.piece, move.destination):
            return False
        if move.captured is not None and move.captured.color == move.piece.color:
            return False
        if is_king_in_check(self, move):
            return False
        return True

    def legal_destinations(self, square: Square) -> list[Square]:
        """Every square the piece on the given square may legally move to (for move-guide highlights)"""
        piece = self.piece_at(square)
        if piece is None:
            return []
        return [
            destination
            for destination in all_squares()
            if self.is_legal(Move.build(self, piece, destination))
        ]

    # --- EXECUTION ---
    def execute(
        self, move: Move, promote_to: PieceType = PieceType.QUEEN
    ) -> MoveRecord:
        """
        Play a move that already passed `is_legal()`.
        ----

        1. Pawn moves: resolve en passant, set/clear the en passant target, promote on the last rank
        2. Castling: bring the rook along
        3. Update the moving piece (new square, flagged as moved)
        4. Remove the captured piece
        5. Hand the turn to the opponent
        6. Check whether the game ended (no legal move left, or neither side can ever mate)
        """
        piece = move.piece
        captured = move.captured
        moved_piece = piece.moved_to(move.destination)
        promoted_to: Optional[PieceType] = None

        # 1. pawn rules
        if piece.type == PieceType.PAWN:
            if is_en_passant_capture(piece, move.destination, self):
                captured = self.piece_at(
                    en_passant_victim_square(piece, move.destination)
                )
            self.en_passant_target = (
                move.origin.offset(0, piece.color.forward)
                if move.is_pawn_double_step()
                else None
            )
            if is_promotion_square(piece.color, move.destination):
                promoted_to = self._promotion_choice(promote_to)
                moved_piece = moved_piece.promoted_to(promoted_to)
        else:
            self.en_passant_target = None

        # 2. castling
        if move.is_castling():
            self._relocate_castling_rook(piece, move.destination)

        # 3 + 4. NOTE remove the captured piece before placing the mover: they can share the destination
        del self._pieces[move.origin]
        if captured is not None:
            self._pieces.pop(captured.square, None)
        self._pieces[move.destination] = moved_piece

        # 5.
        self.side_to_move = self.side_to_move.opponent

        # 6.
        self._update_game_over()

        record = MoveRecord(
            description=describe_move(move, captured is not None, promoted_to),
            is_capture=captured is not None,
            game_over=self.game_over,
        )
        logger.debug("Played %s -> %s", record.description, self.to_fen())
        return record

    def end_game(self) -> None:
        """The game-over channel for collaborators outside the rules (the clock running out)"""
        if not self.game_over:
            logger.info("Game ended from outside the board (%s to move)", self.side_to_move.name.lower())
        self.game_over = True

    # --- PRIVATE HELPERS ---
    def _promotion_choice(self, promote_to: PieceType) -> PieceType:
        """Anything that is not a valid choice becomes a queen"""
        if promote_to not in PROMOTION_OPTIONS:
            logger.warning("Cannot promote to %s, promoting to a queen.", promote_to)
            return PieceType.QUEEN
        return promote_to

    def _relocate_castling_rook(self, king: Piece, destination: Square) -> None:
        side = castling_side(king, destination)
        if side is None:
            return
        rook_from, rook_to = rook_squares(king, side)
        rook = self._pieces.pop(rook_from)
        self._pieces[rook_to] = rook.moved_to(rook_to)

    def _update_game_over(self) -> None:
        if self.is_terminal():
            self.game_over = True
            logger.info(
                "No legal move left for %s (%s)",
                self.side_to_move.name.lower(),
                "checkmate" if self.is_in_check(self.side_to_move) else "stalemate",
            )

        if self.has_insufficient_material(Color.WHITE) and self.has_insufficient_material(
            Color.BLACK
        ):
            self.game_over = True
            logger.info("Draw by insufficient material")
