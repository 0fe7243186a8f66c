"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.chess.fen import is_valid_position, is_valid_square
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, PieceType, Status

SquareName = str
PieceCode = str
Clock = str


def _validate_square_name(value: str) -> str:
    value = value.strip().lower()
    if len(value) != 2 or not is_valid_square(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    starting_fen: Optional[str] = None
    clock_minutes: Optional[int] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        """
        Only the piece placement has to make sense (an 8x8 board with one king per color).
        The rest of the string is loaded best effort.
        """
        if value is None or not value.strip():
            return None

        placement = value.strip().split(" ")[0]
        if not is_valid_position(placement):
            raise InvalidRequestError(
                f"Cannot interpret {placement!r} as a position on an 8x8 board."
            )
        if placement.count("K") != 1 or placement.count("k") != 1:
            raise InvalidRequestError(
                f"Position {placement!r} needs exactly one white and one black king."
            )
        return value.strip()

    @field_validator("clock_minutes")
    @classmethod
    def validate_clock_minutes(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise InvalidRequestError(f"Thinking time must be positive, got {value} minutes.")
        return value


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    square: SquareName

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: SquareName
    to_square: SquareName
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class TickClockRequest(BaseModel):
    game_id: UUID
    seconds: float

    @field_validator("seconds")
    @classmethod
    def validate_seconds(cls, value: float) -> float:
        if value < 0:
            raise InvalidRequestError(f"Time cannot run backwards: {value} seconds.")
        return value


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    """Everything needed to draw the board, the move list and the clocks."""

    game_id: UUID
    fen_state: str
    pieces: dict[SquareName, PieceCode]
    side_to_move: Color
    status: Status
    winner: Optional[Color] = None
    checked_king: Optional[SquareName] = None
    move_history: list[str]
    clock: dict[Color, Clock]


class LegalMovesResponse(BaseModel):
    game_id: UUID
    square: SquareName
    legal_moves: list[SquareName]


class MoveResponse(BaseModel):
    success: bool
    move: Optional[str] = None
    is_capture: bool = False
    game: GameResponse
