"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass
from typing import Any, Optional

# Type aliases to make GameModel easier to read
PieceColor = str
Seconds = float
MoveRecordData = dict[str, Any]
BoardStateData = dict[str, Any]


@dataclass
class GameModel:
    """
    Transport-safe representation of a chess game used between API, Service, DB, and Game layers.

    `board_state` holds everything needed to rebuild the exact position (every piece incl. whether it has moved,
    side to move, en passant target and the game over flag). `current_fen` is only a readable summary.
    """

    current_fen: str
    board_state: BoardStateData
    move_history: list[MoveRecordData]
    clock: dict[PieceColor, Seconds]
    status: str
    winner: Optional[PieceColor] = None
