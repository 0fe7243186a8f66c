"""
Storage contract for chess games.

Implemented by SQLGameRepository (sql_repository.py) and by an in-memory dictionary in the service tests.
Games are exchanged as GameModel snapshots: a repository never hands out objects the caller can mutate in place.
"""

from typing import Protocol
from uuid import UUID

from src.core.models import GameModel


class GameRepository(Protocol):
    def get_game(self, game_id: UUID) -> GameModel | None:
        """Snapshot of the stored game, or None for an unknown ID."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store a freshly set up game. The ID is assigned by the repository."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """
        Overwrite board, history, clock and status after a move or a clock tick.
        Returns the stored snapshot, or None when no game has this ID (nothing gets created).
        """
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove the game. Returns its last snapshot, or None when it did not exist."""
        ...
