"""Implementation of (Game)Repository using SQLAlchemy"""

import logging
from copy import deepcopy
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.db.schema import DBGame

logger = logging.getLogger(__name__)


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""

        new_id = uuid4()
        game_db = DBGame(
            id=new_id,
            current_fen=game.current_fen,
            board_state=deepcopy(game.board_state),
            move_history=deepcopy(game.move_history),
            clock=dict(game.clock),
            status=game.status,
            winner=game.winner,
        )
        self.db.add(game_db)
        self._commit()
        self.db.refresh(game_db)
        return self._to_model(game_db), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """
        Replace the stored state of an existing game.

        NOTE: JSON columns are only written when a new object gets assigned (in-place changes go unnoticed).
        """
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_db.current_fen = game.current_fen
        game_db.board_state = deepcopy(game.board_state)
        game_db.move_history = deepcopy(game.move_history)
        game_db.clock = dict(game.clock)
        game_db.status = game.status
        game_db.winner = game.winner
        self._commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self._commit()
        return game_model

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Could not store game: %s", exc)
            raise RepositoryError("Could not store game.") from exc

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            current_fen=game_db.current_fen,
            board_state=deepcopy(game_db.board_state),
            move_history=deepcopy(game_db.move_history),
            clock=dict(game_db.clock),
            status=game_db.status,
            winner=game_db.winner,
        )
