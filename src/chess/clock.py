"""
Turn clock: every player has a fixed amount of thinking time for the whole game.

The clock never touches the board. It only reports whose flag fell; the Game turns that into the end of the game.
Time is handed to the clock (`tick(seconds)`), so whoever drives it decides what a second is.
"""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.pieces import Color


@dataclass
class TurnClock:
    remaining: dict[Color, float]
    active_color: Color = Color.WHITE
    paused: bool = False
    flagged: Optional[Color] = field(default=None)

    @classmethod
    def with_time(cls, seconds: float, active_color: Color = Color.WHITE) -> Self:
        return cls({Color.WHITE: seconds, Color.BLACK: seconds}, active_color)

    def tick(self, seconds: float) -> Optional[Color]:
        """
        Let time pass for the player to move.
        Returns the color whose time just ran out (only once), otherwise None.
        """
        if self.paused or self.flagged is not None:
            return None
        self.remaining[self.active_color] = max(
            0.0, self.remaining[self.active_color] - seconds
        )
        if self.remaining[self.active_color] <= 0.0:
            self.flagged = self.active_color
            return self.flagged
        return None

    def switch(self) -> None:
        """Called after every completed move"""
        self.active_color = self.active_color.opponent

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    @staticmethod
    def format_time(seconds: float) -> str:
        """mm:ss"""
        total = int(seconds)
        return f"{total // 60:02d}:{total % 60:02d}"

    def to_dict(self) -> dict[str, float]:
        return {color.name.lower(): time for color, time in self.remaining.items()}

    @classmethod
    def from_dict(cls, data: dict[str, float], active_color: Color) -> Self:
        remaining = {Color[name.upper()]: float(time) for name, time in data.items()}
        flagged = next(
            (color for color, time in remaining.items() if time <= 0.0), None
        )
        return cls(remaining, active_color, flagged=flagged)
