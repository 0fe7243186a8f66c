"""The list of moves played so far, as shown next to the board and written out at the end of a game."""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.moves import MoveRecord

# column width of a single move in the formatted move list
MOVE_WIDTH = 10


@dataclass
class MoveHistory:
    records: list[MoveRecord] = field(default_factory=list)

    def add(self, record: MoveRecord) -> None:
        self.records.append(record)

    @property
    def descriptions(self) -> list[str]:
        return [record.description for record in self.records]

    @property
    def last(self) -> Optional[MoveRecord]:
        return self.records[-1] if self.records else None

    def formatted_lines(self) -> list[str]:
        """
        One line per turn: move number, White's move, Black's move

        ex)
        " 1. e2-e4      e7-e5"
        " 2. Ng1-f3"
        """
        lines: list[str] = []
        for idx in range(0, len(self.records), 2):
            white, *black = self.records[idx : idx + 2]
            move_number = idx // 2 + 1
            line = f"{move_number:2d}. {white.description:<{MOVE_WIDTH}}"
            if black:
                line = f"{line} {black[0].description}"
            lines.append(line.rstrip())
        return lines

    def to_list(self) -> list[dict[str, str | bool]]:
        return [record.to_dict() for record in self.records]

    @classmethod
    def from_list(cls, data: list[dict[str, str | bool]]) -> Self:
        return cls([MoveRecord.from_dict(record) for record in data])
