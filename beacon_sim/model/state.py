"""State snapshot dataclasses for the beacon localization simulation."""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .board import Board, RealBoard
from .statistics import DistanceStats

# Cell contents: (row, col) -> agent tags such as "Beacon3", "Observer0"
BoardContents = Dict[Tuple[int, int], Tuple[str, ...]]

_TAG_PATTERN = re.compile(r"^([A-Za-z]+)(\d+)$")


def encode_board(board: Board) -> BoardContents:
    """Encode populated cells as sorted lists of type-tagged identifiers."""
    return {
        location.as_tuple(): tuple(sorted(agent.tag for agent in agents))
        for location, agents in board.agents_on_board().items()
    }


def parse_agent_tag(tag: str) -> Tuple[str, int]:
    """Split 'Beacon3' into ('Beacon', 3)."""
    match = _TAG_PATTERN.match(tag)
    if match is None:
        raise ValueError(f"Malformed agent tag: {tag!r}")
    return match.group(1), int(match.group(2))


@dataclass(frozen=True)
class BoardState:
    """Immutable snapshot of one board at a given round."""
    simulation_id: str
    round: int
    is_real: bool
    rows: int
    cols: int
    contents: BoardContents

    @classmethod
    def capture(cls, board: Board, simulation_id: str, round_index: int) -> "BoardState":
        return cls(
            simulation_id=simulation_id,
            round=round_index,
            is_real=isinstance(board, RealBoard),
            rows=board.rows,
            cols=board.cols,
            contents=encode_board(board),
        )

    @property
    def kind(self) -> str:
        return "real" if self.is_real else "estimated"

    def to_grid(self) -> List[List[List[str]]]:
        """Dense rows x cols representation; empty cells are empty lists."""
        grid = [[[] for _ in range(self.cols)] for _ in range(self.rows)]
        for (row, col), tags in self.contents.items():
            grid[row][col] = list(tags)
        return grid


@dataclass
class RoundState:
    """Complete snapshot of simulation state after a round."""
    round: int
    real: BoardState
    estimated: BoardState
    distance: DistanceStats
    metrics: Dict[str, float] = field(default_factory=dict)

    @property
    def boards(self) -> Tuple[BoardState, BoardState]:
        return (self.real, self.estimated)
