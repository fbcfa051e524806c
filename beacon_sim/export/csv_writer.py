"""CSV export of real and estimated board snapshots."""

import csv
from pathlib import Path
from typing import Dict, Iterator, Optional, Sequence, TYPE_CHECKING

from ..model.state import parse_agent_tag

if TYPE_CHECKING:
    from ..model.state import BoardState, RoundState


class CSVWriter:
    """
    Streams one row per agent per board per round.

    Output format:
        round,board,row,col,agent,agent_type,agent_id
        0,real,3,4,Beacon0,Beacon,0
        1,estimated,3,5,Beacon0,Beacon,0
        ...

    `boards` restricts output to the named board kinds ("real",
    "estimated"). Cells are written in (row, col) order, tags in the
    order the snapshot stores them.
    """

    FIELDNAMES = ['round', 'board', 'row', 'col', 'agent', 'agent_type', 'agent_id']
    BOARD_KINDS = ('real', 'estimated')

    def __init__(self, output_path: Path, boards: Sequence[str] = BOARD_KINDS):
        unknown = set(boards) - set(self.BOARD_KINDS)
        if unknown:
            raise ValueError(f"Unknown board kind(s): {sorted(unknown)}")
        self.output_path = Path(output_path)
        self.boards = tuple(boards)
        self.rows_written: Dict[str, int] = {kind: 0 for kind in self.boards}
        self.file = None
        self.writer: Optional[csv.DictWriter] = None

    @property
    def is_open(self) -> bool:
        return self.file is not None

    def open(self) -> None:
        """Create parent directories, truncate the file and write the header."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=self.FIELDNAMES)
        self.writer.writeheader()

    def _board_rows(self, round_index: int, board: "BoardState") -> Iterator[Dict]:
        for (row, col), tags in sorted(board.contents.items()):
            for tag in tags:
                agent_type, agent_id = parse_agent_tag(tag)
                yield {
                    'round': round_index,
                    'board': board.kind,
                    'row': row,
                    'col': col,
                    'agent': tag,
                    'agent_type': agent_type,
                    'agent_id': agent_id,
                }

    def append(self, state: "RoundState") -> None:
        """Write the selected boards of one round."""
        if not self.is_open:
            self.open()
        for board in state.boards:
            if board.kind not in self.boards:
                continue
            for record in self._board_rows(state.round, board):
                self.writer.writerow(record)
                self.rows_written[board.kind] += 1
        self.file.flush()

    def close(self) -> None:
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
