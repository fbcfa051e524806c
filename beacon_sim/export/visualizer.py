"""Visualization and export for the beacon simulation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.colors import to_rgb
from pathlib import Path
from typing import List, Tuple, TYPE_CHECKING
from PIL import Image
import io

from ..model.state import parse_agent_tag

if TYPE_CHECKING:
    from ..model.state import BoardState, RoundState


class Visualizer:
    """
    Renders real and estimated boards side by side using matplotlib.

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation
    """

    # Color scheme
    COLORS = {
        'floor': '#ECF0F1',     # Light gray
        'beacon': '#F39C12',    # Orange
        'estimate': '#8E44AD',  # Purple
        'observer': '#3498DB',  # Blue
        'crowd': '#2C3E50',     # Dark blue-gray, tints busy cells
    }

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols
        self.frames: List[Image.Image] = []

    def _positions(self, board: "BoardState",
                   type_name: str) -> List[Tuple[int, int, int]]:
        """(row, col, id) for every agent of type_name on the board."""
        positions = []
        for (row, col), tags in board.contents.items():
            for tag in tags:
                kind, agent_id = parse_agent_tag(tag)
                if kind == type_name:
                    positions.append((row, col, agent_id))
        return positions

    def _base_image(self, board: "BoardState") -> np.ndarray:
        """Floor colour, darkened in proportion to each cell's agent count."""
        counts = np.array([[len(cell) for cell in row] for row in board.to_grid()],
                          dtype=float)
        base = np.ones((self.rows, self.cols, 3))
        base[:, :] = to_rgb(self.COLORS['floor'])
        if counts.max() > 0:
            normalized = counts / counts.max()
            crowd = to_rgb(self.COLORS['crowd'])
            for c in range(3):
                base[:, :, c] = np.clip(
                    base[:, :, c] * (1 - 0.3 * normalized) + crowd[c] * 0.3 * normalized,
                    0, 1
                )
        return base

    def _draw_board(self, ax, board: "BoardState", title: str) -> None:
        ax.imshow(self._base_image(board), origin='upper', aspect='equal',
                  extent=[-0.5, self.cols - 0.5, self.rows - 0.5, -0.5])

        for row, col, _ in self._positions(board, 'Observer'):
            ax.plot(col, row, 'o', color=self.COLORS['observer'],
                    markersize=5, markeredgecolor='white', markeredgewidth=0.3)

        beacon_color = self.COLORS['beacon'] if board.is_real else self.COLORS['estimate']
        for row, col, beacon_id in self._positions(board, 'Beacon'):
            ax.plot(col, row, 's', color=beacon_color, markersize=7,
                    markeredgecolor='black', markeredgewidth=0.5)
            ax.annotate(str(beacon_id), (col, row), fontsize=6,
                        xytext=(3, 3), textcoords='offset points')

        ax.set_title(title)
        ax.set_xlabel('Col')
        ax.set_ylabel('Row')
        ax.set_xlim(-0.5, self.cols - 0.5)
        ax.set_ylim(self.rows - 0.5, -0.5)

    def _create_figure(self, state: "RoundState") -> plt.Figure:
        """Create matplotlib figure with real and estimated panels."""
        aspect = self.cols / self.rows
        fig_height = 5
        fig_width = max(8, 2 * fig_height * aspect)
        fig, (ax_real, ax_est) = plt.subplots(1, 2, figsize=(fig_width, fig_height))

        self._draw_board(ax_real, state.real, f'Real board | Round {state.round}')
        avg = state.distance.avg
        avg_text = f'{avg:.2f}' if avg is not None else '-'
        self._draw_board(ax_est, state.estimated,
                         f'Estimated board | Avg distance {avg_text}')

        legend_elements = [
            plt.Line2D([0], [0], marker='s', color='w', label='Beacon',
                       markerfacecolor=self.COLORS['beacon'], markersize=8),
            plt.Line2D([0], [0], marker='s', color='w', label='Estimate',
                       markerfacecolor=self.COLORS['estimate'], markersize=8),
            plt.Line2D([0], [0], marker='o', color='w', label='Observer',
                       markerfacecolor=self.COLORS['observer'], markersize=8),
        ]
        ax_est.legend(handles=legend_elements, loc='upper right', fontsize=8)

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "RoundState") -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(state)

        # Convert to PIL Image
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: "RoundState", output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )

    def clear_frames(self) -> None:
        """Clear buffered frames."""
        self.frames.clear()
