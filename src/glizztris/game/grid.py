from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .pieces import EMPTY_ORIENTATION, ActivePiece
from .themes import Theme


BOARD_WIDTH = 10
BOARD_HEIGHT = 20

Coordinate = Tuple[int, int]


@dataclass
class BoardLayers:
    """The four parallel per-cell layers of the settled board.

    A cell is either empty in every layer (kind 0, texture None, orientation -1,
    theme None) or populated in every layer.
    """

    kinds: np.ndarray
    textures: np.ndarray
    orientations: np.ndarray
    themes: np.ndarray

    @classmethod
    def empty(cls, rows: int = BOARD_HEIGHT, width: int = BOARD_WIDTH) -> "BoardLayers":
        return cls(
            kinds=np.zeros((rows, width), dtype=np.int8),
            textures=np.full((rows, width), None, dtype=object),
            orientations=np.full((rows, width), EMPTY_ORIENTATION, dtype=np.int16),
            themes=np.full((rows, width), None, dtype=object),
        )

    def copy(self) -> "BoardLayers":
        return BoardLayers(
            self.kinds.copy(),
            self.textures.copy(),
            self.orientations.copy(),
            self.themes.copy(),
        )

    def take_rows(self, rows: Sequence[int]) -> "BoardLayers":
        idx = np.asarray(rows, dtype=np.intp)
        return BoardLayers(
            self.kinds[idx],
            self.textures[idx],
            self.orientations[idx],
            self.themes[idx],
        )

    def stacked_under(self, top: "BoardLayers") -> "BoardLayers":
        """Return `top` rows followed by these rows."""
        return BoardLayers(
            np.vstack((top.kinds, self.kinds)),
            np.vstack((top.textures, self.textures)),
            np.vstack((top.orientations, self.orientations)),
            np.vstack((top.themes, self.themes)),
        )


@dataclass
class MergeResult:
    layers: BoardLayers
    completed_rows: List[int]
    cells_placed: int


class GameGrid:
    """Fixed 10x20 board of settled cells.

    Row 0 is the top of the board. Pieces may hang above it (negative y) while
    spawning; those cells are bounds-checked horizontally but never collide and
    are never written.
    """

    def __init__(self) -> None:
        self.width = BOARD_WIDTH
        self.height = BOARD_HEIGHT
        self.layers = BoardLayers.empty()

    def reset(self) -> None:
        self.layers = BoardLayers.empty()

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        for x, y in cells:
            if x < 0 or x >= self.width or y >= self.height:
                return False
            if y >= 0 and self.layers.kinds[y, x] != 0:
                return False
        return True

    def full_rows(self, kinds: np.ndarray | None = None) -> List[int]:
        kinds = self.layers.kinds if kinds is None else kinds
        return [int(r) for r in np.where(np.all(kinds != 0, axis=1))[0]]

    def merge(self, piece: ActivePiece) -> MergeResult:
        """Write `piece` into copies of the layers and commit them."""
        layers = self.layers.copy()
        placed = 0
        body = piece.body
        for dx, dy in body.offsets():
            x, y = piece.x + dx, piece.y + dy
            if y < 0:
                continue
            assert self.is_inside(x, y) and layers.kinds[y, x] == 0
            layers.kinds[y, x] = int(piece.kind)
            layers.textures[y, x] = body.textures[dy, dx]
            layers.orientations[y, x] = body.orientations[dy, dx]
            layers.themes[y, x] = piece.theme
            placed += 1
        completed = self.full_rows(layers.kinds)
        self.layers = layers
        return MergeResult(layers=layers.copy(), completed_rows=completed, cells_placed=placed)

    def collapse(self, snapshot: BoardLayers, rows: Iterable[int]) -> BoardLayers:
        """Remove `rows` from `snapshot`, prepend as many empty rows, and commit.

        Surviving rows keep their top-to-bottom order.
        """
        removed = set(int(r) for r in rows)
        keep = [r for r in range(self.height) if r not in removed]
        collapsed = snapshot.take_rows(keep).stacked_under(BoardLayers.empty(len(removed), self.width))
        assert collapsed.kinds.shape == (self.height, self.width)
        self.layers = collapsed
        return collapsed

    @staticmethod
    def tally_themes(snapshot: BoardLayers, rows: Iterable[int]) -> Counter[Theme]:
        """Count theme-tagged cells in `rows` of `snapshot`."""
        tally: Counter[Theme] = Counter()
        for r in rows:
            for theme in snapshot.themes[r]:
                if theme is not None:
                    tally[theme] += 1
        return tally

    def clone_state(self) -> np.ndarray:
        return self.layers.kinds.copy()
