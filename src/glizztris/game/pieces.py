from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from itertools import count
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .themes import Theme, ThemeSelector


class PieceKind(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


class Texture(str, Enum):
    """Edge-shape tags so a renderer can draw one continuous sausage per piece."""

    BLOCK = "block"
    ELBOW_LEFT = "elbow-left"
    ELBOW_RIGHT = "elbow-right"
    T_CENTER = "t-center"
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"


# Flash style used for rows waiting to be cleared
FLASH_TEXTURE = Texture.BLOCK

ORIENTATIONS = (0, 90, 180, 270)
EMPTY_ORIENTATION = -1

KindSelector = Callable[[], PieceKind]


def _rot_cw(matrix: np.ndarray) -> np.ndarray:
    # transpose then reverse each row
    return np.rot90(matrix, 1, axes=(1, 0))


def _frozen(array: np.ndarray) -> np.ndarray:
    array = np.array(array, copy=True)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class OrientedPolyomino:
    """Occupancy, texture and orientation matrices that only rotate together."""

    cells: np.ndarray
    textures: np.ndarray
    orientations: np.ndarray

    def __post_init__(self) -> None:
        cells = _frozen(np.asarray(self.cells, dtype=np.int8))
        textures = _frozen(np.asarray(self.textures, dtype=object))
        orientations = _frozen(np.asarray(self.orientations, dtype=np.int16))
        if cells.ndim != 2 or textures.shape != cells.shape or orientations.shape != cells.shape:
            raise ValueError(
                f"mismatched matrices: cells {cells.shape}, textures {textures.shape}, "
                f"orientations {orientations.shape}"
            )
        for (y, x), filled in np.ndenumerate(cells):
            texture = textures[y, x]
            orientation = int(orientations[y, x])
            if filled:
                if not isinstance(texture, Texture):
                    raise ValueError(f"occupied cell ({x}, {y}) has no texture")
                if orientation not in ORIENTATIONS:
                    raise ValueError(f"occupied cell ({x}, {y}) has orientation {orientation}")
            elif texture is not None or orientation != EMPTY_ORIENTATION:
                raise ValueError(f"empty cell ({x}, {y}) carries style data")
        object.__setattr__(self, "cells", cells)
        object.__setattr__(self, "textures", textures)
        object.__setattr__(self, "orientations", orientations)

    @classmethod
    def from_rows(
        cls,
        cells: Sequence[Sequence[int]],
        textures: Sequence[Sequence[Optional[Texture]]],
        orientations: Sequence[Sequence[int]],
    ) -> "OrientedPolyomino":
        occupied = np.asarray(cells, dtype=np.int8)
        angles = np.asarray(orientations, dtype=np.int16)
        if angles.shape == occupied.shape:
            angles = np.where(occupied != 0, angles, EMPTY_ORIENTATION)
        return cls(occupied, np.asarray(textures, dtype=object), angles)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.cells.shape

    @property
    def cell_count(self) -> int:
        return int(np.count_nonzero(self.cells))

    def rotated(self) -> "OrientedPolyomino":
        """Quarter turn clockwise; every connector angle advances by 90 degrees."""
        cells = _rot_cw(self.cells)
        textures = _rot_cw(self.textures)
        angles = _rot_cw(self.orientations)
        angles = np.where(cells != 0, (angles + 90) % 360, EMPTY_ORIENTATION)
        return OrientedPolyomino(cells, textures, angles)

    def copy(self) -> "OrientedPolyomino":
        return OrientedPolyomino(self.cells.copy(), self.textures.copy(), self.orientations.copy())

    def offsets(self) -> List[Tuple[int, int]]:
        ys, xs = np.nonzero(self.cells)
        return [(int(x), int(y)) for y, x in zip(ys, xs)]

    def same_as(self, other: "OrientedPolyomino") -> bool:
        return (
            np.array_equal(self.cells, other.cells)
            and np.array_equal(self.textures, other.textures)
            and np.array_equal(self.orientations, other.orientations)
        )


T = Texture
_ = None

CATALOG: Dict[PieceKind, OrientedPolyomino] = {
    PieceKind.I: OrientedPolyomino.from_rows(
        [[1, 1, 1, 1]],
        [[T.BLOCK, T.BLOCK, T.BLOCK, T.BLOCK]],
        [[0, 0, 0, 0]],
    ),
    PieceKind.O: OrientedPolyomino.from_rows(
        [[1, 1], [1, 1]],
        [[T.TOP_LEFT, T.TOP_RIGHT], [T.BOTTOM_LEFT, T.BOTTOM_RIGHT]],
        [[0, 0], [0, 0]],
    ),
    PieceKind.T: OrientedPolyomino.from_rows(
        [[0, 1, 0], [1, 1, 1]],
        [[_, T.BLOCK, _], [T.BLOCK, T.T_CENTER, T.BLOCK]],
        [[0, 270, 0], [0, 180, 0]],
    ),
    PieceKind.S: OrientedPolyomino.from_rows(
        [[0, 1, 1], [1, 1, 0]],
        [[_, T.ELBOW_LEFT, T.BLOCK], [T.BLOCK, T.ELBOW_RIGHT, _]],
        [[0, 0, 0], [0, 180, 0]],
    ),
    PieceKind.Z: OrientedPolyomino.from_rows(
        [[1, 1, 0], [0, 1, 1]],
        [[T.BLOCK, T.ELBOW_RIGHT, _], [_, T.ELBOW_LEFT, T.BLOCK]],
        [[180, 90, 0], [0, 270, 180]],
    ),
    PieceKind.J: OrientedPolyomino.from_rows(
        [[1, 0, 0], [1, 1, 1]],
        [[T.BLOCK, _, _], [T.ELBOW_LEFT, T.BLOCK, T.BLOCK]],
        [[90, 0, 0], [270, 0, 0]],
    ),
    PieceKind.L: OrientedPolyomino.from_rows(
        [[0, 0, 1], [1, 1, 1]],
        [[_, _, T.BLOCK], [T.BLOCK, T.BLOCK, T.ELBOW_RIGHT]],
        [[0, 0, 270], [0, 0, 180]],
    ),
}

del T, _

_piece_ids = count(1)


@dataclass
class ActivePiece:
    """The falling piece. Position and body change in place while it is active."""

    kind: PieceKind
    body: OrientedPolyomino
    x: int
    y: int
    theme: Theme
    piece_id: int = field(default_factory=lambda: next(_piece_ids))

    @property
    def cell_count(self) -> int:
        return self.body.cell_count

    def cells_at(self, origin_x: int, origin_y: int, body: Optional[OrientedPolyomino] = None) -> List[Tuple[int, int]]:
        body = body or self.body
        return [(origin_x + dx, origin_y + dy) for dx, dy in body.offsets()]

    def cells(self) -> List[Tuple[int, int]]:
        return self.cells_at(self.x, self.y)


def random_kind(rng: random.Random) -> PieceKind:
    return rng.choice(list(PieceKind))


def spawn_piece(
    theme_selector: ThemeSelector,
    rng: random.Random,
    kind: Optional[PieceKind] = None,
    x: int = 4,
    y: int = 0,
) -> ActivePiece:
    """Create a fresh active piece from the catalog.

    The shape is drawn uniformly at random unless `kind` is given. The theme is
    resolved once, here, through `theme_selector`.
    """
    if kind is None:
        kind = random_kind(rng)
    return ActivePiece(kind=kind, body=CATALOG[kind].copy(), x=x, y=y, theme=theme_selector())
