from __future__ import annotations

from typing import TYPE_CHECKING

from glizztris.game.grid import BoardLayers
from glizztris.game.pieces import FLASH_TEXTURE

if TYPE_CHECKING:  # pragma: no cover
    from glizztris.game.core import GlizztrisGame


def display_layers(game: "GlizztrisGame") -> BoardLayers:
    """What the player should see this frame.

    Rows waiting to be cleared flash as plain blocks with no rotation, and the
    falling piece is drawn over the settled cells. The engine's own layers are
    left untouched.
    """
    view = game.grid.layers.copy()
    for row in game.animating_lines:
        filled = view.kinds[row] != 0
        view.textures[row, filled] = FLASH_TEXTURE
        view.orientations[row, filled] = 0

    piece = game.current_piece
    if piece is not None and not game.game_over:
        body = piece.body
        for dx, dy in body.offsets():
            x, y = piece.x + dx, piece.y + dy
            if not game.grid.is_inside(x, y):
                continue
            view.kinds[y, x] = int(piece.kind)
            view.textures[y, x] = body.textures[dy, dx]
            view.orientations[y, x] = body.orientations[dy, dx]
            view.themes[y, x] = piece.theme
    return view
