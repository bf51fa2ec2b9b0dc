from __future__ import annotations

import math
from typing import Optional, Tuple

import pygame

from glizztris.game.grid import BoardLayers
from glizztris.game.pieces import Texture
from glizztris.game.themes import Theme


Color = Tuple[int, int, int]

THEME_COLORS = {
    Theme.MUSTARD: (232, 186, 32),
    Theme.KETCHUP: (205, 40, 30),
    Theme.RELISH: (70, 160, 60),
}
SAUSAGE = (176, 96, 62)
EMPTY = (20, 20, 26)
BACKGROUND = (10, 10, 14)


def _color_for_theme(theme: Optional[Theme]) -> Color:
    if theme is None:
        return EMPTY
    return THEME_COLORS.get(theme, (200, 200, 200))


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20) -> None:
        self.cell_size = cell_size
        self.margin = margin

    def _draw_cell(self, surf: pygame.Surface, x: int, y: int, layers: BoardLayers) -> None:
        rect = pygame.Rect(
            x * self.cell_size,
            y * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )
        theme = layers.themes[y, x]
        pygame.draw.rect(surf, _color_for_theme(theme), rect)
        texture = layers.textures[y, x]
        if texture is None:
            return
        # sausage filling: a bar along the piece's connector direction
        angle = math.radians(int(layers.orientations[y, x]))
        cx, cy = rect.center
        half = self.cell_size // 2 - 3
        dx, dy = int(math.cos(angle) * half), int(math.sin(angle) * half)
        if texture in (Texture.BLOCK, Texture.T_CENTER):
            start, end = (cx - dx, cy - dy), (cx + dx, cy + dy)
        else:
            start, end = (cx, cy), (cx + dx, cy + dy)
        pygame.draw.line(surf, SAUSAGE, start, end, max(3, self.cell_size // 4))

    def _grid_surface(self, layers: BoardLayers) -> pygame.Surface:
        h, w = layers.kinds.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                if layers.kinds[y, x] == 0:
                    rect = pygame.Rect(
                        x * self.cell_size, y * self.cell_size, self.cell_size - 1, self.cell_size - 1
                    )
                    pygame.draw.rect(surf, EMPTY, rect)
                else:
                    self._draw_cell(surf, x, y, layers)
        return surf

    def draw(self, screen: pygame.Surface, layers: BoardLayers) -> None:
        grid_surf = self._grid_surface(layers)
        screen.fill(BACKGROUND)
        screen.blit(grid_surf, (self.margin, self.margin))
