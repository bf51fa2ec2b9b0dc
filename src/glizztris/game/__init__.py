"""Game module for Glizztris.

Exports the falling-block engine and supporting classes:
- GameGrid / BoardLayers: settled board layers, collision, merge and collapse
- OrientedPolyomino / ActivePiece / PieceKind / Texture: the piece catalog
- Theme: the three condiment skins and theme selectors
- ScoringRules / Progression / ThemeStats: scoring, leveling and theme counters
- GlizztrisGame: the state machine driving everything above
"""

from .grid import BOARD_HEIGHT, BOARD_WIDTH, BoardLayers, GameGrid
from .pieces import CATALOG, ActivePiece, OrientedPolyomino, PieceKind, Texture, spawn_piece
from .themes import Theme, fixed_theme, next_theme, random_theme
from .rules import Progression, ScoringRules, ThemeStats
from .core import Action, GameConfig, GameState, GlizztrisGame

__all__ = [
    "BOARD_HEIGHT",
    "BOARD_WIDTH",
    "BoardLayers",
    "GameGrid",
    "CATALOG",
    "ActivePiece",
    "OrientedPolyomino",
    "PieceKind",
    "Texture",
    "spawn_piece",
    "Theme",
    "fixed_theme",
    "next_theme",
    "random_theme",
    "Progression",
    "ScoringRules",
    "ThemeStats",
    "Action",
    "GameConfig",
    "GameState",
    "GlizztrisGame",
]
