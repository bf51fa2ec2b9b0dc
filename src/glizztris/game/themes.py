from __future__ import annotations

import random
from enum import Enum
from typing import Callable, Optional


class Theme(str, Enum):
    MUSTARD = "mustard"
    KETCHUP = "ketchup"
    RELISH = "relish"


THEME_ORDER = (Theme.MUSTARD, Theme.KETCHUP, Theme.RELISH)

ThemeSelector = Callable[[], Theme]


def next_theme(theme: Theme) -> Theme:
    idx = THEME_ORDER.index(theme)
    return THEME_ORDER[(idx + 1) % len(THEME_ORDER)]


def fixed_theme(theme: Theme) -> ThemeSelector:
    """Selector that assigns `theme` to every spawned piece."""

    def select() -> Theme:
        return theme

    return select


def random_theme(rng: Optional[random.Random] = None) -> ThemeSelector:
    """Selector that draws a theme uniformly at random for every spawn."""
    rng = rng or random.Random()

    def select() -> Theme:
        return rng.choice(THEME_ORDER)

    return select
