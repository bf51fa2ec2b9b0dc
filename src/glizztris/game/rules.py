from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Mapping

from .themes import THEME_ORDER, Theme


logger = logging.getLogger(__name__)


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int, int] = (0, 40, 100, 300, 1200)
    lines_per_level: int = 10
    initial_drop_ms: int = 1000
    drop_step_ms: int = 50
    min_drop_ms: int = 50

    def score_for_lines(self, lines: int, level: int) -> int:
        if lines <= 0:
            return 0
        assert lines < len(self.line_clear_scores), f"cannot clear {lines} rows at once"
        return self.line_clear_scores[lines] * level

    def level_for_lines(self, total_lines: int) -> int:
        return total_lines // self.lines_per_level + 1

    def drop_interval_for_level(self, level: int) -> int:
        return max(self.min_drop_ms, self.initial_drop_ms - (level - 1) * self.drop_step_ms)


@dataclass
class Progression:
    """Score, level, cleared lines and the gravity period derived from the level."""

    rules: ScoringRules = field(default_factory=ScoringRules)
    score: int = 0
    level: int = 1
    lines: int = 0
    drop_interval_ms: int = 0

    def __post_init__(self) -> None:
        if not self.drop_interval_ms:
            self.drop_interval_ms = self.rules.drop_interval_for_level(self.level)

    def reset(self) -> None:
        self.score = 0
        self.level = 1
        self.lines = 0
        self.drop_interval_ms = self.rules.drop_interval_for_level(1)

    def on_lines_cleared(self, n: int) -> int:
        """Apply one clear resolution of `n` rows; returns the points awarded."""
        if n <= 0:
            return 0
        gained = self.rules.score_for_lines(n, self.level)
        self.score += gained
        self.lines += n
        new_level = self.rules.level_for_lines(self.lines)
        if new_level != self.level:
            logger.info("level %d -> %d after %d lines", self.level, new_level, self.lines)
            self.level = new_level
            self.drop_interval_ms = self.rules.drop_interval_for_level(new_level)
        return gained


@dataclass
class ThemeStats:
    """Cumulative per-theme block counters."""

    used: Dict[Theme, int] = field(default_factory=lambda: {t: 0 for t in THEME_ORDER})
    completed: Dict[Theme, int] = field(default_factory=lambda: {t: 0 for t in THEME_ORDER})

    def reset(self) -> None:
        for theme in THEME_ORDER:
            self.used[theme] = 0
            self.completed[theme] = 0

    def record_used(self, theme: Theme, blocks: int) -> None:
        self.used[theme] += blocks

    def record_completed(self, tally: Mapping[Theme, int]) -> None:
        for theme, blocks in tally.items():
            self.completed[theme] += blocks

    def total_used(self) -> int:
        return sum(self.used.values())

    def total_completed(self) -> int:
        return sum(self.completed.values())

    def as_counter(self) -> Counter[str]:
        out: Counter[str] = Counter()
        for theme in THEME_ORDER:
            out[f"{theme.value}_used"] = self.used[theme]
            out[f"{theme.value}_completed"] = self.completed[theme]
        return out
