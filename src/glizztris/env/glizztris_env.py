from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from glizztris.game import Action, GameConfig, GlizztrisGame, PieceKind
from glizztris.game.grid import BOARD_HEIGHT, BOARD_WIDTH
from glizztris.game.rules import ScoringRules
from glizztris.game.themes import fixed_theme, Theme
from glizztris.visualization.projection import display_layers


THEME_RGB = {
    Theme.MUSTARD: (232, 186, 32),
    Theme.KETCHUP: (205, 40, 30),
    Theme.RELISH: (70, 160, 60),
}


class GlizztrisEnv(gym.Env):
    """Agent-facing wrapper around the engine.

    Time is virtual: every step applies one action, then advances the engine
    clock by one tick period and ticks it, so gravity, clear delays and
    hard-drop settles play out exactly as they would in real time.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 20}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        render_mode: Optional[str] = None,
        max_episode_steps: int = 20000,
        theme: Optional[Theme] = None,
    ) -> None:
        super().__init__()
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)
        self._now = 0
        self._config = config or GameConfig()
        self.game = GlizztrisGame(
            self._config,
            rules,
            theme_selector=fixed_theme(theme) if theme is not None else None,
            clock=self._clock,
        )

        n_kinds = len(PieceKind)
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(
                    low=-n_kinds, high=n_kinds, shape=(BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8
                ),
                "level": spaces.Discrete(1000),
                "animating": spaces.MultiBinary(BOARD_HEIGHT),
            }
        )
        self.action_space = spaces.Discrete(len(Action))
        self._steps = 0

    def _clock(self) -> int:
        return self._now

    def _get_obs(self) -> Dict[str, Any]:
        animating = np.zeros((BOARD_HEIGHT,), dtype=np.int8)
        for row in self.game.animating_lines:
            animating[row] = 1
        return {
            "board": self.game.get_state().astype(np.int8),
            "level": min(self.game.level, 999),
            "animating": animating,
        }

    def _get_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "score": self.game.score,
            "lines": self.game.lines,
            "level": self.game.level,
            "steps": self._steps,
        }
        info.update(self.game.stats.as_counter())
        return info

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        self._now = 0
        self._steps = 0
        self.game.reset()
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        score_before = self.game.score
        self.game.step(Action(int(action)))
        self._now += self._config.tick_ms
        self.game.tick()
        self._steps += 1

        reward = float(self.game.score - score_before)
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps and not terminated
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        layers = display_layers(self.game)
        cell = 12
        h, w = layers.kinds.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                theme = layers.themes[y, x]
                color = THEME_RGB.get(theme, (200, 200, 200)) if layers.kinds[y, x] else (30, 30, 36)
                if y in self.game.animating_lines:
                    color = (255, 255, 255) if layers.kinds[y, x] else color
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
