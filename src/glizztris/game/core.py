from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from .grid import GameGrid
from .pieces import ActivePiece, KindSelector, OrientedPolyomino, spawn_piece
from .rules import Progression, ScoringRules, ThemeStats
from .themes import Theme, ThemeSelector, fixed_theme, random_theme
from .timeline import PendingClear, PendingSettle, Timeline


logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class GameState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    NONE = 5


@dataclass
class GameConfig:
    random_seed: Optional[int] = None
    spawn_x: int = 4
    spawn_y: int = 0
    tick_ms: int = 50
    clear_delay_ms: int = 350
    settle_delay_ms: int = 50


class GlizztrisGame:
    """Falling-block engine: board truth, piece kinematics, clears and scoring.

    The engine never reads a wall clock on its own initiative; every timed
    decision goes through `clock`, and `tick()` must be called periodically
    (every `config.tick_ms`) by the host loop. Line clears and hard-drop
    settles are deferred events kept on a `Timeline` and fired from `tick()`.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        theme_selector: Optional[ThemeSelector] = None,
        kind_selector: Optional[KindSelector] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rng = random.Random(self.config.random_seed)
        self.theme_selector = theme_selector or random_theme(self.rng)
        self.kind_selector = kind_selector
        self.clock = clock or monotonic_ms
        self.grid = GameGrid()
        self.progression = Progression(rules or ScoringRules())
        self.stats = ThemeStats()
        self.timeline = Timeline()
        self.state = GameState.NOT_STARTED
        self._piece: Optional[ActivePiece] = None
        self._animating_lines: List[int] = []
        self.last_drop = self.clock()

    # ----- lifecycle -----

    def start(self, theme_selector: Optional[ThemeSelector] = None) -> None:
        if theme_selector is not None:
            self.theme_selector = theme_selector
        if self.state in (GameState.NOT_STARTED, GameState.GAME_OVER):
            self._new_game()
        elif self.state == GameState.PAUSED:
            self.resume()

    def resume(self) -> None:
        if self.state == GameState.PAUSED:
            self.state = GameState.RUNNING
            self.last_drop = self.clock()

    def pause(self) -> None:
        if self.state == GameState.RUNNING:
            self.state = GameState.PAUSED

    def reset(self, theme_selector: Optional[ThemeSelector] = None) -> None:
        if theme_selector is not None:
            self.theme_selector = theme_selector
        self._new_game()

    def _new_game(self) -> None:
        self.grid.reset()
        self.progression.reset()
        self.stats.reset()
        self.timeline.clear()
        self._animating_lines = []
        self.state = GameState.RUNNING
        self.last_drop = self.clock()
        self._piece = None
        self._spawn_next()
        logger.debug("new game started")

    # ----- read-only projections -----

    @property
    def board(self) -> np.ndarray:
        return self.grid.layers.kinds.copy()

    @property
    def textures(self) -> np.ndarray:
        return self.grid.layers.textures.copy()

    @property
    def orientations(self) -> np.ndarray:
        return self.grid.layers.orientations.copy()

    @property
    def themes(self) -> np.ndarray:
        return self.grid.layers.themes.copy()

    @property
    def animating_lines(self) -> List[int]:
        return list(self._animating_lines)

    @property
    def score(self) -> int:
        return self.progression.score

    @property
    def level(self) -> int:
        return self.progression.level

    @property
    def lines(self) -> int:
        return self.progression.lines

    @property
    def drop_interval_ms(self) -> int:
        return self.progression.drop_interval_ms

    @property
    def game_over(self) -> bool:
        return self.state == GameState.GAME_OVER

    @property
    def paused(self) -> bool:
        return self.state == GameState.PAUSED

    @property
    def settling(self) -> bool:
        pending = self.timeline.pending_settle()
        return (
            pending is not None
            and self._piece is not None
            and pending.piece_id == self._piece.piece_id
        )

    @property
    def current_piece(self) -> Optional[ActivePiece]:
        """A detached copy of the falling piece; editing it does not move the engine's piece."""
        if self._piece is None:
            return None
        return replace(self._piece)

    # ----- commands -----

    def is_valid_move(
        self, piece: ActivePiece, dx: int, dy: int, body: Optional[OrientedPolyomino] = None
    ) -> bool:
        return self.grid.can_place(piece.cells_at(piece.x + dx, piece.y + dy, body))

    def _accepts_commands(self) -> bool:
        return self.state == GameState.RUNNING and self._piece is not None and not self.settling

    def move_piece(self, dx: int, dy: int) -> bool:
        """Translate the active piece; a blocked downward move lands it."""
        if not self._accepts_commands():
            return False
        return self._move(dx, dy)

    def rotate_piece(self) -> bool:
        if not self._accepts_commands():
            return False
        piece = self._piece
        assert piece is not None
        rotated = piece.body.rotated()
        if not self.is_valid_move(piece, 0, 0, rotated):
            return False
        piece.body = rotated
        return True

    def drop_piece(self) -> int:
        """Hard drop: move to rest now, place after the settle delay.

        Returns the number of rows dropped; 0 means the piece was already
        resting and nothing happens.
        """
        if not self._accepts_commands():
            return 0
        piece = self._piece
        assert piece is not None
        distance = self._drop_distance(piece)
        if distance == 0:
            return 0
        piece.y += distance
        self.timeline.schedule(PendingSettle(self.clock() + self.config.settle_delay_ms, piece.piece_id))
        return distance

    def set_piece_theme(self, theme: Theme) -> None:
        if self._piece is not None:
            self._piece.theme = theme

    def select_theme(self, theme: Theme) -> None:
        """Paint the falling piece with `theme` and use it for every later spawn."""
        self.theme_selector = fixed_theme(theme)
        self.set_piece_theme(theme)

    def step(self, action: Action) -> Tuple[np.ndarray, int, bool, Dict[str, Any]]:
        if self.state != GameState.RUNNING:
            return self.get_state(), 0, self.game_over, {}

        if action == Action.LEFT:
            self.move_piece(-1, 0)
        elif action == Action.RIGHT:
            self.move_piece(1, 0)
        elif action == Action.ROTATE:
            self.rotate_piece()
        elif action == Action.SOFT_DROP:
            self.move_piece(0, 1)
        elif action == Action.HARD_DROP:
            self.drop_piece()
        elif action == Action.NONE:
            pass

        info = {
            "score": self.score,
            "lines": self.lines,
            "level": self.level,
        }
        return self.get_state(), 0, self.game_over, info

    # ----- timing -----

    def tick(self) -> None:
        now = self.clock()
        self._fire_due(now)
        if self.state != GameState.RUNNING or self._piece is None or self.settling:
            return
        if now - self.last_drop > self.progression.drop_interval_ms:
            self._move(0, 1)
            self.last_drop = now

    def _fire_due(self, now: int) -> None:
        while True:
            event = self.timeline.pop_due(now)
            if event is None:
                return
            if isinstance(event, PendingClear):
                self._resolve_clear(event)
            else:
                self._settle(event)

    # ----- internals -----

    def _move(self, dx: int, dy: int) -> bool:
        piece = self._piece
        assert piece is not None
        if self.is_valid_move(piece, dx, dy):
            piece.x += dx
            piece.y += dy
            return True
        if dy > 0:
            self._land()
        return False

    def _land(self) -> None:
        if self.timeline.pending_clear() is not None:
            # the board is frozen until the pending clear resolves
            return
        self._place_piece()

    def _drop_distance(self, piece: ActivePiece) -> int:
        distance = 0
        while self.is_valid_move(piece, 0, distance + 1):
            distance += 1
        return distance

    def _settle(self, event: PendingSettle) -> None:
        piece = self._piece
        if piece is None or piece.piece_id != event.piece_id:
            return
        if self.state in (GameState.NOT_STARTED, GameState.GAME_OVER):
            return
        pending = self.timeline.pending_clear()
        if pending is not None:
            self.timeline.schedule(PendingSettle(pending.due, piece.piece_id))
            return
        piece.y += self._drop_distance(piece)
        self._place_piece()

    def _spawn_next(self) -> None:
        kind = self.kind_selector() if self.kind_selector is not None else None
        piece = spawn_piece(
            self.theme_selector,
            self.rng,
            kind=kind,
            x=self.config.spawn_x,
            y=self.config.spawn_y,
        )
        if not self.is_valid_move(piece, 0, 0):
            logger.info("spawn of %s blocked, game over at score %d", piece.kind.name, self.score)
            self.state = GameState.GAME_OVER
            self._piece = None
            return
        self._piece = piece

    def _place_piece(self) -> None:
        piece = self._piece
        assert piece is not None
        assert self.timeline.pending_clear() is None
        result = self.grid.merge(piece)
        self.stats.record_used(piece.theme, piece.cell_count)
        logger.debug(
            "placed %s (%s) at (%d, %d), completed rows %s",
            piece.kind.name, piece.theme.value, piece.x, piece.y, result.completed_rows,
        )
        if result.completed_rows:
            self._animating_lines = list(result.completed_rows)
            self.timeline.schedule(
                PendingClear(
                    due=self.clock() + self.config.clear_delay_ms,
                    rows=tuple(result.completed_rows),
                    snapshot=result.layers,
                )
            )
        self._spawn_next()

    def _resolve_clear(self, event: PendingClear) -> None:
        tally = self.grid.tally_themes(event.snapshot, event.rows)
        self.grid.collapse(event.snapshot, event.rows)
        self._animating_lines = []
        self.stats.record_completed(tally)
        gained = self.progression.on_lines_cleared(len(event.rows))
        logger.debug("cleared rows %s for %d points", list(event.rows), gained)

        piece = self._piece
        if piece is not None and not self.is_valid_move(piece, 0, 0):
            # the stack above the cleared rows came down onto the piece; follow it
            piece.y += len(event.rows)
            assert self.is_valid_move(piece, 0, 0)

    # ----- observation -----

    def get_state(self) -> np.ndarray:
        state = self.grid.clone_state()
        piece = self._piece
        if piece is not None and not self.game_over:
            for x, y in piece.cells():
                if self.grid.is_inside(x, y):
                    state[y, x] = -int(piece.kind)
        return state
