from __future__ import annotations

import logging
from typing import Callable, Dict

import pygame

from glizztris.game import GameState, GlizztrisGame, next_theme
from glizztris.game.grid import BOARD_HEIGHT, BOARD_WIDTH
from .projection import display_layers
from .renderer import Renderer


CELL = 28
MARGIN = 20
PANEL = 180


def _key_bindings(game: GlizztrisGame) -> Dict[int, Callable[[], object]]:
    return {
        pygame.K_LEFT: lambda: game.move_piece(-1, 0),
        pygame.K_RIGHT: lambda: game.move_piece(1, 0),
        pygame.K_DOWN: lambda: game.move_piece(0, 1),
        pygame.K_SPACE: game.rotate_piece,
        pygame.K_UP: game.drop_piece,
    }


def _draw_panel(screen: pygame.Surface, font: pygame.font.Font, game: GlizztrisGame) -> None:
    x = MARGIN * 2 + BOARD_WIDTH * CELL
    lines = [
        f"Score: {game.score}",
        f"Level: {game.level}",
        f"Foot longs: {game.lines}",
    ]
    piece = game.current_piece
    if piece is not None:
        lines.append(f"Piece: {piece.theme.value}")
    for theme, used in game.stats.used.items():
        lines.append(f"{theme.value}: {game.stats.completed[theme]}/{used}")
    for i, text in enumerate(lines):
        screen.blit(font.render(text, True, (240, 220, 160)), (x, MARGIN + i * 26))


def run() -> None:
    logging.basicConfig(level=logging.INFO)
    pygame.init()
    try:
        clock = pygame.time.Clock()
        game = GlizztrisGame(clock=pygame.time.get_ticks)
        renderer = Renderer(cell_size=CELL, margin=MARGIN)
        bindings = _key_bindings(game)

        screen = pygame.display.set_mode(
            (BOARD_WIDTH * CELL + MARGIN * 3 + PANEL, BOARD_HEIGHT * CELL + MARGIN * 2)
        )
        pygame.display.set_caption("Glizztris")
        font = pygame.font.SysFont(None, 28)
        game.start()

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        if game.state == GameState.PAUSED:
                            game.resume()
                        else:
                            game.pause()
                    elif event.key == pygame.K_r:
                        game.reset()
                    elif event.key == pygame.K_t:
                        piece = game.current_piece
                        if piece is not None:
                            game.select_theme(next_theme(piece.theme))
                    else:
                        action = bindings.get(event.key)
                        if action is not None:
                            action()

            game.tick()

            renderer.draw(screen, display_layers(game))
            _draw_panel(screen, font, game)
            if game.state in (GameState.GAME_OVER, GameState.PAUSED):
                label = "GAME OVER - R to restart" if game.game_over else "PAUSED - P to resume"
                text = font.render(label, True, (255, 255, 255))
                rect = text.get_rect(center=(MARGIN + BOARD_WIDTH * CELL // 2, screen.get_height() // 2))
                screen.blit(text, rect)
            pygame.display.flip()

            clock.tick(1000 // game.config.tick_ms)
        print(f"Final score: {game.score} (level {game.level}, {game.lines} lines)")
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    run()
