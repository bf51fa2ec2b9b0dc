import random
import unittest

import numpy as np

from glizztris.game.pieces import (
    CATALOG,
    EMPTY_ORIENTATION,
    OrientedPolyomino,
    PieceKind,
    Texture,
    spawn_piece,
)
from glizztris.game.themes import THEME_ORDER, Theme, fixed_theme, next_theme, random_theme


class TestCatalog(unittest.TestCase):

    def test_seven_tetrominoes(self):
        self.assertEqual(set(CATALOG), set(PieceKind))
        for kind, body in CATALOG.items():
            self.assertEqual(body.cell_count, 4, kind.name)

    def test_every_occupied_cell_has_texture_and_orientation(self):
        for kind, body in CATALOG.items():
            for (y, x), filled in np.ndenumerate(body.cells):
                if filled:
                    self.assertIsInstance(body.textures[y, x], Texture, f"{kind.name} ({x},{y})")
                    self.assertIn(int(body.orientations[y, x]), (0, 90, 180, 270))
                else:
                    self.assertIsNone(body.textures[y, x])
                    self.assertEqual(body.orientations[y, x], EMPTY_ORIENTATION)

    def test_o_piece_uses_bun_corners(self):
        body = CATALOG[PieceKind.O]
        self.assertEqual(
            body.textures.tolist(),
            [[Texture.TOP_LEFT, Texture.TOP_RIGHT], [Texture.BOTTOM_LEFT, Texture.BOTTOM_RIGHT]],
        )

    def test_catalog_is_read_only(self):
        with self.assertRaises(ValueError):
            CATALOG[PieceKind.T].cells[0, 0] = 1

    def test_mismatched_matrices_rejected(self):
        with self.assertRaises(ValueError):
            OrientedPolyomino.from_rows([[1, 1]], [[Texture.BLOCK]], [[0, 0]])

    def test_missing_texture_rejected(self):
        with self.assertRaises(ValueError):
            OrientedPolyomino.from_rows([[1, 1]], [[Texture.BLOCK, None]], [[0, 0]])

    def test_bad_orientation_rejected(self):
        with self.assertRaises(ValueError):
            OrientedPolyomino.from_rows([[1]], [[Texture.BLOCK]], [[45]])


class TestRotation(unittest.TestCase):

    def test_rotation_is_clockwise_transpose(self):
        body = CATALOG[PieceKind.J].rotated()
        # [[1,0,0],[1,1,1]] turned clockwise
        self.assertEqual(body.cells.tolist(), [[1, 1], [1, 0], [1, 0]])
        self.assertEqual(body.textures[0, 0], Texture.ELBOW_LEFT)
        self.assertEqual(body.orientations[0, 0], 0)  # 270 + 90
        self.assertEqual(body.orientations[0, 1], 180)  # 90 + 90

    def test_i_piece_turns_vertical(self):
        body = CATALOG[PieceKind.I].rotated()
        self.assertEqual(body.shape, (4, 1))
        self.assertTrue(np.all(body.orientations == 90))

    def test_four_rotations_return_to_start(self):
        for kind, body in CATALOG.items():
            turned = body
            for _ in range(4):
                turned = turned.rotated()
            self.assertTrue(turned.same_as(body), kind.name)

    def test_rotation_keeps_empty_cells_empty(self):
        body = CATALOG[PieceKind.T]
        for _ in range(3):
            body = body.rotated()
            empty = body.cells == 0
            self.assertTrue(np.all(body.orientations[empty] == EMPTY_ORIENTATION))
            self.assertTrue(all(t is None for t in body.textures[empty]))


class TestSpawn(unittest.TestCase):

    def test_spawn_copies_catalog(self):
        piece = spawn_piece(fixed_theme(Theme.KETCHUP), random.Random(0), kind=PieceKind.S)
        self.assertIsNot(piece.body, CATALOG[PieceKind.S])
        self.assertIsNot(piece.body.cells, CATALOG[PieceKind.S].cells)
        self.assertTrue(piece.body.same_as(CATALOG[PieceKind.S]))
        self.assertEqual((piece.x, piece.y), (4, 0))
        self.assertEqual(piece.theme, Theme.KETCHUP)

    def test_spawn_draws_every_kind(self):
        rng = random.Random(7)
        seen = {spawn_piece(fixed_theme(Theme.MUSTARD), rng).kind for _ in range(200)}
        self.assertEqual(seen, set(PieceKind))

    def test_piece_ids_are_unique(self):
        rng = random.Random(1)
        ids = {spawn_piece(fixed_theme(Theme.MUSTARD), rng).piece_id for _ in range(20)}
        self.assertEqual(len(ids), 20)

    def test_cells_at_offsets(self):
        piece = spawn_piece(fixed_theme(Theme.RELISH), random.Random(0), kind=PieceKind.O, x=3, y=5)
        self.assertEqual(sorted(piece.cells()), [(3, 5), (3, 6), (4, 5), (4, 6)])


class TestThemes(unittest.TestCase):

    def test_next_theme_cycles(self):
        self.assertEqual(next_theme(Theme.MUSTARD), Theme.KETCHUP)
        self.assertEqual(next_theme(Theme.KETCHUP), Theme.RELISH)
        self.assertEqual(next_theme(Theme.RELISH), Theme.MUSTARD)

    def test_random_theme_covers_all(self):
        select = random_theme(random.Random(3))
        self.assertEqual({select() for _ in range(100)}, set(THEME_ORDER))


if __name__ == "__main__":
    unittest.main()
