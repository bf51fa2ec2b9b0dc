import unittest

import gymnasium as gym
import numpy as np

import glizztris.env  # noqa: F401
from glizztris.env.glizztris_env import GlizztrisEnv
from glizztris.game import Action, GameState, Theme
from glizztris.game.grid import BOARD_HEIGHT, BOARD_WIDTH


class TestGlizztrisEnv(unittest.TestCase):

    def setUp(self):
        self.env = GlizztrisEnv(render_mode="rgb_array", theme=Theme.MUSTARD)

    def tearDown(self):
        self.env.close()

    def test_reset_observation(self):
        obs, info = self.env.reset(seed=3)
        self.assertEqual(obs["board"].shape, (BOARD_HEIGHT, BOARD_WIDTH))
        self.assertEqual(obs["board"].dtype, np.int8)
        self.assertLess(int(obs["board"].min()), 0)
        self.assertEqual(obs["level"], 1)
        self.assertEqual(info["score"], 0)
        self.assertTrue(self.env.observation_space.contains(obs))
        self.assertEqual(self.env.game.state, GameState.RUNNING)

    def test_hard_drop_places_after_one_step(self):
        self.env.reset(seed=1)
        obs, reward, terminated, truncated, info = self.env.step(int(Action.HARD_DROP))
        self.assertEqual(reward, 0.0)
        self.assertFalse(terminated)
        self.assertFalse(truncated)
        self.assertEqual(info["mustard_used"], 4)
        self.assertGreater(int(np.count_nonzero(obs["board"] > 0)), 0)

    def test_gravity_runs_on_virtual_clock(self):
        self.env.reset(seed=2)
        y0 = self.env.game.current_piece.y
        for _ in range(21):
            self.env.step(int(Action.NONE))
        self.assertEqual(self.env.game.current_piece.y, y0 + 1)

    def test_episode_terminates(self):
        self.env.reset(seed=4)
        terminated = False
        for _ in range(2000):
            _, _, terminated, truncated, _ = self.env.step(int(Action.HARD_DROP))
            if terminated or truncated:
                break
        self.assertTrue(terminated)
        self.assertTrue(self.env.game.game_over)

    def test_truncation(self):
        env = GlizztrisEnv(max_episode_steps=3)
        env.reset(seed=0)
        results = [env.step(int(Action.NONE)) for _ in range(3)]
        self.assertFalse(results[1][3])
        self.assertTrue(results[2][3])

    def test_render_rgb(self):
        self.env.reset(seed=0)
        img = self.env.render()
        self.assertEqual(img.shape, (BOARD_HEIGHT * 12, BOARD_WIDTH * 12, 3))

    def test_registered(self):
        env = gym.make("Glizztris-10x20-v0")
        obs, _ = env.reset(seed=0)
        obs, reward, terminated, truncated, info = env.step(env.action_space.sample())
        self.assertIn("lines", info)
        env.close()


if __name__ == "__main__":
    unittest.main()
