"""Gymnasium environments for Glizztris."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Register the default 10x20 falling-block environment
register(
    id="Glizztris-10x20-v0",
    entry_point="glizztris.env.glizztris_env:GlizztrisEnv",
)

__all__ = ["Glizztris-10x20-v0"]
