from __future__ import annotations

"""Randomness helpers for question sampling and seeding."""

import os
import random
from typing import Optional

import numpy as np


def _env_seed() -> Optional[int]:
    seed = os.environ.get("SEED")
    if seed is None:
        return None
    try:
        return int(seed)
    except ValueError:
        return None


def seed_if_needed() -> None:
    """Seed RNGs if SEED env var is set."""
    s = _env_seed()
    if s is not None:
        random.seed(s)
        np.random.seed(s)


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Private RNG for one sampling run; falls back to SEED, then to system entropy."""
    return random.Random(seed if seed is not None else _env_seed())
