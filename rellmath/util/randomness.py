from __future__ import annotations

"""Seeding for the process-wide random source."""

import os
import random


def seed_if_needed() -> bool:
    """Seed the RNG if the SEED env var holds an integer. Returns True when seeded."""
    seed = os.environ.get("SEED")
    if seed is None:
        return False
    try:
        s = int(seed)
    except ValueError:
        return False
    random.seed(s)
    return True
