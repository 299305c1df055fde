"""
Small stateless helpers used across the armsort_sim package.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from armsort_sim.utils.constants import NAMED_COLORS


def clamp(value: float, lo: float, hi: float) -> float:
    """Return *value* clamped to the closed interval [*lo*, *hi*].

    Args:
        value: The scalar to clamp.
        lo: Lower bound (inclusive).
        hi: Upper bound (inclusive).

    Returns:
        The clamped scalar.
    """
    return max(lo, min(hi, value))


def seed_rngs(seed: int | None) -> np.random.Generator:
    """Create and return a NumPy random generator seeded with *seed*.

    Args:
        seed: The integer seed value, or *None* for OS entropy.

    Returns:
        A seeded ``numpy.random.Generator``.
    """
    return np.random.default_rng(seed)


def color_to_rgb(name: str) -> Tuple[int, int, int]:
    """Look up the RGB triple for a palette color name.

    Unknown names render as mid grey.
    """
    return NAMED_COLORS.get(name, (128, 128, 128))
