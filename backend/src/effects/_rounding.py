"""Rounding helpers matching browser canvas arithmetic.

``round_half_up`` is JavaScript ``Math.round``; byte stores into canvas
image data clamp and round half-to-even, which is ``store_u8``.
"""

import numpy as np


def round_half_up(values):
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def clip_u8(values) -> np.ndarray:
    """Clamp already-integral values into [0, 255] and narrow to uint8."""
    return np.clip(values, 0, 255).astype(np.uint8)


def store_u8(values) -> np.ndarray:
    """Clamped byte store: round half-to-even, then clamp."""
    return clip_u8(np.rint(values))
