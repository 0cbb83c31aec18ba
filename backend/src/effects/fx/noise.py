"""Noise effect — uniform luminance noise, one draw per pixel."""

import math

import numpy as np

from effects._rounding import store_u8
from engine.determinism import make_rng

EFFECT_ID = "noise"
EFFECT_NAME = "Noise"
EFFECT_CATEGORY = "texture"

PARAMS: dict = {
    "amount": {
        "type": "int",
        "min": 0,
        "max": 100,
        "default": 25,
        "label": "Noise Amount",
        "curve": "linear",
        "unit": "",
        "description": "Maximum brightness offset added to each pixel",
    }
}


def apply(
    frame: np.ndarray,
    params: dict,
    *,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Add the same uniform offset in [-amount, amount] to R, G and B of a pixel."""
    # Whole steps only: the byte store then stays within amount of the input
    amount = math.floor(float(params.get("amount", 25)))
    amount = max(0, min(100, amount))

    if amount == 0:
        return frame.copy()

    rng = rng if rng is not None else make_rng()
    h, w = frame.shape[:2]

    # Shared across channels: noise shifts brightness, not hue
    delta = rng.uniform(-amount, amount, (h, w, 1))
    output = frame.copy()
    output[:, :, :3] = store_u8(frame[:, :, :3].astype(np.float64) + delta)
    return output
