"""Posterize effect — snap each channel to evenly spaced levels."""

import math

import numpy as np

from effects._rounding import round_half_up

EFFECT_ID = "posterize"
EFFECT_NAME = "Posterize"
EFFECT_CATEGORY = "color"

PARAMS: dict = {
    "levels": {
        "type": "int",
        "min": 2,
        "max": 16,
        "default": 4,
        "label": "Color Levels",
        "curve": "linear",
        "unit": "",
        "description": "Number of distinct color levels per channel",
    }
}


def anchors(levels: int) -> np.ndarray:
    """Quantization anchors: round(i / (levels - 1) * 255) for i in [0, levels)."""
    levels = max(2, int(levels))
    return round_half_up(np.arange(levels) / (levels - 1) * 255).astype(np.int64)


def quantize_table(levels: int) -> np.ndarray:
    """256-entry lookup mapping every byte to its nearest anchor.

    Ties go to the lower anchor (argmin keeps the first minimum).
    """
    points = anchors(levels)
    values = np.arange(256)
    nearest = np.argmin(np.abs(values[:, np.newaxis] - points[np.newaxis, :]), axis=1)
    return points[nearest].astype(np.uint8)


def apply(
    frame: np.ndarray,
    params: dict,
    *,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Reduce color levels. Stateless."""
    levels = math.floor(float(params.get("levels", 4)))
    levels = max(2, min(16, levels))

    output = frame.copy()
    # Posterize RGB channels, preserve alpha
    output[:, :, :3] = quantize_table(levels)[frame[:, :, :3]]
    return output
