"""Emboss — 3D embossed/stamped look from a directional 3x3 kernel."""

import numpy as np
from scipy.ndimage import correlate

from effects._rounding import clip_u8, round_half_up

EFFECT_ID = "emboss"
EFFECT_NAME = "Emboss"
EFFECT_CATEGORY = "stylize"

PARAMS: dict = {
    "strength": {
        "type": "float",
        "min": 0.1,
        "max": 3.0,
        "default": 1.0,
        "label": "Strength",
        "curve": "linear",
        "unit": "x",
        "description": "Kernel gain; higher values also keep more of the original color",
    },
}

# Light from the top-left: negative weights above/left, positive below/right
KERNEL = np.array(
    [
        [-2.0, -1.0, 0.0],
        [-1.0, 1.0, 1.0],
        [0.0, 1.0, 2.0],
    ]
)

NEUTRAL = 128


def apply(
    frame: np.ndarray,
    params: dict,
    *,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Emboss interior pixels; the outer 1px ring and alpha are copied as-is."""
    strength = max(0.1, min(3.0, float(params.get("strength", 1.0))))

    output = frame.copy()
    h, w = frame.shape[:2]
    if h < 3 or w < 3:
        return output

    src = frame[:, :, :3].astype(np.float64)
    weights = KERNEL[:, :, np.newaxis] * strength
    acc = correlate(src, weights)[1:-1, 1:-1]

    embossed = np.clip(round_half_up(acc + NEUTRAL), 0, 255)

    # Pull toward gray; stronger settings keep more color
    gray = round_half_up(embossed.sum(axis=2, keepdims=True) / 3)
    color_blend = min(1.0, strength * 0.3)
    blended = round_half_up(gray * (1 - color_blend) + embossed * color_blend)

    output[1:-1, 1:-1, :3] = clip_u8(blended)
    return output
