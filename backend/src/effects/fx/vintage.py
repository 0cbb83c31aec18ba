"""Vintage — sepia toning, film grain and a radial vignette."""

import math

import numpy as np

from effects._rounding import store_u8
from engine.determinism import make_rng

EFFECT_ID = "vintage"
EFFECT_NAME = "Vintage"
EFFECT_CATEGORY = "color"

PARAMS: dict = {
    "sepia": {
        "type": "float",
        "min": 0.0,
        "max": 100.0,
        "default": 30.0,
        "label": "Sepia",
        "curve": "linear",
        "unit": "%",
        "description": "Blend toward the classic sepia tone matrix",
    },
    "grain": {
        "type": "float",
        "min": 0.0,
        "max": 50.0,
        "default": 20.0,
        "label": "Grain",
        "curve": "linear",
        "unit": "",
        "description": "Width of the per-pixel brightness jitter",
    },
    "vignette": {
        "type": "float",
        "min": 0.0,
        "max": 100.0,
        "default": 40.0,
        "label": "Vignette",
        "curve": "linear",
        "unit": "%",
        "description": "Corner darkening; the centre is never darkened",
    },
}

SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ]
)


def sepia_tone(rgb: np.ndarray, amount: float) -> np.ndarray:
    """Blend float RGB toward its sepia transform by ``amount`` in [0, 1]."""
    r, g, b = rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2]
    toned = np.stack(
        [m[0] * r + m[1] * g + m[2] * b for m in SEPIA_MATRIX],
        axis=2,
    )
    return np.minimum(255.0, rgb + (toned - rgb) * amount)


def vignette_mask(h: int, w: int, strength: float) -> np.ndarray:
    """Black overlay opacity per pixel: 0 at the centre, ``strength`` at the corners."""
    cx, cy = w / 2, h / 2
    max_dist = math.hypot(cx, cy)
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    dist = np.hypot(xs + 0.5 - cx, ys + 0.5 - cy)
    return np.clip(dist / max_dist, 0.0, 1.0) * strength


def apply(
    frame: np.ndarray,
    params: dict,
    *,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Sepia + grain per pixel, then the vignette overlay. Alpha preserved."""
    sepia = max(0.0, min(100.0, float(params.get("sepia", 30.0))))
    grain = max(0.0, min(50.0, float(params.get("grain", 20.0))))
    vignette = max(0.0, min(100.0, float(params.get("vignette", 40.0))))

    h, w = frame.shape[:2]
    rgb = store_u8(sepia_tone(frame[:, :, :3].astype(np.float64), sepia / 100))

    if grain > 0.0:
        rng = rng if rng is not None else make_rng()
        delta = (rng.random((h, w, 1)) - 0.5) * grain
        rgb = store_u8(rgb + delta)

    if vignette > 0.0:
        mask = vignette_mask(h, w, vignette / 100)[:, :, np.newaxis]
        rgb = store_u8(rgb * (1 - mask))

    output = frame.copy()
    output[:, :, :3] = rgb
    return output
