"""Blur effect — gaussian blur using scipy.ndimage."""

import numpy as np
from scipy.ndimage import gaussian_filter

from effects._rounding import store_u8

EFFECT_ID = "blur"
EFFECT_NAME = "Blur"
EFFECT_CATEGORY = "blur"

PARAMS: dict = {
    "radius": {
        "type": "float",
        "min": 0.0,
        "max": 50.0,
        "default": 5.0,
        "label": "Blur Radius",
        "curve": "exponential",
        "unit": "px",
        "description": "Gaussian standard deviation in pixels",
    }
}


def gaussian_rgb(frame: np.ndarray, sigma: float) -> np.ndarray:
    """Gaussian-blur the RGB planes of a frame as float64, edges mirrored."""
    rgb = frame[:, :, :3].astype(np.float64)
    return gaussian_filter(rgb, sigma=(sigma, sigma, 0))


def apply(
    frame: np.ndarray,
    params: dict,
    *,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Apply gaussian blur to RGB, preserve alpha. Stateless."""
    radius = float(params.get("radius", 5.0))
    radius = max(0.0, min(50.0, radius))

    if radius == 0.0:
        return frame.copy()

    output = frame.copy()
    output[:, :, :3] = store_u8(gaussian_rgb(frame, radius))
    return output
