"""Pixelate — block-average downsampling into square tiles."""

import numpy as np

from effects._rounding import round_half_up

EFFECT_ID = "pixelate"
EFFECT_NAME = "Pixelate"
EFFECT_CATEGORY = "stylize"

PARAMS: dict = {
    "pixel_size": {
        "type": "int",
        "min": 1,
        "max": 120,
        "default": 10,
        "label": "Pixel Size",
        "curve": "linear",
        "unit": "px",
        "description": "Edge length of each averaged tile",
    }
}


def apply(
    frame: np.ndarray,
    params: dict,
    *,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Replace every tile with the mean of its own pixels, alpha included.

    Tiles on the right and bottom edges may be narrower; they average only
    the pixels they contain.
    """
    size = int(params.get("pixel_size", 10))
    size = max(1, min(120, size))

    if size == 1:
        return frame.copy()

    h, w = frame.shape[:2]
    row_starts = np.arange(0, h, size)
    col_starts = np.arange(0, w, size)
    tile_h = np.diff(np.append(row_starts, h))
    tile_w = np.diff(np.append(col_starts, w))

    sums = np.add.reduceat(frame.astype(np.int64), row_starts, axis=0)
    sums = np.add.reduceat(sums, col_starts, axis=1)
    counts = (tile_h[:, np.newaxis] * tile_w[np.newaxis, :])[:, :, np.newaxis]
    means = round_half_up(sums / counts).astype(np.uint8)

    return np.repeat(np.repeat(means, tile_h, axis=0), tile_w, axis=1)
