"""Halftone — print-style dot screen sampled from the source brightness.

Dots are rasterized with Pillow at a supersampled resolution and box-filtered
back down, which approximates the anti-aliased fills of a browser canvas.
"""

import math

import numpy as np
from PIL import Image, ImageDraw

EFFECT_ID = "halftone"
EFFECT_NAME = "Halftone"
EFFECT_CATEGORY = "stylize"

SHAPES = ("circle", "diamond", "rectangle")

PARAMS: dict = {
    "shape": {
        "type": "choice",
        "options": list(SHAPES),
        "default": "circle",
        "label": "Shape Type",
        "description": "Dot shape drawn at every screen point",
    },
    "dot_radius": {
        "type": "float",
        "min": 1.0,
        "max": 20.0,
        "default": 8.0,
        "label": "Dot Radius",
        "curve": "linear",
        "unit": "px",
        "description": "Largest dot radius; also sets the screen pitch",
    },
    "angle": {
        "type": "float",
        "min": 0.0,
        "max": 360.0,
        "default": 45.0,
        "label": "Angle",
        "curve": "linear",
        "unit": "°",
        "description": "Rotation of each dot about its screen point",
    },
    "color_mode": {
        "type": "bool",
        "default": False,
        "label": "Color Mode",
        "description": "Fill dots with the sampled color; bright areas get larger dots",
    },
}

SUPERSAMPLE = 4
# Above this many supersampled pixels the dots are drawn at native resolution
MAX_SUPERSAMPLED_PIXELS = 48_000_000

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def dot_spacing(dot_radius: float) -> float:
    """Screen pitch: tighter for small dots so they still read as a pattern."""
    if dot_radius <= 2:
        return dot_radius * 1.8
    if dot_radius <= 5:
        return dot_radius * 2.0
    return dot_radius * 2.5


def dot_sizes(darkness: np.ndarray, dot_radius: float) -> np.ndarray:
    """Dot size per screen point, with a visibility floor for small radii."""
    size = darkness * dot_radius
    if dot_radius <= 2:
        size = np.maximum(size * 1.2, np.where(darkness > 0.1, 0.3, 0.0))
    elif dot_radius <= 3:
        size = np.maximum(size, np.where(darkness > 0.1, 0.4, 0.0))
    return size


def _shape_points(shape: str, size: float, dot_radius: float):
    if shape == "diamond":
        return [(0.0, -size), (size, 0.0), (0.0, size), (-size, 0.0)]
    half = max(size, 0.5) if dot_radius <= 2 else size
    return [(-half, -half), (half, -half), (half, half), (-half, half)]


def _draw_dot(draw, x, y, size, shape, dot_radius, cos_a, sin_a, fill, scale):
    if shape == "circle":
        # Rotation leaves a circle unchanged
        r = size * scale
        cx, cy = x * scale - 0.5, y * scale - 0.5
        draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=fill)
        return
    points = [
        (
            (x + px * cos_a - py * sin_a) * scale - 0.5,
            (y + px * sin_a + py * cos_a) * scale - 0.5,
        )
        for px, py in _shape_points(shape, size, dot_radius)
    ]
    draw.polygon(points, fill=fill)


def apply(
    frame: np.ndarray,
    params: dict,
    *,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Render a dot screen over a white background.

    The output is fully opaque: the white paper replaces the source alpha.
    """
    shape = params.get("shape", "circle")
    if shape not in SHAPES:
        shape = "circle"
    dot_radius = max(1.0, min(20.0, float(params.get("dot_radius", 8.0))))
    angle = max(0.0, min(360.0, float(params.get("angle", 45.0))))
    color_mode = bool(params.get("color_mode", False))

    h, w = frame.shape[:2]
    spacing = dot_spacing(dot_radius)
    threshold = 0.1 if dot_radius <= 2 else 0.3
    theta = math.radians(angle)
    cos_a, sin_a = math.cos(theta), math.sin(theta)

    ys = np.arange(spacing / 2, h, spacing)
    xs = np.arange(spacing / 2, w, spacing)
    sample_y = np.floor(np.clip(ys, 0, h - 1)).astype(np.intp)
    sample_x = np.floor(np.clip(xs, 0, w - 1)).astype(np.intp)
    samples = frame[sample_y[:, np.newaxis], sample_x[np.newaxis, :], :3]

    brightness = samples.astype(np.float64).sum(axis=2) / 3
    darkness = brightness / 255 if color_mode else 1 - brightness / 255
    sizes = dot_sizes(darkness, dot_radius)

    scale = SUPERSAMPLE
    if w * h * scale * scale > MAX_SUPERSAMPLED_PIXELS:
        scale = 1
    canvas = Image.new("RGB", (w * scale, h * scale), WHITE)
    draw = ImageDraw.Draw(canvas)

    for iy, ix in zip(*np.nonzero(sizes > threshold)):
        fill = tuple(int(c) for c in samples[iy, ix]) if color_mode else BLACK
        _draw_dot(
            draw,
            xs[ix],
            ys[iy],
            float(sizes[iy, ix]),
            shape,
            dot_radius,
            cos_a,
            sin_a,
            fill,
            scale,
        )

    if scale > 1:
        canvas = canvas.resize((w, h), Image.Resampling.BOX)

    output = np.empty_like(frame)
    output[:, :, :3] = np.asarray(canvas, dtype=np.uint8)
    output[:, :, 3] = 255
    return output
