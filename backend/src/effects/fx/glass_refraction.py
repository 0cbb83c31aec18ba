"""Glass Refraction — sinusoidal displacement field with chromatic fringing.

Three interfering sine terms build a smooth height field over normalized
image coordinates. Each output pixel samples the source at an offset along
``direction`` (plus a weaker perpendicular component). Above 30% intensity
the red and blue channels are sampled from horizontally shifted positions,
and a thickness term brightens or darkens along the wave. Above 50% an
optional softening pass lays a lightly blurred copy over the result.

Vectorized with numpy fancy indexing; the per-pixel arithmetic keeps the
operand order of the browser implementation so results match it bit for bit.
"""

import math

import numpy as np

from effects._rounding import clip_u8, round_half_up
from effects.fx.blur import gaussian_rgb

EFFECT_ID = "glass-refraction"
EFFECT_NAME = "Glass"
EFFECT_CATEGORY = "distortion"

PARAMS: dict = {
    "intensity": {
        "type": "float",
        "min": 0.0,
        "max": 100.0,
        "default": 50.0,
        "label": "Intensity",
        "curve": "linear",
        "unit": "%",
        "description": "Scales displacement; enables fringing above 30 and softening above 50",
    },
    "frequency": {
        "type": "float",
        "min": 1.0,
        "max": 20.0,
        "default": 8.0,
        "label": "Frequency",
        "curve": "linear",
        "unit": "",
        "description": "Ripple density of the glass surface",
    },
    "amplitude": {
        "type": "float",
        "min": 1.0,
        "max": 50.0,
        "default": 10.0,
        "label": "Amplitude",
        "curve": "exponential",
        "unit": "px",
        "description": "Peak displacement at full intensity",
    },
    "direction": {
        "type": "float",
        "min": 0.0,
        "max": 360.0,
        "default": 0.0,
        "label": "Direction",
        "curve": "linear",
        "unit": "°",
        "description": "Main axis of the displacement",
    },
    "soften": {
        "type": "bool",
        "default": True,
        "label": "Soften",
        "description": "Overlay a lightly blurred copy at high intensity",
    },
}

ABERRATION_THRESHOLD = 0.3
SOFTEN_THRESHOLD = 0.5
SOFTEN_OPACITY = 0.15
PERPENDICULAR_WEIGHT = 0.3
THICKNESS_GAIN = 0.1


def glass_wave(u: np.ndarray, v: np.ndarray, freq: float) -> np.ndarray:
    """Combined height field in [-1, 1] for normalized coordinates (u, v)."""
    pi = math.pi
    w1 = np.sin(u * pi * freq) * np.cos(v * pi * freq)
    w2 = np.sin(v * pi * freq * 1.3) * np.cos(u * pi * freq * 0.7)
    w3 = np.sin((u + v) * pi * freq * 0.8)
    return (w1 + w2 * 0.7 + w3 * 0.5) / 2.2


def displacement_field(
    h: int,
    w: int,
    frequency: float,
    amp: float,
    direction: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return (wave, source_x, source_y) before clamping, as float64 grids."""
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    wave = glass_wave(xs / w, ys / h, frequency * 0.1)

    theta = direction * math.pi / 180
    cos_d, sin_d = math.cos(theta), math.sin(theta)
    along_x = wave * amp * cos_d
    along_y = wave * amp * sin_d
    perp_x = wave * amp * PERPENDICULAR_WEIGHT * (-sin_d)
    perp_y = wave * amp * PERPENDICULAR_WEIGHT * cos_d
    return wave, xs + along_x + perp_x, ys + along_y + perp_y


def soften(frame: np.ndarray, intensity_factor: float) -> np.ndarray:
    """Composite a blurred copy over the frame at SOFTEN_OPACITY."""
    output = frame.copy()
    blurred = gaussian_rgb(frame, intensity_factor * 0.5)
    rgb = frame[:, :, :3].astype(np.float64)
    mixed = rgb * (1 - SOFTEN_OPACITY) + blurred * SOFTEN_OPACITY
    output[:, :, :3] = clip_u8(np.rint(mixed))
    return output


def apply(
    frame: np.ndarray,
    params: dict,
    *,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Warp the frame through a simulated sheet of rippled glass. Stateless."""
    intensity = max(0.0, min(100.0, float(params.get("intensity", 50.0))))
    frequency = max(1.0, min(20.0, float(params.get("frequency", 8.0))))
    amplitude = max(1.0, min(50.0, float(params.get("amplitude", 10.0))))
    direction = max(0.0, min(360.0, float(params.get("direction", 0.0))))
    soften_enabled = bool(params.get("soften", True))

    h, w = frame.shape[:2]
    intensity_factor = intensity / 100
    amp = amplitude * intensity_factor

    wave, fx, fy = displacement_field(h, w, frequency, amp, direction)
    src_x = np.clip(round_half_up(fx), 0, w - 1).astype(np.intp)
    src_y = np.clip(round_half_up(fy), 0, h - 1).astype(np.intp)

    sampled = frame[src_y, src_x]
    r = sampled[:, :, 0]
    g = sampled[:, :, 1]
    b = sampled[:, :, 2]

    if intensity_factor > ABERRATION_THRESHOLD:
        offset = math.floor(amp * 0.5)
        if offset > 0:
            red_x = np.clip(src_x + offset, 0, w - 1)
            blue_x = np.clip(src_x - offset, 0, w - 1)
            r = frame[src_y, red_x, 0]
            b = frame[src_y, blue_x, 2]

    factor = 1 + np.sin(wave * math.pi) * THICKNESS_GAIN * intensity_factor

    output = np.empty_like(frame)
    for ch, plane in enumerate((r, g, b)):
        output[:, :, ch] = clip_u8(round_half_up(plane * factor))
    output[:, :, 3] = sampled[:, :, 3]

    if soften_enabled and intensity_factor > SOFTEN_THRESHOLD:
        output = soften(output, intensity_factor)

    return output
