"""Tests for glass refraction — identity at zero intensity, aberration, softening."""

import numpy as np
import pytest

from effects.fx.glass_refraction import (
    EFFECT_ID,
    PARAMS,
    apply,
    displacement_field,
    glass_wave,
)

pytestmark = pytest.mark.smoke


def _frame(h=48, w=64):
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, (h, w, 4), dtype=np.uint8)


def test_basic():
    frame = _frame()
    result = apply(frame, {"intensity": 80, "amplitude": 20})
    assert result.shape == frame.shape
    assert result.dtype == np.uint8
    assert not np.array_equal(result, frame)


def test_zero_intensity_is_identity():
    frame = _frame()
    np.testing.assert_array_equal(apply(frame, {"intensity": 0, "amplitude": 50}), frame)


def test_wave_is_zero_at_origin():
    assert glass_wave(np.array(0.0), np.array(0.0), 0.8) == 0.0
    wave = glass_wave(np.linspace(0, 1, 50), np.linspace(1, 0, 50), 2.0)
    assert np.abs(wave).max() <= 1.0


def test_field_scales_with_amplitude():
    _, fx_small, _ = displacement_field(20, 30, 8, 2.0, 0.0)
    _, fx_large, _ = displacement_field(20, 30, 8, 8.0, 0.0)
    xs = np.arange(30)[np.newaxis, :]
    assert np.abs(fx_large - xs).max() > np.abs(fx_small - xs).max()


def test_origin_pixel_samples_itself_without_aberration():
    frame = _frame()
    result = apply(frame, {"intensity": 30, "amplitude": 50})
    np.testing.assert_array_equal(result[0, 0], frame[0, 0])


def test_chromatic_aberration_shifts_red_and_blue():
    frame = _frame()
    # amp = 10 * 1.0, offset = floor(10 * 0.5) = 5
    result = apply(frame, {"intensity": 100, "amplitude": 10, "soften": False})
    assert result[0, 0, 0] == frame[0, 5, 0]
    assert result[0, 0, 1] == frame[0, 0, 1]
    assert result[0, 0, 2] == frame[0, 0, 2]
    assert result[0, 0, 3] == frame[0, 0, 3]


def test_alpha_taken_from_source():
    frame = _frame()
    frame[:, :, 3] = 123
    result = apply(frame, {"intensity": 90, "amplitude": 30})
    assert (result[:, :, 3] == 123).all()


def test_soften_only_above_half_intensity():
    frame = _frame()
    low_on = apply(frame, {"intensity": 40, "soften": True})
    low_off = apply(frame, {"intensity": 40, "soften": False})
    np.testing.assert_array_equal(low_on, low_off)

    high_on = apply(frame, {"intensity": 90, "soften": True})
    high_off = apply(frame, {"intensity": 90, "soften": False})
    assert not np.array_equal(high_on, high_off)


def test_determinism():
    frame = _frame()
    params = {"intensity": 70, "frequency": 12, "amplitude": 15, "direction": 45}
    np.testing.assert_array_equal(apply(frame, params), apply(frame, params))


def test_boundary():
    frame = _frame()
    maxed = {k: v["max"] for k, v in PARAMS.items() if "max" in v}
    assert apply(frame, maxed).shape == frame.shape
    mined = {k: v["min"] for k, v in PARAMS.items() if "min" in v}
    np.testing.assert_array_equal(apply(frame, mined), frame)
    assert EFFECT_ID == "glass-refraction"
