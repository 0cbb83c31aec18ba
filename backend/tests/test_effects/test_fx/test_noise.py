"""Tests for noise — shared per-pixel delta, bounds, seeded determinism."""

import numpy as np
import pytest

from effects.fx.noise import EFFECT_ID, PARAMS, apply
from engine.determinism import make_rng

pytestmark = pytest.mark.smoke


def _frame(h=100, w=100):
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, (h, w, 4), dtype=np.uint8)


def test_basic():
    frame = _frame()
    result = apply(frame, {"amount": 30}, rng=make_rng(1))
    assert result.shape == frame.shape
    assert result.dtype == np.uint8
    assert not np.array_equal(result[:, :, :3], frame[:, :, :3])
    np.testing.assert_array_equal(result[:, :, 3], frame[:, :, 3])


def test_zero_amount_is_identity():
    frame = _frame()
    np.testing.assert_array_equal(apply(frame, {"amount": 0}, rng=make_rng(1)), frame)


def test_offsets_stay_within_amount():
    frame = _frame()
    for amount in (1, 10, 100):
        result = apply(frame, {"amount": amount}, rng=make_rng(amount))
        diff = np.abs(result.astype(np.int16) - frame.astype(np.int16))
        assert diff[:, :, :3].max() <= amount


def test_fractional_amount_is_floored():
    frame = _frame()
    np.testing.assert_array_equal(apply(frame, {"amount": 0.5}, rng=make_rng(1)), frame)
    result = apply(frame, {"amount": 10.7}, rng=make_rng(4))
    diff = np.abs(result.astype(np.int16) - frame.astype(np.int16))
    assert diff[:, :, :3].max() <= 10
    assert PARAMS["amount"]["type"] == "int"


def test_same_delta_on_every_channel():
    frame = np.full((50, 50, 4), 128, dtype=np.uint8)
    result = apply(frame, {"amount": 50}, rng=make_rng(3))
    np.testing.assert_array_equal(result[:, :, 0], result[:, :, 1])
    np.testing.assert_array_equal(result[:, :, 1], result[:, :, 2])


def test_determinism():
    frame = _frame()
    r1 = apply(frame, {"amount": 40}, rng=make_rng(9))
    r2 = apply(frame, {"amount": 40}, rng=make_rng(9))
    np.testing.assert_array_equal(r1, r2)
    r3 = apply(frame, {"amount": 40}, rng=make_rng(10))
    assert not np.array_equal(r1, r3)


def test_boundary():
    frame = _frame()
    r_max = apply(frame, {"amount": PARAMS["amount"]["max"]}, rng=make_rng(2))
    assert r_max.shape == frame.shape
    # Without an injected generator the effect still runs
    assert apply(frame, {"amount": 5}).dtype == np.uint8
    assert EFFECT_ID == "noise"
