"""Tests for effect container — param validation, output checks, crash reporting."""

from unittest.mock import patch

import numpy as np
import pytest

from effects.fx.posterize import PARAMS as POSTERIZE_PARAMS
from effects.fx.posterize import apply as posterize_apply
from effects.registry import get
from engine.container import EffectContainer, validate_params
from engine.determinism import make_rng
from engine.errors import ParameterOutOfRange

pytestmark = pytest.mark.smoke


def _make_frame(r=128, g=64, b=32, a=255, h=10, w=10):
    frame = np.zeros((h, w, 4), dtype=np.uint8)
    frame[:, :] = (r, g, b, a)
    return frame


def test_container_runs_effect():
    container = EffectContainer(posterize_apply, "posterize", POSTERIZE_PARAMS)
    output = container.process(_make_frame(), {"levels": 2}, rng=make_rng(0))
    np.testing.assert_array_equal(output[0, 0], [255, 0, 0, 255])
    assert container.last_error is None


def test_validate_fills_defaults():
    schema = get("vintage")["params"]
    assert validate_params("vintage", schema, {"sepia": 10}) == {
        "sepia": 10.0,
        "grain": 20.0,
        "vignette": 40.0,
    }


def test_validate_floors_int_fields():
    assert validate_params("posterize", POSTERIZE_PARAMS, {"levels": 3.7}) == {"levels": 3}


@pytest.mark.parametrize(
    "effect_id,params",
    [
        ("pixelate", {"pixel_size": 0}),
        ("pixelate", {"pixel_size": 121}),
        ("posterize", {"levels": 1}),
        ("halftone", {"dot_radius": 0}),
        ("halftone", {"shape": "star"}),
        ("halftone", {"color_mode": "yes"}),
        ("glass-refraction", {"intensity": float("nan")}),
        ("glass-refraction", {"amplitude": float("inf")}),
        ("emboss", {"strength": 0.0}),
        ("blur", {"radius": True}),
        ("noise", {"amount": "10"}),
        ("noise", {"volume": 1}),
    ],
)
def test_validate_rejects(effect_id, params):
    with pytest.raises(ParameterOutOfRange):
        validate_params(effect_id, get(effect_id)["params"], params)


def test_out_of_range_reports_field():
    with pytest.raises(ParameterOutOfRange) as exc:
        validate_params("posterize", POSTERIZE_PARAMS, {"levels": 40})
    assert exc.value.effect == "posterize"
    assert exc.value.field == "levels"
    assert exc.value.value == 40


def test_effect_exception_propagates_and_is_captured():
    def _boom(frame, params, *, rng=None):
        raise RuntimeError("kaboom")

    container = EffectContainer(_boom, "boom", {})
    with patch("engine.container.sentry_sdk.capture_exception") as capture:
        with pytest.raises(RuntimeError, match="kaboom"):
            container.process(_make_frame(), {}, rng=make_rng(0))
    assert capture.call_count == 1
    assert isinstance(container.last_error, RuntimeError)


def test_wrong_shape_output_raises():
    def _crop(frame, params, *, rng=None):
        return frame[1:]

    container = EffectContainer(_crop, "crop", {})
    with pytest.raises(ValueError, match="expected"):
        container.process(_make_frame(), {}, rng=make_rng(0))
    assert container.last_error is not None


def test_non_ndarray_output_raises():
    container = EffectContainer(lambda frame, params, *, rng=None: None, "none", {})
    with pytest.raises(TypeError):
        container.process(_make_frame(), {}, rng=make_rng(0))


def test_float_output_is_clipped_to_uint8():
    def _brighten(frame, params, *, rng=None):
        return frame.astype(np.float32) * 3

    container = EffectContainer(_brighten, "brighten", {})
    output = container.process(_make_frame(r=100, g=10), {}, rng=make_rng(0))
    assert output.dtype == np.uint8
    np.testing.assert_array_equal(output[0, 0], [255, 30, 96, 255])
