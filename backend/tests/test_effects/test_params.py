"""Tests for parameter records and their agreement with effect schemas."""

from dataclasses import FrozenInstanceError, fields

import pytest

from effects.params import (
    PARAM_TYPES,
    EffectKind,
    GlassRefractionParams,
    HalftoneParams,
    PixelateParams,
    default_params,
    params_from_dict,
    params_to_dict,
)
from effects.registry import get
from engine.errors import ParameterOutOfRange, UnsupportedEffect

pytestmark = pytest.mark.smoke


def test_every_kind_has_a_record():
    assert set(PARAM_TYPES) == set(EffectKind)


@pytest.mark.parametrize("kind", list(EffectKind))
def test_record_fields_match_schema(kind):
    schema = get(kind.value)["params"]
    record = PARAM_TYPES[kind]
    assert [f.name for f in fields(record)] == list(schema)
    defaults = params_to_dict(record())
    assert defaults == {k: v["default"] for k, v in schema.items()}


def test_parse_kind():
    assert EffectKind.parse("glass-refraction") is EffectKind.GLASS_REFRACTION
    assert EffectKind.parse(EffectKind.BLUR) is EffectKind.BLUR
    with pytest.raises(UnsupportedEffect):
        EffectKind.parse("glass_refraction")


def test_from_dict_fills_defaults():
    params = params_from_dict("halftone", {"dot_radius": 3})
    assert params == HalftoneParams(dot_radius=3)
    assert params.shape == "circle"
    assert params.kind is EffectKind.HALFTONE


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ParameterOutOfRange, match="pixelate.size"):
        params_from_dict("pixelate", {"size": 4})


def test_records_are_frozen():
    params = PixelateParams(pixel_size=4)
    with pytest.raises(FrozenInstanceError):
        params.pixel_size = 5


def test_default_params():
    assert default_params("glass-refraction") == GlassRefractionParams()
    assert default_params(EffectKind.GLASS_REFRACTION).soften is True
