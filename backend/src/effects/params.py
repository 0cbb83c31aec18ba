"""Parameter sets — one frozen record per effect, keyed by EffectKind.

The numeric bounds live in each effect module's PARAMS schema; these
records only carry the values and their defaults.
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import ClassVar, Mapping

from engine.errors import ParameterOutOfRange, UnsupportedEffect


class EffectKind(str, Enum):
    PIXELATE = "pixelate"
    HALFTONE = "halftone"
    BLUR = "blur"
    NOISE = "noise"
    POSTERIZE = "posterize"
    GLASS_REFRACTION = "glass-refraction"
    EMBOSS = "emboss"
    VINTAGE = "vintage"

    @classmethod
    def parse(cls, value) -> "EffectKind":
        """Resolve an EffectKind from itself or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedEffect(value) from None


@dataclass(frozen=True)
class PixelateParams:
    kind: ClassVar[EffectKind] = EffectKind.PIXELATE
    pixel_size: int = 10


@dataclass(frozen=True)
class HalftoneParams:
    kind: ClassVar[EffectKind] = EffectKind.HALFTONE
    shape: str = "circle"
    dot_radius: float = 8
    angle: float = 45
    color_mode: bool = False


@dataclass(frozen=True)
class BlurParams:
    kind: ClassVar[EffectKind] = EffectKind.BLUR
    radius: float = 5


@dataclass(frozen=True)
class NoiseParams:
    kind: ClassVar[EffectKind] = EffectKind.NOISE
    amount: int = 25


@dataclass(frozen=True)
class PosterizeParams:
    kind: ClassVar[EffectKind] = EffectKind.POSTERIZE
    levels: int = 4


@dataclass(frozen=True)
class GlassRefractionParams:
    kind: ClassVar[EffectKind] = EffectKind.GLASS_REFRACTION
    intensity: float = 50
    frequency: float = 8
    amplitude: float = 10
    direction: float = 0
    soften: bool = True


@dataclass(frozen=True)
class EmbossParams:
    kind: ClassVar[EffectKind] = EffectKind.EMBOSS
    strength: float = 1.0


@dataclass(frozen=True)
class VintageParams:
    kind: ClassVar[EffectKind] = EffectKind.VINTAGE
    sepia: float = 30
    grain: float = 20
    vignette: float = 40


ParameterSet = (
    PixelateParams
    | HalftoneParams
    | BlurParams
    | NoiseParams
    | PosterizeParams
    | GlassRefractionParams
    | EmbossParams
    | VintageParams
)

PARAM_TYPES: dict[EffectKind, type] = {
    cls.kind: cls
    for cls in (
        PixelateParams,
        HalftoneParams,
        BlurParams,
        NoiseParams,
        PosterizeParams,
        GlassRefractionParams,
        EmbossParams,
        VintageParams,
    )
}


def params_from_dict(kind, values: Mapping | None = None) -> ParameterSet:
    """Build the record for ``kind`` from loose input; missing keys keep defaults."""
    kind = EffectKind.parse(kind)
    cls = PARAM_TYPES[kind]
    values = dict(values or {})
    known = {f.name for f in fields(cls)}
    for key in sorted(values):
        if key not in known:
            raise ParameterOutOfRange(kind.value, key, values[key], "unknown parameter")
    return cls(**values)


def params_to_dict(params: ParameterSet) -> dict:
    return asdict(params)


def default_params(kind) -> ParameterSet:
    return PARAM_TYPES[EffectKind.parse(kind)]()
