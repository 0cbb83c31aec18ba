"""Effect engine — dispatches one effect over a PixelBuffer.

Includes rolling timing stats per effect and a slow-call warning so a
caller re-rendering on every parameter change can spot expensive settings.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Mapping

import numpy as np

from effects import registry
from effects.params import (
    EffectKind,
    ParameterSet,
    default_params,
    params_from_dict,
    params_to_dict,
)
from engine.buffer import PixelBuffer, validate_dimensions
from engine.container import EffectContainer
from engine.determinism import derive_seed, make_rng
from engine.errors import ParameterOutOfRange

logger = logging.getLogger(__name__)

# Per-call timing threshold (milliseconds)
EFFECT_WARN_MS = 250

# Rolling timing stats per effect
_effect_timing: dict[str, deque] = defaultdict(lambda: deque(maxlen=100))


def record_timing(effect_id: str, elapsed_ms: float):
    """Record a timing sample for an effect."""
    _effect_timing[effect_id].append(elapsed_ms)


def get_effect_stats() -> dict[str, dict]:
    """Return p50/p95/max per effect."""
    result = {}
    for eid, samples in _effect_timing.items():
        s = sorted(samples)
        result[eid] = {
            "p50": s[len(s) // 2] if s else 0,
            "p95": s[int(len(s) * 0.95)] if len(s) >= 20 else None,
            "max": max(s) if s else 0,
            "samples": len(s),
        }
    return result


def flush_timing():
    """Clear all timing stats."""
    _effect_timing.clear()


def resolve_params(kind: EffectKind, params) -> ParameterSet:
    """Turn None, a mapping, or a parameter record into the record for ``kind``."""
    if params is None:
        return default_params(kind)
    if isinstance(params, Mapping):
        return params_from_dict(kind, params)
    other = getattr(params, "kind", None)
    if other != kind:
        raise ParameterOutOfRange(
            kind.value,
            "kind",
            other.value if isinstance(other, EffectKind) else type(params).__name__,
            "parameter set belongs to a different effect",
        )
    return params


class EffectEngine:
    """Applies one of the registered effects to a PixelBuffer.

    Randomized effects draw from, in order of preference: the injected
    ``rng``, a generator derived from ``seed`` and the effect id (the same
    seed always reproduces the same output), or fresh OS entropy.
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ):
        if seed is not None and rng is not None:
            raise ValueError("pass either seed or rng, not both")
        self.seed = seed
        self._rng = rng

    def _rng_for(self, effect_id: str) -> np.random.Generator:
        if self._rng is not None:
            return self._rng
        if self.seed is None:
            return make_rng()
        return make_rng(derive_seed(self.seed, effect_id))

    def apply(self, buffer: PixelBuffer, effect, params=None) -> PixelBuffer:
        """Return a new buffer with ``effect`` applied; the input is never modified.

        Args:
            buffer: Source image.
            effect: EffectKind or its string value, e.g. "glass-refraction".
            params: Parameter record for ``effect``, a mapping of its fields,
                    or None for the defaults.

        Raises:
            InvalidDimensions: Empty image or byte length mismatch.
            ParameterOutOfRange: A field violates its declared range.
            UnsupportedEffect: ``effect`` is not a known kind.
        """
        kind = EffectKind.parse(effect)
        validate_dimensions(buffer.width, buffer.height, len(buffer.pixels))
        record = resolve_params(kind, params)

        info = registry.require(kind.value)
        container = EffectContainer(info["fn"], kind.value, info["params"])

        t0 = time.monotonic()
        output = container.process(
            buffer.to_array(),
            params_to_dict(record),
            rng=self._rng_for(kind.value),
        )
        elapsed_ms = (time.monotonic() - t0) * 1000

        record_timing(kind.value, elapsed_ms)
        if elapsed_ms > EFFECT_WARN_MS:
            logger.warning(
                "Effect %s took %.0fms (>%dms warn threshold) on %dx%d",
                kind.value,
                elapsed_ms,
                EFFECT_WARN_MS,
                buffer.width,
                buffer.height,
            )
        else:
            logger.debug("Effect %s took %.1fms", kind.value, elapsed_ms)

        return PixelBuffer.from_array(output)


def apply_effect(
    buffer: PixelBuffer,
    effect,
    params=None,
    *,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> PixelBuffer:
    """One-shot convenience wrapper around EffectEngine.apply."""
    return EffectEngine(seed=seed, rng=rng).apply(buffer, effect, params)
