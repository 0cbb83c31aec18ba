"""Effect container — wraps a pure effect function with validation on both sides."""

import logging
import math

import numpy as np
import sentry_sdk

from engine.errors import ParameterOutOfRange

logger = logging.getLogger(__name__)

_NUMBER_TYPES = (int, float, np.integer, np.floating)


def _capture_with_context(e: Exception, effect_id: str, extra: dict):
    """Capture exception to Sentry with effect-level context and fingerprint dedup."""
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("effect_id", effect_id)
        scope.fingerprint = ["effect-crash", effect_id, type(e).__name__]
        scope.set_context("effect", extra)
        sentry_sdk.capture_exception(e, scope=scope)


def validate_params(effect_id: str, schema: dict, params: dict) -> dict:
    """Check params against an effect's PARAMS schema.

    Missing keys take the schema default. Returns a clean dict of plain
    Python values; raises ParameterOutOfRange on the first bad field.
    """
    for key in params:
        if key not in schema:
            raise ParameterOutOfRange(effect_id, key, params[key], "unknown parameter")

    clean: dict = {}
    for key, spec in schema.items():
        value = params.get(key, spec.get("default"))
        ptype = spec["type"]

        if ptype in ("int", "float"):
            if isinstance(value, (bool, np.bool_)) or not isinstance(
                value, _NUMBER_TYPES
            ):
                raise ParameterOutOfRange(effect_id, key, value, "not a number")
            value = float(value) if ptype == "float" else value
            if not math.isfinite(value):
                raise ParameterOutOfRange(effect_id, key, value, "not finite")
            if not spec["min"] <= value <= spec["max"]:
                raise ParameterOutOfRange(
                    effect_id, key, value, f"expected {spec['min']}..{spec['max']}"
                )
            clean[key] = value if ptype == "float" else int(math.floor(value))
        elif ptype == "bool":
            if not isinstance(value, (bool, np.bool_)):
                raise ParameterOutOfRange(effect_id, key, value, "expected a boolean")
            clean[key] = bool(value)
        elif ptype == "choice":
            if value not in spec["options"]:
                raise ParameterOutOfRange(
                    effect_id, key, value, f"expected one of {spec['options']}"
                )
            clean[key] = value
        else:
            clean[key] = value

    return clean


class EffectContainer:
    """Container that wraps an effect's apply() function.

    Pipeline: validate params → process → validate output
    Effect authors write only the processing stage. Failures propagate to
    the caller; the container never substitutes the input frame.
    """

    def __init__(self, effect_fn, effect_id: str, schema: dict):
        self.effect_fn = effect_fn
        self.effect_id = effect_id
        self.schema = schema
        self.last_error: Exception | None = None

    def process(
        self,
        frame: np.ndarray,
        params: dict,
        *,
        rng: np.random.Generator,
    ) -> np.ndarray:
        self.last_error = None
        effect_params = validate_params(self.effect_id, self.schema, params)

        # Context for Sentry (PII-safe: keys only, no values)
        sentry_ctx = {
            "param_names": list(effect_params.keys()),
            "frame_shape": list(frame.shape),
        }

        try:
            output = self.effect_fn(frame, effect_params, rng=rng)
        except Exception as e:
            self.last_error = e
            _capture_with_context(e, self.effect_id, sentry_ctx)
            logger.error("Effect %s failed: %s", self.effect_id, type(e).__name__)
            logger.debug("Effect %s exception detail: %s", self.effect_id, e)
            raise

        try:
            if not isinstance(output, np.ndarray):
                raise TypeError(
                    f"Effect returned {type(output).__name__}, expected ndarray"
                )
            if output.shape != frame.shape:
                raise ValueError(
                    f"Effect returned shape {output.shape}, expected {frame.shape}"
                )
            if output.dtype != np.uint8:
                output = np.clip(output, 0, 255).astype(np.uint8)
        except (TypeError, ValueError) as e:
            self.last_error = e
            _capture_with_context(e, self.effect_id, sentry_ctx)
            logger.error(
                "Effect %s produced invalid output: %s",
                self.effect_id,
                type(e).__name__,
            )
            raise

        return output
