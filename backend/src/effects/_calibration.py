"""Effect parameter calibration — verifies every param produces visible change.

Run:  cd backend/src && python -m effects._calibration
"""

import sys

import numpy as np

from effects.registry import get, list_all
from engine.determinism import make_rng

VALID_CURVES = {"linear", "logarithmic", "exponential", "s-curve"}

LEVELS_PCT = (0, 25, 50, 75, 100)


def _test_frame(w: int = 96, h: int = 72) -> np.ndarray:
    """Deterministic test frame: smooth gradients plus seeded texture, opaque."""
    ys, xs = np.mgrid[0:h, 0:w]
    rng = np.random.default_rng(42)
    frame = np.empty((h, w, 4), dtype=np.uint8)
    frame[:, :, 0] = (xs * 255 // max(w - 1, 1)).astype(np.uint8)
    frame[:, :, 1] = (ys * 255 // max(h - 1, 1)).astype(np.uint8)
    frame[:, :, 2] = rng.integers(0, 256, (h, w), dtype=np.uint8)
    frame[:, :, 3] = 255
    return frame


def _mean_diff(a: np.ndarray, b: np.ndarray) -> float:
    """Mean absolute pixel difference across RGB channels."""
    return float(
        np.mean(np.abs(a[:, :, :3].astype(np.float32) - b[:, :, :3].astype(np.float32)))
    )


def _render(fn, frame: np.ndarray, params: dict) -> np.ndarray:
    # Fixed seed so randomized effects compare like with like
    return fn(frame, dict(params), rng=make_rng(12345))


def calibrate_all() -> list[dict]:
    """Run calibration across all effects and numeric params.

    Returns a list of result dicts:
      {effect_id, param, level_pct, value, mean_pixel_diff, curve, unit}
    """
    frame = _test_frame()
    results: list[dict] = []

    for effect_info in list_all():
        eid = effect_info["id"]
        schema = effect_info["params"]
        fn = get(eid)["fn"]

        base_params = {k: pd.get("default") for k, pd in schema.items()}
        ref_out = _render(fn, frame, base_params)

        for param_key, pdef in schema.items():
            ptype = pdef.get("type")
            if ptype not in ("float", "int"):
                continue

            pmin, pmax = pdef["min"], pdef["max"]
            for level_pct in LEVELS_PCT:
                value = pmin + (pmax - pmin) * level_pct / 100.0
                if ptype == "int":
                    value = int(round(value))

                out = _render(fn, frame, {**base_params, param_key: value})
                results.append(
                    {
                        "effect_id": eid,
                        "param": param_key,
                        "level_pct": level_pct,
                        "value": value,
                        "mean_pixel_diff": round(_mean_diff(ref_out, out), 2),
                        "curve": pdef.get("curve", "linear"),
                        "unit": pdef.get("unit", ""),
                    }
                )

    return results


def find_dead_params(results: list[dict]) -> list[str]:
    """Params whose whole range renders identically to the defaults."""
    grouped: dict[tuple[str, str], float] = {}
    for r in results:
        key = (r["effect_id"], r["param"])
        grouped[key] = max(grouped.get(key, 0.0), r["mean_pixel_diff"])
    return [f"{eid}.{param}" for (eid, param), peak in grouped.items() if peak == 0]


def validate_curves() -> list[str]:
    """Check that every param with a 'curve' field uses a valid curve name."""
    errors: list[str] = []
    for effect_info in list_all():
        for param_key, pdef in effect_info["params"].items():
            curve = pdef.get("curve")
            if curve is not None and curve not in VALID_CURVES:
                errors.append(
                    f"{effect_info['id']}.{param_key}: invalid curve '{curve}' "
                    f"(valid: {VALID_CURVES})"
                )
    return errors


def print_report(results: list[dict]) -> None:
    """Pretty-print calibration results."""
    print(
        f"{'Effect':<18} {'Param':<12} {'Level%':>6} {'Value':>8} {'PixDiff':>8} {'Curve':<12} {'Unit'}"
    )
    print("-" * 78)

    current_effect = ""
    for r in results:
        eid = r["effect_id"] if r["effect_id"] != current_effect else ""
        current_effect = r["effect_id"]
        print(
            f"{eid:<18} {r['param']:<12} {r['level_pct']:>5}% "
            f"{r['value']:>8.2f} {r['mean_pixel_diff']:>8.2f} {r['curve']:<12} {r['unit']}"
        )

    dead = find_dead_params(results)
    print("\n--- Params with no visible effect ---")
    for name in dead:
        print(f"  WARNING: {name}")
    if not dead:
        print("  None.")


if __name__ == "__main__":
    curve_errors = validate_curves()
    if curve_errors:
        print("CURVE VALIDATION ERRORS:")
        for e in curve_errors:
            print(f"  {e}")
        sys.exit(1)

    print_report(calibrate_all())
