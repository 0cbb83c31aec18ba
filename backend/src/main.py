"""pixfx command line — decode an image, apply one effect, export a PNG.

The engine itself only sees PixelBuffers; decoding, resizing and encoding
live here with Pillow.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import numpy as np
import sentry_sdk
from PIL import Image, UnidentifiedImageError

from _version import __version__
from diagnostics import init_diagnostics
from effects import registry
from effects.params import EffectKind
from engine.buffer import PixelBuffer
from engine.errors import EffectError, ParameterOutOfRange
from engine.pipeline import EffectEngine
from security import (
    strip_pii,
    validate_input_path,
    validate_output_path,
    validate_pixel_count,
)

logger = logging.getLogger(__name__)

CONSENT_PATH = "~/.pixfx/telemetry_consent"

EXIT_IO = 1
EXIT_INVALID = 2

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def init_sentry():
    """Consent-gated Sentry init: no DSN unless the user opted in."""
    consent_path = Path(os.path.expanduser(CONSENT_PATH))
    dsn = ""
    if consent_path.exists() and consent_path.read_text().strip() == "yes":
        dsn = os.environ.get("SENTRY_DSN", "")

    sentry_sdk.init(
        dsn=dsn,
        release=f"pixfx@{__version__}",
        environment=os.environ.get("SENTRY_ENV", "development"),
        traces_sample_rate=0.1,
        before_send=strip_pii,
        max_breadcrumbs=50,
    )


def parse_param(effect_id: str, schema: dict, item: str) -> tuple[str, object]:
    """Parse one ``key=value`` option using the effect's PARAMS schema."""
    key, sep, raw = item.partition("=")
    key = key.strip().replace("-", "_")
    if not sep or key not in schema:
        raise ParameterOutOfRange(effect_id, key, raw, "unknown parameter")

    ptype = schema[key]["type"]
    raw = raw.strip()
    try:
        if ptype == "int":
            return key, int(raw)
        if ptype == "float":
            return key, float(raw)
    except ValueError:
        raise ParameterOutOfRange(effect_id, key, raw, "not a number") from None
    if ptype == "bool":
        if raw.lower() in _TRUE:
            return key, True
        if raw.lower() in _FALSE:
            return key, False
        raise ParameterOutOfRange(effect_id, key, raw, "expected a boolean")
    return key, raw


def load_buffer(path: str, max_size: int | None = None) -> PixelBuffer:
    """Decode an image file into an RGBA PixelBuffer, optionally fitted to max_size."""
    with Image.open(path) as img:
        errors = validate_pixel_count(*img.size)
        if errors:
            raise EffectError("; ".join(errors))
        rgba = img.convert("RGBA")

    if max_size and max(rgba.size) > max_size:
        rgba.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
        logger.info("Resized input to %dx%d", *rgba.size)

    return PixelBuffer.from_array(np.asarray(rgba, dtype=np.uint8))


def save_buffer(buffer: PixelBuffer, path: str):
    Image.fromarray(buffer.to_array()).save(path, format="PNG")


def cmd_list(args) -> int:
    for effect in registry.list_all():
        print(f"{effect['id']}  ({effect['name']}, {effect['category']})")
        for key, spec in effect["params"].items():
            if spec["type"] in ("int", "float"):
                bounds = f"{spec['min']}..{spec['max']}"
            elif spec["type"] == "choice":
                bounds = "|".join(spec["options"])
            else:
                bounds = "true|false"
            print(f"    {key:<12} {bounds:<28} default={spec['default']}")
    return 0


def cmd_apply(args) -> int:
    errors = validate_input_path(args.input) + validate_output_path(args.output)
    if errors:
        for e in errors:
            print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID

    try:
        kind = EffectKind.parse(args.effect)
        schema = registry.require(kind.value)["params"]
        params = dict(parse_param(kind.value, schema, item) for item in args.param)
        buffer = load_buffer(args.input, args.max_size)
        result = EffectEngine(seed=args.seed).apply(buffer, kind, params)
        save_buffer(result, args.output)
    except EffectError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID
    except (OSError, UnidentifiedImageError) as e:
        logger.error("I/O failure: %s", type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_IO

    logger.info(
        "Wrote %s (%s, %dx%d)", args.output, kind.value, result.width, result.height
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixfx", description="Apply a pixel effect to an image."
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING...")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List effects and their parameters")
    p_list.set_defaults(func=cmd_list)

    p_apply = sub.add_parser("apply", help="Apply an effect and write a PNG")
    p_apply.add_argument("input")
    p_apply.add_argument("output")
    p_apply.add_argument(
        "-e", "--effect", required=True, choices=[k.value for k in EffectKind]
    )
    p_apply.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Effect parameter, repeatable",
    )
    p_apply.add_argument("--seed", type=int, default=None, help="Reproducible noise/grain")
    p_apply.add_argument(
        "--max-size", type=int, default=None, help="Fit the longer side to this many px"
    )
    p_apply.set_defaults(func=cmd_apply)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    init_diagnostics(console=True, level=args.log_level)
    init_sentry()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
