"""Security validation gates for the pixfx command-line shell."""

import json
import os
import re
from pathlib import Path

# Input validation
MAX_INPUT_SIZE = 50 * 1024 * 1024  # 50 MB
ALLOWED_INPUT_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp", ".tif", ".tiff"}

# Decompression-bomb guard (~ 8K x 8K)
MAX_PIXELS = 64_000_000

ALLOWED_OUTPUT_EXTENSIONS = {".png"}
BLOCKED_OUTPUT_PREFIXES = (
    "/System",
    "/Library",
    "/usr",
    "/bin",
    "/sbin",
    "/etc",
    "/private/var",
    "/private/etc",
)


def _unsafe_name(name: str) -> bool:
    return ".." in name or "/" in name or "\\" in name or "\x00" in name


def validate_input_path(path: str) -> list[str]:
    """Validate an image path to read. Returns list of errors (empty = valid).

    Checks:
    - File exists and is a regular file
    - Not a symlink
    - Extension in whitelist
    - File size <= 50 MB
    """
    errors: list[str] = []
    p = Path(path)

    if p.is_symlink():
        errors.append("Symlinks are not allowed")
        return errors

    if not p.is_file():
        errors.append(f"File not found: {path}")
        return errors

    ext = p.suffix.lower()
    if ext not in ALLOWED_INPUT_EXTENSIONS:
        errors.append(
            f"Extension '{ext}' not allowed. Allowed: {sorted(ALLOWED_INPUT_EXTENSIONS)}"
        )

    size = p.stat().st_size
    if size > MAX_INPUT_SIZE:
        size_mb = size / (1024 * 1024)
        errors.append(
            f"File too large: {size_mb:.1f} MB (max {MAX_INPUT_SIZE // (1024 * 1024)} MB)"
        )

    return errors


def validate_pixel_count(width: int, height: int) -> list[str]:
    """Validate decoded image size against MAX_PIXELS. Returns list of errors."""
    errors: list[str] = []
    if width * height > MAX_PIXELS:
        errors.append(
            f"Image {width}x{height} exceeds maximum of {MAX_PIXELS} pixels"
        )
    return errors


def validate_output_path(path: str) -> list[str]:
    """Validate an export output path. Returns list of errors (empty = valid).

    Checks:
    - Not a system directory
    - Extension in whitelist
    - Parent directory exists and is writable
    - Filename is safe (no traversal)
    """
    errors: list[str] = []
    p = Path(path).absolute()

    resolved = str(p.resolve())
    for prefix in BLOCKED_OUTPUT_PREFIXES:
        if resolved.startswith(prefix):
            errors.append(f"Cannot write to system directory: {prefix}")
            return errors

    ext = p.suffix.lower()
    if ext not in ALLOWED_OUTPUT_EXTENSIONS:
        errors.append(f"Output extension '{ext}' not allowed.")

    parent = p.parent
    if not parent.exists():
        errors.append(f"Output directory does not exist: {parent}")
    elif not os.access(str(parent), os.W_OK):
        errors.append(f"Output directory is not writable: {parent}")

    if _unsafe_name(p.name):
        errors.append(f"Unsafe output filename: {p.name}")

    return errors


# --- PII stripping for Sentry and crash dumps ---

_HOME = os.path.expanduser("~")
_USERNAME = os.path.basename(_HOME)
_PATH_PATTERN = re.compile(r"/Users/[^/\s]+|/home/[^/\s]+|C:\\Users\\[^\\\s]+")
_SENSITIVE_KEYS = {"token", "auth", "key", "secret", "password", "dsn"}


def _scrub_dict(d: dict):
    """Redact values for keys that look sensitive."""
    for key in list(d.keys()):
        if any(s in key.lower() for s in _SENSITIVE_KEYS):
            d[key] = "<REDACTED>"


def strip_pii(event: dict, hint: dict) -> dict:
    """Sentry before_send hook. Strips file paths and credentials.

    Also usable for crash dump sanitization.
    """
    event_str = json.dumps(event)
    if _HOME and _HOME != os.sep:
        event_str = event_str.replace(_HOME, "<HOME>")
    if _USERNAME:
        event_str = event_str.replace(_USERNAME, "<USER>")
    event_str = _PATH_PATTERN.sub("<REDACTED_PATH>", event_str)
    event = json.loads(event_str)

    _scrub_dict(event.get("extra", {}))
    for ctx in event.get("contexts", {}).values():
        if isinstance(ctx, dict):
            _scrub_dict(ctx)
    return event
