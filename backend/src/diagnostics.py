"""Diagnostics — structured logging, faulthandler, crash dumps.

Layers:
1. Structured JSON logging with RotatingFileHandler (plus stderr for the CLI)
2. faulthandler: C-level crash tracebacks (SIGSEGV inside numpy/Pillow)
3. sys.excepthook: unhandled Python exceptions → JSON crash dumps
"""

import datetime
import faulthandler
import json
import logging
import logging.handlers
import os
import sys
import traceback
from pathlib import Path

from security import strip_pii

logger = logging.getLogger(__name__)

APP_DIR = "~/.pixfx"

# Maximum crash reports to keep
MAX_CRASH_REPORTS = 5

# Maximum log age in days
MAX_LOG_AGE_DAYS = 7

LOG_FILE = "pixfx.log"
FAULT_FILE = "pixfx_fault.log"


def _validate_log_dir(env_dir: str) -> str:
    """Validate PIXFX_LOG_DIR is under ~/.pixfx. Returns safe path."""
    default = os.path.expanduser(f"{APP_DIR}/logs")
    if env_dir:
        resolved = os.path.realpath(env_dir)
        allowed = os.path.realpath(os.path.expanduser(APP_DIR))
        if not resolved.startswith(allowed + os.sep) and resolved != allowed:
            logger.warning("PIXFX_LOG_DIR outside allowed prefix, using default")
            return default
        return resolved
    return default


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(log_entry)


def _prune(paths, keep: int = 0, older_than: float | None = None):
    """Delete files beyond the newest ``keep`` or older than a timestamp."""
    try:
        ordered = sorted(paths, key=lambda f: f.stat().st_mtime, reverse=True)
        for i, f in enumerate(ordered):
            too_many = keep and i >= keep
            too_old = older_than is not None and f.stat().st_mtime < older_than
            if too_many or too_old:
                f.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("Pruning failed: %s", e)


def setup_structured_logging(
    log_dir: str | None = None, level: str | None = None, console: bool = False
) -> str:
    """Configure structured JSON logging with rotation.

    Args:
        log_dir: Override log directory (validated against ~/.pixfx prefix).
        level:   Override level name; defaults to PIXFX_LOG_LEVEL or INFO.
        console: Also emit plain-text records to stderr.
    """
    resolved_dir = _validate_log_dir(log_dir or os.environ.get("PIXFX_LOG_DIR", ""))
    os.makedirs(resolved_dir, mode=0o700, exist_ok=True)

    log_level = (level or os.environ.get("PIXFX_LOG_LEVEL", "INFO")).upper()

    # Rotating handler: 10MB max, 7 backups
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(resolved_dir, LOG_FILE),
        maxBytes=10_000_000,
        backupCount=7,
    )
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level, logging.INFO))
    root.addHandler(handler)

    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(stream)

    cutoff = datetime.datetime.now() - datetime.timedelta(days=MAX_LOG_AGE_DAYS)
    _prune(Path(resolved_dir).glob(f"{LOG_FILE}*"), older_than=cutoff.timestamp())

    return resolved_dir


def setup_faulthandler(log_dir: str):
    """Enable faulthandler into its own file.

    RotatingFileHandler would invalidate a shared file descriptor on rotation.
    """
    fault_path = os.path.join(log_dir, FAULT_FILE)
    try:
        fault_file = open(fault_path, "a", buffering=1)  # noqa: SIM115
        os.chmod(fault_path, 0o600)
        faulthandler.enable(file=fault_file, all_threads=True)
    except OSError as e:
        print(f"WARNING: Could not enable faulthandler: {e}", file=sys.stderr)


def write_crash_report(exc_type, exc_value, exc_tb, crash_dir: str) -> str:
    """Write a PII-stripped JSON crash dump and return its path."""
    os.makedirs(crash_dir, mode=0o700, exist_ok=True)
    timestamp = datetime.datetime.now(tz=datetime.timezone.utc).strftime(
        "%Y%m%dT%H%M%S%fZ"
    )
    crash_path = os.path.join(crash_dir, f"crash_{timestamp}.json")

    crash_data = {
        "timestamp": timestamp,
        "exception_type": exc_type.__name__ if exc_type else "Unknown",
        "exception_message": str(exc_value),
        "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
        "python_version": sys.version,
        "platform": sys.platform,
    }
    crash_data = strip_pii({"extra": crash_data}, {})["extra"]

    old_umask = os.umask(0o077)
    try:
        with open(crash_path, "w") as f:
            json.dump(crash_data, f, indent=2)
    finally:
        os.umask(old_umask)

    _prune(Path(crash_dir).glob("crash_*.json"), keep=MAX_CRASH_REPORTS)
    return crash_path


def setup_excepthook(crash_dir: str | None = None):
    """Install sys.excepthook that writes structured crash dumps."""
    crash_dir = crash_dir or os.path.expanduser(f"{APP_DIR}/crash_reports")

    def _crash_excepthook(exc_type, exc_value, exc_tb):
        try:
            write_crash_report(exc_type, exc_value, exc_tb, crash_dir)
        except Exception as e:  # noqa: BLE001
            # Crash handler failed; report and fall through without recursing
            print(f"WARNING: Could not write crash report: {e}", file=sys.stderr)
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _crash_excepthook


def init_diagnostics(console: bool = False, level: str | None = None):
    """Initialize all diagnostic layers. Call from main.py."""
    log_dir = setup_structured_logging(level=level, console=console)
    setup_faulthandler(log_dir)
    setup_excepthook()
    logger.info("Diagnostics initialized: logging=%s, faulthandler=enabled", log_dir)
