import pytest

from engine.pipeline import flush_timing


@pytest.fixture(autouse=True)
def _clean_timing():
    """Timing stats are process-wide; start every test from empty."""
    flush_timing()
    yield
    flush_timing()
