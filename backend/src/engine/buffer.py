"""PixelBuffer — flat RGBA byte storage shared by every effect.

Effects themselves work on numpy "frames" of shape (H, W, 4) uint8; the
buffer is the value that crosses the engine boundary.
"""

from dataclasses import dataclass

import numpy as np

from engine.errors import InvalidDimensions

CHANNELS = 4


@dataclass(frozen=True)
class PixelBuffer:
    width: int
    height: int
    pixels: bytes

    def __post_init__(self):
        if isinstance(self.pixels, (bytearray, memoryview)):
            object.__setattr__(self, "pixels", bytes(self.pixels))
        validate_dimensions(self.width, self.height, len(self.pixels))

    @classmethod
    def from_array(cls, frame: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an (H, W, 4) uint8 frame."""
        if frame.ndim != 3 or frame.shape[2] != CHANNELS:
            raise InvalidDimensions(
                f"expected an (H, W, {CHANNELS}) frame, got shape {frame.shape}"
            )
        if frame.dtype != np.uint8:
            raise InvalidDimensions(f"expected uint8 samples, got {frame.dtype}")
        h, w = frame.shape[:2]
        return cls(w, h, np.ascontiguousarray(frame).tobytes())

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple[int, int, int, int]):
        validate_dimensions(width, height)
        frame = np.empty((height, width, CHANNELS), dtype=np.uint8)
        frame[:, :] = rgba
        return cls.from_array(frame)

    def to_array(self) -> np.ndarray:
        """Read-only (H, W, 4) uint8 view over the stored bytes."""
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(
            self.height, self.width, CHANNELS
        )

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        i = (y * self.width + x) * CHANNELS
        return tuple(self.pixels[i : i + CHANNELS])


def validate_dimensions(width: int, height: int, length: int | None = None):
    """Raise InvalidDimensions unless the size describes a non-empty RGBA image."""
    if not isinstance(width, (int, np.integer)) or not isinstance(
        height, (int, np.integer)
    ):
        raise InvalidDimensions(f"dimensions must be integers, got {width}x{height}")
    if width <= 0 or height <= 0:
        raise InvalidDimensions(f"image must be non-empty, got {width}x{height}")
    if length is not None and length != width * height * CHANNELS:
        raise InvalidDimensions(
            f"buffer holds {length} bytes, expected {width * height * CHANNELS} "
            f"for {width}x{height} RGBA"
        )
