"""Pixel canvas: fixed-size RGB byte buffer with bounds-checked writes.

Origin is the top-left pixel. The buffer is row-major with three
interleaved channels per pixel and starts out white.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from plotter.coloring import RGBColor

CHANNELS = 3

# Fill color: white
BACKGROUND = 0xFF


@dataclass(frozen=True)
class ImageSize:
    """Canvas dimensions in pixels. Both sides must be positive."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image size must be positive, got {self.width}x{self.height}"
            )

    def area(self) -> int:
        return self.width * self.height


class PixelCoordinate(NamedTuple):
    """Pixel position; (0, 0) is the top-left corner."""

    x: int
    y: int


class Canvas:
    """Owns the pixel buffer for a single rendered image.

    Writes outside [0, width) x [0, height) are ignored. Row-partitioned
    renderers may write disjoint row bands concurrently without locking.
    """

    def __init__(self, size: ImageSize):
        self._size = size
        self._pixels = np.full(size.area() * CHANNELS, BACKGROUND, dtype=np.uint8)

    @property
    def size(self) -> ImageSize:
        return self._size

    @property
    def width(self) -> int:
        return self._size.width

    @property
    def height(self) -> int:
        return self._size.height

    @property
    def pixels(self) -> np.ndarray:
        """Flat (width*height*3,) uint8 buffer, row-major RGB."""
        return self._pixels

    def as_array(self) -> np.ndarray:
        """(height, width, 3) view onto the pixel buffer."""
        return self._pixels.reshape(self._size.height, self._size.width, CHANNELS)

    def in_bounds(self, point: PixelCoordinate) -> bool:
        return 0 <= point.x < self._size.width and 0 <= point.y < self._size.height

    def write(self, point: PixelCoordinate, color: RGBColor) -> None:
        if not self.in_bounds(point):
            return

        offset = (point.y * self._size.width + point.x) * CHANNELS
        pixels = self._pixels
        pixels[offset] = color.red
        pixels[offset + 1] = color.green
        pixels[offset + 2] = color.blue

    def blit_rows(self, y0: int, block: np.ndarray) -> None:
        """Copy a (rows, width, 3) uint8 block into the canvas at row y0.

        Raises:
            ValueError: If the block does not fit the canvas exactly
                within [y0, y0 + rows).
        """
        rows = block.shape[0]
        if block.shape[1:] != (self._size.width, CHANNELS):
            raise ValueError(
                f"Block shape {block.shape} does not match canvas width "
                f"{self._size.width}"
            )
        if y0 < 0 or y0 + rows > self._size.height:
            raise ValueError(
                f"Rows [{y0}, {y0 + rows}) outside canvas height {self._size.height}"
            )
        self.as_array()[y0:y0 + rows] = block

    def tobytes(self) -> bytes:
        return self._pixels.tobytes()
