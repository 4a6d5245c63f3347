"""Plot compute: viewport, plane coordinates, ComputeBackend Protocol, backend selection.

The ComputeBackend Protocol abstracts "fill this canvas for this function".
Backends are auto-selected via try/except ImportError:
  Numba > NumPy
The scalar PixelBackend is never auto-selected; it is the literal
per-pixel reference loop and accepts any scalar callable.

Plane mapping: pixel (px, py) -> ((px/width - 0.5) * x_range,
(py/height - 0.5) * y_range). The range is the full visible extent,
centered on the origin, so x_range=4.0 spans [-2, 2).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from plotter.canvas import Canvas, ImageSize
from plotter.domain import ComplexFunction

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 400

# Full visible extent on each axis (minus N/2 to plus N/2)
DEFAULT_RANGE = 4.0

BACKEND_NAMES = ("auto", "pixel", "numpy", "numba")


@dataclass(frozen=True)
class PlotViewport:
    """Defines the visible window of the complex plane and its pixel grid."""

    size: ImageSize
    x_range: float
    y_range: float

    def __post_init__(self) -> None:
        for name in ("x_range", "y_range"):
            extent = getattr(self, name)
            if not math.isfinite(extent) or extent <= 0:
                raise ValueError(f"{name} must be a positive finite number, got {extent}")

    @property
    def width(self) -> int:
        return self.size.width

    @property
    def height(self) -> int:
        return self.size.height


@dataclass(frozen=True)
class PlotTask:
    """Immutable specification for a single plot."""

    viewport: PlotViewport
    function: ComplexFunction
    caption: str = ""
    name: str = ""


class ComputeBackend(Protocol):
    """Protocol for pluggable render backends."""

    def paint(
        self,
        canvas: Canvas,
        viewport: PlotViewport,
        f: ComplexFunction,
    ) -> None:
        """Colour every pixel of *canvas* for *f* over *viewport*.

        Each pixel is independent; backends may split the work into
        disjoint row bands.
        """
        ...


def plane_coordinate(px: int, py: int, viewport: PlotViewport) -> tuple[float, float]:
    """Map one pixel to its (x, y) point in the complex plane."""
    xf = ((float(px) / viewport.width) - 0.5) * viewport.x_range
    yf = ((float(py) / viewport.height) - 0.5) * viewport.y_range
    return xf, yf


def build_plane_coordinates(viewport: PlotViewport) -> tuple[np.ndarray, np.ndarray]:
    """Per-column x values and per-row y values for the whole grid.

    Returns:
        xs: (width,) float64, ys: (height,) float64. Element-wise equal to
        plane_coordinate.
    """
    xs = ((np.arange(viewport.width, dtype=np.float64) / viewport.width) - 0.5) * viewport.x_range
    ys = ((np.arange(viewport.height, dtype=np.float64) / viewport.height) - 0.5) * viewport.y_range
    return xs, ys


def row_bands(height: int, band_rows: int) -> list[tuple[int, int]]:
    """Split [0, height) into contiguous (start, stop) row bands."""
    band_rows = max(1, band_rows)
    return [(y0, min(y0 + band_rows, height)) for y0 in range(0, height, band_rows)]


def get_default_backend() -> ComputeBackend:
    """Auto-select the best available compute backend.

    Priority: Numba > NumPy.
    """
    try:
        from plotter._numba_backend import NumbaBackend
        logger.info("Using Numba compute backend")
        return NumbaBackend()
    except ImportError:
        pass

    from plotter._numpy_backend import NumpyBackend
    logger.info("Using NumPy compute backend")
    return NumpyBackend()


def get_backend(name: str = "auto", workers: int = 1) -> ComputeBackend:
    """Create a backend by name.

    Args:
        name: One of BACKEND_NAMES.
        workers: Thread count for the pixel backend (ignored elsewhere).

    Raises:
        ValueError: Unknown backend name.
        ImportError: "numba" requested but numba is not installed.
    """
    if name == "auto":
        return get_default_backend()
    if name == "pixel":
        from plotter._pixel_backend import PixelBackend
        return PixelBackend(workers=workers)
    if name == "numpy":
        from plotter._numpy_backend import NumpyBackend
        return NumpyBackend()
    if name == "numba":
        from plotter._numba_backend import NumbaBackend
        return NumbaBackend()
    raise ValueError(f"Unknown backend {name!r}; choose from {', '.join(BACKEND_NAMES)}")
