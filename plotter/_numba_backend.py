"""Numba JIT-compiled backend.

The plotted function itself is an arbitrary Python callable, so it is
evaluated with NumPy over the whole grid first. The per-pixel colouring
(hue, shading, gridlines, HSV -> RGB) then runs in a @njit(parallel=True)
kernel with prange over rows; each row writes only its own slice of the
output array.

This module is optional: if numba is not installed, get_default_backend()
falls back to the NumPy backend automatically.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from numba import njit, prange

from plotter.canvas import Canvas, CHANNELS
from plotter.compute import PlotViewport, build_plane_coordinates
from plotter.domain import (
    GRID_THRESHOLD, NON_FINITE_FILL, ComplexFunction, evaluate_array, polar_points,
)

logger = logging.getLogger(__name__)


@njit(cache=True)
def _hsv_to_rgb_single(hue, saturation, value):
    """Numba-compiled hsv_to_rgb on pre-clamped components.

    Returns (r, g, b) as ints in [0, 255].
    """
    if saturation == 0.0:
        r = value
        g = value
        b = value
    else:
        if hue == 360.0:
            hue = 0.0
        h_sector = hue / 60.0
        sector = int(np.floor(h_sector)) % 6
        f = h_sector - np.floor(h_sector)
        p = value * (1.0 - saturation)
        q = value * (1.0 - (saturation * f))
        t = value * (1.0 - (saturation * (1.0 - f)))

        if sector == 0:
            r, g, b = value, t, p
        elif sector == 1:
            r, g, b = q, value, p
        elif sector == 2:
            r, g, b = p, value, t
        elif sector == 3:
            r, g, b = p, q, value
        elif sector == 4:
            r, g, b = t, p, value
        else:
            r, g, b = value, p, q

    return int(r * 255.0), int(g * 255.0), int(b * 255.0)


@njit(cache=True)
def _clamp01(v):
    if v < 0.0:
        return 0.0
    if v > 1.0:
        return 1.0
    return v


@njit(parallel=True, cache=True)
def _colorize_numba(xs, ys, w_real, w_imag, threshold, fill, out):
    """Numba-compiled parallel domain colouring.

    Args:
        xs: (W,) float64 plane x per column.
        ys: (H,) float64 plane y per row.
        w_real, w_imag: (H, W) float64 parts of f(z).
        threshold: Gridline exponent.
        fill: Substitute for non-finite shading/gridline values.
        out: (H, W, 3) uint8 output, written in place.
    """
    height = ys.shape[0]
    width = xs.shape[0]

    for row in prange(height):
        y = ys[row]
        for col in range(width):
            x = xs[col]
            re = w_real[row, col]
            im = w_imag[row, col]

            hue = (math.pi + math.atan2(-y, -x)) / (2 * math.pi) * 360.0
            if hue > 360.0:
                hue = 360.0
            elif hue < 0.0:
                hue = 0.0

            magnitude = math.hypot(re, im)
            if math.isfinite(magnitude):
                shading = 0.5 + 0.5 * (magnitude - np.floor(magnitude))
            else:
                shading = fill

            if math.isfinite(re) and math.isfinite(im):
                grid = (
                    abs(math.sin(re * math.pi)) ** threshold
                    * abs(math.sin(im * math.pi)) ** threshold
                )
                if not math.isfinite(grid):
                    grid = fill
            else:
                grid = fill

            r, g, b = _hsv_to_rgb_single(hue, _clamp01(shading), _clamp01(grid))
            out[row, col, 0] = r
            out[row, col, 1] = g
            out[row, col, 2] = b


class NumbaBackend:
    """Numba JIT-compiled compute backend."""

    def paint(
        self,
        canvas: Canvas,
        viewport: PlotViewport,
        f: ComplexFunction,
    ) -> None:
        xs, ys = build_plane_coordinates(viewport)
        x_grid, y_grid = np.meshgrid(xs, ys)
        w = evaluate_array(f, polar_points(x_grid, y_grid))

        out = np.empty((viewport.height, viewport.width, CHANNELS), dtype=np.uint8)
        _colorize_numba(
            xs, ys,
            np.ascontiguousarray(w.real), np.ascontiguousarray(w.imag),
            GRID_THRESHOLD, NON_FINITE_FILL, out,
        )
        canvas.blit_rows(0, out)

    @staticmethod
    def warmup() -> None:
        """Trigger JIT compilation on a tiny grid."""
        xs = np.array([-1.0, 0.5], dtype=np.float64)
        ys = np.array([-1.0, 0.5], dtype=np.float64)
        w = np.zeros((2, 2), dtype=np.float64)
        out = np.empty((2, 2, CHANNELS), dtype=np.uint8)
        _colorize_numba(xs, ys, w, w, GRID_THRESHOLD, NON_FINITE_FILL, out)
        logger.debug("Numba kernels compiled")
