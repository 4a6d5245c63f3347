"""Domain colorizer: complex plane point -> HSV -> RGB.

For a plane point (x, y) and a function f:
  hue        = phase of the input point, (pi + atan2(-y, -x)) / (2*pi) * 360
  saturation = magnitude shading of f, 0.5 + 0.5*(|w| - floor(|w|))
  value      = gridlines of f, |sin(pi*Re w)|^0.1 * |sin(pi*Im w)|^0.1

See https://www.algorithm-archive.org/contents/domain_coloring/domain_coloring.html

The point is rebuilt from polar form (r, theta) before f is evaluated,
so (0, 0) goes through atan2(0, 0) == 0 and yields z == 0.

Non-finite intermediates (poles of f, overflow) never raise: f runs on
numpy complex values under np.errstate(all="ignore"), arithmetic and
domain errors raised by f evaluate to nan, and any non-finite shading or
gridline value is replaced with 1.0.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

import numpy as np

from plotter.coloring import HSVColor, RGBColor, clamp, hsv_to_rgb, hsv_to_rgb_array

logger = logging.getLogger(__name__)

# Gridline sharpness exponent
GRID_THRESHOLD = 0.1

# Substitute for non-finite shading/gridline values
NON_FINITE_FILL = 1.0

ComplexFunction = Callable[[complex], complex]


def radius(x: float, y: float) -> float:
    return math.sqrt(x * x + y * y)


def theta(x: float, y: float) -> float:
    return math.atan2(y, x)


def polar_point(x: float, y: float) -> complex:
    """Rebuild x + iy as r * (cos(theta) + i*sin(theta))."""
    r = radius(x, y)
    t = theta(x, y)
    return complex(r * math.cos(t), r * math.sin(t))


def angle(x: float, y: float) -> float:
    """Phase of (x, y) normalized to [0, 1]."""
    return (math.pi + math.atan2(-y, -x)) / (2 * math.pi)


def evaluate(f: ComplexFunction, z: complex) -> complex:
    """Evaluate f at z with numpy semantics (poles give inf/nan, not errors).

    Callables that leave numpy arithmetic, such as cmath.log or
    1 / complex(z), raise at their poles instead; those points give nan.
    """
    with np.errstate(all="ignore"):
        try:
            return complex(f(np.complex128(z)))
        except (ArithmeticError, ValueError):
            return complex(math.nan, math.nan)


def magnitude_shading(w: complex) -> float:
    """Sawtooth over |w| in [0.5, 1), producing concentric contour bands."""
    magnitude = abs(w)
    if not math.isfinite(magnitude):
        return NON_FINITE_FILL
    return 0.5 + 0.5 * (magnitude - math.floor(magnitude))


def gridlines(re: float, im: float, threshold: float = GRID_THRESHOLD) -> float:
    """Overlay in [0, 1]: 0 where Re w or Im w is an integer, near 1 between."""
    # math.sin raises on inf; re * pi can overflow even for finite re
    re_pi = re * math.pi
    im_pi = im * math.pi
    if not (math.isfinite(re_pi) and math.isfinite(im_pi)):
        return NON_FINITE_FILL
    value = abs(math.sin(re_pi)) ** threshold * abs(math.sin(im_pi)) ** threshold
    if math.isnan(value) or math.isinf(value):
        return NON_FINITE_FILL
    return value


def domain_hsv(x: float, y: float, f: ComplexFunction) -> HSVColor:
    """Compute the clamped HSV triple for plane point (x, y)."""
    w = evaluate(f, polar_point(x, y))
    return HSVColor(
        hue=clamp(angle(x, y) * 360.0, 0.0, 360.0),
        saturation=clamp(magnitude_shading(w), 0.0, 1.0),
        value=clamp(gridlines(w.real, w.imag), 0.0, 1.0),
    )


def domain_color(x: float, y: float, f: ComplexFunction) -> RGBColor:
    return hsv_to_rgb(domain_hsv(x, y, f))


# --- Array forms (used by the vectorized backends) ---


def polar_points(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Vectorized polar_point. Returns complex128 array of the broadcast shape."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    r = np.sqrt(x * x + y * y)
    t = np.arctan2(y, x)
    z = np.empty(np.broadcast(x, y).shape, dtype=np.complex128)
    z.real = r * np.cos(t)
    z.imag = r * np.sin(t)
    return z


def evaluate_array(f: ComplexFunction, z: np.ndarray) -> np.ndarray:
    """Evaluate f over a complex array.

    Array-aware callables (numpy ufunc expressions) run in one call.
    Anything else (cmath functions, Python branches on abs(z)) raises on
    an array or returns a result that does not fit z, and is applied
    element-wise through evaluate instead.
    """
    with np.errstate(all="ignore"):
        try:
            w = np.asarray(f(z), dtype=np.complex128)
            # Constant functions return a scalar
            return np.broadcast_to(w, z.shape)
        except Exception as exc:
            logger.debug("Array call of %r failed (%s); evaluating element-wise", f, exc)
    return np.frompyfunc(lambda v: evaluate(f, v), 1, 1)(z).astype(np.complex128)


def shading_and_gridlines(
    w: np.ndarray,
    threshold: float = GRID_THRESHOLD,
) -> tuple[np.ndarray, np.ndarray]:
    """Vectorized magnitude_shading and gridlines, non-finite values filled."""
    with np.errstate(all="ignore"):
        magnitude = np.abs(w)
        shading = 0.5 + 0.5 * (magnitude - np.floor(magnitude))
        grid = (
            np.abs(np.sin(w.real * np.pi)) ** threshold
            * np.abs(np.sin(w.imag * np.pi)) ** threshold
        )
    shading = np.where(np.isfinite(shading), shading, NON_FINITE_FILL)
    grid = np.where(np.isfinite(grid), grid, NON_FINITE_FILL)
    return shading, grid


def domain_hsv_array(
    x: np.ndarray,
    y: np.ndarray,
    f: ComplexFunction,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorized domain_hsv over broadcastable x/y arrays.

    Returns:
        (hue, saturation, value) float64 arrays, already clamped.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    w = evaluate_array(f, polar_points(x, y))
    shading, grid = shading_and_gridlines(w)
    hue = (np.pi + np.arctan2(-y, -x)) / (2 * np.pi) * 360.0
    hue = np.broadcast_to(hue, w.shape)
    return (
        np.clip(hue, 0.0, 360.0),
        np.clip(shading, 0.0, 1.0),
        np.clip(grid, 0.0, 1.0),
    )


def domain_color_array(x: np.ndarray, y: np.ndarray, f: ComplexFunction) -> np.ndarray:
    """Vectorized domain_color. Returns (..., 3) uint8 RGB."""
    return hsv_to_rgb_array(*domain_hsv_array(x, y, f))
