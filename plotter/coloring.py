"""Color model: HSV to RGB conversion (scalar and vectorized) and QImage output.

Hue is expressed in degrees [0, 360]; saturation and value in [0, 1].
Out-of-range components are clamped before conversion, so both converters
are total over any float input (NaN collapses to the lower bound).
"""

import math
from typing import NamedTuple

import numpy as np
from PyQt6.QtGui import QImage


class RGBColor(NamedTuple):
    """8-bit RGB triple."""

    red: int
    green: int
    blue: int


class HSVColor(NamedTuple):
    """Float HSV triple: hue in degrees, saturation/value normalized."""

    hue: float
    saturation: float
    value: float


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp *value* into [lower, upper]. NaN maps to *lower*."""
    if math.isnan(value):
        return lower
    return max(lower, min(value, upper))


def _clip_array(values: np.ndarray, lower: float, upper: float) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    return np.where(np.isnan(values), lower, np.clip(values, lower, upper))


def hsv_to_rgb(hsv: HSVColor) -> RGBColor:
    """Convert one HSV triple to an 8-bit RGB triple.

    Uses the six 60-degree sector formulation. Each channel is scaled by
    255 and truncated, so value=1.0 maps to 255 and anything below
    1/255 maps to 0.
    """
    hue = clamp(hsv.hue, 0.0, 360.0)
    s = clamp(hsv.saturation, 0.0, 1.0)
    v = clamp(hsv.value, 0.0, 1.0)

    if s == 0:
        r = g = b = v
    else:
        if hue == 360.0:
            hue = 0.0

        h_sector = hue / 60.0
        sector = int(math.floor(h_sector)) % 6
        f = h_sector - math.floor(h_sector)
        p = v * (1.0 - s)
        q = v * (1.0 - (s * f))
        t = v * (1.0 - (s * (1.0 - f)))

        if sector == 0:
            r, g, b = v, t, p
        elif sector == 1:
            r, g, b = q, v, p
        elif sector == 2:
            r, g, b = p, v, t
        elif sector == 3:
            r, g, b = p, q, v
        elif sector == 4:
            r, g, b = t, p, v
        else:
            r, g, b = v, p, q

    return RGBColor(int(r * 255.0), int(g * 255.0), int(b * 255.0))


def hsv_to_rgb_array(
    hue: np.ndarray,
    saturation: np.ndarray,
    value: np.ndarray,
) -> np.ndarray:
    """Vectorized hsv_to_rgb over arrays of equal (broadcastable) shape.

    Args:
        hue: Float array of hues in degrees.
        saturation: Float array in [0, 1].
        value: Float array in [0, 1].

    Returns:
        (..., 3) uint8 array in RGB order. Element-wise identical to
        hsv_to_rgb on the same inputs.
    """
    hue, saturation, value = np.broadcast_arrays(
        _clip_array(hue, 0.0, 360.0),
        _clip_array(saturation, 0.0, 1.0),
        _clip_array(value, 0.0, 1.0),
    )
    hue = np.where(hue == 360.0, 0.0, hue)

    h_sector = hue / 60.0
    sector = np.floor(h_sector).astype(np.int32) % 6
    f = h_sector - np.floor(h_sector)

    v = value
    p = v * (1.0 - saturation)
    q = v * (1.0 - (saturation * f))
    t = v * (1.0 - (saturation * (1.0 - f)))

    r = np.empty(hue.shape, dtype=np.float64)
    g = np.empty(hue.shape, dtype=np.float64)
    b = np.empty(hue.shape, dtype=np.float64)

    mask0 = sector == 0
    mask1 = sector == 1
    mask2 = sector == 2
    mask3 = sector == 3
    mask4 = sector == 4
    mask5 = sector == 5

    r[mask0] = v[mask0]; g[mask0] = t[mask0]; b[mask0] = p[mask0]
    r[mask1] = q[mask1]; g[mask1] = v[mask1]; b[mask1] = p[mask1]
    r[mask2] = p[mask2]; g[mask2] = v[mask2]; b[mask2] = t[mask2]
    r[mask3] = p[mask3]; g[mask3] = q[mask3]; b[mask3] = v[mask3]
    r[mask4] = t[mask4]; g[mask4] = p[mask4]; b[mask4] = v[mask4]
    r[mask5] = v[mask5]; g[mask5] = p[mask5]; b[mask5] = q[mask5]

    # Achromatic pixels skip the sector lookup entirely
    grey = saturation == 0
    r[grey] = v[grey]; g[grey] = v[grey]; b[grey] = v[grey]

    rgb = np.empty(hue.shape + (3,), dtype=np.uint8)
    rgb[..., 0] = (r * 255.0).astype(np.uint8)
    rgb[..., 1] = (g * 255.0).astype(np.uint8)
    rgb[..., 2] = (b * 255.0).astype(np.uint8)
    return rgb


def numpy_to_qimage(rgb: np.ndarray) -> QImage:
    """Create a QImage from an RGB888 pixel array with GC safety.

    Args:
        rgb: (H, W, 3) uint8 RGB array.

    Returns:
        QImage with Format_RGB888. The numpy array is attached to the
        QImage as _numpy_ref to prevent garbage collection.
    """
    h, w = rgb.shape[:2]
    data = np.ascontiguousarray(rgb, dtype=np.uint8)
    stride = 3 * w
    image = QImage(data.data, w, h, stride, QImage.Format.Format_RGB888)
    # Prevent GC of the numpy array while QImage is alive
    image._numpy_ref = data
    return image
