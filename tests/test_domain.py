"""Tests for plotter/domain.py: polar round-trip, hue, shading, gridlines, scenarios."""

import cmath
import math

import numpy as np
import pytest

from plotter.coloring import HSVColor, RGBColor, hsv_to_rgb
from plotter.compute import PlotViewport, plane_coordinate
from plotter.canvas import ImageSize
from plotter.domain import (
    GRID_THRESHOLD, angle, domain_color, domain_color_array, domain_hsv,
    domain_hsv_array, evaluate, evaluate_array, gridlines, magnitude_shading,
    polar_point, polar_points, radius, theta,
)
from plotter.functions import identity, reciprocal, square


def _close_rgb(a, b, tol=1):
    return all(abs(int(x) - int(y)) <= tol for x, y in zip(a, b))


class TestPolarRoundTrip:
    """z is rebuilt from (r, theta) before f sees it."""

    def test_atan2_origin_pinned_to_zero(self):
        """atan2(0, 0) is platform-defined; this platform must give 0."""
        assert theta(0.0, 0.0) == 0.0
        assert radius(0.0, 0.0) == 0.0

    def test_origin_is_zero(self):
        assert polar_point(0.0, 0.0) == 0j

    def test_round_trip(self):
        for x, y in [(3.0, 4.0), (-1.5, 0.25), (0.0, -2.0), (-0.7, -0.7)]:
            z = polar_point(x, y)
            assert z.real == pytest.approx(x, abs=1e-12)
            assert z.imag == pytest.approx(y, abs=1e-12)

    def test_array_form_matches(self):
        x = np.array([[0.0, 1.0], [-2.0, 0.3]])
        y = np.array([[0.0, -1.0], [0.5, 0.0]])
        z = polar_points(x, y)
        assert z.shape == (2, 2)
        for i in range(2):
            for j in range(2):
                assert z[i, j] == pytest.approx(polar_point(x[i, j], y[i, j]), abs=1e-12)


class TestAngle:
    """Hue angle is the phase of the input point, normalized to [0, 1]."""

    @pytest.mark.parametrize("x, y, expected", [
        (1.0, 0.0, 0.0),
        (0.0, 1.0, 0.25),
        (-1.0, 0.0, 0.5),
        (0.0, -1.0, 0.75),
        (1.0, 1.0, 0.125),
        (-1.0, -1.0, 0.625),
        (0.0, 0.0, 0.0),
    ])
    def test_cardinal_directions(self, x, y, expected):
        assert angle(x, y) == pytest.approx(expected)

    def test_range(self):
        for x in np.linspace(-3, 3, 13):
            for y in np.linspace(-3, 3, 13):
                assert 0.0 <= angle(float(x), float(y)) <= 1.0


class TestMagnitudeShading:
    """Sawtooth over |w|."""

    def test_fractional_part(self):
        assert magnitude_shading(2.25 + 0j) == pytest.approx(0.625)
        assert magnitude_shading(3j) == pytest.approx(0.5)
        assert magnitude_shading(0j) == 0.5

    def test_range(self):
        for m in np.linspace(0, 10, 101):
            assert 0.5 <= magnitude_shading(complex(m, 0)) < 1.0

    def test_non_finite(self):
        assert magnitude_shading(complex(math.inf, 0)) == 1.0
        assert magnitude_shading(complex(math.nan, 1)) == 1.0


class TestGridlines:
    """Gridline overlay is total and in [0, 1]."""

    def test_half_integers_are_one(self):
        assert gridlines(0.5, 0.5) == pytest.approx(1.0)
        assert gridlines(-1.5, 2.5) == pytest.approx(1.0)

    def test_zero_on_axis(self):
        assert gridlines(0.0, 0.3) == 0.0
        assert gridlines(0.7, 0.0) == 0.0

    def test_dark_near_integers(self):
        assert gridlines(1.0, 0.5) < 0.05
        assert gridlines(1e-9, 0.5) < 0.2

    def test_threshold_exponent(self):
        s = abs(math.sin(0.2 * math.pi))
        assert gridlines(0.2, 0.5) == pytest.approx(s ** GRID_THRESHOLD)

    @pytest.mark.parametrize("re, im", [
        (math.inf, 0.5), (0.5, -math.inf), (math.nan, 0.5), (math.nan, math.nan),
    ])
    def test_non_finite_substitutes_one(self, re, im):
        assert gridlines(re, im) == 1.0

    def test_totality(self):
        values = [0.0, -0.0, 1.0, -1.0, 1e-300, 1e300, -1e308, 0.5, 123456.789]
        for re in values:
            for im in values:
                g = gridlines(re, im)
                assert math.isfinite(g)
                assert 0.0 <= g <= 1.0


class TestEvaluate:
    """Poles give non-finite values instead of exceptions."""

    def test_reciprocal_pole(self):
        w = evaluate(reciprocal, 0j)
        assert not (math.isfinite(w.real) and math.isfinite(w.imag))

    def test_cmath_log_pole(self):
        """cmath.log raises ValueError at 0; the point becomes nan."""
        w = evaluate(cmath.log, 0j)
        assert math.isnan(w.real) and math.isnan(w.imag)

    def test_python_complex_division_pole(self):
        """1 / complex(z) raises ZeroDivisionError at 0."""
        w = evaluate(lambda z: 1 / complex(z), 0j)
        assert math.isnan(w.real) and math.isnan(w.imag)

    def test_raising_callable_away_from_pole(self):
        assert evaluate(cmath.log, 1 + 0j) == pytest.approx(0j)

    def test_other_errors_propagate(self):
        def broken(z):
            raise KeyError("not a numeric edge case")

        with pytest.raises(KeyError):
            evaluate(broken, 1j)

    def test_plain_value(self):
        assert evaluate(square, 1 + 1j) == pytest.approx(2j)

    def test_branching_callable_in_array_form(self):
        """Python branches on abs(z) raise ValueError on arrays."""
        z = np.array([[0.5j, 2 + 0j], [0j, -3j]])
        w = evaluate_array(lambda v: v if abs(v) < 1 else 0j, z)
        np.testing.assert_array_equal(w, [[0.5j, 0j], [0j, 0j]])

    def test_wrong_shape_result_falls_back(self):
        z = np.array([1j, 2j, 3j])
        w = evaluate_array(lambda v: np.array([v, v]) if np.ndim(v) else v, z)
        np.testing.assert_array_equal(w, z)

    def test_pole_in_array_form(self):
        z = np.array([0j, 1 + 0j])
        w = evaluate_array(lambda v: 1 / complex(v), z)
        assert np.isnan(w[0])
        assert w[1] == 1

    def test_scalar_only_callable_in_array_form(self):
        z = np.array([0j, 1j, 1 + 0j])
        w = evaluate_array(cmath.exp, z)
        np.testing.assert_allclose(w, np.exp(z))

    def test_constant_function_broadcasts(self):
        z = np.zeros((2, 3), dtype=np.complex128)
        w = evaluate_array(lambda _: 2 + 1j, z)
        assert w.shape == (2, 3)
        np.testing.assert_array_equal(w, 2 + 1j)


class TestDomainHsv:
    """Channel assignment: hue = phase, saturation = shading, value = grid."""

    def test_channels_in_bounds(self):
        for x in np.linspace(-2, 2, 9):
            for y in np.linspace(-2, 2, 9):
                hsv = domain_hsv(float(x), float(y), square)
                assert 0.0 <= hsv.hue <= 360.0
                assert 0.0 <= hsv.saturation <= 1.0
                assert 0.0 <= hsv.value <= 1.0

    def test_hue_ignores_function(self):
        a = domain_hsv(0.3, 0.9, identity)
        b = domain_hsv(0.3, 0.9, square)
        assert a.hue == b.hue

    def test_pole_is_defined(self):
        hsv = domain_hsv(0.0, 0.0, reciprocal)
        assert hsv == HSVColor(0.0, 1.0, 1.0)
        assert domain_color(0.0, 0.0, reciprocal) == RGBColor(255, 0, 0)

    def test_array_form_matches_scalar(self):
        xs = np.linspace(-1.93, 1.87, 17)
        ys = np.linspace(-1.71, 1.79, 13)
        x_grid, y_grid = np.meshgrid(xs, ys)
        h, s, v = domain_hsv_array(x_grid, y_grid, square)
        rgb = domain_color_array(x_grid, y_grid, square)

        for i in range(len(ys)):
            for j in range(len(xs)):
                expected = domain_hsv(float(xs[j]), float(ys[i]), square)
                assert h[i, j] == pytest.approx(expected.hue, abs=1e-9)
                assert s[i, j] == pytest.approx(expected.saturation, abs=1e-9)
                assert v[i, j] == pytest.approx(expected.value, abs=1e-9)
                assert _close_rgb(rgb[i, j], domain_color(float(xs[j]), float(ys[i]), square))


class TestIdentityScenario:
    """f(z) = z on a 4x4 canvas, visible range 2.0 (plane [-1, 1))."""

    viewport = PlotViewport(ImageSize(4, 4), 2.0, 2.0)

    def test_center_pixel_is_origin(self):
        x, y = plane_coordinate(2, 2, self.viewport)
        assert (x, y) == (0.0, 0.0)
        hsv = domain_hsv(x, y, identity)
        assert hsv.hue == 0.0
        assert hsv.saturation == 0.5
        # sin(0) == 0 puts the origin on a gridline
        assert hsv.value == 0.0
        assert domain_color(x, y, identity) == RGBColor(0, 0, 0)

    def test_interior_pixel(self):
        """Pixel (3, 1) -> z = 0.5 - 0.5i."""
        x, y = plane_coordinate(3, 1, self.viewport)
        assert (x, y) == (0.5, -0.5)
        hsv = domain_hsv(x, y, identity)

        # phase(z) = -pi/4 -> 7/8 of a turn
        assert hsv.hue == pytest.approx(315.0)
        assert hsv.saturation == pytest.approx(0.5 + 0.5 * math.sqrt(0.5))
        assert hsv.value == pytest.approx(1.0)

        expected = hsv_to_rgb(HSVColor(315.0, 0.5 + 0.5 * math.sqrt(0.5), 1.0))
        assert _close_rgb(domain_color(x, y, identity), expected)

    def test_corner_pixel(self):
        """Pixel (0, 0) -> z = -1 - 1i, sitting on both gridlines."""
        x, y = plane_coordinate(0, 0, self.viewport)
        assert (x, y) == (-1.0, -1.0)
        hsv = domain_hsv(x, y, identity)

        assert hsv.hue == pytest.approx(225.0)
        assert hsv.saturation == pytest.approx(0.5 + 0.5 * (math.sqrt(2) - 1))
        assert hsv.value < 0.01
        assert domain_color(x, y, identity) == RGBColor(0, 0, 0)


class TestSquareScenario:
    """f(z) = z*z: |z^2| = |z|^2 and phase(z^2) = 2*phase(z)."""

    def test_magnitude_squared_drives_shading(self):
        x, y = 0.9, 0.3
        r2 = x * x + y * y
        hsv = domain_hsv(x, y, square)
        assert hsv.saturation == pytest.approx(0.5 + 0.5 * (r2 - math.floor(r2)))

    def test_phase_doubles(self):
        x, y = 0.9, 0.3
        w = evaluate(square, polar_point(x, y))
        assert cmath.phase(w) == pytest.approx(2 * math.atan2(y, x))
        assert abs(w) == pytest.approx(x * x + y * y)

    def test_quarter_turn_keeps_magnitude_and_grid(self):
        """Rotating z by pi/2 negates z^2: same |w|, same |sin| gridlines."""
        x, y = 0.9, 0.3
        a = domain_hsv(x, y, square)
        b = domain_hsv(-y, x, square)

        assert a.saturation == pytest.approx(b.saturation)
        assert a.value == pytest.approx(b.value)
        # Hue follows the input point, not f(z)
        assert (b.hue - a.hue) % 360.0 == pytest.approx(90.0)

    def test_square_differs_from_identity(self):
        x, y = 0.9, 0.3
        assert domain_hsv(x, y, square).saturation != pytest.approx(
            domain_hsv(x, y, identity).saturation,
        )
