"""Scalar per-pixel backend: the reference paint loop.

Visits every pixel, maps it to the plane, colours it with the scalar
domain colorizer and writes it through Canvas.write. Accepts any
complex -> complex callable, including ones that only work on scalars.

With workers > 1 the rows are split into bands and painted on a
thread pool. Bands are disjoint, so no two threads touch the same
pixel offset.
"""

from __future__ import annotations

import logging
from multiprocessing.pool import ThreadPool

from plotter.canvas import Canvas, PixelCoordinate
from plotter.compute import PlotViewport, plane_coordinate, row_bands
from plotter.domain import ComplexFunction, domain_color

logger = logging.getLogger(__name__)


class PixelBackend:
    """Pure-Python per-pixel compute backend."""

    def __init__(self, workers: int = 1, band_rows: int = 16):
        self.workers = max(1, workers)
        self.band_rows = band_rows

    def paint(
        self,
        canvas: Canvas,
        viewport: PlotViewport,
        f: ComplexFunction,
    ) -> None:
        if self.workers <= 1:
            paint_rows(canvas, viewport, f, 0, viewport.height)
            return

        bands = row_bands(viewport.height, self.band_rows)
        logger.debug(
            "Painting %d row bands on %d threads", len(bands), self.workers,
        )
        with ThreadPool(self.workers) as pool:
            pool.starmap(
                paint_rows,
                [(canvas, viewport, f, y0, y1) for y0, y1 in bands],
            )


def paint_rows(
    canvas: Canvas,
    viewport: PlotViewport,
    f: ComplexFunction,
    y0: int,
    y1: int,
) -> None:
    """Paint rows [y0, y1) of the canvas."""
    for y in range(y0, y1):
        for x in range(viewport.width):
            xf, yf = plane_coordinate(x, y, viewport)
            canvas.write(PixelCoordinate(x, y), domain_color(xf, yf, f))
