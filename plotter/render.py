"""Render pipeline: paint a canvas for a complex function and hand it to an encoder."""

from __future__ import annotations

import logging
import time
from typing import BinaryIO

from plotter.canvas import Canvas, ImageSize, CHANNELS
from plotter.compute import ComputeBackend, PlotTask, PlotViewport, get_default_backend
from plotter.domain import ComplexFunction
from plotter.encoder import Encoder

logger = logging.getLogger(__name__)


def paint_complex(
    canvas: Canvas,
    x_range: float,
    y_range: float,
    f: ComplexFunction,
    backend: ComputeBackend | None = None,
) -> Canvas:
    """Colour every pixel of *canvas* with the domain colouring of *f*.

    Args:
        canvas: Freshly created canvas; every pixel is overwritten.
        x_range: Full visible extent on the real axis, centred on 0.
        y_range: Full visible extent on the imaginary axis, centred on 0.
        f: Unary complex callable.
        backend: Compute backend (default: auto-selected).

    Returns:
        The same canvas, for chaining.

    Raises:
        ValueError: Non-positive or non-finite range.
    """
    viewport = PlotViewport(canvas.size, x_range, y_range)
    if backend is None:
        backend = get_default_backend()

    t0 = time.monotonic()
    backend.paint(canvas, viewport, f)
    logger.info(
        "Painted %dx%d with %s in %.3f s",
        canvas.width, canvas.height, type(backend).__name__,
        time.monotonic() - t0,
    )
    return canvas


def complex_plot(
    size: ImageSize,
    x_range: float,
    y_range: float,
    f: ComplexFunction,
    encoder: Encoder,
    stream: BinaryIO,
    backend: ComputeBackend | None = None,
) -> Canvas:
    """Create a canvas, paint *f* onto it and encode it to *stream*.

    Returns:
        The painted canvas.
    """
    canvas = Canvas(size)
    paint_complex(canvas, x_range, y_range, f, backend)
    encoder.encode(canvas.pixels, size.width, size.height, stream, CHANNELS)
    return canvas


def render_task(
    task: PlotTask,
    encoder: Encoder,
    stream: BinaryIO,
    backend: ComputeBackend | None = None,
) -> Canvas:
    """complex_plot for a PlotTask."""
    viewport = task.viewport
    logger.debug("Rendering %s", task.name or task.caption or "plot")
    return complex_plot(
        viewport.size, viewport.x_range, viewport.y_range, task.function,
        encoder, stream, backend,
    )
