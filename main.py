"""Entry point for the domain-colouring plotter.

Plots each requested function and streams the images to stdout as sixel
graphics (each followed by its caption), or writes PNG files.

Usage:
    python main.py [--function identity --function square] [--format sixel]
    python main.py --format png --output plots/ --function reciprocal
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

from plotter.canvas import ImageSize
from plotter.compute import (
    BACKEND_NAMES, DEFAULT_HEIGHT, DEFAULT_RANGE, DEFAULT_WIDTH, PlotTask,
    PlotViewport, get_backend,
)
from plotter.encoder import ENCODERS
from plotter.functions import DEFAULT_FUNCTIONS, FUNCTIONS, get_function
from plotter.render import render_task

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render domain-colouring plots of complex functions.",
    )
    parser.add_argument(
        "--function",
        action="append",
        choices=sorted(FUNCTIONS),
        help="Function to plot; repeatable (default: identity and square)",
    )
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH,
                        help=f"Image width in pixels (default: {DEFAULT_WIDTH})")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT,
                        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})")
    parser.add_argument("--x-range", type=float, default=DEFAULT_RANGE,
                        help=f"Visible real-axis extent, centred on 0 (default: {DEFAULT_RANGE})")
    parser.add_argument("--y-range", type=float, default=DEFAULT_RANGE,
                        help=f"Visible imaginary-axis extent, centred on 0 (default: {DEFAULT_RANGE})")
    parser.add_argument("--backend", choices=BACKEND_NAMES, default="auto",
                        help="Compute backend (default: auto)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Threads for the pixel backend (default: 1)")
    parser.add_argument("--format", choices=sorted(ENCODERS), default="sixel",
                        help="Output format (default: sixel)")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Sixel: output file (default: stdout). PNG: output directory (required)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def build_tasks(args: argparse.Namespace) -> list[PlotTask]:
    """One PlotTask per distinct requested function, sharing the same viewport."""
    viewport = PlotViewport(ImageSize(args.width, args.height), args.x_range, args.y_range)
    # Repeats are dropped, keeping first-seen order
    names = dict.fromkeys(args.function or DEFAULT_FUNCTIONS)
    tasks = []
    for name in names:
        plot = get_function(name)
        tasks.append(PlotTask(viewport, plot.func, plot.caption, plot.name))
    return tasks


def run(args: argparse.Namespace, stdout) -> None:
    """Render every requested function according to parsed CLI args."""
    tasks = build_tasks(args)
    backend = get_backend(args.backend, workers=args.workers)
    encoder = ENCODERS[args.format]()

    if args.format == "png":
        out_dir = Path(args.output)
        out_dir.mkdir(parents=True, exist_ok=True)
        for task in tasks:
            path = out_dir / f"{task.name}.png"
            with open(path, "wb") as stream:
                render_task(task, encoder, stream, backend)
            logger.info("Wrote %s (%s)", path, task.caption)
        return

    if args.output is not None:
        with open(args.output, "wb") as stream:
            stream_sixel(tasks, encoder, backend, stream)
    else:
        stream_sixel(tasks, encoder, backend, stdout)
        stdout.flush()


def stream_sixel(tasks, encoder, backend, stream) -> None:
    """Write each plot as a tab-indented sixel image followed by its caption."""
    for i, task in enumerate(tasks):
        stream.write(b"\t")
        render_task(task, encoder, stream, backend)
        trailer = "\n" if i == len(tasks) - 1 else "\n\n"
        stream.write(f"{task.caption}{trailer}".encode())


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if args.format == "png" and args.output is None:
        parser.error("--format png requires --output DIRECTORY")
    if args.width <= 0 or args.height <= 0:
        parser.error(f"image size must be positive, got {args.width}x{args.height}")
    for extent in (args.x_range, args.y_range):
        if not math.isfinite(extent) or extent <= 0:
            parser.error("--x-range and --y-range must be positive finite numbers")

    if args.backend == "numba":
        try:
            import numba  # noqa: F401
        except ImportError:
            parser.error("--backend numba requires numba to be installed")

    run(args, sys.stdout.buffer)
    return 0


if __name__ == "__main__":
    sys.exit(main())
