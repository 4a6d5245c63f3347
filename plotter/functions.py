"""Built-in functions to plot.

Every entry is a unary complex callable written with numpy operations,
so it works both on single values and on whole coordinate arrays.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from plotter.domain import ComplexFunction


class PlotFunction(NamedTuple):
    """A named function together with the formula shown in captions."""

    name: str
    formula: str
    func: ComplexFunction

    @property
    def caption(self) -> str:
        return f"f(z) := {self.formula}"


def identity(z):
    return z


def square(z):
    return z * z


def cube(z):
    return z * z * z


def reciprocal(z):
    return 1 / z


FUNCTIONS: dict[str, PlotFunction] = {
    "identity": PlotFunction("identity", "z", identity),
    "square": PlotFunction("square", "z*z", square),
    "cube": PlotFunction("cube", "z*z*z", cube),
    "reciprocal": PlotFunction("reciprocal", "1/z", reciprocal),
    "exp": PlotFunction("exp", "exp(z)", np.exp),
    "sin": PlotFunction("sin", "sin(z)", np.sin),
}

# Plotted when no function is requested explicitly
DEFAULT_FUNCTIONS = ("identity", "square")


def get_function(name: str) -> PlotFunction:
    """Look up a built-in function by name.

    Raises:
        KeyError: If no function with that name exists.
    """
    try:
        return FUNCTIONS[name]
    except KeyError:
        raise KeyError(
            f"Unknown function {name!r}; choose from {', '.join(FUNCTIONS)}"
        ) from None
