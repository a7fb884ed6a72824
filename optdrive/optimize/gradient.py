"""Gradient descent."""

from __future__ import annotations

from typing import Optional

from .core import Array, Location
from .line_search import Backtracking, LinesearchMethod


class GradientDescent(LinesearchMethod):
    """Steepest descent with Armijo backtracking.

    Each search starts from the previously accepted step, doubled when that
    step was accepted on the first trial.
    """

    def __init__(
        self,
        step: float = 1.0,
        grow: float = 2.0,
        line_search: Optional[Backtracking] = None,
    ) -> None:
        if step <= 0:
            raise ValueError("step must be positive")
        if grow < 1:
            raise ValueError("grow must be at least 1")
        super().__init__(line_search)
        self.step = step
        self.grow = grow
        self._next_step = step

    def reset(self, location: Location) -> None:
        self._next_step = self.step

    def direction(self, location: Location) -> Array:
        return -location.gradient

    def initial_step(self) -> float:
        return self._next_step

    def step_done(self, alpha: float, first_try: bool) -> None:
        self._next_step = alpha * self.grow if first_try else alpha


__all__ = ["GradientDescent"]
