"""Termination decisions taken at every major iteration.

Several stopping conditions can hold at the same time; they are checked in a
fixed order and the first satisfied one decides the status:

1. failure reported by the problem
2. function threshold
3. gradient threshold
4. stagnation of the function value
5. major iteration limit
6. runtime limit
7. function, gradient and Hessian evaluation limits
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from .core import Location, ProblemFailure, Stats, Status
from .settings import FunctionConverge, Settings


class StagnationTracker:
    """Running best function value and the count of non-significant steps."""

    def __init__(self, rule: Optional[FunctionConverge]) -> None:
        self.rule = rule
        self.best = math.inf
        self.count = 0
        self._seeded = False

    @property
    def enabled(self) -> bool:
        return self.rule is not None and self.rule.iterations > 0

    def reset(self, f: float) -> None:
        self.best = float(f)
        self.count = 0
        self._seeded = True

    def update(self, f: float) -> bool:
        """Account for a new major-iteration value; return True once stagnated."""
        if not self.enabled:
            return False
        if not self._seeded:
            self.reset(f)
            return False
        rule = self.rule
        max_abs = max(abs(f), abs(self.best))
        if f < self.best and self.best - f > rule.relative * max_abs + rule.absolute:
            self.best = float(f)
            self.count = 0
            return False
        self.count += 1
        return self.count >= rule.iterations


def gradient_norm(gradient: np.ndarray) -> float:
    """Infinity norm used for the gradient threshold."""
    if gradient.size == 0:
        return 0.0
    return float(np.max(np.abs(gradient)))


def check_thresholds(location: Location, settings: Settings) -> Status:
    """Check the function and gradient thresholds only."""
    if location.f <= settings.function_threshold:
        return Status.FUNCTION_THRESHOLD
    if location.gradient is not None:
        if gradient_norm(location.gradient) <= settings.gradient_threshold:
            return Status.GRADIENT_THRESHOLD
    return Status.NOT_TERMINATED


def _limit_reached(value: float, limit: float) -> bool:
    return limit > 0 and value >= limit


def check_convergence(
    location: Location,
    stats: Stats,
    settings: Settings,
    tracker: StagnationTracker,
    failure: Optional[ProblemFailure] = None,
) -> Status:
    """Decide whether the run stops at ``location``.

    Returns ``Status.NOT_TERMINATED`` to continue. ``tracker`` is updated
    whenever the stagnation rule is reached in the check order.
    """
    if failure is not None:
        if failure.status is Status.NOT_TERMINATED:
            return Status.FAILURE
        return failure.status

    status = check_thresholds(location, settings)
    if status is not Status.NOT_TERMINATED:
        return status

    if tracker.update(location.f):
        return Status.FUNCTION_CONVERGENCE

    if _limit_reached(stats.major_iterations, settings.major_iterations):
        return Status.ITERATION_LIMIT
    if settings.runtime > 0 and stats.runtime > settings.runtime:
        return Status.RUNTIME_LIMIT
    if _limit_reached(stats.func_evaluations, settings.func_evaluations):
        return Status.FUNCTION_EVALUATION_LIMIT
    if _limit_reached(stats.grad_evaluations, settings.grad_evaluations):
        return Status.GRADIENT_EVALUATION_LIMIT
    if _limit_reached(stats.hess_evaluations, settings.hess_evaluations):
        return Status.HESSIAN_EVALUATION_LIMIT
    return Status.NOT_TERMINATED


__all__ = [
    "StagnationTracker",
    "gradient_norm",
    "check_thresholds",
    "check_convergence",
]
