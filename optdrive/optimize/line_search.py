"""Backtracking line search and the request cycle shared by line-search methods."""

from __future__ import annotations

from enum import Enum
from typing import Optional

import numpy as np

from .core import FUNC, GRAD, HESS, Array, Evaluation, Iteration, Location, Needs, Request
from .method import Method


class Backtracking:
    """Armijo backtracking driven one trial at a time.

    ``start`` returns the first step, ``accept`` tests sufficient decrease at
    the current step and ``next_step`` shrinks it, returning ``None`` once
    ``max_iter`` trials have been spent.
    """

    def __init__(self, rho: float = 0.5, c: float = 1e-4, max_iter: int = 50) -> None:
        if not (0 < c < 1):
            raise ValueError("Armijo constant c must lie in (0, 1)")
        if not (0 < rho < 1):
            raise ValueError("rho must lie in (0, 1)")
        if max_iter <= 0:
            raise ValueError("max_iter must be positive")
        self.rho = rho
        self.c = c
        self.max_iter = max_iter
        self.alpha = 1.0
        self.trials = 0
        self._f0 = 0.0
        self._slope = 0.0

    def start(self, f0: float, slope: float, alpha0: float = 1.0) -> float:
        if alpha0 <= 0:
            raise ValueError("initial step must be positive")
        self._f0 = float(f0)
        self._slope = float(slope)
        self.alpha = float(alpha0)
        self.trials = 1
        return self.alpha

    def accept(self, f: float) -> bool:
        return f <= self._f0 + self.c * self.alpha * self._slope

    def next_step(self) -> Optional[float]:
        if self.trials >= self.max_iter:
            return None
        self.trials += 1
        self.alpha *= self.rho
        return self.alpha


class _Stage(Enum):
    SEARCH = "search"
    DERIVATIVES = "derivatives"
    MAJOR = "major"


class LinesearchMethod(Method):
    """Descent method: pick a direction, backtrack along it, repeat.

    Subclasses provide :meth:`direction` and may override :meth:`reset`,
    :meth:`update` and :meth:`initial_step`. One major iteration issues a
    function evaluation per trial step, then the derivatives at the accepted
    point, then ``Iteration.MAJOR``.
    """

    def __init__(self, line_search: Optional[Backtracking] = None) -> None:
        self.line_search = line_search if line_search is not None else Backtracking()
        self._stage = _Stage.MAJOR
        self._x: Optional[Array] = None
        self._f = 0.0
        self._grad: Optional[Array] = None
        self._dir: Optional[Array] = None

    def needs(self) -> Needs:
        return Needs(gradient=True)

    def reset(self, location: Location) -> None:
        """Reset method state at the start of a run."""

    def direction(self, location: Location) -> Array:
        raise NotImplementedError

    def update(self, s: Array, y: Array, location: Location) -> None:
        """Observe the accepted step ``s`` and the gradient change ``y``."""

    def initial_step(self) -> float:
        return 1.0

    def step_done(self, alpha: float, first_try: bool) -> None:
        """Observe the accepted step length."""

    def init(self, location: Location) -> Request:
        self._store(location)
        self.reset(location)
        return self._start_search(location)

    def iterate(self, location: Location) -> Request:
        if self._stage is _Stage.SEARCH:
            if self.line_search.accept(location.f):
                return self._finish_search()
            alpha = self.line_search.next_step()
            if alpha is None:
                return self._finish_search()
            self._place(location, alpha)
            return FUNC
        if self._stage is _Stage.DERIVATIVES:
            s = location.x - self._x
            y = location.gradient - self._grad
            self.update(s, y, location)
            self._store(location)
            self._stage = _Stage.MAJOR
            return Iteration.MAJOR
        return self._start_search(location)

    def _store(self, location: Location) -> None:
        self._x = np.array(location.x, dtype=float, copy=True)
        self._f = float(location.f)
        self._grad = np.array(location.gradient, dtype=float, copy=True)

    def _start_search(self, location: Location) -> Request:
        direction = np.asarray(self.direction(location), dtype=float)
        slope = float(np.dot(self._grad, direction))
        if not slope < 0:
            direction = -self._grad
            slope = -float(np.dot(self._grad, self._grad))
        self._dir = direction
        alpha = self.line_search.start(self._f, slope, self.initial_step())
        self._stage = _Stage.SEARCH
        self._place(location, alpha)
        return FUNC

    def _finish_search(self) -> Evaluation:
        self.step_done(self.line_search.alpha, self.line_search.trials == 1)
        self._stage = _Stage.DERIVATIVES
        request = GRAD
        if self.needs().hessian:
            request |= HESS
        return request

    def _place(self, location: Location, alpha: float) -> None:
        np.add(self._x, alpha * self._dir, out=location.x)


__all__ = ["Backtracking", "LinesearchMethod"]
