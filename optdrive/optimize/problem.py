"""Objective description and the adapter that evaluates it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from ..logging import get_logger
from .core import (
    NO_EVALUATION,
    Array,
    ConfigurationError,
    Evaluation,
    Gradient,
    Hessian,
    Location,
    Objective,
    ProblemFailure,
    ProtocolError,
    Stats,
    Status,
    complement_eval,
)
from .method import Method
from .utils import resize, resize_sym

logger = get_logger(__name__)

StatusReporter = Callable[[], Tuple[Status, Optional[BaseException]]]


@dataclass(frozen=True)
class Problem:
    """Container describing an optimization problem.

    Args:
        fun: Objective ``fun(x) -> float``. Must not modify ``x``.
        grad: Gradient ``grad(x, out)`` writing into ``out``. Returning an
            array instead is accepted; it is copied into ``out``.
        hess: Hessian ``hess(x, out)`` writing into the ``(n, n)`` matrix
            ``out``, with the same return convention as ``grad``.
        status: Optional ``status() -> (Status, error)`` polled after every
            evaluation. An error, or a status other than
            ``Status.NOT_TERMINATED``, stops the run.
        dim: Expected dimension of the initial point.
    """

    fun: Objective
    grad: Optional[Gradient] = None
    hess: Optional[Hessian] = None
    status: Optional[StatusReporter] = None
    dim: Optional[int] = None

    def satisfies(self, method: Method) -> None:
        """Raise :class:`ConfigurationError` if ``method`` needs a missing callable."""
        needs = method.needs()
        if needs.gradient and self.grad is None:
            raise ConfigurationError("problem does not provide the gradient needed by the method")
        if needs.hessian and self.hess is None:
            raise ConfigurationError("problem does not provide the Hessian needed by the method")


def _store(out: Array, returned: Optional[Array]) -> None:
    if returned is not None and returned is not out:
        out[...] = np.asarray(returned, dtype=float).reshape(out.shape)


class ProblemEvaluator:
    """Evaluates a :class:`Problem` into a location and counts the calls.

    The evaluator remembers which fields are fresh at which point. Fields
    already evaluated at the current ``location.x`` are never evaluated again.
    """

    def __init__(self, problem: Problem, stats: Stats) -> None:
        self.problem = problem
        self.stats = stats
        self._fresh = NO_EVALUATION
        self._x_fresh: Optional[Array] = None

    @property
    def fresh(self) -> Evaluation:
        return self._fresh

    def fresh_at(self, location: Location) -> Evaluation:
        """Fields holding values evaluated at ``location.x``."""
        if self._x_fresh is None or not np.array_equal(self._x_fresh, location.x):
            return NO_EVALUATION
        return self._fresh

    def mark_fresh(self, location: Location, evaluation: Evaluation) -> None:
        """Record that ``evaluation`` fields were filled in without calling the problem."""
        self._fresh = self.fresh_at(location) | evaluation
        self._x_fresh = np.array(location.x, dtype=float, copy=True)

    def evaluate(self, location: Location, request: Evaluation) -> Evaluation:
        """Evaluate the requested fields that are not fresh at ``location.x``.

        Returns the fields actually evaluated. Raises :class:`ProtocolError`
        for a derivative the problem cannot provide, and
        :class:`ProblemFailure` if the problem's status reporter asks to stop.
        """
        todo = request - self.fresh_at(location)
        if not todo:
            return NO_EVALUATION

        problem = self.problem
        if todo.grad and problem.grad is None:
            raise ProtocolError("gradient requested but the problem has no gradient")
        if todo.hess and problem.hess is None:
            raise ProtocolError("Hessian requested but the problem has no Hessian")

        x = location.x
        dim = x.shape[0]
        if todo.func:
            location.f = float(problem.fun(x))
            self.stats.func_evaluations += 1
        if todo.grad:
            location.gradient = resize(location.gradient, dim)
            _store(location.gradient, problem.grad(x, location.gradient))
            self.stats.grad_evaluations += 1
        if todo.hess:
            location.hessian = resize_sym(location.hessian, dim)
            _store(location.hessian, problem.hess(x, location.hessian))
            self.stats.hess_evaluations += 1

        self.mark_fresh(location, todo)
        self.check_status()
        return todo

    def complete(self, location: Location) -> Evaluation:
        """Evaluate every field the location is expected to hold but does not."""
        return self.evaluate(location, complement_eval(location, self.fresh_at(location)))

    def check_status(self) -> None:
        if self.problem.status is None:
            return
        status, error = self.problem.status()
        if error is not None or status is not Status.NOT_TERMINATED:
            logger.warning("Problem requested termination: status=%s error=%s", status, error)
            raise ProblemFailure(status, error)


__all__ = ["Problem", "ProblemEvaluator", "StatusReporter"]
