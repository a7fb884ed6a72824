"""Core data model shared by the driver, the problem adapter and methods.

A run exchanges three kinds of values:

* :class:`Location` - the candidate point together with whatever of the
  function value, gradient and Hessian has been evaluated there.
* Requests - either a control marker (:class:`Iteration`) or a set of
  evaluation flags (:class:`Evaluation`). The two never mix, so a control
  marker carrying evaluation flags cannot be expressed.
* :class:`Stats`, :class:`Status` and :class:`Result` - bookkeeping of what
  the run has done and why it stopped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Union

import numpy as np

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array, Array], Optional[Array]]
Hessian = Callable[[Array, Array], Optional[Array]]


class ConfigurationError(ValueError):
    """The problem, method and initial point cannot be combined."""


class ProtocolError(RuntimeError):
    """A method returned a request it is not allowed to return."""


class ProblemFailure(RuntimeError):
    """The problem reported an error or asked the run to stop."""

    def __init__(self, status: "Status", error: Optional[BaseException] = None) -> None:
        message = f"problem reported {status.value}"
        if error is not None:
            message = f"{message}: {error}"
        super().__init__(message)
        self.status = status
        self.error = error


class Iteration(Enum):
    """Control markers exchanged between the driver, methods and recorders.

    ``INIT`` and ``POST`` bracket a run and are only ever emitted by the
    driver. Methods return ``MAJOR`` when the location holds a new candidate
    that should be convergence-checked.
    """

    INIT = "init"
    MAJOR = "major"
    POST = "post"


@dataclass(frozen=True)
class Evaluation:
    """Set of evaluation flags.

    Flags combine with ``|`` and are removed with ``-``. An empty evaluation
    is falsy.
    """

    func: bool = False
    grad: bool = False
    hess: bool = False

    def __or__(self, other: "Evaluation") -> "Evaluation":
        if not isinstance(other, Evaluation):
            return NotImplemented
        return Evaluation(
            func=self.func or other.func,
            grad=self.grad or other.grad,
            hess=self.hess or other.hess,
        )

    def __sub__(self, other: "Evaluation") -> "Evaluation":
        if not isinstance(other, Evaluation):
            return NotImplemented
        return Evaluation(
            func=self.func and not other.func,
            grad=self.grad and not other.grad,
            hess=self.hess and not other.hess,
        )

    def __bool__(self) -> bool:
        return self.func or self.grad or self.hess

    def __repr__(self) -> str:
        names = [
            name for name, flag in (("func", self.func), ("grad", self.grad), ("hess", self.hess))
            if flag
        ]
        return f"Evaluation({'|'.join(names) or 'none'})"


NO_EVALUATION = Evaluation()
FUNC = Evaluation(func=True)
GRAD = Evaluation(grad=True)
HESS = Evaluation(hess=True)

Request = Union[Iteration, Evaluation]


@dataclass(frozen=True)
class Needs:
    """Derivative information a method relies on."""

    gradient: bool = False
    hessian: bool = False


@dataclass
class Location:
    """A candidate point and the values evaluated there.

    ``gradient`` and ``hessian`` are ``None`` when the run does not use them.
    A field only holds meaningful data if it was evaluated at the current
    ``x``; the driver reuses the arrays between iterations, so use
    :meth:`copy` to keep a snapshot.
    """

    x: Array
    f: float = math.nan
    gradient: Optional[Array] = None
    hessian: Optional[Array] = None

    def copy(self) -> "Location":
        return Location(
            x=np.array(self.x, dtype=float, copy=True),
            f=float(self.f),
            gradient=None if self.gradient is None else np.array(self.gradient, copy=True),
            hessian=None if self.hessian is None else np.array(self.hessian, copy=True),
        )


def complement_eval(location: Location, evaluated: Evaluation) -> Evaluation:
    """Return the evaluation needed to make ``location`` complete.

    The function value is always required; the gradient and Hessian only when
    the location carries a slot for them. Fields in ``evaluated`` are never
    requested again.
    """
    return Evaluation(
        func=not evaluated.func,
        grad=location.gradient is not None and not evaluated.grad,
        hess=location.hessian is not None and not evaluated.hess,
    )


@dataclass
class Stats:
    """Statistics of a run.

    Counters only ever grow. ``runtime`` is the wall-clock duration in
    seconds, sampled at major iterations and at the end of the run.
    """

    major_iterations: int = 0
    func_evaluations: int = 0
    grad_evaluations: int = 0
    hess_evaluations: int = 0
    runtime: float = 0.0

    def copy(self) -> "Stats":
        return replace(self)


class Status(Enum):
    """Reason a run terminated."""

    NOT_TERMINATED = "not_terminated"
    SUCCESS = "success"
    FUNCTION_THRESHOLD = "function_threshold"
    GRADIENT_THRESHOLD = "gradient_threshold"
    FUNCTION_CONVERGENCE = "function_convergence"
    ITERATION_LIMIT = "iteration_limit"
    RUNTIME_LIMIT = "runtime_limit"
    FUNCTION_EVALUATION_LIMIT = "function_evaluation_limit"
    GRADIENT_EVALUATION_LIMIT = "gradient_evaluation_limit"
    HESSIAN_EVALUATION_LIMIT = "hessian_evaluation_limit"
    FAILURE = "failure"
    INTERNAL_ERROR = "internal_error"

    @property
    def is_success(self) -> bool:
        return self in _SUCCESS_STATUSES

    @property
    def is_limit(self) -> bool:
        return self in _LIMIT_STATUSES

    @property
    def message(self) -> str:
        return _STATUS_MESSAGES[self]


_SUCCESS_STATUSES = frozenset(
    {
        Status.SUCCESS,
        Status.FUNCTION_THRESHOLD,
        Status.GRADIENT_THRESHOLD,
        Status.FUNCTION_CONVERGENCE,
    }
)

_LIMIT_STATUSES = frozenset(
    {
        Status.ITERATION_LIMIT,
        Status.RUNTIME_LIMIT,
        Status.FUNCTION_EVALUATION_LIMIT,
        Status.GRADIENT_EVALUATION_LIMIT,
        Status.HESSIAN_EVALUATION_LIMIT,
    }
)

_STATUS_MESSAGES = {
    Status.NOT_TERMINATED: "Optimization has not terminated.",
    Status.SUCCESS: "Optimization terminated successfully.",
    Status.FUNCTION_THRESHOLD: "Function value fell below the threshold.",
    Status.GRADIENT_THRESHOLD: "Gradient tolerance satisfied.",
    Status.FUNCTION_CONVERGENCE: "No significant function decrease over the stagnation window.",
    Status.ITERATION_LIMIT: "Maximum iterations reached.",
    Status.RUNTIME_LIMIT: "Maximum runtime reached.",
    Status.FUNCTION_EVALUATION_LIMIT: "Maximum function evaluations reached.",
    Status.GRADIENT_EVALUATION_LIMIT: "Maximum gradient evaluations reached.",
    Status.HESSIAN_EVALUATION_LIMIT: "Maximum Hessian evaluations reached.",
    Status.FAILURE: "The problem reported a failure.",
    Status.INTERNAL_ERROR: "The method violated the iteration protocol.",
}


@dataclass(frozen=True)
class Result:
    """Outcome of a run: final location, statistics and terminal status."""

    location: Location
    stats: Stats
    status: Status
    error: Optional[BaseException] = None

    @property
    def x(self) -> Array:
        return self.location.x

    @property
    def f(self) -> float:
        return self.location.f

    @property
    def gradient(self) -> Optional[Array]:
        return self.location.gradient

    @property
    def success(self) -> bool:
        return self.status.is_success

    @property
    def message(self) -> str:
        if self.error is not None:
            return f"{self.status.message} ({self.error})"
        return self.status.message


__all__ = [
    "Array",
    "Objective",
    "Gradient",
    "Hessian",
    "ConfigurationError",
    "ProtocolError",
    "ProblemFailure",
    "Iteration",
    "Evaluation",
    "NO_EVALUATION",
    "FUNC",
    "GRAD",
    "HESS",
    "Request",
    "Needs",
    "Location",
    "complement_eval",
    "Stats",
    "Status",
    "Result",
]
