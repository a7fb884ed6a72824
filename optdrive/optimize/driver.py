"""Iteration driver coordinating a method, a problem and the stopping rules."""

from __future__ import annotations

import time
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ..logging import get_logger
from .convergence import StagnationTracker, check_convergence, check_thresholds
from .core import (
    FUNC,
    GRAD,
    HESS,
    NO_EVALUATION,
    Array,
    ConfigurationError,
    Evaluation,
    Iteration,
    Location,
    ProblemFailure,
    ProtocolError,
    Result,
    Stats,
    Status,
)
from .method import Method
from .problem import Problem, ProblemEvaluator
from .settings import Settings, default_settings
from .utils import resize, resize_sym

logger = get_logger(__name__)


class DriverState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    TERMINATED = "terminated"


class IterationDriver:
    """Run ``method`` on ``problem`` from ``x0`` until a stopping rule fires.

    The driver owns the location, the statistics and the loop. Evaluation
    requests from the method are served through a :class:`ProblemEvaluator`,
    which skips fields that are already fresh. Every ``Iteration.MAJOR``
    request is convergence-checked; the run ends with exactly one
    :class:`Result`. A driver runs once.

    Args:
        problem: Objective and derivative callables.
        x0: Initial point. It is copied and never modified.
        method: Optimization method to drive.
        settings: Run settings, :func:`default_settings` if omitted.

    Raises:
        ConfigurationError: If the method needs a callable the problem does
            not provide, or if ``x0`` or the initial data have the wrong shape.
    """

    def __init__(
        self,
        problem: Problem,
        x0: Array,
        method: Method,
        settings: Optional[Settings] = None,
    ) -> None:
        problem.satisfies(method)
        x = np.array(x0, dtype=float, copy=True)
        if x.ndim != 1 or x.size == 0:
            raise ConfigurationError("x0 must be a non-empty 1-D array")
        if problem.dim is not None and x.size != problem.dim:
            raise ConfigurationError(
                f"x0 has dimension {x.size} but the problem expects {problem.dim}"
            )
        self.problem = problem
        self.method = method
        self.settings = settings if settings is not None else default_settings()
        self._check_initial_data(x.size)

        self.state = DriverState.NOT_STARTED
        self.stats = Stats()
        self.location: Optional[Location] = None
        self._x0 = x
        self._evaluator = ProblemEvaluator(problem, self.stats)
        self._tracker = StagnationTracker(self.settings.function_converge)
        self._start = 0.0
        self._failed = False
        self._started = False

    def _check_initial_data(self, dim: int) -> None:
        gradient = self.settings.initial_gradient
        if gradient is not None and gradient.shape != (dim,):
            raise ConfigurationError(
                f"initial_gradient has shape {gradient.shape}, expected ({dim},)"
            )
        hessian = self.settings.initial_hessian
        if hessian is not None and hessian.shape != (dim, dim):
            raise ConfigurationError(
                f"initial_hessian has shape {hessian.shape}, expected ({dim}, {dim})"
            )

    def run(self) -> Result:
        """Run the optimization to termination and return its result."""
        if self.state is not DriverState.NOT_STARTED:
            raise RuntimeError("an IterationDriver can only be run once")
        self.state = DriverState.RUNNING
        self._start = time.perf_counter()
        logger.debug(
            "Starting %s on a %d-dimensional problem", type(self.method).__name__, self._x0.size
        )
        status, error = self._loop()
        return self._terminate(status, error)

    def _elapsed(self) -> float:
        return time.perf_counter() - self._start

    def _loop(self) -> Tuple[Status, Optional[BaseException]]:
        try:
            status = self._initialize()
            if status is not Status.NOT_TERMINATED:
                return status, None
            request = self.method.init(self.location)
            while True:
                self._check_point()
                if isinstance(request, Evaluation) and request:
                    self._evaluator.evaluate(self.location, request)
                elif request is Iteration.MAJOR:
                    status = self._major_iteration()
                    if status is not Status.NOT_TERMINATED:
                        return status, None
                else:
                    raise ProtocolError(f"method returned an invalid request: {request!r}")
                request = self.method.iterate(self.location)
        except ProblemFailure as failure:
            self._failed = True
            status = check_convergence(
                self.location, self.stats, self.settings, self._tracker, failure=failure
            )
            return status, failure.error
        except ProtocolError as exc:
            logger.warning("Terminating on protocol violation: %s", exc)
            return Status.INTERNAL_ERROR, exc

    def _initialize(self) -> Status:
        dim = self._x0.size
        needs = self.method.needs()
        location = Location(x=self._x0)
        if needs.gradient:
            location.gradient = resize(None, dim)
        if needs.hessian:
            location.hessian = resize_sym(None, dim)
        self.location = location
        self._recorder_init()

        seeded = self._seed_initial_data(location)
        if seeded:
            self._evaluator.mark_fresh(location, seeded)
        self._evaluator.complete(location)
        self.stats.runtime = self._elapsed()

        self._tracker.reset(location.f)
        self._record(Iteration.INIT)
        self._started = True
        return check_thresholds(location, self.settings)

    def _seed_initial_data(self, location: Location) -> Evaluation:
        settings = self.settings
        seeded = NO_EVALUATION
        if settings.initial_value is not None:
            location.f = float(settings.initial_value)
            seeded |= FUNC
        if settings.initial_gradient is not None and location.gradient is not None:
            location.gradient[:] = settings.initial_gradient
            seeded |= GRAD
        if settings.initial_hessian is not None and location.hessian is not None:
            location.hessian[:] = settings.initial_hessian
            seeded |= HESS
        return seeded

    def _point_ok(self) -> bool:
        x = self.location.x
        return isinstance(x, np.ndarray) and x.shape == self._x0.shape

    def _check_point(self) -> None:
        if not self._point_ok():
            raise ProtocolError(
                f"location.x must be an array of shape {self._x0.shape}, "
                f"got {np.shape(self.location.x)}"
            )

    def _major_iteration(self) -> Status:
        # The candidate must hold every field the stopping rules read.
        self._evaluator.complete(self.location)
        self.stats.runtime = self._elapsed()
        status = check_convergence(self.location, self.stats, self.settings, self._tracker)
        if status is Status.NOT_TERMINATED:
            self.stats.major_iterations += 1
            self._record(Iteration.MAJOR)
        return status

    def _terminate(self, status: Status, error: Optional[BaseException]) -> Result:
        if not self._failed and self._point_ok():
            try:
                self._evaluator.complete(self.location)
            except ProblemFailure as failure:
                status = check_convergence(
                    self.location, self.stats, self.settings, self._tracker, failure=failure
                )
                error = failure.error
        self.stats.runtime = self._elapsed()
        # POST closes a run only once INIT has been recorded
        if self._started:
            self._record(Iteration.POST)
        self.state = DriverState.TERMINATED
        logger.debug(
            "Terminated with %s after %d major iterations (nfev=%d, njev=%d, nhev=%d)",
            status.value,
            self.stats.major_iterations,
            self.stats.func_evaluations,
            self.stats.grad_evaluations,
            self.stats.hess_evaluations,
        )
        return Result(
            location=self.location.copy(),
            stats=self.stats.copy(),
            status=status,
            error=error,
        )

    def _recorder_init(self) -> None:
        recorder = self.settings.recorder
        if recorder is None:
            return
        try:
            recorder.init()
        except Exception:
            logger.warning("Recorder failed to initialize", exc_info=True)

    def _record(self, iteration: Iteration) -> None:
        recorder = self.settings.recorder
        if recorder is None:
            return
        try:
            recorder.record(self.location, iteration, self.stats)
        except Exception:
            logger.warning("Recorder failed on %s record", iteration.value, exc_info=True)


def _default_method(problem: Problem) -> Method:
    from .newton import Newton
    from .quasi_newton import BFGS

    if problem.grad is None:
        raise ConfigurationError("no method given and the problem has no gradient")
    if problem.hess is not None:
        return Newton()
    return BFGS()


def minimize(
    problem: Problem,
    x0: Array,
    method: Optional[Method] = None,
    settings: Optional[Settings] = None,
) -> Result:
    """Minimize ``problem`` starting from ``x0``.

    Without a ``method``, :class:`~optdrive.optimize.newton.Newton` is used
    when the problem provides a Hessian and
    :class:`~optdrive.optimize.quasi_newton.BFGS` otherwise.
    """
    if method is None:
        method = _default_method(problem)
    return IterationDriver(problem, x0, method, settings).run()


__all__ = ["DriverState", "IterationDriver", "minimize"]
