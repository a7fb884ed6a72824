"""Run configuration."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

import numpy as np

from .core import Array

if TYPE_CHECKING:
    from .recorder import Recorder

DEFAULT_GRADIENT_THRESHOLD = 1e-6


@dataclass(frozen=True)
class FunctionConverge:
    """Stagnation rule for the objective value.

    A decrease from the best value ``f_best`` to ``f`` is significant when
    ``f < f_best`` and ``f_best - f > relative * max(|f|, |f_best|) + absolute``.
    The run converges after ``iterations`` consecutive major iterations
    without a significant decrease. ``iterations == 0`` disables the rule.
    """

    absolute: float = 1e-10
    relative: float = 0.0
    iterations: int = 20

    def __post_init__(self) -> None:
        if self.absolute < 0 or self.relative < 0:
            raise ValueError("absolute and relative tolerances must be non-negative")
        if self.iterations < 0:
            raise ValueError("iterations must be non-negative")


@dataclass(frozen=True, eq=False)
class Settings:
    """Settings of an optimization run.

    Args:
        initial_value: Objective value at the initial point, if known.
        initial_gradient: Gradient at the initial point, if known.
        initial_hessian: Hessian at the initial point, if known.
        function_threshold: ``FUNCTION_THRESHOLD`` is returned once the
            objective is less than or equal to this value.
        gradient_threshold: ``GRADIENT_THRESHOLD`` is returned once the
            infinity norm of the gradient is less than or equal to this
            value. Has no effect if the method does not use gradients.
        function_converge: Stagnation rule, ``None`` to disable it.
        major_iterations: Maximum number of major iterations.
        runtime: Maximum runtime in seconds, checked at major iterations only.
        func_evaluations: Maximum number of objective evaluations.
        grad_evaluations: Maximum number of gradient evaluations.
        hess_evaluations: Maximum number of Hessian evaluations.
        recorder: Sink receiving the initial, major and final locations.

    Limits equal to zero have no effect. Supplied initial data is not counted
    as an evaluation; initial arrays are stored as read-only copies. Settings
    compare by identity.
    """

    initial_value: Optional[float] = None
    initial_gradient: Optional[Array] = None
    initial_hessian: Optional[Array] = None

    function_threshold: float = -math.inf
    gradient_threshold: float = DEFAULT_GRADIENT_THRESHOLD
    function_converge: Optional[FunctionConverge] = field(default_factory=FunctionConverge)

    major_iterations: int = 0
    runtime: float = 0.0
    func_evaluations: int = 0
    grad_evaluations: int = 0
    hess_evaluations: int = 0

    recorder: Optional["Recorder"] = None

    def __post_init__(self) -> None:
        if math.isnan(self.function_threshold):
            raise ValueError("function_threshold must not be NaN")
        if not self.gradient_threshold >= 0:
            raise ValueError("gradient_threshold must be non-negative")
        limits = {
            "major_iterations": self.major_iterations,
            "runtime": self.runtime,
            "func_evaluations": self.func_evaluations,
            "grad_evaluations": self.grad_evaluations,
            "hess_evaluations": self.hess_evaluations,
        }
        for name, value in limits.items():
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        for name in ("initial_gradient", "initial_hessian"):
            value = getattr(self, name)
            if value is not None:
                value = np.array(value, dtype=float, copy=True)
                value.flags.writeable = False
                object.__setattr__(self, name, value)

    @property
    def has_initial_data(self) -> bool:
        return (
            self.initial_value is not None
            or self.initial_gradient is not None
            or self.initial_hessian is not None
        )


def default_settings() -> Settings:
    """Return a new :class:`Settings` holding the default configuration."""
    return Settings()


__all__ = [
    "DEFAULT_GRADIENT_THRESHOLD",
    "FunctionConverge",
    "Settings",
    "default_settings",
]
