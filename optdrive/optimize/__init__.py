"""Iteration control for numerical optimization.

A :class:`Method` is driven against a :class:`Problem` by an
:class:`IterationDriver`, which serves evaluation requests, keeps
statistics and decides when to stop.

Example
-------
>>> import numpy as np
>>> from optdrive.optimize import BFGS, Problem, minimize
>>> def rosen(x):
...     return (1 - x[0])**2 + 100 * (x[1] - x[0]**2)**2
>>> def rosen_grad(x, out):
...     out[0] = -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2)
...     out[1] = 200 * (x[1] - x[0] ** 2)
>>> problem = Problem(fun=rosen, grad=rosen_grad, dim=2)
>>> res = minimize(problem, np.array([-1.2, 1.0]), BFGS())
>>> res.success
True
"""

from .convergence import StagnationTracker, check_convergence, check_thresholds, gradient_norm
from .core import (
    FUNC,
    GRAD,
    HESS,
    NO_EVALUATION,
    ConfigurationError,
    Evaluation,
    Iteration,
    Location,
    Needs,
    ProblemFailure,
    ProtocolError,
    Request,
    Result,
    Stats,
    Status,
    complement_eval,
)
from .driver import DriverState, IterationDriver, minimize
from .gradient import GradientDescent
from .line_search import Backtracking, LinesearchMethod
from .method import Method
from .newton import Newton
from .problem import Problem, ProblemEvaluator
from .quasi_newton import BFGS, LBFGS
from .recorder import HistoryRecorder, LoggingRecorder, Recorder
from .settings import FunctionConverge, Settings, default_settings
from .utils import is_pos_def, resize, resize_sym, safe_solve

__all__ = [
    # Data model
    "Evaluation",
    "FUNC",
    "GRAD",
    "HESS",
    "NO_EVALUATION",
    "Iteration",
    "Request",
    "Needs",
    "Location",
    "Stats",
    "Status",
    "Result",
    "complement_eval",
    # Errors
    "ConfigurationError",
    "ProblemFailure",
    "ProtocolError",
    # Configuration
    "FunctionConverge",
    "Settings",
    "default_settings",
    # Problem, convergence and driver
    "Problem",
    "ProblemEvaluator",
    "StagnationTracker",
    "check_convergence",
    "check_thresholds",
    "gradient_norm",
    "DriverState",
    "IterationDriver",
    "minimize",
    # Recorders
    "Recorder",
    "LoggingRecorder",
    "HistoryRecorder",
    # Methods
    "Method",
    "Backtracking",
    "LinesearchMethod",
    "GradientDescent",
    "Newton",
    "BFGS",
    "LBFGS",
    # Helpers
    "is_pos_def",
    "resize",
    "resize_sym",
    "safe_solve",
]
