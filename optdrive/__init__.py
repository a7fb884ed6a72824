"""optdrive - iteration control for numerical optimization."""

__version__ = "0.1.0"

from .optimize import (
    BFGS,
    LBFGS,
    ConfigurationError,
    Evaluation,
    FunctionConverge,
    GradientDescent,
    HistoryRecorder,
    Iteration,
    IterationDriver,
    Location,
    LoggingRecorder,
    Method,
    Needs,
    Newton,
    Problem,
    Recorder,
    Result,
    Settings,
    Stats,
    Status,
    default_settings,
    minimize,
)
from .logging import configure_logging, get_logger

__all__ = [
    "__version__",
    # Data model
    "Evaluation",
    "Iteration",
    "Location",
    "Needs",
    "Result",
    "Stats",
    "Status",
    "ConfigurationError",
    # Configuration
    "FunctionConverge",
    "Settings",
    "default_settings",
    # Driver
    "IterationDriver",
    "Method",
    "Problem",
    "minimize",
    # Recorders
    "Recorder",
    "HistoryRecorder",
    "LoggingRecorder",
    # Methods
    "GradientDescent",
    "Newton",
    "BFGS",
    "LBFGS",
    # Logging
    "configure_logging",
    "get_logger",
]
