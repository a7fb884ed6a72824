"""Quasi-Newton methods (BFGS and L-BFGS)."""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional

import numpy as np

from .core import Array, Location
from .line_search import Backtracking, LinesearchMethod

_CURVATURE_EPS = 1e-12


class BFGS(LinesearchMethod):
    """Full-memory BFGS on the inverse Hessian approximation.

    The approximation is reset to the identity whenever the curvature
    condition ``y.s > 0`` fails.
    """

    def __init__(self, line_search: Optional[Backtracking] = None) -> None:
        super().__init__(line_search)
        self.inv_hessian: Optional[Array] = None

    def reset(self, location: Location) -> None:
        self.inv_hessian = np.eye(location.x.size)

    def direction(self, location: Location) -> Array:
        return -self.inv_hessian @ location.gradient

    def update(self, s: Array, y: Array, location: Location) -> None:
        n = s.size
        ys = float(np.dot(y, s))
        if ys <= _CURVATURE_EPS:
            self.inv_hessian = np.eye(n)
            return
        rho = 1.0 / ys
        identity = np.eye(n)
        outer_sy = np.outer(s, y)
        self.inv_hessian = (
            (identity - rho * outer_sy)
            @ self.inv_hessian
            @ (identity - rho * outer_sy.T)
            + rho * np.outer(s, s)
        )


class LBFGS(LinesearchMethod):
    """Limited-memory BFGS using two-loop recursion."""

    def __init__(self, m: int = 10, line_search: Optional[Backtracking] = None) -> None:
        if m <= 0:
            raise ValueError("Memory parameter m must be positive.")
        super().__init__(line_search)
        self.m = m
        self.s_history: Deque[Array] = deque(maxlen=m)
        self.y_history: Deque[Array] = deque(maxlen=m)

    def reset(self, location: Location) -> None:
        self.s_history.clear()
        self.y_history.clear()

    def update(self, s: Array, y: Array, location: Location) -> None:
        if float(np.dot(y, s)) > _CURVATURE_EPS:
            self.s_history.append(s)
            self.y_history.append(y)

    def direction(self, location: Location) -> Array:
        q = np.array(location.gradient, dtype=float, copy=True)
        alpha_vals = []
        for s, y in reversed(list(zip(self.s_history, self.y_history))):
            rho = 1.0 / float(np.dot(y, s))
            alpha_i = rho * float(np.dot(s, q))
            q = q - alpha_i * y
            alpha_vals.append((rho, alpha_i, s, y))
        if self.s_history:
            last_s = self.s_history[-1]
            last_y = self.y_history[-1]
            gamma = float(np.dot(last_s, last_y) / np.dot(last_y, last_y))
        else:
            gamma = 1.0
        r = gamma * q
        for rho, alpha_i, s, y in reversed(alpha_vals):
            beta = rho * float(np.dot(y, r))
            r = r + s * (alpha_i - beta)
        return -r


__all__ = ["BFGS", "LBFGS"]
