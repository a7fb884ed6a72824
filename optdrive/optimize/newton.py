"""Damped Newton method."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .core import Array, Location, Needs
from .line_search import Backtracking, LinesearchMethod
from .utils import is_pos_def, safe_solve


class Newton(LinesearchMethod):
    """Newton's method with Levenberg-style damping and backtracking.

    The Hessian is shifted by ``reg * I``, starting from ``lambda_reg`` and
    growing tenfold until the shifted matrix is positive definite, so the
    Newton direction is always a descent direction.
    """

    def __init__(
        self,
        lambda_reg: float = 0.0,
        max_reg_tries: int = 20,
        line_search: Optional[Backtracking] = None,
    ) -> None:
        if lambda_reg < 0:
            raise ValueError("lambda_reg must be non-negative")
        super().__init__(line_search)
        self.lambda_reg = lambda_reg
        self.max_reg_tries = max_reg_tries

    def needs(self) -> Needs:
        return Needs(gradient=True, hessian=True)

    def direction(self, location: Location) -> Array:
        hess = location.hessian
        eye = np.eye(hess.shape[0])
        reg = self.lambda_reg
        for _ in range(self.max_reg_tries):
            if is_pos_def(hess + reg * eye):
                break
            reg = reg * 10 + 1e-8
        return safe_solve(hess + reg * eye, -location.gradient)


__all__ = ["Newton"]
