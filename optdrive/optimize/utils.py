"""Buffer reuse and small linear algebra helpers.

Pure NumPy; no SciPy dependency.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

Array = np.ndarray


def resize(x: Optional[Array], dim: int) -> Array:
    """Return a float vector of length ``dim``, reusing ``x`` when possible.

    A view of ``x`` is returned if it holds at least ``dim`` elements,
    otherwise a new zeroed array is allocated. The contents of a reused
    buffer are left as they were.
    """
    if dim < 0:
        raise ValueError("dim must be non-negative")
    if x is None or x.ndim != 1 or x.dtype != np.float64 or x.size < dim:
        return np.zeros(dim, dtype=float)
    return x[:dim]


def resize_sym(m: Optional[Array], dim: int) -> Array:
    """Return a ``(dim, dim)`` float matrix backed by ``m`` when it is large enough."""
    if dim < 0:
        raise ValueError("dim must be non-negative")
    if (
        m is None
        or m.dtype != np.float64
        or m.size < dim * dim
        or not m.flags.c_contiguous
    ):
        return np.zeros((dim, dim), dtype=float)
    return m.reshape(-1)[: dim * dim].reshape(dim, dim)


def is_pos_def(mat: Array, tol: float = 1e-12) -> bool:
    """Check if a matrix is positive definite via eigenvalues."""
    sym = 0.5 * (mat + mat.T)
    eigvals = np.linalg.eigvalsh(sym)
    return bool(np.all(eigvals > tol))


def safe_solve(mat: Array, vec: Array, reg: float = 1e-12) -> Array:
    """Solve linear system with ridge fallback for singular matrices."""
    try:
        return np.linalg.solve(mat, vec)
    except np.linalg.LinAlgError:
        eye = np.eye(mat.shape[0], dtype=mat.dtype)
        try:
            return np.linalg.solve(mat + reg * eye, vec)
        except np.linalg.LinAlgError:
            pass
    sol, *_ = np.linalg.lstsq(mat, vec, rcond=None)
    return sol


__all__ = ["Array", "resize", "resize_sym", "is_pos_def", "safe_solve"]
