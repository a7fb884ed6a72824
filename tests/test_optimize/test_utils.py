import numpy as np

from optdrive.optimize.utils import is_pos_def, resize, resize_sym, safe_solve


def test_resize_reuses_large_enough_buffer():
    buf = np.arange(5, dtype=float)
    out = resize(buf, 3)
    assert out.shape == (3,)
    assert np.shares_memory(out, buf)
    assert np.array_equal(out, [0.0, 1.0, 2.0])


def test_resize_allocates_when_too_small():
    buf = np.ones(2)
    out = resize(buf, 4)
    assert out.shape == (4,)
    assert not np.shares_memory(out, buf)
    assert np.array_equal(buf, np.ones(2))


def test_resize_allocates_from_none():
    out = resize(None, 3)
    assert out.shape == (3,)
    assert out.dtype == np.float64


def test_resize_sym_reuses_backing_storage():
    m = np.zeros((3, 3))
    out = resize_sym(m, 2)
    assert out.shape == (2, 2)
    assert np.shares_memory(out, m)
    again = resize_sym(out, 2)
    assert np.shares_memory(again, m)


def test_resize_sym_allocates_when_too_small():
    m = np.zeros((2, 2))
    out = resize_sym(m, 3)
    assert out.shape == (3, 3)
    assert not np.shares_memory(out, m)
    assert resize_sym(None, 2).shape == (2, 2)


def test_is_pos_def():
    assert is_pos_def(np.diag([1.0, 2.0]))
    assert not is_pos_def(np.diag([1.0, -2.0]))


def test_safe_solve_regularizes_singular_matrix():
    mat = np.array([[1.0, 1.0], [1.0, 1.0]])
    vec = np.array([1.0, 1.0])
    solution = safe_solve(mat, vec)
    assert np.allclose(mat @ solution, vec, atol=1e-6)
