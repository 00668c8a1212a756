import numpy as np
import pytest

from mkhe.params import PAR_LWE, Q_BOOT, RING_N
from mkhe.sampler import (
    NotInvertibleError,
    Sampler,
    invert_matrix_mod,
    invert_mod_cyclotomic,
    seed,
)


def _negacyclic_mul(a, b, dim, modulus):
    res = [0] * dim
    for i, ai in enumerate(a):
        ai = int(ai)
        if not ai:
            continue
        for j, bj in enumerate(b):
            k = i + j
            if k >= dim:
                res[k - dim] -= ai * int(bj)
            else:
                res[k] += ai * int(bj)
    return [x % modulus for x in res]


def _one(dim):
    return [1] + [0] * (dim - 1)


def test_invert_constant():
    inv = invert_mod_cyclotomic([3], 4, 7)
    assert list(inv) == [5, 0, 0, 0]


def test_invert_round_trip_small():
    poly = [1, 1, 0, 2, 0, 0, 0, 5]
    inv = invert_mod_cyclotomic(poly, 8, 97)
    assert len(inv) == 8
    assert all(0 <= x < 97 for x in inv)
    assert _negacyclic_mul(poly, inv, 8, 97) == _one(8)


def test_invert_negative_coefficients():
    poly = [-1, 0, 1, -1]
    inv = invert_mod_cyclotomic(poly, 4, 101)
    assert _negacyclic_mul(poly, inv, 4, 101) == _one(4)


def test_invert_zero_raises():
    with pytest.raises(NotInvertibleError):
        invert_mod_cyclotomic([0, 0], 2, 5)


def test_invert_zero_divisor_raises():
    # X^2 + 1 = (X + 2)(X + 3) modulo 5
    with pytest.raises(NotInvertibleError):
        invert_mod_cyclotomic([2, 1], 2, 5)


def test_invert_matrix_round_trip():
    mat = np.array([[2, 1, 0], [1, 1, 3], [0, 4, 1]])
    inv = invert_matrix_mod(mat, 97)
    assert np.array_equal((mat @ inv) % 97, np.eye(3, dtype=np.int64))


def test_invert_matrix_singular():
    with pytest.raises(NotInvertibleError):
        invert_matrix_mod([[1, 2], [2, 4]], 97)


def test_invert_matrix_not_square():
    with pytest.raises(ValueError):
        invert_matrix_mod([[1, 2, 3], [4, 5, 6]], 97)


def test_seed_reproducible():
    seed(123)
    first = Sampler.get_ternary_vector(50)
    seed(123)
    second = Sampler.get_ternary_vector(50)
    assert np.array_equal(first, second)


def test_ternary_and_binary_ranges():
    assert set(Sampler.get_ternary_vector(500).tolist()) <= {-1, 0, 1}
    assert set(Sampler.get_binary_vector(500).tolist()) <= {0, 1}
    mat = Sampler.get_ternary_matrix(3, 7)
    assert mat.shape == (3, 7)
    assert set(mat.ravel().tolist()) <= {-1, 0, 1}


def test_uniform_range():
    s = Sampler(PAR_LWE)
    vec = s.get_uniform_vector(1000)
    assert vec.shape == (1000,)
    assert np.all(np.abs(vec) <= PAR_LWE.half_q_base)
    mat = s.get_uniform_matrix(4, 5)
    assert mat.shape == (4, 5)
    assert np.all(np.abs(mat) <= PAR_LWE.half_q_base)


def test_gaussian_zero_deviation():
    assert np.array_equal(Sampler.get_gaussian_vector(10, 0.0), np.zeros(10, dtype=np.int64))
    mat = Sampler.get_gaussian_matrix(2, 3, 0.0)
    assert np.array_equal(mat, np.zeros((2, 3), dtype=np.int64))


def test_invertible_matrix():
    s = Sampler(PAR_LWE)
    mat, inv = s.get_invertible_matrix(3, 1, 1)
    q = PAR_LWE.q_base
    assert np.array_equal((mat @ inv) % q, np.eye(3, dtype=np.int64))
    assert set(np.diag(mat).tolist()) <= {0, 1, 2}
    off = mat[~np.eye(3, dtype=bool)]
    assert set(off.tolist()) <= {-1, 0, 1}


def test_invertible_vector():
    s = Sampler(PAR_LWE)
    vec, inv = s.get_invertible_vector(4, 1, 0)
    assert vec.shape == (4,)
    assert inv.shape == (RING_N,)
    assert set(vec.tolist()) <= {-1, 0, 1}
    assert np.all(np.abs(inv) <= Q_BOOT // 2)
    assert _negacyclic_mul(vec, inv, RING_N, Q_BOOT) == _one(RING_N)


def test_invertible_vector_too_large():
    with pytest.raises(ValueError):
        Sampler(PAR_LWE).get_invertible_vector(RING_N + 1, 1, 0)