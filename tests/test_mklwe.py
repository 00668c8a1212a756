import numpy as np
import pytest

from mkhe.mklwe import MKLweSample
from mkhe.poly import mod_q_lwe

Q = 32749
N = 8
PARTIES = 3


def _sample(seed):
    rng = np.random.default_rng(seed)
    a = rng.integers(-(Q // 2), Q // 2 + 1, size=N * PARTIES)
    b = int(rng.integers(-(Q // 2), Q // 2 + 1))
    return MKLweSample(Q, N, PARTIES, b, a)


def _key(seed):
    return np.random.default_rng(seed).integers(0, 2, size=N * PARTIES)


def _phase(sample, key):
    return mod_q_lwe(int(sample.b + np.dot(sample.a, key)), Q)


def test_default_mask_is_zero():
    sample = MKLweSample(Q, N, PARTIES)
    assert sample.a.shape == (N * PARTIES,)
    assert not sample.a.any()
    assert sample.b == 0


def test_wrong_mask_length():
    with pytest.raises(ValueError):
        MKLweSample(Q, N, PARTIES, 0, np.zeros(5))


def test_addition_is_linear_in_phase():
    x, y, key = _sample(1), _sample(2), _key(3)
    assert _phase(x + y, key) == mod_q_lwe(_phase(x, key) + _phase(y, key), Q)
    assert np.all(np.abs((x + y).a) <= Q // 2)


def test_constant_minus_sample():
    x, key = _sample(4), _key(5)
    c = 5 * (Q // 8)
    result = c - x
    assert _phase(result, key) == mod_q_lwe(c - _phase(x, key), Q)
    assert np.array_equal(result.a, mod_q_lwe(-x.a, Q))


def test_subtraction_masks_and_b():
    x, y = _sample(6), _sample(7)
    diff = x - y
    assert np.array_equal(diff.a, mod_q_lwe(x.a - y.a, Q))
    assert diff.b == mod_q_lwe(x.b + y.b, Q)


def test_mismatched_dimensions():
    with pytest.raises(ValueError):
        _sample(8) + MKLweSample(Q, N, 1)


def test_copy_is_independent():
    x = _sample(9)
    clone = x.copy()
    clone.a[0] += 1
    clone.b += 1
    assert clone.a[0] == x.a[0] + 1
    assert clone.b == x.b + 1