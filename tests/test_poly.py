import numpy as np
import pytest

from mkhe.fft import fft_engine
from mkhe.params import RING_Q
from mkhe.poly import (
    errestimator,
    external_product,
    gadget_decomp,
    get_gadget,
    hamming_weight,
    mod_q_lwe,
    mod_q_poly,
    modulo_switch_a,
    modulo_switch_poly,
    mult_fft_poly_by_int,
    polymul,
)

DIM = 16


def _random_poly(seed, modulus=RING_Q):
    rng = np.random.default_rng(seed)
    half = modulus // 2
    return rng.integers(-half, half + 1, size=DIM, dtype=np.int64)


def test_external_product_with_gadget_recovers_poly():
    poly = _random_poly(1)
    gadget = get_gadget(DIM, 32, 6)
    assert np.array_equal(external_product(poly, gadget, 32, 5, 6, DIM), poly)


def test_external_product_rejects_short_key():
    gadget = get_gadget(DIM, 32, 2)
    with pytest.raises(ValueError):
        external_product(_random_poly(2), gadget, 32, 5, 6, DIM)


def test_gadget_decomp_recombines():
    poly = _random_poly(3)
    digits = gadget_decomp(poly, 32, 5, 6)
    engine = fft_engine(DIM)
    total = sum(engine.from_fft(row) * 32**j for j, row in enumerate(digits))
    assert np.array_equal(total, poly)
    assert all(np.max(np.abs(engine.from_fft(row))) <= 16 for row in digits)


def test_get_gadget_shape_and_powers():
    gadget = get_gadget(DIM, 4, 3)
    assert gadget.shape == (3, DIM // 2 + 1)
    engine = fft_engine(DIM)
    assert engine.from_fft(gadget[2])[0] == 16
    assert np.count_nonzero(engine.from_fft(gadget[2])) == 1


def test_mult_fft_poly_by_int_scales():
    poly = _random_poly(4, 1001)
    engine = fft_engine(DIM)
    scaled = mult_fft_poly_by_int(engine.to_fft(poly), 3)
    assert np.array_equal(engine.from_fft(scaled), 3 * poly)


def test_polymul_negacyclic_wrap():
    x = np.zeros(DIM, dtype=np.int64)
    x[1] = 1
    top = np.zeros(DIM, dtype=np.int64)
    top[DIM - 1] = 1
    result = polymul(x, top, 97)
    expected = np.zeros(DIM, dtype=np.int64)
    expected[0] = -1
    assert np.array_equal(result, expected)


def test_polymul_identity():
    one = np.zeros(DIM, dtype=np.int64)
    one[0] = 1
    poly = _random_poly(5, 97)
    assert np.array_equal(polymul(one, poly, 97), poly)


def test_polymul_size_mismatch():
    with pytest.raises(ValueError):
        polymul(np.zeros(4), np.zeros(8), 97)


def test_mod_q_poly_pinned_values():
    reduced = np.asarray(mod_q_poly(np.array([-4, 4, 7, 10, -3, 3], dtype=np.int64), 7))
    assert reduced.tolist() == [3, -3, 0, 3, -3, 3]


def test_mod_q_poly_range_and_congruence():
    values = np.arange(-50, 50, dtype=np.int64)
    reduced = np.asarray(mod_q_poly(values, 7))
    assert int(np.abs(reduced).max()) <= 3
    assert ((reduced - values) % 7).tolist() == [0] * len(values)


def test_mod_q_lwe_scalar():
    q = 32749
    value = q // 2 + 5
    result = mod_q_lwe(value, q)
    assert isinstance(result, int)
    assert (result - value) % q == 0
    assert abs(result) <= q // 2


def test_modulo_switch_a_truncates_symmetrically():
    values = np.array([7, -7, 13, -13, 5], dtype=np.int64)
    out = modulo_switch_a(values, 10, 3, 4)
    assert np.array_equal(out[:4:2], -out[1:4:2])
    assert out[4] == values[4]
    assert np.all(np.abs(out[:4]) * 10 <= np.abs(values[:4]) * 3)


def test_modulo_switch_poly_identity_and_double():
    poly = _random_poly(6, 1001)
    assert np.array_equal(modulo_switch_poly(poly, 1001, 1001), poly)
    assert np.array_equal(modulo_switch_poly(poly, 10, 20), 2 * poly)


def test_errestimator():
    assert errestimator([4, 4, 4], 4) == 0
    assert errestimator([9, 9, 9, 9], 4) == 5


def test_errestimator_empty():
    with pytest.raises(ValueError):
        errestimator([], 0)


def test_hamming_weight():
    assert hamming_weight([0, 1, -1, 0, 2]) == 3