"""Polynomial arithmetic helpers: gadget decomposition, external products, reductions."""

from __future__ import annotations

import numpy as np

from .fft import fft_engine
from .params import RING_Q, lazy_mod_q, modulo_switch


def _signed_digits(poly, base, shift, length):
    """Balanced signed digits of every coefficient, shape ``(length, N)``."""
    arr = np.asarray(poly, dtype=np.int64)
    positive = arr >= 0
    abs_val = np.abs(arr)
    mask = base - 1
    bound = base >> 1
    digits = np.empty((length,) + arr.shape, dtype=np.int64)
    for j in range(length):
        digit = abs_val & mask
        high = digit > bound
        value = np.where(high, digit - base, digit)
        digits[j] = np.where(positive, value, -value)
        abs_val = (abs_val >> shift) + high
    return digits


def gadget_decomp(poly, base, shift, length):
    """Transforms of the ``length`` balanced base-``base`` digit polynomials."""
    arr = np.asarray(poly, dtype=np.int64)
    engine = fft_engine(arr.shape[-1])
    return engine.to_fft(_signed_digits(arr, base, shift, length))


def external_product(poly, poly_vector, base, shift, length, dim):
    """Inner product of the gadget decomposition of ``poly`` with ``poly_vector``.

    ``poly_vector`` holds at least ``length`` transformed polynomials. The
    result is returned as ``int64`` coefficients, not reduced.
    """
    arr = np.asarray(poly, dtype=np.int64)
    if arr.shape != (dim,):
        raise ValueError(f"expected {dim} coefficients")
    keys = np.asarray(poly_vector, dtype=np.complex128)
    if keys.ndim != 2 or keys.shape[0] < length:
        raise ValueError(f"expected at least {length} transformed polynomials")
    engine = fft_engine(dim)
    digits_fft = engine.to_fft(_signed_digits(arr, base, shift, length))
    acc = np.sum(digits_fft * keys[:length], axis=0)
    return engine.from_fft(acc)


def mult_fft_poly_by_int(fft_poly, factor):
    """Return a transformed polynomial scaled by an integer."""
    return np.asarray(fft_poly, dtype=np.complex128) * float(factor)


def modulo_switch_a(values, old_q, new_q, length):
    """Scale the first ``length`` entries by ``new_q/old_q``, truncating toward zero."""
    out = np.array(values, dtype=np.int64)
    head = out[:length] * new_q
    out[:length] = np.sign(head) * (np.abs(head) // old_q)
    return out


def modulo_switch_poly(poly, old_q, new_q):
    """Scale coefficients from ``old_q`` to ``new_q`` with rounding."""
    return modulo_switch(poly, old_q, new_q)


def polymul(p1, p2, modulus):
    """Product of two polynomials modulo X^N + 1 and ``modulus``."""
    a = np.asarray(p1, dtype=np.int64)
    b = np.asarray(p2, dtype=np.int64)
    if a.shape != b.shape or a.ndim != 1:
        raise ValueError("polynomials must have the same length")
    engine = fft_engine(a.size)
    product = engine.from_fft(engine.to_fft(a) * engine.to_fft(b))
    return lazy_mod_q(product, modulus)


def get_gadget(dim, base, length):
    """Transforms of the gadget vector (1, B, B^2, ...) as constant polynomials."""
    engine = fft_engine(dim)
    unit = np.zeros(dim, dtype=np.int64)
    unit[0] = 1
    current = engine.to_fft(unit)
    rows = []
    for _ in range(length):
        rows.append(current)
        current = mult_fft_poly_by_int(current, base)
    return np.array(rows, dtype=np.complex128).reshape(length, dim // 2 + 1)


def mod_q_poly(values, modulus=RING_Q):
    """Reduce an integer or coefficients symmetrically modulo ``modulus``."""
    return lazy_mod_q(values, modulus)


def mod_q_lwe(value, q):
    """Reduce an LWE value or vector symmetrically modulo ``q``."""
    return lazy_mod_q(value, q)


def errestimator(poly, center):
    """Mean absolute deviation of the coefficients from ``center``, truncated."""
    arr = np.asarray(poly, dtype=np.int64)
    if arr.size == 0:
        raise ValueError("cannot estimate the error of an empty polynomial")
    return int(np.sum(np.abs(arr - center)) / arr.size)


def hamming_weight(values):
    """Number of nonzero entries."""
    return int(np.count_nonzero(np.asarray(values)))