"""Random polynomial generators over the ring modulo X^N + 1."""

from __future__ import annotations

import numpy as np

from .params import Q_BOOT, RING_N
from .sampler import (
    _RNG,
    NotInvertibleError,
    Sampler,
    _lift,
    invert_mod_cyclotomic,
)


def uniform_vector(size, modulus):
    """Uniform vector in the symmetric interval around zero modulo ``modulus``."""
    half = modulus // 2
    return _RNG.integers(-half, half + 1, size=size, dtype=np.int64)


def gaussian_vector(size, st_dev):
    """Vector of rounded zero-mean Gaussian samples."""
    return Sampler.get_gaussian_vector(size, st_dev)


def hwt_vector(size, h):
    """Vector with ``h`` nonzero entries in {-1, 1}, half of them +1.

    Raises ``ValueError`` when ``h`` exceeds ``size`` or is negative.
    """
    if h > size:
        raise ValueError("Hamming weight cannot be greater than vector size")
    if h < 0:
        raise ValueError("Hamming weight cannot be negative")
    vec = np.zeros(size, dtype=np.int64)
    positions = _RNG.permutation(size)[:h]
    signs = np.ones(h, dtype=np.int64)
    signs[h // 2 :] = -1
    _RNG.shuffle(signs)
    vec[positions] = signs
    return vec


def ternary_vector(size):
    """Vector with uniform entries in {-1, 0, 1}."""
    return Sampler.get_ternary_vector(size)


def binary_vector(size):
    """Vector with uniform entries in {0, 1}."""
    return Sampler.get_binary_vector(size)


def invertible_vector(size, scale, shift):
    """Return ``(vec, vec_inv)`` of the form scale*v + shift, v ternary,
    invertible modulo X^N + 1 and the bootstrapping modulus."""
    return Sampler().get_invertible_vector(size, scale, shift)


def invertible_vector_mod(size, scale, dim, modulus):
    """Return ``(vec, vec_inv)`` with vec = scale*v + 1, v ternary,
    invertible modulo X^dim + 1 and ``modulus``."""
    if size > dim:
        raise ValueError(f"size must not exceed {dim}")
    while True:
        vec = ternary_vector(size) * scale
        vec[0] += 1
        try:
            inv = invert_mod_cyclotomic(vec, dim, modulus)
        except NotInvertibleError:
            continue
        return _lift(vec, modulus), _lift(inv, modulus)


def invertible_vector_gaussian(size, st_dev):
    """Return ``(vec, vec_inv)`` with Gaussian coefficients, invertible
    modulo X^N + 1 and the bootstrapping modulus."""
    if size > RING_N:
        raise ValueError(f"size must not exceed {RING_N}")
    while True:
        vec = gaussian_vector(size, st_dev)
        try:
            inv = invert_mod_cyclotomic(vec, RING_N, Q_BOOT)
        except NotInvertibleError:
            continue
        return _lift(vec, Q_BOOT), _lift(inv, Q_BOOT)


def invert_poly(coeffs, dim, modulus):
    """Inverse of a polynomial modulo X^dim + 1 and ``modulus``, centred.

    Raises ``NotInvertibleError`` when no inverse exists.
    """
    return _lift(invert_mod_cyclotomic(coeffs, dim, modulus), modulus)