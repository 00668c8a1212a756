"""Random sampling and modular inversion used for key generation."""

from __future__ import annotations

import math

import numpy as np

from .params import PAR_LWE, Q_BOOT

_RNG = np.random.default_rng()


class NotInvertibleError(ArithmeticError):
    """Raised when a polynomial or matrix has no inverse modulo the given modulus."""


def seed(value):
    """Reseed the shared random engine used by every sampler."""
    _RNG.bit_generator.state = np.random.default_rng(value).bit_generator.state


def _round_away(values):
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def _lift(values, modulus):
    """Map integers to the representatives in (-modulus/2, modulus/2]."""
    arr = np.asarray(values, dtype=np.int64) % modulus
    return np.where(arr > modulus // 2, arr - modulus, arr).astype(np.int64)


def _inverse_scalar(value, modulus):
    try:
        return pow(int(value), -1, modulus)
    except ValueError:
        raise NotInvertibleError(f"{int(value)} is not a unit modulo {modulus}") from None


def _trim(poly):
    nonzero = np.flatnonzero(poly)
    if nonzero.size == 0:
        return poly[:0]
    return poly[: nonzero[-1] + 1]


def _fold(coeffs, dim):
    """Reduce a coefficient list modulo X^dim + 1."""
    arr = np.asarray(coeffs, dtype=np.int64).ravel()
    out = np.zeros(dim, dtype=np.int64)
    for block, start in enumerate(range(0, arr.size, dim)):
        chunk = arr[start : start + dim]
        if block % 2:
            out[: chunk.size] -= chunk
        else:
            out[: chunk.size] += chunk
    return out


def invert_mod_cyclotomic(coeffs, dim, modulus):
    """Invert a polynomial modulo X^dim + 1 and ``modulus``.

    Returns ``dim`` coefficients in ``[0, modulus)``. Raises
    ``NotInvertibleError`` when the polynomial is not a unit.
    """
    if dim <= 0:
        raise ValueError("dimension must be positive")
    if modulus < 2:
        raise ValueError("modulus must be at least 2")
    r1 = _trim(_fold(coeffs, dim) % modulus)
    r0 = np.zeros(dim + 1, dtype=np.int64)
    r0[0] = 1
    r0[dim] = 1
    r0 %= modulus
    t0 = np.zeros(1, dtype=np.int64)
    t1 = np.ones(1, dtype=np.int64)

    while len(r1) > 1:
        inv_lead = _inverse_scalar(r1[-1], modulus)
        r = r0.copy()
        t = t0.copy()
        while len(r) >= len(r1):
            shift = len(r) - len(r1)
            c = int(r[-1]) * inv_lead % modulus
            r[shift:] = (r[shift:] - c * r1) % modulus
            need = shift + len(t1)
            if len(t) < need:
                t = np.concatenate([t, np.zeros(need - len(t), dtype=np.int64)])
            t[shift:need] = (t[shift:need] - c * t1) % modulus
            r = _trim(r)
        r0, r1, t0, t1 = r1, r, t1, _trim(t)

    if len(r1) == 0:
        raise NotInvertibleError("polynomial is not a unit modulo X^N + 1")
    scale = _inverse_scalar(r1[0], modulus)
    inverse = (t1 * scale) % modulus
    return _fold(inverse, dim) % modulus


def invert_matrix_mod(matrix, modulus):
    """Invert a square matrix modulo ``modulus``, entries in ``[0, modulus)``."""
    rows = [[int(x) % modulus for x in row] for row in matrix]
    size = len(rows)
    if any(len(row) != size for row in rows):
        raise ValueError("matrix must be square")
    aug = [row + [1 if i == j else 0 for j in range(size)] for i, row in enumerate(rows)]
    for col in range(size):
        pivot = next(
            (r for r in range(col, size) if aug[r][col] and math.gcd(aug[r][col], modulus) == 1),
            None,
        )
        if pivot is None:
            raise NotInvertibleError("matrix is singular")
        aug[col], aug[pivot] = aug[pivot], aug[col]
        inv = pow(aug[col][col], -1, modulus)
        aug[col] = [x * inv % modulus for x in aug[col]]
        for r in range(size):
            factor = aug[r][col]
            if r != col and factor:
                aug[r] = [(x - factor * y) % modulus for x, y in zip(aug[r], aug[col])]
    return np.array([row[size:] for row in aug], dtype=np.int64).reshape(size, size)


class Sampler:
    """Draws random vectors and matrices for the LWE base scheme."""

    def __init__(self, param=PAR_LWE):
        self.param = param

    def get_uniform_vector(self, size):
        """Uniform vector modulo ``q_base`` in the symmetric interval."""
        half = self.param.half_q_base
        return _RNG.integers(-half, half + 1, size=size, dtype=np.int64)

    def get_uniform_matrix(self, rows, cols):
        """Uniform matrix modulo ``q_base`` in the symmetric interval."""
        half = self.param.half_q_base
        return _RNG.integers(-half, half + 1, size=(rows, cols), dtype=np.int64)

    def get_invertible_matrix(self, dim, scale, shift):
        """Return ``(mat, mat_inv)`` with mat = scale*M + shift*I, M ternary."""
        q = self.param.q_base
        identity = np.eye(dim, dtype=np.int64)
        while True:
            mat = Sampler.get_ternary_matrix(dim, dim) * scale + shift * identity
            try:
                inv = invert_matrix_mod(mat, q)
            except NotInvertibleError:
                continue
            return _lift(mat, q), _lift(inv, q)

    @staticmethod
    def get_ternary_matrix(rows, cols):
        """Matrix with uniform entries in {-1, 0, 1}."""
        return _RNG.integers(-1, 2, size=(rows, cols), dtype=np.int64)

    @staticmethod
    def get_ternary_vector(size):
        """Vector with uniform entries in {-1, 0, 1}."""
        return _RNG.integers(-1, 2, size=size, dtype=np.int64)

    @staticmethod
    def get_binary_vector(size):
        """Vector with uniform entries in {0, 1}."""
        return _RNG.integers(0, 2, size=size, dtype=np.int64)

    @staticmethod
    def get_gaussian_matrix(rows, cols, st_dev):
        """Matrix of rounded zero-mean Gaussian samples."""
        return _round_away(_RNG.normal(0.0, st_dev, size=(rows, cols))).astype(np.int64)

    @staticmethod
    def get_gaussian_vector(size, st_dev):
        """Vector of rounded zero-mean Gaussian samples."""
        return _round_away(_RNG.normal(0.0, st_dev, size=size)).astype(np.int64)

    def get_invertible_vector(self, size, scale, shift):
        """Return ``(vec, vec_inv)`` with vec = scale*v + shift, v ternary.

        ``vec`` is a unit modulo X^N + 1 and the bootstrapping modulus;
        ``vec_inv`` holds its N inverse coefficients.
        """
        dim = self.param.N
        if size > dim:
            raise ValueError(f"size must not exceed {dim}")
        while True:
            vec = Sampler.get_ternary_vector(size) * scale
            vec[0] += shift
            try:
                inv = invert_mod_cyclotomic(vec, dim, Q_BOOT)
            except NotInvertibleError:
                continue
            return _lift(vec, Q_BOOT), _lift(inv, Q_BOOT)