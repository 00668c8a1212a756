"""Negacyclic FFT over Z[X]/(X^N + 1) for polynomial products."""

from __future__ import annotations

from functools import cached_property, lru_cache

import numpy as np


def _round_away(values):
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


class FFTEngine:
    """Transforms integer polynomials to and from a pointwise-product domain.

    A polynomial of degree below ``dim`` is evaluated at the odd powers of a
    primitive ``2*dim``-th root of unity, so pointwise products correspond to
    multiplication modulo ``X^dim + 1``. Transforms have ``dim//2 + 1``
    entries; the last one is always zero and carries no information.
    Inputs may be batched along leading axes.
    """

    def __init__(self, dim):
        if dim <= 0 or dim % 2:
            raise ValueError("FFT dimension must be a positive even number")
        self.dim = dim
        self.fft_size = dim // 2 + 1

    def to_fft(self, poly):
        """Forward transform of integer coefficients along the last axis."""
        arr = np.asarray(poly, dtype=np.float64)
        if arr.ndim == 0 or arr.shape[-1] != self.dim:
            raise ValueError(f"expected {self.dim} coefficients")
        dim = self.dim
        padded = np.zeros(arr.shape[:-1] + (2 * dim,))
        padded[..., :dim] = arr
        spectrum = np.fft.rfft(padded, axis=-1)
        out = np.zeros(arr.shape[:-1] + (self.fft_size,), dtype=np.complex128)
        out[..., : dim // 2] = spectrum[..., 1::2]
        return out

    def from_fft(self, fft_poly):
        """Inverse transform, rounding back to ``int64`` coefficients."""
        arr = np.asarray(fft_poly, dtype=np.complex128)
        if arr.ndim == 0 or arr.shape[-1] != self.fft_size:
            raise ValueError(f"expected {self.fft_size} transform entries")
        dim = self.dim
        spectrum = np.zeros(arr.shape[:-1] + (dim + 1,), dtype=np.complex128)
        spectrum[..., 1::2] = arr[..., : dim // 2]
        values = 2.0 * np.fft.irfft(spectrum, n=2 * dim, axis=-1)
        return _round_away(values[..., :dim]).astype(np.int64)

    @cached_property
    def pos_powers(self):
        """Transforms of the monomials X^i, one row per i."""
        dim = self.dim
        odd = 2 * np.arange(dim // 2) + 1
        exps = np.outer(np.arange(dim), odd)
        out = np.zeros((dim, self.fft_size), dtype=np.complex128)
        out[:, : dim // 2] = np.exp(-1j * np.pi * exps / dim)
        return out

    @cached_property
    def neg_powers(self):
        """Transforms of the monomials -X^i, one row per i."""
        return -self.pos_powers


@lru_cache(maxsize=None)
def fft_engine(dim):
    """Return the shared engine for dimension ``dim``."""
    return FFTEngine(dim)