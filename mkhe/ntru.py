"""NTRU encryption used for bootstrapping and re-keying keys."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .fft import fft_engine
from .params import mod_q_boot
from .poly import mod_q_poly, mult_fft_poly_by_int
from .randpoly import gaussian_vector

_SCALAR_ERR_STDEV = 0.09


@dataclass
class BootKey:
    """NTRU secret key f and its inverse modulo X^N + 1."""

    sk: np.ndarray
    sk_inv: np.ndarray

    def __post_init__(self):
        self.sk = np.asarray(self.sk, dtype=np.int64)
        self.sk_inv = np.asarray(self.sk_inv, dtype=np.int64)


def ntru_scalar_enc(m, sk, modulus, dim):
    """Encrypt polynomial ``m`` as (m + g) / f modulo ``modulus``."""
    msg = np.asarray(m, dtype=np.int64)
    if msg.shape != (dim,):
        raise ValueError(f"expected {dim} coefficients")
    engine = fft_engine(dim)
    noisy = msg + gaussian_vector(dim, _SCALAR_ERR_STDEV)
    product = engine.to_fft(noisy) * engine.to_fft(sk.sk_inv)
    return mod_q_poly(engine.from_fft(product), modulus)


def ntru_scalar_dec(c, sk, modulus, dim):
    """Decrypt an NTRU ciphertext: c * f modulo ``modulus``."""
    engine = fft_engine(dim)
    product = engine.to_fft(sk.sk) * engine.to_fft(np.asarray(c, dtype=np.int64))
    return mod_q_poly(engine.from_fft(product), modulus)


def ntru_vector_enc(m, length, base, sk_boot, params):
    """Gadget NTRU encryption: rows g_i / f + B^i * m, in transformed form.

    ``m`` is an integer (a constant polynomial) or N coefficients.
    Returns an array of shape ``(length, N//2 + 1)``.
    """
    dim = params.N
    if isinstance(m, (int, np.integer)):
        msg = np.zeros(dim, dtype=np.int64)
        msg[0] = int(m)
    else:
        msg = np.asarray(m, dtype=np.int64)
        if msg.shape != (dim,):
            raise ValueError(f"expected {dim} coefficients")
    engine = fft_engine(dim)
    inv_fft = engine.to_fft(sk_boot.sk_inv)
    msg_pow = engine.to_fft(msg)
    rows = []
    for _ in range(length):
        g = gaussian_vector(dim, params.stdev_ntru_err)
        row = engine.to_fft(g) * inv_fft + msg_pow
        reduced = mod_q_boot(engine.from_fft(row))
        rows.append(engine.to_fft(reduced))
        msg_pow = mult_fft_poly_by_int(msg_pow, base)
    return np.array(rows, dtype=np.complex128).reshape(length, params.N2p1)