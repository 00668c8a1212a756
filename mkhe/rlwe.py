"""Single-key RLWE encryption and RLWE x RGSW products."""

from __future__ import annotations

import numpy as np

from .fft import fft_engine
from .params import RING_Q, mod_q_boot
from .poly import external_product, mod_q_poly
from .randpoly import gaussian_vector, uniform_vector

_RLWE_ERR_STDEV = 0.01


def rlwe_enc(m, z):
    """Encrypt ``m`` under secret ``z`` as (e - a*z + m, a) modulo the ring modulus."""
    key = np.asarray(z, dtype=np.int64)
    msg = np.asarray(m, dtype=np.int64)
    if msg.shape != key.shape or key.ndim != 1:
        raise ValueError("message and key must have the same length")
    dim = key.size
    engine = fft_engine(dim)
    a = uniform_vector(dim, RING_Q)
    e = gaussian_vector(dim, _RLWE_ERR_STDEV)
    body = engine.to_fft(e) - engine.to_fft(a) * engine.to_fft(key) + engine.to_fft(msg)
    return [mod_q_poly(engine.from_fft(body), RING_Q), a]


def rlwe_dec(rlwe_c, z):
    """Decrypt an RLWE ciphertext: c0 + c1*z modulo the ring modulus."""
    if len(rlwe_c) != 2:
        raise ValueError("an RLWE ciphertext has two components")
    c0, c1 = (np.asarray(part, dtype=np.int64) for part in rlwe_c)
    key = np.asarray(z, dtype=np.int64)
    engine = fft_engine(key.size)
    masked = mod_q_poly(engine.from_fft(engine.to_fft(c1) * engine.to_fft(key)), RING_Q)
    return mod_q_poly(c0 + masked, RING_Q)


def rlwe_rgsw_product(rlwe_c, rgsw_c, params):
    """Multiply an RLWE ciphertext by an RGSW ciphertext given as 2x2 gadget rows."""
    if len(rlwe_c) != 2:
        raise ValueError("an RLWE ciphertext has two components")

    def ext(poly, key):
        prod = external_product(poly, key, params.B_r, params.shift_r, params.d_r, params.N)
        return mod_q_boot(prod)

    c0, c1 = rlwe_c
    res0 = ext(c0, rgsw_c[0][0]) + ext(c1, rgsw_c[1][0])
    res1 = ext(c0, rgsw_c[0][1]) + ext(c1, rgsw_c[1][1])
    return [mod_q_boot(res0), mod_q_boot(res1)]