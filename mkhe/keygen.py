"""Key generation for the multi-key scheme: LWE, RLWE, NTRU and switching keys."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .fft import fft_engine
from .ntru import BootKey, ntru_vector_enc
from .params import mod_q_boot
from .poly import external_product, mod_q_lwe, mult_fft_poly_by_int
from .randpoly import (
    binary_vector,
    gaussian_vector,
    invert_poly,
    ternary_vector,
    uniform_vector,
)
from .sampler import NotInvertibleError


@dataclass
class KSKeyLWE:
    """LWE key-switching key for one input coefficient: rows ``A`` and values ``b``."""

    A: np.ndarray
    b: np.ndarray

    def __post_init__(self):
        self.A = np.asarray(self.A, dtype=np.int64)
        self.b = np.asarray(self.b, dtype=np.int64)


@dataclass
class MKRLweKey:
    """Multi-key RLWE keys.

    ``sk`` holds the transforms of (z_0, ..., z_k) with z_0 = 1, ``sk_poly``
    their coefficients, and ``pk`` the gadget vectors (b_0, ..., b_k, a) with
    b_j = -z_j * a + e.
    """

    sk: np.ndarray
    sk_poly: np.ndarray
    pk: np.ndarray

    @property
    def a(self):
        """The common reference vector ``a``."""
        return self.pk[-1]


@dataclass
class HPK:
    """Hybrid public key (d0, d1, d2) of one party, numbered from 1."""

    hpk_fft: np.ndarray
    party: int


@dataclass
class NRKey:
    """Keys for the second bootstrapping variant.

    ``nrksk0`` encrypts the first party's NTRU key; ``nrksk1`` holds one RGSW
    key for each further party.
    """

    nrksk0: np.ndarray
    nrksk1: list = field(default_factory=list)


def _gadget_powers(fft_poly, base, length):
    """Rows fft_poly * base^i for i in range(length)."""
    rows = []
    current = np.asarray(fft_poly, dtype=np.complex128)
    for _ in range(length):
        rows.append(current)
        current = mult_fft_poly_by_int(current, base)
    return np.array(rows, dtype=np.complex128)


def mk_lwe_keygen(params):
    """Binary LWE secret keys of all parties, concatenated."""
    return binary_vector(params.n * params.parties)


def mk_rlwe_keygen(params):
    """Generate the multi-key RLWE secret and public keys."""
    dim, length, parties = params.N, params.d_r, params.parties
    engine = fft_engine(dim)
    a = engine.to_fft(uniform_vector((length, dim), params.Q))

    sk_poly = np.zeros((parties + 1, dim), dtype=np.int64)
    sk_poly[0, 0] = 1
    rows = []
    for i in range(parties + 1):
        if i:
            sk_poly[i] = gaussian_vector(dim, params.stdev_rlwe_key)
        z_fft = engine.to_fft(sk_poly[i])
        e_fft = engine.to_fft(gaussian_vector((length, dim), params.stdev_rlwe_err))
        rows.append(e_fft - a * z_fft)
    rows.append(a)
    pk = np.array(rows, dtype=np.complex128)
    return MKRLweKey(engine.to_fft(sk_poly), sk_poly, pk)


def hybrid_product_rksk(c, hpk, mkrlwe_key, params):
    """Multiply a multi-key RLWE ciphertext by the NTRU key behind ``hpk``.

    ``c`` holds k + 1 coefficient vectors; a new list is returned.
    """
    parties = params.parties
    if len(c) != parties + 1:
        raise ValueError(f"expected {parties + 1} ciphertext components")
    if not 1 <= hpk.party <= parties:
        raise ValueError(f"party index must be in 1..{parties}")

    def ext(poly, key):
        prod = external_product(poly, key, params.B_r, params.shift_r, params.d_r, params.N)
        return mod_q_boot(prod)

    polys = [np.asarray(p, dtype=np.int64) for p in c]
    d0, d1, d2 = hpk.hpk_fft
    v = [ext(poly, mkrlwe_key.pk[i]) for i, poly in enumerate(polys)]
    out = [ext(poly, d0) for poly in polys]
    w0 = mod_q_boot(sum(ext(vi, d2) for vi in v))
    w1 = mod_q_boot(sum(ext(vi, d1) for vi in v))
    out[0] = mod_q_boot(out[0] + w0)
    out[hpk.party] = mod_q_boot(out[hpk.party] + w1)
    return out


def hpk_gen(mkrlwe_key, f, party, params):
    """Hybrid public key of ``party`` for its NTRU secret ``f``."""
    dim, length, base = params.N, params.d_r, params.B_r
    if not 1 <= party <= params.parties:
        raise ValueError(f"party index must be in 1..{params.parties}")
    engine = fft_engine(dim)
    z_fft = mkrlwe_key.sk[party]
    a = mkrlwe_key.a

    f_pow = _gadget_powers(engine.to_fft(np.asarray(f, dtype=np.int64)), base, length)
    r_fft = engine.to_fft(gaussian_vector(dim, params.stdev_rlwe_key))
    r_pow = _gadget_powers(r_fft, base, length)

    e0 = engine.to_fft(gaussian_vector((length, dim), params.stdev_rlwe_err))
    d0 = r_fft * a + f_pow + e0
    d1 = engine.to_fft(uniform_vector((length, dim), params.Q))
    e2 = engine.to_fft(gaussian_vector((length, dim), params.stdev_rlwe_err))
    d2 = r_pow + e2 - z_fft * d1
    return HPK(np.array([d0, d1, d2], dtype=np.complex128), party)


def mk_rksk_gen(mkhpk, mkrlwe_key, params):
    """Relinearisation keys: encryptions of B^i * f_1 * ... * f_k.

    Returns an array of shape ``(k + 1, d_r, N//2 + 1)``.
    """
    parties, length, dim = params.parties, params.d_r, params.N
    if len(mkhpk) < parties:
        raise ValueError(f"expected {parties} hybrid public keys")
    engine = fft_engine(dim)
    rksk = np.empty((parties + 1, length, params.N2p1), dtype=np.complex128)
    pow_b = 1
    for i in range(length):
        c = [np.zeros(dim, dtype=np.int64) for _ in range(parties + 1)]
        c[0][0] = pow_b
        for hpk in mkhpk[:parties]:
            c = hybrid_product_rksk(c, hpk, mkrlwe_key, params)
        rksk[:, i] = engine.to_fft(np.array(c, dtype=np.int64))
        pow_b *= params.B_r
    return rksk


def mk_hpk_gen(mkrlwe_key, boot_keys, params):
    """Hybrid public keys of all parties, numbered from 1."""
    if len(boot_keys) < params.parties:
        raise ValueError(f"expected {params.parties} bootstrapping keys")
    return [
        hpk_gen(mkrlwe_key, boot_keys[i].sk, i + 1, params) for i in range(params.parties)
    ]


def rekey_gen(sk_boot, params):
    """NTRU gadget encryption of f^-1 under f."""
    return ntru_vector_enc(sk_boot.sk_inv, params.d_n, params.B_n, sk_boot, params)


def mk_rekey_gen(boot_keys, params):
    """Re-keying keys of all parties, shape ``(k, d_n, N//2 + 1)``."""
    if len(boot_keys) < params.parties:
        raise ValueError(f"expected {params.parties} bootstrapping keys")
    return np.array(
        [rekey_gen(key, params) for key in boot_keys[: params.parties]],
        dtype=np.complex128,
    )


def _encrypt_rows(r_fft, b_sum, a, top, bottom, params, engine):
    shape = (params.d_r, params.N)
    e0 = engine.to_fft(gaussian_vector(shape, params.stdev_rlwe_err))
    e1 = engine.to_fft(gaussian_vector(shape, params.stdev_rlwe_err))
    return np.array([r_fft * b_sum + top + e0, r_fft * a + bottom + e1], dtype=np.complex128)


def nrk_gen(boot_keys, mkrlwe_key, params):
    """Keys that move an NTRU accumulator into RLWE under the summed key."""
    parties, dim, length = params.parties, params.N, params.d_r
    if len(boot_keys) < parties:
        raise ValueError(f"expected {parties} bootstrapping keys")
    engine = fft_engine(dim)
    b_sum = mkrlwe_key.pk[1 : parties + 1].sum(axis=0)
    a = mkrlwe_key.a
    zero = np.zeros((length, params.N2p1), dtype=np.complex128)

    def fresh_r():
        return engine.to_fft(gaussian_vector(dim, params.stdev_rlwe_key))

    def f_powers(key):
        return _gadget_powers(engine.to_fft(key.sk), params.B_r, length)

    nrksk0 = _encrypt_rows(fresh_r(), b_sum, a, f_powers(boot_keys[0]), zero, params, engine)

    nrksk1 = []
    for key in boot_keys[1:parties]:
        f_pow = f_powers(key)
        row1 = _encrypt_rows(fresh_r(), b_sum, a, f_pow, zero, params, engine)
        row2 = _encrypt_rows(fresh_r(), b_sum, a, zero, f_pow, params, engine)
        nrksk1.append(np.array([row1, row2], dtype=np.complex128))
    return NRKey(nrksk0, nrksk1)


def brk_gen(sk_base, sk_boot, params):
    """Blind-rotation key: NTRU gadget encryption of every LWE key bit."""
    bits = np.asarray(sk_base, dtype=np.int64)
    if bits.shape != (params.n,):
        raise ValueError(f"expected {params.n} LWE key coefficients")
    return np.array(
        [ntru_vector_enc(int(bit), params.d_n, params.B_n, sk_boot, params) for bit in bits],
        dtype=np.complex128,
    )


def mk_brk_gen(mklwe_sk, boot_keys, params):
    """Blind-rotation keys of all parties, shape ``(k, n, d_n, N//2 + 1)``."""
    n, parties = params.n, params.parties
    sk = np.asarray(mklwe_sk, dtype=np.int64)
    if sk.shape != (n * parties,):
        raise ValueError(f"expected {n * parties} LWE key coefficients")
    if len(boot_keys) < parties:
        raise ValueError(f"expected {parties} bootstrapping keys")
    return np.array(
        [brk_gen(sk[i * n : (i + 1) * n], boot_keys[i], params) for i in range(parties)],
        dtype=np.complex128,
    )


def _invertible_ternary(dim, modulus):
    while True:
        vec = ternary_vector(dim)
        try:
            inv = invert_poly(vec, dim, modulus)
        except NotInvertibleError:
            continue
        return BootKey(vec, inv)


def mk_boot_sk_gen(params):
    """Ternary NTRU secret keys, invertible modulo X^N + 1, one per party."""
    return [_invertible_ternary(params.N, params.Q) for _ in range(params.parties)]


def lksk_gen(sk_in, sk_out, params):
    """LWE key-switching key from ``sk_in`` to ``sk_out``, one entry per input coefficient."""
    key_in = np.asarray(sk_in, dtype=np.int64)
    key_out = np.asarray(sk_out, dtype=np.int64)
    q, length = params.q, params.d_l
    A = uniform_vector((key_in.size, length, key_out.size), q)
    e = gaussian_vector((key_in.size, length), params.stdev_lwe_err)
    pow_b = np.array([params.B_l**j for j in range(length)], dtype=np.int64)
    b = mod_q_lwe(-(A @ key_out) + e + key_in[:, None] * pow_b[None, :], q)
    return [KSKeyLWE(A[i], b[i]) for i in range(key_in.size)]


def mk_lksk_gen(sk_in, sk_out, params):
    """Key-switching keys of all parties from the extracted RLWE keys to the LWE keys."""
    dim, n, parties = params.N, params.n, params.parties
    key_in = np.asarray(sk_in, dtype=np.int64)
    key_out = np.asarray(sk_out, dtype=np.int64)
    if key_in.shape != (dim * parties,) or key_out.shape != (n * parties,):
        raise ValueError("key lengths do not match the parameters")
    return [
        lksk_gen(key_in[i * dim : (i + 1) * dim], key_out[i * n : (i + 1) * n], params)
        for i in range(parties)
    ]