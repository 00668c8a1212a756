"""Multi-key scheme: key setup, LWE encryption and NAND bootstrapping."""

from __future__ import annotations

import logging
import math

import numpy as np

from .fft import fft_engine
from .keygen import (
    mk_boot_sk_gen,
    mk_brk_gen,
    mk_hpk_gen,
    mk_lksk_gen,
    mk_lwe_keygen,
    mk_rekey_gen,
    mk_rksk_gen,
    mk_rlwe_keygen,
    nrk_gen,
)
from .mklwe import MKLweSample
from .params import PAR_LWE, MKHEParams, mod_q_boot, modulo_switch, params_for
from .poly import _signed_digits, external_product, mod_q_lwe, mod_q_poly, modulo_switch_a
from .randpoly import gaussian_vector
from .rlwe import rlwe_rgsw_product
from .sampler import Sampler

_log = logging.getLogger(__name__)


def _round_half_away(value):
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _trunc_div(num, den):
    quotient = abs(num) // abs(den)
    return quotient if (num >= 0) == (den > 0) else -quotient


class MKHEScheme:
    """All keys of one multi-key instance, generated at construction.

    ``version`` 1 generates relinearisation keys for the first bootstrapping
    variant, ``version`` 2 the NTRU-to-RLWE keys for the second.
    """

    def __init__(self, param_set, version):
        if isinstance(param_set, MKHEParams):
            self.params = param_set
        else:
            self.params = params_for(param_set)
        params = self.params
        self.version = version

        _log.info("key generation started")
        self.mklwe_sk = mk_lwe_keygen(params)
        self.boot_keys = mk_boot_sk_gen(params)
        self.mkrlwe_key = mk_rlwe_keygen(params)
        self.mkhpk = mk_hpk_gen(self.mkrlwe_key, self.boot_keys, params)
        self.mklwe_sk_z = mk_extract_key(self.mkrlwe_key, params)
        self.mk_lksk = mk_lksk_gen(self.mklwe_sk_z, self.mklwe_sk, params)
        self.mk_rekey = mk_rekey_gen(self.boot_keys, params)
        self.mk_brk = mk_brk_gen(self.mklwe_sk, self.boot_keys, params)

        self.mk_rksk = None
        self.nrk0 = None
        self.nrk1 = None
        if version == 1:
            self.mk_rksk = mk_rksk_gen(self.mkhpk, self.mkrlwe_key, params)
        if version == 2:
            nrk = nrk_gen(self.boot_keys, self.mkrlwe_key, params)
            self.nrk0 = nrk.nrksk0
            self.nrk1 = nrk.nrksk1
        _log.info("key generation finished")

    def encrypt(self, m):
        """Encrypt bit ``m`` under the concatenated LWE keys of all parties."""
        p = self.params
        a = Sampler(PAR_LWE).get_uniform_vector(p.n * p.parties)
        noise = int(gaussian_vector(1, p.stdev_lwe_err)[0])
        b = PAR_LWE.delta_base * int(m) + noise - int(a @ self.mklwe_sk)
        return MKLweSample(p.q, p.n, p.parties, PAR_LWE.mod_q_base(b), a)

    def decrypt(self, ctxt):
        """Decrypt to round(t * phase / q), phase = b + <a, s>."""
        p = self.params
        a = np.asarray(ctxt.a, dtype=np.int64)
        if a.size != self.mklwe_sk.size:
            raise ValueError("ciphertext does not match the key length")
        phase = PAR_LWE.mod_q_base(int(ctxt.b) + int(a @ self.mklwe_sk))
        return _round_half_away(float(phase * p.t) / float(p.q))


def _test_vector(b_ct, params):
    """Accumulator of +-Q/8 rotated by the scaled ciphertext body."""
    dim = params.N
    dim2 = 2 * dim
    b = _trunc_div(int(b_ct) * dim2, params.q)
    acc = np.full(dim, params.Q // 8, dtype=np.int64)
    b_pow = (dim // 2 + b) % dim2
    if b_pow >= dim:
        acc[b_pow - dim :] *= -1
    else:
        acc[:b_pow] *= -1
    return acc


def single_key_rebr(al, c, rekey, brk, params):
    """Re-key an NTRU accumulator to one party and blind-rotate by its mask ``al``."""
    dim = params.N
    dim2 = 2 * dim

    def ext(poly, key):
        prod = external_product(poly, key, params.B_n, params.shift_n, params.d_n, dim)
        return mod_q_boot(prod)

    acc = ext(np.asarray(c, dtype=np.int64), rekey)
    mask = np.asarray(al, dtype=np.int64)[: params.n]
    scaled = modulo_switch_a(mask, params.q, dim2, params.n)

    for coef, key in zip(scaled.tolist(), brk):
        if coef == 0:
            continue
        negate = False
        if coef < 0:
            coef += dim2
        if coef >= dim:
            coef -= dim
            negate = True
        rotated = np.roll(acc, coef)
        rotated[:coef] *= -1
        if negate:
            rotated = -rotated
        diff = mod_q_boot(rotated - acc)
        acc = mod_q_boot(acc + ext(diff, key))
    return acc


def _switch_block(a_block, lksk, params):
    digits = _signed_digits(a_block, params.B_l, params.shift_l, params.d_l).T
    mat = np.stack([key.A for key in lksk[: a_block.size]])
    vec = np.stack([key.b for key in lksk[: a_block.size]])
    a_long = np.tensordot(digits, mat, axes=([0, 1], [0, 1]))
    b_long = int(np.sum(digits * vec))
    return mod_q_poly(a_long, params.q), mod_q_lwe(b_long, params.q)


def _keyswitch(sample, mk_lksk, params, shared_mask):
    n, dim, parties = params.n, params.N, params.parties
    if len(mk_lksk) < parties:
        raise ValueError(f"expected {parties} key-switching keys")
    a_in = np.asarray(sample.a, dtype=np.int64)
    out_a = np.zeros(n * parties, dtype=np.int64)
    b = int(sample.b)
    for k, lksk in enumerate(mk_lksk[:parties]):
        start = 0 if shared_mask else dim * k
        block = a_in[start : start + dim]
        if block.size != dim or len(lksk) < dim:
            raise ValueError("sample or key does not match the ring dimension")
        a_bar, b_bar = _switch_block(block, lksk, params)
        b += b_bar
        out_a[n * k : n * (k + 1)] = a_bar
    return MKLweSample(params.q, n, parties, b, out_a)


def mk_keyswitch(sample, mk_lksk, params):
    """Switch each party's block of an extracted sample to its LWE key."""
    return _keyswitch(sample, mk_lksk, params, shared_mask=False)


def mk_keyswitch_v2(sample, mk_lksk, params):
    """Switch a sample under the summed RLWE key to the parties' LWE keys."""
    return _keyswitch(sample, mk_lksk, params, shared_mask=True)


def mk_extract(mkrlwe_c, params):
    """Extract the constant coefficient of a multi-key RLWE ciphertext as LWE."""
    dim, parties = params.N, params.parties
    if len(mkrlwe_c) < parties + 1:
        raise ValueError(f"expected {parties + 1} ciphertext components")
    a = np.concatenate([np.asarray(c, dtype=np.int64)[:dim] for c in mkrlwe_c[1 : parties + 1]])
    return MKLweSample(params.Q, dim, parties, int(mkrlwe_c[0][0]), a)


def rlwe_extract(rlwe_c, params):
    """Extract the constant coefficient of a two-component RLWE ciphertext."""
    dim, parties = params.N, params.parties
    if len(rlwe_c) != 2:
        raise ValueError("an RLWE ciphertext has two components")
    a = np.zeros(dim * parties, dtype=np.int64)
    a[:dim] = np.asarray(rlwe_c[1], dtype=np.int64)[:dim]
    return MKLweSample(params.Q, dim, parties, int(rlwe_c[0][0]), a)


def mk_extract_key(mkrlwe_key, params):
    """LWE keys matching extraction: (z[0], -z[N-1], ..., -z[1]) per party."""
    dim, parties = params.N, params.parties
    blocks = []
    for z in np.asarray(mkrlwe_key.sk_poly, dtype=np.int64)[1 : parties + 1]:
        blocks.append(np.concatenate([z[:1], -z[:0:-1]]))
    return np.concatenate(blocks).astype(np.int64).reshape(dim * parties)


def _switch_sample(sample, old_q, new_q, count):
    ratio = float(new_q) / float(old_q)
    a = np.array(sample.a, dtype=np.int64)
    a[:count] = modulo_switch(a[:count], old_q, new_q)
    b = _round_half_away(float(sample.b) * ratio)
    return MKLweSample(new_q, sample.n, sample.parties, b, a)


def mk_mod_switch(sample, old_q, new_q, params):
    """Scale all N*k mask coefficients and the body from ``old_q`` to ``new_q``."""
    return _switch_sample(sample, old_q, new_q, params.N * params.parties)


def lwe_mod_switch(sample, old_q, new_q, params):
    """Scale the first N mask coefficients and the body from ``old_q`` to ``new_q``."""
    return _switch_sample(sample, old_q, new_q, params.N)


def mk_rlwe_dec(c, z, params, modulus):
    """Multi-key RLWE phase sum_i c_i * z_i reduced modulo ``modulus``."""
    engine = fft_engine(params.N)
    count = params.parties + 1
    polys = np.array([np.asarray(p, dtype=np.int64) for p in c[:count]])
    keys = np.asarray(z, dtype=np.complex128)[:count]
    total = np.sum(engine.to_fft(polys) * keys, axis=0)
    return mod_q_poly(engine.from_fft(total), modulus)


def mk_bootstrap_v1(ct, mk_brk, mk_rekey, mk_rksk, mk_lksk, params):
    """NAND bootstrapping through sequential re-keying and relinearisation keys."""
    n, dim, parties = params.n, params.N, params.parties
    a = np.asarray(ct.a, dtype=np.int64)
    acc = _test_vector(ct.b, params)
    for i in range(parties):
        acc = single_key_rebr(a[n * i : n * (i + 1)], acc, mk_rekey[i], mk_brk[i], params)

    mkrlwe_c = [
        mod_q_poly(
            external_product(acc, mk_rksk[i], params.B_r, params.shift_r, params.d_r, dim),
            params.Q,
        )
        for i in range(parties + 1)
    ]
    mkrlwe_c[0][0] += params.Q // 8

    c_z = mk_extract(mkrlwe_c, params)
    c_z = mk_mod_switch(c_z, params.Q, params.q, params)
    return mk_keyswitch(c_z, mk_lksk, params)


def mk_bootstrap_v2(ct, mk_brk, mk_rekey, nrk0, nrk1, mk_lksk, params):
    """NAND bootstrapping that moves to RLWE after the first party's rotation."""
    n, dim, parties = params.n, params.N, params.parties
    a = np.asarray(ct.a, dtype=np.int64)
    acc = _test_vector(ct.b, params)
    acc = single_key_rebr(a[:n], acc, mk_rekey[0], mk_brk[0], params)

    rlwe_c = [
        mod_q_poly(
            external_product(acc, nrk0[i], params.B_r, params.shift_r, params.d_r, dim),
            params.Q,
        )
        for i in range(2)
    ]
    for i in range(1, parties):
        mask = a[n * i : n * (i + 1)]
        rlwe_c = [single_key_rebr(mask, part, mk_rekey[i], mk_brk[i], params) for part in rlwe_c]
        rlwe_c = rlwe_rgsw_product(rlwe_c, nrk1[i - 1], params)

    rlwe_c[0] = np.array(rlwe_c[0], dtype=np.int64)
    rlwe_c[0][0] += params.Q // 8

    c_z = rlwe_extract(rlwe_c, params)
    c_z = lwe_mod_switch(c_z, params.Q, params.q, params)
    return mk_keyswitch_v2(c_z, mk_lksk, params)