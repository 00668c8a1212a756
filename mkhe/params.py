"""Parameter sets and modular-arithmetic helpers for the multi-key scheme."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field

import numpy as np

# LWE modulus of the base scheme.
LWE_Q = 32749
# Modulus shared by the RLWE and NTRU ring schemes.
RING_Q = 133919213
# Ring dimension of Z[X]/(X^N + 1).
RING_N = 2048
RING_N2P1 = RING_N // 2 + 1

# Ciphertext modulus for bootstrapping keys and test vectors.
Q_BOOT = RING_Q
HALF_Q_BOOT = Q_BOOT // 2


def _round_away(values):
    """Round to nearest integer, halves away from zero."""
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def lazy_mod_q(value, q):
    """Reduce into the symmetric interval around zero modulo an odd ``q``.

    The remainder keeps the sign of ``value`` before folding, as integer
    remainder does in C. Accepts an integer or an array-like of integers;
    an integer gives an ``int``, anything else an ``int64`` array.
    """
    half = q // 2
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        v = int(value)
        coef = abs(v) % q
        if v < 0:
            coef = -coef
        if coef > half:
            return coef - q
        if coef < -half:
            return coef + q
        return coef
    arr = np.asarray(value, dtype=np.int64)
    coef = np.fmod(arr, q)
    coef = np.where(coef > half, coef - q, coef)
    coef = np.where(coef < -half, coef + q, coef)
    return coef.astype(np.int64)


def mod_q_boot(value):
    """Reduce an integer or array modulo the bootstrapping modulus."""
    return lazy_mod_q(value, Q_BOOT)


def modulo_switch(poly, old_q, new_q):
    """Scale coefficients from modulus ``old_q`` to ``new_q`` with rounding."""
    arr = np.asarray(poly, dtype=np.float64)
    ratio = float(new_q) / float(old_q)
    return _round_away(arr * ratio).astype(np.int64)


def decompose(value, base, length):
    """Balanced base-``base`` decomposition of ``value`` into ``length`` digits.

    Digits are ordered from least to most significant. Raises
    ``OverflowError`` when ``value`` does not fit in ``length`` digits.
    """
    sign = -1 if value < 0 else 1
    rem = abs(int(value))
    digits = []
    for _ in range(length):
        digit = rem % base
        if 2 * digit > base:
            digits.append(sign * (digit - base))
            rem = (rem - digit) // base + 1
        else:
            digits.append(sign * digit)
            rem = (rem - digit) // base
    if rem != 0:
        raise OverflowError("Input is too big for given length")
    return digits


class ParamSet(enum.Enum):
    """Named parameter sets for the bootstrapping variants."""

    MKHE2PARTY_V1 = "MKHE2party_v1"
    MKHE2PARTY_V2 = "MKHE2party_v2"
    MKHE4PARTY_V2 = "MKHE4party_v2"
    MKHE8PARTY_V2 = "MKHE8party_v2"
    MKHE16PARTY_V2 = "MKHE16party_v2"


def _gadget_length(modulus, base):
    return int(math.ceil(math.log(float(modulus)) / math.log(float(base))))


@dataclass(frozen=True)
class MKHEParams:
    """Parameters of the multi-key scheme with derived gadget settings."""

    parties: int = 4
    q: int = LWE_Q
    Q: int = RING_Q
    n: int = 500
    N: int = RING_N
    B_n: int = 512
    B_r: int = 32
    B_l: int = 32

    N2p1: int = field(init=False)
    shift_n: int = field(init=False)
    shift_r: int = field(init=False)
    shift_l: int = field(init=False)
    d_n: int = field(init=False)
    d_r: int = field(init=False)
    d_l: int = field(init=False)
    half_delta_base: int = field(init=False)
    delta_base: int = field(init=False)
    nand_const: int = field(init=False)
    half_q_base: int = field(init=False)

    # Plaintext modulus and noise parameters.
    t = 4
    stdev_lwe_err = 1.9
    stdev_rlwe_key = 0.25
    stdev_rlwe_err = 0.25
    stdev_ntru_err = 0.25

    def __post_init__(self):
        for name in ("B_n", "B_r", "B_l"):
            if getattr(self, name) < 2:
                raise ValueError(f"{name} must be at least 2")
        if self.q < 2 or self.Q < 2:
            raise ValueError("moduli must be at least 2")
        if self.N <= 0 or self.N % 2:
            raise ValueError("ring dimension must be a positive even number")

        def put(name, value):
            object.__setattr__(self, name, value)

        put("N2p1", self.N // 2 + 1)
        put("shift_n", int(math.log2(self.B_n)))
        put("shift_r", int(math.log2(self.B_r)))
        put("shift_l", int(math.log2(self.B_l)))
        put("d_n", _gadget_length(self.Q, self.B_n))
        put("d_r", _gadget_length(self.Q, self.B_r))
        put("d_l", _gadget_length(self.q, self.B_l))
        half_delta = self.q // (2 * self.t)
        put("half_delta_base", half_delta)
        put("nand_const", 5 * half_delta)
        put("delta_base", 2 * half_delta)
        put("half_q_base", self.q // 2)


_PARAM_SETS = {
    ParamSet.MKHE2PARTY_V1: MKHEParams(2, LWE_Q, RING_Q, 500, RING_N, 512, 4, 16),
    ParamSet.MKHE2PARTY_V2: MKHEParams(2, LWE_Q, RING_Q, 500, RING_N, 512, 32, 16),
    ParamSet.MKHE4PARTY_V2: MKHEParams(4, LWE_Q, RING_Q, 500, RING_N, 512, 32, 8),
    ParamSet.MKHE8PARTY_V2: MKHEParams(8, LWE_Q, RING_Q, 500, RING_N, 128, 32, 8),
    ParamSet.MKHE16PARTY_V2: MKHEParams(16, LWE_Q, RING_Q, 500, RING_N, 128, 32, 8),
}


def params_for(param_set):
    """Return the parameters of a named parameter set."""
    try:
        return _PARAM_SETS[param_set]
    except (KeyError, TypeError):
        raise ValueError(f"Invalid parameter set: {param_set!r}") from None


@dataclass(frozen=True)
class LweParam:
    """Parameters of the LWE base scheme used for encryption."""

    q_base: int = LWE_Q
    n: int = 500

    half_q_base: int = field(init=False)
    l_ksk: int = field(init=False)
    Nl: int = field(init=False)
    B_bsk: tuple = field(init=False)
    shift_bsk: tuple = field(init=False)
    bsk_partition: tuple = field(init=False)
    l_bsk: tuple = field(init=False)
    half_delta_base: int = field(init=False)
    delta_base: int = field(init=False)
    nand_const: int = field(init=False)
    and_const: int = field(init=False)
    or_const: int = field(init=False)

    B_ksk = 3
    N = RING_N
    N2p1 = RING_N // 2 + 1
    N2 = 2 * RING_N
    t = 4
    half_delta_boot = Q_BOOT // (2 * 4)
    e_st_dev = 1.9

    def __post_init__(self):
        def put(name, value):
            object.__setattr__(self, name, value)

        put("half_q_base", self.q_base // 2)
        l_ksk = _gadget_length(self.q_base, self.B_ksk)
        put("l_ksk", l_ksk)
        put("Nl", self.N * l_ksk)
        put("B_bsk", (512, 512))
        put("shift_bsk", (9, 9))
        put("bsk_partition", (self.n // 2, self.n // 2))
        put("l_bsk", tuple(_gadget_length(Q_BOOT, b) for b in self.B_bsk))
        half_delta = self.q_base // (2 * self.t)
        put("half_delta_base", half_delta)
        put("delta_base", 2 * half_delta)
        put("nand_const", 5 * half_delta)
        put("and_const", half_delta)
        put("or_const", 7 * half_delta)

    def mod_q_base(self, value):
        """Reduce an integer or array modulo ``q_base`` symmetrically."""
        return lazy_mod_q(value, self.q_base)


PAR_LWE = LweParam()