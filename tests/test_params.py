import dataclasses

import numpy as np
import pytest

from mkhe.params import (
    HALF_Q_BOOT,
    PAR_LWE,
    Q_BOOT,
    LweParam,
    MKHEParams,
    ParamSet,
    decompose,
    lazy_mod_q,
    mod_q_boot,
    modulo_switch,
    params_for,
)


@pytest.mark.parametrize(
    "param_set, parties, b_n, b_r, b_l",
    [
        (ParamSet.MKHE2PARTY_V1, 2, 512, 4, 16),
        (ParamSet.MKHE2PARTY_V2, 2, 512, 32, 16),
        (ParamSet.MKHE4PARTY_V2, 4, 512, 32, 8),
        (ParamSet.MKHE8PARTY_V2, 8, 128, 32, 8),
        (ParamSet.MKHE16PARTY_V2, 16, 128, 32, 8),
    ],
)
def test_param_sets_match_source(param_set, parties, b_n, b_r, b_l):
    p = params_for(param_set)
    assert (p.parties, p.B_n, p.B_r, p.B_l) == (parties, b_n, b_r, b_l)
    assert (p.q, p.Q, p.n, p.N) == (32749, 133919213, 500, 2048)


@pytest.mark.parametrize("param_set", list(ParamSet))
def test_gadget_lengths_cover_modulus(param_set):
    p = params_for(param_set)
    for base, length, shift, modulus in (
        (p.B_n, p.d_n, p.shift_n, p.Q),
        (p.B_r, p.d_r, p.shift_r, p.Q),
        (p.B_l, p.d_l, p.shift_l, p.q),
    ):
        assert base**length >= modulus
        assert base ** (length - 1) < modulus
        assert 2**shift == base


def test_derived_constants():
    p = params_for(ParamSet.MKHE4PARTY_V2)
    assert p.half_delta_base == p.q // (2 * p.t)
    assert p.nand_const == 5 * p.half_delta_base
    assert p.delta_base == 2 * p.half_delta_base
    assert p.half_q_base == p.q // 2
    assert p.N2p1 == p.N // 2 + 1


def test_params_for_rejects_unknown():
    with pytest.raises(ValueError):
        params_for("bogus")


def test_invalid_base_rejected():
    with pytest.raises(ValueError):
        MKHEParams(B_r=1)


def test_params_are_frozen():
    p = params_for(ParamSet.MKHE2PARTY_V1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.q = 7
    assert p.q == 32749


def test_lazy_mod_q_range_and_congruence():
    for v in range(-40, 41):
        r = lazy_mod_q(v, 7)
        assert -3 <= r <= 3
        assert (r - v) % 7 == 0


def test_lazy_mod_q_array_matches_scalar():
    values = list(range(-50, 51, 3))
    arr = lazy_mod_q(values, 11)
    assert arr.dtype == np.int64
    assert arr.tolist() == [lazy_mod_q(v, 11) for v in values]


def test_lazy_mod_q_small_values_unchanged():
    assert lazy_mod_q(-1, 5) == -1
    assert lazy_mod_q(2, 5) == 2


def test_mod_q_boot():
    assert mod_q_boot(Q_BOOT) == 0
    assert mod_q_boot(HALF_Q_BOOT + 1) == -HALF_Q_BOOT
    assert mod_q_boot(-HALF_Q_BOOT) == -HALF_Q_BOOT
    arr = mod_q_boot(np.array([Q_BOOT + 5, -Q_BOOT - 5]))
    assert arr.tolist() == [5, -5]


def test_modulo_switch_identity():
    poly = [0, 5, -17, 1000, -32000]
    assert modulo_switch(poly, 32749, 32749).tolist() == poly


def test_modulo_switch_rounds_half_away_from_zero():
    assert modulo_switch([1, -1, 3], 2, 1).tolist() == [1, -1, 2]


@pytest.mark.parametrize("value", [0, 1, -1, 12345, -12345, 65535, 32749])
def test_decompose_reconstructs(value):
    base, length = 4, 9
    digits = decompose(value, base, length)
    assert len(digits) == length
    assert sum(d * base**i for i, d in enumerate(digits)) == value
    assert all(abs(d) <= base // 2 for d in digits)


def test_decompose_overflow():
    with pytest.raises(OverflowError):
        decompose(10**6, 4, 3)


def test_lwe_param_constants():
    param = LweParam()
    assert param.q_base == 32749
    assert param.n == 500
    assert param.B_ksk**param.l_ksk >= param.q_base
    assert param.B_ksk ** (param.l_ksk - 1) < param.q_base
    assert param.Nl == param.N * param.l_ksk
    assert param.and_const == param.half_delta_base
    assert param.or_const == 7 * param.half_delta_base
    assert param.nand_const == 5 * param.half_delta_base
    assert param.delta_base == 2 * param.half_delta_base
    assert param.bsk_partition == (250, 250)
    for base, length in zip(param.B_bsk, param.l_bsk):
        assert base**length >= Q_BOOT


def test_lwe_param_mod_q_base():
    q = PAR_LWE.q_base
    assert PAR_LWE.mod_q_base(q) == 0
    assert PAR_LWE.mod_q_base(PAR_LWE.half_q_base + 1) == -PAR_LWE.half_q_base
    assert PAR_LWE.mod_q_base([q + 3, -q - 3]).tolist() == [3, -3]


def test_lwe_param_equality():
    assert LweParam() == PAR_LWE