"""Command-line demonstration of multi-key NAND bootstrapping."""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass

from .params import PAR_LWE, ParamSet
from .randpoly import binary_vector
from .scheme import MKHEScheme, mk_bootstrap_v1, mk_bootstrap_v2


@dataclass(frozen=True)
class NandResult:
    """Outcome of one bootstrapped NAND gate evaluation."""

    m1: int
    m2: int
    m_nand: int
    m_boot: int
    elapsed_ms: float

    @property
    def expected(self):
        """The NAND of the two input bits."""
        return int(not (self.m1 & self.m2))

    @property
    def correct(self):
        """Whether the bootstrapped ciphertext decrypts to the expected bit."""
        return self.m_boot == self.expected


def _evaluate(scheme, m1, m2, nand_const, bootstrap):
    c1 = scheme.encrypt(m1)
    c2 = scheme.encrypt(m2)
    start = time.process_time()
    c_nand = nand_const - (c1 + c2)
    c_boot = bootstrap(c_nand)
    elapsed_ms = (time.process_time() - start) * 1000.0
    return NandResult(
        m1=m1,
        m2=m2,
        m_nand=scheme.decrypt(c_nand),
        m_boot=scheme.decrypt(c_boot),
        elapsed_ms=elapsed_ms,
    )


def run_nand_v1(param_set):
    """Bootstrap a NAND of two random bits with the first variant."""
    scheme = MKHEScheme(param_set, 1)
    params = scheme.params
    m1, m2 = (int(bit) for bit in binary_vector(2))

    def bootstrap(ct):
        return mk_bootstrap_v1(
            ct, scheme.mk_brk, scheme.mk_rekey, scheme.mk_rksk, scheme.mk_lksk, params
        )

    return _evaluate(scheme, m1, m2, params.nand_const, bootstrap)


def run_nand_v2(param_set):
    """Bootstrap the NAND of 1 and 0 with the second variant."""
    scheme = MKHEScheme(param_set, 2)
    params = scheme.params

    def bootstrap(ct):
        return mk_bootstrap_v2(
            ct, scheme.mk_brk, scheme.mk_rekey, scheme.nrk0, scheme.nrk1, scheme.mk_lksk, params
        )

    return _evaluate(scheme, 1, 0, PAR_LWE.nand_const, bootstrap)


def _report(label, result):
    print(f"{label}:{result.elapsed_ms:g}ms")
    print("correct" if result.correct else "error")


def main(argv=None):
    """Run both bootstrapping variants and report timing and correctness."""
    names = {member.value: member for member in ParamSet}
    parser = argparse.ArgumentParser(description="Multi-key NAND bootstrapping demo.")
    parser.add_argument(
        "--v1-set",
        choices=sorted(names),
        default=ParamSet.MKHE2PARTY_V1.value,
        help="parameter set for the first variant",
    )
    parser.add_argument(
        "--v2-set",
        choices=sorted(names),
        default=ParamSet.MKHE2PARTY_V2.value,
        help="parameter set for the second variant",
    )
    args = parser.parse_args(argv)

    _report("NAND_Bootstrap_v1", run_nand_v1(names[args.v1_set]))
    _report("NAND_Bootstrap_v2", run_nand_v2(names[args.v2_set]))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())