"""Multi-key LWE ciphertexts."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .poly import mod_q_lwe


@dataclass(eq=False)
class MKLweSample:
    """An LWE ciphertext (b, a_1, ..., a_k) under the keys of ``parties`` parties.

    ``a`` holds ``n * parties`` coefficients, party blocks one after another.
    """

    q: int
    n: int
    parties: int
    b: int = 0
    a: np.ndarray = field(default=None)

    def __post_init__(self):
        size = self.n * self.parties
        if self.a is None:
            self.a = np.zeros(size, dtype=np.int64)
        else:
            self.a = np.array(self.a, dtype=np.int64)
            if self.a.shape != (size,):
                raise ValueError(f"expected {size} mask coefficients")
        self.b = int(self.b)

    def copy(self):
        """Return an independent copy."""
        return MKLweSample(self.q, self.n, self.parties, self.b, self.a.copy())

    def _check_compatible(self, other):
        if (self.n, self.parties) != (other.n, other.parties):
            raise ValueError("ciphertexts have different dimensions")

    def __add__(self, other):
        if not isinstance(other, MKLweSample):
            return NotImplemented
        self._check_compatible(other)
        return MKLweSample(
            self.q,
            self.n,
            self.parties,
            mod_q_lwe(self.b + other.b, self.q),
            mod_q_lwe(self.a + other.a, self.q),
        )

    def __sub__(self, other):
        """Subtract the masks; the ``b`` components are summed."""
        if not isinstance(other, MKLweSample):
            return NotImplemented
        self._check_compatible(other)
        return MKLweSample(
            self.q,
            self.n,
            self.parties,
            mod_q_lwe(self.b + other.b, self.q),
            mod_q_lwe(self.a - other.a, self.q),
        )

    def __rsub__(self, other):
        """Compute ``c - sample`` for an integer constant ``c``."""
        if isinstance(other, bool) or not isinstance(other, (int, np.integer)):
            return NotImplemented
        return MKLweSample(
            self.q,
            self.n,
            self.parties,
            mod_q_lwe(int(other) - self.b, self.q),
            mod_q_lwe(-self.a, self.q),
        )