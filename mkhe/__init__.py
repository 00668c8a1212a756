"""Multi-key homomorphic encryption over LWE, RLWE and NTRU with NAND-gate bootstrapping."""

__version__ = "0.1.0"