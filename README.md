# mkhe

`mkhe` is a multi-key homomorphic encryption scheme for boolean circuits.
Each party holds its own binary LWE secret key. Ciphertexts under the joint
key can be combined into a NAND gate and then bootstrapped. Bootstrapping
re-keys and blind-rotates an NTRU accumulator party by party, then turns it
back into an LWE sample in one of two ways:

- **v1** (`mk_bootstrap_v1`): all parties rotate the NTRU accumulator in
  turn. Relinearisation keys built from hybrid public keys then turn it into
  a multi-key RLWE ciphertext with one component per party.
- **v2** (`mk_bootstrap_v2`): after the first party's rotation the
  accumulator becomes a two-component RLWE ciphertext under the summed
  public key (`nrk0`). Each further party rotates both components and
  multiplies them by its RGSW key (`nrk1`).

Both end with extraction, modulus switching to `q` and key switching back to
the parties' LWE keys.

Polynomial arithmetic works in the ring `Z_Q[X]/(X^N + 1)` with a negacyclic
FFT built on numpy.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## Parameter sets

`mkhe.params.ParamSet` names the predefined parameters:

| Member                     | Value            | Parties | Variant |
|----------------------------|------------------|---------|---------|
| `ParamSet.MKHE2PARTY_V1`   | `MKHE2party_v1`  | 2       | v1      |
| `ParamSet.MKHE2PARTY_V2`   | `MKHE2party_v2`  | 2       | v2      |
| `ParamSet.MKHE4PARTY_V2`   | `MKHE4party_v2`  | 4       | v2      |
| `ParamSet.MKHE8PARTY_V2`   | `MKHE8party_v2`  | 8       | v2      |
| `ParamSet.MKHE16PARTY_V2`  | `MKHE16party_v2` | 16      | v2      |

`mkhe.params.params_for(param_set)` returns the matching `MKHEParams`. An
unknown set raises `ValueError`. `MKHEParams` holds the LWE modulus `q`, the
ring modulus `Q`, the dimensions `n` and `N`, and the gadget bases
(`B_n`, `B_r`, `B_l`) with their derived shifts and lengths (`d_n`, `d_r`,
`d_l`). It also holds `nand_const` and the noise deviations.

## Usage

```python
from mkhe.params import ParamSet
from mkhe.scheme import MKHEScheme, mk_bootstrap_v1

scheme = MKHEScheme(ParamSet.MKHE2PARTY_V1, 1)
p = scheme.params

c1 = scheme.encrypt(1)
c2 = scheme.encrypt(0)

c_nand = p.nand_const - (c1 + c2)
c_boot = mk_bootstrap_v1(
    c_nand,
    scheme.mk_brk,
    scheme.mk_rekey,
    scheme.mk_rksk,
    scheme.mk_lksk,
    p,
)
print(scheme.decrypt(c_boot))  # NAND(1, 0) = 1 when the noise stays in bounds
```

`MKHEScheme(param_set, version)` also accepts an `MKHEParams` instance in
place of a `ParamSet`. With version `1` it generates `mk_rksk`. With version
`2` it generates `nrk0` and `nrk1` instead. Use these with
`mkhe.scheme.mk_bootstrap_v2`:

```python
from mkhe.scheme import mk_bootstrap_v2

scheme = MKHEScheme(ParamSet.MKHE2PARTY_V2, 2)
c_boot = mk_bootstrap_v2(
    c_nand, scheme.mk_brk, scheme.mk_rekey, scheme.nrk0, scheme.nrk1,
    scheme.mk_lksk, scheme.params,
)
```

`MKLweSample` supports `+` and `-` between samples, and `c - sample` for an
integer constant `c`. Be aware that `sample - other` subtracts the masks but
adds the `b` components.

Random sampling uses one shared generator. Call `mkhe.sampler.seed(value)`
to make runs reproducible.

Key generation with the real parameters (`N = 2048`, `n = 500`) is heavy in
pure Python. Expect it to take a while. Progress messages go to the
`mkhe.scheme` logger.

## Command line

The `mkhe-demo` command runs a bootstrapped NAND gate with each variant:
two random bits for v1, and the bits 1 and 0 for v2. For each it prints the
CPU time taken and `correct` or `error`:

```
mkhe-demo
mkhe-demo --v1-set MKHE2party_v1 --v2-set MKHE4party_v2
```

`--v1-set` and `--v2-set` take the parameter-set values from the table above.

## Limitations

All parties' keys are generated together in one process by `MKHEScheme`.
The package has no protocol for distributed key generation or decryption,
and no way to save or load keys or ciphertexts. Everything lives in memory
only.

## Modules

- `mkhe.params`: parameter sets, `MKHEParams`, `LweParam`, modular reduction, balanced decomposition
- `mkhe.fft`: negacyclic FFT engine (`FFTEngine`, `fft_engine`)
- `mkhe.sampler`: `Sampler`, `seed`, modular inversion of polynomials and matrices
- `mkhe.randpoly`: random vectors and invertible polynomials
- `mkhe.poly`: gadget decomposition, external product, reductions
- `mkhe.mklwe`: multi-key LWE samples (`MKLweSample`)
- `mkhe.ntru`, `mkhe.rlwe`: NTRU and RLWE encryption primitives
- `mkhe.keygen`: all key-generation routines
- `mkhe.scheme`: `MKHEScheme`, bootstrapping, extraction, key switching
- `mkhe.demo`: the demonstration behind `mkhe-demo`

## Running the tests

```
pytest
```