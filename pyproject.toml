[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mkhe"
version = "0.1.0"
description = "Multi-key homomorphic encryption over LWE, RLWE and NTRU with NAND-gate bootstrapping"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "homomorphic encryption",
    "multi-key",
    "FHE",
    "LWE",
    "RLWE",
    "NTRU",
    "bootstrapping",
    "lattice cryptography",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mkhe-demo = "mkhe.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["mkhe"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
