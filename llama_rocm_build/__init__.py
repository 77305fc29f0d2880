"""llama-rocm-build - Interactive llama.cpp builder for ROCm GPUs.

This package clones or updates llama.cpp, audits the ROCm toolchain
packages, and drives CMake and Ninja to produce a HIP-enabled build.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
