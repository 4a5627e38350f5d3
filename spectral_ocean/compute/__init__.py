from spectral_ocean.compute.backend import (
    BufferFormat,
    BufferHandle,
    ComputeBackend,
    DispatchHandle,
    GroupCount,
)
from spectral_ocean.compute.kernels import KERNELS, KernelId, KernelSpec

"""Compute dispatch capability used by the ocean core."""

__all__ = [
    "BufferFormat",
    "BufferHandle",
    "ComputeBackend",
    "DispatchHandle",
    "GroupCount",
    "KERNELS",
    "KernelId",
    "KernelSpec",
]
