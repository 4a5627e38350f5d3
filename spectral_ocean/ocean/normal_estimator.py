# -*- coding: utf-8 -*-

"""
Filename: normal_estimator.py
Author: storro
Date: 2026-02-11
Description: Builds the normal map from the height channel of the displacement map
"""

from spectral_ocean.compute.backend import BufferHandle, ComputeBackend, DispatchHandle, GroupCount
from spectral_ocean.compute.kernels import KERNELS, KernelId


class NormalEstimator:
    def __init__(self, backend: ComputeBackend, resolution: int, patch_length: float) -> None:
        self._backend = backend
        self.resolution = int(resolution)
        self.patch_length = float(patch_length)
        self._groups = GroupCount.covering(
            self.resolution, self.resolution, KERNELS[KernelId.NORMAL_MAP].local_size
        )

    def estimate(self, displacement: BufferHandle, target: BufferHandle) -> DispatchHandle:
        return self._backend.dispatch(
            KernelId.NORMAL_MAP,
            self._groups,
            {"u_displacement": displacement, "u_normal_map": target},
            {"u_resolution": self.resolution, "u_patch_length": self.patch_length},
        )
