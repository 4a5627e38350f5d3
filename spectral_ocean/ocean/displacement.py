# -*- coding: utf-8 -*-

"""
Filename: displacement.py
Author: storro
Date: 2026-02-11
Description: Combines the three inverse-transformed channels into the displacement map
"""

from spectral_ocean.compute.backend import BufferHandle, ComputeBackend, DispatchHandle, GroupCount
from spectral_ocean.compute.kernels import KERNELS, KernelId


class DisplacementSynthesizer:
    def __init__(self, backend: ComputeBackend, resolution: int, max_choppiness: float) -> None:
        self._backend = backend
        self.resolution = int(resolution)
        self.max_choppiness = float(max_choppiness)
        self._groups = GroupCount.covering(
            self.resolution, self.resolution, KERNELS[KernelId.DISPLACEMENT].local_size
        )

    def clamp_choppiness(self, choppiness: float) -> float:
        # Large values fold the surface over itself; that artifact is accepted
        return min(max(float(choppiness), 0.0), self.max_choppiness)

    def synthesize(
        self,
        height: BufferHandle,
        disp_x: BufferHandle,
        disp_z: BufferHandle,
        target: BufferHandle,
        choppiness: float,
    ) -> DispatchHandle:
        """Write (Dx * c, H, Dz * c, 0) per texel into target."""
        return self._backend.dispatch(
            KernelId.DISPLACEMENT,
            self._groups,
            {
                "u_height": height,
                "u_disp_x": disp_x,
                "u_disp_z": disp_z,
                "u_displacement": target,
            },
            {
                "u_resolution": self.resolution,
                "u_choppiness": self.clamp_choppiness(choppiness),
            },
        )
