# -*- coding: utf-8 -*-

"""
Filename: time_evolver.py
Author: storro
Date: 2026-02-11
Description: Advances the initial spectrum to time t and builds the height and choppy spectra
"""

from dataclasses import dataclass

from spectral_ocean.compute.backend import BufferHandle, ComputeBackend, DispatchHandle, GroupCount
from spectral_ocean.compute.kernels import KERNELS, KernelId


@dataclass(frozen=True)
class SpectrumBuffers:
    """Device copies of h0(k), h0(-k) and w(k)."""

    h0k: BufferHandle
    h0minusk: BufferHandle
    omega: BufferHandle

    def all(self) -> tuple[BufferHandle, ...]:
        return (self.h0k, self.h0minusk, self.omega)


class TimeEvolver:
    """Builds h(k, t) and the two choppy displacement spectra in one dispatch."""

    def __init__(self, backend: ComputeBackend, resolution: int, patch_length: float) -> None:
        self._backend = backend
        self.resolution = int(resolution)
        self.patch_length = float(patch_length)
        self._groups = GroupCount.covering(
            self.resolution, self.resolution, KERNELS[KernelId.TIME_SPECTRUM].local_size
        )

    def evolve(
        self,
        spectrum: SpectrumBuffers,
        height: BufferHandle,
        disp_x: BufferHandle,
        disp_z: BufferHandle,
        time: float,
    ) -> DispatchHandle:
        return self._backend.dispatch(
            KernelId.TIME_SPECTRUM,
            self._groups,
            {
                "u_h0k": spectrum.h0k,
                "u_h0minusk": spectrum.h0minusk,
                "u_omega": spectrum.omega,
                "u_height": height,
                "u_disp_x": disp_x,
                "u_disp_z": disp_z,
            },
            {
                "u_resolution": self.resolution,
                "u_patch_length": self.patch_length,
                "u_time": float(time),
            },
        )
