# -*- coding: utf-8 -*-

"""
Filename: fft_transformer.py
Author: storro
Date: 2026-02-11
Description: Separable 2D (inverse) FFT: log2(N) row passes then log2(N) column passes,
             ping-ponging between two buffers per channel
"""

import logging

from dataclasses import dataclass
from typing import Sequence

from spectral_ocean.compute.backend import BufferHandle, ComputeBackend, DispatchHandle, GroupCount
from spectral_ocean.compute.kernels import KERNELS, KernelId
from spectral_ocean.ocean.fft_tables import log2_exact


def pingpong_slot(stage_index: int) -> int:
    """Slot read by the given stage. The stage writes the other one."""
    return stage_index % 2


def output_slot(stage_count: int) -> int:
    """Slot holding the result after stage_count passes."""
    return stage_count % 2


@dataclass(frozen=True)
class PingPongPair:
    """Two buffers of one channel. Slot 0 holds the input spectrum."""

    ping: BufferHandle
    pong: BufferHandle

    def slot(self, index: int) -> BufferHandle:
        return self.ping if index % 2 == 0 else self.pong

    def all(self) -> tuple[BufferHandle, BufferHandle]:
        return (self.ping, self.pong)


@dataclass(frozen=True)
class FFTResult:
    slot: int
    stage_count: int
    handle: DispatchHandle | None


class FFTTransformer:
    def __init__(self, backend: ComputeBackend, resolution: int, butterfly: BufferHandle) -> None:
        self._backend = backend
        self.resolution = int(resolution)
        self.stages = log2_exact(self.resolution)
        self.butterfly = butterfly

        # Every pass is one thread per output sample, N x N per dispatch
        self._groups = GroupCount.covering(
            self.resolution, self.resolution, KERNELS[KernelId.FFT_HORIZONTAL].local_size
        )

    def inverse_2d(self, channels: Sequence[PingPongPair]) -> FFTResult:
        return self.transform_2d(channels, inverse=True)

    def transform_2d(self, channels: Sequence[PingPongPair], inverse: bool = True) -> FFTResult:
        """
        Transform every channel in place (via its ping-pong pair). The input must be in
        slot 0; the returned FFTResult says which slot holds the output.
        """
        rows = self.run_passes(KernelId.FFT_HORIZONTAL, channels, inverse, first_stage=0)
        # Column passes read samples written by every row pass, the barrier after the
        # last row stage in run_passes covers that.
        return self.run_passes(KernelId.FFT_VERTICAL, channels, inverse, first_stage=rows.stage_count)

    def run_passes(
        self,
        kernel_id: str,
        channels: Sequence[PingPongPair],
        inverse: bool,
        first_stage: int = 0,
    ) -> FFTResult:
        """
        Run the log2(N) butterfly passes of one direction. first_stage is the number of
        passes already applied to these buffers, it fixes which slot is read first.
        """
        resources = [buf for pair in channels for buf in pair.all()]
        handle = None
        stage_index = first_stage

        for stage in range(self.stages):
            read = pingpong_slot(stage_index)
            write = pingpong_slot(stage_index + 1)
            for pair in channels:
                handle = self._backend.dispatch(
                    kernel_id,
                    self._groups,
                    {
                        "u_input": pair.slot(read),
                        "u_butterfly": self.butterfly,
                        "u_output": pair.slot(write),
                    },
                    {
                        "u_resolution": self.resolution,
                        "u_stage": stage,
                        "u_inverse": 1 if inverse else 0,
                    },
                )
            # Stage s + 1 reads what stage s wrote
            self._backend.barrier(resources)
            stage_index += 1

        logging.debug("%s: %d passes over %d channels", kernel_id, self.stages, len(channels))
        return FFTResult(output_slot(stage_index), stage_index, handle)
