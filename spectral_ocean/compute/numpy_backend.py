# -*- coding: utf-8 -*-

"""
Filename: numpy_backend.py
Author: storro
Date: 2026-02-11
Description: Host compute backend. Records dispatches and barriers like a command
             buffer, runs the numpy kernels on wait_for_completion and rejects
             dispatches that would race with an unsynchronised write.
"""

import logging

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

import numpy as np

from spectral_ocean.compute.backend import BufferFormat, BufferHandle, DispatchHandle, GroupCount
from spectral_ocean.compute.kernels import KERNELS, KernelId, KernelSpec
from spectral_ocean.ocean import kernels
from spectral_ocean.ocean.errors import BarrierError, DispatchFailure

HostKernel = Callable[[Mapping[str, np.ndarray], Mapping[str, float | int]], dict[str, np.ndarray]]


def _time_spectrum(inputs, constants):
    height, disp_x, disp_z = kernels.evolve_spectrum(
        inputs["u_h0k"],
        inputs["u_h0minusk"],
        inputs["u_omega"],
        float(constants["u_patch_length"]),
        float(constants["u_time"]),
    )
    return {"u_height": height, "u_disp_x": disp_x, "u_disp_z": disp_z}


def _fft_pass(axis: int) -> HostKernel:
    def run(inputs, constants):
        out = kernels.butterfly_pass(
            inputs["u_input"],
            inputs["u_butterfly"],
            int(constants["u_stage"]),
            bool(constants["u_inverse"]),
            axis,
        )
        return {"u_output": out}
    return run


def _displacement(inputs, constants):
    out = kernels.synthesize_displacement(
        inputs["u_height"],
        inputs["u_disp_x"],
        inputs["u_disp_z"],
        float(constants["u_choppiness"]),
    )
    return {"u_displacement": out}


def _normal_map(inputs, constants):
    texel = float(constants["u_patch_length"]) / int(constants["u_resolution"])
    return {"u_normal_map": kernels.estimate_normals(inputs["u_displacement"], texel)}


HOST_KERNELS: dict[str, HostKernel] = {
    KernelId.TIME_SPECTRUM: _time_spectrum,
    KernelId.FFT_HORIZONTAL: _fft_pass(axis=1),
    KernelId.FFT_VERTICAL: _fft_pass(axis=0),
    KernelId.DISPLACEMENT: _displacement,
    KernelId.NORMAL_MAP: _normal_map,
}


@dataclass(frozen=True)
class _Dispatch:
    handle: DispatchHandle
    spec: KernelSpec
    buffers: dict[str, BufferHandle]
    constants: dict[str, float | int]


@dataclass(frozen=True)
class _Barrier:
    resources: frozenset[int]


class NumpyComputeBackend:
    """Reference backend that evaluates every kernel on the host with numpy."""

    def __init__(self, host_kernels: Mapping[str, HostKernel] | None = None) -> None:
        self.host_kernels: dict[str, HostKernel] = dict(HOST_KERNELS if host_kernels is None else host_kernels)
        self._storage: dict[int, np.ndarray] = {}
        self._pending: list[_Dispatch | _Barrier] = []
        # Buffers written by a recorded dispatch and not yet covered by a barrier
        self._unsynced: set[int] = set()
        self.dispatch_log: list[tuple[str, dict[str, float | int]]] = []
        self.barrier_count = 0

    # Buffers

    def create_buffer(self, name: str, fmt: BufferFormat, shape: tuple[int, int]) -> BufferHandle:
        handle = BufferHandle(name, fmt, (int(shape[0]), int(shape[1])))
        self._storage[handle.id] = np.zeros(fmt.array_shape(handle.shape), dtype=fmt.dtype)
        return handle

    def release_buffer(self, buffer: BufferHandle) -> None:
        self._ensure_idle(buffer, "release")
        self._storage.pop(buffer.id, None)
        self._unsynced.discard(buffer.id)

    def upload(self, buffer: BufferHandle, data: np.ndarray) -> None:
        self._ensure_idle(buffer, "upload to")
        target = self._array(buffer)
        data = np.asarray(data)
        if data.shape != target.shape:
            raise ValueError(f"cannot upload {data.shape} into {buffer!r} of shape {target.shape}")
        target[...] = data.astype(target.dtype, copy=False)

    def download(self, buffer: BufferHandle) -> np.ndarray:
        self._ensure_idle(buffer, "download")
        return self._array(buffer).copy()

    def is_allocated(self, buffer: BufferHandle) -> bool:
        return buffer.id in self._storage

    @property
    def allocated_count(self) -> int:
        return len(self._storage)

    # Commands

    def dispatch(
        self,
        kernel_id: str,
        groups: GroupCount,
        buffers: Mapping[str, BufferHandle],
        constants: Mapping[str, float | int],
    ) -> DispatchHandle:
        spec = KERNELS[kernel_id]
        if set(buffers) != set(spec.bindings):
            raise ValueError(f"{kernel_id} expects bindings {spec.bindings}, got {tuple(buffers)}")
        missing = set(spec.constants) - set(constants)
        if missing:
            raise ValueError(f"{kernel_id} is missing constants {sorted(missing)}")

        read_ids = {buffers[name].id for name in spec.inputs}
        write_ids = {buffers[name].id for name in spec.outputs}
        if read_ids & write_ids:
            raise BarrierError(f"{kernel_id} binds the same buffer for reading and writing")

        for name in spec.bindings:
            buf = buffers[name]
            if buf.id not in self._storage:
                raise DispatchFailure(kernel_id, f"{name} is bound to released buffer {buf!r}")
            if buf.id in self._unsynced:
                raise BarrierError(
                    f"{kernel_id} touches {buf!r} ({name}) before a barrier on its previous write"
                )

        height, width = buffers[spec.outputs[0]].shape
        covered_x = groups.x * spec.local_size[0]
        covered_y = groups.y * spec.local_size[1]
        if covered_x < width or covered_y < height:
            raise DispatchFailure(
                kernel_id, f"groups {groups.as_tuple()} do not cover a {width}x{height} grid"
            )

        handle = DispatchHandle(kernel_id)
        self._pending.append(_Dispatch(handle, spec, dict(buffers), dict(constants)))
        self._unsynced |= write_ids
        self.dispatch_log.append((kernel_id, dict(constants)))
        return handle

    def barrier(self, resources: Iterable[BufferHandle]) -> None:
        ids = frozenset(buf.id for buf in resources)
        self._pending.append(_Barrier(ids))
        self._unsynced -= ids
        self.barrier_count += 1

    def wait_for_completion(self, handle: DispatchHandle) -> None:
        """Execute every recorded command up to and including the given dispatch."""
        if self.is_complete(handle):
            return
        while self._pending:
            command = self._pending.pop(0)
            if isinstance(command, _Barrier):
                continue
            try:
                self._execute(command)
            except Exception as exc:
                dropped = len(self._pending)
                self._pending.clear()
                self._unsynced.clear()
                logging.error("Dispatch %s failed, dropped %d queued commands", command.spec.kernel_id, dropped)
                if isinstance(exc, DispatchFailure):
                    raise
                raise DispatchFailure(command.spec.kernel_id, str(exc)) from exc
            if command.handle.serial >= handle.serial:
                break

    def is_complete(self, handle: DispatchHandle) -> bool:
        return not any(
            isinstance(c, _Dispatch) and c.handle.serial <= handle.serial for c in self._pending
        )

    def _execute(self, command: _Dispatch) -> None:
        spec = command.spec
        inputs = {}
        for name in spec.inputs:
            view = self._array(command.buffers[name]).view()
            view.setflags(write=False)
            inputs[name] = view

        results = self.host_kernels[spec.kernel_id](inputs, command.constants)

        for name in spec.outputs:
            target = self._array(command.buffers[name])
            target[...] = np.asarray(results[name]).astype(target.dtype, copy=False)

    def _array(self, buffer: BufferHandle) -> np.ndarray:
        try:
            return self._storage[buffer.id]
        except KeyError:
            raise KeyError(f"{buffer!r} is not allocated on this backend") from None

    def _ensure_idle(self, buffer: BufferHandle, action: str) -> None:
        for command in self._pending:
            if isinstance(command, _Dispatch) and any(b.id == buffer.id for b in command.buffers.values()):
                raise BarrierError(f"cannot {action} {buffer!r} while a recorded dispatch uses it")
