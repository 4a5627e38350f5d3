# -*- coding: utf-8 -*-

"""
Filename: orchestrator.py
Author: storro
Date: 2026-02-11
Description: Owns every ocean buffer and issues the per-tick dispatch chain:
             time spectrum -> row/column IFFT -> displacement -> normal map
"""

import logging

from dataclasses import dataclass
from enum import Enum

from spectral_ocean.compute.backend import BufferFormat, BufferHandle, ComputeBackend, DispatchHandle
from spectral_ocean.ocean.config import OceanConfig
from spectral_ocean.ocean.displacement import DisplacementSynthesizer
from spectral_ocean.ocean.errors import DispatchFailure, OrchestratorStateError
from spectral_ocean.ocean.fft_tables import FFTTables
from spectral_ocean.ocean.fft_transformer import FFTTransformer, PingPongPair
from spectral_ocean.ocean.normal_estimator import NormalEstimator
from spectral_ocean.ocean.spectrum_field import SpectrumField, SpectrumTables
from spectral_ocean.ocean.time_evolver import SpectrumBuffers, TimeEvolver

CHANNELS = ("height", "disp_x", "disp_z")


class OrchestratorState(Enum):
    UNINITIALIZED = "uninitialized"
    SPECTRUM_READY = "spectrum_ready"
    TICK_IN_FLIGHT = "tick_in_flight"
    TICK_COMPLETE = "tick_complete"


@dataclass(frozen=True)
class OceanOutputs:
    """The fields a renderer reads. Valid until the next tick completes."""

    displacement: BufferHandle
    normal: BufferHandle
    resolution: int
    patch_length: float
    time: float


@dataclass(frozen=True)
class _TableSet:
    """Everything regenerated on a parameter change."""

    spectrum: SpectrumTables
    fft: FFTTables
    buffers: SpectrumBuffers
    butterfly: BufferHandle

    def all(self) -> tuple[BufferHandle, ...]:
        return self.buffers.all() + (self.butterfly,)


@dataclass(frozen=True)
class _FrameBuffers:
    """Per-tick scratch plus the double-buffered outputs, sized by the resolution only."""

    resolution: int
    channels: tuple[PingPongPair, PingPongPair, PingPongPair]
    displacement: tuple[BufferHandle, BufferHandle]
    normal: tuple[BufferHandle, BufferHandle]

    def all(self) -> tuple[BufferHandle, ...]:
        scratch = tuple(buf for pair in self.channels for buf in pair.all())
        return scratch + self.displacement + self.normal


@dataclass(frozen=True)
class _PendingTick:
    handle: DispatchHandle
    back: int
    time: float


class FrameOrchestrator:
    """
    Sequences the ocean kernels for each simulation tick.

    States: UNINITIALIZED -> SPECTRUM_READY -> TICK_IN_FLIGHT -> TICK_COMPLETE.
    configure() regenerates the spectrum tables and is refused while a tick is in
    flight. Output fields are double buffered: a tick writes the back pair and only
    a fully successful tick makes it the front pair.
    """

    def __init__(self, backend: ComputeBackend) -> None:
        self._backend = backend
        self.state = OrchestratorState.UNINITIALIZED
        self.config: OceanConfig | None = None

        self._tables: _TableSet | None = None
        self._frame: _FrameBuffers | None = None
        self._front = 0
        self._outputs: OceanOutputs | None = None
        # True once a tick has completed under the current table set
        self._frame_current = False
        self._pending: _PendingTick | None = None
        self._last_recorded: DispatchHandle | None = None

        self._time = 0.0
        self.ticks_completed = 0
        self.ticks_failed = 0

        self._time_evolver: TimeEvolver | None = None
        self._fft: FFTTransformer | None = None
        self._displacement: DisplacementSynthesizer | None = None
        self._normals: NormalEstimator | None = None

    @property
    def time(self) -> float:
        return self._time

    @property
    def outputs(self) -> OceanOutputs | None:
        """Front displacement/normal fields, None until the first tick completes."""
        return self._outputs

    @property
    def spectrum(self) -> SpectrumTables | None:
        return None if self._tables is None else self._tables.spectrum

    @property
    def fft_tables(self) -> FFTTables | None:
        return None if self._tables is None else self._tables.fft

    # Parameter set

    def configure(self, config: OceanConfig, seed: int | None = None) -> None:
        """Validate, then replace the whole table set (and frame buffers if N changed)."""
        if self.state is OrchestratorState.TICK_IN_FLIGHT:
            raise OrchestratorStateError("cannot regenerate the spectrum while a tick is in flight")

        config = config.validate()
        spectrum = SpectrumField(config).generate(seed)
        fft_tables = FFTTables.build(config.resolution)

        tables = self._upload_tables(spectrum, fft_tables)
        old_tables, self._tables = self._tables, tables
        if old_tables is not None:
            self._release(old_tables.all())

        n = config.resolution
        if self._frame is None or self._frame.resolution != n:
            if self._frame is not None:
                self._release(self._frame.all())
            self._frame = self._allocate_frame(n)
            self._front = 0
            self._outputs = None

        self._frame_current = False
        self.config = config
        self._time_evolver = TimeEvolver(self._backend, n, config.patch_length)
        self._fft = FFTTransformer(self._backend, n, tables.butterfly)
        self._displacement = DisplacementSynthesizer(self._backend, n, config.max_choppiness)
        self._normals = NormalEstimator(self._backend, n, config.patch_length)

        self.state = OrchestratorState.SPECTRUM_READY
        logging.info(
            "Ocean spectrum ready: N=%d, L=%.1f, wind=%.1f m/s, %d FFT stages",
            n, config.patch_length, config.wind_speed, fft_tables.stages,
        )

    def update(self, config: OceanConfig) -> None:
        """
        Apply a parameter change, regenerating the spectrum only if its spectrum_key()
        differs from the current one. Per-tick values (choppiness, max_choppiness, seed)
        are swapped in place.
        """
        config = config.validate()
        current = self._require_config()
        if self._tables is None or config.spectrum_key() != current.spectrum_key():
            self.configure(config)
            return

        self.config = config
        self._displacement = DisplacementSynthesizer(self._backend, config.resolution, config.max_choppiness)

    def set_choppiness(self, value: float) -> None:
        """Takes effect on the next tick, no regeneration."""
        self.update(self._require_config().with_changes(choppiness=float(value)))

    def set_wind(self, wind_speed: float, wind_direction: tuple[float, float]) -> None:
        self.update(
            self._require_config().with_changes(
                wind_speed=float(wind_speed),
                wind_direction=(float(wind_direction[0]), float(wind_direction[1])),
            )
        )

    def set_patch_length(self, patch_length: float) -> None:
        self.update(self._require_config().with_changes(patch_length=float(patch_length)))

    def set_amplitude(self, amplitude: float) -> None:
        self.update(self._require_config().with_changes(amplitude=float(amplitude)))

    # Ticks

    def begin_tick(self, time: float) -> DispatchHandle:
        """Record the full dispatch chain for one tick into the back output buffers."""
        if self.state is OrchestratorState.UNINITIALIZED:
            raise OrchestratorStateError("configure() must be called before the first tick")
        if self.state is OrchestratorState.TICK_IN_FLIGHT:
            raise OrchestratorStateError("a tick is already in flight")

        frame = self._frame
        back = 1 - self._front
        self._last_recorded = None
        self.state = OrchestratorState.TICK_IN_FLIGHT

        try:
            height, disp_x, disp_z = frame.channels
            self._record(self._time_evolver.evolve(
                self._tables.buffers, height.ping, disp_x.ping, disp_z.ping, time
            ))
            self._backend.barrier([height.ping, disp_x.ping, disp_z.ping])

            result = self._fft.inverse_2d(frame.channels)
            self._record(result.handle)

            self._record(self._displacement.synthesize(
                height.slot(result.slot),
                disp_x.slot(result.slot),
                disp_z.slot(result.slot),
                frame.displacement[back],
                self.config.choppiness,
            ))
            self._backend.barrier([frame.displacement[back]])

            handle = self._record(self._normals.estimate(frame.displacement[back], frame.normal[back]))
            # Make the finished fields visible to the renderer
            self._backend.barrier([frame.displacement[back], frame.normal[back]])
        except Exception:
            self._abort_recording()
            raise

        self._pending = _PendingTick(handle, back, float(time))
        return handle

    def complete_tick(self) -> OceanOutputs:
        """Wait for the in-flight tick and publish its fields."""
        if self.state is not OrchestratorState.TICK_IN_FLIGHT:
            raise OrchestratorStateError(f"no tick in flight (state: {self.state.value})")

        pending = self._pending
        try:
            self._backend.wait_for_completion(pending.handle)
        except DispatchFailure:
            self._pending = None
            self.ticks_failed += 1
            self.state = self._resting_state()
            logging.error("Ocean tick at t=%.3f failed, keeping the previous frame", pending.time)
            raise

        frame = self._frame
        self._front = pending.back
        self._pending = None
        self._outputs = OceanOutputs(
            displacement=frame.displacement[self._front],
            normal=frame.normal[self._front],
            resolution=frame.resolution,
            patch_length=self.config.patch_length,
            time=pending.time,
        )
        self.ticks_completed += 1
        self._frame_current = True
        self.state = OrchestratorState.TICK_COMPLETE
        return self._outputs

    def tick(self, time: float) -> OceanOutputs:
        self.begin_tick(time)
        return self.complete_tick()

    def step(self, delta_time: float) -> OceanOutputs:
        """Call once per frame."""
        self._time += float(delta_time)
        return self.tick(self._time)

    # Readback

    def read_displacement(self):
        return self._backend.download(self._require_outputs().displacement)

    def read_normals(self):
        return self._backend.download(self._require_outputs().normal)

    def debug_buffers(self) -> dict[str, BufferHandle]:
        """Intermediate buffers by name, for debug views."""
        if self._tables is None or self._frame is None:
            return {}
        buffers = {
            "h0k": self._tables.buffers.h0k,
            "h0minusk": self._tables.buffers.h0minusk,
            "omega": self._tables.buffers.omega,
            "butterfly": self._tables.butterfly,
        }
        for name, pair in zip(CHANNELS, self._frame.channels):
            buffers[f"{name}_ping"] = pair.ping
            buffers[f"{name}_pong"] = pair.pong
        return buffers

    def release(self) -> None:
        """Free every buffer and go back to UNINITIALIZED."""
        if self.state is OrchestratorState.TICK_IN_FLIGHT:
            raise OrchestratorStateError("cannot release buffers while a tick is in flight")
        if self._tables is not None:
            self._release(self._tables.all())
        if self._frame is not None:
            self._release(self._frame.all())
        self._tables = None
        self._frame = None
        self._frame_current = False
        self._outputs = None
        self.state = OrchestratorState.UNINITIALIZED
        logging.info("Ocean buffers released")

    # Internals

    def _record(self, handle: DispatchHandle | None) -> DispatchHandle | None:
        if handle is not None:
            self._last_recorded = handle
        return handle

    def _abort_recording(self) -> None:
        # Work already handed to the backend cannot be cancelled, let it drain
        if self._last_recorded is not None:
            try:
                self._backend.wait_for_completion(self._last_recorded)
            except DispatchFailure:
                logging.exception("Draining an aborted tick failed as well")
        self._last_recorded = None
        self._pending = None
        self.ticks_failed += 1
        self.state = self._resting_state()

    def _resting_state(self) -> OrchestratorState:
        if self._frame_current:
            return OrchestratorState.TICK_COMPLETE
        return OrchestratorState.SPECTRUM_READY

    def _upload_tables(self, spectrum: SpectrumTables, fft_tables: FFTTables) -> _TableSet:
        n = spectrum.resolution
        created: list[BufferHandle] = []

        def create(name: str, fmt: BufferFormat, shape: tuple[int, int], data) -> BufferHandle:
            buf = self._backend.create_buffer(name, fmt, shape)
            created.append(buf)
            self._backend.upload(buf, data)
            return buf

        try:
            buffers = SpectrumBuffers(
                h0k=create("ocean_h0k", BufferFormat.COMPLEX, (n, n), spectrum.h0k),
                h0minusk=create("ocean_h0minusk", BufferFormat.COMPLEX, (n, n), spectrum.h0minusk),
                omega=create("ocean_omega", BufferFormat.SCALAR, (n, n), spectrum.omega),
            )
            butterfly = create(
                "ocean_butterfly", BufferFormat.VEC4, (fft_tables.stages, n), fft_tables.butterfly
            )
        except Exception:
            # The previous table set stays untouched
            self._release(created)
            raise

        return _TableSet(spectrum=spectrum, fft=fft_tables, buffers=buffers, butterfly=butterfly)

    def _allocate_frame(self, n: int) -> _FrameBuffers:
        backend = self._backend
        channels = tuple(
            PingPongPair(
                backend.create_buffer(f"ocean_{name}_ping", BufferFormat.COMPLEX, (n, n)),
                backend.create_buffer(f"ocean_{name}_pong", BufferFormat.COMPLEX, (n, n)),
            )
            for name in CHANNELS
        )
        displacement = tuple(
            backend.create_buffer(f"ocean_displacement_{i}", BufferFormat.VEC4, (n, n)) for i in range(2)
        )
        normal = tuple(
            backend.create_buffer(f"ocean_normal_map_{i}", BufferFormat.VEC4, (n, n)) for i in range(2)
        )
        logging.debug("Allocated %dx%d frame buffers", n, n)
        return _FrameBuffers(n, channels, displacement, normal)

    def _release(self, buffers) -> None:
        for buf in buffers:
            self._backend.release_buffer(buf)

    def _require_config(self) -> OceanConfig:
        if self.config is None:
            raise OrchestratorStateError("the orchestrator has not been configured")
        return self.config

    def _require_outputs(self) -> OceanOutputs:
        if self._outputs is None:
            raise OrchestratorStateError("no completed tick yet")
        return self._outputs
