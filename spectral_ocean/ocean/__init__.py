from spectral_ocean.ocean.config import OceanConfig
from spectral_ocean.ocean.displacement import DisplacementSynthesizer
from spectral_ocean.ocean.errors import (
    BarrierError,
    ConfigError,
    DispatchFailure,
    OceanError,
    OrchestratorStateError,
)
from spectral_ocean.ocean.fft_tables import FFTTables, bit_reversal_table, butterfly_table
from spectral_ocean.ocean.fft_transformer import FFTTransformer, PingPongPair, output_slot, pingpong_slot
from spectral_ocean.ocean.normal_estimator import NormalEstimator
from spectral_ocean.ocean.orchestrator import FrameOrchestrator, OceanOutputs, OrchestratorState
from spectral_ocean.ocean.spectrum_field import SpectrumField, SpectrumTables, phillips_spectrum
from spectral_ocean.ocean.time_evolver import SpectrumBuffers, TimeEvolver

"""Ocean package public API."""

__all__ = [
    "BarrierError",
    "ConfigError",
    "DispatchFailure",
    "DisplacementSynthesizer",
    "FFTTables",
    "FFTTransformer",
    "FrameOrchestrator",
    "NormalEstimator",
    "OceanConfig",
    "OceanError",
    "OceanOutputs",
    "OrchestratorState",
    "OrchestratorStateError",
    "PingPongPair",
    "SpectrumBuffers",
    "SpectrumField",
    "SpectrumTables",
    "TimeEvolver",
    "bit_reversal_table",
    "butterfly_table",
    "output_slot",
    "phillips_spectrum",
    "pingpong_slot",
]
