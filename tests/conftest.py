"""Shared fixtures for the ocean tests.

Run with:
    pytest tests -v
"""

from __future__ import annotations

import numpy as np
import pytest

from spectral_ocean.compute.numpy_backend import NumpyComputeBackend
from spectral_ocean.ocean.config import OceanConfig
from spectral_ocean.ocean.orchestrator import FrameOrchestrator
from spectral_ocean.ocean.spectrum_field import wave_vectors


@pytest.fixture
def small_config() -> OceanConfig:
    """N=8, L=8, V=10, w=(1,0), A=1."""
    return OceanConfig(
        resolution=8,
        patch_length=8.0,
        wind_speed=10.0,
        wind_direction=(1.0, 0.0),
        amplitude=1.0,
        choppiness=1.0,
        seed=1234,
    )


@pytest.fixture
def backend() -> NumpyComputeBackend:
    return NumpyComputeBackend()


@pytest.fixture
def orchestrator(backend, small_config) -> FrameOrchestrator:
    ocean = FrameOrchestrator(backend)
    ocean.configure(small_config)
    return ocean


def direct_fourier_sum(spectrum: np.ndarray, patch_length: float, xs, zs) -> np.ndarray:
    """
    Evaluate sum_k spectrum(k) e^{i k.x} at world positions (x_n, z_m) = (n, m) * L / N,
    the slow way. Returns an array indexed [m, n].
    """
    n = spectrum.shape[0]
    kx, kz = wave_vectors(n, patch_length)
    texel = patch_length / n
    out = np.zeros((len(zs), len(xs)), dtype=np.complex128)
    for j, m in enumerate(zs):
        for i, p in enumerate(xs):
            phase = kx * (p * texel) + kz * (m * texel)
            out[j, i] = np.sum(spectrum.astype(np.complex128) * np.exp(1j * phase))
    return out
