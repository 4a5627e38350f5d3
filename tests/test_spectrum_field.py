"""Initial spectrum (Phillips, h0(k), h0(-k), w(k)) tests."""

from __future__ import annotations

import numpy as np
import pytest

from spectral_ocean.ocean.config import OceanConfig
from spectral_ocean.ocean.errors import ConfigError
from spectral_ocean.ocean.spectrum_field import (
    AGAINST_WIND_COS,
    SpectrumField,
    mirror_indices,
    phillips_spectrum,
    wave_vectors,
)


@pytest.mark.parametrize("wind", [(1.0, 0.0), (0.3, -0.9), (-2.0, 5.0)])
@pytest.mark.parametrize("speed", [0.0, 5.0, 31.0])
def test_phillips_is_zero_at_origin(wind, speed):
    p = phillips_spectrum(np.array([0.0]), np.array([0.0]), speed, wind, 3.0, 9.81)
    assert p[0] == 0.0


def test_phillips_matches_formula():
    kx, kz = 0.5, 0.25
    speed, amplitude, g = 10.0, 2.0, 9.81
    k_sq = kx * kx + kz * kz
    l_wind = speed * speed / g
    k_cos = kx / np.sqrt(k_sq)
    expected = amplitude * np.exp(-1.0 / (l_wind * l_wind * k_sq)) / k_sq**3 * k_cos**2

    p = phillips_spectrum(np.array([kx]), np.array([kz]), speed, (1.0, 0.0), amplitude, g)
    assert p[0] == pytest.approx(expected, rel=1e-12)


def test_phillips_damps_waves_against_the_wind():
    k = np.array([0.7])
    zero = np.array([0.0])
    along = phillips_spectrum(k, zero, 10.0, (1.0, 0.0), 1.0, 9.81)[0]
    against = phillips_spectrum(-k, zero, 10.0, (1.0, 0.0), 1.0, 9.81)[0]
    assert against == pytest.approx(along * AGAINST_WIND_COS**2)


def test_flipping_the_wind_swaps_the_dominant_direction():
    k = np.array([0.7])
    zero = np.array([0.0])
    east = phillips_spectrum(k, zero, 10.0, (1.0, 0.0), 1.0, 9.81)[0]
    east_minus = phillips_spectrum(-k, zero, 10.0, (1.0, 0.0), 1.0, 9.81)[0]
    west = phillips_spectrum(k, zero, 10.0, (-1.0, 0.0), 1.0, 9.81)[0]
    west_minus = phillips_spectrum(-k, zero, 10.0, (-1.0, 0.0), 1.0, 9.81)[0]
    assert east > east_minus
    assert west < west_minus
    assert east == pytest.approx(west_minus)


def test_wave_vectors_are_centred(small_config):
    kx, kz = wave_vectors(8, 8.0)
    dk = 2.0 * np.pi / 8.0
    assert kx[0, 0] == pytest.approx(-4 * dk)
    assert kx[0, 4] == 0.0 and kz[4, 0] == 0.0
    assert kz[7, 3] == pytest.approx(3 * dk)


def test_mirror_indices():
    assert mirror_indices(8).tolist() == [0, 7, 6, 5, 4, 3, 2, 1]


def test_h0minusk_is_the_amplitude_drawn_for_minus_k(small_config):
    tables = SpectrumField(small_config).generate()
    mirror = mirror_indices(8)
    assert np.array_equal(tables.h0minusk, tables.h0k[np.ix_(mirror, mirror)])
    # k = 0 carries no energy
    assert tables.h0k[4, 4] == 0
    assert tables.h0minusk[4, 4] == 0


def test_wind_flip_swaps_which_of_h0k_and_h0minusk_dominates(small_config):
    east = SpectrumField(small_config).generate(seed=99)
    west = SpectrumField(small_config.with_changes(wind_direction=(-1.0, 0.0))).generate(seed=99)

    # k along +x, away from the Nyquist edge
    y, x = 4, 5
    ratio_east = abs(east.h0minusk[y, x]) / abs(east.h0k[y, x])
    ratio_west = abs(west.h0minusk[y, x]) / abs(west.h0k[y, x])
    # Same draws, so the ratio changes exactly by P(k) / P(-k)
    assert ratio_west / ratio_east == pytest.approx(1.0 / AGAINST_WIND_COS**2, rel=1e-3)


def test_amplitudes_follow_the_phillips_spectrum():
    config = OceanConfig(resolution=64, patch_length=200.0, wind_speed=20.0, amplitude=1.0, seed=5)
    tables = SpectrumField(config).generate()
    kx, kz = wave_vectors(64, 200.0)
    p = phillips_spectrum(kx, kz, 20.0, (1.0, 0.0), 1.0, 9.81)
    # E|h0|^2 = P(k); averaged over all cells the normalised power is close to 1
    energy = np.abs(tables.h0k.astype(np.complex128)) ** 2
    mask = p > 0
    assert np.mean(energy[mask] / p[mask]) == pytest.approx(1.0, rel=0.1)


def test_dispersion_table(small_config):
    tables = SpectrumField(small_config).generate()
    kx, kz = wave_vectors(8, 8.0)
    assert np.allclose(tables.omega, np.sqrt(9.81 * np.hypot(kx, kz)), rtol=1e-6)
    assert tables.omega[4, 4] == 0.0


def test_same_seed_same_tables(small_config):
    a = SpectrumField(small_config).generate()
    b = SpectrumField(small_config).generate()
    c = SpectrumField(small_config).generate(seed=4321)
    assert np.array_equal(a.h0k, b.h0k)
    assert not np.array_equal(a.h0k, c.h0k)


def test_tables_are_immutable(small_config):
    tables = SpectrumField(small_config).generate()
    with pytest.raises(ValueError):
        tables.h0k[0, 0] = 1.0
    with pytest.raises(ValueError):
        tables.omega[0, 0] = 1.0


def test_generation_validates_config():
    with pytest.raises(ConfigError):
        SpectrumField(OceanConfig(resolution=12))
    with pytest.raises(ConfigError):
        SpectrumField(OceanConfig(patch_length=0.0))
