"""Bit reversal and butterfly table tests."""

from __future__ import annotations

import numpy as np
import pytest

from spectral_ocean.ocean import kernels
from spectral_ocean.ocean.errors import ConfigError
from spectral_ocean.ocean.fft_tables import FFTTables, bit_reversal_table, butterfly_table


@pytest.mark.parametrize("n", [2, 4, 8, 16, 64, 256, 512])
def test_bit_reversal_is_an_involution(n):
    rev = bit_reversal_table(n)
    assert np.array_equal(rev[rev], np.arange(n))
    assert sorted(rev.tolist()) == list(range(n))


def test_bit_reversal_values():
    assert bit_reversal_table(8).tolist() == [0, 4, 2, 6, 1, 5, 3, 7]


@pytest.mark.parametrize("n", [0, 1, 3, 6, 12, 100])
def test_tables_reject_non_power_of_two(n):
    with pytest.raises(ConfigError):
        bit_reversal_table(n)
    with pytest.raises(ConfigError):
        butterfly_table(n)


def test_butterfly_table_layout():
    n = 16
    table = butterfly_table(n)
    assert table.shape == (4, n, 4)
    assert table.dtype == np.float32

    # Twiddles are unit complex numbers
    magnitude = np.hypot(table[..., 0], table[..., 1])
    assert np.allclose(magnitude, 1.0, atol=1e-6)

    # Stage 0 reads bit-reversed pairs
    rev = bit_reversal_table(n)
    assert np.array_equal(table[0, :, 2].astype(int), rev[np.arange(n) & ~1])
    assert np.array_equal(table[0, :, 3].astype(int), rev[np.arange(n) | 1])

    # Later stages pair i with i + half inside each block
    half = 4
    i = np.arange(n)
    a = table[2, :, 2].astype(int)
    b = table[2, :, 3].astype(int)
    assert np.array_equal(b - a, np.full(n, half))
    assert np.array_equal(a // 8, i // 8)


def test_tables_are_read_only():
    tables = FFTTables.build(8)
    assert tables.stages == 3
    with pytest.raises(ValueError):
        tables.bit_reversal[0] = 1
    with pytest.raises(ValueError):
        tables.butterfly[0, 0, 0] = 2.0


@pytest.mark.parametrize("n", [2, 8, 32])
@pytest.mark.parametrize("inverse", [False, True])
def test_butterfly_schedule_matches_dft(n, inverse):
    rng = np.random.default_rng(7)
    signal = (rng.standard_normal((n, n)) + 1j * rng.standard_normal((n, n))).astype(np.complex64)
    table = butterfly_table(n)

    data = signal
    for stage in range(table.shape[0]):
        data = kernels.butterfly_pass(data, table, stage, inverse, axis=1)

    expected = np.fft.ifft(signal, axis=1) * n if inverse else np.fft.fft(signal, axis=1)
    assert np.allclose(data, expected, rtol=1e-4, atol=1e-4)
