# -*- coding: utf-8 -*-

"""
Filename: fft_tables.py
Author: storro
Date: 2026-02-11
Description: Bit reversal and butterfly (twiddle factor) tables for the radix-2 FFT
"""

from dataclasses import dataclass

import numpy as np

from spectral_ocean.ocean.errors import ConfigError


def log2_exact(n: int) -> int:
    if n < 2 or (n & (n - 1)) != 0:
        raise ConfigError(f"resolution must be a power of two >= 2, got {n}")
    return n.bit_length() - 1


def bit_reversal_table(n: int) -> np.ndarray:
    """log2(n)-bit reversal of every index in [0, n)."""
    bits = log2_exact(n)
    indices = np.arange(n, dtype=np.int64)
    reversed_ = np.zeros(n, dtype=np.int64)
    for bit in range(bits):
        reversed_ |= ((indices >> bit) & 1) << (bits - 1 - bit)
    return reversed_.astype(np.int32)


def butterfly_table(n: int) -> np.ndarray:
    """
    Decimation-in-time butterfly schedule, shape (log2(n), n, 4).

    Row [stage, i] holds (tw.re, tw.im, a, b) such that one pass of the forward
    transform is out[i] = in[a] + tw * in[b]. The twiddle e^{-2 pi i k / span} is
    stored negated for the bottom half of every block, so a pass never branches.
    Stage 0 carries bit-reversed source indices, which folds the input permutation
    into the first pass. The inverse transform uses conj(tw).
    """
    stages = log2_exact(n)
    reverse = bit_reversal_table(n)
    table = np.zeros((stages, n, 4), dtype=np.float32)
    index = np.arange(n)

    for stage in range(stages):
        half = 1 << stage
        span = half << 1
        offset = index % span
        k = offset % half
        top = offset < half

        a = index - offset + k
        b = a + half
        twiddle = np.exp(-2j * np.pi * k / span)
        twiddle = np.where(top, twiddle, -twiddle)

        if stage == 0:
            a = reverse[a]
            b = reverse[b]

        table[stage, :, 0] = twiddle.real
        table[stage, :, 1] = twiddle.imag
        table[stage, :, 2] = a
        table[stage, :, 3] = b

    return table


@dataclass(frozen=True)
class FFTTables:
    """Precomputed FFT tables, a pure function of the resolution."""

    resolution: int
    bit_reversal: np.ndarray
    butterfly: np.ndarray

    @property
    def stages(self) -> int:
        return int(self.butterfly.shape[0])

    @classmethod
    def build(cls, n: int) -> "FFTTables":
        bit_reversal = bit_reversal_table(n)
        butterfly = butterfly_table(n)
        bit_reversal.setflags(write=False)
        butterfly.setflags(write=False)
        return cls(resolution=n, bit_reversal=bit_reversal, butterfly=butterfly)
