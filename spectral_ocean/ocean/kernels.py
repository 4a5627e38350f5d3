# -*- coding: utf-8 -*-

"""
Filename: kernels.py
Author: storro
Date: 2026-02-11
Description: Host (numpy) implementations of the ocean compute kernels.
             Each one mirrors a GLSL compute shader in assets/shaders and evaluates
             the whole index space at once.
"""

import numpy as np

from spectral_ocean.ocean.spectrum_field import wave_vectors


def evolve_spectrum(
    h0k: np.ndarray,
    h0minusk: np.ndarray,
    omega: np.ndarray,
    patch_length: float,
    time: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    h(k, t) = h0(k) e^{i w t} + conj(h0(-k)) e^{-i w t}

    Returns the height channel and the two choppy channels i * (k.x / |k|) * h
    and i * (k.y / |k|) * h. Both choppy channels are zero at k = 0.
    """
    n = h0k.shape[0]
    kx, kz = wave_vectors(n, patch_length)

    phase = omega.astype(np.float64) * float(time)
    rotor = np.exp(1j * phase)
    h = h0k * rotor + np.conj(h0minusk) * np.conj(rotor)

    k_len = np.hypot(kx, kz)
    safe_len = np.where(k_len > 0.0, k_len, 1.0)
    ikx = np.where(k_len > 0.0, 1j * kx / safe_len, 0.0)
    ikz = np.where(k_len > 0.0, 1j * kz / safe_len, 0.0)

    return (
        h.astype(np.complex64),
        (ikx * h).astype(np.complex64),
        (ikz * h).astype(np.complex64),
    )


def twiddles(butterfly: np.ndarray, stage: int, inverse: bool) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    row = butterfly[stage]
    tw = (row[:, 0] + 1j * row[:, 1]).astype(np.complex64)
    if inverse:
        tw = np.conj(tw)
    return tw, row[:, 2].astype(np.intp), row[:, 3].astype(np.intp)


def butterfly_pass(
    source: np.ndarray,
    butterfly: np.ndarray,
    stage: int,
    inverse: bool,
    axis: int,
) -> np.ndarray:
    """
    One radix-2 pass along rows (axis=1, horizontal) or columns (axis=0, vertical).
    Reads only from source and returns a new array, the caller writes it into the
    other ping-pong buffer.
    """
    tw, a, b = twiddles(butterfly, stage, inverse)
    if axis == 1:
        return source[:, a] + tw[np.newaxis, :] * source[:, b]
    return source[a, :] + tw[:, np.newaxis] * source[b, :]


def checkerboard(n: int) -> np.ndarray:
    """(-1)^(x + y) for every cell."""
    index = np.arange(n)
    return np.where((index[:, np.newaxis] + index[np.newaxis, :]) % 2 == 0, 1.0, -1.0).astype(np.float32)


def synthesize_displacement(
    height: np.ndarray,
    disp_x: np.ndarray,
    disp_z: np.ndarray,
    choppiness: float,
) -> np.ndarray:
    """Pack (Dx * c, H, Dz * c, 0) after undoing the FFT's spatial shift."""
    n = height.shape[0]
    sign = checkerboard(n)
    out = np.zeros((n, n, 4), dtype=np.float32)
    out[..., 0] = sign * disp_x.real * np.float32(choppiness)
    out[..., 1] = sign * height.real
    out[..., 2] = sign * disp_z.real * np.float32(choppiness)
    return out


def estimate_normals(displacement: np.ndarray, texel_size: float) -> np.ndarray:
    """
    Central-difference normals of the height component, wrapping at the patch edges.
    Flat cells give the up vector (0, 1, 0).
    """
    height = displacement[..., 1].astype(np.float32)
    inv = np.float32(1.0 / (2.0 * texel_size))
    dh_dx = (np.roll(height, -1, axis=1) - np.roll(height, 1, axis=1)) * inv
    dh_dz = (np.roll(height, -1, axis=0) - np.roll(height, 1, axis=0)) * inv

    normal = np.stack([-dh_dx, np.ones_like(height), -dh_dz], axis=-1)
    normal /= np.linalg.norm(normal, axis=-1, keepdims=True)

    out = np.zeros(displacement.shape[:2] + (4,), dtype=np.float32)
    out[..., :3] = normal
    return out
