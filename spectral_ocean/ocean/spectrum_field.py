# -*- coding: utf-8 -*-

"""
Filename: spectrum_field.py
Author: storro
Date: 2026-02-11
Description: Generates the initial ocean spectrum h0(k), h0(-k) and the dispersion table w(k)
"""

import logging

from dataclasses import dataclass

import numpy as np

from spectral_ocean.ocean.config import OceanConfig

# k_cos values below zero (waves travelling against the wind) are replaced by this
AGAINST_WIND_COS = 0.07


@dataclass(frozen=True)
class SpectrumTables:
    """Immutable initial spectrum for one parameter set."""

    h0k: np.ndarray
    h0minusk: np.ndarray
    omega: np.ndarray
    config: OceanConfig

    @property
    def resolution(self) -> int:
        return int(self.h0k.shape[0])


def wave_vectors(resolution: int, patch_length: float) -> tuple[np.ndarray, np.ndarray]:
    """
    Wavenumber components for every grid cell, indexed [y, x].
    Cell (x, y) maps to k = ((x - N/2) * dk, (y - N/2) * dk).
    """
    n = int(resolution)
    dk = 2.0 * np.pi / patch_length
    axis = (np.arange(n, dtype=np.float64) - n // 2) * dk
    kx, kz = np.meshgrid(axis, axis, indexing="xy")
    return kx, kz


def mirror_indices(resolution: int) -> np.ndarray:
    """Index of the cell holding -k for every cell along one axis."""
    n = int(resolution)
    return (n - np.arange(n)) % n


def phillips_spectrum(
    kx: np.ndarray,
    kz: np.ndarray,
    wind_speed: float,
    wind_direction: tuple[float, float],
    amplitude: float,
    gravity: float,
) -> np.ndarray:
    """
    Phillips spectral density:

        P(k) = A * exp(-1 / (L^2 |k|^2)) / |k|^6 * (k_hat . w)^2,  L = V^2 / g

    P is zero at k = (0, 0).
    """
    kx = np.asarray(kx, dtype=np.float64)
    kz = np.asarray(kz, dtype=np.float64)
    wx, wz = wind_direction
    wind_norm = np.hypot(wx, wz)
    wx, wz = wx / wind_norm, wz / wind_norm

    k_sq = kx * kx + kz * kz
    nonzero = k_sq > 0.0
    safe_sq = np.where(nonzero, k_sq, 1.0)
    k_len = np.sqrt(safe_sq)

    k_cos = (kx * wx + kz * wz) / k_len
    k_cos = np.where(k_cos < 0.0, AGAINST_WIND_COS, k_cos)

    l_wind = wind_speed * wind_speed / gravity
    if l_wind > 0.0:
        damping = np.exp(-1.0 / (l_wind * l_wind * safe_sq))
    else:
        damping = np.zeros_like(safe_sq)

    p = amplitude * damping / (safe_sq * safe_sq * safe_sq) * (k_cos * k_cos)
    return np.where(nonzero, p, 0.0)


def dispersion(kx: np.ndarray, kz: np.ndarray, gravity: float) -> np.ndarray:
    """Deep water dispersion relation w = sqrt(g |k|)."""
    return np.sqrt(gravity * np.hypot(kx, kz))


class SpectrumField:
    """Generates the initial spectrum tables for a parameter set."""

    def __init__(self, config: OceanConfig) -> None:
        self.config = config.validate()

    def generate(self, seed: int | None = None) -> SpectrumTables:
        """
        Build fresh h0(k), h0(-k) and w(k) tables. Old tables are never touched,
        a parameter change simply produces a new SpectrumTables.
        """
        cfg = self.config
        n = cfg.resolution
        if seed is None:
            seed = cfg.seed
        rng = np.random.default_rng(seed)

        kx, kz = wave_vectors(n, cfg.patch_length)
        direction = cfg.unit_wind_direction
        p_k = phillips_spectrum(kx, kz, cfg.wind_speed, direction, cfg.amplitude, cfg.gravity)

        # One complex gaussian draw per cell. h0(-k) is the amplitude drawn for the -k cell
        # (P(-k) and its own draw), so the pair is Hermitian and the height field is real.
        # On the Nyquist row/column -k aliases onto the same edge.
        xi = rng.standard_normal((n, n)) + 1j * rng.standard_normal((n, n))
        h0k = np.sqrt(p_k * 0.5) * xi
        mirror = mirror_indices(n)
        h0minusk = h0k[np.ix_(mirror, mirror)]
        omega = dispersion(kx, kz, cfg.gravity)

        tables = SpectrumTables(
            h0k=_frozen(h0k.astype(np.complex64)),
            h0minusk=_frozen(h0minusk.astype(np.complex64)),
            omega=_frozen(omega.astype(np.float32)),
            config=cfg,
        )
        logging.debug(
            "Initial spectrum generated: N=%d L=%.2f wind=%.2f dir=(%.3f, %.3f)",
            n, cfg.patch_length, cfg.wind_speed, direction[0], direction[1],
        )
        return tables


def _frozen(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array
