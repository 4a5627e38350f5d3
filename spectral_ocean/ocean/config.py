# -*- coding: utf-8 -*-

"""
Filename: config.py
Author: storro
Date: 2026-02-11
Description: Ocean simulation parameters, validation and PRC loading
"""

import math

from dataclasses import dataclass, field, replace

from panda3d.core import ConfigVariableDouble, ConfigVariableInt

from spectral_ocean.ocean.errors import ConfigError


DEFAULT_GRAVITY = 9.81


@dataclass(frozen=True)
class OceanConfig:
    # Simulation texture resolution: resolution x resolution, must be a power of 2
    resolution: int = 256

    # World-space size of the simulated patch ("L" in Tessendorf's paper)
    patch_length: float = 150.0

    wind_speed: float = 30.0
    wind_direction: tuple[float, float] = (1.0, 0.0)

    # Phillips constant "A"
    amplitude: float = 4e-4

    # Higher = sharper peaks, but more distortion (fold-over past ~2)
    choppiness: float = 1.5
    max_choppiness: float = 5.0

    gravity: float = DEFAULT_GRAVITY

    # None draws a fresh spectrum on every regeneration
    seed: int | None = field(default=None, compare=False)

    @property
    def log2_resolution(self) -> int:
        return int(self.resolution).bit_length() - 1

    @property
    def delta_k(self) -> float:
        return 2.0 * math.pi / self.patch_length

    @property
    def texel_size(self) -> float:
        """World-space distance between two neighbouring grid cells."""
        return self.patch_length / self.resolution

    @property
    def unit_wind_direction(self) -> tuple[float, float]:
        wx, wy = self.wind_direction
        norm = math.hypot(wx, wy)
        return (wx / norm, wy / norm)

    def validate(self) -> "OceanConfig":
        n = self.resolution
        if not isinstance(n, int) or isinstance(n, bool):
            raise ConfigError(f"resolution must be an integer, got {n!r}")
        if n < 2 or (n & (n - 1)) != 0:
            raise ConfigError(f"resolution must be a power of two >= 2, got {n}")
        if not self.patch_length > 0.0:
            raise ConfigError(f"patch_length must be > 0, got {self.patch_length}")
        if self.choppiness < 0.0:
            raise ConfigError(f"choppiness must be >= 0, got {self.choppiness}")
        if self.max_choppiness < 0.0:
            raise ConfigError(f"max_choppiness must be >= 0, got {self.max_choppiness}")
        if self.wind_speed < 0.0:
            raise ConfigError(f"wind_speed must be >= 0, got {self.wind_speed}")
        if self.amplitude < 0.0:
            raise ConfigError(f"amplitude must be >= 0, got {self.amplitude}")
        if not self.gravity > 0.0:
            raise ConfigError(f"gravity must be > 0, got {self.gravity}")
        if len(self.wind_direction) != 2 or math.hypot(*self.wind_direction) == 0.0:
            raise ConfigError(f"wind_direction must be a non-zero 2D vector, got {self.wind_direction}")
        return self

    def spectrum_key(self) -> tuple:
        """Parameters that require the initial spectrum to be regenerated."""
        return (
            self.resolution,
            self.patch_length,
            self.wind_speed,
            self.unit_wind_direction,
            self.amplitude,
            self.gravity,
        )

    def with_changes(self, **changes) -> "OceanConfig":
        return replace(self, **changes)

    @classmethod
    def from_prc(cls) -> "OceanConfig":
        """
        Build a config from Panda3D PRC variables. Variables that are not set keep the
        dataclass defaults. Load overrides beforehand with load_prc_file_data(),
        e.g. "ocean-resolution 512".
        """
        defaults = cls()
        seed = _prc_value(ConfigVariableInt("ocean-seed", -1, "Spectrum RNG seed, -1 for random"), -1)
        return cls(
            resolution=_prc_value(
                ConfigVariableInt("ocean-resolution", defaults.resolution, "FFT grid resolution (power of two)"),
                defaults.resolution,
            ),
            patch_length=_prc_value(
                ConfigVariableDouble("ocean-patch-length", defaults.patch_length, "World-space size of the ocean patch"),
                defaults.patch_length,
            ),
            wind_speed=_prc_value(ConfigVariableDouble("ocean-wind-speed", defaults.wind_speed), defaults.wind_speed),
            wind_direction=(
                _prc_value(
                    ConfigVariableDouble("ocean-wind-direction-x", defaults.wind_direction[0]),
                    defaults.wind_direction[0],
                ),
                _prc_value(
                    ConfigVariableDouble("ocean-wind-direction-y", defaults.wind_direction[1]),
                    defaults.wind_direction[1],
                ),
            ),
            amplitude=_prc_value(ConfigVariableDouble("ocean-amplitude", defaults.amplitude), defaults.amplitude),
            choppiness=_prc_value(ConfigVariableDouble("ocean-choppiness", defaults.choppiness), defaults.choppiness),
            max_choppiness=_prc_value(
                ConfigVariableDouble("ocean-max-choppiness", defaults.max_choppiness), defaults.max_choppiness
            ),
            gravity=_prc_value(ConfigVariableDouble("ocean-gravity", defaults.gravity), defaults.gravity),
            seed=None if seed < 0 else seed,
        )


def _prc_value(variable, default):
    # A round trip through the PRC default string is not exact for doubles
    return variable.get_value() if variable.has_value() else default
