"""OceanConfig validation and PRC loading."""

from __future__ import annotations

import pytest

from panda3d.core import load_prc_file_data, unload_prc_file

from spectral_ocean.ocean.config import DEFAULT_GRAVITY, OceanConfig
from spectral_ocean.ocean.errors import ConfigError


def test_defaults_are_valid():
    config = OceanConfig().validate()
    assert config.gravity == DEFAULT_GRAVITY
    assert config.log2_resolution == 8


@pytest.mark.parametrize(
    "changes",
    [
        {"resolution": 0},
        {"resolution": 1},
        {"resolution": 100},
        {"resolution": 256.0},
        {"patch_length": 0.0},
        {"patch_length": -10.0},
        {"choppiness": -0.1},
        {"max_choppiness": -1.0},
        {"wind_speed": -3.0},
        {"amplitude": -1.0},
        {"gravity": 0.0},
        {"wind_direction": (0.0, 0.0)},
    ],
)
def test_invalid_parameters_raise_config_error(changes):
    with pytest.raises(ConfigError):
        OceanConfig(**changes).validate()


def test_config_error_is_a_value_error():
    with pytest.raises(ValueError):
        OceanConfig(resolution=3).validate()


def test_derived_values():
    config = OceanConfig(
        resolution=64, patch_length=32.0, wind_direction=(3.0, 4.0)
    )
    assert config.texel_size == 0.5
    assert config.unit_wind_direction == pytest.approx((0.6, 0.8))


def test_spectrum_key_ignores_choppiness():
    config = OceanConfig()
    assert config.spectrum_key() == config.with_changes(choppiness=0.2).spectrum_key()
    assert config.spectrum_key() != config.with_changes(wind_speed=3.0).spectrum_key()
    # Same direction, different length
    assert config.spectrum_key() == config.with_changes(wind_direction=(5.0, 0.0)).spectrum_key()


def test_from_prc_reads_ocean_variables():
    page = load_prc_file_data(
        "ocean-test",
        "ocean-resolution 64\n"
        "ocean-patch-length 250.5\n"
        "ocean-wind-speed 12\n"
        "ocean-wind-direction-x 0\n"
        "ocean-wind-direction-y -1\n"
        "ocean-choppiness 0.75\n"
        "ocean-seed 42\n",
    )
    try:
        config = OceanConfig.from_prc().validate()
    finally:
        unload_prc_file(page)

    assert config.resolution == 64
    assert config.patch_length == pytest.approx(250.5)
    assert config.wind_speed == pytest.approx(12.0)
    assert config.wind_direction == pytest.approx((0.0, -1.0))
    assert config.choppiness == pytest.approx(0.75)
    assert config.seed == 42
    assert config.amplitude == OceanConfig().amplitude


def test_from_prc_keeps_defaults_for_unset_variables():
    page = load_prc_file_data("ocean-test", "ocean-resolution 32\n")
    try:
        config = OceanConfig.from_prc()
    finally:
        unload_prc_file(page)

    defaults = OceanConfig()
    assert config.resolution == 32
    # Exact equality: unset doubles must not round trip through PRC strings
    assert config.amplitude == defaults.amplitude
    assert config.patch_length == defaults.patch_length
    assert config.wind_speed == defaults.wind_speed
    assert config.wind_direction == defaults.wind_direction
    assert config.choppiness == defaults.choppiness
    assert config.max_choppiness == defaults.max_choppiness
    assert config.gravity == defaults.gravity
    assert config.seed is None
