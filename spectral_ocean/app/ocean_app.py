# -*- coding: utf-8 -*-

"""
Filename: ocean_app.py
Author: storro
Date: 2026-02-11
Description: Panda3D host application. Creates a GL 4.3 context, runs the ocean
             compute chain once per frame and exposes the output textures
"""

import logging

from direct.showbase.ShowBase import ShowBase
from direct.task.Task import Task
from panda3d.core import ClockObject, Texture, load_prc_file_data

from spectral_ocean.compute.panda3d_backend import Panda3DComputeBackend
from spectral_ocean.ocean.config import OceanConfig
from spectral_ocean.ocean.errors import DispatchFailure
from spectral_ocean.ocean.orchestrator import FrameOrchestrator
from spectral_ocean.util.logging_config import setup_logging


class OceanApp(ShowBase):
    def __init__(self, config: OceanConfig | None = None, window_type: str = "offscreen") -> None:
        self.configure_panda(window_type)
        super().__init__()

        setup_logging()

        # PRC variables (ocean-resolution, ocean-wind-speed, ...) unless given explicitly
        self.ocean_config = config if config is not None else OceanConfig.from_prc()

        self.compute = Panda3DComputeBackend.from_app(self)
        self.ocean = FrameOrchestrator(self.compute)
        self.ocean.configure(self.ocean_config)
        logging.info("Ocean simulation initialized")

        self.task_mgr.add(self._ocean_step_task, "ocean_step")

    def _ocean_step_task(self, task: Task) -> int:
        dt = ClockObject.get_global_clock().get_dt()
        try:
            self.ocean.step(dt)
        except DispatchFailure as exc:
            # The surface stays at the last good frame, next frame tries again
            logging.warning("Ocean tick skipped: %s", exc)
        return task.cont

    def configure_panda(self, window_type: str) -> None:
        prc_data = f"""
            window-title Tessendorf Ocean
            window-type {window_type}
            win-size 1280 720
            gl-version 4 3
            sync-video false
        """
        load_prc_file_data("", prc_data)

    def displacement_texture(self) -> Texture | None:
        outputs = self.ocean.outputs
        return None if outputs is None else self.compute.texture(outputs.displacement)

    def normal_texture(self) -> Texture | None:
        outputs = self.ocean.outputs
        return None if outputs is None else self.compute.texture(outputs.normal)

    def get_ocean_parameters(self) -> dict:
        cfg = self.ocean.config
        return {
            "resolution": int(cfg.resolution),
            "ocean_size": float(cfg.patch_length),
            "wind_speed": float(cfg.wind_speed),
            "wind_direction": tuple(cfg.unit_wind_direction),
            "amplitude": float(cfg.amplitude),
            "choppiness": float(cfg.choppiness),
            "gravity": float(cfg.gravity),
        }

    def set_choppiness(self, value: float) -> None:
        self.ocean.set_choppiness(value)

    def set_wind(self, wind_x: float, wind_y: float) -> None:
        """Wind as a velocity vector, its length is the wind speed."""
        speed = (wind_x * wind_x + wind_y * wind_y) ** 0.5
        self.ocean.set_wind(speed, (wind_x, wind_y))

    def set_ocean_size(self, ocean_size: float) -> None:
        self.ocean.set_patch_length(ocean_size)
