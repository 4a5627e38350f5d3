# -*- coding: utf-8 -*-

"""
Filename: kernels.py
Author: storro
Date: 2026-02-11
Description: Registry of the ocean compute kernels: bindings, group size and shader file
"""

from dataclasses import dataclass

# Group size used by every 2D kernel (x and y)
LOCAL_GROUP_SIZE = 16


class KernelId:
    TIME_SPECTRUM = "time_spectrum"
    FFT_HORIZONTAL = "fft_horizontal"
    FFT_VERTICAL = "fft_vertical"
    DISPLACEMENT = "displacement"
    NORMAL_MAP = "normal_map"


@dataclass(frozen=True)
class KernelSpec:
    kernel_id: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]
    constants: tuple[str, ...]
    shader: str
    local_size: tuple[int, int] = (LOCAL_GROUP_SIZE, LOCAL_GROUP_SIZE)

    @property
    def bindings(self) -> tuple[str, ...]:
        return self.inputs + self.outputs


KERNELS: dict[str, KernelSpec] = {
    spec.kernel_id: spec
    for spec in (
        KernelSpec(
            KernelId.TIME_SPECTRUM,
            inputs=("u_h0k", "u_h0minusk", "u_omega"),
            outputs=("u_height", "u_disp_x", "u_disp_z"),
            constants=("u_resolution", "u_patch_length", "u_time"),
            shader="time_spectrum.comp.glsl",
        ),
        KernelSpec(
            KernelId.FFT_HORIZONTAL,
            inputs=("u_input", "u_butterfly"),
            outputs=("u_output",),
            constants=("u_resolution", "u_stage", "u_inverse"),
            shader="fft_horizontal.comp.glsl",
        ),
        KernelSpec(
            KernelId.FFT_VERTICAL,
            inputs=("u_input", "u_butterfly"),
            outputs=("u_output",),
            constants=("u_resolution", "u_stage", "u_inverse"),
            shader="fft_vertical.comp.glsl",
        ),
        KernelSpec(
            KernelId.DISPLACEMENT,
            inputs=("u_height", "u_disp_x", "u_disp_z"),
            outputs=("u_displacement",),
            constants=("u_resolution", "u_choppiness"),
            shader="unpack_displacement.comp.glsl",
        ),
        KernelSpec(
            KernelId.NORMAL_MAP,
            inputs=("u_displacement",),
            outputs=("u_normal_map",),
            constants=("u_resolution", "u_patch_length"),
            shader="normal_map.comp.glsl",
        ),
    )
}
