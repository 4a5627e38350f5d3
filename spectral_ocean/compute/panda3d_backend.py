# -*- coding: utf-8 -*-

"""
Filename: panda3d_backend.py
Author: storro
Date: 2026-02-11
Description: GPU compute backend running the ocean kernels as GLSL compute shaders
             on Panda3D textures
"""

import logging

from typing import Iterable, Mapping

import numpy as np

from panda3d.core import (
    GraphicsEngine,
    GraphicsStateGuardianBase,
    NodePath,
    SamplerState,
    Shader,
    ShaderAttrib,
    Texture,
)

from spectral_ocean.compute.backend import BufferFormat, BufferHandle, DispatchHandle, GroupCount
from spectral_ocean.compute.kernels import KERNELS, KernelSpec
from spectral_ocean.ocean.errors import DispatchFailure
from spectral_ocean.util.assets_path import shader_path

_TEXTURE_FORMATS = {
    BufferFormat.COMPLEX: (Texture.F_rg32, "RG"),
    BufferFormat.SCALAR: (Texture.F_r32, "R"),
    BufferFormat.VEC4: (Texture.F_rgba32, "RGBA"),
}


def make_buffer_texture(name: str, fmt: BufferFormat, shape: tuple[int, int]) -> Texture:
    height, width = shape
    tex_format, _ = _TEXTURE_FORMATS[fmt]
    tex = Texture(name)
    tex.setup_2d_texture(width, height, Texture.T_float, tex_format)
    tex.set_clear_color((0.0, 0.0, 0.0, 0.0))
    # The fields tile, so sampling consumers wrap around the patch edges
    tex.set_minfilter(SamplerState.FT_linear)
    tex.set_magfilter(SamplerState.FT_linear)
    tex.set_wrap_u(SamplerState.WM_repeat)
    tex.set_wrap_v(SamplerState.WM_repeat)
    return tex


def pack_texels(fmt: BufferFormat, data: np.ndarray) -> bytes:
    """Flatten an array to the float32 texel layout of its texture format."""
    array = np.ascontiguousarray(data, dtype=fmt.dtype)
    if fmt is BufferFormat.COMPLEX:
        array = array.view(np.float32)
    return array.astype(np.float32, copy=False).tobytes()


def unpack_texels(fmt: BufferFormat, shape: tuple[int, int], raw: bytes) -> np.ndarray:
    floats = np.frombuffer(raw, dtype=np.float32)
    height, width = shape
    if fmt is BufferFormat.COMPLEX:
        return floats.view(np.complex64).reshape(height, width).copy()
    return floats.reshape(fmt.array_shape(shape)).copy()


class Panda3DComputeBackend:
    """
    Runs kernels through GraphicsEngine.dispatch_compute. Buffers are float textures
    bound as images; row y of a numpy array is image row y.
    """

    def __init__(self, graphics_engine: GraphicsEngine, gsg: GraphicsStateGuardianBase) -> None:
        self._engine = graphics_engine
        self._gsg = gsg
        self._shaders: dict[str, Shader] = {}
        self._textures: dict[int, Texture] = {}
        self._completed_serial = 0

    @classmethod
    def from_app(cls, app) -> "Panda3DComputeBackend":
        return cls(app.graphics_engine, app.win.get_gsg())

    def texture(self, buffer: BufferHandle) -> Texture:
        """The Panda3D texture behind a buffer, for binding it to a render shader."""
        return self._textures[buffer.id]

    def create_buffer(self, name: str, fmt: BufferFormat, shape: tuple[int, int]) -> BufferHandle:
        handle = BufferHandle(name, fmt, (int(shape[0]), int(shape[1])))
        self._textures[handle.id] = make_buffer_texture(name, fmt, handle.shape)
        return handle

    def release_buffer(self, buffer: BufferHandle) -> None:
        tex = self._textures.pop(buffer.id, None)
        if tex is not None:
            tex.release_all()

    def upload(self, buffer: BufferHandle, data: np.ndarray) -> None:
        tex = self._textures[buffer.id]
        _, component_order = _TEXTURE_FORMATS[buffer.fmt]
        tex.set_ram_image_as(pack_texels(buffer.fmt, data), component_order)

    def download(self, buffer: BufferHandle) -> np.ndarray:
        tex = self._textures[buffer.id]
        if not self._engine.extract_texture_data(tex, self._gsg):
            raise DispatchFailure("download", f"could not read back {buffer!r}")
        _, component_order = _TEXTURE_FORMATS[buffer.fmt]
        return unpack_texels(buffer.fmt, buffer.shape, bytes(tex.get_ram_image_as(component_order)))

    def dispatch(
        self,
        kernel_id: str,
        groups: GroupCount,
        buffers: Mapping[str, BufferHandle],
        constants: Mapping[str, float | int],
    ) -> DispatchHandle:
        spec = KERNELS[kernel_id]
        shader = self._shader(spec)

        dummy = NodePath(f"ocean_{kernel_id}")
        dummy.set_shader(shader)
        for name in spec.bindings:
            dummy.set_shader_input(name, self._textures[buffers[name].id])
        for name in spec.constants:
            dummy.set_shader_input(name, constants[name])

        sattr = dummy.get_attrib(ShaderAttrib)
        try:
            self._engine.dispatch_compute(groups.as_tuple(), sattr, self._gsg)
        except Exception as exc:
            raise DispatchFailure(kernel_id, str(exc)) from exc

        handle = DispatchHandle(kernel_id)
        # dispatch_compute returns once the draw thread has run the shader
        self._completed_serial = handle.serial
        return handle

    def barrier(self, resources: Iterable[BufferHandle]) -> None:
        # The GL state guardian issues glMemoryBarrier before the next access of an
        # image written by a compute shader, so there is nothing to record here.
        logging.debug("barrier over %d buffers", len(list(resources)))

    def wait_for_completion(self, handle: DispatchHandle) -> None:
        if handle.serial > self._completed_serial:
            raise DispatchFailure(handle.kernel_id, "dispatch was never submitted")

    def _shader(self, spec: KernelSpec) -> Shader:
        shader = self._shaders.get(spec.kernel_id)
        if shader is None:
            try:
                path = shader_path(spec.shader)
            except FileNotFoundError as exc:
                raise DispatchFailure(spec.kernel_id, str(exc)) from exc
            shader = Shader.load_compute(Shader.SL_GLSL, path)
            if shader is None or shader.get_error_flag():
                raise DispatchFailure(spec.kernel_id, f"failed to load {spec.shader}")
            self._shaders[spec.kernel_id] = shader
        return shader
