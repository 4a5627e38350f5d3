# -*- coding: utf-8 -*-

"""
Filename: backend.py
Author: storro
Date: 2026-02-11
Description: The compute capability the ocean core depends on: buffer handles,
             dispatch handles and the ComputeBackend protocol.
"""

import itertools

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Protocol

import numpy as np


class BufferFormat(Enum):
    COMPLEX = "rg32f"
    SCALAR = "r32f"
    VEC4 = "rgba32f"

    @property
    def dtype(self) -> np.dtype:
        if self is BufferFormat.COMPLEX:
            return np.dtype(np.complex64)
        return np.dtype(np.float32)

    @property
    def components(self) -> int:
        return {"rg32f": 2, "r32f": 1, "rgba32f": 4}[self.value]

    def array_shape(self, shape: tuple[int, int]) -> tuple[int, ...]:
        """numpy shape of a (height, width) buffer in this format."""
        if self is BufferFormat.VEC4:
            return (shape[0], shape[1], 4)
        return (shape[0], shape[1])


_buffer_ids = itertools.count(1)
_dispatch_ids = itertools.count(1)


@dataclass(frozen=True, eq=False)
class BufferHandle:
    """Opaque reference to a backend-owned 2D buffer of shape (height, width)."""

    name: str
    fmt: BufferFormat
    shape: tuple[int, int]
    id: int = field(default_factory=lambda: next(_buffer_ids))

    def __repr__(self) -> str:
        return f"BufferHandle({self.name!r}, {self.fmt.value}, {self.shape[1]}x{self.shape[0]})"


@dataclass(frozen=True)
class GroupCount:
    x: int
    y: int = 1
    z: int = 1

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.x, self.y, self.z)

    @classmethod
    def covering(cls, width: int, height: int, local_size: tuple[int, int]) -> "GroupCount":
        return cls(
            (width + local_size[0] - 1) // local_size[0],
            (height + local_size[1] - 1) // local_size[1],
            1,
        )


@dataclass(frozen=True)
class DispatchHandle:
    kernel_id: str
    serial: int = field(default_factory=lambda: next(_dispatch_ids))


class ComputeBackend(Protocol):
    """
    Everything the ocean core needs from its host. Dispatches may run asynchronously;
    barrier() is the only thing that orders a write before a later read.
    """

    def create_buffer(self, name: str, fmt: BufferFormat, shape: tuple[int, int]) -> BufferHandle:
        ...

    def release_buffer(self, buffer: BufferHandle) -> None:
        ...

    def upload(self, buffer: BufferHandle, data: np.ndarray) -> None:
        ...

    def download(self, buffer: BufferHandle) -> np.ndarray:
        ...

    def dispatch(
        self,
        kernel_id: str,
        groups: GroupCount,
        buffers: Mapping[str, BufferHandle],
        constants: Mapping[str, float | int],
    ) -> DispatchHandle:
        ...

    def barrier(self, resources: Iterable[BufferHandle]) -> None:
        ...

    def wait_for_completion(self, handle: DispatchHandle) -> None:
        ...
