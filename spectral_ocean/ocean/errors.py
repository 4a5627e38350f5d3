# -*- coding: utf-8 -*-

"""
Filename: errors.py
Author: storro
Date: 2026-02-11
Description: Exceptions raised by the ocean simulation
"""


class OceanError(Exception):
    """Base class for every error raised by the ocean simulation."""


class ConfigError(OceanError, ValueError):
    """Invalid simulation parameters. Raised before any buffer is allocated."""


class DispatchFailure(OceanError, RuntimeError):
    """A compute kernel failed to execute. The tick that issued it is aborted."""

    def __init__(self, kernel_id: str, message: str) -> None:
        super().__init__(f"{kernel_id}: {message}")
        self.kernel_id = kernel_id


class BarrierError(OceanError, RuntimeError):
    """A dispatch would read or write a buffer without the required barrier."""


class OrchestratorStateError(OceanError, RuntimeError):
    """An operation was requested in a state where it is not legal."""
