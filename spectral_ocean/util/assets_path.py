# -*- coding: utf-8 -*-

"""
Filename: assets_path.py
Author: storro
Date: 2026-02-11
Description: Locates the compute shaders shipped inside the package
"""

import os

from pathlib import Path
from panda3d.core import Filename

# Package data: spectral_ocean/assets
ASSETS_DIR = Path(__file__).resolve().parents[1] / "assets"
SHADER_DIR = ASSETS_DIR / "shaders"


def shader_os_path(name: str) -> Path:
    """Native path of a shader file, raising FileNotFoundError if it is not packaged."""
    path = SHADER_DIR / name
    if not path.is_file():
        raise FileNotFoundError(f"compute shader {name!r} not found in {SHADER_DIR}")
    return path


def shader_path(name: str) -> str:
    """Panda3D-style path of a shader, as Shader.load_compute expects it."""
    return str(Filename.from_os_specific(os.fspath(shader_os_path(name))))
