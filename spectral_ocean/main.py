# -*- coding: utf-8 -*-

"""
Filename: main.py
Author: storro
Date: 2026-02-11
Description: Main application entry point
"""

from spectral_ocean.app.ocean_app import OceanApp


def main() -> None:
    OceanApp().run()


if __name__ == "__main__":
    main()
