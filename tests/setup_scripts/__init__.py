#!/usr/bin/env python3
# file: tests/setup_scripts/__init__.py
# version: 1.0.0
# guid: 0e6b2d94-7a1c-4f35-9b8e-d3c5a7f1e2b6

"""Test package configuration for the npm setup scripts."""

from __future__ import annotations

from pathlib import Path
import sys

SCRIPTS_PATH = Path(__file__).resolve().parents[2] / "scripts"
if str(SCRIPTS_PATH) not in sys.path:
    sys.path.insert(0, str(SCRIPTS_PATH))
