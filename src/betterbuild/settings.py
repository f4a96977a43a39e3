from __future__ import annotations
import os

PROJECT_FILE = os.environ.get("BETTERBUILD_PROJECT", "buildfile.py")
DEBUG = os.environ.get("BETTERBUILD_DEBUG", "") not in ("", "0", "false")
COMPILER_TASK_PREFIX = "compile."
