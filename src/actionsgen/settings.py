from __future__ import annotations
import os

BUILD_FILE = os.environ.get("ACTIONSGEN_BUILD_FILE", "build.py")
ROOT = os.environ.get("ACTIONSGEN_ROOT", ".")
INDENT = int(os.environ.get("ACTIONSGEN_INDENT", "2"))

GITHUB_DIR = ".github"
WORKFLOWS_DIR = "workflows"
