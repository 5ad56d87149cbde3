# loader.py
from __future__ import annotations

import runpy
from pathlib import Path

from .dsl import BuildDefinition
from .model import Target, WorkflowDescriptor


def load_build(path: str | Path) -> BuildDefinition:
    """
    Load a build definition from a python file path.

    The file must define either:
      - build() -> BuildDefinition
      - TARGETS = [Target, ...] and WORKFLOWS = [WorkflowDescriptor, ...]

    Returns:
      BuildDefinition
    """
    build_path = Path(path).expanduser().resolve()
    if not build_path.exists():
        raise FileNotFoundError(f"Build file not found: {build_path}")
    if build_path.suffix != ".py":
        raise ValueError(f"Build file must be a .py file, got: {build_path.name}")

    module_name = f"actionsgen_build_{build_path.stem}"
    globals_dict = runpy.run_path(str(build_path), run_name=module_name)

    if "build" in globals_dict and callable(globals_dict["build"]):
        definition = globals_dict["build"]()
        if not isinstance(definition, BuildDefinition):
            raise TypeError(
                f"build() must return a BuildDefinition, got {type(definition).__name__}"
            )
        return definition

    targets = globals_dict.get("TARGETS")
    workflows = globals_dict.get("WORKFLOWS")
    if not isinstance(targets, list) or not all(isinstance(t, Target) for t in targets):
        raise TypeError(
            "Build file must define build() -> BuildDefinition "
            "or TARGETS = [Target, ...] and WORKFLOWS = [WorkflowDescriptor, ...]."
        )
    if not isinstance(workflows, list) or not all(isinstance(w, WorkflowDescriptor) for w in workflows):
        raise TypeError("WORKFLOWS must be a list of WorkflowDescriptor.")

    return BuildDefinition().add_targets(*targets).register(*workflows)
