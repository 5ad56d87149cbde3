# writer.py
from __future__ import annotations

from pathlib import Path
from typing import IO, Any, Dict, Optional

import yaml

from . import settings
from .model import (
    CheckoutStep,
    Job,
    RunStep,
    ScheduledTrigger,
    Step,
    Trigger,
    UploadArtifactStep,
    VcsTrigger,
    Workflow,
)


class _IndentDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their parent key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False):
        return super().increase_indent(flow, False)


def workflow_path(root: str | Path, name: str) -> Path:
    return Path(root) / settings.GITHUB_DIR / settings.WORKFLOWS_DIR / f"{name}.yml"


# ---------------------------------------------------------------------
# Document -> plain data
# ---------------------------------------------------------------------

def trigger_to_dict(trigger: Trigger) -> Dict[str, Any]:
    if isinstance(trigger, ScheduledTrigger):
        return {"schedule": [{"cron": trigger.cron}]}

    if isinstance(trigger, VcsTrigger):
        filters: Dict[str, Any] = {}
        if trigger.branches is not None:
            filters["branches"] = list(trigger.branches)
        if trigger.tags is not None:
            filters["tags"] = list(trigger.tags)
        if trigger.include_paths is not None:
            filters["paths"] = list(trigger.include_paths)
        if trigger.exclude_paths is not None:
            filters["paths-ignore"] = list(trigger.exclude_paths)
        return {trigger.kind.value: filters}

    raise TypeError(f"Unknown trigger type: {type(trigger).__name__}")


def step_to_dict(step: Step) -> Dict[str, Any]:
    if isinstance(step, CheckoutStep):
        return {"uses": step.uses}

    if isinstance(step, RunStep):
        step_dict: Dict[str, Any] = {
            "name": f"Run '{step.command}'",
            "run": step.command,
        }
        if step.imports:
            step_dict["env"] = dict(step.imports)
        return step_dict

    if isinstance(step, UploadArtifactStep):
        return {
            "uses": step.uses,
            "with": {"name": step.name, "path": step.path},
        }

    raise TypeError(f"Unknown step type: {type(step).__name__}")


def job_to_dict(job: Job) -> Dict[str, Any]:
    return {
        "name": job.name,
        "runs-on": job.image,
        "steps": [step_to_dict(s) for s in job.steps],
    }


def workflow_to_dict(workflow: Workflow) -> Dict[str, Any]:
    """
    Convert a Workflow document to the mapping that gets serialized.

    Key order follows the GitHub Actions layout: name, on, jobs.
    """
    on: Any
    if workflow.short_triggers:
        on = [t.value for t in workflow.short_triggers]
    else:
        on = {}
        for trigger in workflow.detailed_triggers:
            on.update(trigger_to_dict(trigger))

    return {
        "name": workflow.name,
        "on": on,
        "jobs": {job.name: job_to_dict(job) for job in workflow.jobs},
    }


# ---------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------

def _dump(data: Dict[str, Any], stream: Optional[IO[str]] = None, indent: Optional[int] = None):
    return yaml.dump(
        data,
        stream,
        Dumper=_IndentDumper,
        indent=indent or settings.INDENT,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=1 << 16,
    )


def render(workflow: Workflow, indent: Optional[int] = None) -> str:
    """Return the YAML text of `workflow`."""
    return _dump(workflow_to_dict(workflow), indent=indent)


def write_workflow(workflow: Workflow, root: str | Path = ".", indent: Optional[int] = None) -> Path:
    """
    Write `workflow` to <root>/.github/workflows/<name>.yml and return the path.

    Existing files are overwritten.
    """
    path = workflow_path(root, workflow.name)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = workflow_to_dict(workflow)
    with path.open("w", encoding="utf-8") as f:
        _dump(data, f, indent=indent)
    return path

