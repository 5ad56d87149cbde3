# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


CHECKOUT_ACTION = "actions/checkout@v1"
UPLOAD_ARTIFACT_ACTION = "actions/upload-artifact@v1"


@dataclass(frozen=True)
class Target:
    """
    A build target as seen by the generator.

    `needs` lists targets that must run BEFORE this one.
    `artifacts` lists declared output path patterns (may contain `*`).
    """
    name: str
    needs: Tuple[str, ...] = ()
    artifacts: Tuple[str, ...] = ()


class ShortTrigger(str, Enum):
    """Events usable in the short `on: [push, pull_request]` form."""
    PUSH = "push"
    PULL_REQUEST = "pull_request"


@dataclass(frozen=True)
class WorkflowDescriptor:
    """
    Declarative description of one GitHub Actions workflow.

    A `None` filter means "no filter"; an empty tuple is still a filter.
    """
    name: str
    images: Tuple[str, ...]
    invoked_targets: Tuple[str, ...]

    on: Optional[Tuple[ShortTrigger, ...]] = None
    on_push_branches: Optional[Tuple[str, ...]] = None
    on_push_tags: Optional[Tuple[str, ...]] = None
    on_push_include_paths: Optional[Tuple[str, ...]] = None
    on_push_exclude_paths: Optional[Tuple[str, ...]] = None
    on_pull_request_branches: Optional[Tuple[str, ...]] = None
    on_pull_request_tags: Optional[Tuple[str, ...]] = None
    on_pull_request_include_paths: Optional[Tuple[str, ...]] = None
    on_pull_request_exclude_paths: Optional[Tuple[str, ...]] = None
    on_cron_schedule: Optional[str] = None

    import_secrets: Tuple[str, ...] = ()
    import_github_token_as: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("workflow name must not be empty")
        if not self.images:
            raise ValueError(f"workflow {self.name!r} needs at least one image")
        if not self.invoked_targets:
            raise ValueError(f"workflow {self.name!r} invokes no targets")

        keys = list(self.import_secrets)
        if self.import_github_token_as is not None:
            keys.insert(0, self.import_github_token_as)
        if len(set(keys)) != len(keys):
            dupes = sorted({k for k in keys if keys.count(k) > 1})
            raise ValueError(f"workflow {self.name!r} imports {dupes} more than once")


# ---------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class VcsTrigger:
    kind: ShortTrigger
    branches: Optional[Tuple[str, ...]] = None
    tags: Optional[Tuple[str, ...]] = None
    include_paths: Optional[Tuple[str, ...]] = None
    exclude_paths: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class ScheduledTrigger:
    cron: str


Trigger = Union[VcsTrigger, ScheduledTrigger]


# ---------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class CheckoutStep:
    uses: str = CHECKOUT_ACTION


@dataclass(frozen=True)
class RunStep:
    command: str
    imports: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UploadArtifactStep:
    name: str
    path: str
    uses: str = UPLOAD_ARTIFACT_ACTION


Step = Union[CheckoutStep, RunStep, UploadArtifactStep]


# ---------------------------------------------------------------------
# Jobs / document
# ---------------------------------------------------------------------

@dataclass
class Job:
    """A workflow job bound to one runner image."""
    name: str
    image: str
    steps: List[Step] = field(default_factory=list)


@dataclass
class Workflow:
    """
    The generated document.

    Invariant: when `short_triggers` is non-empty, `detailed_triggers` is empty.
    """
    name: str
    jobs: List[Job]
    short_triggers: Optional[List[ShortTrigger]] = None
    detailed_triggers: List[Trigger] = field(default_factory=list)
