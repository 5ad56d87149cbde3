# dsl.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .artifacts import ArtifactRegistry
from .generator import GenerationStrategy
from .model import ShortTrigger, Target, WorkflowDescriptor


def _opt(values: Optional[Iterable[str]]) -> Optional[Tuple[str, ...]]:
    # None stays None: "no filter" differs from an empty filter
    return None if values is None else tuple(values)


def _short(values: Optional[Iterable[Union[str, ShortTrigger]]]) -> Optional[Tuple[ShortTrigger, ...]]:
    return None if values is None else tuple(ShortTrigger(v) for v in values)


# ---------------------------------------------------------------------
# Target helper
# ---------------------------------------------------------------------

def target(
    name: str,
    *,
    needs: Optional[List[str]] = None,
    artifacts: Optional[List[str]] = None,
) -> Target:
    """Create a build target."""
    return Target(name=name, needs=tuple(needs or ()), artifacts=tuple(artifacts or ()))


# ---------------------------------------------------------------------
# Functional workflow helper
# ---------------------------------------------------------------------

def github_actions(
    name: str,
    image: str,
    *images: str,  # allow: github_actions("ci", "ubuntu-latest", "windows-latest")
    invoked_targets: Sequence[str],
    on: Optional[Sequence[Union[str, ShortTrigger]]] = None,
    on_push_branches: Optional[Sequence[str]] = None,
    on_push_tags: Optional[Sequence[str]] = None,
    on_push_include_paths: Optional[Sequence[str]] = None,
    on_push_exclude_paths: Optional[Sequence[str]] = None,
    on_pull_request_branches: Optional[Sequence[str]] = None,
    on_pull_request_tags: Optional[Sequence[str]] = None,
    on_pull_request_include_paths: Optional[Sequence[str]] = None,
    on_pull_request_exclude_paths: Optional[Sequence[str]] = None,
    on_cron_schedule: Optional[str] = None,
    import_secrets: Optional[Sequence[str]] = None,
    import_github_token_as: Optional[str] = None,
) -> WorkflowDescriptor:
    return WorkflowDescriptor(
        name=name,
        images=(image, *images),
        invoked_targets=tuple(invoked_targets),
        on=_short(on),
        on_push_branches=_opt(on_push_branches),
        on_push_tags=_opt(on_push_tags),
        on_push_include_paths=_opt(on_push_include_paths),
        on_push_exclude_paths=_opt(on_push_exclude_paths),
        on_pull_request_branches=_opt(on_pull_request_branches),
        on_pull_request_tags=_opt(on_pull_request_tags),
        on_pull_request_include_paths=_opt(on_pull_request_include_paths),
        on_pull_request_exclude_paths=_opt(on_pull_request_exclude_paths),
        on_cron_schedule=on_cron_schedule,
        import_secrets=tuple(import_secrets or ()),
        import_github_token_as=import_github_token_as,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class WorkflowBuilder:
    def __init__(self, name: str):
        self.name = name
        self._images: list[str] = []
        self._invoked: list[str] = []
        self._on: Optional[list[ShortTrigger]] = None
        self._push: dict[str, Optional[list[str]]] = {}
        self._pull_request: dict[str, Optional[list[str]]] = {}
        self._cron: Optional[str] = None
        self._secrets: list[str] = []
        self._token_alias: Optional[str] = None

    def runs_on(self, *images: str):
        self._images.extend(images)
        return self

    def invokes(self, *targets: str):
        self._invoked.extend(targets)
        return self

    def on(self, *triggers: Union[str, ShortTrigger]):
        self._on = [ShortTrigger(t) for t in triggers]
        return self

    def on_push(
        self,
        *,
        branches: Optional[Sequence[str]] = None,
        tags: Optional[Sequence[str]] = None,
        include_paths: Optional[Sequence[str]] = None,
        exclude_paths: Optional[Sequence[str]] = None,
    ):
        self._push = {
            "branches": branches, "tags": tags,
            "include_paths": include_paths, "exclude_paths": exclude_paths,
        }
        return self

    def on_pull_request(
        self,
        *,
        branches: Optional[Sequence[str]] = None,
        tags: Optional[Sequence[str]] = None,
        include_paths: Optional[Sequence[str]] = None,
        exclude_paths: Optional[Sequence[str]] = None,
    ):
        self._pull_request = {
            "branches": branches, "tags": tags,
            "include_paths": include_paths, "exclude_paths": exclude_paths,
        }
        return self

    def on_schedule(self, cron: str):
        self._cron = cron
        return self

    def import_secrets(self, *names: str):
        self._secrets.extend(names)
        return self

    def import_github_token_as(self, alias: str):
        self._token_alias = alias
        return self

    def build(self) -> WorkflowDescriptor:
        if not self._images:
            raise ValueError(f"Workflow '{self.name}' has no images")

        return github_actions(
            self.name,
            *self._images,
            invoked_targets=self._invoked,
            on=self._on,
            on_push_branches=self._push.get("branches"),
            on_push_tags=self._push.get("tags"),
            on_push_include_paths=self._push.get("include_paths"),
            on_push_exclude_paths=self._push.get("exclude_paths"),
            on_pull_request_branches=self._pull_request.get("branches"),
            on_pull_request_tags=self._pull_request.get("tags"),
            on_pull_request_include_paths=self._pull_request.get("include_paths"),
            on_pull_request_exclude_paths=self._pull_request.get("exclude_paths"),
            on_cron_schedule=self._cron,
            import_secrets=self._secrets,
            import_github_token_as=self._token_alias,
        )


def workflow(name: str) -> WorkflowBuilder:
    """Convenience: workflow('ci').runs_on('ubuntu-latest').invokes('Test').build()"""
    return WorkflowBuilder(name)


# ---------------------------------------------------------------------
# Build definition (explicit registration)
# ---------------------------------------------------------------------

@dataclass
class BuildDefinition:
    """
    Targets plus the workflows generated from them.

    Example:
        build = BuildDefinition()
        build.add_targets(target("Compile"), target("Test", needs=["Compile"]))
        build.register(github_actions("ci", "ubuntu-latest", invoked_targets=["Test"]))
    """
    targets: List[Target] = field(default_factory=list)
    workflows: List[WorkflowDescriptor] = field(default_factory=list)
    registry: Optional[ArtifactRegistry] = None
    strategy: Optional[GenerationStrategy] = None

    def add_targets(self, *targets: Target) -> "BuildDefinition":
        self.targets.extend(targets)
        return self

    def register(self, *workflows: WorkflowDescriptor) -> "BuildDefinition":
        known = {w.name for w in self.workflows}
        for w in workflows:
            if w.name in known:
                raise ValueError(f"Duplicate workflow name: {w.name}")
            known.add(w.name)
            self.workflows.append(w)
        return self

    def get_workflow(self, name: str) -> WorkflowDescriptor:
        for w in self.workflows:
            if w.name == name:
                return w
        raise KeyError(f"Unknown workflow '{name}'. Known workflows: {[w.name for w in self.workflows]}")
