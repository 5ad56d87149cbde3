# generator.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .artifacts import ArtifactRegistry, artifact_name, relative_to_root, resolve_artifact_paths
from .errors import MisconfigurationError
from .model import (
    CheckoutStep,
    Job,
    RunStep,
    ScheduledTrigger,
    ShortTrigger,
    Step,
    Target,
    Trigger,
    UploadArtifactStep,
    VcsTrigger,
    Workflow,
    WorkflowDescriptor,
)
from .planner import relevant_targets
from .ui.console import get_console
from .writer import render, workflow_path, write_workflow

WINDOWS_INVOCATION = "powershell .\\build.ps1"
UNIX_INVOCATION = "./build.sh"
GITHUB_TOKEN_SECRET = "GITHUB_TOKEN"


# ---------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------

def collect_triggers(descriptor: WorkflowDescriptor) -> List[Trigger]:
    """Push, then pull request, then schedule; each only when configured."""
    d = descriptor
    triggers: List[Trigger] = []

    if any(f is not None for f in (
        d.on_push_branches, d.on_push_tags, d.on_push_include_paths, d.on_push_exclude_paths,
    )):
        triggers.append(VcsTrigger(
            kind=ShortTrigger.PUSH,
            branches=d.on_push_branches,
            tags=d.on_push_tags,
            include_paths=d.on_push_include_paths,
            exclude_paths=d.on_push_exclude_paths,
        ))

    if any(f is not None for f in (
        d.on_pull_request_branches, d.on_pull_request_tags,
        d.on_pull_request_include_paths, d.on_pull_request_exclude_paths,
    )):
        triggers.append(VcsTrigger(
            kind=ShortTrigger.PULL_REQUEST,
            branches=d.on_pull_request_branches,
            tags=d.on_pull_request_tags,
            include_paths=d.on_pull_request_include_paths,
            exclude_paths=d.on_pull_request_exclude_paths,
        ))

    if d.on_cron_schedule is not None:
        triggers.append(ScheduledTrigger(cron=d.on_cron_schedule))

    return triggers


# ---------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------

def secret_reference(secret: str) -> str:
    return f"${{{{ secrets.{secret} }}}}"


def collect_imports(descriptor: WorkflowDescriptor) -> Dict[str, str]:
    imports: Dict[str, str] = {}
    if descriptor.import_github_token_as is not None:
        imports[descriptor.import_github_token_as] = secret_reference(GITHUB_TOKEN_SECRET)
    for secret in descriptor.import_secrets:
        imports[secret] = secret_reference(secret)
    return imports


# ---------------------------------------------------------------------
# Steps / jobs
# ---------------------------------------------------------------------

@dataclass
class GenerationContext:
    """Everything a strategy hook may need for one workflow."""
    descriptor: WorkflowDescriptor
    relevant_targets: List[Target]
    root: Path
    registry: ArtifactRegistry
    strategy: "GenerationStrategy"


def invocation_command(image: str, invoked_targets: Sequence[str]) -> str:
    prefix = WINDOWS_INVOCATION if image.lower().startswith("windows") else UNIX_INVOCATION
    return f"{prefix} {' '.join(invoked_targets)}"


def synthesize_steps(ctx: GenerationContext, image: str) -> List[Step]:
    steps: List[Step] = [CheckoutStep()]
    steps.append(RunStep(
        command=invocation_command(image, ctx.descriptor.invoked_targets),
        imports=ctx.strategy.imports(ctx.descriptor),
    ))

    paths, skipped = resolve_artifact_paths(ctx.relevant_targets, ctx.registry, ctx.root)
    for pattern in skipped:
        get_console().print_debug(
            f"[{ctx.descriptor.name}] no wildcard-free ancestor for artifact {pattern!r}, skipping"
        )
    for p in paths:
        steps.append(UploadArtifactStep(name=artifact_name(p), path=relative_to_root(p, ctx.root)))

    return steps


def job_name(image: str) -> str:
    return image.replace(".", "_")


def build_job(ctx: GenerationContext, image: str) -> Job:
    return Job(name=job_name(image), image=image, steps=ctx.strategy.steps(ctx, image))


@dataclass(frozen=True)
class GenerationStrategy:
    """
    Hooks used by `assemble`. Swap any of them with dataclasses.replace:

        strategy = replace(DEFAULT_STRATEGY, imports=my_imports)
    """
    triggers: Callable[[WorkflowDescriptor], List[Trigger]] = collect_triggers
    imports: Callable[[WorkflowDescriptor], Dict[str, str]] = collect_imports
    steps: Callable[[GenerationContext, str], List[Step]] = synthesize_steps
    job: Callable[[GenerationContext, str], Job] = build_job


DEFAULT_STRATEGY = GenerationStrategy()


# ---------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------

def assemble(
    descriptor: WorkflowDescriptor,
    targets: Sequence[Target],
    *,
    root: str | Path = ".",
    registry: Optional[ArtifactRegistry] = None,
    strategy: Optional[GenerationStrategy] = None,
) -> Workflow:
    """
    Build the workflow document for `descriptor`.

    `targets` are the already-resolved relevant targets, in plan order.
    Raises MisconfigurationError when both short and detailed triggers are set,
    or when two images produce the same job name.
    Patterns in `registry` are added to the targets' own artifacts.
    """
    strategy = strategy or DEFAULT_STRATEGY
    ctx = GenerationContext(
        descriptor=descriptor,
        relevant_targets=list(targets),
        root=Path(root).resolve(),
        registry=ArtifactRegistry.from_targets(targets).merged(registry),
        strategy=strategy,
    )

    short = list(descriptor.on) if descriptor.on else None
    detailed = strategy.triggers(descriptor)
    if short and detailed:
        raise MisconfigurationError(
            kind="misconfiguration",
            workflow=descriptor.name,
            message="short triggers (on) cannot be combined with detailed trigger filters",
            details={"on": [t.value for t in short], "detailed": len(detailed)},
        )

    jobs = [strategy.job(ctx, image) for image in descriptor.images]
    names = [j.name for j in jobs]
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise MisconfigurationError(
            kind="misconfiguration",
            workflow=descriptor.name,
            message="images map to duplicate job names",
            details={"jobs": dupes, "images": list(descriptor.images)},
        )

    if not short and not detailed:
        get_console().print_debug(
            f"[{descriptor.name}] no triggers configured; GitHub rejects an empty `on`"
        )

    return Workflow(
        name=descriptor.name,
        short_triggers=short,
        detailed_triggers=[] if short else detailed,
        jobs=jobs,
    )


def build_workflow(
    descriptor: WorkflowDescriptor,
    all_targets: Sequence[Target],
    *,
    root: str | Path = ".",
    registry: Optional[ArtifactRegistry] = None,
    strategy: Optional[GenerationStrategy] = None,
) -> Workflow:
    """Resolve the relevant targets of `descriptor`, then assemble."""
    relevant = relevant_targets(all_targets, descriptor.invoked_targets)
    get_console().print_debug(
        f"[{descriptor.name}] relevant targets: {[t.name for t in relevant]}"
    )
    return assemble(
        descriptor,
        relevant,
        root=root,
        registry=registry,
        strategy=strategy,
    )


def generate(
    descriptor: WorkflowDescriptor,
    all_targets: Sequence[Target],
    root: str | Path = ".",
    *,
    registry: Optional[ArtifactRegistry] = None,
    strategy: Optional[GenerationStrategy] = None,
) -> Path:
    """Generate one workflow file and return its path."""
    workflow = build_workflow(
        descriptor, all_targets, root=root, registry=registry, strategy=strategy,
    )
    return write_workflow(workflow, root)


def generate_all(definition, root: str | Path = ".") -> List[Path]:
    """Generate every workflow registered on a BuildDefinition."""
    return [
        generate(
            d,
            definition.targets,
            root,
            registry=definition.registry,
            strategy=definition.strategy,
        )
        for d in definition.workflows
    ]


def check(definition, root: str | Path = ".") -> List[str]:
    """
    Return the names of workflows whose file is missing or differs
    from a fresh render.
    """
    stale: List[str] = []
    for d in definition.workflows:
        workflow = build_workflow(
            d,
            definition.targets,
            root=root,
            registry=definition.registry,
            strategy=definition.strategy,
        )
        path = workflow_path(root, workflow.name)
        if not path.exists() or path.read_text(encoding="utf-8") != render(workflow):
            stale.append(workflow.name)
    return stale
