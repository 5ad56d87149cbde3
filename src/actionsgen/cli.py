# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from actionsgen import settings
from actionsgen.dsl import BuildDefinition
from actionsgen.errors import GenerationError
from actionsgen.generator import check as check_workflows
from actionsgen.generator import generate as generate_workflow
from actionsgen.loader import load_build
from actionsgen.planner import relevant_targets
from actionsgen.ui.console import Console, set_console, get_console


def discover_build(build_arg: str) -> Path:
    """
    Resolve the build file path.

    Raises:
        SystemExit: If the build file cannot be found
    """
    console = get_console()

    build_path = Path(build_arg)
    if not build_path.exists() and build_path.suffix != ".py":
        build_path = Path(str(build_path) + ".py")
    if not build_path.exists():
        console.print_error(
            "Build file not found",
            f"Could not find build file: {build_arg}",
            suggestion="Create a build file or specify a different path:\n  actionsgen generate --build my_build.py",
        )
        sys.exit(1)
    return build_path


def _load(ctx, build: str) -> BuildDefinition:
    console = get_console()
    build_path = discover_build(build)
    try:
        return load_build(build_path)
    except Exception as e:
        console.print_error(
            "Failed to load build definition",
            f"Could not load build definition from {build_path}",
            details=[str(e)],
        )
        if ctx.obj.get("debug", False):
            import traceback
            traceback.print_exc()
        sys.exit(1)


def _select(ctx, definition: BuildDefinition, workflow: str | None) -> BuildDefinition:
    if workflow is None:
        return definition
    try:
        selected = definition.get_workflow(workflow)
    except KeyError as e:
        get_console().print_error("Unknown workflow", str(e.args[0]))
        sys.exit(1)
    return BuildDefinition(
        targets=definition.targets,
        workflows=[selected],
        registry=definition.registry,
        strategy=definition.strategy,
    )


build_option = click.option(
    "--build",
    default=settings.BUILD_FILE,
    show_default=True,
    help="Build definition file (env: ACTIONSGEN_BUILD_FILE)",
)
root_option = click.option(
    "--root",
    default=settings.ROOT,
    show_default=True,
    help="Repository root the workflows are written under (env: ACTIONSGEN_ROOT)",
)
workflow_option = click.option("--workflow", default=None, help="Only this workflow (by name)")


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """actionsgen — generate GitHub Actions workflows from a build definition."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@build_option
@root_option
@workflow_option
@click.pass_context
def generate(ctx, build, root, workflow):
    """Write .github/workflows/<name>.yml for each workflow."""
    console = get_console()
    definition = _select(ctx, _load(ctx, build), workflow)

    console.print_generation_started(
        build_file=build,
        root=str(Path(root).resolve()),
        workflow_count=len(definition.workflows),
    )

    try:
        for descriptor in definition.workflows:
            path = generate_workflow(
                descriptor,
                definition.targets,
                root,
                registry=definition.registry,
                strategy=definition.strategy,
            )
            console.print_written(descriptor.name, str(path))
    except GenerationError as e:
        console.print_error(
            "Invalid workflow configuration",
            e.message,
            details=[f"workflow={e.workflow}"] + [f"{k}={v}" for k, v in e.details.items()],
        )
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command()
@build_option
@root_option
@workflow_option
@click.pass_context
def check(ctx, build, root, workflow):
    """Exit 1 when a workflow file is missing or out of date."""
    console = get_console()
    definition = _select(ctx, _load(ctx, build), workflow)

    try:
        stale = check_workflows(definition, root)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    for descriptor in definition.workflows:
        if descriptor.name in stale:
            console.print_stale(descriptor.name, f"{settings.GITHUB_DIR}/{settings.WORKFLOWS_DIR}/{descriptor.name}.yml")
        else:
            console.print_up_to_date(descriptor.name)

    if stale:
        console.print_info("\nRun `actionsgen generate` to update the workflow files.")
        sys.exit(1)


@cli.command()
@build_option
@workflow_option
@click.pass_context
def plan(ctx, build, workflow):
    """Print the targets each workflow's invocation needs, in order."""
    console = get_console()
    definition = _select(ctx, _load(ctx, build), workflow)

    try:
        for descriptor in definition.workflows:
            targets = relevant_targets(definition.targets, descriptor.invoked_targets)
            console.print_plan(descriptor.name, [t.name for t in targets])
    except ValueError as e:
        console.print_error("Cannot plan targets", str(e))
        sys.exit(1)


if __name__ == "__main__":
    cli()
