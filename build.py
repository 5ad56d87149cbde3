# build.py
# Build definition for this repository: targets plus the workflows generated from them.
from __future__ import annotations

from actionsgen import BuildDefinition, github_actions, target, workflow


def build() -> BuildDefinition:
    definition = BuildDefinition()

    definition.add_targets(
        target("Restore"),
        target("Lint", needs=["Restore"]),
        target("Test", needs=["Restore"], artifacts=["output/test-results/*.xml"]),
        target("Pack", needs=["Test"], artifacts=["output/dist/*.whl", "output/dist/*.tar.gz"]),
    )

    definition.register(
        github_actions(
            "continuous",
            "ubuntu-latest",
            "windows-latest",
            invoked_targets=["Lint", "Test"],
            on_push_branches=["main"],
            on_pull_request_branches=["main"],
        ),
        workflow("release")
        .runs_on("ubuntu-latest")
        .invokes("Pack")
        .on_push(tags=["v*"])
        .import_secrets("PYPI_TOKEN")
        .import_github_token_as("GH_TOKEN")
        .build(),
        github_actions(
            "nightly",
            "ubuntu-latest",
            invoked_targets=["Test"],
            on_cron_schedule="0 3 * * *",
        ),
    )

    return definition
