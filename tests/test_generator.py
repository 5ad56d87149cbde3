"""Tests for job, step, import and document assembly."""

from dataclasses import replace

import pytest

from actionsgen import DEFAULT_STRATEGY, BuildDefinition, artifacts, assemble, github_actions, target
from actionsgen.artifacts import ArtifactRegistry
from actionsgen.errors import GenerationError, MisconfigurationError
from actionsgen.generator import build_workflow, collect_imports, job_name
from actionsgen.model import CheckoutStep, RunStep, ShortTrigger, UploadArtifactStep
from actionsgen.ui.console import Console, set_console


def _descriptor(*images, **kwargs):
    kwargs.setdefault("invoked_targets", ["Test", "Pack"])
    return github_actions("ci", *(images or ("ubuntu-latest",)), **kwargs)


class TestJobs:
    """Tests for job naming and the run step."""

    def test_job_name_replaces_dots(self) -> None:
        assert job_name("Windows.latest") == "Windows_latest"

    def test_one_job_per_image_in_order(self, targets) -> None:
        wf = assemble(_descriptor("Ubuntu.latest", "Windows.latest"), [], root="/repo")

        assert [j.name for j in wf.jobs] == ["Ubuntu_latest", "Windows_latest"]
        assert [j.image for j in wf.jobs] == ["Ubuntu.latest", "Windows.latest"]

    def test_windows_image_uses_powershell(self) -> None:
        wf = assemble(_descriptor("Windows.latest"), [], root="/repo")
        run = wf.jobs[0].steps[1]

        assert isinstance(run, RunStep)
        assert run.command.startswith("powershell .\\build.ps1")
        assert run.command == "powershell .\\build.ps1 Test Pack"

    def test_other_images_use_shell_script(self) -> None:
        wf = assemble(_descriptor("Ubuntu.latest"), [], root="/repo")

        assert wf.jobs[0].steps[1].command == "./build.sh Test Pack"

    def test_windows_match_is_case_insensitive(self) -> None:
        wf = assemble(_descriptor("windows-2022"), [], root="/repo")

        assert wf.jobs[0].steps[1].command.startswith("powershell")

    def test_first_step_is_checkout(self) -> None:
        wf = assemble(_descriptor(), [], root="/repo")

        assert wf.jobs[0].steps[0] == CheckoutStep()
        assert wf.jobs[0].steps[0].uses == "actions/checkout@v1"


class TestImports:
    """Tests for collect_imports()."""

    def test_token_alias_comes_first(self) -> None:
        imports = collect_imports(_descriptor(
            import_github_token_as="GH_TOKEN",
            import_secrets=["NUGET_KEY"],
        ))

        assert list(imports.items()) == [
            ("GH_TOKEN", "${{ secrets.GITHUB_TOKEN }}"),
            ("NUGET_KEY", "${{ secrets.NUGET_KEY }}"),
        ]

    def test_secrets_keep_given_order(self) -> None:
        imports = collect_imports(_descriptor(import_secrets=["B", "A"]))

        assert list(imports) == ["B", "A"]

    def test_no_imports(self) -> None:
        assert collect_imports(_descriptor()) == {}

    def test_imports_reach_run_step(self) -> None:
        wf = assemble(_descriptor(import_github_token_as="GH_TOKEN"), [], root="/repo")

        assert wf.jobs[0].steps[1].imports == {"GH_TOKEN": "${{ secrets.GITHUB_TOKEN }}"}


class TestArtifactSteps:
    """Tests for upload-artifact steps."""

    def test_shared_directory_yields_one_step(self, tmp_path) -> None:
        relevant = [
            target("Pack", artifacts=["output/packages/*.nupkg"]),
            target("PackSymbols", artifacts=["output/packages/*.snupkg"]),
        ]

        wf = assemble(_descriptor(), relevant, root=tmp_path)
        uploads = [s for s in wf.jobs[0].steps if isinstance(s, UploadArtifactStep)]

        assert uploads == [UploadArtifactStep(name="packages", path="output/packages")]

    def test_uploads_follow_plan_order(self, targets, tmp_path) -> None:
        wf = build_workflow(_descriptor(), targets, root=tmp_path)
        uploads = [s for s in wf.jobs[0].steps if isinstance(s, UploadArtifactStep)]

        assert [u.name for u in uploads] == ["test-results", "packages"]
        assert [u.path for u in uploads] == ["output/test-results", "output/packages"]

    def test_no_artifacts_no_upload_steps(self) -> None:
        wf = assemble(_descriptor(), [target("Test")], root="/repo")

        assert len(wf.jobs[0].steps) == 2


class TestAssemble:
    """Tests for assemble()."""

    def test_detailed_triggers(self) -> None:
        wf = assemble(_descriptor(on_push_branches=["main"]), [], root="/repo")

        assert wf.short_triggers is None
        assert len(wf.detailed_triggers) == 1

    def test_short_triggers(self) -> None:
        wf = assemble(_descriptor(on=["push", "pull_request"]), [], root="/repo")

        assert wf.short_triggers == [ShortTrigger.PUSH, ShortTrigger.PULL_REQUEST]
        assert wf.detailed_triggers == []

    def test_short_and_detailed_triggers_fail(self) -> None:
        descriptor = _descriptor(on=["push"], on_push_branches=["main"])

        with pytest.raises(AssertionError):
            assemble(descriptor, [], root="/repo")

    def test_misconfiguration_is_structured(self) -> None:
        descriptor = _descriptor(on=["push"], on_cron_schedule="0 0 * * *")

        with pytest.raises(MisconfigurationError) as exc_info:
            assemble(descriptor, [], root="/repo")

        err = exc_info.value
        assert isinstance(err, GenerationError)
        assert err.kind == "misconfiguration"
        assert err.workflow == "ci"
        assert "workflow=ci" in str(err)

    def test_empty_short_list_falls_back_to_detailed(self) -> None:
        wf = assemble(_descriptor(on=[], on_push_branches=["main"]), [], root="/repo")

        assert wf.short_triggers is None
        assert len(wf.detailed_triggers) == 1

    def test_strategy_hooks_can_be_replaced(self) -> None:
        strategy = replace(DEFAULT_STRATEGY, imports=lambda d: {"CUSTOM": "value"})

        wf = assemble(_descriptor(import_secrets=["IGNORED"]), [], root="/repo", strategy=strategy)

        assert wf.jobs[0].steps[1].imports == {"CUSTOM": "value"}

    def test_steps_hook_replaces_all_steps(self) -> None:
        strategy = replace(DEFAULT_STRATEGY, steps=lambda ctx, image: [CheckoutStep()])

        wf = assemble(_descriptor(), [], root="/repo", strategy=strategy)

        assert wf.jobs[0].steps == [CheckoutStep()]


class TestDescriptorValidation:
    def test_requires_invoked_targets(self) -> None:
        with pytest.raises(ValueError, match="invokes no targets"):
            github_actions("ci", "ubuntu-latest", invoked_targets=[])

    def test_rejects_unknown_short_trigger(self) -> None:
        with pytest.raises(ValueError):
            github_actions("ci", "ubuntu-latest", invoked_targets=["Test"], on=["release"])

    def test_token_alias_cannot_shadow_a_secret(self) -> None:
        with pytest.raises(ValueError, match=r"imports \['TOKEN'\] more than once"):
            github_actions(
                "ci", "ubuntu-latest", invoked_targets=["Test"],
                import_github_token_as="TOKEN", import_secrets=["TOKEN"],
            )

    def test_repeated_secret_rejected(self) -> None:
        with pytest.raises(ValueError, match="more than once"):
            github_actions("ci", "ubuntu-latest", invoked_targets=["Test"], import_secrets=["A", "B", "A"])


class TestJobNameCollisions:
    """Every image must end up as its own job in the document."""

    def test_images_colliding_after_normalization(self) -> None:
        with pytest.raises(MisconfigurationError) as exc_info:
            assemble(_descriptor("ubuntu.latest", "ubuntu_latest"), [], root="/repo")

        assert exc_info.value.details["jobs"] == ["ubuntu_latest"]

    def test_same_image_twice(self) -> None:
        with pytest.raises(AssertionError):
            assemble(_descriptor("ubuntu-latest", "ubuntu-latest"), [], root="/repo")


class TestRegistryMerge:
    """Registered patterns add to the targets' own artifacts."""

    def test_extra_patterns_keep_target_artifacts(self, tmp_path) -> None:
        pack = target("Pack", artifacts=["out/pkg/*.nupkg"])
        registry = ArtifactRegistry().register("Pack", "site/*")

        wf = assemble(_descriptor(), [pack], root=tmp_path, registry=registry)
        uploads = [s for s in wf.jobs[0].steps if isinstance(s, UploadArtifactStep)]

        assert [u.path for u in uploads] == ["out/pkg", "site"]

    def test_build_definition_registry(self, tmp_path) -> None:
        pack = target("Pack", artifacts=["out/pkg/*.nupkg"])
        definition = BuildDefinition(registry=ArtifactRegistry().register("Pack", "site/*"))
        definition.add_targets(pack).register(_descriptor(invoked_targets=["Pack"]))

        wf = build_workflow(
            definition.workflows[0], definition.targets, root=tmp_path, registry=definition.registry,
        )
        uploads = [s for s in wf.jobs[0].steps if isinstance(s, UploadArtifactStep)]

        assert [u.name for u in uploads] == ["pkg", "site"]


class TestDebugOutput:
    """Best-effort cases are reported through the console in debug mode."""

    @pytest.fixture
    def debug_console(self):
        set_console(Console(debug=True))

    def test_artifact_without_usable_ancestor_is_skipped(self, monkeypatch, capsys, debug_console) -> None:
        monkeypatch.setattr(artifacts, "artifact_root", lambda path: None)

        wf = assemble(_descriptor(), [target("Pack", artifacts=["*/*.nupkg"])], root="/repo")

        assert not any(isinstance(s, UploadArtifactStep) for s in wf.jobs[0].steps)
        assert "no wildcard-free ancestor for artifact '*/*.nupkg'" in capsys.readouterr().err

    def test_no_triggers_is_reported(self, capsys, debug_console) -> None:
        wf = assemble(_descriptor(), [], root="/repo")

        assert wf.detailed_triggers == []
        assert "no triggers configured" in capsys.readouterr().err

    def test_triggers_configured_no_message(self, capsys, debug_console) -> None:
        assemble(_descriptor(on=["push"]), [], root="/repo")

        assert "no triggers configured" not in capsys.readouterr().err
