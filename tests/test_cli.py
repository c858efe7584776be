"""Tests for the deploy command"""

from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

import cli

runner = CliRunner()


class FakeStack:
    def __init__(self, work_dir: str, fail: bool = False):
        self.work_dir = work_dir
        self.fail = fail
        self.config = {}

    def set_config(self, key, value):
        self.config[key] = value.value

    def up(self, on_output=None):
        if self.fail:
            raise DeployFailed()
        on_output("Updating (dev)")
        return SimpleNamespace(
            summary=SimpleNamespace(result="succeeded"),
            outputs={"bucket_name": SimpleNamespace(value="123-us-east-1-hosting")},
        )


class DeployFailed(cli.auto.CommandError):
    def __init__(self):
        Exception.__init__(self, "certificate limit exceeded")

    def __str__(self):
        return "certificate limit exceeded"


@pytest.fixture
def project_dir(tmp_path):
    (tmp_path / "Pulumi.yaml").write_text("name: multisite-hosting\nruntime: python\n")
    return tmp_path


@pytest.fixture
def stacks(monkeypatch):
    created = {}

    def factory(fail=False):
        def create_or_select_stack(stack_name, work_dir):
            created[stack_name] = FakeStack(work_dir, fail=fail)
            return created[stack_name]

        monkeypatch.setattr(cli.auto, "create_or_select_stack", create_or_select_stack)
        return created

    return factory


class TestDeploy:
    def test_pins_region_and_runs_up(self, stacks, project_dir):
        created = stacks()

        result = runner.invoke(
            cli.app, ["deploy", "--stack", "prod", "--work-dir", str(project_dir)]
        )

        assert result.exit_code == 0, result.output
        assert created["prod"].config == {"aws:region": "us-east-1"}
        assert created["prod"].work_dir == str(project_dir.resolve())
        assert "Deploy succeeded" in result.output
        assert "bucket_name: 123-us-east-1-hosting" in result.output

    def test_defaults_to_dev_stack_in_current_directory(self, stacks, project_dir, monkeypatch):
        created = stacks()
        monkeypatch.chdir(project_dir)

        result = runner.invoke(cli.app, ["deploy"])

        assert result.exit_code == 0, result.output
        assert created["dev"].work_dir == str(project_dir.resolve())

    def test_rejects_directory_without_project_file(self, stacks, tmp_path):
        created = stacks()

        result = runner.invoke(cli.app, ["deploy", "--work-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert created == {}

    def test_failure_exits_non_zero(self, stacks, project_dir):
        stacks(fail=True)

        result = runner.invoke(cli.app, ["deploy", "--work-dir", str(project_dir)])

        assert result.exit_code == 1
