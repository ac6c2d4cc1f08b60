from pathlib import Path

import pytest
from click.testing import CliRunner

from agentdock.cli import main


@pytest.fixture
def runner(settings_env, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    settings_env(document_store="jsonfile", data_directory=tmp_path / "data")
    monkeypatch.setattr("agentdock.shared.log.setup_logging", lambda *args: None)
    return CliRunner()


def _last_line(output: str) -> str:
    return output.strip().splitlines()[-1]


def test_orchestrator_commands(runner: CliRunner) -> None:
    created = runner.invoke(main, ["orchestrator", "create", "Alpha"])
    assert created.exit_code == 0, created.output
    orchestrator_id = _last_line(created.output)

    duplicate = runner.invoke(main, ["orchestrator", "create", "alpha"])
    assert duplicate.exit_code == 1
    assert "already exists" in duplicate.output

    listed = runner.invoke(main, ["orchestrator", "list"])
    assert f"{orchestrator_id}\tAlpha" in listed.output


def test_project_and_team_commands(runner: CliRunner) -> None:
    created = runner.invoke(
        main,
        [
            "project",
            "create",
            "--name",
            "Demo",
            "--repository-name",
            "demo",
            "--repository-address",
            "https://github.com/acme/demo",
            "--orchestrator",
            "Alpha",
        ],
    )
    assert created.exit_code == 0, created.output
    project_id = _last_line(created.output)

    assert "Demo" in runner.invoke(main, ["project", "list"]).output
    shown = runner.invoke(main, ["project", "show", project_id])
    assert '"name": "Demo Team"' in shown.output

    added = runner.invoke(main, ["team", "add", project_id, "Bob"])
    assert added.exit_code == 0, added.output
    bob_id = _last_line(added.output)
    assert f"{bob_id}\tBob" in runner.invoke(main, ["team", "list", project_id]).output

    assert runner.invoke(main, ["team", "remove", project_id, bob_id]).exit_code == 0
    assert runner.invoke(main, ["team", "remove", project_id, bob_id]).exit_code == 1

    missing = runner.invoke(main, ["project", "show", "missing"])
    assert missing.exit_code == 1
    assert "not found" in missing.output


def test_session_run_to_completion(runner: CliRunner) -> None:
    created = runner.invoke(main, ["session", "create", "https://github.com/acme/infra", "--branch", "main"])
    assert created.exit_code == 0, created.output
    session_id = _last_line(created.output)

    assert _last_line(runner.invoke(main, ["session", "status", session_id]).output) == "Created"

    ran = runner.invoke(main, ["session", "run", session_id, "--steps", "2", "--step-seconds", "0"])
    assert ran.exit_code == 0, ran.output
    assert "Completed" in ran.output

    assert _last_line(runner.invoke(main, ["session", "status", session_id]).output) == "Completed"


def test_session_validation_errors(runner: CliRunner) -> None:
    bad_url = runner.invoke(main, ["session", "create", "ftp://example.com/repo.git"])
    assert bad_url.exit_code == 1
    assert "HTTP or HTTPS" in bad_url.output

    bad_branch = runner.invoke(main, ["session", "create", "https://github.com/acme/infra", "--branch", "a//b"])
    assert bad_branch.exit_code == 1
    assert "Branch name format is invalid" in bad_branch.output
