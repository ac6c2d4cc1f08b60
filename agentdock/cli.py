import asyncio
import functools
from collections.abc import Callable, Coroutine
from typing import Any

import click

from agentdock.shared.errors import EntityValidationError


def _settings():
    from agentdock.shared.settings import get_settings

    return get_settings()


def _stores():
    from agentdock.shared.bootstrap import build_stores

    return build_stores(_settings())


def async_command(func: Callable[..., Coroutine[Any, Any, None]]) -> Callable[..., None]:
    """Run an async command body, reporting domain errors as click errors."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        try:
            asyncio.run(func(*args, **kwargs))
        except EntityValidationError as exc:
            raise click.ClickException("\n".join(exc.errors)) from exc
        except (ValueError, LookupError, RuntimeError) as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


@click.group()
@click.option("--log-level", default=None, help="Log level (default: from AGENTDOCK_LOG_LEVEL or INFO).")
def main(log_level: str | None) -> None:
    """agentdock - projects, orchestrators, teams and agent sessions."""
    from agentdock.shared.log import setup_logging

    settings = _settings()
    setup_logging(log_level or settings.log_level, settings.log_file)


# ---------------------------------------------------------------------------
# Orchestrators
# ---------------------------------------------------------------------------


@main.group()
def orchestrator() -> None:
    """Manage orchestrators."""


@orchestrator.command("create")
@click.argument("name")
@async_command
async def orchestrator_create(name: str) -> None:
    """Create an orchestrator with a unique NAME."""
    from agentdock.shared.models import CreateOrchestratorRequest

    created = await _stores().orchestrators.create(CreateOrchestratorRequest(name=name))
    click.echo(created.id)


@orchestrator.command("list")
@async_command
async def orchestrator_list() -> None:
    """List orchestrators."""
    for item in await _stores().orchestrators.get_all():
        click.echo(f"{item.id}\t{item.name}")


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@main.group()
def project() -> None:
    """Manage projects."""


@project.command("create")
@click.option("--name", "project_name", required=True, help="Project name.")
@click.option("--repository-name", required=True, help="Repository display name.")
@click.option("--repository-address", required=True, help="Repository URL.")
@click.option("--orchestrator", "orchestrator_name", required=True, help="Name of the new orchestrator.")
@async_command
async def project_create(
    project_name: str, repository_name: str, repository_address: str, orchestrator_name: str
) -> None:
    """Create a project together with its orchestrator."""
    from agentdock.shared.managers import create_project
    from agentdock.shared.models import CreateProjectRequest

    stores = _stores()
    created = await create_project(
        stores.projects,
        stores.orchestrators,
        CreateProjectRequest(
            project_name=project_name,
            repository_name=repository_name,
            repository_address=repository_address,
            orchestrator_name=orchestrator_name,
        ),
    )
    click.echo(created.id)


@project.command("list")
@async_command
async def project_list() -> None:
    """List projects."""
    for item in await _stores().projects.get_all():
        click.echo(f"{item.id}\t{item.name}")


@project.command("show")
@click.argument("project_id")
@async_command
async def project_show(project_id: str) -> None:
    """Print a project as JSON."""
    from agentdock.shared.errors import ProjectNotFoundError

    found = await _stores().projects.get_by_id(project_id)
    if found is None:
        msg = f"Project {project_id} not found"
        raise ProjectNotFoundError(msg)
    click.echo(found.model_dump_json(indent=2))


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


@main.group()
def team() -> None:
    """Manage project team members."""


@team.command("add")
@click.argument("project_id")
@click.argument("agent_name")
@async_command
async def team_add(project_id: str, agent_name: str) -> None:
    """Add a collaborator named AGENT_NAME to the project's team."""
    from agentdock.shared.models import AddAgentToTeamRequest

    updated = await _stores().teams.add_agent_to_team(
        project_id, AddAgentToTeamRequest(project_id=project_id, agent_name=agent_name)
    )
    click.echo(updated.team.members[-1].id)


@team.command("remove")
@click.argument("project_id")
@click.argument("agent_id")
@async_command
async def team_remove(project_id: str, agent_id: str) -> None:
    """Remove a collaborator from the project's team."""
    if not await _stores().teams.remove_agent_from_team(project_id, agent_id):
        raise click.ClickException(f"Agent {agent_id} is not a member of project {project_id}")
    click.echo("Removed.")


@team.command("list")
@click.argument("project_id")
@async_command
async def team_list(project_id: str) -> None:
    """List the project's team members."""
    for member in await _stores().teams.get_team_members(project_id):
        click.echo(f"{member.id}\t{member.name}")


# ---------------------------------------------------------------------------
# Agent sessions
# ---------------------------------------------------------------------------


@main.group()
def session() -> None:
    """Manage agent sessions."""


@session.command("create")
@click.argument("repository_url")
@click.option("--branch", default=None, help="Repository branch.")
@click.option("--created-by", default=None, help="Creator name.")
@async_command
async def session_create(repository_url: str, branch: str | None, created_by: str | None) -> None:
    """Create a session for REPOSITORY_URL."""
    created = await _stores().sessions.create(repository_url, created_by=created_by, branch=branch)
    click.echo(created.id)


@session.command("status")
@click.argument("session_id")
@async_command
async def session_status(session_id: str) -> None:
    """Print the persisted status of a session."""
    from agentdock.shared.errors import SessionNotFoundError

    found = await _stores().sessions.get_by_id(session_id)
    if found is None:
        msg = f"Session {session_id} not found"
        raise SessionNotFoundError(msg)
    line = found.status.value
    if found.error_message:
        line = f"{line}: {found.error_message}"
    click.echo(line)


@session.command("run")
@click.argument("session_id")
@click.option("--steps", default=None, type=int, help="Workflow steps (default: from AGENTDOCK_WORKFLOW_STEPS).")
@click.option(
    "--step-seconds",
    default=None,
    type=float,
    help="Seconds per step (default: from AGENTDOCK_WORKFLOW_STEP_SECONDS).",
)
@async_command
async def session_run(session_id: str, steps: int | None, step_seconds: float | None) -> None:
    """Start a session and wait until it reaches a terminal status."""
    from agentdock.agent_service import ProvisioningWorkflow, SessionProvider
    from agentdock.shared.errors import SessionNotFoundError
    from agentdock.shared.models import SessionStatus

    settings = _settings()
    sessions = _stores().sessions
    found = await sessions.get_by_id(session_id)
    if found is None:
        msg = f"Session {session_id} not found"
        raise SessionNotFoundError(msg)

    workflow = ProvisioningWorkflow(
        steps=settings.workflow_steps if steps is None else steps,
        step_seconds=settings.workflow_step_seconds if step_seconds is None else step_seconds,
    )
    async with SessionProvider(sessions, workflow) as provider:
        await provider.start(found)
        status = await provider.get_status(session_id)
        while status is not None and not status.is_terminal:
            await asyncio.sleep(0.1)
            status = await provider.get_status(session_id)

    click.echo(status.value if status is not None else "Unknown")
    if status != SessionStatus.COMPLETED:
        raise click.ClickException(f"Session {session_id} did not complete")
