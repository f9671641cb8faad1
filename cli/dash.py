"""incusdash -- project settings from the command line.

Thin command-line wrapper over the Incus REST API.  Each command loads
fresh data, runs one workflow operation and prints the outcome.

Usage:
    incusdash [--api-url URL] COMMAND [OPTIONS]
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable

import click

from incusdash import __version__
from incusdash.client import HypervisorClient, ProjectRepository
from incusdash.config import IncusDashConfig
from incusdash.display import Display
from incusdash.errors import RemoteCallError
from incusdash.notifications import Navigator, NotificationCenter
from incusdash.sidebar import ProjectListView
from incusdash.workflow import ProjectSettingsWorkflow

logger = logging.getLogger("incusdash.cli")


def setup_logging(config: IncusDashConfig) -> None:
    """Configure Python logging."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))

    if config.log_format == "json":
        fmt = "%(message)s"
    else:
        fmt = "%(asctime)s %(name)-24s %(levelname)-5s %(message)s"

    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)


def build_client(config: IncusDashConfig) -> HypervisorClient:
    return HypervisorClient.from_config(config)


def _run(config: IncusDashConfig, fn: Callable[[ProjectRepository], Awaitable[Any]]) -> Any:
    """Run ``fn`` against a fresh repository, mapping API errors to Click errors."""

    async def runner() -> Any:
        async with build_client(config) as client:
            return await fn(ProjectRepository(client))

    try:
        return asyncio.run(runner())
    except RemoteCallError as exc:
        if exc.status == 0:
            raise click.ClickException(exc.message)
        raise click.ClickException(f"API error ({exc.status}): {exc.message}")


# Store the config in Click context
pass_config = click.make_pass_decorator(IncusDashConfig, ensure=True)


@click.group()
@click.version_option(__version__, prog_name="incusdash")
@click.option("--api-url", default=None, help="Incus API base URL.")
@click.option("--socket", "socket_path", default=None, help="Path to the Incus unix socket.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]), default=None,
    help="Output format.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    api_url: str | None,
    socket_path: str | None,
    output_format: str | None,
    verbose: bool,
) -> None:
    """incusdash -- manage Incus dashboard projects."""
    config = IncusDashConfig()
    if api_url:
        config.api_url = api_url
    if socket_path:
        config.socket_path = socket_path
    if output_format:
        config.log_format = output_format
    if verbose:
        config.log_level = "DEBUG"
    setup_logging(config)
    ctx.obj = config


def _display(config: IncusDashConfig) -> Display:
    return Display(config.log_format)


# ── projects / servers ────────────────────────────────────────────────────


@cli.command()
@click.option("--project", "project_id", default=None, help="Scope to a project.")
@pass_config
def projects(config: IncusDashConfig, project_id: str | None) -> None:
    """List projects as sidebar navigation entries."""
    items = _run(config, lambda repo: repo.list_projects(project_id))
    _display(config).project_list(ProjectListView(items, config.dashboard_root))


@cli.command()
@click.option("--project", "project_id", default=None, help="Scope to a project.")
@pass_config
def servers(config: IncusDashConfig, project_id: str | None) -> None:
    """List servers (instances)."""
    items = _run(config, lambda repo: repo.list_servers(project_id))
    _display(config).server_table(items)


# ── show / save / delete ──────────────────────────────────────────────────


def _workflow(repo: ProjectRepository, config: IncusDashConfig, display: Display) -> ProjectSettingsWorkflow:
    center = NotificationCenter()
    center.subscribe(display.notification)
    return ProjectSettingsWorkflow(
        repo, center, Navigator(), dashboard_root=config.dashboard_root,
    )


@cli.command()
@click.argument("project_id", type=int)
@pass_config
def show(config: IncusDashConfig, project_id: int) -> None:
    """Show a project's settings and server count."""
    display = _display(config)

    async def go(repo: ProjectRepository) -> bool:
        wf = _workflow(repo, config, display)
        found = await wf.load(project_id)
        display.project_details(wf.project, wf.server_count)
        return found

    if not _run(config, go):
        sys.exit(1)


@cli.command()
@click.argument("project_id", type=int)
@click.option("--name", default=None, help="New project name.")
@click.option("--description", default=None, help="New project description.")
@pass_config
def save(config: IncusDashConfig, project_id: int, name: str | None, description: str | None) -> None:
    """Rename and/or re-describe a project. Omitted fields keep their values."""
    display = _display(config)

    async def go(repo: ProjectRepository) -> bool:
        wf = _workflow(repo, config, display)
        if not await wf.load(project_id):
            display.project_details(None)
            return False
        if name is not None:
            wf.form.name = name
        if description is not None:
            wf.form.description = description
        result = await wf.save()
        return result.ok

    if not _run(config, go):
        sys.exit(1)


@cli.command()
@click.argument("project_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation prompt.")
@pass_config
def delete(config: IncusDashConfig, project_id: int, yes: bool) -> None:
    """Permanently delete a project that has no servers."""
    if not yes:
        click.confirm(
            f"Delete project {project_id}? This action cannot be undone",
            abort=True,
        )
    display = _display(config)

    async def go(repo: ProjectRepository) -> bool:
        wf = _workflow(repo, config, display)
        if not await wf.load(project_id):
            display.project_details(None)
            return False
        result = await wf.delete()
        return result.ok

    if not _run(config, go):
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
