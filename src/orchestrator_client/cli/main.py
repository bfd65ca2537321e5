"""Orchestrator client CLI - talk to an orchestrator cluster over its HTTP API.

Usage:
    orchestrator-client -c help
    orchestrator-client -c which-api
    orchestrator-client -c relocate -i db-2.example.com -d db-3.example.com
    orchestrator-client -c begin-downtime -i db-2 -o ops -r "kernel upgrade" -u 30m
    orchestrator-client -c api -p "instance/db-2.example.com/3306"

Environment variables:
    ORCHESTRATOR_API: Whitespace separated API endpoints
    ORCHESTRATOR_AUTH_USER, ORCHESTRATOR_AUTH_PASSWORD: Basic auth
"""

import logging

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from orchestrator_client.config import Settings
from orchestrator_client.dispatcher import RequestDispatcher
from orchestrator_client.driver import CommandDriver, CommandParams
from orchestrator_client.exceptions import ApplicationError, OrchestratorClientError
from orchestrator_client.session import Session
from orchestrator_client.types import Credentials

app = typer.Typer(
    name="orchestrator-client",
    help="Command line client for an orchestrator cluster",
    add_completion=False,
)

err_console = Console(stderr=True)


def _make_http_client() -> httpx.Client:
    """Create the HTTP client for one invocation. Tests swap in a mock transport."""
    return httpx.Client()


def _setup_logging(verbose: bool, debug: bool) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def _build_settings(
    api: str | None,
    auth: str | None,
    default_port: int | None,
    timeout: float | None,
) -> Settings:
    """Environment settings with per-invocation overrides applied."""
    settings = Settings()
    update: dict = {}
    if api:
        update["api"] = api
    if auth is not None:
        credentials = Credentials.parse(auth)
        update["auth_user"] = credentials.user
        update["auth_password"] = credentials.password
    if default_port is not None:
        update["default_port"] = default_port
    if timeout is not None:
        update["timeout"] = timeout
    return settings.model_copy(update=update) if update else settings


def _report(error: OrchestratorClientError) -> None:
    """Write a failure to stderr."""
    err_console.print(f"[red]{escape(str(error))}[/red]", highlight=False, soft_wrap=True)
    if isinstance(error, ApplicationError):
        details = error.details_text()
        if details is not None:
            err_console.print(details, highlight=False, markup=False, soft_wrap=True)


@app.command()
def main(
    command: str = typer.Option("help", "--command", "-c", help="Command to run, see -c help"),
    instance: str = typer.Option(None, "--instance", "-i", help="Instance, host or host:port"),
    destination: str = typer.Option(None, "--destination", "-d", help="Destination instance, host or host:port"),
    alias: str = typer.Option(None, "--alias", "-a", help="Cluster name or alias"),
    owner: str = typer.Option(None, "--owner", "-o", help="Owner of maintenance or downtime"),
    reason: str = typer.Option(None, "--reason", "-r", help="Reason for maintenance, downtime or acknowledgement"),
    duration: str = typer.Option(None, "--duration", "-u", help="Downtime duration, e.g. 30m, 2h"),
    promotion_rule: str = typer.Option(
        None, "--promotion-rule", "-R", help="Promotion rule: prefer, neutral, prefer_not, must_not"
    ),
    pool: str = typer.Option(None, "--pool", "-l", help="Pool name"),
    instances: str = typer.Option(None, "--instances", "-I", help="Comma separated instances, for pools"),
    hostname: str = typer.Option(None, "--hostname", "-H", help="Hostname, for unresolve and raft commands"),
    tag: str = typer.Option(None, "--tag", "-t", help="Tag, name or name=value"),
    query: str = typer.Option(None, "--query", "-q", help="Search string"),
    binlog: str = typer.Option(None, "--binlog", "-B", help="Binary log name"),
    path: str = typer.Option(None, "--path", "-p", help="API path, for the api command"),
    api: str = typer.Option(None, "--api", "-U", help="Override API endpoints (whitespace separated)"),
    auth: str = typer.Option(None, "--auth", "-b", help="Basic auth as user:password"),
    default_port: int = typer.Option(None, "--default-port", help="Port to assume when an instance has none"),
    timeout: float = typer.Option(None, "--timeout", help="API call timeout in seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO level"),
    debug: bool = typer.Option(False, "--debug", "-D", help="Log at DEBUG level"),
) -> None:
    """Run one orchestrator command against the current leader."""
    _setup_logging(verbose, debug)
    settings = _build_settings(api, auth, default_port, timeout)
    params = CommandParams(
        instance=instance,
        destination=destination,
        alias=alias,
        owner=owner,
        reason=reason,
        duration=duration,
        promotion_rule=promotion_rule,
        pool=pool,
        instances=instances,
        hostname=hostname,
        tag=tag,
        query=query,
        binlog=binlog,
        path=path,
    )

    with _make_http_client() as http:
        session = Session.from_settings(settings, http)
        driver = CommandDriver(RequestDispatcher(session))
        try:
            lines = driver.run(command, params)
        except OrchestratorClientError as e:
            _report(e)
            raise typer.Exit(1)

    for line in lines:
        typer.echo(line)


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
