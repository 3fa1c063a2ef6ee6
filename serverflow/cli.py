"""Command line interface for driving serverflow sessions."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import typer

from serverflow import (
    SessionStore,
    WorkflowManager,
    WorkflowSessionRepository,
    get_key_value_store,
    get_screen_source,
    get_transport,
)
from serverflow.cli_utils.workflow import _format_state, _load_definition, _parse_context_pairs
from serverflow.config import ServerflowConfig, load_config
from serverflow.errors import describe_error
from serverflow.result import Result

T = TypeVar("T")

app = typer.Typer(help="CLI for serverflow workflow sessions")

# Command groups
workflow_app = typer.Typer(help="Commands for driving a workflow session")
session_app = typer.Typer(help="Commands for the locally stored session")
screen_app = typer.Typer(help="Commands for schema-driven screens")

app.add_typer(workflow_app, name="workflow")
app.add_typer(session_app, name="session")
app.add_typer(screen_app, name="screen")

ContextOption = typer.Option(
    None, "--context", "-c", help="Context entry as key=value (repeatable)"
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, help="Path to a serverflow YAML config"),
    log_level: Optional[str] = typer.Option(None, help="Logging level, e.g. DEBUG"),
) -> None:
    """serverflow CLI entry point."""
    loaded = load_config(str(config) if config else None)
    logging.basicConfig(
        level=(log_level or loaded.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = loaded


def _config(ctx: typer.Context) -> ServerflowConfig:
    return ctx.obj if isinstance(ctx.obj, ServerflowConfig) else load_config()


def _with_manager(
    config: ServerflowConfig, action: Callable[[WorkflowManager], Awaitable[T]]
) -> T:
    async def runner() -> T:
        transport = get_transport(config=config)
        store = SessionStore(get_key_value_store(config=config))
        manager = WorkflowManager(WorkflowSessionRepository(transport, store))
        try:
            return await action(manager)
        finally:
            await transport.disconnect()

    return asyncio.run(runner())


def _unwrap(result: Result[T]) -> T:
    if result.is_failure:
        description = describe_error(result.error)
        typer.secho(f"{description.message} [{description.category.value}]", fg=typer.colors.RED)
        if description.detail:
            typer.echo(f"Detail: {description.detail}")
        raise typer.Exit(code=1)
    return result.get_or_raise()


def _context(pairs: Optional[List[str]]) -> dict[str, Any]:
    try:
        return _parse_context_pairs(pairs or [])
    except ValueError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=2)


@app.command("health")
def health(ctx: typer.Context) -> None:
    """Check that the workflow API answers ``GET /healthcheck``."""
    response = _unwrap(_with_manager(_config(ctx), lambda m: m.health_check()))
    typer.echo(f"API status: {response.status}")


@workflow_app.command("save")
def workflow_save(ctx: typer.Context, definition: Path) -> None:
    """
    Upload a workflow definition and remember its id.

    The file is YAML or JSON with a ``states`` list and an optional
    ``predefined_context`` mapping.

    Example:
        serverflow workflow save ./flows/login.yaml
        # Output: Saved workflow 6650c1...
    """
    if not definition.exists():
        typer.secho("Specified file does not exist", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    states, predefined_context = _load_definition(definition)
    workflow_id = _unwrap(
        _with_manager(_config(ctx), lambda m: m.save_workflow(states, predefined_context))
    )
    typer.echo(f"Saved workflow {workflow_id}")


@workflow_app.command("start")
def workflow_start(
    ctx: typer.Context,
    workflow_id: Optional[str] = typer.Argument(None),
    context: Optional[List[str]] = ContextOption,
    show_internal: bool = typer.Option(False, help="Include __-prefixed context keys"),
) -> None:
    """
    Start a workflow, or resume the stored session when no id is given.

    Example:
        serverflow workflow start 6650c1... -c user_id=42 -c platform=cli
    """
    initial = _context(context)
    state = _unwrap(_with_manager(_config(ctx), lambda m: m.start_workflow(workflow_id, initial)))
    typer.echo(_format_state(state, show_internal))


@workflow_app.command("event")
def workflow_event(
    ctx: typer.Context,
    event_name: str,
    context: Optional[List[str]] = ContextOption,
    show_internal: bool = typer.Option(False, help="Include __-prefixed context keys"),
) -> None:
    """Send ``EVENT_NAME`` with optional context entries."""
    data = _context(context)
    state = _unwrap(_with_manager(_config(ctx), lambda m: m.send_event(event_name, data)))
    typer.echo(_format_state(state, show_internal))


@workflow_app.command("update")
def workflow_update(
    ctx: typer.Context,
    context: Optional[List[str]] = ContextOption,
    show_internal: bool = typer.Option(False, help="Include __-prefixed context keys"),
) -> None:
    """Merge context entries into the session without firing an event."""
    data = _context(context)
    state = _unwrap(_with_manager(_config(ctx), lambda m: m.update_context(data)))
    typer.echo(_format_state(state, show_internal))


@workflow_app.command("restore")
def workflow_restore(ctx: typer.Context) -> None:
    """Resume the stored session, if any."""
    result = _with_manager(_config(ctx), lambda m: m.restore_session())
    if result is None:
        typer.echo("No session to restore; start a workflow first.")
        return
    typer.echo(_format_state(_unwrap(result)))


@session_app.command("show")
def session_show(ctx: typer.Context) -> None:
    """Print the stored session and workflow ids."""
    store = SessionStore(get_key_value_store(config=_config(ctx)))
    session_id = store.get_session_id() if store.has_active_session() else None
    typer.echo(f"Session: {session_id or '(none)'}")
    typer.echo(f"Workflow: {store.get_workflow_id() or '(none)'}")


@session_app.command("clear")
def session_clear(
    ctx: typer.Context,
    forget_workflow: bool = typer.Option(False, help="Also forget the stored workflow id"),
) -> None:
    """Forget the stored session."""
    store = SessionStore(get_key_value_store(config=_config(ctx)))
    store.clear_session()
    if forget_workflow:
        store.clear_workflow_id()
    typer.echo("Session cleared")


@screen_app.command("fetch")
def screen_fetch(ctx: typer.Context, screen_id: str) -> None:
    """Fetch a screen schema and print its node tree with parsed actions."""
    source = get_screen_source(_config(ctx))

    async def fetch():
        try:
            return await source.fetch_screen(screen_id)
        finally:
            await source.close()

    try:
        schema = asyncio.run(fetch())
    except Exception as exc:
        description = describe_error(exc)
        typer.secho(f"{description.message} [{description.category.value}]", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"Screen {schema.screen.id} ({schema.screen.type}) from {schema.document.name}")
    for section_name, node in (
        ("topBar", schema.screen.sections.top_bar),
        ("body", schema.screen.sections.body),
        ("bottomBar", schema.screen.sections.bottom_bar),
    ):
        if node is None:
            continue
        typer.echo(f"{section_name}:")
        _echo_node(node, depth=1)


def _echo_node(node, depth: int) -> None:
    action = node.parsed_action()
    suffix = f" -> {type(action).__name__}" if action is not None else ""
    label = f"#{node.id}" if node.id else ""
    typer.echo(f"{'  ' * depth}- {node.type}{label}{suffix}")
    for child in node.children:
        _echo_node(child, depth + 1)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
