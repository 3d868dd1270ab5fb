"""Command line interface for browser-relay."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer

from .config import load_config
from .factory import (
    build_controller,
    build_history,
    build_llm,
    build_notifier,
    build_orchestrator,
)
from .history.base import HistoryStore
from .llm.base import LLMClient

LOGGER = logging.getLogger(__name__)

app = typer.Typer(help="Browser Relay entry point")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("browser-relay"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def serve(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to YAML configuration."),
    ] = None,
    env_file: Annotated[
        Optional[Path],
        typer.Option(
            "--env-file",
            help="Path to an .env file with default configuration values.",
        ),
    ] = None,
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="Binding address for the HTTP API."),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", help="HTTP port for the API."),
    ] = None,
    headless: Annotated[
        Optional[bool],
        typer.Option("--headless/--windowed", help="Start the browser headless (or windowed)."),
    ] = None,
    start_url: Annotated[
        Optional[str],
        typer.Option("--start-url", help="Destination loaded on every session launch."),
    ] = None,
    llm_provider: Annotated[
        Optional[str],
        typer.Option("--llm-provider", help="Model provider to use."),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", help="Model identifier."),
    ] = None,
    api_key: Annotated[
        Optional[str],
        typer.Option("--api-key", help="API key for the model provider."),
    ] = None,
) -> None:
    """Launch the shared browser session and serve the HTTP API."""

    overrides: dict[str, Any] = {}
    if host is not None or port is not None:
        overrides.setdefault("server", {})
        if host is not None:
            overrides["server"]["host"] = host
        if port is not None:
            overrides["server"]["port"] = port
    if headless is not None or start_url is not None:
        overrides.setdefault("browser", {})
        if headless is not None:
            overrides["browser"]["headless"] = headless
        if start_url is not None:
            overrides["browser"]["start_url"] = start_url
    if any([llm_provider, model, api_key]):
        overrides.setdefault("llm", {})
        if llm_provider:
            overrides["llm"]["provider"] = llm_provider
        if model:
            overrides["llm"]["model"] = model
        if api_key:
            overrides["llm"]["api_key"] = api_key

    config = load_config(config_path, env_file=env_file, **overrides)

    notifier = build_notifier(config.notifications)
    llm = build_llm(config.llm)
    history = build_history(config.history)
    controller = build_controller(config.browser, notifier)
    try:
        controller.launch()
    except Exception as exc:
        LOGGER.exception("Server startup error")
        controller.shutdown()
        _close_clients(llm, history)
        typer.echo(f"Could not launch the browser session: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    orchestrator = build_orchestrator(config, controller, llm, history, notifier)

    import uvicorn

    from .server import service

    service.configure(controller=controller, orchestrator=orchestrator, history=history)
    typer.echo(f"Server running on http://{config.server.host}:{config.server.port}")
    try:
        uvicorn.run(service.app, host=config.server.host, port=config.server.port)
    finally:
        controller.shutdown()
        _close_clients(llm, history)


def _close_clients(llm: LLMClient, history: HistoryStore) -> None:
    for client in (llm, history):
        try:
            client.close()
        except Exception:  # pragma: no cover - best effort during shutdown
            LOGGER.exception("Failed to close %s", type(client).__name__)


if __name__ == "__main__":
    app()
