"""
cli.py

PURPOSE: Command-line interface for the PaxSenix client.
DEPENDENCIES: typer, rich

ARCHITECTURE NOTES:
The CLI provides commands for:
- models: List the models the service offers
- chat: Send one prompt, streamed by default
- config: Show the effective configuration
"""

import asyncio
import logging
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from paxsenix import __version__
from paxsenix.client import PaxSenixAI
from paxsenix.config import Settings, get_settings
from paxsenix.errors import PaxSenixError
from paxsenix.observability import init_telemetry
from paxsenix.ui import plain

app = typer.Typer(
    name="paxsenix",
    help="Talk to the PaxSenix chat-completion service.",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"paxsenix version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """PaxSenix AI - chat completions from the terminal."""
    pass


def _setup(settings: Settings) -> None:
    """Configure logging and telemetry for a command run."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    init_telemetry(settings.otel)


def _client(settings: Settings, timeout: float | None = None) -> PaxSenixAI:
    return PaxSenixAI(settings=settings.client, timeout=timeout)


@app.command()
def models(
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="Request timeout in seconds"),
    ] = None,
) -> None:
    """List available models."""
    settings = get_settings()
    _setup(settings)

    async def do_list() -> Any:
        async with _client(settings, timeout) as ai:
            return await ai.list_models()

    try:
        result = asyncio.run(do_list())
    except PaxSenixError as e:
        plain.print_error(e)
        raise typer.Exit(1) from None

    plain.print_models(result)


@app.command()
def chat(
    prompt: Annotated[str, typer.Argument(help="What to ask")],
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model to use"),
    ] = None,
    system: Annotated[
        str | None,
        typer.Option("--system", "-s", help="System prompt"),
    ] = None,
    temperature: Annotated[
        float,
        typer.Option("--temperature", help="Sampling temperature", min=0.0, max=2.0),
    ] = 0.7,
    stream: Annotated[
        bool,
        typer.Option("--stream/--no-stream", help="Print the reply as it arrives"),
    ] = True,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="Request timeout in seconds"),
    ] = None,
) -> None:
    """Send a single prompt and print the reply."""
    settings = get_settings()
    _setup(settings)

    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    params: dict[str, Any] = {"messages": messages, "temperature": temperature}
    if model:
        params["model"] = model

    async def do_chat() -> None:
        async with _client(settings, timeout) as ai:
            if not stream:
                plain.print_completion(await ai.create_chat_completion(params))
                return

            await ai.stream_completion(params, plain.print_delta)
            console.print()

    try:
        asyncio.run(do_chat())
    except PaxSenixError as e:
        console.print()
        plain.print_error(e)
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        console.print()
        raise typer.Exit(130) from None


@app.command("config")
def config_cmd() -> None:
    """Show the effective configuration."""
    settings = get_settings()
    client = settings.client

    console.print("[bold]Client:[/bold]")
    console.print(f"  Base URL: {client.base_url}")
    api_key_status = "set" if client.api_key else "not set"
    console.print(f"  API key: {api_key_status}")
    console.print(f"  Default model: {client.default_model}")
    console.print(f"  Timeout: {client.timeout}s")
    console.print(f"  Retries: {client.retries} (delay {client.retry_delay}s, linear)")
    console.print()
    console.print("[bold]Logging:[/bold]")
    console.print(f"  Log level: {settings.log_level}")
    console.print(f"  Debug: {settings.debug}")
    console.print()
    console.print("[bold]Telemetry:[/bold]")
    console.print(f"  Enabled: {settings.otel.enabled}")
    console.print(f"  Service name: {settings.otel.service_name}")
    endpoint_status = settings.otel.endpoint if settings.otel.endpoint else "(console only)"
    console.print(f"  Endpoint: {endpoint_status}")


if __name__ == "__main__":
    app()
