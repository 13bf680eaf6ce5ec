"""
LoamIIIF CLI

Modes:
- TUI (default): full-screen browser for IIIF collections and manifests
- batch: --manifest URL --prompt TEXT asks one question and prints the answer
- --list-models: print the model ids offered by the chat service
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path

import httpx
import typer

from loam_iiif.chat import create_chat_service, create_chat_service_or_placeholder
from loam_iiif.config import Settings, load_settings
from loam_iiif.controller import Controller
from loam_iiif.errors import LoamError
from loam_iiif.iiif import (
    build_context,
    describe_fetch_error,
    fetch_bytes,
    parse_listing,
    validate_url,
)
from loam_iiif.logs import ROOT_LOGGER, setup_logging
from loam_iiif.tui import LoamApp

app = typer.Typer(add_completion=False, help="Browse IIIF collections and manifests in the terminal")

LOGGER = logging.getLogger(ROOT_LOGGER)


def run_batch(manifest_url: str, prompt: str, settings: Settings) -> str:
    """
    Fetch a manifest or collection, then ask one question about it.

    Raises:
        LoamError: If the URL is invalid, the document yields no entries,
            or the chat service fails
        httpx.HTTPError: If the fetch fails
    """
    url = validate_url(manifest_url)
    entries = parse_listing(fetch_bytes(url, timeout=settings.http_timeout))
    if len(entries) == 1 and entries[0].is_error:
        raise LoamError(entries[0].title)
    LOGGER.info("Fetched listing", extra={"url": url, "entries": len(entries)})

    service = create_chat_service(settings)
    return service.send(prompt, build_context(entries)).strip()


@app.command()
def main_cmd(
    url: str | None = typer.Option(
        None, "--url", help="IIIF collection or manifest URL to open when the TUI starts"
    ),
    manifest: str | None = typer.Option(
        None, "--manifest", help="IIIF manifest or collection URL (batch mode, needs --prompt)"
    ),
    prompt: str | None = typer.Option(
        None, "--prompt", help="Question to ask about --manifest (batch mode)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", help="Named AWS credential profile for the chat service"
    ),
    list_models: bool = typer.Option(
        False, "--list-models", help="Print the models offered by the chat service and exit"
    ),
    env_file: Path | None = typer.Option(
        None, "--env-file", help="Read settings from this .env file instead of searching for one"
    ),
    log_level: str = typer.Option(
        "INFO", "--log-level", help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write JSON logs here (the TUI never logs to the terminal)"
    ),
) -> None:
    """
    Browse IIIF resources, or ask a question about one.

    Example:
        loam-iiif --url https://iiif.example.org/collection.json
        loam-iiif --manifest https://iiif.example.org/manifest.json --prompt "Summarize this"
    """
    batch = bool(manifest or prompt)
    setup_logging(log_level, log_file=log_file.expanduser() if log_file else None, stderr=batch or list_models)

    try:
        settings = load_settings(str(env_file.expanduser()) if env_file else None).with_profile(profile)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if list_models:
        try:
            for model_id in create_chat_service(settings).list_models():
                typer.echo(model_id)
        except LoamError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
        return

    if batch:
        if not (manifest and prompt):
            typer.echo("Error: --manifest and --prompt must be used together", err=True)
            raise typer.Exit(code=2)
        try:
            response = run_batch(manifest, prompt, settings)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            typer.echo(f"Error: failed to fetch manifest: {describe_fetch_error(e)}", err=True)
            raise typer.Exit(code=1)
        except LoamError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
        typer.echo(response)
        return

    controller = Controller(
        fetcher=partial(fetch_bytes, timeout=settings.http_timeout),
        chat_service=create_chat_service_or_placeholder(settings),
    )
    LoamApp(controller, initial_url=url).run()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
