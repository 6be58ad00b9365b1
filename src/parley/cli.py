"""Parley command line interface."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from parley.app import App
from parley.config import get_settings
from parley.logging_utils import configure_logging
from parley.output.dialogflow import DialogflowOutputConverter
from parley.output.models import OutputTemplate
from parley.platforms.core import make_platform

app = typer.Typer(name="parley", help="Render output templates for conversational platforms", add_completion=False)


@app.callback()
def _main() -> None:
    configure_logging(profile="cli", level=get_settings().log_level)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        typer.echo(f"cannot read {path}: {exc}", err=True)
        raise typer.Exit(code=2) from exc


def _echo_json(value: Any) -> None:
    typer.echo(json.dumps(value, ensure_ascii=False, indent=2))


@app.command()
def convert(
    template: Path = typer.Argument(..., help="Output template JSON file"),  # noqa: B008
    platform: str = typer.Option("Dialogflow", "--platform", help="Platform name used for overrides"),
    max_quick_replies: int | None = typer.Option(None, "--max-quick-replies", help="Quick reply count ceiling"),
    quick_reply_max_length: int | None = typer.Option(None, "--quick-reply-max-length"),
    text_max_length: int | None = typer.Option(None, "--text-max-length"),
    sanitize: bool = typer.Option(True, "--sanitize/--no-sanitize", help="Truncate over-limit values"),
) -> None:
    """Convert an output template (or a list of them) to a native response."""

    data = _read_json(template)
    try:
        if isinstance(data, list):
            output: Any = [OutputTemplate.model_validate(item) for item in data]
        else:
            output = OutputTemplate.model_validate(data)
    except ValidationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    limits = {
        key: value
        for key, value in (
            ("quick_replies_max_size", max_quick_replies),
            ("quick_reply_max_length", quick_reply_max_length),
            ("text_max_length", text_max_length),
        )
        if value is not None
    }
    converter = DialogflowOutputConverter({"sanitization": sanitize, "limits": limits}, platform_name=platform)
    _echo_json(converter.convert(output))


@app.command()
def parse(
    response: Path = typer.Argument(..., help="Native response JSON file"),  # noqa: B008
    platform: str = typer.Option("Dialogflow", "--platform"),
) -> None:
    """Rebuild an output template from a native response."""

    converter = DialogflowOutputConverter(platform_name=platform)
    _echo_json(converter.from_response(_read_json(response)).to_dict())


@app.command()
def detect(
    request: Path = typer.Argument(..., help="Raw request JSON file"),  # noqa: B008
    platforms: list[str] = typer.Option(..., "--platform", help="NAME=TYPE, first match wins"),  # noqa: B008
) -> None:
    """Print the first platform recognizing a raw request."""

    payload = _read_json(request)
    descriptors = []
    for option in platforms:
        name, sep, type_tag = option.partition("=")
        if not sep or not name or not type_tag:
            raise typer.BadParameter(f"expected NAME=TYPE, got {option!r}", param_hint="--platform")
        descriptors.append(make_platform(name, type_tag))

    async def _detect() -> str | None:
        parley_app = App(plugins=descriptors)
        await parley_app.start()
        try:
            platform = parley_app.find_request_platform(payload)
            return platform.name if platform is not None else None
        finally:
            await parley_app.dispose()

    matched = asyncio.run(_detect())
    if matched is None:
        typer.echo("(no matching platform)", err=True)
        raise typer.Exit(code=1)
    typer.echo(matched)
