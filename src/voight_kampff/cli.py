"""Click-based CLI for Voight-Kampff account classification."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from datetime import UTC, datetime

import click

from voight_kampff.config import load_config
from voight_kampff.exceptions import VoightKampffError
from voight_kampff.formatter import format_cli_output, format_json
from voight_kampff.github_client import parse_events, parse_profile
from voight_kampff.models import AnalysisResult
from voight_kampff.scorer import ReplicantScorer, identify_replicant


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _echo_result(result: AnalysisResult, output_json: bool, verbose: bool) -> None:
    if output_json:
        click.echo(format_json(result))
    else:
        click.echo(format_cli_output(result, verbose=verbose))


def _parse_now(ctx: click.Context, param: click.Parameter, value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"not an ISO 8601 timestamp: {value}") from exc
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


@click.group()
@click.version_option(package_name="voight-kampff")
def main() -> None:
    """Voight-Kampff - tell human GitHub accounts from automated ones."""


@main.command()
@click.argument("username")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def check(
    username: str,
    token: str | None,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
    debug: bool,
) -> None:
    """Fetch a GitHub account and classify it."""
    _configure_logging(debug)
    try:
        config = load_config(config_path)
        result = asyncio.run(
            identify_replicant(login=username, token=token or None, config=config)
        )
    except VoightKampffError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    _echo_result(result, output_json, verbose)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--now",
    callback=_parse_now,
    default=None,
    help="Evaluation instant (ISO 8601); defaults to the current time",
)
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def evaluate(
    path: str,
    now: datetime | None,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
    debug: bool,
) -> None:
    """Classify an account from a saved JSON document.

    PATH holds ``{"user": {...}, "events": [...]}`` in the GitHub REST
    API shape.
    """
    _configure_logging(debug)
    try:
        config = load_config(config_path)
    except VoightKampffError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    try:
        with open(path) as f:
            document = json.load(f)
        profile = parse_profile(document["user"])
        events = parse_events(document.get("events") or [])
    except (ValueError, KeyError, TypeError) as exc:
        click.echo(f"Error: invalid account document {path}: {exc}", err=True)
        sys.exit(1)

    result = ReplicantScorer(config).evaluate(
        profile, events, now if now is not None else datetime.now(UTC)
    )
    _echo_result(result, output_json, verbose)
