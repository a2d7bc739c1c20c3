"""Command-line interface for slack-build-notifier.

Commands:
    validate  Load a notifier config and compile its filter and templates
    render    Render the Slack payload for a build without sending it
    send      Render and deliver the Slack payload for a build
"""

import asyncio
import json

import typer

from slack_build_notifier import __version__
from slack_build_notifier.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    _error,
    _read_input,
    _resolve_config_path,
    _setup_logging,
    _success,
    _warning,
)
from slack_build_notifier.core.config import (
    CONFIG_ENV_VAR,
    NotifierConfig,
    load_block_template,
    load_config,
)
from slack_build_notifier.core.exceptions import ConfigError, EventError, NotifierError
from slack_build_notifier.notifications.events import Build, parse_build
from slack_build_notifier.notifications.secrets import EnvSecretGetter
from slack_build_notifier.notifications.slack import SlackNotifier

app = typer.Typer(
    name="slack-build-notifier",
    help="Render Cloud Build events into Slack messages and deliver them to a webhook",
    no_args_is_help=True,
)

_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help=f"Path to the notifier YAML config (default: ${CONFIG_ENV_VAR})",
)
_BUILD_OPTION = typer.Option(
    ...,
    "--build",
    "-b",
    help="Build JSON or Pub/Sub push body; '-' reads stdin",
)
_VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
_QUIET_OPTION = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors")


def _load(config: str | None) -> tuple[NotifierConfig, str]:
    """Load the config and its block template, exiting on config errors."""
    path = _resolve_config_path(config)
    try:
        if path is None:
            raise ConfigError(f"No config given (use --config or set {CONFIG_ENV_VAR})")
        loaded = load_config(path)
        template = load_block_template(loaded, base_dir=path.parent)
    except ConfigError as e:
        _error(f"Config error: {e}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None
    return loaded, template


def _configure(
    loaded: NotifierConfig, template: str, resolve_secrets: bool
) -> SlackNotifier:
    try:
        return SlackNotifier.from_config(
            loaded, template, EnvSecretGetter() if resolve_secrets else None
        )
    except ConfigError as e:
        _error(f"Config error: {e}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None


def _load_build(source: str) -> Build:
    try:
        return parse_build(_read_input(source))
    except (OSError, UnicodeDecodeError) as e:
        _error(f"Cannot read build: {e}")
        raise typer.Exit(code=EXIT_ERROR) from None
    except EventError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"slack-build-notifier {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Slack notifier for Cloud Build events."""


@app.command("validate")
def validate_command(
    config: str | None = _CONFIG_OPTION,
    check_secrets: bool = typer.Option(
        False,
        "--check-secrets",
        help="Also resolve the webhook URL secret",
    ),
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Check that a config loads and its filter and templates compile."""
    _setup_logging(verbose=verbose, quiet=not verbose)
    loaded, template = _load(config)
    _configure(loaded, template, resolve_secrets=check_secrets)
    _success(f"Config {loaded.metadata.name!r} is valid")


@app.command("render")
def render_command(
    build: str = _BUILD_OPTION,
    config: str | None = _CONFIG_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Print the Slack payload for a build without sending it.

    Examples:
        slack-build-notifier render -c notifier.yaml -b build.json
        gcloud builds describe ID --format=json | slack-build-notifier render -b -

    """
    _setup_logging(verbose=verbose, quiet=not verbose)
    loaded, template = _load(config)
    notifier = _configure(loaded, template, resolve_secrets=False)
    event = _load_build(build)

    try:
        message = notifier.build_message(event)
    except EventError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None

    if message is None:
        _warning(f"Build {event.id!r} skipped by filter")
        return
    typer.echo(json.dumps(message.to_payload(), indent=2, ensure_ascii=False))


@app.command("send")
def send_command(
    build: str = _BUILD_OPTION,
    config: str | None = _CONFIG_OPTION,
    verbose: bool = _VERBOSE_OPTION,
    quiet: bool = _QUIET_OPTION,
) -> None:
    """Render the Slack payload for a build and POST it to the webhook.

    The webhook URL is read from the secret referenced by
    spec.notification.delivery.webhookUrl (env:NAME resources).
    """
    _setup_logging(verbose=verbose, quiet=quiet)
    loaded, template = _load(config)
    notifier = _configure(loaded, template, resolve_secrets=True)
    event = _load_build(build)

    try:
        message = asyncio.run(notifier.notify(event))
    except NotifierError as e:
        _error(f"Notification failed for build {event.id!r}: {e}")
        raise typer.Exit(code=EXIT_ERROR) from None

    if message is None:
        _warning(f"Build {event.id!r} skipped by filter")
        return
    _success(f"Sent notification for build {event.id!r}")


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()

