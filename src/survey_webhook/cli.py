"""Command-line interface for Survey Webhook."""

import asyncio
import json
import logging
import signal
import sys

import click

from .config import Config
from .constants import (
    SETTING_AUTH_TOKEN,
    SETTING_DEBUG,
    SETTING_DEFAULT_AUTH_TOKEN,
    SETTING_DEFAULT_URL,
    SETTING_ENABLED,
    SETTING_WEBHOOK_URLS,
)
from .utils.logging import setup_logging
from .webhook.resolver import ConfigurationResolver, parse_survey_ids, parse_urls

logger = logging.getLogger(__name__)


def _open_settings_store(db_path):
    """Open the settings database with the same path resolution as the server."""
    from .database.engine import DatabaseEngine
    from .database.settings import DatabaseSettingsStore

    cli_args = {}
    if db_path is not None:
        cli_args["db_path"] = db_path
    try:
        config = Config.from_args_and_env(cli_args)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    db_engine = DatabaseEngine(config.db_path)
    db_engine.initialize()
    return db_engine, DatabaseSettingsStore(db_engine)


db_path_option = click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (default: ./data/survey_webhook.db)",
)


@click.group()
def cli():
    """Survey Webhook - Forward completed survey responses to webhooks."""
    pass


@cli.command()
@db_path_option
@click.option(
    "--api-host",
    type=str,
    help="API server host (default: 0.0.0.0)",
)
@click.option(
    "--api-port",
    type=int,
    help="API server port (default: 8000)",
)
@click.option(
    "--api-bearer-token",
    type=str,
    help="Bearer token for API authentication (if set, all endpoints except /docs, /redoc and /metrics require authentication)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: INFO)",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    help="Log format (default: json)",
)
@click.option(
    "--metrics/--no-metrics",
    default=None,
    help="Enable/disable Prometheus metrics (default: enabled)",
)
@click.option(
    "--webhook-timeout",
    type=float,
    help="Webhook HTTP request timeout in seconds (default: 30)",
)
@click.option(
    "--verify-tls/--no-verify-tls",
    default=None,
    help="Verify webhook TLS certificates (default: enabled)",
)
@click.option(
    "--parallel/--sequential",
    default=None,
    help="Post to all webhook URLs concurrently (default: sequential)",
)
@click.option(
    "--strict-status/--lenient-status",
    default=None,
    help="Count non-2xx webhook responses as failures (default: lenient)",
)
@click.option(
    "--default-language",
    type=str,
    help="Export language when a response has none (default: en)",
)
@click.option(
    "--host-backend",
    type=click.Choice(["memory", "remotecontrol"], case_sensitive=False),
    help="Survey host backend (default: memory)",
)
@click.option(
    "--host-fixtures",
    type=click.Path(exists=True),
    help="JSON fixture file for the memory backend",
)
@click.option(
    "--remotecontrol-url",
    type=str,
    help="LimeSurvey RemoteControl URL (e.g., https://survey.example.com/index.php/admin/remotecontrol)",
)
@click.option(
    "--remotecontrol-username",
    type=str,
    help="LimeSurvey RemoteControl username",
)
@click.option(
    "--remotecontrol-password",
    type=str,
    help="LimeSurvey RemoteControl password",
)
def server(**kwargs):
    """Start the Survey Webhook API server."""
    from .__main__ import Application

    # Filter out None values (unspecified options)
    cli_args = {k: v for k, v in kwargs.items() if v is not None}

    try:
        config = Config.from_args_and_env(cli_args)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    setup_logging(level=config.log_level, format_type=config.log_format)

    app = Application(config)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}")
        loop.create_task(app.stop())

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        loop.run_until_complete(app.run())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt")
    finally:
        loop.close()


@cli.group()
def settings():
    """Show and change the persisted webhook settings."""
    pass


@settings.command("show")
@db_path_option
@click.option(
    "--survey-id",
    type=int,
    multiple=True,
    help="Also show the settings and effective webhook configuration of this survey (repeatable)",
)
def settings_show(db_path, survey_id):
    """Show global settings and, optionally, per-survey settings.

    Examples:

    \b
      survey-webhook settings show
      survey-webhook settings show --survey-id 100 --survey-id 200
    """
    from .api.routes.settings import read_global_settings, read_survey_settings

    db_engine, store = _open_settings_store(db_path)
    try:
        output = {"global": read_global_settings(store).model_dump()}
        resolver = ConfigurationResolver(store)
        surveys = []
        for sid in survey_id:
            surveys.append({
                "settings": read_survey_settings(store, sid).model_dump(),
                "effective": resolver.resolve(sid).model_dump(),
            })
        if surveys:
            output["surveys"] = surveys
        click.echo(json.dumps(output, indent=2))
    finally:
        db_engine.close()


@settings.command("set-global")
@db_path_option
@click.option("--default-url", type=str, help="Webhook URL used when a survey has none")
@click.option("--default-auth-token", type=str, help="API token used when a survey has none")
@click.option("--debug/--no-debug", default=None, help="Render a debug report after each dispatch")
def settings_set_global(db_path, default_url, default_auth_token, debug):
    """Change global settings. Options left out are not changed."""
    updates = {
        SETTING_DEFAULT_URL: default_url,
        SETTING_DEFAULT_AUTH_TOKEN: default_auth_token,
        SETTING_DEBUG: debug,
    }
    updates = {k: v for k, v in updates.items() if v is not None}
    if not updates:
        click.echo("Error: nothing to change", err=True)
        sys.exit(1)

    db_engine, store = _open_settings_store(db_path)
    try:
        for name, value in updates.items():
            store.set_global_setting(name, value)
            click.echo(f"Set global {name}")
    finally:
        db_engine.close()


@settings.command("set-survey")
@click.argument("survey_id", type=click.IntRange(min=1))
@db_path_option
@click.option("--enable/--disable", "enabled", default=None, help="Enable webhooks for this survey")
@click.option(
    "--url",
    "urls",
    type=str,
    multiple=True,
    help="Webhook URL (repeatable, replaces the current list)",
)
@click.option("--clear-urls", is_flag=True, help="Remove all survey URLs (fall back to the default URL)")
@click.option("--auth-token", type=str, help="API token sent with this survey's webhooks")
def settings_set_survey(survey_id, db_path, enabled, urls, clear_urls, auth_token):
    """Change the webhook settings of one survey.

    Examples:

    \b
      survey-webhook settings set-survey 100 --enable \\
          --url https://a.example/hook --url https://b.example/hook
      survey-webhook settings set-survey 100 --clear-urls
    """
    if urls and clear_urls:
        click.echo("Error: --url and --clear-urls are mutually exclusive", err=True)
        sys.exit(1)

    updates = {}
    if enabled is not None:
        updates[SETTING_ENABLED] = enabled
    if urls:
        updates[SETTING_WEBHOOK_URLS] = "\n".join(urls)
    elif clear_urls:
        updates[SETTING_WEBHOOK_URLS] = ""
    if auth_token is not None:
        updates[SETTING_AUTH_TOKEN] = auth_token

    if not updates:
        click.echo("Error: nothing to change", err=True)
        sys.exit(1)

    db_engine, store = _open_settings_store(db_path)
    try:
        for name, value in updates.items():
            store.set_survey_setting(name, survey_id, value)
            click.echo(f"Set survey {survey_id} {name}")
    finally:
        db_engine.close()


@settings.command("migrate-legacy")
@db_path_option
@click.option(
    "--survey-ids",
    type=str,
    required=True,
    help="Legacy comma-separated list of survey IDs with webhooks enabled",
)
@click.option(
    "--webhook-url",
    type=str,
    help="Legacy single webhook URL, stored as the global default URL",
)
@click.option("--dry-run", is_flag=True, help="Preview changes without applying them")
def settings_migrate_legacy(db_path, survey_ids, webhook_url, dry_run):
    """Turn a legacy survey ID allow-list into per-survey enable flags.

    Examples:

    \b
      survey-webhook settings migrate-legacy --survey-ids "123, 456" \\
          --webhook-url https://hooks.example/survey
    """
    enabled_ids = []
    for survey_id in parse_survey_ids(survey_ids):
        if not survey_id:
            continue
        if not survey_id.isdigit():
            click.echo(f"Skipping invalid survey ID: {survey_id!r}", err=True)
            continue
        enabled_ids.append(int(survey_id))

    if not enabled_ids and not webhook_url:
        click.echo("Error: no survey IDs to migrate", err=True)
        sys.exit(1)

    if dry_run:
        for survey_id in enabled_ids:
            click.echo(f"Would enable survey {survey_id}")
        if webhook_url:
            click.echo(f"Would set global {SETTING_DEFAULT_URL}")
        return

    db_engine, store = _open_settings_store(db_path)
    try:
        for survey_id in enabled_ids:
            store.set_survey_setting(SETTING_ENABLED, survey_id, True)
            click.echo(f"Enabled survey {survey_id}")
        if webhook_url:
            store.set_global_setting(SETTING_DEFAULT_URL, webhook_url.strip())
            click.echo(f"Set global {SETTING_DEFAULT_URL}")
    finally:
        db_engine.close()


@cli.command()
@click.argument("survey_id", type=click.IntRange(min=1))
@click.argument("response_id", type=click.IntRange(min=1))
@db_path_option
@click.option(
    "--host-backend",
    type=click.Choice(["memory", "remotecontrol"], case_sensitive=False),
    help="Survey host backend (default: memory)",
)
@click.option(
    "--host-fixtures",
    type=click.Path(exists=True),
    help="JSON fixture file for the memory backend",
)
@click.option("--remotecontrol-url", type=str, help="LimeSurvey RemoteControl URL")
@click.option("--remotecontrol-username", type=str, help="LimeSurvey RemoteControl username")
@click.option("--remotecontrol-password", type=str, help="LimeSurvey RemoteControl password")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: INFO)",
)
def dispatch(survey_id, response_id, **kwargs):
    """Send one completed response to its webhooks, as if it were just submitted.

    Prints the dispatch result as JSON and exits with status 1 if any
    delivery failed or the dispatch could not run.

    Examples:

    \b
      survey-webhook dispatch 100 42 --host-fixtures fixtures.json
    """
    from .__main__ import build_handler, build_host
    from .database.engine import DatabaseEngine
    from .database.settings import DatabaseSettingsStore
    from .host.remote import RemoteControlHost
    from .subscriber.event_handler import STATUS_DELIVERED, STATUS_DISABLED, STATUS_NO_URLS

    cli_args = {k: v for k, v in kwargs.items() if v is not None}
    cli_args["metrics"] = False

    try:
        config = Config.from_args_and_env(cli_args)
        setup_logging(level=config.log_level, format_type="text")
        host = build_host(config)
    except (ValueError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    db_engine = DatabaseEngine(config.db_path)
    db_engine.initialize()
    handler = build_handler(config, DatabaseSettingsStore(db_engine), host)

    async def run():
        try:
            return await handler.handle_survey_completed(survey_id, response_id)
        finally:
            await handler.dispatcher.close()
            if isinstance(host, RemoteControlHost):
                await host.close()

    try:
        result = asyncio.run(run())
    finally:
        db_engine.close()

    click.echo(result.model_dump_json(indent=2))

    if result.status == STATUS_DELIVERED:
        if not all(outcome.succeeded for outcome in result.outcomes):
            sys.exit(1)
    elif result.status not in (STATUS_DISABLED, STATUS_NO_URLS):
        sys.exit(1)


@cli.command("parse-urls")
@click.argument("source", type=click.File("r"), default="-")
def parse_urls_command(source):
    """Print the webhook URLs a multi-line URL setting would produce.

    Reads SOURCE (default: standard input) and prints one URL per line.
    """
    for url in parse_urls(source.read()):
        click.echo(url)


if __name__ == "__main__":
    cli()
