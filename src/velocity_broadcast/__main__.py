# velocity_broadcast/__main__.py
"""
Command-line tool for operating VelocityBroadcast outside a running proxy.

It works on the same settings file the plugin uses, runs update checks, and
can drive the plugin's commands through an in-process console proxy, which
is handy for previewing prefixes and colour codes.
"""
import logging
import os
import sys
from typing import Tuple

import appdirs
import click

from velocity_broadcast import __version__
from velocity_broadcast.config.const import (
    COMMAND_NAME,
    PERMISSION_UPDATE,
    PLUGIN_VERSION,
    app_name_title,
    env_name,
)
from velocity_broadcast.config.settings import Settings
from velocity_broadcast.core.updates import UpdateChecker
from velocity_broadcast.formatting import colorize, to_ansi
from velocity_broadcast.logging import log_separator, setup_logging
from velocity_broadcast.plugin import VelocityBroadcastPlugin
from velocity_broadcast.proxy import ConsolePlayer, ConsoleProxy, ConsoleSource

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _load_settings(ctx: click.Context) -> Settings:
    settings = Settings(ctx.obj["data_dir"])
    settings.initialize()
    return settings


def _build_plugin(ctx: click.Context, player_names: Tuple[str, ...]):
    players = [ConsolePlayer(name=name, echo=True) for name in player_names]
    proxy = ConsoleProxy(players)
    plugin = VelocityBroadcastPlugin(proxy, ctx.obj["data_dir"])
    plugin.on_load()
    return proxy, plugin


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__, "-v", "--version", message=f"{app_name_title} %(version)s"
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    envvar=f"{env_name}_DATA_DIR",
    help="Plugin data directory holding config.yml.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Console log level.",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: str, log_level: str):
    """Manage VelocityBroadcast settings, update checks and broadcasts."""
    data_dir = data_dir or appdirs.user_config_dir(app_name_title)
    logger = setup_logging(
        log_dir=os.path.join(data_dir, "logs"),
        cli_log_level=getattr(logging, log_level.upper()),
        force_reconfigure=True,
    )
    log_separator(logger, app_name=app_name_title, app_version=__version__)
    ctx.obj = {"data_dir": data_dir}


@cli.group("config")
def config_group():
    """Inspect or change the settings file."""
    pass


@config_group.command("show")
@click.pass_context
def show_config(ctx: click.Context):
    """Prints the settings, creating or migrating the file first."""
    settings = _load_settings(ctx)
    click.secho(f"{app_name_title} settings ({settings.config_path})", fg="magenta", bold=True)
    for key, value in settings.as_dict().items():
        click.echo(f"  {key}: {value!r}")
    click.echo("  Prefix preview: " + to_ansi(colorize(settings.get_prefix() + "Hello")))


@config_group.command("migrate")
@click.pass_context
def migrate_config(ctx: click.Context):
    """Brings the settings file up to the running plugin version."""
    settings = Settings(ctx.obj["data_dir"])
    existed = os.path.isfile(settings.config_path)
    settings.initialize()

    report = settings.last_migration
    if not existed:
        click.secho(f"Created {settings.config_path} with default settings.", fg="green")
    elif report is None:
        click.secho(
            f"Settings are already at version {PLUGIN_VERSION}; file left unchanged.",
            fg="cyan",
        )
    else:
        click.secho(
            f"Rewrote {settings.config_path}: version '{report.from_version}' -> "
            f"'{report.to_version}'.",
            fg="green",
        )
        click.echo(f"  Kept keys: {', '.join(report.preserved_keys) or 'none'}")


@config_group.command("set-prefix")
@click.argument("prefix", nargs=-1, required=True)
@click.pass_context
def set_prefix(ctx: click.Context, prefix: Tuple[str, ...]):
    """Sets the broadcast prefix."""
    text = " ".join(prefix)
    if not text.strip():
        raise click.UsageError("The prefix cannot be empty.")
    settings = _load_settings(ctx)
    settings.set_prefix(text)
    click.secho("Prefix updated: ", fg="green", nl=False)
    click.echo(to_ansi(colorize(settings.get_prefix())))


@config_group.command("set-update-check")
@click.argument("state", type=click.Choice(["on", "off"], case_sensitive=False))
@click.pass_context
def set_update_check(ctx: click.Context, state: str):
    """Turns the startup and login update checks on or off."""
    settings = _load_settings(ctx)
    settings.set_update_check_enabled(state.lower() == "on")
    click.secho(f"Update check turned {state.lower()}.", fg="green")


@cli.command("check-updates")
@click.pass_context
def check_updates(ctx: click.Context):
    """Asks the resource page for the latest version."""
    settings = _load_settings(ctx)
    checker = UpdateChecker(settings)
    result = checker.fetch_latest_version()
    if not result.is_known:
        click.secho("Could not determine the latest version. See the log for details.", fg="yellow")
        sys.exit(1)
    if result.is_current:
        click.secho(f"You are using the latest version ({result.latest_version}).", fg="green")
    else:
        console = ConsoleSource(permissions=[PERMISSION_UPDATE], echo=True)
        checker.notify_if_stale(result, console)


@cli.command(
    "send", context_settings=dict(ignore_unknown_options=True)
)
@click.option("--player", "players", multiple=True, help="Simulated connected player (repeatable).")
@click.argument("arguments", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def send(ctx: click.Context, players: Tuple[str, ...], arguments: Tuple[str, ...]):
    """Runs one /vbroadcast command as the console."""
    proxy, plugin = _build_plugin(ctx, players)
    try:
        proxy.dispatch(ConsoleSource(echo=True), " ".join((COMMAND_NAME,) + arguments))
    finally:
        plugin.on_unload()


@cli.command("console")
@click.option("--player", "players", multiple=True, help="Simulated connected player (repeatable).")
@click.pass_context
def console(ctx: click.Context, players: Tuple[str, ...]):
    """Interactive console. Enter commands such as 'vb Hello' or 'vb reload'."""
    proxy, plugin = _build_plugin(ctx, players)
    source = ConsoleSource(echo=True)
    plugin.on_proxy_initialize()
    click.secho(
        f"{app_name_title} console. Commands: {', '.join(proxy.command_labels)}. Type 'exit' to quit.",
        fg="cyan",
    )
    try:
        while True:
            try:
                line = click.prompt("", prompt_suffix="> ", default="", show_default=False)
            except click.Abort:
                break
            if line.strip().lower() in ("exit", "quit"):
                break
            if line.strip():
                proxy.dispatch(source, line)
    finally:
        plugin.on_unload()


def main():
    """Main execution function wrapped for final, fatal exception handling."""
    try:
        cli()
    except Exception as e:
        logging.getLogger("velocity_broadcast").critical(
            "A fatal, unhandled error occurred.", exc_info=True
        )
        click.secho(f"\nFATAL UNHANDLED ERROR: {type(e).__name__}: {e}", fg="red", bold=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
