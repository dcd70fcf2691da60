"""CLI main entry point."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click
import tomlkit

from .config import Config
from .consts import LOG_FILENAME
from .db import close_db, create_tables, init_db
from .errors import SettingsPageException
from .host import Host
from .i18n import initialize
from .log import setup as setup_log
from .options import DBOptionStore
from .web import create_app

logger = logging.getLogger(__name__)


def _drop_nulls(value: Any) -> Any:
    # TOML has no null.
    if isinstance(value, Mapping):
        return {str(k): _drop_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_drop_nulls(v) for v in value if v is not None]
    return value


def options_to_toml(options: Mapping[str, Any]) -> str:
    """Serialize option records as a TOML document, one table per record.

    Scalar records come first so they stay at the top level of the document.
    """
    doc = tomlkit.document()
    doc.add(tomlkit.comment("Exported settings page option records"))

    records = {name: _drop_nulls(value) for name, value in options.items() if value is not None}
    for name, value in records.items():
        if not isinstance(value, Mapping):
            doc.add(name, value)
    for name, value in records.items():
        if isinstance(value, Mapping):
            table = tomlkit.table()
            table.update(value)
            doc.add(name, table)
    return tomlkit.dumps(doc)


def _load_config(ctx) -> Config:
    cfg = Config.load_from_file(ctx.obj["config_path"])
    setup_log(Path(cfg.data_dir) / LOG_FILENAME)
    return cfg


def _open_host(cfg: Config) -> Host:
    init_db(cfg.database_path)
    create_tables()
    return Host(DBOptionStore(), secret_key=cfg.web.secret_key, language=cfg.language)


@click.group()
@click.option("--config", "-c", default="config.toml", help="Configuration file path")
@click.pass_context
def cli(ctx, config: str):
    """Settings page builder - tabbed admin settings pages from a TOML schema."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command(name="serve")
@click.option("--host", "-h", default=None, help="Override host from config")
@click.option("--port", "-p", default=None, type=int, help="Override port from config")
@click.option(
    "--debug/--no-debug",
    default=None,
    help="Enable/disable debug mode (defaults to [web] debug)",
)
@click.pass_context
def serve(ctx, host, port, debug):
    """Start the admin web server."""
    try:
        cfg = _load_config(ctx)
        logger.info(f"Loaded configuration file: {ctx.obj['config_path']}")

        initialize(ui_language=cfg.language)

        host = host or cfg.web.host
        port = port or cfg.web.port
        if debug is None:
            debug = cfg.web.debug

        if debug:
            logger.warning(
                "Debug mode is enabled. This should NOT be used in production."
            )

        app = create_app(cfg)

        logger.info(f"Starting admin server on {host}:{port}")
        app.run(host=host, port=port, debug=debug, use_reloader=debug)

    except SettingsPageException as e:
        logger.error(f"Application error: {e}", exc_info=True)
        raise click.ClickException(str(e))


@cli.command(name="options")
@click.argument("name", required=False)
@click.pass_context
def options(ctx, name: str | None):
    """Print stored option records as JSON."""
    try:
        cfg = _load_config(ctx)
        host = _open_host(cfg)

        if name is None:
            click.echo(json.dumps(host.all_options(), indent=2, ensure_ascii=False))
            return

        value = host.get_option(name, None)
        if value is None:
            raise click.ClickException(f"Option not found: {name}")
        click.echo(json.dumps(value, indent=2, ensure_ascii=False))
    except SettingsPageException as e:
        raise click.ClickException(str(e))
    finally:
        close_db()


@cli.command(name="export")
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def export(ctx, output: str | None):
    """Export stored option records as TOML."""
    try:
        cfg = _load_config(ctx)
        host = _open_host(cfg)
        content = options_to_toml(host.all_options())

        if output is None:
            click.echo(content, nl=False)
            return

        Path(output).write_text(content, encoding="utf-8")
        logger.info(f"Exported option records to {output}")
    except SettingsPageException as e:
        raise click.ClickException(str(e))
    finally:
        close_db()


@cli.command(name="schema")
@click.pass_context
def schema(ctx):
    """List configured sections and fields."""
    try:
        cfg = _load_config(ctx)
    except SettingsPageException as e:
        raise click.ClickException(str(e))

    click.echo("section\tfield\ttype\tname")
    for section in cfg.sections:
        click.echo(f"{section.id}\t\t\t{section.title}")
        for spec in cfg.fields.get(section.id, []):
            click.echo(f"{section.id}\t{spec.id}\t{spec.type.value}\t{spec.name or ''}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
