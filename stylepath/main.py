"""stylepath CLI - inspect how import identifiers resolve."""

import asyncio
import logging
import os
import sys
from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from rich.table import Table

from .console import console
from .console import err_console
from .errors import StylepathError
from .importers import create_importer
from .importers import resolve_request
from .logging_setup import init_json_logging
from .models import ImportRequest
from .name_expander import NameExpander
from .sandbox import is_permitted
from .settings import AppSettings
from .settings import ResolverSettings
from .settings import SettingsPaths
from .utils.error_format import error_label
from .utils.error_format import escape_markup
from .utils.error_format import format_error_message

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write JSONL logs to this file")
@click.option("--log-level", default=None, help="Log level for --log-file (default: INFO)")
@click.pass_context
def cli(ctx: click.Context, log_file: str | None, log_level: str | None):
    """Resolve stylesheet import identifiers to files on disk."""
    if log_file:
        init_json_logging(log_file, log_level)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command(name="resolve")
@click.argument("identifier")
@click.option("--from", "prev", default="stdin", help="Path of the requesting stylesheet")
@click.option("--root", type=click.Path(file_okay=False), default=None, help="Project root (default: CWD)")
@click.option("--include-path", "include_paths", multiple=True, help="Extra search directory (repeatable)")
@click.option("--sandbox", "sandbox", multiple=True, help="Sandbox root for filesystem functions (repeatable)")
@click.option("--show-contents", is_flag=True, help="Print the resolved file contents")
def resolve_cmd(
    identifier: str,
    prev: str,
    root: str | None,
    include_paths: tuple[str, ...],
    sandbox: tuple[str, ...],
    show_contents: bool,
):
    """Resolve IDENTIFIER as if imported from --from."""
    project_dir = Path(root) if root else None
    settings = AppSettings(SettingsPaths.default(project_dir)).resolver_settings(
        root=root,
        include_paths=list(include_paths) or None,
        fs_sandbox=list(sandbox) or None,
    )
    importer = create_importer(settings)

    try:
        result = asyncio.run(resolve_request(importer, ImportRequest(identifier=identifier, prev=prev)))
    except StylepathError as e:
        err_console.print(f"[red]{error_label(e)}:[/red] {escape_markup(format_error_message(e, include_type=False))}")
        sys.exit(1)

    if result is None:
        err_console.print(f"[red]Import not found:[/red] {escape_markup(identifier)}")
        sys.exit(1)

    console.print(f"[cyan]{escape_markup(result.file)}[/cyan]")
    if os.path.isabs(result.file) and not is_permitted(result.file, settings.sandbox):
        console.print("[yellow]outside the filesystem sandbox[/yellow]")
    if result.already_imported:
        console.print("[dim]already imported[/dim]")
    if show_contents:
        console.print(escape_markup(result.contents), highlight=False)


@cli.command(name="expand")
@click.argument("name")
@click.option("--location", "locations", multiple=True, required=True, help="Base directory (repeatable, in priority order)")
def expand_cmd(name: str, locations: tuple[str, ...]):
    """List candidate files for NAME in priority order."""
    expander = NameExpander(name)
    for location in locations:
        expander.add_location(str(Path(location).absolute()))

    table = Table(title=f"Candidates for {escape_markup(name)}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Path", style="cyan")
    table.add_column("Exists", style="green")

    for index, candidate in enumerate(expander.files, start=1):
        table.add_row(str(index), escape_markup(candidate), "yes" if Path(candidate).is_file() else "")

    console.print(table)


@cli.group(name="config")
def config_group():
    """Read and write settings (global, project, local scopes)."""


@config_group.command(name="set")
@click.argument("key")
@click.argument("value")
@click.option(
    "--scope",
    type=click.Choice(["local", "project", "global"]),
    default="project",
    help="Settings file to write (default: project)",
)
@click.option("--project-dir", type=click.Path(file_okay=False), default=None, help="Project directory (default: CWD)")
def config_set(key: str, value: str, scope: str, project_dir: str | None):
    """Set KEY to VALUE (parsed as YAML) in one settings scope."""
    if key not in ResolverSettings.model_fields:
        err_console.print(f"[red]Unknown setting:[/red] {escape_markup(key)}")
        sys.exit(1)

    parsed = yaml.safe_load(value)
    try:
        ResolverSettings.model_validate({key: parsed})
    except ValidationError as e:
        err_console.print(f"[red]Invalid value for {escape_markup(key)}:[/red] {escape_markup(e.errors()[0]['msg'])}")
        sys.exit(1)

    app_settings = AppSettings(SettingsPaths.default(Path(project_dir) if project_dir else None))
    app_settings.update_setting(key, parsed, scope=scope)
    console.print(f"[green]✓ Set {escape_markup(key)} in {scope} settings[/green]")


@config_group.command(name="show")
@click.option("--project-dir", type=click.Path(file_okay=False), default=None, help="Project directory (default: CWD)")
def config_show(project_dir: str | None):
    """Print the merged settings."""
    merged = AppSettings(SettingsPaths.default(Path(project_dir) if project_dir else None)).get_merged_settings()
    if not merged:
        console.print("[dim]No settings[/dim]")
        return
    console.print(escape_markup(yaml.safe_dump(merged, default_flow_style=False)), highlight=False)


def main():
    cli()


if __name__ == "__main__":
    main()
