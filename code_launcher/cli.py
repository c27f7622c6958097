"""CLI entry point: code-launcher.

Subcommands:
    code-launcher scan [ROOT]              # Scan a directory tree for projects
    code-launcher list [QUERY]             # Configured projects, ignore list + search applied
    code-launcher open PROJECT             # Launch a project in its IDE
    code-launcher config set-dir DIR       # Manage persistent settings
"""

from __future__ import annotations

import asyncio
import json
import os
import sys

import click

from code_launcher.catalog import ProjectCatalog, ProjectEntry, build_entry
from code_launcher.classifier import display_label, pick_toolchain
from code_launcher.constants import IDE_COMMANDS, SCAN_LIMIT_DEPTH, SCAN_LIMIT_PROJECTS
from code_launcher.core.logging import setup_logging
from code_launcher.exceptions import LauncherError
from code_launcher.launcher import launch_project
from code_launcher.scanner import ScanOptions, scan, use_locale_collation
from code_launcher.settings import SettingsStore


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _entry_rows(entries: list[ProjectEntry]) -> list[dict]:
    return [
        {
            "path": e.path,
            "label": e.label,
            "toolchain": e.toolchain,
            "icon": {"kind": e.icon.kind, "value": e.icon.value},
        }
        for e in entries
    ]


def _print_rows(rows: list[dict], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return
    width = max((len(r["label"]) for r in rows), default=0)
    for r in rows:
        click.echo(f"  {r['label']:{width}s}  {r['toolchain']:10s}  {r['path']}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Settings directory (default: CODE_LAUNCHER_CONFIG_DIR or the user config dir)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_dir: str | None) -> None:
    """Code Launcher: find projects under a directory and open them in their IDE."""
    setup_logging("DEBUG" if verbose else None)
    use_locale_collation()
    ctx.obj = SettingsStore(config_dir)


@main.command("scan")
@click.argument("root", required=False)
@click.option("--max-depth", type=click.IntRange(min=0), default=SCAN_LIMIT_DEPTH, show_default=True)
@click.option(
    "--max-projects", type=click.IntRange(min=1), default=SCAN_LIMIT_PROJECTS, show_default=True
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def scan_cmd(
    store: SettingsStore, root: str | None, max_depth: int, max_projects: int, as_json: bool
) -> None:
    """Scan ROOT (default: the configured scan directory) for projects."""
    try:
        root = root or store.load().scan_directory
        if not root:
            _fail("No ROOT given and no scan directory configured.")
        options = ScanOptions(max_projects=max_projects, max_depth=max_depth)
        projects = asyncio.run(scan(root, options))
    except LauncherError as e:
        _fail(str(e))

    if not projects and not as_json:
        click.echo("No projects found.")
        return
    if not as_json:
        click.echo(f"Found {len(projects)} project(s) under {os.path.abspath(root)}\n")
    _print_rows(_entry_rows([build_entry(p) for p in projects]), as_json)


@main.command("list")
@click.argument("query", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_cmd(store: SettingsStore, query: str | None, as_json: bool) -> None:
    """List projects in the configured directory, optionally matching QUERY."""
    catalog = ProjectCatalog(store)
    try:
        view = asyncio.run(catalog.refresh())
        if catalog.has_scanned:
            view = catalog.view(query)
    except LauncherError as e:
        _fail(str(e))

    if view.message is not None:
        if as_json:
            click.echo("[]")
        else:
            click.echo(view.message)
        return

    _print_rows(_entry_rows(view.entries), as_json)


@main.command("open")
@click.argument("project", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--ide",
    type=click.Choice(sorted(IDE_COMMANDS)),
    default=None,
    help="Toolchain to use instead of the detected one",
)
def open_cmd(project: str, ide: str | None) -> None:
    """Open PROJECT in its IDE."""
    project = os.path.abspath(project)
    toolchain = ide or pick_toolchain(project)
    try:
        result = asyncio.run(launch_project(project, toolchain))
    except LauncherError as e:
        _fail(str(e))
    click.echo(f"Opened {display_label(project)} with {toolchain} (pid {result.pid})")


# ── config ──


@main.group("config")
def config_group() -> None:
    """Show or change persistent settings."""


@config_group.command("show")
@click.pass_obj
def config_show(store: SettingsStore) -> None:
    """Print the current settings as JSON."""
    try:
        settings = store.load()
    except LauncherError as e:
        _fail(str(e))
    click.echo(json.dumps(settings.to_json(), indent=2))


@config_group.command("set-dir")
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.pass_obj
def config_set_dir(store: SettingsStore, directory: str) -> None:
    """Set the directory scanned by `list`."""
    try:
        settings = store.set_scan_directory(os.path.abspath(directory))
    except LauncherError as e:
        _fail(str(e))
    click.echo(f"Scan directory set to {settings.scan_directory}")


@config_group.command("ignore")
@click.argument("project")
@click.pass_obj
def config_ignore(store: SettingsStore, project: str) -> None:
    """Hide PROJECT from `list`."""
    try:
        store.ignore(os.path.abspath(project))
    except LauncherError as e:
        _fail(str(e))
    click.echo(f"Ignoring {os.path.abspath(project)}")


@config_group.command("unignore")
@click.argument("project")
@click.pass_obj
def config_unignore(store: SettingsStore, project: str) -> None:
    """Show PROJECT in `list` again."""
    try:
        store.unignore(os.path.abspath(project))
    except LauncherError as e:
        _fail(str(e))
    click.echo(f"No longer ignoring {os.path.abspath(project)}")


if __name__ == "__main__":
    main()
