"""Typer-powered command line for ``gwsettings``.

The CLI resolves the gateway settings from the current environment and either
renders them or reports the first validation error with a non-zero exit code,
which lets container entry points fail fast before any tunnel is started.
"""
from __future__ import annotations

import json
import logging
import os
import textwrap
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import ALLOWED_LOG_LEVELS, AppConfig, ConfigError, load_config
from .errors import SettingsError
from .exit_codes import ExitCode
from .pem import CERTIFICATE, PRIVATE_KEY, decode_block, extract, inspect_block
from .settings import AllSettings, load_settings

console = Console()
err_console = Console(stderr=True)

LOGGER = logging.getLogger(__name__)

CONFIG_FILE_OPTION = typer.Option(
    None,
    "--config-file",
    dir_okay=False,
    help="Override the path to gwsettings' YAML config file.",
)
LOG_LEVEL_OPTION = typer.Option(
    None,
    "--log-level",
    help="Logging level (debug|info|warning|error); defaults to the config value.",
)
JSON_OPTION = typer.Option(
    False,
    "--json",
    help="Emit the result as JSON.",
)
REVEAL_SECRETS_OPTION = typer.Option(
    False,
    "--reveal-secrets",
    help="Include extracted OpenVPN credentials instead of redacting them.",
)
PEM_PATH_ARGUMENT = typer.Argument(
    ...,
    dir_okay=False,
    help="File holding the PEM encoded key or certificate.",
)
PEM_KIND_OPTION = typer.Option(
    "private-key",
    "--kind",
    help="Expected PEM content (private-key|certificate).",
)

_PEM_KINDS = {"private-key": PRIVATE_KEY, "certificate": CERTIFICATE}

app = typer.Typer(
    add_completion=False,
    help=textwrap.dedent(
        """
        VPN/DNS gateway settings validator.

        Reads the gateway environment variables and secret files, validates
        them and renders the typed settings consumed by the tunnel, DNS and
        firewall components.
        """
    ).strip(),
)
pem_app = typer.Typer(help="Extract and inspect PEM credentials.")
config_app = typer.Typer(help="Inspect the gwsettings tool configuration.")

app.add_typer(pem_app, name="pem")
app.add_typer(config_app, name="config")


@dataclass
class RuntimeContext:
    """Objects shared by commands."""

    config: AppConfig
    env: Mapping[str, str]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


def _command_error(message: str, *, rc: int = ExitCode.VALIDATION) -> NoReturn:
    """Print *message* and terminate the command with *rc*."""
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(code=int(rc))


def _ensure_runtime(
    ctx: typer.Context,
    config_file: Path | None,
    log_level: str | None,
) -> RuntimeContext:
    if isinstance(ctx.obj, RuntimeContext):
        return ctx.obj
    env = dict(os.environ)
    try:
        config = load_config(config_file, env=env)
    except ConfigError as exc:
        _command_error(str(exc))
    level = (log_level or config.log_level).lower()
    if level not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        _command_error(f"Unsupported log level '{log_level}'. Allowed: {allowed}.")
    _configure_logging(level)
    runtime = RuntimeContext(config=config, env=env)
    ctx.obj = runtime
    return runtime


def _get_runtime(ctx: typer.Context) -> RuntimeContext:
    runtime = ctx.find_root().obj
    if isinstance(runtime, RuntimeContext):
        return runtime
    return _ensure_runtime(ctx.find_root(), None, None)


@app.callback(invoke_without_command=True)
def _root(  # noqa: D401 - Typer displays help for us, docstring optional.
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show the gwsettings version and exit.",
    ),
    config_file: Path | None = CONFIG_FILE_OPTION,
    log_level: str | None = LOG_LEVEL_OPTION,
) -> None:
    """Entry point callback invoked for every CLI execution."""
    if version:
        console.print(f"gwsettings {__version__}")
        raise typer.Exit(code=int(ExitCode.OK))
    _ensure_runtime(ctx, config_file, log_level)
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _resolve(runtime: RuntimeContext) -> AllSettings:
    try:
        return load_settings(runtime.env, config=runtime.config)
    except SettingsError as exc:
        LOGGER.debug("Settings resolution failed", exc_info=True)
        _command_error(f"Invalid settings: {exc}")


def _render_settings(settings: AllSettings, *, reveal_secrets: bool) -> None:
    data = settings.to_dict(reveal_secrets=reveal_secrets)
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Group", style="bold")
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("vpn", "provider", str(data["vpn_provider"]))
    for group in ("dns", "cyberghost"):
        values = data.get(group)
        if not isinstance(values, Mapping):
            continue
        for key, value in values.items():
            rendered = ", ".join(map(str, value)) if isinstance(value, list) else str(value)
            table.add_row(group, key, escape(rendered))
    console.print(table)


def _print_warnings(settings: AllSettings) -> None:
    for warning in settings.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning.message)}")


@app.command()
def show(
    ctx: typer.Context,
    json_output: bool = JSON_OPTION,
    reveal_secrets: bool = REVEAL_SECRETS_OPTION,
) -> None:
    """Resolve the settings from the environment and display them."""
    runtime = _get_runtime(ctx)
    settings = _resolve(runtime)
    if json_output:
        console.print_json(data=settings.to_dict(reveal_secrets=reveal_secrets))
        return
    _render_settings(settings, reveal_secrets=reveal_secrets)
    _print_warnings(settings)


@app.command()
def check(ctx: typer.Context) -> None:
    """Validate the settings and exit non-zero on the first error."""
    runtime = _get_runtime(ctx)
    settings = _resolve(runtime)
    _print_warnings(settings)
    if settings.warnings:
        console.print("[yellow]Settings valid with warnings.[/yellow]")
        return
    console.print("[green]Settings valid.[/green]")


def _read_pem_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        _command_error(f"Cannot read {path}: {exc}", rc=ExitCode.ENVIRONMENT)


@pem_app.command("extract")
def pem_extract(
    path: Path = PEM_PATH_ARGUMENT,
    kind: str = PEM_KIND_OPTION,
) -> None:
    """Print the inline base64 payload of a PEM key or certificate."""
    normalized = kind.strip().lower()
    if normalized not in _PEM_KINDS:
        _command_error(f"Unsupported PEM kind '{kind}'. Allowed: certificate, private-key.")
    data = _read_pem_file(path)
    try:
        payload = extract(data, _PEM_KINDS[normalized])
    except SettingsError as exc:
        _command_error(f"{path}: {exc}")
    console.print(payload, soft_wrap=True, highlight=False, markup=False)


@pem_app.command("inspect")
def pem_inspect(
    path: Path = PEM_PATH_ARGUMENT,
    json_output: bool = JSON_OPTION,
) -> None:
    """Describe the key or certificate held in a PEM file."""
    data = _read_pem_file(path)
    try:
        description = inspect_block(decode_block(data))
    except SettingsError as exc:
        _command_error(f"{path}: {exc}")
    if json_output:
        console.print_json(data=description)
        return
    table = Table(show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in description.items():
        table.add_row(key, escape(str(value)))
    console.print(table)


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    json_output: bool = JSON_OPTION,
) -> None:
    """Display the effective tool configuration after merges."""
    runtime = _get_runtime(ctx)
    data = runtime.config.to_dict()
    if json_output:
        console.print_json(data=data)
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in data.items():
        if isinstance(value, dict):
            rendered = json.dumps(value, indent=2, sort_keys=True)
        else:
            rendered = str(value)
        table.add_row(key, escape(rendered))
    console.print(table)


def main() -> None:
    """Console script entry point."""
    app()


__all__ = ["app", "main"]
