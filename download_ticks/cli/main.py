"""Main CLI entry point for download-ticks.

This module provides the main click group and lazy loading
of subcommands to keep startup fast.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from download_ticks.errors import ConfigError
from download_ticks.logging_config import LOG_LEVELS, setup_logging

# Console for rich output; stdout is reserved for JSON data
console = Console(stderr=True)


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Subcommand modules are only imported when they are invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        base = super().list_commands(ctx)
        return sorted(set(base + list(self._lazy_subcommands)))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name in self.commands:
            return self.commands[cmd_name]
        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)
        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Import a command's module and register the command."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = getattr(module, cmd_name, None)
        if not isinstance(cmd, click.Command):
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    "fetch": "download_ticks.cli.fetch",
    "info": "download_ticks.cli.info",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def print_error(message: str, title: str = "Error") -> None:
    """Show an error panel on stderr."""
    console.print(Panel(
        f"[red]{escape(message)}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="download-ticks")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/download-ticks/config.toml)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level (default: from config, WARNING)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], log_level: Optional[str]) -> None:
    """download-ticks - fetch historical candlestick (kline) data.

    Downloads klines from exchange REST APIs, splitting long date ranges
    into requests of at most 1000 candles, and saves them as JSON.

    \b
    Examples:
      download-ticks fetch -s BTCUSDT -i 1h
      download-ticks fetch -s BTCUSDT -i 1m -f 2019-01-01T00:00:00Z \\
          -t 2019-03-01T00:00:00Z -o output.json
      download-ticks info -o output.json
    """
    from download_ticks.config import load_config

    ctx.ensure_object(dict)

    try:
        settings = load_config(config_path)
    except ConfigError as e:
        print_error(str(e), title="Configuration Error")
        raise SystemExit(1)

    ctx.obj["settings"] = settings
    ctx.obj["log_level_set"] = log_level is not None
    setup_logging(log_level or settings.logging.level, console=console)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
