import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from agent.logsentinel.config.defaults import CONFIG_ENV_VAR
from agent.logsentinel.main import run_agent

console = Console()


@click.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV_VAR,
    help="Path to the YAML config file",
)
def run(config_path):
    """Tail the configured log file and send alerts."""
    try:
        code = run_agent(str(config_path) if config_path else None)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(2)
    sys.exit(code)
