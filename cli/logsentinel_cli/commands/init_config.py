from pathlib import Path

import click
import yaml
from rich.console import Console

from agent.logsentinel.config.defaults import DEFAULT_CONFIG

console = Console()


@click.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(path, force):
    """Write a starter config file to PATH."""
    if path.exists() and not force:
        console.print(f"[bold red]Error:[/bold red] {path} exists (use --force)")
        raise SystemExit(1)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(DEFAULT_CONFIG, f, sort_keys=False)
    console.print(f"Wrote default config to {path}")
