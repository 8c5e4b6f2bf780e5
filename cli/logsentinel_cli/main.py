import click
from .commands.init_config import init_config
from .commands.parse import parse
from .commands.run import run

@click.group()
@click.version_option(version="0.1.0")
def cli():
    """LogSentinel - error log watcher and alerter"""
    pass

cli.add_command(run)
cli.add_command(parse)
cli.add_command(init_config)

if __name__ == "__main__":
    cli()
