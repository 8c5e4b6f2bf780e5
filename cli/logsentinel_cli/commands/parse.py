import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agent.logsentinel.parser.line import LineParser

console = Console()

LEVEL_STYLES = {
    "Warning": "yellow",
    "Error": "red",
    "Fatal": "bold red",
}


@click.command()
@click.argument("log_file", type=click.File("r", encoding="utf-8", errors="replace"))
@click.option("--limit", "-n", default=50, help="Maximum number of events to show")
def parse(log_file, limit):
    """Show which lines of LOG_FILE the agent would turn into events."""
    parser = LineParser()
    total = 0
    events = []

    for line in log_file:
        total += 1
        event = parser.parse(line.rstrip("\r\n"))
        if event is not None:
            events.append(event)

    if not events:
        console.print(f"No events found in {total} lines.")
        return

    table = Table(title=f"{len(events)} events from {total} lines")
    table.add_column("Time", style="dim")
    table.add_column("Level")
    table.add_column("Source", style="cyan")
    table.add_column("Message")
    table.add_column("Trace", style="dim")

    for event in events[:limit]:
        style = LEVEL_STYLES.get(event.level, "green")
        table.add_row(
            event.timestamp.isoformat(),
            f"[{style}]{escape(event.level)}[/{style}]",
            escape(event.source),
            escape(event.message),
            escape(event.stack_trace.splitlines()[0]) if event.stack_trace else "",
        )

    console.print(table)
    if len(events) > limit:
        console.print(f"... {len(events) - limit} more not shown")
