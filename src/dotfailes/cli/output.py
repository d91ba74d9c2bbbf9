"""Console output helpers for the CLI."""

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def info(message: str) -> None:
    console.print(f"[blue]\\[INFO][/blue] {escape(message)}")


def success(message: str) -> None:
    console.print(f"[green]\\[SUCCESS][/green] {escape(message)}")


def warning(message: str) -> None:
    err_console.print(f"[yellow]\\[WARN][/yellow] {escape(message)}")


def error(message: str) -> None:
    err_console.print(f"[red]\\[ERROR][/red] {escape(message)}")


def header(message: str) -> None:
    console.print(f"\n[bold]{escape(message)}[/bold]")


def muted(message: str) -> None:
    console.print(f"[dim]{escape(message)}[/dim]")


def plain(message: str = "") -> None:
    console.print(escape(message))
