"""dotfailes CLI - manage dotfiles for several setups with bare git repos."""

import typer

from ..utils import get_version, setup_logging
from . import bash, install, remote, setup_cmd, sync

# Create the main app
app = typer.Typer(
    name="dotfailes",
    help="Dotfile management using bare git repositories.",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging output.",
    ),
):
    """dotfailes - track dotfiles for several setups with bare git repos.

    Setups are stored in $DOTFILES_DIR/config.json (default ~/.dotfailes).
    """
    setup_logging(verbose=verbose)


# Register all commands
setup_cmd.register(app)
remote.register(app)
sync.register(app)
bash.register(app)
install.register(app)


@app.command(name="help")
def show_help(ctx: typer.Context):
    """Show this help message."""
    typer.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


@app.command()
def version():
    """Show the version of dotfailes."""
    typer.echo(f"dotfailes version {get_version()}")


def main():
    """Main entry point for the dotfailes CLI."""
    app()
