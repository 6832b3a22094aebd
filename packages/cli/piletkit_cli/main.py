"""piletkit CLI - Main entry point."""
import typer
from . import upgrade_cmd, info_cmd

app = typer.Typer(
    name="piletkit",
    help="piletkit CLI - Upgrade and maintain pilets",
    no_args_is_help=True,
    add_completion=False
)

# Register all commands
app.command(name="upgrade-pilet")(upgrade_cmd.upgrade_pilet)
app.command()(info_cmd.version)
app.command()(info_cmd.doctor)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
