"""Upgrade command - Upgrade the base package of a pilet."""
import typer
from pathlib import Path
from typing import Optional

from piletkit_common import configure_logging
from piletkit_schema import ForceOverwrite
from piletkit_sdk import NpmClient
from piletkit_sdk import upgrade_pilet as run_upgrade
from .utils import console, success, info, warning, handle_error, confirm_action

app = typer.Typer()


def _confirm_overwrite(path: str) -> bool:
    return confirm_action(f'"{path}" was changed locally. Overwrite it?', default=False)


@app.command(name="upgrade-pilet")
def upgrade_pilet(
    target: str = typer.Argument(
        ".",
        help="Directory of the pilet to upgrade"
    ),
    version: str = typer.Option(
        "latest",
        "--version",
        help="Version, tag, local path (relative to the pilet) or git URL of the base package"
    ),
    force_overwrite: ForceOverwrite = typer.Option(
        ForceOverwrite.NO,
        "--force-overwrite",
        case_sensitive=False,
        help="Overwrite template files: no, prompt (if changed) or yes"
    ),
    npm_client: Optional[NpmClient] = typer.Option(
        None,
        "--npm-client",
        case_sensitive=False,
        help="Package manager to use (detected from lock files by default)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show detailed output"
    )
):
    """
    Upgrade the base package (app shell) of a pilet.

    Installs the requested version of the base package, patches the
    pilet's package.json, refreshes the template files, reinstalls the
    dependencies and runs the base package's upgrade hooks.

    Examples:
        piletkit upgrade-pilet
        piletkit upgrade-pilet ./my-pilet --version 2.0.0
        piletkit upgrade-pilet --version ../shell/piral-base-2.0.0.tgz
        piletkit upgrade-pilet --force-overwrite prompt
    """
    configure_logging("debug" if verbose else None)

    try:
        result = run_upgrade(
            base_dir=Path.cwd(),
            version=version,
            target=target,
            force_overwrite=force_overwrite,
            npm_client=npm_client,
            confirm=_confirm_overwrite,
        )

        console.print()
        success(
            f"Upgraded [bold]{result.source_name}[/bold] to "
            f"[bold cyan]{result.package_version or result.package_ref}[/bold cyan]"
        )

        if result.written_files:
            info(f"Updated {len(result.written_files)} template file(s)")
            if verbose:
                for path in result.written_files:
                    console.print(f"  [green]✓[/green] {path}")
        if result.skipped_files:
            warning(f"Kept {len(result.skipped_files)} existing file(s)")
            for path in result.skipped_files:
                console.print(f"  [dim]- {path}[/dim]")
            if force_overwrite == ForceOverwrite.NO:
                console.print("\n[dim]💡 Tip: Use --force-overwrite prompt to review them[/dim]")

    except typer.Exit:
        raise
    except KeyboardInterrupt:
        info("\nUpgrade cancelled by user")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, verbose)
        raise typer.Exit(1)
