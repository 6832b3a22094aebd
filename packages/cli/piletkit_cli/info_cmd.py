"""Info commands - Version and doctor diagnostics."""
import json
import typer
import sys
import subprocess
from pathlib import Path
from rich.table import Table
from .utils import console, success, warning, error, info

app = typer.Typer()


@app.command(name="version")
def version():
    """
    Show piletkit version information.

    Examples:
        piletkit version
    """
    try:
        import piletkit_common
        import piletkit_sdk
        cli_version = piletkit_common.__version__
        sdk_version = piletkit_sdk.__version__
        python_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

        table = Table(title="piletkit Version Information", show_header=True, header_style="bold cyan")
        table.add_column("Component", style="cyan", no_wrap=True)
        table.add_column("Version", style="green")

        table.add_row("CLI", cli_version)
        table.add_row("SDK", sdk_version)
        table.add_row("Python", python_version)

        console.print(table)

    except Exception as e:
        error(f"Failed to get version info: {str(e)}")
        raise typer.Exit(1)


def _tool_version(command: str):
    try:
        result = subprocess.run(
            [command, "--version"],
            capture_output=True,
            text=True,
            timeout=10
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip()


@app.command(name="doctor")
def doctor():
    """
    Diagnose common issues before upgrading a pilet.

    Checks for:
    - Node.js and a package manager client
    - A package.json with a "piral" section in the current directory

    Examples:
        piletkit doctor
    """
    console.print("[bold cyan]🔍 Running diagnostics...[/bold cyan]\n")

    issues = []
    checks_passed = 0
    total_checks = 0

    # Node.js
    total_checks += 1
    node_version = _tool_version("node")
    if node_version:
        success(f"Node.js {node_version}")
        checks_passed += 1
    else:
        warning("Node.js not found")
        issues.append("Install Node.js: https://nodejs.org/")

    # Package manager clients
    total_checks += 1
    clients = {name: _tool_version(name) for name in ("npm", "yarn", "pnpm")}
    available = {name: v for name, v in clients.items() if v}
    if available:
        success("Package managers: " + ", ".join(f"{n} {v}" for n, v in available.items()))
        checks_passed += 1
    else:
        warning("No package manager (npm, yarn, pnpm) found")
        issues.append("Install npm (ships with Node.js)")

    # Pilet manifest
    total_checks += 1
    manifest_path = Path("package.json")
    if manifest_path.exists():
        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            warning(f"package.json is not valid JSON: {e}")
            issues.append("Fix the syntax of package.json")
        else:
            piral = data.get("piral") if isinstance(data, dict) else None
            if isinstance(piral, dict) and piral.get("name"):
                success(f"Pilet based on [bold]{piral['name']}[/bold]")
                checks_passed += 1
            else:
                warning('package.json has no "piral" section')
                issues.append('Declare the base package in a "piral" section of package.json')
    else:
        info("No package.json in current directory")
        console.print("  [dim]Run piletkit from the pilet directory or pass it as TARGET[/dim]")

    # Summary
    console.print()
    console.print("[bold]Summary:[/bold]")
    if checks_passed == total_checks:
        success(f"All checks passed! ({checks_passed}/{total_checks})")
        console.print("\n[bold green]✨ Ready to upgrade![/bold green]")
    else:
        info(f"Passed {checks_passed}/{total_checks} checks")

        if issues:
            console.print("\n[bold yellow]📋 Action items:[/bold yellow]")
            for idx, issue in enumerate(issues, 1):
                console.print(f"  {idx}. {issue}")

    console.print()
