import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .cli_config import (
    SCANNER_NAMES,
    ComprehensiveConfig,
    apply_config_data,
    create_sample_config,
    get_config,
    load_config,
    load_config_file,
    validate_config_values,
)
from .collector import get_project_licenses
from .generator import generate_license_file
from .scanner import get_license_scanner
from .structured_logging import configure_logging

console = Console()
error_console = Console(stderr=True)

DEFAULT_TEXT_OUTPUT = "third-party-licenses.txt"
DEFAULT_JSON_OUTPUT = "third-party-licenses.json"


def _first_line(text: str, width: int = 60) -> str:
    stripped = text.strip()
    line = stripped.splitlines()[0] if stripped else ""
    return line if len(line) <= width else line[: width - 1] + "…"


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version information")
@click.pass_context
def cli(ctx, version):
    """
    📄 generate-license-file: bundle the licenses of an npm project's
    production dependencies into a single file.
    """
    if version:
        console.print(f"generate-license-file version {__version__}", style="bold blue")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        return

    config = load_config()
    configure_logging(config.logging.log_level, config.logging.enable_json)


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_path",
    default=".",
    type=click.Path(file_okay=False),
    help="Directory containing the project's package.json",
    show_default=True,
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, writable=True),
    help=f"Output file (default from config or {DEFAULT_TEXT_OUTPUT})",
)
@click.option(
    "--json/--text",
    "output_json",
    default=None,
    help="Write JSON or plain text (default from config or text)",
)
@click.option("--overwrite", is_flag=True, help="Overwrite the output file if it exists")
@click.option(
    "--scanner",
    type=click.Choice(SCANNER_NAMES),
    help="Dependency scanner to use (default from config or node_modules)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--verbose", "-v", is_flag=True, help="Log collection progress")
def generate(
    input_path: str,
    output_path: Optional[str],
    output_json: Optional[bool],
    overwrite: bool,
    scanner: Optional[str],
    quiet: bool,
    verbose: bool,
) -> None:
    """
    Write the licenses of every production dependency to one file.

    Examples:

      generate-license-file generate --input . --output third-party-licenses.txt

      generate-license-file generate -i ./app -o licenses.json --json --overwrite
    """
    config = get_config()
    final_json = config.output.output_json if output_json is None else output_json
    final_output = (
        output_path
        or config.output.output_file
        or (DEFAULT_JSON_OUTPUT if final_json else DEFAULT_TEXT_OUTPUT)
    )

    if verbose:
        configure_logging("INFO", config.logging.enable_json)

    if Path(final_output).exists() and not (overwrite or config.output.overwrite):
        error_console.print(
            f"❌ {final_output} already exists. Use --overwrite to replace it.",
            style="red",
        )
        sys.exit(1)

    try:
        license_scanner = get_license_scanner(scanner)
        asyncio.run(
            generate_license_file(input_path, final_output, final_json, license_scanner)
        )
    except KeyboardInterrupt:
        error_console.print("\n⚠️  Interrupted by user", style="yellow")
        sys.exit(130)
    except Exception as e:
        error_console.print(f"❌ Error: {e}", style="red")
        sys.exit(1)

    if not quiet:
        console.print(f"✅ License file written to {final_output}", style="green")


@cli.command("list")
@click.option(
    "--input",
    "-i",
    "input_path",
    default=".",
    type=click.Path(file_okay=False),
    help="Directory containing the project's package.json",
    show_default=True,
)
@click.option("--scanner", type=click.Choice(SCANNER_NAMES), help="Dependency scanner to use")
def list_licenses(input_path: str, scanner: Optional[str]) -> None:
    """Show the grouped licenses without writing a file."""
    try:
        records = asyncio.run(
            get_project_licenses(input_path, get_license_scanner(scanner))
        )
    except Exception as e:
        error_console.print(f"❌ Error: {e}", style="red")
        sys.exit(1)

    if not records:
        console.print("ℹ️  No licensed dependencies found.", style="yellow")
        return

    table = Table(title="📄 Project Licenses", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Dependencies", justify="center")
    table.add_column("License")

    for record in records:
        table.add_row(
            record.name,
            record.version,
            str(len(record.dependencies)),
            _first_line(record.content),
        )

    console.print(table)
    total = sum(len(record.dependencies) for record in records)
    console.print(f"{len(records)} distinct licenses across {total} dependencies", style="dim")


@cli.command()
def info():
    """Show usage information."""
    info_text = """
[bold blue]📋 What it does:[/bold blue]

• Scans the production dependencies of an npm project (devDependencies are ignored)
• Reads each package's LICENSE file, or falls back to its declared license type
• Groups packages that share identical license text
• Writes a plain-text notice file or a JSON document

[bold blue]🔍 Scanners:[/bold blue]

• [yellow]node_modules[/yellow] - Reads the installed node_modules tree directly (default)
• [yellow]license-checker[/yellow] - Runs the npm license-checker tool via npx

[bold blue]🌍 Environment Variables:[/bold blue]

• [cyan]GENERATE_LICENSE_FILE_SCANNER[/cyan] - Default scanner
• [cyan]GENERATE_LICENSE_FILE_TIMEOUT[/cyan] - license-checker timeout in seconds
• [cyan]GENERATE_LICENSE_FILE_OUTPUT[/cyan] - Default output file
• [cyan]GENERATE_LICENSE_FILE_JSON[/cyan] - Write JSON by default
• [cyan]GENERATE_LICENSE_FILE_LOG_LEVEL[/cyan] - Log level

[bold blue]📄 Configuration Files:[/bold blue]

• [green].generate-license-file.json[/green] / [green].generate-license-file.toml[/green] - Project-level config
• [green]~/.config/generate-license-file/config.json[/green] - User-level config

[bold blue]💡 Usage Examples:[/bold blue]

  generate-license-file generate --input . --output third-party-licenses.txt
  generate-license-file generate --json -o licenses.json --overwrite
  generate-license-file list --input ./app
  generate-license-file config init
"""
    console.print(
        Panel(
            info_text,
            title="[bold]generate-license-file[/bold]",
            border_style="blue",
        )
    )


@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command("init")
@click.option(
    "--path",
    type=click.Path(),
    default=".generate-license-file.json",
    help="Path where to create the config file",
    show_default=True,
)
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def config_init(path: str, force: bool):
    """Create a sample configuration file."""
    config_path = Path(path)

    if config_path.exists() and not force:
        console.print(f"⚠️  Config file already exists at {config_path}", style="yellow")
        console.print("Use --force to overwrite", style="dim")
        return

    try:
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_sample_config())
    except OSError as e:
        error_console.print(f"❌ Failed to create config file: {e}", style="red")
        sys.exit(1)

    console.print(f"✅ Created configuration file at {config_path}", style="green")


@config.command("show")
def config_show():
    """Show current configuration settings."""
    current_config = get_config()

    console.print(Panel("[bold blue]🔧 Configuration[/bold blue]", border_style="blue"))

    console.print("\n[bold cyan]🔍 Scan Settings:[/bold cyan]")
    console.print(f"  Scanner: {current_config.scan.scanner}")
    console.print(f"  Timeout: {current_config.scan.timeout_seconds}s")
    console.print(
        f"  license-checker Command: {' '.join(current_config.scan.license_checker_command)}"
    )

    console.print("\n[bold cyan]📄 Output Settings:[/bold cyan]")
    console.print(f"  Output File: {current_config.output.output_file or DEFAULT_TEXT_OUTPUT}")
    console.print(f"  JSON: {current_config.output.output_json}")
    console.print(f"  Overwrite: {current_config.output.overwrite}")

    console.print("\n[bold cyan]📝 Logging Settings:[/bold cyan]")
    console.print(f"  Log Level: {current_config.logging.log_level}")
    console.print(f"  JSON Logs: {current_config.logging.enable_json}")


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
def config_validate(config_file: str):
    """Validate a configuration file."""
    config_data = load_config_file(Path(config_file))

    if config_data is None:
        error_console.print(f"❌ Could not load config from {config_file}", style="red")
        sys.exit(1)

    candidate = ComprehensiveConfig()
    errors = apply_config_data(candidate, config_data)
    errors.extend(validate_config_values(candidate))

    if errors:
        error_console.print("❌ Configuration validation failed:", style="red")
        for error in errors:
            error_console.print(f"  • {error}", style="red")
        sys.exit(1)

    console.print(f"✅ Configuration file {config_file} is valid", style="green")


if __name__ == "__main__":
    cli()
