"""
Command-line interface for xsdgen.

Usage:
    xsdgen schema.xsd -l php -o out/
    xsdgen --url https://example.com/schema.xsd -l python -o generated/
    xsdgen --list-languages
"""

from __future__ import annotations

import argparse
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .codegen import (
    GeneratorConfig,
    GeneratorError,
    generate_code,
    get_generator,
    list_supported_languages,
    load_config,
)
from .codegen.registry import get_language_info, list_all_language_info, is_language_supported
from .logging_config import configure_logging, get_logger
from .schema.loader import load_definition
from .utils import SchemaLoadError

logger = get_logger(__name__)

# Initialize rich console
console = Console()


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="xsdgen",
        description="Generate validating classes from an XML Schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  xsdgen schema.xsd -l php -o src/Schema --namespace-prefix 'Acme\\Schema'
  xsdgen schema.xsd -l python -o acme_schema --namespace-prefix acme_schema
  xsdgen --url https://example.com/schema.xsd -l py
  xsdgen --list-languages
  xsdgen --language-info php
        """.strip(),
    )

    # Input options (mutually exclusive)
    input_group = parser.add_mutually_exclusive_group(required=False)
    input_group.add_argument("file", nargs="?", help="XSD file to generate classes from")
    input_group.add_argument("--url", help="URL to fetch the XSD from")

    # Core generation options
    parser.add_argument(
        "--language", "-l", default="php", help="Target language (default: php)"
    )
    parser.add_argument("--output", "-o", help="Output directory for generated classes")
    parser.add_argument("--config", help="Configuration file path (JSON)")
    parser.add_argument(
        "--namespace-prefix",
        metavar="PREFIX",
        help="Root namespace (PHP) or package (Python) of the generated classes",
    )
    parser.add_argument(
        "--language-version",
        metavar="VERSION",
        help="Target language version (php: 7.0, 7.1; python: 3.8, 3.10)",
    )
    parser.add_argument(
        "--no-strict-types",
        action="store_true",
        help="Don't emit strict type declarations",
    )
    parser.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't copy schema annotations into generated code",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show generation result metadata",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Informational commands
    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported languages and exit",
    )
    info_group.add_argument(
        "--language-info",
        metavar="LANGUAGE",
        help="Show detailed info about a language and exit",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point of the ``xsdgen`` command.

    Args:
        argv: Arguments without the program name (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(debug=args.debug)

    if args.list_languages:
        return _list_languages()

    if args.language_info:
        return _show_language_info(args.language_info)

    if not (args.file or args.url):
        console.print("[red]✗[/red] Input source required (file or --url)")
        return 1

    if not _validate_language(args.language):
        return 1

    try:
        config = _build_config(args)
        return _generate_and_output(args, config)
    except (GeneratorError, SchemaLoadError) as e:
        logger.debug("Generation failed", exc_info=True)
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1


def _list_languages() -> int:
    """List supported languages with details."""
    language_info = list_all_language_info()

    table = Table(title="📋 Supported Languages", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Versions", style="magenta")
    table.add_column("Generator Class", style="dim")
    table.add_column("Aliases", style="blue")

    for lang_name, info in sorted(language_info.items()):
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(
            f"🔧 {lang_name}",
            info["file_extension"],
            ", ".join(info["versions"]),
            info["class"],
            aliases,
        )

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] xsdgen [dim]schema.xsd[/dim] -l [cyan]LANGUAGE[/cyan] -o [dim]DIR[/dim]\n"
            "[bold]Info:[/bold] xsdgen --language-info [cyan]LANGUAGE[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _show_language_info(language: str) -> int:
    """Show detailed information about a specific language."""
    if not _validate_language(language, silent=True):
        console.print(f"[red]✗ Language '{language}' is not supported[/red]")
        console.print("[dim]Use --list-languages to see available options[/dim]")
        return 1

    info = get_language_info(language)

    info_text = f"""[bold]Language:[/bold] {info['name']}
[bold]File Extension:[/bold] {info['file_extension']}
[bold]Versions:[/bold] {', '.join(info['versions'])}
[bold]Generator Class:[/bold] {info['class']}
[bold]Module:[/bold] {info['module']}"""

    if info["aliases"]:
        info_text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print()
    console.print(
        Panel(info_text, title=f"🔧 {info['name'].title()} Generator", border_style="green")
    )

    config = get_generator(language).config
    config_table = Table(
        title="⚙️  Default Configuration",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    config_table.add_column("Setting", style="bold")
    config_table.add_column("Value", style="green")
    config_table.add_row("Namespace Prefix", config.namespace_prefix)
    config_table.add_row("Output Directory", config.output_directory)
    config_table.add_row("Language Version", config.language_version)
    config_table.add_row("Strict Types", str(config.strict_types))
    config_table.add_row("Indent Size", str(config.indent_size))
    config_table.add_row("Add Comments", str(config.add_comments))

    console.print()
    console.print(config_table)

    examples_text = f"""Generate into a directory:
[cyan]xsdgen -l {language} -o out schema.xsd[/cyan]

Custom namespace prefix:
[cyan]xsdgen -l {language} --namespace-prefix {info['default_namespace_prefix']} schema.xsd[/cyan]"""

    console.print()
    console.print(Panel(examples_text, title="💡 Usage Examples", border_style="blue"))
    return 0


def _validate_language(language: str, silent: bool = False) -> bool:
    """Validate that a language is supported."""
    if is_language_supported(language):
        return True
    if not silent:
        console.print(f"[red]✗ Unsupported language '{language}'[/red]")
        console.print(
            f"[dim]Supported languages: {', '.join(list_supported_languages())}[/dim]"
        )
    return False


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from the config file and CLI overrides."""
    overrides: dict[str, Any] = {
        "namespace_prefix": args.namespace_prefix,
        "output_directory": args.output,
        "language_version": args.language_version,
    }
    if args.no_strict_types:
        overrides["strict_types"] = False
    if args.no_comments:
        overrides["add_comments"] = False
    if args.debug:
        overrides["debug"] = True

    language = get_language_info(args.language)["name"]
    return load_config(language, custom_config=overrides, config_file=args.config)


def _generate_and_output(args: argparse.Namespace, config: GeneratorConfig) -> int:
    """Load the schema, generate the classes and report with rich formatting."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        load_task = progress.add_task("[cyan]Loading schema...", total=None)
        definition = load_definition(args.file or args.url)
        progress.remove_task(load_task)

        gen_task = progress.add_task(f"[green]Generating {args.language} classes...", total=None)
        generator = get_generator(args.language, config)
        result = generate_code(generator, definition)
        progress.remove_task(gen_task)

    files_table = Table(
        title="📄 Generated Files",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    files_table.add_column("File", style="cyan")
    files_table.add_column("Kind", style="green")
    for path in result.files:
        files_table.add_row(str(path), result.file_kinds.get(path, ""))

    console.print(files_table)
    console.print(
        f"[green]✓[/green] Generated {len(result.files)} file(s) in "
        f"[cyan]{result.metadata['output_directory']}[/cyan]"
    )

    if args.verbose and result.metadata:
        metadata_table = Table(
            title="📊 Generation Metadata",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        metadata_table.add_column("Property", style="bold")
        metadata_table.add_column("Value", style="green")
        for key, value in result.metadata.items():
            metadata_table.add_row(key.replace("_", " ").title(), str(value))
        console.print()
        console.print(metadata_table)

    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")
        console.print()

    return 0
