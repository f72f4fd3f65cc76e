"""Command-line interface for npm_license_tracker.

Provides the main entry point and subcommands for scanning a project's
installed dependencies and managing the repository lookup cache.
"""

import asyncio
import dataclasses
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from license_expression import ExpressionError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from npm_license_tracker import __version__
from npm_license_tracker.aggregator import scan_project
from npm_license_tracker.cache import LicenseCache, default_cache_folder
from npm_license_tracker.config import ConfigError, load_options
from npm_license_tracker.models import UNKNOWN, Options, ScanResult
from npm_license_tracker.reporters import BaseReporter, JsonMode, JsonReporter, MarkdownReporter
from npm_license_tracker.resolvers.spdx import expression_satisfies, merge_expressions

app = typer.Typer(
    name="npm-license-tracker",
    help="Discover and verify the licenses of installed npm dependencies.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("npm_license_tracker")


class OutputFormat(str, Enum):
    JSON = "json"
    MARKDOWN = "markdown"


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("npm_license_tracker").setLevel(level)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"npm-license-tracker {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show the version and exit",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Discover and verify the licenses of installed npm dependencies."""


def _build_options(
    config: Optional[Path],
    include_dev: bool,
    include_homepage: bool,
    include_repository: bool,
    include_funding: bool,
    exclude: Optional[list[str]],
    include: Optional[list[str]],
    cache_folder: Optional[Path],
    no_cache: bool,
    github_token: Optional[str],
) -> Options:
    """Layer command-line flags on top of the config file."""
    options = load_options(config) if config else Options()

    changes: dict = {}
    if include_dev:
        changes["include_dev"] = True
    if include_homepage:
        changes["include_homepage"] = True
    if include_repository:
        changes["include_repository"] = True
    if include_funding:
        changes["include_funding"] = True
    if exclude:
        changes["exclude"] = [*options.exclude, *exclude]
    if include:
        changes["include"] = [*options.include, *include]
    if cache_folder:
        changes["cache_folder"] = str(cache_folder)
    if no_cache:
        changes["use_cache"] = False
    if github_token:
        changes["github_token"] = github_token

    return dataclasses.replace(options, **changes)


def _create_reporter(
    output_format: OutputFormat,
    summary: bool,
    compress: bool,
    join_text: str,
    to_file: bool,
) -> BaseReporter:
    if output_format is OutputFormat.MARKDOWN:
        return MarkdownReporter(join_text=join_text)

    if summary:
        mode = JsonMode.SUMMARY
    elif compress:
        mode = JsonMode.COMPRESSED
    else:
        mode = JsonMode.PLAIN

    # files get compact JSON, the terminal gets readable JSON
    return JsonReporter(mode=mode, indent=None if to_file else 2)


def _mismatched_licenses(result: ScanResult) -> list[str]:
    """Describe packages whose declared license disagrees with their text."""
    mismatched = []
    for package in result.resolved:
        expression = package.license_expression
        if package.is_expression_from_text or expression.startswith("SEE LICENSE IN"):
            continue

        resolved = merge_expressions(package.licenses)
        if UNKNOWN in resolved:
            matches = False
        else:
            try:
                matches = expression_satisfies(expression, resolved)
            except ExpressionError as e:
                logger.error('failed to parse "%s" from %s: %s', expression, package.name, e)
                matches = False

        if not matches:
            mismatched.append(
                f'{package.name}: defined: "{expression}", resolved: "{resolved}"'
            )
    return mismatched


def _report_problems(result: ScanResult) -> int:
    """Print warnings and errors for a scan result.

    Returns:
        Exit code, 1 when packages have an invalid license or no license
        text.
    """
    from_text = [p.name for p in result.resolved if p.is_expression_from_text]
    if from_text:
        err_console.print("[yellow]Warning:[/yellow] resolved license expression from text:")
        for name in from_text:
            err_console.print(f"  [blue]{name}[/blue]")

    mismatched = _mismatched_licenses(result)
    if mismatched:
        err_console.print("[yellow]Warning:[/yellow] mismatched license expression and text:")
        for line in mismatched:
            err_console.print(f"  {line}", markup=False)

    exit_code = 0

    if result.errors.invalid_license:
        err_console.print("[red]Error:[/red] invalid license:")
        for name in result.errors.invalid_license:
            err_console.print(f"  [blue]{name}[/blue]")
        exit_code = 1

    if result.errors.missing_license_text:
        err_console.print("[red]Error:[/red] missing license text:")
        for name in result.errors.missing_license_text:
            err_console.print(f"  [blue]{name}[/blue]")
        exit_code = 1

    return exit_code


async def _run_scan(
    project_root: Path,
    options: Options,
    output: Optional[Path],
    reporter: BaseReporter,
) -> int:
    """Async implementation of the scan command."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True,
    ) as progress:
        progress.add_task("Scanning installed packages...", total=None)
        result = await scan_project(project_root, options)

    # Sort by package name for consistent output
    result.resolved.sort(key=lambda p: p.name)

    if output:
        try:
            reporter.write(result, output)
        except OSError as e:
            err_console.print(f"[red]Error writing output:[/red] {e}")
            return 1
        err_console.print(f"[green]Generated:[/green] {output}")
    else:
        typer.echo(reporter.render(result), nl=False)

    return _report_problems(result)


@app.command()
def scan(
    project_root: Annotated[
        Path,
        typer.Argument(
            help="Project directory containing package.json and node_modules",
            exists=True,
            file_okay=False,
            resolve_path=True,
        ),
    ] = Path("."),
    include_dev: Annotated[
        bool,
        typer.Option("--include-dev", help="Include devDependencies"),
    ] = False,
    include_homepage: Annotated[
        bool,
        typer.Option("--include-homepage", help="Add each package's homepage"),
    ] = False,
    include_repository: Annotated[
        bool,
        typer.Option("--include-repository", help="Add each package's repository URL"),
    ] = False,
    include_funding: Annotated[
        bool,
        typer.Option("--include-funding", help="Add each package's funding URLs"),
    ] = False,
    exclude: Annotated[
        Optional[list[str]],
        typer.Option(
            "--exclude",
            "-e",
            help="Package name to exclude (repeatable)",
        ),
    ] = None,
    include: Annotated[
        Optional[list[str]],
        typer.Option(
            "--include",
            "-i",
            help="Only scan this package name (repeatable)",
        ),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="JSON config file with options, overrides and append entries",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Output file path, prints to stdout when omitted",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format",
            case_sensitive=False,
        ),
    ] = OutputFormat.JSON,
    summary: Annotated[
        bool,
        typer.Option("--summary", help="Only output the number of packages per license"),
    ] = False,
    compress: Annotated[
        bool,
        typer.Option("--compress", help="Store each distinct license text once"),
    ] = False,
    cache_folder: Annotated[
        Optional[Path],
        typer.Option(
            "--cache-folder",
            help="Cache folder for repository lookups "
            "[default: node_modules/.cache/npm-license-tracker]",
            file_okay=False,
        ),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Do not read or write the lookup cache"),
    ] = False,
    github_token: Annotated[
        Optional[str],
        typer.Option(
            "--github-token",
            envvar="GITHUB_TOKEN",
            help="GitHub API token for higher rate limits",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Scan a project's installed dependencies for their licenses.

    Exit codes:
        0 - Every package has license text and a known license
        1 - Packages with invalid licenses or missing text, or an error
    """
    _setup_logging(verbose)

    if summary and compress:
        err_console.print("[red]Error:[/red] Cannot specify both --summary and --compress")
        raise typer.Exit(code=1)

    if output_format is OutputFormat.MARKDOWN and (summary or compress):
        err_console.print(
            "[red]Error:[/red] --summary and --compress only apply to JSON output"
        )
        raise typer.Exit(code=1)

    try:
        options = _build_options(
            config=config,
            include_dev=include_dev,
            include_homepage=include_homepage,
            include_repository=include_repository,
            include_funding=include_funding,
            exclude=exclude,
            include=include,
            cache_folder=cache_folder,
            no_cache=no_cache,
            github_token=github_token,
        )
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    reporter = _create_reporter(
        output_format,
        summary=summary,
        compress=compress,
        join_text=options.join_text,
        to_file=output is not None,
    )

    exit_code = asyncio.run(_run_scan(project_root, options, output, reporter))
    raise typer.Exit(code=exit_code)


@app.command()
def cache(
    action: Annotated[
        str,
        typer.Argument(help="Cache action: 'show' or 'clear'"),
    ],
    project_root: Annotated[
        Path,
        typer.Option(
            "--project",
            "-p",
            help="Project whose default cache folder is used",
            file_okay=False,
        ),
    ] = Path("."),
    cache_folder: Annotated[
        Optional[Path],
        typer.Option(
            "--cache-folder",
            help="Cache folder, overrides the project's default",
            file_okay=False,
        ),
    ] = None,
) -> None:
    """Manage the repository lookup cache.

    Actions:
        show  - Display cache location, entry count, and size
        clear - Clear all cached entries
    """
    cache_instance = LicenseCache(cache_folder or default_cache_folder(project_root))

    if action == "show":
        info = cache_instance.info()
        console.print(f"[bold]Cache Location:[/bold] {info['path']}")
        console.print(f"[bold]Entries:[/bold] {info['count']}")
        console.print(f"[bold]Size:[/bold] {info['size_bytes'] / 1024:.1f} KB")

    elif action == "clear":
        cache_instance.clear()
        console.print("[green]Cache cleared[/green]")

    else:
        err_console.print(f"[red]Unknown action:[/red] {action}")
        err_console.print("Valid actions: show, clear")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
