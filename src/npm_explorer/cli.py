"""Command-line interface for npm_explorer.

Provides subcommands for searching the registry, showing package details,
listing a maintainer's packages and looking up download statistics.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Optional, TypeVar

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from npm_explorer.config import ExplorerSettings
from npm_explorer.errors import NotFoundError, RegistryError
from npm_explorer.explorer import RESULTS_PER_PAGE, NpmExplorer
from npm_explorer.formatting import (
    format_downloads,
    format_file_size,
    format_relative_time,
    get_github_url,
    install_commands,
)
from npm_explorer.models import PackagePage, Period, SearchHit
from npm_explorer.normalizer import filter_versions
from npm_explorer.reporters import MarkdownReporter
from npm_explorer.reporters.base import Page
from npm_explorer.resolver import split_package_path

T = TypeVar("T")

app = typer.Typer(
    name="npm-explorer",
    help="Browse and discover packages on the npm registry.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("npm_explorer")

EXIT_ERROR = 1
EXIT_NOT_FOUND = 3

VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose output"),
]
OutputOption = Annotated[
    Optional[Path],
    typer.Option("--output", "-o", help="Write a Markdown report to this file (.md is added if it has no suffix)"),
]
TemplateOption = Annotated[
    Optional[Path],
    typer.Option(
        "--template",
        "-t",
        help="Custom Jinja2 template for the report",
        exists=True,
        readable=True,
    ),
]
RegistryUrlOption = Annotated[
    Optional[str],
    typer.Option(
        "--registry-url",
        envvar="NPM_EXPLORER_REGISTRY_URL",
        help="Base URL of the npm registry",
    ),
]
DownloadsUrlOption = Annotated[
    Optional[str],
    typer.Option(
        "--downloads-url",
        envvar="NPM_EXPLORER_DOWNLOADS_URL",
        help="Base URL of the downloads statistics API",
    ),
]


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("npm_explorer").setLevel(level)


async def _fetch(
    description: str,
    settings: ExplorerSettings,
    load: Callable[[NpmExplorer], Awaitable[T]],
) -> T:
    """Run one explorer call behind a spinner and close the sessions after."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        async with NpmExplorer(settings) as explorer:
            return await load(explorer)


def _run(
    description: str,
    load: Callable[[NpmExplorer], Awaitable[T]],
    **overrides: Optional[str],
) -> T:
    """Run an explorer call, turning registry failures into exit codes.

    Settings are resolved here from ``overrides`` and the environment, so a
    malformed environment variable is reported like any other error.

    Raises:
        typer.Exit: EXIT_NOT_FOUND for a missing package or version,
            EXIT_ERROR for any other registry failure.
    """
    try:
        settings = ExplorerSettings.from_env(**overrides)
        return asyncio.run(_fetch(description, settings, load))
    except NotFoundError as e:
        err_console.print(f"[red]Not found:[/red] {e}")
        raise typer.Exit(code=EXIT_NOT_FOUND)
    except RegistryError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=EXIT_ERROR)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=EXIT_ERROR)


def _write_report(page: Page, output: Optional[Path], template: Optional[Path]) -> None:
    if output is None:
        return
    reporter = MarkdownReporter(template_path=template)
    if not output.suffix:
        output = output.with_suffix(reporter.default_extension)
    try:
        reporter.write(page, output)
    except OSError as e:
        err_console.print(f"[red]Error writing output:[/red] {e}")
        raise typer.Exit(code=EXIT_ERROR)
    console.print(f"[green]Generated {reporter.format_name} report:[/green] {output}")


def _hits_table(hits: tuple[SearchHit, ...]) -> Table:
    table = Table(show_lines=False)
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Weekly", justify="right")
    table.add_column("Updated")
    table.add_column("Description", overflow="fold")
    for hit in hits:
        table.add_row(
            hit.name,
            hit.version,
            format_downloads(hit.downloads or 0),
            format_relative_time(hit.date),
            hit.description or "",
        )
    return table


def _print_package(
    page: PackagePage, max_versions: int, version_filter: Optional[str] = None
) -> None:
    pkg = page.package
    console.print(f"[bold]{pkg.name}[/bold] [cyan]{pkg.version}[/cyan]")
    if pkg.deprecated:
        console.print(f"[yellow]Deprecated:[/yellow] {pkg.deprecated}")
    if pkg.description:
        console.print(pkg.description)
    console.print()

    info = Table.grid(padding=(0, 2))
    info.add_column(style="dim")
    info.add_column()
    info.add_row("Weekly downloads", format_downloads(page.weekly_downloads))
    if pkg.license:
        info.add_row("License", pkg.license)
    if pkg.author:
        info.add_row("Author", pkg.author)
    if pkg.updated_at:
        info.add_row("Last publish", format_relative_time(pkg.updated_at))
    if pkg.unpacked_size:
        info.add_row("Unpacked size", format_file_size(pkg.unpacked_size))
    if pkg.file_count:
        info.add_row("Total files", str(pkg.file_count))
    info.add_row("Types", "yes" if pkg.types else "no")
    github = get_github_url(pkg.repository)
    if github:
        info.add_row("Repository", github)
    if pkg.homepage:
        info.add_row("Homepage", pkg.homepage)
    info.add_row("Install", install_commands(pkg.name)["npm"])
    console.print(info)

    for title, deps in (
        ("Dependencies", pkg.dependencies),
        ("Dev dependencies", pkg.dev_dependencies),
        ("Peer dependencies", pkg.peer_dependencies),
    ):
        if not deps:
            continue
        table = Table(title=f"{title} ({len(deps)})", title_justify="left")
        table.add_column("Name")
        table.add_column("Range")
        for name, spec in sorted(deps.items()):
            table.add_row(name, spec)
        console.print(table)

    records = filter_versions(pkg.versions, version_filter)
    if version_filter and not records:
        console.print(f'[yellow]No versions match "{version_filter}"[/yellow]')
        return

    title = f"Versions ({len(pkg.versions)})"
    if version_filter:
        title = (
            f'Versions matching "{version_filter}" '
            f"({len(records)} of {len(pkg.versions)})"
        )
    versions = Table(title=title, title_justify="left")
    versions.add_column("Version")
    versions.add_column("Published")
    versions.add_column("")
    for record in records[:max_versions]:
        label = record.version
        if record.version == pkg.version:
            label = f"[bold]{label}[/bold]"
        versions.add_row(
            label,
            format_relative_time(record.date),
            "[yellow]deprecated[/yellow]" if record.deprecated else "",
        )
    console.print(versions)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search text, e.g. 'react hooks'")],
    page: Annotated[
        int,
        typer.Option("--page", "-p", min=1, help="Result page to show"),
    ] = 1,
    output: OutputOption = None,
    template: TemplateOption = None,
    registry_url: RegistryUrlOption = None,
    downloads_url: DownloadsUrlOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Search packages on the registry."""
    _setup_logging(verbose)
    result = _run(
        f"Searching for {query}...",
        lambda explorer: explorer.search_page(query, page=page, per_page=RESULTS_PER_PAGE),
        registry_url=registry_url,
        downloads_url=downloads_url,
    )

    if not result.hits:
        console.print(f'[yellow]No packages found matching "{query}"[/yellow]')
        raise typer.Exit(code=0)

    console.print(
        f"Showing {result.first_index}-{result.last_index} of "
        f"[bold]{result.total:,}[/bold] packages"
    )
    console.print(_hits_table(result.hits))
    if result.has_prev_page:
        console.print(f"[dim]Previous page: --page {result.page - 1}[/dim]")
    if result.has_next_page:
        console.print(f"[dim]Next page: --page {result.page + 1}[/dim]")
    _write_report(result, output, template)


@app.command()
def show(
    package: Annotated[
        str,
        typer.Argument(help="Package name or path, e.g. 'react' or '@babel/parser/v/7.0.0'"),
    ],
    version: Annotated[
        Optional[str],
        typer.Option("--version", "-V", help="Version to show (defaults to latest)"),
    ] = None,
    max_versions: Annotated[
        int,
        typer.Option("--versions", min=0, help="Number of versions to list"),
    ] = 10,
    version_filter: Annotated[
        Optional[str],
        typer.Option("--filter", "-f", help="Only list versions containing this text"),
    ] = None,
    output: OutputOption = None,
    template: TemplateOption = None,
    registry_url: RegistryUrlOption = None,
    downloads_url: DownloadsUrlOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show details for one package.

    Exit codes:
        0 - Package shown
        1 - Registry error
        3 - Package or version not found
    """
    _setup_logging(verbose)
    segments = split_package_path(package)
    if version:
        segments += ["v", version]

    result = _run(
        f"Loading {package}...",
        lambda explorer: explorer.package_page(segments),
        registry_url=registry_url,
        downloads_url=downloads_url,
    )

    _print_package(result, max_versions, version_filter)
    _write_report(result, output, template)


@app.command()
def user(
    username: Annotated[str, typer.Argument(help="npm username")],
    output: OutputOption = None,
    template: TemplateOption = None,
    registry_url: RegistryUrlOption = None,
    downloads_url: DownloadsUrlOption = None,
    verbose: VerboseOption = False,
) -> None:
    """List packages published by a maintainer."""
    _setup_logging(verbose)
    result = _run(
        f"Loading packages for {username}...",
        lambda explorer: explorer.user_page(username),
        registry_url=registry_url,
        downloads_url=downloads_url,
    )

    console.print(f"[bold]{username}[/bold] [dim]{result.profile_url}[/dim]")
    if not result.hits:
        console.print("[yellow]This user hasn't published any packages yet[/yellow]")
        raise typer.Exit(code=0)

    plural = "" if result.total == 1 else "s"
    console.print(f"{result.total} package{plural} published")
    console.print(_hits_table(result.hits))
    _write_report(result, output, template)


@app.command()
def popular(
    count: Annotated[
        int,
        typer.Option("--count", "-n", min=1, help="Number of packages to list"),
    ] = 10,
    registry_url: RegistryUrlOption = None,
    downloads_url: DownloadsUrlOption = None,
    verbose: VerboseOption = False,
) -> None:
    """List popular packages."""
    _setup_logging(verbose)
    hits = _run(
        "Loading popular packages...",
        lambda explorer: explorer.popular(count),
        registry_url=registry_url,
        downloads_url=downloads_url,
    )
    console.print(_hits_table(hits))


@app.command()
def downloads(
    package: Annotated[str, typer.Argument(help="Package name")],
    period: Annotated[
        Period,
        typer.Option("--period", "-p", help="Time window"),
    ] = Period.LAST_WEEK,
    daily: Annotated[
        bool,
        typer.Option("--daily", help="Show one row per day instead of a total"),
    ] = False,
    downloads_url: DownloadsUrlOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show download statistics for a package.

    Statistics are best effort: a package without statistics shows 0.
    """
    _setup_logging(verbose)
    if daily:
        points = _run(
            f"Loading downloads for {package}...",
            lambda explorer: explorer.downloads.get_download_range(package, period),
            downloads_url=downloads_url,
        )
        table = Table(title=f"{package} ({period.value})", title_justify="left")
        table.add_column("Day")
        table.add_column("Downloads", justify="right")
        for point in points:
            table.add_row(point.date, f"{point.downloads:,}")
        console.print(table)
        return

    count = _run(
        f"Loading downloads for {package}...",
        lambda explorer: explorer.downloads.get_download_count(package, period),
        downloads_url=downloads_url,
    )
    console.print(f"[bold]{package}[/bold] {period.value}: {format_downloads(count)} ({count:,})")


if __name__ == "__main__":
    app()
