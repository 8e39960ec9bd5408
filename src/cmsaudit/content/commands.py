"""CLI commands for searching and auditing CMS content."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from cmsaudit.content.aggregator import AggregatedOutcome, ScopeRequest
    from cmsaudit.core.config import Settings

console = Console()

PREVIEW_CHARS = 200


def scope_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by search and audit for selecting scopes."""
    options = [
        click.option("-p", "--page-type", "page_types", multiple=True, help="Page type to scan (repeatable)"),
        click.option("-c", "--collection", "collections", multiple=True, help="Collection key to scan (repeatable)"),
        click.option("--blog", is_flag=True, help="Scan blog posts"),
        click.option("--preview/--no-preview", default=None, help="Include draft content"),
        click.option("--token", help="Read API token (default: CMSAUDIT_TOKEN or config)"),
        click.option("--json", "as_json", is_flag=True, help="Output as JSON"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _run(request: ScopeRequest, settings: Settings, as_json: bool) -> AggregatedOutcome:
    """Run the aggregator, with a spinner unless emitting JSON."""
    from cmsaudit.content.aggregator import ScopeAggregator

    aggregator = ScopeAggregator(settings)
    if as_json or not request.scopes:
        return aggregator.run(request)

    labels = ", ".join(h.label for h in request.scopes)
    with console.status(f"[cyan]Fetching {labels}...[/cyan]"):
        return aggregator.run(request)


def _report_failures(outcome: AggregatedOutcome) -> None:
    """Print validation errors and scope failures."""
    if not outcome.success:
        console.print(f"[red]{escape(outcome.error or 'Failed')}[/red]")
    elif outcome.failed_scopes:
        console.print("[yellow]Warning: some scopes could not be fetched:[/yellow]")
    if outcome.failed_scopes:
        for label in outcome.failed_scopes:
            console.print(f"  [yellow]✗ {escape(label)}[/yellow]")
        console.print()


def _highlight(snippet: str, term: str) -> Text:
    """Highlight every spelling of the term inside a snippet."""
    from cmsaudit.content.normalize import variant_pattern

    text = Text(snippet)
    pattern = variant_pattern(term)
    if pattern is not None:
        for m in pattern.finditer(snippet):
            text.stylize("bold black on yellow", m.start(), m.end())
    return text


@click.command(name="search")
@click.argument("term")
@scope_options
@click.option("--negate", is_flag=True, help="Find items that do NOT contain the term")
@click.option(
    "--html",
    "html_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write an HTML report to this file",
)
def search(
    term: str,
    page_types: tuple[str, ...],
    collections: tuple[str, ...],
    blog: bool,
    preview: bool | None,
    token: str | None,
    as_json: bool,
    negate: bool,
    html_path: Path | None,
) -> None:
    """Search content for a term.

    Matching ignores case and treats HTML entities, typographic quotes,
    dashes and non-breaking spaces as their plain equivalents.

    \b
    Examples:
        cmsaudit search "free shipping" --page-type landing-page
        cmsaudit search "&pound;" --blog --collection faq
        cmsaudit search cookie --blog --negate --json
    """
    from cmsaudit.content.aggregator import ScanMode, ScopeRequest
    from cmsaudit.core.config import load_settings

    settings = load_settings(token=token, preview=preview)
    request = ScopeRequest.build(
        token=settings.token,
        page_types=page_types,
        collections=collections,
        blog=blog,
        mode=ScanMode.SEARCH,
        term=term,
        negate=negate,
        preview=settings.preview,
    )
    outcome = _run(request, settings, as_json)

    if html_path and outcome.success:
        from cmsaudit.content.report import render_search_html

        html_path.write_text(render_search_html(outcome, term, negate=negate), encoding="utf-8")

    if as_json:
        click.echo(outcome.to_json())
        if not outcome.success:
            raise SystemExit(1)
        return

    _report_failures(outcome)
    if not outcome.success:
        raise SystemExit(1)

    if not request.scopes:
        console.print("[yellow]No scopes selected.[/yellow] Use --page-type, --collection or --blog.")
        return

    if not outcome.results:
        if negate:
            console.print(
                f"[green]All {outcome.total_items_scanned} item(s) contain '{escape(term)}'.[/green]"
            )
        else:
            console.print(
                f"[yellow]No matches for '{escape(term)}' in {outcome.total_items_scanned} item(s).[/yellow]"
            )
        return

    verb = "without" if negate else "matching"
    console.print(
        f"[green]{len(outcome.results)} of {outcome.total_items_scanned} item(s) {verb} "
        f"'{escape(term)}':[/green]"
    )
    console.print()

    for result in outcome.results:
        console.print(f"[bold]{escape(result.title)}[/bold]")
        console.print(f"  [dim]{escape(result.slug)} · {escape(result.source_type)}[/dim]")
        for match in result.matches:
            console.print(f"  [cyan]→ {escape(match.path)}[/cyan] [dim]×{match.count}[/dim]")
            line = Text("    ")
            line.append_text(_highlight(match.value, term))
            console.print(line)
        console.print()

    if html_path:
        console.print(f"[dim]HTML report written to {html_path}[/dim]")


@click.command(name="audit")
@scope_options
@click.option("--full", is_flag=True, help="Show complete field values instead of a preview")
def audit(
    page_types: tuple[str, ...],
    collections: tuple[str, ...],
    blog: bool,
    preview: bool | None,
    token: str | None,
    as_json: bool,
    full: bool,
) -> None:
    """Audit content for markup pasted from other tools.

    Flags Microsoft Office, Figma, Google Docs and rich text editor
    attributes, inline event handlers and stray data- attributes.

    \b
    Examples:
        cmsaudit audit --blog
        cmsaudit audit --page-type landing-page --collection faq --json
    """
    from cmsaudit.content.aggregator import ScanMode, ScopeRequest
    from cmsaudit.core.config import load_settings

    settings = load_settings(token=token, preview=preview)
    request = ScopeRequest.build(
        token=settings.token,
        page_types=page_types,
        collections=collections,
        blog=blog,
        mode=ScanMode.AUDIT,
        preview=settings.preview,
    )
    outcome = _run(request, settings, as_json)

    if as_json:
        click.echo(outcome.to_json())
        if not outcome.success:
            raise SystemExit(1)
        return

    _report_failures(outcome)
    if not outcome.success:
        raise SystemExit(1)

    if not outcome.results:
        console.print(
            f"[green]✓ No markup bloat found in {outcome.total_items_scanned} item(s).[/green]"
        )
        return

    table = Table(title="Patterns Found")
    table.add_column("Pattern", style="cyan")
    table.add_column("Source")
    table.add_column("Occurrences", style="yellow", justify="right")
    table.add_column("Items", justify="right")

    for pattern in outcome.patterns_found:
        source = ""
        occurrences = 0
        items = 0
        for result in outcome.results:
            found = [i for i in result.issues if i.pattern == pattern]
            if found:
                source = found[0].source
                items += 1
                occurrences += sum(i.count for i in found)
        table.add_row(escape(pattern), escape(source), str(occurrences), str(items))

    console.print(table)
    console.print()

    for result in outcome.results:
        console.print(
            f"[bold]{escape(result.title)}[/bold] [dim]({escape(result.slug)} · "
            f"{escape(result.source_type)})[/dim]"
        )
        for issue in result.issues:
            console.print(
                f"  [yellow]{escape(issue.pattern)}[/yellow] in [cyan]{escape(issue.path)}[/cyan] "
                f"[dim]×{issue.count}[/dim]"
            )
            value = issue.value
            if not full and len(value) > PREVIEW_CHARS:
                value = value[:PREVIEW_CHARS] + "..."
            console.print(Text("    " + value, style="dim"))
        console.print()

    console.print(
        f"[yellow]{outcome.total_issues} issue(s) in {len(outcome.results)} of "
        f"{outcome.total_items_scanned} item(s)[/yellow]"
    )
