"""Azure Quota Report CLI entrypoint."""
import typer
from rich.console import Console
from rich.table import Table
from typing import Dict, List, Optional

from quotareport.config.parser import ConfigParser, DEFAULT_CONFIG_PATH
from quotareport.quota.collector import QuotaCollector, load_summaries
from quotareport.quota.errors import QuotaReportError
from quotareport.quota.models import QuotaCategory, QuotaSummary
from quotareport.report.renderer import CRITICAL_THRESHOLD, ReportRenderer, critical_summaries, usage_tier

app = typer.Typer(help="Azure Quota Report - Subscription quota usage aggregated into an HTML report")
console = Console()

TIER_STYLES = {"critical": "red", "high": "yellow", "medium": "cyan", "low": "green"}


def print_category_totals(summaries: Dict[str, List[QuotaSummary]]) -> None:
    """Print a table of resource type counts per category."""
    table = Table(title="Quota Summary")
    table.add_column("Category", style="cyan")
    table.add_column("Resource Types", justify="right")
    for tier in TIER_STYLES:
        table.add_column(tier.capitalize(), justify="right", style=TIER_STYLES[tier])

    for label, category_summaries in summaries.items():
        counts = {tier: 0 for tier in TIER_STYLES}
        for summary in category_summaries:
            counts[usage_tier(summary.usage_percentage)] += 1
        table.add_row(label, str(len(category_summaries)), *[str(counts[t]) for t in TIER_STYLES])

    console.print(table)


def print_high_usage_alerts(summaries: Dict[str, List[QuotaSummary]]) -> int:
    """Print quotas at or above the critical threshold.

    Returns:
        int: Number of critical quotas.
    """
    critical = critical_summaries(summaries)
    if not critical:
        console.print(f"[green]No quotas at or above {CRITICAL_THRESHOLD}% usage[/]")
        return 0

    table = Table(title=f"High Usage Alerts (>= {CRITICAL_THRESHOLD}%)")
    table.add_column("Category", style="cyan")
    table.add_column("Resource Type")
    table.add_column("Usage", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Percent", justify="right", style="bold red")
    table.add_column("Top Subscription")

    for summary in critical:
        top = summary.subscription_details[0].subscription_name if summary.subscription_details else ""
        table.add_row(
            summary.category.value,
            summary.resource_type,
            f"{summary.total_usage:,}",
            f"{summary.total_limit:,}",
            f"{summary.usage_percentage:.2f}%",
            top,
        )

    console.print(table)
    console.print("\n[yellow]To request a quota increase, visit:[/]")
    console.print("[link]https://portal.azure.com/#blade/Microsoft_Azure_Capacity/QuotaMenuBlade/myQuotas[/link]")
    return len(critical)


@app.command("report")
def report(
    config: Optional[str] = typer.Option(None, "--config", "-c", help=f"Path to the report YAML file (default: {DEFAULT_CONFIG_PATH})"),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Azure region to query"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Path for the HTML report"),
    json_output: Optional[str] = typer.Option(None, "--json-output", help="Also save aggregated summaries as JSON"),
    category: Optional[List[QuotaCategory]] = typer.Option(None, "--category", help="Quota category to include (repeatable)"),
    tenant_name: Optional[str] = typer.Option(None, "--tenant-name", help="Tenant name shown in the report"),
    fail_on_critical: bool = typer.Option(False, "--fail-on-critical", help=f"Exit with code 2 if any quota is at or above {CRITICAL_THRESHOLD}%"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information")
):
    """Collect quota usage across subscriptions and write an HTML report."""
    console.print("[bold blue]Collecting quota usage...[/]")

    try:
        report_config = ConfigParser.load(config)
        overrides = {
            "location": location,
            "output": output,
            "json_output": json_output,
            "categories": category or None,
            "tenant_name": tenant_name,
        }
        report_config = report_config.model_copy(update={k: v for k, v in overrides.items() if v is not None})

        collector = QuotaCollector(report_config, debug=debug)
        result, summaries = collector.generate_report()
    except QuotaReportError as e:
        console.print(f"[bold red]Error: {e}[/]")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[bold red]Unexpected error: {e}[/]")
        raise typer.Exit(code=1)

    if result.failures:
        console.print(f"[yellow]{len(result.failures)} usage request(s) failed and were skipped[/]")

    print_category_totals(summaries)
    critical_count = print_high_usage_alerts(summaries)

    if fail_on_critical and critical_count:
        raise typer.Exit(code=2)


@app.command("render")
def render(
    input_path: str = typer.Argument(..., help="JSON file written by report --json-output"),
    output: str = typer.Option("quota-report.html", "--output", "-o", help="Path for the HTML report")
):
    """Render an HTML report from previously saved summaries."""
    try:
        summaries, metadata = load_summaries(input_path)
        path = ReportRenderer().write(output, summaries, metadata)
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/]")
        raise typer.Exit(code=1)

    console.print(f"[green]Quota report saved to {path}[/]")
    print_category_totals(summaries)
    print_high_usage_alerts(summaries)


@app.command("init-config")
def init_config(
    path: str = typer.Option(DEFAULT_CONFIG_PATH, "--path", "-p", help="Where to write the configuration file"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file")
):
    """Write a starter configuration file."""
    try:
        written = ConfigParser.write_starter(path, force=force)
    except FileExistsError as e:
        console.print(f"[bold yellow]WARNING: {e}[/]")
        console.print("[yellow]Use --force to overwrite the existing file.[/]")
        raise typer.Exit(code=1)

    console.print(f"[green]Configuration written to {written}[/]")


if __name__ == "__main__":
    app()
