"""Command-line interface for jobsweep."""
import json
import logging
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from .config import Config, build_location_store
from .core import ScrapeOrchestrator
from .domain.deduplication import JobDeduplicator
from .exceptions import JobSweepError
from .ingest.adapters import ADAPTERS
from .ingest.location_store import SqlLocationStore
from .ingest.locations import LocationSourceSelector
from .models import LocationConfig, SearchFilters, SearchOptions

console = Console()

DEFAULT_LOCATION_DB = "sqlite:///locations.db"


def build_selector(cfg: Config) -> LocationSourceSelector:
    location_config = cfg.get_location_config()
    return LocationSourceSelector(store=build_location_store(cfg), cache_ttl=location_config['cache_ttl'])


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option('--env-file', type=click.Path(), default=None, help='Path to a .env file')
@click.pass_context
def cli(ctx: click.Context, verbose: bool, env_file: Optional[str]):
    """jobsweep - multi-board job search with deduplication."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    ctx.obj = Config(env_file)

@cli.command()
@click.argument('keywords', nargs=-1, required=True)
@click.option('--location', '-l', help='Location (e.g., "Toronto", "London, UK", "Remote")')
@click.option('--remote', is_flag=True, help='Only remote jobs')
@click.option('--job-type', help='Job type (full-time, part-time, contract, temporary, internship)')
@click.option('--experience', help='Experience level (entry, mid, senior)')
@click.option('--source', '-s', 'sources', multiple=True, help='Source id to search (repeatable); default resolves from location')
@click.option('--sequential', is_flag=True, help='Scrape sources one after another (default: JOBSWEEP_PARALLEL)')
@click.option('--limit', type=int, default=None, help='Maximum results per source')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
@click.pass_obj
def search(cfg: Config, keywords: Tuple[str, ...], location: Optional[str], remote: bool, job_type: Optional[str],
           experience: Optional[str], sources: Tuple[str, ...], sequential: bool, limit: Optional[int],
           as_json: bool):
    """Search job boards for KEYWORDS and print deduplicated results."""
    scraper_config = cfg.get_scraper_config()
    adapter_options = {'headless': scraper_config['headless']}
    if scraper_config['user_agents']:
        adapter_options['user_agents'] = tuple(scraper_config['user_agents'])

    orchestrator = ScrapeOrchestrator(
        selector=build_selector(cfg),
        deduplicator=JobDeduplicator(cfg.get_dedup_config()['similarity_threshold']),
        adapter_options=adapter_options,
    )
    filters = SearchFilters(
        keywords=" ".join(keywords),
        location=location,
        remote=remote,
        job_type=job_type,
        experience_level=experience,
    )
    options = SearchOptions(
        sources=list(sources) or scraper_config['sources'] or None,
        parallel=scraper_config['parallel'] and not sequential,
        max_results_per_source=limit or scraper_config['max_results_per_source'],
    )

    try:
        result = orchestrator.search_jobs_sync(filters, options)
    except JobSweepError as e:
        console.print(f"[red]Search failed: {e}[/red]")
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.jobs:
        console.print("[yellow]No jobs found matching your criteria[/yellow]")
    else:
        table = Table(title=f"Jobs for '{filters.keywords}'")
        table.add_column("Title", style="cyan")
        table.add_column("Company", style="green")
        table.add_column("Location")
        table.add_column("Salary", style="magenta")
        table.add_column("Source", style="blue")
        table.add_column("Dupes", justify="right")
        for job in result.jobs:
            table.add_row(job.title, job.company, job.location, job.salary or "", job.source,
                          str(len(job.duplicate_ids)))
        console.print(table)

    stats = result.stats
    console.print(
        f"[bold green]{stats.unique_jobs} unique jobs[/bold green] from {stats.total_jobs} postings "
        f"({stats.duplicates_removed} duplicates, {stats.duplicate_rate:.1f}%) in {result.scrape_duration:.1f}s"
    )
    console.print(f"Sources: {', '.join(result.sources_used)}")

@cli.command()
@click.option('--location', '-l', default=None, help='Location to resolve')
@click.pass_obj
def sources(cfg: Config, location: Optional[str]):
    """Show which job boards a location resolves to."""
    selector = build_selector(cfg)
    config = selector.detect(location)
    console.print(f"[blue]{location or 'No location'} -> {config.country} ({config.region}), "
                  f"Indeed domain {config.indeed_domain}[/blue]")
    for source_id in selector.sources_for(location):
        marker = "[green]adapter[/green]" if source_id in ADAPTERS else "[yellow]no adapter[/yellow]"
        console.print(f"  {source_id} {marker}")

@cli.command()
def boards():
    """List supported job boards and their scraping policy."""
    table = Table(title="Job Boards")
    table.add_column("Source", style="cyan")
    table.add_column("Name")
    table.add_column("Base URL", style="blue")
    table.add_column("Delay (s)", justify="right")
    table.add_column("Retries", justify="right")
    table.add_column("Timeout (s)", justify="right")
    table.add_column("Max pages", justify="right")
    for source_id, adapter_cls in ADAPTERS.items():
        policy = adapter_cls.default_config
        table.add_row(source_id, policy.name, policy.base_url, f"{policy.request_delay:g}",
                      str(policy.max_retries), f"{policy.timeout:g}", str(policy.max_pages))
    console.print(table)

@cli.group()
@click.option('--db-url', default=None, help='Location database URL (default: JOBSWEEP_LOCATION_DB_URL)')
@click.pass_context
def locations(ctx: click.Context, db_url: Optional[str]):
    """Manage location configs in the location database."""
    cfg: Config = ctx.obj
    ctx.obj = SqlLocationStore(db_url or cfg.get_location_config()['db_url'] or DEFAULT_LOCATION_DB)

@locations.command('list')
@click.option('--all', 'show_all', is_flag=True, help='Include inactive configs')
@click.pass_obj
def list_locations(store: SqlLocationStore, show_all: bool):
    """List stored location configs."""
    configs = store.all_configs() if show_all else store.active_configs()
    if not configs:
        console.print("[yellow]No location configs stored (try 'jobsweep locations seed')[/yellow]")
        return
    table = Table(title="Location Configs")
    table.add_column("ID", justify="right")
    table.add_column("Country", style="cyan")
    table.add_column("Region")
    table.add_column("Priority", justify="right")
    table.add_column("Keywords")
    table.add_column("Sources", style="green")
    table.add_column("Active")
    for config in configs:
        table.add_row(config.id or "", config.country, config.region, str(config.priority),
                      ", ".join(config.keywords), ", ".join(config.recommended_sources),
                      "yes" if config.is_active else "no")
    console.print(table)

@locations.command('add')
@click.option('--country', required=True, help='Country name')
@click.option('--region', default='global', help='Region key')
@click.option('--keywords', required=True, help='Comma-separated location keywords')
@click.option('--sources', 'source_list', required=True, help='Comma-separated source ids, in preference order')
@click.option('--indeed-domain', default='indeed.com', help='Country-specific Indeed host')
@click.option('--linkedin-region', default='global', help='LinkedIn region label')
@click.option('--priority', type=int, default=0, help='Higher priority configs match first')
@click.pass_obj
def add_location(store: SqlLocationStore, country: str, region: str, keywords: str, source_list: str,
                 indeed_domain: str, linkedin_region: str, priority: int):
    """Add a location config."""
    config = LocationConfig(
        region=region,
        country=country,
        keywords=[k.strip().lower() for k in keywords.split(',') if k.strip()],
        indeed_domain=indeed_domain,
        linkedin_region=linkedin_region,
        recommended_sources=[s.strip().lower() for s in source_list.split(',') if s.strip()],
        priority=priority,
    )
    try:
        stored = store.add_config(config)
    except JobSweepError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    console.print(f"[green]Added {stored.country} (id {stored.id})[/green]")

@locations.command('deactivate')
@click.argument('config_id')
@click.pass_obj
def deactivate_location(store: SqlLocationStore, config_id: str):
    """Deactivate the location config CONFIG_ID."""
    try:
        config = store.deactivate_config(config_id)
    except JobSweepError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    console.print(f"[green]Deactivated {config.country}[/green]")

@locations.command('seed')
@click.pass_obj
def seed_locations(store: SqlLocationStore):
    """Insert the built-in location table."""
    added = store.seed_defaults()
    console.print(f"[green]Seeded {added} location configs[/green]")

def main():
    """Main entry point for the CLI."""
    cli()
