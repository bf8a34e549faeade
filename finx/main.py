"""
Main entry point for FinX
Command-line access to every market data operation
"""

import asyncio
import json
from typing import Any, Awaitable, Callable

import click

from finx.config.settings import get_config
from finx.data.factory import build_market_data_service
from finx.data.market import MarketDataService
from finx.domain import list_available_metrics, list_available_sectors
from finx.errors import MarketDataError
from finx.utils.logger import get_logger

logger = get_logger(__name__)

def _echo_json(payload: Any):
    click.echo(json.dumps(payload, indent=2, default=str))

def _run(operation: Callable[[MarketDataService], Awaitable[Any]]) -> Any:
    """Run one service operation inside a connected service"""

    async def runner():
        async with build_market_data_service() as service:
            return await operation(service)

    try:
        return asyncio.run(runner())
    except (MarketDataError, ValueError) as e:
        logger.debug(f"Command failed: {e}")
        raise click.ClickException(str(e)) from e

@click.group()
@click.option('--max-wait', type=float, default=None,
              help='Longest a call may queue for Alpha Vantage quota (seconds)')
@click.option('--no-coalesce', is_flag=True, help='Fetch concurrent identical requests separately')
@click.option('--max-peers', type=click.IntRange(min=1), default=None,
              help='Peers fetched by compare')
def cli(max_wait, no_coalesce, max_peers):
    """FinX market data CLI"""
    config = get_config()
    if max_wait is not None:
        config.override("api.rate_limit_max_wait_seconds", max_wait)
    if no_coalesce:
        config.override("system.coalesce_requests", False)
    if max_peers is not None:
        config.override("system.max_peers", max_peers)

@cli.command()
def status():
    """Show configuration, providers and quota limits"""
    config = get_config()

    click.echo("\n📋 Configuration Status:")
    click.echo(f"  • Log Level: {config.system.log_level}")
    click.echo(f"  • Request Coalescing: {'Enabled' if config.get('system.coalesce_requests') else 'Disabled'}")
    click.echo(
        f"  • Cache TTL: quotes {config.cache.quote_ttl_seconds}s, "
        f"company {config.cache.company_ttl_seconds}s, search {config.cache.search_ttl_seconds}s"
    )

    click.echo("\n🔑 Providers:")
    primary = "✅ Alpha Vantage" if config.api.has_primary else "❌ Alpha Vantage (ALPHA_VANTAGE_API_KEY missing)"
    click.echo(f"  • Primary: {primary}")
    click.echo("  • Fallback: ✅ Yahoo Finance")

    click.echo("\n📊 API Quotas:")
    max_wait = config.get("api.rate_limit_max_wait_seconds")
    click.echo(f"  • Per minute: {config.api.alpha_vantage_calls_per_minute}")
    click.echo(f"  • Per day: {config.api.alpha_vantage_daily_calls}")
    click.echo(f"  • Max queue wait: {'unbounded' if max_wait is None else f'{max_wait:.0f}s'}")

    click.echo("\n✅ System check complete!")

@cli.command()
@click.argument('symbol')
def quote(symbol):
    """Get the current quote for SYMBOL"""
    result = _run(lambda service: service.get_quote(symbol))
    _echo_json(result.to_dict())

@cli.command()
@click.argument('symbol')
def company(symbol):
    """Get company profile and fundamentals for SYMBOL"""
    result = _run(lambda service: service.get_company_info(symbol))
    _echo_json(result.to_dict())

@cli.command()
@click.argument('symbol')
@click.option('--period', default='1y', show_default=True,
              help='Lookback: 1d, 5d, 1mo, 3mo, 6mo, 1y, 2y, 5y, max')
def history(symbol, period):
    """Get daily price history for SYMBOL"""
    result = _run(lambda service: service.get_historical_data(symbol, period))
    _echo_json(result.to_dict())

@cli.command()
@click.argument('query')
def search(query):
    """Search tickers by company name or partial symbol"""
    result = _run(lambda service: service.search_symbol(query))
    _echo_json(result.to_dict())

@cli.command()
@click.argument('symbol')
@click.option('--sector', default=None, help='Sector name, detected when omitted')
@click.option('--metric', 'metrics', multiple=True, help='Comparison column, repeatable')
@click.option('--list-sectors', is_flag=True, help='List available sectors and exit')
def compare(symbol, sector, metrics, list_sectors):
    """Compare SYMBOL against its sector peers"""
    if list_sectors:
        for name in list_available_sectors():
            click.echo(name)
        return

    result = _run(lambda service: service.compare_peers(symbol, sector=sector, metrics=list(metrics) or None))
    click.echo(result.comparison)

@cli.command()
@click.argument('metric', required=False)
@click.option('--symbol', default=None, help='Add cached company data as context')
def explain(metric, symbol):
    """Explain a financial METRIC"""
    if not metric:
        click.echo("Available metrics:")
        for name in list_available_metrics():
            click.echo(f"  • {name}")
        return

    result = _run(lambda service: service.explain_fundamental(metric, symbol=symbol))
    click.echo(result.explanation)
    if result.context_data:
        click.echo(f"\nCompany data:\n{result.context_data}")

if __name__ == "__main__":
    cli()
