# elite_cards/cli/sync_prices.py
import asyncio
import click

from elite_cards.scheduler import run_price_sync


@click.command()
def sync_prices():
    """Run one price sync pass against the configured database and stores"""
    result = asyncio.run(run_price_sync())

    click.echo(result.message)
    click.echo(f"  unchanged: {result.unchanged}, skipped: {result.skipped}")
    for error in result.errors:
        click.echo(f"  error: {error}", err=True)

    if result.errors:
        raise SystemExit(1)


if __name__ == "__main__":
    sync_prices()
