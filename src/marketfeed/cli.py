"""marketfeed CLI."""

import asyncio

import click

from marketfeed.app import MarketFeedApp


@click.group()
def cli():
    """marketfeed Command Line Interface."""
    pass


@cli.command()
@click.option(
    "--config",
    type=click.Path(exists=True),
    default="config/config.yaml",
    help="Path to configuration file",
)
@click.option("--seed", type=int, help="Override random seed")
@click.option("--duration", type=float, help="Stop after this many seconds")
@click.option("--chain", "chains", multiple=True, help="Also stream this symbol's option chain")
def run(config, seed, duration, chains):
    """Start the simulated market feed."""
    try:
        app = MarketFeedApp(
            config_path=config,
            seed=seed,
            duration_sec=duration,
            watch_symbols=[c.upper() for c in chains],
        )
        asyncio.run(app.run())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        import traceback

        traceback.print_exc()


@cli.command()
@click.option(
    "--config",
    type=click.Path(exists=True),
    default="config/config.yaml",
    help="Path to configuration file",
)
def smoke_test(config):
    """Run a smoke test (initialize components and exit)."""
    try:
        app = MarketFeedApp(config_path=config)
        asyncio.run(app.initialize())
        click.echo("Smoke test passed: Components initialized successfully.")
    except Exception as e:
        click.echo(f"Smoke test failed: {e}", err=True)
        raise SystemExit(1)


@cli.command()
def snapshot():
    """Print the seed universe."""
    from marketfeed.feed.engine import MarketEngine
    from marketfeed.scheduler.clock import ManualClock

    engine = MarketEngine(clock=ManualClock())

    click.echo(f"{'SYMBOL':<12}{'PRICE':>12}{'CHANGE':>10}{'%':>8}{'VOLUME':>12}")
    for s in engine.get_stocks():
        click.echo(f"{s.symbol:<12}{s.price:>12}{s.change:>10}{s.change_percent:>8}{s.volume:>12}")

    click.echo("")
    for i in engine.get_indices():
        click.echo(f"{i.symbol:<12}{i.value:>12}{i.change:>10}{i.change_percent:>8}")

    for symbol in ("RELIANCE",):
        pcr = engine.get_put_call_ratio(symbol)
        if pcr:
            click.echo(f"\n{symbol} put/call ratio: {pcr.ratio} ({'bullish' if pcr.is_bullish else 'bearish'})")


main = cli

if __name__ == "__main__":
    cli()
