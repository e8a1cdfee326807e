import logging

import click

from orderflow.infrastructure.cli.order_commands import order_demo, order_states


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """orderflow: order lifecycle with automatic processing"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )


# Register subcommands
cli.add_command(order_demo)
cli.add_command(order_states)
