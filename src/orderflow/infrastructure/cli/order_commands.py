"""CLI commands for the order lifecycle demo."""

from __future__ import annotations

import time

import click

from orderflow.application.dto import OrderItemSpec, OrderSnapshot
from orderflow.domain.exceptions import DomainException
from orderflow.domain.model.status import OrderStatus, TRANSITIONS
from orderflow.infrastructure.bootstrap import build_order_system
from orderflow.infrastructure.config import Settings

DEFAULT_ITEMS = "PROD-1:2:29.99,PROD-2:1:49.99"


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'SKU-1:2:10.00,SKU-2:1:5.00' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for triple in raw.split(","):
        triple = triple.strip()
        parts = triple.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid item format '{triple}'. Expected 'ProductId:Quantity:UnitPrice'."
            )
        product_id, qty_str, price = (part.strip() for part in parts)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(OrderItemSpec(product_id=product_id, quantity=qty, unit_price=price))
    return specs


def _display_order(snapshot: OrderSnapshot) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {snapshot.id}  (status={snapshot.status.value})")
    click.echo(f"Created:  {snapshot.created_at.strftime('%Y-%m-%d %H:%M:%S UTC')}")
    click.echo(f"Updated:  {snapshot.updated_at.strftime('%Y-%m-%d %H:%M:%S UTC')}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in snapshot.items:
        click.echo(
            f"  {item.product_id:<20} {item.quantity:>5} "
            f"{str(item.unit_price):>10} {str(item.line_total):>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {str(snapshot.total):>20}")


def _echo_change(snapshot: OrderSnapshot) -> None:
    click.echo(f"[event] order {snapshot.id} -> {snapshot.status.value}")


@click.command("states")
def order_states() -> None:
    """Show every status, its description and where it may go next."""
    for status in OrderStatus:
        targets = ", ".join(sorted(t.value for t in TRANSITIONS[status])) or "(terminal)"
        click.echo(f"{status.value:<11} -> {targets:<22} {status.description}")


@click.command("demo")
@click.option(
    "--items", "items_str", default=DEFAULT_ITEMS, show_default=True,
    help="Items as 'ProductId:Qty:UnitPrice,...'.",
)
@click.option(
    "--delay", type=float, default=None,
    help="Seconds before a PENDING order is processed (default: from environment).",
)
@click.option("--cancel", is_flag=True, default=False, help="Cancel the order right away.")
@click.option("--ship", is_flag=True, default=False, help="Ship and deliver once processing.")
def order_demo(items_str: str, delay: float | None, cancel: bool, ship: bool) -> None:
    """Create an order and watch it move through its lifecycle."""
    specs = _parse_items(items_str)

    try:
        settings = Settings.from_seconds(delay) if delay is not None else Settings.from_env()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    with build_order_system(settings, observers=[_echo_change]) as system:
        coordinator = system.coordinator
        try:
            order = coordinator.create_order(specs)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        _display_order(OrderSnapshot.from_order(order))

        if cancel:
            cancelled = coordinator.cancel_order(order.id)
            click.echo(f"Cancel requested: {'ok' if cancelled else 'too late'}")

        wait = settings.processing_delay.total_seconds()
        click.echo(f"Waiting {wait:g}s for automatic processing...")
        time.sleep(wait)
        deadline = time.monotonic() + 1.0
        while order.status is OrderStatus.PENDING and time.monotonic() < deadline:
            time.sleep(0.01)

        if ship and order.status is OrderStatus.PROCESSING:
            try:
                coordinator.ship_order(order.id)
                coordinator.deliver_order(order.id)
            except DomainException as exc:
                raise click.ClickException(str(exc))

        click.echo()
        _display_order(OrderSnapshot.from_order(order))
