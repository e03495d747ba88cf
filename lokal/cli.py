# lokal/cli.py
import click
from flask.cli import with_appcontext

from .receipt.events import get_feed, get_trigger

@click.command("process-receipt")
@click.argument("receipt_id")
@with_appcontext
def process_receipt(receipt_id):
    """Run the buyer copy trigger for one stored receipt."""
    copy_id = get_trigger().process(receipt_id)
    get_feed().drain()
    if copy_id:
        click.echo(f"Buyer copy created: {copy_id}")
    else:
        click.echo("No buyer copy created")

@click.command("drain-receipts")
@with_appcontext
def drain_receipts():
    """Deliver queued receipt insert events."""
    delivered = get_feed().drain()
    click.echo(f"Delivered {delivered} receipt event(s)")

def register_cli(app):
    app.cli.add_command(process_receipt)
    app.cli.add_command(drain_receipts)
