"""Invoice commands."""

import click
from decimal import Decimal
from clientledger.cli.client_resolution import resolve_client_or_exit
from clientledger.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from clientledger.cli.error_handling import handle_domain_error, parse_or_exit
from clientledger.domain.client import ClientService
from clientledger.domain.entities import InvoiceType
from clientledger.domain.errors import DomainError
from clientledger.domain.invoice import InvoiceService
from clientledger.utils.amount_parser import parse_amount
from clientledger.utils.date_parser import parse_date


@click.group()
def invoice_group():
    """Manage sale and purchase invoices."""
    pass


@invoice_group.command("create")
@click.option("--client", required=True, help="Client name or ID")
@click.option("--type", "invoice_type", type=click.Choice([t.value for t in InvoiceType]), required=True)
@click.option("--total", required=True, help="Invoice total (e.g., 1000.00)")
@click.option("--paid", default="0", show_default=True, help="Amount already paid")
@click.option("--date", help="Invoice date (YYYY-MM-DD or relative like 'today'); defaults to today")
@click.option("--number", help="Invoice number (generated as INV-YYMM-NNNN if omitted)")
@click.option("--notes", help="Notes")
@click.pass_context
def create_invoice(ctx, client, invoice_type, total, paid, date, number, notes):
    """Create an invoice and apply its due amount to the client balance.

    Examples:
        clientledger invoice create --client "Acme Corp" --type sale --total 1000 --paid 300
        clientledger invoice create --client 2 --type purchase --total 250.50 --date yesterday
    """
    db = ctx.obj["db"]
    client_id = resolve_client_or_exit(ctx, ClientService(db), client)
    invoice_total = parse_or_exit(ctx, parse_amount, total, "total")
    invoice_paid = parse_or_exit(ctx, parse_amount, paid, "paid amount")
    invoice_date = parse_or_exit(ctx, parse_date, date, "date") if date else None

    service = InvoiceService(db)
    try:
        invoice_id = service.create_invoice(
            client_id=client_id,
            invoice_type=invoice_type,
            total=invoice_total,
            paid=invoice_paid,
            date=invoice_date,
            invoice_number=number,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    inv = service.require_invoice(invoice_id)
    click.echo(f"Created {invoice_type} invoice {inv.invoice_number} (ID: {invoice_id}), due {inv.due:,.2f}")


@invoice_group.command("list")
@click.option("--client", help="Client name or ID")
@click.option("--type", "invoice_type", type=click.Choice([t.value for t in InvoiceType]))
@period_options
@click.pass_context
def list_invoices(ctx, client, invoice_type, start_date, end_date, **kwargs):
    """List invoices, newest first."""
    db = ctx.obj["db"]
    client_id = resolve_client_or_exit(ctx, ClientService(db), client) if client else None
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(kwargs)
    )

    invoices = InvoiceService(db).list_invoices(
        client_id=client_id, invoice_type=invoice_type, start_date=start, end_date=end
    )
    if not invoices:
        click.echo("No invoices found.")
        return

    click.echo(f"\n{'ID':>4s} | {'Number':14s} | {'Date':10s} | {'Type':8s} | {'Client':>6s} | {'Total':>12s} | {'Due':>12s}")
    click.echo("-" * 86)
    total_due = Decimal("0")
    for inv in invoices:
        click.echo(
            f"{inv.id:4d} | {inv.invoice_number:14s} | {inv.date} | {inv.invoice_type.value:8s} | "
            f"{inv.client_id:6d} | {inv.total:12,.2f} | {inv.due:12,.2f}"
        )
        total_due += inv.due
    click.echo("-" * 86)
    click.echo(f"{len(invoices)} invoice{'s' if len(invoices) != 1 else ''}, {total_due:,.2f} due")


@invoice_group.command("show")
@click.argument("invoice_id", type=int)
@click.pass_context
def show_invoice(ctx, invoice_id: int):
    """Show an invoice and the payments made against it."""
    db = ctx.obj["db"]
    try:
        inv = InvoiceService(db).require_invoice(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Invoice {inv.invoice_number} (ID: {inv.id})")
    click.echo(f"Type:   {inv.invoice_type.value}")
    click.echo(f"Client: {inv.client_id}")
    click.echo(f"Date:   {inv.date}")
    click.echo(f"Total:  {inv.total:,.2f}")
    click.echo(f"Paid:   {inv.paid:,.2f}")
    click.echo(f"Due:    {inv.due:,.2f}")
    if inv.notes:
        click.echo(f"Notes:  {inv.notes}")

    payments = db.list_transactions(invoice_id=invoice_id)
    if payments:
        click.echo("\nPayments:")
        for txn in payments:
            click.echo(f"  {txn.transaction_number} | {txn.date} | {txn.amount:,.2f} | {txn.payment_method.value}")


@invoice_group.command("update")
@click.argument("invoice_id", type=int)
@click.option("--total", help="New invoice total")
@click.option("--paid", help="New paid amount")
@click.option("--date", help="New invoice date (YYYY-MM-DD or relative like 'today')")
@click.option("--notes", help="Notes")
@click.pass_context
def update_invoice(ctx, invoice_id: int, total: str | None, paid: str | None, date: str | None, notes: str | None):
    """Update an invoice.

    Updates only the fields that are provided. A change to the total or the
    paid amount moves the client balance by the change in the due amount.

    Examples:
        clientledger invoice update 4 --total 1200
        clientledger invoice update 4 --paid 500 --notes "Deposit received"
    """
    invoice_total = parse_or_exit(ctx, parse_amount, total, "total") if total is not None else None
    invoice_paid = parse_or_exit(ctx, parse_amount, paid, "paid amount") if paid is not None else None
    invoice_date = parse_or_exit(ctx, parse_date, date, "date") if date is not None else None

    service = InvoiceService(ctx.obj["db"])
    try:
        service.update_invoice(
            invoice_id,
            total=invoice_total,
            paid=invoice_paid,
            date=invoice_date,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    inv = service.require_invoice(invoice_id)
    click.echo(f"Updated invoice {inv.invoice_number}, due {inv.due:,.2f}")


@invoice_group.command("delete")
@click.argument("invoice_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_invoice(ctx, invoice_id: int, yes: bool):
    """Delete an invoice and reverse its effect on the client balance.

    Invoices with linked payments must have those payments deleted first.
    """
    service = InvoiceService(ctx.obj["db"])
    try:
        inv = service.require_invoice(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Are you sure you want to delete invoice {inv.invoice_number}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_invoice(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted invoice {inv.invoice_number}")


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
