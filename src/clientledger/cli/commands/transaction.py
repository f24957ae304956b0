"""Transaction commands."""

import click
from clientledger.cli.client_resolution import resolve_client_or_exit
from clientledger.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from clientledger.cli.error_handling import handle_domain_error, parse_or_exit
from clientledger.domain.client import ClientService
from clientledger.domain.entities import PaymentMethod, TransactionType
from clientledger.domain.errors import DomainError
from clientledger.domain.transaction import TransactionService
from clientledger.utils.amount_parser import parse_amount
from clientledger.utils.date_parser import parse_date


@click.group()
def transaction_group():
    """Manage income and expense transactions."""
    pass


@transaction_group.command("create")
@click.option("--type", "transaction_type", type=click.Choice([t.value for t in TransactionType]), required=True)
@click.option("--amount", required=True, help="Positive amount (e.g., 250.00)")
@click.option("--description", default="", help="Description")
@click.option("--client", help="Client name or ID")
@click.option("--invoice", "invoice_id", type=int, help="Invoice ID this transaction pays")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today'); defaults to today")
@click.option(
    "--method",
    "payment_method",
    type=click.Choice([m.value for m in PaymentMethod]),
    default=PaymentMethod.CASH.value,
    show_default=True,
)
@click.option("--reference", help="Reference number")
@click.option("--number", help="Transaction number (generated as TRX-YYMM-NNNN if omitted)")
@click.option("--notes", help="Notes")
@click.pass_context
def create_transaction(
    ctx, transaction_type, amount, description, client, invoice_id, date, payment_method, reference, number, notes
):
    """Record an income or expense.

    With --invoice the transaction is a payment against that invoice and the
    client defaults to the invoice's client.

    Examples:
        clientledger transaction create --type income --amount 200 --client "Acme Corp"
        clientledger transaction create --type income --amount 300 --invoice 4 --method bank
    """
    db = ctx.obj["db"]
    client_id = resolve_client_or_exit(ctx, ClientService(db), client) if client else None
    txn_amount = parse_or_exit(ctx, parse_amount, amount, "amount")
    txn_date = parse_or_exit(ctx, parse_date, date, "date") if date else None

    service = TransactionService(db)
    try:
        txn_id = service.create_transaction(
            transaction_type=transaction_type,
            amount=txn_amount,
            description=description,
            client_id=client_id,
            invoice_id=invoice_id,
            date=txn_date,
            payment_method=payment_method,
            reference_number=reference,
            notes=notes,
            transaction_number=number,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    txn = service.require_transaction(txn_id)
    click.echo(f"Created {transaction_type} transaction {txn.transaction_number} (ID: {txn_id})")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--type", "transaction_type", type=click.Choice([t.value for t in TransactionType]))
@click.option("--amount", help="New positive amount")
@click.option("--description", help="Description")
@click.option("--client", help="Client name or ID, or empty string to detach the client")
@click.option("--invoice", "invoice_id", type=int, help="Invoice ID this transaction now pays")
@click.option("--unlink-invoice", is_flag=True, help="Detach the transaction from its invoice")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today')")
@click.option("--method", "payment_method", type=click.Choice([m.value for m in PaymentMethod]))
@click.option("--reference", help="Reference number")
@click.option("--notes", help="Notes")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    transaction_type: str | None,
    amount: str | None,
    description: str | None,
    client: str | None,
    invoice_id: int | None,
    unlink_invoice: bool,
    date: str | None,
    payment_method: str | None,
    reference: str | None,
    notes: str | None,
):
    """Update a transaction.

    Updates only the fields that are provided. Use --client "" to detach the
    client. The balance and any linked invoice follow the change.

    Examples:
        clientledger transaction update 7 --amount 250
        clientledger transaction update 7 --invoice 4
        clientledger transaction update 7 --unlink-invoice --description "On account"
    """
    db = ctx.obj["db"]
    client_id = None
    clear_client = False
    if client is not None:
        if client == "":
            clear_client = True
        else:
            client_id = resolve_client_or_exit(ctx, ClientService(db), client)
    txn_amount = parse_or_exit(ctx, parse_amount, amount, "amount") if amount is not None else None
    txn_date = parse_or_exit(ctx, parse_date, date, "date") if date is not None else None

    service = TransactionService(db)
    try:
        service.update_transaction(
            transaction_id,
            transaction_type=transaction_type,
            amount=txn_amount,
            description=description,
            client_id=client_id,
            invoice_id=invoice_id,
            date=txn_date,
            payment_method=payment_method,
            reference_number=reference,
            notes=notes,
            clear_client=clear_client,
            clear_invoice=unlink_invoice,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    txn = service.require_transaction(transaction_id)
    click.echo(f"Updated transaction {txn.transaction_number}")


@transaction_group.command("list")
@click.option("--client", help="Client name or ID")
@click.option("--type", "transaction_type", type=click.Choice([t.value for t in TransactionType]))
@click.option("--invoice", "invoice_id", type=int, help="Only payments against this invoice")
@period_options
@click.pass_context
def list_transactions(ctx, client, transaction_type, invoice_id, start_date, end_date, **kwargs):
    """List transactions, newest first."""
    db = ctx.obj["db"]
    client_id = resolve_client_or_exit(ctx, ClientService(db), client) if client else None
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(kwargs)
    )

    transactions = TransactionService(db).list_transactions(
        client_id=client_id,
        transaction_type=transaction_type,
        invoice_id=invoice_id,
        start_date=start,
        end_date=end,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'ID':>4s} | {'Number':14s} | {'Date':10s} | {'Type':7s} | {'Amount':>12s} | {'Client':>6s} | {'Invoice':>7s} | Description")
    click.echo("-" * 100)
    for txn in transactions:
        client_str = str(txn.client_id) if txn.client_id is not None else "-"
        invoice_str = str(txn.invoice_id) if txn.invoice_id is not None else "-"
        click.echo(
            f"{txn.id:4d} | {txn.transaction_number:14s} | {txn.date} | {txn.transaction_type.value:7s} | "
            f"{txn.amount:12,.2f} | {client_str:>6s} | {invoice_str:>7s} | {txn.description}"
        )


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int):
    """Show a transaction."""
    try:
        txn = TransactionService(ctx.obj["db"]).require_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Transaction {txn.transaction_number} (ID: {txn.id})")
    click.echo(f"Type:        {txn.transaction_type.value}")
    click.echo(f"Amount:      {txn.amount:,.2f}")
    click.echo(f"Date:        {txn.date}")
    click.echo(f"Method:      {txn.payment_method.value}")
    click.echo(f"Description: {txn.description}")
    if txn.client_id is not None:
        click.echo(f"Client:      {txn.client_id}")
    if txn.invoice_id is not None:
        click.echo(f"Invoice:     {txn.invoice_id}")
    if txn.reference_number:
        click.echo(f"Reference:   {txn.reference_number}")
    if txn.notes:
        click.echo(f"Notes:       {txn.notes}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a transaction and reverse its balance effect."""
    service = TransactionService(ctx.obj["db"])
    try:
        txn = service.require_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {txn.transaction_number}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {txn.transaction_number}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
