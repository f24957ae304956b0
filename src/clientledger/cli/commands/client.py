"""Client management commands."""

import click
from clientledger.cli.client_resolution import resolve_client_or_exit
from clientledger.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from clientledger.cli.error_handling import handle_domain_error
from clientledger.domain.client import ClientService
from clientledger.domain.entities import ClientType
from clientledger.domain.errors import DomainError
from clientledger.domain.history import BalanceHistoryLedger
from clientledger.domain.reconciliation import ReconciliationService

CLIENT_TYPES = [t.value for t in ClientType]


def _format_balance(balance) -> str:
    """Render a balance with a word for which side owes."""
    if balance > 0:
        return f"{balance:,.2f} (receivable)"
    if balance < 0:
        return f"{-balance:,.2f} (payable)"
    return f"{balance:,.2f}"


@click.group()
def client_group():
    """Manage clients and their balances."""
    pass


@client_group.command("create")
@click.argument("name", metavar="CLIENT_NAME")
@click.option("--type", "client_type", type=click.Choice(CLIENT_TYPES), default="customer", show_default=True)
@click.option("--phone", help="Phone number")
@click.option("--email", help="Email address")
@click.option("--address", help="Address")
@click.option("--notes", help="Notes")
@click.pass_context
def create_client(ctx, name: str, client_type: str, phone, email, address, notes):
    """Create a new client with a zero balance.

    Examples:
        clientledger client create "Acme Corp"
        clientledger client create "Paper Mill" --type supplier --phone 555-0100
    """
    service = ClientService(ctx.obj["db"])
    try:
        client_id = service.create_client(
            name=name,
            client_type=client_type,
            phone=phone,
            email=email,
            address=address,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {client_type} '{name}' (ID: {client_id})")


@client_group.command("list")
@click.option("--type", "client_type", type=click.Choice(CLIENT_TYPES), help="Only list this client type")
@click.option("--active-only", is_flag=True, help="Hide inactive clients")
@click.pass_context
def list_clients(ctx, client_type: str | None, active_only: bool):
    """List clients with their balances."""
    service = ClientService(ctx.obj["db"])

    clients = service.list_clients(active_only=active_only, client_type=client_type)
    if not clients:
        click.echo("No clients found.")
        return

    click.echo("\nClients:")
    click.echo("-" * 80)
    for c in clients:
        status = "" if c.is_active else " [inactive]"
        click.echo(
            f"ID: {c.id:3d} | {c.name:24s} | {c.client_type.value:8s} | "
            f"{_format_balance(c.balance):>24s}{status}"
        )


@client_group.command("show")
@click.argument("client", metavar="CLIENT")
@click.pass_context
def show_client(ctx, client: str):
    """Show a client's details.

    CLIENT can be a client name or ID.
    """
    db = ctx.obj["db"]
    service = ClientService(db)
    client_id = resolve_client_or_exit(ctx, service, client)
    c = service.require_client(client_id)

    click.echo(f"ID:       {c.id}")
    click.echo(f"Name:     {c.name}")
    click.echo(f"Type:     {c.client_type.value}")
    click.echo(f"Active:   {'yes' if c.is_active else 'no'}")
    click.echo(f"Balance:  {_format_balance(c.balance)}")
    for label, value in (("Phone", c.phone), ("Email", c.email), ("Address", c.address), ("Notes", c.notes)):
        if value:
            click.echo(f"{label + ':':9s} {value}")
    click.echo(f"Invoices: {db.get_client_invoice_count(client_id)}")
    click.echo(f"Transactions: {db.get_client_transaction_count(client_id)}")


@client_group.command("update")
@click.argument("client", metavar="CLIENT")
@click.option("--name", help="New name")
@click.option("--type", "client_type", type=click.Choice(CLIENT_TYPES), help="New client type")
@click.option("--phone", help="Phone number")
@click.option("--email", help="Email address")
@click.option("--address", help="Address")
@click.option("--notes", help="Notes")
@click.pass_context
def update_client(ctx, client: str, name, client_type, phone, email, address, notes):
    """Update a client's details.

    Only the options given are changed. The balance cannot be edited here.

    Examples:
        clientledger client update "Acme Corp" --name "Acme Corporation"
        clientledger client update 3 --email billing@example.com
    """
    service = ClientService(ctx.obj["db"])
    client_id = resolve_client_or_exit(ctx, service, client)
    try:
        service.update_client(
            client_id,
            name=name,
            client_type=client_type,
            phone=phone,
            email=email,
            address=address,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated client {client_id}")


@client_group.command("activate")
@click.argument("client", metavar="CLIENT")
@click.pass_context
def activate_client(ctx, client: str):
    """Allow balance changes for a client again."""
    service = ClientService(ctx.obj["db"])
    client_id = resolve_client_or_exit(ctx, service, client)
    service.set_active(client_id, True)
    click.echo(f"Activated client {client_id}")


@client_group.command("deactivate")
@click.argument("client", metavar="CLIENT")
@click.pass_context
def deactivate_client(ctx, client: str):
    """Block balance changes for a client.

    The balance and its history are kept. Invoices and transactions for the
    client are rejected until it is activated again.
    """
    service = ClientService(ctx.obj["db"])
    client_id = resolve_client_or_exit(ctx, service, client)
    service.set_active(client_id, False)
    click.echo(f"Deactivated client {client_id}")


@client_group.command("delete")
@click.argument("client", metavar="CLIENT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_client(ctx, client: str, yes: bool):
    """Delete a client and its balance history.

    CLIENT can be a client name or ID. The client can only be deleted once
    it has no invoices or transactions left.
    """
    service = ClientService(ctx.obj["db"])
    client_id = resolve_client_or_exit(ctx, service, client)
    client_obj = service.require_client(client_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete client '{client_obj.name}' (ID: {client_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_client(client_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted client '{client_obj.name}'")


@client_group.command("balance")
@click.argument("client", metavar="CLIENT")
@click.pass_context
def client_balance(ctx, client: str):
    """Show a client's current balance.

    Positive balances are owed by the client, negative ones are owed to it.
    """
    service = ClientService(ctx.obj["db"])
    client_id = resolve_client_or_exit(ctx, service, client)
    c = service.require_client(client_id)
    click.echo(f"{c.name}: {_format_balance(c.balance)}")


@client_group.command("history")
@click.argument("client", metavar="CLIENT")
@period_options
@click.pass_context
def client_history(ctx, client: str, start_date: str | None, end_date: str | None, **kwargs):
    """Show a client's balance history, oldest first.

    Examples:
        clientledger client history "Acme Corp"
        clientledger client history 3 --last-month
        clientledger client history 3 --start-date 2024-01-01 --end-date 2024-03-31
    """
    db = ctx.obj["db"]
    service = ClientService(db)
    client_id = resolve_client_or_exit(ctx, service, client)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(kwargs),
    )

    ledger = BalanceHistoryLedger(db)
    shown = 0
    for entry in ledger.list_for_client(client_id, start_date=start, end_date=end):
        if shown == 0:
            click.echo(f"\n{'Date':19s} | {'Cause':18s} | {'Amount':>12s} | {'Balance':>12s} | Description")
            click.echo("-" * 100)
        cause = entry.cause_type.value + (f" {entry.cause_id}" if entry.cause_id is not None else "")
        click.echo(
            f"{entry.date:%Y-%m-%d %H:%M:%S} | {cause:18s} | {entry.amount:>+12,.2f} | "
            f"{entry.new_balance:>12,.2f} | {entry.description or ''}"
        )
        shown += 1

    if shown == 0:
        click.echo("No balance history found.")


@client_group.command("reconcile")
@click.argument("client", metavar="CLIENT", required=False)
@click.option("--fix", is_flag=True, help="Move drifted balances onto the calculated value")
@click.option("--yes", is_flag=True, help="Do not ask before fixing")
@click.pass_context
def reconcile_clients(ctx, client: str | None, fix: bool, yes: bool):
    """Check stored balances against invoices and transactions.

    Without CLIENT every client is checked. Exits with status 1 when any
    drift is left uncorrected.

    Examples:
        clientledger client reconcile
        clientledger client reconcile "Acme Corp" --fix
    """
    db = ctx.obj["db"]
    service = ReconciliationService(db)

    try:
        if client is None:
            reports = service.reconcile_all()
        else:
            client_id = resolve_client_or_exit(ctx, ClientService(db), client)
            reports = [service.reconcile(client_id)]
    except DomainError as e:
        handle_domain_error(ctx, e)

    drifted = 0
    for report in reports:
        if report.is_consistent:
            click.echo(f"Client {report.client_id}: OK ({report.stored_balance:,.2f})")
            continue

        click.echo(
            f"Client {report.client_id}: stored {report.stored_balance:,.2f}, "
            f"calculated {report.calculated_balance:,.2f}, "
            f"history {report.history_total:,.2f}"
        )
        if not fix:
            drifted += 1
            continue
        if not yes and not click.confirm(
            f"Adjust client {report.client_id} by {report.difference:+,.2f}?"
        ):
            drifted += 1
            continue
        try:
            change = service.correct(report.client_id, confirm=True)
        except DomainError as e:
            handle_domain_error(ctx, e)
        if change is None:
            # stored and calculated agree, only the history is off
            click.echo("  history total disagrees; not adjustable", err=True)
            drifted += 1
        else:
            click.echo(f"  adjusted to {change.new_balance:,.2f}")

    if drifted:
        click.echo(f"{drifted} client{'s' if drifted != 1 else ''} out of balance.", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register client commands with main CLI."""
    cli.add_command(client_group, name="client")
