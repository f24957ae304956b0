"""Main CLI entry point."""

import click
from clientledger.database.factories import create_sqlite_database
from clientledger.logger_config import set_log_level

# Import and register all commands at module level
from clientledger.cli.commands import client, invoice, transaction


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CLIENTLEDGER_DB_PATH environment variable)",
    envvar="CLIENTLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    help="Log level such as DEBUG or INFO (overrides CLIENTLEDGER_LOG_LEVEL)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Clientledger - client balances kept in step with invoices and payments.

    Every invoice and transaction moves its client's balance, and every move
    is written to an append-only balance history.
    """
    ctx.ensure_object(dict)

    if log_level:
        try:
            set_log_level(log_level)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--log-level")

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None and "db" not in ctx.obj:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
client.register_commands(cli)
invoice.register_commands(cli)
transaction.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
