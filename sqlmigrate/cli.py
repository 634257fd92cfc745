import sys
import uuid
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, TypeVar, cast

import rich_click as click
from rich import get_console
from rich.table import Table

if TYPE_CHECKING:
    from click import Group

    from sqlmigrate.config import SyncDatabaseConfig
    from sqlmigrate.migrations.commands import SyncMigrationCommands

__all__ = ("add_migration_commands", "get_sqlmigrate_group", "run_cli")

T = TypeVar("T")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("rich", "simple", "structured")


def get_sqlmigrate_group() -> "Group":
    """Get the SQLMigrate CLI group.

    Returns:
        The SQLMigrate CLI group.
    """

    @click.group(name="sqlmigrate")
    @click.option(
        "--config",
        help="Dotted path to the database config(s) (e.g. 'myapp.settings.migration_config')",
        required=True,
        type=str,
        envvar="SQLMIGRATE_CONFIG",
    )
    @click.option(
        "--log-level",
        help="Logging level for SQLMigrate loggers.",
        type=click.Choice(LOG_LEVELS, case_sensitive=False),
        default="WARNING",
        show_default=True,
    )
    @click.option(
        "--log-format",
        help="How log records are rendered on stderr.",
        type=click.Choice(LOG_FORMATS),
        default="rich",
        show_default=True,
    )
    @click.pass_context
    def sqlmigrate_group(ctx: "click.Context", config: str, log_level: str, log_format: str) -> None:
        """SQLMigrate CLI commands."""
        from sqlmigrate.utils import module_loader
        from sqlmigrate.utils.logging import configure_logging, set_correlation_id

        console = get_console()
        configure_logging(level=log_level, format_style=log_format)
        set_correlation_id(uuid.uuid4().hex)
        ctx.ensure_object(dict)
        try:
            config_instance = module_loader.import_string(config)
        except ImportError as e:
            console.print(f"[red]Error loading config: {e}[/]")
            ctx.exit(1)
        if isinstance(config_instance, Sequence):
            ctx.obj["configs"] = list(config_instance)
        else:
            ctx.obj["configs"] = [config_instance]
        if not ctx.obj["configs"]:
            console.print(f"[red]No database configs found at {config}[/]")
            ctx.exit(1)

    return sqlmigrate_group


def add_migration_commands(database_group: Optional["Group"] = None) -> "Group":  # noqa: C901
    """Add migration commands to the database group.

    Args:
        database_group: The database group to add the commands to.

    Returns:
        The database group with the migration commands added.
    """
    from sqlmigrate.exceptions import SQLMigrateError

    console = get_console()

    if database_group is None:
        database_group = get_sqlmigrate_group()

    bind_key_option = click.option(
        "--bind-key", help="Specify which database config to use by bind key", type=str, default=None
    )
    no_prompt_option = click.option(
        "--no-prompt",
        help="Do not prompt for confirmation before executing the command.",
        type=bool,
        default=False,
        required=False,
        show_default=True,
        is_flag=True,
    )

    def get_config_by_bind_key(ctx: "click.Context", bind_key: Optional[str]) -> "SyncDatabaseConfig[Any, Any]":
        """Get the database config for the specified bind key.

        Args:
            ctx: The click context.
            bind_key: The bind key to get the config for.

        Returns:
            The database config for the specified bind key.
        """
        configs = ctx.obj["configs"]
        if bind_key is None:
            return cast("SyncDatabaseConfig[Any, Any]", configs[0])

        for config in configs:
            if config.bind_key == bind_key:
                return cast("SyncDatabaseConfig[Any, Any]", config)

        console.print(f"[red]No config found for bind key: {bind_key}[/]")
        sys.exit(1)

    def run_with_commands(bind_key: Optional[str], action: "Callable[[SyncMigrationCommands[Any]], T]") -> T:
        """Open migration commands for the selected config, run ``action`` and close the connection.

        Configuration, connection, file and ledger errors are reported and end
        the process with exit code 1.
        """
        from sqlmigrate.migrations.commands import SyncMigrationCommands

        ctx = click.get_current_context()
        config = get_config_by_bind_key(ctx, bind_key)
        if not config.migrations_enabled:
            console.print(f"[red]Migrations are disabled for {type(config).__name__}[/]")
            sys.exit(1)
        try:
            with SyncMigrationCommands(config) as migration_commands:
                migration_commands.ensure_migrations_table_exists()
                return action(migration_commands)
        except SQLMigrateError as e:
            console.print(f"[red]{type(e).__name__}: {e}[/]")
            sys.exit(1)

    @database_group.command(name="up", help="Run all pending migrations.")
    @bind_key_option
    def run_up(bind_key: Optional[str]) -> None:  # pyright: ignore[reportUnusedFunction]
        """Apply pending migrations in a new batch."""
        console.rule("[yellow]Running pending migrations[/]", align="left")
        result = run_with_commands(bind_key, lambda commands: commands.run_up_migrations())
        if result.num_ran == 0:
            console.print("[green]Nothing to migrate[/]")
            return
        console.print(f"[green]Ran {result.num_ran} migration(s) in batch {result.batch_number}[/]")

    @database_group.command(name="down", help="Revert the last batch of migrations.")
    @bind_key_option
    @no_prompt_option
    def run_down(bind_key: Optional[str], no_prompt: bool) -> None:  # pyright: ignore[reportUnusedFunction]
        """Revert the most recent batch."""
        from rich.prompt import Confirm

        console.rule("[yellow]Reverting last batch[/]", align="left")
        input_confirmed = True if no_prompt else Confirm.ask("Are you sure you want to revert the last batch?")
        if not input_confirmed:
            return
        result = run_with_commands(bind_key, lambda commands: commands.revert_last_ran_migrations())
        console.print(f"[green]Reverted {result.num_ran} migration(s) from batch {result.batch_number}[/]")

    @database_group.command(name="reset", help="Revert every migration that has run.")
    @bind_key_option
    @no_prompt_option
    def run_reset(bind_key: Optional[str], no_prompt: bool) -> None:  # pyright: ignore[reportUnusedFunction]
        """Revert all batches."""
        from rich.prompt import Confirm

        console.rule("[yellow]Reverting all migrations[/]", align="left")
        input_confirmed = True if no_prompt else Confirm.ask("Are you sure you want to revert all migrations?")
        if not input_confirmed:
            return
        result = run_with_commands(bind_key, lambda commands: commands.revert_all_migrations())
        console.print(f"[green]Reverted {result.num_ran} migration(s)[/]")

    @database_group.command(name="refresh", help="Revert every migration, then run them all again.")
    @bind_key_option
    @no_prompt_option
    def run_refresh(bind_key: Optional[str], no_prompt: bool) -> None:  # pyright: ignore[reportUnusedFunction]
        """Revert all batches and reapply."""
        from rich.prompt import Confirm

        console.rule("[yellow]Refreshing migrations[/]", align="left")
        input_confirmed = True if no_prompt else Confirm.ask("Are you sure you want to rebuild the schema?")
        if not input_confirmed:
            return
        reverted, applied = run_with_commands(bind_key, lambda commands: commands.refresh_migrations())
        console.print(f"[green]Reverted {reverted.num_ran} migration(s)[/]")
        console.print(f"[green]Ran {applied.num_ran} migration(s) in batch {applied.batch_number}[/]")

    @database_group.command(name="status", help="Show ran and pending migrations.")
    @bind_key_option
    def show_status(bind_key: Optional[str]) -> None:  # pyright: ignore[reportUnusedFunction]
        """Show the ledger and the pending migrations."""
        console.rule("[yellow]Migration status[/]", align="left")
        status = run_with_commands(bind_key, lambda commands: commands.get_migration_status())

        table = Table(title="Migrations")
        table.add_column("Migration", style="cyan")
        table.add_column("Batch", justify="right")
        table.add_column("Status")
        for entry in sorted(status.ran, key=lambda e: (e.batch, e.filename)):
            table.add_row(entry.filename, str(entry.batch), "[green]ran[/]")
        for filename in status.pending:
            table.add_row(filename, "", "[yellow]pending[/]")
        console.print(table)

        if status.is_up_to_date:
            console.print(f"[green]Up to date at batch {status.last_batch}[/]")
        else:
            console.print(f"[yellow]{len(status.pending)} pending migration(s)[/]")

    @database_group.command(name="create", help="Create an empty up/down migration pair.")
    @bind_key_option
    @click.argument("name", type=str)
    def create_migration(bind_key: Optional[str], name: str) -> None:  # pyright: ignore[reportUnusedFunction]
        """Create a new timestamped migration."""
        from sqlmigrate.migrations.utils import create_migration_file

        ctx = click.get_current_context()
        config = get_config_by_bind_key(ctx, bind_key)
        try:
            up_path, down_path = create_migration_file(config.script_location, name)
        except SQLMigrateError as e:
            console.print(f"[red]{type(e).__name__}: {e}[/]")
            sys.exit(1)
        console.print(f"[green]Created migration:[/] {up_path}")
        console.print(f"[green]Created migration:[/] {down_path}")

    @database_group.command(name="dump", help="Write a drop/create snapshot of every table.")
    @bind_key_option
    @click.option("--database", help="Database or schema to dump. Defaults to the backend's main schema.", default="")
    @click.option(
        "--output",
        help="File to write the snapshot to. Prints to stdout when omitted.",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
    )
    def dump_schema(bind_key: Optional[str], database: str, output: Optional[Path]) -> None:  # pyright: ignore[reportUnusedFunction]
        """Dump the schema as SQL."""
        snapshot = run_with_commands(bind_key, lambda commands: commands.dump_schema(database))
        if output is None:
            click.echo(snapshot, nl=False)
            return
        try:
            output.write_text(snapshot, encoding="utf-8")
        except OSError as e:
            console.print(f"[red]Could not write {output}: {e}[/]")
            sys.exit(1)
        console.print(f"[green]Schema written to[/] {output}")

    return database_group


def run_cli() -> None:  # pragma: no cover
    """SQLMigrate CLI entry point."""
    add_migration_commands()()
