"""Integration tests for running migrations against a real SQLite database."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from sqlmigrate.adapters.sqlite import SqliteConfig, SqliteDriver
from sqlmigrate.exceptions import MigrationFileError
from sqlmigrate.migrations.base import MigrationResult, RanMigration
from sqlmigrate.migrations.commands import SyncMigrationCommands

pytestmark = [pytest.mark.xdist_group("sqlite"), pytest.mark.integration]


def write_migration(directory: Path, name: str, up: str, down: "str | None" = None) -> None:
    (directory / f"{name}.up.sql").write_text(up)
    if down is not None:
        (directory / f"{name}.down.sql").write_text(down)


@pytest.fixture
def sqlite_config(tmp_path: Path, migrations_dir: Path) -> SqliteConfig:
    return SqliteConfig(
        connection_config={"database": str(tmp_path / "test.db")},
        migration_config={"script_location": str(migrations_dir)},
    )


@pytest.fixture
def commands(sqlite_config: SqliteConfig) -> Generator["SyncMigrationCommands[SqliteConfig]", None, None]:
    with SyncMigrationCommands(sqlite_config) as migration_commands:
        migration_commands.ensure_migrations_table_exists()
        yield migration_commands


def ledger(commands: "SyncMigrationCommands[SqliteConfig]") -> "list[RanMigration]":
    return list(commands.tracker.get_ran_migrations(commands.driver))


def table_names(driver: SqliteDriver) -> "list[str]":
    rows = driver.select("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
    return [name for (name,) in rows]


def test_ensure_migrations_table_is_idempotent(commands: "SyncMigrationCommands[SqliteConfig]") -> None:
    commands.ensure_migrations_table_exists()
    commands.ensure_migrations_table_exists()

    columns = commands.driver.select('PRAGMA table_info("migrations")')
    assert [(column[1], column[2]) for column in columns] == [("filename", "VARCHAR(255)"), ("batch", "INTEGER")]


def test_run_up_applies_and_records(commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path) -> None:
    write_migration(migrations_dir, "0001_users", "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT);")
    write_migration(
        migrations_dir,
        "0002_posts",
        "CREATE TABLE posts (id INTEGER PRIMARY KEY);\nCREATE INDEX idx_posts_id ON posts (id);",
    )

    result = commands.run_up_migrations()

    assert result == MigrationResult(num_ran=2, batch_number=1)
    assert "users" in table_names(commands.driver)
    assert "posts" in table_names(commands.driver)
    assert ledger(commands) == [RanMigration("0002_posts.up.sql", 1), RanMigration("0001_users.up.sql", 1)]


def test_run_up_is_idempotent(commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path) -> None:
    """Test a second run with no new files runs nothing and leaves the ledger alone."""
    write_migration(migrations_dir, "0001_users", "CREATE TABLE users (id INTEGER);")
    commands.run_up_migrations()
    before = ledger(commands)

    result = commands.run_up_migrations()

    assert result.num_ran == 0
    assert ledger(commands) == before


def test_batch_numbers_increase(commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path) -> None:
    batches = []
    for index in range(1, 4):
        write_migration(migrations_dir, f"000{index}_t{index}", f"CREATE TABLE t{index} (id INTEGER);")
        previous = max((entry.batch for entry in ledger(commands)), default=0)
        result = commands.run_up_migrations()
        assert result.num_ran == 1
        assert result.batch_number > previous
        batches.append(result.batch_number)

    assert batches == [1, 2, 3]


def test_pending_set(commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path) -> None:
    """Test only files missing from the ledger run, in the next batch."""
    write_migration(migrations_dir, "a", "CREATE TABLE a (id INTEGER);")
    commands.run_up_migrations()
    write_migration(migrations_dir, "b", "CREATE TABLE b (id INTEGER);")

    result = commands.run_up_migrations()

    assert result == MigrationResult(num_ran=1, batch_number=2)
    assert ledger(commands) == [RanMigration("b.up.sql", 2), RanMigration("a.up.sql", 1)]


def test_revert_last_batch_only(commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path) -> None:
    write_migration(migrations_dir, "a", "CREATE TABLE a (id INTEGER);", "DROP TABLE a;")
    commands.run_up_migrations()
    write_migration(migrations_dir, "b", "CREATE TABLE b (id INTEGER);", "DROP TABLE b;")
    commands.run_up_migrations()

    result = commands.revert_last_ran_migrations()

    assert result == MigrationResult(num_ran=1, batch_number=2)
    assert ledger(commands) == [RanMigration("a.up.sql", 1)]
    assert "b" not in table_names(commands.driver)
    assert "a" in table_names(commands.driver)


def test_revert_all(commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path) -> None:
    write_migration(migrations_dir, "a", "CREATE TABLE a (id INTEGER);", "DROP TABLE a;")
    commands.run_up_migrations()
    write_migration(migrations_dir, "b", "CREATE TABLE b (id INTEGER REFERENCES a (id));", "DROP TABLE b;")
    commands.run_up_migrations()

    result = commands.revert_all_migrations()

    assert result == MigrationResult(num_ran=2, batch_number=0)
    assert ledger(commands) == []
    assert table_names(commands.driver) == ["migrations"]


def test_revert_then_run_again(commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path) -> None:
    write_migration(migrations_dir, "a", "CREATE TABLE a (id INTEGER);", "DROP TABLE a;")
    commands.run_up_migrations()
    commands.revert_last_ran_migrations()

    result = commands.run_up_migrations()

    assert result == MigrationResult(num_ran=1, batch_number=1)
    assert ledger(commands) == [RanMigration("a.up.sql", 1)]


def test_missing_down_file_is_left_recorded(
    commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    write_migration(migrations_dir, "a", "CREATE TABLE a (id INTEGER);")
    commands.run_up_migrations()

    with caplog.at_level(logging.WARNING, logger="sqlmigrate"):
        last = commands.revert_last_ran_migrations()
        everything = commands.revert_all_migrations()

    assert last == MigrationResult(num_ran=0, batch_number=1)
    assert everything == MigrationResult(num_ran=0, batch_number=0)
    assert ledger(commands) == [RanMigration("a.up.sql", 1)]
    assert "a.down.sql" in caplog.text


def test_empty_up_file_is_never_recorded(commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path) -> None:
    write_migration(migrations_dir, "0001_empty", "")

    for _ in range(3):
        assert commands.run_up_migrations().num_ran == 0

    assert ledger(commands) == []
    assert commands.get_migration_status().pending == ["0001_empty.up.sql"]


def test_failed_statement_keeps_earlier_statements(
    commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Test a broken migration leaves its first statement applied, goes unrecorded and does not stop the run."""
    write_migration(
        migrations_dir, "0001_broken", "CREATE TABLE first (id INTEGER);\nCREATE TABLEE second (id INTEGER);"
    )
    write_migration(migrations_dir, "0002_ok", "CREATE TABLE ok (id INTEGER);")

    with caplog.at_level(logging.ERROR, logger="sqlmigrate"):
        result = commands.run_up_migrations()

    assert result == MigrationResult(num_ran=1, batch_number=1)
    assert "first" in table_names(commands.driver)
    assert "second" not in table_names(commands.driver)
    assert "ok" in table_names(commands.driver)
    assert ledger(commands) == [RanMigration("0002_ok.up.sql", 1)]
    assert "Error running migration '0001_broken.up.sql'" in caplog.text


def test_failed_down_migration_stays_recorded(
    commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path
) -> None:
    write_migration(migrations_dir, "a", "CREATE TABLE a (id INTEGER);", "DROP TABLE does_not_exist;")
    commands.run_up_migrations()

    result = commands.revert_last_ran_migrations()

    assert result == MigrationResult(num_ran=0, batch_number=1)
    assert ledger(commands) == [RanMigration("a.up.sql", 1)]


def test_missing_directory_raises(sqlite_config: SqliteConfig, tmp_path: Path) -> None:
    sqlite_config.migration_config["script_location"] = str(tmp_path / "missing")

    with SyncMigrationCommands(sqlite_config) as commands:
        commands.ensure_migrations_table_exists()
        with pytest.raises(MigrationFileError):
            commands.run_up_migrations()


def test_ledger_persists_across_connections(sqlite_config: SqliteConfig, migrations_dir: Path) -> None:
    write_migration(migrations_dir, "a", "CREATE TABLE a (id INTEGER);")
    with SyncMigrationCommands(sqlite_config) as first:
        first.ensure_migrations_table_exists()
        assert first.run_up_migrations().num_ran == 1

    with SyncMigrationCommands(sqlite_config) as second:
        assert second.run_up_migrations() == MigrationResult(num_ran=0, batch_number=2)
        assert second.get_migration_status().is_up_to_date


def test_custom_version_table(tmp_path: Path, migrations_dir: Path) -> None:
    config = SqliteConfig(
        connection_config={"database": str(tmp_path / "custom.db")},
        migration_config={"script_location": str(migrations_dir), "version_table_name": "schema_history"},
    )
    write_migration(migrations_dir, "a", "CREATE TABLE a (id INTEGER);")

    with SyncMigrationCommands(config) as commands:
        commands.ensure_migrations_table_exists()
        commands.run_up_migrations()
        assert "schema_history" in table_names(commands.driver)
        assert list(commands.get_all_tables_for_database("main")) == ["a"]


def test_close_driver_is_idempotent(sqlite_config: SqliteConfig) -> None:
    commands = SyncMigrationCommands(sqlite_config)
    commands.close_driver()
    commands.close_driver()
    assert commands.driver.is_closed


class TestIntrospection:
    """Tests for table listing and schema dumps."""

    def test_tables_exclude_ledger(self, commands: "SyncMigrationCommands[SqliteConfig]", migrations_dir: Path) -> None:
        write_migration(migrations_dir, "a", "CREATE TABLE users (id INTEGER); CREATE TABLE posts (id INTEGER);")
        commands.run_up_migrations()

        tables = commands.get_all_tables_for_database("main")

        assert list(tables) == ["posts", "users"]

    def test_table_listing_requeries(self, commands: "SyncMigrationCommands[SqliteConfig]") -> None:
        commands.driver.execute("CREATE TABLE first (id INTEGER)")
        assert list(commands.get_all_tables_for_database("main")) == ["first"]

        commands.driver.execute("CREATE TABLE second (id INTEGER)")
        assert list(commands.get_all_tables_for_database("main")) == ["first", "second"]

    def test_create_and_drop_statements(self, commands: "SyncMigrationCommands[SqliteConfig]") -> None:
        commands.driver.execute("CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)")

        assert commands.get_create_for_table("users") == (
            "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)"
        )
        assert commands.get_drop_for_table("users") == 'DROP TABLE IF EXISTS "users";'
        assert "sqlite_sequence" not in list(commands.get_all_tables_for_database("main"))

    def test_dump_schema_round_trip(self, commands: "SyncMigrationCommands[SqliteConfig]") -> None:
        """Test a dump can be replayed to recreate the tables."""
        commands.driver.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
        commands.driver.execute("CREATE TABLE posts (id INTEGER PRIMARY KEY, user_id INTEGER)")

        dump = commands.dump_schema("main")

        assert dump == (
            'DROP TABLE IF EXISTS "posts";\nCREATE TABLE posts (id INTEGER PRIMARY KEY, user_id INTEGER);\n\n'
            'DROP TABLE IF EXISTS "users";\nCREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT);\n'
        )
        commands.driver.connection.executescript(dump)
        assert list(commands.get_all_tables_for_database("main")) == ["posts", "users"]

    def test_attached_database_is_introspected_on_its_own(
        self, commands: "SyncMigrationCommands[SqliteConfig]", tmp_path: Path
    ) -> None:
        """Test listing, create text and dumps all read from the named schema."""
        commands.driver.execute("ATTACH DATABASE ? AS aux", str(tmp_path / "aux.db"))
        commands.driver.execute("CREATE TABLE aux.only_in_aux (id INTEGER)")
        commands.driver.execute("CREATE TABLE aux.shared (aux_col INTEGER)")
        commands.driver.execute("CREATE TABLE main.shared (main_col INTEGER)")

        assert list(commands.get_all_tables_for_database("aux")) == ["only_in_aux", "shared"]
        assert "aux_col" in commands.get_create_for_table("shared", "aux")
        assert "main_col" in commands.get_create_for_table("shared")
        assert commands.get_drop_for_table("shared", "aux") == 'DROP TABLE IF EXISTS "aux"."shared";'

        dump = commands.dump_schema("aux")

        assert dump.count("DROP TABLE IF EXISTS") == 2
        assert 'DROP TABLE IF EXISTS "aux"."only_in_aux";' in dump
        assert "aux_col" in dump
        assert "main_col" not in dump
