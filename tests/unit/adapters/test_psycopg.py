# pyright: reportPrivateImportUsage = false, reportPrivateUsage = false
"""Unit tests for the psycopg adapter, without a PostgreSQL server."""

from unittest.mock import MagicMock, Mock, patch

import pytest

psycopg = pytest.importorskip("psycopg")

from sqlmigrate.adapters.psycopg import PsycopgConfig, PsycopgDataDictionary, PsycopgDriver  # noqa: E402
from sqlmigrate.exceptions import DatabaseConnectionError, StatementExecutionError  # noqa: E402

pytestmark = pytest.mark.xdist_group("adapters")


def _driver_with_cursor() -> "tuple[PsycopgDriver, MagicMock]":
    connection = MagicMock()
    cursor = MagicMock()
    connection.cursor.return_value = cursor
    return PsycopgDriver(connection=connection), cursor


class TestPsycopgConfig:
    """Tests for PsycopgConfig."""

    def test_create_connection_uses_autocommit(self) -> None:
        config = PsycopgConfig(connection_config={"conninfo": "postgresql://localhost/app", "connect_timeout": 5})

        with patch("sqlmigrate.adapters.psycopg.config.psycopg.connect") as connect:
            connection = config.create_connection()

        connect.assert_called_once_with("postgresql://localhost/app", autocommit=True, connect_timeout=5)
        assert connection is connect.return_value

    def test_create_connection_failure(self) -> None:
        config = PsycopgConfig(connection_config={"host": "nowhere"})

        with patch(
            "sqlmigrate.adapters.psycopg.config.psycopg.connect",
            side_effect=psycopg.OperationalError("could not translate host name"),
        ), pytest.raises(DatabaseConnectionError, match="could not translate host name"):
            config.create_connection()

    def test_create_driver(self) -> None:
        config = PsycopgConfig(connection_config={"conninfo": "dbname=app"})

        with patch("sqlmigrate.adapters.psycopg.config.psycopg.connect") as connect:
            driver = config.create_driver()

        assert isinstance(driver, PsycopgDriver)
        assert driver.connection is connect.return_value

    def test_migration_defaults(self) -> None:
        config = PsycopgConfig()
        assert config.script_location == "migrations"
        assert config.version_table == "migrations"
        assert config.migrations_enabled is True


class TestPsycopgDriver:
    """Tests for PsycopgDriver statement execution."""

    def test_backend_settings(self) -> None:
        assert PsycopgDriver.dialect == "postgres"
        assert PsycopgDriver.parameter_placeholder == "%s"
        assert PsycopgDriver.batch_column_type == "SERIAL"

    def test_execute_without_parameters(self) -> None:
        """Test statements without parameters are sent as-is, so a literal % is safe."""
        driver, cursor = _driver_with_cursor()

        driver.execute("UPDATE t SET pct = '5%'")

        cursor.execute.assert_called_once_with("UPDATE t SET pct = '5%'")
        cursor.close.assert_called_once_with()

    def test_execute_with_parameters(self) -> None:
        driver, cursor = _driver_with_cursor()

        driver.execute('INSERT INTO "migrations" (filename, batch) VALUES (%s, %s)', "a.up.sql", 1)

        cursor.execute.assert_called_once_with(
            'INSERT INTO "migrations" (filename, batch) VALUES (%s, %s)', ("a.up.sql", 1)
        )

    def test_select_value_or_none(self) -> None:
        driver, cursor = _driver_with_cursor()
        cursor.fetchall.return_value = [(3,)]

        assert driver.select_value_or_none('SELECT MAX(batch) FROM "migrations"') == 3

        cursor.fetchall.return_value = []
        assert driver.select_value_or_none('SELECT MAX(batch) FROM "migrations"') is None

    def test_statement_errors_are_wrapped(self) -> None:
        driver, cursor = _driver_with_cursor()
        cursor.execute.side_effect = psycopg.ProgrammingError('syntax error at or near "TABLEE"')

        with pytest.raises(StatementExecutionError, match="TABLEE"):
            driver.execute("CREATE TABLEE foo (id int)")

    def test_connection_errors_are_wrapped(self) -> None:
        driver, cursor = _driver_with_cursor()
        cursor.execute.side_effect = psycopg.OperationalError("the connection is closed")

        with pytest.raises(DatabaseConnectionError):
            driver.execute("SELECT 1")

    def test_close_is_idempotent(self) -> None:
        driver, _ = _driver_with_cursor()

        driver.close()
        driver.close()

        driver.connection.close.assert_called_once_with()
        assert driver.is_closed


class TestPsycopgDataDictionary:
    """Tests for PostgreSQL table introspection."""

    def test_get_tables_excludes_ledger(self) -> None:
        driver = Mock()
        driver.select.return_value = [("migrations",), ("posts",), ("users",)]

        tables = list(PsycopgDataDictionary().get_tables(driver, "", exclude=("migrations",)))

        assert tables == ["posts", "users"]
        assert driver.select.call_args.args[1] == "public"

    def test_get_create_for_table_rewrites_sequence_defaults(self) -> None:
        """Test sequence-backed integer columns render as serial types."""
        driver = Mock()
        driver.select.side_effect = [
            [
                ("id", "integer", None, "NO", "nextval('users_id_seq'::regclass)"),
                ("big_id", "bigint", None, "NO", "nextval('users_big_id_seq'::regclass)"),
                ("email", "character varying", 255, "NO", None),
                ("active", "boolean", None, "YES", "true"),
            ],
            [("id",)],
        ]

        create_sql = PsycopgDataDictionary().get_create_for_table(driver, "users")

        assert driver.select.call_args_list[0].args[1:] == ("public", "users")
        assert create_sql == (
            'CREATE TABLE "users" (\n'
            '    "id" serial NOT NULL,\n'
            '    "big_id" bigserial NOT NULL,\n'
            '    "email" character varying(255) NOT NULL,\n'
            '    "active" boolean DEFAULT true,\n'
            '    PRIMARY KEY ("id")\n'
            ")"
        )

    def test_get_create_for_missing_table(self) -> None:
        driver = Mock()
        driver.select.return_value = []

        with pytest.raises(StatementExecutionError, match="does not exist"):
            PsycopgDataDictionary().get_create_for_table(driver, "ghost")

    def test_get_drop_for_table(self) -> None:
        assert PsycopgDataDictionary().get_drop_for_table(Mock(), "users") == 'DROP TABLE IF EXISTS "users";'

    def test_statements_for_other_schema_are_qualified(self) -> None:
        """Test lookups and generated statements use the requested schema."""
        driver = Mock()
        driver.select.side_effect = [[("id", "integer", None, "NO", None)], []]
        data_dictionary = PsycopgDataDictionary()

        create_sql = data_dictionary.get_create_for_table(driver, "events", "audit")

        assert create_sql == 'CREATE TABLE "audit"."events" (\n    "id" integer NOT NULL\n)'
        assert [c.args[1:] for c in driver.select.call_args_list] == [("audit", "events"), ("audit", "events")]
        assert data_dictionary.get_drop_for_table(driver, "events", "audit") == 'DROP TABLE IF EXISTS "audit"."events";'
        assert data_dictionary.get_drop_for_table(driver, "events", "public") == 'DROP TABLE IF EXISTS "events";'
