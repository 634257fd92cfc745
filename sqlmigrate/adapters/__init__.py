"""Database backends for SQLMigrate."""
