import sqlite3

import pytest

from church_site.adapters.sqlite.migrator import DEFAULT_MIGRATIONS_DIR, SQLiteMigrator

TABLES = {"users", "admin_users", "posts", "email_subscribers", "newsletter_receipts"}


@pytest.fixture
def temp_db_path(tmp_path):
    return str(tmp_path / "test_db.sqlite")


def table_names(db_path):
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    finally:
        conn.close()
    return {r[0] for r in rows}


def test_migrator_applies_initial(temp_db_path):
    applied = SQLiteMigrator(temp_db_path).run_migrations()

    assert applied == ["001_initial.sql"]
    assert TABLES | {"_migrations"} <= table_names(temp_db_path)


def test_migrator_is_idempotent(temp_db_path):
    migrator = SQLiteMigrator(temp_db_path, DEFAULT_MIGRATIONS_DIR)

    migrator.run_migrations()
    assert migrator.run_migrations() == []


def test_down_section_not_applied(temp_db_path):
    """Tables dropped in the Down section still exist after migrating."""
    SQLiteMigrator(temp_db_path).run_migrations()

    assert "posts" in table_names(temp_db_path)


def test_posts_state_check_constraint(temp_db_path):
    """The database refuses a draft that carries a publication time."""
    SQLiteMigrator(temp_db_path).run_migrations()
    conn = sqlite3.connect(temp_db_path)
    try:
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO posts (id, title, content, type, status, published_at, "
                "created_at, updated_at) VALUES ('p1', 't', 'c', 'general', 'draft', "
                "'2025-01-01T00:00:00+00:00', '2025-01-01', '2025-01-01')"
            )
    finally:
        conn.close()


def test_broken_migration_raises(tmp_path, temp_db_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_bad.sql").write_text("CREATE TABLE oops (;")

    with pytest.raises(RuntimeError, match="001_bad.sql"):
        SQLiteMigrator(temp_db_path, str(migrations)).run_migrations()
