"""
SQLite migrator tests.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from blogcms.adapters.sqlite import SQLiteMigrator


def _tables(db_path: Path) -> set[str]:
    with sqlite3.connect(db_path) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type IN ('table', 'index')").fetchall()
    return {row[0] for row in rows}


class TestMigrator:
    def test_creates_schema_and_records_migration(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "blog.db"
        applied = SQLiteMigrator(str(db_path)).run_migrations()

        assert applied == ["0001_documents.sql"]
        names = _tables(db_path)
        assert {"documents", "_migrations", "idx_documents_slug"} <= names

    def test_second_run_is_a_no_op(self, tmp_path: Path) -> None:
        db_path = str(tmp_path / "blog.db")
        SQLiteMigrator(db_path).run_migrations()
        assert SQLiteMigrator(db_path).run_migrations() == []

    def test_down_section_is_not_executed(self, tmp_path: Path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "0001_a.sql").write_text(
            "-- Up\nCREATE TABLE a (id TEXT);\n-- Down\nDROP TABLE a;\n", encoding="utf-8"
        )
        db_path = tmp_path / "blog.db"
        SQLiteMigrator(str(db_path), migrations).run_migrations()
        assert "a" in _tables(db_path)

    def test_applies_new_files_in_order(self, tmp_path: Path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "0002_b.sql").write_text("CREATE TABLE b (id TEXT);", encoding="utf-8")
        (migrations / "0001_a.sql").write_text("CREATE TABLE a (id TEXT);", encoding="utf-8")
        (migrations / "notes.txt").write_text("ignored", encoding="utf-8")
        db_path = str(tmp_path / "blog.db")

        assert SQLiteMigrator(db_path, migrations).run_migrations() == ["0001_a.sql", "0002_b.sql"]
        (migrations / "0003_c.sql").write_text("CREATE TABLE c (id TEXT);", encoding="utf-8")
        assert SQLiteMigrator(db_path, migrations).run_migrations() == ["0003_c.sql"]

    def test_broken_migration_raises(self, tmp_path: Path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "0001_broken.sql").write_text("CREATE TABLE (;", encoding="utf-8")

        with pytest.raises(RuntimeError, match="Migration 0001_broken.sql failed"):
            SQLiteMigrator(str(tmp_path / "blog.db"), migrations).run_migrations()
