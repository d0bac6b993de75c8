"""Tests for the connection helpers, transactions and migrations."""

import sqlite3

import pytest

from lawn_care_api.app.core.db import MIGRATIONS, get_connection, init_db, unit_of_work


def _usernames():
    conn = get_connection()
    try:
        return [row["username"] for row in conn.execute("SELECT username FROM users ORDER BY user_id")]
    finally:
        conn.close()


def _insert_user(cursor, username):
    cursor.execute(
        "INSERT INTO users (username, hashed_password) VALUES (?, ?)",
        (username, "salt$hash"),
    )


def test_migrations_are_recorded(db_path):
    conn = get_connection()
    try:
        versions = [row["version"] for row in conn.execute("SELECT version FROM migrations ORDER BY version")]
        species = conn.execute("SELECT COUNT(*) AS n FROM GrassSpecies").fetchone()["n"]
    finally:
        conn.close()
    assert versions == [version for version, _ in MIGRATIONS]
    assert species == 10


def test_init_db_is_idempotent(db_path):
    init_db()
    conn = get_connection()
    try:
        options = conn.execute("SELECT COUNT(*) AS n FROM GrassSpeciesPlanTypes").fetchone()["n"]
    finally:
        conn.close()
    assert options == 27


def test_unit_of_work_commits(db_path):
    with unit_of_work() as uow:
        _insert_user(uow.cursor, "committed")
        uow.commit()
    assert _usernames() == ["committed"]


def test_unit_of_work_rolls_back_without_commit(db_path):
    with unit_of_work() as uow:
        _insert_user(uow.cursor, "forgotten")
    assert _usernames() == []


def test_unit_of_work_rolls_back_on_error(db_path):
    with pytest.raises(RuntimeError):
        with unit_of_work() as uow:
            _insert_user(uow.cursor, "first")
            _insert_user(uow.cursor, "second")
            raise RuntimeError("boom")
    assert _usernames() == []


def test_foreign_keys_are_enforced(db_path):
    conn = get_connection()
    try:
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO UserPlans (user_id, grass_species_id, plan_type) VALUES (?, ?, ?)",
                (999, 1, "new_lawn"),
            )
    finally:
        conn.close()
