# File: tests/test_migrations.py

import pytest
from sqlalchemy import inspect, select, text

from expense_tracker.core.errors import MigrationError
from expense_tracker.db.init_db import Migration, discover_migrations, run_migrations, schema_history
from expense_tracker.db.session import build_engine


@pytest.fixture()
def fresh_engine():
    engine = build_engine("sqlite://")
    yield engine
    engine.dispose()


def _create_table(name):
    def upgrade(connection):
        connection.execute(text(f"CREATE TABLE {name} (id INTEGER PRIMARY KEY)"))
    return upgrade


def test_discovers_scripts_in_version_order():
    migrations = discover_migrations()
    versions = [m.version for m in migrations]
    assert versions == sorted(versions)
    assert versions[:3] == [1, 2, 3]
    assert migrations[0].description == "Create users table."
    assert all(len(m.checksum) == 64 for m in migrations)


def test_fresh_database_gets_full_schema(fresh_engine):
    applied = run_migrations(fresh_engine)
    assert applied == [m.version for m in discover_migrations()]

    inspector = inspect(fresh_engine)
    assert {"users", "expenses", "schema_history"} <= set(inspector.get_table_names())
    expense_columns = {c["name"] for c in inspector.get_columns("expenses")}
    assert {"expense_id", "user_id", "description", "amount", "category",
            "entry_date", "created_at", "updated_at"} <= expense_columns

    with fresh_engine.connect() as conn:
        recorded = conn.execute(select(schema_history.c.version).order_by(schema_history.c.version)).scalars().all()
    assert recorded == applied


def test_second_run_is_a_no_op(fresh_engine):
    run_migrations(fresh_engine)
    assert run_migrations(fresh_engine) == []


def test_pending_scripts_are_applied_incrementally(fresh_engine):
    first = Migration(1, "first", "a" * 64, _create_table("first"))
    second = Migration(2, "second", "b" * 64, _create_table("second"))

    assert run_migrations(fresh_engine, [first]) == [1]
    assert run_migrations(fresh_engine, [second, first]) == [2]
    assert {"first", "second"} <= set(inspect(fresh_engine).get_table_names())


def test_changed_script_is_detected(fresh_engine):
    run_migrations(fresh_engine, [Migration(1, "first", "a" * 64, _create_table("first"))])

    with pytest.raises(MigrationError, match="Checksum mismatch"):
        run_migrations(fresh_engine, [Migration(1, "first", "c" * 64, _create_table("first"))])


def test_applied_script_missing_locally(fresh_engine):
    run_migrations(fresh_engine, [Migration(1, "first", "a" * 64, _create_table("first"))])

    with pytest.raises(MigrationError, match="not found locally"):
        run_migrations(fresh_engine, [])


def test_out_of_order_script_rejected(fresh_engine):
    run_migrations(fresh_engine, [Migration(2, "second", "b" * 64, _create_table("second"))])

    late = Migration(1, "first", "a" * 64, _create_table("first"))
    with pytest.raises(MigrationError, match="older than"):
        run_migrations(fresh_engine, [late, Migration(2, "second", "b" * 64, _create_table("second"))])


def test_failed_script_is_not_recorded(fresh_engine):
    def broken(connection):
        connection.execute(text("CREATE TABLE broken (id INTEGER PRIMARY KEY)"))
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        run_migrations(fresh_engine, [Migration(1, "broken", "d" * 64, broken)])

    with fresh_engine.connect() as conn:
        assert conn.execute(select(schema_history)).all() == []


def _write_versions_package(root, name, scripts):
    package = root / name
    package.mkdir()
    (package / "__init__.py").write_text("")
    for filename, body in scripts.items():
        (package / filename).write_text(body)
    return name


UPGRADE = "def upgrade(connection):\n    pass\n"


def test_duplicate_versions_rejected(tmp_path, monkeypatch):
    name = _write_versions_package(
        tmp_path, "dup_versions", {"v0001_a.py": UPGRADE, "v01_b.py": UPGRADE}
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(MigrationError, match="Duplicate migration version"):
        discover_migrations(package=name)


def test_script_without_upgrade_rejected(tmp_path, monkeypatch):
    name = _write_versions_package(
        tmp_path, "no_upgrade_versions", {"v0001_empty.py": '"""Nothing here."""\n'}
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(MigrationError, match="no upgrade"):
        discover_migrations(package=name)


def test_non_version_modules_are_ignored(tmp_path, monkeypatch):
    name = _write_versions_package(
        tmp_path, "mixed_versions", {"v0002_second.py": UPGRADE, "helpers.py": "X = 1\n"}
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    migrations = discover_migrations(package=name)
    assert [m.version for m in migrations] == [2]
    assert migrations[0].description == "second"
