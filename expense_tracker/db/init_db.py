"""
Database initialization helpers.

The schema is owned by versioned migration scripts living in
``expense_tracker.db.versions``. Each script is a module named
``v<NNNN>_<slug>.py`` exposing ``upgrade(connection)``. Applied versions are
recorded in the ``schema_history`` table together with a checksum of the
script source, so an edited script that already ran is caught at start-up.
"""

import hashlib
import importlib
import pkgutil
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

import structlog
from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, insert, select
from sqlalchemy.engine import Connection, Engine

from expense_tracker.core.errors import MigrationError
from expense_tracker.models.base import utcnow

logger = structlog.get_logger(__name__)

VERSIONS_PACKAGE = "expense_tracker.db.versions"
_SCRIPT_NAME = re.compile(r"^v(?P<version>\d+)_(?P<slug>\w+)$")

history_metadata = MetaData()

schema_history = Table(
    "schema_history",
    history_metadata,
    Column("version", Integer, primary_key=True, autoincrement=False),
    Column("description", String(200), nullable=False),
    Column("checksum", String(64), nullable=False),
    Column("installed_on", DateTime(timezone=True), nullable=False),
)


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    checksum: str
    upgrade: Callable[[Connection], None]


def discover_migrations(package: str = VERSIONS_PACKAGE) -> list[Migration]:
    """
    Load every migration script in ``package``, ordered by version.
    """
    pkg = importlib.import_module(package)
    migrations: dict[int, Migration] = {}

    for module_info in pkgutil.iter_modules(pkg.__path__):
        match = _SCRIPT_NAME.match(module_info.name)
        if match is None:
            continue

        module = importlib.import_module(f"{package}.{module_info.name}")
        version = int(match.group("version"))
        if version in migrations:
            raise MigrationError(f"Duplicate migration version {version} in {package}")

        upgrade = getattr(module, "upgrade", None)
        if not callable(upgrade):
            raise MigrationError(f"Migration {module_info.name} has no upgrade() function")

        doc = (module.__doc__ or "").strip()
        description = doc.splitlines()[0] if doc else match.group("slug").replace("_", " ")
        checksum = hashlib.sha256(Path(module.__file__).read_bytes()).hexdigest()

        migrations[version] = Migration(version, description, checksum, upgrade)

    return [migrations[v] for v in sorted(migrations)]


def _applied_checksums(engine: Engine) -> dict[int, str]:
    with engine.connect() as conn:
        rows = conn.execute(select(schema_history.c.version, schema_history.c.checksum))
        return {row.version: row.checksum for row in rows}


def run_migrations(
    engine: Engine,
    migrations: Optional[Iterable[Migration]] = None,
) -> list[int]:
    """
    Apply pending migrations in version order and return the versions applied.

    Each script runs in its own transaction together with its history row.
    Raises MigrationError when an applied script changed on disk, when an
    applied version is missing locally, or when a pending script is older
    than the latest applied one.
    """
    if migrations is None:
        migrations = discover_migrations()
    migrations = sorted(migrations, key=lambda m: m.version)

    history_metadata.create_all(bind=engine, tables=[schema_history])
    applied = _applied_checksums(engine)

    known = {m.version for m in migrations}
    missing = sorted(set(applied) - known)
    if missing:
        raise MigrationError(f"Applied migrations not found locally: {missing}")

    latest_applied = max(applied, default=0)
    newly_applied: list[int] = []

    for migration in migrations:
        if migration.version in applied:
            if applied[migration.version] != migration.checksum:
                raise MigrationError(
                    f"Checksum mismatch for migration {migration.version} "
                    f"({migration.description})"
                )
            continue

        if migration.version < latest_applied:
            raise MigrationError(
                f"Pending migration {migration.version} is older than "
                f"applied version {latest_applied}"
            )

        with engine.begin() as conn:
            migration.upgrade(conn)
            conn.execute(
                insert(schema_history).values(
                    version=migration.version,
                    description=migration.description,
                    checksum=migration.checksum,
                    installed_on=utcnow(),
                )
            )
        newly_applied.append(migration.version)
        logger.info(
            "migration_applied",
            version=migration.version,
            description=migration.description,
        )

    if not newly_applied:
        logger.info("schema_up_to_date", version=max(known, default=0))
    return newly_applied


def init_db(engine: Optional[Engine] = None) -> list[int]:
    """
    Bring the database schema up to date.
    """
    if engine is None:
        from expense_tracker.db.session import engine
    return run_migrations(engine)
