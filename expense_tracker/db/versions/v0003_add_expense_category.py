"""Add category column to expenses."""

from sqlalchemy import text
from sqlalchemy.engine import Connection


def upgrade(connection: Connection) -> None:
    connection.execute(
        text("ALTER TABLE expenses ADD COLUMN category VARCHAR(50) NOT NULL DEFAULT 'general'")
    )
