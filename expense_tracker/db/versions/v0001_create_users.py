"""Create users table."""

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table
from sqlalchemy.engine import Connection


def upgrade(connection: Connection) -> None:
    metadata = MetaData()
    users = Table(
        "users",
        metadata,
        Column("user_id", Integer, primary_key=True, autoincrement=True),
        Column("email", String(255), nullable=False, unique=True),
        Column("password_hash", String(255), nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
    )
    users.create(connection)
