"""Create expenses table."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
)
from sqlalchemy.engine import Connection


def upgrade(connection: Connection) -> None:
    metadata = MetaData()
    # Referenced only so the foreign key resolves; not created here.
    Table("users", metadata, Column("user_id", Integer, primary_key=True))
    expenses = Table(
        "expenses",
        metadata,
        Column("expense_id", Integer, primary_key=True, autoincrement=True),
        Column(
            "user_id",
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        Column("description", String(255), nullable=False),
        Column("amount", Numeric(12, 2), nullable=False),
        Column("entry_date", Date, nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=False),
        CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),
    )
    Index("ix_expenses_user_id_entry_date", expenses.c.user_id, expenses.c.entry_date)
    expenses.create(connection)
