"""users and transactions

Revision ID: 202610190900
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "202610190900"
down_revision = None
branch_labels = None
depends_on = None

CATEGORIES = (
    "FOOD",
    "TRANSPORTATION",
    "ENTERTAINMENT",
    "UTILITIES",
    "SHOPPING",
    "HEALTHCARE",
    "TRAVEL",
    "EDUCATION",
    "OTHER",
)


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("budget", sa.Float(), nullable=False, server_default="0"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    category_check = "category IN ({})".format(
        ", ".join(f"'{value}'" for value in CATEGORIES)
    )
    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("created_time", sa.DateTime()),
        sa.Column("created_date", sa.Date()),
        sa.CheckConstraint(category_check, name="ck_transactions_category"),
    )
    op.create_index(
        "ix_transactions_user_created", "transactions", ["user_id", "created_time"]
    )


def downgrade():
    op.drop_index("ix_transactions_user_created", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("users")
