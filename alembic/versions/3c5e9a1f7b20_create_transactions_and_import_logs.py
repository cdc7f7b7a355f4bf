"""create transactions and import logs

Revision ID: 3c5e9a1f7b20
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3c5e9a1f7b20"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_number", sa.String(length=50), nullable=False),
        sa.Column("statement_number", sa.String(length=20), nullable=True),
        sa.Column("transaction_number", sa.String(length=50), nullable=True),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("value_date", sa.Date(), nullable=True),
        sa.Column("counterpart_account", sa.String(length=50), nullable=True),
        sa.Column("counterpart_name", sa.String(length=255), nullable=True),
        sa.Column("counterpart_address", sa.Text(), nullable=True),
        sa.Column("counterpart_postal_code", sa.String(length=20), nullable=True),
        sa.Column("counterpart_city", sa.String(length=100), nullable=True),
        sa.Column("transaction_type", sa.String(length=100), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="EUR"),
        sa.Column("bic", sa.String(length=11), nullable=True),
        sa.Column("country_code", sa.String(length=2), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("reference_number", sa.String(length=100), nullable=True),
        sa.Column("duplicate_key", sa.String(length=64), nullable=False),
        sa.Column("file_hash", sa.String(length=64), nullable=True),
        sa.Column("imported_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("duplicate_key", name="uq_transactions_duplicate_key"),
    )
    op.create_index("ix_transactions_account_date", "transactions", ["account_number", "booking_date"])
    op.create_index("ix_transactions_counterpart", "transactions", ["counterpart_account"])
    op.create_index("ix_transactions_amount", "transactions", ["amount"])
    op.create_index("ix_transactions_booking_date", "transactions", ["booking_date"])
    op.create_index("ix_transactions_file_hash", "transactions", ["file_hash"])

    op.create_table(
        "import_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("file_hash", sa.String(length=64), nullable=False, unique=True),
        sa.Column("total_records", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("imported_records", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("skipped_records", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_records", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("imported_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_import_logs_status", "import_logs", ["status"])
    op.create_index("ix_import_logs_imported_at", "import_logs", ["imported_at"])


def downgrade() -> None:
    op.drop_index("ix_import_logs_imported_at", table_name="import_logs")
    op.drop_index("ix_import_logs_status", table_name="import_logs")
    op.drop_table("import_logs")

    op.drop_index("ix_transactions_file_hash", table_name="transactions")
    op.drop_index("ix_transactions_booking_date", table_name="transactions")
    op.drop_index("ix_transactions_amount", table_name="transactions")
    op.drop_index("ix_transactions_counterpart", table_name="transactions")
    op.drop_index("ix_transactions_account_date", table_name="transactions")
    op.drop_table("transactions")
