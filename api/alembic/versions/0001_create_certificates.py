"""create certificates table

Revision ID: 0001_create_certificates
Revises:
Create Date: 2026-10-19

Certificates keyed by their client-generated id. The primary key is what
rejects a duplicate id.
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_create_certificates"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "certificates",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("course", sa.Text(), nullable=False),
        sa.Column("level", sa.Text(), nullable=False),
        sa.Column("signature", sa.Text(), nullable=False),
        sa.Column("registration_number", sa.String(), nullable=False),
        sa.Column("date", sa.String(), nullable=False),
        sa.Column("qr_code", sa.Text(), nullable=False),
        sa.Column("expiry_date", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_certificates_registration_number",
        "certificates",
        ["registration_number"],
    )


def downgrade() -> None:
    op.drop_index("ix_certificates_registration_number", table_name="certificates")
    op.drop_table("certificates")
