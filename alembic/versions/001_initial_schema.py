"""initial schema: catalog, RFQ, quotes, orders, membership, chat, FAQ, cart

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

For databases already created by startup create_all: `alembic stamp 001_initial`.
For new databases: `alembic upgrade head`.
"""
from typing import Sequence, Union

from alembic import op

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create every table from the ORM metadata (checkfirst, so idempotent)."""
    from wholesale.models import Base

    Base.metadata.create_all(bind=op.get_bind(), checkfirst=True)


def downgrade() -> None:
    from wholesale.models import Base

    Base.metadata.drop_all(bind=op.get_bind())
