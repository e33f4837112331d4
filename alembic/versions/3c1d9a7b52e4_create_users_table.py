"""create users table

Revision ID: 3c1d9a7b52e4
Revises: 
Create Date: 2026-10-19 09:12:41.503318

"""
from typing import Sequence, Union

from alembic import op
from userapi.database import Base
from userapi.models.user import User  # noqa: F401


# revision identifiers, used by Alembic.
revision: str = '3c1d9a7b52e4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema by creating the users table."""
    bind = op.get_bind()
    Base.metadata.create_all(bind)


def downgrade() -> None:
    """Downgrade schema by dropping the users table."""
    bind = op.get_bind()
    Base.metadata.drop_all(bind)
