"""add_status_to_loans

Revision ID: 8d4b6a1c2e57
Revises: 5c1e2f7a9b30
Create Date: 2026-05-06 09:41:07.334582

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8d4b6a1c2e57'
down_revision = '5c1e2f7a9b30'
branch_labels = None
depends_on = None


def upgrade():
    # Existing loans become active
    op.add_column('loans', sa.Column('status', sa.String(length=20),
                                     nullable=False, server_default='active'))


def downgrade():
    with op.batch_alter_table('loans', schema=None) as batch_op:
        batch_op.drop_column('status')
