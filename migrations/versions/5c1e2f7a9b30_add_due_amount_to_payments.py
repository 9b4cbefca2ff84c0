"""add_due_amount_to_payments

Revision ID: 5c1e2f7a9b30
Revises: 1a7f3c9d2b10
Create Date: 2026-04-11 16:02:51.907114

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c1e2f7a9b30'
down_revision = '1a7f3c9d2b10'
branch_labels = None
depends_on = None


def upgrade():
    # Outstanding balance left by a partial collection
    op.add_column('payments', sa.Column('due_amount', sa.Numeric(precision=15, scale=2),
                                        nullable=True, server_default='0'))


def downgrade():
    with op.batch_alter_table('payments', schema=None) as batch_op:
        batch_op.drop_column('due_amount')
