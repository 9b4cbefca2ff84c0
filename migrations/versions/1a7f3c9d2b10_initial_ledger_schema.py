"""initial_ledger_schema

Revision ID: 1a7f3c9d2b10
Revises:
Create Date: 2026-03-02 10:14:22.418305

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a7f3c9d2b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('borrowers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('document_type', sa.String(length=50), nullable=True),
        sa.Column('document_number', sa.String(length=50), nullable=True),
        sa.Column('guarantor_name', sa.String(length=200), nullable=True),
        sa.Column('guarantor_phone', sa.String(length=20), nullable=True),
        sa.Column('guarantor_address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('photo_url', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_borrowers_name', 'borrowers', ['name'], unique=False)
    op.create_index('ix_borrowers_created_at', 'borrowers', ['created_at'], unique=False)

    op.create_table('loans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('borrower_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('loan_strategy', sa.String(length=20), nullable=False),
        sa.Column('tenure', sa.Integer(), nullable=True),
        sa.Column('custom_emi_amount', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('flat_monthly_amount', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('custom_due_date', sa.Date(), nullable=True),
        sa.Column('custom_payment_amount', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('pm_type', sa.String(length=10), nullable=True),
        sa.Column('metal_weight', sa.Numeric(precision=10, scale=3), nullable=True),
        sa.Column('purity', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('net_weight', sa.Numeric(precision=10, scale=3), nullable=True),
        sa.Column('amount_paid', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('gold_silver_due_date', sa.Date(), nullable=True),
        sa.Column('gold_silver_payment_amount', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('gold_silver_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['borrower_id'], ['borrowers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_loans_borrower_id', 'loans', ['borrower_id'], unique=False)
    op.create_index('ix_loans_created_at', 'loans', ['created_at'], unique=False)

    op.create_table('payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('loan_id', sa.Integer(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('paid_date', sa.Date(), nullable=True),
        sa.Column('paid_amount', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['loan_id'], ['loans.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payments_loan_id', 'payments', ['loan_id'], unique=False)
    op.create_index('ix_payments_due_date', 'payments', ['due_date'], unique=False)

    op.create_table('activity_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=True),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_activity_logs_created_at', 'activity_logs', ['created_at'], unique=False)


def downgrade():
    op.drop_index('ix_activity_logs_created_at', table_name='activity_logs')
    op.drop_table('activity_logs')
    op.drop_index('ix_payments_due_date', table_name='payments')
    op.drop_index('ix_payments_loan_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_loans_created_at', table_name='loans')
    op.drop_index('ix_loans_borrower_id', table_name='loans')
    op.drop_table('loans')
    op.drop_index('ix_borrowers_created_at', table_name='borrowers')
    op.drop_index('ix_borrowers_name', table_name='borrowers')
    op.drop_table('borrowers')
