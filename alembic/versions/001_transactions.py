"""Create transactions table

Revision ID: 001_transactions
Revises:
Create Date: 2026-02-12

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '001_transactions'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('transactions',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('party_id', sa.Text(), nullable=False),
        sa.Column('created_at', sa.Text(), nullable=False),
        sa.Column('payload_nonce', sa.Text(), nullable=False),
        sa.Column('payload_ct', sa.Text(), nullable=False),
        sa.Column('payload_tag', sa.Text(), nullable=False),
        sa.Column('dek_wrap_nonce', sa.Text(), nullable=False),
        sa.Column('dek_wrapped', sa.Text(), nullable=False),
        sa.Column('dek_wrap_tag', sa.Text(), nullable=False),
        sa.Column('alg', sa.String(32), nullable=False),
        sa.Column('mk_version', sa.Integer(), nullable=False),
        sa.Column('created_timestamp', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('idx_transactions_party_id', 'transactions', ['party_id'])
    op.create_index('idx_transactions_created_at', 'transactions', ['created_at'])
    op.create_index('idx_transactions_created_timestamp', 'transactions', ['created_timestamp'])


def downgrade() -> None:
    op.drop_index('idx_transactions_created_timestamp', table_name='transactions')
    op.drop_index('idx_transactions_created_at', table_name='transactions')
    op.drop_index('idx_transactions_party_id', table_name='transactions')
    op.drop_table('transactions')
