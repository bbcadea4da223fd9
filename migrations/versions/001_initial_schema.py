"""Initial schema - products, batches, serials, stock movements, audit log

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    # Create products table
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=500), nullable=False),
        sa.Column('product_code', sa.String(length=100), nullable=False),
        sa.Column('hsn', sa.String(length=20), nullable=True),
        sa.Column('barcode', sa.String(length=50), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('average_purchase_price', sa.Numeric(precision=14, scale=4), nullable=False, server_default='0'),
        sa.Column('tracking_type', sa.String(length=10), nullable=False, server_default='none'),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('mrp', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('mop', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('mfw_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('gst_rate', sa.Numeric(precision=5, scale=2), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
        sa.CheckConstraint('average_purchase_price >= 0', name='ck_products_average_price_non_negative'),
        sa.CheckConstraint(
            "tracking_type IN ('none', 'batch', 'serial')", name='ck_products_tracking_type_valid'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_products'),
        sa.UniqueConstraint('product_code', name='uq_products_product_code')
    )
    op.create_index('ix_products_barcode', 'products', ['barcode'])
    op.create_index('idx_products_low_stock', 'products', ['quantity', 'low_stock_threshold'])

    # Create product_batches table
    op.create_table(
        'product_batches',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('batch_uid', sa.String(length=32), nullable=False),
        sa.Column('batch_number', sa.String(length=100), nullable=False),
        sa.Column('barcode', sa.String(length=50), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('mfg_date', sa.Date(), nullable=True),
        sa.Column('mrp', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('mop', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('mfw_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 0', name='ck_product_batches_quantity_non_negative'),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'],
            name='fk_product_batches_product_id_products', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_product_batches'),
        sa.UniqueConstraint('product_id', 'batch_uid', name='uq_product_batches_product_batch_uid')
    )
    op.create_index('ix_product_batches_product_id', 'product_batches', ['product_id'])
    op.create_index('idx_product_batches_number', 'product_batches', ['product_id', 'batch_number'])
    op.create_index('idx_product_batches_expiry', 'product_batches', ['expiry_date'])
    op.create_index('ix_product_batches_barcode', 'product_batches', ['barcode'])

    # Create batch_sequences table
    op.create_table(
        'batch_sequences',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'],
            name='fk_batch_sequences_product_id_products', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_batch_sequences'),
        sa.UniqueConstraint('product_id', name='uq_batch_sequences_product_id')
    )

    # Create product_serials table
    op.create_table(
        'product_serials',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('batch_id', sa.Integer(), nullable=False),
        sa.Column('serial_number', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('active', 'sold', 'removed')", name='ck_product_serials_status_valid'
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'],
            name='fk_product_serials_product_id_products', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['batch_id'], ['product_batches.id'],
            name='fk_product_serials_batch_id_product_batches', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_product_serials'),
        sa.UniqueConstraint(
            'product_id', 'serial_number', name='uq_product_serials_product_serial_number'
        )
    )
    op.create_index('ix_product_serials_product_id', 'product_serials', ['product_id'])
    op.create_index('ix_product_serials_batch_id', 'product_serials', ['batch_id'])
    op.create_index('idx_product_serials_status', 'product_serials', ['product_id', 'status'])

    # Create stock_transactions table
    op.create_table(
        'stock_transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('batch_id', sa.Integer(), nullable=True),
        sa.Column('serial_id', sa.Integer(), nullable=True),
        sa.Column('transaction_type', sa.String(length=20), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('quantity_before', sa.Integer(), nullable=False),
        sa.Column('quantity_after', sa.Integer(), nullable=False),
        sa.Column('unit_cost', sa.Numeric(precision=14, scale=4), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'],
            name='fk_stock_transactions_product_id_products', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['batch_id'], ['product_batches.id'],
            name='fk_stock_transactions_batch_id_product_batches', ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['serial_id'], ['product_serials.id'],
            name='fk_stock_transactions_serial_id_product_serials', ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_stock_transactions')
    )
    op.create_index('ix_stock_transactions_product_id', 'stock_transactions', ['product_id'])
    op.create_index('idx_stock_transactions_type', 'stock_transactions', ['transaction_type'])
    op.create_index('idx_stock_transactions_created_at', 'stock_transactions', ['created_at'])

    # Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('method', sa.String(length=10), nullable=False),
        sa.Column('endpoint', sa.String(length=2048), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('payload', sa.Text(), nullable=False, server_default='{}'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_audit_logs')
    )
    op.create_index('idx_audit_logs_timestamp', 'audit_logs', ['timestamp'])
    op.create_index('idx_audit_logs_endpoint', 'audit_logs', ['endpoint'])


def downgrade() -> None:
    # Drop tables in reverse order (respecting foreign keys)
    op.drop_table('audit_logs')
    op.drop_table('stock_transactions')
    op.drop_table('product_serials')
    op.drop_table('batch_sequences')
    op.drop_table('product_batches')
    op.drop_table('products')
