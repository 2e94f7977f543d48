"""initial permit schema

Revision ID: 3f9c1a7d2e40
Revises:
Create Date: 2026-10-19 09:12:41.207315

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DOCUMENT_CATEGORIES = (
    'PERMIT', 'LICENSE', 'INSPECTION', 'INSURANCE',
    'REGISTRATION', 'CERTIFICATION', 'AGREEMENT', 'OTHER',
)
DOCUMENT_STATUSES = ('PENDING_ACTIVATION', 'ACTIVE', 'PENDING_RENEWAL', 'EXPIRED', 'INACTIVE')


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    ]


def _lookup_table(name: str) -> None:
    op.create_table(name,
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f(f'ix_{name}_name'), name, ['name'], unique=False)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('users',
    sa.Column('id', sa.String(), nullable=False),
    sa.Column('email', sa.String(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('phone', sa.String(), nullable=True),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('email')
    )
    for name in ('business_types', 'jurisdictions', 'permit_types', 'issuing_authorities'):
        _lookup_table(name)

    op.create_table('businesses',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('user_id', sa.String(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('business_type_id', sa.Integer(), nullable=True),
    sa.Column('jurisdiction_id', sa.Integer(), nullable=True),
    sa.Column('phone', sa.String(), nullable=True),
    sa.Column('notes', sa.Text(), nullable=True),
    *_timestamps(),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['business_type_id'], ['business_types.id'], ondelete='SET NULL'),
    sa.ForeignKeyConstraint(['jurisdiction_id'], ['jurisdictions.id'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_businesses_user_id'), 'businesses', ['user_id'], unique=False)

    op.create_table('business_documents',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('business_id', sa.Integer(), nullable=False),
    sa.Column('document_category', sa.Enum(*DOCUMENT_CATEGORIES, name='document_category'), nullable=False),
    sa.Column('permit_type_id', sa.Integer(), nullable=True),
    sa.Column('issuing_authority_id', sa.Integer(), nullable=True),
    sa.Column('jurisdiction_id', sa.Integer(), nullable=True),
    sa.Column('title', sa.String(), nullable=False),
    sa.Column('permit_number', sa.String(), nullable=True),
    sa.Column('start_date', sa.Date(), nullable=True),
    sa.Column('end_date', sa.Date(), nullable=True),
    sa.Column('auto_renew', sa.Boolean(), nullable=False),
    sa.Column('status', sa.Enum(*DOCUMENT_STATUSES, name='document_status'), nullable=False),
    sa.Column('raw_extraction_json', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.Column('source_file_bucket', sa.String(), nullable=True),
    sa.Column('source_file_path', sa.String(), nullable=True),
    sa.Column('source_file_content_type', sa.String(), nullable=True),
    sa.Column('source_file_name', sa.String(), nullable=True),
    sa.Column('source_file_size', sa.BigInteger(), nullable=True),
    *_timestamps(),
    sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['permit_type_id'], ['permit_types.id'], ondelete='SET NULL'),
    sa.ForeignKeyConstraint(['issuing_authority_id'], ['issuing_authorities.id'], ondelete='SET NULL'),
    sa.ForeignKeyConstraint(['jurisdiction_id'], ['jurisdictions.id'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_business_documents_business_id'), 'business_documents', ['business_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_business_documents_business_id'), table_name='business_documents')
    op.drop_table('business_documents')
    op.drop_index(op.f('ix_businesses_user_id'), table_name='businesses')
    op.drop_table('businesses')
    for name in ('issuing_authorities', 'permit_types', 'jurisdictions', 'business_types'):
        op.drop_index(op.f(f'ix_{name}_name'), table_name=name)
        op.drop_table(name)
    op.drop_table('users')
    sa.Enum(name='document_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='document_category').drop(op.get_bind(), checkfirst=True)
