"""Form storage schema

Revision ID: 001_form_storage
Revises:
Create Date: 2026-10-19

Creates the entry store and the form definition tables used to resolve
column labels.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_form_storage'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Stored submissions
    op.create_table(
        'form_entries',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('bucket', sa.String(256), nullable=False),
        sa.Column('properties', postgresql.JSONB, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.CheckConstraint('length(bucket) > 0', name='ck_form_entries_bucket_not_empty'),
    )
    op.create_index('ix_form_entries_bucket', 'form_entries', ['bucket'])
    op.create_index('ix_form_entries_bucket_created_at', 'form_entries', ['bucket', 'created_at'])

    # Form definitions, one row per localized variant
    op.create_table(
        'form_definitions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('identifier', sa.String(256), nullable=False),
        sa.Column('dimensions', postgresql.JSONB, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_form_definitions_identifier', 'form_definitions', ['identifier'])

    op.create_table(
        'form_elements',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            'definition_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('form_definitions.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('node_identifier', sa.String(255), nullable=False),
        sa.Column('speaking_identifier', sa.String(255), nullable=True),
        sa.Column('label', sa.String(512), nullable=True),
        sa.Column('type_name', sa.String(255), nullable=False),
        sa.Column('position', sa.Integer, nullable=False, server_default='0'),
    )
    op.create_index('ix_form_elements_definition_id', 'form_elements', ['definition_id'])


def downgrade() -> None:
    op.drop_index('ix_form_elements_definition_id', table_name='form_elements')
    op.drop_table('form_elements')
    op.drop_index('ix_form_definitions_identifier', table_name='form_definitions')
    op.drop_table('form_definitions')
    op.drop_index('ix_form_entries_bucket_created_at', table_name='form_entries')
    op.drop_index('ix_form_entries_bucket', table_name='form_entries')
    op.drop_table('form_entries')
