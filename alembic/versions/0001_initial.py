"""initial naming review schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa

from naming_review.database_types import GUID, JSONDocument


revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'form_configurations',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('fields', JSONDocument, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_form_configurations_active', 'form_configurations', ['is_active', 'deleted_at'], unique=False)
    op.create_index(
        'uq_form_configurations_name_live', 'form_configurations', ['name'], unique=True,
        postgresql_where=sa.text('deleted_at IS NULL'), sqlite_where=sa.text('deleted_at IS NULL'),
    )
    op.create_index(
        'uq_form_configurations_single_active', 'form_configurations', ['is_active'], unique=True,
        postgresql_where=sa.text('is_active'), sqlite_where=sa.text('is_active'),
    )

    op.create_table(
        'naming_requests',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('requestor_id', sa.String(), nullable=False),
        sa.Column('requestor_name', sa.String(), nullable=True),
        sa.Column('form_config_id', GUID(), nullable=False),
        sa.Column('form_snapshot', JSONDocument, nullable=False),
        sa.Column('values', JSONDocument, nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('reviewer_id', sa.String(), nullable=True),
        sa.Column('reviewer_name', sa.String(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        sa.Column('claimed_at', sa.DateTime(), nullable=True),
        sa.Column('review_started_at', sa.DateTime(), nullable=True),
        sa.Column('final_review_started_at', sa.DateTime(), nullable=True),
        sa.Column('held_at', sa.DateTime(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        sa.Column('canceled_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['form_config_id'], ['form_configurations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_naming_requests_requestor_id'), 'naming_requests', ['requestor_id'], unique=False)
    op.create_index(op.f('ix_naming_requests_form_config_id'), 'naming_requests', ['form_config_id'], unique=False)
    op.create_index(op.f('ix_naming_requests_reviewer_id'), 'naming_requests', ['reviewer_id'], unique=False)
    op.create_index('idx_requests_status_submitted', 'naming_requests', ['status', 'submitted_at'], unique=False)

    op.create_table(
        'request_events',
        sa.Column('sequence', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('request_id', GUID(), nullable=False),
        sa.Column('event', sa.String(), nullable=False),
        sa.Column('from_status', sa.String(), nullable=True),
        sa.Column('to_status', sa.String(), nullable=True),
        sa.Column('actor_id', sa.String(), nullable=False),
        sa.Column('actor_name', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['request_id'], ['naming_requests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('sequence'),
    )
    op.create_index(op.f('ix_request_events_request_id'), 'request_events', ['request_id'], unique=False)

    op.create_table(
        'approved_names',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('source', sa.String(), nullable=False),
        sa.Column('request_id', GUID(), nullable=True),
        sa.Column('approved_name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('service_line', sa.String(), nullable=True),
        sa.Column('ipr', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('class', sa.String(), nullable=True),
        sa.Column('contact_person', sa.String(), nullable=True),
        sa.Column('approval_date', sa.DateTime(), nullable=True),
        sa.Column('trademark', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('previously_known_as', sa.String(), nullable=True),
        sa.Column('year_list', sa.String(), nullable=True),
        sa.Column('ipr_asset_status', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['request_id'], ['naming_requests.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('request_id'),
    )
    op.create_index(op.f('ix_approved_names_source'), 'approved_names', ['source'], unique=False)
    op.create_index(op.f('ix_approved_names_approved_name'), 'approved_names', ['approved_name'], unique=False)
    op.create_index('idx_approved_names_facets', 'approved_names', ['service_line', 'ipr', 'category', 'class'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_approved_names_facets', table_name='approved_names')
    op.drop_index(op.f('ix_approved_names_approved_name'), table_name='approved_names')
    op.drop_index(op.f('ix_approved_names_source'), table_name='approved_names')
    op.drop_table('approved_names')
    op.drop_index(op.f('ix_request_events_request_id'), table_name='request_events')
    op.drop_table('request_events')
    op.drop_index('idx_requests_status_submitted', table_name='naming_requests')
    op.drop_index(op.f('ix_naming_requests_reviewer_id'), table_name='naming_requests')
    op.drop_index(op.f('ix_naming_requests_form_config_id'), table_name='naming_requests')
    op.drop_index(op.f('ix_naming_requests_requestor_id'), table_name='naming_requests')
    op.drop_table('naming_requests')
    op.drop_index('uq_form_configurations_single_active', table_name='form_configurations')
    op.drop_index('uq_form_configurations_name_live', table_name='form_configurations')
    op.drop_index('idx_form_configurations_active', table_name='form_configurations')
    op.drop_table('form_configurations')
