"""create planting reminder tables

Revision ID: a3c91e07d2b4
Revises:
Create Date: 2025-01-12 09:41:17.204913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = 'a3c91e07d2b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('hardiness_zone', sa.String(length=10), nullable=True),
        sa.Column('last_frost_date', sa.Date(), nullable=True),
        sa.Column('first_frost_date', sa.Date(), nullable=True),
        sa.Column('enable_indoor_start_reminders', sa.Boolean(), nullable=False),
        sa.Column('enable_direct_sow_reminders', sa.Boolean(), nullable=False),
        sa.Column('enable_transplant_reminders', sa.Boolean(), nullable=False),
        sa.Column('reminder_lead_days', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_user_settings_user_id', 'user_settings', ['user_id'], unique=True)

    op.create_table(
        'plant_guides',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('scientific_name', sa.String(length=200), nullable=True),
        sa.Column(
            'category',
            sa.Enum('vegetable', 'fruit', 'herb', 'flower', name='plant_category_enum'),
            nullable=False,
        ),
        sa.Column('indoor_start_weeks', sa.Integer(), nullable=True),
        sa.Column('outdoor_start_weeks', sa.Integer(), nullable=True),
        sa.Column('transplant_weeks', sa.Integer(), nullable=True),
        sa.Column('harvest_weeks', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_plant_guides_name', 'plant_guides', ['name'])
    op.create_index('ix_plant_guides_category', 'plant_guides', ['category'])

    # Seeds and wishlist items share the offset / custom-name columns
    for table in ('seeds', 'wishlist_items'):
        columns = [
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
            sa.Column(
                'plant_guide_id', sa.Integer(),
                sa.ForeignKey('plant_guides.id', ondelete='SET NULL'), nullable=True,
            ),
            sa.Column('custom_plant_name', sa.String(length=200), nullable=True),
            sa.Column('variety', sa.String(length=200), nullable=True),
            sa.Column('custom_category', sa.String(length=50), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('indoor_start_weeks', sa.Integer(), nullable=True),
            sa.Column('outdoor_start_weeks', sa.Integer(), nullable=True),
            sa.Column('transplant_weeks', sa.Integer(), nullable=True),
            sa.Column('harvest_weeks', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        ]
        if table == 'seeds':
            columns += [
                sa.Column('nickname', sa.String(length=200), nullable=True),
                sa.Column('enable_indoor_start_reminder', sa.Boolean(), nullable=False),
                sa.Column('enable_direct_sow_reminder', sa.Boolean(), nullable=False),
                sa.Column('enable_transplant_reminder', sa.Boolean(), nullable=False),
                sa.Column('is_archived', sa.Boolean(), nullable=False),
            ]
        else:
            columns.append(sa.Column('purchased', sa.Boolean(), nullable=False))
        op.create_table(table, *columns)
        op.create_index(f'ix_{table}_user_id', table, ['user_id'])
        op.create_index(f'ix_{table}_plant_guide_id', table, ['plant_guide_id'])

    op.create_table(
        'planting_reminder_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column(
            'reminder_type',
            sa.Enum('indoor_start', 'direct_sow', 'transplant', name='planting_reminder_type_enum'),
            nullable=False,
        ),
        sa.Column('target_date', sa.Date(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('plant_names', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            'user_id', 'reminder_type', 'target_date', 'year',
            name='uq_planting_reminder_logs_user_type_date_year',
        ),
    )
    op.create_index('ix_planting_reminder_logs_user_id', 'planting_reminder_logs', ['user_id'])
    op.create_index('ix_planting_reminder_logs_year', 'planting_reminder_logs', ['year'])

    op.create_table(
        'pipeline_runs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('pipeline_name', sa.String(length=100), nullable=False),
        sa.Column(
            'status',
            sa.Enum('running', 'success', 'failed', 'skipped', name='pipeline_status_enum'),
            nullable=False,
        ),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration_ms', sa.Integer(), nullable=True),
        sa.Column('records_processed', sa.Integer(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
    )
    op.create_index('ix_pipeline_runs_pipeline_name', 'pipeline_runs', ['pipeline_name'])


def downgrade() -> None:
    op.drop_table('pipeline_runs')
    op.drop_table('planting_reminder_logs')
    op.drop_table('wishlist_items')
    op.drop_table('seeds')
    op.drop_table('plant_guides')
    op.drop_table('user_settings')
    op.drop_table('users')
    op.execute("DROP TYPE IF EXISTS pipeline_status_enum")
    op.execute("DROP TYPE IF EXISTS planting_reminder_type_enum")
    op.execute("DROP TYPE IF EXISTS plant_category_enum")
