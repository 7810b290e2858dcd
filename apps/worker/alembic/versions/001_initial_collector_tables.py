"""Initial collector tables

Revision ID: 001_initial_collector_tables
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_collector_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create collection sources, bindings, catalog and scheduler tables."""

    # Aggregator endpoints
    op.create_table('collection_sources',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('api_url', sa.Text(), nullable=False),
        sa.Column('source_type', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('sync_pictures', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('remove_ads', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('convert_webp', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('download_retry', sa.Integer(), nullable=False, server_default=sa.text('3')),
        sa.Column('play_from_filter', sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_collection_sources'),
        sa.UniqueConstraint('name', name='uq_collection_sources_name')
    )

    # Upstream category -> local category
    op.create_table('bindings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('source_flag', sa.String(length=255), nullable=False),
        sa.Column('external_id', sa.String(length=64), nullable=False),
        sa.Column('local_type_id', sa.Integer(), nullable=False),
        sa.Column('local_type_name', sa.String(length=255), nullable=False, server_default=sa.text("''")),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_bindings'),
        sa.UniqueConstraint('source_flag', 'external_id', name='uq_bindings_source_flag_external_id')
    )

    # Catalog
    op.create_table('videos',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('year', sa.String(length=16), nullable=True),
        sa.Column('type_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('vod_class', sa.String(length=255), nullable=True),
        sa.Column('pic', sa.Text(), nullable=True),
        sa.Column('actor', sa.Text(), nullable=True),
        sa.Column('director', sa.Text(), nullable=True),
        sa.Column('remarks', sa.String(length=255), nullable=True),
        sa.Column('area', sa.String(length=64), nullable=True),
        sa.Column('lang', sa.String(length=64), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('pubdate', sa.DateTime(timezone=True), nullable=False),
        sa.Column('hits', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('hits_day', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('hits_week', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('hits_month', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('score', sa.String(length=16), nullable=False, server_default=sa.text("'0.0'")),
        sa.Column('play_sources', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_videos')
    )
    op.create_index('ix_videos_name', 'videos', ['name'])

    # Scheduler
    op.create_table('scheduled_task_configs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('interval_hours', sa.Integer(), nullable=False, server_default=sa.text('12')),
        sa.Column('last_run', sa.DateTime(timezone=True), nullable=True),
        sa.Column('next_run', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_scheduled_task_configs')
    )

    op.create_table('task_execution_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('task_id', sa.String(length=64), nullable=False),
        sa.Column('collection_id', sa.Integer(), nullable=False),
        sa.Column('collection_name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('message', sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column('videos_collected', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('errors', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_task_execution_logs')
    )
    op.create_index('ix_task_execution_logs_task_id', 'task_execution_logs', ['task_id'])
    op.create_index('ix_task_execution_logs_started_at', 'task_execution_logs', ['started_at'])


def downgrade() -> None:
    """Drop collector tables."""
    op.drop_index('ix_task_execution_logs_started_at', table_name='task_execution_logs')
    op.drop_index('ix_task_execution_logs_task_id', table_name='task_execution_logs')
    op.drop_table('task_execution_logs')
    op.drop_table('scheduled_task_configs')
    op.drop_index('ix_videos_name', table_name='videos')
    op.drop_table('videos')
    op.drop_table('bindings')
    op.drop_table('collection_sources')
