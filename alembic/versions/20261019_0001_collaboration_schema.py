"""Initial schema - projects, collaborators, stems, segments

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('avatar', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    
    op.create_table(
        'projects',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('tempo', sa.Integer(), nullable=False, default=120),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, default=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('last_accessed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    
    # One row per (project, user); the owner never gets one
    op.create_table(
        'project_collaborators',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('project_id', sa.Uuid(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('role', sa.String(50), nullable=False),
        sa.Column('can_edit', sa.Boolean(), nullable=False, default=False),
        sa.Column('can_add_children', sa.Boolean(), nullable=False, default=False),
        sa.Column('can_delete_children', sa.Boolean(), nullable=False, default=False),
        sa.Column('can_invite_others', sa.Boolean(), nullable=False, default=False),
        sa.Column('can_export', sa.Boolean(), nullable=False, default=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_active_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('project_id', 'user_id', name='uq_project_collaborators_project_user'),
    )
    
    op.create_table(
        'stems',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('project_id', sa.Uuid(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(7), nullable=False, default='#3B82F6'),
        sa.Column('volume', sa.Float(), nullable=False, default=1.0),
        sa.Column('pan', sa.Float(), nullable=False, default=0.0),
        sa.Column('is_muted', sa.Boolean(), nullable=False, default=False),
        sa.Column('is_soloed', sa.Boolean(), nullable=False, default=False),
        sa.Column('instrument_type', sa.String(50), nullable=True),
        sa.Column('midi_channel', sa.Integer(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, default=0),
        sa.Column('version', sa.Integer(), nullable=False, default=1),
        sa.Column('last_modified_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_stems_project_order', 'stems', ['project_id', 'order'])
    
    op.create_table(
        'stem_segments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('stem_id', sa.Uuid(), sa.ForeignKey('stems.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('type', sa.String(10), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('start_time', sa.Float(), nullable=False),
        sa.Column('end_time', sa.Float(), nullable=False),
        sa.Column('content', sa.JSON(), nullable=True),
        sa.Column('volume', sa.Float(), nullable=False, default=1.0),
        sa.Column('fade_in', sa.Float(), nullable=True),
        sa.Column('fade_out', sa.Float(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, default=1),
        sa.Column('last_modified_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_stem_segments_stem_time', 'stem_segments', ['stem_id', 'start_time', 'end_time'])


def downgrade() -> None:
    op.drop_index('ix_stem_segments_stem_time', table_name='stem_segments')
    op.drop_table('stem_segments')
    op.drop_index('ix_stems_project_order', table_name='stems')
    op.drop_table('stems')
    op.drop_table('project_collaborators')
    op.drop_table('projects')
    op.drop_table('users')
