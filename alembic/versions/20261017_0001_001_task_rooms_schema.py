"""Task rooms schema - users with stats, rooms with memberships, tasks.

Revision ID: 001
Revises: None
Create Date: 2026-10-17

Creates:
- users: credentials, profile, task counters and streak fields
- rooms: owner, invite code, visibility and settings
- room_members: one row per (room, user) with role
- tasks: status/priority/due date, optional room and assignee, JSON tags
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# SQLModel persists enum member names
member_role_enum = sa.Enum('OWNER', 'ADMIN', 'MEMBER', name='memberrole')
task_status_enum = sa.Enum('PENDING', 'IN_PROGRESS', 'COMPLETED', name='taskstatus')
priority_enum = sa.Enum('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='priority')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=True),
        sa.Column('google_id', sa.String(255), nullable=True, unique=True),
        sa.Column('full_name', sa.String(100), nullable=False),
        sa.Column('avatar', sa.String(500), nullable=False, server_default=''),
        sa.Column('total_tasks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed_tasks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current_streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_task_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'rooms',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('invite_code', sa.String(6), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('allow_member_invite', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('auto_assign_tasks', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_rooms_owner_id', 'rooms', ['owner_id'])
    op.create_index('ix_rooms_invite_code', 'rooms', ['invite_code'], unique=True)

    op.create_table(
        'room_members',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('room_id', sa.Uuid(), sa.ForeignKey('rooms.id'), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('role', member_role_enum, nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('room_id', 'user_id', name='uq_room_members_room_user'),
    )
    op.create_index('ix_room_members_room_id', 'room_members', ['room_id'])
    op.create_index('ix_room_members_user_id', 'room_members', ['user_id'])

    op.create_table(
        'tasks',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.String(2000), nullable=True),
        sa.Column('status', task_status_enum, nullable=False),
        sa.Column('priority', priority_enum, nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('room_id', sa.Uuid(), sa.ForeignKey('rooms.id'), nullable=True),
        sa.Column('assigned_to', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_tasks_status', 'tasks', ['status'])
    op.create_index('ix_tasks_priority', 'tasks', ['priority'])
    op.create_index('ix_tasks_due_date', 'tasks', ['due_date'])
    op.create_index('ix_tasks_user_id', 'tasks', ['user_id'])
    op.create_index('ix_tasks_room_id', 'tasks', ['room_id'])


def downgrade() -> None:
    op.drop_table('tasks')
    op.drop_table('room_members')
    op.drop_table('rooms')
    op.drop_table('users')

    bind = op.get_bind()
    priority_enum.drop(bind, checkfirst=True)
    task_status_enum.drop(bind, checkfirst=True)
    member_role_enum.drop(bind, checkfirst=True)
