"""initial_schema

Revision ID: a1c4e7f20001
Revises:
Create Date: 2026-10-01 09:00:00.000000

Creates the core tables:
1. Users
2. Projects (lifecycle columns archived/archived_at/deleted_at)
3. ProjectMembers (role is nullable: NULL marks a legacy editor entry)
4. Tasks (subtasks and comments as JSON lists)
5. Activities

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    # ==========================================================================
    # 1. Users
    # ==========================================================================
    op.create_table(
        'Users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_Users_email', 'Users', ['email'], unique=True)

    # ==========================================================================
    # 2. Projects
    # ==========================================================================
    op.create_table(
        'Projects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('archived_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['Users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_Projects_created_by', 'Projects', ['created_by'])
    op.create_index('ix_Projects_deleted_at', 'Projects', ['deleted_at'])

    # ==========================================================================
    # 3. ProjectMembers
    # ==========================================================================
    op.create_table(
        'ProjectMembers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['Projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['Users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'user_id', name='uq_project_member_user'),
    )
    op.create_index('ix_ProjectMembers_project_id', 'ProjectMembers', ['project_id'])
    op.create_index('ix_ProjectMembers_user_id', 'ProjectMembers', ['user_id'])

    # ==========================================================================
    # 4. Tasks
    # ==========================================================================
    op.create_table(
        'Tasks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('assigned_to', sa.Uuid(), nullable=True),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Todo'),
        sa.Column('priority', sa.String(length=20), nullable=False, server_default='Medium'),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('subtasks', sa.JSON(), nullable=False),
        sa.Column('comments', sa.JSON(), nullable=False),
        sa.Column('archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('archived_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['Projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assigned_to'], ['Users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_Tasks_project_id', 'Tasks', ['project_id'])
    op.create_index('ix_Tasks_assigned_to', 'Tasks', ['assigned_to'])
    op.create_index('ix_Tasks_deleted_at', 'Tasks', ['deleted_at'])

    # ==========================================================================
    # 5. Activities
    # ==========================================================================
    op.create_table(
        'Activities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('entity_type', sa.String(length=20), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=True),
        sa.Column('entity_title', sa.String(length=500), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['Projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['Users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_Activities_project_id', 'Activities', ['project_id'])
    op.create_index('ix_Activities_project_created', 'Activities', ['project_id', 'created_at'])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index('ix_Activities_project_created', table_name='Activities')
    op.drop_index('ix_Activities_project_id', table_name='Activities')
    op.drop_table('Activities')

    op.drop_index('ix_Tasks_deleted_at', table_name='Tasks')
    op.drop_index('ix_Tasks_assigned_to', table_name='Tasks')
    op.drop_index('ix_Tasks_project_id', table_name='Tasks')
    op.drop_table('Tasks')

    op.drop_index('ix_ProjectMembers_user_id', table_name='ProjectMembers')
    op.drop_index('ix_ProjectMembers_project_id', table_name='ProjectMembers')
    op.drop_table('ProjectMembers')

    op.drop_index('ix_Projects_deleted_at', table_name='Projects')
    op.drop_index('ix_Projects_created_by', table_name='Projects')
    op.drop_table('Projects')

    op.drop_index('ix_Users_email', table_name='Users')
    op.drop_table('Users')
