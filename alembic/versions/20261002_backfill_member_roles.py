"""backfill_member_roles

Revision ID: a1c4e7f20002
Revises: a1c4e7f20001
Create Date: 2026-10-02 09:00:00.000000

Membership rows imported from the old flat member lists carry no role.
Those members were always editors, so this gives them an explicit
role='editor'. Role resolution already treats NULL as editor, so the
application works whether or not this has run.

Downgrade is a no-op: a backfilled row cannot be told apart from one that
was explicitly made an editor.

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20002'
down_revision: Union[str, None] = 'a1c4e7f20001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


project_members = sa.table(
    'ProjectMembers',
    sa.column('role', sa.String(length=20)),
)


def upgrade() -> None:
    """Upgrade database schema."""
    op.execute(
        project_members.update()
        .where(project_members.c.role.is_(None))
        .values(role='editor')
    )


def downgrade() -> None:
    """Downgrade database schema."""
    pass
