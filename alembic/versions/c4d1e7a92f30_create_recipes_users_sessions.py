"""create_recipes_users_sessions

Revision ID: c4d1e7a92f30
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c4d1e7a92f30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('recipes',
        sa.Column('id', sa.String(length=32), nullable=False, comment='Hex identifier assigned at creation'),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Recipe name'),
        sa.Column('tags', sa.JSON(), nullable=False, comment='Ordered list of tags'),
        sa.Column('ingredients', sa.JSON(), nullable=False, comment='Ordered list of ingredients'),
        sa.Column('instructions', sa.JSON(), nullable=False, comment='Ordered list of instruction steps'),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=False, comment='When the recipe was created'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_recipes_published_at'), 'recipes', ['published_at'], unique=False)

    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False, comment='Login name'),
        sa.Column('hashed_password', sa.String(length=255), nullable=False, comment='Bcrypt hashed password'),
        sa.Column('is_active', sa.Boolean(), nullable=False, comment='Whether the account may sign in'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False, comment='When the account was created'),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True, comment='When the user last signed in'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table('auth_sessions',
        sa.Column('id', sa.String(length=64), nullable=False, comment='Random session identifier embedded in the token'),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('state', sa.String(length=16), nullable=False, comment='active, revoked or expired'),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('replaced_by', sa.String(length=64), nullable=True, comment='Session that superseded this one on refresh'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_auth_sessions_user_id'), 'auth_sessions', ['user_id'], unique=False)
    op.create_index(op.f('ix_auth_sessions_state'), 'auth_sessions', ['state'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_auth_sessions_state'), table_name='auth_sessions')
    op.drop_index(op.f('ix_auth_sessions_user_id'), table_name='auth_sessions')
    op.drop_table('auth_sessions')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_table('users')
    op.drop_index(op.f('ix_recipes_published_at'), table_name='recipes')
    op.drop_table('recipes')
