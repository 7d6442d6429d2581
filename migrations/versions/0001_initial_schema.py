"""Initial schema: users, batches, user_configs, recipes, notes

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=256)),
        sa.Column('display_name', sa.String(length=100)),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'batches',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('display_id', sa.String(length=64), nullable=False),
        sa.Column('created_date', sa.Date(), nullable=False),
        sa.Column('species', sa.String(length=100), nullable=False),
        sa.Column('operation_type', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=16), nullable=False),
        sa.Column('parent_id', sa.String(length=36)),
        sa.Column('end_date', sa.Date()),
        sa.Column('outcome', sa.String(length=100)),
        sa.Column('notes', sa.Text()),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_batches_user_id', 'batches', ['user_id'])
    # Not unique: codes are allocated by reading existing ones first
    op.create_index('ix_batches_display_id', 'batches', ['display_id'])
    op.create_index('ix_batches_created_date', 'batches', ['created_date'])
    op.create_index('ix_batches_parent_id', 'batches', ['parent_id'])

    op.create_table(
        'user_configs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('config_key', sa.String(length=50), nullable=False),
        sa.Column('config_value', sa.JSON()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'config_key', name='uq_user_configs_user_key'),
    )
    op.create_index('ix_user_configs_user_id', 'user_configs', ['user_id'])

    op.create_table(
        'recipes',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('type', sa.String(length=100)),
        sa.Column('ingredients', sa.Text()),
        sa.Column('directions', sa.Text()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_recipes_user_id', 'recipes', ['user_id'])

    op.create_table(
        'notes',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_notes_user_id', 'notes', ['user_id'])


def downgrade():
    op.drop_table('notes')
    op.drop_table('recipes')
    op.drop_table('user_configs')
    op.drop_table('batches')
    op.drop_table('users')
