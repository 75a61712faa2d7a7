"""Create learning records, tags and categories

Revision ID: 5b1f0c2e7a41
Revises:
Create Date: 2025-10-02 19:12:08.114520

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1f0c2e7a41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('length(name) <= 100', name='ck_categories_name_len'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_categories_name'),
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('length(name) <= 50', name='ck_tags_name_len'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_tags_name'),
    )
    op.create_index('idx_tags_name', 'tags', ['name'])

    op.create_table(
        'learning_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('explanatory_text', sa.Text(), nullable=False),
        sa.Column('understanding_level', sa.Integer(), nullable=False),
        sa.Column('reference_url', sa.String(length=500), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('github_path', sa.String(length=500), nullable=True),
        sa.Column('commit_sha', sa.String(length=40), nullable=True),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            'understanding_level >= 0 AND understanding_level <= 5',
            name='ck_learning_records_level_range',
        ),
        sa.CheckConstraint('length(title) <= 200', name='ck_learning_records_title_len'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_learning_records_owner_id', 'learning_records', ['owner_id'])
    op.create_index('idx_learning_records_category_id', 'learning_records', ['category_id'])
    op.create_index('idx_learning_records_owner_created', 'learning_records', ['owner_id', 'created_at'])

    op.create_table(
        'learning_tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('learning_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['learning_id'], ['learning_records.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('learning_id', 'tag_id', name='uq_learning_tags_learning_tag'),
    )
    op.create_index('idx_learning_tags_learning_id', 'learning_tags', ['learning_id'])
    op.create_index('idx_learning_tags_tag_id', 'learning_tags', ['tag_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_learning_tags_tag_id', table_name='learning_tags')
    op.drop_index('idx_learning_tags_learning_id', table_name='learning_tags')
    op.drop_table('learning_tags')
    op.drop_index('idx_learning_records_owner_created', table_name='learning_records')
    op.drop_index('idx_learning_records_category_id', table_name='learning_records')
    op.drop_index('idx_learning_records_owner_id', table_name='learning_records')
    op.drop_table('learning_records')
    op.drop_index('idx_tags_name', table_name='tags')
    op.drop_table('tags')
    op.drop_table('categories')
