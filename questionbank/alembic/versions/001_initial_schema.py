"""Initial database schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create questions table
    op.create_table(
        'questions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('difficulty', sa.String(10), nullable=False),
        sa.Column('visibility', sa.String(10), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('estimated_time', sa.Integer(), nullable=False),
        sa.Column('negative_marks', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('author_notes', sa.Text(), nullable=True),
        sa.Column('content', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_questions'))
    )
    op.create_index(op.f('ix_questions_type'), 'questions', ['type'])
    op.create_index(op.f('ix_questions_category'), 'questions', ['category'])
    op.create_index(op.f('ix_questions_difficulty'), 'questions', ['difficulty'])
    op.create_index(op.f('ix_questions_created_at'), 'questions', ['created_at'])

    # Create question_tags table
    op.create_table(
        'question_tags',
        sa.Column('question_id', sa.String(36), nullable=False),
        sa.Column('tag', sa.String(50), nullable=False),
        sa.ForeignKeyConstraint(
            ['question_id'], ['questions.id'],
            name=op.f('fk_question_tags_question_id_questions'),
            ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('question_id', 'tag', name=op.f('pk_question_tags'))
    )
    op.create_index('idx_question_tags_tag', 'question_tags', ['tag'])


def downgrade():
    op.drop_index('idx_question_tags_tag', table_name='question_tags')
    op.drop_table('question_tags')
    op.drop_index(op.f('ix_questions_created_at'), table_name='questions')
    op.drop_index(op.f('ix_questions_difficulty'), table_name='questions')
    op.drop_index(op.f('ix_questions_category'), table_name='questions')
    op.drop_index(op.f('ix_questions_type'), table_name='questions')
    op.drop_table('questions')
