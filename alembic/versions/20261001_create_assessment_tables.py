"""
create users, assessment_progress, assessment_results and test_access_grants

Revision ID: 20261001_create_assessment_tables
Revises:
Create Date: 2026-10-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261001_create_assessment_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('is_premium', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'assessment_progress',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('test_id', sa.String(), nullable=False),
        sa.Column('current_question_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed_questions', sa.JSON(), nullable=False),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('progress_percentage', sa.Float(), nullable=False, server_default='0'),
        sa.Column('last_updated', sa.DateTime(), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('user_id', 'test_id', name='uq_assessment_progress_user_test'),
    )
    op.create_index('ix_assessment_progress_user_id', 'assessment_progress', ['user_id'])

    op.create_table(
        'assessment_results',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('test_id', sa.String(), nullable=False),
        sa.Column('test_name', sa.String(), nullable=False),
        sa.Column('scores', sa.JSON(), nullable=False),
        sa.Column('percentage_score', sa.Float(), nullable=False),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('primary_profile', sa.String(), nullable=True),
        sa.Column('secondary_profile', sa.String(), nullable=True),
        sa.Column('completion_time_seconds', sa.Integer(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_assessment_results_user_id', 'assessment_results', ['user_id'])
    op.create_index(
        'ix_assessment_results_user_test_completed',
        'assessment_results',
        ['user_id', 'test_id', 'completed_at'],
    )

    op.create_table(
        'test_access_grants',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('test_id', sa.String(), nullable=False),
        sa.Column('source', sa.String(), nullable=True),
        sa.Column('granted_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('user_id', 'test_id', name='uq_test_access_grants_user_test'),
    )
    op.create_index('ix_test_access_grants_user_id', 'test_access_grants', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_test_access_grants_user_id', table_name='test_access_grants')
    op.drop_table('test_access_grants')
    op.drop_index('ix_assessment_results_user_test_completed', table_name='assessment_results')
    op.drop_index('ix_assessment_results_user_id', table_name='assessment_results')
    op.drop_table('assessment_results')
    op.drop_index('ix_assessment_progress_user_id', table_name='assessment_progress')
    op.drop_table('assessment_progress')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
