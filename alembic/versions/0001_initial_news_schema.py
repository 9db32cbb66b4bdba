"""initial_news_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True)


def _report_text_columns() -> list:
    return [
        sa.Column('headline_for_pdf_report', sa.Text(), nullable=True),
        sa.Column('publication_name_for_pdf_report', sa.Text(), nullable=True),
        sa.Column('publication_date_for_pdf_report', sa.Date(), nullable=True),
        sa.Column('text_for_pdf_report', sa.Text(), nullable=True),
        sa.Column('url_for_pdf_report', sa.Text(), nullable=True),
        sa.Column('km_notes', sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'news_article_aggregator_sources',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name_of_org', sa.String(), nullable=False),
        sa.Column('url', sa.String(), nullable=True),
        sa.Column('is_rss', sa.Boolean(), nullable=False),
        sa.Column('is_api', sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name_of_org'),
    )
    op.create_table(
        'entity_who_found_articles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('news_article_aggregator_source_id', sa.Integer(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['news_article_aggregator_source_id'], ['news_article_aggregator_sources.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'news_api_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('news_article_aggregator_source_id', sa.Integer(), nullable=True),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('and_string', sa.Text(), nullable=True),
        sa.Column('or_string', sa.Text(), nullable=True),
        sa.Column('not_string', sa.Text(), nullable=True),
        sa.Column('date_start_of_request', sa.Date(), nullable=True),
        sa.Column('date_end_of_request', sa.Date(), nullable=True),
        sa.Column('count_of_articles_received_from_request', sa.Integer(), nullable=False),
        sa.Column('count_of_articles_saved_to_db_from_request', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('is_from_automation', sa.Boolean(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['news_article_aggregator_source_id'], ['news_article_aggregator_sources.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'articles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('published_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('publication_name', sa.String(), nullable=False),
        sa.Column('author', sa.String(), nullable=True),
        sa.Column('url_to_image', sa.String(), nullable=True),
        sa.Column('entity_who_found_article_id', sa.Integer(), nullable=True),
        sa.Column('news_api_request_id', sa.Integer(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['entity_who_found_article_id'], ['entity_who_found_articles.id']),
        sa.ForeignKeyConstraint(['news_api_request_id'], ['news_api_requests.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('url'),
    )
    op.create_table(
        'article_contents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['article_id'], ['articles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'states',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('abbreviation', sa.String(length=2), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'artificial_intelligences',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    # No unique constraint on (article_id, state_id): duplicates are detected at review time
    op.create_table(
        'ai_state_proposals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('state_id', sa.Integer(), nullable=True),
        sa.Column('prompt_id', sa.Integer(), nullable=True),
        sa.Column('is_human_approved', sa.Boolean(), nullable=True),
        sa.Column('is_determined_to_be_error', sa.Boolean(), nullable=False),
        sa.Column('occurred_in_the_us', sa.Boolean(), nullable=True),
        sa.Column('reasoning', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['article_id'], ['articles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['state_id'], ['states.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ai_state_proposals_article_id', 'ai_state_proposals', ['article_id'])
    op.create_table(
        'article_state_contracts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('state_id', sa.Integer(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['article_id'], ['articles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['state_id'], ['states.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('article_id', 'state_id', name='uq_article_state_contract'),
    )
    op.create_table(
        'ai_article_approvals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('artificial_intelligence_id', sa.Integer(), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        *_report_text_columns(),
        _created_at(),
        sa.ForeignKeyConstraint(['article_id'], ['articles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['artificial_intelligence_id'], ['artificial_intelligences.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ai_article_approvals_article_id', 'ai_article_approvals', ['article_id'])
    op.create_table(
        'article_approvals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('artificial_intelligence_id', sa.Integer(), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        *_report_text_columns(),
        _created_at(),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['article_id'], ['articles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['artificial_intelligence_id'], ['artificial_intelligences.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('article_id', name='uq_article_approval_article'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('article_approvals')
    op.drop_index('ix_ai_article_approvals_article_id', table_name='ai_article_approvals')
    op.drop_table('ai_article_approvals')
    op.drop_table('article_state_contracts')
    op.drop_index('ix_ai_state_proposals_article_id', table_name='ai_state_proposals')
    op.drop_table('ai_state_proposals')
    op.drop_table('artificial_intelligences')
    op.drop_table('states')
    op.drop_table('article_contents')
    op.drop_table('articles')
    op.drop_table('news_api_requests')
    op.drop_table('entity_who_found_articles')
    op.drop_table('news_article_aggregator_sources')
    op.drop_table('users')
