"""create movies

Revision ID: 001
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'movies',
        sa.Column('source_id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('imdb_id', sa.String(length=20), nullable=True),
        sa.Column('tmdb_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=500), nullable=True),
        sa.Column('original_title', sa.String(length=500), nullable=True),
        sa.Column('year', sa.String(length=20), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('enriched_description', sa.Text(), nullable=True),
        sa.Column('origin', sa.String(length=300), nullable=True),
        sa.Column('origin_countries', ARRAY(sa.String()), nullable=False, server_default='{}'),
        sa.Column('origin_country_codes', ARRAY(sa.String()), nullable=False, server_default='{}'),
        sa.Column('genres', ARRAY(sa.String()), nullable=False, server_default='{}'),
        sa.Column('directors', ARRAY(sa.String()), nullable=False, server_default='{}'),
        sa.Column('cast', ARRAY(sa.String()), nullable=False, server_default='{}'),
        sa.Column('localized_titles', JSONB(), nullable=False, server_default='{}'),
        sa.Column('poster_url', sa.String(length=1000), nullable=True),
        sa.Column('source_poster_url', sa.String(length=1000), nullable=True),
        sa.Column('backdrop_url', sa.String(length=1000), nullable=True),
        sa.Column('trailer_url', sa.String(length=1000), nullable=True),
        sa.Column('vote_average', sa.Float(), nullable=True),
        sa.Column('vote_count', sa.Integer(), nullable=True),
        sa.Column('popularity', sa.Float(), nullable=True),
        sa.Column('imdb_rating', sa.Float(), nullable=True),
        sa.Column('imdb_rating_count', sa.Integer(), nullable=True),
        sa.Column('original_language', sa.String(length=10), nullable=True),
        sa.Column('adult', sa.Boolean(), nullable=True),
        sa.Column('release_date', sa.Date(), nullable=True),
        sa.Column('stored_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('source_id')
    )
    op.create_index(op.f('ix_movies_imdb_id'), 'movies', ['imdb_id'], unique=False)
    op.create_index(op.f('ix_movies_tmdb_id'), 'movies', ['tmdb_id'], unique=False)
    op.create_index(op.f('ix_movies_title'), 'movies', ['title'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_movies_title'), table_name='movies')
    op.drop_index(op.f('ix_movies_tmdb_id'), table_name='movies')
    op.drop_index(op.f('ix_movies_imdb_id'), table_name='movies')
    op.drop_table('movies')
