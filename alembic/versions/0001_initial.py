"""keywords, search engine results and findings

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_id = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade():
    op.create_table(
        "wi_keywords",
        sa.Column("keywordid", _id, primary_key=True, autoincrement=True),
        sa.Column("keyword", sa.String(512), nullable=False),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("language", sa.String(16), nullable=True),
    )
    op.create_index("ix_wi_keywords_category", "wi_keywords", ["category"])
    op.create_index("ix_wi_keywords_language", "wi_keywords", ["language"])

    op.create_table(
        "wi_search_engine_result",
        sa.Column("id", _id, primary_key=True, autoincrement=True),
        sa.Column("domain", sa.String(255), nullable=False),
        sa.Column("url", sa.String(768), nullable=False),
        sa.Column("last_keyword", sa.String(512), nullable=False),
        sa.Column("last_keywordid", sa.BigInteger(), nullable=False),
        sa.Column("last_title", sa.Text(), nullable=True),
        sa.Column("last_addendum", sa.Text(), nullable=True),
        sa.Column("last_position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("index_date", sa.String(32), nullable=True),
        sa.Column("ranking", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("search_engine", sa.String(64), nullable=False),
        sa.Column("inserted", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("domain", "url", "last_keyword", "search_engine", name="uq_result_observation"),
    )
    op.create_index("ix_wi_search_engine_result_domain", "wi_search_engine_result", ["domain"])
    op.create_index("ix_wi_search_engine_result_search_engine", "wi_search_engine_result", ["search_engine"])
    op.create_index("ix_wi_search_engine_result_inserted", "wi_search_engine_result", ["inserted"])

    op.create_table(
        "wi_findings",
        sa.Column("id", _id, primary_key=True, autoincrement=True),
        sa.Column("domain", sa.String(255), nullable=False, unique=True),
        sa.Column("keyword_id", sa.BigInteger(), nullable=False),
        sa.Column("inserted", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade():
    op.drop_table("wi_findings")
    op.drop_table("wi_search_engine_result")
    op.drop_table("wi_keywords")
