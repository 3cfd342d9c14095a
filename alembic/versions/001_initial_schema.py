"""Initial citation engine schema.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create initial schema."""
    # Create blog_articles table
    op.create_table(
        "blog_articles",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=True),
        sa.Column("headline", sa.Text(), nullable=False),
        sa.Column("detailed_content", sa.Text(), nullable=False),
        sa.Column("language", sa.String(length=10), nullable=False),
        sa.Column("funnel_stage", sa.String(length=10), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("external_citations", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("date_modified", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index(op.f("ix_blog_articles_status"), "blog_articles", ["status"], unique=False)

    # Create article_revisions table
    op.create_table(
        "article_revisions",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("article_id", sa.UUID(), nullable=False),
        sa.Column("revision_type", sa.String(length=50), nullable=False),
        sa.Column("previous_content", sa.Text(), nullable=False),
        sa.Column("previous_citations", sa.JSON(), nullable=False),
        sa.Column("change_reason", sa.Text(), nullable=True),
        sa.Column("replaced_url", sa.Text(), nullable=True),
        sa.Column("replacement_url", sa.Text(), nullable=True),
        sa.Column("can_rollback", sa.Boolean(), nullable=False),
        sa.Column("rollback_expires_at", sa.DateTime(), nullable=True),
        sa.Column("rolled_back_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["article_id"], ["blog_articles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_article_revisions_article_id"),
        "article_revisions",
        ["article_id"],
        unique=False,
    )

    # Create citation_usage_tracking table (append-only ledger)
    op.create_table(
        "citation_usage_tracking",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("article_id", sa.UUID(), nullable=False),
        sa.Column("citation_url", sa.Text(), nullable=False),
        sa.Column("citation_domain", sa.String(length=255), nullable=False),
        sa.Column("citation_source", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("first_added_at", sa.DateTime(), nullable=False),
        sa.Column("deactivated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["article_id"], ["blog_articles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("article_id", "citation_domain", "is_active"):
        op.create_index(
            op.f(f"ix_citation_usage_tracking_{column}"),
            "citation_usage_tracking",
            [column],
            unique=False,
        )

    # Create citation_compliance_alerts table
    op.create_table(
        "citation_compliance_alerts",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("alert_type", sa.String(length=30), nullable=False),
        sa.Column("severity", sa.String(length=20), nullable=False),
        sa.Column("citation_url", sa.Text(), nullable=False),
        sa.Column("article_id", sa.UUID(), nullable=False),
        sa.Column("article_title", sa.Text(), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("detected_at", sa.DateTime(), nullable=False),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["article_id"], ["blog_articles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("alert_type", "article_id", "resolved_at"):
        op.create_index(
            op.f(f"ix_citation_compliance_alerts_{column}"),
            "citation_compliance_alerts",
            [column],
            unique=False,
        )

    # Create approved_domains table
    op.create_table(
        "approved_domains",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("tier", sa.String(length=2), nullable=False),
        sa.Column("trust_score", sa.Integer(), nullable=False),
        sa.Column("is_allowed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_approved_domains_domain"), "approved_domains", ["domain"], unique=True)
    op.create_index(
        op.f("ix_approved_domains_category"), "approved_domains", ["category"], unique=False
    )

    # Create competitor_domains table
    op.create_table(
        "competitor_domains",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_competitor_domains_domain"), "competitor_domains", ["domain"], unique=True
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index(op.f("ix_competitor_domains_domain"), table_name="competitor_domains")
    op.drop_table("competitor_domains")

    op.drop_index(op.f("ix_approved_domains_category"), table_name="approved_domains")
    op.drop_index(op.f("ix_approved_domains_domain"), table_name="approved_domains")
    op.drop_table("approved_domains")

    for column in ("resolved_at", "article_id", "alert_type"):
        op.drop_index(
            op.f(f"ix_citation_compliance_alerts_{column}"),
            table_name="citation_compliance_alerts",
        )
    op.drop_table("citation_compliance_alerts")

    for column in ("is_active", "citation_domain", "article_id"):
        op.drop_index(
            op.f(f"ix_citation_usage_tracking_{column}"), table_name="citation_usage_tracking"
        )
    op.drop_table("citation_usage_tracking")

    op.drop_index(op.f("ix_article_revisions_article_id"), table_name="article_revisions")
    op.drop_table("article_revisions")

    op.drop_index(op.f("ix_blog_articles_status"), table_name="blog_articles")
    op.drop_table("blog_articles")
