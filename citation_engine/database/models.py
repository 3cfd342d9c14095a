"""Database models for the citation engine."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class BlogArticle(Base):
    """Article fields the engine reads and the citation array it rewrites."""

    __tablename__ = "blog_articles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    headline: Mapped[str] = mapped_column(Text, nullable=False)
    detailed_content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    language: Mapped[str] = mapped_column(String(10), nullable=False, default="en")
    funnel_stage: Mapped[str | None] = mapped_column(String(10), nullable=True)  # TOFU/MOFU/BOFU
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft", index=True
    )  # 'draft', 'published', 'archived'
    external_citations: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    date_modified: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class ArticleRevision(Base):
    """Backup written before every destructive edit of an article."""

    __tablename__ = "article_revisions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("blog_articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    revision_type: Mapped[str] = mapped_column(
        String(50), nullable=False
    )  # 'citation_attach', 'citation_replacement', 'banned_citation_removal'
    previous_content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    previous_citations: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    change_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    replaced_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    replacement_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    can_rollback: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    rollback_expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    rolled_back_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class CitationUsage(Base):
    """Append-only ledger of citations attached to articles.

    Counts are derived by aggregation at read time; rows are never updated
    except to mark a removed citation inactive.
    """

    __tablename__ = "citation_usage_tracking"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("blog_articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    citation_url: Mapped[str] = mapped_column(Text, nullable=False)
    citation_domain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    citation_source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    first_added_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    deactivated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class ComplianceAlertRecord(Base):
    """Compliance violation detected by a scan; at most one unresolved per
    (article, citation URL, alert type)."""

    __tablename__ = "citation_compliance_alerts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    alert_type: Mapped[str] = mapped_column(
        String(30), nullable=False, index=True
    )  # 'competitor', 'non_approved', 'broken_link', 'missing_gov_source'
    severity: Mapped[str] = mapped_column(String(20), nullable=False)  # 'critical', 'warning', 'info'
    citation_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("blog_articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    article_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    detected_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)


class ApprovedDomain(Base):
    """Persisted allow-list entry."""

    __tablename__ = "approved_domains"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    domain: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    tier: Mapped[str] = mapped_column(String(2), nullable=False)
    trust_score: Mapped[int] = mapped_column(Integer, nullable=False)
    is_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class CompetitorDomain(Base):
    """Persisted competitor blacklist entry."""

    __tablename__ = "competitor_domains"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    domain: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
