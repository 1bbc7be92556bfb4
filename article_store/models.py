from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
    func,
    inspect,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from article_store.database import Base


class ArticleState(str, enum.Enum):
    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"
    PERSISTED = "persisted"


class Rule(str, enum.Enum):
    """Names of the validation rules an Article can break."""

    TITLE_REQUIRED = "title_required"
    SECTIONS_REQUIRED = "sections_required"


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------
class Article(Base):
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Aggregate root: sections live and die with the article.  lazy="noload"
    # keeps reads explicit; services use selectinload when they need them.
    sections: Mapped[List["Section"]] = relationship(
        "Section",
        back_populates="article",
        order_by="Section.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="noload",
    )

    # Not mapped.  Cleared by the attribute listeners at the bottom of the module.
    _validated = False
    # Not mapped.  The section the builder synthesized, if any.
    default_section = None

    @property
    def state(self) -> ArticleState:
        if inspect(self).has_identity:
            return ArticleState.PERSISTED
        if self._validated:
            return ArticleState.VALIDATED
        return ArticleState.UNVALIDATED

    def mark_validated(self) -> None:
        self._validated = True

    def __repr__(self) -> str:
        return f"<Article id={self.id!r} title={self.title!r}>"


# ---------------------------------------------------------------------------
# Section
# ---------------------------------------------------------------------------
class Section(Base):
    __tablename__ = "sections"

    __table_args__ = (
        UniqueConstraint("article_id", "position", name="uq_sections_article_id_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    heading: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Foreign key
    article_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Non-owning reference to the aggregate root
    article: Mapped["Article"] = relationship(
        "Article", back_populates="sections", lazy="noload"
    )

    def __init__(self, article: Article, **kwargs) -> None:
        """
        Build a Section owned by *article*.

        Assigning the owner also appends the section to
        ``article.sections`` through the relationship's back-population.
        """
        if article is None:
            raise ValueError("A Section must belong to an Article")
        super().__init__(article=article, **kwargs)

    def __repr__(self) -> str:
        return f"<Section id={self.id!r} article_id={self.article_id!r} position={self.position!r}>"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def validate(article: Article) -> frozenset[Rule]:
    """
    Return every rule *article* breaks; an empty set means it is valid.

    All rules are evaluated so callers see each problem at once.
    """
    broken: set[Rule] = set()
    if not (article.title or "").strip():
        broken.add(Rule.TITLE_REQUIRED)
    if not article.sections:
        broken.add(Rule.SECTIONS_REQUIRED)
    return frozenset(broken)


@event.listens_for(Article.title, "set")
def _title_changed(target, value, oldvalue, initiator):
    target._validated = False


@event.listens_for(Article.sections, "append")
@event.listens_for(Article.sections, "remove")
def _sections_changed(target, value, initiator):
    target._validated = False
