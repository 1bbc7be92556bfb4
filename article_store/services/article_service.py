"""
Article service — the aggregate builder for Article and its Sections.

Design notes
------------
- ``materialize`` assembles the aggregate in memory and never touches a
  session, so a request that fails validation costs no I/O.
- The default-Section policy is strict: any explicit non-empty list of
  Sections suppresses defaulting entirely; an empty or missing list
  yields exactly one synthesized Section.
- ``persist`` only accepts a VALIDATED Article.  Once flushed the Article
  is PERSISTED, so a second call is rejected instead of writing rows
  twice.
- Service functions flush but do not commit.  ``persist`` flushes inside
  a SAVEPOINT, so a failed write undoes only that aggregate's Article and
  Section rows; earlier work on the same session is left intact.
"""
import logging

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from article_store.exceptions import ArticleStateError, ValidationError
from article_store.models import Article, ArticleState, Section, validate
from article_store.schemas import ArticleRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# In-memory assembly
# ---------------------------------------------------------------------------

def _drop_default_section(article: Article) -> None:
    """Remove the synthesized section once an explicit one has joined it."""
    default = article.default_section
    if default is None or len(article.sections) < 2:
        return
    if any(section is default for section in article.sections):
        article.sections.remove(default)
        logger.debug("Dropped default section of %r in favour of explicit ones", article.title)
    article.default_section = None


def ensure_valid(article: Article) -> Article:
    """
    Renumber *article*'s sections, validate it and mark it VALIDATED.

    A synthesized default section is discarded first if explicit sections
    were added alongside it.  Raises ``ValidationError`` carrying every
    broken rule.
    """
    _drop_default_section(article)
    article.sections.reorder()
    broken = validate(article)
    if broken:
        logger.warning(
            "Article %r failed validation: %s",
            article.title,
            ", ".join(sorted(rule.value for rule in broken)),
        )
        raise ValidationError(broken)
    article.mark_validated()
    return article


def materialize(request: ArticleRequest) -> Article:
    """
    Build an unsaved, validated Article from *request*.

    Explicit sections are attached as given and in order; otherwise a
    single default Section is created.  Sections that already have a
    database identity are rejected because they cannot change owner
    as part of a create, and so is a section listed more than once.
    """
    article = Article(title=request.title)

    if request.sections:
        if len({id(section) for section in request.sections}) != len(request.sections):
            raise ValueError("The same Section was supplied more than once")
        for section in request.sections:
            if inspect(section).has_identity:
                raise ArticleStateError(
                    f"Section id={section.id} is already persisted and cannot be attached"
                )
        article.sections.extend(request.sections)
    else:
        article.default_section = Section(article)
        logger.debug("No sections supplied for %r; created a default section", request.title)

    return ensure_valid(article)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

async def persist(db: AsyncSession, article: Article) -> Article:
    """
    Write *article* and every attached Section within the session's
    transaction, assigning their ids.

    Raises ``ArticleStateError`` before any I/O unless the article is
    VALIDATED.  The write runs inside a SAVEPOINT: on a database error only
    this aggregate's rows are undone, other work already flushed on *db*
    is kept, and the error is re-raised unchanged.
    """
    if article.state is not ArticleState.VALIDATED:
        raise ArticleStateError(
            f"Only validated articles can be persisted (state={article.state.value})"
        )

    try:
        async with db.begin_nested():
            db.add(article)
            await db.flush()
    except SQLAlchemyError:
        logger.warning("Write of article %r failed; rolled back to savepoint", article.title)
        raise

    logger.info(
        "Persisted article id=%s with %d section(s)", article.id, len(article.sections)
    )
    return article


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_article(db: AsyncSession, article_id: int) -> Article | None:
    """
    Return the Article for *article_id* with its sections loaded in
    position order, or None when it does not exist.
    """
    q = (
        select(Article)
        .where(Article.id == article_id)
        .options(selectinload(Article.sections))
    )
    result = await db.execute(q)
    return result.scalar_one_or_none()


async def count_articles(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(Article))
    return result.scalar_one()


async def count_sections(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(Section))
    return result.scalar_one()
