"""
Construction harness for Articles and Sections.

``build_*`` helpers assemble objects in memory and never write anything;
``create_*`` helpers build and then persist through the article service.
When a title is not given, ``settings.DEFAULT_ARTICLE_TITLE`` is used.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from article_store.config import settings
from article_store.exceptions import ArticleStateError
from article_store.models import Article, ArticleState, Section
from article_store.schemas import ArticleRequest
from article_store.services import article_service


def _title_or_default(title: str | None) -> str:
    return settings.DEFAULT_ARTICLE_TITLE if title is None else title


def build_article(title: str | None = None, sections: list[Section] | None = None) -> Article:
    request = ArticleRequest(title=_title_or_default(title), sections=sections)
    return article_service.materialize(request)


async def create_article(
    db: AsyncSession,
    title: str | None = None,
    sections: list[Section] | None = None,
) -> Article:
    return await article_service.persist(db, build_article(title, sections))


def build_section(article: Article | None = None, **attrs) -> Section:
    """
    Build an unsaved Section.

    Without *article*, a bare unsaved Article holding only this section is
    supplied as its owner.  Handing the section to ``build_article`` later
    moves it to the new Article, and the bare one is never saved.
    """
    if article is None:
        article = Article(title=settings.DEFAULT_ARTICLE_TITLE)
    return Section(article, **attrs)


async def create_section(db: AsyncSession, article: Article | None = None, **attrs) -> Section:
    """
    Build a Section and persist it together with its owning Article.

    The owner must be unsaved: the whole Article is written in one flush.
    A default section it was built with is replaced by the new one.
    """
    if article is not None and article.state is ArticleState.PERSISTED:
        raise ArticleStateError("Sections can only be created along with an unsaved Article")

    section = build_section(article, **attrs)
    await article_service.persist(db, article_service.ensure_valid(section.article))
    return section
