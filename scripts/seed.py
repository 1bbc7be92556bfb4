"""Database seeder: recreates the schema and writes sample articles."""
import asyncio
import argparse
import logging
import time

from article_store.config import settings
from article_store.database import engine, async_session, session_scope, Base
from article_store.factories import build_section, create_article
from article_store.services import article_service


async def seed(num_articles: int, sections_per_article: int):
    print(f"Seeding: {num_articles} articles, {sections_per_article or 'default'} section(s) each")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with session_scope(async_session) as session:
        for i in range(num_articles):
            sections = [
                build_section(heading=f"Part {n + 1}", body=f"Body of part {n + 1} of article {i}.")
                for n in range(sections_per_article)
            ]
            await create_article(session, title=f"Article {i}", sections=sections)

        total_articles = await article_service.count_articles(session)
        total_sections = await article_service.count_sections(session)

    await engine.dispose()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Articles: {total_articles}")
    print(f"  Sections: {total_sections}")


def main():
    parser = argparse.ArgumentParser(description="Seed the article database")
    parser.add_argument("--articles", type=int, default=100, help="Number of articles to create")
    parser.add_argument(
        "--sections",
        type=int,
        default=0,
        help="Explicit sections per article (0 relies on the default section)",
    )
    args = parser.parse_args()
    logging.basicConfig(level=settings.LOG_LEVEL)
    asyncio.run(seed(args.articles, args.sections))


if __name__ == "__main__":
    main()
