from pydantic import BaseModel, ConfigDict, Field

from article_store.models import Section


# --- Article ---

class ArticleRequest(BaseModel):
    """
    Input to the aggregate builder.

    ``sections`` holds pre-built Section instances.  ``None`` and ``[]``
    both mean "none supplied" and lead to one default Section.
    """
    title: str | None = Field(None, max_length=300)
    sections: list[Section] | None = None
    model_config = ConfigDict(arbitrary_types_allowed=True)
