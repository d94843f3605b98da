"""Article schema - content scanned for verifiable facts."""

from typing import Literal

from pydantic import BaseModel, Field


class Article(BaseModel):
    """A published blog post or information-hub article."""

    slug: str = Field(..., description="Article slug, used to key extracted facts")
    article_type: Literal["blog", "information"] = "blog"
    content: str = Field(
        default="",
        description="English markdown body",
    )
    published: bool = True
