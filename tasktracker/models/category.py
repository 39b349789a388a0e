"""Category list data model (external taxonomy used by time logs)."""

from typing import List, Optional
from pydantic import BaseModel, Field


class CategoryItem(BaseModel):
    """A single category inside a list."""
    title: str
    slug: str = ""


class CategoryList(BaseModel):
    """A named list of categories, addressed by slug."""

    id: Optional[str] = Field(None, description="Unique category list identifier")
    title: str = Field(..., min_length=1, description="Display title")
    slug: str = Field("", description="URL-friendly unique slug (derived from title when empty)")
    categories: List[CategoryItem] = Field(default_factory=list)
