"""Wiki content schema definitions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WikiContent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    category: str
    created_by: Optional[int] = None
    last_updated: str


class NewWikiContent(BaseModel):
    title: str = Field(min_length=1)
    content: str
    category: str = Field(min_length=1)
    created_by: Optional[int] = None


class WikiContentRequest(BaseModel):
    """Body of ``POST /api/wiki``; the creator is taken from the session."""

    title: str = Field(min_length=1)
    content: str
    category: str = Field(min_length=1)


class WikiContentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
