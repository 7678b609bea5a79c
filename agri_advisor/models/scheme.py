"""Government scheme model for the schemes directory panel."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Scheme(BaseModel):
    """A government support scheme listed in the directory."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: str
    name: str
    description: str = Field(alias="desc")
    link: str
    tags: tuple[str, ...] = ()
