from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field


class SearchMatch(BaseModel):
    """The term that matched the query; may be a label, alias or description."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    language: str | None = None
    text: str


class SearchEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    label: str | None = None
    description: str | None = None
    match: SearchMatch | None = None


class SearchEntitiesResponse(BaseModel):
    """Subset of the ``wbsearchentities`` payload consumed by autocomplete."""

    model_config = ConfigDict(extra="ignore")

    search: list[SearchEntity] = Field(default_factory=list)

    def matched_texts(self) -> Iterator[str]:
        # Entities without a match carry nothing to complete.
        for entity in self.search:
            if entity.match is not None and entity.match.text:
                yield entity.match.text
