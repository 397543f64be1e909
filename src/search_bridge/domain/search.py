"""Domain models for search and reindex.

Following the same rules as the rest of the domain layer:
- Value Objects are immutable (frozen=True)
- No infrastructure dependencies
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from search_bridge.search.fields import VALID_PARAMS


class SearchParams(BaseModel):
    """Caller-supplied search request, restricted to the recognised keys.

    Unset values fall back to the index defaults when the select is built.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    start: int | None = Field(default=None, ge=0)
    rows: int | None = Field(default=None, ge=0)
    sort: str | None = None
    q: str | None = None
    type: str | None = None

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any]) -> SearchParams:
        """Keep only whitelisted keys; anything else is dropped silently."""
        allowed = {key: params[key] for key in VALID_PARAMS if key in params}
        return cls.model_validate(allowed)

    def paging(self) -> dict[str, Any]:
        """Paging/sort values the caller actually set."""
        return self.model_dump(include={"start", "rows", "sort"}, exclude_none=True)


class SelectResultSet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    docs: list[dict[str, Any]] = Field(default_factory=list)
    start: int = 0
    num_found: int = Field(default=0, alias="numFound")


class SelectResponse(BaseModel):
    """Decoded index select response (``wt=json``)."""

    model_config = ConfigDict(populate_by_name=True)

    response_header: dict[str, Any] = Field(default_factory=dict, alias="responseHeader")
    response: SelectResultSet


class PageResult(BaseModel):
    """One hydrated page of search results."""

    model_config = ConfigDict(frozen=True)

    objects: list[dict[str, Any]] = Field(default_factory=list)
    start: int = 0
    total: int = 0
    # Debug metadata only; not part of what callers render
    response_header: dict[str, Any] = Field(default_factory=dict)

    def to_display(self) -> dict[str, Any]:
        return {"rows": list(self.objects), "start": self.start, "total": self.total}


class ReindexOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class ReindexReport(BaseModel):
    """Per-kind outcome of a full index rebuild, in the order kinds were attempted."""

    results: dict[str, ReindexOutcome] = Field(default_factory=dict)

    def record(self, kind: str, succeeded: bool) -> None:
        self.results[kind] = ReindexOutcome.SUCCESS if succeeded else ReindexOutcome.FAILED

    def to_dict(self) -> dict[str, str]:
        return {kind: outcome.value for kind, outcome in self.results.items()}

    def __getitem__(self, kind: str) -> ReindexOutcome:
        return self.results[kind]

    def __contains__(self, kind: object) -> bool:
        return kind in self.results

    def __len__(self) -> int:
        return len(self.results)
