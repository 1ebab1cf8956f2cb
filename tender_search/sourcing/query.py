"""Search query accepted by the aggregation engine."""

from __future__ import annotations

from datetime import date
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from tender_search.core.exceptions import QueryValidationError
from tender_search.settings import settings
from tender_search.sourcing.base import RecordType
from tender_search.sourcing.cpv import normalize_cpv_codes


class SearchQuery(BaseModel):
    """Immutable search request: free text plus optional filters and paging."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    query: Optional[str] = Field(None, description="Free-text query")
    cpv_codes: List[str] = Field(default_factory=list, description="CPV classification codes")
    countries: List[str] = Field(default_factory=list, description="Country filters")
    regions: List[str] = Field(default_factory=list, description="Region filters")
    min_value: Optional[float] = Field(None, ge=0, description="Minimum estimated value")
    max_value: Optional[float] = Field(None, ge=0, description="Maximum estimated value")
    deadline_from: Optional[date] = Field(None, description="Deadline window start")
    deadline_to: Optional[date] = Field(None, description="Deadline window end")
    types: List[RecordType] = Field(default_factory=list, description="Requested record types")
    sources: Optional[List[str]] = Field(
        None, description="Source ids to query; None means all enabled sources"
    )
    limit: int = Field(default_factory=lambda: settings.default_page_size, ge=1)
    offset: int = Field(0, ge=0)

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("cpv_codes", mode="before")
    @classmethod
    def _normalize_cpv(cls, value: Optional[Sequence[str]]) -> List[str]:
        if isinstance(value, str):
            value = [part for part in value.split(",")]
        return normalize_cpv_codes(value)

    @field_validator("countries", "regions", mode="before")
    @classmethod
    def _clean_list(cls, value: Optional[Sequence[str]]) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(item).strip() for item in value if str(item).strip()]

    @field_validator("sources", mode="before")
    @classmethod
    def _normalize_sources(cls, value: Optional[Sequence[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        result: List[str] = []
        for item in value:
            source_id = str(item).strip().lower()
            if source_id and source_id not in result:
                result.append(source_id)
        return result

    @model_validator(mode="after")
    def _check_ranges(self) -> "SearchQuery":
        violations = invariant_violations(self)
        if violations:
            field, message = violations[0]
            raise PydanticCustomError("query_invariant", message, {"field": field})
        return self

    def to_payload(self) -> dict:
        """JSON-serializable form, used to persist saved searches."""
        return self.model_dump(mode="json")


def invariant_violations(query: SearchQuery) -> List[Tuple[str, str]]:
    """List (field, message) pairs for every violated invariant."""
    violations = []
    if (
        query.min_value is not None
        and query.max_value is not None
        and query.min_value > query.max_value
    ):
        violations.append(
            ("min_value", f"min_value ({query.min_value}) exceeds max_value ({query.max_value})")
        )
    if (
        query.deadline_from is not None
        and query.deadline_to is not None
        and query.deadline_from > query.deadline_to
    ):
        violations.append(
            (
                "deadline_from",
                f"deadline_from ({query.deadline_from}) is after deadline_to ({query.deadline_to})",
            )
        )
    if query.limit > settings.max_page_size:
        violations.append(
            ("limit", f"limit ({query.limit}) exceeds max_page_size ({settings.max_page_size})")
        )
    return violations


def parse_query(data: Union[SearchQuery, Mapping[str, Any], None]) -> SearchQuery:
    """Validate caller input into a SearchQuery.

    Args:
        data: A SearchQuery or a mapping of its fields (None = empty query)

    Returns:
        Validated SearchQuery

    Raises:
        QueryValidationError: If the input violates a query invariant
    """
    if isinstance(data, SearchQuery):
        violations = invariant_violations(data)
        if violations:
            field, message = violations[0]
            raise QueryValidationError(message, field=field)
        return data

    try:
        return SearchQuery.model_validate(dict(data or {}))
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        field = field or (first.get("ctx") or {}).get("field")
        raise QueryValidationError(
            first.get("msg", "Invalid search query"),
            field=field,
            details={"errors": e.errors(include_url=False)},
        ) from e
