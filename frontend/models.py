"""
frontend/models.py

Pydantic models shared by the search page core.

Field names are snake_case in Python; camelCase aliases match what the
account service and the watch catalog API send and expect.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


ResultRecord = Dict[str, Any]


# ============================================================================
# Tiers
# ============================================================================

class UserTier(BaseModel):
    """Subscription tier definition as published by the account service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: Union[int, str]
    name: Optional[str] = None
    advanced_search: Optional[bool] = Field(None, alias="advancedSearch")
    search_history_limit: Optional[int] = Field(None, alias="searchHistoryLimit")
    autocomplete_reference: Optional[bool] = Field(None, alias="autocompleteReference")


# ============================================================================
# Filters
# ============================================================================

class FilterState(BaseModel):
    """
    The user's search criteria.

    Every field is kept exactly as typed (string); coercion happens when a
    query is built. Instances are frozen: an update produces a new snapshot.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    reference: str = ""
    brand: str = ""
    condition: str = ""
    color: str = ""
    material: str = ""
    year: str = ""
    price_min: str = Field("", alias="priceMin")
    price_max: str = Field("", alias="priceMax")

    @field_validator("*", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        """Store missing values as "" and numbers as their text."""
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    def has_any_value(self) -> bool:
        return any(getattr(self, name) for name in FILTER_FIELDS)

    def with_field(self, name: str, value: Any) -> "FilterState":
        """Return a copy with one field replaced (name or alias)."""
        field_name = resolve_filter_key(name)
        data = self.model_dump()
        data[field_name] = value
        return FilterState.model_validate(data)

    def to_storage(self) -> Dict[str, str]:
        """camelCase dict, the shape history entries are persisted in."""
        return self.model_dump(by_alias=True)


FILTER_FIELDS = tuple(FilterState.model_fields.keys())

_FILTER_ALIASES = {
    (info.alias or name): name for name, info in FilterState.model_fields.items()
}


class UnknownFilterError(ValueError):
    """Raised when a field update names a key that is not a filter."""
    pass


def resolve_filter_key(name: str) -> str:
    """Map a filter key (python name or camelCase alias) to the field name."""
    if name in FILTER_FIELDS:
        return name
    if name in _FILTER_ALIASES:
        return _FILTER_ALIASES[name]
    raise UnknownFilterError(f"Unknown filter field: {name!r}")


# ============================================================================
# Queries
# ============================================================================

class SearchMode(str, Enum):
    BASIC = "basic"
    ADVANCED = "advanced"


class BasicQuery(BaseModel):
    """Lookup by exact/partial reference code."""

    model_config = ConfigDict(frozen=True)

    mode: SearchMode = SearchMode.BASIC
    reference: str


class AdvancedQuery(BaseModel):
    """Multi-field filtered lookup; numeric fields already coerced."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mode: SearchMode = SearchMode.ADVANCED
    reference_code: str = Field("", alias="referenceCode")
    color_dial: str = Field("", alias="colorDial")
    year: Optional[int] = None
    condition: str = ""
    min_price: Optional[float] = Field(None, alias="minPrice")
    max_price: Optional[float] = Field(None, alias="maxPrice")

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for the advanced search endpoint."""
        return self.model_dump(by_alias=True, exclude={"mode"})


SearchQuery = Union[BasicQuery, AdvancedQuery]


# ============================================================================
# Outcomes and presentation
# ============================================================================

class SearchState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


class SearchOutcome(BaseModel):
    """
    Result of one dispatched search.

    The presentation layer shows ERROR and EMPTY the same way (no results);
    the distinction is kept here for diagnostics and tests.
    """

    status: OutcomeStatus
    mode: SearchMode
    results: List[ResultRecord] = Field(default_factory=list)
    error: Optional[str] = None
    # Steps this dispatch went through, e.g. RUNNING -> SUCCEEDED -> IDLE
    transitions: List[SearchState] = Field(default_factory=list)

    @classmethod
    def from_results(cls, mode: SearchMode, results: Optional[List[ResultRecord]]) -> "SearchOutcome":
        results = list(results or [])
        status = OutcomeStatus.SUCCESS if results else OutcomeStatus.EMPTY
        return cls(status=status, mode=mode, results=results)

    @classmethod
    def failure(cls, mode: SearchMode, error: str) -> "SearchOutcome":
        return cls(status=OutcomeStatus.ERROR, mode=mode, results=[], error=error)

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.ERROR


class HistoryEntry(BaseModel):
    """
    A past search: the filters as submitted, the mode it ran in, and when.

    Entries written before the mode was stored load with mode=None.
    """

    model_config = ConfigDict(frozen=True)

    filters: FilterState
    mode: Optional[SearchMode] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_storage(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"filters": self.filters.to_storage(), "timestamp": self.timestamp.isoformat()}
        if self.mode is not None:
            data["mode"] = self.mode.value
        return data


class PresentationState(BaseModel):
    visible: bool = False
    results: List[ResultRecord] = Field(default_factory=list)
