from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from greenhub.core.dataset import DatasetSchema

ANY = "any"
DEFAULT_PAGE_SIZE = 10


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: object) -> SortDirection:
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.ASC


@dataclass(frozen=True)
class FilterState:
    """
    Complete, serializable description of an active query.

    Fields:

    - facets: attribute -> selected value; ANY (or a missing/empty entry)
      means the attribute is unconstrained
    - free_text: case-insensitive substring matched against searchable fields
    - sort_key: field to sort by, or None to keep dataset order
    - sort_direction: SortDirection.ASC or SortDirection.DESC
    - page_index: zero-based page
    - page_size: records per page (>= 1)

    The state is immutable. The with_* helpers return a new state, and every
    change other than with_page() resets page_index to 0.
    """

    facets: Mapping[str, str] = field(default_factory=dict)
    free_text: str = ""
    sort_key: Optional[str] = None
    sort_direction: SortDirection = SortDirection.ASC
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        object.__setattr__(self, "facets", dict(self.facets))
        object.__setattr__(self, "sort_direction", SortDirection.parse(self.sort_direction))
        object.__setattr__(self, "page_index", max(int(self.page_index), 0))
        object.__setattr__(self, "page_size", max(int(self.page_size), 1))

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------
    @property
    def active_facets(self) -> Dict[str, str]:
        return {k: v for k, v in self.facets.items() if is_constraint(v)}

    @property
    def is_cleared(self) -> bool:
        return not self.active_facets and not self.free_text.strip()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def with_facet(self, attribute: str, value: Optional[str]) -> FilterState:
        facets = dict(self.facets)
        facets[attribute] = value if is_constraint(value) else ANY
        return replace(self, facets=facets, page_index=0)

    def with_free_text(self, text: Optional[str]) -> FilterState:
        return replace(self, free_text=text or "", page_index=0)

    def with_sort(self, sort_key: Optional[str], direction: SortDirection | str = SortDirection.ASC) -> FilterState:
        return replace(self, sort_key=sort_key or None, sort_direction=SortDirection.parse(direction), page_index=0)

    def with_page_size(self, page_size: int) -> FilterState:
        return replace(self, page_size=page_size, page_index=0)

    def with_page(self, page_index: int) -> FilterState:
        return replace(self, page_index=page_index)

    def cleared(self) -> FilterState:
        """Drop every facet and the free text; keep sort and page size."""
        return replace(self, facets={k: ANY for k in self.facets}, free_text="", page_index=0)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "facets": dict(self.facets),
            "free_text": self.free_text,
            "sort_key": self.sort_key,
            "sort_direction": self.sort_direction.value,
            "page_index": self.page_index,
            "page_size": self.page_size,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> FilterState:
        data = data or {}
        facets = data.get("facets") or {}
        return cls(
            facets={str(k): str(v) for k, v in facets.items() if v is not None},
            free_text=str(data.get("free_text") or ""),
            sort_key=data.get("sort_key") or None,
            sort_direction=SortDirection.parse(data.get("sort_direction", SortDirection.ASC.value)),
            page_index=_int(data.get("page_index"), 0),
            page_size=_int(data.get("page_size"), DEFAULT_PAGE_SIZE),
        )

    @classmethod
    def for_schema(cls, schema: DatasetSchema, page_size: int = DEFAULT_PAGE_SIZE) -> FilterState:
        """Initial state for a dataset: all facets ANY and the schema's default sort."""
        sort_key, direction = schema.default_sort or (None, SortDirection.ASC.value)
        return cls(
            facets={attr: ANY for attr in schema.categorical},
            sort_key=sort_key,
            sort_direction=SortDirection.parse(direction),
            page_size=page_size,
        )


def is_constraint(value: Optional[str]) -> bool:
    return value is not None and value != "" and value != ANY


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
