from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

import pandas as pd

from greenhub.core.dataset import Dataset, Record, records_to_frame
from greenhub.core.filter_state import FilterState, SortDirection


@dataclass(frozen=True)
class FilteredResult:
    """
    Output of applying a FilterState to a Dataset.

    - records: every surviving record, in dataset order or in sort order
    - page_records: the slice of `records` for the requested page
    - total_count: len(records)
    """

    records: Tuple[Record, ...]
    page_records: Tuple[Record, ...]
    total_count: int
    page_index: int
    page_size: int
    dataset: Optional[Dataset] = None

    @property
    def page_count(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.total_count else 0

    @property
    def has_previous(self) -> bool:
        return self.page_index > 0

    @property
    def has_next(self) -> bool:
        return self.page_index + 1 < self.page_count

    def to_frame(self, *, page_only: bool = True) -> pd.DataFrame:
        records = self.page_records if page_only else self.records
        columns = self.dataset.schema.columns if self.dataset is not None else ("id",)
        return records_to_frame(records, columns)


def apply(dataset: Dataset, state: FilterState) -> FilteredResult:
    """
    Filter, sort and paginate `dataset` according to `state`.

    Pure and deterministic: the same dataset and state always give the same
    result, and the dataset is never modified.
    """
    needle = state.free_text.strip().casefold()
    facets = state.active_facets
    searchable = dataset.schema.searchable

    survivors = [
        r for r in dataset.records
        if (not needle or matches_text(r, needle, searchable)) and matches_facets(r, facets)
    ]

    if state.sort_key:
        survivors = sort_records(survivors, state.sort_key, state.sort_direction)

    start = state.page_index * state.page_size
    page = survivors[start:start + state.page_size]

    return FilteredResult(
        records=tuple(survivors),
        page_records=tuple(page),
        total_count=len(survivors),
        page_index=state.page_index,
        page_size=state.page_size,
        dataset=dataset,
    )


def matches_text(record: Record, needle: str, fields: Iterable[str]) -> bool:
    """OR across fields: true if `needle` (already casefolded) occurs in any of them."""
    for name in fields:
        value = _field_value(record, name)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            if any(needle in str(v).casefold() for v in value):
                return True
        elif needle in str(value).casefold():
            return True
    return False


def matches_facets(record: Record, facets: dict) -> bool:
    """AND across the active facet constraints."""
    return all(record.attributes.get(attr) == value for attr, value in facets.items())


def sort_records(records: List[Record], sort_key: str, direction: SortDirection) -> List[Record]:
    """
    Stable sort by `sort_key`.

    Records without a value for the key keep their relative order and go
    last in both directions.
    """
    present = [r for r in records if _field_value(r, sort_key) is not None]
    missing = [r for r in records if _field_value(r, sort_key) is None]
    present.sort(
        key=lambda r: _sortable(_field_value(r, sort_key)),
        reverse=direction == SortDirection.DESC,
    )
    return present + missing


def _field_value(record: Record, name: str) -> Any:
    if name == "value":
        return record.value if record.value is not None else record.fields.get("value")
    if name == "title" and record.title:
        return record.title
    if name == "description" and record.description:
        return record.description
    if name == "tags" and record.tags:
        return record.tags
    return record.get(name)


def _sortable(value: Any) -> Tuple[int, float, str]:
    # numbers before text so mixed columns still compare
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, float(value), "")
    return (1, 0.0, str(value).casefold())
