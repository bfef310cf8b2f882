from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from greenhub.core.dataset import Record, to_number
from greenhub.core.filter_engine import FilteredResult


@dataclass(frozen=True)
class GroupSummary:
    """
    Summary of one group of records.

    - count: records in the group
    - value_count: records in the group that carry a numeric value
    - sum / average: over those numeric values only; average is 0 when the
      group has no numeric values
    """

    key: Any
    count: int
    value_count: int
    sum: float
    average: float


@dataclass(frozen=True)
class Totals:
    count: int
    value_count: int
    sum: float
    average: float
    minimum: Optional[float]
    maximum: Optional[float]


def group_by(
    result: FilteredResult,
    attribute: str,
    *,
    value_field: Optional[str] = None,
) -> List[GroupSummary]:
    """
    Group the filtered records by `attribute`.

    Groups come out in order of first occurrence within result.records (not
    sorted), so charts line up with the table. Numeric values are the record
    value, or the raw field `value_field` when given.
    """
    order: List[Any] = []
    counts: Dict[Any, int] = {}
    value_counts: Dict[Any, int] = {}
    sums: Dict[Any, float] = {}

    for record in result.records:
        key = record.get(attribute)
        if key not in counts:
            order.append(key)
            counts[key] = 0
            value_counts[key] = 0
            sums[key] = 0.0
        counts[key] += 1
        number = _numeric(record, value_field)
        if number is not None:
            value_counts[key] += 1
            sums[key] += number

    return [
        GroupSummary(
            key=key,
            count=counts[key],
            value_count=value_counts[key],
            sum=sums[key],
            average=sums[key] / value_counts[key] if value_counts[key] > 0 else 0.0,
        )
        for key in order
    ]


def count_by(result: FilteredResult, attribute: str) -> Dict[Any, int]:
    return {g.key: g.count for g in group_by(result, attribute)}


def totals(result: FilteredResult, *, value_field: Optional[str] = None) -> Totals:
    numbers = [n for n in (_numeric(r, value_field) for r in result.records) if n is not None]
    total = sum(numbers)
    return Totals(
        count=len(result.records),
        value_count=len(numbers),
        sum=total,
        average=total / len(numbers) if numbers else 0.0,
        minimum=min(numbers) if numbers else None,
        maximum=max(numbers) if numbers else None,
    )


def utilization_rate(spent: float, budget: float) -> float:
    """Share of `budget` spent, in percent; 0 when nothing was allocated."""
    return (spent / budget) * 100 if budget > 0 else 0.0


def to_frame(groups: Sequence[GroupSummary]) -> pd.DataFrame:
    return pd.DataFrame(
        [asdict(g) for g in groups],
        columns=["key", "count", "value_count", "sum", "average"],
    )


def _numeric(record: Record, value_field: Optional[str]) -> Optional[float]:
    if value_field is None:
        return record.value
    return to_number(record.get(value_field))
