from __future__ import annotations

import pytest

from greenhub.core import aggregator
from greenhub.core.dataset import Dataset, DatasetSchema
from greenhub.core.filter_engine import apply
from greenhub.core.filter_state import FilterState


def _result(raw, state: FilterState | None = None):
    schema = DatasetSchema.from_dict({"key": "nap", "categorical": ["region", "status"], "value_field": "budget"})
    return apply(Dataset.load(raw, schema), state or FilterState(page_size=1))


def _projects():
    return [
        {"id": "P1", "region": "A", "status": "ongoing", "budget": 100, "spent": 40},
        {"id": "P2", "region": "A", "status": "completed", "budget": 300, "spent": 300},
        {"id": "P3", "region": "B", "status": "planned", "budget": None, "spent": 0},
    ]


def test_group_order_follows_first_occurrence():
    groups = aggregator.group_by(_result(_projects()), "region")

    assert [(g.key, g.count) for g in groups] == [("A", 2), ("B", 1)]


def test_group_order_is_not_alphabetical():
    raw = [{"id": "1", "region": "Z"}, {"id": "2", "region": "A"}, {"id": "3", "region": "Z"}]

    assert [g.key for g in aggregator.group_by(_result(raw), "region")] == ["Z", "A"]


def test_group_sum_and_average_use_numeric_values_only():
    a, b = aggregator.group_by(_result(_projects()), "region")

    assert a.sum == 400
    assert a.value_count == 2
    assert a.average == 200
    # no numeric budget in B: average is 0, not a division error
    assert b.count == 1
    assert b.value_count == 0
    assert b.average == 0


def test_group_by_explicit_value_field():
    a, b = aggregator.group_by(_result(_projects()), "region", value_field="spent")

    assert a.sum == 340
    assert b.sum == 0
    assert b.value_count == 1


def test_groups_cover_all_filtered_records_not_just_the_page():
    groups = aggregator.group_by(_result(_projects(), FilterState(page_size=1)), "status")

    assert sum(g.count for g in groups) == 3


def test_group_by_on_empty_result():
    assert aggregator.group_by(_result([]), "region") == []
    assert aggregator.count_by(_result([]), "region") == {}


def test_group_by_respects_filters():
    res = _result(_projects(), FilterState(facets={"region": "A"}))

    assert aggregator.count_by(res, "status") == {"ongoing": 1, "completed": 1}


def test_totals():
    t = aggregator.totals(_result(_projects()))

    assert t.count == 3
    assert t.value_count == 2
    assert t.sum == 400
    assert t.average == 200
    assert t.minimum == 100
    assert t.maximum == 300


def test_totals_of_empty_result():
    t = aggregator.totals(_result([]))

    assert t.count == 0
    assert t.sum == 0
    assert t.average == 0
    assert t.minimum is None
    assert t.maximum is None


@pytest.mark.parametrize("spent, budget, expected", [(50, 200, 25.0), (10, 0, 0.0), (0, 100, 0.0)])
def test_utilization_rate(spent, budget, expected):
    assert aggregator.utilization_rate(spent, budget) == expected


def test_to_frame_columns():
    frame = aggregator.to_frame(aggregator.group_by(_result(_projects()), "region"))

    assert list(frame.columns) == ["key", "count", "value_count", "sum", "average"]
    assert frame["key"].tolist() == ["A", "B"]
