from __future__ import annotations

import pytest

from greenhub.core.dataset import Dataset, DatasetSchema
from greenhub.core.filter_engine import apply
from greenhub.core.filter_state import ANY, FilterState, SortDirection


def _make_dataset() -> Dataset:
    schema = DatasetSchema.from_dict(
        {
            "key": "climate",
            "categorical": ["region", "hazard_type"],
            "value_field": "value",
            "title_field": "title",
            "tags_field": "tags",
        }
    )
    raw = [
        {"id": "1", "region": "Lagos", "hazard_type": "Flooding", "value": 10, "title": "Coastal flood", "tags": ["coast"]},
        {"id": "2", "region": "Kano", "hazard_type": "Drought", "value": 30, "title": "Dry season", "tags": ["sahel"]},
        {"id": "3", "region": "Lagos", "hazard_type": "Heatwave", "value": 20, "title": "Urban heat", "tags": []},
        {"id": "4", "region": "Rivers", "hazard_type": "Flooding", "value": None, "title": "Delta flood", "tags": ["Coast"]},
        {"id": "5", "region": "Kano", "hazard_type": "Flooding", "value": 20, "title": "Flash floods", "tags": []},
        {"id": "6", "region": "Lagos", "hazard_type": "Flooding", "value": 5, "title": "Lagoon", "tags": []},
        {"id": "7", "region": "Benue", "hazard_type": "Flooding", "value": 40, "title": "River Benue", "tags": []},
    ]
    return Dataset.load(raw, schema)


def _ids(records):
    return [r.id for r in records]


def _is_subsequence(sub, full) -> bool:
    it = iter(full)
    return all(any(x is y for y in it) for x in sub)


def test_unconstrained_state_returns_everything_in_dataset_order():
    ds = _make_dataset()
    res = apply(ds, FilterState(page_size=100))

    assert _ids(res.records) == ["1", "2", "3", "4", "5", "6", "7"]
    assert res.total_count == 7
    assert res.dataset is ds


def test_facets_and_together():
    ds = _make_dataset()
    st = FilterState(page_size=100).with_facet("region", "Lagos").with_facet("hazard_type", "Flooding")

    assert _ids(apply(ds, st).records) == ["1", "6"]


def test_any_facet_does_not_constrain():
    ds = _make_dataset()
    st = FilterState(facets={"region": ANY, "hazard_type": "Drought"})

    assert _ids(apply(ds, st).records) == ["2"]


def test_free_text_is_case_insensitive_across_searchable_fields():
    ds = _make_dataset()

    # matches title "Coastal flood", "Delta flood", "Flash floods" and hazard "Flooding"
    res = apply(ds, FilterState(free_text="FLOOD", page_size=100))
    assert _ids(res.records) == ["1", "4", "5", "6", "7"]

    # tags are matched per tag
    res = apply(ds, FilterState(free_text="coast", page_size=100))
    assert _ids(res.records) == ["1", "4"]


def test_free_text_with_only_whitespace_matches_everything():
    ds = _make_dataset()

    assert apply(ds, FilterState(free_text="   ", page_size=100)).total_count == len(ds)


def test_no_matches_gives_empty_result():
    ds = _make_dataset()
    res = apply(ds, FilterState(free_text="tornado"))

    assert res.total_count == 0
    assert res.records == ()
    assert res.page_records == ()
    assert res.page_count == 0


def test_unsorted_result_is_subsequence_and_bounded():
    ds = _make_dataset()
    st = FilterState(facets={"hazard_type": "Flooding"}, free_text="l", page_size=100)
    res = apply(ds, st)

    assert _is_subsequence(res.records, ds.records)
    assert res.total_count <= len(ds)
    assert res.total_count == len(res.records)


def test_pagination_covers_every_record_exactly_once():
    ds = _make_dataset()
    st = FilterState(page_size=3)
    first = apply(ds, st)

    seen = []
    for page in range(first.page_count):
        seen.extend(apply(ds, st.with_page(page)).page_records)

    assert first.page_count == 3
    assert _ids(seen) == _ids(first.records)


def test_page_past_the_end_is_empty():
    ds = _make_dataset()
    res = apply(ds, FilterState(page_size=3, page_index=10))

    assert res.page_records == ()
    assert res.total_count == 7
    assert res.has_previous
    assert not res.has_next


def test_apply_is_idempotent():
    ds = _make_dataset()
    st = FilterState(facets={"region": "Lagos"}, sort_key="value", sort_direction="desc")

    assert apply(ds, st) == apply(ds, st)


def test_cleared_state_restores_full_dataset():
    ds = _make_dataset()
    st = FilterState(facets={"region": "Kano"}, free_text="dry", page_size=100)

    assert apply(ds, st).total_count == 1
    assert apply(ds, st.cleared()).total_count == len(ds)


def test_numeric_sort_descending_puts_missing_values_last():
    ds = _make_dataset()
    res = apply(ds, FilterState(sort_key="value", sort_direction=SortDirection.DESC, page_size=100))

    assert _ids(res.records) == ["7", "2", "3", "5", "1", "6", "4"]


def test_sort_is_stable_for_equal_keys():
    ds = _make_dataset()
    res = apply(ds, FilterState(sort_key="value", page_size=100))

    # 3 and 5 share value 20 and keep dataset order
    assert _ids(res.records) == ["6", "1", "3", "5", "2", "7", "4"]


def test_text_sort_is_case_insensitive():
    ds = _make_dataset()
    res = apply(ds, FilterState(sort_key="region", page_size=100))

    assert [r.attributes["region"] for r in res.records] == [
        "Benue", "Kano", "Kano", "Lagos", "Lagos", "Lagos", "Rivers"
    ]
    assert _ids(res.records)[:3] == ["7", "2", "5"]


def test_dataset_is_not_modified():
    ds = _make_dataset()
    before = _ids(ds.records)
    apply(ds, FilterState(sort_key="value", sort_direction="desc"))

    assert _ids(ds.records) == before


@pytest.mark.parametrize("page_size", [1, 2, 7, 50])
def test_page_records_never_exceed_page_size(page_size):
    ds = _make_dataset()
    res = apply(ds, FilterState(page_size=page_size))

    assert len(res.page_records) <= page_size
    assert len(res.page_records) == min(page_size, len(ds))


def test_result_frame_uses_page_only_by_default():
    ds = _make_dataset()
    res = apply(ds, FilterState(page_size=2))

    assert len(res.to_frame()) == 2
    assert len(res.to_frame(page_only=False)) == 7
