from __future__ import annotations

from greenhub.core.dataset import DatasetSchema
from greenhub.core.filter_state import ANY, FilterState, SortDirection, is_constraint


def _state() -> FilterState:
    return FilterState(
        facets={"region": "Lagos", "hazard_type": ANY},
        free_text="flood",
        sort_key="value",
        sort_direction=SortDirection.DESC,
        page_index=3,
        page_size=5,
    )


def test_filter_state_to_from_dict_roundtrip():
    st = _state()

    assert FilterState.from_dict(st.to_dict()) == st


def test_from_dict_tolerates_missing_and_bad_values():
    st = FilterState.from_dict({"page_index": "x", "page_size": None, "sort_direction": "sideways"})

    assert st.page_index == 0
    assert st.page_size == 10
    assert st.sort_direction is SortDirection.ASC
    assert st.facets == {}
    assert FilterState.from_dict(None) == FilterState()


def test_page_bounds_are_normalised():
    st = FilterState(page_index=-4, page_size=0)

    assert st.page_index == 0
    assert st.page_size == 1


def test_every_change_except_page_resets_page_index():
    st = _state()

    assert st.with_facet("region", "Kano").page_index == 0
    assert st.with_free_text("rain").page_index == 0
    assert st.with_sort("region", "asc").page_index == 0
    assert st.with_page_size(20).page_index == 0
    assert st.cleared().page_index == 0
    assert st.with_page(7).page_index == 7


def test_transitions_do_not_mutate_original():
    st = _state()
    st.with_facet("region", "Kano")
    st.with_free_text("")

    assert st.facets["region"] == "Lagos"
    assert st.free_text == "flood"


def test_with_facet_empty_value_means_any():
    st = _state().with_facet("region", "")

    assert st.facets["region"] == ANY
    assert st.active_facets == {}


def test_cleared_keeps_sort_and_page_size():
    st = _state().cleared()

    assert st.is_cleared
    assert st.facets == {"region": ANY, "hazard_type": ANY}
    assert st.free_text == ""
    assert st.sort_key == "value"
    assert st.sort_direction is SortDirection.DESC
    assert st.page_size == 5


def test_for_schema_starts_unconstrained_with_default_sort():
    schema = DatasetSchema.from_dict(
        {"key": "resources", "categorical": ["category", "language"], "default_sort": ["published_date", "desc"]}
    )
    st = FilterState.for_schema(schema, page_size=6)

    assert st.facets == {"category": ANY, "language": ANY}
    assert st.sort_key == "published_date"
    assert st.sort_direction is SortDirection.DESC
    assert st.page_size == 6
    assert st.is_cleared


def test_is_constraint():
    assert is_constraint("Lagos")
    assert not is_constraint(ANY)
    assert not is_constraint("")
    assert not is_constraint(None)
