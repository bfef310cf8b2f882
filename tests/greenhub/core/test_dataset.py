from __future__ import annotations

import pytest

from greenhub.core.dataset import Dataset, DatasetSchema, records_to_frame, to_number
from greenhub.core.exceptions import DatasetSchemaError


def _schema(**overrides) -> DatasetSchema:
    raw = {
        "key": "climate",
        "name": "Climate Database",
        "categorical": ["region", "hazard_type"],
        "value_field": "value",
        "unit_field": "unit",
        "timestamp_field": "last_updated",
    }
    raw.update(overrides)
    return DatasetSchema.from_dict(raw)


def _raw_records():
    return [
        {"id": "CD001", "region": "Lagos", "hazard_type": "Flooding", "value": 1845.2, "unit": "mm/year",
         "last_updated": "2024-01-15"},
        {"id": "CD002", "region": "Kano", "hazard_type": "Drought", "value": "34.6", "unit": "°C",
         "last_updated": "2024-01-12"},
        {"id": "CD003", "region": "Lagos", "hazard_type": "Erosion", "value": None},
    ]


def test_load_builds_records_in_source_order():
    ds = Dataset.load(_raw_records(), _schema())

    assert len(ds) == 3
    assert [r.id for r in ds.records] == ["CD001", "CD002", "CD003"]
    assert ds.key == "climate"
    assert ds.name == "Climate Database"


def test_facets_are_sorted_distinct_values():
    ds = Dataset.load(_raw_records(), _schema())

    assert ds.facets["region"] == ("Kano", "Lagos")
    assert ds.facets["hazard_type"] == ("Drought", "Erosion", "Flooding")


def test_record_values_are_numeric_or_none():
    ds = Dataset.load(_raw_records(), _schema())
    values = [r.value for r in ds.records]

    assert values == [1845.2, 34.6, None]
    assert ds.records[0].unit == "mm/year"
    assert ds.records[0].timestamp == "2024-01-15"
    assert ds.records[2].unit is None


def test_record_get_resolves_id_attributes_then_raw_fields():
    rec = Dataset.load(_raw_records(), _schema()).records[0]

    assert rec.get("id") == "CD001"
    assert rec.get("region") == "Lagos"
    assert rec.get("unit") == "mm/year"
    assert rec.get("missing", "x") == "x"
    assert rec.to_dict() == _raw_records()[0]


def test_records_are_immutable():
    rec = Dataset.load(_raw_records(), _schema()).records[0]

    with pytest.raises(Exception):
        rec.id = "other"
    with pytest.raises(TypeError):
        rec.attributes["region"] = "Kano"


def test_tags_accept_list_or_comma_separated_string():
    schema = DatasetSchema.from_dict({"key": "resources", "title_field": "title", "tags_field": "tags"})
    ds = Dataset.load(
        [
            {"id": "R1", "title": "A", "tags": ["flood", "policy"]},
            {"id": "R2", "title": "B", "tags": "drought, water ,"},
        ],
        schema,
    )

    assert ds.records[0].tags == ("flood", "policy")
    assert ds.records[1].tags == ("drought", "water")
    assert ds.records[0].title == "A"


def test_load_rejects_records_without_id():
    with pytest.raises(DatasetSchemaError):
        Dataset.load([{"region": "Lagos"}], _schema())


def test_load_rejects_non_mapping_records():
    with pytest.raises(DatasetSchemaError):
        Dataset.load(["not-a-record"], _schema())


def test_empty_dataset_has_empty_facets():
    ds = Dataset.load([], _schema())

    assert len(ds) == 0
    assert ds.facets["region"] == ()


def test_schema_default_columns_and_searchable():
    schema = _schema()

    assert schema.columns == ("id", "region", "hazard_type", "value", "unit", "last_updated")
    assert schema.searchable == ("region", "hazard_type")


def test_schema_sort_keys_from_dict():
    schema = _schema(sort_keys={"Value": ["value", "desc"], "Region": ["region"]}, default_sort=["region", "asc"])

    assert schema.sort_keys == {"Value": ("value", "desc"), "Region": ("region", "asc")}
    assert schema.default_sort == ("region", "asc")


def test_schema_labels_fall_back_to_field_names():
    schema = _schema(export_labels={"id": "ID", "hazard_type": "Hazard Type"})

    assert schema.labels_for(schema.columns) == ["ID", "region", "Hazard Type", "value", "unit", "last_updated"]
    assert _schema().labels_for(["id"]) == ["id"]


def test_to_frame_uses_schema_columns_and_joins_lists():
    schema = DatasetSchema.from_dict({"key": "r", "export_columns": ["id", "tags"]})
    ds = Dataset.load([{"id": "R1", "tags": ["a", "b"]}], schema)

    frame = ds.to_frame()

    assert list(frame.columns) == ["id", "tags"]
    assert frame.iloc[0]["tags"] == "a; b"


def test_records_to_frame_with_no_records_keeps_header():
    frame = records_to_frame([], ["id", "region"])

    assert list(frame.columns) == ["id", "region"]
    assert frame.empty


@pytest.mark.parametrize(
    "raw, expected",
    [(3, 3.0), (2.5, 2.5), ("7.25", 7.25), (" 1 ", 1.0), ("abc", None), (None, None), (True, None),
     (float("nan"), None), ([1], None)],
)
def test_to_number(raw, expected):
    assert to_number(raw) == expected
