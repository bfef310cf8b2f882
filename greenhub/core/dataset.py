from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from greenhub.core.exceptions import DatasetSchemaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetSchema:
    """
    Declares how raw records of one dataset map onto the generic Record.

    Fields:

    - key: stable identifier used in config, URLs and export filenames
    - name: human-readable dataset name
    - categorical: facet attribute names, in schema order
    - value_field / unit_field / timestamp_field: raw fields holding the
      numeric value, its unit and the record's time stamp
    - title_field / description_field / tags_field: free-text fields
    - search_fields: fields matched by free-text search; defaults to the
      categorical attributes plus title, description and tags
    - export_columns: CSV header, in order
    - export_labels: display label per export column (field -> label);
      unlabelled columns keep their field name
    - sort_keys: sort keys offered to the user (label -> (key, direction))
    - default_sort: initial (sort_key, direction), or None for dataset order
    """

    key: str
    name: str
    categorical: Tuple[str, ...] = ()
    value_field: Optional[str] = None
    unit_field: Optional[str] = None
    timestamp_field: Optional[str] = None
    title_field: Optional[str] = None
    description_field: Optional[str] = None
    tags_field: Optional[str] = None
    search_fields: Tuple[str, ...] = ()
    export_columns: Tuple[str, ...] = ()
    export_labels: Mapping[str, str] = field(default_factory=dict)
    sort_keys: Mapping[str, Tuple[str, str]] = field(default_factory=dict)
    default_sort: Optional[Tuple[str, str]] = None

    @property
    def searchable(self) -> Tuple[str, ...]:
        if self.search_fields:
            return self.search_fields
        text_fields = [f for f in (self.title_field, self.description_field, self.tags_field) if f]
        return tuple(self.categorical) + tuple(text_fields)

    @property
    def columns(self) -> Tuple[str, ...]:
        if self.export_columns:
            return self.export_columns
        cols: List[str] = ["id", *self.categorical]
        for f in (self.value_field, self.unit_field, self.timestamp_field):
            if f and f not in cols:
                cols.append(f)
        return tuple(cols)

    def labels_for(self, columns: Sequence[str]) -> List[str]:
        return [self.export_labels.get(c, c) for c in columns]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> DatasetSchema:
        sort_keys = {
            str(label): (str(spec[0]), str(spec[1]) if len(spec) > 1 else "asc")
            for label, spec in (raw.get("sort_keys") or {}).items()
        }
        default_sort = raw.get("default_sort")
        return cls(
            key=raw["key"],
            name=raw.get("name", raw["key"]),
            categorical=tuple(raw.get("categorical", ())),
            value_field=raw.get("value_field"),
            unit_field=raw.get("unit_field"),
            timestamp_field=raw.get("timestamp_field"),
            title_field=raw.get("title_field"),
            description_field=raw.get("description_field"),
            tags_field=raw.get("tags_field"),
            search_fields=tuple(raw.get("search_fields", ())),
            export_columns=tuple(raw.get("export_columns", ())),
            export_labels={str(k): str(v) for k, v in (raw.get("export_labels") or {}).items()},
            sort_keys=sort_keys,
            default_sort=tuple(default_sort) if default_sort else None,
        )


@dataclass(frozen=True)
class Record:
    """
    Generic, immutable unit of a Dataset.

    `fields` keeps the complete raw mapping in source order; the other
    attributes are the schema-resolved views of it.
    """

    id: str
    attributes: Mapping[str, str]
    value: Optional[float] = None
    unit: Optional[str] = None
    timestamp: Optional[str] = None
    title: str = ""
    description: str = ""
    tags: Tuple[str, ...] = ()
    fields: Mapping[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        """
        Resolve a field name: id, categorical attributes, then the raw fields.
        """
        if name == "id":
            return self.id
        if name in self.attributes:
            return self.attributes[name]
        return self.fields.get(name, default)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.fields)


class Dataset:
    """
    Immutable, loaded collection of Records plus facet vocabularies.

    Facet vocabularies (sorted distinct values per categorical attribute)
    are computed once in load() and never change afterwards. Loading again
    always returns a new Dataset.
    """

    def __init__(
        self,
        schema: DatasetSchema,
        records: Sequence[Record],
        facets: Mapping[str, Tuple[str, ...]],
    ) -> None:
        self._schema = schema
        self._records: Tuple[Record, ...] = tuple(records)
        self._facets = MappingProxyType(dict(facets))

    @property
    def schema(self) -> DatasetSchema:
        return self._schema

    @property
    def key(self) -> str:
        return self._schema.key

    @property
    def name(self) -> str:
        return self._schema.name

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._records

    @property
    def facets(self) -> Mapping[str, Tuple[str, ...]]:
        return self._facets

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __repr__(self) -> str:
        return f"Dataset(key={self.key!r}, n_records={len(self._records)})"

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------
    @classmethod
    def load(cls, raw_records: Iterable[Mapping[str, Any]], schema: DatasetSchema) -> Dataset:
        records: List[Record] = []
        for idx, raw in enumerate(raw_records):
            records.append(_build_record(raw, schema, idx))

        facets: Dict[str, Tuple[str, ...]] = {}
        for attr in schema.categorical:
            values = {r.attributes[attr] for r in records if attr in r.attributes}
            facets[attr] = tuple(sorted(values))

        logger.info(
            "Dataset loaded",
            extra={"dataset": schema.key, "n_records": len(records)},
        )
        return cls(schema, records, facets)

    # -------------------------------------------------------------------------
    # Tabular access
    # -------------------------------------------------------------------------
    def to_frame(self, records: Optional[Iterable[Record]] = None) -> pd.DataFrame:
        """
        DataFrame of the given records (all records by default) in the
        schema's export column order.
        """
        return records_to_frame(self._records if records is None else records, self._schema.columns)


def records_to_frame(records: Iterable[Record], columns: Sequence[str]) -> pd.DataFrame:
    rows = [{col: _cell(r.get(col)) for col in columns} for r in records]
    return pd.DataFrame(rows, columns=list(columns), dtype=object)


def _cell(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return "; ".join(str(v) for v in value)
    return value


# -------------------------------------------------------------------------
# Raw record normalisation
# -------------------------------------------------------------------------
def _build_record(raw: Any, schema: DatasetSchema, idx: int) -> Record:
    if not isinstance(raw, Mapping):
        raise DatasetSchemaError(f"{schema.key}: record #{idx} is not an object")
    if raw.get("id") in (None, ""):
        raise DatasetSchemaError(f"{schema.key}: record #{idx} has no id")

    attributes = {
        attr: str(raw[attr])
        for attr in schema.categorical
        if raw.get(attr) is not None
    }

    return Record(
        id=str(raw["id"]),
        attributes=MappingProxyType(attributes),
        value=to_number(raw.get(schema.value_field)) if schema.value_field else None,
        unit=_text_or_none(raw.get(schema.unit_field)) if schema.unit_field else None,
        timestamp=_text_or_none(raw.get(schema.timestamp_field)) if schema.timestamp_field else None,
        title=_text(raw.get(schema.title_field)) if schema.title_field else "",
        description=_text(raw.get(schema.description_field)) if schema.description_field else "",
        tags=_tags(raw.get(schema.tags_field)) if schema.tags_field else (),
        fields=MappingProxyType(dict(raw)),
    )


def to_number(value: Any) -> Optional[float]:
    """Numeric value of a raw field, or None if it carries no number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _text_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _tags(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(t.strip() for t in value.split(",") if t.strip())
    if isinstance(value, (list, tuple)):
        return tuple(str(t) for t in value)
    return (str(value),)
