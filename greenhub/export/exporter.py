from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence

from greenhub.core.dataset import DatasetSchema, records_to_frame
from greenhub.core.exceptions import UnsupportedFormatError
from greenhub.core.filter_engine import FilteredResult
from greenhub.core.filter_state import FilterState
from greenhub.core.session import now_iso

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json")


def serialize(
    result: FilteredResult,
    fmt: str,
    *,
    schema: Optional[DatasetSchema] = None,
    columns: Optional[Sequence[str]] = None,
    page_only: bool = False,
) -> bytes:
    """
    Serialize the records of an already-filtered result.

    - csv: header from `columns` (or the schema's export columns), labelled
      with the schema's export labels, one row per record, CRLF line endings
      and RFC-4180 quoting for values holding commas, quotes, CR or LF
    - json: 2-space indented array of every record's full field set, in
      result order

    Nothing is filtered here: `page_only` only picks between the current page
    and every surviving record.

    :raises UnsupportedFormatError: for any format outside EXPORT_FORMATS
    """
    normalised = fmt.lower() if isinstance(fmt, str) else fmt
    if normalised not in EXPORT_FORMATS:
        raise UnsupportedFormatError(fmt)

    records = result.page_records if page_only else result.records

    if normalised == "json":
        payload = [r.to_dict() for r in records]
        data = json.dumps(payload, indent=2, ensure_ascii=False, default=str).encode("utf-8")
    else:
        if schema is None and result.dataset is not None:
            schema = result.dataset.schema
        header = list(columns) if columns else _columns(schema)
        frame = records_to_frame(records, header)
        if schema is not None:
            frame.columns = schema.labels_for(header)
        data = frame.to_csv(index=False, lineterminator="\r\n").encode("utf-8")

    logger.info(
        "Exported records",
        extra={"format": normalised, "n_records": len(records), "n_bytes": len(data)},
    )
    return data


def export_filename(schema: DatasetSchema, fmt: str) -> str:
    return f"{schema.key}_data.{fmt.lower()}"


def serialize_report(
    result: FilteredResult,
    state: FilterState,
    metrics: Mapping[str, Any],
) -> bytes:
    """
    JSON report bundling the active filters, headline metrics and the
    filtered records.
    """
    report: Dict[str, Any] = {
        "timestamp": now_iso(),
        "filters": {
            **state.active_facets,
            **({"search": state.free_text} if state.free_text else {}),
        },
        "metrics": dict(metrics),
        "records": [r.to_dict() for r in result.records],
    }
    return json.dumps(report, indent=2, ensure_ascii=False, default=str).encode("utf-8")


def report_filename(schema: DatasetSchema, today: Optional[date] = None) -> str:
    return f"{schema.key}_report_{(today or date.today()).isoformat()}.json"


def _columns(schema: Optional[DatasetSchema]) -> Sequence[str]:
    if schema is None:
        return ["id"]
    return list(schema.columns)
