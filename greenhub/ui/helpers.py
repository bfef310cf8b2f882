from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple

import dash_bootstrap_components as dbc
import pandas as pd
from dash import dash_table, dcc, html

from greenhub.core import aggregator
from greenhub.core.dataset import Dataset, DatasetSchema, Record
from greenhub.core.filter_engine import FilteredResult
from greenhub.core.filter_state import ANY, FilterState
from greenhub.ui.ids import IDs, facet_id

FONT = 'system-ui, -apple-system, BlinkMacSystemFont, "SF Pro Text", "Segoe UI", sans-serif'


def facet_controls(dataset: Dataset, state: FilterState) -> List[html.Div]:
    controls = []
    for attr in dataset.schema.categorical:
        options = [{"label": "All", "value": ANY}] + [
            {"label": v, "value": v} for v in dataset.facets.get(attr, ())
        ]
        controls.append(
            html.Div(
                [
                    html.Label(_title(attr), className="form-label"),
                    dcc.Dropdown(
                        id=facet_id(attr),
                        options=options,
                        value=state.facets.get(attr, ANY),
                        clearable=False,
                        className="mb-3",
                    ),
                ]
            )
        )
    return controls


def sort_options(schema: DatasetSchema) -> List[dict]:
    options = [{"label": "Dataset order", "value": ""}]
    for label, (key, direction) in schema.sort_keys.items():
        options.append({"label": label, "value": f"{key}:{direction}"})
    return options


def sort_value(state: FilterState) -> str:
    return f"{state.sort_key}:{state.sort_direction.value}" if state.sort_key else ""


def table_data(
    frame: pd.DataFrame,
    labels: Optional[Mapping[str, str]] = None,
) -> Tuple[List[dict], List[dict]]:
    labels = labels or {}
    rows = frame.astype(object).where(frame.notna(), None).to_dict("records")
    columns = [{"name": labels.get(c) or _title(c), "id": c} for c in frame.columns]
    return rows, columns


def results_table() -> dash_table.DataTable:
    """
    Styled DataTable for one page of results; callbacks fill data/columns.

    Sorting/filtering happen in the filter engine, not in the table.
    """
    return dash_table.DataTable(
        id=IDs.Control.RESULTS_TABLE,
        data=[],
        columns=[],
        row_selectable="single",
        style_table={"overflowX": "auto"},
        style_as_list_view=True,
        style_cell={
            "fontFamily": FONT,
            "fontSize": "12px",
            "padding": "6px 8px",
            "border": "none",
            "textAlign": "left",
            "minWidth": "80px",
            "maxWidth": "260px",
            "whiteSpace": "nowrap",
            "textOverflow": "ellipsis",
        },
        style_header={
            "fontFamily": FONT,
            "fontSize": "12px",
            "fontWeight": "600",
            "backgroundColor": "#f3f4f6",
            "borderBottom": "1px solid #e5e7eb",
        },
        style_data={"borderBottom": "1px solid #e5e7eb"},
        sort_action="none",
        filter_action="none",
    )


def headline_metrics(
    result: FilteredResult,
    *,
    spent_field: Optional[str] = None,
    status_field: Optional[str] = None,
) -> Dict[str, float]:
    """
    Headline numbers for the summary cards.

    Datasets that declare a spent field get the adaptation-plan metrics
    (status counts, budget allocated and utilised); others get count and
    value totals.
    """
    if spent_field:
        budget = aggregator.totals(result).sum
        spent = aggregator.totals(result, value_field=spent_field).sum
        status = aggregator.count_by(result, status_field) if status_field else {}
        return {
            "total_projects": result.total_count,
            "completed_projects": status.get("completed", 0),
            "ongoing_projects": status.get("ongoing", 0),
            "planned_projects": status.get("planned", 0),
            "budget_allocated": budget,
            "budget_utilized": spent,
            "utilization_rate": round(aggregator.utilization_rate(spent, budget), 1),
        }

    totals = aggregator.totals(result)
    metrics = {"records": result.total_count}
    if totals.value_count:
        metrics.update({"total_value": totals.sum, "average_value": round(totals.average, 2)})
    return metrics


def metric_cards(metrics: Dict[str, float]) -> List[dbc.Col]:
    return [
        dbc.Col(
            dbc.Card(
                dbc.CardBody(
                    [
                        html.Small(_title(name), className="text-muted"),
                        html.H4(_format_metric(value), className="mb-0"),
                    ]
                ),
                className="shadow-sm",
            ),
            md=3,
            className="mb-3",
        )
        for name, value in metrics.items()
    ]


def page_label(result: FilteredResult) -> str:
    if result.total_count == 0:
        return "No results"
    start = result.page_index * result.page_size + 1
    end = start + len(result.page_records) - 1
    if not result.page_records:
        return f"Page {result.page_index + 1} is empty ({result.total_count} results)"
    return f"{start}–{end} of {result.total_count} (page {result.page_index + 1} of {result.page_count})"


def _format_metric(value: Optional[float]) -> str:
    if value is None:
        return "–"
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.2f}"
    return f"{int(value):,}"


def record_fields(record: Record, schema: DatasetSchema) -> List[Tuple[str, str]]:
    """(label, text) for every raw field of a record, in source order."""
    fields = []
    for name, value in record.to_dict().items():
        if isinstance(value, (list, tuple)):
            text = ", ".join(str(v) for v in value)
        else:
            text = "" if value is None else str(value)
        fields.append((schema.export_labels.get(name) or _title(name), text))
    return fields


def record_detail(record: Record, schema: DatasetSchema) -> dbc.Card:
    rows = [
        html.Tr([html.Th(label, className="text-muted fw-normal pe-3"), html.Td(text or "–")])
        for label, text in record_fields(record, schema)
    ]
    return dbc.Card(
        [
            dbc.CardHeader(html.Strong(record.title or record.id)),
            dbc.CardBody(dbc.Table(html.Tbody(rows), size="sm", borderless=True, className="mb-0")),
        ],
        className="shadow-sm mt-3",
    )


def _title(name: str) -> str:
    return name.replace("_", " ").title()
