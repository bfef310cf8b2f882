from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from greenhub.ui.helpers import results_table
from greenhub.ui.ids import IDs


def build_results_panel() -> html.Div:
    pager = html.Div(
        [
            dbc.Button("Previous", id=IDs.Control.PREV_PAGE_BTN, size="sm", outline=True, color="primary"),
            html.Span(id=IDs.Control.PAGE_LABEL, className="mx-3 text-muted"),
            dbc.Button("Next", id=IDs.Control.NEXT_PAGE_BTN, size="sm", outline=True, color="primary"),
        ],
        className="d-flex align-items-center my-2",
    )

    actions = html.Div(
        [
            dbc.Button("Toggle favourite", id=IDs.Control.FAVORITE_BTN, size="sm", color="warning", outline=True),
            html.Span(id=IDs.Control.FAVORITE_STATUS, className="ms-2 me-auto text-muted"),
            dbc.ButtonGroup(
                [
                    dbc.Button("Export CSV", id=IDs.Control.EXPORT_CSV_BTN, size="sm", color="success"),
                    dbc.Button("Export JSON", id=IDs.Control.EXPORT_JSON_BTN, size="sm", color="success"),
                    dbc.Button("Export report", id=IDs.Control.EXPORT_REPORT_BTN, size="sm", color="success"),
                ]
            ),
            dcc.Download(id=IDs.Control.DOWNLOAD),
        ],
        className="d-flex align-items-center mb-2",
    )

    return html.Div(
        [
            html.Div(id=IDs.Control.ACCESS_MESSAGE),
            dbc.Row(id=IDs.Control.METRICS_ROW, className="g-3"),
            html.Div(id=IDs.Control.RESULT_SUMMARY, className="text-muted mb-2"),
            actions,
            dcc.Loading(results_table(), type="dot"),
            pager,
            html.Div(id=IDs.Control.RECORD_DETAIL),
            html.Div(id=IDs.Control.CHARTS, className="mt-3"),
        ]
    )
