from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from greenhub.ui.ids import IDs


def build_filter_panel() -> dbc.Card:
    """
    Dataset selector, free-text search, sort and facet dropdowns.

    Facet dropdowns are created per dataset by the browse callbacks.
    """
    return dbc.Card(
        dbc.CardBody(
            [
                html.Label("Dataset", className="form-label"),
                dcc.Dropdown(
                    id=IDs.Control.DATASET_SELECT,
                    options=[],
                    clearable=False,
                    placeholder="Select dataset",
                    className="mb-3",
                ),
                html.Label("Search", className="form-label"),
                dbc.Input(
                    id=IDs.Control.SEARCH_INPUT,
                    type="search",
                    placeholder="Search...",
                    debounce=True,
                    className="mb-3",
                ),
                html.Label("Sort by", className="form-label"),
                dcc.Dropdown(id=IDs.Control.SORT_SELECT, options=[], clearable=False, className="mb-3"),
                html.Div(id=IDs.Control.FACET_CONTAINER),
                dbc.Button(
                    "Clear filters",
                    id=IDs.Control.CLEAR_FILTERS_BTN,
                    color="secondary",
                    outline=True,
                    size="sm",
                    className="w-100",
                ),
            ]
        ),
        className="mb-3",
    )


def build_tools_panel() -> dbc.Card:
    return dbc.Card(
        dbc.CardBody(
            [
                html.H6("Platform tools", className="card-title"),
                html.Div(id=IDs.Control.PLATFORM_TOOLS),
            ]
        ),
        className="mb-3",
    )
