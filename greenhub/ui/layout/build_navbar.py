from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import html

from greenhub.config.model import GlobalConfig
from greenhub.ui.ids import IDs


def build_navbar(global_config: GlobalConfig) -> dbc.Navbar:
    return dbc.Navbar(
        dbc.Container(
            fluid=True,
            children=[
                html.Div(
                    [
                        html.H2(global_config.ui_title, className="mb-0"),
                        html.Small(global_config.subtitle, className="text-muted"),
                    ],
                    className="d-flex flex-column justify-content-center",
                ),
                html.Div(
                    [
                        html.Span(id=IDs.Control.USER_BADGE, className="me-3"),
                        dbc.Button(
                            "Sign out",
                            id=IDs.Control.LOGOUT_BTN,
                            color="secondary",
                            size="sm",
                            outline=True,
                            style={"display": "none"},
                        ),
                    ],
                    className="ms-auto d-flex align-items-center",
                ),
            ],
        ),
        color="light",
        className="mb-3 shadow-sm",
    )
