from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import html

from greenhub.ui.ids import IDs


def build_login_panel() -> dbc.Card:
    """Sign-in form; hidden by the session callback once authenticated."""
    return dbc.Card(
        id=IDs.Control.LOGIN_CARD,
        className="mb-3",
        children=dbc.CardBody(
            [
                html.H5("Sign in", className="card-title"),
                dbc.Input(
                    id=IDs.Control.LOGIN_IDENTIFIER,
                    type="email",
                    placeholder="Email address",
                    className="mb-2",
                ),
                dbc.Input(
                    id=IDs.Control.LOGIN_SECRET,
                    type="password",
                    placeholder="Password",
                    className="mb-2",
                ),
                dbc.Button("Sign in", id=IDs.Control.LOGIN_BTN, color="success", className="w-100"),
                dbc.Spinner(html.Div(id=IDs.Control.LOGIN_MESSAGE, className="mt-2"), size="sm"),
                html.Small(
                    "Public resources are available without signing in.",
                    className="text-muted",
                ),
            ]
        ),
    )
