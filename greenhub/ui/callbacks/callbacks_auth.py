from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

import dash
import dash_bootstrap_components as dbc
from dash import Input, Output, State, exceptions, html

from greenhub.core.capabilities import can_access_dataset, platform_tools
from greenhub.core.exceptions import InvalidCredentialsError
from greenhub.ui.client_state import ClientState
from greenhub.ui.ids import IDs

if TYPE_CHECKING:
    from greenhub.ui.context import AppContext

logger = logging.getLogger(__name__)

HIDDEN = {"display": "none"}


def register_auth_callbacks(app: dash.Dash, ctx: AppContext) -> None:
    # ---------------------------------------------------------
    # Sign in / sign out
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.CLIENT_STATE, "data", allow_duplicate=True),
        Output(IDs.Control.LOGIN_MESSAGE, "children"),
        Output(IDs.Control.LOGIN_SECRET, "value"),
        Input(IDs.Control.LOGIN_BTN, "n_clicks"),
        State(IDs.Control.LOGIN_IDENTIFIER, "value"),
        State(IDs.Control.LOGIN_SECRET, "value"),
        State(IDs.Store.CLIENT_STATE, "data"),
        prevent_initial_call=True,
    )
    def sign_in(n_clicks, identifier, secret, client_data):
        if not n_clicks:
            raise exceptions.PreventUpdate

        with ClientState(ctx, client_data) as client:
            try:
                asyncio.run(client.sessions.authenticate(identifier or "", secret or ""))
            except InvalidCredentialsError as e:
                return dash.no_update, dbc.Alert(str(e), color="danger", className="py-2 mb-0"), ""
            return client.snapshot(), "", ""

    @app.callback(
        Output(IDs.Store.CLIENT_STATE, "data", allow_duplicate=True),
        Input(IDs.Control.LOGOUT_BTN, "n_clicks"),
        State(IDs.Store.CLIENT_STATE, "data"),
        prevent_initial_call=True,
    )
    def sign_out(n_clicks, client_data):
        if not n_clicks:
            raise exceptions.PreventUpdate

        with ClientState(ctx, client_data) as client:
            client.sessions.logout()
            return client.snapshot()

    # ---------------------------------------------------------
    # Everything that depends only on who is signed in
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.CLIENT_STATE, "data", allow_duplicate=True),
        Output(IDs.Control.USER_BADGE, "children"),
        Output(IDs.Control.LOGIN_CARD, "style"),
        Output(IDs.Control.LOGOUT_BTN, "style"),
        Output(IDs.Control.PLATFORM_TOOLS, "children"),
        Output(IDs.Control.DATASET_SELECT, "options"),
        Output(IDs.Control.DATASET_SELECT, "value"),
        Input(IDs.Store.CLIENT_STATE, "data"),
        State(IDs.Control.DATASET_SELECT, "value"),
        prevent_initial_call="initial_duplicate",
    )
    def update_session_view(client_data, current_dataset: Optional[str]):
        with ClientState(ctx, client_data) as client:
            # drop keys the restore discarded, e.g. a corrupt session payload
            cleaned = client.snapshot() if client.dirty else dash.no_update
            session = client.session
            signed_in = client.sessions.is_authenticated
            badge = (
                [
                    html.Strong(client.sessions.display_name),
                    dbc.Badge(client.sessions.role_display_name, color="success", className="ms-2"),
                ]
                if signed_in
                else html.Span("Browsing as guest", className="text-muted")
            )

        tools = platform_tools(session)
        tool_items = [
            html.Div([html.Strong(t.label), html.Br(), html.Small(t.description, className="text-muted")],
                     className="mb-2")
            for t in tools
        ] or [html.Small("Sign in to unlock climate data and dashboards.", className="text-muted")]

        options = []
        allowed = []
        for key, cfg in ctx.datasets.configs().items():
            ok = can_access_dataset(session, cfg)
            options.append({"label": cfg.name, "value": key, "disabled": not ok})
            if ok:
                allowed.append(key)

        if current_dataset in allowed:
            value = current_dataset
        elif ctx.default_dataset_key in allowed:
            value = ctx.default_dataset_key
        else:
            value = allowed[0] if allowed else None

        return (
            cleaned,
            badge,
            HIDDEN if signed_in else {},
            {} if signed_in else HIDDEN,
            tool_items,
            options,
            dash.no_update if value == current_dataset else value,
        )
