from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
from dash import Input, Output, State, dcc, exceptions

from greenhub.core.capabilities import can
from greenhub.core.roles import Capability
from greenhub.export import export_filename, report_filename, serialize, serialize_report
from greenhub.ui.callbacks.callbacks_utils import resolve_result
from greenhub.ui.client_state import ClientState
from greenhub.ui.helpers import headline_metrics
from greenhub.ui.ids import IDs

if TYPE_CHECKING:
    from greenhub.ui.context import AppContext

logger = logging.getLogger(__name__)

FORMAT_BY_BUTTON = {
    IDs.Control.EXPORT_CSV_BTN: "csv",
    IDs.Control.EXPORT_JSON_BTN: "json",
}


def register_io_callbacks(app: dash.Dash, ctx: AppContext) -> None:
    # ---------------------------------------------------------
    # 1. Favourite toggle on the selected row
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.CLIENT_STATE, "data", allow_duplicate=True),
        Output(IDs.Control.FAVORITE_STATUS, "children"),
        Input(IDs.Control.FAVORITE_BTN, "n_clicks"),
        State(IDs.Control.RESULTS_TABLE, "selected_rows"),
        State(IDs.Store.FILTER_STATE, "data"),
        State(IDs.Store.CLIENT_STATE, "data"),
        prevent_initial_call=True,
    )
    def toggle_favorite(n_clicks, selected_rows, filter_data, client_data):
        if not n_clicks:
            raise exceptions.PreventUpdate
        if not selected_rows:
            return dash.no_update, "Select a row first."

        with ClientState(ctx, client_data) as client:
            if not can(client.session, Capability.FAVORITE_RESOURCES):
                return dash.no_update, "Sign in to save favourites."

            active = resolve_result(ctx, filter_data, client.session)
            if active is None or not active.config.favorites:
                raise exceptions.PreventUpdate

            row = selected_rows[0]
            if not 0 <= row < len(active.result.page_records):
                raise exceptions.PreventUpdate

            record = active.result.page_records[row]
            saved = client.favorites.toggle(record.id)
            label = record.title or record.id
            message = f"Saved '{label}' to favourites." if saved else f"Removed '{label}' from favourites."
            return client.snapshot(), message

    # ---------------------------------------------------------
    # 2. Downloads (CSV / JSON / report)
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.DOWNLOAD, "data"),
        Input(IDs.Control.EXPORT_CSV_BTN, "n_clicks"),
        Input(IDs.Control.EXPORT_JSON_BTN, "n_clicks"),
        Input(IDs.Control.EXPORT_REPORT_BTN, "n_clicks"),
        State(IDs.Store.FILTER_STATE, "data"),
        State(IDs.Store.CLIENT_STATE, "data"),
        prevent_initial_call=True,
    )
    def download(_csv, _json, _report, filter_data, client_data):
        button = dash.ctx.triggered_id
        if button is None:
            raise exceptions.PreventUpdate

        with ClientState(ctx, client_data) as client:
            session = client.session

        if not can(session, Capability.EXPORT_DATA):
            logger.warning("Export refused", extra={"role": getattr(session, "role", None)})
            raise exceptions.PreventUpdate

        active = resolve_result(ctx, filter_data, session)
        if active is None:
            raise exceptions.PreventUpdate
        schema = active.dataset.schema

        if button == IDs.Control.EXPORT_REPORT_BTN:
            metrics = headline_metrics(
                active.result,
                spent_field=active.config.metrics.get("spent_field"),
                status_field=active.config.metrics.get("status_field"),
            )
            payload = serialize_report(active.result, active.state, metrics)
            return dcc.send_bytes(payload, report_filename(schema))

        fmt = FORMAT_BY_BUTTON.get(button)
        if fmt is None:
            raise exceptions.PreventUpdate
        return dcc.send_bytes(serialize(active.result, fmt, schema=schema), export_filename(schema, fmt))
