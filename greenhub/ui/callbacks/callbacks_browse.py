from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

import dash
import dash_bootstrap_components as dbc
from dash import ALL, Input, Output, State, dcc, exceptions, html

from greenhub.core.capabilities import can, can_access_dataset
from greenhub.core.exceptions import ConfigError, DatasetSchemaError
from greenhub.core.filter_state import ANY, FilterState
from greenhub.core.roles import Capability, role_display_name
from greenhub.ui.callbacks.callbacks_utils import (
    filter_store,
    parse_sort_value,
    resolve_result,
    try_parse_filter_store,
)
from greenhub.ui.client_state import ClientState
from greenhub.ui.helpers import (
    facet_controls,
    headline_metrics,
    metric_cards,
    page_label,
    record_detail,
    sort_options,
    sort_value,
    table_data,
)
from greenhub.ui.ids import IDs

if TYPE_CHECKING:
    from greenhub.ui.context import AppContext

logger = logging.getLogger(__name__)

HIDDEN = {"display": "none"}
FACET_VALUES = Input({"type": IDs.Pattern.FACET, "attribute": ALL}, "value")
FACET_IDS = State({"type": IDs.Pattern.FACET, "attribute": ALL}, "id")


def register_browse_callbacks(app: dash.Dash, ctx: AppContext) -> None:
    # ---------------------------------------------------------
    # 1. Dataset switch: load, rebuild controls, fresh filter state
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.FACET_CONTAINER, "children"),
        Output(IDs.Control.SORT_SELECT, "options"),
        Output(IDs.Control.SORT_SELECT, "value"),
        Output(IDs.Control.SEARCH_INPUT, "value"),
        Output(IDs.Store.FILTER_STATE, "data"),
        Input(IDs.Control.DATASET_SELECT, "value"),
        State(IDs.Store.CLIENT_STATE, "data"),
    )
    def switch_dataset(dataset_key: Optional[str], client_data):
        empty = ([], [], "", "", None)
        if not dataset_key:
            return empty

        with ClientState(ctx, client_data) as client:
            session = client.session

        try:
            cfg = ctx.datasets.config(dataset_key)
        except KeyError:
            return empty
        if not can_access_dataset(session, cfg):
            return empty

        try:
            dataset = asyncio.run(ctx.datasets.load(dataset_key))
        except (ConfigError, DatasetSchemaError):
            return empty

        state = FilterState.for_schema(dataset.schema, ctx.global_config.page_size)
        return (
            facet_controls(dataset, state),
            sort_options(dataset.schema),
            sort_value(state),
            "",
            filter_store(dataset_key, state),
        )

    # ---------------------------------------------------------
    # 2. Clear filters: reset facet dropdowns and search box
    # ---------------------------------------------------------
    @app.callback(
        Output({"type": IDs.Pattern.FACET, "attribute": ALL}, "value"),
        Output(IDs.Control.SEARCH_INPUT, "value", allow_duplicate=True),
        Input(IDs.Control.CLEAR_FILTERS_BTN, "n_clicks"),
        FACET_IDS,
        prevent_initial_call=True,
    )
    def clear_controls(n_clicks, facet_ids):
        if not n_clicks:
            raise exceptions.PreventUpdate
        return [ANY for _ in facet_ids], ""

    # ---------------------------------------------------------
    # 3. Controls -> FilterState transitions
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.FILTER_STATE, "data", allow_duplicate=True),
        FACET_VALUES,
        Input(IDs.Control.SEARCH_INPUT, "value"),
        Input(IDs.Control.SORT_SELECT, "value"),
        Input(IDs.Control.CLEAR_FILTERS_BTN, "n_clicks"),
        Input(IDs.Control.PREV_PAGE_BTN, "n_clicks"),
        Input(IDs.Control.NEXT_PAGE_BTN, "n_clicks"),
        FACET_IDS,
        State(IDs.Store.FILTER_STATE, "data"),
        State(IDs.Control.DATASET_SELECT, "value"),
        prevent_initial_call=True,
    )
    def update_filter_state(facet_values, search, sort, _clear, _prev, _next, facet_ids, filter_data, dataset_key):
        key, state = try_parse_filter_store(filter_data)
        # Stale controls from the previous dataset
        if state is None or key != dataset_key:
            raise exceptions.PreventUpdate

        triggered = {cid for cid in dash.ctx.triggered_prop_ids.values() if isinstance(cid, str)}
        new = state

        if IDs.Control.CLEAR_FILTERS_BTN in triggered:
            new = new.cleared()

        for fid, value in zip(facet_ids or [], facet_values or []):
            attr = fid["attribute"]
            if attr in new.facets and new.facets[attr] != (value or ANY):
                new = new.with_facet(attr, value)

        if (search or "") != new.free_text:
            new = new.with_free_text(search)

        sort_key, direction = parse_sort_value(sort)
        if sort_key != new.sort_key or (sort_key and direction != new.sort_direction.value):
            new = new.with_sort(sort_key, direction)

        if new == state:
            if IDs.Control.PREV_PAGE_BTN in triggered and state.page_index > 0:
                new = state.with_page(state.page_index - 1)
            elif IDs.Control.NEXT_PAGE_BTN in triggered:
                new = state.with_page(state.page_index + 1)

        if new == state:
            raise exceptions.PreventUpdate

        logger.debug("Filter state changed", extra={"dataset": key, "state": new.to_dict()})
        return filter_store(key, new)

    # ---------------------------------------------------------
    # 4. Render table, pager, metrics and charts
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.ACCESS_MESSAGE, "children"),
        Output(IDs.Control.RESULTS_TABLE, "data"),
        Output(IDs.Control.RESULTS_TABLE, "columns"),
        Output(IDs.Control.RESULTS_TABLE, "selected_rows"),
        Output(IDs.Control.PAGE_LABEL, "children"),
        Output(IDs.Control.PREV_PAGE_BTN, "disabled"),
        Output(IDs.Control.NEXT_PAGE_BTN, "disabled"),
        Output(IDs.Control.METRICS_ROW, "children"),
        Output(IDs.Control.RESULT_SUMMARY, "children"),
        Output(IDs.Control.CHARTS, "children"),
        Output(IDs.Control.FAVORITE_BTN, "style"),
        Output(IDs.Control.EXPORT_CSV_BTN, "disabled"),
        Output(IDs.Control.EXPORT_JSON_BTN, "disabled"),
        Output(IDs.Control.EXPORT_REPORT_BTN, "disabled"),
        Input(IDs.Store.FILTER_STATE, "data"),
        Input(IDs.Store.CLIENT_STATE, "data"),
        State(IDs.Control.DATASET_SELECT, "value"),
    )
    def render_results(filter_data, client_data, dataset_key):
        with ClientState(ctx, client_data) as client:
            session = client.session
            favorites = set(client.favorites.ids)

        active = resolve_result(ctx, filter_data, session)
        if active is None:
            return _blocked(_access_message(ctx, dataset_key, session))

        result = active.result
        frame = result.to_frame(page_only=True)
        show_favorites = active.config.favorites and can(session, Capability.FAVORITE_RESOURCES)
        if show_favorites:
            frame.insert(0, "favourite", ["★" if r.id in favorites else "" for r in result.page_records])
        rows, columns = table_data(frame, active.dataset.schema.export_labels)

        metrics = headline_metrics(
            result,
            spent_field=active.config.metrics.get("spent_field"),
            status_field=active.config.metrics.get("status_field"),
        )

        charts = []
        for view_id, attribute, value_field in active.config.charts:
            try:
                view = ctx.registry.create(view_id, attribute, value_field)
            except KeyError:
                logger.warning("Unknown chart view", extra={"dataset": active.key, "view": view_id})
                continue
            charts.append(dbc.Col(dcc.Graph(figure=view.figure(result)), md=6))

        summary = f"{result.total_count} of {len(active.dataset)} records"
        if active.state.active_facets or active.state.free_text:
            summary += " match the current filters"
        if show_favorites:
            summary += f" · {len(favorites)} favourites"

        no_export = not can(session, Capability.EXPORT_DATA)
        return (
            None,
            rows,
            columns,
            [],
            page_label(result),
            not result.has_previous,
            not result.has_next,
            metric_cards(metrics),
            summary,
            dbc.Row(charts, className="g-3"),
            {} if show_favorites else HIDDEN,
            no_export,
            no_export,
            no_export,
        )

    # ---------------------------------------------------------
    # 5. Detail panel for the selected row
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.RECORD_DETAIL, "children"),
        Input(IDs.Control.RESULTS_TABLE, "selected_rows"),
        State(IDs.Store.FILTER_STATE, "data"),
        State(IDs.Store.CLIENT_STATE, "data"),
        prevent_initial_call=True,
    )
    def show_record_detail(selected_rows, filter_data, client_data):
        if not selected_rows:
            return None

        with ClientState(ctx, client_data) as client:
            session = client.session

        active = resolve_result(ctx, filter_data, session)
        if active is None:
            return None

        row = selected_rows[0]
        if not 0 <= row < len(active.result.page_records):
            return None
        return record_detail(active.result.page_records[row], active.dataset.schema)


def _blocked(message):
    return (message, [], [], [], "", True, True, [], "", [], HIDDEN, True, True, True)


def _access_message(ctx: AppContext, dataset_key: Optional[str], session):
    if not dataset_key:
        return dbc.Alert("Select a dataset to start browsing.", color="info")
    try:
        cfg = ctx.datasets.config(dataset_key)
    except KeyError:
        return dbc.Alert(f"Unknown dataset '{dataset_key}'.", color="danger")
    if can_access_dataset(session, cfg):
        return dbc.Alert(f"{cfg.name} could not be loaded.", color="danger")

    roles = ", ".join(role_display_name(r) for r in cfg.required_roles)
    if session is None:
        return dbc.Alert(
            [html.Strong(cfg.name), f" requires signing in ({roles})."],
            color="warning",
        )
    return dbc.Alert(
        [html.Strong(cfg.name), f" is restricted to: {roles}."],
        color="warning",
    )
