from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc

from greenhub.ui.ids import IDs
from greenhub.ui.layout.build_filter_panel import build_filter_panel, build_tools_panel
from greenhub.ui.layout.build_login_panel import build_login_panel
from greenhub.ui.layout.build_navbar import build_navbar
from greenhub.ui.layout.build_results_panel import build_results_panel

if TYPE_CHECKING:
    from greenhub.ui.context import AppContext


def build_layout(ctx: AppContext):
    return dbc.Container(
        fluid=True,
        children=[
            build_navbar(ctx.global_config),

            # App-level stores
            dcc.Store(id=IDs.Store.CLIENT_STATE, storage_type="local"),
            dcc.Store(id=IDs.Store.FILTER_STATE, storage_type="memory"),

            dbc.Row(
                [
                    dbc.Col(
                        [
                            build_login_panel(),
                            build_tools_panel(),
                            build_filter_panel(),
                        ],
                        md=3,
                    ),
                    dbc.Col(build_results_panel(), md=9),
                ],
                className="gx-3",
            ),
        ],
    )
