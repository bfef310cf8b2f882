from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from greenhub.core import aggregator
from greenhub.core.filter_engine import FilteredResult
from greenhub.views.base_view import BaseView


class GroupSummaryView(BaseView):
    """
    Record count and average value per group, side by side.

    Bars follow the group order from the aggregator (first occurrence in the
    filtered records), so the chart reads in the same order as the table.
    """

    id = "group_summary"
    label = "Count & average"

    def compute_data(self, result: FilteredResult) -> pd.DataFrame:
        groups = aggregator.group_by(result, self.attribute, value_field=self.value_field)
        return aggregator.to_frame(groups)

    def render_figure(self, data: pd.DataFrame, title: str = "") -> go.Figure:
        if data.empty:
            return self.empty_figure("No records match the current filters")

        keys = data["key"].astype(str)
        fig = make_subplots(rows=1, cols=2, subplot_titles=("Records", "Average value"))
        fig.add_bar(x=keys, y=data["count"], row=1, col=1, name="Records")
        fig.add_bar(x=keys, y=data["average"], row=1, col=2, name="Average")

        fig.update_xaxes(title_text=self.attribute.replace("_", " ").title(), row=1, col=1)
        fig.update_xaxes(title_text=self.attribute.replace("_", " ").title(), row=1, col=2)
        fig.update_layout(
            height=420,
            margin=dict(l=40, r=40, t=60, b=40),
            title=title or f"By {self.attribute.replace('_', ' ')}",
            showlegend=False,
        )
        return fig


class GroupTotalView(BaseView):
    """Summed value per group (e.g. budget per region)."""

    id = "group_total"
    label = "Total value"

    def compute_data(self, result: FilteredResult) -> pd.DataFrame:
        groups = aggregator.group_by(result, self.attribute, value_field=self.value_field)
        return aggregator.to_frame(groups)

    def render_figure(self, data: pd.DataFrame, title: str = "") -> go.Figure:
        if data.empty:
            return self.empty_figure("No records match the current filters")

        fig = go.Figure(go.Bar(x=data["key"].astype(str), y=data["sum"], name="Total"))
        fig.update_layout(
            height=420,
            margin=dict(l=40, r=40, t=60, b=40),
            title=title or f"Total {self.value_field or 'value'} by {self.attribute.replace('_', ' ')}",
        )
        return fig


class ShareView(BaseView):
    """Share of records per group as a pie (e.g. project status)."""

    id = "share"
    label = "Share of records"

    def compute_data(self, result: FilteredResult) -> pd.DataFrame:
        counts = aggregator.count_by(result, self.attribute)
        return pd.DataFrame({"key": list(counts), "count": list(counts.values())})

    def render_figure(self, data: pd.DataFrame, title: str = "") -> go.Figure:
        if data.empty:
            return self.empty_figure("No records match the current filters")

        fig = go.Figure(go.Pie(labels=data["key"].astype(str), values=data["count"], sort=False))
        fig.update_layout(
            height=420,
            margin=dict(l=40, r=40, t=60, b=40),
            title=title or f"Share by {self.attribute.replace('_', ' ')}",
        )
        return fig
