from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import plotly.graph_objs as go

from greenhub.core.filter_engine import FilteredResult


class BaseView(ABC):
    """
    Abstract base class for all summary chart views.

    Defines the contract that every view in the app must follow
    - expose an 'id' - used internally
    - expose a 'label' - used for UI/human-readable applications
    - implement 'compute_data' - summarise a FilteredResult (never the raw Dataset)
    - implement 'render_figure' - used to render the figure using Plotly

    `attribute` is the categorical attribute the view groups by.
    """

    id: str = None
    label: str = None

    def __init__(self, attribute: str, value_field: Optional[str] = None):
        self.attribute = attribute
        self.value_field = value_field

    @abstractmethod
    def compute_data(self, result: FilteredResult) -> Any:
        raise NotImplementedError()

    @abstractmethod
    def render_figure(self, data: Any, title: str = "") -> go.Figure:
        raise NotImplementedError()

    def figure(self, result: FilteredResult, title: str = "") -> go.Figure:
        """compute_data + render_figure in one call."""
        return self.render_figure(self.compute_data(result), title)

    @staticmethod
    def empty_figure(message: str) -> go.Figure:
        """
        Standardised 'no data' figure used by all views.
        """
        fig = go.Figure()
        fig.update_layout(
            title=message,
            xaxis={"visible": False},
            yaxis={"visible": False},
        )
        return fig
