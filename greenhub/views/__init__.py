from .base_view import BaseView
from .group_summary_view import GroupSummaryView, GroupTotalView, ShareView
from .view_registry import ViewRegistry

__all__ = ["BaseView", "GroupSummaryView", "GroupTotalView", "ShareView", "ViewRegistry", "build_view_registry"]


def build_view_registry() -> ViewRegistry:
    registry = ViewRegistry()
    registry.register(GroupSummaryView)
    registry.register(GroupTotalView)
    registry.register(ShareView)
    return registry
