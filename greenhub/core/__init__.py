"""
Core domain layer: dataset abstraction, filter state and engine,
aggregation, roles and capability decisions
"""

from .dataset import Dataset, DatasetSchema, Record
from .filter_state import FilterState, SortDirection
from .filter_engine import FilteredResult, apply
from .roles import Capability, Role
from .session import Principal, Session

__all__ = [
    "Dataset",
    "DatasetSchema",
    "Record",
    "FilterState",
    "SortDirection",
    "FilteredResult",
    "apply",
    "Capability",
    "Role",
    "Principal",
    "Session",
]
