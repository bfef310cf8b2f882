from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, NamedTuple, Optional, Tuple

from greenhub.config.model import DatasetConfig
from greenhub.core.capabilities import can_access_dataset
from greenhub.core.dataset import Dataset
from greenhub.core.exceptions import ConfigError, DatasetSchemaError
from greenhub.core.filter_engine import FilteredResult, apply
from greenhub.core.filter_state import FilterState
from greenhub.core.session import Session

if TYPE_CHECKING:
    from greenhub.ui.context import AppContext

logger = logging.getLogger(__name__)


def filter_store(dataset_key: str, state: FilterState) -> Dict[str, Any]:
    """Payload for the filter-state store: the state is only valid for its dataset."""
    return {"dataset": dataset_key, "state": state.to_dict()}


def try_parse_filter_store(data: object) -> Tuple[Optional[str], Optional[FilterState]]:
    if not isinstance(data, dict) or not data.get("dataset"):
        return None, None
    try:
        return data["dataset"], FilterState.from_dict(data.get("state"))
    except (TypeError, ValueError, AttributeError):
        logger.exception("Invalid filter-state: %r", data)
        return None, None


def parse_sort_value(value: Optional[str]) -> Tuple[Optional[str], str]:
    """'key:dir' from the sort dropdown; '' means dataset order."""
    if not value:
        return None, "asc"
    key, _, direction = value.partition(":")
    return key or None, direction or "asc"


class ActiveResult(NamedTuple):
    key: str
    config: DatasetConfig
    dataset: Dataset
    state: FilterState
    result: FilteredResult


def resolve_result(ctx: AppContext, filter_data: object, session: Optional[Session]) -> Optional[ActiveResult]:
    """
    Re-run the filter pipeline for the stored filter state.

    Returns None when there is no state, the session may not see the dataset,
    or the dataset cannot be loaded.
    """
    key, state = try_parse_filter_store(filter_data)
    if key is None or state is None:
        return None
    try:
        cfg = ctx.datasets.config(key)
    except KeyError:
        logger.warning("Filter state for unknown dataset", extra={"dataset": key})
        return None
    if not can_access_dataset(session, cfg):
        return None
    try:
        dataset = ctx.datasets[key]
    except (ConfigError, DatasetSchemaError):
        return None
    return ActiveResult(key, cfg, dataset, state, apply(dataset, state))
