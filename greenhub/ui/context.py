from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from greenhub.config.model import GlobalConfig
from greenhub.services.dataset_service import DatasetManager
from greenhub.services.session_service import PrincipalDirectory
from greenhub.views.view_registry import ViewRegistry


@dataclass
class AppContext:
    """
    Holds shared state for the Dash app: config, the dataset manager, the
    principal directory and the view registry. This is passed into layout +
    callback registration functions instead of using module-level globals.

    Nothing here is per-user: sessions and favourites live in the browser's
    local store and are opened per callback through ClientState.
    """
    config_root: Path
    global_config: GlobalConfig
    datasets: DatasetManager
    directory: PrincipalDirectory
    registry: ViewRegistry
    default_dataset_key: Optional[str] = None
