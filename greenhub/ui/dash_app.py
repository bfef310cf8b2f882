from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import dash_bootstrap_components as dbc
from dash import Dash

from greenhub.config.loader import load_dataset_registry, load_principal_directory
from greenhub.config.model import DatasetConfig
from greenhub.services.dataset_service import DatasetManager
from greenhub.ui.callbacks.callbacks_auth import register_auth_callbacks
from greenhub.ui.callbacks.callbacks_browse import register_browse_callbacks
from greenhub.ui.callbacks.callbacks_io import register_io_callbacks
from greenhub.ui.context import AppContext
from greenhub.ui.layout import build_layout
from greenhub.views import build_view_registry

logger = logging.getLogger(__name__)


def create_dash_app(config_root: Path | str = Path("config")) -> Dash:
    config_root = Path(config_root)

    # 1) Load Config
    global_config, cfg_by_key = load_dataset_registry(config_root)
    directory = load_principal_directory(global_config.principals_file)

    # 2) Initialize Service Layer
    dataset_manager = DatasetManager(cfg_by_key, latency=global_config.load_latency_seconds)
    registry = build_view_registry()

    # 3) App Context
    ctx = AppContext(
        config_root=config_root,
        global_config=global_config,
        datasets=dataset_manager,
        directory=directory,
        registry=registry,
        default_dataset_key=_choose_default_dataset(cfg_by_key),
    )

    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
        suppress_callback_exceptions=True,
    )
    app.title = global_config.ui_title
    app.layout = build_layout(ctx)

    # Register callbacks
    register_auth_callbacks(app, ctx)
    register_browse_callbacks(app, ctx)
    register_io_callbacks(app, ctx)

    logger.info(
        "Dash app created",
        extra={"config_root": str(config_root), "datasets": list(cfg_by_key), "default": ctx.default_dataset_key},
    )
    return app


def _choose_default_dataset(cfg_by_key: Dict[str, DatasetConfig]) -> Optional[str]:
    """Prefer a public dataset so anonymous visitors land on something they can see."""
    for key, cfg in cfg_by_key.items():
        if cfg.public:
            return key
    return next(iter(cfg_by_key), None)
