from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from greenhub.config.model import DatasetConfig, GlobalConfig
from greenhub.core.exceptions import ConfigError
from greenhub.services.session_service import PrincipalDirectory

logger = logging.getLogger(__name__)


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            principals.json
            datasets/
                climate.json
                resources.json
                ...

    Each file in 'datasets/' is parsed into a DatasetConfig. Files that are not
    valid JSON objects are skipped with an error log.

    :param root: Directory containing 'global.json' and optionally 'datasets/'.
    :return: A GlobalConfig instance.
    :raises FileNotFoundError: if global.json does not exist.
    """
    root = Path(root)
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    with global_path.open(encoding="utf-8") as f:
        raw_global = json.load(f)

    datasets_dir = root / "datasets"
    datasets: List[DatasetConfig] = []

    if datasets_dir.is_dir():
        for idx, config_file in enumerate(sorted(datasets_dir.glob("*.json"))):
            try:
                with config_file.open(encoding="utf-8") as f:
                    raw = json.load(f)
                datasets.append(
                    DatasetConfig.from_raw(raw, source_path=config_file, index=idx, config_root=root)
                )
            except (json.JSONDecodeError, ConfigError) as e:
                logger.error(
                    "Skipping invalid dataset definition",
                    extra={"file": config_file.name, "error": str(e)},
                )
    else:
        logger.warning("Datasets directory not found", extra={"path": str(datasets_dir)})

    defaults = GlobalConfig()
    return GlobalConfig(
        ui_title=raw_global.get("ui_title", defaults.ui_title),
        subtitle=raw_global.get("subtitle", defaults.subtitle),
        page_size=int(raw_global.get("page_size", defaults.page_size)),
        auth_latency_seconds=float(raw_global.get("auth_latency_seconds", defaults.auth_latency_seconds)),
        load_latency_seconds=float(raw_global.get("load_latency_seconds", defaults.load_latency_seconds)),
        principals_file=_resolve(root, raw_global.get("principals_file", "principals.json")),
        datasets=datasets,
    )


def load_dataset_registry(root: Path) -> Tuple[GlobalConfig, Dict[str, DatasetConfig]]:
    """
    Load the global config and index dataset definitions by key.

    Definitions with a broken schema or duplicate key are skipped and logged.

    :raises RuntimeError: if no dataset definition survives.
    """
    global_config = load_global_config(root)
    cfg_by_key: Dict[str, DatasetConfig] = {}

    for cfg in global_config.datasets:
        try:
            schema = cfg.schema
            roles = cfg.required_roles
        except (ConfigError, KeyError, TypeError, ValueError) as e:
            logger.error(
                "Skipping dataset due to config error",
                extra={"dataset": cfg.name, "file": cfg.source_path.name, "error": str(e)},
            )
            continue
        if schema.key in cfg_by_key:
            logger.error("Duplicate dataset key; skipping", extra={"key": schema.key, "file": cfg.source_path.name})
            continue
        cfg_by_key[schema.key] = cfg
        logger.debug(
            "Dataset definition registered",
            extra={"key": schema.key, "required_roles": [r.value for r in roles], "public": cfg.public},
        )

    logger.info(
        "Dataset definitions loaded",
        extra={"config_root": str(root), "dataset_keys": list(cfg_by_key)},
    )

    if not cfg_by_key:
        raise RuntimeError(f"No valid dataset definitions could be loaded from config root: {root}")

    return global_config, cfg_by_key


def load_principal_directory(path: Optional[Path]) -> PrincipalDirectory:
    """
    Load the principal directory from a JSON file: either a list of entries or
    {"principals": [...]}.

    :raises ConfigError: if the file is missing or malformed.
    """
    if path is None or not Path(path).is_file():
        raise ConfigError(f"Principal directory not found at {path}")
    with Path(path).open(encoding="utf-8") as f:
        raw = json.load(f)
    entries = raw.get("principals") if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise ConfigError(f"{path}: principal directory must be a list")
    try:
        directory = PrincipalDirectory.from_records(entries)
    except (KeyError, AttributeError, TypeError) as e:
        raise ConfigError(f"{path}: malformed principal entry ({e})") from e
    logger.info("Principal directory loaded", extra={"n_principals": len(directory)})
    return directory


def read_records(cfg: DatasetConfig) -> List[Any]:
    """
    Raw record list for a dataset definition.

    :raises ConfigError: if the data file is missing or holds no record list.
    """
    path = cfg.path
    if not path.is_file():
        raise ConfigError(f"Data file not found at {path}.")
    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Dataset '{cfg.key}': {path.name} is not valid JSON ({e})") from e
    if cfg.records_key:
        raw = raw.get(cfg.records_key) if isinstance(raw, dict) else None
    if not isinstance(raw, list):
        raise ConfigError(f"Dataset '{cfg.key}': {path.name} does not contain a record list")
    return raw


def _resolve(root: Path, value: Optional[str]) -> Optional[Path]:
    # Absolute paths are used as-is; relative paths resolve against the config root.
    if value is None:
        return None
    p = Path(value)
    return p if p.is_absolute() else (root / p).resolve()
