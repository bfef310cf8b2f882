"""
Config package for greenhub.

Responsible for:
- config models (GlobalConfig, DatasetConfig)
- config I/O helpers (load_global_config / load_dataset_registry / load_principal_directory)
"""

from .model import GlobalConfig, DatasetConfig
from .loader import load_global_config, load_dataset_registry, load_principal_directory, read_records

__all__ = [
    "GlobalConfig",
    "DatasetConfig",
    "load_global_config",
    "load_dataset_registry",
    "load_principal_directory",
    "read_records",
]
