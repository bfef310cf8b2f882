from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterator, Mapping, Optional

from greenhub.config.loader import read_records
from greenhub.config.model import DatasetConfig
from greenhub.core.cancellation import CancellationToken, SleepFn, simulated_latency
from greenhub.core.dataset import Dataset
from greenhub.core.exceptions import ConfigError, DatasetSchemaError, OperationCancelledError

logger = logging.getLogger(__name__)

DEFAULT_LOAD_LATENCY = 1.0


def from_config(cfg: DatasetConfig) -> Dataset:
    """
    Materialise a Dataset from its definition.
    """
    return Dataset.load(read_records(cfg), cfg.schema)


class DatasetManager(Mapping[str, Dataset]):
    """
    Central service for managing datasets, keyed by dataset key.

    Implements the Mapping interface (dict-like) for synchronous lazy access,
    and `load()` for the latency-bearing asynchronous path. Each dataset is
    materialised at most once; later calls return the same immutable Dataset.
    """

    def __init__(
        self,
        cfg_by_key: Dict[str, DatasetConfig],
        *,
        latency: float = DEFAULT_LOAD_LATENCY,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._cfg_by_key = cfg_by_key
        self._loaded: Dict[str, Dataset] = {}
        self._latency = latency
        self._sleep = sleep

    def config(self, key: str) -> DatasetConfig:
        cfg = self._cfg_by_key.get(key)
        if cfg is None:
            raise KeyError(f"Unknown dataset '{key}'")
        return cfg

    def configs(self) -> Dict[str, DatasetConfig]:
        return dict(self._cfg_by_key)

    def __getitem__(self, key: str) -> Dataset:
        # 1. Fast path: already materialised
        if key in self._loaded:
            return self._loaded[key]

        # 2. Check config existence
        cfg = self.config(key)

        # 3. Lazy load
        try:
            logger.info("Lazy-loading dataset", extra={"dataset": key, "path": str(cfg.raw.get("file", ""))})
            ds = from_config(cfg)
        except (ConfigError, DatasetSchemaError) as e:
            logger.error("Dataset config error on load", extra={"dataset": key, "error": str(e)})
            raise
        except Exception:
            logger.exception("Unexpected error while loading dataset", extra={"dataset": key})
            raise

        self._loaded[key] = ds
        return ds

    def __iter__(self) -> Iterator[str]:
        return iter(self._cfg_by_key)

    def __len__(self) -> int:
        return len(self._cfg_by_key)

    def get(self, key: str, default=None) -> Optional[Dataset]:
        try:
            return self[key]
        except KeyError:
            return default

    def is_loaded(self, key: str) -> bool:
        return key in self._loaded

    async def load(self, key: str, *, cancel_token: Optional[CancellationToken] = None) -> Dataset:
        """
        Load a dataset behind the simulated network latency.

        Already-loaded datasets return without waiting.

        :raises OperationCancelledError: the token was cancelled before the
            dataset was handed back; the caller must not apply a result
        """
        if key in self._loaded:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            return self._loaded[key]

        self.config(key)
        try:
            await simulated_latency(self._latency, cancel_token, self._sleep)
        except OperationCancelledError:
            logger.info("Dataset load cancelled", extra={"dataset": key})
            raise

        return self[key]
