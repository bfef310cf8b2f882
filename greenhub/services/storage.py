from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from greenhub.core.exceptions import CorruptPayloadError

logger = logging.getLogger(__name__)

Validator = Callable[[Any], None]

NAMESPACE = "greenhub"


class StorageBackend(ABC):
    """
    Abstract byte-level key-value store (local files, in-memory, browser store).
    """

    @abstractmethod
    def write_bytes(self, key: str, data: bytes) -> None:
        pass

    @abstractmethod
    def read_bytes(self, key: str) -> Optional[bytes]:
        """Stored bytes for `key`, or None if the key is absent."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key`; no-op if it is absent."""
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass


class InMemoryStorage(StorageBackend):
    """
    Dict-backed store.

    Also mirrors the browser's local store in the Dash UI: callbacks seed it
    from the dcc.Store data and write snapshot() back.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, bytes] = {}
        for key, value in (initial or {}).items():
            self._data[str(key)] = value.encode("utf-8") if isinstance(value, str) else bytes(value)

    def write_bytes(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    def read_bytes(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def exists(self, key: str) -> bool:
        return key in self._data

    def snapshot(self) -> Dict[str, str]:
        return {k: v.decode("utf-8", errors="replace") for k, v in self._data.items()}


class LocalFileSystemStorage(StorageBackend):
    """
    One file per key under `root`.
    """

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        # Prevent path traversal attacks
        full_path = (self.root / f"{key.replace(':', '__')}.json").resolve()
        if full_path.parent != self.root:
            raise ValueError(f"Access denied: {key}")
        return full_path

    def write_bytes(self, key: str, data: bytes) -> None:
        target = self._resolve(key)
        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, target)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def read_bytes(self, key: str) -> Optional[bytes]:
        path = self._resolve(key)
        if not path.is_file():
            return None
        return path.read_bytes()

    def delete(self, key: str) -> None:
        self._resolve(key).unlink(missing_ok=True)

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()


class PersistenceAdapter:
    """
    Namespaced JSON values over a StorageBackend.

    - get() never raises: a payload that cannot be decoded, or that the
      optional validator rejects, is removed and reported as absent
    - set() replaces the whole value for the key
    """

    def __init__(self, backend: StorageBackend, namespace: str = NAMESPACE):
        self.backend = backend
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str, validate: Optional[Validator] = None) -> Optional[Any]:
        full_key = self._key(key)
        raw = self.backend.read_bytes(full_key)
        if raw is None:
            return None
        try:
            value = json.loads(raw.decode("utf-8"))
            if validate is not None:
                validate(value)
        except (UnicodeDecodeError, json.JSONDecodeError, CorruptPayloadError, ValueError, TypeError) as e:
            logger.warning(
                "Discarding corrupt persisted value",
                extra={"key": full_key, "error": str(e)},
            )
            self.backend.delete(full_key)
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        data = json.dumps(value).encode("utf-8")
        self.backend.write_bytes(self._key(key), data)

    def remove(self, key: str) -> None:
        self.backend.delete(self._key(key))
