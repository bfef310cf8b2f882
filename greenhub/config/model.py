from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from greenhub.core.dataset import DatasetSchema
from greenhub.core.exceptions import ConfigError
from greenhub.core.roles import Role


@dataclass
class DatasetConfig:
    """
    Parsed definition of a single dataset (one file in `datasets/`).

    Keeps the raw JSON and exposes typed views of it.
    """
    raw: Dict[str, Any]
    source_path: Path
    index: int
    config_root: Optional[Path] = None

    @property
    def key(self) -> str:
        return self.raw.get("key") or self.source_path.stem

    @property
    def name(self) -> str:
        return self.raw.get("name", f"Dataset {self.index}")

    @property
    def path(self) -> Path:
        """Data file; relative paths resolve against the config root."""
        try:
            p = Path(self.raw["file"])
        except KeyError:
            raise ConfigError(f"Dataset '{self.key}' has no 'file'") from None
        if p.is_absolute() or self.config_root is None:
            return p
        return (self.config_root / p).resolve()

    @property
    def records_key(self) -> Optional[str]:
        """Top-level key holding the record list when the data file is an object."""
        return self.raw.get("records_key")

    @property
    def required_roles(self) -> Tuple[Role, ...]:
        roles = []
        for value in self.raw.get("required_roles", []):
            role = Role.parse(value)
            if role is None:
                raise ConfigError(f"Dataset '{self.key}': unknown role {value!r}")
            roles.append(role)
        return tuple(roles)

    @property
    def public(self) -> bool:
        return bool(self.raw.get("public", False))

    @property
    def charts(self) -> List[Tuple[str, str, Optional[str]]]:
        """(view_id, attribute, value_field) for each configured summary chart."""
        return [
            (c["view"], c["attribute"], c.get("value_field"))
            for c in self.raw.get("charts", [])
            if isinstance(c, dict) and "view" in c and "attribute" in c
        ]

    @property
    def favorites(self) -> bool:
        """Whether records of this dataset can be saved as favourites."""
        return bool(self.raw.get("favorites", False))

    @property
    def metrics(self) -> Dict[str, str]:
        """Field roles for the headline metric cards (e.g. spent_field, status_field)."""
        raw = self.raw.get("metrics", {})
        return {k: v for k, v in raw.items() if isinstance(v, str)} if isinstance(raw, dict) else {}

    @property
    def schema(self) -> DatasetSchema:
        schema_raw = dict(self.raw.get("schema", {}))
        schema_raw.setdefault("key", self.key)
        schema_raw.setdefault("name", self.name)
        return DatasetSchema.from_dict(schema_raw)

    @classmethod
    def from_raw(
        cls,
        raw: Dict[str, Any],
        source_path: Path,
        index: int,
        config_root: Optional[Path] = None,
    ) -> DatasetConfig:
        if not isinstance(raw, dict):
            raise ConfigError(f"{source_path.name}: dataset definition must be a JSON object")
        return cls(raw=raw, source_path=source_path, index=index, config_root=config_root)


@dataclass
class GlobalConfig:
    ui_title: str = "GreenHub"
    subtitle: str = "Climate Adaptation Data Platform"
    page_size: int = 10
    auth_latency_seconds: float = 1.0
    load_latency_seconds: float = 1.0
    principals_file: Optional[Path] = None
    datasets: List[DatasetConfig] = field(default_factory=list)
