from __future__ import annotations

import json
from pathlib import Path

import pytest

from greenhub.config.loader import (
    load_dataset_registry,
    load_global_config,
    load_principal_directory,
    read_records,
)
from greenhub.config.model import DatasetConfig
from greenhub.core.exceptions import ConfigError
from greenhub.core.roles import Role

REPO_CONFIG = Path(__file__).resolve().parents[3] / "config"


def _write_json(path: Path, payload) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")


def _dataset_def(key: str, **overrides):
    raw = {
        "key": key,
        "name": key.title(),
        "file": f"data/{key}.json",
        "required_roles": ["researcher"],
        "schema": {"categorical": ["region"]},
    }
    raw.update(overrides)
    return raw


def test_global_config_defaults_and_overrides(tmp_path):
    _write_json(tmp_path / "global.json", {"ui_title": "Test Hub", "page_size": 5, "auth_latency_seconds": 0})
    _write_json(tmp_path / "datasets" / "a.json", _dataset_def("a"))

    cfg = load_global_config(tmp_path)

    assert cfg.ui_title == "Test Hub"
    assert cfg.page_size == 5
    assert cfg.auth_latency_seconds == 0.0
    assert cfg.load_latency_seconds == 1.0
    assert cfg.principals_file == (tmp_path / "principals.json").resolve()
    assert [d.key for d in cfg.datasets] == ["a"]


def test_missing_global_json_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_global_config(tmp_path)


def test_registry_skips_invalid_and_duplicate_definitions(tmp_path):
    _write_json(tmp_path / "global.json", {})
    _write_json(tmp_path / "datasets" / "a.json", _dataset_def("a"))
    _write_json(tmp_path / "datasets" / "b.json", _dataset_def("a"))
    _write_json(tmp_path / "datasets" / "c.json", _dataset_def("c", required_roles=["wizard"]))
    _write_json(tmp_path / "datasets" / "d.json", ["not", "an", "object"])
    (tmp_path / "datasets" / "e.json").write_text("{broken", encoding="utf-8")

    _, cfg_by_key = load_dataset_registry(tmp_path)

    assert list(cfg_by_key) == ["a"]
    assert cfg_by_key["a"].source_path.name == "a.json"


def test_registry_with_no_valid_definitions_fails_fast(tmp_path):
    _write_json(tmp_path / "global.json", {})

    with pytest.raises(RuntimeError):
        load_dataset_registry(tmp_path)


def test_dataset_config_views(tmp_path):
    raw = _dataset_def(
        "nap",
        public=False,
        required_roles=["government", "admin"],
        metrics={"spent_field": "spent", "status_field": "status", "bogus": 3},
        charts=[{"view": "share", "attribute": "status"}, {"attribute": "no-view"}],
    )
    cfg = DatasetConfig.from_raw(raw, source_path=tmp_path / "nap.json", index=0, config_root=tmp_path)

    assert cfg.required_roles == (Role.GOVERNMENT, Role.ADMIN)
    assert cfg.public is False
    assert cfg.favorites is False
    assert cfg.metrics == {"spent_field": "spent", "status_field": "status"}
    assert cfg.charts == [("share", "status", None)]
    assert cfg.path == (tmp_path / "data" / "nap.json").resolve()
    assert cfg.schema.key == "nap"
    assert cfg.schema.name == "Nap"


def test_dataset_config_without_file_raises(tmp_path):
    raw = _dataset_def("x")
    del raw["file"]
    cfg = DatasetConfig.from_raw(raw, source_path=tmp_path / "x.json", index=0)

    with pytest.raises(ConfigError):
        cfg.path


def test_read_records_with_records_key(tmp_path):
    _write_json(tmp_path / "data" / "a.json", {"items": [{"id": "1"}]})
    cfg = DatasetConfig.from_raw(_dataset_def("a", records_key="items"), tmp_path / "a.json", 0, tmp_path)

    assert read_records(cfg) == [{"id": "1"}]


def test_read_records_rejects_non_list(tmp_path):
    _write_json(tmp_path / "data" / "a.json", {"items": {"id": "1"}})
    cfg = DatasetConfig.from_raw(_dataset_def("a", records_key="items"), tmp_path / "a.json", 0, tmp_path)

    with pytest.raises(ConfigError):
        read_records(cfg)


def test_principal_directory_formats(tmp_path):
    entries = [{"identifier": "a@b", "secret": "s", "role": "admin"}]
    _write_json(tmp_path / "list.json", entries)
    _write_json(tmp_path / "wrapped.json", {"principals": entries})

    assert len(load_principal_directory(tmp_path / "list.json")) == 1
    assert load_principal_directory(tmp_path / "wrapped.json").match("a@b", "s") is not None


def test_principal_directory_errors(tmp_path):
    _write_json(tmp_path / "bad.json", [{"secret": "no identifier"}])
    _write_json(tmp_path / "scalar.json", {"principals": "nope"})

    with pytest.raises(ConfigError):
        load_principal_directory(tmp_path / "missing.json")
    with pytest.raises(ConfigError):
        load_principal_directory(tmp_path / "bad.json")
    with pytest.raises(ConfigError):
        load_principal_directory(tmp_path / "scalar.json")


def test_bundled_config_loads():
    global_config, cfg_by_key = load_dataset_registry(REPO_CONFIG)
    directory = load_principal_directory(global_config.principals_file)

    assert set(cfg_by_key) == {"climate", "resources", "nap_metrics"}
    assert cfg_by_key["resources"].public is True
    assert cfg_by_key["nap_metrics"].required_roles == (Role.GOVERNMENT, Role.ADMIN)
    assert len(directory) == 4
    for key, cfg in cfg_by_key.items():
        assert read_records(cfg), key


def test_read_records_rejects_invalid_json(tmp_path):
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "a.json").write_text("[{", encoding="utf-8")
    cfg = DatasetConfig.from_raw(_dataset_def("a"), tmp_path / "a.json", 0, tmp_path)

    with pytest.raises(ConfigError):
        read_records(cfg)
