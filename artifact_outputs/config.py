from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from . import __version__

DEFAULT_CONFIG: dict[str, Any] = {
    "github": {
        "api_url": "https://api.github.com",
        "api_version": "2022-11-28",
        "timeout_sec": 60,
        "user_agent": f"artifact-outputs/{__version__}",
        # Page sizes for the run and artifact listings. Only the first page is read.
        "runs_per_page": 5,
        "artifacts_per_page": 100,
    },
    "archive": {
        "encoding": "utf-8",
    },
    "outputs": {
        "whole_document_name": "json_string",
    },
    "runtime": {
        "log_level": "INFO",
        "progress": True,
    },
}


def _deep_update(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_path: str | Path | None) -> dict[str, Any]:
    cfg = json.loads(json.dumps(DEFAULT_CONFIG))
    if not config_path:
        return cfg
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ValueError("Config root must be a mapping")
    _deep_update(cfg, payload)
    return cfg


def apply_cli_overrides(cfg: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    def _drop_none(value: Any) -> Any:
        if isinstance(value, dict):
            return {k: _drop_none(v) for k, v in value.items() if v is not None}
        if isinstance(value, list):
            return [_drop_none(v) for v in value if v is not None]
        return value

    cleaned = _drop_none(overrides)
    _deep_update(cfg, cleaned)
    return cfg
