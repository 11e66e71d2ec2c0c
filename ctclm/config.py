from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from ctclm.data.labels import LabelConfig, label_config_from_mapping


class ConfigError(RuntimeError):
    pass


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping; got {type(data)}")
    return data


def deep_update(base: dict[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively update nested dicts."""
    out = copy.deepcopy(base)
    for k, v in patch.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), dict):
            out[k] = deep_update(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


@dataclass(frozen=True)
class ScorerConfig:
    """Thin wrapper around the scorer's nested mapping."""

    raw: dict[str, Any]
    path: Path | None = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw.get(key, default)

    def require(self, key: str) -> Any:
        if key not in self.raw:
            raise ConfigError(f"Missing required config key: {key}")
        return self.raw[key]

    @property
    def lm_path(self) -> Path:
        lm = self.require("lm")
        if "path" not in lm:
            raise ConfigError("Missing required config key: lm.path")
        p = Path(lm["path"])
        # Relative model paths are taken from the config file's directory.
        if not p.is_absolute() and self.path is not None:
            p = self.path.parent / p
        return p

    def labels(self) -> LabelConfig:
        try:
            return label_config_from_mapping(self.get("labels") or {})
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid 'labels' section: {exc}") from exc


def load_config(path: str | Path, overrides: Mapping[str, Any] | None = None) -> ScorerConfig:
    p = Path(path)
    raw = load_yaml(p)
    if overrides:
        raw = deep_update(raw, overrides)

    # Minimal validation for keys we rely on.
    if "lm" not in raw or not isinstance(raw["lm"], dict):
        raise ConfigError("Config must define 'lm' mapping")
    if "path" not in raw["lm"]:
        raise ConfigError("Config must define 'lm.path'")
    if "labels" in raw and not isinstance(raw["labels"], dict):
        raise ConfigError("'labels' must be a mapping")

    cfg = ScorerConfig(raw=raw, path=p)
    cfg.labels()
    return cfg
