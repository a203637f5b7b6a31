"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dvf.common.errors import ConfigError
from dvf.common.fs import read_yaml
from dvf.common.schema import validate_labels_config, validate_pipeline_config


@dataclass(frozen=True)
class ConfigBundle:
    pipeline: dict
    natures_culture: dict[str, str]
    natures_culture_speciale: dict[str, str]


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must be a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    def _load(filename: str) -> dict:
        overlay_path = overlay_config_dir / filename if overlay_config_dir is not None else None
        return _load_yaml_with_overlay(config_dir / filename, overlay_path)

    pipeline = validate_pipeline_config(_load("pipeline.yml"), allow_unknown=allow_unknown)
    cultures = validate_labels_config(_load("natures_culture.yml"), "natures_culture")
    cultures_speciales = validate_labels_config(_load("natures_culture_speciale.yml"), "natures_culture_speciale")
    return ConfigBundle(
        pipeline=pipeline,
        natures_culture=cultures["labels"],
        natures_culture_speciale=cultures_speciales["labels"],
    )


def resolve_vintages(pipeline_config: dict, requested: list[str] | None = None) -> list[str]:
    """Return the requested vintages, or every configured one."""
    configured = pipeline_config["vintages"]
    if requested:
        unknown = sorted(set(requested) - set(configured))
        if unknown:
            raise ConfigError(f"Unknown vintages: {', '.join(unknown)}")
        return list(dict.fromkeys(requested))
    return list(configured)
