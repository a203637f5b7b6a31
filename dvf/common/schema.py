"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from dvf.common.errors import ConfigError

CADASTRE_MODES = {"local", "remote"}


def _assert_mapping(obj: object, ctx: str) -> dict:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    return obj


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def validate_pipeline_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_mapping(cfg, "pipeline config")
    top_required = {"vintages", "source", "output", "concurrency", "cadastre"}
    _assert_required_keys(cfg, top_required, "pipeline config")
    _assert_no_unknown_keys(cfg, top_required, "pipeline config", allow_unknown)

    vintages = cfg["vintages"]
    if not isinstance(vintages, list) or not vintages:
        raise ConfigError("pipeline.vintages must be a non-empty list")
    cfg["vintages"] = [str(vintage) for vintage in vintages]
    dupes = {v for v in cfg["vintages"] if cfg["vintages"].count(v) > 1}
    if dupes:
        raise ConfigError(f"Duplicate vintages: {', '.join(sorted(dupes))}")

    _assert_required_keys(_assert_mapping(cfg["source"], "source"), {"filename_pattern", "encoding"}, "source")
    if "{vintage}" not in cfg["source"]["filename_pattern"]:
        raise ConfigError("source.filename_pattern must contain a {vintage} placeholder")

    _assert_required_keys(
        _assert_mapping(cfg["output"], "output"),
        {"communes_dir", "departements_dir", "full_filename"},
        "output",
    )

    concurrency = cfg["concurrency"]
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ConfigError("pipeline.concurrency must be a positive integer")

    cadastre = _assert_mapping(cfg["cadastre"], "cadastre")
    _assert_required_keys(cadastre, {"mode", "url_template", "path_template", "epsg", "rate_per_sec"}, "cadastre")
    if cadastre["mode"] not in CADASTRE_MODES:
        raise ConfigError(f"cadastre.mode must be one of: {', '.join(sorted(CADASTRE_MODES))}")

    return cfg


def validate_labels_config(cfg: dict, ctx: str) -> dict:
    _assert_mapping(cfg, ctx)
    _assert_required_keys(cfg, {"labels"}, ctx)
    labels = _assert_mapping(cfg["labels"], f"{ctx}.labels")
    for code, label in labels.items():
        if not isinstance(label, str) or not str(code).strip():
            raise ConfigError(f"Invalid label entry in {ctx}: {code!r}")
    cfg["labels"] = {str(code): label for code, label in labels.items()}
    return cfg
