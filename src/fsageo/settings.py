"""
Settings bootstrap for fsageo.

Every CLI command reads configuration through `load_settings()` first: a base YAML file,
an optional scenario override, and the runtime directories derived from them.
"""

from __future__ import annotations

# `os` is only needed to publish `.env` values as environment variables.
import os
# `Path` keeps path handling portable.
from pathlib import Path
# YAML is dynamic, so settings stay a plain dict.
from typing import Any

# PyYAML parses the human-edited config files.
import yaml

# Logging is configured here so every later module can rely on it.
from fsageo.log import configure_logging


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    # Copy so caller-owned dictionaries are never mutated.
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        # Nested mappings merge so a scenario can override a single key like geometry.tolerance_m.
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            # Scalars and lists are replaced wholesale.
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    # A missing file means "no overrides".
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        # `safe_load` never constructs arbitrary Python objects from tags.
        data = yaml.safe_load(f) or {}
    # Config files must be mappings.
    if not isinstance(data, dict):
        raise ValueError(f"YAML must be a mapping: {path}")
    return data


def _load_dotenv_if_present(dotenv_path: Path) -> None:
    if not dotenv_path.exists():
        return
    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        # Blank lines, comments and lines without "=" are ignored.
        if not line or line.startswith("#") or "=" not in line:
            continue
        # Split once so values may contain "=".
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        # Variables already set in the environment win over `.env`.
        os.environ.setdefault(key, value)


def _resolve_project_root(config_path: Path) -> Path:
    config_dir = config_path.resolve().parent
    # config/default.yaml lives one level below the project root.
    if config_dir.name == "config":
        return config_dir.parent
    return config_dir


def _ensure_dirs(paths: dict[str, Path]) -> None:
    for p in paths.values():
        p.mkdir(parents=True, exist_ok=True)


def load_settings(config_path: Path, scenario: str = "default") -> dict[str, Any]:
    """
    Load base config and merge a scenario override file if present.
    Also creates runtime directories and initializes logging.
    """
    config_path = config_path.resolve()
    root = _resolve_project_root(config_path)

    _load_dotenv_if_present(root / ".env")

    base = _load_yaml(config_path)
    scenario_path = root / "config" / "scenarios" / f"{scenario}.yaml"
    override = _load_yaml(scenario_path)
    settings = _deep_merge(base, override)

    # Default to the production tolerance so a missing config still preprocesses.
    geometry = settings.setdefault("geometry", {})
    geometry.setdefault("tolerance_m", 50.0)
    if float(geometry["tolerance_m"]) < 0:
        raise ValueError(f"geometry.tolerance_m must be >= 0 (got {geometry['tolerance_m']}): {config_path}")

    project = settings.setdefault("project", {})
    paths = {
        "root": root,
        # Raw EPSG:3347 province boundary files (*.geojson).
        "raw_dir": root / project.get("raw_dir", "data/raw"),
        # Preprocessed WGS84 files, metadata.json and run_meta.json.
        "processed_dir": root / project.get("processed_dir", "data/processed"),
        # Per-province LDU point files (<stem>-ldu.geojson).
        "ldu_dir": root / project.get("ldu_dir", "data/ldu"),
        "logs_dir": root / project.get("logs_dir", "logs"),
    }
    _ensure_dirs(paths)
    # A file, not a directory: it is only read, never created here.
    paths["postal_codes"] = root / project.get("postal_codes_path", "data/postal-codes-canada.json")

    logger = configure_logging(
        paths["logs_dir"],
        level=project.get("log_level", "INFO"),
        filename=project.get("log_file", "fsageo.log"),
    )

    settings["_meta"] = {
        "config_path": str(config_path),
        "scenario": scenario,
        "scenario_path": str(scenario_path),
    }
    # Strings keep settings JSON-serializable.
    settings["paths"] = {k: str(v) for k, v in paths.items()}
    logger.info("Loaded settings: config=%s scenario=%s", config_path, scenario)
    return settings
