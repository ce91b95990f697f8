"""Configuration loading for cemgen (.cemgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .diagnostics import AnalysisError
from .plugins import FRAMEWORK_FLAGS

CONFIG_FILENAME = ".cemgen.yml"
DEFAULT_GLOB = "**/*.{js,ts,tsx}"
IGNORE = [
    "!node_modules/**/*.*",
    "!bower_components/**/*.*",
    "!**/*.test.{js,ts}",
    "!**/*.suite.{js,ts}",
    "!**/*.config.{js,ts}",
]


class ConfigError(AnalysisError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class DependencyConfig:
    """A dependency whose manifest is loaded as linking context."""

    name: str
    manifest: Optional[str] = None

    def as_spec(self) -> str | Dict[str, str]:
        if self.manifest is None:
            return self.name
        return {"name": self.name, "manifest": self.manifest}


@dataclass
class CemConfig:
    """Represents the settings defined in .cemgen.yml."""

    root: Path
    globs: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    outdir: str = ""
    dev: bool = False
    watch: bool = False
    packagejson: bool = True
    litelement: bool = False
    fast: bool = False
    stencil: bool = False
    catalyst: bool = False
    plugins: List[str] = field(default_factory=list)
    dependencies: List[DependencyConfig] = field(default_factory=list)
    debounce_seconds: float = 0.2
    workers: Optional[int] = None
    max_reexport_hops: int = 10

    @property
    def framework_flags(self) -> Dict[str, bool]:
        return {name: bool(getattr(self, name)) for name in FRAMEWORK_FLAGS}

    def merged_globs(self, cli_globs: Sequence[str] = (), cli_exclude: Sequence[str] = ()) -> List[str]:
        return merge_globs_and_excludes(self.globs, self.exclude, cli_globs, cli_exclude)


def merge_globs_and_excludes(
    user_globs: Sequence[str] = (),
    user_exclude: Sequence[str] = (),
    cli_globs: Sequence[str] = (),
    cli_exclude: Sequence[str] = (),
) -> List[str]:
    """Combine default, configured and command-line globs.

    Any provided glob replaces the default one. Excludes become ``!``
    patterns and the fixed ignore list always comes last.
    """
    defaults = [] if (user_globs or cli_globs) else [DEFAULT_GLOB]
    return [
        *defaults,
        *user_globs,
        *cli_globs,
        *(f"!{item}" for item in user_exclude),
        *(f"!{item}" for item in cli_exclude),
        *IGNORE,
    ]


def load_config(config_path: Path) -> CemConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CemConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = CemConfig(root=root)
    config.globs = _as_str_list(data.get("globs"))
    config.exclude = _as_str_list(data.get("exclude"))
    config.outdir = _as_str(data.get("outdir")) or ""
    config.plugins = _as_str_list(data.get("plugins"))
    config.dependencies = _as_dependencies(data.get("dependencies"))

    for name in ("dev", "watch", "packagejson", *FRAMEWORK_FLAGS):
        value = _as_bool(data.get(name))
        if value is not None:
            setattr(config, name, value)

    debounce = _as_float(data.get("debounce_seconds"))
    if debounce is not None:
        if debounce < 0:
            raise ConfigError("debounce_seconds must not be negative")
        config.debounce_seconds = debounce

    workers = _as_int(data.get("workers"))
    if workers is not None:
        if workers < 1:
            raise ConfigError("workers must be at least 1")
        config.workers = workers

    hops = _as_int(data.get("max_reexport_hops"))
    if hops is not None:
        if hops < 1:
            raise ConfigError("max_reexport_hops must be at least 1")
        config.max_reexport_hops = hops

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dependencies(value: Any) -> List[DependencyConfig]:
    if value is None:
        return []
    if isinstance(value, (str, Mapping)):
        value = [value]
    if not isinstance(value, Sequence):
        raise ConfigError("dependencies must be a list")
    dependencies: List[DependencyConfig] = []
    for item in value:
        if isinstance(item, str):
            dependencies.append(DependencyConfig(name=item))
        elif isinstance(item, Mapping) and _as_str(item.get("name")):
            dependencies.append(
                DependencyConfig(name=str(item["name"]), manifest=_as_str(item.get("manifest")))
            )
        else:
            raise ConfigError(f"Invalid dependency entry: {item!r}")
    return dependencies


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CemConfig",
    "ConfigError",
    "DEFAULT_GLOB",
    "FRAMEWORK_FLAGS",
    "DependencyConfig",
    "IGNORE",
    "load_config",
    "merge_globs_and_excludes",
]
