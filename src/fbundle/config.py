# ============================================================================
# FILE: config.py
# RELPATH: file_bundle/src/fbundle/config.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Optional JSON configuration file and resolved run settings
# ============================================================================

"""
Configuration for FileBundle.

ConfigManager reads an optional JSON file with nested sections and dot-path
access; missing keys fall back to DEFAULT_CONFIG and unknown keys are kept.
BundleConfig is the immutable, fully resolved set of settings for one run,
built from the file plus command-line overrides (the command line wins).
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from fbundle.exceptions import ConfigLoadError, ConfigValidationError
from fbundle.writer import normalize_separator

DEFAULT_GLOBS = ("**",)


class ConfigManager:
    """
    Manages the optional FileBundle configuration file.

    Without a file the manager serves DEFAULT_CONFIG. Values loaded from a
    file are merged over the defaults section by section.
    """

    DEFAULT_CONFIG = {
        "bundle": {
            "bundle_name": "file_bundle",
            "src_dir": ".",
            "out_dir": ".",
            "dst_ext": ".txt",
            "file_sep": None,
            "src_globs": [],
        },
        "walk": {
            "respect_ignore_files": False,
            "include_hidden": True,
            "follow_links": False,
        },
        "run": {
            "jobs": 0,
            "skip_invalid_patterns": False,
            "log_dir": None,
        },
    }

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to a JSON configuration file, or None for defaults
        """
        self.config_file = Path(config_file) if config_file else None
        self.config: Dict = self._deep_copy(self.DEFAULT_CONFIG)
        if self.config_file is not None:
            self.load()

    def load(self) -> Dict:
        """
        Load configuration from file and merge it over the defaults.

        Returns:
            Loaded configuration dictionary

        Raises:
            ConfigLoadError: If file cannot be read or parsed
        """
        try:
            text = self.config_file.read_text(encoding='utf-8')
            data = json.loads(text)
        except FileNotFoundError:
            raise ConfigLoadError(str(self.config_file), "File not found")
        except json.JSONDecodeError as e:
            raise ConfigLoadError(str(self.config_file), f"Invalid JSON: {str(e)}")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigLoadError(str(self.config_file), str(e))

        if not isinstance(data, dict):
            raise ConfigLoadError(str(self.config_file), "Top level must be a JSON object")

        merged = self._deep_copy(self.DEFAULT_CONFIG)
        for section, values in data.items():
            if isinstance(values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(values)
            else:
                merged[section] = values
        self.config = merged
        return self.config

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'bundle.src_dir')
            default: Default value if key not found
        """
        value = self.config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        keys = key_path.split('.')
        target = self.config
        for key in keys[:-1]:
            if key not in target:
                target[key] = {}
            target = target[key]
        target[keys[-1]] = value

    def validate(self) -> bool:
        """
        Validate configuration value types.

        Returns:
            True if valid

        Raises:
            ConfigValidationError: If validation fails
        """
        for key in ("bundle.bundle_name", "bundle.src_dir", "bundle.out_dir", "bundle.dst_ext"):
            value = self.get(key)
            if not isinstance(value, str):
                raise ConfigValidationError(key, value, "Must be a string")

        file_sep = self.get("bundle.file_sep")
        if file_sep is not None and not isinstance(file_sep, str):
            raise ConfigValidationError("bundle.file_sep", file_sep, "Must be a string or null")

        globs = self.get("bundle.src_globs")
        if not isinstance(globs, list) or not all(isinstance(g, str) for g in globs):
            raise ConfigValidationError("bundle.src_globs", globs, "Must be a list of strings")

        for key in ("walk.respect_ignore_files", "walk.include_hidden",
                    "walk.follow_links", "run.skip_invalid_patterns"):
            value = self.get(key)
            if not isinstance(value, bool):
                raise ConfigValidationError(key, value, "Must be true or false")

        jobs = self.get("run.jobs")
        if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 0:
            raise ConfigValidationError("run.jobs", jobs, "Must be a non-negative integer")

        log_dir = self.get("run.log_dir")
        if log_dir is not None and not isinstance(log_dir, str):
            raise ConfigValidationError("run.log_dir", log_dir, "Must be a string or null")

        return True

    def _deep_copy(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {k: self._deep_copy(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._deep_copy(item) for item in obj]
        else:
            return obj

    def export_dict(self) -> Dict:
        return self._deep_copy(self.config)


@dataclass(frozen=True)
class BundleConfig:
    """
    Resolved settings for one bundling run.

    ``file_sep`` holds the separator after backslash-n normalization.
    ``src_globs`` is never empty: no globs means bundle everything.
    """
    file_sep: str
    src_globs: Tuple[str, ...] = DEFAULT_GLOBS
    bundle_name: str = "file_bundle"
    src_dir: Path = Path(".")
    out_dir: Path = Path(".")
    dst_ext: str = ".txt"
    respect_ignore_files: bool = False
    include_hidden: bool = True
    follow_links: bool = False
    jobs: int = 0
    skip_invalid_patterns: bool = False
    verbose: bool = False
    log_dir: Optional[Path] = None

    def __post_init__(self):
        if self.file_sep is None:
            raise ConfigValidationError("file_sep", None, "A file separator is required")
        object.__setattr__(self, "file_sep", normalize_separator(self.file_sep))
        object.__setattr__(self, "src_globs", tuple(self.src_globs) or DEFAULT_GLOBS)
        object.__setattr__(self, "src_dir", Path(self.src_dir))
        object.__setattr__(self, "out_dir", Path(self.out_dir))
        if self.log_dir is not None:
            object.__setattr__(self, "log_dir", Path(self.log_dir))

    @property
    def output_path(self) -> Path:
        return self.out_dir / f"{self.bundle_name}{self.dst_ext}"

    @property
    def worker_count(self) -> int:
        return self.jobs if self.jobs > 0 else (os.cpu_count() or 1)

    def validate(self) -> None:
        """
        Raises:
            ConfigValidationError: If a setting cannot produce a valid run
        """
        if not self.bundle_name or "/" in self.bundle_name or "\\" in self.bundle_name:
            raise ConfigValidationError("bundle_name", self.bundle_name,
                                        "Must be a non-empty file name without separators")
        if "/" in self.dst_ext or "\\" in self.dst_ext:
            raise ConfigValidationError("dst_ext", self.dst_ext,
                                        "Must be a file extension without separators")
        if self.jobs < 0:
            raise ConfigValidationError("jobs", self.jobs, "Must be zero (auto) or positive")

    @classmethod
    def from_sources(cls,
                     manager: Optional[ConfigManager] = None,
                     overrides: Optional[Mapping[str, Any]] = None) -> "BundleConfig":
        """
        Merge configuration-file values with explicit overrides.

        Args:
            manager: Loaded ConfigManager (defaults when None)
            overrides: Values from the command line; None entries are ignored

        Raises:
            ConfigValidationError: If the file fails validation or no separator
                is available from either source
        """
        manager = manager or ConfigManager()
        manager.validate()
        overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

        def pick(name: str, key_path: str) -> Any:
            return overrides[name] if name in overrides else manager.get(key_path)

        globs = overrides.get("src_globs") or manager.get("bundle.src_globs") or []

        return cls(
            file_sep=pick("file_sep", "bundle.file_sep"),
            src_globs=tuple(globs),
            bundle_name=pick("bundle_name", "bundle.bundle_name"),
            src_dir=Path(pick("src_dir", "bundle.src_dir")),
            out_dir=Path(pick("out_dir", "bundle.out_dir")),
            dst_ext=pick("dst_ext", "bundle.dst_ext"),
            respect_ignore_files=pick("respect_ignore_files", "walk.respect_ignore_files"),
            include_hidden=pick("include_hidden", "walk.include_hidden"),
            follow_links=pick("follow_links", "walk.follow_links"),
            jobs=pick("jobs", "run.jobs"),
            skip_invalid_patterns=pick("skip_invalid_patterns", "run.skip_invalid_patterns"),
            verbose=bool(overrides.get("verbose", False)),
            log_dir=pick("log_dir", "run.log_dir"),
        )


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py, writer.py
# TESTS: tests/unit/test_config.py
# ============================================================================
