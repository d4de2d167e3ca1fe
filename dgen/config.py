"""Project settings.

Settings are an immutable tree of dataclasses built once (from defaults,
optionally merged with a YAML file) and passed explicitly to the loader and
the generator. Keys are snake_case; camelCase keys (``maxColumns``) are
accepted when reading files and dotted keys.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

SETTINGS_FILE = "dgen-one-settings.yaml"

_UPPER = re.compile(r"([A-Z])")


def snake_case(key: str) -> str:
    """Convert ``maxColumns`` to ``max_columns`` (snake_case keys are kept)."""
    return _UPPER.sub(lambda m: "_" + m.group(1).lower(), key)


@dataclass(frozen=True)
class CodeSettings:
    """How code and comments are read."""

    file_headers: bool = True
    file_title: bool = True
    file_title_max_rows: int = 1
    file_description: bool = True
    file_description_max_rows: int = 2
    section_title_max_rows: int = 1


@dataclass(frozen=True)
class StructureSettings:
    """Which extra files are generated."""

    generate_index: bool = True
    generate_alias_entries: bool = True


@dataclass(frozen=True)
class OutputSettings:
    """Text layout of the generated documentation."""

    min_columns: int = 60
    max_columns: int = 120
    section_underlines: tuple[str, ...] = ("**", "==", "=", "~", "-")


@dataclass(frozen=True)
class PathSettings:
    """Output locations, relative to the project directory."""

    output_path: str = "docs"
    base_code_path: str = "code"


@dataclass(frozen=True)
class ProjectSettings:
    """Project metadata and source file filters (regular expressions)."""

    name: str = ""
    author: str = ""
    version: str = ""
    main: str = ""
    recursive: bool = True
    include_only: tuple[str, ...] = (r"\.m?js$",)
    exclude_files: tuple[str, ...] = ()
    include_paths: tuple[str, ...] = ()
    exclude_paths: tuple[str, ...] = (r"(^|/)node_modules$", r"(^|/)\.[^/.]")


@dataclass(frozen=True)
class Settings:
    """All settings."""

    code: CodeSettings = field(default_factory=CodeSettings)
    structure: StructureSettings = field(default_factory=StructureSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    paths: PathSettings = field(default_factory=PathSettings)
    project: ProjectSettings = field(default_factory=ProjectSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Settings:
        """Merge a (partial) mapping over the defaults.

        Unknown keys are ignored.

        Raises:
            ValueError: If a section is not a mapping or a value has the wrong type.
        """
        return _merge(cls(), data or {}, "")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary (lists instead of tuples)."""
        return _plain(dataclasses.asdict(self))

    def get(self, key: str | None = None) -> Any:
        """Read a value or a section by dotted key.

        Args:
            key: e.g. ``output.maxColumns`` or ``output.max_columns``. None
                returns everything.

        Raises:
            KeyError: If the key does not exist.
        """
        value: Any = self
        for part in _split_key(key):
            if not dataclasses.is_dataclass(value) or not hasattr(value, part):
                raise KeyError(key)
            value = getattr(value, part)
        if dataclasses.is_dataclass(value):
            return _plain(dataclasses.asdict(value))
        if isinstance(value, tuple):
            return list(value)
        return value

    def with_value(self, key: str, value: Any) -> Settings:
        """Return a copy with one value replaced.

        Raises:
            KeyError: If the key does not name a single value.
            ValueError: If the value has the wrong type.
        """
        parts = _split_key(key)
        if not parts:
            raise KeyError(key)
        return _replace(self, parts, value, key)


def _split_key(key: str | None) -> list[str]:
    if not key:
        return []
    return [snake_case(part) for part in key.split(".")]


def _plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _coerce(current: Any, value: Any, key: str) -> Any:
    if isinstance(current, tuple):
        if isinstance(value, str):
            return (value,)
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"Expected a list for {key}, got {value!r}")
        return tuple(value)
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise ValueError(f"Expected true or false for {key}, got {value!r}")
        return value
    if isinstance(current, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Expected an integer for {key}, got {value!r}")
        return value
    if isinstance(current, str):
        return "" if value is None else str(value)
    return value


def _merge(current: Any, data: Any, prefix: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping for {prefix or 'settings'}, got {data!r}")
    values = {}
    for key, raw in data.items():
        name = snake_case(str(key))
        if not any(f.name == name for f in dataclasses.fields(current)):
            continue
        existing = getattr(current, name)
        path = f"{prefix}.{name}" if prefix else name
        if dataclasses.is_dataclass(existing):
            values[name] = _merge(existing, raw, path)
        else:
            values[name] = _coerce(existing, raw, path)
    return dataclasses.replace(current, **values)


def _replace(current: Any, parts: list[str], value: Any, key: str) -> Any:
    name = parts[0]
    if not dataclasses.is_dataclass(current) or not hasattr(current, name):
        raise KeyError(key)
    existing = getattr(current, name)
    if len(parts) == 1:
        if dataclasses.is_dataclass(existing):
            raise KeyError(key)
        return dataclasses.replace(current, **{name: _coerce(existing, value, key)})
    return dataclasses.replace(current, **{name: _replace(existing, parts[1:], value, key)})


def load_settings(path: Path | str) -> Settings:
    """Load settings from a YAML file.

    Args:
        path: Settings file. A missing file gives the defaults.

    Returns:
        Settings merged over the defaults.

    Raises:
        ValueError: If the file is not valid YAML or has invalid values.
    """
    path = Path(path)
    if not path.exists():
        return Settings()
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid settings file {path}: {e}") from e
    try:
        return Settings.from_dict(data)
    except ValueError as e:
        raise ValueError(f"Invalid settings file {path}: {e}") from e


def save_settings(settings: Settings, path: Path | str) -> None:
    """Save settings to a YAML file.

    Args:
        settings: Settings to save.
        path: Target file (parent directories are created).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(settings.to_dict(), default_flow_style=False, sort_keys=False))
