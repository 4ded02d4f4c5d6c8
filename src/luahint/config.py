"""Application configuration models and helpers."""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_TRIGGERS: tuple[str, ...] = (
    "CursorHold",
    "CursorHoldI",
    "InsertLeave",
    "TextChanged",
)


class AppPaths(BaseModel):
    """Resolved directories for luahint runtime files."""

    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("LUAHINT_HOME", Path.home() / ".luahint"))
    )

    @property
    def logs_dir(self) -> Path:
        return self.base_dir / "logs"

    def ensure(self) -> None:
        for path in (self.base_dir, self.logs_dir):
            path.mkdir(parents=True, exist_ok=True)


class ServerSettings(BaseModel):
    name: str = "luahint"
    cmd: list[str] = Field(default_factory=lambda: ["luahint"])


class HintConfig(BaseModel):
    """Normalized hint options.

    ``root_dir`` is not validated; it is first called when a document is
    activated.
    """

    update: list[str] = Field(default_factory=lambda: list(DEFAULT_TRIGGERS))
    enabled_at_startup: bool = True
    root_dir: Any = Field(default=os.getcwd)
    filetype: str = "lua"
    server: ServerSettings = Field(default_factory=ServerSettings)

    @field_validator("update", mode="before")
    @classmethod
    def _coerce_update(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            value = [value]
        names: list[str] = []
        for item in value or ():
            name = str(item)
            if name and name not in names:
                names.append(name)
        return names or list(DEFAULT_TRIGGERS)


class EditorSettings(BaseModel):
    idle_ms: int = Field(default=800, ge=50, le=10000)
    parameter_color: str = "#8a8f98"
    type_color: str = "#6a9955"
    font_size: int = Field(default=11, ge=6, le=48)


class LuahintSettings(BaseModel):
    app_name: str = "luahint"
    paths: AppPaths = Field(default_factory=AppPaths)
    hints: HintConfig = Field(default_factory=HintConfig)
    editor: EditorSettings = Field(default_factory=EditorSettings)


def merge_keep(options: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``options`` over ``defaults`` keeping caller values.

    A key set to ``None`` counts as unset. Nested mappings are merged
    recursively; any other caller value wins as a whole.
    """

    merged: dict[str, Any] = dict(defaults)
    for key, value in options.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_keep(value, current)
        else:
            merged[key] = value
    return merged


def _default_options() -> dict[str, Any]:
    defaults = HintConfig()
    return {
        "update": list(defaults.update),
        "enabled_at_startup": defaults.enabled_at_startup,
        "root_dir": defaults.root_dir,
        "filetype": defaults.filetype,
        "server": defaults.server.model_dump(),
    }


def normalize(raw_options: Mapping[str, Any] | HintConfig | None = None) -> HintConfig:
    """Build a :class:`HintConfig` from caller options layered over defaults."""

    if isinstance(raw_options, HintConfig):
        return raw_options.model_copy(deep=True)
    merged = merge_keep(raw_options or {}, _default_options())
    return HintConfig.model_validate(merged)


def _maybe_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _maybe_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    lowered = value.lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return None


def _split_list(value: str | None) -> list[str] | None:
    if value is None:
        return None
    items = [part.strip() for part in value.replace(",", " ").split()]
    return [item for item in items if item] or None


def load_settings() -> LuahintSettings:
    """Load user settings from environment variables and defaults."""

    overrides: dict[str, Any] = {}

    if update := _split_list(os.getenv("LUAHINT_UPDATE")):
        overrides.setdefault("hints", {})["update"] = update

    if (enabled := _maybe_bool(os.getenv("LUAHINT_ENABLED"))) is not None:
        overrides.setdefault("hints", {})["enabled_at_startup"] = enabled

    if cmd := shlex.split(os.getenv("LUAHINT_SERVER_CMD", "")):
        overrides.setdefault("hints", {}).setdefault("server", {})["cmd"] = cmd

    if idle_ms := _maybe_int(os.getenv("LUAHINT_IDLE_MS")):
        overrides.setdefault("editor", {})["idle_ms"] = idle_ms

    settings = LuahintSettings(**overrides)
    settings.paths.ensure()
    return settings
