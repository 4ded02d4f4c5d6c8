"""Language-id resolution for opened files.

Maps filenames and extensions to the filetype that decides whether a
document is handed to the hint session.
"""

from __future__ import annotations

from pathlib import Path

_EXTENSION_LANGUAGE_IDS: dict[str, str] = {
    ".lua": "lua",
    ".luau": "luau",
    ".rockspec": "lua",
    ".py": "python",
    ".rs": "rust",
    ".json": "json",
    ".toml": "toml",
    ".md": "markdown",
    ".sh": "shell",
}

_FILENAME_LANGUAGE_IDS: dict[str, str] = {
    ".luacheckrc": "lua",
    ".luarc.json": "json",
    "makefile": "make",
}


def language_id_for_path(path: str | Path | None, default: str = "plaintext") -> str:
    if path is None:
        return default
    candidate = Path(path)
    name = candidate.name.lower()
    if name in _FILENAME_LANGUAGE_IDS:
        return _FILENAME_LANGUAGE_IDS[name]
    return _EXTENSION_LANGUAGE_IDS.get(candidate.suffix.lower(), default)
