"""設定管理器。"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Mapping, Optional

from . import defaults
from .schema import validate_config

WILDCARD_PROJECT = "*"
PROJECTS_KEY = "projects"


def merge_sections(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """遞迴合併；override 的非 dict 值整個取代 base 的值。"""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = merge_sections(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _lookup(config: Mapping[str, Any], dotted_key: str, default: Any = None) -> Any:
    node: Any = config
    for part in dotted_key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def _assign(config: dict[str, Any], dotted_key: str, value: Any) -> None:
    *parents, leaf = dotted_key.split(".")
    node = config
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[leaf] = value


def _read_user_file(path: Optional[Path]) -> dict[str, Any]:
    if path is None or not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


class ConfigManager:
    """三層設定管理：預設、使用者檔案、執行期覆寫。

    使用者設定可在 ``projects.<專案名稱>`` 下覆寫任何區塊；
    找不到專案名稱時改用 ``projects.*``，兩者皆無則使用全域設定。
    """

    def __init__(self, user_config_path: Optional[Path] = None) -> None:
        self.user_config_path = user_config_path
        self._user = _read_user_file(user_config_path)
        self._runtime: dict[str, Any] = {}
        self._config = self._compose()

    def _compose(self) -> dict[str, Any]:
        return merge_sections(merge_sections(defaults.DEFAULT_CONFIG, self._user), self._runtime)

    def get(self, key: str, default: Any = None) -> Any:
        return _lookup(self._config, key, default)

    def set(self, key: str, value: Any) -> None:
        _assign(self._runtime, key, value)
        self._config = self._compose()

    def for_project(self, project_name: Optional[str]) -> dict[str, Any]:
        """回傳某專案生效的設定（不含 ``projects`` 區塊本身）。"""
        base = {key: value for key, value in self._config.items() if key != PROJECTS_KEY}
        projects = self._config.get(PROJECTS_KEY) or {}
        if project_name and project_name != WILDCARD_PROJECT and project_name in projects:
            return merge_sections(base, projects[project_name])
        return merge_sections(base, projects.get(WILDCARD_PROJECT, {}))

    def validate_config(self) -> list[str]:
        return validate_config(self._config)

    def save_user_config(self, path: Optional[Path] = None) -> Path:
        """只寫出與預設值不同的部分（使用者檔案加上執行期覆寫）。"""
        target = path or self.user_config_path
        if target is None:
            raise ValueError("no path given for the user config")
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as handle:
            json.dump(merge_sections(self._user, self._runtime), handle, ensure_ascii=False, indent=2)
        return target
