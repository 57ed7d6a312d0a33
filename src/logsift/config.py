# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional, Union

from .domain.criteria import ExclusionSet
from .domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV = "LOGSIFT_CONFIG"
MAX_CONCURRENCY_ENV = "LOGSIFT_MAX_CONCURRENCY"

DEFAULT_EXCLUDED_FRAGMENTS: tuple[str, ...] = (
    "$Recycle.Bin",
    "System Volume Information",
)


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for the CLI composition root.

    Example `logsift.toml`:

        [logsift]
        excluded_fragments = ["$Recycle.Bin", "node_modules"]
        permission_path = "D:/Logs"
        max_concurrency = 64
        volume_roots = ["/var/log", "/srv"]
        skip_hidden = true
    """

    excluded_fragments: tuple[str, ...] = DEFAULT_EXCLUDED_FRAGMENTS
    permission_path: Optional[Path] = None
    max_concurrency: Optional[int] = None
    volume_roots: tuple[Path, ...] = ()
    skip_hidden: bool = False

    @property
    def exclusions(self) -> ExclusionSet:
        return ExclusionSet.of(self.excluded_fragments)


def _as_str_tuple(value: Any, key: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"'{key}' must be a list of strings")
    return tuple(value)


def _as_concurrency(value: Any, key: str) -> Optional[int]:
    if value is None:
        return None
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"'{key}' must be an integer, got {value!r}")
    if isinstance(value, bool) or n < 1:
        raise ConfigurationError(f"'{key}' must be >= 1, got {value!r}")
    return n


def _from_table(table: dict) -> Settings:
    settings = Settings()
    if "excluded_fragments" in table:
        settings = replace(
            settings,
            excluded_fragments=_as_str_tuple(table["excluded_fragments"], "excluded_fragments"),
        )
    if "permission_path" in table:
        if not isinstance(table["permission_path"], str):
            raise ConfigurationError("'permission_path' must be a string")
        settings = replace(settings, permission_path=Path(table["permission_path"]))
    if "max_concurrency" in table:
        settings = replace(
            settings,
            max_concurrency=_as_concurrency(table["max_concurrency"], "max_concurrency"),
        )
    if "volume_roots" in table:
        roots = _as_str_tuple(table["volume_roots"], "volume_roots")
        settings = replace(settings, volume_roots=tuple(Path(r) for r in roots))
    if "skip_hidden" in table:
        if not isinstance(table["skip_hidden"], bool):
            raise ConfigurationError("'skip_hidden' must be true or false")
        settings = replace(settings, skip_hidden=table["skip_hidden"])
    return settings


def load_settings(path: Union[str, Path, None] = None) -> Settings:
    """
    Load settings from a TOML file's [logsift] table.

    The file comes from `path`, else from $LOGSIFT_CONFIG; with neither, the
    defaults are used. $LOGSIFT_MAX_CONCURRENCY overrides the file.

    Raises:
        ConfigurationError: unreadable file, invalid TOML, or bad values.
    """
    source = path or os.getenv(CONFIG_ENV)
    settings = Settings()
    if source:
        p = Path(source)
        try:
            data = tomllib.loads(p.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {p}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {p}: {e}") from e
        table = data.get("logsift", {})
        if not isinstance(table, dict):
            raise ConfigurationError(f"[logsift] in {p} must be a table")
        settings = _from_table(table)
        logger.debug("Loaded settings from %s: %s", p, settings)

    env_concurrency = os.getenv(MAX_CONCURRENCY_ENV)
    if env_concurrency:
        settings = replace(
            settings, max_concurrency=_as_concurrency(env_concurrency, MAX_CONCURRENCY_ENV)
        )
    return settings
