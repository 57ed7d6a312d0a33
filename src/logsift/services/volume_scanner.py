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
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..domain.criteria import ExclusionSet, require_target_name
from ..domain.errors import is_recoverable
from ..domain.session import SearchSession
from ..ports.filesystem import FilesystemPort
from .folder_search import Exclusions, FolderSearchService

logger = logging.getLogger(__name__)


class VolumeScanner:
    """
    Runs a folder search on each ready volume in turn and stops at the first
    volume that produces a result.
    """

    def __init__(self, search: FolderSearchService) -> None:
        self._search = search
        self._fs = search.fs

    @property
    def fs(self) -> FilesystemPort:
        return self._fs

    def _ready_volumes(self) -> list[Path]:
        try:
            volumes = self._fs.volumes()
        except Exception as exc:
            if not is_recoverable(exc):
                raise
            logger.warning("VolumeScanner: unable to enumerate volumes: %s", exc)
            return []
        logger.debug("VolumeScanner: ready volumes %s", [str(v) for v in volumes])
        return volumes

    async def locate_across_volumes(
        self, target_name: str, exclusions: Exclusions = None
    ) -> Optional[Path]:
        """Return the first directory named `target_name` on any volume, or None."""
        target = require_target_name(target_name)
        exclusion_set = ExclusionSet.of(exclusions)

        for volume in self._ready_volumes():
            found = await self._search.locate_directory(
                volume, target, exclusion_set, SearchSession()
            )
            if found is not None:
                logger.info("Located %r on volume %s: %s", target, volume, found)
                return found
        logger.info("Directory %r not found on any volume", target)
        return None

    async def count_across_volumes(
        self,
        target_name: str,
        exclusions: Exclusions = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> tuple[Optional[Path], int]:
        """
        Count matching files volume by volume.

        Returns:
            (path, count) for the first volume with a non-zero count, where
            `path` is a directory named `target_name` on that volume;
            (None, 0) when no volume has any.
        """
        target = require_target_name(target_name)
        exclusion_set = ExclusionSet.of(exclusions)

        for volume in self._ready_volumes():
            count = await self._search.count_matching_directories(
                volume, target, exclusion_set, start, end
            )
            if count > 0:
                path = await self._search.locate_directory(
                    volume, target, exclusion_set, SearchSession()
                )
                logger.info("Volume %s: %d files under %r (%s)", volume, count, target, path)
                return path, count
        return None, 0
