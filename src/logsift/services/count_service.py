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

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from ..domain.criteria import ExclusionSet, SearchCriteria
from ..domain.models import CountReport, resolve_folder_name
from .volume_scanner import VolumeScanner

logger = logging.getLogger(__name__)


class LogCountService:
    """
    Counting operations on a named log folder:
      - total files in the folder for a creation-time window (across volumes)
      - unique / duplicated lines over the files directly inside the folder
    """

    def __init__(self, scanner: VolumeScanner, exclusions: Optional[ExclusionSet] = None) -> None:
        self._scanner = scanner
        self._fs = scanner.fs
        self._exclusions = ExclusionSet.of(exclusions)

    def count_total_logs(
        self,
        folder: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> CountReport:
        criteria = SearchCriteria(
            resolve_folder_name(folder), start=start, end=end, exclusions=self._exclusions
        )
        logger.info(
            "Counting total logs in %s for period %s - %s",
            criteria.target_name,
            start,
            end,
        )
        path, count = asyncio.run(
            self._scanner.count_across_volumes(
                criteria.target_name, criteria.exclusions, criteria.start, criteria.end
            )
        )
        report = CountReport.build(path, count)
        logger.info("%s", report.message)
        return report

    def count_unique_errors(self, folder: str) -> int:
        try:
            lines = list(self._folder_lines(folder))
        except OSError:
            logger.exception("Error counting unique errors in %s", folder)
            return 0
        count = len(set(lines))
        logger.info("Unique errors counted: %d", count)
        return count

    def count_duplicated_errors(self, folder: str) -> int:
        try:
            lines = list(self._folder_lines(folder))
        except OSError:
            logger.exception("Error counting duplicated errors in %s", folder)
            return 0
        count = len(lines) - len(set(lines))
        logger.info("Duplicated errors counted: %d", count)
        return count

    def _locate(self, folder: str) -> Optional[Path]:
        target = resolve_folder_name(folder)
        return asyncio.run(self._scanner.locate_across_volumes(target, self._exclusions))

    def _folder_lines(self, folder: str) -> Iterator[str]:
        """Yield every line of every file directly inside the located folder."""
        located = self._locate(folder)
        if located is None:
            logger.warning("Log folder %s not found", folder)
            return
        for entry in sorted(self._fs.list_files(located), key=lambda e: str(e.path)):
            text = Path(entry.path).read_text(encoding="utf-8", errors="replace")
            yield from text.splitlines()
