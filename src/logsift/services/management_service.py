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
import os
import re
import stat
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..domain.criteria import ExclusionSet, matches_date_window
from ..domain.models import FileEntry, resolve_folder_name
from .volume_scanner import VolumeScanner

logger = logging.getLogger(__name__)

FULL_ACCESS = stat.S_IRWXU | stat.S_IRWXG | stat.S_IRWXO


ARCHIVE_NAME_RE = re.compile(r"^\d{2}_\d{2}_\d{4}-\d{2}_\d{2}_\d{4}\.zip$", re.IGNORECASE)


def archive_name(start: datetime, end: datetime) -> str:
    """Name of the archive holding logs for [start, end], e.g. '01_01_2025-31_01_2025.zip'."""
    return f"{start:%d_%m_%Y}-{end:%d_%m_%Y}.zip"


def is_archive(path: Union[str, Path]) -> bool:
    return bool(ARCHIVE_NAME_RE.match(Path(path).name))


class LogManagementService:
    """
    Housekeeping on a located log folder: deleting files by last-write time,
    zipping them into a date-named archive, and removing such archives.

    Only files directly inside the folder are touched.
    """

    def __init__(self, scanner: VolumeScanner, exclusions: Optional[ExclusionSet] = None) -> None:
        self._scanner = scanner
        self._fs = scanner.fs
        self._exclusions = ExclusionSet.of(exclusions)

    def _locate(self, folder: str) -> Optional[Path]:
        target = resolve_folder_name(folder)
        located = asyncio.run(self._scanner.locate_across_volumes(target, self._exclusions))
        if located is None:
            logger.warning("Log folder %s not found", folder)
        return located

    def _files_in_period(
        self, directory: Path, start: datetime, end: datetime
    ) -> list[FileEntry]:
        # Period archives are housekeeping output, never logs.
        return sorted(
            (
                f
                for f in self._fs.list_files(directory)
                if not is_archive(f.path) and matches_date_window(f.modified, start, end)
            ),
            key=lambda f: str(f.path),
        )

    def delete_logs_by_period(self, folder: str, start: datetime, end: datetime) -> list[Path]:
        """Delete files last written within [start, end]. Returns the deleted paths."""
        logger.info("Deleting logs in %s for period %s - %s", folder, start, end)
        deleted: list[Path] = []
        located = self._locate(folder)
        if located is None:
            return deleted
        try:
            for entry in self._files_in_period(located, start, end):
                Path(entry.path).unlink()
                deleted.append(Path(entry.path))
                logger.info("Deleted file: %s", entry.path)
        except OSError:
            logger.exception("Error deleting logs in %s", located)
            return deleted
        logger.info("Logs deletion completed: %d files", len(deleted))
        return deleted

    def archive_logs_by_period(
        self, folder: str, start: datetime, end: datetime
    ) -> Optional[Path]:
        """
        Move files last written within [start, end] into `<folder>/<archive_name>`.

        An archive already present for the same period is appended to; members
        it already holds are kept and same-named files stay on disk. Other
        period archives in the folder are never swept into the new one.
        Originals are removed only once the archive is closed; a file that
        cannot be removed is logged and left in place.

        Returns:
            The archive path, or None when the folder is missing, nothing new is
            in the period, or the archive could not be written.
        """
        logger.info("Archiving logs in %s for period %s - %s", folder, start, end)
        located = self._locate(folder)
        if located is None:
            return None

        target = located / archive_name(start, end)
        try:
            entries = self._files_in_period(located, start, end)
            existing: set[str] = set()
            if target.exists():
                with zipfile.ZipFile(target) as zf:
                    existing = set(zf.namelist())

            pending = []
            for entry in entries:
                if Path(entry.path).name in existing:
                    logger.warning(
                        "%s already holds %s; leaving it on disk", target, Path(entry.path).name
                    )
                    continue
                pending.append(entry)
            if not pending:
                logger.warning("No logs to archive in %s for the period", located)
                return None

            mode = "a" if target.exists() else "w"
            with zipfile.ZipFile(target, mode, compression=zipfile.ZIP_DEFLATED) as zf:
                for entry in pending:
                    zf.write(entry.path, arcname=Path(entry.path).name)
        except (OSError, zipfile.BadZipFile):
            logger.exception("Error archiving logs in %s", located)
            return None

        removed = 0
        for entry in pending:
            try:
                Path(entry.path).unlink()
            except OSError:
                logger.exception("Archived %s but could not remove it", entry.path)
                continue
            removed += 1
            logger.info("Archived file: %s", entry.path)

        logger.info(
            "Wrote archive %s (%d files, %d originals removed)", target, len(pending), removed
        )
        return target

    def delete_archived_logs_by_period(self, folder: str, start: datetime, end: datetime) -> bool:
        """Delete the archive for [start, end] from the folder. Returns True if one was removed."""
        logger.info("Deleting archived logs in %s for period %s - %s", folder, start, end)
        located = self._locate(folder)
        if located is None:
            return False

        target = located / archive_name(start, end)
        try:
            if not target.is_file():
                logger.warning("Archive not found: %s", target)
                return False
            target.unlink()
        except OSError:
            logger.exception("Error deleting archive %s", target)
            return False
        logger.info("Deleted archive: %s", target)
        return True

    def grant_full_access(self, path: Union[str, Path, None]) -> bool:
        """Give everyone read/write/execute on the folder at `path`."""
        if not path or not Path(path).is_dir():
            logger.warning("Invalid folder path: %s", path)
            return False
        try:
            os.chmod(path, FULL_ACCESS)
        except OSError:
            logger.exception("Error granting permissions on %s", path)
            return False
        logger.info("Permissions granted to everyone for the folder: %s", path)
        return True
