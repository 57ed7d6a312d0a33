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
import stat
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import psutil

from ...domain.models import FileEntry
from ...ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)


class LocalFS(FilesystemPort):
    """
    Local filesystem adapter built on os.scandir.

    - Symlinked directories are not followed, so link cycles cannot trap a search.
    - Listing errors (PermissionError, FileNotFoundError, ...) propagate to the
      caller; the search services decide whether a branch can absorb them. A
      file that cannot be stat'ed is skipped on its own.
    - `volume_roots` replaces mounted-volume discovery (handy for tests and for
      restricting a search to a few trees).
    - `skip_hidden` leaves hidden directories (dot-names, or the hidden
      attribute on Windows) out of `list_directories`.
    """

    def __init__(
        self,
        volume_roots: Optional[Iterable[os.PathLike | str]] = None,
        *,
        skip_hidden: bool = False,
    ) -> None:
        self._volume_roots = (
            tuple(Path(p) for p in volume_roots) if volume_roots else None
        )
        self._skip_hidden = skip_hidden

    def list_directories(self, path: Path) -> list[Path]:
        with os.scandir(path) as it:
            return [
                Path(entry.path)
                for entry in it
                if entry.is_dir(follow_symlinks=False)
                and not (self._skip_hidden and _is_hidden(entry))
            ]

    def list_files(self, directory: Path) -> list[FileEntry]:
        entries: list[FileEntry] = []
        with os.scandir(directory) as it:
            for entry in it:
                try:
                    if not entry.is_file():
                        continue
                    st = entry.stat()
                except FileNotFoundError:
                    # Deleted between listing and stat.
                    logger.debug("LocalFS.list_files: %s vanished", entry.path)
                    continue
                except OSError as e:
                    logger.warning("LocalFS.list_files: cannot stat %s: %s", entry.path, e)
                    continue
                entries.append(
                    FileEntry(
                        path=Path(entry.path),
                        size=st.st_size,
                        modified=datetime.fromtimestamp(st.st_mtime),
                        # NOTE: st_ctime is "creation" on Windows, "inode change" on Linux.
                        created=datetime.fromtimestamp(
                            getattr(st, "st_birthtime", st.st_ctime)
                        ),
                    )
                )
        return entries

    def volumes(self) -> list[Path]:
        if self._volume_roots is not None:
            candidates = list(self._volume_roots)
        else:
            candidates = [
                Path(part.mountpoint)
                for part in psutil.disk_partitions(all=False)
                if part.mountpoint
            ]

        ready: list[Path] = []
        seen: set[str] = set()
        for root in candidates:
            key = os.path.normcase(str(root))
            if key in seen:
                continue
            seen.add(key)
            if self._is_ready(root):
                ready.append(root)
            else:
                logger.debug("LocalFS.volumes: skipping %s (not ready)", root)
        return ready

    @staticmethod
    def _is_ready(root: Path) -> bool:
        try:
            return root.is_dir() and os.access(root, os.R_OK | os.X_OK)
        except OSError:
            return False


def _is_hidden(entry: os.DirEntry) -> bool:
    if entry.name.startswith("."):
        return True
    try:
        attrs = getattr(entry.stat(follow_symlinks=False), "st_file_attributes", 0)
    except OSError:
        return False
    return bool(attrs & stat.FILE_ATTRIBUTE_HIDDEN)
