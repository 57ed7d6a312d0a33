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

import logging
from pathlib import Path
from typing import Union

from ..domain.criteria import matches_size_window
from ..ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)


class LogSearchService:
    """
    File listings inside a known directory. Errors are logged and yield an
    empty result.
    """

    def __init__(self, fs: FilesystemPort) -> None:
        self._fs = fs

    def search_by_directory(self, directory: Union[str, Path]) -> list[Path]:
        logger.info("Searching logs in directory: %s", directory)
        try:
            result = sorted(Path(e.path) for e in self._fs.list_files(Path(directory)))
        except OSError as e:
            logger.error("Error searching logs in %s: %s", directory, e)
            return []
        return result

    def search_by_size(
        self, directory: Union[str, Path], min_kb: int, max_kb: int
    ) -> list[Path]:
        logger.info("Searching logs by size (%d-%d KB) in directory: %s", min_kb, max_kb, directory)
        try:
            result = sorted(
                Path(e.path)
                for e in self._fs.list_files(Path(directory))
                if matches_size_window(e.size, min_kb, max_kb)
            )
        except OSError as e:
            logger.error("Error searching logs by size in %s: %s", directory, e)
            return []
        return result

    def search_in_directories(
        self,
        directory: Union[str, Path],
        pattern: str = "*",
        include_subdirectories: bool = False,
    ) -> list[Path]:
        """
        Files matching a glob `pattern` (e.g. '*.log') in `directory`, and in
        every subdirectory when `include_subdirectories` is set.
        """
        root = Path(directory)
        logger.info("Searching logs in directories: %s (%s)", root, pattern)
        if not root.is_dir():
            logger.error("Not a directory: %s", root)
            return []
        try:
            matches = root.rglob(pattern or "*") if include_subdirectories else root.glob(pattern or "*")
            result = sorted(p for p in matches if p.is_file())
        except (OSError, ValueError, NotImplementedError) as e:
            logger.error("Error searching logs in %s: %s", root, e)
            return []
        return result
