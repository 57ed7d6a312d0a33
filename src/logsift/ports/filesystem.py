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

from abc import ABC, abstractmethod
from pathlib import Path

from ..domain.models import FileEntry


class FilesystemPort(ABC):
    """Abstract interface for filesystem access."""

    @abstractmethod
    def list_directories(self, path: Path) -> list[Path]:
        """Return the immediate subdirectories of `path` (full paths)."""
        raise NotImplementedError

    @abstractmethod
    def list_files(self, directory: Path) -> list[FileEntry]:
        """Return metadata for the regular files directly inside `directory`."""
        raise NotImplementedError

    @abstractmethod
    def volumes(self) -> list[Path]:
        """Return the roots of mounted volumes that are ready for I/O, in a stable order."""
        raise NotImplementedError
