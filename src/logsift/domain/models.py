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

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import InvalidSearchError

NOT_FOUND_MESSAGE = "Log Not Found"


@dataclass(frozen=True)
class FileEntry:
    """
    Metadata for one regular file as reported by a FilesystemPort.
    `created` is the birth time where the platform records one, else ctime.
    """

    path: Path
    size: int
    modified: datetime
    created: datetime


class LogFolder(str, Enum):
    """Well-known log folders users can refer to by name."""

    AMADEO_LOGS = "AmadeoLogs"
    AWI_ERRORS = "AWIErrors"
    LOGGINGS = "Loggings"


def resolve_folder_name(folder: Optional[str]) -> str:
    """
    Translate a human-facing folder identifier into a directory name.

    Known identifiers (enum name or value, any case) map to their directory;
    anything else is taken as a literal directory name.
    """
    if folder is None or not str(folder).strip():
        raise InvalidSearchError("log folder must be a non-empty string")
    raw = str(folder).strip()
    key = raw.casefold()
    for member in LogFolder:
        if key in (member.name.casefold(), member.value.casefold()):
            return member.value
    return raw


@dataclass(frozen=True)
class CountReport:
    files_count: int = 0
    full_path: Optional[Path] = None
    message: str = NOT_FOUND_MESSAGE

    @classmethod
    def build(cls, full_path: Optional[Path], files_count: int) -> "CountReport":
        if files_count == 0:
            return cls(0, full_path, NOT_FOUND_MESSAGE)
        return cls(
            files_count,
            full_path,
            f"Log Folder Found with total of {files_count} Logs",
        )

    def as_dict(self) -> dict:
        return {
            "message": self.message,
            "full_path": str(self.full_path) if self.full_path else None,
            "files_count": self.files_count,
        }
