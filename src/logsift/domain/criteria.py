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

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePath
from typing import Iterable, Optional, Union

from .errors import InvalidSearchError

PathLike = Union[str, PurePath]


@dataclass(frozen=True)
class ExclusionSet:
    """
    Case-insensitive path fragments that disqualify a directory (and its subtree).

    A fragment matches anywhere in the full path, parent segments included.
    Blank fragments are dropped: an empty substring would exclude everything.
    """

    fragments: tuple[str, ...] = ()

    @classmethod
    def of(cls, fragments: Union["ExclusionSet", Iterable[str], None]) -> "ExclusionSet":
        if isinstance(fragments, ExclusionSet):
            return fragments
        cleaned = []
        for frag in fragments or ():
            folded = str(frag).strip().casefold()
            if folded and folded not in cleaned:
                cleaned.append(folded)
        return cls(tuple(cleaned))

    def excludes(self, path: PathLike) -> bool:
        candidate = str(path).casefold()
        return any(frag in candidate for frag in self.fragments)

    def union(self, other: Union["ExclusionSet", Iterable[str]]) -> "ExclusionSet":
        return ExclusionSet.of((*self.fragments, *ExclusionSet.of(other).fragments))

    def __len__(self) -> int:
        return len(self.fragments)


def is_excluded(path: PathLike, exclusions: Union[ExclusionSet, Iterable[str]]) -> bool:
    """Return True if any exclusion fragment occurs in `path` (case-insensitive)."""
    return ExclusionSet.of(exclusions).excludes(path)


def matches_target(path: PathLike, target_name: str) -> bool:
    """Compare the final path segment against `target_name`, ignoring case."""
    return PurePath(path).name.casefold() == target_name.casefold()


def matches_date_window(
    creation_time: datetime,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> bool:
    # Both bounds inclusive; a missing bound is open.
    if start is not None and creation_time < start:
        return False
    if end is not None and creation_time > end:
        return False
    return True


def matches_size_window(size_bytes: int, min_kb: int, max_kb: int) -> bool:
    size_kb = int(size_bytes) // 1024
    return min_kb <= size_kb <= max_kb


def require_target_name(target_name: Optional[str]) -> str:
    """
    Validate a target directory name and return it stripped.

    Raises:
        InvalidSearchError: if the name is missing, blank or contains a path separator.
    """
    if target_name is None or not str(target_name).strip():
        raise InvalidSearchError("target directory name must be a non-empty string")
    name = str(target_name).strip()
    if "/" in name or "\\" in name:
        raise InvalidSearchError(
            f"target directory name must be a single path segment, got {name!r}"
        )
    return name


@dataclass(frozen=True)
class SearchCriteria:
    """
    Immutable description of one search request.

    Notes:
      * `start` / `end` bound the creation time of counted files.
      * `min_kb` / `max_kb` are only consulted by size-filtered file listings.
    """

    target_name: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    min_kb: Optional[int] = None
    max_kb: Optional[int] = None
    exclusions: ExclusionSet = field(default_factory=ExclusionSet)

    def __post_init__(self) -> None:
        object.__setattr__(self, "target_name", require_target_name(self.target_name))
        object.__setattr__(self, "exclusions", ExclusionSet.of(self.exclusions))
