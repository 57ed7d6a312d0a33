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
import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from ..domain.criteria import (
    ExclusionSet,
    matches_date_window,
    matches_target,
    require_target_name,
)
from ..domain.errors import classify_error, is_recoverable
from ..domain.session import AggregateCount, SearchSession
from ..ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)

Exclusions = Union[ExclusionSet, Iterable[str], None]


@dataclass
class _Walk:
    """Read-only parameters threaded through one top-level search."""

    target: str
    exclusions: ExclusionSet
    limiter: Any
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    total: Optional[AggregateCount] = None
    session: Optional[SearchSession] = None


class FolderSearchService:
    """
    Recursive, concurrent directory search over a FilesystemPort.

      - one coroutine per surviving subdirectory at every level
      - excluded directories are pruned before they are matched or descended into
      - blocking listings run in worker threads (`asyncio.to_thread`)
      - permission/I-O failures are absorbed per branch and logged

    `max_concurrency` caps the number of in-flight filesystem calls. The cap
    only wraps the blocking calls, never the recursion, so nested branches
    cannot starve their parents. None keeps fan-out unbounded.
    """

    def __init__(self, fs: FilesystemPort, *, max_concurrency: Optional[int] = None) -> None:
        if max_concurrency is not None and int(max_concurrency) < 1:
            raise ValueError("max_concurrency must be >= 1 or None")
        self._fs = fs
        self._max_concurrency = int(max_concurrency) if max_concurrency else None

    @property
    def fs(self) -> FilesystemPort:
        return self._fs

    def _limiter(self):
        # Created per search so it binds to the running event loop.
        if self._max_concurrency is None:
            return contextlib.nullcontext()
        return asyncio.Semaphore(self._max_concurrency)

    async def _io(self, walk: _Walk, func: Callable[..., Any], *args: Any) -> Any:
        async with walk.limiter:
            return await asyncio.to_thread(func, *args)

    async def _allowed_subdirectories(self, walk: _Walk, directory: Path) -> list[Path]:
        subdirs = await self._io(walk, self._fs.list_directories, directory)
        allowed = [d for d in subdirs if not walk.exclusions.excludes(d)]
        logger.debug(
            "%s: %d subdirectories, %d allowed", directory, len(subdirs), len(allowed)
        )
        return allowed

    @staticmethod
    def _absorb(directory: Path, exc: BaseException) -> None:
        """Log a recoverable branch failure; re-raise anything else."""
        if not is_recoverable(exc):
            raise exc
        logger.warning(
            "Unable to process directory %s (%s): %s",
            directory,
            classify_error(exc).value,
            exc,
        )

    # ------------------------------
    # Counting search
    # ------------------------------

    async def count_matching_directories(
        self,
        root: Union[str, Path],
        target_name: str,
        exclusions: Exclusions = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """
        Sum the files inside every directory named `target_name` below `root`.

        Only files whose creation time lies in [start, end] are counted. The
        search continues past each match, so same-named directories in other
        branches or at other depths all contribute.

        Returns:
            The aggregate count; 0 when nothing matches or `root` is unreadable.

        Raises:
            InvalidSearchError: if `target_name` is blank.
        """
        walk = _Walk(
            target=require_target_name(target_name),
            exclusions=ExclusionSet.of(exclusions),
            limiter=self._limiter(),
            start=start,
            end=end,
            total=AggregateCount(),
        )
        root = Path(root)
        try:
            await self._count_level(walk, root)
        except Exception as exc:
            self._absorb(root, exc)
        logger.debug("count %r under %s -> %d", walk.target, root, walk.total.value)
        return walk.total.value

    async def _count_level(self, walk: _Walk, directory: Path) -> None:
        subdirs = await self._allowed_subdirectories(walk, directory)
        await asyncio.gather(*(self._count_unit(walk, d) for d in subdirs))

    async def _count_unit(self, walk: _Walk, directory: Path) -> None:
        try:
            if matches_target(directory, walk.target):
                files = await self._io(walk, self._fs.list_files, directory)
                count = sum(
                    1
                    for f in files
                    if matches_date_window(f.created, walk.start, walk.end)
                )
                logger.info("Found directory %s with %d matching files", directory, count)
                walk.total.add(count)
            else:
                await self._count_level(walk, directory)
        except Exception as exc:
            self._absorb(directory, exc)

    # ------------------------------
    # Locate search
    # ------------------------------

    async def locate_directory(
        self,
        root: Union[str, Path],
        target_name: str,
        exclusions: Exclusions = None,
        session: Optional[SearchSession] = None,
    ) -> Optional[Path]:
        """
        Return the first committed directory named `target_name` below `root`.

        Branches run concurrently and poll `session` before each step; the
        first branch to commit a match wins and the rest stop recursing. When
        several matches exist, which one wins is not defined.

        Returns:
            The matching path, or None.

        Raises:
            InvalidSearchError: if `target_name` is blank.
        """
        walk = _Walk(
            target=require_target_name(target_name),
            exclusions=ExclusionSet.of(exclusions),
            limiter=self._limiter(),
            session=session if session is not None else SearchSession(),
        )
        root = Path(root)
        try:
            await self._locate_level(walk, root)
        except Exception as exc:
            self._absorb(root, exc)
        return walk.session.found

    async def _locate_level(self, walk: _Walk, directory: Path) -> None:
        if walk.session.cancelled:
            return
        subdirs = await self._allowed_subdirectories(walk, directory)
        if walk.session.cancelled:
            return
        await asyncio.gather(*(self._locate_unit(walk, d) for d in subdirs))

    async def _locate_unit(self, walk: _Walk, directory: Path) -> None:
        if walk.session.cancelled:
            return
        try:
            if matches_target(directory, walk.target):
                if walk.session.try_commit(directory):
                    logger.info("Found directory %s", directory)
            else:
                await self._locate_level(walk, directory)
        except Exception as exc:
            self._absorb(directory, exc)
