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

import threading
from pathlib import Path
from typing import Optional


class SearchSession:
    """
    Mutable state for one outermost locate call.

    Every recursive branch of that call holds the same instance. The found slot
    is written at most once (`try_commit`), and writing it raises the
    cancellation signal that other branches poll.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._found: Optional[Path] = None
        self._cancelled = threading.Event()

    @property
    def found(self) -> Optional[Path]:
        return self._found

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def try_commit(self, path: Path) -> bool:
        """Store `path` if nothing has been found yet. Returns True for the winner."""
        with self._lock:
            if self._found is not None:
                return False
            self._found = Path(path)
            self._cancelled.set()
            return True

    def cancel(self) -> None:
        """Stop remaining branches without recording a match."""
        self._cancelled.set()

    def __repr__(self) -> str:
        return f"SearchSession(found={self._found!r}, cancelled={self.cancelled})"


class AggregateCount:
    """Monotonic counter shared by all branches of one counting search."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def add(self, amount: int) -> int:
        if amount < 0:
            raise ValueError(f"AggregateCount only increases, got {amount}")
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value
