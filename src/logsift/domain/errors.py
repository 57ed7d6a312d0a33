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

from enum import Enum


class LogsiftError(Exception):
    """Base exception for domain-specific errors."""


class InvalidSearchError(LogsiftError, ValueError):
    """A search was requested with unusable arguments (e.g. a blank target name)."""


class ConfigurationError(LogsiftError):
    """Bad CLI args or unusable config (e.g., unreadable TOML file)."""


class ErrorKind(Enum):
    PERMISSION = "permission"
    IO = "io"
    MISUSE = "misuse"
    UNEXPECTED = "unexpected"


def classify_error(exc: BaseException) -> ErrorKind:
    """
    Sort an exception raised during traversal into one of the ErrorKind buckets.

    Permission and I/O problems are local to one subtree; misuse and anything
    unexpected belong to the caller.
    """
    if isinstance(exc, PermissionError):
        return ErrorKind.PERMISSION
    if isinstance(exc, OSError):
        return ErrorKind.IO
    if isinstance(exc, (LogsiftError, ValueError, TypeError)):
        return ErrorKind.MISUSE
    return ErrorKind.UNEXPECTED


def is_recoverable(exc: BaseException) -> bool:
    """True when a branch may absorb `exc` and carry on with its siblings."""
    return classify_error(exc) in (ErrorKind.PERMISSION, ErrorKind.IO)
