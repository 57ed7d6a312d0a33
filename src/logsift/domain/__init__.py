from .criteria import (
    ExclusionSet,
    SearchCriteria,
    is_excluded,
    matches_date_window,
    matches_size_window,
    matches_target,
    require_target_name,
)
from .errors import (
    ConfigurationError,
    ErrorKind,
    InvalidSearchError,
    LogsiftError,
    classify_error,
    is_recoverable,
)
from .models import CountReport, FileEntry, LogFolder, resolve_folder_name
from .session import AggregateCount, SearchSession

__all__ = [
    "AggregateCount",
    "ConfigurationError",
    "CountReport",
    "ErrorKind",
    "ExclusionSet",
    "FileEntry",
    "InvalidSearchError",
    "LogFolder",
    "LogsiftError",
    "SearchCriteria",
    "SearchSession",
    "classify_error",
    "is_excluded",
    "is_recoverable",
    "matches_date_window",
    "matches_size_window",
    "matches_target",
    "require_target_name",
    "resolve_folder_name",
]
