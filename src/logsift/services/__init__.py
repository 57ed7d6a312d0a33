from .folder_search import FolderSearchService
from .volume_scanner import VolumeScanner
from .count_service import LogCountService
from .management_service import LogManagementService, archive_name
from .search_service import LogSearchService


__all__ = [
    'FolderSearchService',
    'VolumeScanner',
    'LogCountService',
    'LogManagementService',
    'LogSearchService',
    'archive_name',
]
