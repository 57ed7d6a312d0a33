from .filesystem import FilesystemPort

__all__ = ["FilesystemPort"]
