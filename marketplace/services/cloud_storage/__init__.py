from .media_storage_service import MediaStorageService

__all__ = ["MediaStorageService"]
