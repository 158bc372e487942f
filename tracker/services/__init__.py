"""Business logic services package with public service helpers."""

from .storage_service import (
    BaseDeliverableStorage,
    FileTooLargeError,
    LocalDeliverableStorage,
    StorageConfig,
    StorageError,
    get_storage_service,
    is_audio_upload,
    reset_storage_service_for_tests,
    safe_storage_file_name,
)

__all__ = [
    "BaseDeliverableStorage",
    "FileTooLargeError",
    "LocalDeliverableStorage",
    "StorageConfig",
    "StorageError",
    "get_storage_service",
    "is_audio_upload",
    "reset_storage_service_for_tests",
    "safe_storage_file_name",
]
