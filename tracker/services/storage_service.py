"""Deliverable file storage backends."""
from __future__ import annotations

import logging
import os
import re
import shutil
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from tracker.utils.runtime import deliverable_max_bytes, deliverable_storage_dir

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024

AUDIO_EXTENSIONS = frozenset({".wav", ".mp3", ".mp4", ".m4a", ".aac", ".ogg", ".flac"})


class StorageError(RuntimeError):
    pass


class FileTooLargeError(StorageError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"File exceeds maximum size of {limit} bytes")
        self.limit = limit


def safe_storage_file_name(original_name: str) -> str:
    """Build a storage-safe file name: no accents or spaces, only [A-Za-z0-9._-]."""
    original_name = original_name or ""
    last_dot = original_name.rfind(".")
    if last_dot >= 0:
        base = original_name[:last_dot]
        ext = re.sub(r"[^a-z0-9.]", "", original_name[last_dot:].lower())
    else:
        base, ext = original_name, ""
    decomposed = unicodedata.normalize("NFD", base)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    base = re.sub(r"\s+", "-", base)
    base = re.sub(r"[^a-zA-Z0-9._-]", "", base)
    base = re.sub(r"-+", "-", base)
    base = re.sub(r"^-|-$", "", base)
    return (base or "audio") + ext


def is_audio_upload(file_name: Optional[str], content_type: Optional[str]) -> bool:
    if content_type and content_type.lower().startswith("audio/"):
        return True
    ext = os.path.splitext(file_name or "")[1].lower()
    return ext in AUDIO_EXTENSIONS


@dataclass
class StorageConfig:
    root: str
    max_bytes: int

    @classmethod
    def from_env(cls) -> "StorageConfig":
        return cls(root=deliverable_storage_dir(), max_bytes=deliverable_max_bytes())


class BaseDeliverableStorage:
    max_bytes: int = 0

    def save(self, key: str, stream: BinaryIO) -> int:
        raise NotImplementedError

    def open(self, key: str) -> Iterator[bytes]:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def delete_prefix(self, prefix: str) -> None:
        raise NotImplementedError


class LocalDeliverableStorage(BaseDeliverableStorage):
    """Stores objects as files below a root directory, keyed ``{demand_id}/{name}``."""

    def __init__(self, root: str, max_bytes: int) -> None:
        self.root = Path(root).resolve()
        self.max_bytes = max_bytes

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def save(self, key: str, stream: BinaryIO) -> int:
        """Write the stream to ``key`` (overwriting) and return the byte count."""
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".part")
        written = 0
        try:
            with open(tmp_path, "wb") as out:
                while True:
                    chunk = stream.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if self.max_bytes and written > self.max_bytes:
                        raise FileTooLargeError(self.max_bytes)
                    out.write(chunk)
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.error("storage_write_failed: key=%s error=%s", key, exc)
            raise StorageError(f"Could not store {key}") from exc
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
        return written

    def open(self, key: str) -> Iterator[bytes]:
        path = self._path_for(key)
        if not path.is_file():
            raise FileNotFoundError(key)

        def _iter():
            with open(path, "rb") as fh:
                while True:
                    chunk = fh.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk

        return _iter()

    def exists(self, key: str) -> bool:
        try:
            return self._path_for(key).is_file()
        except StorageError:
            return False

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        if path.is_file():
            path.unlink()

    def delete_prefix(self, prefix: str) -> None:
        path = self._path_for(prefix)
        if path.is_dir():
            shutil.rmtree(path)
        elif path.is_file():
            path.unlink()


_storage_service: Optional[BaseDeliverableStorage] = None


def get_storage_service() -> BaseDeliverableStorage:
    global _storage_service
    if _storage_service is None:
        config = StorageConfig.from_env()
        _storage_service = LocalDeliverableStorage(config.root, config.max_bytes)
    return _storage_service


def reset_storage_service_for_tests() -> None:  # pragma: no cover - used in tests
    global _storage_service
    _storage_service = None
