"""
Filesystem blob store used in development and tests.
"""

import logging
import os
import shutil
from typing import Optional

from infinity_timeline.core.config import settings
from infinity_timeline.core.exceptions import NotFoundError, StorageError
from infinity_timeline.services.storage import BlobStore

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """Stores objects under UPLOAD_DIR, one directory per node."""

    def __init__(self, root: Optional[str] = None):
        self.root = root or os.getenv("UPLOAD_DIR", settings.UPLOAD_DIR)

    def _resolve(self, path: str) -> str:
        full_path = os.path.abspath(os.path.join(self.root, path))
        if not full_path.startswith(os.path.abspath(self.root) + os.sep):
            raise StorageError(f"Invalid storage path: {path}")
        return full_path

    def upload(self, path: str, data: bytes, content_type: str = None) -> None:
        full_path = self._resolve(path)
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "xb") as handle:
                handle.write(data)
        except OSError as e:
            logger.error(f"Failed to store blob {path}: {e}")
            raise StorageError(f"Failed to upload file: {e}")
        logger.debug(f"Stored blob {path} ({len(data)} bytes)")

    def download(self, path: str) -> bytes:
        full_path = self._resolve(path)
        if not os.path.isfile(full_path):
            raise NotFoundError("File not found in storage")
        try:
            with open(full_path, "rb") as handle:
                return handle.read()
        except OSError as e:
            raise StorageError(f"Failed to download file: {e}")

    def remove(self, path: str) -> None:
        full_path = self._resolve(path)
        try:
            os.remove(full_path)
        except FileNotFoundError:
            logger.warning(f"Blob {path} already absent from storage")
        except OSError as e:
            logger.error(f"Failed to remove blob {path}: {e}")
            raise StorageError(f"Failed to remove file: {e}")

    def remove_prefix(self, prefix: str) -> int:
        directory = self._resolve(prefix.rstrip("/"))
        if not os.path.isdir(directory):
            return 0
        count = sum(len(files) for _, _, files in os.walk(directory))
        try:
            shutil.rmtree(directory)
        except OSError as e:
            raise StorageError(f"Failed to remove files under {prefix}: {e}")
        return count
