"""
Base module for document blob stores.
"""

import os
import time
from abc import ABC, abstractmethod
from uuid import uuid4


def build_blob_path(node_id: int, filename: str) -> str:
    """
    Build the object path for a node document.

    Paths are partitioned by node and qualified by upload time, so the same
    file name can be uploaded twice to one node.
    """
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower() or "bin"
    return f"{node_id}/{int(time.time() * 1000)}_{uuid4().hex[:8]}.{ext}"


def node_prefix(node_id: int) -> str:
    return f"{node_id}/"


class BlobStore(ABC):
    """Base class for blob stores. Failures raise StorageError."""

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str = None) -> None:
        """
        Store an object. An existing object at the same path is never overwritten.

        Args:
            path: Object path inside the store
            data: Raw file content
            content_type: Optional MIME type
        """

    @abstractmethod
    def download(self, path: str) -> bytes:
        """Return the content of an object."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove an object."""

    @abstractmethod
    def remove_prefix(self, prefix: str) -> int:
        """
        Remove every object under a prefix.

        Returns:
            int: Number of objects removed
        """
