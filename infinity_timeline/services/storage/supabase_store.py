"""
Supabase Storage blob store, spoken to over its REST API.
"""

import logging
from typing import Any, Dict, List

import requests

from infinity_timeline.core.config import settings
from infinity_timeline.core.exceptions import NotFoundError, StorageError
from infinity_timeline.services.storage import BlobStore

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 1000


class SupabaseBlobStore(BlobStore):
    """Supabase Storage bucket accessed with the service role key."""

    def __init__(self, session: requests.Session = None):
        self.base_url = f"{settings.SUPABASE_URL.rstrip('/')}/storage/v1"
        self.bucket = settings.STORAGE_BUCKET
        self.timeout = settings.STORAGE_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {settings.SUPABASE_SERVICE_ROLE_KEY}",
                "apikey": settings.SUPABASE_SERVICE_ROLE_KEY,
            }
        )

    def _object_url(self, path: str) -> str:
        return f"{self.base_url}/object/{self.bucket}/{path}"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Storage request {method} {url} failed: {e}")
            raise StorageError(f"Storage request failed: {e}")

    def upload(self, path: str, data: bytes, content_type: str = None) -> None:
        headers = {
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "false",
        }
        response = self._request("POST", self._object_url(path), data=data, headers=headers)
        if response.status_code not in (200, 201):
            logger.error(
                f"Failed to upload {path}: {response.status_code} - {response.text}"
            )
            raise StorageError(f"Failed to upload file: {response.status_code}")
        logger.debug(f"Uploaded blob {path} to bucket {self.bucket}")

    def download(self, path: str) -> bytes:
        response = self._request("GET", self._object_url(path))
        if response.status_code in (400, 404):
            raise NotFoundError("File not found in storage")
        if response.status_code != 200:
            raise StorageError(f"Failed to download file: {response.status_code}")
        return response.content

    def _delete(self, paths: List[str]) -> None:
        response = self._request(
            "DELETE", f"{self.base_url}/object/{self.bucket}", json={"prefixes": paths}
        )
        if response.status_code != 200:
            logger.error(
                f"Failed to remove {paths}: {response.status_code} - {response.text}"
            )
            raise StorageError(f"Failed to remove file: {response.status_code}")

    def remove(self, path: str) -> None:
        self._delete([path])

    def remove_prefix(self, prefix: str) -> int:
        body: Dict[str, Any] = {"prefix": prefix.rstrip("/"), "limit": LIST_PAGE_SIZE}
        response = self._request(
            "POST", f"{self.base_url}/object/list/{self.bucket}", json=body
        )
        if response.status_code != 200:
            raise StorageError(f"Failed to list files under {prefix}: {response.status_code}")

        paths = [f"{prefix.rstrip('/')}/{entry['name']}" for entry in response.json()]
        if paths:
            self._delete(paths)
        return len(paths)
