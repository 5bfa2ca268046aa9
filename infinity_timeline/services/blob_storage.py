"""
Blob storage selection for node documents.
"""

import logging

from infinity_timeline.core.config import settings
from infinity_timeline.services.storage import BlobStore
from infinity_timeline.services.storage.local_store import LocalBlobStore
from infinity_timeline.services.storage.supabase_store import SupabaseBlobStore

logger = logging.getLogger(__name__)

STORAGE_LOCAL = "local"
STORAGE_SUPABASE = "supabase"


def get_blob_store() -> BlobStore:
    """
    Get the blob store configured by STORAGE_BACKEND.

    Returns:
        BlobStore: An instance of the configured blob store
    """
    backend = getattr(settings, "STORAGE_BACKEND", STORAGE_LOCAL).lower()

    if backend == STORAGE_SUPABASE:
        return SupabaseBlobStore()

    if backend != STORAGE_LOCAL:
        logger.warning(f"Unknown storage backend {backend}, using local storage")

    # Default to the local filesystem
    return LocalBlobStore()
