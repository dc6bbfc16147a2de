"""Supabase Storage Service for flower photos.

Photos live in one public bucket (SUPABASE_BUCKET, default 'flower-images')
under ``flowers/<flower_id>/image_<index>_<millis>.jpg``.
"""

import os
import time
import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

FLOWER_BUCKET = os.getenv('SUPABASE_BUCKET', 'flower-images')

# Supabase client (lazy initialization)
_supabase_client = None


def get_supabase_client():
    """Get or create Supabase client (lazy initialization)."""
    global _supabase_client

    if _supabase_client is None:
        url = os.getenv('SUPABASE_URL')
        key = os.getenv('SUPABASE_SERVICE_KEY')

        if not url or not key:
            logger.warning('Supabase credentials not configured. Storage will not work.')
            return None

        try:
            from supabase import create_client
            _supabase_client = create_client(url, key)
            logger.info('Supabase client initialized successfully')
        except Exception as e:
            logger.error(f'Failed to initialize Supabase client: {e}')
            return None

    return _supabase_client


def is_storage_configured() -> bool:
    """Check if Supabase storage is properly configured."""
    return get_supabase_client() is not None


def flower_image_path(flower_id: str, index: int) -> str:
    """Storage path for the ``index``-th photo of a flower."""
    return f"flowers/{flower_id}/image_{index}_{int(time.time() * 1000)}.jpg"


def upload_file(
    bucket: str,
    file_data: bytes,
    path: str,
    content_type: str = 'image/jpeg'
) -> Tuple[Optional[str], Optional[str]]:
    """Upload a file to Supabase Storage.

    Args:
        bucket: Storage bucket name
        file_data: Raw file bytes
        path: Object path inside the bucket
        content_type: MIME type of the file

    Returns:
        Tuple of (public_url, error_message)
        If successful: (url, None)
        If failed: (None, error_message)
    """
    client = get_supabase_client()

    if client is None:
        return None, 'Storage service not configured'

    try:
        logger.info(f'Uploading file to {bucket}/{path} ({content_type})')

        client.storage.from_(bucket).upload(
            path=path,
            file=file_data,
            file_options={"content-type": content_type}
        )

        public_url = client.storage.from_(bucket).get_public_url(path)

        logger.info(f'File uploaded successfully: {public_url}')
        return public_url, None

    except Exception as e:
        error_msg = str(e)
        logger.error(f'Upload failed: {error_msg}')
        return None, error_msg


def path_from_public_url(bucket: str, file_url: str) -> str:
    """Extract the object path from a public URL (or return a bare path as-is)."""
    marker = f'/{bucket}/'
    if marker in file_url:
        return file_url.split(marker, 1)[1].split('?', 1)[0]
    return file_url


def delete_files(bucket: str, file_urls: list) -> Tuple[bool, Optional[str]]:
    """Delete files from Supabase Storage.

    Args:
        bucket: Storage bucket name
        file_urls: Full public URLs or object paths

    Returns:
        Tuple of (success, error_message)
    """
    client = get_supabase_client()

    if client is None:
        return False, 'Storage service not configured'

    paths = [path_from_public_url(bucket, url) for url in file_urls]
    if not paths:
        return True, None

    try:
        logger.info(f'Deleting {len(paths)} file(s) from {bucket}')
        client.storage.from_(bucket).remove(paths)
        return True, None

    except Exception as e:
        error_msg = str(e)
        logger.error(f'Delete failed: {error_msg}')
        return False, error_msg


def upload_flower_image(file_data: bytes, flower_id: str, index: int) -> Tuple[Optional[str], Optional[str]]:
    """Upload one compressed flower photo."""
    return upload_file(FLOWER_BUCKET, file_data, flower_image_path(flower_id, index), 'image/jpeg')


def delete_flower_images(file_urls: list) -> Tuple[bool, Optional[str]]:
    """Delete previously uploaded flower photos."""
    return delete_files(FLOWER_BUCKET, file_urls)
