"""Storage trigger that records resized copies of media images."""

from typing import Optional, Dict
from firebase_functions import storage_fn
from storefront.apis.Db import Db
from storefront.config.loader import get_settings, get_media_folder
from storefront.services.media_service import MediaService, parse_resized_path
from storefront.util.logger import get_logger

logger = get_logger(__name__)


def handle_media_resized(file_path: str, content_type: Optional[str], bucket_name: Optional[str] = None,
                         metadata: Optional[Dict[str, str]] = None) -> bool:
    """Store the download URL of a ``{base}_{W}x{H}.{ext}`` image on its media doc.

    Returns:
        True when the file was a resized media image and was processed
    """
    if not file_path.startswith(get_media_folder(get_settings()) + "/"):
        return False
    if not content_type or not content_type.startswith("image/"):
        return False
    if parse_resized_path(file_path) is None:
        logger.info(f"{file_path} is not a resized copy, ignoring")
        return False

    url = Db.get_instance().get_object_download_url(file_path, bucket_name, metadata)
    result = MediaService().apply_resized_image(file_path, url)
    if not result["ok"]:
        raise RuntimeError(result["error"]["message"])

    logger.info(f"Processed resized image {file_path}: {result['data']['updated']} docs updated")
    return True


@storage_fn.on_object_finalized(timeout_sec=60)
def on_media_resized(event: storage_fn.CloudEvent[storage_fn.StorageObjectData]):
    """Handle finalized Storage objects.

    Args:
        event: Storage object finalized event
    """
    try:
        data = event.data
        handle_media_resized(data.name, data.content_type, data.bucket, data.metadata)

    except Exception as e:
        logger.error(f"Error processing resized image: {e}")
        raise
