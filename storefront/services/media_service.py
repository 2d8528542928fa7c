"""Media library: uploads to Cloud Storage with one Firestore doc per file."""

import re
import time
from typing import Optional, Dict, Any, List
from firebase_admin import firestore
from storefront.apis.Db import Db
from storefront.config.loader import get_settings, get_media_folder, get_media_default_category
from storefront.documents.media.MediaItem import MediaItem
from storefront.exceptions.CustomError import ValidationError
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)

# photo_800x600.jpg -> base "photo", size "800x600", ext "jpg"
RESIZED_NAME = re.compile(r"^(?P<base>.+)_(?P<width>\d+)x(?P<height>\d+)\.(?P<ext>[^.]+)$")


def parse_resized_path(file_path: str) -> Optional[Dict[str, str]]:
    """Split a resized image path into the original path and its size key.

    Returns None when the file name has no ``_{W}x{H}`` suffix.
    """
    directory, _, name = file_path.rpartition("/")
    match = RESIZED_NAME.match(name)
    if not match:
        return None

    original = f"{match['base']}.{match['ext']}"
    return {
        "originalPath": f"{directory}/{original}" if directory else original,
        "size": f"{match['width']}x{match['height']}",
    }


class MediaService:
    def __init__(self):
        self.db = Db.get_instance()
        self.settings = get_settings()

    @service_result
    def upload_media(self, buffer: bytes, filename: str, content_type: Optional[str] = None,
                     metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Store the file under ``media/{epoch_ms}_{filename}`` and record it."""
        if not buffer:
            raise ValidationError("File content is required", field="file")
        if not filename:
            raise ValidationError("File name is required", field="filename")

        metadata = metadata or {}
        safe_name = filename.replace(" ", "_")
        storage_path = f"{get_media_folder(self.settings)}/{int(time.time() * 1000)}_{safe_name}"

        blob = self.db.upload_file_buffer(buffer, storage_path, content_type)
        url = self.db.get_download_url(blob)

        data = {
            "filename": filename,
            "url": url,
            "storageRef": storage_path,
            "size": len(buffer),
            "type": content_type,
            "uploadedAt": self.db.timestamp_now(),
            "category": metadata.get("category") or get_media_default_category(self.settings),
            "tags": metadata.get("tags") or [],
            "alt": metadata.get("alt") or filename,
        }
        if metadata.get("collectionId"):
            data["collectionId"] = metadata["collectionId"]

        item = MediaItem.create(data)
        logger.info(f"Uploaded media {item.id} to {storage_path}")
        return item.to_dict()

    @service_result
    def get_media_items(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        filters = filters or {}
        query = self.db.collections["media"]
        if filters.get("category"):
            query = query.where("category", "==", filters["category"])
        if filters.get("collectionId"):
            query = query.where("collectionId", "==", filters["collectionId"])
        query = query.order_by("uploadedAt", direction=firestore.Query.DESCENDING)
        return [{"id": s.id, **s.to_dict()} for s in query.stream()]

    @service_result
    def get_media_item_by_id(self, media_id: str) -> Dict[str, Any]:
        return MediaItem(media_id).to_dict()

    @service_result
    def update_media_item(self, media_id: str, data: Dict[str, Any]) -> Dict[str, str]:
        protected = ("id", "url", "storageRef", "createdAt", "uploadedAt")
        MediaItem(media_id).update_doc({k: v for k, v in data.items() if k not in protected})
        logger.info(f"Updated media {media_id}")
        return {"id": media_id}

    @service_result
    def delete_media_item(self, media_id: str) -> Dict[str, str]:
        """Delete the doc, then the file. A failed file delete leaves an orphan blob."""
        item = MediaItem(media_id)
        storage_ref = item.doc.storageRef
        item.delete()

        try:
            self.db.delete_file(storage_ref)
        except Exception as e:
            logger.error(f"Could not delete {storage_ref} from storage: {e}")

        logger.info(f"Deleted media {media_id}")
        return {"id": media_id}

    @service_result
    def apply_resized_image(self, file_path: str, url: str) -> Dict[str, Any]:
        """Record a resized copy under ``resizedUrls.{W}x{H}`` of its original media doc."""
        parsed = parse_resized_path(file_path)
        if not parsed:
            return {"updated": 0}

        query = self.db.collections["media"].where("storageRef", "==", parsed["originalPath"])
        updated = 0
        for snapshot in query.stream():
            MediaItem(snapshot.id, snapshot.to_dict()).update_doc({f"resizedUrls.{parsed['size']}": url})
            updated += 1

        if not updated:
            logger.info(f"No media doc for {parsed['originalPath']}, resized copy {file_path} ignored")
        else:
            logger.info(f"Stored {parsed['size']} copy of {parsed['originalPath']}")
        return {"updated": updated, "size": parsed["size"]}
