"""Media collections: named groups of media items."""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Any, List
from firebase_admin import firestore
from storefront.apis.Db import Db
from storefront.config.loader import get_settings, get_media_count_workers
from storefront.documents.media.MediaItem import MediaCollection
from storefront.exceptions.CustomError import ValidationError
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)


class CollectionsService:
    def __init__(self):
        self.db = Db.get_instance()
        self.settings = get_settings()

    @service_result
    def get_collections(self) -> List[Dict[str, Any]]:
        query = self.db.collections["mediaCollections"].order_by("name")
        return [{"id": s.id, **s.to_dict()} for s in query.stream()]

    @service_result
    def get_collection_by_id(self, collection_id: str) -> Dict[str, Any]:
        return MediaCollection(collection_id).to_dict()

    @service_result
    def create_collection(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not (data or {}).get("name"):
            raise ValidationError("Collection name is required", field="name")
        collection = MediaCollection.create({k: v for k, v in data.items() if k != "id"})
        logger.info(f"Created media collection {collection.id}")
        return collection.to_dict()

    @service_result
    def update_collection(self, collection_id: str, data: Dict[str, Any]) -> Dict[str, str]:
        MediaCollection(collection_id).update_doc(
            {k: v for k, v in data.items() if k not in ("id", "createdAt")})
        logger.info(f"Updated media collection {collection_id}")
        return {"id": collection_id}

    @service_result
    def delete_collection(self, collection_id: str) -> Dict[str, str]:
        """Delete the collection. Its media items keep their collectionId."""
        MediaCollection(collection_id).delete()
        logger.info(f"Deleted media collection {collection_id}")
        return {"id": collection_id}

    def _media_query(self, collection_id: str):
        return (
            self.db.collections["media"]
            .where("collectionId", "==", collection_id)
            .order_by("uploadedAt", direction=firestore.Query.DESCENDING)
        )

    @service_result
    def get_media_by_collection(self, collection_id: str) -> List[Dict[str, Any]]:
        if not collection_id:
            raise ValidationError("Collection id is required", field="collectionId")
        return [{"id": s.id, **s.to_dict()} for s in self._media_query(collection_id).stream()]

    def _count_media(self, collection_id: str) -> int:
        return sum(1 for _ in self.db.collections["media"].where("collectionId", "==", collection_id).stream())

    @service_result
    def get_collections_with_counts(self) -> List[Dict[str, Any]]:
        """Every collection with ``mediaCount``, counted in parallel."""
        query = self.db.collections["mediaCollections"].order_by("name")
        collections = [{"id": s.id, **s.to_dict()} for s in query.stream()]

        with ThreadPoolExecutor(max_workers=get_media_count_workers(self.settings)) as pool:
            counts = list(pool.map(lambda c: self._count_media(c["id"]), collections))

        return [{**collection, "mediaCount": count} for collection, count in zip(collections, counts)]
