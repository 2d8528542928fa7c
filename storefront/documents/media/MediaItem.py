"""Media library document classes."""

from storefront.documents.DocumentBase import DocumentBase
from storefront.models.firestore_types import MediaDoc, MediaCollectionDoc


class MediaItem(DocumentBase[MediaDoc]):
    """Uploaded file plus its Storage location (``storageRef``)."""

    collection_name = "media"
    resource_name = "Media item"
    pydantic_model = MediaDoc

    @property
    def doc(self) -> MediaDoc:
        return super().doc


class MediaCollection(DocumentBase[MediaCollectionDoc]):
    """User-defined grouping of media items (not a Firestore collection)."""

    collection_name = "mediaCollections"
    resource_name = "Collection"
    pydantic_model = MediaCollectionDoc

    @property
    def doc(self) -> MediaCollectionDoc:
        return super().doc
