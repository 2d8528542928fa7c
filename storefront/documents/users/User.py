"""User profile document class."""

from storefront.documents.DocumentBase import DocumentBase
from storefront.models.firestore_types import UserDoc
from storefront.util.logger import get_logger

logger = get_logger(__name__)


class User(DocumentBase[UserDoc]):
    """Profile stored under users/{uid}."""

    collection_name = "users"
    resource_name = "User"
    pydantic_model = UserDoc

    @property
    def doc(self) -> UserDoc:
        return super().doc

    @classmethod
    def upsert(cls, uid: str, data: dict) -> "User":
        """Merge ``data`` into users/{uid}, creating the profile for Auth users that have none."""
        user = cls.find(uid)
        if user is None:
            user = cls.create({"uid": uid, **data}, id=uid)
            logger.info(f"Created profile for user {uid}")
        else:
            user.merge_doc(data)
        return user
