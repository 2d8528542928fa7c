"""Storefront database class with Firebase operations."""

import os
import uuid
import logging
from urllib.parse import quote
from firebase_admin import firestore, storage
from google.cloud import secretmanager
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from abc import ABC

from storefront.config.env_loader import get_optional_env_var


class Db(ABC):
    """Firestore, Storage and Secret Manager access for the storefront.

    One instance per class (see ``get_instance``). Collection references live
    in ``collections`` so services never hard-code collection names.
    """
    _instances: Dict[str, Any] = {}
    _gcp_secret_client = None

    collections: Dict[str, Any] = {}

    def __new__(cls, *args, **kwargs):
        """Ensure only one instance per class exists"""
        if cls.__name__ not in cls._instances:
            cls._instances[cls.__name__] = super().__new__(cls)
        return cls._instances[cls.__name__]

    def __init__(self):
        """Initialize the database - only runs once per class due to singleton"""
        if hasattr(self, "_initialized"):
            return

        self._init_firestore()
        self._init_collections()
        self._initialized = True

    def _init_firestore(self):
        self.firestore = firestore.client()
        self.logger = logging.getLogger("firebase-functions")
        self.logger.info("Firestore initialized")

    def _init_collections(self):
        self.collections = {
            "users": self.firestore.collection("users"),

            # Catalog
            "products": self.firestore.collection("products"),
            "categories": self.firestore.collection("categories"),
            "shippingRules": self.firestore.collection("shippingRules"),

            # Content management
            "content": self.firestore.collection("content"),
            "contentPublished": self.firestore.collection("content_published"),
            "media": self.firestore.collection("media"),
            "mediaCollections": self.firestore.collection("mediaCollections"),

            # Checkout
            "orders": self.firestore.collection("orders"),
            "paymentMethods": self.firestore.collection("payment_methods"),
            "paymentIntents": self.firestore.collection("payment_intents"),
        }

    @classmethod
    def get_instance(cls):
        """Get or create the singleton instance for this class"""
        return cls()

    @classmethod
    def reset_instance(cls):
        """Drop the cached instance so the next get_instance builds a new one."""
        cls._instances.pop(cls.__name__, None)

    # Storage functions
    @staticmethod
    def get_bucket():
        bucket_name = get_optional_env_var("STORAGE_BUCKET") or None
        return storage.bucket(bucket_name)

    @staticmethod
    def _normalize_path(file_path: str) -> str:
        return file_path[1:] if file_path.startswith("/") else file_path

    def upload_file_buffer(self, buffer: bytes, destination: str, content_type: Optional[str] = None):
        """Upload bytes and attach a Firebase download token.

        Returns:
            The uploaded blob
        """
        blob = self.get_bucket().blob(self._normalize_path(destination))
        blob.metadata = {"firebaseStorageDownloadTokens": uuid.uuid4().hex}
        blob.upload_from_string(buffer, content_type=content_type or "application/octet-stream")
        return blob

    def get_download_url(self, blob) -> str:
        """Token URL equivalent to the client SDK's getDownloadURL."""
        token = (blob.metadata or {}).get("firebaseStorageDownloadTokens", "")
        return (
            f"https://firebasestorage.googleapis.com/v0/b/{blob.bucket.name}/o/"
            f"{quote(blob.name, safe='')}?alt=media&token={token}"
        )

    def get_object_download_url(self, file_path: str, bucket_name: Optional[str] = None,
                                metadata: Optional[Dict[str, str]] = None) -> str:
        """Download URL of an existing object, adding a token when it has none."""
        bucket = storage.bucket(bucket_name) if bucket_name else self.get_bucket()
        blob = bucket.blob(self._normalize_path(file_path))
        token = (metadata or {}).get("firebaseStorageDownloadTokens")
        if token:
            blob.metadata = {"firebaseStorageDownloadTokens": token}
        else:
            blob.metadata = {"firebaseStorageDownloadTokens": uuid.uuid4().hex}
            blob.patch()
        return self.get_download_url(blob)

    def delete_file(self, file_path: str):
        blob = self.get_bucket().blob(self._normalize_path(file_path))
        blob.delete()

    @staticmethod
    def is_production():
        return os.getenv("ENV") == "production"

    @staticmethod
    def is_development():
        return os.getenv("ENV") == "development"

    @staticmethod
    def get_project_num():
        """GCP project number used to address Secret Manager secrets."""
        return os.environ.get("GCLOUD_PROJECT_NUMBER")

    # Secrets functions
    @staticmethod
    def get_secret(id: str) -> str:
        if not Db._gcp_secret_client:
            Db._gcp_secret_client = secretmanager.SecretManagerServiceClient()

        version = Db._gcp_secret_client.access_secret_version(
            request={
                "name": f"projects/{Db.get_project_num()}/secrets/{id}/versions/latest"
            }
        )

        return version.payload.data.decode("utf-8")

    @staticmethod
    def get_env_or_secret(name: str) -> str:
        """Environment variable ``name`` or, when unset, the secret with that id."""
        value = get_optional_env_var(name)
        if value:
            return value
        return Db.get_secret(name)

    # Timestamp functions
    @staticmethod
    def timestamp_now():
        return datetime.now(timezone.utc)
