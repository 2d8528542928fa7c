"""Document base class for Firestore operations."""

from typing import Type, Optional, TypeVar, Generic, Dict, Any
from google.cloud import firestore
from google.cloud.firestore_v1.collection import CollectionReference
from pydantic import ValidationError as PydanticValidationError
from storefront.apis.Db import Db
from storefront.exceptions.CustomError import NotFoundError, ValidationError
from storefront.models.firestore_types import BaseDoc

DocLike = TypeVar('DocLike', bound=BaseDoc)


def remove_none_values(d):
    """Recursively remove None values from dictionaries."""
    if isinstance(d, dict):
        return {k: remove_none_values(v) for k, v in d.items() if v is not None}
    elif isinstance(d, list):
        return [remove_none_values(v) for v in d if v is not None]
    else:
        return d


def ignore_none(func):
    """Decorator to remove None values from the data argument."""

    def wrapper(self, *args, **kwargs):
        if 'data' in kwargs:
            kwargs['data'] = remove_none_values(kwargs['data'])
        elif args:
            args = (remove_none_values(args[0]),) + args[1:]
        return func(self, *args, **kwargs)

    return wrapper


class DocumentBase(Generic[DocLike]):
    """One Firestore document wrapped in its pydantic model.

    Subclasses set ``collection_name`` (a key of ``Db.collections``),
    ``pydantic_model`` and ``resource_name`` (used in not-found errors).
    """
    collection_name: str = None  # type: ignore
    resource_name: str = "Document"
    pydantic_model: Type[DocLike] = None  # type: ignore
    _doc: Optional[DocLike] = None
    _db: Optional[Db] = None

    @property
    def db(self) -> Db:
        if self._db is None:
            self._db = Db.get_instance()
        return self._db

    @property
    def collection_ref(self) -> CollectionReference:
        return self.db.collections[self.collection_name]

    def __init__(self, id: str, doc: dict | None = None):
        """
        Initialize the document.
        :param id: Id of the document. Without ``doc`` the document is fetched.
        """
        self.id = id

        if not doc:
            self._init_doc()
        else:
            self._doc = self._build_model(doc)

    def _init_doc(self):
        if not self.id:
            raise NotFoundError(self.resource_name, "")

        snapshot = self.collection_ref.document(self.id).get()

        if not snapshot.exists:
            raise NotFoundError(self.resource_name, self.id)

        self._doc = self._build_model(snapshot.to_dict())

    @classmethod
    def find(cls, id: str):
        """The document, or None when it does not exist."""
        try:
            return cls(id)
        except NotFoundError:
            return None

    @classmethod
    def create(cls, data: Dict[str, Any], id: Optional[str] = None):
        """Write a new document with createdAt/updatedAt and return it."""
        instance = cls.__new__(cls)
        instance.id = id or instance.collection_ref.document().id
        instance.create_doc(data)
        return instance

    @property
    def doc(self) -> DocLike:
        if self._doc is None:
            raise NotFoundError(self.resource_name, self.id)
        return self._doc

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, **self.doc.model_dump(by_alias=True)}

    def _build_model(self, data: dict) -> DocLike:
        try:
            return self.pydantic_model(**data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            raise ValidationError(f"Invalid {self.resource_name.lower()}: {field} {first['msg'].lower()}", field=field)

    def create_doc(self, data: dict):
        now = self.db.timestamp_now()
        self._doc = self._build_model({**data, "createdAt": now, "updatedAt": now})
        self.collection_ref.document(self.id).set(
            self._doc.model_dump(by_alias=True, exclude_none=True))

    @ignore_none
    def merge_doc(self, data):
        data["updatedAt"] = self.db.timestamp_now()
        refreshed = self._apply_local(data)
        self.collection_ref.document(self.id).set(data, merge=True)
        self._doc = refreshed

    @ignore_none
    def update_doc(self, data):
        data["updatedAt"] = self.db.timestamp_now()
        refreshed = self._apply_local(data)
        self.collection_ref.document(self.id).update(data)
        self._doc = refreshed

    def append_to_array(self, field: str, entry: dict, data: Optional[dict] = None):
        """Append ``entry`` to the array ``field`` with ArrayUnion, updating ``data`` in the same write.

        Concurrent appends from other writers are kept.
        """
        entry = remove_none_values(entry)
        data = remove_none_values(dict(data or {}))
        data["updatedAt"] = self.db.timestamp_now()
        refreshed = self._apply_local(data)
        if refreshed is not None:
            current = refreshed.model_dump(by_alias=True)
            current[field] = list(current.get(field) or []) + [entry]
            refreshed = self._build_model(current)
        self.collection_ref.document(self.id).update({**data, field: firestore.ArrayUnion([entry])})
        self._doc = refreshed

    def _apply_local(self, data: dict) -> Optional[DocLike]:
        """Validate ``data`` against the cached model before it is written."""
        if self._doc is None:
            return None
        current = self._doc.model_dump(by_alias=True)
        for key, value in data.items():
            # Dotted keys address nested maps, as in Firestore updates
            target = current
            parts = key.split(".")
            for part in parts[:-1]:
                if not isinstance(target.get(part), dict):
                    target[part] = {}
                target = target[part]
            target[parts[-1]] = value
        return self._build_model(current)

    def delete(self):
        self.collection_ref.document(self.id).delete()
        self._doc = None

    def get_doc_ref(self):
        return self.collection_ref.document(self.id)
