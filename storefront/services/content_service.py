"""Page content service: draft and published block lists per page."""

from typing import List, Optional, Dict, Any
from storefront.apis.Db import Db
from storefront.exceptions.CustomError import NotFoundError, ValidationError
from storefront.models.util_types import PageVersion
from storefront.services.cache_service import content_cache, page_content_key, ttl_for
from storefront.services.content_blocks import create_default_blocks, validate_block
from storefront.util.json_response import service_result, ok
from storefront.util.logger import get_logger

logger = get_logger(__name__)


class ContentService:
    """Pages are documents keyed by page id holding an ordered ``blocks`` list.

    Editors work on ``content``; ``publish_page_content`` copies the draft to
    ``content_published``, which is what the storefront reads.
    """

    def __init__(self):
        self.db = Db.get_instance()

    def _collection(self, version: str):
        if version == PageVersion.PUBLISHED.value:
            return self.db.collections["contentPublished"]
        return self.db.collections["content"]

    @staticmethod
    def _require_page_id(page_id: Optional[str]):
        if not page_id:
            raise ValidationError("Page id is required", field="pageId")

    def get_page_content(self, page_id: str, version: str = PageVersion.DRAFT.value) -> Dict[str, Any]:
        """Blocks of a page. The published version is served through the content cache."""
        if version == PageVersion.PUBLISHED.value and page_id:
            return content_cache.get_or_fetch(
                page_content_key(page_id, version),
                lambda: self._read_page(page_id, version),
                ttl_for("published_page"),
            )
        return self._read_page(page_id, version)

    @service_result
    def _read_page(self, page_id: str, version: str) -> Dict[str, Any]:
        self._require_page_id(page_id)
        snapshot = self._collection(version).document(page_id).get()
        if not snapshot.exists:
            return {"id": page_id, "blocks": [], "updatedAt": None, "createdAt": None}
        data = snapshot.to_dict()
        return {"id": page_id, **data, "blocks": data.get("blocks") or []}

    def _load_blocks(self, page_id: str) -> List[Dict[str, Any]]:
        snapshot = self.db.collections["content"].document(page_id).get()
        if not snapshot.exists:
            return []
        return list(snapshot.to_dict().get("blocks") or [])

    def _write_blocks(self, page_id: str, blocks: List[Dict[str, Any]], overwrite: bool = False):
        ref = self.db.collections["content"].document(page_id)
        now = self.db.timestamp_now()
        snapshot = ref.get()

        if overwrite:
            data = snapshot.to_dict() if snapshot.exists else {}
            data.update({"blocks": blocks, "updatedAt": now})
            data.setdefault("createdAt", now)
            ref.set(data)
            return

        payload = {"blocks": blocks, "updatedAt": now}
        if not snapshot.exists:
            payload["createdAt"] = now
        ref.set(payload, merge=True)

    @service_result
    def save_page_content(self, page_id: str, blocks: List[Dict[str, Any]]) -> Dict[str, Any]:
        self._require_page_id(page_id)
        if not isinstance(blocks, list):
            raise ValidationError("blocks must be a list", field="blocks")
        for block in blocks:
            validate_block(block)

        self._write_blocks(page_id, blocks)
        logger.info(f"Saved draft of page {page_id} with {len(blocks)} blocks")
        return {"id": page_id, "blocks": blocks}

    @service_result
    def publish_page_content(self, page_id: str) -> Dict[str, Any]:
        """Copy the draft into the published collection and drop its cache entry."""
        self._require_page_id(page_id)
        draft = self.db.collections["content"].document(page_id).get()
        if not draft.exists:
            raise NotFoundError("Page content", page_id)

        published_ref = self.db.collections["contentPublished"].document(page_id)
        now = self.db.timestamp_now()
        payload = {
            **draft.to_dict(),
            "publishedAt": now,
            "updatedAt": now,
        }
        previous = published_ref.get()
        if previous.exists and previous.to_dict().get("createdAt"):
            payload["createdAt"] = previous.to_dict()["createdAt"]
        else:
            payload["createdAt"] = now

        published_ref.set(payload)
        content_cache.remove(page_content_key(page_id, PageVersion.PUBLISHED.value))
        logger.info(f"Published page {page_id}")
        return {"id": page_id, "publishedAt": now}

    @service_result
    def update_block(self, page_id: str, block: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the block with the same id, or append it when new."""
        self._require_page_id(page_id)
        if not block or not block.get("id"):
            raise ValidationError("Block id is required", field="id")

        blocks = self._load_blocks(page_id)
        now = self.db.timestamp_now()

        for index, existing in enumerate(blocks):
            if existing.get("id") == block["id"]:
                updated = {**existing, **block, "updatedAt": now}
                validate_block(updated)
                blocks[index] = updated
                break
        else:
            updated = {**block, "createdAt": now}
            validate_block(updated)
            blocks.append(updated)

        self._write_blocks(page_id, blocks)
        logger.info(f"Saved block {block['id']} on page {page_id}")
        return updated

    @service_result
    def delete_block(self, page_id: str, block_id: str) -> Dict[str, Any]:
        self._require_page_id(page_id)
        blocks = [b for b in self._load_blocks(page_id) if b.get("id") != block_id]
        self._write_blocks(page_id, blocks)
        logger.info(f"Deleted block {block_id} from page {page_id}")
        return {"id": page_id, "blocks": blocks}

    @service_result
    def reorder_blocks(self, page_id: str, order: List[str]) -> Dict[str, Any]:
        """Rebuild the block list in the order of ``order``.

        Ids without a matching block are skipped, a repeated id keeps its first
        position, and blocks missing from ``order`` are removed from the page.
        """
        self._require_page_id(page_id)
        if not isinstance(order, list):
            raise ValidationError("order must be a list of block ids", field="order")

        by_id = {b.get("id"): b for b in self._load_blocks(page_id)}
        blocks = [by_id[block_id] for block_id in dict.fromkeys(order) if block_id in by_id]

        self._write_blocks(page_id, blocks, overwrite=True)
        logger.info(f"Reordered {len(blocks)} blocks on page {page_id}")
        return {"id": page_id, "blocks": blocks}

    @service_result
    def reset_page_content(self, page_id: str, page_type: Optional[str] = None) -> Dict[str, Any]:
        """Replace the draft with the starter blocks of ``page_type`` (defaults to the page id)."""
        self._require_page_id(page_id)
        blocks = create_default_blocks(page_type or page_id)
        self._write_blocks(page_id, blocks, overwrite=True)
        logger.info(f"Reset page {page_id} to {len(blocks)} default blocks")
        return {"id": page_id, "blocks": blocks}


def clear_content_cache():
    content_cache.clear()
    return ok({"cleared": True})
