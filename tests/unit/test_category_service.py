"""Tests for the category service."""

from unittest.mock import patch

import pytest
from google.api_core.exceptions import PermissionDenied

from storefront.services.category_service import CategoryService, SAMPLE_CATEGORIES


@pytest.fixture
def service(db, fake_firestore):
    fake_firestore.seed("categories", "c1", {"name": "Plants", "active": True})
    return CategoryService()


def test_get_categories(service):
    result = service.get_categories()["data"]
    assert result["isPublicFallback"] is False
    assert result["categories"] == [{"id": "c1", "name": "Plants", "active": True}]


def test_permission_denied_returns_samples(service, db):
    with patch.object(db.collections["categories"], "stream", side_effect=PermissionDenied("no access")):
        result = service.get_categories()

    assert result["ok"] is True
    assert result["data"]["isPublicFallback"] is True
    assert [c["id"] for c in result["data"]["categories"]] == [c["id"] for c in SAMPLE_CATEGORIES]


def test_other_errors_fail(service, db):
    with patch.object(db.collections["categories"], "stream", side_effect=RuntimeError("boom")):
        result = service.get_categories()
    assert result["error"]["code"] == "INTERNAL"


def test_crud(service, fake_firestore):
    category_id = service.create_category({"name": "Pots", "description": "Clay"})["data"]["id"]
    assert fake_firestore.data("categories", category_id)["description"] == "Clay"

    service.update_category(category_id, {"description": "Terracotta", "createdAt": None})
    assert fake_firestore.data("categories", category_id)["description"] == "Terracotta"

    service.delete_category(category_id)
    assert fake_firestore.data("categories", category_id) is None


def test_delete_missing_category(service):
    assert service.delete_category("ghost")["error"]["code"] == "NOT_FOUND"
