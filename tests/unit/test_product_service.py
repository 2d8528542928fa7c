"""Tests for the product catalog service."""

import pytest

from storefront.services.product_service import ProductService


@pytest.fixture
def service(db, fake_firestore):
    fake_firestore.seed("shippingRules", "local", {"zone": "Local", "active": True})
    fake_firestore.seed("shippingRules", "national", {"zone": "National", "active": False})
    fake_firestore.seed("products", "p1", {"name": "rose bush", "sku": "RB-1", "stock": 4,
                                           "shippingRuleIds": ["local", "national"]})
    fake_firestore.seed("products", "p2", {"name": "rosemary", "sku": "RM-1", "shippingRuleId": "local"})
    fake_firestore.seed("products", "p3", {"name": "tulip", "sku": "ro"})
    fake_firestore.seed("products", "p4", {"name": "basil", "shippingRuleIds": ["missing"]})
    return ProductService()


def test_get_products_resolves_shipping_rules(service):
    products = {p["id"]: p for p in service.get_products()["data"]}

    assert products["p1"]["shippingRulesInfo"] == [
        {"id": "local", "name": "Local", "active": True},
        {"id": "national", "name": "National", "active": False},
    ]
    assert products["p1"]["shippingRuleInfo"]["id"] == "local"
    # Legacy single-rule field
    assert products["p2"]["shippingRuleInfo"]["name"] == "Local"
    assert "shippingRulesInfo" not in products["p3"]
    assert "shippingRulesInfo" not in products["p4"]


class TestSearch:
    def test_prefix_match_on_name(self, service):
        ids = [p["id"] for p in service.search_products("Rose")["data"]]
        assert ids == ["p1", "p2"]

    def test_name_matches_come_before_sku_matches(self, service):
        ids = [p["id"] for p in service.search_products("ro")["data"]]
        assert ids == ["p1", "p2", "p3"]

    def test_exact_sku_match(self, service):
        assert [p["id"] for p in service.search_products("RM-1")["data"]] == ["p2"]

    def test_results_are_unique(self, service, fake_firestore):
        fake_firestore.seed("products", "p5", {"name": "rm-1 sampler", "sku": "RM-1"})
        ids = [p["id"] for p in service.search_products("RM-1")["data"]]
        assert sorted(ids) == ["p2", "p5"]
        assert len(ids) == len(set(ids))

    def test_respects_max_results(self, service):
        assert len(service.search_products("ro", max_results=1)["data"]) == 1

    @pytest.mark.parametrize("term", ["", None, " r "])
    def test_short_terms_return_nothing(self, service, term):
        assert service.search_products(term)["data"] == []


def test_add_update_delete(service, fake_firestore):
    created = service.add_product({"id": "ignored", "name": "fern", "price": 12.5, "stock": 3})
    product_id = created["data"]["id"]
    assert product_id != "ignored"
    assert fake_firestore.data("products", product_id)["price"] == 12.5

    assert service.update_product(product_id, {"stock": 7})["ok"] is True
    assert fake_firestore.data("products", product_id)["stock"] == 7

    assert service.get_product_by_id(product_id)["data"]["name"] == "fern"

    service.delete_product(product_id)
    assert fake_firestore.data("products", product_id) is None


def test_add_product_requires_name(service):
    assert service.add_product({"price": 3})["error"]["code"] == "VALIDATION_ERROR"


def test_update_missing_product(service):
    assert service.update_product("ghost", {"stock": 1})["error"]["code"] == "NOT_FOUND"
