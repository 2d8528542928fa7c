"""Tests for saved payment methods."""

from unittest.mock import patch

import pytest
import stripe

from storefront.services.payment_service import PaymentService


def card(stripe_id, user_id="u1", is_default=False, last4="4242"):
    return {"userId": user_id, "stripePaymentMethodId": stripe_id, "type": "card",
            "brand": "visa", "last4": last4, "isDefault": is_default}


@pytest.fixture
def service(db, fake_firestore):
    fake_firestore.seed("payment_methods", "m1", card("pm_1", is_default=True))
    fake_firestore.seed("payment_methods", "m2", card("pm_2", last4="1111"))
    fake_firestore.seed("payment_methods", "m3", card("pm_3", user_id="u2", is_default=True))
    fake_firestore.seed("users", "u1", {"email": "ana@example.com", "stripeCustomerId": "cus_123"})
    fake_firestore.seed("users", "u2", {"email": "bo@example.com"})
    return PaymentService()


def defaults(fake_firestore, user_id):
    return sorted(
        doc_id for doc_id in fake_firestore.ids("payment_methods")
        if fake_firestore.data("payment_methods", doc_id)["userId"] == user_id
        and fake_firestore.data("payment_methods", doc_id).get("isDefault")
    )


def test_get_user_payment_methods(service):
    methods = service.get_user_payment_methods("u1")["data"]
    assert sorted(m["id"] for m in methods) == ["m1", "m2"]
    assert service.get_user_payment_methods("")["error"]["code"] == "VALIDATION_ERROR"


def stripe_card(stripe_id, customer="cus_123", **details):
    return {
        "id": stripe_id, "object": "payment_method", "type": "card", "customer": customer,
        "card": {"brand": "mastercard", "last4": "5555", "exp_month": 4, "exp_year": 2030, **details},
        "billing_details": {"name": "Ana Perez"},
    }


def retrieve_card(stripe_id, **kwargs):
    return patch("stripe.PaymentMethod.retrieve", return_value=stripe_card(stripe_id, **kwargs))


class TestSave:
    def test_card_details_come_from_stripe(self, service, fake_firestore):
        sent = {**card("pm_9", last4="0000"), "brand": "forged", "role": "admin"}
        with retrieve_card("pm_9") as mock_retrieve:
            result = service.save_payment_method("u1", sent)

        mock_retrieve.assert_called_once_with("pm_9")
        assert result["data"]["alreadyExisted"] is False
        stored = fake_firestore.data("payment_methods", result["data"]["id"])
        assert stored["brand"] == "mastercard"
        assert stored["last4"] == "5555"
        assert stored["expiryDate"] == "04/2030"
        assert stored["cardholderName"] == "Ana Perez"
        assert stored["stripeCustomerId"] == "cus_123"
        assert "role" not in stored

    def test_new_default_clears_previous(self, service, fake_firestore):
        with retrieve_card("pm_9"):
            result = service.save_payment_method("u1", {"id": "client-id", **card("pm_9", is_default=True)})

        assert result["ok"] is True
        new_id = result["data"]["id"]
        assert new_id != "client-id"
        assert defaults(fake_firestore, "u1") == [new_id]
        # Other users are untouched
        assert defaults(fake_firestore, "u2") == ["m3"]

    def test_non_default_keeps_existing_default(self, service, fake_firestore):
        with retrieve_card("pm_9"):
            service.save_payment_method("u1", card("pm_9"))
        assert defaults(fake_firestore, "u1") == ["m1"]

    def test_owner_comes_from_caller(self, service, fake_firestore):
        with retrieve_card("pm_9"):
            result = service.save_payment_method("u1", card("pm_9", user_id="someone-else"))
        assert fake_firestore.data("payment_methods", result["data"]["id"])["userId"] == "u1"

    def test_saving_again_refreshes_timestamp(self, service, fake_firestore):
        with retrieve_card("pm_2") as mock_retrieve:
            result = service.save_payment_method("u1", card("pm_2"))

        assert result["ok"] is True
        assert result["data"]["id"] == "m2"
        assert result["data"]["alreadyExisted"] is True
        assert fake_firestore.data("payment_methods", "m2")["updatedAt"] is not None
        assert fake_firestore.data("payment_methods", "m2")["last4"] == "1111"
        assert len(fake_firestore.ids("payment_methods")) == 3
        mock_retrieve.assert_not_called()

    def test_same_stripe_id_for_another_user_is_allowed(self, service):
        with retrieve_card("pm_2", customer="cus_456"):
            result = service.save_payment_method("u2", {**card("pm_2"), "stripeCustomerId": "cus_456"})
        assert result["ok"] is True
        assert result["data"]["stripeCustomerId"] == "cus_456"

    @pytest.mark.parametrize("user_id,sent,field", [
        ("u1", {"type": "card"}, "stripePaymentMethodId"),
        ("u1", {"stripePaymentMethodId": "card_9"}, "stripePaymentMethodId"),
        ("u1", {"stripePaymentMethodId": "pm_9", "stripeCustomerId": "acct_1"}, "stripeCustomerId"),
        ("u2", {"stripePaymentMethodId": "pm_9"}, "stripeCustomerId"),
    ])
    def test_rejects_malformed_stripe_ids(self, service, user_id, sent, field):
        with patch("stripe.PaymentMethod.retrieve") as mock_retrieve:
            result = service.save_payment_method(user_id, sent)
        assert result["error"]["code"] == "VALIDATION_ERROR"
        assert result["error"]["details"]["field"] == field
        mock_retrieve.assert_not_called()

    def test_method_without_card(self, service, fake_firestore):
        with patch("stripe.PaymentMethod.retrieve", return_value={"id": "pm_9", "type": "oxxo", "card": None}):
            result = service.save_payment_method("u1", card("pm_9"))
        assert result["error"]["code"] == "NOT_FOUND"
        assert len(fake_firestore.ids("payment_methods")) == 3

    def test_card_of_another_customer(self, service, fake_firestore):
        with retrieve_card("pm_9", customer="cus_other"):
            result = service.save_payment_method("u1", card("pm_9"))
        assert result["error"]["code"] == "PERMISSION_DENIED"
        assert len(fake_firestore.ids("payment_methods")) == 3


class TestDelete:
    @patch("stripe.PaymentMethod.detach")
    def test_detaches_and_deletes(self, mock_detach, service, fake_firestore):
        assert service.delete_payment_method("u1", "m2")["data"] == {"id": "m2"}
        mock_detach.assert_called_once_with("pm_2")
        assert fake_firestore.data("payment_methods", "m2") is None
        assert stripe.api_key == "sk_test_dummy"

    @patch("stripe.PaymentMethod.detach")
    def test_default_cannot_be_deleted(self, mock_detach, service, fake_firestore):
        result = service.delete_payment_method("u1", "m1")
        assert result["error"]["code"] == "FAILED_PRECONDITION"
        mock_detach.assert_not_called()
        assert fake_firestore.data("payment_methods", "m1") is not None

    @patch("stripe.PaymentMethod.detach")
    def test_other_users_method(self, mock_detach, service):
        assert service.delete_payment_method("u2", "m2")["error"]["code"] == "PERMISSION_DENIED"
        mock_detach.assert_not_called()

    def test_missing_method(self, service):
        assert service.delete_payment_method("u1", "ghost")["error"]["code"] == "NOT_FOUND"

    @patch("stripe.PaymentMethod.detach",
           side_effect=stripe.InvalidRequestError("No such PaymentMethod", "id", http_status=404))
    def test_stripe_failure_keeps_doc(self, mock_detach, service, fake_firestore):
        result = service.delete_payment_method("u1", "m2")
        assert result["error"]["code"] == "EXTERNAL_SERVICE_ERROR"
        assert result["error"]["details"]["service"] == "stripe"
        assert fake_firestore.data("payment_methods", "m2") is not None


class TestSetDefault:
    @patch("stripe.Customer.modify")
    def test_moves_default_and_updates_customer(self, mock_modify, service, fake_firestore):
        result = service.set_default_payment_method("u1", "m2")

        assert result["data"] == {"id": "m2", "stripeCustomerUpdated": True}
        assert defaults(fake_firestore, "u1") == ["m2"]
        mock_modify.assert_called_once_with(
            "cus_123", invoice_settings={"default_payment_method": "pm_2"})

    @patch("stripe.Customer.modify")
    def test_user_without_customer(self, mock_modify, service, fake_firestore):
        result = service.set_default_payment_method("u2", "m3")
        assert result["data"]["stripeCustomerUpdated"] is False
        assert defaults(fake_firestore, "u2") == ["m3"]
        mock_modify.assert_not_called()

    def test_other_users_method(self, service, fake_firestore):
        assert service.set_default_payment_method("u1", "m3")["error"]["code"] == "PERMISSION_DENIED"
        assert defaults(fake_firestore, "u1") == ["m1"]
