"""Tests for the Stripe webhook and the health check endpoint."""

import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from storefront.brokers.https.health_check import health_check
from storefront.brokers.https.stripe_webhook import handle_stripe_event, stripe_webhook


def event(event_type, intent_id="pi_1"):
    return {"type": event_type, "data": {"object": {"id": intent_id}}}


def http_request(method="POST", body=b"{}", signature="t=1,v1=abc"):
    return SimpleNamespace(method=method, get_data=lambda: body, headers={"Stripe-Signature": signature})


def body_of(response):
    return json.loads(response.get_data())


@pytest.fixture
def seeded(db, fake_firestore):
    fake_firestore.seed("orders", "o1", {"userId": "u1", "status": "pending",
                                         "payment": {"type": "card", "status": "pending",
                                                     "paymentIntentId": "pi_1"}})
    return fake_firestore


class TestHandleEvent:
    def test_succeeded(self, seeded):
        body, status = handle_stripe_event(event("payment_intent.succeeded"))
        assert status == 200
        assert body == {"received": True, "orderId": "o1"}
        assert seeded.data("orders", "o1")["status"] == "processing"
        assert seeded.data("orders", "o1")["payment"]["status"] == "succeeded"

    def test_failed(self, seeded):
        handle_stripe_event(event("payment_intent.payment_failed"))
        assert seeded.data("orders", "o1")["status"] == "payment_failed"

    def test_unknown_order_is_acknowledged(self, seeded):
        body, status = handle_stripe_event(event("payment_intent.succeeded", "pi_ghost"))
        assert status == 200
        assert body["message"] == "Order not found, but webhook received."

    def test_unhandled_type(self, seeded):
        assert handle_stripe_event(event("charge.refunded")) == ({"received": True}, 200)
        assert seeded.data("orders", "o1")["status"] == "pending"

    def test_database_failure_asks_for_retry(self, seeded):
        with patch("storefront.documents.orders.Order.Order.update_doc", side_effect=RuntimeError("unavailable")):
            body, status = handle_stripe_event(event("payment_intent.succeeded"))
        assert status == 500
        assert body == {"error": "Database error processing webhook."}


class TestEndpoint:
    def test_rejects_get(self, seeded):
        assert stripe_webhook.__wrapped__(http_request("GET")).status_code == 405

    @patch("stripe.Webhook.construct_event")
    def test_verifies_signature_with_secret(self, mock_construct, seeded):
        mock_construct.return_value = event("payment_intent.succeeded")

        response = stripe_webhook.__wrapped__(http_request(body=b'{"id": "evt_1"}'))

        assert response.status_code == 200
        assert body_of(response)["orderId"] == "o1"
        mock_construct.assert_called_once_with(b'{"id": "evt_1"}', "t=1,v1=abc", "whsec_test_dummy")

    @patch("stripe.Webhook.construct_event",
           side_effect=stripe.SignatureVerificationError("bad signature", "t=1,v1=abc"))
    def test_bad_signature(self, mock_construct, seeded):
        response = stripe_webhook.__wrapped__(http_request())
        assert response.status_code == 400
        assert body_of(response)["error"].startswith("Webhook Error:")
        assert seeded.data("orders", "o1")["status"] == "pending"

    @patch("stripe.Webhook.construct_event", side_effect=ValueError("Invalid payload"))
    def test_bad_payload(self, mock_construct, seeded):
        assert stripe_webhook.__wrapped__(http_request()).status_code == 400

    @patch("stripe.Webhook.construct_event", return_value={"data": {}})
    def test_malformed_event(self, mock_construct, seeded):
        response = stripe_webhook.__wrapped__(http_request())
        assert response.status_code == 500
        assert body_of(response) == {"error": "Internal server error"}


class TestHealthCheck:
    def test_healthy(self, seeded):
        response = health_check.__wrapped__(SimpleNamespace(method="GET"))
        data = body_of(response)
        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["services"]["database"] == "healthy"
        assert data["environment"] == "development"
        assert data["services"]["payments"] == "configured"
        assert data["services"]["email"] == "configured"
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_degraded_when_firestore_fails(self, seeded, db):
        with patch.object(db.collections["products"], "limit", side_effect=RuntimeError("unreachable")):
            response = health_check.__wrapped__(SimpleNamespace(method="GET"))
        assert response.status_code == 503
        assert body_of(response)["status"] == "degraded"

    def test_preflight(self, seeded):
        response = health_check.__wrapped__(SimpleNamespace(method="OPTIONS"))
        assert response.status_code == 204
        assert response.headers["Access-Control-Allow-Methods"] == "GET, OPTIONS"

    def test_reports_missing_email_keys(self, seeded, monkeypatch):
        monkeypatch.delenv("SENDGRID_API_KEY")
        response = health_check.__wrapped__(SimpleNamespace(method="GET"))
        assert response.status_code == 200
        assert body_of(response)["services"]["email"] == "missing"
