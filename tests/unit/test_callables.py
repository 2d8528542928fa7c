"""Tests for the callable functions: auth, validation and error mapping.

The decorated functions keep the undecorated body in ``__wrapped__``, which
takes the callable request directly.
"""

import base64
import inspect
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from firebase_functions import https_fn

from storefront.brokers.callable import (
    catalog_admin,
    capture_payment_intent,
    confirm_order_payment,
    content_admin,
    create_payment_intent,
    delete_user_account,
    detach_payment_method,
    get_categories,
    get_page_content,
    get_payment_methods,
    order_admin,
    resend_order_confirmation,
    search_products,
    send_contact_email,
    set_custom_claims,
    simulate_oxxo_payment,
    users_admin,
    validate_cart_stock,
    verify_and_update_stock,
)

Code = https_fn.FunctionsErrorCode


def call(fn, req):
    return inspect.unwrap(fn)(req)


def expect_error(fn, req, code):
    with pytest.raises(https_fn.HttpsError) as exc:
        call(fn, req)
    assert exc.value.code == code
    return exc.value


@pytest.fixture
def seeded(db, fake_firestore):
    fake_firestore.seed("products", "rose", {"name": "rose", "sku": "R-1", "stock": 2})
    fake_firestore.seed("products", "tulip", {"name": "tulip", "stock": 10})
    fake_firestore.seed("users", "u1", {"email": "ana@example.com", "role": "user"})
    fake_firestore.seed("orders", "o1", {"userId": "u1", "status": "processing",
                                         "payment": {"type": "oxxo", "status": "pending"}})
    fake_firestore.seed("payment_methods", "m1", {"userId": "u1", "stripePaymentMethodId": "pm_1"})
    return fake_firestore


def test_preflight_short_circuits(seeded):
    req = SimpleNamespace(data={}, auth=None, raw_request=SimpleNamespace(method="OPTIONS", headers={}))
    body, status, headers = call(content_admin, req)
    assert status == 204
    assert headers["Access-Control-Allow-Origin"] == "*"


class TestAuth:
    def test_unauthenticated(self, seeded, production_env, make_request):
        expect_error(get_payment_methods, make_request(), Code.UNAUTHENTICATED)

    def test_admin_callable_rejects_users(self, seeded, production_env, make_request):
        req = make_request({"action": "clearCache"}, uid="u1", role="user")
        expect_error(content_admin, req, Code.PERMISSION_DENIED)

    def test_development_headers(self, seeded, make_request):
        req = make_request({"action": "getAllUsers"}, headers={"User-Id": "dev-admin", "User-Role": "admin"})
        assert [u["id"] for u in call(users_admin, req)] == ["u1"]

    def test_development_default_user(self, seeded, make_request):
        assert call(get_payment_methods, make_request())["data"] == []


class TestSetCustomClaims:
    @pytest.mark.parametrize("data", [{"uid": "u1"}, {"role": "admin"}, {"uid": "u1", "role": "owner"}])
    def test_validation(self, seeded, production_env, make_request, data):
        expect_error(set_custom_claims, make_request(data, uid="root", role="superadmin"), Code.INVALID_ARGUMENT)

    def test_admins_cannot_grant_roles(self, seeded, production_env, make_request):
        req = make_request({"uid": "u1", "role": "admin"}, uid="boss", role="admin")
        expect_error(set_custom_claims, req, Code.PERMISSION_DENIED)

    @patch("firebase_admin.auth.revoke_refresh_tokens")
    @patch("firebase_admin.auth.set_custom_user_claims")
    def test_grants_role(self, mock_claims, mock_revoke, seeded, production_env, make_request):
        req = make_request({"uid": "u1", "role": "admin"}, uid="root", role="superadmin")
        result = call(set_custom_claims, req)

        assert result["success"] is True
        mock_claims.assert_called_once_with("u1", {"role": "admin"})
        assert seeded.data("users", "u1")["role"] == "admin"

    @patch("firebase_admin.auth.set_custom_user_claims", side_effect=RuntimeError("auth down"))
    def test_unexpected_failure_is_internal(self, mock_claims, seeded, production_env, make_request):
        req = make_request({"uid": "u1", "role": "admin"}, uid="root", role="superadmin")
        expect_error(set_custom_claims, req, Code.INTERNAL)
        assert seeded.data("users", "u1")["role"] == "user"


def test_superadmin_cannot_delete_self(seeded, production_env, make_request):
    req = make_request({"uid": "root"}, uid="root", role="superadmin")
    expect_error(delete_user_account, req, Code.FAILED_PRECONDITION)


class TestPaymentMethods:
    def test_lists_own_methods(self, seeded, production_env, make_request):
        result = call(get_payment_methods, make_request(uid="u1"))
        assert [m["id"] for m in result["data"]] == ["m1"]

    def test_detach_requires_id(self, seeded, production_env, make_request):
        expect_error(detach_payment_method, make_request({}, uid="u1"), Code.INVALID_ARGUMENT)

    @patch("stripe.PaymentMethod.detach")
    def test_detach_other_users_method(self, mock_detach, seeded, production_env, make_request):
        error = expect_error(detach_payment_method, make_request({"paymentMethodId": "m1"}, uid="u2"),
                             Code.PERMISSION_DENIED)
        assert error.details["code"] == "PERMISSION_DENIED"
        mock_detach.assert_not_called()


class TestCheckout:
    def test_decrements_stock(self, seeded, transactional, make_request):
        req = make_request({"items": [{"id": "rose", "quantity": 2}, {"id": "tulip", "quantity": 1}]})
        result = call(verify_and_update_stock, req)
        assert result["success"] is True
        assert seeded.data("products", "rose")["stock"] == 0
        assert seeded.data("products", "tulip")["stock"] == 9

    def test_shortage_reports_items(self, seeded, transactional, make_request):
        req = make_request({"items": [{"id": "rose", "quantity": 3}, {"id": "tulip", "quantity": 1}]})

        error = expect_error(verify_and_update_stock, req, Code.FAILED_PRECONDITION)

        assert error.message == "Not enough stock for some products:\nrose: requested 3, available 2"
        assert error.details["code"] == "INSUFFICIENT_STOCK"
        assert error.details["outOfStockItems"][0]["id"] == "rose"
        assert seeded.data("products", "tulip")["stock"] == 10

    def test_items_required(self, seeded, make_request):
        expect_error(verify_and_update_stock, make_request({"items": []}), Code.INVALID_ARGUMENT)

    def test_invalid_quantity(self, seeded, transactional, make_request):
        req = make_request({"items": [{"id": "rose", "quantity": -1}]})
        expect_error(verify_and_update_stock, req, Code.INVALID_ARGUMENT)

    def test_oxxo_simulation_blocked_in_production(self, seeded, production_env, make_request):
        req = make_request({"orderId": "o1", "paymentIntentId": "pi_1"}, uid="u1")
        expect_error(simulate_oxxo_payment, req, Code.FAILED_PRECONDITION)

    def test_oxxo_simulation_needs_ids(self, seeded, make_request):
        expect_error(simulate_oxxo_payment, make_request({"orderId": "o1"}), Code.INVALID_ARGUMENT)


class TestPaymentIntents:
    @patch("stripe.PaymentIntent.capture")
    def test_capture_is_admin_only(self, mock_capture, seeded, production_env, make_request):
        req = make_request({"paymentIntentId": "pi_1"}, uid="u1", role="user")
        expect_error(capture_payment_intent, req, Code.PERMISSION_DENIED)
        mock_capture.assert_not_called()

    @patch("stripe.PaymentIntent.capture", return_value={"id": "pi_1", "status": "succeeded"})
    def test_admin_captures(self, mock_capture, seeded, production_env, make_request):
        result = call(capture_payment_intent, make_request({"paymentIntentId": "pi_1"}, uid="boss", role="admin"))
        assert result["data"] == {"paymentIntentId": "pi_1", "status": "succeeded"}

    def test_invalid_amount(self, seeded, production_env, make_request):
        req = make_request({"amount": -5, "paymentMethodId": "pm_1"}, uid="u1")
        error = expect_error(create_payment_intent, req, Code.INVALID_ARGUMENT)
        assert error.details["field"] == "amount"

    @patch("stripe.PaymentIntent.retrieve")
    def test_confirm_other_users_order(self, mock_retrieve, seeded, production_env, make_request):
        req = make_request({"orderId": "o1", "paymentIntentId": "pi_1"}, uid="u2")
        expect_error(confirm_order_payment, req, Code.PERMISSION_DENIED)
        mock_retrieve.assert_not_called()


class TestResendConfirmation:
    def test_customers_only_resend_their_orders(self, seeded, production_env, make_request):
        req = make_request({"orderId": "o1"}, uid="u2", role="user")
        expect_error(resend_order_confirmation, req, Code.PERMISSION_DENIED)

    def test_missing_order(self, seeded, production_env, make_request):
        expect_error(resend_order_confirmation, make_request({"orderId": "ghost"}, uid="u1"), Code.NOT_FOUND)

    @patch("storefront.apis.EmailApi.EmailApi.send", return_value=True)
    def test_owner_can_resend(self, mock_send, seeded, production_env, make_request):
        result = call(resend_order_confirmation, make_request({"orderId": "o1"}, uid="u1"))
        assert result["data"]["to"] == "ana@example.com"
        assert mock_send.call_args[0][1] == "[Resent] Order confirmation #o1"


class TestAdminDispatch:
    def admin(self, make_request, action, **params):
        return make_request({"action": action, "params": params}, headers={"User-Role": "admin"})

    def test_unknown_action(self, seeded, make_request):
        error = expect_error(content_admin, self.admin(make_request, "dropTables"), Code.INVALID_ARGUMENT)
        assert "getPageContent" in error.message

    def test_missing_action(self, seeded, make_request):
        req = make_request({"params": {}}, headers={"User-Role": "admin"})
        expect_error(catalog_admin, req, Code.INVALID_ARGUMENT)

    def test_service_errors_are_mapped(self, seeded, make_request):
        expect_error(catalog_admin, self.admin(make_request, "getProduct", productId="ghost"), Code.NOT_FOUND)

    def test_draft_publish_and_public_read(self, seeded, make_request):
        blocks = [{"id": "b1", "type": "text-block", "title": "Hello"}]
        call(content_admin, self.admin(make_request, "savePageContent", pageId="home", blocks=blocks))

        expect_error(get_page_content, make_request({}), Code.INVALID_ARGUMENT)
        assert call(get_page_content, make_request({"pageId": "home"}))["blocks"] == []

        call(content_admin, self.admin(make_request, "publishPageContent", pageId="home"))
        call(content_admin, self.admin(make_request, "clearCache"))

        page = call(get_page_content, make_request({"pageId": "home"}))
        assert page["blocks"] == blocks
        assert isinstance(page["publishedAt"], str)

    def test_block_types(self, seeded, make_request):
        types = call(content_admin, self.admin(make_request, "getBlockTypes"))
        assert "hero-slider" in [t["type"] for t in types]

    def test_upload_invoice(self, seeded, fake_bucket, make_request):
        pdf = {"name": "F-1.pdf", "contentType": "application/pdf",
               "data": base64.b64encode(b"%PDF").decode()}
        result = call(order_admin, self.admin(make_request, "uploadInvoice", orderId="o1", pdf=pdf))

        assert result["invoiceFileName"] == "F-1.pdf"
        assert fake_bucket.files[result["invoicePdfPath"]] == b"%PDF"
        assert result["invoiceUploadedBy"] == "test-user-id"

    def test_invalid_base64(self, seeded, make_request):
        pdf = {"name": "F-1.pdf", "data": "not base64!"}
        expect_error(order_admin, self.admin(make_request, "uploadInvoice", orderId="o1", pdf=pdf),
                     Code.INVALID_ARGUMENT)

    def test_save_user_cannot_change_role(self, seeded, make_request):
        call(users_admin, self.admin(make_request, "saveUser", user={"uid": "u1", "role": "superadmin",
                                                                    "displayName": "Ana"}))
        stored = seeded.data("users", "u1")
        assert stored["role"] == "user"
        assert stored["displayName"] == "Ana"


class TestPublic:
    def test_search(self, seeded, make_request):
        assert [p["id"] for p in call(search_products, make_request({"term": "ro"}))] == ["rose"]
        assert call(search_products, make_request({"term": "R-1"}))[0]["id"] == "rose"

    def test_categories(self, seeded, make_request):
        assert call(get_categories, make_request()) == {"categories": [], "isPublicFallback": False}

    def test_validate_cart(self, seeded, make_request):
        result = call(validate_cart_stock, make_request({"items": [{"id": "rose", "quantity": 5}]}))
        assert result["valid"] is False
        assert result["outOfStockItems"][0]["availableStock"] == 2

    def test_validate_empty_cart(self, seeded, make_request):
        assert call(validate_cart_stock, make_request({"items": []})) == {"valid": True, "outOfStockItems": []}

    @patch("storefront.apis.EmailApi.EmailApi.send", return_value=True)
    def test_contact_email(self, mock_send, seeded, make_request, monkeypatch):
        monkeypatch.delenv("CONTACT_RECIPIENT_EMAIL", raising=False)
        form = {"name": "Ana", "email": "ana@example.com", "message": "Do you ship to Puebla?",
                "recipientEmail": "attacker@example.com"}
        assert call(send_contact_email, make_request(form)) == {"sent": True, "messageId": None}
        recipients = [c[0][0] for c in mock_send.call_args_list]
        assert recipients == ["shop@example.com", "ana@example.com"]

    def test_contact_email_needs_message(self, seeded, make_request):
        error = expect_error(send_contact_email, make_request({"name": "Ana", "email": "ana@example.com"}),
                             Code.INVALID_ARGUMENT)
        assert error.details["field"] == "message"
