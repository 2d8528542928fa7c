"""Tests for user profiles and role claims."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from firebase_admin import auth

from storefront.services.user_service import UserService


@pytest.fixture
def service(db, fake_firestore):
    fake_firestore.seed("users", "u1", {"email": "ana@example.com", "displayName": "Ana", "role": "admin"})
    fake_firestore.seed("users", "u2", {"email": "bo@example.com", "displayName": "Bo", "role": "user"})
    fake_firestore.seed("users", "u3", {"email": "cy@example.com", "displayName": "Cy", "role": "superadmin"})
    fake_firestore.seed("users", "u4", {"email": "al@example.com", "displayName": "Al", "role": "admin"})
    return UserService()


def test_get_user_doc(service):
    assert service.get_user_doc("u1")["data"]["email"] == "ana@example.com"
    assert service.get_user_doc("ghost")["data"] is None
    assert service.get_user_doc("")["error"]["code"] == "VALIDATION_ERROR"


def test_save_user_doc_new_and_existing(service, fake_firestore):
    service.save_user_doc({"uid": "u9", "email": "new@example.com"})
    created = fake_firestore.data("users", "u9")
    assert created["createdAt"] is not None

    service.save_user_doc({"uid": "u9", "displayName": "Nova"})
    updated = fake_firestore.data("users", "u9")
    assert updated["createdAt"] == created["createdAt"]
    assert updated["email"] == "new@example.com"
    assert updated["displayName"] == "Nova"


@pytest.mark.parametrize("data", [{"email": "x@example.com"}, {"uid": "u1", "role": "owner"}])
def test_save_user_doc_validation(service, data):
    assert service.save_user_doc(data)["error"]["code"] == "VALIDATION_ERROR"


def test_get_users_by_role_groups_in_order(service):
    users = service.get_users_by_role(["superadmin", "admin"])["data"]
    assert [u["id"] for u in users] == ["u3", "u4", "u1"]


def test_get_users_by_role_without_roles(service):
    assert len(service.get_users_by_role([])["data"]) == 4
    assert len(service.get_all_users()["data"]) == 4


@patch("firebase_admin.auth.revoke_refresh_tokens")
@patch("firebase_admin.auth.set_custom_user_claims")
def test_update_user_role_sets_claims(mock_claims, mock_revoke, service, fake_firestore):
    result = service.update_user_role("u2", "admin")

    assert result["data"] == {"uid": "u2", "role": "admin"}
    assert fake_firestore.data("users", "u2")["role"] == "admin"
    mock_claims.assert_called_once_with("u2", {"role": "admin"})
    mock_revoke.assert_called_once_with("u2")


@patch("firebase_admin.auth.revoke_refresh_tokens")
@patch("firebase_admin.auth.set_custom_user_claims")
def test_update_user_role_creates_missing_profile(mock_claims, mock_revoke, service, fake_firestore):
    result = service.update_user_role("fresh-auth-user", "admin")

    assert result["ok"] is True
    mock_claims.assert_called_once_with("fresh-auth-user", {"role": "admin"})
    profile = fake_firestore.data("users", "fresh-auth-user")
    assert profile["role"] == "admin"
    assert profile["uid"] == "fresh-auth-user"
    assert profile["createdAt"] is not None


@patch("firebase_admin.auth.set_custom_user_claims", side_effect=RuntimeError("auth down"))
def test_update_user_role_keeps_profile_when_claims_fail(mock_claims, service, fake_firestore):
    assert service.update_user_role("u2", "admin")["error"]["code"] == "INTERNAL"
    assert fake_firestore.data("users", "u2")["role"] == "user"


@patch("firebase_admin.auth.set_custom_user_claims")
def test_update_user_role_rejects_unknown_role(mock_claims, service):
    assert service.update_user_role("u2", "owner")["error"]["code"] == "VALIDATION_ERROR"
    mock_claims.assert_not_called()


@patch("firebase_admin.auth.delete_user")
def test_delete_user(mock_delete, service, fake_firestore):
    assert service.delete_user("u2")["data"] == {"uid": "u2", "authDeleted": True}
    mock_delete.assert_called_once_with("u2")
    assert fake_firestore.data("users", "u2") is None


@patch("firebase_admin.auth.delete_user", side_effect=auth.UserNotFoundError("gone"))
def test_delete_user_without_auth_account(mock_delete, service, fake_firestore):
    assert service.delete_user("u2")["data"]["authDeleted"] is False
    assert fake_firestore.data("users", "u2") is None


def test_delete_user_doc(service, fake_firestore):
    service.delete_user_doc("u4")
    assert fake_firestore.data("users", "u4") is None


def auth_record(uid, email=None, claims=None):
    return SimpleNamespace(
        uid=uid,
        email=email,
        display_name=None,
        photo_url=None,
        disabled=False,
        email_verified=True,
        custom_claims=claims,
        user_metadata=SimpleNamespace(creation_timestamp=1700000000000, last_sign_in_timestamp=None),
    )


@patch("firebase_admin.auth.list_users")
def test_get_users_detail_merges_profiles(mock_list, service):
    mock_list.return_value = SimpleNamespace(users=[
        auth_record("u1", "ana@auth.example.com", {"role": "superadmin"}),
        auth_record("u2"),
        auth_record("u99", "orphan@example.com"),
    ])

    details = {d["uid"]: d for d in service.get_users_detail()["data"]}

    assert details["u1"]["email"] == "ana@auth.example.com"
    assert details["u1"]["role"] == "superadmin"
    assert details["u2"]["email"] == "bo@example.com"
    assert details["u2"]["displayName"] == "Bo"
    assert details["u2"]["role"] == "user"
    assert details["u99"]["role"] == "user"
    assert details["u99"]["creationTime"] == 1700000000000
    mock_list.assert_called_once_with(max_results=1000)
