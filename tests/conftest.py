"""Pytest configuration and fixtures."""

import json
import os
import sys
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from dotenv import load_dotenv

# Load environment variables from .env.local first, then .env
if os.path.exists('.env.local'):
    load_dotenv('.env.local')
else:
    load_dotenv('.env')

# Add root to path for the storefront package and main.py
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Unit tests run in development mode with dummy provider keys
os.environ["GCLOUD_PROJECT"] = "test-project"
os.environ["ENV"] = "development"
os.environ["STORAGE_BUCKET"] = "test-bucket"
# Storage triggers read the default bucket from FIREBASE_CONFIG when they are declared
os.environ["FIREBASE_CONFIG"] = json.dumps({"projectId": "test-project", "storageBucket": "test-bucket"})
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_dummy"
os.environ["SENDGRID_API_KEY"] = "SG.test"
os.environ["EMAIL_DEFAULT_SENDER"] = "shop@example.com"

from tests.util.fake_firestore import FakeFirestore, fake_transactional  # noqa: E402
from tests.util.fake_storage import FakeBucket  # noqa: E402


@pytest.fixture
def fake_firestore():
    return FakeFirestore()


@pytest.fixture
def fake_bucket():
    return FakeBucket()


@pytest.fixture
def db(fake_firestore, fake_bucket):
    """Db singleton backed by the in-memory Firestore and bucket."""
    from storefront.apis.Db import Db

    Db.reset_instance()
    with patch("firebase_admin.firestore.client", return_value=fake_firestore), \
            patch("firebase_admin.storage.bucket", return_value=fake_bucket):
        yield Db.get_instance()
    Db.reset_instance()


@pytest.fixture
def transactional():
    """Run ``firestore.transactional`` bodies once against the fake transaction."""
    with patch("google.cloud.firestore.transactional", fake_transactional):
        yield


@pytest.fixture(autouse=True)
def clean_module_state():
    from storefront.apis.StripeApi import StripeApi
    from storefront.services.cache_service import content_cache

    content_cache.clear()
    StripeApi._configured = False
    yield
    content_cache.clear()


@pytest.fixture
def production_env(monkeypatch):
    """Disable the development auth shortcuts."""
    monkeypatch.setenv("ENV", "production")


@pytest.fixture
def make_request():
    """Build a callable request with the given data, caller uid and role claim."""

    def _make(data=None, uid=None, role=None, headers=None):
        auth = SimpleNamespace(uid=uid, token={"role": role} if role else {}) if uid else None
        raw_request = SimpleNamespace(method="POST", headers=headers) if headers else None
        return SimpleNamespace(data=data or {}, auth=auth, raw_request=raw_request)

    return _make


@pytest.fixture
def test_user_id():
    """Get a test user ID."""
    return "test-user-123"
