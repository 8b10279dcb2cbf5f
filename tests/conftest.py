"""Pytest configuration and shared fixtures for all tests."""

import os
import tempfile

# Minimal environment before the app modules read it at import time
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ.setdefault("FLASK_ENV", "production")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="goalux-logs-"))

import pytest
from decimal import Decimal

from config import Config
from app import create_app
from extensions import db
from models import User, Role
from blueprints.payments_helpers import generate_signature

MERCHANT_KEY = "test-merchant-key"
DEFAULT_PASSWORD = "secret123"


class TestConfig(Config):
    __test__ = False

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET = "test-jwt-secret"
    PAYTM_MID = "TESTMID"
    PAYTM_MERCHANT_KEY = MERCHANT_KEY
    LOG_DIR = os.environ["LOG_DIR"]


@pytest.fixture
def app():
    """
    App with a fresh in-memory database. No app context stays pushed, so
    every test-client request gets its own context (and its own flask.g).
    """
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_ctx(app):
    """Pushed app context for tests that drive the models and helpers directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register an account; returns the response."""
    def _register(phone, referral_code="ROOT", password=DEFAULT_PASSWORD):
        return client.post("/register", json={
            "phone": phone,
            "password": password,
            "referralCode": referral_code,
        })
    return _register


@pytest.fixture
def register_chain(register):
    """Register `length` accounts, each under the previous one; returns their codes in order."""
    def _register_chain(length, first_phone=9100000000):
        codes = []
        referral_code = "ROOT"
        for i in range(length):
            response = register(str(first_phone + i), referral_code)
            assert response.status_code == 201
            referral_code = response.get_json()["personalReferCode"]
            codes.append(referral_code)
        return codes
    return _register_chain


@pytest.fixture
def auth_headers(client):
    def _auth_headers(phone, password=DEFAULT_PASSWORD):
        response = client.post("/login", json={"phone": phone, "password": password})
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.get_json()['token']}"}
    return _auth_headers


@pytest.fixture
def admin_headers(app, register, auth_headers):
    register("9999999999")
    with app.app_context():
        admin = User.query.filter_by(phone="9999999999").first()
        admin.role = Role.ADMIN.value
        db.session.commit()
    return auth_headers("9999999999")


@pytest.fixture
def fund_account(app):
    """Set wallet/paid flag directly in the store."""
    def _fund_account(phone, wallet, has_paid=True):
        with app.app_context():
            user = User.query.filter_by(phone=phone).first()
            user.wallet = Decimal(str(wallet))
            user.has_paid = has_paid
            db.session.commit()
    return _fund_account


@pytest.fixture
def wallet_of(app):
    def _wallet_of(phone):
        with app.app_context():
            user = User.query.filter_by(phone=phone).first()
            return Decimal(str(user.wallet))
    return _wallet_of


@pytest.fixture
def signed_callback():
    def _signed_callback(**fields):
        fields["CHECKSUMHASH"] = generate_signature(fields, MERCHANT_KEY)
        return fields
    return _signed_callback
