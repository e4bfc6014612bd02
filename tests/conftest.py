import base64
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from app import create_app
from models import db
from security.errors import StoreUnavailable
from security.password import hash_password


class FakeClock:
    def __init__(self, start=datetime(2026, 10, 18, 12, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeStore:
    """In-memory credential store with the same interface as SqlAlchemyCredentialStore."""

    def __init__(self):
        self.accounts = {}
        self.fail_lookups = False
        self.fail_updates = False

    def add(self, username, password, **fields):
        account = SimpleNamespace(
            id=len(self.accounts) + 1,
            username=username,
            password_hash=hash_password(password, rounds=4),
            failed_login_attempts=0,
            locked_until=None,
            last_password_change=None,
        )
        for name, value in fields.items():
            setattr(account, name, value)
        self.accounts[username] = account
        return account

    def find_account_by_username(self, username):
        if self.fail_lookups:
            raise StoreUnavailable("lookup failed")
        return self.accounts.get(username)

    def create_account(self, username, password_hash):
        account = SimpleNamespace(
            id=len(self.accounts) + 1,
            username=username,
            password_hash=password_hash,
            failed_login_attempts=0,
            locked_until=None,
            last_password_change=None,
        )
        self.accounts[username] = account
        return account

    def update_account(self, account_id, **fields):
        if self.fail_updates:
            raise StoreUnavailable("update failed")
        account = next(a for a in self.accounts.values() if a.id == account_id)
        for name, value in fields.items():
            setattr(account, name, value)
        return account


def basic_auth(username, password):
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def fake_store():
    return FakeStore()


@pytest.fixture()
def app(clock):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "BCRYPT_ROUNDS": 4,
            "ADMIN_USER": None,
            "ADMIN_PASS": None,
        },
        clock=clock,
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def env_app(clock):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": None,
            "BCRYPT_ROUNDS": 4,
            "ADMIN_USER": "envadmin",
            "ADMIN_PASS": "EnvPass1!",
        },
        clock=clock,
    )
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def env_client(env_app):
    return env_app.test_client()


@pytest.fixture()
def admin(app):
    """Database admin `admin` / `Secret1!`."""
    store = app.extensions["admin_auth"].store
    return store.create_account("admin", hash_password("Secret1!", rounds=4))
