"""Pytest configuration and fixtures."""

import copy

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from main import app

USER_PAYLOAD = {
    "userId": 1,
    "username": "johndoe",
    "password": "s3cret-pass",
    "fullName": {"firstName": "John", "lastName": "Doe"},
    "age": 30,
    "email": "john.doe@gmail.com",
    "isActive": True,
    "hobbies": ["reading", "cycling"],
    "address": {"street": "12 Main St", "city": "Dhaka", "country": "Bangladesh"},
}


@pytest.fixture(autouse=True)
def mongo_db(monkeypatch):
    """Swap the real MongoDB handle for an in-memory one with the unique indexes applied."""
    monkeypatch.setenv("BCRYPT_SALT_ROUNDS", "4")
    db = mongomock.MongoClient()["users_test"]
    monkeypatch.setattr(database, "db", db)
    database.ensure_user_indexes()
    return db


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def user_payload() -> dict:
    return copy.deepcopy(USER_PAYLOAD)


@pytest.fixture
def make_payload():
    """Build a distinct user payload for the given id."""
    def _make(user_id: int, **overrides) -> dict:
        payload = copy.deepcopy(USER_PAYLOAD)
        payload.update(
            userId=user_id,
            username=f"user{user_id}",
            email=f"user{user_id}@gmail.com",
        )
        payload.update(overrides)
        return payload
    return _make
