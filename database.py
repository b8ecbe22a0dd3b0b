"""
MongoDB access

Holds the shared client/database handle, a couple of generic document
helpers, and the user record operations the service layer builds on.
Read-backs never include ``_id`` or ``password``; list and update
read-backs also leave out ``orders``, which are only surfaced through the
dedicated order endpoints.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

USERS = "users"

PUBLIC_PROJECTION = {"_id": 0, "password": 0}
SUMMARY_PROJECTION = {"_id": 0, "password": 0, "orders": 0}

db = None
if DATABASE_URL and DATABASE_NAME:
    client = MongoClient(DATABASE_URL)
    db = client[DATABASE_NAME]


class DatabaseUnavailableError(RuntimeError):
    def __init__(self):
        super().__init__("Database is not configured")


def get_collection(name: str) -> Collection:
    if db is None:
        raise DatabaseUnavailableError()
    return db[name]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_document(collection_name: str, data: Dict[str, Any]) -> str:
    """Insert ``data`` with created_at/updated_at stamps, returning the new _id as a string."""
    document = dict(data)
    document["created_at"] = document["updated_at"] = _now()
    result = get_collection(collection_name).insert_one(document)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[dict] = None,
                  projection: Optional[dict] = None) -> List[dict]:
    return list(get_collection(collection_name).find(filter_dict or {}, projection))


def ensure_user_indexes() -> None:
    users = get_collection(USERS)
    for field in ("userId", "username", "email"):
        users.create_index([(field, ASCENDING)], unique=True)
    logger.info("Unique indexes ensured on %s", USERS)


# User records

def find_user(user_id: int) -> Optional[dict]:
    """Existence check used to gate every user-scoped operation."""
    return get_collection(USERS).find_one({"userId": user_id}, {"_id": 1})


def insert_user(document: Dict[str, Any]) -> Optional[dict]:
    """Persist a new user and return the stored projection without password/orders."""
    create_document(USERS, document)
    return get_collection(USERS).find_one({"userId": document["userId"]}, SUMMARY_PROJECTION)


def list_users() -> List[dict]:
    return get_documents(USERS, projection=SUMMARY_PROJECTION)


def get_user(user_id: int, include_orders: bool = False) -> Optional[dict]:
    projection = PUBLIC_PROJECTION if include_orders else SUMMARY_PROJECTION
    return get_collection(USERS).find_one({"userId": user_id}, projection)


def update_user_document(user_id: int, fields: Dict[str, Any]) -> Optional[dict]:
    """Overwrite ``fields`` on the user matching ``user_id``; None if it no longer exists."""
    changes = dict(fields)
    changes["updated_at"] = _now()
    return get_collection(USERS).find_one_and_update(
        {"userId": user_id},
        {"$set": changes},
        projection=SUMMARY_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )


def push_order(user_id: int, order: Dict[str, Any]) -> Optional[dict]:
    return get_collection(USERS).find_one_and_update(
        {"userId": user_id},
        {"$push": {"orders": order}, "$set": {"updated_at": _now()}},
        projection=SUMMARY_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )


def delete_user_document(user_id: int) -> Optional[dict]:
    return get_collection(USERS).find_one_and_delete({"userId": user_id}, projection=PUBLIC_PROJECTION)
