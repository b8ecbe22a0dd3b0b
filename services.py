"""
User service

Business operations behind the /api/users routes. Every user-scoped
operation resolves the id from the URL, checks that the user exists and
only then reads or mutates the record. Storage calls that mutate are
themselves conditional on the id, so a user deleted between the check and
the write is still reported as missing.
"""

import logging
import os
from typing import List, Optional, Union

import bcrypt
from pymongo.errors import DuplicateKeyError

import database
from schemas import INT64_MAX, Order, User

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User does not exist!"


class ServiceError(Exception):
    # Status a stricter transport could use; handlers currently answer 400 for everything.
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404

    def __init__(self, message: str = USER_NOT_FOUND):
        super().__init__(message)


class ConflictError(ServiceError):
    status_code = 409


def coerce_user_id(user_id: Union[str, int]) -> Optional[int]:
    """Turn a path segment into a numeric user id, or None when it is not a storable whole number."""
    try:
        number = int(user_id)
    except (TypeError, ValueError):
        try:
            value = float(user_id)
        except (TypeError, ValueError):
            return None
        if not value.is_integer():
            return None
        number = int(value)
    if not -INT64_MAX - 1 <= number <= INT64_MAX:
        return None
    return number


def hash_password(password: str) -> str:
    rounds = int(os.getenv("BCRYPT_SALT_ROUNDS", "12"))
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def _require_user(user_id: Union[str, int]) -> int:
    number = coerce_user_id(user_id)
    if number is None or database.find_user(number) is None:
        raise NotFoundError()
    return number


def _conflict(exc: DuplicateKeyError) -> ConflictError:
    key = exc.details.get("keyValue") if exc.details else None
    if key:
        field = next(iter(key))
        message = f"{field} '{key[field]}' is already taken"
    else:
        message = "userId, username and email must be unique"
    logger.warning("Uniqueness violation: %s", message)
    return ConflictError(message)


def create_user(user: User) -> Optional[dict]:
    document = user.to_document()
    document["password"] = hash_password(user.password)
    try:
        created = database.insert_user(document)
    except DuplicateKeyError as e:
        raise _conflict(e) from e
    logger.info("Created user %s", user.user_id)
    return created


def get_all_users() -> List[dict]:
    return database.list_users()


def get_user_by_id(user_id: Union[str, int]) -> Optional[dict]:
    number = _require_user(user_id)
    return database.get_user(number)


def update_user(user_id: Union[str, int], user: User) -> dict:
    number = _require_user(user_id)
    fields = user.to_document()
    fields["password"] = hash_password(user.password)
    try:
        updated = database.update_user_document(number, fields)
    except DuplicateKeyError as e:
        raise _conflict(e) from e
    if updated is None:
        raise NotFoundError()
    logger.info("Updated user %s", number)
    return updated


def delete_user(user_id: Union[str, int]) -> dict:
    number = _require_user(user_id)
    deleted = database.delete_user_document(number)
    if deleted is None:
        raise NotFoundError()
    logger.info("Deleted user %s", number)
    return deleted


def add_order(user_id: Union[str, int], order: Order) -> dict:
    number = _require_user(user_id)
    updated = database.push_order(number, order.model_dump(by_alias=True))
    if updated is None:
        raise NotFoundError()
    logger.info("Appended order for user %s", number)
    return updated


def get_orders(user_id: Union[str, int]) -> Optional[List[dict]]:
    """Orders of a user; None when the user has none (absent and empty look the same)."""
    number = _require_user(user_id)
    user = database.get_user(number, include_orders=True)
    return (user or {}).get("orders") or None


def calculate_total_price(user_id: Union[str, int]) -> float:
    number = _require_user(user_id)
    user = database.get_user(number, include_orders=True) or {}
    orders = user.get("orders") or []
    return sum(order["price"] * order["quantity"] for order in orders)
