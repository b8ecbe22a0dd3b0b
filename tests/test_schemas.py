"""Tests for payload validation."""

import pytest

from schemas import Order, ValidationError, validate_order, validate_user


@pytest.mark.unit
def test_valid_payload(user_payload: dict) -> None:
    user = validate_user(user_payload)

    assert user.user_id == 1
    assert user.full_name.first_name == "John"
    assert user.is_active is True
    assert user.orders is None


@pytest.mark.unit
def test_scalar_hobby_is_coerced_to_list(user_payload: dict) -> None:
    user_payload["hobbies"] = "reading"

    assert validate_user(user_payload).hobbies == ["reading"]


@pytest.mark.unit
def test_is_active_defaults_to_true(user_payload: dict) -> None:
    del user_payload["isActive"]

    assert validate_user(user_payload).is_active is True


@pytest.mark.unit
@pytest.mark.parametrize(
    "field",
    ["userId", "username", "password", "fullName", "age", "email", "hobbies", "address"],
)
def test_missing_required_field(user_payload: dict, field: str) -> None:
    del user_payload[field]

    with pytest.raises(ValidationError) as exc_info:
        validate_user(user_payload)

    message = str(exc_info.value)
    assert message.startswith("Validation failed: ")
    assert field in message


@pytest.mark.unit
@pytest.mark.parametrize(
    "path, value",
    [
        (("userId",), 0),
        (("userId",), "7"),
        (("age",), 0),
        (("username",), ""),
        (("email",), "not-an-email"),
        (("isActive",), "yes"),
        (("hobbies",), []),
        (("hobbies",), ["reading", ""]),
        (("fullName", "lastName"), ""),
        (("address", "city"), ""),
        (("userId",), 2**63),
        (("age",), 2**63),
        (("orders",), [{"productName": "Pen", "price": "10", "quantity": 1}]),
        (("orders",), [{"productName": "Pen", "price": float("inf"), "quantity": 1}]),
    ],
)
def test_constraint_violations(user_payload: dict, path: tuple, value) -> None:
    target = user_payload
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value

    with pytest.raises(ValidationError):
        validate_user(user_payload)


@pytest.mark.unit
def test_embedded_orders_are_validated(user_payload: dict) -> None:
    user_payload["orders"] = [{"productName": "Pen", "price": 1.5, "quantity": 0}]

    with pytest.raises(ValidationError) as exc_info:
        validate_user(user_payload)

    assert "orders.0.quantity" in str(exc_info.value)


@pytest.mark.unit
def test_to_document_uses_camel_case(user_payload: dict) -> None:
    document = validate_user(user_payload).to_document()

    assert document["userId"] == 1
    assert document["fullName"] == {"firstName": "John", "lastName": "Doe"}
    assert "orders" not in document


@pytest.mark.unit
def test_validate_order() -> None:
    order = validate_order({"productName": "Notebook", "price": 0, "quantity": 3})

    assert order == Order(product_name="Notebook", price=0, quantity=3)


@pytest.mark.unit
def test_order_price_accepts_integers() -> None:
    assert validate_order({"productName": "Pen", "price": 10, "quantity": 1}).price == 10.0


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        {"productName": "", "price": 1, "quantity": 1},
        {"productName": "Pen", "price": -1, "quantity": 1},
        {"productName": "Pen", "price": 1, "quantity": 0},
        {"productName": "Pen", "price": "10", "quantity": 1},
        {"productName": "Pen", "price": True, "quantity": 1},
        {"productName": "Pen", "price": float("inf"), "quantity": 1},
        {"productName": "Pen", "price": float("nan"), "quantity": 1},
        {"productName": "Pen", "price": 1, "quantity": 2**63},
        {"price": 1, "quantity": 1},
        ["not", "an", "object"],
    ],
)
def test_invalid_order(payload) -> None:
    with pytest.raises(ValidationError):
        validate_order(payload)
