"""
Database Schemas

Pydantic models describing the documents stored in the "users" collection.
They double as the validation layer for inbound payloads: every write path
runs the request body through ``validate_user`` or ``validate_order`` before
anything touches MongoDB.

Attributes are snake_case in Python and camelCase on the wire and in the
database (userId, fullName, isActive, productName, ...).
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool, StrictInt, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

# Largest integer BSON can encode.
INT64_MAX = 2**63 - 1


class ValidationError(Exception):
    """Raised when a payload does not match the user/order shape."""


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FullName(CamelModel):
    first_name: str = Field(..., min_length=1, description="First name")
    last_name: str = Field(..., min_length=1, description="Last name")


class Address(CamelModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class Order(CamelModel):
    """
    Embedded order sub-document
    Stored inside the owning user's "orders" array, never on its own
    """
    product_name: str = Field(..., min_length=1, description="Product name")
    price: float = Field(..., ge=0, strict=True, allow_inf_nan=False, description="Unit price")
    quantity: StrictInt = Field(..., ge=1, le=INT64_MAX, description="Number of units")


class User(CamelModel):
    """
    Users collection schema
    Collection name: "users"
    """
    user_id: StrictInt = Field(..., ge=1, le=INT64_MAX, description="Caller supplied unique id")
    username: str = Field(..., min_length=1, description="Unique username")
    password: str = Field(..., min_length=1, description="Plain password, hashed before storage")
    full_name: FullName
    age: StrictInt = Field(..., ge=1, le=INT64_MAX)
    email: EmailStr = Field(..., description="Unique email address")
    is_active: StrictBool = Field(True, description="Whether the account is active")
    hobbies: List[str] = Field(..., min_length=1)
    address: Address
    orders: Optional[List[Order]] = Field(None, description="Embedded orders")

    @field_validator("hobbies", mode="before")
    @classmethod
    def coerce_hobbies(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("hobbies")
    @classmethod
    def check_hobbies(cls, value: List[str]) -> List[str]:
        if any(not hobby for hobby in value):
            raise ValueError("Hobby is required")
        return value

    def to_document(self) -> dict:
        """Serialize to the camelCase document shape, leaving out unset orders."""
        return self.model_dump(by_alias=True, exclude_none=True)


def _format_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "body"
        parts.append(f"{location}: {error['msg']}")
    return "Validation failed: " + "; ".join(parts)


def validate_user(payload: Any) -> User:
    try:
        return User.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(_format_errors(e)) from None


def validate_order(payload: Any) -> Order:
    try:
        return Order.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(_format_errors(e)) from None
