import logging
import os
from typing import Any, Dict

from fastapi import APIRouter, Body, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import database
import services
from schemas import validate_order, validate_user

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="User Management API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

router = APIRouter(prefix="/api/users", tags=["users"])


def success(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": True, "message": message, "data": data}),
    )


def failure(message: str, exc: Exception) -> JSONResponse:
    logger.warning("%s %s", message, exc)
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": message,
            "error": {"code": 400, "description": str(exc)},
        },
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return failure("Failed to process request!", Exception("Request body must be a JSON object"))


@app.get("/")
def read_root():
    return {"message": "User Management API running"}


# Users
@router.post("")
def create_user(payload: Dict[str, Any] = Body(...)):
    try:
        user = validate_user(payload)
        created = services.create_user(user)
    except Exception as e:
        return failure("Failed to create user!", e)
    return success("User created successfully!", created, status_code=201)


@router.get("")
def list_users():
    try:
        users = services.get_all_users()
    except Exception as e:
        return failure("Failed to fetch users!", e)
    return success("Users fetched successfully!", users)


@router.get("/{user_id}")
def get_user(user_id: str):
    try:
        user = services.get_user_by_id(user_id)
    except Exception as e:
        return failure("Failed to fetch user!", e)
    return success("User fetched successfully!", user)


@router.put("/{user_id}")
def update_user(user_id: str, payload: Dict[str, Any] = Body(...)):
    try:
        user = validate_user(payload)
        updated = services.update_user(user_id, user)
    except Exception as e:
        return failure("Failed to update user!", e)
    return success("User updated successfully!", updated)


@router.delete("/{user_id}")
def delete_user(user_id: str):
    try:
        services.delete_user(user_id)
    except Exception as e:
        return failure("Failed to delete user!", e)
    return success("User deleted successfully!", None)


# Orders
@router.put("/{user_id}/orders")
def add_order(user_id: str, payload: Dict[str, Any] = Body(...)):
    try:
        order = validate_order(payload)
        services.add_order(user_id, order)
    except Exception as e:
        return failure("Failed to add order!", e)
    return success("Order added successfully!", None)


@router.get("/{user_id}/orders")
def list_orders(user_id: str):
    try:
        orders = services.get_orders(user_id)
    except Exception as e:
        return failure("Failed to fetch orders!", e)
    return success("Orders fetched successfully!", {"orders": orders})


@router.get("/{user_id}/orders/total-price")
def total_price(user_id: str):
    try:
        total = services.calculate_total_price(user_id)
    except Exception as e:
        return failure("Failed to calculate total price!", e)
    return success("Total price calculated successfully!", {"totalPrice": f"{total:.2f}"})


app.include_router(router)


@app.on_event("startup")
def create_indexes():
    if database.db is None:
        logger.warning("DATABASE_URL/DATABASE_NAME not set; storage is unavailable")
        return
    database.ensure_user_indexes()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
