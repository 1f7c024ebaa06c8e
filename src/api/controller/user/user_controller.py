"""
User controller: list, register and update wallet-verified user records.
"""

from typing import Any, List

from fastapi import APIRouter, Body, Depends

from src.api.controller.user.dto.input_dto import CreateUserRequestDto, UpdateUserRequestDto
from src.api.utils.validators import validate_or_raise
from src.core.dependencies import get_user_service
from src.core.service.user.models.user import UserRecord
from src.core.service.user.user_service import UserService
from src.core.logger.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        400: {"description": "Validation error"},
        401: {"description": "Invalid signature"},
        500: {"description": "Store error"}
    }
)


@router.get("", response_model=List[UserRecord])
async def list_users(user_service: UserService = Depends(get_user_service)) -> List[UserRecord]:
    """Return every registered user."""
    return await user_service.list_users()


@router.post(
    "",
    response_model=UserRecord,
    responses={409: {"description": "Wallet already registered"}}
)
async def create_user(
    payload: Any = Body(...),
    user_service: UserService = Depends(get_user_service)
) -> UserRecord:
    """
    Register a user.

    ``time`` must be signed by the private key behind ``wallet``; the base58
    signature goes in ``message``.
    """
    request = validate_or_raise(payload, CreateUserRequestDto)

    user = await user_service.register_user(
        wallet=request.wallet,
        time=request.time,
        signature=request.message,
        fields=request.to_record_fields()
    )
    logger.info("User registered", extra={"user_id": user.id, "wallet_address": user.wallet})
    return user


@router.put(
    "/{user_id}",
    response_model=UserRecord,
    responses={
        404: {"description": "User not found"},
        409: {"description": "Wallet already registered"}
    }
)
async def update_user(
    user_id: str,
    payload: Any = Body(...),
    user_service: UserService = Depends(get_user_service)
) -> UserRecord:
    """Replace the given fields of a user after re-proving wallet ownership."""
    request = validate_or_raise(payload, UpdateUserRequestDto)

    return await user_service.update_user(
        user_id=user_id,
        wallet=request.wallet,
        time=request.time,
        signature=request.message,
        fields=request.to_record_fields()
    )
