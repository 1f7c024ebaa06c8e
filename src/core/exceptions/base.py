from typing import Any, Dict, List, Optional
from fastapi import status

from src.core.exceptions.handler import ServiceError, ServiceErrorCode


class ValidationError(ServiceError):
    """Request body failed schema or field checks."""

    def __init__(self, validation_errors: List[Dict[str, Any]]):
        messages = ", ".join(f"{e['field']}: {e['message']}" for e in validation_errors)
        super().__init__(
            code=ServiceErrorCode.INVALID_INPUT,
            message=f"Validation error: {messages}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"validation_errors": validation_errors},
        )
        self.validation_errors = validation_errors


class SignatureError(ServiceError):
    """Wallet signature did not verify. Carries no detail on purpose."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ServiceErrorCode.INVALID_SIGNATURE,
            message="Invalid signature",
            status_code=status.HTTP_401_UNAUTHORIZED,
            context=context,
        )


class StoreError(ServiceError):
    """Persistence layer unreachable or rejected the operation."""

    def __init__(
        self,
        message: str = "Error occurred while accessing users",
        code: str = ServiceErrorCode.STORE_ERROR,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code=code, message=message, status_code=status_code, context=context)


class UserNotFoundError(StoreError):
    def __init__(self, user_id: str):
        super().__init__(
            message=f"User not found: {user_id}",
            code=ServiceErrorCode.NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
            context={"user_id": user_id},
        )


class DuplicateWalletError(StoreError):
    def __init__(self, wallet: str):
        super().__init__(
            message="Wallet is already registered",
            code=ServiceErrorCode.DUPLICATE_WALLET,
            status_code=status.HTTP_409_CONFLICT,
            context={"wallet": wallet},
        )
