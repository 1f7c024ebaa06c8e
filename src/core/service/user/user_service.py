"""
User registration and update with wallet ownership proofs.
"""

from typing import Any, Dict, List

from src.core.exceptions.base import SignatureError
from src.core.logger.logger import get_logger
from src.core.service.auth.signature_verification import verify_signature
from src.core.service.user.models.user import UserRecord
from src.infra.repository.user_repository import UserRepository

logger = get_logger(__name__)


class UserService:
    """Orchestrates signature checks and persistence for user records"""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def require_wallet_ownership(self, wallet: str, signed_text: str, signature: str) -> None:
        """
        Raise SignatureError unless ``signature`` is the wallet's signature of ``signed_text``.

        The signed text is not bound to the rest of the request body.
        """
        if not verify_signature(wallet, signed_text, signature):
            logger.warning("Wallet signature rejected", extra={"wallet_address": wallet})
            raise SignatureError(context={"wallet": wallet})

    async def list_users(self) -> List[UserRecord]:
        return await self.user_repository.list_all()

    async def register_user(self, wallet: str, time: str, signature: str, fields: Dict[str, Any]) -> UserRecord:
        self.require_wallet_ownership(wallet, time, signature)
        return await self.user_repository.create(fields)

    async def update_user(
        self,
        user_id: str,
        wallet: str,
        time: str,
        signature: str,
        fields: Dict[str, Any]
    ) -> UserRecord:
        self.require_wallet_ownership(wallet, time, signature)

        stored = await self.user_repository.get_by_id(user_id)
        if stored.wallet != wallet:
            # Only the wallet already on the record may change it
            logger.warning(
                "Update signed by a wallet that does not own the record",
                extra={"user_id": user_id, "wallet_address": wallet}
            )
            raise SignatureError(context={"wallet": wallet, "user_id": user_id})

        return await self.user_repository.update_by_id(user_id, fields)
