"""
User repository using SQLAlchemy ORM
"""

from typing import Any, Dict, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from src.core.exceptions.base import StoreError, UserNotFoundError, DuplicateWalletError
from src.core.service.user.models.user import UserRecord, UserItem
from src.infra.models import UserModel
from src.core.logger.logger import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("wallet", "email", "twitter", "items")


class UserRepository:
    """Repository for user database operations using SQLAlchemy ORM"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _model_to_entity(self, model: UserModel) -> UserRecord:
        """Convert SQLAlchemy model to Pydantic entity"""
        return UserRecord(
            id=model.id,
            wallet=model.wallet,
            email=model.email,
            twitter=model.twitter,
            items=[UserItem(**entry) for entry in (model.items or [])]
        )

    async def list_all(self) -> List[UserRecord]:
        """
        Get every stored user, in the store's native order

        Raises:
            StoreError: If the database cannot be queried
        """
        try:
            result = await self.session.execute(select(UserModel))
            return [self._model_to_entity(model) for model in result.scalars().all()]

        except Exception as e:
            logger.error("Failed to list users", extra={"error": str(e)})
            raise StoreError("Error occurred while retrieving users") from e

    async def create(self, fields: Dict[str, Any]) -> UserRecord:
        """
        Persist a new user

        Args:
            fields: wallet, email, twitter and optionally items

        Returns:
            The stored user with its assigned id

        Raises:
            DuplicateWalletError: If the wallet is already registered
            StoreError: If the write fails
        """
        wallet = fields["wallet"]
        try:
            user_model = UserModel(
                wallet=wallet,
                email=fields["email"],
                twitter=fields["twitter"],
                items=list(fields.get("items") or [])
            )

            self.session.add(user_model)
            await self.session.commit()
            await self.session.refresh(user_model)

            logger.info(
                "New user created in database",
                extra={"wallet_address": wallet, "user_id": user_model.id}
            )
            return self._model_to_entity(user_model)

        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                "Wallet already registered",
                extra={"wallet_address": wallet, "error": str(e)}
            )
            raise DuplicateWalletError(wallet) from e

        except Exception as e:
            await self.session.rollback()
            logger.error(
                "Failed to create user",
                extra={"wallet_address": wallet, "error": str(e)}
            )
            raise StoreError("Error occurred while saving user") from e

    async def get_by_id(self, user_id: str) -> UserRecord:
        """
        Get one user by id

        Raises:
            UserNotFoundError: If no user has this id
            StoreError: If the database cannot be queried
        """
        try:
            user_model = await self.session.get(UserModel, user_id)
        except Exception as e:
            logger.error("Failed to load user", extra={"user_id": user_id, "error": str(e)})
            raise StoreError("Error occurred while retrieving user") from e

        if user_model is None:
            raise UserNotFoundError(user_id)
        return self._model_to_entity(user_model)

    async def update_by_id(self, user_id: str, fields: Dict[str, Any]) -> UserRecord:
        """
        Merge the given fields into an existing user

        Args:
            user_id: Identifier assigned at creation
            fields: Subset of wallet, email, twitter, items; other keys are ignored

        Returns:
            The updated user

        Raises:
            UserNotFoundError: If no user has this id. Nothing is created.
            DuplicateWalletError: If the new wallet belongs to another user
            StoreError: If the database cannot be reached
        """
        try:
            user_model = await self.session.get(UserModel, user_id)
        except Exception as e:
            logger.error(
                "Failed to load user for update",
                extra={"user_id": user_id, "error": str(e)}
            )
            raise StoreError("Error occurred while updating user") from e

        if user_model is None:
            raise UserNotFoundError(user_id)

        try:
            for name in UPDATABLE_FIELDS:
                if name in fields:
                    value = fields[name]
                    setattr(user_model, name, list(value) if name == "items" else value)

            await self.session.commit()
            await self.session.refresh(user_model)

            logger.info(
                "User updated in database",
                extra={"user_id": user_id, "fields": sorted(k for k in fields if k in UPDATABLE_FIELDS)}
            )
            return self._model_to_entity(user_model)

        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                "Wallet already registered",
                extra={"user_id": user_id, "wallet_address": fields.get("wallet"), "error": str(e)}
            )
            raise DuplicateWalletError(fields.get("wallet", "")) from e

        except Exception as e:
            await self.session.rollback()
            logger.error(
                "Failed to update user",
                extra={"user_id": user_id, "error": str(e)}
            )
            raise StoreError("Error occurred while updating user") from e
