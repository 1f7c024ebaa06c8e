"""
Input DTOs for user API endpoints.

Unknown fields are accepted and dropped. The ``time`` field is the plaintext
signed by the wallet and ``message`` carries the base58 detached signature.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, validator

from src.api.utils.validators import is_valid_twitter_handle
from src.core.service.auth.utils.crypto import is_base58


def _normalize_email(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


def _check_wallet(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError('Wallet cannot be empty')
    if not is_base58(v):
        raise ValueError('Wallet must be base58 encoded')
    return v


def _check_twitter(v: str) -> str:
    v = v.strip()
    if not is_valid_twitter_handle(v):
        raise ValueError('Invalid Twitter handle')
    return v


class ItemDto(BaseModel):
    """One owned item reference."""

    item: str = Field(..., description="Item reference")

    class Config:
        extra = "ignore"


class CreateUserRequestDto(BaseModel):
    """DTO for user registration."""

    email: EmailStr = Field(..., description="Contact email, stored lowercase")
    wallet: str = Field(..., description="Base58-encoded Ed25519 public key")
    twitter: str = Field(..., description="Twitter handle, with or without @")
    message: str = Field(..., description="Base58-encoded signature of `time`")
    time: str = Field(..., description="Plaintext signed by the wallet")

    class Config:
        extra = "ignore"

    @validator('email', pre=True)
    def normalize_email(cls, v):
        return _normalize_email(v)

    @validator('wallet')
    def validate_wallet(cls, v):
        return _check_wallet(v)

    @validator('twitter')
    def validate_twitter(cls, v):
        return _check_twitter(v)

    def to_record_fields(self) -> Dict[str, Any]:
        return {"wallet": self.wallet, "email": str(self.email), "twitter": self.twitter, "items": []}


class UpdateUserRequestDto(BaseModel):
    """DTO for user update. Fields other than time and message replace stored values."""

    time: str = Field(..., description="Plaintext signed by the wallet")
    wallet: str = Field(..., description="Base58-encoded Ed25519 public key")
    items: List[ItemDto] = Field(..., description="Full replacement list of owned items")
    message: str = Field(..., description="Base58-encoded signature of `time`")
    email: Optional[EmailStr] = None
    twitter: Optional[str] = None

    class Config:
        extra = "ignore"

    @validator('email', pre=True)
    def normalize_email(cls, v):
        return _normalize_email(v)

    @validator('wallet')
    def validate_wallet(cls, v):
        return _check_wallet(v)

    @validator('twitter')
    def validate_twitter(cls, v):
        if v is None:
            return v
        return _check_twitter(v)

    def to_record_fields(self) -> Dict[str, Any]:
        fields = self.model_dump(exclude={"time", "message"}, exclude_none=True)
        if "email" in fields:
            fields["email"] = str(fields["email"])
        return fields
