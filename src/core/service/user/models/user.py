"""
User record as exposed by the API
"""

from typing import List

from pydantic import BaseModel, Field


class UserItem(BaseModel):
    """Reference to an item owned by the user"""
    item: str


class UserRecord(BaseModel):
    """Registered participant whose wallet ownership was proven by signature"""
    id: str = Field(..., description="Opaque identifier assigned at creation")
    wallet: str = Field(..., description="Base58-encoded Ed25519 public key")
    email: str
    twitter: str
    items: List[UserItem] = Field(default_factory=list)
