"""
Cryptographic utilities for wallet ownership proofs.
Wallet keys and signatures travel base58 encoded; signing is Ed25519.
"""

from typing import Tuple

import base58
from nacl.signing import SigningKey

from src.core.logger.logger import get_logger

logger = get_logger(__name__)


def decode_base58(value: str) -> bytes:
    """
    Decode a base58 string

    Raises:
        ValueError: If the value is empty or contains characters outside the alphabet
    """
    if not value:
        raise ValueError("Empty base58 value")
    return base58.b58decode(value)


def is_base58(value: str) -> bool:
    try:
        decode_base58(value)
        return True
    except ValueError:
        return False


def generate_ed25519_keypair() -> Tuple[str, str]:
    """
    Generate a new ed25519 key pair

    Returns:
        Tuple[str, str]: (signing_seed_base58, public_key_base58)
    """
    signing_key = SigningKey.generate()
    seed_b58 = base58.b58encode(bytes(signing_key)).decode('utf-8')
    public_key_b58 = base58.b58encode(bytes(signing_key.verify_key)).decode('utf-8')
    return seed_b58, public_key_b58


def sign_message_ed25519(message: str, signing_seed_b58: str) -> str:
    """
    Sign a message with an ed25519 key

    Args:
        message: Message to sign
        signing_seed_b58: Base58-encoded 32 byte seed

    Returns:
        str: Base58-encoded detached signature
    """
    try:
        signing_key = SigningKey(decode_base58(signing_seed_b58))
        signed = signing_key.sign(message.encode('utf-8'))
        return base58.b58encode(signed.signature).decode('utf-8')

    except Exception as e:
        logger.error(f"Failed to sign message: {str(e)}")
        raise
