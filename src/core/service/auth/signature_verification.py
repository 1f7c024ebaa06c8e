from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from src.core.logger.logger import get_logger
from src.core.service.auth.utils.crypto import decode_base58

logger = get_logger(__name__)


def verify_signature(public_key_b58: str, message: str, signature_b58: str) -> bool:
    """
    Verify an Ed25519 detached signature

    Args:
        public_key_b58: Base58-encoded public key (the wallet)
        message: Exact plaintext that was signed; verified as raw UTF-8 bytes
        signature_b58: Base58-encoded detached signature

    Returns:
        bool: True only if the signature is valid for the message under the key.
        Malformed keys or signatures yield False, never an exception.
    """
    try:
        public_key_bytes = decode_base58(public_key_b58)
        signature_bytes = decode_base58(signature_b58)

        verify_key = VerifyKey(public_key_bytes)
        verify_key.verify(message.encode('utf-8'), signature_bytes)
        return True

    except BadSignatureError:
        logger.debug("Signature rejected", extra={"wallet_address": public_key_b58})
        return False
    except (ValueError, TypeError) as e:
        # nacl raises ValueError for bad key or signature lengths
        logger.debug(
            "Malformed signature input",
            extra={"wallet_address": public_key_b58, "error": str(e)}
        )
        return False
