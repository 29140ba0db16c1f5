"""Keypair and address decoding."""
import base58
import structlog
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .constants import PUBLIC_KEY_LENGTH, SECRET_KEY_LENGTH, SEED_LENGTH
from .errors import InvalidAddress, InvalidEncoding, InvalidKeyLength, KeyConstructionError

logger = structlog.get_logger()


def _derive_public_key(seed: bytes) -> bytes:
    """Derive the raw Ed25519 public key for a 32-byte seed."""
    private_key = Ed25519PrivateKey.from_private_bytes(seed)
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


class KeypairLoader:
    """
    Decodes a base-58 secret key into a signing keypair.

    The secret key is the 64-byte form used by Solana wallets: a 32-byte
    Ed25519 seed followed by the 32-byte public key derived from it.
    """

    expected_length = SECRET_KEY_LENGTH

    @classmethod
    def load(cls, secret_key_encoding: str) -> Keypair:
        """
        Load a keypair from its base-58 text form.

        Args:
            secret_key_encoding: base-58 encoded 64-byte secret key

        Returns:
            The signing keypair

        Raises:
            InvalidEncoding: text is not base-58
            InvalidKeyLength: decoded length is not 64 bytes
            KeyConstructionError: public half does not match the seed
        """
        try:
            raw = base58.b58decode(secret_key_encoding.strip())
        except ValueError as e:
            raise InvalidEncoding(f"Private key is not valid base58: {e}") from e

        if len(raw) != cls.expected_length:
            raise InvalidKeyLength(len(raw), cls.expected_length)

        seed, public_key = raw[:SEED_LENGTH], raw[SEED_LENGTH:]
        try:
            derived = _derive_public_key(seed)
        except ValueError as e:
            raise KeyConstructionError(f"Failed to create keypair: {e}") from e

        if derived != public_key:
            raise KeyConstructionError(
                "Failed to create keypair: public key does not match seed"
            )

        try:
            keypair = Keypair.from_bytes(raw)
        except ValueError as e:
            raise KeyConstructionError(f"Failed to create keypair: {e}") from e

        logger.debug("keypair_loaded", pubkey=str(keypair.pubkey()))
        return keypair


def parse_address(text: str) -> Pubkey:
    """Parse a base-58 account address, raising InvalidAddress on failure."""
    try:
        raw = base58.b58decode(text.strip())
    except ValueError as e:
        raise InvalidAddress(f"Invalid public key {text!r}: {e}") from e

    if len(raw) != PUBLIC_KEY_LENGTH:
        raise InvalidAddress(
            f"Invalid public key {text!r}: expected {PUBLIC_KEY_LENGTH} bytes, got {len(raw)}"
        )
    return Pubkey(raw)
