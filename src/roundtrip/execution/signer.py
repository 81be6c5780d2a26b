"""
Transaction signing with the configured wallet key.

The aggregator returns a fully built but unsigned versioned transaction;
signing replaces the placeholder signature with the wallet's.
"""

import base64

import orjson
from solders.keypair import Keypair
from solders.transaction import VersionedTransaction


class SignerError(Exception):
    """Invalid key material or transaction bytes."""

    pass


class WalletSigner:
    """
    Signs serialized swap transactions.

    The key is parsed once; the secret never leaves this object.
    """

    __slots__ = ("_keypair",)

    def __init__(self, keypair: Keypair) -> None:
        self._keypair = keypair

    @classmethod
    def from_secret(cls, secret: str) -> "WalletSigner":
        """
        Build a signer from a secret key string.

        Accepts a JSON byte array (as written by solana-keygen) or a
        base58 encoded 64-byte secret.

        Raises:
            SignerError: If the key cannot be parsed.
        """
        value = secret.strip()
        if not value:
            raise SignerError("Wallet secret is empty")

        if value.startswith("["):
            try:
                raw = orjson.loads(value)
                return cls(Keypair.from_bytes(bytes(raw)))
            except Exception as e:
                raise SignerError(f"Invalid JSON wallet secret: {e}") from e

        try:
            return cls(Keypair.from_base58_string(value))
        except Exception as e:
            raise SignerError("Unsupported wallet secret format") from e

    @property
    def public_key(self) -> str:
        """Wallet address in base58."""
        return str(self._keypair.pubkey())

    def sign_serialized(self, encoded_tx: str) -> tuple[str, str]:
        """
        Sign a base64 encoded versioned transaction.

        Args:
            encoded_tx: Transaction as returned by the swap endpoint.

        Returns:
            Tuple of (signed transaction in base64, signature in base58).

        Raises:
            SignerError: If the bytes are not a valid transaction.
        """
        try:
            unsigned = VersionedTransaction.from_bytes(base64.b64decode(encoded_tx))
        except Exception as e:
            raise SignerError(f"Invalid swap transaction: {e}") from e

        signed = VersionedTransaction(unsigned.message, [self._keypair])
        encoded = base64.b64encode(bytes(signed)).decode("ascii")
        return encoded, str(signed.signatures[0])
