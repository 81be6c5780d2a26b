"""
Unit tests for WalletSigner.

Tests key parsing and signing of aggregator-built versioned transactions.
"""

import base64

import orjson
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from roundtrip.execution.signer import SignerError, WalletSigner


def unsigned_transaction(payer: Keypair) -> tuple[str, MessageV0]:
    """Build a base64 transaction with a placeholder signature, as the swap API does."""
    instruction = transfer(
        TransferParams(from_pubkey=payer.pubkey(), to_pubkey=Pubkey.new_unique(), lamports=1_000)
    )
    message = MessageV0.try_compile(payer.pubkey(), [instruction], [], Hash.default())
    unsigned = VersionedTransaction.populate(message, [Signature.default()])
    return base64.b64encode(bytes(unsigned)).decode("ascii"), message


class TestWalletSignerKeys:
    """Tests for secret key parsing."""

    def test_from_json_array(self) -> None:
        """Test a solana-keygen style byte array."""
        keypair = Keypair()
        secret = orjson.dumps(list(bytes(keypair))).decode()

        signer = WalletSigner.from_secret(secret)

        assert signer.public_key == str(keypair.pubkey())

    def test_from_base58(self) -> None:
        """Test a base58 encoded secret."""
        keypair = Keypair()

        signer = WalletSigner.from_secret(str(keypair))

        assert signer.public_key == str(keypair.pubkey())

    def test_surrounding_whitespace_ignored(self) -> None:
        """Test that a secret read from a file with a trailing newline parses."""
        keypair = Keypair()

        signer = WalletSigner.from_secret(f"  {keypair}\n")

        assert signer.public_key == str(keypair.pubkey())

    def test_empty_secret_rejected(self) -> None:
        """Test that a blank secret is an error."""
        with pytest.raises(SignerError):
            WalletSigner.from_secret("   ")

    def test_malformed_json_rejected(self) -> None:
        """Test that a broken byte array is an error."""
        with pytest.raises(SignerError):
            WalletSigner.from_secret("[1, 2, 3")

    def test_short_json_array_rejected(self) -> None:
        """Test that a byte array of the wrong length is an error."""
        with pytest.raises(SignerError):
            WalletSigner.from_secret("[1, 2, 3]")

    def test_garbage_rejected(self) -> None:
        """Test that an unrecognized format is an error."""
        with pytest.raises(SignerError):
            WalletSigner.from_secret("not-a-key")


class TestWalletSignerSigning:
    """Tests for transaction signing."""

    @pytest.fixture
    def keypair(self) -> Keypair:
        """Create a wallet keypair."""
        return Keypair()

    @pytest.fixture
    def signer(self, keypair: Keypair) -> WalletSigner:
        """Create a signer for the wallet."""
        return WalletSigner(keypair)

    def test_sign_serialized(self, signer: WalletSigner, keypair: Keypair) -> None:
        """Test that the placeholder signature is replaced by the wallet's."""
        encoded, message = unsigned_transaction(keypair)

        signed_b64, signature = signer.sign_serialized(encoded)

        signed = VersionedTransaction.from_bytes(base64.b64decode(signed_b64))
        expected = keypair.sign_message(to_bytes_versioned(message))
        assert signature == str(expected)
        assert signed.signatures[0] == expected
        assert signed.signatures[0] != Signature.default()

    def test_message_unchanged(self, signer: WalletSigner, keypair: Keypair) -> None:
        """Test that signing does not alter the transaction message."""
        encoded, message = unsigned_transaction(keypair)

        signed_b64, _ = signer.sign_serialized(encoded)

        signed = VersionedTransaction.from_bytes(base64.b64decode(signed_b64))
        assert bytes(signed.message) == bytes(message)

    def test_sign_invalid_bytes(self, signer: WalletSigner) -> None:
        """Test that bytes that are not a transaction are rejected."""
        encoded = base64.b64encode(b"definitely not a transaction").decode("ascii")

        with pytest.raises(SignerError):
            signer.sign_serialized(encoded)
