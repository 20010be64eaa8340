"""Ed25519 wallets: key generation, load, save, transaction signing, verify."""

from __future__ import annotations

import base64
from pathlib import Path

from algosdk import encoding, mnemonic
from algosdk.atomic_transaction_composer import AccountTransactionSigner
from algosdk.transaction import SignedTransaction, Transaction
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .errors import MissingKeyError, SignatureError, WalletError


class Wallet:
    """An address plus an optional ed25519 private key.

    A wallet without a key is a placeholder: it marks a slot that must be
    signed by someone else.
    """

    def __init__(self, addr: str, signing_key: SigningKey | None = None):
        if not encoding.is_valid_address(addr):
            raise WalletError(f"Invalid address: {addr!r}")
        if signing_key is not None:
            derived = encoding.encode_address(bytes(signing_key.verify_key))
            if derived != addr:
                raise WalletError(
                    f"Private key belongs to {derived}, not {addr}"
                )
        self.addr = addr
        self._signing_key = signing_key

    def __repr__(self) -> str:
        kind = "key" if self.has_key else "placeholder"
        return f"Wallet(addr={self.addr!r}, {kind})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Wallet):
            return NotImplemented
        return self.addr == other.addr and self.has_key == other.has_key

    def __hash__(self) -> int:
        return hash((self.addr, self.has_key))

    @classmethod
    def generate(cls) -> "Wallet":
        """Generate a new random keypair (in-memory only)."""
        return cls.from_signing_key(SigningKey.generate())

    @classmethod
    def from_signing_key(cls, signing_key: SigningKey) -> "Wallet":
        return cls(encoding.encode_address(bytes(signing_key.verify_key)), signing_key)

    @classmethod
    def placeholder(cls, addr: str) -> "Wallet":
        """A keyless wallet marking a slot that requires external signing."""
        return cls(addr)

    @classmethod
    def from_private_key(cls, private_key: str) -> "Wallet":
        """Build from an algosdk-style base64 private key (seed || public key)."""
        try:
            raw = base64.b64decode(private_key, validate=True)
        except ValueError as e:
            raise WalletError(f"Private key is not valid base64: {e}") from e
        if len(raw) != 64:
            raise WalletError(
                f"Invalid private key: expected 64 bytes, got {len(raw)}"
            )
        signing_key = SigningKey(raw[:32])
        if bytes(signing_key.verify_key) != raw[32:]:
            raise WalletError("Private key public half does not match its seed")
        return cls.from_signing_key(signing_key)

    @classmethod
    def from_mnemonic(cls, words: str) -> "Wallet":
        try:
            private_key = mnemonic.to_private_key(words)
        except Exception as e:
            raise WalletError(f"Invalid mnemonic: {e}") from e
        return cls.from_private_key(private_key)

    @classmethod
    def create(cls, path: str) -> "Wallet":
        """Generate a new keypair and save it to *path*. Creates parent dirs.

        Raises:
            WalletError: If *path* already exists (will not overwrite).
        """
        p = Path(path)
        if p.exists():
            raise WalletError(f"Wallet file already exists: {path}")
        wallet = cls.generate()
        wallet.save(path)
        return wallet

    @classmethod
    def load(cls, path: str) -> "Wallet":
        """Load an ed25519 seed from a file (raw 32 bytes)."""
        p = Path(path)
        if not p.exists():
            raise WalletError(f"Wallet file not found: {path}")
        raw = p.read_bytes()
        if len(raw) != 32:
            raise WalletError(
                f"Invalid key file: expected 32 bytes, got {len(raw)}"
            )
        return cls.from_signing_key(SigningKey(raw))

    def save(self, path: str) -> None:
        """Save the raw 32-byte seed to disk. Creates parent dirs."""
        if self._signing_key is None:
            raise MissingKeyError(f"Placeholder wallet {self.addr} has no key to save")
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(bytes(self._signing_key))

    @property
    def has_key(self) -> bool:
        return self._signing_key is not None

    @property
    def public_key_bytes(self) -> bytes:
        """Raw 32-byte ed25519 public key (decoded from the address)."""
        return encoding.decode_address(self.addr)

    @property
    def private_key(self) -> str | None:
        """algosdk-style base64 private key, or None for a placeholder."""
        if self._signing_key is None:
            return None
        raw = bytes(self._signing_key) + bytes(self._signing_key.verify_key)
        return base64.b64encode(raw).decode("ascii")

    @property
    def mnemonic(self) -> str | None:
        private_key = self.private_key
        return mnemonic.from_private_key(private_key) if private_key else None

    def sign_transaction(self, txn: Transaction) -> SignedTransaction:
        """Sign *txn* with this wallet's key.

        Raises:
            MissingKeyError: If this wallet is a placeholder.
        """
        if self._signing_key is None:
            raise MissingKeyError(f"Wallet {self.addr} has no private key")
        (signed,) = AccountTransactionSigner(self.private_key).sign_transactions([txn], [0])
        return signed

    def to_transport(self) -> str:
        """Transport form of this wallet: its address. The key never leaves."""
        return self.addr

    @staticmethod
    def verify(address: str, signature: bytes, message: bytes) -> None:
        """Verify an ed25519 signature by *address* over message bytes.

        Raises:
            SignatureError: If verification fails.
        """
        try:
            vk = VerifyKey(encoding.decode_address(address))
            vk.verify(message, signature)
        except BadSignatureError as e:
            raise SignatureError(f"Signature verification failed: {e}") from e
        except Exception as e:
            raise SignatureError(f"Verification error: {e}") from e
