"""Envelope codec: transaction <-> base64 msgpack, JSON transport, verification."""

from __future__ import annotations

import base64
import json
import re
from dataclasses import replace
from typing import Any, Sequence, Union

from algosdk import constants, encoding
from algosdk.transaction import (
    LogicSigTransaction,
    MultisigTransaction,
    SignedTransaction,
    Transaction,
)

from .canonicaljson import canonicalize
from .errors import MalformedEnvelopeError
from .types import Envelope, EnvelopeDict
from .wallet import Wallet

AnySignedTransaction = Union[SignedTransaction, LogicSigTransaction, MultisigTransaction]

_SIGNED_TYPES = (SignedTransaction, LogicSigTransaction, MultisigTransaction)
_BASE64_STANDARD_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_ENVELOPE_FIELDS = frozenset({"txn", "stxn", "message", "signers"})


def _validate_base64_standard(value: Any, field_name: str) -> bytes:
    """Decode and validate standard base64 (RFC 4648 §4). Rejects URL-safe."""
    if not isinstance(value, str):
        raise MalformedEnvelopeError(f"{field_name} must be a string")
    if not value:
        raise MalformedEnvelopeError(f"{field_name} must not be empty")
    if "-" in value or "_" in value:
        raise MalformedEnvelopeError(
            f"{field_name} uses URL-safe base64; standard base64 required"
        )
    if not _BASE64_STANDARD_RE.match(value):
        raise MalformedEnvelopeError(f"{field_name} is not valid base64")
    try:
        return base64.b64decode(value, validate=True)
    except Exception as e:
        raise MalformedEnvelopeError(f"{field_name} base64 decode failed: {e}") from e


def _msgpack_decode(value: str, field_name: str) -> Any:
    _validate_base64_standard(value, field_name)
    try:
        return encoding.msgpack_decode(value)
    except Exception as e:
        raise MalformedEnvelopeError(
            f"{field_name} is not a well-formed transaction: {e}"
        ) from e


def encode_transaction(txn: Transaction | AnySignedTransaction) -> str:
    """Encode a transaction (signed or not) to its base64 msgpack form."""
    return encoding.msgpack_encode(txn)


def decode_transaction(value: str, field_name: str = "txn") -> Transaction:
    """Decode a base64 msgpack unsigned transaction.

    Raises:
        MalformedEnvelopeError: If *value* is not standard base64 or does not
            parse as an unsigned transaction.
    """
    decoded = _msgpack_decode(value, field_name)
    if not isinstance(decoded, Transaction):
        raise MalformedEnvelopeError(
            f"{field_name} decodes to {type(decoded).__name__}, "
            "expected an unsigned transaction"
        )
    return decoded


def decode_signed_transaction(value: str, field_name: str = "stxn") -> AnySignedTransaction:
    """Decode a base64 msgpack signed transaction.

    Raises:
        MalformedEnvelopeError: If *value* is not a signed transaction.
    """
    decoded = _msgpack_decode(value, field_name)
    if not isinstance(decoded, _SIGNED_TYPES):
        raise MalformedEnvelopeError(
            f"{field_name} decodes to {type(decoded).__name__}, "
            "expected a signed transaction"
        )
    return decoded


def same_transaction(a: Transaction, b: Transaction) -> bool:
    """Compare two transactions by canonical encoding."""
    return encode_transaction(a) == encode_transaction(b)


def check_wraps(txn_value: str, stxn_value: str) -> tuple[Transaction, AnySignedTransaction]:
    """Decode an unsigned/signed pair and check the signed form wraps the same transaction.

    Raises:
        MalformedEnvelopeError: If either side is malformed or they differ.
    """
    txn = decode_transaction(txn_value)
    stxn = decode_signed_transaction(stxn_value)
    if not same_transaction(stxn.transaction, txn):
        raise MalformedEnvelopeError(
            f"signed transaction {stxn.transaction.get_txid()} does not match "
            f"unsigned transaction {txn.get_txid()}"
        )
    return txn, stxn


def attach_signature(envelope: Envelope, signed: str) -> Envelope:
    """Return *envelope* completed with the base64 signed transaction *signed*.

    Raises:
        MalformedEnvelopeError: If *signed* does not wrap the envelope's
            own transaction.
    """
    check_wraps(envelope.txn, signed)
    return replace(envelope, stxn=signed, signers=())


def signed_bytes(envelope: Envelope) -> bytes:
    """Raw msgpack bytes of the envelope's signed transaction, ready to broadcast.

    Raises:
        MalformedEnvelopeError: If there is no signed form or it wraps a
            different transaction than ``txn``.
    """
    if not envelope.stxn:
        raise MalformedEnvelopeError("envelope has no signed transaction")
    check_wraps(envelope.txn, envelope.stxn)
    return base64.b64decode(envelope.stxn)


def verify_envelope(envelope: Envelope) -> None:
    """Verify envelope structure and, when signed, its ed25519 signature.

    Raises:
        MalformedEnvelopeError: On structural violations or when the signed
            form wraps a different transaction.
        SignatureError: On signature verification failure.
    """
    validate_envelope_structure(envelope_to_dict(envelope))
    if not envelope.stxn:
        return

    txn, stxn = check_wraps(envelope.txn, envelope.stxn)
    if isinstance(stxn, SignedTransaction):
        preimage = constants.txid_prefix + base64.b64decode(encode_transaction(txn))
        signer = stxn.authorizing_address or txn.sender
        Wallet.verify(signer, base64.b64decode(stxn.signature), preimage)


def validate_envelope_structure(data: Any) -> None:
    """Validate the JSON transport object of one envelope.

    Raises:
        MalformedEnvelopeError: On any structural violation.
    """
    if not isinstance(data, dict):
        raise MalformedEnvelopeError("envelope must be a JSON object")

    missing = {"txn", "message"} - set(data.keys())
    if missing:
        raise MalformedEnvelopeError(f"Missing envelope fields: {sorted(missing)}")
    unknown = set(data.keys()) - _ENVELOPE_FIELDS
    if unknown:
        raise MalformedEnvelopeError(f"Unknown envelope fields: {sorted(unknown)}")

    if not isinstance(data["message"], str):
        raise MalformedEnvelopeError("message must be a string")

    if "stxn" in data:
        check_wraps(data["txn"], data["stxn"])
    else:
        decode_transaction(data["txn"])

    if "signers" in data:
        signers = data["signers"]
        if not isinstance(signers, list):
            raise MalformedEnvelopeError("signers must be a list")
        for addr in signers:
            if not isinstance(addr, str) or not encoding.is_valid_address(addr):
                raise MalformedEnvelopeError(f"Invalid signer address: {addr!r}")


def envelope_to_dict(envelope: Envelope) -> EnvelopeDict:
    """JSON transport form. Absent ``stxn``/``signers`` are omitted, not nulled."""
    data: EnvelopeDict = {"txn": envelope.txn, "message": envelope.message}
    if envelope.stxn:
        data["stxn"] = envelope.stxn
    if envelope.signers is not None:
        data["signers"] = list(envelope.signers)
    return data


def envelope_from_dict(data: Any) -> Envelope:
    """Parse and validate one JSON transport envelope.

    Wallet-shaped signer entries (``{"addr": ...}``) are reduced to their
    address.
    """
    if isinstance(data, dict) and isinstance(data.get("signers"), list):
        data = {
            **data,
            "signers": [
                s.get("addr") if isinstance(s, dict) else s for s in data["signers"]
            ],
        }
    validate_envelope_structure(data)
    signers = data.get("signers")
    return Envelope(
        txn=data["txn"],
        message=data["message"],
        stxn=data.get("stxn"),
        signers=list(signers) if signers is not None else None,
    )


def dumps_batch(envelopes: Sequence[Envelope]) -> bytes:
    """Serialize a signing batch to canonical JSON bytes (RFC 8785)."""
    return canonicalize([envelope_to_dict(e) for e in envelopes])


def loads_batch(data: bytes | str) -> list[Envelope]:
    """Parse a signing batch produced by :func:`dumps_batch` or a remote party."""
    try:
        raw = json.loads(data)
    except ValueError as e:
        raise MalformedEnvelopeError(f"batch is not valid JSON: {e}") from e
    if not isinstance(raw, list):
        raise MalformedEnvelopeError("batch must be a JSON array")
    return [envelope_from_dict(item) for item in raw]
