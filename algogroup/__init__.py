"""algogroup: Algorand group transaction signing and submission client."""

from .client import AlgoGroupClient
from .confirmation import ConfirmationState, ConfirmationWaiter, wait_for_confirmation
from .envelope import (
    decode_signed_transaction,
    decode_transaction,
    dumps_batch,
    encode_transaction,
    envelope_from_dict,
    envelope_to_dict,
    loads_batch,
    verify_envelope,
)
from .errors import (
    AlgoGroupError,
    CanonicalizationError,
    ConfirmationCancelled,
    ConfirmationTimeout,
    IncompleteSigningError,
    MalformedEnvelopeError,
    MissingKeyError,
    NodeError,
    RemoteSignerError,
    SignatureError,
    SignerError,
    TransactionRejectedError,
    UnhandledStateTypeError,
    WalletError,
)
from .group import SlotPlan, apply_signer, apply_signers, assign_group, group_and_sign, merge_signed
from .node import AlgodNode, LedgerNode
from .signer import HttpApprovalSession, KeyPairSigner, RemoteApprovalSigner, Signer
from .state import read_typed_value
from .submission import sign_and_submit, submit, submit_many
from .types import (
    AssetHolding,
    ConfirmationRecord,
    Envelope,
    SigningState,
    StateType,
    TypedValue,
)
from .wallet import Wallet

__all__ = [
    "AlgoGroupClient",
    "AlgoGroupError",
    "AlgodNode",
    "AssetHolding",
    "CanonicalizationError",
    "ConfirmationCancelled",
    "ConfirmationRecord",
    "ConfirmationState",
    "ConfirmationTimeout",
    "ConfirmationWaiter",
    "Envelope",
    "HttpApprovalSession",
    "IncompleteSigningError",
    "KeyPairSigner",
    "LedgerNode",
    "MalformedEnvelopeError",
    "MissingKeyError",
    "NodeError",
    "RemoteApprovalSigner",
    "RemoteSignerError",
    "SignatureError",
    "Signer",
    "SignerError",
    "SigningState",
    "SlotPlan",
    "StateType",
    "TransactionRejectedError",
    "TypedValue",
    "UnhandledStateTypeError",
    "Wallet",
    "WalletError",
    "apply_signer",
    "apply_signers",
    "assign_group",
    "decode_signed_transaction",
    "decode_transaction",
    "dumps_batch",
    "encode_transaction",
    "envelope_from_dict",
    "envelope_to_dict",
    "group_and_sign",
    "loads_batch",
    "merge_signed",
    "read_typed_value",
    "sign_and_submit",
    "submit",
    "submit_many",
    "verify_envelope",
    "wait_for_confirmation",
]
