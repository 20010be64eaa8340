"""High-level client binding the signing pipeline to one ledger node."""

from __future__ import annotations

import threading
from typing import Sequence

from algosdk.transaction import SuggestedParams, Transaction

from . import state, submission
from .group import SlotSpec, apply_signer, apply_signers, group_and_sign, merge_signed
from .node import AlgodNode, LedgerNode
from .signer.base import Signer
from .types import AssetHolding, ConfirmationRecord, Envelope, TypedValue


class AlgoGroupClient:
    """Groups, signs, submits and inspects transactions against one node.

    The node handle is explicit; build one client per network.  Confirmation
    bounds default to the node's ``wait_rounds`` / ``timeout`` when it has them.
    """

    def __init__(self, node: LedgerNode):
        self.node = node

    @classmethod
    def from_env(cls) -> "AlgoGroupClient":
        return cls(AlgodNode.from_env())

    @property
    def _wait_rounds(self) -> int | None:
        return getattr(self.node, "wait_rounds", None)

    @property
    def _timeout(self) -> float | None:
        return getattr(self.node, "timeout", None)

    def suggested_params(self) -> SuggestedParams:
        return self.node.suggested_params()

    def compile(self, source: str | bytes) -> bytes:
        return self.node.compile(source)

    def group_and_sign(
        self, transactions: Sequence[Transaction], wallets: Sequence[SlotSpec]
    ) -> list[Envelope]:
        return group_and_sign(transactions, wallets)

    def sign(
        self, envelopes: Sequence[Envelope], signer: Signer | Sequence[Signer | None]
    ) -> list[Envelope]:
        """Complete *envelopes* with one signer, or one signer (or None) per slot."""
        if isinstance(signer, Signer):
            return apply_signer(envelopes, signer)
        return apply_signers(envelopes, signer)

    def merge_signed(
        self, envelopes: Sequence[Envelope], signed: Sequence[str | None]
    ) -> list[Envelope]:
        return merge_signed(envelopes, signed)

    def submit(
        self, envelopes: Sequence[Envelope], cancel: threading.Event | None = None
    ) -> ConfirmationRecord:
        return submission.submit(
            self.node,
            envelopes,
            max_rounds=self._wait_rounds,
            timeout=self._timeout,
            cancel=cancel,
        )

    def submit_many(
        self,
        batches: Sequence[Sequence[Envelope]],
        max_workers: int = 4,
        cancel: threading.Event | None = None,
    ) -> list[ConfirmationRecord]:
        return submission.submit_many(
            self.node,
            batches,
            max_workers=max_workers,
            max_rounds=self._wait_rounds,
            timeout=self._timeout,
            cancel=cancel,
        )

    def sign_and_submit(
        self, transactions: Sequence[Transaction], wallets: Sequence[SlotSpec]
    ) -> ConfirmationRecord:
        return self.submit(group_and_sign(transactions, wallets))

    def global_state(self, app_id: int, key: str | bytes) -> TypedValue | None:
        return state.read_global_state(self.node, app_id, key)

    def local_state(self, address: str, app_id: int, key: str | bytes) -> TypedValue | None:
        return state.read_local_state(self.node, address, app_id, key)

    def asset_holdings(self, address: str) -> list[AssetHolding]:
        return state.asset_holdings(self.node, address)
