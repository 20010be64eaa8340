"""Submission pipeline: broadcast a fully signed group and confirm it.

Nothing is sent unless every envelope carries its signed form.  The group
is broadcast as one call; the network call itself is never retried here.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from algosdk.transaction import Transaction

from .confirmation import wait_for_confirmation
from .envelope import signed_bytes
from .errors import IncompleteSigningError
from .group import SlotSpec, group_and_sign
from .node import LedgerNode
from .types import ConfirmationRecord, Envelope

_LOG = logging.getLogger(__name__)


def submit(
    node: LedgerNode,
    envelopes: Sequence[Envelope],
    max_rounds: int | None = None,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> ConfirmationRecord:
    """Broadcast *envelopes* as one atomic group and wait for confirmation.

    Raises:
        IncompleteSigningError: If any envelope lacks ``stxn``; raised before
            any network call.
        MalformedEnvelopeError: If a signed form does not decode.
        ConfirmationTimeout: If confirmation is not observed within the bound.
    """
    batch = list(envelopes)
    if not batch:
        raise ValueError("cannot submit an empty batch")
    unsigned = [index for index, e in enumerate(batch) if not e.stxn]
    if unsigned:
        raise IncompleteSigningError(unsigned)

    raw = [signed_bytes(e) for e in batch]
    txid = node.send_raw_transactions(raw)
    _LOG.info("broadcast group size=%d txid=%s", len(raw), txid)

    wait_for_confirmation(node, txid, max_rounds=max_rounds, timeout=timeout, cancel=cancel)
    record = ConfirmationRecord.from_pending_info(txid, node.pending_transaction_info(txid))
    _LOG.info(
        "submission txid=%s round=%s app=%s",
        record.txid,
        record.confirmed_round,
        record.application_index,
    )
    return record


def submit_many(
    node: LedgerNode,
    batches: Sequence[Sequence[Envelope]],
    max_workers: int = 4,
    max_rounds: int | None = None,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> list[ConfirmationRecord]:
    """Submit independent groups concurrently. Results follow input order.

    The first failure (in input order) propagates once all submissions finish.
    """
    batches = [list(b) for b in batches]
    for batch in batches:
        unsigned = [index for index, e in enumerate(batch) if not e.stxn]
        if unsigned:
            raise IncompleteSigningError(unsigned)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(submit, node, batch, max_rounds, timeout, cancel)
            for batch in batches
        ]
    return [f.result() for f in futures]


def sign_and_submit(
    node: LedgerNode,
    transactions: Sequence[Transaction],
    wallets: Sequence[SlotSpec],
    max_rounds: int | None = None,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> ConfirmationRecord:
    """Group, sign locally and submit in one step. Every slot needs a keyed wallet."""
    envelopes = group_and_sign(transactions, wallets)
    return submit(node, envelopes, max_rounds=max_rounds, timeout=timeout, cancel=cancel)
