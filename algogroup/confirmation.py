"""Confirmation waiter: bounded polling of a node until a transaction lands.

WAITING -> CONFIRMED on a positive confirmed round.  The wait ends in
TIMEOUT when the round or wall-clock bound is exceeded, REJECTED when the
node drops the transaction from its pool, and CANCELLED when the caller sets
the cancellation event.  Both node calls in the loop are preceded by a
bound and cancellation check.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Any, Callable

from .errors import ConfirmationCancelled, ConfirmationTimeout, TransactionRejectedError
from .node import LedgerNode

_LOG = logging.getLogger(__name__)

DEFAULT_WAIT_ROUNDS = 10


class ConfirmationState(enum.Enum):
    WAITING = "waiting"
    CONFIRMED = "confirmed"
    TIMEOUT = "timeout"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class ConfirmationWaiter:
    """Polls pending-transaction info for one txid.

    Args:
        node: Ledger node handle.
        txid: Transaction id returned by the broadcast.
        max_rounds: Rounds to wait past the round observed at start.
        timeout: Optional wall-clock bound in seconds.
        cancel: Optional event; once set the wait stops at the next
            suspension point.
    """

    def __init__(
        self,
        node: LedgerNode,
        txid: str,
        max_rounds: int | None = None,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_rounds is not None and max_rounds < 0:
            raise ValueError("max_rounds must be >= 0")
        self.node = node
        self.txid = txid
        self.max_rounds = DEFAULT_WAIT_ROUNDS if max_rounds is None else max_rounds
        self.timeout = timeout
        self.cancel = cancel
        self._clock = clock
        self.state = ConfirmationState.WAITING
        self.polls = 0
        self.rounds_waited = 0

    def wait(self) -> dict[str, Any]:
        """Block until confirmed and return the pending-info record.

        Raises:
            ConfirmationTimeout: Round or time bound exceeded.
            TransactionRejectedError: Node reported a pool error.
            ConfirmationCancelled: Cancellation event was set.
        """
        deadline = None if self.timeout is None else self._clock() + self.timeout
        start_round = current_round = int(self.node.status()["last-round"])

        while True:
            self._check_cancel()
            info = self.node.pending_transaction_info(self.txid)
            self.polls += 1

            confirmed_round = info.get("confirmed-round") or 0
            if confirmed_round > 0:
                self.state = ConfirmationState.CONFIRMED
                _LOG.info(
                    "confirmed txid=%s round=%s polls=%d",
                    self.txid,
                    confirmed_round,
                    self.polls,
                )
                return info

            pool_error = info.get("pool-error")
            if pool_error:
                self.state = ConfirmationState.REJECTED
                _LOG.warning("rejected txid=%s pool-error=%s", self.txid, pool_error)
                raise TransactionRejectedError(
                    f"Transaction {self.txid} rejected by node: {pool_error}"
                )

            self.rounds_waited = current_round - start_round
            if self.rounds_waited >= self.max_rounds:
                self._timeout(f"not confirmed after {self.rounds_waited} rounds")
            if deadline is not None and self._clock() >= deadline:
                self._timeout(f"not confirmed after {self.timeout}s")

            current_round += 1
            self._check_cancel()
            self.node.status_after_block(current_round)
            _LOG.debug("txid=%s pending, waited for round %d", self.txid, current_round)

    def _check_cancel(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            self.state = ConfirmationState.CANCELLED
            raise ConfirmationCancelled(f"Confirmation wait for {self.txid} cancelled")

    def _timeout(self, reason: str) -> None:
        self.state = ConfirmationState.TIMEOUT
        _LOG.warning("timeout txid=%s %s", self.txid, reason)
        raise ConfirmationTimeout(
            self.txid,
            self.rounds_waited,
            f"Transaction {self.txid} {reason}. This doesn't mean it failed; "
            "it may still be confirmed. Check pending info or retry the wait "
            "with a larger bound (ALGOGROUP_TX_ROUNDS / ALGOGROUP_TX_TIMEOUT).",
        )


def wait_for_confirmation(
    node: LedgerNode,
    txid: str,
    max_rounds: int | None = None,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> dict[str, Any]:
    """Wait for *txid* to be confirmed. See :class:`ConfirmationWaiter`."""
    return ConfirmationWaiter(node, txid, max_rounds, timeout, cancel).wait()
