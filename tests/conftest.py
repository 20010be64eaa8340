"""Shared fixtures: an in-memory ledger node and transaction builders."""

from __future__ import annotations

import pytest
from algosdk.transaction import PaymentTxn, SuggestedParams

from algogroup.wallet import Wallet

TESTNET_GENESIS_HASH = "SGO1GKSzyE7IEPItTxCByw9x8FmnrCDexi9/cOUJOiI="


class FakeNode:
    """Records calls and replays scripted pending-info responses.

    The last scripted response repeats once the script runs out.
    """

    def __init__(self, pending=None, last_round=100, txid="GROUPTXID"):
        self.last_round = last_round
        self.txid = txid
        self.pending = list(pending or [{"confirmed-round": last_round + 1, "pool-error": ""}])
        self.calls: list[tuple] = []
        self.sent: list[list[bytes]] = []
        self.accounts: dict[str, dict] = {}
        self.applications: dict[int, dict] = {}

    def status(self):
        self.calls.append(("status",))
        return {"last-round": self.last_round}

    def status_after_block(self, round_num):
        self.calls.append(("status_after_block", round_num))
        self.last_round = round_num
        return {"last-round": round_num}

    def pending_transaction_info(self, txid):
        self.calls.append(("pending_transaction_info", txid))
        if len(self.pending) > 1:
            return self.pending.pop(0)
        return self.pending[0]

    def send_raw_transactions(self, signed):
        self.calls.append(("send_raw_transactions", len(signed)))
        self.sent.append(list(signed))
        return self.txid

    def account_info(self, address):
        self.calls.append(("account_info", address))
        return self.accounts.get(address, {"address": address})

    def application_info(self, app_id):
        self.calls.append(("application_info", app_id))
        return self.applications.get(app_id, {"id": app_id, "params": {}})

    def suggested_params(self):
        return make_params()

    def compile(self, source):
        return b"\x06\x81\x01"

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


def make_params() -> SuggestedParams:
    return SuggestedParams(
        fee=1000,
        first=1000,
        last=2000,
        gh=TESTNET_GENESIS_HASH,
        gen="testnet-v1.0",
        flat_fee=True,
    )


@pytest.fixture
def params():
    return make_params()


@pytest.fixture
def alice():
    return Wallet.generate()


@pytest.fixture
def bob():
    return Wallet.generate()


@pytest.fixture
def make_payments(params):
    """Build *n* ungrouped payments, alternating sender between the given wallets."""

    def _make(senders, receiver, amount=1_000):
        return [
            PaymentTxn(sender.addr, params, receiver.addr, amount + i)
            for i, sender in enumerate(senders)
        ]

    return _make


@pytest.fixture
def fake_node():
    return FakeNode
