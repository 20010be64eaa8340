"""Signer backed by a locally held private key."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from ..envelope import decode_transaction, encode_transaction
from ..errors import MissingKeyError
from ..types import Envelope
from ..wallet import Wallet

_LOG = logging.getLogger(__name__)


class KeyPairSigner:
    """Signs every unsigned envelope in a batch with one wallet's key."""

    def __init__(self, wallet: Wallet):
        if not wallet.has_key:
            raise MissingKeyError(
                f"KeyPairSigner requires a wallet with a private key ({wallet.addr})"
            )
        self._wallet = wallet

    def sign(self, batch: Sequence[Envelope]) -> list[Envelope]:
        signed: list[Envelope] = []
        for index, envelope in enumerate(batch):
            if envelope.stxn:
                signed.append(envelope)
                continue
            txn = decode_transaction(envelope.txn)
            stxn = self._wallet.sign_transaction(txn)
            _LOG.debug("signed slot=%d txid=%s as %s", index, txn.get_txid(), self._wallet.addr)
            signed.append(replace(envelope, stxn=encode_transaction(stxn), signers=()))
        return signed

    def wallet_address(self) -> str | None:
        return self._wallet.addr
