#!/usr/bin/env python3
"""Demo: build a two-payment atomic group, sign it in two steps, submit it.

Prerequisites
─────────────
1. An algod node reachable over HTTP (algokit localnet, or a hosted API)
2. Environment variables set:
     ALGOGROUP_SENDER_MNEMONIC   – 25-word mnemonic of a funded account
     ALGOGROUP_COSIGNER_MNEMONIC – 25-word mnemonic of a second funded account

Optional env (see algogroup.node.AlgodNode):
     ALGOGROUP_ALGOD_URL    – e.g. http://localhost:4001
     ALGOGROUP_ALGOD_TOKEN  – API token
     ALGOGROUP_TOKEN_HEADER – e.g. X-Algo-API-Token for a local node

Usage:
    python scripts/demo_group_submit.py [receiver_address]
"""

from __future__ import annotations

import logging
import os
import sys

from algosdk.transaction import PaymentTxn

from algogroup import AlgoGroupClient, KeyPairSigner, Wallet, dumps_batch, loads_batch

MICROALGOS = 1_000


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    sender = Wallet.from_mnemonic(os.environ["ALGOGROUP_SENDER_MNEMONIC"])
    cosigner = Wallet.from_mnemonic(os.environ["ALGOGROUP_COSIGNER_MNEMONIC"])
    receiver = sys.argv[1] if len(sys.argv) > 1 else sender.addr

    client = AlgoGroupClient.from_env()
    print(f"algod            = {client.node.url}")
    print(f"Sender           = {sender.addr}")
    print(f"Co-signer        = {cosigner.addr}")
    print(f"Receiver         = {receiver}")
    print()

    sp = client.suggested_params()
    txns = [
        PaymentTxn(sender.addr, sp, receiver, MICROALGOS),
        PaymentTxn(cosigner.addr, sp, receiver, 2 * MICROALGOS),
    ]

    # 1) sender signs its slot, leaves the co-signer slot open
    print("--- group_and_sign ---")
    envelopes = client.group_and_sign(txns, [sender, None])
    for i, env in enumerate(envelopes):
        print(f"  [{i}] signed={env.is_signed}  message={env.message!r}")
    print()

    # 2) hand the batch over as canonical JSON
    wire = dumps_batch(envelopes)
    print(f"--- transport ({len(wire)} bytes) ---")
    print()

    # 3) co-signer completes the batch
    print("--- co-sign ---")
    completed = client.sign(loads_batch(wire), KeyPairSigner(cosigner))
    print(f"  all signed: {all(e.is_signed for e in completed)}")
    print()

    # 4) submit and wait
    print("--- submit ---")
    record = client.submit(completed)
    print(f"  txid: {record.txid}")
    print(f"  confirmed round: {record.confirmed_round}")


if __name__ == "__main__":
    main()
