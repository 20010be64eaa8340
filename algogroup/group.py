"""Group signing engine.

Assigns one group id across an ordered batch, signs the slots that have a
local key and produces a uniform envelope list that external signers can
complete and :func:`merge_signed` can fold back in.  Order is significant:
the group id is computed over the batch as given, so reordering after
grouping invalidates every signature.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Union

from algosdk import constants
from algosdk.transaction import Transaction, calculate_group_id

from .envelope import attach_signature, encode_transaction
from .errors import MissingKeyError, SignerError
from .signer.base import Signer
from .types import Envelope, SigningState
from .wallet import Wallet

_LOG = logging.getLogger(__name__)

LOCALLY_SIGNED_MESSAGE = "Signed locally by a group member"
AWAITING_SIGNATURE_MESSAGE = "Awaiting external signature"
NO_SIGNATURE_MESSAGE = "Signed by another party"


@dataclass(frozen=True)
class SlotPlan:
    """How one slot of a batch gets its signature."""

    state: SigningState
    wallet: Wallet | None = None


SlotSpec = Union[Wallet, SlotPlan, None]


def plan_slots(wallets: Sequence[SlotSpec]) -> list[SlotPlan]:
    """Resolve caller wallets into explicit per-slot plans.

    ``None`` requires external signing, a wallet with a key is signed
    locally, and a :class:`SlotPlan` is taken as given.

    Raises:
        MissingKeyError: If a wallet without a private key is supplied.
    """
    plans: list[SlotPlan] = []
    for index, spec in enumerate(wallets):
        if isinstance(spec, SlotPlan):
            if spec.state is SigningState.REQUIRES_LOCAL_SIGNING and (
                spec.wallet is None or not spec.wallet.has_key
            ):
                raise MissingKeyError(f"slot {index} requires local signing but has no key")
            plans.append(spec)
        elif spec is None:
            plans.append(SlotPlan(SigningState.REQUIRES_EXTERNAL_SIGNING))
        elif spec.has_key:
            plans.append(SlotPlan(SigningState.REQUIRES_LOCAL_SIGNING, spec))
        else:
            raise MissingKeyError(
                f"wallet {spec.addr} at slot {index} has no private key; "
                "pass None for slots signed externally"
            )
    return plans


def assign_group(transactions: Sequence[Transaction]) -> bytes:
    """Compute one group id over *transactions* in order and embed it in each.

    Returns:
        The 32-byte group id.
    """
    if not transactions:
        raise ValueError("cannot group an empty batch")
    if len(transactions) > constants.tx_group_limit:
        raise ValueError(
            f"group of {len(transactions)} exceeds the limit of {constants.tx_group_limit}"
        )
    for index, txn in enumerate(transactions):
        if txn.group:
            raise ValueError(f"transaction at slot {index} is already grouped")

    gid = calculate_group_id(list(transactions))
    for txn in transactions:
        txn.group = gid
    return gid


def group_and_sign(
    transactions: Sequence[Transaction], wallets: Sequence[SlotSpec]
) -> list[Envelope]:
    """Group *transactions* and sign every slot whose wallet holds a key.

    Args:
        transactions: Unsigned, ungrouped transactions in submission order.
        wallets: One entry per transaction: a keyed wallet (sign locally),
            ``None`` (leave for an external signer) or a :class:`SlotPlan`.

    Returns:
        Envelopes in input order.  Locally signed slots carry ``stxn`` and
        ``signers=()``; external slots carry neither.

    Raises:
        ValueError: On length mismatch or an invalid batch.
        MissingKeyError: If a wallet without a private key is supplied.
    """
    if len(transactions) != len(wallets):
        raise ValueError(
            f"got {len(transactions)} transactions but {len(wallets)} wallets"
        )
    plans = plan_slots(wallets)
    gid = assign_group(transactions)

    envelopes: list[Envelope] = []
    for index, (txn, plan) in enumerate(zip(transactions, plans)):
        unsigned = encode_transaction(txn)
        if plan.state is SigningState.REQUIRES_LOCAL_SIGNING:
            stxn = plan.wallet.sign_transaction(txn)
            envelopes.append(
                Envelope(
                    txn=unsigned,
                    stxn=encode_transaction(stxn),
                    signers=(),
                    message=LOCALLY_SIGNED_MESSAGE,
                )
            )
        elif plan.state is SigningState.NO_SIGNING_REQUIRED:
            envelopes.append(Envelope(txn=unsigned, signers=(), message=NO_SIGNATURE_MESSAGE))
        else:
            envelopes.append(Envelope(txn=unsigned, message=AWAITING_SIGNATURE_MESSAGE))
        _LOG.debug("slot=%d txid=%s state=%s", index, txn.get_txid(), plan.state.value)

    _LOG.info(
        "grouped %d transactions gid=%s signed=%d",
        len(envelopes),
        gid.hex(),
        sum(1 for e in envelopes if e.stxn),
    )
    return envelopes


def apply_signer(envelopes: Sequence[Envelope], signer: Signer) -> list[Envelope]:
    """Run one signer over the whole batch."""
    batch = list(envelopes)
    signed = signer.sign(batch)
    if len(signed) != len(batch):
        raise SignerError(f"signer returned {len(signed)} envelopes for {len(batch)}")
    return list(signed)


def apply_signers(
    envelopes: Sequence[Envelope], signers: Sequence[Signer | None]
) -> list[Envelope]:
    """Apply a signer per slot.

    Each distinct signer runs once, in order of first appearance, over the
    whole current batch (wallets validate the full group) and only its own
    slots are taken from its output.  ``None`` leaves a slot unchanged.
    """
    batch = list(envelopes)
    if len(signers) != len(batch):
        raise ValueError(f"got {len(batch)} envelopes but {len(signers)} signers")

    order: list[Signer] = []
    slots: dict[int, list[int]] = {}
    for index, signer in enumerate(signers):
        if signer is None:
            continue
        key = id(signer)
        if key not in slots:
            order.append(signer)
            slots[key] = []
        slots[key].append(index)

    for signer in order:
        signed = apply_signer(batch, signer)
        for index in slots[id(signer)]:
            batch[index] = signed[index]
    return batch


def merge_signed(
    envelopes: Sequence[Envelope], signed: Sequence[str | None]
) -> list[Envelope]:
    """Fold externally signed base64 transactions back into the batch by position.

    A falsy entry keeps the envelope as it was.

    Raises:
        ValueError: If the lengths differ.
        MalformedEnvelopeError: If an entry is malformed or signs a different
            transaction than its slot.
    """
    if len(signed) != len(envelopes):
        raise ValueError(f"got {len(envelopes)} envelopes but {len(signed)} signed entries")
    return [
        attach_signature(envelope, stxn) if stxn else envelope
        for envelope, stxn in zip(envelopes, signed)
    ]
