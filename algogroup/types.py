"""Envelope, confirmation and state value types."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict


class EnvelopeDict(TypedDict):
    """JSON transport form of an :class:`Envelope`."""

    txn: str
    message: str
    stxn: NotRequired[str]
    signers: NotRequired[list[str]]


class SigningState(enum.Enum):
    NO_SIGNING_REQUIRED = "no_signing_required"
    REQUIRES_EXTERNAL_SIGNING = "requires_external_signing"
    REQUIRES_LOCAL_SIGNING = "requires_local_signing"


@dataclass(frozen=True)
class Envelope:
    """One transaction travelling through the signing pipeline.

    ``txn`` is the base64 msgpack of the unsigned transaction and is always
    present.  ``stxn`` is set once a signer completed it.  ``signers`` lists
    the addresses still required to sign: an empty tuple means nothing further
    is required, ``None`` means the requirement has not been determined yet.
    Any sequence passed as ``signers`` is stored as a tuple, so envelopes are
    hashable.
    """

    txn: str
    message: str = ""
    stxn: str | None = None
    signers: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.signers is not None and not isinstance(self.signers, tuple):
            object.__setattr__(self, "signers", tuple(self.signers))

    @property
    def is_signed(self) -> bool:
        return bool(self.stxn)

    @property
    def state(self) -> SigningState:
        """Signing state observable from the envelope alone.

        Only two outcomes are possible here: NO_SIGNING_REQUIRED or
        REQUIRES_EXTERNAL_SIGNING.  REQUIRES_LOCAL_SIGNING depends on which
        keys the caller holds and is decided per slot by
        :func:`algogroup.group.plan_slots`.
        """
        if self.stxn or self.signers == ():
            return SigningState.NO_SIGNING_REQUIRED
        return SigningState.REQUIRES_EXTERNAL_SIGNING


@dataclass(frozen=True)
class ConfirmationRecord:
    """Network-observed outcome of a submitted group."""

    txid: str
    confirmed_round: int
    application_index: int | None = None
    asset_index: int | None = None
    pending_info: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_pending_info(cls, txid: str, info: dict[str, Any]) -> "ConfirmationRecord":
        app_index = info.get("application-index")
        asset_index = info.get("asset-index")
        return cls(
            txid=txid,
            confirmed_round=int(info["confirmed-round"]),
            application_index=int(app_index) if app_index else None,
            asset_index=int(asset_index) if asset_index else None,
            pending_info=dict(info),
        )


class StateType(enum.IntEnum):
    BYTES = 1
    UINT = 2


@dataclass(frozen=True)
class TypedValue:
    type: StateType
    value: bytes | int


@dataclass(frozen=True)
class AssetHolding:
    asset_index: int
    amount: int
