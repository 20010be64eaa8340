"""The signer capability shared by local-key and remote-approval signers."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ..types import Envelope


@runtime_checkable
class Signer(Protocol):
    """Completes signatures for transactions addressed from one party."""

    def sign(self, batch: Sequence[Envelope]) -> list[Envelope]:
        """Return *batch* in the same order, each envelope signed or unchanged."""
        ...

    def wallet_address(self) -> str | None:
        """Address this signer acts for, or None if unknown/not connected."""
        ...
