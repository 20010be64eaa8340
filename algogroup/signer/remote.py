"""Signer that delegates to an external approval channel (a connected wallet).

The batch goes out as one JSON-RPC ``algo_signTxn`` request.  The wallet
answers with a list of base64 signed transactions positionally aligned to
the request; a falsy entry means the wallet did not sign that slot.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Protocol, Sequence

import requests

from ..envelope import attach_signature, envelope_to_dict
from ..errors import RemoteSignerError
from ..types import Envelope

_LOG = logging.getLogger(__name__)

SIGN_TXN_METHOD = "algo_signTxn"
# Only these fields may reach the remote party.
REQUEST_FIELDS = ("txn", "signers", "message")


def _payload_id() -> int:
    return int(time.time() * 1000) * 1000 + random.randint(0, 999)


def format_json_rpc_request(method: str, params: list[Any]) -> dict[str, Any]:
    return {"id": _payload_id(), "jsonrpc": "2.0", "method": method, "params": params}


class ApprovalSession(Protocol):
    """A live session with a remote wallet."""

    accounts: list[str]
    connected: bool

    def send_custom_request(self, request: dict[str, Any]) -> list[str | None]:
        ...


class RemoteApprovalSigner:
    """Sends batches to an :class:`ApprovalSession` for approval."""

    def __init__(self, session: ApprovalSession | None):
        self._session = session

    def request_signatures(self, batch: Sequence[Envelope]) -> list[str | None]:
        """Send one signing request and merge the answer with prior signatures.

        Returns:
            One entry per envelope: the wallet's base64 signed transaction,
            the envelope's existing ``stxn`` where the wallet returned a falsy
            entry, or None if neither exists.

        Raises:
            RemoteSignerError: If there is no session or the response is not a
                list of the request's length.
        """
        if self._session is None:
            raise RemoteSignerError("No approval session")

        cleaned = [
            {k: v for k, v in envelope_to_dict(e).items() if k in REQUEST_FIELDS}
            for e in batch
        ]
        request = format_json_rpc_request(SIGN_TXN_METHOD, [cleaned])
        result = self._session.send_custom_request(request)

        if not isinstance(result, list):
            raise RemoteSignerError(
                f"{SIGN_TXN_METHOD} returned {type(result).__name__}, expected a list"
            )
        if len(result) != len(batch):
            raise RemoteSignerError(
                f"{SIGN_TXN_METHOD} returned {len(result)} entries for {len(batch)} transactions"
            )

        merged: list[str | None] = []
        for envelope, signed in zip(batch, result):
            merged.append(signed if signed else envelope.stxn)
        return merged

    def sign(self, batch: Sequence[Envelope]) -> list[Envelope]:
        batch = list(batch)
        merged = self.request_signatures(batch)
        signed: list[Envelope] = []
        for index, (envelope, stxn) in enumerate(zip(batch, merged)):
            if not stxn or stxn == envelope.stxn:
                signed.append(envelope)
                continue
            signed.append(attach_signature(envelope, stxn))
            _LOG.debug("remote wallet signed slot=%d", index)
        return signed

    def wallet_address(self) -> str | None:
        session = self._session
        if session is None:
            return None
        accounts = getattr(session, "accounts", None)
        if not accounts:
            return None
        if not getattr(session, "connected", False):
            return None
        return accounts[0]


class HttpApprovalSession:
    """Approval session that posts JSON-RPC requests to a wallet bridge over HTTP."""

    def __init__(
        self,
        url: str,
        accounts: Sequence[str],
        timeout: float = 120,
        session: requests.Session | None = None,
    ):
        self.url = url.rstrip("/")
        self.accounts = list(accounts)
        self.timeout = timeout
        self._http = session or requests.Session()
        self._closed = False

    @property
    def connected(self) -> bool:
        return not self._closed and bool(self.accounts)

    def close(self) -> None:
        self._closed = True
        self._http.close()

    def __enter__(self) -> "HttpApprovalSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def send_custom_request(self, request: dict[str, Any]) -> list[str | None]:
        if self._closed:
            raise RemoteSignerError("Approval session is closed")
        try:
            resp = self._http.post(self.url, json=request, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteSignerError(f"POST {self.url} failed: {e}") from e

        if resp.status_code != 200:
            raise RemoteSignerError(
                f"Approval bridge rejected request ({resp.status_code}): {resp.text}"
            )
        try:
            body = resp.json()
        except ValueError as e:
            raise RemoteSignerError(f"Approval bridge returned invalid JSON: {e}") from e

        if not isinstance(body, dict):
            raise RemoteSignerError("Approval bridge returned a non-object response")
        if "error" in body:
            error = body["error"] or {}
            msg = error.get("message", error) if isinstance(error, dict) else error
            raise RemoteSignerError(f"Wallet declined {request.get('method')}: {msg}")
        return body.get("result")
