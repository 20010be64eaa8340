"""Ledger node adapter: algod v2 through ``algosdk``'s ``AlgodClient``.

Only the calls the signing and submission pipeline needs are wrapped; every
SDK error surfaces as :class:`~algogroup.errors.NodeError`.

Environment variables (all overridable via constructor args):
    ALGOGROUP_NETWORK       – mainnet | testnet, selects the default URL (default mainnet)
    ALGOGROUP_ALGOD_URL     – algod base URL
    ALGOGROUP_ALGOD_TOKEN   – API token
    PURESTAKE_KEY           – legacy alias for ALGOGROUP_ALGOD_TOKEN
    ALGOGROUP_TOKEN_HEADER  – extra header carrying the token (default X-API-Key)
    ALGOGROUP_HTTP_TIMEOUT  – per-request timeout in seconds (default 30)
    ALGOGROUP_TX_ROUNDS     – rounds to wait for confirmation (default 10)
    ALGOGROUP_TX_TIMEOUT    – seconds to wait for confirmation (default 60)
"""

from __future__ import annotations

import base64
import os
from typing import Any, Callable, Protocol, Sequence

from algosdk.error import AlgodHTTPError, AlgodResponseError
from algosdk.transaction import SuggestedParams
from algosdk.v2client.algod import AlgodClient

from .errors import NodeError

MAINNET_URL = "https://mainnet-algorand.api.purestake.io/ps2"
TESTNET_URL = "https://testnet-algorand.api.purestake.io/ps2"
_DEFAULT_URLS = {"mainnet": MAINNET_URL, "testnet": TESTNET_URL}


class LedgerNode(Protocol):
    """The node RPC surface consumed by this package."""

    def compile(self, source: str | bytes) -> bytes: ...

    def status(self) -> dict[str, Any]: ...

    def status_after_block(self, round_num: int) -> dict[str, Any]: ...

    def pending_transaction_info(self, txid: str) -> dict[str, Any]: ...

    def send_raw_transactions(self, signed: Sequence[bytes]) -> str: ...

    def account_info(self, address: str) -> dict[str, Any]: ...

    def application_info(self, app_id: int) -> dict[str, Any]: ...

    def suggested_params(self) -> SuggestedParams: ...


def _env_number(name: str, default: str, cast: Callable[[str], Any]) -> Any:
    return cast(os.environ.get(name) or default)


class AlgodNode:
    """Configured wrapper around an :class:`AlgodClient`."""

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        network: str | None = None,
        token_header: str | None = None,
        http_timeout: float | None = None,
        wait_rounds: int | None = None,
        timeout: float | None = None,
        client: AlgodClient | None = None,
    ):
        self.network = network or os.environ.get("ALGOGROUP_NETWORK", "mainnet")
        if self.network not in _DEFAULT_URLS:
            raise ValueError(f"Unknown network: {self.network}")
        self.url = (
            url or os.environ.get("ALGOGROUP_ALGOD_URL") or _DEFAULT_URLS[self.network]
        ).rstrip("/")
        if token is None:
            # Support both ALGOGROUP_ALGOD_TOKEN (preferred) and PURESTAKE_KEY (legacy)
            token = os.environ.get("ALGOGROUP_ALGOD_TOKEN") or os.environ.get(
                "PURESTAKE_KEY", ""
            )
        self.token_header = token_header or os.environ.get(
            "ALGOGROUP_TOKEN_HEADER", "X-API-Key"
        )
        if http_timeout is None:
            http_timeout = _env_number("ALGOGROUP_HTTP_TIMEOUT", "30", float)
        if wait_rounds is None:
            wait_rounds = _env_number("ALGOGROUP_TX_ROUNDS", "10", int)
        if timeout is None:
            timeout = _env_number("ALGOGROUP_TX_TIMEOUT", "60", float)
        self.http_timeout = http_timeout
        self.wait_rounds = wait_rounds
        self.timeout = timeout

        if client is None:
            headers = {self.token_header: token} if token else None
            client = AlgodClient(token, self.url, headers=headers)
        self.client = client

    @classmethod
    def from_env(cls) -> "AlgodNode":
        """Build node adapter from environment variables."""
        return cls()

    # -- public API ---------------------------------------------------------

    def compile(self, source: str | bytes) -> bytes:
        """Compile TEAL source, returning the program bytes."""
        if isinstance(source, bytes):
            source = source.decode("utf-8")
        data = self._call("compile", self.client.compile, source)
        return base64.b64decode(data["result"])

    def status(self) -> dict[str, Any]:
        return self._call("status", self.client.status)

    def status_after_block(self, round_num: int) -> dict[str, Any]:
        """Block until the node has passed *round_num*."""
        return self._call("status_after_block", self.client.status_after_block, int(round_num))

    def pending_transaction_info(self, txid: str) -> dict[str, Any]:
        return self._call(
            "pending_transaction_info", self.client.pending_transaction_info, txid
        )

    def send_raw_transactions(self, signed: Sequence[bytes]) -> str:
        """Broadcast concatenated signed transactions as one group. Returns the txid."""
        payload = base64.b64encode(b"".join(signed))
        try:
            return self._call("send_raw_transaction", self.client.send_raw_transaction, payload)
        except KeyError as e:
            raise NodeError("node accepted transactions but returned no txId") from e

    def account_info(self, address: str) -> dict[str, Any]:
        return self._call("account_info", self.client.account_info, address)

    def application_info(self, app_id: int) -> dict[str, Any]:
        return self._call("application_info", self.client.application_info, int(app_id))

    def suggested_params(self) -> SuggestedParams:
        return self._call("suggested_params", self.client.suggested_params)

    # -- internal helpers --

    def _call(self, name: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args, timeout=self.http_timeout)
        except AlgodHTTPError as e:
            raise NodeError(
                f"Node rejected {name} ({e.code}): {e}", status_code=e.code
            ) from e
        except AlgodResponseError as e:
            raise NodeError(f"{name} returned an unreadable response: {e}") from e
        except OSError as e:
            raise NodeError(f"{name} against {self.url} failed: {e}") from e
