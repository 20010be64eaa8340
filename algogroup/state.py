"""Decode typed key/value contract state reported by a ledger node."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Iterable

from .errors import NodeError, UnhandledStateTypeError
from .node import LedgerNode
from .types import AssetHolding, StateType, TypedValue


def _encoded_key(key: str | bytes) -> str:
    if isinstance(key, str):
        return key
    return base64.b64encode(bytes(key)).decode("ascii")


def decode_entry(entry: dict[str, Any]) -> TypedValue:
    """Decode one state entry.

    Accepts the node's ``{"key", "value": {"type", "bytes", "uint"}}`` shape
    as well as a flattened ``{"key", "type", "bytes", "uint"}``.

    Raises:
        UnhandledStateTypeError: For a type tag other than 1 (bytes) or 2 (uint).
    """
    value = entry["value"] if isinstance(entry.get("value"), dict) else entry
    tag = value.get("type")
    if tag == StateType.BYTES:
        try:
            return TypedValue(StateType.BYTES, base64.b64decode(value.get("bytes", ""), validate=True))
        except binascii.Error as e:
            raise NodeError(f"state bytes for key {entry.get('key')!r} are not base64: {e}") from e
    if tag == StateType.UINT:
        return TypedValue(StateType.UINT, int(value.get("uint", 0)))
    raise UnhandledStateTypeError(f"Unhandled state type {tag!r} for key {entry.get('key')!r}")


def read_typed_value(entries: Iterable[dict[str, Any]], match_key: str | bytes) -> TypedValue | None:
    """Find *match_key* in a state array and decode its value.

    Keys are compared in their base64 form.  A ``bytes`` key is the raw key
    and is encoded first; a ``str`` key is the base64 form as the node
    reports it (``b"counter"`` and ``"Y291bnRlcg=="`` find the same entry).
    When several entries match, the last one wins, mirroring the node's
    array ordering where stale duplicates may linger.

    Returns:
        The decoded value, or None if no entry matches.
    """
    wanted = _encoded_key(match_key)
    found = None
    for entry in entries:
        if entry.get("key") == wanted:
            found = entry
    if found is None:
        return None
    return decode_entry(found)


def decode_state(entries: Iterable[dict[str, Any]]) -> dict[bytes, TypedValue]:
    """Decode a whole state array keyed by raw key bytes (last entry wins)."""
    state: dict[bytes, TypedValue] = {}
    for entry in entries:
        state[base64.b64decode(entry["key"])] = decode_entry(entry)
    return state


def read_global_state(node: LedgerNode, app_id: int, key: str | bytes) -> TypedValue | None:
    info = node.application_info(app_id)
    entries = info.get("params", {}).get("global-state", [])
    return read_typed_value(entries, key)


def read_local_state(
    node: LedgerNode, address: str, app_id: int, key: str | bytes
) -> TypedValue | None:
    """Read *key* from *address*'s local state in *app_id*; None if not opted in."""
    info = node.account_info(address)
    for app in info.get("apps-local-state", []):
        if int(app.get("id", -1)) == int(app_id):
            return read_typed_value(app.get("key-value", []), key)
    return None


def asset_holdings(node: LedgerNode, address: str) -> list[AssetHolding]:
    info = node.account_info(address)
    return [
        AssetHolding(asset_index=int(a["asset-id"]), amount=int(a.get("amount", 0)))
        for a in info.get("assets", [])
    ]
