"""Tests for the local-key and remote-approval signers."""

from unittest.mock import MagicMock

import pytest
import requests

from algogroup.envelope import decode_transaction, encode_transaction, verify_envelope
from algogroup.errors import MalformedEnvelopeError, MissingKeyError, RemoteSignerError
from algogroup.group import group_and_sign
from algogroup.signer import HttpApprovalSession, KeyPairSigner, RemoteApprovalSigner, Signer
from algogroup.signer.remote import SIGN_TXN_METHOD
from algogroup.wallet import Wallet


class FakeSession:
    def __init__(self, response, accounts=("ADDR",), connected=True):
        self.response = response
        self.accounts = list(accounts)
        self.connected = connected
        self.requests = []

    def send_custom_request(self, request):
        self.requests.append(request)
        return self.response


def _sign(wallet, envelope):
    return encode_transaction(wallet.sign_transaction(decode_transaction(envelope.txn)))


class TestKeyPairSigner:
    def test_requires_key(self, alice):
        with pytest.raises(MissingKeyError):
            KeyPairSigner(Wallet.placeholder(alice.addr))

    def test_is_a_signer(self, alice):
        assert isinstance(KeyPairSigner(alice), Signer)

    def test_signs_unsigned_passes_signed(self, alice, bob, make_payments):
        envelopes = group_and_sign(make_payments([alice, bob], bob), [bob, None])
        signed = KeyPairSigner(alice).sign(envelopes)
        assert len(signed) == 2
        assert signed[0] is envelopes[0]
        assert signed[1].stxn
        assert signed[1].signers == ()
        assert signed[1].txn == envelopes[1].txn
        verify_envelope(signed[1])

    def test_wallet_address(self, alice):
        assert KeyPairSigner(alice).wallet_address() == alice.addr


class TestRemoteApprovalSigner:
    def test_request_strips_private_fields(self, alice, bob, make_payments):
        envelopes = group_and_sign(make_payments([alice, bob], bob), [alice, None])
        session = FakeSession([None, None])
        RemoteApprovalSigner(session).sign(envelopes)

        (request,) = session.requests
        assert request["method"] == SIGN_TXN_METHOD
        assert request["jsonrpc"] == "2.0"
        (txns,) = request["params"]
        assert len(txns) == 2
        for entry in txns:
            assert "stxn" not in entry
            assert set(entry) <= {"txn", "signers", "message"}
        assert txns[0]["signers"] == []
        assert "signers" not in txns[1]

    def test_falsy_entry_keeps_original(self, alice, bob, make_payments):
        envelopes = group_and_sign(make_payments([bob, alice, bob], bob), [None, alice, None])
        response = [_sign(bob, envelopes[0]), None, _sign(bob, envelopes[2])]
        signed = RemoteApprovalSigner(FakeSession(response)).sign(envelopes)

        assert signed[1] == envelopes[1]
        assert signed[0].stxn == response[0]
        assert signed[2].stxn == response[2]
        for env in signed:
            verify_envelope(env)

    def test_falsy_entry_without_prior_stays_unsigned(self, alice, bob, make_payments):
        envelopes = group_and_sign(make_payments([alice, bob], bob), [None, None])
        response = [_sign(alice, envelopes[0]), ""]
        signed = RemoteApprovalSigner(FakeSession(response)).sign(envelopes)
        assert signed[0].stxn == response[0]
        assert signed[1].stxn is None

    def test_request_signatures_merges_prior(self, alice, bob, make_payments):
        envelopes = group_and_sign(make_payments([alice, bob], bob), [alice, None])
        merged = RemoteApprovalSigner(FakeSession([None, None])).request_signatures(envelopes)
        assert merged == [envelopes[0].stxn, None]

    def test_wrong_length_response(self, alice, make_payments):
        envelopes = group_and_sign(make_payments([alice, alice], alice), [None, None])
        with pytest.raises(RemoteSignerError, match="1 entries for 2"):
            RemoteApprovalSigner(FakeSession([None])).sign(envelopes)

    def test_non_list_response(self, alice, make_payments):
        envelopes = group_and_sign(make_payments([alice], alice), [None])
        with pytest.raises(RemoteSignerError, match="expected a list"):
            RemoteApprovalSigner(FakeSession({"oops": 1})).sign(envelopes)

    def test_response_for_wrong_transaction(self, alice, make_payments):
        envelopes = group_and_sign(make_payments([alice, alice], alice), [None, None])
        response = [_sign(alice, envelopes[1]), None]
        with pytest.raises(MalformedEnvelopeError):
            RemoteApprovalSigner(FakeSession(response)).sign(envelopes)

    def test_garbage_response_entry(self, alice, make_payments):
        envelopes = group_and_sign(make_payments([alice], alice), [None])
        with pytest.raises(MalformedEnvelopeError):
            RemoteApprovalSigner(FakeSession(["@@@"])).sign(envelopes)

    def test_no_session_sign_raises(self, alice, make_payments):
        envelopes = group_and_sign(make_payments([alice], alice), [None])
        with pytest.raises(RemoteSignerError, match="No approval session"):
            RemoteApprovalSigner(None).sign(envelopes)


class TestRemoteWalletAddress:
    def test_connected(self, alice):
        session = FakeSession([], accounts=[alice.addr])
        assert RemoteApprovalSigner(session).wallet_address() == alice.addr

    def test_no_session(self):
        assert RemoteApprovalSigner(None).wallet_address() is None

    def test_no_accounts(self):
        assert RemoteApprovalSigner(FakeSession([], accounts=[])).wallet_address() is None

    def test_disconnected(self, alice):
        session = FakeSession([], accounts=[alice.addr], connected=False)
        assert RemoteApprovalSigner(session).wallet_address() is None

    def test_session_without_attributes(self):
        assert RemoteApprovalSigner(object()).wallet_address() is None


def _http_response(status=200, body=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    resp.text = text
    return resp


class TestHttpApprovalSession:
    def test_posts_request_and_returns_result(self, alice):
        http = MagicMock()
        http.post.return_value = _http_response(body={"id": 1, "result": ["abc", None]})
        session = HttpApprovalSession("http://bridge/", [alice.addr], session=http)

        result = session.send_custom_request({"method": SIGN_TXN_METHOD, "params": []})

        assert result == ["abc", None]
        url = http.post.call_args.args[0]
        assert url == "http://bridge"
        assert http.post.call_args.kwargs["json"]["method"] == SIGN_TXN_METHOD

    def test_json_rpc_error_raises(self, alice):
        http = MagicMock()
        http.post.return_value = _http_response(
            body={"id": 1, "error": {"code": 4001, "message": "User rejected"}}
        )
        session = HttpApprovalSession("http://bridge", [alice.addr], session=http)
        with pytest.raises(RemoteSignerError, match="User rejected"):
            session.send_custom_request({"method": SIGN_TXN_METHOD})

    def test_http_error_raises(self, alice):
        http = MagicMock()
        http.post.return_value = _http_response(status=502, text="bad gateway")
        session = HttpApprovalSession("http://bridge", [alice.addr], session=http)
        with pytest.raises(RemoteSignerError, match="502"):
            session.send_custom_request({})

    def test_transport_failure_raises(self, alice):
        http = MagicMock()
        http.post.side_effect = requests.ConnectionError("refused")
        session = HttpApprovalSession("http://bridge", [alice.addr], session=http)
        with pytest.raises(RemoteSignerError, match="refused"):
            session.send_custom_request({})

    def test_close_disconnects(self, alice):
        http = MagicMock()
        with HttpApprovalSession("http://bridge", [alice.addr], session=http) as session:
            assert session.connected
            signer = RemoteApprovalSigner(session)
            assert signer.wallet_address() == alice.addr
        assert not session.connected
        assert signer.wallet_address() is None
        with pytest.raises(RemoteSignerError, match="closed"):
            session.send_custom_request({})
