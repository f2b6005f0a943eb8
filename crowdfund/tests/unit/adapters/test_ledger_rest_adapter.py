import pytest
import requests

from crowdfund.adapters.ledger_rest import LedgerRestAdapter, encode_argument
from crowdfund.adapters.ledger_mock import SignerMock
from crowdfund.domain.errors import NetworkError, NotConnected, RemoteError
from crowdfund.domain.settings import LedgerSettings

MODULE = "0x" + "ab" * 32
SETTINGS = LedgerSettings(node_url="http://node/v1", module_address=MODULE)


class _Response:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _Http:
    """Records requests the adapter makes and answers with canned responses."""

    def __init__(self, response):
        self.response = response
        self.gets = []
        self.posts = []

    def get(self, url, *, timeout=None):
        self.gets.append(url)
        return self.response

    def post(self, url, *, json_body=None, timeout=None):
        self.posts.append((url, json_body))
        return self.response


def _adapter(response):
    http = _Http(response)
    return LedgerRestAdapter(SETTINGS, http=http), http


def test_encode_argument_stringifies_u64_values():
    assert encode_argument(5) == "5"
    assert encode_argument(True) is True
    assert encode_argument(b"\x01\x02") == "0x0102"
    assert encode_argument([1, "0x1"]) == ["1", "0x1"]


def test_query_posts_view_payload():
    adapter, http = _adapter(_Response(200, ["3"]))

    result = adapter.query("get_total_campaigns", [MODULE])

    assert result == ["3"]
    url, body = http.posts[0]
    assert url == "http://node/v1/view"
    assert body == {
        "function": f"{MODULE}::crowdfund::get_total_campaigns",
        "type_arguments": [],
        "arguments": [MODULE],
    }


def test_query_rejects_non_list_body():
    adapter, _ = _adapter(_Response(200, {"unexpected": True}))
    with pytest.raises(NetworkError):
        adapter.query("get_total_campaigns", [MODULE])


def test_query_raises_network_error_on_invalid_json():
    adapter, _ = _adapter(_Response(200, ValueError("bad json"), text="<html>"))
    with pytest.raises(NetworkError) as info:
        adapter.query("get_total_campaigns", [MODULE])
    assert "<html>" in info.value.message


def test_query_maps_abort_to_remote_error():
    adapter, _ = _adapter(_Response(400, {"message": "E_CAMPAIGN_NOT_FOUND"}))
    with pytest.raises(RemoteError) as info:
        adapter.query("get_campaign_info", ["0x1"])
    assert info.value.message == "E_CAMPAIGN_NOT_FOUND"


def test_submit_requires_a_signer():
    adapter, _ = _adapter(_Response())
    with pytest.raises(NotConnected):
        adapter.submit("pledge", ["0x1", 5], None)


def test_submit_hands_entry_payload_to_signer():
    adapter, _ = _adapter(_Response())
    signer = SignerMock(address="0xbac")

    handle = adapter.submit("pledge", ["0x1", 150_000_000], signer)

    assert handle.hash.startswith("0x")
    assert handle.sender == "0x" + "0" * 61 + "bac"
    assert handle.function == f"{MODULE}::crowdfund::pledge"
    payload = signer.payloads[0]
    assert payload["type"] == "entry_function_payload"
    assert payload["arguments"] == ["0x1", "150000000"]


def test_submit_surfaces_wallet_rejection_verbatim():
    adapter, _ = _adapter(_Response())
    signer = SignerMock(address="0xbac", reject_with="User rejected the request")

    with pytest.raises(RemoteError) as info:
        adapter.submit("claim_funds", [], signer)

    assert info.value.message == "User rejected the request"


@pytest.mark.parametrize(
    "failure",
    [requests.ConnectionError("wallet unreachable"), requests.Timeout("slow"), TimeoutError("slow")],
)
def test_submit_maps_signer_transport_failures_to_network_error(failure):
    class _Signer:
        address = "0x1"

        def sign_and_submit(self, payload):
            raise failure

    adapter, _ = _adapter(_Response())
    with pytest.raises(NetworkError):
        adapter.submit("claim_funds", [], _Signer())


def test_submit_accepts_plain_hash_strings():
    class _Signer:
        address = "0x1"

        def sign_and_submit(self, payload):
            return " 0xfeed "

    adapter, _ = _adapter(_Response())
    assert adapter.submit("claim_funds", [], _Signer()).hash == "0xfeed"


def test_submit_without_hash_is_rejected():
    class _Signer:
        address = "0x1"

        def sign_and_submit(self, payload):
            return {}

    adapter, _ = _adapter(_Response())
    with pytest.raises(RemoteError):
        adapter.submit("claim_funds", [], _Signer())


def test_unknown_transaction_is_pending():
    adapter, http = _adapter(_Response(404, {"message": "not found"}))

    status = adapter.transaction_status("0xabc")

    assert status.is_pending
    assert http.gets == ["http://node/v1/transactions/by_hash/0xabc"]


def test_pending_transaction_type_is_pending():
    adapter, _ = _adapter(_Response(200, {"type": "pending_transaction", "hash": "0xabc"}))
    assert adapter.transaction_status("0xabc").is_pending


def test_committed_transaction_reports_vm_status():
    adapter, _ = _adapter(
        _Response(
            200,
            {"type": "user_transaction", "success": False, "vm_status": "Move abort: E_CAMPAIGN_ENDED"},
        )
    )

    status = adapter.transaction_status("0xabc")

    assert status.state == "failed"
    assert status.vm_status == "Move abort: E_CAMPAIGN_ENDED"


def test_successful_transaction():
    adapter, _ = _adapter(
        _Response(200, {"type": "user_transaction", "success": True, "vm_status": "Executed successfully"})
    )
    assert adapter.transaction_status("0xabc").is_success
