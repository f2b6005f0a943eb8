import threading

import pytest

from crowdfund.adapters.ledger_mock import LedgerMock
from crowdfund.domain.entities import NO_PLEDGE, BackerPledge
from crowdfund.domain.errors import NetworkError
from crowdfund.domain.naming import normalize_address
from crowdfund.domain.settings import LedgerSettings
from crowdfund.usecases.campaign_repository import (
    CampaignRepository,
    pledge_from_tuple,
    record_from_tuple,
)

NOW = 1_700_000_000


def _repo(ledger=None, **settings):
    ledger = ledger or LedgerMock(clock=lambda: NOW)
    return CampaignRepository(ledger, LedgerSettings(**settings)), ledger


def _seed(ledger, count):
    return [
        ledger.add_campaign(f"0x{i + 1:x}", goal=100, deadline=NOW + 10, title=f"C{i}")
        for i in range(count)
    ]


def test_record_from_tuple_parses_node_strings():
    record = record_from_tuple(
        "0x1",
        ["0xC0FFEE", "100", "40", "1700000010", '{"title": "Roof"}', False, "0", "40"],
    )
    assert record.address == normalize_address("0x1")
    assert record.creator == normalize_address("0xc0ffee")
    assert (record.goal, record.total_raised, record.escrow_balance) == (100, 40, 40)
    assert record.title == "Roof"


@pytest.mark.parametrize(
    "raw",
    [
        ["0x1", "100"],
        ["0x1", "-1", "0", "0", "", False, "0", "0"],
        ["0x1", "1.5", "0", "0", "", False, "0", "0"],
        ["0x1", "1", "0", "0", "", "maybe", "0", "0"],
    ],
)
def test_record_from_tuple_rejects_malformed_tuples(raw):
    with pytest.raises(ValueError):
        record_from_tuple("0x1", raw)


def test_pledge_from_tuple():
    assert pledge_from_tuple(["25", "true"]) == BackerPledge(amount=25, refunded=True)


def test_get_campaign_returns_record_or_none():
    repo, ledger = _repo()
    ledger.add_campaign("0xc0ffee", goal=100, deadline=NOW + 10, title="Roof")

    assert repo.get_campaign("0xC0FFEE").title == "Roof"
    assert repo.get_campaign("0x404") is None


def test_nested_metadata_reads_as_untitled_campaign():
    repo, ledger = _repo()
    address = ledger.add_campaign(
        "0x1", goal=100, deadline=NOW + 10, metadata="[" * 100000 + "]" * 100000
    )

    record = repo.get_campaign(address)

    assert record is not None
    assert (record.title, record.description) == ("", "")
    assert record.goal == 100


def test_fetch_campaign_tells_failures_apart():
    repo, ledger = _repo()
    address = ledger.add_campaign("0xc0ffee", goal=100, deadline=NOW + 10)
    ledger.make_unreachable(address)

    missing = repo.fetch_campaign("0x404")
    broken = repo.fetch_campaign(address)

    assert missing.error_kind == "remote"
    assert broken.error_kind == "network"
    assert broken.value is None


def test_missing_pledge_is_zero_pledge():
    repo, ledger = _repo()
    address = ledger.add_campaign("0xc0ffee", goal=100, deadline=NOW + 10)
    ledger.add_pledge(address, "0xbac", 30)

    assert repo.get_pledge(address, "0xbac") == BackerPledge(amount=30)
    assert repo.get_pledge(address, "0xdead") is NO_PLEDGE
    assert repo.get_pledge(address, "") is NO_PLEDGE


def test_registry_reads_default_on_failure():
    class _Down:
        def query(self, name, args):
            raise NetworkError("node down")

    repo, _ = _repo(ledger=_Down())

    assert repo.list_all() == []
    assert repo.total_count() == 0
    assert repo.list_paged(0, 10) == []
    assert repo.campaign_exists("0x1") is False
    assert repo.get_progress_bps("0x1") == 0


def test_unexpected_adapter_errors_also_default():
    class _Broken:
        def query(self, name, args):
            raise KeyError("boom")

    repo, _ = _repo(ledger=_Broken())
    assert repo.get_campaign("0x1") is None
    assert repo.is_campaign_active("0x1") is False


def test_list_paged_clips_to_registry_size():
    repo, ledger = _repo()
    addresses = _seed(ledger, 5)

    assert repo.list_paged(0, 2) == addresses[:2]
    assert repo.list_paged(3, 10) == addresses[3:]
    assert repo.list_paged(5, 10) == []
    assert repo.list_paged(-1, 10) == []
    assert repo.list_paged(0, 0) == []
    assert repo.total_count() == 5


def test_contiguous_pages_cover_the_registry():
    repo, ledger = _repo()
    addresses = _seed(ledger, 7)

    pages = [repo.list_paged(start, 3) for start in range(0, 7, 3)]

    assert [a for page in pages for a in page] == repo.list_all() == addresses


def test_ledger_side_helpers():
    repo, ledger = _repo()
    address = ledger.add_campaign("0xc0ffee", goal=200, deadline=NOW + 10, total_raised=50)

    assert repo.campaign_exists(address)
    assert not repo.campaign_exists("0x404")
    assert repo.is_campaign_active(address)
    assert not repo.is_campaign_successful(address)
    assert repo.get_progress_bps(address) == 2500


def test_fetch_many_bounds_concurrency_and_dedupes():
    in_flight = []
    peak = []
    guard = threading.Lock()
    gate = threading.Event()

    class _Slow:
        def query(self, name, args):
            with guard:
                in_flight.append(1)
                peak.append(len(in_flight))
            gate.wait(0.05)
            with guard:
                in_flight.pop()
            return [args[0], "100", "0", str(NOW + 10), "", False, "0", "0"]

    repo, _ = _repo(ledger=_Slow(), max_concurrent_reads=2)
    addresses = [f"0x{i:x}" for i in range(1, 7)]

    results = repo.fetch_many(addresses + ["0x1"])

    assert list(results) == [normalize_address(a) for a in addresses]
    assert all(result.is_ok for result in results.values())
    assert max(peak) <= 2


def test_get_many_keeps_successes_when_one_read_fails():
    repo, ledger = _repo()
    a, b, c = _seed(ledger, 3)
    ledger.make_unreachable(b)

    records = repo.get_many([a, b, c])

    assert records[a] is not None
    assert records[b] is None
    assert records[c] is not None
