import pytest

from crowdfund.adapters.ledger_mock import LedgerMock
from crowdfund.domain.entities import CampaignStatus
from crowdfund.domain.errors import InvalidInput
from crowdfund.domain.settings import LedgerSettings
from crowdfund.usecases.campaign_repository import CampaignRepository
from crowdfund.usecases.discovery_index import ALL, DiscoveryIndex, parse_status_filter

NOW = 1_700_000_000


def _index():
    ledger = LedgerMock(clock=lambda: NOW)
    repo = CampaignRepository(ledger, LedgerSettings())
    return DiscoveryIndex(repo, clock=lambda: NOW), ledger


def _seed_mixed(ledger):
    active = ledger.add_campaign("0xa1", goal=100, deadline=NOW + 50, title="Active")
    successful = ledger.add_campaign("0xb2", goal=100, deadline=NOW - 50, total_raised=120)
    failed = ledger.add_campaign("0xc3", goal=100, deadline=NOW - 50, total_raised=10)
    return active, successful, failed


def test_parse_status_filter():
    assert parse_status_filter(ALL) is None
    assert parse_status_filter(None) is None
    assert parse_status_filter(" Active ") is CampaignStatus.ACTIVE
    assert parse_status_filter(CampaignStatus.FAILED) is CampaignStatus.FAILED
    with pytest.raises(InvalidInput):
        parse_status_filter("pending")


def test_filter_keeps_matches_in_registry_order():
    index, ledger = _index()
    active, successful, failed = _seed_mixed(ledger)
    addresses = [failed, active, successful]

    assert index.filter_by_status(addresses, ALL) == addresses
    assert index.filter_by_status(addresses, "active") == [active]
    assert index.filter_by_status(addresses, CampaignStatus.SUCCESSFUL) == [successful]
    assert index.registry("failed") == [failed]


def test_unreachable_campaign_is_dropped_not_fatal():
    index, ledger = _index()
    a = ledger.add_campaign("0x1", goal=100, deadline=NOW + 50)
    b = ledger.add_campaign("0x2", goal=100, deadline=NOW + 50)
    c = ledger.add_campaign("0x3", goal=100, deadline=NOW + 50)
    ledger.make_unreachable(b)

    assert index.filter_by_status([a, b, c], ALL) == [a, c]


def test_unknown_registry_entries_are_skipped():
    index, ledger = _index()
    a = ledger.add_campaign("0x1", goal=100, deadline=NOW + 50)
    ledger.register_address("0xdead")

    assert index.registry() == [a]


def test_partition_is_disjoint_and_complete():
    index, ledger = _index()
    active, successful, failed = _seed_mixed(ledger)
    ledger.add_campaign("0xd4", goal=100, deadline=NOW + 10, total_raised=100, funds_claimed=True)
    everything = ledger.query("get_all_campaigns", ["0x1"])[0]

    buckets = index.partition(everything)

    flattened = [a for bucket in buckets.values() for a in bucket]
    assert sorted(flattened) == sorted(everything)
    assert len(flattened) == len(set(flattened))
    assert buckets[CampaignStatus.ACTIVE] == [active]
    assert failed in buckets[CampaignStatus.FAILED]
    assert set(buckets[CampaignStatus.SUCCESSFUL]) == {successful, everything[-1]}


def test_single_now_is_used_for_the_whole_listing():
    index, ledger = _index()
    a = ledger.add_campaign("0x1", goal=100, deadline=NOW + 10)

    assert index.filter_by_status([a], "active", now=NOW + 9) == [a]
    assert index.filter_by_status([a], "failed", now=NOW + 10) == [a]


def test_page_then_filter_may_return_short_pages():
    index, ledger = _index()
    active, successful, failed = _seed_mixed(ledger)

    assert index.page(0, 2, "active") == [active]
    assert index.page(1, 2, "active") == []
    assert index.page(0, 3) == [active, successful, failed]


def test_summaries_carry_view_for_viewer():
    index, ledger = _index()
    _, successful, _ = _seed_mixed(ledger)

    rows = index.summaries([successful], viewer="0xb2")

    assert rows[0].view.status is CampaignStatus.SUCCESSFUL
    assert rows[0].view.can_claim


def test_find_validates_the_address():
    index, ledger = _index()
    ledger.add_campaign("0x1", goal=100, deadline=NOW + 50, title="Found")

    assert index.find("0x01").title == "Found"
    assert index.find("not-an-address") is None
    assert index.find("0x9") is None


def test_mixed_listing_drops_unreachable_and_filters_active():
    index, ledger = _index()
    active = ledger.add_campaign("0xa1", goal=100, deadline=NOW + 50, title="Active")
    failed = ledger.add_campaign("0xc3", goal=100, deadline=NOW - 50, total_raised=10)
    lost = ledger.add_campaign("0xe5", goal=100, deadline=NOW + 50)
    ledger.make_unreachable(lost)
    addresses = [active, failed, lost]

    assert index.filter_by_status(addresses, ALL) == [active, failed]
    assert index.filter_by_status(addresses, "active") == [active]


def test_nested_metadata_does_not_sink_the_listing():
    index, ledger = _index()
    ok = ledger.add_campaign("0x1", goal=100, deadline=NOW + 50, title="Fine")
    odd = ledger.add_campaign(
        "0x2", goal=100, deadline=NOW + 50, metadata="[" * 100000 + "]" * 100000
    )

    assert index.registry() == [ok, odd]
    assert [row.record.title for row in index.summaries([ok, odd])] == ["Fine", ""]
