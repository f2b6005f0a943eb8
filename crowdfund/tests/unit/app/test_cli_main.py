import json

import pytest

from crowdfund.adapters.ledger_mock import LedgerMock
from crowdfund.adapters.ledger_rest import LedgerRestAdapter
from crowdfund.adapters.suggest_http import SuggestionHttpAdapter
from crowdfund.app.main import EXIT_FAILED, EXIT_OK, EXIT_USAGE, build_services, main
from crowdfund.domain.settings import LedgerSettings
from crowdfund.domain.time_utils import SECONDS_PER_DAY, now_seconds


@pytest.fixture
def services():
    now = now_seconds()
    ledger = LedgerMock(clock=now_seconds)
    ledger.add_campaign("0xa1", goal=100_000_000, deadline=now + 5 * SECONDS_PER_DAY, title="Library")
    ledger.add_campaign("0xb2", goal=100_000_000, deadline=now - 10, title="Bridge", total_raised=150_000_000)
    return build_services(LedgerSettings(), ledger=ledger)


class _Suggestions:
    def suggest(self, title, goal):
        return {"description": f"Help fund {title}."}


def test_build_services_wires_http_adapters_by_default():
    svc = build_services(LedgerSettings(suggest_url="http://proxy/api"))

    assert isinstance(svc.ledger, LedgerRestAdapter)
    assert isinstance(svc.suggest.port, SuggestionHttpAdapter)
    assert svc.list_vm.index is svc.discovery
    assert svc.detail_vm.repository is svc.repository


def test_build_services_without_suggest_url_has_no_port():
    assert build_services(LedgerSettings()).suggest.port is None


def test_list_prints_filtered_rows_as_json(services, capsys):
    code = main(["--json", "list", "--status", "successful"], services=services)

    rows = json.loads(capsys.readouterr().out)
    assert code == EXIT_OK
    assert [row["title"] for row in rows] == ["Bridge"]
    assert rows[0]["progress_label"] == "150.0%"


def test_list_text_output_and_paging(services, capsys):
    assert main(["list", "--start", "1", "--limit", "5"], services=services) == EXIT_OK
    out = capsys.readouterr().out
    assert "Bridge" in out
    assert "Library" not in out


def test_list_rejects_unknown_status(services, capsys):
    assert main(["list", "--status", "later"], services=services) == EXIT_USAGE
    assert "INVALID_INPUT" in capsys.readouterr().err


def test_show_prints_campaign_details(services, capsys):
    code = main(["--json", "show", "0xb2", "--viewer", "0xB2"], services=services)

    dto = json.loads(capsys.readouterr().out)
    assert code == EXIT_OK
    assert dto["title"] == "Bridge"
    assert dto["status"] == "successful"
    assert dto["can_claim"] is True


def test_show_text_lists_actions(services, capsys):
    assert main(["show", "0xa1", "--viewer", "0xbac"], services=services) == EXIT_OK
    out = capsys.readouterr().out
    assert out.startswith("Library")
    assert "actions:  pledge" in out


def test_show_unknown_campaign_fails(services, capsys):
    assert main(["show", "0x404"], services=services) == EXIT_FAILED
    assert "not found" in capsys.readouterr().err


def test_show_rejects_malformed_address(services):
    assert main(["show", "bridge"], services=services) == EXIT_USAGE


def test_suggest_without_service_fails(services, capsys):
    assert main(["suggest", "Garden"], services=services) == EXIT_FAILED
    assert "CROWDFUND_SUGGEST_URL" in capsys.readouterr().err


def test_suggest_prints_description(capsys):
    svc = build_services(LedgerSettings(), ledger=LedgerMock(), suggestion=_Suggestions())

    assert main(["suggest", "Garden", "--goal", "30"], services=svc) == EXIT_OK
    assert capsys.readouterr().out.strip() == "Help fund Garden."


def test_invalid_environment_configuration_is_reported(monkeypatch, capsys):
    monkeypatch.setenv("CROWDFUND_RETRIES", "lots")

    assert main(["list"]) == EXIT_USAGE
    assert "Invalid configuration" in capsys.readouterr().err
