# crowdfund/app/main.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from ..adapters.ledger_rest import LedgerRestAdapter
from ..adapters.suggest_http import SuggestionHttpAdapter
from ..domain.naming import is_hex_address
from ..domain.ports import LedgerPort, SuggestionPort, UseCaseError
from ..domain.settings import LedgerSettings
from ..usecases.campaign_repository import CampaignRepository
from ..usecases.discovery_index import ALL, DiscoveryIndex
from ..usecases.suggest_description import SuggestDescription
from ..usecases.transaction_orchestrator import OrchestratorHooks, TransactionOrchestrator
from ..utils import logging as logging_utils
from ..viewmodels.campaign_list_vm import CampaignListVM
from ..viewmodels.campaign_vm import CampaignDetailVM

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


@dataclass
class Services:
    """Everything a front end needs, wired against one ledger."""

    settings: LedgerSettings
    ledger: LedgerPort
    repository: CampaignRepository
    discovery: DiscoveryIndex
    orchestrator: TransactionOrchestrator
    suggest: SuggestDescription
    detail_vm: CampaignDetailVM
    list_vm: CampaignListVM


def build_services(
    settings: Optional[LedgerSettings] = None,
    *,
    ledger: Optional[LedgerPort] = None,
    suggestion: Optional[SuggestionPort] = None,
    hooks: Optional[OrchestratorHooks] = None,
) -> Services:
    """Compose adapters, use cases and view models.

    ``ledger`` and ``suggestion`` replace the HTTP adapters, which is how
    tests and offline demos run against ``LedgerMock``.
    """
    settings = settings or LedgerSettings.from_env()
    ledger = ledger or LedgerRestAdapter(settings)
    if suggestion is None and settings.suggest_url:
        suggestion = SuggestionHttpAdapter(settings.suggest_url)
    repository = CampaignRepository(ledger, settings)
    discovery = DiscoveryIndex(repository)
    orchestrator = TransactionOrchestrator(ledger, repository, settings, hooks=hooks)
    detail_vm = CampaignDetailVM(repository)
    list_vm = CampaignListVM(discovery)
    log.debug(
        "Services wired: node=%s module=%s registry=%s",
        settings.node_url,
        settings.function_prefix,
        settings.registry_address,
    )
    return Services(
        settings=settings,
        ledger=ledger,
        repository=repository,
        discovery=discovery,
        orchestrator=orchestrator,
        suggest=SuggestDescription(suggestion),
        detail_vm=detail_vm,
        list_vm=list_vm,
    )


# ----------------------------------------------------------------------
# CLI
# ----------------------------------------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crowdfund",
        description="Browse crowdfunding campaigns on the Aptos ledger.",
    )
    parser.add_argument("--node-url", help="Fullnode REST base URL")
    parser.add_argument("--module-address", help="Account that publishes the program")
    parser.add_argument("--registry", dest="registry_address", help="Registry account address")
    parser.add_argument("--suggest-url", help="Description suggestion proxy URL")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")

    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List registered campaigns")
    list_cmd.add_argument("--status", default=ALL, help="all, active, successful or failed")
    list_cmd.add_argument("--start", type=int, help="First registry index (enables paging)")
    list_cmd.add_argument("--limit", type=int, default=20, help="Page size when paging")
    list_cmd.add_argument("--viewer", help="Viewer address for action flags")
    list_cmd.add_argument(
        "--track",
        action="append",
        default=[],
        metavar="ADDRESS",
        help="Also include this campaign address when not paging (repeatable)",
    )

    show_cmd = sub.add_parser("show", help="Show one campaign")
    show_cmd.add_argument("address")
    show_cmd.add_argument("--viewer", help="Viewer address for pledge and actions")

    suggest_cmd = sub.add_parser("suggest", help="Draft a campaign description")
    suggest_cmd.add_argument("title")
    suggest_cmd.add_argument("--goal", default="")
    return parser


def _settings_from_args(args: argparse.Namespace) -> LedgerSettings:
    base = LedgerSettings.from_env()
    overrides: Dict[str, Any] = {}
    for name in ("node_url", "module_address", "registry_address", "suggest_url"):
        value = getattr(args, name, None)
        if value:
            overrides[name] = value
    if not overrides:
        return base
    merged = base.to_dict()
    merged.update(overrides)
    return LedgerSettings.from_mapping(merged)


def _emit(args: argparse.Namespace, payload: Any, text_lines: Sequence[str]) -> None:
    if args.json:
        print(json.dumps(payload, indent=2, sort_keys=True))
        return
    for line in text_lines:
        print(line)


def _cmd_list(services: Services, args: argparse.Namespace) -> int:
    vm = services.list_vm
    vm.set_filter(args.status)
    for address in args.track:
        if not vm.track(address):
            log.warning("No campaign found at %s", address)
    if args.start is not None:
        rows = vm.load_page(args.start, args.limit, viewer=args.viewer)
    else:
        rows = vm.load(viewer=args.viewer)
    lines = [
        f"{row['short_address']:<14} {row['status_label']:<11} "
        f"{row['raised']} / {row['goal']} ({row['progress_label']}) "
        f"{row['days_left']:<13} {row['title']}"
        for row in rows
    ] or ["No campaigns found."]
    _emit(args, rows, lines)
    return EXIT_OK


def _cmd_show(services: Services, args: argparse.Namespace) -> int:
    if not is_hex_address(args.address.strip()):
        raise UseCaseError("INVALID_INPUT", f"Not a valid address: {args.address}")
    vm = services.detail_vm
    vm.load(args.address, viewer=args.viewer)
    dto = vm.dto
    if dto.get("not_found", True):
        print(f"Campaign not found: {args.address}", file=sys.stderr)
        return EXIT_FAILED
    actions = [
        name
        for name, flag in (("pledge", "can_pledge"), ("claim", "can_claim"), ("refund", "can_refund"))
        if dto.get(flag)
    ]
    lines = [
        dto["title"],
        f"  address:  {dto['address']}",
        f"  creator:  {dto['creator']}",
        f"  status:   {dto['status_label']} ({dto['days_left']})",
        f"  raised:   {dto['raised']} of {dto['goal']} ({dto['progress_label']})",
        f"  deadline: {dto['deadline']}",
    ]
    if args.viewer:
        lines.append(f"  pledged:  {dto['your_pledge']}")
        lines.append(f"  actions:  {', '.join(actions) or 'none'}")
    if dto.get("description"):
        lines.extend(["", dto["description"]])
    _emit(args, dto, lines)
    return EXIT_OK


def _cmd_suggest(services: Services, args: argparse.Namespace) -> int:
    if services.suggest.port is None:
        print("No suggestion service configured (set CROWDFUND_SUGGEST_URL).", file=sys.stderr)
        return EXIT_FAILED
    description = services.suggest(args.title, args.goal)
    if description is None:
        print("No suggestion available.", file=sys.stderr)
        return EXIT_FAILED
    _emit(args, {"description": description}, [description])
    return EXIT_OK


_COMMANDS = {
    "list": _cmd_list,
    "show": _cmd_show,
    "suggest": _cmd_suggest,
}


def main(argv: Optional[Sequence[str]] = None, *, services: Optional[Services] = None) -> int:
    """CLI entrypoint; returns the process exit code."""
    args = _build_parser().parse_args(argv)
    logging_utils.configure_root(args.log_level)
    try:
        services = services or build_services(_settings_from_args(args))
        return _COMMANDS[args.command](services, args)
    except UseCaseError as exc:
        print(f"{exc.code}: {exc.message}", file=sys.stderr)
        return EXIT_USAGE if exc.code == "INVALID_INPUT" else EXIT_FAILED
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
