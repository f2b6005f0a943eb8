"""Domain package exports for value objects, derivation and unit helpers."""

from .entities import (
    NO_PLEDGE,
    BackerPledge,
    CampaignMetadata,
    CampaignRecord,
    CampaignStatus,
    CampaignView,
    ReadResult,
    TransactionHandle,
    TransactionStatus,
    WalletSession,
)
from .errors import InvalidInput, LedgerError, NetworkError, NotConnected, RemoteError
from .metadata import encode_metadata, parse_metadata
from .naming import normalize_address, same_address
from .status import derive_status, derive_view, progress_percent
from .units import OCTAS_PER_APT, to_display, to_raw

__all__ = [
    "BackerPledge",
    "CampaignMetadata",
    "CampaignRecord",
    "CampaignStatus",
    "CampaignView",
    "InvalidInput",
    "LedgerError",
    "NO_PLEDGE",
    "NetworkError",
    "NotConnected",
    "OCTAS_PER_APT",
    "ReadResult",
    "RemoteError",
    "TransactionHandle",
    "TransactionStatus",
    "WalletSession",
    "derive_status",
    "derive_view",
    "encode_metadata",
    "normalize_address",
    "parse_metadata",
    "progress_percent",
    "same_address",
    "to_display",
    "to_raw",
]
