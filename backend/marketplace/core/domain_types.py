"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ItemId is the public string form of the sequential item key
    - WalletAddress is an opaque string (format not validated)
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to DB String columns without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ItemId = NewType("ItemId", str)
WalletAddress = NewType("WalletAddress", str)
TransactionHash = NewType("TransactionHash", str)


# ─── Enums ───────────────────────────────────────────────────────

class ItemStatus(str, Enum):
    """Item lifecycle states — maps to DB `status` column."""
    LISTED = "listed"
    PENDING_CONFIRMATION = "pending_confirmation"
    SOLD = "sold"


class SettlementTransition(str, Enum):
    """Named transitions between item states."""
    LEDGER_PURCHASE = "ledger_purchase"
    CHAIN_SUBMITTED = "chain_submitted"
    CHAIN_CONFIRMED = "chain_confirmed"
    CHAIN_REVERTED = "chain_reverted"


class BalanceSource(str, Enum):
    """Where a ledger entry's opening balance came from."""
    CHAIN = "chain"
    DEFAULT = "default"
