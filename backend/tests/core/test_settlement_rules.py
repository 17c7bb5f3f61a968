"""Settlement Rules — tests for the item state machine and purchase preconditions.

Tests cover:
    - every legal transition resolves to its target
    - SOLD is terminal for all transitions (AlreadySoldError)
    - illegal transitions raise InvalidTransitionError
    - pending items require the claiming transaction hash
    - check_purchase: price before status, decimal equality
    - check_funds: exact boundary
"""

import pytest

from marketplace.core.domain_types import ItemStatus, SettlementTransition
from marketplace.core.errors import (
    AlreadySoldError,
    InsufficientBalanceError,
    InvalidTransitionError,
    PriceMismatchError,
)
from marketplace.core.settlement_rules import (
    TRANSITIONS,
    check_funds,
    check_pending_claim,
    check_purchase,
    next_status,
)


# ─── next_status ────────────────────────────────────────────────

@pytest.mark.parametrize(("current", "transition"), list(TRANSITIONS))
def test_next_status_follows_table(current, transition):
    assert next_status("1", current, transition) == TRANSITIONS[(current, transition)]


@pytest.mark.parametrize("transition", list(SettlementTransition))
def test_sold_is_terminal(transition):
    with pytest.raises(AlreadySoldError) as exc_info:
        next_status("7", ItemStatus.SOLD, transition)
    assert exc_info.value.http_status == 409
    assert exc_info.value.item_id == "7"


def test_ledger_purchase_on_pending_is_invalid():
    with pytest.raises(InvalidTransitionError):
        next_status(
            "1", ItemStatus.PENDING_CONFIRMATION,
            SettlementTransition.LEDGER_PURCHASE,
        )


def test_revert_on_listed_is_invalid():
    with pytest.raises(InvalidTransitionError):
        next_status("1", ItemStatus.LISTED, SettlementTransition.CHAIN_REVERTED)


def test_double_submit_is_invalid():
    with pytest.raises(InvalidTransitionError):
        next_status(
            "1", ItemStatus.PENDING_CONFIRMATION,
            SettlementTransition.CHAIN_SUBMITTED,
        )


# ─── check_pending_claim ────────────────────────────────────────

def test_pending_claim_matching_hash_passes():
    check_pending_claim(ItemStatus.PENDING_CONFIRMATION, "0xabc", "0xabc")


def test_pending_claim_mismatched_hash_rejected():
    with pytest.raises(InvalidTransitionError, match="does not match"):
        check_pending_claim(ItemStatus.PENDING_CONFIRMATION, "0xabc", "0xdef")


def test_pending_claim_ignored_for_listed_items():
    check_pending_claim(ItemStatus.LISTED, None, "0xdef")


def test_pending_claim_other_buyer_rejected():
    with pytest.raises(InvalidTransitionError, match="Buyer does not match"):
        check_pending_claim(
            ItemStatus.PENDING_CONFIRMATION, "0xabc", "0xabc",
            pending_buyer="0xreserved", buyer="0xintruder",
        )


def test_pending_claim_same_buyer_passes():
    check_pending_claim(
        ItemStatus.PENDING_CONFIRMATION, "0xabc", "0xabc",
        pending_buyer="0xreserved", buyer="0xreserved",
    )


def test_pending_claim_release_ignores_buyer():
    check_pending_claim(
        ItemStatus.PENDING_CONFIRMATION, "0xabc", "0xabc",
        pending_buyer="0xreserved", buyer=None,
    )


# ─── check_purchase ─────────────────────────────────────────────

def test_check_purchase_returns_sold():
    assert check_purchase("3", ItemStatus.LISTED, "40", "40") == ItemStatus.SOLD


def test_check_purchase_accepts_equal_decimal():
    assert check_purchase("3", ItemStatus.LISTED, "40", "40.0") == ItemStatus.SOLD


def test_check_purchase_price_mismatch():
    with pytest.raises(PriceMismatchError) as exc_info:
        check_purchase("3", ItemStatus.LISTED, "40", "39")
    assert exc_info.value.message == "Please submit the asking price"
    assert exc_info.value.http_status == 400


def test_check_purchase_sold_item_fails():
    with pytest.raises(AlreadySoldError):
        check_purchase("3", ItemStatus.SOLD, "40", "40")


def test_check_purchase_price_checked_before_status():
    with pytest.raises(PriceMismatchError):
        check_purchase("3", ItemStatus.SOLD, "40", "41")


# ─── check_funds ────────────────────────────────────────────────

def test_check_funds_exact_balance_passes():
    check_funds(400_000, 400_000)


def test_check_funds_short_by_one_unit_fails():
    with pytest.raises(InsufficientBalanceError):
        check_funds(399_999, 400_000)
