"""Settlement Rules — the item state machine and purchase preconditions.

Invariants:
    - next_status is PURE: returns the target status, does NOT mutate anything
    - SOLD is terminal: every transition out of it raises AlreadySoldError
    - Pending items only move on a matching transaction hash
    - check_purchase enforces price equality before status, status before balance

Design Decisions:
    - Transition table as a dict: one place lists every legal move, so both the
      ledger path and the on-chain path are checked by the same rules
    - Shell applies the mutation as compare-and-set on the expected status
"""

from marketplace.core.domain_types import ItemStatus, SettlementTransition
from marketplace.core.errors import (
    AlreadySoldError,
    ErrorContext,
    InsufficientBalanceError,
    InvalidTransitionError,
    PriceMismatchError,
)
from marketplace.core.pricing import prices_match


TRANSITIONS: dict[tuple[ItemStatus, SettlementTransition], ItemStatus] = {
    (ItemStatus.LISTED, SettlementTransition.LEDGER_PURCHASE): ItemStatus.SOLD,
    (ItemStatus.LISTED, SettlementTransition.CHAIN_SUBMITTED): ItemStatus.PENDING_CONFIRMATION,
    (ItemStatus.LISTED, SettlementTransition.CHAIN_CONFIRMED): ItemStatus.SOLD,
    (ItemStatus.PENDING_CONFIRMATION, SettlementTransition.CHAIN_CONFIRMED): ItemStatus.SOLD,
    (ItemStatus.PENDING_CONFIRMATION, SettlementTransition.CHAIN_REVERTED): ItemStatus.LISTED,
}


def next_status(
    item_id: str,
    current: ItemStatus,
    transition: SettlementTransition,
    context: ErrorContext | None = None,
) -> ItemStatus:
    """Resolve the target status for a transition or raise."""
    if current == ItemStatus.SOLD:
        raise AlreadySoldError(item_id, context)
    target = TRANSITIONS.get((current, transition))
    if target is None:
        raise InvalidTransitionError(
            f"Cannot apply {transition.value} to an item that is {current.value}",
            context,
        )
    return target


def check_pending_claim(
    current: ItemStatus,
    pending_hash: str | None,
    transaction_hash: str,
    context: ErrorContext | None = None,
    pending_buyer: str | None = None,
    buyer: str | None = None,
) -> None:
    """A pending item is settled or released only by the transaction that claimed it.

    When `buyer` is given (confirmation), it must also match the reserved buyer.
    """
    if current != ItemStatus.PENDING_CONFIRMATION:
        return
    if pending_hash != transaction_hash:
        raise InvalidTransitionError(
            "Transaction hash does not match the pending purchase", context,
        )
    if buyer is not None and pending_buyer != buyer:
        raise InvalidTransitionError(
            "Buyer does not match the pending purchase", context,
        )


def check_purchase(
    item_id: str,
    current: ItemStatus,
    listed_price: str,
    submitted_price: str,
    context: ErrorContext | None = None,
) -> ItemStatus:
    """Validate a ledger purchase against the listing. Returns the target status."""
    if not prices_match(submitted_price, listed_price):
        raise PriceMismatchError(str(submitted_price), listed_price, context)
    return next_status(
        item_id, current, SettlementTransition.LEDGER_PURCHASE, context,
    )


def check_funds(
    balance_units: int, price_units: int, context: ErrorContext | None = None,
) -> None:
    if balance_units < price_units:
        raise InsufficientBalanceError(context)
