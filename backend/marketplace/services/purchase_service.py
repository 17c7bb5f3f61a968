"""Purchase Service — ledger purchases and on-chain settlement transitions.

Invariants:
    - Ledger purchase steps (price check -> status check -> ledger init -> funds
      check -> debit -> mark sold) run in ONE transaction under ONE per-item lock
    - Any failure rolls back the whole transaction: no debit without a sale
    - Mark-sold is compare-and-set on status: two concurrent buyers -> one sale,
      one AlreadySoldError
    - Chain transitions never touch the ledger

Design Decisions:
    - Lock order is item -> wallet everywhere; BalanceService.get_or_init only takes
      the wallet lock, so no cycle is possible
    - Rules decided by core.settlement_rules; this module only sequences IO
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.core.domain_types import ItemStatus, SettlementTransition
from marketplace.core.errors import (
    AlreadySoldError, ErrorContext, InputValidationError,
    InvalidTransitionError, ResourceNotFoundError,
)
from marketplace.core.pricing import parse_price, to_units
from marketplace.core.repository_protocols import (
    BalanceRepository, ItemLike, ItemRepository,
)
from marketplace.core.settlement_rules import (
    check_funds, check_pending_claim, check_purchase, next_status,
)
from marketplace.infrastructure.item_repository import SqlItemRepository
from marketplace.services.balance_service import BalanceService
from marketplace.services.settlement_locks import item_lock, wallet_lock

logger = logging.getLogger(__name__)


class PurchaseService:
    """Applies settlement transitions to items."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        items: ItemRepository | None = None,
        balances: BalanceRepository | None = None,
    ):
        self.db = db
        self.items = items or SqlItemRepository(db)
        self.ledger = BalanceService(db, settings, chain=None, balances=balances)

    async def purchase(
        self, item_id: str, price: str, address: str,
    ) -> tuple[ItemLike, int]:
        """Buy `item_id` from the simulated ledger. Returns (item, new balance units)."""
        if not item_id or not price or not address:
            raise InputValidationError("Missing required fields")
        context = ErrorContext(item_id=item_id, address=address)

        async with item_lock(item_id), wallet_lock(address):
            try:
                item = await self._get_or_404(item_id, context)
                target = check_purchase(
                    item_id, ItemStatus(item.status), item.price, price, context,
                )
                price_units = to_units(parse_price(item.price))
                balance_units = await self.ledger.ensure_entry(address)
                check_funds(balance_units, price_units, context)
                new_units = await self.ledger.debit(address, price_units, context)
                if not await self.items.transition(
                    item_id, ItemStatus.LISTED, target, buyer=address,
                ):
                    raise AlreadySoldError(item_id, context)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        logger.info(
            f"Item {item_id} purchased by {address}",
            extra={"item_id": item_id, "address": address},
        )
        return await self.items.get(item_id), new_units

    async def complete(
        self, item_id: str, transaction_hash: str, buyer: str,
    ) -> ItemLike:
        """Record an on-chain purchase confirmation."""
        if not item_id or not transaction_hash or not buyer:
            raise InputValidationError("Missing required fields")
        item = await self._apply_chain_transition(
            item_id, SettlementTransition.CHAIN_CONFIRMED, transaction_hash,
            buyer=buyer, transaction_hash=transaction_hash,
        )
        logger.info(
            f"Item {item_id} purchased by {buyer} with transaction {transaction_hash}",
            extra={
                "item_id": item_id, "address": buyer,
                "transaction_hash": transaction_hash,
            },
        )
        return item

    async def submit_pending(
        self, item_id: str, transaction_hash: str, buyer: str,
    ) -> ItemLike:
        """Reserve an item while its on-chain transaction awaits confirmation."""
        if not item_id or not transaction_hash or not buyer:
            raise InputValidationError("Missing required fields")
        return await self._apply_chain_transition(
            item_id, SettlementTransition.CHAIN_SUBMITTED, transaction_hash,
            buyer=buyer, transaction_hash=transaction_hash,
        )

    async def revert(self, item_id: str, transaction_hash: str) -> ItemLike:
        """Release a pending item whose on-chain transaction failed."""
        if not item_id or not transaction_hash:
            raise InputValidationError("Missing required fields")
        return await self._apply_chain_transition(
            item_id, SettlementTransition.CHAIN_REVERTED, transaction_hash,
            buyer=None, transaction_hash=None,
        )

    async def _apply_chain_transition(
        self,
        item_id: str,
        transition: SettlementTransition,
        claim_hash: str,
        **fields: object,
    ) -> ItemLike:
        context = ErrorContext(item_id=item_id, transaction_hash=claim_hash)
        async with item_lock(item_id):
            try:
                item = await self._get_or_404(item_id, context)
                current = ItemStatus(item.status)
                target = next_status(item_id, current, transition, context)
                check_pending_claim(
                    current, item.transaction_hash, claim_hash, context,
                    pending_buyer=item.buyer, buyer=fields.get("buyer"),
                )
                if not await self.items.transition(
                    item_id, current, target, **fields,
                ):
                    raise InvalidTransitionError(
                        "Item changed during settlement", context,
                    )
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise
        return await self.items.get(item_id)

    async def _get_or_404(
        self, item_id: str, context: ErrorContext,
    ) -> ItemLike:
        item = await self.items.get(item_id)
        if item is None:
            raise ResourceNotFoundError("Item", item_id, context)
        return item
