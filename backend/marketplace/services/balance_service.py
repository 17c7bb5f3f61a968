"""Balance Service — lazily initialized wallet ledger.

Invariants:
    - An unseen address gets exactly one ledger entry (serialized per address)
    - Upstream lookup failure is logged as UPSTREAM_UNAVAILABLE, never silently swallowed
    - Lenient mode falls back to settings.default_balance with source=default;
      strict mode re-raises UpstreamUnavailableError and creates no entry
    - Balances never go negative (conditional debit in the repository)

Design Decisions:
    - Entry source column decouples "has an entry" from "lookup succeeded"
    - Wallet lock held across the lookup: only requests for the same address wait
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.core.domain_types import BalanceSource
from marketplace.core.errors import (
    ErrorContext, InputValidationError, InsufficientBalanceError,
    UpstreamUnavailableError,
)
from marketplace.core.pricing import to_units
from marketplace.core.repository_protocols import (
    BalanceRepository, ChainBalanceLookup,
)
from marketplace.infrastructure.balance_repository import SqlBalanceRepository
from marketplace.services.settlement_locks import wallet_lock

logger = logging.getLogger(__name__)


class BalanceService:
    """Ledger reads, lazy initialization and debits."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        chain: ChainBalanceLookup | None = None,
        balances: BalanceRepository | None = None,
    ):
        self.db = db
        self.settings = settings
        self.chain = chain
        self.balances = balances or SqlBalanceRepository(db)

    @property
    def default_units(self) -> int:
        return to_units(Decimal(str(self.settings.default_balance)))

    async def get_or_init(self, address: str) -> int:
        """Return the balance in units, creating the entry on first access."""
        if not address:
            raise InputValidationError("Wallet address is required", field="address")
        async with wallet_lock(address):
            units = await self.balances.get_units(address)
            if units is not None:
                return units
            units, source = await self._opening_balance(address)
            await self.balances.create(address, units, source)
            await self.db.commit()
            logger.info(
                "Ledger entry initialized",
                extra={"address": address, "balance_source": source.value},
            )
            return units

    async def ensure_entry(self, address: str) -> int:
        """Purchase path: create a default entry if absent. No external lookup, no commit.

        Caller must hold wallet_lock(address) and owns the transaction.
        """
        units = await self.balances.get_units(address)
        if units is None:
            units = await self.balances.create(
                address, self.default_units, BalanceSource.DEFAULT,
            )
        return units

    async def debit(
        self, address: str, units: int, context: ErrorContext | None = None,
    ) -> int:
        """Atomic debit. No commit — caller owns the transaction."""
        new_units = await self.balances.debit(address, units)
        if new_units is None:
            raise InsufficientBalanceError(context)
        return new_units

    async def _opening_balance(self, address: str) -> tuple[int, BalanceSource]:
        if self.chain is None or not self.settings.balance_lookup_enabled:
            return self.default_units, BalanceSource.DEFAULT
        try:
            balance = await self.chain.get_balance(address)
            return to_units(balance), BalanceSource.CHAIN
        except UpstreamUnavailableError as e:
            if self.settings.balance_lookup_strict:
                logger.error(
                    f"Balance lookup failed: {e.message}",
                    extra={"error_code": e.code, "address": address},
                )
                raise
            logger.warning(
                f"Balance lookup failed, using default balance: {e.message}",
                extra={"error_code": e.code, "address": address},
            )
            return self.default_units, BalanceSource.DEFAULT
