"""Balance Repository — SQLAlchemy implementation of core BalanceRepository.

Invariants:
    - debit() is one conditional UPDATE (balance_units >= amount): never goes negative
    - debit() returns None when funds are insufficient or the entry is missing
    - Repository never commits; the calling service owns the transaction
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.domain_types import BalanceSource
from marketplace.models.wallet_balance import WalletBalance


class SqlBalanceRepository:
    """Ledger persistence backed by the `wallet_balances` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_units(self, address: str) -> int | None:
        result = await self.db.execute(
            select(WalletBalance.balance_units)
            .where(WalletBalance.address == address)
        )
        return result.scalar_one_or_none()

    async def create(
        self, address: str, units: int, source: BalanceSource,
    ) -> int:
        self.db.add(WalletBalance(
            address=address, balance_units=units, source=source.value,
        ))
        await self.db.flush()
        return units

    async def debit(self, address: str, units: int) -> int | None:
        result = await self.db.execute(
            update(WalletBalance)
            .where(
                WalletBalance.address == address,
                WalletBalance.balance_units >= units,
            )
            .values(balance_units=WalletBalance.balance_units - units)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.get_units(address)
