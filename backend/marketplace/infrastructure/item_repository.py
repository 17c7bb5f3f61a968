"""Item Repository — SQLAlchemy implementation of core ItemRepository.

Invariants:
    - Listing order is insertion order (ascending id)
    - Category match is case-insensitive exact match
    - transition() is a single conditional UPDATE (compare-and-set on status)
    - Repository never commits; the calling service owns the transaction

Design Decisions:
    - Non-numeric or out-of-range ids resolve to None instead of raising: the API
      treats them as unknown
    - synchronize_session=False + populate_existing reads: the identity map never
      serves a status that the conditional UPDATE changed underneath it
"""

from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.domain_types import ItemStatus
from marketplace.models.item import Item


_MAX_PK = 2 ** 31 - 1


def _parse_pk(item_id: str) -> int | None:
    item_id = str(item_id).strip()
    if not (item_id.isascii() and item_id.isdigit()):
        return None
    pk = int(item_id)
    # Out-of-range ids can't exist in an Integer column
    return pk if pk <= _MAX_PK else None


class SqlItemRepository:
    """Catalog persistence backed by the `items` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> list[Item]:
        result = await self.db.execute(select(Item).order_by(Item.id))
        return list(result.scalars().all())

    async def list_by_category(self, category: str) -> list[Item]:
        result = await self.db.execute(
            select(Item)
            .where(func.lower(Item.category) == category.lower())
            .order_by(Item.id)
        )
        return list(result.scalars().all())

    async def list_by_buyer(self, buyer: str) -> list[Item]:
        result = await self.db.execute(
            select(Item).where(Item.buyer == buyer).order_by(Item.id)
        )
        return list(result.scalars().all())

    async def get(self, item_id: str) -> Item | None:
        pk = _parse_pk(item_id)
        if pk is None:
            return None
        return await self.db.get(Item, pk, populate_existing=True)

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Item))
        return result.scalar_one()

    async def add(self, **fields: object) -> Item:
        item = Item(**fields)
        self.db.add(item)
        await self.db.flush()
        return item

    async def ensure_seller(self, item_id: str, seller: str) -> None:
        pk = _parse_pk(item_id)
        if pk is None:
            return
        await self.db.execute(
            update(Item)
            .where(Item.id == pk, Item.seller.is_(None))
            .values(seller=seller)
            .execution_options(synchronize_session=False)
        )

    async def transition(
        self,
        item_id: str,
        expected: ItemStatus,
        target: ItemStatus,
        **fields: object,
    ) -> bool:
        """Move item from `expected` to `target`. False if the status already changed."""
        pk = _parse_pk(item_id)
        if pk is None:
            return False
        values = dict(fields)
        values["status"] = target.value
        if target == ItemStatus.SOLD:
            values["sold_at"] = datetime.now(timezone.utc)
        result = await self.db.execute(
            update(Item)
            .where(Item.id == pk, Item.status == expected.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
