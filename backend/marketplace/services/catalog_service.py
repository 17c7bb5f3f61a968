"""Catalog Service — item listing, lookup, creation and the default seed catalog.

Invariants:
    - create_item rejects missing category/name/price and non-positive prices
    - Missing description -> "", missing image -> settings.default_image_url
    - get_item assigns settings.default_seller_address to items without a seller
    - seed_default_catalog only seeds an empty store (safe to call on every startup)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.core.errors import (
    ErrorContext, InputValidationError, ResourceNotFoundError,
)
from marketplace.core.pricing import parse_price
from marketplace.core.repository_protocols import ItemLike, ItemRepository
from marketplace.infrastructure.item_repository import SqlItemRepository

logger = logging.getLogger(__name__)

SEED_ITEMS: tuple[dict, ...] = (
    {
        "category": "football",
        "name": "Football Jersey",
        "price": "50",
        "description": "Official team jersey",
    },
    {
        "category": "basketball",
        "name": "Basketball",
        "price": "30",
        "description": "Professional basketball",
    },
    {
        "category": "cricket",
        "name": "Cricket Bat",
        "price": "40",
        "description": "Professional cricket bat",
    },
)


class CatalogService:
    """Read and append operations on the item store."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        items: ItemRepository | None = None,
    ):
        self.db = db
        self.settings = settings
        self.items = items or SqlItemRepository(db)

    async def list_items(self) -> list[ItemLike]:
        return await self.items.list_all()

    async def list_by_category(self, category: str) -> list[ItemLike]:
        return await self.items.list_by_category(category)

    async def list_purchases(self, buyer: str) -> list[ItemLike]:
        if not buyer:
            raise InputValidationError("Wallet address is required", field="address")
        return await self.items.list_by_buyer(buyer)

    async def get_item(self, item_id: str) -> ItemLike:
        """Item detail. Items without a seller get the default seller address."""
        item = await self.items.get(item_id)
        if item is None:
            raise ResourceNotFoundError(
                "Item", item_id, ErrorContext(item_id=item_id),
            )
        if not item.seller:
            await self.items.ensure_seller(item_id, self.settings.default_seller_address)
            await self.db.commit()
            item = await self.items.get(item_id)
        return item

    async def create_item(
        self,
        category: str,
        name: str,
        price: str,
        description: str | None = None,
        image: str | None = None,
        seller: str | None = None,
    ) -> ItemLike:
        if not category or not name or not price:
            raise InputValidationError("Missing required fields")
        parse_price(price)
        item = await self.items.add(
            category=category,
            name=name,
            price=price,
            description=description or "",
            image=image or self.settings.default_image_url,
            seller=seller or None,
        )
        await self.db.commit()
        logger.info(
            f"Item created: {name} ({category}) at {price}",
            extra={"item_id": str(item.id)},
        )
        return item


async def seed_default_catalog(
    db: AsyncSession, settings: Settings,
    items: ItemRepository | None = None,
) -> int:
    """Insert SEED_ITEMS into an empty store. Returns the number of items added."""
    repo = items or SqlItemRepository(db)
    if await repo.count() > 0:
        return 0
    for fields in SEED_ITEMS:
        await repo.add(image=settings.default_image_url, **fields)
    await db.commit()
    logger.info(f"Seeded catalog with {len(SEED_ITEMS)} items")
    return len(SEED_ITEMS)
