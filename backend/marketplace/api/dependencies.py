"""Route Dependencies — per-request service construction.

Invariants:
    - Every service in a request shares the request's AsyncSession
    - The chain client is process-wide (app.state), created in the lifespan

Design Decisions:
    - Dependencies over module globals: tests override get_db / get_chain_client
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import get_settings
from marketplace.core.repository_protocols import ChainBalanceLookup
from marketplace.infrastructure.database import get_db
from marketplace.services.balance_service import BalanceService
from marketplace.services.catalog_service import CatalogService
from marketplace.services.purchase_service import PurchaseService


def get_chain_client(request: Request) -> ChainBalanceLookup | None:
    return getattr(request.app.state, "chain_client", None)


def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db, get_settings())


def get_balance_service(
    db: AsyncSession = Depends(get_db),
    chain: ChainBalanceLookup | None = Depends(get_chain_client),
) -> BalanceService:
    return BalanceService(db, get_settings(), chain=chain)


def get_purchase_service(db: AsyncSession = Depends(get_db)) -> PurchaseService:
    return PurchaseService(db, get_settings())
