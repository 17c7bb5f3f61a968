"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the core rules that decide transitions are never async themselves
    - transition() is compare-and-set: it returns False when the stored status
      no longer equals `expected`, so a concurrent writer can never be overwritten
"""

from decimal import Decimal
from typing import Protocol

from marketplace.core.domain_types import BalanceSource, ItemStatus


class ItemLike(Protocol):
    """Structural contract for catalog items passed between services and routes."""
    id: int
    category: str
    name: str
    price: str
    description: str
    image: str
    seller: str | None
    status: str
    buyer: str | None
    transaction_hash: str | None

    @property
    def sold(self) -> bool: ...


class ItemRepository(Protocol):
    """Contract for catalog persistence — implemented by shell."""
    async def list_all(self) -> list[ItemLike]: ...
    async def list_by_category(self, category: str) -> list[ItemLike]: ...
    async def list_by_buyer(self, buyer: str) -> list[ItemLike]: ...
    async def get(self, item_id: str) -> ItemLike | None: ...
    async def count(self) -> int: ...
    async def add(self, **fields: object) -> ItemLike: ...
    async def ensure_seller(self, item_id: str, seller: str) -> None: ...
    async def transition(
        self,
        item_id: str,
        expected: ItemStatus,
        target: ItemStatus,
        **fields: object,
    ) -> bool: ...


class BalanceRepository(Protocol):
    """Contract for ledger persistence — implemented by shell."""
    async def get_units(self, address: str) -> int | None: ...
    async def create(
        self, address: str, units: int, source: BalanceSource,
    ) -> int: ...
    async def debit(self, address: str, units: int) -> int | None: ...


class ChainBalanceLookup(Protocol):
    """Contract for the read-only external balance query."""
    async def get_balance(self, address: str) -> Decimal: ...
