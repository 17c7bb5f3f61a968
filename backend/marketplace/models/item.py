"""Item ORM — persists a catalog entry and its settlement state.

Invariants:
    - id is an autoincrement integer; the API exposes it as a string ("1", "2", ...)
    - status transitions: listed -> pending_confirmation -> sold | listed -> sold
    - status == sold implies buyer is set
    - price kept as the submitted decimal string (compared as Decimal in core/pricing)

Design Decisions:
    - Autoincrement id over count+1: ids stay unique and monotonic under
      concurrent creates
    - sold derived from status: one column is the source of truth
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.core.domain_types import ItemStatus
from marketplace.db.base import Base


class Item(Base):
    """Catalog item entity."""
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str] = mapped_column(String(2048), nullable=False)
    seller: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=ItemStatus.LISTED.value,
    )
    buyer: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True,
    )
    transaction_hash: Mapped[str | None] = mapped_column(
        String(128), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    sold_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    @property
    def sold(self) -> bool:
        return self.status == ItemStatus.SOLD.value
