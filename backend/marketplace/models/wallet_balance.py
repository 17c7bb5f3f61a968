"""WalletBalance ORM — one simulated ledger entry per wallet address.

Invariants:
    - address is the primary key (format not validated)
    - balance_units >= 0 (enforced by conditional debit and a CHECK constraint)
    - balance_units are 1/10,000 of a currency unit (core/pricing.BALANCE_SCALE)
    - source records whether the opening balance came from the chain or the default
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, CheckConstraint, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.core.domain_types import BalanceSource
from marketplace.db.base import Base


class WalletBalance(Base):
    """Ledger entry keyed by wallet address."""
    __tablename__ = "wallet_balances"
    __table_args__ = (
        CheckConstraint("balance_units >= 0", name="ck_wallet_balance_non_negative"),
    )

    address: Mapped[str] = mapped_column(String(128), primary_key=True)
    balance_units: Mapped[int] = mapped_column(BigInteger, nullable=False)
    source: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BalanceSource.DEFAULT.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
