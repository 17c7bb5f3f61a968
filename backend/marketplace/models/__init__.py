"""ORM Models — SQLAlchemy declarative models for the catalog and the ledger.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from marketplace.models.item import Item  # noqa: F401
from marketplace.models.wallet_balance import WalletBalance  # noqa: F401
