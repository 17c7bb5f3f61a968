"""Balance Route — simulated wallet balance with lazy initialization.

Invariants:
    - Missing address -> 400 "Wallet address is required"
    - Balance rendered with two decimals ("100.00")
    - Strict lookup mode surfaces upstream failure as 503
"""

from fastapi import APIRouter, Depends, Query

from marketplace.api.dependencies import get_balance_service
from marketplace.core.pricing import format_balance
from marketplace.services.balance_service import BalanceService

router = APIRouter(prefix="/api/marketplace", tags=["balance"])


@router.get("/balance")
async def get_balance(
    address: str | None = Query(None),
    ledger: BalanceService = Depends(get_balance_service),
):
    units = await ledger.get_or_init((address or "").strip())
    return {"balance": format_balance(units)}
