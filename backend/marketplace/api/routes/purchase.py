"""Purchase Routes — ledger purchase and on-chain settlement callbacks.

Invariants:
    - POST /purchase: 200 {success, item, newBalance, message}; 400 on validation,
      price mismatch or insufficient funds; 404 unknown item; 409 already sold
    - POST /purchase-complete | /purchase-pending | /purchase-revert:
      200 {success, item, message}; 404 unknown item; 409 illegal transition
"""

from fastapi import APIRouter, Depends

from marketplace.api.dependencies import get_purchase_service
from marketplace.core.pricing import format_balance
from marketplace.schemas.item import ItemResponse
from marketplace.schemas.purchase import (
    ChainRevertRequest, ChainSettlementRequest, PurchaseRequest,
)
from marketplace.services.purchase_service import PurchaseService

router = APIRouter(prefix="/api/marketplace", tags=["purchase"])


@router.post("/purchase")
async def purchase_item(
    body: PurchaseRequest,
    purchases: PurchaseService = Depends(get_purchase_service),
):
    """Buy an item with the simulated ledger balance."""
    item, new_units = await purchases.purchase(body.item_id, body.price, body.address)
    return {
        "success": True,
        "item": ItemResponse.from_model(item).to_json(),
        "newBalance": format_balance(new_units),
        "message": "Item purchased successfully",
    }


@router.post("/purchase-complete")
async def purchase_complete(
    body: ChainSettlementRequest,
    purchases: PurchaseService = Depends(get_purchase_service),
):
    """Record a confirmed on-chain purchase."""
    item = await purchases.complete(body.item_id, body.transaction_hash, body.buyer)
    return {
        "success": True,
        "item": ItemResponse.from_model(item).to_json(),
        "message": "Item purchase recorded successfully",
    }


@router.post("/purchase-pending")
async def purchase_pending(
    body: ChainSettlementRequest,
    purchases: PurchaseService = Depends(get_purchase_service),
):
    """Reserve an item while its on-chain transaction is unconfirmed."""
    item = await purchases.submit_pending(
        body.item_id, body.transaction_hash, body.buyer,
    )
    return {
        "success": True,
        "item": ItemResponse.from_model(item).to_json(),
        "message": "Item reserved pending confirmation",
    }


@router.post("/purchase-revert")
async def purchase_revert(
    body: ChainRevertRequest,
    purchases: PurchaseService = Depends(get_purchase_service),
):
    """Release a reservation whose on-chain transaction failed."""
    item = await purchases.revert(body.item_id, body.transaction_hash)
    return {
        "success": True,
        "item": ItemResponse.from_model(item).to_json(),
        "message": "Item reservation released",
    }
