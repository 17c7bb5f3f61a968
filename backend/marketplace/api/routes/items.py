"""Item Routes — catalog listing, detail, creation and purchase history.

Invariants:
    - GET /items returns every item in insertion order
    - GET /items/{category} is case-insensitive; unknown category -> empty list
    - GET /items-detail/{item_id} -> 404 for unknown ids
    - POST /items -> 201 {item}
"""

from fastapi import APIRouter, Depends, Query, status

from marketplace.api.dependencies import get_catalog_service
from marketplace.schemas.item import ItemCreate, ItemResponse, serialize_items
from marketplace.services.catalog_service import CatalogService

router = APIRouter(prefix="/api/marketplace", tags=["items"])


@router.get("/items")
async def list_items(catalog: CatalogService = Depends(get_catalog_service)):
    """All catalog items."""
    return {"items": serialize_items(await catalog.list_items())}


@router.get("/items/{category}")
async def list_items_by_category(
    category: str, catalog: CatalogService = Depends(get_catalog_service),
):
    """Items in one category."""
    return {"items": serialize_items(await catalog.list_by_category(category))}


@router.get("/items-detail/{item_id}")
async def get_item_detail(
    item_id: str, catalog: CatalogService = Depends(get_catalog_service),
):
    item = await catalog.get_item(item_id)
    return {"item": ItemResponse.from_model(item).to_json()}


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def create_item(
    body: ItemCreate, catalog: CatalogService = Depends(get_catalog_service),
):
    """Append a new item to the catalog."""
    item = await catalog.create_item(
        category=body.category,
        name=body.name,
        price=body.price,
        description=body.description,
        image=body.image,
        seller=body.seller,
    )
    return {"item": ItemResponse.from_model(item).to_json()}


@router.get("/purchases")
async def list_purchases(
    address: str | None = Query(None),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Items bought by a wallet address."""
    return {"items": serialize_items(await catalog.list_purchases(address or ""))}
