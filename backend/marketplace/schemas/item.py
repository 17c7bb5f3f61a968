"""Item Schemas — catalog request validation and the public item shape.

Invariants:
    - ItemCreate: category, name, price required and non-blank
    - ItemCreate.price accepts JSON strings or numbers, stored as a string,
      and must be a positive finite decimal
    - ItemResponse.id is always a string; sold derived from status
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketplace.core.errors import InputValidationError
from marketplace.core.pricing import parse_price
from marketplace.core.repository_protocols import ItemLike


class ItemCreate(BaseModel):
    """Item creation body."""
    category: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    price: str = Field(min_length=1, max_length=50)
    description: str | None = Field(None, max_length=5000)
    image: str | None = Field(None, max_length=2048)
    seller: str | None = Field(None, max_length=128)

    @field_validator("category", "name", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: str) -> str:
        try:
            parse_price(v)
        except InputValidationError as e:
            raise ValueError(e.message)
        return v


class ItemResponse(BaseModel):
    """Public item representation."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    category: str
    name: str
    price: str
    description: str
    image: str
    seller: str | None = None
    sold: bool = False
    buyer: str | None = None
    transaction_hash: str | None = Field(None, serialization_alias="transactionHash")
    status: str

    @classmethod
    def from_model(cls, item: ItemLike) -> "ItemResponse":
        return cls(
            id=str(item.id),
            category=item.category,
            name=item.name,
            price=item.price,
            description=item.description,
            image=item.image,
            seller=item.seller,
            sold=item.sold,
            buyer=item.buyer,
            transaction_hash=item.transaction_hash,
            status=item.status,
        )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


def serialize_items(items: list[ItemLike]) -> list[dict]:
    return [ItemResponse.from_model(i).to_json() for i in items]
