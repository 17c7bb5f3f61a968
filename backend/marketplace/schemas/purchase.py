"""Purchase Schemas — bodies for ledger purchases and on-chain settlement callbacks.

Invariants:
    - Every field required and non-blank ("Missing required fields" otherwise)
    - itemId and price accept JSON numbers as well as strings
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_str(v):
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v.strip() if isinstance(v, str) else v


class PurchaseRequest(BaseModel):
    """POST /purchase body."""
    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId", min_length=1)
    price: str = Field(min_length=1)
    address: str = Field(min_length=1, max_length=128)

    @field_validator("item_id", "price", "address", mode="before")
    @classmethod
    def coerce(cls, v):
        return _coerce_str(v)


class ChainSettlementRequest(BaseModel):
    """POST /purchase-complete and /purchase-pending body."""
    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId", min_length=1)
    transaction_hash: str = Field(alias="transactionHash", min_length=1, max_length=128)
    buyer: str = Field(min_length=1, max_length=128)

    @field_validator("item_id", "transaction_hash", "buyer", mode="before")
    @classmethod
    def coerce(cls, v):
        return _coerce_str(v)


class ChainRevertRequest(BaseModel):
    """POST /purchase-revert body."""
    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId", min_length=1)
    transaction_hash: str = Field(alias="transactionHash", min_length=1, max_length=128)

    @field_validator("item_id", "transaction_hash", mode="before")
    @classmethod
    def coerce(cls, v):
        return _coerce_str(v)
