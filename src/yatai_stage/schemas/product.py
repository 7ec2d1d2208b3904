"""Product price and rating schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PriceCreate(BaseModel):
    """New price appended to a product's history."""

    price: int = Field(..., ge=0)


class PriceHistoryResponse(BaseModel):
    """A single price history row."""

    id: str
    product_id: str
    price: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RatingUpsert(BaseModel):
    """The viewer's rating of a product."""

    value: int = Field(..., ge=1, le=5)
