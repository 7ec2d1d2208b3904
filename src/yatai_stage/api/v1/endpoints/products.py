# src/yatai_stage/api/v1/endpoints/products.py
"""Product price and rating endpoints for the Yatai API."""

from fastapi import APIRouter, status

from yatai_stage.api.v1.dependencies import CurrentUserDep, SessionDep, to_http_error
from yatai_stage.schemas.common import DataResponse
from yatai_stage.schemas.product import PriceCreate, PriceHistoryResponse, RatingUpsert
from yatai_stage.schemas.timeline import ProductSnapshot
from yatai_stage.services import products
from yatai_stage.services.errors import ServiceError
from yatai_stage.services.projection import ProjectionBuilder, ViewerMarkers

router = APIRouter(prefix="/products", tags=["products"])


@router.post(
    "/{product_id}/prices",
    response_model=DataResponse[PriceHistoryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def append_price(
    product_id: str,
    payload: PriceCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[PriceHistoryResponse]:
    """Append a price to the product's history.

    Raises:
        HTTPException: 404 if the product is missing, 403 if the caller is not
            the seller, 400 for live releases
    """
    try:
        entry = products.append_price(db, current_user, product_id, payload.price)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    db.refresh(entry)
    return DataResponse(data=PriceHistoryResponse.model_validate(entry))


@router.put("/{product_id}/rating", response_model=DataResponse[ProductSnapshot])
async def rate_product(
    product_id: str,
    payload: RatingUpsert,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[ProductSnapshot]:
    """Set the caller's rating and return the refreshed snapshot."""
    try:
        stats = products.rate_product(db, current_user, product_id, payload.value)
        product = products.get_product(db, product_id)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    builder = ProjectionBuilder(ViewerMarkers(), {product.id: stats})
    return DataResponse(data=builder.product_snapshot(product))
