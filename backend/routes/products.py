"""
Product endpoints: catalog listing and CRUD.
"""

import logging
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import Pagination, pagination_params
from domain.responses import paginated_response, success_response
from models import ProductCreateRequest, ProductUpdateRequest
from services import product_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("")
async def list_products(
    page: Pagination = Depends(pagination_params),
    db: AsyncSession = Depends(get_db),
):
    products, total = await product_service.list_products(db, limit=page["limit"], offset=page["offset"])
    return paginated_response(
        [product_service.product_to_dict(p) for p in products],
        limit=page["limit"],
        offset=page["offset"],
        total=total,
    )


@router.get("/{product_id}")
async def get_product(
    product_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
):
    product = await product_service.get_product(db, product_id=product_id)
    return success_response(data=product_service.product_to_dict(product))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    product = await product_service.create_product(
        db,
        name=request.name,
        price=request.price,
        description=request.description,
        image_url=request.image_url,
        stock_quantity=request.stock_quantity,
    )
    await db.commit()
    await db.refresh(product)
    logger.info(f"Product {product.id} created")
    return success_response(data=product_service.product_to_dict(product))


@router.put("/{product_id}")
async def update_product(
    request: ProductUpdateRequest,
    product_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Partial update: only fields present in the body are written; imageUrl: null clears the image."""
    changes = product_service.ProductUpdate(**request.model_dump(exclude_unset=True))
    product = await product_service.update_product(db, product_id=product_id, changes=changes)
    await db.commit()
    return success_response(data=product_service.product_to_dict(product))


@router.delete("/{product_id}")
async def delete_product(
    product_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
):
    deleted_id = await product_service.delete_product(db, product_id=product_id)
    await db.commit()
    logger.info(f"Product {deleted_id} deleted")
    return success_response(data={"id": deleted_id, "message": "Product deleted successfully"})
