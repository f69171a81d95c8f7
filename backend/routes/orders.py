"""
Order endpoints: checkout, order lookup and status updates.
"""

import logging
from fastapi import APIRouter, Depends, Path, Query, status

from deps import Pagination, get_order_manager, pagination_params
from domain.responses import paginated_response, success_response
from models import OrderStatusUpdateRequest, PlaceOrderRequest
from services.order_service import OrderTransactionManager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def place_order(
    request: PlaceOrderRequest,
    manager: OrderTransactionManager = Depends(get_order_manager),
):
    """
    Place an order atomically.

    Validates stock for every line, writes the order and its items and
    decrements stock in a single transaction. On any failure nothing is
    written.
    """
    items = [item.model_dump() for item in request.items] if request.items is not None else []

    placed = await manager.place_order(
        buyer_id=request.user_id,
        declared_total=request.total,
        shipping_address=request.shipping_address,
        items=items,
    )
    return success_response(data=placed.as_dict())


@router.get("")
async def list_orders(
    user_id: int | None = Query(None, alias="userId", ge=1),
    page: Pagination = Depends(pagination_params),
    manager: OrderTransactionManager = Depends(get_order_manager),
):
    orders, total = await manager.list_orders(
        limit=page["limit"],
        offset=page["offset"],
        user_id=user_id,
    )
    return paginated_response(orders, limit=page["limit"], offset=page["offset"], total=total)


@router.get("/{order_id}")
async def get_order(
    order_id: int = Path(..., ge=1),
    manager: OrderTransactionManager = Depends(get_order_manager),
):
    order = await manager.get_order(order_id)
    return success_response(data=order)


@router.put("/{order_id}/status")
async def update_order_status(
    request: OrderStatusUpdateRequest,
    order_id: int = Path(..., ge=1),
    manager: OrderTransactionManager = Depends(get_order_manager),
):
    new_status = await manager.update_order_status(order_id, request.status)
    return success_response(data={"order_id": order_id, "status": new_status.value})
