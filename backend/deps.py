"""
Shared FastAPI dependencies.

Routers import from here so the store handle and the order manager are
resolved from ``app.state`` in one place (tests override these).
"""

from __future__ import annotations

from typing import TypedDict

from fastapi import Query, Request

from services.order_service import OrderTransactionManager


class Pagination(TypedDict):
    limit: int
    offset: int


def pagination_params(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0, le=100_000),
) -> Pagination:
    return {"limit": limit, "offset": offset}


def get_order_manager(request: Request) -> OrderTransactionManager:
    """The OrderTransactionManager built during app startup."""
    return request.app.state.order_manager
