"""
Order service: transactional order placement and order lifecycle.

place_order() validates the request up front, then inside ONE transaction:
inserts the order header, and for every line (in input order) re-reads the
product's stock under a row lock, inserts the order item and applies a
guarded stock decrement. Any failure rolls everything back, so callers never
observe a partial order or a partial decrement.

Overselling under concurrent checkouts is prevented twice over:
  - SELECT ... FOR UPDATE on the product row (where the dialect supports it;
    SQLite serialises writers instead)
  - UPDATE ... WHERE stock_quantity >= :qty, with the affected row count checked
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from db_models import Order, OrderItem, Product, User
from domain.constants import MAX_SHIPPING_ADDRESS_LENGTH, MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS
from domain.enums import OrderStatus, PriceSource
from domain.errors import (
    DomainError,
    NotFoundError,
    OutOfStockError,
    ProductNotFoundError,
    TransactionFailureError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_CENT = Decimal(1).scaleb(-MONEY_DECIMAL_PLACES)
_MAX_INTEGER_DIGITS = MONEY_MAX_DIGITS - MONEY_DECIMAL_PLACES


@dataclass
class OrderLine:
    product_id: int
    quantity: int
    price: Decimal | None = None


@dataclass
class PlacedOrder:
    order_id: int
    total: Decimal
    status: OrderStatus
    items: list[OrderLine] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"order_id": self.order_id, "total": self.total, "status": self.status.value}


# ── Input validation ────────────────────────────────────────────────

def _positive_int(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("must be a positive integer", field=field_name)
    return value


def _money(value, field_name: str) -> Decimal:
    """Positive amount with at most cent precision that fits Numeric(10, 2)."""
    if value is None or isinstance(value, bool):
        raise ValidationError("is required", field=field_name)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("must be a number", field=field_name)
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("must be greater than 0", field=field_name)
    if amount.adjusted() >= _MAX_INTEGER_DIGITS:
        raise ValidationError(
            f"must be less than {Decimal(10) ** _MAX_INTEGER_DIGITS}", field=field_name
        )
    try:
        rounded = amount.quantize(_CENT)
    except InvalidOperation:
        raise ValidationError("must be a number", field=field_name)
    if rounded != amount:
        raise ValidationError(
            f"must have at most {MONEY_DECIMAL_PLACES} decimal places", field=field_name
        )
    return rounded


def _coerce_line(item, index: int, price_required: bool) -> OrderLine:
    """Accept an OrderLine or a mapping with product_id / quantity / price."""
    where = f"items[{index}]"
    if isinstance(item, OrderLine):
        raw = {"product_id": item.product_id, "quantity": item.quantity, "price": item.price}
    elif isinstance(item, Mapping):
        raw = item
    else:
        raise ValidationError("must be an object with product_id, quantity, price", field=where)

    missing = [k for k in ("product_id", "quantity") if raw.get(k) is None]
    if price_required and raw.get("price") is None:
        missing.append("price")
    if missing:
        raise ValidationError(
            f"Item {index + 1} is missing required fields: {', '.join(missing)}",
            details={"index": index, "missing": missing},
        )

    price = raw.get("price")
    return OrderLine(
        product_id=_positive_int(raw["product_id"], f"{where}.product_id"),
        quantity=_positive_int(raw["quantity"], f"{where}.quantity"),
        price=_money(price, f"{where}.price") if price is not None else None,
    )


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid status {value!r}; expected one of: {allowed}", field="status")


# ── Manager ─────────────────────────────────────────────────────────

class OrderTransactionManager:
    """
    Owns the order workflow against an injected session factory.

    Args:
        session_factory: async_sessionmaker bound to the store's pooled engine
        price_source: CLIENT stores the submitted item prices and total;
            CATALOG re-reads Product.price inside the transaction and stores
            the recomputed total
        verify_buyer: reject orders whose buyer id has no users row
        expose_store_errors: include the driver's error text in
            TransactionFailureError details (diagnostic mode)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        price_source: PriceSource = PriceSource.CLIENT,
        verify_buyer: bool = False,
        expose_store_errors: bool = False,
    ):
        self._session_factory = session_factory
        self.price_source = PriceSource(price_source)
        self.verify_buyer = verify_buyer
        self.expose_store_errors = expose_store_errors

    def _store_failure(self, exc: SQLAlchemyError, action: str) -> TransactionFailureError:
        details = {}
        if self.expose_store_errors:
            details["store_error"] = str(getattr(exc, "orig", None) or exc)
        return TransactionFailureError(f"Failed to {action}. Please retry.", details=details)

    # ── placeOrder ──────────────────────────────────────────────────

    async def place_order(
        self,
        *,
        buyer_id: int,
        declared_total,
        shipping_address: str | None,
        items: Sequence,
    ) -> PlacedOrder:
        buyer_id = _positive_int(buyer_id, "user_id")
        total = _money(declared_total, "total")
        if shipping_address is not None:
            if not isinstance(shipping_address, str):
                raise ValidationError("must be text", field="shipping_address")
            if len(shipping_address) > MAX_SHIPPING_ADDRESS_LENGTH:
                raise ValidationError(
                    f"must be at most {MAX_SHIPPING_ADDRESS_LENGTH} characters",
                    field="shipping_address",
                )
        if not items or isinstance(items, (str, bytes, Mapping)):
            raise ValidationError("Items are required and must be a non-empty list", field="items")

        price_required = self.price_source is PriceSource.CLIENT
        lines = [_coerce_line(item, i, price_required) for i, item in enumerate(items)]

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    placed = await self._place_in_transaction(
                        session,
                        buyer_id=buyer_id,
                        total=total,
                        shipping_address=shipping_address or None,
                        lines=lines,
                    )
        except DomainError as exc:
            logger.info(f"Order rejected for user {buyer_id}: {exc.message}")
            raise
        except SQLAlchemyError as exc:
            logger.error(f"Order transaction failed for user {buyer_id}: {exc}", exc_info=True)
            raise self._store_failure(exc, "create order") from exc

        logger.info(
            f"Order {placed.order_id} placed: user={buyer_id} items={len(placed.items)} total={placed.total}"
        )
        return placed

    async def _place_in_transaction(
        self,
        session: AsyncSession,
        *,
        buyer_id: int,
        total: Decimal,
        shipping_address: str | None,
        lines: list[OrderLine],
    ) -> PlacedOrder:
        if self.verify_buyer:
            user_id = await session.scalar(select(User.id).where(User.id == buyer_id))
            if user_id is None:
                raise NotFoundError("User", str(buyer_id))

        order = Order(
            user_id=buyer_id,
            total=total,
            shipping_address=shipping_address,
            status=OrderStatus.PENDING.value,
            created_at=datetime.utcnow(),
        )
        session.add(order)
        await session.flush()

        stored: list[OrderLine] = []
        computed_total = Decimal("0.00")

        for line in lines:
            res = await session.execute(
                select(Product.id, Product.price, Product.stock_quantity)
                .where(Product.id == line.product_id)
                .with_for_update()
            )
            product = res.one_or_none()
            if product is None:
                raise ProductNotFoundError(line.product_id)
            if product.stock_quantity < line.quantity:
                raise OutOfStockError(line.product_id, product.stock_quantity, line.quantity)

            if self.price_source is PriceSource.CATALOG:
                unit_price = Decimal(product.price).quantize(_CENT)
            else:
                unit_price = line.price

            session.add(
                OrderItem(
                    order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=unit_price,
                )
            )

            dec = await session.execute(
                update(Product)
                .where(Product.id == line.product_id, Product.stock_quantity >= line.quantity)
                .values(
                    stock_quantity=Product.stock_quantity - line.quantity,
                    updated_at=datetime.utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            if dec.rowcount != 1:
                # A concurrent order consumed the stock between read and decrement
                available = await session.scalar(
                    select(Product.stock_quantity).where(Product.id == line.product_id)
                )
                raise OutOfStockError(line.product_id, available or 0, line.quantity)

            computed_total += unit_price * line.quantity
            stored.append(OrderLine(line.product_id, line.quantity, unit_price))

        if self.price_source is PriceSource.CATALOG:
            computed_total = computed_total.quantize(_CENT)
            if computed_total != total:
                logger.warning(
                    f"Order {order.id}: declared total {total} differs from catalog total {computed_total}; "
                    f"storing catalog total"
                )
            order.total = computed_total
            total = computed_total

        await session.flush()
        return PlacedOrder(order_id=order.id, total=total, status=OrderStatus.PENDING, items=stored)

    # ── updateOrderStatus ───────────────────────────────────────────

    async def update_order_status(self, order_id: int, new_status) -> OrderStatus:
        status = parse_status(new_status)
        order_id = _positive_int(order_id, "order_id")

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    res = await session.execute(
                        update(Order)
                        .where(Order.id == order_id)
                        .values(status=status.value)
                        .execution_options(synchronize_session=False)
                    )
                    if res.rowcount == 0:
                        raise NotFoundError("Order", str(order_id))
        except SQLAlchemyError as exc:
            logger.error(f"Status update failed for order {order_id}: {exc}", exc_info=True)
            raise self._store_failure(exc, "update order status") from exc

        logger.info(f"Order {order_id} status -> {status.value}")
        return status

    # ── getOrder ────────────────────────────────────────────────────

    async def get_order(self, order_id: int) -> dict:
        order_id = _positive_int(order_id, "order_id")

        try:
            async with self._session_factory() as session:
                order = await session.get(Order, order_id)
                if order is None:
                    raise NotFoundError("Order", str(order_id))

                res = await session.execute(
                    select(
                        OrderItem.product_id,
                        OrderItem.quantity,
                        OrderItem.price,
                        Product.name,
                        Product.image_url,
                        Product.description,
                    )
                    .join(Product, OrderItem.product_id == Product.id)
                    .where(OrderItem.order_id == order_id)
                    .order_by(OrderItem.product_id, OrderItem.id)
                )
                rows = res.all()
        except SQLAlchemyError as exc:
            logger.error(f"Failed to load order {order_id}: {exc}", exc_info=True)
            raise self._store_failure(exc, "load order") from exc

        return {
            **_order_header(order),
            "items": [
                {
                    "product_id": r.product_id,
                    "product_name": r.name,
                    "quantity": r.quantity,
                    "price": r.price,
                    "image_url": r.image_url,
                    "description": r.description,
                }
                for r in rows
            ],
        }

    # ── listing ─────────────────────────────────────────────────────

    async def list_orders(
        self,
        *,
        limit: int = 50,
        offset: int = 0,
        user_id: int | None = None,
    ) -> tuple[list[dict], int]:
        """Order headers newest first, each with its item_count. Returns (page, total)."""
        query = (
            select(Order, func.count(OrderItem.id).label("item_count"))
            .outerjoin(OrderItem, OrderItem.order_id == Order.id)
            .group_by(Order.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .offset(offset)
        )
        count_query = select(func.count(Order.id))
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
            count_query = count_query.where(Order.user_id == user_id)

        try:
            async with self._session_factory() as session:
                rows = (await session.execute(query)).all()
                total = await session.scalar(count_query)
        except SQLAlchemyError as exc:
            logger.error(f"Failed to list orders: {exc}", exc_info=True)
            raise self._store_failure(exc, "list orders") from exc

        return [{**_order_header(o), "item_count": count} for o, count in rows], total or 0


def _order_header(order: Order) -> dict:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "total": order.total,
        "shipping_address": order.shipping_address,
        "status": order.status,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }
