"""
Seeding and inspection helpers shared by the test modules.

Each helper opens and closes its own session so callers never hold a
stale identity map across an order transaction.
"""
from decimal import Decimal

from sqlalchemy import func, select

from db_models import Order, OrderItem, Product, User


async def seed_product(
    session_factory,
    *,
    name: str = "Test Product",
    price: str = "9.99",
    stock: int = 5,
    description: str = "A test product",
    image_url: str | None = None,
) -> int:
    async with session_factory() as session:
        product = Product(
            name=name,
            price=Decimal(price),
            description=description,
            image_url=image_url,
            stock_quantity=stock,
        )
        session.add(product)
        await session.commit()
        return product.id


async def seed_user(session_factory, *, email: str = "buyer@example.com") -> int:
    async with session_factory() as session:
        user = User(email=email, password_hash="not-a-real-hash")
        session.add(user)
        await session.commit()
        return user.id


async def read_stock(session_factory, product_id: int) -> int:
    async with session_factory() as session:
        product = await session.get(Product, product_id)
        return product.stock_quantity


async def count_rows(session_factory) -> tuple[int, int]:
    """(orders, order_items) row counts."""
    async with session_factory() as session:
        orders = await session.scalar(select(func.count(Order.id)))
        items = await session.scalar(select(func.count(OrderItem.id)))
        return orders, items
