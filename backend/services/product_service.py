"""
Product service: catalog CRUD.

Partial updates go through ProductUpdate: only fields that are given are
written, and each field maps to a fixed column, so the UPDATE statement is
always parameterised.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import OrderItem, Product
from domain.errors import ConflictError, NotFoundError, ValidationError


class _Unset:
    def __repr__(self):
        return "UNSET"


UNSET = _Unset()

# Columns a partial update may set to NULL
_CLEARABLE = {"image_url"}


@dataclass
class ProductUpdate:
    """
    Explicit optional fields. UNSET means "leave unchanged"; None clears the
    column and is only accepted for image_url. description has no NULL
    state, so it is cleared by sending "".
    """
    name: str | _Unset = UNSET
    price: Decimal | _Unset = UNSET
    description: str | _Unset = UNSET
    image_url: str | None | _Unset = UNSET
    stock_quantity: int | _Unset = UNSET

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) is None and f.name not in _CLEARABLE:
                raise ValidationError("cannot be null", field=f.name)
        if isinstance(self.name, str) and not self.name.strip():
            raise ValidationError("must not be empty", field="name")
        if self.price is not UNSET and Decimal(str(self.price)) <= 0:
            raise ValidationError("must be greater than 0", field="price")
        if self.stock_quantity is not UNSET and self.stock_quantity < 0:
            raise ValidationError("must be zero or more", field="stock_quantity")

    def changes(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


_UPDATE_COLUMNS = {
    "name": Product.name,
    "price": Product.price,
    "description": Product.description,
    "image_url": Product.image_url,
    "stock_quantity": Product.stock_quantity,
}


def product_to_dict(p: Product) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "price": p.price,
        "description": p.description,
        "image_url": p.image_url,
        "stock_quantity": p.stock_quantity,
        "created_at": p.created_at.isoformat() if p.created_at else None,
        "updated_at": p.updated_at.isoformat() if p.updated_at else None,
    }


async def create_product(
    db: AsyncSession,
    *,
    name: str,
    price: Decimal,
    description: str,
    image_url: str | None = None,
    stock_quantity: int = 0,
) -> Product:
    if stock_quantity < 0:
        raise ValidationError("must be zero or more", field="stock_quantity")
    product = Product(
        name=name,
        price=price,
        description=description,
        image_url=image_url,
        stock_quantity=stock_quantity,
    )
    db.add(product)
    await db.flush()
    return product


async def list_products(db: AsyncSession, *, limit: int = 50, offset: int = 0) -> tuple[list[Product], int]:
    res = await db.execute(
        select(Product)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(limit)
        .offset(offset)
    )
    total = await db.scalar(select(func.count(Product.id)))
    return list(res.scalars().all()), total or 0


async def get_product(db: AsyncSession, *, product_id: int) -> Product:
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product", str(product_id))
    return product


async def update_product(db: AsyncSession, *, product_id: int, changes: ProductUpdate) -> Product:
    """Apply the set fields of ``changes`` in one UPDATE and return the fresh row."""
    values = {_UPDATE_COLUMNS[name]: value for name, value in changes.changes().items()}
    if not values:
        raise ValidationError("No fields to update")
    values[Product.updated_at] = datetime.utcnow()

    res = await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(values)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        raise NotFoundError("Product", str(product_id))

    product = await db.get(Product, product_id, populate_existing=True)
    return product


async def delete_product(db: AsyncSession, *, product_id: int) -> int:
    await get_product(db, product_id=product_id)

    # Order items keep a foreign key to the product for order history
    referenced = await db.scalar(
        select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id)
    )
    if referenced:
        raise ConflictError(
            f"Cannot delete product {product_id}: referenced by {referenced} order item(s)"
        )

    await db.execute(delete(Product).where(Product.id == product_id))
    return product_id
