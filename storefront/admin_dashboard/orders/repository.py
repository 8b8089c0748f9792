import uuid

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront.db.models import Order, OrderItem, OrderStatus


class OrderRepository:
    """Read-only view over order history."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def has_user_purchased_product(self, user_uid: uuid.UUID, product_uid: uuid.UUID) -> bool:
        """True if the user has a delivered order containing the product."""
        statement = (
            select(OrderItem.uid)
            .join(Order, Order.uid == OrderItem.order_uid)
            .where(
                Order.user_uid == user_uid,
                Order.status == OrderStatus.delivered,
                OrderItem.product_uid == product_uid,
            )
            .limit(1)
        )
        result = await self.session.exec(statement)
        return result.first() is not None
