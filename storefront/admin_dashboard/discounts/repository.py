from typing import List, Optional
import uuid

from sqlalchemy import delete, func, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront.db.models import Discount, DiscountUsage
from storefront.db.repository import Repository
from storefront.errors import DiscountNotFound


def canonical_code(code: str) -> str:
    return code.strip().upper()


class DiscountRepository:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.discounts = Repository(session, Discount, not_found=DiscountNotFound)
        self.usages = Repository(session, DiscountUsage)

    async def find_by_code(self, code: str) -> Optional[Discount]:
        return await self.discounts.find_one(code=canonical_code(code))

    async def find_active(self) -> List[Discount]:
        statement = select(Discount).where(Discount.is_active == True).order_by(Discount.created_at.desc())  # noqa: E712
        result = await self.session.exec(statement)
        return list(result.all())

    async def list_all(self) -> List[Discount]:
        result = await self.session.exec(select(Discount).order_by(Discount.created_at.desc()))
        return list(result.all())

    async def count_user_usage(self, discount_uid: uuid.UUID, user_uid: uuid.UUID) -> int:
        return await self.usages.count(discount_uid=discount_uid, user_uid=user_uid)

    async def increment_usage(self, discount: Discount, user_uid: uuid.UUID, order_subtotal: float, discount_amount: float) -> bool:
        """Bump ``used_count`` in a single UPDATE and record the usage.

        The cap is part of the WHERE clause so two concurrent applications can
        never push the counter past ``usage_limit``.

        Returns:
            bool: False if the code hit its cap before this update ran
        """
        statement = (
            update(Discount)
            .where(Discount.uid == discount.uid)
            .where(or_(Discount.usage_limit.is_(None), Discount.used_count < Discount.usage_limit))
            .values(used_count=Discount.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.exec(statement)
        if result.rowcount == 0:
            return False

        self.session.add(DiscountUsage(
            discount_uid=discount.uid,
            user_uid=user_uid,
            order_subtotal=order_subtotal,
            discount_amount=discount_amount,
        ))
        await self.session.commit()
        await self.session.refresh(discount)
        return True

    async def usage_total(self, discount_uid: uuid.UUID) -> float:
        statement = select(func.coalesce(func.sum(DiscountUsage.discount_amount), 0)).where(
            DiscountUsage.discount_uid == discount_uid
        )
        result = await self.session.exec(statement)
        return float(result.one())

    async def delete(self, discount_uid: uuid.UUID) -> None:
        discount = await self.discounts.get_or_404(discount_uid)
        await self.session.exec(delete(DiscountUsage).where(DiscountUsage.discount_uid == discount_uid))
        await self.session.delete(discount)
        await self.session.commit()
