from fastapi import Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront.db.main import get_session
from .repository import DiscountRepository
from .service import DiscountService


async def get_discount_service(session: AsyncSession = Depends(get_session)) -> DiscountService:
    return DiscountService(DiscountRepository(session))
